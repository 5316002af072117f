"""Reconciliacao de efeitos colaterais apos mudanca de status.

Roda depois do commit, sobre o delta entre o estado anterior e o atual,
e devolve comandos (app.domain.side_effects) em vez de executar IO.

Tres fluxos independentes:
- job de cobranca diferida (somente service-booking)
- registro de pagamento
- selecao de notificacao (usuario + administradores numerados)

Cada fluxo e isolado: falha de leitura em um colaborador e logada e nao
impede os demais nem desfaz a mudanca ja persistida.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from app.domain.appointment import Appointment, PaymentStatus
from app.domain.side_effects import (
    CHARGE_JOB_PREFIX,
    CancelChargeJob,
    DestroyPaymentRecord,
    NotificationVariant,
    RecipientRole,
    ScheduleChargeJob,
    SendNotification,
    SideEffect,
    UpdatePaymentRecord,
    charge_job_name,
)
from config.logging import log_skipped_effect
from fsm.states.appointment import AppointmentStatus

if TYPE_CHECKING:
    from app.protocols.job_scheduler import JobSchedulerProtocol
    from app.protocols.notification_service import AdministratorDirectoryProtocol
    from app.protocols.payment_store import PaymentStoreProtocol

logger = logging.getLogger(__name__)

DEFAULT_RESCHEDULE_CHARGE_DELAY = timedelta(minutes=10)

# (status, confirmed) -> variante
_CHANGE_VARIANTS: dict[tuple[AppointmentStatus, bool], NotificationVariant] = {
    (AppointmentStatus.RESCHEDULED, False): NotificationVariant.APPOINTMENT_RESCHEDULED,
    (AppointmentStatus.RESCHEDULED, True): NotificationVariant.CONFIRMED_APPOINTMENT_RESCHEDULED,
    (AppointmentStatus.CANCELLED, False): NotificationVariant.APPOINTMENT_CANCELLED,
    (AppointmentStatus.CANCELLED, True): NotificationVariant.CONFIRMED_APPOINTMENT_CANCELLED,
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


def start_changed(previous: Appointment, current: Appointment) -> bool:
    """True se o horario do agendamento mudou."""
    return (
        previous.busy_start != current.busy_start
        or previous.service_start != current.service_start
        or previous.requested_start != current.requested_start
    )


def was_rescheduled(previous: Appointment, current: Appointment) -> bool:
    """Status RESCHEDULED com horario efetivamente movido."""
    return current.status == AppointmentStatus.RESCHEDULED and start_changed(previous, current)


def was_cancelled(previous: Appointment, current: Appointment) -> bool:
    """Status mudou para CANCELLED nesta escrita."""
    return (
        previous.status != AppointmentStatus.CANCELLED
        and current.status == AppointmentStatus.CANCELLED
    )


class TransitionReconciler:
    """Planeja comandos de billing, pagamento e notificacao."""

    def __init__(
        self,
        *,
        job_scheduler: JobSchedulerProtocol,
        payment_store: PaymentStoreProtocol,
        administrators: AdministratorDirectoryProtocol,
        reschedule_charge_delay: timedelta = DEFAULT_RESCHEDULE_CHARGE_DELAY,
        charge_job_prefix: str = CHARGE_JOB_PREFIX,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._jobs = job_scheduler
        self._payments = payment_store
        self._administrators = administrators
        self._reschedule_delay = reschedule_charge_delay
        self._job_prefix = charge_job_prefix
        self._clock = clock

    # ──────────────────────────────────────────────────────────────
    # Entradas do ciclo de vida
    # ──────────────────────────────────────────────────────────────

    def on_create(self, appointment: Appointment) -> list[SideEffect]:
        """Aviso de nova reserva: usuario, administradores e prestador."""
        if not appointment.is_service_booking:
            return []
        effects: list[SideEffect] = []
        if appointment.user_ref:
            effects.append(
                SendNotification(
                    variant=NotificationVariant.BOOKING_CONFIRMATION,
                    appointment=appointment,
                    recipient=appointment.user_ref,
                    role=RecipientRole.USER,
                )
            )
        effects.extend(
            self._guarded(
                "notification",
                appointment,
                lambda: self._administrator_copies(
                    NotificationVariant.ADMIN_NEW_BOOKING, appointment
                ),
            )
        )
        if appointment.provider_ref:
            effects.append(
                SendNotification(
                    variant=NotificationVariant.PROVIDER_NEW_BOOKING,
                    appointment=appointment,
                    recipient=appointment.provider_ref,
                    role=RecipientRole.PROVIDER,
                )
            )
        return effects

    def on_update(self, previous: Appointment, current: Appointment) -> list[SideEffect]:
        """Reage ao delta de uma atualizacao ja persistida.

        Atualizacoes feitas com o agendamento ja terminal so espelham o
        pagamento; billing e notificacao nao disparam de novo.
        """
        effects: list[SideEffect] = []
        if not previous.is_terminal:
            effects.extend(
                self._guarded("charge_job", current, lambda: self.plan_charge_job(previous, current))
            )
        effects.extend(
            self._guarded("payment_record", current, lambda: self.plan_payment(previous, current))
        )
        if not previous.is_terminal:
            effects.extend(
                self._guarded(
                    "notification", current, lambda: self.plan_notifications(previous, current)
                )
            )
        return effects

    def on_delete(self, appointment: Appointment) -> list[SideEffect]:
        """Registro de pagamento segue o agendamento removido."""
        return self._guarded(
            "payment_record",
            appointment,
            lambda: (
                [DestroyPaymentRecord(appointment_id=appointment.id)]
                if self._payments.find(appointment.id) is not None
                else []
            ),
        )

    # ──────────────────────────────────────────────────────────────
    # Fluxos
    # ──────────────────────────────────────────────────────────────

    def plan_charge_job(self, previous: Appointment, current: Appointment) -> list[SideEffect]:
        """Cancela/reagenda o job de cobranca diferida.

        Uma vez atingido o horario do job, ele nao e mais tocado: evita
        corrida com uma cobranca em andamento.
        """
        if not current.is_service_booking:
            return []
        rescheduled = was_rescheduled(previous, current)
        cancelled = was_cancelled(previous, current)
        if not (rescheduled or cancelled):
            return []

        job_name = charge_job_name(current.id, self._job_prefix)
        run_at = self._jobs.run_time_of(job_name)
        if run_at is None:
            log_skipped_effect(logger, "charge_job", current.id, "job_not_found")
            return []

        now = self._clock()
        if run_at <= now:
            log_skipped_effect(logger, "charge_job", current.id, "job_already_due")
            return []

        effects: list[SideEffect] = [
            CancelChargeJob(job_name=job_name, appointment_id=current.id),
        ]
        if rescheduled and not cancelled:
            effects.append(
                ScheduleChargeJob(
                    job_name=job_name,
                    run_at=now + self._reschedule_delay,
                    appointment_id=current.id,
                    replaces=job_name,
                )
            )
        return effects

    def plan_payment(self, previous: Appointment, current: Appointment) -> list[SideEffect]:
        """Espelha 'paid' no registro e remove registro pendente ao cancelar."""
        record = self._payments.find(current.id)
        if record is None:
            return []

        effects: list[SideEffect] = []
        record_status = record.status
        if current.payment_status == PaymentStatus.PAID and record_status != PaymentStatus.PAID:
            effects.append(UpdatePaymentRecord(appointment_id=current.id, status=PaymentStatus.PAID))
            record_status = PaymentStatus.PAID

        if was_cancelled(previous, current):
            if record_status == PaymentStatus.PENDING_CHARGE:
                effects.append(
                    DestroyPaymentRecord(
                        appointment_id=current.id,
                        only_if=PaymentStatus.PENDING_CHARGE,
                    )
                )
            else:
                log_skipped_effect(logger, "payment_record", current.id, "record_settled")
        return effects

    def plan_notifications(self, previous: Appointment, current: Appointment) -> list[SideEffect]:
        """Uma variante por (status x confirmed), para usuario e administradores."""
        if not current.is_service_booking:
            return []
        status_changed = previous.status != current.status
        moved_again = (
            not status_changed
            and current.status == AppointmentStatus.RESCHEDULED
            and start_changed(previous, current)
        )
        if not (status_changed or moved_again):
            return []

        variant = _CHANGE_VARIANTS.get((current.status, current.confirmed))
        if variant is None:
            return []

        effects: list[SideEffect] = []
        if current.user_ref:
            effects.append(
                SendNotification(
                    variant=variant,
                    appointment=current,
                    recipient=current.user_ref,
                    role=RecipientRole.USER,
                )
            )
        effects.extend(self._administrator_copies(variant, current))
        return effects

    # ──────────────────────────────────────────────────────────────
    # Helpers
    # ──────────────────────────────────────────────────────────────

    def _administrator_copies(
        self,
        variant: NotificationVariant,
        appointment: Appointment,
    ) -> list[SideEffect]:
        return [
            SendNotification(
                variant=variant,
                appointment=appointment,
                recipient=admin_ref,
                role=RecipientRole.ADMINISTRATOR,
                index=index,
            )
            for index, admin_ref in enumerate(self._administrators.list_administrators(), start=1)
        ]

    def _guarded(
        self,
        flow: str,
        appointment: Appointment,
        plan: Callable[[], list[SideEffect]],
    ) -> list[SideEffect]:
        try:
            return plan()
        except Exception:
            logger.exception(
                "reconciliation_flow_failed",
                extra={
                    "component": "transition_reconciler",
                    "flow": flow,
                    "appointment_id": appointment.id,
                },
            )
            return []


__all__ = [
    "DEFAULT_RESCHEDULE_CHARGE_DELAY",
    "TransitionReconciler",
    "start_changed",
    "was_cancelled",
    "was_rescheduled",
]
