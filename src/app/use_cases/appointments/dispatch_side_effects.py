"""Execucao dos comandos de efeito colateral depois do commit.

Cada comando e isolado: falha de um nao interrompe os demais nem desfaz a
mudanca de agendamento ja persistida. Falhas sao logadas com stack trace
e devolvidas no DispatchReport; retry e responsabilidade do colaborador.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from app.domain.side_effects import (
    CancelChargeJob,
    DestroyPaymentRecord,
    ScheduleChargeJob,
    SendNotification,
    SideEffect,
    UpdatePaymentRecord,
)
from app.observability import correlation_scope, record_side_effect
from config.logging import log_skipped_effect

if TYPE_CHECKING:
    from app.protocols.job_scheduler import JobSchedulerProtocol
    from app.protocols.notification_service import NotificationServiceProtocol
    from app.protocols.payment_store import PaymentStoreProtocol

logger = logging.getLogger(__name__)

EXECUTED = "executed"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass(slots=True)
class DispatchReport:
    """Resultado agregado de uma rodada de execucao."""

    executed: list[SideEffect] = field(default_factory=list)
    skipped: list[SideEffect] = field(default_factory=list)
    failed: list[SideEffect] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SideEffectDispatcher:
    """Roteia cada comando para o colaborador externo correspondente."""

    def __init__(
        self,
        *,
        job_scheduler: JobSchedulerProtocol,
        payment_store: PaymentStoreProtocol,
        notification_service: NotificationServiceProtocol,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._jobs = job_scheduler
        self._payments = payment_store
        self._notifications = notification_service
        self._clock = clock
        self._handlers: dict[type[Any], Callable[[Any], bool]] = {
            ScheduleChargeJob: self._schedule_charge_job,
            CancelChargeJob: self._cancel_charge_job,
            UpdatePaymentRecord: self._update_payment_record,
            DestroyPaymentRecord: self._destroy_payment_record,
            SendNotification: self._send_notification,
        }

    def dispatch(
        self,
        effects: Iterable[SideEffect],
        *,
        correlation_id: str | None = None,
    ) -> DispatchReport:
        """Executa os comandos na ordem recebida.

        correlation_id: id da operacao que gerou os comandos
        (LifecycleResult.correlation_id); sem ele usa o contexto atual.
        """
        if not correlation_id:
            return self._dispatch_all(effects)
        with correlation_scope(correlation_id):
            return self._dispatch_all(effects)

    def _dispatch_all(self, effects: Iterable[SideEffect]) -> DispatchReport:
        report = DispatchReport()
        # Jobs cancelados nesta rodada (pre-condicao de ScheduleChargeJob.replaces)
        cancelled_jobs: set[str] = set()
        for effect in effects:
            handler = self._handlers.get(type(effect))
            if handler is None:
                logger.error(
                    "side_effect_unknown",
                    extra={"effect_type": type(effect).__name__},
                )
                report.failed.append(effect)
                continue

            details = effect.to_log_dict()
            if isinstance(effect, ScheduleChargeJob) and not self._replacement_allowed(effect, cancelled_jobs):
                record_side_effect(details["effect"], SKIPPED)
                report.skipped.append(effect)
                continue

            try:
                executed = handler(effect)
            except Exception:
                logger.exception("side_effect_failed", extra=details)
                record_side_effect(details["effect"], FAILED)
                report.failed.append(effect)
                continue

            if executed:
                if isinstance(effect, CancelChargeJob):
                    cancelled_jobs.add(effect.job_name)
                logger.info("side_effect_executed", extra=details)
                record_side_effect(details["effect"], EXECUTED)
                report.executed.append(effect)
            else:
                record_side_effect(details["effect"], SKIPPED)
                report.skipped.append(effect)
        return report

    # ──────────────────────────────────────────────────────────────
    # Handlers (True = executado, False = nada a fazer)
    # ──────────────────────────────────────────────────────────────

    def _schedule_charge_job(self, effect: ScheduleChargeJob) -> bool:
        self._jobs.schedule(effect.job_name, effect.run_at, effect.payload)
        return True

    def _cancel_charge_job(self, effect: CancelChargeJob) -> bool:
        # Releitura: o job pode ter vencido (ou rodado) depois do planejamento
        run_at = self._jobs.run_time_of(effect.job_name)
        if run_at is None:
            log_skipped_effect(logger, "cancel_charge_job", effect.appointment_id, "job_not_found")
            return False
        if run_at <= self._clock():
            log_skipped_effect(logger, "cancel_charge_job", effect.appointment_id, "job_already_due")
            return False
        if not self._jobs.cancel(effect.job_name):
            log_skipped_effect(logger, "cancel_charge_job", effect.appointment_id, "job_not_found")
            return False
        return True

    def _replacement_allowed(self, effect: ScheduleChargeJob, cancelled_jobs: set[str]) -> bool:
        """Job substituto so entra se o job anterior saiu nesta rodada."""
        if effect.replaces is None or effect.replaces in cancelled_jobs:
            return True
        log_skipped_effect(logger, "schedule_charge_job", effect.appointment_id, "replaced_job_not_cancelled")
        return False

    def _update_payment_record(self, effect: UpdatePaymentRecord) -> bool:
        record = self._payments.find(effect.appointment_id)
        if record is None:
            log_skipped_effect(logger, "update_payment_record", effect.appointment_id, "record_not_found")
            return False
        self._payments.update(record, effect.status)
        return True

    def _destroy_payment_record(self, effect: DestroyPaymentRecord) -> bool:
        # Releitura: o registro pode ter sido liquidado depois do planejamento
        record = self._payments.find(effect.appointment_id)
        if record is None:
            log_skipped_effect(logger, "destroy_payment_record", effect.appointment_id, "record_not_found")
            return False
        if effect.only_if is not None and record.status != effect.only_if:
            log_skipped_effect(logger, "destroy_payment_record", effect.appointment_id, "record_settled")
            return False
        self._payments.destroy(record)
        return True

    def _send_notification(self, effect: SendNotification) -> bool:
        self._notifications.notify(
            effect.variant,
            effect.appointment,
            effect.recipient,
            effect.index,
        )
        return True


__all__ = ["DispatchReport", "SideEffectDispatcher"]
