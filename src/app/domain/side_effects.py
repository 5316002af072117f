"""Comandos de efeito colateral emitidos pelo ciclo de vida.

O ciclo de vida nao executa IO de billing ou notificacao: ele devolve
estes comandos, executados depois do commit pelo SideEffectDispatcher.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime  # noqa: TC003 - usado em runtime pelos dataclasses
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from app.domain.appointment import PaymentStatus

if TYPE_CHECKING:
    from app.domain.appointment import Appointment

CHARGE_JOB_PREFIX = "Charge-Appointment-"


def charge_job_name(appointment_id: str, prefix: str = CHARGE_JOB_PREFIX) -> str:
    """Nome deterministico do job de cobranca de um agendamento."""
    return f"{prefix}{appointment_id}"


class NotificationVariant(StrEnum):
    """Variantes de notificacao conhecidas pelo NotificationService."""

    APPOINTMENT_RESCHEDULED = "appointment-rescheduled"
    CONFIRMED_APPOINTMENT_RESCHEDULED = "confirmed-appointment-rescheduled"
    APPOINTMENT_CANCELLED = "appointment-cancelled"
    CONFIRMED_APPOINTMENT_CANCELLED = "confirmed-appointment-cancelled"
    BOOKING_CONFIRMATION = "booking-confirmation"
    ADMIN_NEW_BOOKING = "admin-new-booking"
    PROVIDER_NEW_BOOKING = "provider-new-booking"


class RecipientRole(StrEnum):
    USER = "user"
    ADMINISTRATOR = "administrator"
    PROVIDER = "provider"


@dataclass(frozen=True, slots=True)
class ScheduleChargeJob:
    """Agenda job de cobranca para run_at.

    replaces: nome do job que este substitui; so e agendado se o
    CancelChargeJob desse job foi executado na mesma rodada.
    """

    job_name: str
    run_at: datetime
    appointment_id: str
    replaces: str | None = None

    @property
    def payload(self) -> dict[str, Any]:
        return {"appointment_id": self.appointment_id}

    def to_log_dict(self) -> dict[str, Any]:
        return {
            "effect": "schedule_charge_job",
            "job_name": self.job_name,
            "run_at": self.run_at.isoformat(),
            "appointment_id": self.appointment_id,
            "replaces": self.replaces,
        }


@dataclass(frozen=True, slots=True)
class CancelChargeJob:
    """Cancela job de cobranca existente."""

    job_name: str
    appointment_id: str

    def to_log_dict(self) -> dict[str, Any]:
        return {
            "effect": "cancel_charge_job",
            "job_name": self.job_name,
            "appointment_id": self.appointment_id,
        }


@dataclass(frozen=True, slots=True)
class UpdatePaymentRecord:
    """Atualiza status do registro de pagamento."""

    appointment_id: str
    status: PaymentStatus

    def to_log_dict(self) -> dict[str, Any]:
        return {
            "effect": "update_payment_record",
            "appointment_id": self.appointment_id,
            "status": self.status.value,
        }


@dataclass(frozen=True, slots=True)
class DestroyPaymentRecord:
    """Remove registro de pagamento.

    only_if: quando informado, o registro so e removido se ainda estiver
    neste status no momento da execucao.
    """

    appointment_id: str
    only_if: PaymentStatus | None = None

    def to_log_dict(self) -> dict[str, Any]:
        return {
            "effect": "destroy_payment_record",
            "appointment_id": self.appointment_id,
            "only_if": self.only_if.value if self.only_if else None,
        }


@dataclass(frozen=True, slots=True)
class SendNotification:
    """Notificacao fire-and-forget para um destinatario.

    index: numeracao sequencial (a partir de 1) das copias de administrador.
    """

    variant: NotificationVariant
    appointment: Appointment
    recipient: str
    role: RecipientRole
    index: int | None = None

    def to_log_dict(self) -> dict[str, Any]:
        return {
            "effect": "send_notification",
            "variant": self.variant.value,
            "appointment_id": self.appointment.id,
            "role": self.role.value,
            "index": self.index,
        }


SideEffect = (
    ScheduleChargeJob
    | CancelChargeJob
    | UpdatePaymentRecord
    | DestroyPaymentRecord
    | SendNotification
)


__all__ = [
    "CHARGE_JOB_PREFIX",
    "CancelChargeJob",
    "DestroyPaymentRecord",
    "NotificationVariant",
    "RecipientRole",
    "ScheduleChargeJob",
    "SendNotification",
    "SideEffect",
    "UpdatePaymentRecord",
    "charge_job_name",
]
