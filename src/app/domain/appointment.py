"""Modelos de dominio do agendamento de servicos.

O Appointment e a raiz do agregado: o intervalo ocupado (busy) e o
intervalo de servico sao sempre derivados pelo calculo de janela, nunca
escritos diretamente pelo chamador.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from fsm.states.appointment import (
    ACTIVE_STATUSES,
    DEFAULT_INITIAL_STATUS,
    TERMINAL_STATUSES,
    AppointmentStatus,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AppointmentCategory(StrEnum):
    """Categorias suportadas (vocabulario fechado)."""

    SERVICE_BOOKING = "service-booking"
    BUSY_BLOCK = "busy-block"
    EXTERNAL_SYNC = "external-sync"

    def __str__(self) -> str:
        return self.value


class PaymentStatus(StrEnum):
    """Estados do registro de pagamento vinculado."""

    PENDING_CHARGE = "pending-charge"
    PAID = "paid"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


class ServiceOption(BaseModel):
    """Opcao de servico contratada: duracao + folga apos o atendimento."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    ref: str = Field(..., description="Identificador da opcao de servico.")
    title: str = Field(default="", description="Titulo exibido ao cliente.")
    duration_min: int = Field(..., ge=0, description="Duracao do servico em minutos.")
    buffer_min: int = Field(
        default=0,
        ge=0,
        description="Folga bloqueada apos o servico, em minutos.",
    )

    @property
    def duration(self) -> timedelta:
        return timedelta(minutes=self.duration_min)

    @property
    def buffer(self) -> timedelta:
        return timedelta(minutes=self.buffer_min)


class Location(BaseModel):
    """Local fixo (ou ponto de partida do prestador)."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    ref: str = Field(..., description="Identificador do local.")
    postcode: str = Field(default="", description="Postcode completo do local.")
    name: str = Field(default="", description="Nome do local.")


class CoverageZone(BaseModel):
    """Zona de atendimento movel identificada pelo outward code."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    ref: str = Field(..., description="Identificador da zona.")
    outward_code: str = Field(default="", description="Outward code do postcode (ex: SW1A).")


class PaymentRecord(BaseModel):
    """Registro de pagamento 1:1 com o agendamento."""

    model_config = ConfigDict(extra="ignore")

    appointment_id: str = Field(..., description="Agendamento dono do registro.")
    status: PaymentStatus = Field(default=PaymentStatus.PENDING_CHARGE)


class BookingRequest(BaseModel):
    """Pedido de criacao de agendamento.

    category e status chegam como texto para que a validacao reporte o
    valor invalido pelo nome do campo.
    """

    model_config = ConfigDict(extra="ignore")

    category: str = Field(..., description="Categoria do agendamento.")
    status: str = Field(default=DEFAULT_INITIAL_STATUS.value)
    provider_ref: str | None = None
    user_ref: str | None = None
    service_option_ref: str | None = None
    confirmed: bool = False
    all_day: bool = False
    requested_start: datetime | None = None
    requested_end: datetime | None = None
    service_start: datetime | None = None
    postcode: str = ""
    location_ref: str | None = None
    sync_tag: str | None = None
    payment_status: PaymentStatus | None = None
    title: str = ""


class Appointment(BaseModel):
    """Agendamento persistido."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Identificador opaco, imutavel.")
    category: AppointmentCategory
    status: AppointmentStatus = DEFAULT_INITIAL_STATUS
    confirmed: bool = False
    all_day: bool = False

    provider_ref: str | None = None
    user_ref: str | None = None
    service_option_ref: str | None = None
    sync_tag: str | None = None

    requested_start: datetime | None = None
    requested_end: datetime | None = None
    service_start: datetime | None = None
    service_end: datetime | None = None
    busy_start: datetime | None = None
    busy_end: datetime | None = None

    postcode: str = ""
    location_ref: str | None = None
    mobile_coverage_ref: str | None = None

    payment_status: PaymentStatus | None = None
    title: str = ""

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_service_booking(self) -> bool:
        return self.category == AppointmentCategory.SERVICE_BOOKING

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def has_busy_window(self) -> bool:
        return self.busy_start is not None and self.busy_end is not None

    def is_past(self, now: datetime | None = None) -> bool:
        """True se o intervalo ocupado ja comecou."""
        if self.busy_start is None:
            return False
        return self.busy_start < (now or _utcnow())


class BusyWindow(BaseModel):
    """Resultado do calculo de janela: intervalos requested, service e busy."""

    model_config = ConfigDict(frozen=True)

    requested_start: datetime | None = None
    requested_end: datetime | None = None
    service_start: datetime | None = None
    service_end: datetime | None = None
    busy_start: datetime | None = None
    busy_end: datetime | None = None
    commute: timedelta = timedelta(0)


__all__ = [
    "Appointment",
    "AppointmentCategory",
    "AppointmentStatus",
    "BookingRequest",
    "BusyWindow",
    "CoverageZone",
    "Location",
    "PaymentRecord",
    "PaymentStatus",
    "ServiceOption",
]
