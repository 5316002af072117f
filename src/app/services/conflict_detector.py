"""Deteccao de conflitos (overlap) na agenda de um prestador.

Overlap semi-aberto: [a, b) e [c, d) se sobrepoem sse a < d e b > c.
Intervalos que apenas se encostam (b == c) nao conflitam.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from app.domain.errors import ConflictError
from app.observability.metrics import record_conflict
from fsm.states.appointment import AppointmentStatus, is_active

if TYPE_CHECKING:
    from app.domain.appointment import Appointment
    from app.protocols.appointment_store import AppointmentStoreProtocol

logger = logging.getLogger(__name__)

RESCHEDULE_CONFLICT_MESSAGE = (
    "The new date & time you selected overlap with an existing appointment."
)
BOOKING_CONFLICT_MESSAGE = (
    "Unfortunately, this appointment time has just been booked! "
    "Please select another time :)"
)


def intervals_overlap(
    a_start: datetime,
    a_end: datetime,
    b_start: datetime,
    b_end: datetime,
) -> bool:
    """Overlap semi-aberto (simetrico)."""
    return a_start < b_end and a_end > b_start


@dataclass(frozen=True, slots=True)
class ConflictCheck:
    """Resultado da consulta de overlap."""

    provider_ref: str
    conflicting_ids: tuple[str, ...] = field(default_factory=tuple)

    @property
    def has_conflict(self) -> bool:
        return bool(self.conflicting_ids)


class ConflictDetector:
    """Consulta agendamentos ativos do prestador que se sobrepoem ao candidato."""

    def __init__(self, store: AppointmentStoreProtocol) -> None:
        self._store = store

    def check(
        self,
        provider_ref: str,
        busy_start: datetime,
        busy_end: datetime,
        exclude_id: str | None = None,
    ) -> ConflictCheck:
        candidates = self._store.find_active_overlapping(
            provider_ref,
            busy_start,
            busy_end,
            exclude_id=exclude_id,
        )
        conflicting = tuple(
            appointment.id
            for appointment in candidates
            if appointment.id != exclude_id
            and appointment.is_active
            and appointment.has_busy_window
            and intervals_overlap(
                busy_start,
                busy_end,
                appointment.busy_start,  # type: ignore[arg-type]
                appointment.busy_end,  # type: ignore[arg-type]
            )
        )
        return ConflictCheck(provider_ref=provider_ref, conflicting_ids=conflicting)

    def ensure_available(self, appointment: Appointment) -> None:
        """Levanta ConflictError se o candidato colide com outro ativo.

        Candidatos sem janela, sem prestador ou fora dos status ativos nao
        ocupam a agenda e passam direto.
        """
        if (
            not appointment.provider_ref
            or not appointment.has_busy_window
            or not is_active(appointment.status)
        ):
            return

        result = self.check(
            appointment.provider_ref,
            appointment.busy_start,  # type: ignore[arg-type]
            appointment.busy_end,  # type: ignore[arg-type]
            exclude_id=appointment.id,
        )
        if not result.has_conflict:
            return

        record_conflict(
            appointment.provider_ref,
            appointment.status.value,
            len(result.conflicting_ids),
        )
        logger.info(
            "conflict_detected",
            extra={
                "appointment_id": appointment.id,
                "provider_ref": appointment.provider_ref,
                "conflicting_ids": list(result.conflicting_ids),
            },
        )
        raise ConflictError(
            conflict_message(appointment.status),
            conflicting_ids=result.conflicting_ids,
        )


def conflict_message(status: AppointmentStatus) -> str:
    """Mensagem de conflito sensivel ao status do candidato."""
    if status == AppointmentStatus.RESCHEDULED:
        return RESCHEDULE_CONFLICT_MESSAGE
    return BOOKING_CONFLICT_MESSAGE


__all__ = [
    "BOOKING_CONFLICT_MESSAGE",
    "RESCHEDULE_CONFLICT_MESSAGE",
    "ConflictCheck",
    "ConflictDetector",
    "conflict_message",
    "intervals_overlap",
]
