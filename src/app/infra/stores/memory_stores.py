"""Stores em memória — apenas para desenvolvimento e testes.

ATENÇÃO: Não usar em staging/production. Sem persistência entre reinícios.
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Any

from app.domain.appointment import (
    Appointment,
    AppointmentCategory,
    PaymentRecord,
    PaymentStatus,
)
from app.domain.errors import ConflictError
from app.protocols.appointment_store import AppointmentStoreProtocol
from app.protocols.job_scheduler import JobSchedulerProtocol
from app.protocols.payment_store import PaymentStoreProtocol
from app.services.conflict_detector import conflict_message, intervals_overlap


class MemoryAppointmentStore(AppointmentStoreProtocol):
    """Store de agendamentos em memória — apenas para dev/test.

    Args:
        enforce_exclusion: Quando True, insert/save recusam com ConflictError
            um intervalo ocupado que colida com outro agendamento ativo do
            mesmo prestador (restricao de exclusao no commit).
    """

    def __init__(self, *, enforce_exclusion: bool = False) -> None:
        self._store: dict[str, Appointment] = {}
        self._lock = threading.Lock()
        self._enforce_exclusion = enforce_exclusion

    def get(self, appointment_id: str) -> Appointment | None:
        with self._lock:
            appointment = self._store.get(appointment_id)
        return appointment.model_copy(deep=True) if appointment is not None else None

    def insert(self, appointment: Appointment) -> Appointment:
        with self._lock:
            if appointment.id in self._store:
                msg = f"Agendamento ja existe: {appointment.id}"
                raise ValueError(msg)
            self._check_exclusion(appointment)
            self._store[appointment.id] = appointment.model_copy(deep=True)
        return appointment

    def save(self, appointment: Appointment) -> Appointment:
        with self._lock:
            if appointment.id not in self._store:
                msg = f"Agendamento inexistente: {appointment.id}"
                raise KeyError(msg)
            self._check_exclusion(appointment)
            self._store[appointment.id] = appointment.model_copy(deep=True)
        return appointment

    def delete(self, appointment_id: str) -> bool:
        with self._lock:
            return self._store.pop(appointment_id, None) is not None

    def find_active_overlapping(
        self,
        provider_ref: str,
        start: datetime,
        end: datetime,
        exclude_id: str | None = None,
    ) -> list[Appointment]:
        with self._lock:
            return [
                appointment.model_copy(deep=True)
                for appointment in self._overlapping(provider_ref, start, end, exclude_id)
            ]

    def list_for_provider(
        self,
        provider_ref: str,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
        active_only: bool = False,
    ) -> list[Appointment]:
        with self._lock:
            appointments = [a for a in self._store.values() if a.provider_ref == provider_ref]
        if active_only:
            appointments = [a for a in appointments if a.is_active]
        if start is not None and end is not None:
            appointments = [
                a
                for a in appointments
                if a.has_busy_window
                and intervals_overlap(start, end, a.busy_start, a.busy_end)  # type: ignore[arg-type]
            ]
        appointments.sort(key=_sort_key)
        return [a.model_copy(deep=True) for a in appointments]

    def list_sync_tagged(
        self,
        provider_ref: str,
        sync_tag: str,
        *,
        matching: bool = True,
    ) -> list[Appointment]:
        with self._lock:
            return [
                a.model_copy(deep=True)
                for a in self._store.values()
                if a.provider_ref == provider_ref
                and a.category == AppointmentCategory.EXTERNAL_SYNC
                and (a.sync_tag == sync_tag) is matching
            ]

    def _overlapping(
        self,
        provider_ref: str,
        start: datetime,
        end: datetime,
        exclude_id: str | None,
    ) -> list[Appointment]:
        return [
            a
            for a in self._store.values()
            if a.provider_ref == provider_ref
            and a.id != exclude_id
            and a.is_active
            and a.has_busy_window
            and intervals_overlap(start, end, a.busy_start, a.busy_end)  # type: ignore[arg-type]
        ]

    def _check_exclusion(self, appointment: Appointment) -> None:
        if (
            not self._enforce_exclusion
            or not appointment.provider_ref
            or not appointment.is_active
            or not appointment.has_busy_window
        ):
            return
        clashes = self._overlapping(
            appointment.provider_ref,
            appointment.busy_start,  # type: ignore[arg-type]
            appointment.busy_end,  # type: ignore[arg-type]
            appointment.id,
        )
        if clashes:
            raise ConflictError(
                conflict_message(appointment.status),
                conflicting_ids=[a.id for a in clashes],
            )


def _sort_key(appointment: Appointment) -> tuple[bool, datetime]:
    return (appointment.busy_start is None, appointment.busy_start or appointment.created_at)


class MemoryPaymentStore(PaymentStoreProtocol):
    """Registros de pagamento em memória — apenas para dev/test."""

    def __init__(self) -> None:
        self._store: dict[str, PaymentRecord] = {}

    def add(
        self,
        appointment_id: str,
        status: PaymentStatus = PaymentStatus.PENDING_CHARGE,
    ) -> PaymentRecord:
        """Cria registro (o fluxo de checkout fica fora do core)."""
        record = PaymentRecord(appointment_id=appointment_id, status=status)
        self._store[appointment_id] = record
        return record.model_copy()

    def find(self, appointment_id: str) -> PaymentRecord | None:
        record = self._store.get(appointment_id)
        return record.model_copy() if record is not None else None

    def update(self, record: PaymentRecord, status: PaymentStatus) -> PaymentRecord:
        updated = record.model_copy(update={"status": status})
        self._store[record.appointment_id] = updated
        return updated.model_copy()

    def destroy(self, record: PaymentRecord) -> None:
        self._store.pop(record.appointment_id, None)


class MemoryJobScheduler(JobSchedulerProtocol):
    """Registro de jobs em memória — apenas para dev/test.

    Guarda apenas nome, horario e payload; nenhum job e executado.
    """

    def __init__(self) -> None:
        self._jobs: dict[str, tuple[datetime, dict[str, Any]]] = {}

    def schedule(self, job_name: str, run_at: datetime, payload: dict[str, Any]) -> None:
        self._jobs[job_name] = (run_at, dict(payload))

    def cancel(self, job_name: str) -> bool:
        return self._jobs.pop(job_name, None) is not None

    def run_time_of(self, job_name: str) -> datetime | None:
        entry = self._jobs.get(job_name)
        return entry[0] if entry is not None else None

    def payload_of(self, job_name: str) -> dict[str, Any] | None:
        entry = self._jobs.get(job_name)
        return dict(entry[1]) if entry is not None else None
