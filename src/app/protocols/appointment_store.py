"""Contratos de persistencia de agendamentos e de serializacao por prestador."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.appointment import Appointment


class AppointmentStoreProtocol(ABC):
    """Store de agendamentos.

    Implementacoes podem impor restricao de exclusao em (prestador,
    intervalo ocupado) e levantar ConflictError no commit.
    """

    @abstractmethod
    def get(self, appointment_id: str) -> Appointment | None:
        """Carrega agendamento pelo id."""

    @abstractmethod
    def insert(self, appointment: Appointment) -> Appointment:
        """Persiste novo agendamento."""

    @abstractmethod
    def save(self, appointment: Appointment) -> Appointment:
        """Persiste alteracoes de agendamento existente."""

    @abstractmethod
    def delete(self, appointment_id: str) -> bool:
        """Remove agendamento. Retorna False se nao existia."""

    @abstractmethod
    def find_active_overlapping(
        self,
        provider_ref: str,
        start: datetime,
        end: datetime,
        exclude_id: str | None = None,
    ) -> list[Appointment]:
        """Agendamentos ativos do prestador com overlap semi-aberto em [start, end)."""

    @abstractmethod
    def list_for_provider(
        self,
        provider_ref: str,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
        active_only: bool = False,
    ) -> list[Appointment]:
        """Agendamentos do prestador, opcionalmente restritos a uma janela."""

    @abstractmethod
    def list_sync_tagged(
        self,
        provider_ref: str,
        sync_tag: str,
        *,
        matching: bool = True,
    ) -> list[Appointment]:
        """Agendamentos external-sync com (ou sem) a sync_tag informada."""


class ProviderLockProtocol(ABC):
    """Ponto de serializacao por prestador para check-then-commit."""

    @abstractmethod
    def hold(self, provider_ref: str) -> AbstractContextManager[None]:
        """Context manager que segura o lock do prestador.

        Raises:
            LockAcquisitionError: se o lock nao for obtido no timeout.
        """
