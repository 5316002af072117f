"""Contrato do agendador externo de jobs (cobranca diferida)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any


class JobSchedulerProtocol(ABC):
    """Registro de jobs nomeados com horario de execucao.

    Nomes sao deterministicos (ex.: Charge-Appointment-<id>), portanto
    existe no maximo um job ativo por nome.
    """

    @abstractmethod
    def schedule(self, job_name: str, run_at: datetime, payload: dict[str, Any]) -> None:
        """Agenda (ou substitui) o job com o nome informado."""

    @abstractmethod
    def cancel(self, job_name: str) -> bool:
        """Cancela o job. Retorna False se nao existia."""

    @abstractmethod
    def run_time_of(self, job_name: str) -> datetime | None:
        """Horario de execucao do job, ou None se nao existe."""
