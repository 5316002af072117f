"""Settings do core de agendamentos.

Centraliza a leitura de env do ciclo de vida: timezone local dos
agendamentos, cobranca diferida, lock por prestador e registro de jobs.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator

LockBackend = Literal["memory", "redis"]
JobSchedulerBackend = Literal["memory", "redis"]


class BookingSettings(BaseModel):
    """Configuracoes usadas pelo ciclo de vida de agendamentos."""

    model_config = ConfigDict(extra="ignore")

    timezone: str = Field(
        default="Europe/London",
        description="Timezone local usado para os limites de dia (all-day).",
    )
    charge_job_prefix: str = Field(
        default="Charge-Appointment-",
        min_length=1,
        description="Prefixo do nome deterministico do job de cobranca.",
    )
    reschedule_charge_delay_min: int = Field(
        default=10,
        ge=0,
        description="Atraso do novo job de cobranca apos reagendamento.",
    )
    lock_backend: LockBackend = Field(
        default="memory",
        description="Backend do lock por prestador.",
    )
    lock_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Tempo maximo que um lock pode ficar retido.",
    )
    lock_blocking_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Tempo maximo de espera para obter o lock.",
    )
    job_scheduler_backend: JobSchedulerBackend = Field(
        default="memory",
        description="Backend do registro de jobs de cobranca.",
    )
    log_level: str = Field(default="INFO", description="Nivel de log do servico.")

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"timezone desconhecido: {value}") from exc
        return value

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def _parse_lock_backend(value: str) -> LockBackend:
    return "redis" if value.strip().lower() == "redis" else "memory"


def _parse_job_scheduler_backend(value: str) -> str:
    # Valor desconhecido chega ao model e falha na validacao
    return value.strip().lower()


def _load_booking_from_env() -> BookingSettings:
    """Carrega BookingSettings a partir de variaveis de ambiente."""
    return BookingSettings(
        timezone=os.getenv("BOOKING_TIMEZONE", "Europe/London"),
        charge_job_prefix=os.getenv("CHARGE_JOB_PREFIX", "Charge-Appointment-"),
        reschedule_charge_delay_min=int(os.getenv("RESCHEDULE_CHARGE_DELAY_MIN", "10")),
        lock_backend=_parse_lock_backend(os.getenv("PROVIDER_LOCK_BACKEND", "memory")),
        lock_timeout_seconds=float(os.getenv("PROVIDER_LOCK_TIMEOUT_SECONDS", "30")),
        lock_blocking_timeout_seconds=float(
            os.getenv("PROVIDER_LOCK_BLOCKING_TIMEOUT_SECONDS", "10")
        ),
        job_scheduler_backend=_parse_job_scheduler_backend(os.getenv("JOB_SCHEDULER_BACKEND", "memory")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )


@lru_cache(maxsize=1)
def get_booking_settings() -> BookingSettings:
    """Retorna instancia cacheada de BookingSettings."""
    return _load_booking_from_env()


__all__ = ["BookingSettings", "JobSchedulerBackend", "LockBackend", "get_booking_settings"]
