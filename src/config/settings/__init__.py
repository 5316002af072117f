"""Agregador de settings do servico de agendamentos.

Re-exporta as settings de cada modulo.
"""

from __future__ import annotations

from config.settings.base import (
    BaseSettings,
    Environment,
    get_base_settings,
)
from config.settings.booking import (
    BookingSettings,
    JobSchedulerBackend,
    LockBackend,
    get_booking_settings,
)

__all__ = [
    "BaseSettings",
    "BookingSettings",
    "Environment",
    "JobSchedulerBackend",
    "LockBackend",
    "get_base_settings",
    "get_booking_settings",
]
