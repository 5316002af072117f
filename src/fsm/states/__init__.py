"""
Exports publicos do modulo fsm/states.

Status canonicos de agendamento.
"""

from fsm.states.appointment import (
    ACTIVE_STATUSES,
    DEFAULT_INITIAL_STATUS,
    STATUS_LABELS,
    TERMINAL_STATUSES,
    AppointmentStatus,
    is_active,
    is_terminal,
)

__all__ = [
    "ACTIVE_STATUSES",
    "DEFAULT_INITIAL_STATUS",
    "STATUS_LABELS",
    "TERMINAL_STATUSES",
    "AppointmentStatus",
    "is_active",
    "is_terminal",
]
