"""
Exports publicos do modulo fsm/manager.

Maquina de status (AppointmentStatusMachine).
"""

from fsm.manager.machine import (
    AppointmentStatusMachine,
    create_status_machine,
)

__all__ = [
    "AppointmentStatusMachine",
    "create_status_machine",
]
