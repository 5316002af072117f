"""Use cases do ciclo de vida de agendamentos."""

from .dispatch_side_effects import DispatchReport, SideEffectDispatcher
from .lifecycle import AppointmentLifecycle, LifecycleResult

__all__ = [
    "AppointmentLifecycle",
    "DispatchReport",
    "LifecycleResult",
    "SideEffectDispatcher",
]
