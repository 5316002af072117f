"""
Modulo FSM — maquina de status de agendamentos.

Estrutura:
    - states/: Status canonicos (AppointmentStatus)
    - transitions/: Grafo de transicoes (VALID_TRANSITIONS)
    - rules/: Guards
    - manager/: Maquina de status (AppointmentStatusMachine)
    - types/: Tipos de dados (StatusTransition, TransitionResult)
"""

from fsm.manager import (
    AppointmentStatusMachine,
    create_status_machine,
)
from fsm.rules import (
    GuardResult,
    evaluate_guards,
)
from fsm.states import (
    ACTIVE_STATUSES,
    DEFAULT_INITIAL_STATUS,
    TERMINAL_STATUSES,
    AppointmentStatus,
    is_active,
    is_terminal,
)
from fsm.transitions import (
    VALID_TRANSITIONS,
    get_valid_targets,
    is_transition_valid,
    validate_transition_map,
)
from fsm.types import (
    StatusTransition,
    TransitionResult,
)

__all__ = [
    "ACTIVE_STATUSES",
    "DEFAULT_INITIAL_STATUS",
    "TERMINAL_STATUSES",
    "VALID_TRANSITIONS",
    "AppointmentStatus",
    "AppointmentStatusMachine",
    "GuardResult",
    "StatusTransition",
    "TransitionResult",
    "create_status_machine",
    "evaluate_guards",
    "get_valid_targets",
    "is_active",
    "is_terminal",
    "is_transition_valid",
    "validate_transition_map",
]
