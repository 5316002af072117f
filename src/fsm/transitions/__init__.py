"""
Exports publicos do modulo fsm/transitions.

Regras de transicao validas entre status de agendamento.
"""

from fsm.transitions.rules import (
    VALID_TRANSITIONS,
    TransitionMap,
    get_valid_targets,
    is_transition_valid,
    validate_transition_map,
)

__all__ = [
    "VALID_TRANSITIONS",
    "TransitionMap",
    "get_valid_targets",
    "is_transition_valid",
    "validate_transition_map",
]
