"""
Exports publicos do modulo fsm/types.

Tipos de dados para transicoes de status.
"""

from fsm.types.transition import StatusTransition, TransitionResult

__all__ = [
    "StatusTransition",
    "TransitionResult",
]
