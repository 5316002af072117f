"""Serviços de aplicação.

Unidades reutilizáveis de orquestração (sem IO direto).
Implementações concretas de IO ficam em app/infra/.
"""

from app.services.conflict_detector import ConflictCheck, ConflictDetector
from app.services.mobile_coverage import resolve_mobile_coverage
from app.services.time_window import TimeWindowCalculator
from app.services.transition_reconciler import TransitionReconciler
from app.services.validation_gate import ValidationGate

__all__ = [
    "ConflictCheck",
    "ConflictDetector",
    "TimeWindowCalculator",
    "TransitionReconciler",
    "ValidationGate",
    "resolve_mobile_coverage",
]
