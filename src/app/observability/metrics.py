"""Metricas do core registradas como logs estruturados.

Agregadas posteriormente pelo backend de logs.

Metricas:
- latency: duracao de operacoes do ciclo de vida
- conflict: reservas recusadas por overlap
- side_effect: resultado de cada comando executado pelo dispatcher
"""

from __future__ import annotations

import logging

from app.observability.correlation import get_correlation_id

logger = logging.getLogger(__name__)


def record_latency(
    component: str,
    operation: str,
    latency_ms: float,
    correlation_id: str | None = None,
) -> None:
    """Registra latencia de operacao.

    Args:
        component: Nome do componente (ex: "appointment_lifecycle")
        operation: Nome da operacao (ex: "create")
        latency_ms: Latencia em milissegundos
        correlation_id: ID de correlacao (usa o do contexto se None)
    """
    logger.info(
        "metric_latency",
        extra={
            "metric_type": "latency",
            "component": component,
            "operation": operation,
            "latency_ms": round(latency_ms, 2),
            "correlation_id": correlation_id or get_correlation_id(),
        },
    )


def record_conflict(
    provider_ref: str,
    candidate_status: str,
    conflict_count: int,
) -> None:
    """Registra uma reserva recusada por overlap."""
    logger.info(
        "metric_conflict",
        extra={
            "metric_type": "counter",
            "provider_ref": provider_ref,
            "candidate_status": candidate_status,
            "conflict_count": conflict_count,
            "correlation_id": get_correlation_id(),
        },
    )


def record_side_effect(effect: str, result: str) -> None:
    """Registra resultado de um comando (executed|skipped|failed)."""
    logger.info(
        "metric_side_effect",
        extra={
            "metric_type": "counter",
            "effect": effect,
            "result": result,
            "correlation_id": get_correlation_id(),
        },
    )
