"""Observabilidade — contexto de log e metricas via logs estruturados."""

from app.observability.correlation import (
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
    get_provider_ref,
    provider_scope,
    reset_correlation_id,
    set_correlation_id,
)
from app.observability.metrics import (
    record_conflict,
    record_latency,
    record_side_effect,
)

__all__ = [
    "correlation_scope",
    "generate_correlation_id",
    "get_correlation_id",
    "get_provider_ref",
    "provider_scope",
    "record_conflict",
    "record_latency",
    "record_side_effect",
    "reset_correlation_id",
    "set_correlation_id",
]
