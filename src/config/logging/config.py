"""Configuracao centralizada de logging.

Uso:
    from config.logging import configure_logging, get_logger

    # Na inicializacao (app/bootstrap/)
    configure_logging(level="INFO", service_name="booking_core")

    # Em qualquer modulo
    logger = get_logger(__name__)
    logger.info("appointment_created", extra={"appointment_id": "ap-1"})

Logs estruturados em JSON; refs opacas apenas, sem PII.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.logging.filters import CorrelationIdFilter
from config.logging.formatters import create_json_formatter

if TYPE_CHECKING:
    from collections.abc import Callable

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

DEFAULT_SERVICE_NAME = "booking_core"


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    correlation_id_getter: Callable[[], str] | None = None,
    provider_ref_getter: Callable[[], str] | None = None,
) -> None:
    """Configura logging JSON estruturado no root logger.

    Args:
        level: Nivel de log (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service_name: Nome do servico injetado em cada record.
        correlation_id_getter: Funcao que retorna o correlation_id do
            contexto atual (ex: app.observability.get_correlation_id).
        provider_ref_getter: Funcao que retorna o prestador sob lock
            (ex: app.observability.get_provider_ref).

    Raises:
        ValueError: Se o nivel de log for invalido.
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nivel de log invalido: {level}. "
            f"Validos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    handler = logging.StreamHandler()
    handler.setLevel(level_upper)
    handler.setFormatter(create_json_formatter())
    handler.addFilter(CorrelationIdFilter(service_name, correlation_id_getter, provider_ref_getter))

    root = logging.getLogger()
    root.setLevel(level_upper)
    # Substitui handlers existentes para evitar duplicacao
    root.handlers = [handler]


def get_logger(name: str) -> logging.Logger:
    """Retorna logger para o modulo (geralmente __name__)."""
    return logging.getLogger(name)


def log_skipped_effect(
    logger: logging.Logger,
    effect: str,
    appointment_id: str,
    reason: str,
) -> None:
    """Log observavel de efeito colateral que nao precisou ser executado.

    Ex.: job de cobranca inexistente ou ja em execucao, registro de
    pagamento ausente.

    Args:
        logger: Logger instance.
        effect: Nome do efeito (ex: "charge_job").
        appointment_id: Agendamento afetado.
        reason: Motivo curto (ex: "job_already_due").
    """
    logger.info(
        "side_effect_skipped",
        extra={
            "effect": effect,
            "appointment_id": appointment_id,
            "reason": reason,
        },
    )
