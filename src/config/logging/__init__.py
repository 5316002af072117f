"""Configuracao de logging estruturado (JSON).

Uso:
    from config.logging import configure_logging, get_logger

    configure_logging(level="INFO", service_name="booking_core")
    logger = get_logger(__name__)
"""

from config.logging.config import configure_logging, get_logger, log_skipped_effect
from config.logging.filters import CorrelationIdFilter
from config.logging.formatters import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    create_json_formatter,
)

__all__ = [
    "FIELD_RENAME_MAP",
    "REQUIRED_LOG_FIELDS",
    "CorrelationIdFilter",
    "configure_logging",
    "create_json_formatter",
    "get_logger",
    "log_skipped_effect",
]
