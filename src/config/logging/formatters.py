"""Formatter JSON dos logs estruturados."""

from __future__ import annotations

from pythonjsonlogger.json import JsonFormatter

# Campos presentes em todo log do servico
REQUIRED_LOG_FIELDS = (
    "asctime",
    "levelname",
    "name",
    "message",
    "correlation_id",
    "provider_ref",
    "service",
)

FIELD_RENAME_MAP = {
    "asctime": "timestamp",
    "levelname": "level",
    "name": "logger",
}


def create_json_formatter() -> JsonFormatter:
    """Cria formatter JSON com campos padronizados.

    Exemplo de output:
        {
            "timestamp": "2026-01-15 10:30:00,123",
            "level": "INFO",
            "logger": "app.use_cases.appointments.lifecycle",
            "message": "appointment_created",
            "correlation_id": "abc-123",
            "provider_ref": "prov-1",
            "service": "booking_core",
            "appointment_id": "ap-1"
        }
    """
    format_string = " ".join(f"%({field})s" for field in REQUIRED_LOG_FIELDS)

    return JsonFormatter(
        format_string,
        rename_fields=FIELD_RENAME_MAP,
    )
