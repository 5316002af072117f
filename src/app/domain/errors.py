"""Erros de dominio do ciclo de vida de agendamentos.

Sempre reportados ao chamador; nenhum deles e re-tentado automaticamente.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class BookingError(Exception):
    """Base para erros de regra de negocio de agendamento."""


class ValidationError(BookingError):
    """Campo obrigatorio ausente, valor fora do enum ou mudanca proibida."""

    def __init__(self, field: str, message: str, value: Any = None) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message
        self.value = value


class ConflictError(BookingError):
    """Intervalo ocupado se sobrepoe a outro agendamento ativo do prestador."""

    def __init__(self, message: str, conflicting_ids: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.conflicting_ids = tuple(conflicting_ids)


class ImmutableError(BookingError):
    """Remocao tentada em categoria que nao pode ser removida."""


class NotFoundError(BookingError):
    """Agendamento inexistente."""

    def __init__(self, appointment_id: str) -> None:
        super().__init__(f"Appointment {appointment_id} not found")
        self.appointment_id = appointment_id


__all__ = [
    "BookingError",
    "ConflictError",
    "ImmutableError",
    "NotFoundError",
    "ValidationError",
]
