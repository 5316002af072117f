"""Portao de validacao de escrita de agendamentos.

Regras sempre aplicadas:
- status e category pertencem aos enums fechados
- provider_ref presente

Regras por categoria ficam em CATEGORY_RULES (tabela, nao heranca).
Na atualizacao: id e category imutaveis, campos derivados nao podem ser
escritos e mudancas de status seguem a maquina de status.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from app.domain.appointment import Appointment, AppointmentCategory
from app.domain.errors import ValidationError
from fsm.manager.machine import create_status_machine
from fsm.states.appointment import AppointmentStatus

if TYPE_CHECKING:
    from app.protocols.provider_directory import ServiceOptionCatalogProtocol
    from app.services.conflict_detector import ConflictDetector
    from fsm.types.transition import StatusTransition

Rule = Callable[[Appointment, "ServiceOptionCatalogProtocol"], ValidationError | None]

IMMUTABLE_FIELDS = frozenset({"id", "category", "created_at"})
DERIVED_FIELDS = frozenset({
    "busy_start",
    "busy_end",
    "service_end",
    "mobile_coverage_ref",
    "updated_at",
})
WRITABLE_FIELDS = frozenset(Appointment.model_fields) - IMMUTABLE_FIELDS - DERIVED_FIELDS


def _require_user(appointment: Appointment, _: ServiceOptionCatalogProtocol) -> ValidationError | None:
    if not appointment.user_ref:
        return ValidationError("user_ref", "can't be blank")
    return None


def _require_service_option(
    appointment: Appointment,
    service_options: ServiceOptionCatalogProtocol,
) -> ValidationError | None:
    if not appointment.service_option_ref:
        return ValidationError("service_option_ref", "can't be blank")
    if service_options.get(appointment.service_option_ref) is None:
        return ValidationError(
            "service_option_ref",
            "unknown service option",
            appointment.service_option_ref,
        )
    return None


def _require_service_start(appointment: Appointment, _: ServiceOptionCatalogProtocol) -> ValidationError | None:
    if appointment.service_start is None:
        return ValidationError("service_start", "can't be blank")
    return None


def _require_location_or_postcode(
    appointment: Appointment,
    _: ServiceOptionCatalogProtocol,
) -> ValidationError | None:
    if not appointment.location_ref and not appointment.postcode.strip():
        return ValidationError(
            "location_ref",
            "Appointments should have either a location, or a postcode!",
        )
    return None


def _require_requested_interval(
    appointment: Appointment,
    _: ServiceOptionCatalogProtocol,
) -> ValidationError | None:
    if appointment.requested_start is None:
        return ValidationError("requested_start", "can't be blank")
    if appointment.requested_end is None:
        return ValidationError("requested_end", "can't be blank")
    if appointment.requested_end < appointment.requested_start:
        return ValidationError(
            "requested_end",
            "must not be before requested_start",
            appointment.requested_end,
        )
    return None


CATEGORY_RULES: dict[AppointmentCategory, tuple[Rule, ...]] = {
    AppointmentCategory.SERVICE_BOOKING: (
        _require_user,
        _require_service_option,
        _require_service_start,
        _require_location_or_postcode,
    ),
    AppointmentCategory.BUSY_BLOCK: (_require_requested_interval,),
    AppointmentCategory.EXTERNAL_SYNC: (_require_requested_interval,),
}


def parse_category(value: Any) -> AppointmentCategory:
    try:
        return AppointmentCategory(value)
    except ValueError:
        raise ValidationError("category", f"{value} is not a valid type", value) from None


def parse_status(value: Any) -> AppointmentStatus:
    try:
        return AppointmentStatus(value)
    except ValueError:
        raise ValidationError("status", f"{value} is not a valid status", value) from None


class ValidationGate:
    """Aplica as regras de estrutura, de mudanca e de disponibilidade."""

    def __init__(
        self,
        *,
        service_options: ServiceOptionCatalogProtocol,
        conflict_detector: ConflictDetector,
    ) -> None:
        self._service_options = service_options
        self._conflicts = conflict_detector

    def check_structure(self, appointment: Appointment) -> None:
        """Campos obrigatorios; levanta o primeiro ValidationError encontrado."""
        parse_category(appointment.category)
        parse_status(appointment.status)
        if not appointment.provider_ref:
            raise ValidationError("provider_ref", "can't be blank")

        for rule in CATEGORY_RULES[appointment.category]:
            error = rule(appointment, self._service_options)
            if error is not None:
                raise error

    def check_changes(
        self,
        current: Appointment,
        changes: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Valida os campos alterados e devolve as mudancas normalizadas."""
        normalized: dict[str, Any] = {}
        for field_name, value in changes.items():
            if field_name in IMMUTABLE_FIELDS:
                if value != getattr(current, field_name):
                    raise ValidationError(field_name, "can't be changed", value)
                continue
            if field_name in DERIVED_FIELDS:
                raise ValidationError(field_name, "is derived and can't be set", value)
            if field_name not in WRITABLE_FIELDS:
                raise ValidationError(field_name, "is not a known field", value)
            if field_name == "service_start" and not current.is_service_booking:
                raise ValidationError(
                    field_name,
                    "is derived from requested_start for this category",
                    value,
                )
            normalized[field_name] = value

        if "status" in normalized:
            normalized["status"] = parse_status(normalized["status"])
        return normalized

    def check_transition(
        self,
        current: Appointment,
        target: AppointmentStatus,
        trigger: str = "update",
    ) -> StatusTransition | None:
        """Valida mudanca de status; None quando o status nao muda."""
        if target == current.status:
            return None
        machine = create_status_machine(current.id, current.status)
        result = machine.transition(target, trigger=trigger)
        if not result.success:
            raise ValidationError("status", result.error_reason or "invalid transition", target)
        return result.transition

    def check_availability(self, appointment: Appointment) -> None:
        """Overlap com a agenda do prestador (depois do calculo de janela)."""
        self._conflicts.ensure_available(appointment)


__all__ = [
    "CATEGORY_RULES",
    "DERIVED_FIELDS",
    "IMMUTABLE_FIELDS",
    "WRITABLE_FIELDS",
    "ValidationGate",
    "parse_category",
    "parse_status",
]
