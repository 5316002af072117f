"""Resolucao da zona de atendimento movel de um agendamento.

A zona vem do outward code do postcode (primeira parte, ex.: "SW1A" em
"SW1A 1AA"). Sem postcode, ou sem zona cadastrada para ele, usa a zona
padrao do prestador.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.appointment import Appointment, CoverageZone
    from app.protocols.provider_directory import ProviderDirectoryProtocol
    from app.protocols.travel import CoverageResolverProtocol

logger = logging.getLogger(__name__)

# Campos cuja alteracao exige re-resolver a zona
COVERAGE_FIELDS = frozenset({"postcode", "location_ref", "provider_ref"})


def outward_code(postcode: str) -> str:
    """Outward code normalizado ("sw1a 1aa" -> "SW1A"); vazio se nao houver."""
    parts = postcode.split()
    return parts[0].upper() if parts else ""


def resolve_mobile_coverage(
    appointment: Appointment,
    coverage_resolver: CoverageResolverProtocol,
    provider_directory: ProviderDirectoryProtocol,
) -> CoverageZone | None:
    """Zona de cobertura do agendamento, ou None se nada se aplica."""
    code = outward_code(appointment.postcode)
    if code:
        zone = coverage_resolver.resolve(code)
        if zone is not None:
            return zone
        logger.debug(
            "coverage_zone_not_found",
            extra={"appointment_id": appointment.id, "outward_code": code},
        )

    if not appointment.provider_ref:
        return None
    return provider_directory.default_coverage_zone(appointment.provider_ref)


__all__ = ["COVERAGE_FIELDS", "outward_code", "resolve_mobile_coverage"]
