"""Contratos de estimativa de deslocamento e cobertura movel."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from app.domain.appointment import CoverageZone, Location


@runtime_checkable
class TravelEstimatorProtocol(Protocol):
    """Estimativa do tempo de deslocamento ate o postcode de destino."""

    def estimate(
        self,
        from_location: Location | None,
        to_postcode: str,
        speed: float | None,
    ) -> timedelta:
        ...


@runtime_checkable
class CoverageResolverProtocol(Protocol):
    """Resolve a zona de cobertura a partir do outward code do postcode."""

    def resolve(self, outward_code: str) -> CoverageZone | None: ...
