"""Contratos de leitura sobre prestadores, locais e opcoes de servico.

Fontes externas ao core; o calculo de janela e a resolucao de cobertura
dependem apenas destes protocolos.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from app.domain.appointment import CoverageZone, Location, ServiceOption


@runtime_checkable
class ProviderDirectoryProtocol(Protocol):
    """Perfil de deslocamento e cobertura de um prestador."""

    def location_at(self, provider_ref: str, at: datetime) -> Location | None:
        """Local de partida do prestador no horario informado."""
        ...

    def default_coverage_zone(self, provider_ref: str) -> CoverageZone | None:
        """Zona padrao do prestador (fallback da resolucao por postcode)."""
        ...

    def transport_speed(self, provider_ref: str) -> float | None:
        """Velocidade media de deslocamento (km/h); None se desconhecida."""
        ...


@runtime_checkable
class LocationDirectoryProtocol(Protocol):
    """Locais fixos referenciados por agendamentos."""

    def get(self, location_ref: str) -> Location | None: ...


@runtime_checkable
class ServiceOptionCatalogProtocol(Protocol):
    """Catalogo de opcoes de servico (duracao + folga)."""

    def get(self, option_ref: str) -> ServiceOption | None: ...
