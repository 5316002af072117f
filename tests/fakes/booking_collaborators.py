"""Fakes in-memory dos colaboradores externos do core de agendamentos.

Mantemos estado local para testes deterministas, sem IO.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from app.domain.appointment import (
    Appointment,
    AppointmentCategory,
    CoverageZone,
    Location,
    ServiceOption,
)
from app.domain.side_effects import NotificationVariant

PROVIDER = "prov-1"
USER = "user-1"
OPTION = "massage-60"


class FakeProviderDirectory:
    """Local de partida, zona padrao e velocidade por prestador."""

    def __init__(
        self,
        *,
        locations: dict[str, Location] | None = None,
        default_zones: dict[str, CoverageZone] | None = None,
        speeds: dict[str, float] | None = None,
    ) -> None:
        self._locations = locations or {}
        self._default_zones = default_zones or {}
        self._speeds = speeds or {}
        self.location_calls: list[tuple[str, datetime]] = []

    def location_at(self, provider_ref: str, at: datetime) -> Location | None:
        self.location_calls.append((provider_ref, at))
        return self._locations.get(provider_ref)

    def default_coverage_zone(self, provider_ref: str) -> CoverageZone | None:
        return self._default_zones.get(provider_ref)

    def transport_speed(self, provider_ref: str) -> float | None:
        return self._speeds.get(provider_ref)


class FakeTravelEstimator:
    """Deslocamento fixo por postcode de destino (default para os demais)."""

    def __init__(
        self,
        default: timedelta = timedelta(minutes=30),
        by_postcode: dict[str, timedelta] | None = None,
    ) -> None:
        self._default = default
        self._by_postcode = by_postcode or {}
        self.calls: list[tuple[Location | None, str, float | None]] = []

    def estimate(
        self,
        from_location: Location | None,
        to_postcode: str,
        speed: float | None,
    ) -> timedelta:
        self.calls.append((from_location, to_postcode, speed))
        return self._by_postcode.get(to_postcode, self._default)


class FakeCoverageResolver:
    """Zonas por outward code; pode ser configurado para falhar."""

    def __init__(
        self,
        zones: dict[str, CoverageZone] | None = None,
        error: Exception | None = None,
    ) -> None:
        self._zones = zones or {}
        self._error = error
        self.calls: list[str] = []

    def resolve(self, outward_code: str) -> CoverageZone | None:
        self.calls.append(outward_code)
        if self._error is not None:
            raise self._error
        return self._zones.get(outward_code)


class FakeServiceOptionCatalog:
    def __init__(self, options: list[ServiceOption] | None = None) -> None:
        self._options = {option.ref: option for option in options or []}

    def get(self, option_ref: str) -> ServiceOption | None:
        return self._options.get(option_ref)


class FakeLocationDirectory:
    def __init__(self, locations: list[Location] | None = None) -> None:
        self._locations = {location.ref: location for location in locations or []}

    def get(self, location_ref: str) -> Location | None:
        return self._locations.get(location_ref)


class FakeAdministratorDirectory:
    """Lista ordenada de administradores; pode ser configurada para falhar."""

    def __init__(self, administrators: list[str] | None = None, error: Exception | None = None) -> None:
        self._administrators = list(administrators or [])
        self._error = error

    def list_administrators(self) -> list[str]:
        if self._error is not None:
            raise self._error
        return list(self._administrators)


class RecordingNotificationService:
    """Registra as notificacoes enviadas; falha para destinatarios listados."""

    def __init__(self, failing_recipients: set[str] | None = None) -> None:
        self.sent: list[dict[str, Any]] = []
        self._failing = failing_recipients or set()

    def notify(
        self,
        variant: NotificationVariant,
        appointment: Appointment,
        recipient: str,
        index: int | None = None,
    ) -> None:
        if recipient in self._failing:
            raise ConnectionError(f"mailer unavailable for {recipient}")
        self.sent.append(
            {
                "variant": variant,
                "appointment_id": appointment.id,
                "recipient": recipient,
                "index": index,
            }
        )


def at(hour: int, minute: int = 0, day: int = 15) -> datetime:
    """Horario fixo em UTC (janeiro: Europe/London == UTC)."""
    return datetime(2026, 1, day, hour, minute, tzinfo=UTC)


def default_service_option() -> ServiceOption:
    return ServiceOption(ref=OPTION, title="Massage 60", duration_min=60, buffer_min=15)


def make_service_booking(**overrides: Any) -> Appointment:
    """Service-booking com janela ja calculada: busy [09:30, 11:15)."""
    data: dict[str, Any] = {
        "id": "ap-1",
        "category": AppointmentCategory.SERVICE_BOOKING,
        "provider_ref": PROVIDER,
        "user_ref": USER,
        "service_option_ref": OPTION,
        "postcode": "SW1A 1AA",
        "requested_start": at(10),
        "service_start": at(10),
        "service_end": at(11),
        "busy_start": at(9, 30),
        "busy_end": at(11, 15),
    }
    data.update(overrides)
    return Appointment(**data)


def make_busy_block(**overrides: Any) -> Appointment:
    """Busy-block [10:00, 11:00) com service == busy."""
    data: dict[str, Any] = {
        "id": "bb-1",
        "category": AppointmentCategory.BUSY_BLOCK,
        "provider_ref": PROVIDER,
        "requested_start": at(10),
        "requested_end": at(11),
        "service_start": at(10),
        "service_end": at(11),
        "busy_start": at(10),
        "busy_end": at(11),
    }
    data.update(overrides)
    return Appointment(**data)
