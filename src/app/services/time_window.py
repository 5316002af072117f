"""Calculo da janela ocupada de um agendamento.

Para service-booking a janela inclui o deslocamento do prestador ate o
cliente e a folga apos o servico:

    busy_start = service_start - commute
    service_end = service_start + duration
    busy_end = service_end + buffer

Nas demais categorias a janela ocupada e o intervalo informado.
"""

from __future__ import annotations

import logging
from datetime import datetime, time, timedelta, tzinfo
from typing import TYPE_CHECKING

from app.domain.appointment import Appointment, BusyWindow

if TYPE_CHECKING:
    from app.protocols.provider_directory import (
        LocationDirectoryProtocol,
        ProviderDirectoryProtocol,
        ServiceOptionCatalogProtocol,
    )
    from app.protocols.travel import TravelEstimatorProtocol

logger = logging.getLogger(__name__)

# Campos de horario persistidos no agendamento
TIME_FIELDS = (
    "requested_start",
    "requested_end",
    "service_start",
    "service_end",
    "busy_start",
    "busy_end",
)

# Campos cuja alteracao exige recalcular a janela
WINDOW_FIELDS = frozenset({
    "all_day",
    "requested_start",
    "requested_end",
    "service_start",
    "service_option_ref",
    "postcode",
    "location_ref",
    "provider_ref",
})


def as_aware(value: datetime, zone: tzinfo) -> datetime:
    """Datetime naive recebe o timezone local; aware fica como esta."""
    return value.replace(tzinfo=zone) if value.tzinfo is None else value


def day_bounds(value: datetime, zone: tzinfo) -> tuple[datetime, datetime]:
    """Inicio e fim do dia civil de `value` no timezone informado.

    Datetimes naive sao interpretados como horario local.
    """
    day = as_aware(value, zone).astimezone(zone).date()
    return (
        datetime.combine(day, time.min, tzinfo=zone),
        datetime.combine(day, time.max, tzinfo=zone),
    )


class TimeWindowCalculator:
    """Deriva requested/service/busy a partir do agendamento."""

    def __init__(
        self,
        *,
        provider_directory: ProviderDirectoryProtocol,
        travel_estimator: TravelEstimatorProtocol,
        service_options: ServiceOptionCatalogProtocol,
        locations: LocationDirectoryProtocol,
        zone: tzinfo,
    ) -> None:
        self._providers = provider_directory
        self._travel = travel_estimator
        self._service_options = service_options
        self._locations = locations
        self._zone = zone

    def target_postcode(self, appointment: Appointment) -> str:
        """Postcode de destino: o do local fixo tem precedencia."""
        if appointment.location_ref:
            location = self._locations.get(appointment.location_ref)
            if location is not None and location.postcode:
                return location.postcode
        return appointment.postcode

    def calculate(self, appointment: Appointment) -> BusyWindow:
        requested_start = appointment.requested_start
        requested_end = appointment.requested_end

        if appointment.all_day and requested_start is not None:
            requested_start, start_day_end = day_bounds(requested_start, self._zone)
            if requested_end is not None:
                _, requested_end = day_bounds(requested_end, self._zone)
            else:
                requested_end = start_day_end

        option = (
            self._service_options.get(appointment.service_option_ref)
            if appointment.service_option_ref
            else None
        )
        if (
            appointment.is_service_booking
            and appointment.service_start is not None
            and appointment.provider_ref
            and option is not None
        ):
            service_start = appointment.service_start
            commute = self._commute(appointment, service_start)
            service_end = service_start + option.duration
            return BusyWindow(
                requested_start=requested_start,
                requested_end=requested_end,
                service_start=service_start,
                service_end=service_end,
                busy_start=service_start - commute,
                busy_end=service_end + option.buffer,
                commute=commute,
            )

        return BusyWindow(
            requested_start=requested_start,
            requested_end=requested_end,
            service_start=requested_start,
            service_end=requested_end,
            busy_start=requested_start,
            busy_end=requested_end,
        )

    def apply(self, appointment: Appointment) -> Appointment:
        """Retorna copia do agendamento com a janela recalculada."""
        window = self.calculate(appointment)
        return appointment.model_copy(
            update=window.model_dump(exclude={"commute"}),
        )

    def _commute(self, appointment: Appointment, service_start: datetime) -> timedelta:
        provider_ref = appointment.provider_ref or ""
        start_location = self._providers.location_at(provider_ref, service_start)
        speed = self._providers.transport_speed(provider_ref)
        commute = self._travel.estimate(
            start_location,
            self.target_postcode(appointment),
            speed,
        )
        if commute < timedelta(0):
            logger.warning(
                "negative_commute_clamped",
                extra={
                    "appointment_id": appointment.id,
                    "provider_ref": provider_ref,
                },
            )
            return timedelta(0)
        return commute


__all__ = ["TIME_FIELDS", "WINDOW_FIELDS", "TimeWindowCalculator", "as_aware", "day_bounds"]
