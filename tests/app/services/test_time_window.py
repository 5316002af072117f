"""Testes do TimeWindowCalculator."""

from __future__ import annotations

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from app.domain.appointment import Location
from app.services.time_window import TimeWindowCalculator, day_bounds
from tests.fakes.booking_collaborators import (
    PROVIDER,
    FakeLocationDirectory,
    FakeProviderDirectory,
    FakeServiceOptionCatalog,
    FakeTravelEstimator,
    at,
    default_service_option,
    make_busy_block,
    make_service_booking,
)

LONDON = ZoneInfo("Europe/London")
HOME = Location(ref="home", postcode="E1 6AN")


def _calculator(
    travel: FakeTravelEstimator | None = None,
    locations: list[Location] | None = None,
) -> TimeWindowCalculator:
    return TimeWindowCalculator(
        provider_directory=FakeProviderDirectory(locations={PROVIDER: HOME}, speeds={PROVIDER: 25.0}),
        travel_estimator=travel or FakeTravelEstimator(timedelta(minutes=30)),
        service_options=FakeServiceOptionCatalog([default_service_option()]),
        locations=FakeLocationDirectory(locations),
        zone=LONDON,
    )


def _unwindowed_booking(**overrides):
    return make_service_booking(service_end=None, busy_start=None, busy_end=None, **overrides)


class TestServiceBookingWindow:
    """busy = [service_start - commute, service_start + duration + buffer)."""

    def test_window_includes_commute_and_buffer(self) -> None:
        window = _calculator().calculate(_unwindowed_booking())

        assert window.service_start == at(10)
        assert window.service_end == at(11)
        assert window.busy_start == at(9, 30)
        assert window.busy_end == at(11, 15)
        assert window.commute == timedelta(minutes=30)

    def test_ordering_invariant(self) -> None:
        window = _calculator().calculate(_unwindowed_booking())
        assert window.busy_start <= window.service_start <= window.service_end <= window.busy_end

    def test_travel_estimator_receives_start_location_and_speed(self) -> None:
        travel = FakeTravelEstimator()
        _calculator(travel).calculate(_unwindowed_booking())

        assert travel.calls == [(HOME, "SW1A 1AA", 25.0)]

    def test_location_postcode_wins_over_free_postcode(self) -> None:
        travel = FakeTravelEstimator()
        clinic = Location(ref="clinic", postcode="N1 9GU")
        _calculator(travel, [clinic]).calculate(_unwindowed_booking(location_ref="clinic"))

        assert travel.calls[0][1] == "N1 9GU"

    def test_negative_commute_is_clamped(self) -> None:
        window = _calculator(FakeTravelEstimator(timedelta(minutes=-5))).calculate(_unwindowed_booking())
        assert window.busy_start == at(10)

    def test_apply_returns_copy_with_window(self) -> None:
        original = _unwindowed_booking()
        updated = _calculator().apply(original)

        assert original.busy_start is None
        assert updated.busy_start == at(9, 30)
        assert updated.busy_end == at(11, 15)

    def test_unknown_option_falls_back_to_requested_interval(self) -> None:
        window = _calculator().calculate(
            _unwindowed_booking(service_option_ref="missing", requested_end=at(11))
        )
        assert window.busy_start == at(10)
        assert window.busy_end == at(11)


class TestOtherCategoriesWindow:
    """Sem deslocamento: service == busy == requested."""

    def test_busy_block_uses_requested_interval(self) -> None:
        window = _calculator().calculate(make_busy_block(requested_start=at(14), requested_end=at(15)))

        assert (window.service_start, window.service_end) == (at(14), at(15))
        assert (window.busy_start, window.busy_end) == (at(14), at(15))

    def test_all_day_busy_block_covers_the_whole_local_day(self) -> None:
        block = make_busy_block(all_day=True, requested_start=at(14), requested_end=at(15))
        window = _calculator().calculate(block)

        assert window.busy_start == datetime(2026, 1, 15, 0, 0, tzinfo=LONDON)
        assert window.busy_end == datetime(2026, 1, 15, 23, 59, 59, 999999, tzinfo=LONDON)
        assert window.service_start == window.busy_start
        assert window.service_end == window.busy_end


class TestDayBounds:
    def test_uses_local_calendar_day(self) -> None:
        # 23:30 UTC em julho ja e dia seguinte em Londres (BST)
        start, end = day_bounds(datetime(2026, 7, 1, 23, 30, tzinfo=ZoneInfo("UTC")), LONDON)
        assert start == datetime(2026, 7, 2, 0, 0, tzinfo=LONDON)
        assert end.date() == start.date()

    @pytest.mark.parametrize("hour", [0, 12, 23])
    def test_naive_value_is_local(self, hour: int) -> None:
        start, _ = day_bounds(datetime(2026, 3, 10, hour), LONDON)
        assert start == datetime(2026, 3, 10, tzinfo=LONDON)
