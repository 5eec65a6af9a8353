"""Availability checker: half-open overlap over active reservations."""

import random
from datetime import date, timedelta
from decimal import Decimal

import pytest

from apps.bookings.domain.availability import check_availability, ensure_available
from apps.bookings.domain.entities import Reservation, ReservationStatus
from apps.bookings.domain.exceptions import AvailabilityError
from apps.bookings.domain.pricing import quote_stay
from shared.domain.value_objects import DateRange

BASE = date(2025, 7, 1)


def make_reservation(start: date, end: date, status=ReservationStatus.CONFIRMED, number="RES-1-1"):
    reservation = Reservation.book(
        property_id=1,
        dates=DateRange(start, end),
        quote=quote_stay(Decimal("80"), start, end),
        renter_id=7,
    )
    reservation.status = status
    reservation.reservation_number = number
    return reservation


def day(n: int) -> date:
    return BASE + timedelta(days=n)


def test_abutting_ranges_are_available():
    existing = [make_reservation(day(0), day(3))]

    assert check_availability(DateRange(day(3), day(5)), existing).available
    assert check_availability(DateRange(day(-2), day(0)), existing).available


@pytest.mark.parametrize("start,end", [(2, 4), (0, 3), (-1, 1), (1, 2), (-5, 10)])
def test_any_shared_night_conflicts(start, end):
    existing = [make_reservation(day(0), day(3))]

    result = check_availability(DateRange(day(start), day(end)), existing)

    assert not result.available
    assert result.conflicts == tuple(existing)


@pytest.mark.parametrize("status", [ReservationStatus.CANCELLED, ReservationStatus.COMPLETED])
def test_inactive_reservations_do_not_hold_dates(status):
    existing = [make_reservation(day(0), day(3), status=status)]

    assert check_availability(DateRange(day(1), day(2)), existing).available


def test_ensure_available_names_the_conflicts():
    existing = [make_reservation(day(0), day(3), number="RES-1718035200123-42")]

    with pytest.raises(AvailabilityError) as excinfo:
        ensure_available(1, DateRange(day(2), day(4)), existing)

    assert "RES-1718035200123-42" in excinfo.value.message
    assert excinfo.value.conflicts == tuple(existing)


def test_accepting_only_available_ranges_never_produces_overlaps():
    rng = random.Random(20250701)
    accepted = []

    for _ in range(500):
        start = rng.randint(0, 120)
        candidate = DateRange(day(start), day(start + rng.randint(1, 10)))
        if check_availability(candidate, accepted).available:
            accepted.append(make_reservation(candidate.start_date, candidate.end_date))

    assert len(accepted) > 1
    for i, first in enumerate(accepted):
        for second in accepted[i + 1:]:
            assert not first.dates.overlaps_with(second.dates)
