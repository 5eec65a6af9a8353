"""
Availability Checker

Decides whether a property can take a reservation for a date range. The
rule is half-open interval overlap: [s1, e1) and [s2, e2) clash iff
s1 < e2 and s2 < e1, so a stay may start on the day another one checks
out.

Only active reservations (pending or confirmed) hold dates. The store is
expected to pre-filter with the same predicate; the check is repeated here
so the rule has a single definition that does not depend on the query.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple

from shared.domain.value_objects import DateRange
from apps.bookings.domain.entities import Reservation
from apps.bookings.domain.exceptions import AvailabilityError


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    conflicts: Tuple[Reservation, ...] = ()


def find_conflicts(candidate: DateRange, existing: Iterable[Reservation]) -> Tuple[Reservation, ...]:
    return tuple(
        reservation for reservation in existing
        if reservation.is_active and reservation.dates.overlaps_with(candidate)
    )


def check_availability(candidate: DateRange, existing: Iterable[Reservation]) -> AvailabilityResult:
    conflicts = find_conflicts(candidate, existing)
    return AvailabilityResult(available=not conflicts, conflicts=conflicts)


def ensure_available(property_id: int, candidate: DateRange, existing: Iterable[Reservation]) -> None:
    result = check_availability(candidate, existing)
    if not result.available:
        references = ', '.join(r.reservation_number for r in result.conflicts if r.reservation_number)
        raise AvailabilityError(
            f"Property {property_id} is not available for {candidate}"
            + (f" (overlaps {references})." if references else "."),
            conflicts=result.conflicts,
        )
