"""
Repository interfaces for the booking domain

The command handlers only talk to these abstractions; the Django ORM
implementation lives in apps.bookings.infrastructure.repositories.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List

from shared.domain.value_objects import DateRange, Money
from apps.bookings.domain.entities import Reservation, ReservationStatus


@dataclass(frozen=True)
class PropertySnapshot:
    """What the engine needs to know about a property while booking it"""
    id: int
    owner_id: int
    nightly_rate: Money
    is_bookable: bool


class AbstractReservationRepository(ABC):

    @abstractmethod
    def lock_property(self, property_id: int) -> PropertySnapshot:
        """
        Lock the property row for the rest of the transaction

        Concurrent bookings of the same property queue up behind this lock,
        which makes check-then-insert atomic per property.

        Raises:
            NotFoundError: no such property
        """

    @abstractmethod
    def find_overlapping(
        self,
        property_id: int,
        dates: DateRange,
        statuses: Iterable[ReservationStatus],
    ) -> List[Reservation]:
        """Reservations of the property in ``statuses`` sharing a night with ``dates``"""

    @abstractmethod
    def add(self, reservation: Reservation) -> Reservation:
        """
        Insert a new reservation and return it with id and timestamps set

        Raises:
            DuplicateReferenceError: reservation_number is already taken;
                nothing has been written
        """

    @abstractmethod
    def update_status(self, reservation: Reservation) -> Reservation:
        """Persist status and cancellation figures of a stored reservation"""

    @abstractmethod
    def get(self, reservation_id: int, lock: bool = False) -> Reservation:
        """Raises NotFoundError"""

    @abstractmethod
    def get_by_reference(self, reservation_number: str, lock: bool = False) -> Reservation:
        """Raises NotFoundError"""

