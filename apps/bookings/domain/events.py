"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from typing import Optional

from shared.domain.base import DomainEvent
from shared.domain.value_objects import DateRange, Money


@dataclass(kw_only=True)
class ReservationCreated(DomainEvent):
    """
    Event: A reservation was accepted and stored

    Triggers:
    - Audit log line with the issued reservation number
    """
    reservation_id: int
    reservation_number: str
    property_id: int
    renter_id: Optional[int]
    dates: DateRange
    total_price: Money


@dataclass(kw_only=True)
class ReservationCancelled(DomainEvent):
    """
    Event: A reservation was cancelled

    Triggers:
    - Audit log line with the fee and refund
    """
    reservation_id: Optional[int]
    property_id: int
    reservation_number: str
    cancellation_fee: Money
    refund_amount: Money
    cancelled_by_role: str
    old_status: str


@dataclass(kw_only=True)
class ReservationCompleted(DomainEvent):
    """
    Event: The stay finished (CONFIRMED -> COMPLETED)

    Triggers:
    - The renter and the homeowner become eligible to review each other
    """
    reservation_id: Optional[int]
    property_id: int
    renter_id: Optional[int]


@dataclass(kw_only=True)
class ReservationStatusOverridden(DomainEvent):
    """Event: An administrator set the status directly"""
    reservation_id: Optional[int]
    old_status: str
    new_status: str
    actor_id: Optional[int]
