"""
Booking Domain Entities

- ReservationStatus: states of the reservation lifecycle
- GuestContact: contact and payment details of a guest checkout
- Reservation: aggregate root enforcing lifecycle and authorization rules
"""

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Optional

from shared.domain.actors import Actor, ActorRole
from shared.domain.base import Aggregate, ValueObject
from shared.domain.value_objects import DateRange, Money
from apps.bookings.domain.events import (
    ReservationCancelled,
    ReservationCompleted,
    ReservationStatusOverridden,
)
from apps.bookings.domain.exceptions import (
    AlreadyCancelledError,
    InvalidTransitionError,
    PermissionDeniedError,
    ValidationError,
)
from apps.bookings.domain.policy import ensure_lead_time
from apps.bookings.domain.pricing import CancellationQuote, StayQuote, quote_cancellation


class ReservationStatus(str, Enum):
    """
    Reservation lifecycle

    State transitions:
    - PENDING -> CONFIRMED (simulated payment succeeded)
    - PENDING -> CANCELLED
    - CONFIRMED -> CANCELLED (renter, guest or admin)
    - CONFIRMED -> COMPLETED (homeowner or admin, after the stay)
    CANCELLED and COMPLETED are terminal; only the admin override can
    move a reservation out of them.
    """
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'


# Reservations in these states hold their dates
ACTIVE_STATUSES = frozenset({ReservationStatus.PENDING, ReservationStatus.CONFIRMED})


@dataclass(frozen=True)
class GuestContact(ValueObject):
    first_name: str
    last_name: str
    email: str
    payment_token: str
    middle_initial: str = ''

    def __post_init__(self):
        missing = [
            name for name in ('first_name', 'last_name', 'email')
            if not (getattr(self, name) or '').strip()
        ]
        if missing:
            raise ValidationError(f"Guest checkout requires: {', '.join(missing)}.")
        if len(self.middle_initial) > 1:
            raise ValidationError("Middle initial must be a single letter.")

    @property
    def full_name(self) -> str:
        parts = [self.first_name, f"{self.middle_initial}." if self.middle_initial else '', self.last_name]
        return ' '.join(part for part in parts if part)

    def matches_email(self, email: str) -> bool:
        return bool(email) and self.email.strip().lower() == email.strip().lower()


@dataclass(eq=False)
class Reservation(Aggregate):
    """
    Reservation Aggregate Root

    Key invariants:
    - dates is a valid half-open range (start < end)
    - subtotal, tax and total come from a StayQuote, never from a caller
    - exactly one of renter_id / guest is set
    - reservation_number is assigned once, by the store adapter
    """

    property_id: int
    dates: DateRange
    nights: int
    nightly_rate: Money
    subtotal: Money
    tax: Money
    total: Money
    renter_id: Optional[int] = None
    guest: Optional[GuestContact] = None
    property_owner_id: Optional[int] = None
    reservation_number: str = ''
    status: ReservationStatus = ReservationStatus.PENDING
    cancellation_fee: Optional[Money] = None
    refund_amount: Optional[Money] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by_role: str = ''
    created_at: Optional[datetime] = None

    def __post_init__(self):
        self.status = ReservationStatus(self.status)
        if self.renter_id is None and self.guest is None:
            raise ValidationError("A reservation needs either a renter account or guest contact details.")
        if self.renter_id is not None and self.guest is not None:
            raise ValidationError("Guest contact details are only taken for guest checkout.")

    @classmethod
    def book(
        cls,
        property_id: int,
        dates: DateRange,
        quote: StayQuote,
        renter_id: Optional[int] = None,
        guest: Optional[GuestContact] = None,
        property_owner_id: Optional[int] = None,
    ) -> 'Reservation':
        return cls(
            property_id=property_id,
            dates=dates,
            nights=quote.nights,
            nightly_rate=quote.nightly_rate,
            subtotal=quote.subtotal,
            tax=quote.tax,
            total=quote.total,
            renter_id=renter_id,
            guest=guest,
            property_owner_id=property_owner_id,
            status=ReservationStatus.PENDING,
        )

    # --- queries -------------------------------------------------------------

    @property
    def start_date(self) -> date:
        return self.dates.start_date

    @property
    def end_date(self) -> date:
        return self.dates.end_date

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def is_guest_checkout(self) -> bool:
        return self.renter_id is None

    def is_held_by(self, actor: Actor, guest_email: str = '') -> bool:
        """Renter of the reservation, or the guest proving it with the checkout email"""
        if self.renter_id is not None:
            return actor.user_id == self.renter_id
        return self.guest is not None and self.guest.matches_email(guest_email)

    def can_be_viewed_by(self, actor: Actor, guest_email: str = '') -> bool:
        if actor.is_admin or self.is_held_by(actor, guest_email):
            return True
        return actor.user_id is not None and actor.user_id == self.property_owner_id

    def cancellation_quote(self) -> CancellationQuote:
        if self.cancellation_fee is not None and self.refund_amount is not None:
            return CancellationQuote(self.total, self.cancellation_fee, self.refund_amount)
        return quote_cancellation(self.total)

    # --- transitions ---------------------------------------------------------

    def confirm(self):
        """Payment is simulated, so confirming only checks the state"""
        if self.status != ReservationStatus.PENDING:
            raise InvalidTransitionError(
                f"Cannot confirm reservation in status {self.status.value}."
            )
        self.status = ReservationStatus.CONFIRMED

    def cancel(self, actor: Actor, today: date, at: datetime, guest_email: str = '') -> CancellationQuote:
        """
        Cancel on behalf of the renter, the guest or an admin

        Admins skip the lead-time window but still get the fee figures.
        Events: ReservationCancelled
        """
        if not actor.is_admin and not self.is_held_by(actor, guest_email):
            raise PermissionDeniedError("Only the renter or an administrator can cancel this reservation.")

        if self.status == ReservationStatus.CANCELLED:
            raise AlreadyCancelledError()
        if self.status == ReservationStatus.COMPLETED:
            raise InvalidTransitionError("A completed reservation cannot be cancelled.")

        if not actor.is_admin:
            ensure_lead_time(self.start_date, today, action='cancel')

        return self._mark_cancelled(actor, at)

    def complete(self, actor: Actor):
        """
        Mark the stay as finished (CONFIRMED -> COMPLETED)

        Events: ReservationCompleted
        """
        is_owner = actor.user_id is not None and actor.user_id == self.property_owner_id
        if not (actor.is_admin or (actor.role == ActorRole.HOMEOWNER and is_owner)):
            raise PermissionDeniedError("Only the homeowner or an administrator can complete a reservation.")

        if self.status != ReservationStatus.CONFIRMED:
            raise InvalidTransitionError(
                f"Only confirmed reservations can be completed (current status: {self.status.value})."
            )

        self.status = ReservationStatus.COMPLETED
        self.add_event(ReservationCompleted(
            aggregate_id=self.id,
            reservation_id=self.id,
            property_id=self.property_id,
            renter_id=self.renter_id,
        ))

    def override_status(self, actor: Actor, new_status: ReservationStatus, at: datetime) -> Optional[CancellationQuote]:
        """
        Administrative override: set any status, no transition rules

        Moving into CANCELLED records and returns the fee figures so the
        operator sees what the renter would be refunded; moving out of it
        clears them.
        Events: ReservationStatusOverridden (+ ReservationCancelled)
        """
        if not actor.is_admin:
            raise PermissionDeniedError("Only administrators can override a reservation status.")

        new_status = ReservationStatus(new_status)
        old_status = self.status

        quote = None
        if new_status == ReservationStatus.CANCELLED:
            quote = self.cancellation_quote() if old_status == new_status else self._mark_cancelled(actor, at)
        else:
            self.status = new_status
            self.cancellation_fee = None
            self.refund_amount = None
            self.cancelled_at = None
            self.cancelled_by_role = ''

        self.add_event(ReservationStatusOverridden(
            aggregate_id=self.id,
            reservation_id=self.id,
            old_status=old_status.value,
            new_status=new_status.value,
            actor_id=actor.user_id,
        ))
        return quote

    def _mark_cancelled(self, actor: Actor, at: datetime) -> CancellationQuote:
        quote = quote_cancellation(self.total)
        old_status = self.status

        self.status = ReservationStatus.CANCELLED
        self.cancellation_fee = quote.cancellation_fee
        self.refund_amount = quote.refund
        self.cancelled_at = at
        self.cancelled_by_role = actor.role.value

        self.add_event(ReservationCancelled(
            aggregate_id=self.id,
            reservation_id=self.id,
            property_id=self.property_id,
            reservation_number=self.reservation_number,
            cancellation_fee=quote.cancellation_fee,
            refund_amount=quote.refund,
            cancelled_by_role=actor.role.value,
            old_status=old_status.value,
        ))
        return quote

    def with_reference(self, reservation_number: str) -> 'Reservation':
        """Copy carrying a candidate reservation number, used before insert"""
        if self.id is not None:
            raise InvalidTransitionError("The reservation number of a stored reservation cannot change.")
        return replace(self, reservation_number=reservation_number)

    def __str__(self):
        return f"Reservation {self.reservation_number or '<unsaved>'} ({self.status.value})"

    def __repr__(self):
        return (
            f"Reservation(id={self.id}, reservation_number={self.reservation_number!r}, "
            f"property_id={self.property_id}, status={self.status.value}, dates={self.dates!r})"
        )
