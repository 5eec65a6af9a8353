"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- CreateReservationCommand: Book a property (renter account or guest checkout)
- CancelReservationCommand: Cancel by id or by reservation number
- CompleteReservationCommand: Homeowner/admin marks a stay as finished
- UpdateReservationStatusCommand: Administrative status override
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional
import logging

from django.conf import settings
from django.utils import timezone

from shared.application.uow import DjangoUnitOfWork
from shared.domain.actors import Actor
from shared.domain.value_objects import DateRange
from apps.bookings.domain.availability import ensure_available
from apps.bookings.domain.entities import ACTIVE_STATUSES, GuestContact, Reservation, ReservationStatus
from apps.bookings.domain.events import ReservationCreated
from apps.bookings.domain.exceptions import InvalidRangeError, ValidationError
from apps.bookings.domain.policy import ensure_lead_time
from apps.bookings.domain.pricing import CancellationQuote, quote_stay
from apps.bookings.domain.references import (
    DEFAULT_MAX_ATTEMPTS,
    ReservationReferenceGenerator,
    issue_unique_reference,
)
from apps.bookings.domain.repositories import AbstractReservationRepository

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateReservationCommand:
    """
    Command to book a property

    An authenticated actor books for themselves; an anonymous actor must
    bring guest contact details and a payment token.
    """
    actor: Actor
    property_id: int
    start_date: date
    end_date: date
    guest: Optional[GuestContact] = None


@dataclass
class CancelReservationCommand:
    """Command to cancel a reservation, addressed by id or by reservation number"""
    actor: Actor
    reservation_id: Optional[int] = None
    reservation_number: str = ''
    guest_email: str = ''


@dataclass
class CompleteReservationCommand:
    actor: Actor
    reservation_id: int


@dataclass
class UpdateReservationStatusCommand:
    actor: Actor
    reservation_id: int
    status: str


@dataclass(frozen=True)
class CancellationOutcome:
    reservation: Reservation
    quote: CancellationQuote


@dataclass(frozen=True)
class StatusUpdateOutcome:
    reservation: Reservation
    quote: Optional[CancellationQuote] = None


# ===== Command Handlers =====

class _ReservationHandler:
    """Shared wiring: repository, unit of work factory and clock"""

    def __init__(
        self,
        reservation_repo: Optional[AbstractReservationRepository] = None,
        uow_factory: Callable = DjangoUnitOfWork,
        clock: Callable[[], datetime] = timezone.now,
    ):
        if reservation_repo is None:
            from apps.bookings.infrastructure.repositories import DjangoReservationRepository

            reservation_repo = DjangoReservationRepository()
        self.reservation_repo = reservation_repo
        self.uow_factory = uow_factory
        self.clock = clock

    def _now_and_today(self):
        now = self.clock()
        today = timezone.localdate(now) if timezone.is_aware(now) else now.date()
        return now, today

    def _load(self, reservation_id: Optional[int] = None, reservation_number: str = '') -> Reservation:
        if reservation_id is not None:
            return self.reservation_repo.get(reservation_id, lock=True)
        if reservation_number:
            return self.reservation_repo.get_by_reference(reservation_number, lock=True)
        raise ValidationError("A reservation id or reservation number is required.")


class CreateReservationHandler(_ReservationHandler):
    """
    Handler for CreateReservation command

    Strategy:
    1. Validate the range and the lead time (no database access)
    2. Start database transaction (atomic)
    3. Lock the property row with SELECT FOR UPDATE, so concurrent
       bookings of the same property run one after the other
    4. Check availability against active reservations
    5. Price the stay and confirm it (payment is simulated)
    6. Insert with a fresh reservation number, retrying on collision
    7. Commit; ReservationCreated is published after commit
    """

    def __init__(
        self,
        reservation_repo: Optional[AbstractReservationRepository] = None,
        uow_factory: Callable = DjangoUnitOfWork,
        clock: Callable[[], datetime] = timezone.now,
        references: Optional[ReservationReferenceGenerator] = None,
        max_attempts: Optional[int] = None,
    ):
        super().__init__(reservation_repo, uow_factory, clock)
        self.references = references or ReservationReferenceGenerator()
        self.max_attempts = max_attempts or getattr(
            settings, 'BOOKING_REFERENCE_MAX_ATTEMPTS', DEFAULT_MAX_ATTEMPTS
        )

    def handle(self, command: CreateReservationCommand) -> Reservation:
        """
        Handle reservation creation

        Returns: the stored Reservation aggregate (status CONFIRMED)

        Raises:
            InvalidRangeError, LeadTimeError, NotFoundError, ValidationError,
            AvailabilityError, ReferenceCollisionError
        """
        logger.info(
            "Creating reservation for property %s, dates %s - %s (actor: %s)",
            command.property_id, command.start_date, command.end_date, command.actor.role.value,
        )

        if command.end_date <= command.start_date:
            raise InvalidRangeError()

        _, today = self._now_and_today()
        ensure_lead_time(command.start_date, today, action='book')

        renter_id, guest = self._resolve_party(command)
        dates = DateRange(command.start_date, command.end_date)

        with self.uow_factory() as uow:
            prop = self.reservation_repo.lock_property(command.property_id)
            if not prop.is_bookable:
                raise ValidationError(f"Property {prop.id} is not open for booking.")

            existing = self.reservation_repo.find_overlapping(prop.id, dates, ACTIVE_STATUSES)
            ensure_available(prop.id, dates, existing)

            quote = quote_stay(prop.nightly_rate, dates.start_date, dates.end_date)
            draft = Reservation.book(
                property_id=prop.id,
                dates=dates,
                quote=quote,
                renter_id=renter_id,
                guest=guest,
                property_owner_id=prop.owner_id,
            )
            draft.confirm()

            reservation = issue_unique_reference(
                self.references,
                lambda reference: self.reservation_repo.add(draft.with_reference(reference)),
                self.max_attempts,
            )

            reservation.add_event(ReservationCreated(
                aggregate_id=reservation.id,
                reservation_id=reservation.id,
                reservation_number=reservation.reservation_number,
                property_id=reservation.property_id,
                renter_id=reservation.renter_id,
                dates=dates,
                total_price=reservation.total,
            ))
            uow.collect_events(reservation)

        logger.info(
            "Reservation created: %s (ID: %s, total %s)",
            reservation.reservation_number, reservation.id, reservation.total,
        )
        return reservation

    @staticmethod
    def _resolve_party(command: CreateReservationCommand):
        if command.actor.is_authenticated:
            return command.actor.user_id, None

        guest = command.guest
        if guest is None:
            raise ValidationError("Guest checkout requires contact details.")
        if not guest.payment_token.strip():
            raise ValidationError("Guest checkout requires a payment token.")
        return None, guest


class CancelReservationHandler(_ReservationHandler):
    """Handler for cancelling a reservation"""

    def handle(self, command: CancelReservationCommand) -> CancellationOutcome:
        """
        Cancel and report the fee

        Raises:
            NotFoundError, PermissionDeniedError, AlreadyCancelledError,
            InvalidTransitionError, LeadTimeError
        """
        now, today = self._now_and_today()

        with self.uow_factory() as uow:
            reservation = self._load(command.reservation_id, command.reservation_number)
            quote = reservation.cancel(command.actor, today, now, guest_email=command.guest_email)

            uow.collect_events(reservation)
            self.reservation_repo.update_status(reservation)
            # Event: ReservationCancelled

        logger.info(
            "Reservation %s cancelled by %s: fee %s, refund %s",
            reservation.reservation_number, command.actor.role.value,
            quote.cancellation_fee, quote.refund,
        )
        return CancellationOutcome(reservation=reservation, quote=quote)


class CompleteReservationHandler(_ReservationHandler):
    """Handler for completing a reservation after the stay"""

    def handle(self, command: CompleteReservationCommand) -> Reservation:
        with self.uow_factory() as uow:
            reservation = self._load(command.reservation_id)
            reservation.complete(command.actor)

            uow.collect_events(reservation)
            self.reservation_repo.update_status(reservation)
            # Event: ReservationCompleted

        logger.info("Reservation %s completed", reservation.reservation_number)
        return reservation


class UpdateReservationStatusHandler(_ReservationHandler):
    """
    Handler for the administrative status override

    The override bypasses every transition rule, including the lead time,
    so it is restricted to administrators. Moving a cancelled or completed
    reservation back into an active status takes its dates again: the
    property is locked and the range checked like a new booking.
    """

    def handle(self, command: UpdateReservationStatusCommand) -> StatusUpdateOutcome:
        try:
            new_status = ReservationStatus(command.status)
        except ValueError:
            allowed = ', '.join(s.value for s in ReservationStatus)
            raise ValidationError(f"Unknown status '{command.status}'. Allowed: {allowed}.")

        now, _ = self._now_and_today()

        with self.uow_factory() as uow:
            reservation = self._load(command.reservation_id)
            was_active = reservation.is_active
            quote = reservation.override_status(command.actor, new_status, now)
            if reservation.is_active and not was_active:
                self._ensure_dates_free(reservation)

            uow.collect_events(reservation)
            self.reservation_repo.update_status(reservation)
            # Events: ReservationStatusOverridden (+ ReservationCancelled)

        logger.info(
            "Reservation %s status set to %s by admin %s",
            reservation.reservation_number, new_status.value, command.actor.user_id,
        )
        return StatusUpdateOutcome(reservation=reservation, quote=quote)

    def _ensure_dates_free(self, reservation: Reservation):
        self.reservation_repo.lock_property(reservation.property_id)
        others = [
            other for other in self.reservation_repo.find_overlapping(
                reservation.property_id, reservation.dates, ACTIVE_STATUSES,
            )
            if other.id != reservation.id
        ]
        ensure_available(reservation.property_id, reservation.dates, others)
