"""Booking use cases against the database."""

import threading
from datetime import timedelta
from decimal import Decimal

import pytest
from django.db import connection
from django.db.models import ProtectedError

from apps.bookings.application.command_handlers import (
    CancelReservationCommand,
    CancelReservationHandler,
    CompleteReservationCommand,
    CompleteReservationHandler,
    CreateReservationCommand,
    CreateReservationHandler,
    UpdateReservationStatusCommand,
    UpdateReservationStatusHandler,
)
from apps.bookings.application.queries import get_reservation_for
from apps.bookings.domain.entities import GuestContact, ReservationStatus
from apps.bookings.domain.events import ReservationCancelled, ReservationCreated
from apps.bookings.domain.exceptions import (
    AlreadyCancelledError,
    AvailabilityError,
    InvalidRangeError,
    LeadTimeError,
    NotFoundError,
    ReferenceCollisionError,
    ValidationError,
)
from apps.bookings.domain.references import ReservationReferenceGenerator
from apps.bookings.infrastructure.repositories import DjangoReservationRepository
from apps.bookings.models import Reservation as ReservationModel
from apps.properties.models import Property
from shared.domain.actors import Actor, ActorRole

pytestmark = pytest.mark.django_db


def create(actor, listing, start, end, guest=None, **handler_kwargs):
    return CreateReservationHandler(**handler_kwargs).handle(CreateReservationCommand(
        actor=actor,
        property_id=listing.pk,
        start_date=start,
        end_date=end,
        guest=guest,
    ))


def guest_contact():
    return GuestContact(
        first_name="Ana", last_name="Lopez", email="ana@example.com", payment_token="tok_visa_4242",
    )


def test_create_persists_confirmed_reservation(renter_actor, listing, stay):
    start, end = stay(10, 3)

    reservation = create(renter_actor, listing, start, end)

    row = ReservationModel.objects.get(pk=reservation.id)
    assert row.status == ReservationModel.Status.CONFIRMED
    assert row.renter_id == renter_actor.user_id
    assert row.nights == 3
    assert row.subtotal == Decimal("300.00")
    assert row.tax == Decimal("36.00")
    assert row.total_price == Decimal("336.00")
    assert row.reservation_number == reservation.reservation_number
    assert row.reservation_number.startswith("RES-")


def test_lead_time_boundary(renter_actor, listing, stay):
    with pytest.raises(LeadTimeError):
        create(renter_actor, listing, *stay(4, 2))

    assert create(renter_actor, listing, *stay(5, 2)).id is not None


def test_invalid_range_is_rejected_before_anything_else(renter_actor, listing, stay):
    start, _ = stay(1, 1)

    with pytest.raises(InvalidRangeError):
        create(renter_actor, listing, start, start)


def test_overlap_is_rejected_and_abutting_is_accepted(renter_actor, listing, stay):
    start, end = stay(10, 3)
    create(renter_actor, listing, start, end)

    with pytest.raises(AvailabilityError):
        create(renter_actor, listing, start + timedelta(days=1), end + timedelta(days=1))

    create(renter_actor, listing, end, end + timedelta(days=2))
    assert ReservationModel.objects.count() == 2


def test_cancelled_reservation_frees_its_dates(renter_actor, listing, stay):
    start, end = stay(10, 3)
    first = create(renter_actor, listing, start, end)
    CancelReservationHandler().handle(CancelReservationCommand(actor=renter_actor, reservation_id=first.id))

    assert create(renter_actor, listing, start, end).id != first.id


def test_unknown_or_inactive_property(renter_actor, listing, stay):
    with pytest.raises(NotFoundError):
        CreateReservationHandler().handle(CreateReservationCommand(
            actor=renter_actor, property_id=listing.pk + 1000, start_date=stay()[0], end_date=stay()[1],
        ))

    listing.status = Property.Status.INACTIVE
    listing.save()
    with pytest.raises(ValidationError):
        create(renter_actor, listing, *stay())


def test_guest_checkout_requires_contact_and_encrypts_token(listing, stay):
    with pytest.raises(ValidationError):
        create(Actor.guest(), listing, *stay())

    reservation = create(Actor.guest(), listing, *stay(), guest=guest_contact())

    row = ReservationModel.objects.get(pk=reservation.id)
    assert row.renter_id is None
    assert row.guest_payment_token == "tok_visa_4242"

    with connection.cursor() as cursor:
        cursor.execute("SELECT guest_payment_token FROM bookings_reservation WHERE id = %s", [row.pk])
        stored = cursor.fetchone()[0]
    assert stored != "tok_visa_4242"


def test_cancellation_fee_example_and_idempotence(renter_actor, listing, stay):
    reservation = create(renter_actor, listing, *stay(10, 3))
    handler = CancelReservationHandler()

    outcome = handler.handle(CancelReservationCommand(actor=renter_actor, reservation_id=reservation.id))

    assert outcome.quote.cancellation_fee.amount == Decimal("10.08")
    assert outcome.quote.refund.amount == Decimal("325.92")
    row = ReservationModel.objects.get(pk=reservation.id)
    assert row.status == ReservationModel.Status.CANCELLED
    assert row.cancellation_fee == Decimal("10.08")
    assert row.refund_amount == Decimal("325.92")
    updated_at = row.updated_at

    with pytest.raises(AlreadyCancelledError):
        handler.handle(CancelReservationCommand(actor=renter_actor, reservation_id=reservation.id))

    row.refresh_from_db()
    assert row.status == ReservationModel.Status.CANCELLED
    assert row.updated_at == updated_at


def test_guest_cancels_by_reference(listing, stay):
    reservation = create(Actor.guest(), listing, *stay(), guest=guest_contact())

    outcome = CancelReservationHandler().handle(CancelReservationCommand(
        actor=Actor.guest(),
        reservation_number=reservation.reservation_number,
        guest_email="ana@example.com",
    ))

    assert outcome.reservation.status == ReservationStatus.CANCELLED


def test_cancel_unknown_reservation(renter_actor):
    with pytest.raises(NotFoundError):
        CancelReservationHandler().handle(CancelReservationCommand(actor=renter_actor, reservation_id=424242))


def test_reference_collision_is_retried(renter_actor, listing, stay):
    suffixes = iter([5, 5, 6])
    generator = ReservationReferenceGenerator(clock_ms=lambda: 1718035200123, random_suffix=lambda: next(suffixes))

    first = create(renter_actor, listing, *stay(10, 2), references=generator)
    second = create(renter_actor, listing, *stay(20, 2), references=generator)

    assert first.reservation_number == "RES-1718035200123-5"
    assert second.reservation_number == "RES-1718035200123-6"


def test_reference_collision_budget_exhausted_leaves_nothing_behind(renter_actor, listing, stay):
    generator = ReservationReferenceGenerator(clock_ms=lambda: 1, random_suffix=lambda: 1)
    create(renter_actor, listing, *stay(10, 2), references=generator)

    with pytest.raises(ReferenceCollisionError):
        create(renter_actor, listing, *stay(20, 2), references=generator, max_attempts=3)

    assert ReservationModel.objects.count() == 1


def test_complete_and_override(renter_actor, owner_actor, admin_actor, listing, stay):
    reservation = create(renter_actor, listing, *stay())

    completed = CompleteReservationHandler().handle(
        CompleteReservationCommand(actor=owner_actor, reservation_id=reservation.id)
    )
    assert completed.status == ReservationStatus.COMPLETED

    outcome = UpdateReservationStatusHandler().handle(UpdateReservationStatusCommand(
        actor=admin_actor, reservation_id=reservation.id, status="cancelled",
    ))
    assert outcome.quote.refund.amount == Decimal("325.92")
    assert ReservationModel.objects.get(pk=reservation.id).status == "cancelled"

    with pytest.raises(ValidationError):
        UpdateReservationStatusHandler().handle(UpdateReservationStatusCommand(
            actor=admin_actor, reservation_id=reservation.id, status="archived",
        ))


def test_events_are_published_after_commit(renter_actor, listing, stay, isolated_bus, django_capture_on_commit_callbacks):
    seen = []
    isolated_bus.register_event_handler(ReservationCreated, seen.append)
    isolated_bus.register_event_handler(ReservationCancelled, seen.append)

    with django_capture_on_commit_callbacks(execute=True):
        reservation = create(renter_actor, listing, *stay())
    with django_capture_on_commit_callbacks(execute=True):
        CancelReservationHandler().handle(CancelReservationCommand(actor=renter_actor, reservation_id=reservation.id))

    assert [type(e) for e in seen] == [ReservationCreated, ReservationCancelled]
    assert seen[0].reservation_number == reservation.reservation_number


def test_invoice_visibility(renter_actor, owner_actor, admin_actor, other_renter, listing, stay):
    reservation = create(renter_actor, listing, *stay())

    for actor in (renter_actor, owner_actor, admin_actor):
        assert get_reservation_for(actor, reservation_number=reservation.reservation_number).id == reservation.id

    with pytest.raises(NotFoundError):
        get_reservation_for(Actor("renter", other_renter.pk), reservation_id=reservation.id)


def test_override_back_to_active_rechecks_availability(renter_actor, admin_actor, other_renter, listing, stay):
    start, end = stay(10, 3)
    first = create(renter_actor, listing, start, end)
    CancelReservationHandler().handle(CancelReservationCommand(actor=renter_actor, reservation_id=first.id))
    second = create(Actor(ActorRole.RENTER, other_renter.pk), listing, start, end)

    with pytest.raises(AvailabilityError) as excinfo:
        UpdateReservationStatusHandler().handle(UpdateReservationStatusCommand(
            actor=admin_actor, reservation_id=first.id, status="confirmed",
        ))

    assert [r.id for r in excinfo.value.conflicts] == [second.id]
    assert ReservationModel.objects.get(pk=first.id).status == "cancelled"
    assert ReservationModel.objects.filter(status__in=["pending", "confirmed"]).count() == 1


def test_override_back_to_active_when_dates_are_free(renter_actor, admin_actor, listing, stay):
    first = create(renter_actor, listing, *stay(10, 3))
    create(renter_actor, listing, *stay(13, 2))
    CancelReservationHandler().handle(CancelReservationCommand(actor=renter_actor, reservation_id=first.id))

    outcome = UpdateReservationStatusHandler().handle(UpdateReservationStatusCommand(
        actor=admin_actor, reservation_id=first.id, status="pending",
    ))

    assert outcome.reservation.status == ReservationStatus.PENDING
    assert ReservationModel.objects.get(pk=first.id).cancellation_fee is None


def test_renter_holding_reservations_cannot_be_deleted(renter, renter_actor, other_renter, listing, stay):
    start, end = stay(10, 3)
    create(renter_actor, listing, start, end)

    with pytest.raises(ProtectedError):
        renter.delete()

    assert ReservationModel.objects.get().renter_id == renter.pk
    with pytest.raises(AvailabilityError):
        create(
            Actor(ActorRole.RENTER, other_renter.pk), listing,
            start + timedelta(days=1), end + timedelta(days=1),
        )


def test_property_with_reservations_cannot_be_deleted(renter_actor, listing, stay):
    create(renter_actor, listing, *stay())

    with pytest.raises(ProtectedError):
        listing.delete()
    assert ReservationModel.objects.count() == 1


class RecordingRepository(DjangoReservationRepository):

    def __init__(self):
        self.calls = []

    def lock_property(self, property_id):
        self.calls.append("lock_property")
        return super().lock_property(property_id)

    def find_overlapping(self, property_id, dates, statuses):
        self.calls.append("find_overlapping")
        return super().find_overlapping(property_id, dates, statuses)

    def add(self, reservation):
        self.calls.append("add")
        return super().add(reservation)


def test_property_is_locked_before_the_overlap_check(renter_actor, listing, stay):
    repo = RecordingRepository()

    create(renter_actor, listing, *stay(), reservation_repo=repo)

    assert repo.calls == ["lock_property", "find_overlapping", "add"]


@pytest.mark.django_db(transaction=True)
@pytest.mark.skipif(
    not connection.features.has_select_for_update,
    reason="database backend has no row locks",
)
def test_concurrent_overlapping_creations_let_exactly_one_through(renter, other_renter, listing, stay):
    start, end = stay(10, 3)
    barrier = threading.Barrier(2)
    outcomes = []

    def book(user, offset):
        try:
            barrier.wait()
            create(
                Actor(ActorRole.RENTER, user.pk), listing,
                start + timedelta(days=offset), end + timedelta(days=offset),
            )
            outcomes.append("created")
        except AvailabilityError:
            outcomes.append("unavailable")
        except Exception as exc:
            outcomes.append(repr(exc))
        finally:
            connection.close()

    threads = [
        threading.Thread(target=book, args=(renter, 0)),
        threading.Thread(target=book, args=(other_renter, 1)),
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(outcomes) == ["created", "unavailable"]
    assert ReservationModel.objects.count() == 1
