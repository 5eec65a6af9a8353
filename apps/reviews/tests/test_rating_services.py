"""Review submission rules and the rating aggregate."""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.db.models import ProtectedError

from apps.bookings.domain.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from apps.bookings.models import Reservation
from apps.reviews import services
from apps.reviews.models import RenterReview, Review
from apps.users.models import CustomUser
from shared.domain.actors import Actor, ActorRole

pytestmark = pytest.mark.django_db


def make_reservation(listing, renter=None, offset=10, status=Reservation.Status.CONFIRMED, **guest):
    start = listing.created_at.date() + timedelta(days=offset)
    return Reservation.objects.create(
        property=listing,
        renter=renter,
        reservation_number=f"RES-{offset}-{listing.pk}{renter.pk if renter else 0}",
        start_date=start,
        end_date=start + timedelta(days=2),
        nights=2,
        nightly_rate=Decimal("100.00"),
        subtotal=Decimal("200.00"),
        tax=Decimal("24.00"),
        total_price=Decimal("224.00"),
        status=status,
        **guest,
    )


def renter_with_stay(listing, n):
    user = CustomUser.objects.create_user(email=f"renter{n}@example.com", password="x")
    return user, make_reservation(listing, user, offset=10 + n)


def test_mean_rating():
    assert services.mean_rating([]) == 0.0
    assert services.mean_rating([4, 5, 3]) == 4.0
    assert services.mean_rating([4, 5]) == 4.5


def test_aggregate_follows_inserts_and_deletes(listing, admin_actor):
    reviews = []
    for n, rating in enumerate([4, 5, 3]):
        user, reservation = renter_with_stay(listing, n)
        reviews.append(services.submit_review(
            Actor(ActorRole.RENTER, user.pk), reservation.reservation_number, rating,
        ))

    listing.refresh_from_db()
    assert listing.rating == 4.0
    assert listing.review_count == 3

    services.delete_review(admin_actor, reviews[2].pk)

    listing.refresh_from_db()
    assert listing.rating == 4.5
    assert listing.review_count == 2


def test_deleting_last_review_resets_to_zero(listing, renter, renter_actor, admin_actor):
    reservation = make_reservation(listing, renter)
    review = services.submit_review(renter_actor, reservation.reservation_number, 2)

    services.delete_review(admin_actor, review.pk)

    listing.refresh_from_db()
    assert (listing.rating, listing.review_count) == (0.0, 0)


def test_one_review_per_reservation(listing, renter, renter_actor):
    reservation = make_reservation(listing, renter)
    services.submit_review(renter_actor, reservation.reservation_number, 5)

    with pytest.raises(ValidationError):
        services.submit_review(renter_actor, reservation.reservation_number, 4)
    assert Review.objects.count() == 1


@pytest.mark.parametrize("rating", [0, 6, 3.5, True])
def test_rating_must_be_between_one_and_five(listing, renter, renter_actor, rating):
    reservation = make_reservation(listing, renter)

    with pytest.raises(ValidationError):
        services.submit_review(renter_actor, reservation.reservation_number, rating)


def test_only_the_renter_of_a_confirmed_stay_can_review(listing, renter, other_renter, renter_actor):
    reservation = make_reservation(listing, renter)
    cancelled = make_reservation(listing, renter, offset=30, status=Reservation.Status.CANCELLED)

    with pytest.raises(PermissionDeniedError):
        services.submit_review(Actor(ActorRole.RENTER, other_renter.pk), reservation.reservation_number, 5)
    with pytest.raises(ValidationError):
        services.submit_review(renter_actor, cancelled.reservation_number, 5)
    with pytest.raises(NotFoundError):
        services.submit_review(renter_actor, "RES-0-0", 5)
    with pytest.raises(PermissionDeniedError):
        services.submit_review(Actor.guest(), reservation.reservation_number, 5)


def test_homeowner_reviews_renter(listing, renter, owner_actor, admin_actor):
    reservation = make_reservation(listing, renter, status=Reservation.Status.COMPLETED)

    review = services.submit_renter_review(owner_actor, reservation.reservation_number, 4, "Tidy guest")

    renter.refresh_from_db()
    assert (renter.rating, renter.review_count) == (4.0, 1)
    assert review.renter_name == renter.display_name

    services.delete_renter_review(admin_actor, review.pk)
    renter.refresh_from_db()
    assert (renter.rating, renter.review_count) == (0.0, 0)


def test_guest_checkout_renter_review_keeps_name_only(listing, owner_actor):
    reservation = make_reservation(
        listing, guest_first_name="Ana", guest_last_name="Lopez", guest_email="ana@example.com",
    )

    review = services.submit_renter_review(owner_actor, reservation.reservation_number, 5)

    assert review.renter_id is None
    assert review.renter_name == "Ana Lopez"


def test_renter_review_requires_the_property_owner(listing, renter, renter_actor):
    reservation = make_reservation(listing, renter)
    stranger = CustomUser.objects.create_user(
        email="stranger@example.com", password="x", role=CustomUser.RoleChoices.HOMEOWNER,
    )

    with pytest.raises(PermissionDeniedError):
        services.submit_renter_review(renter_actor, reservation.reservation_number, 3)
    with pytest.raises(PermissionDeniedError):
        services.submit_renter_review(Actor(ActorRole.HOMEOWNER, stranger.pk), reservation.reservation_number, 3)


def test_only_admins_delete(listing, renter, renter_actor):
    reservation = make_reservation(listing, renter)
    review = services.submit_review(renter_actor, reservation.reservation_number, 5)

    with pytest.raises(PermissionDeniedError):
        services.delete_review(renter_actor, review.pk)


def test_deleting_a_reviewer_leaves_aggregates_intact(listing, renter, homeowner, renter_actor, owner_actor):
    reservation = make_reservation(listing, renter, status=Reservation.Status.COMPLETED)
    services.submit_review(renter_actor, reservation.reservation_number, 2)
    services.submit_renter_review(owner_actor, reservation.reservation_number, 4)

    with pytest.raises(ProtectedError):
        renter.delete()
    with pytest.raises(ProtectedError):
        homeowner.delete()

    listing.refresh_from_db()
    renter.refresh_from_db()
    assert (listing.rating, listing.review_count) == (2.0, Review.objects.count())
    assert (renter.rating, renter.review_count) == (4.0, RenterReview.objects.count())
    assert Review.objects.count() == RenterReview.objects.count() == 1
