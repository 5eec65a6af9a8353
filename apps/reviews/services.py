"""Review workflows and the rating aggregator.

A subject (property or renter) carries ``rating`` = mean of its review
ratings and ``review_count`` = number of reviews. Both are recomputed
from scratch inside the same transaction as the review insert or delete,
with the subject row locked, so they never drift from the reviews table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from django.contrib.auth import get_user_model  # type: ignore
from django.db import IntegrityError, transaction  # type: ignore

from apps.bookings.domain.entities import ReservationStatus
from apps.bookings.domain.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from apps.bookings.models import Reservation
from apps.properties.models import Property
from shared.domain.actors import Actor, ActorRole

from .models import RATING_MAX, RATING_MIN, RenterReview, Review

logger = logging.getLogger(__name__)

REVIEWABLE_STATUSES = (ReservationStatus.CONFIRMED.value, ReservationStatus.COMPLETED.value)


class SubjectKind(str, Enum):
    PROPERTY = "property"
    RENTER = "renter"


@dataclass(frozen=True)
class RatingAggregate:
    rating: float
    review_count: int


def mean_rating(ratings: Iterable[int]) -> float:
    """Arithmetic mean, 0.0 for no ratings."""

    values = list(ratings)
    if not values:
        return 0.0
    return sum(values) / len(values)


def _subject_queryset(subject_kind: SubjectKind):
    if SubjectKind(subject_kind) == SubjectKind.PROPERTY:
        return Property.objects.all()
    return get_user_model().objects.all()


def list_reviews(subject_id: int, subject_kind: SubjectKind):
    """Reviews of a subject, newest first."""

    if SubjectKind(subject_kind) == SubjectKind.PROPERTY:
        return Review.objects.filter(property_id=subject_id).select_related("author")
    return RenterReview.objects.filter(renter_id=subject_id).select_related("reviewer")


def recompute_rating(subject_id: int, subject_kind: SubjectKind) -> RatingAggregate:
    """Recalculate and store the aggregate of one subject.

    Locks the subject row, so concurrent review writes for the same subject
    are applied one after the other. Runs in the caller's transaction when
    there is one.
    """

    with transaction.atomic():
        subject = _subject_queryset(subject_kind).select_for_update().get(pk=subject_id)
        ratings = list(list_reviews(subject_id, subject_kind).values_list("rating", flat=True))

        aggregate = RatingAggregate(rating=mean_rating(ratings), review_count=len(ratings))
        subject.rating = aggregate.rating
        subject.review_count = aggregate.review_count
        subject.save(update_fields=["rating", "review_count"])

    logger.info(
        "Recomputed %s %s rating: %.2f over %d reviews",
        SubjectKind(subject_kind).value, subject_id, aggregate.rating, aggregate.review_count,
    )
    return aggregate


def _validate_rating(rating) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int) or not RATING_MIN <= rating <= RATING_MAX:
        raise ValidationError(f"Rating must be an integer from {RATING_MIN} to {RATING_MAX}.")
    return rating


def _reviewable_reservation(reservation_number: str) -> Reservation:
    try:
        reservation = Reservation.objects.select_related("property").get(reservation_number=reservation_number)
    except Reservation.DoesNotExist:
        raise NotFoundError(f"Reservation {reservation_number} not found.")

    if reservation.status not in REVIEWABLE_STATUSES:
        raise ValidationError("Only confirmed or completed stays can be reviewed.")
    return reservation


def _insert(model, **fields):
    try:
        with transaction.atomic():
            return model.objects.create(**fields)
    except IntegrityError:
        raise ValidationError("You have already reviewed this reservation.")


def submit_review(
    actor: Actor,
    reservation_number: str,
    rating: int,
    comment: str = "",
    property_id: int | None = None,
) -> Review:
    """Store a renter's review of the property they stayed at."""

    if not actor.is_authenticated:
        raise PermissionDeniedError("Sign in to review a stay.")
    rating = _validate_rating(rating)

    with transaction.atomic():
        reservation = _reviewable_reservation(reservation_number)
        if reservation.renter_id != actor.user_id:
            raise PermissionDeniedError("You can only review your own stays.")
        if property_id is not None and property_id != reservation.property_id:
            raise ValidationError("The reservation is not for this property.")
        if Review.objects.filter(author_id=actor.user_id, reservation=reservation).exists():
            raise ValidationError("You have already reviewed this reservation.")

        review = _insert(
            Review,
            property_id=reservation.property_id,
            author_id=actor.user_id,
            reservation=reservation,
            rating=rating,
            comment=comment,
        )
        recompute_rating(reservation.property_id, SubjectKind.PROPERTY)

    logger.info("Review %s stored for property %s", review.pk, review.property_id)
    return review


def submit_renter_review(
    actor: Actor,
    reservation_number: str,
    rating: int,
    comment: str = "",
) -> RenterReview:
    """Store a homeowner's review of the renter of a stay on their property."""

    if actor.role != ActorRole.HOMEOWNER:
        raise PermissionDeniedError("Only homeowners can review renters.")
    rating = _validate_rating(rating)

    with transaction.atomic():
        reservation = _reviewable_reservation(reservation_number)
        if reservation.property.owner_id != actor.user_id:
            raise PermissionDeniedError("You can only review renters of your own properties.")
        if RenterReview.objects.filter(reviewer_id=actor.user_id, reservation=reservation).exists():
            raise ValidationError("You have already reviewed this reservation.")

        if reservation.renter_id is not None:
            renter_name = reservation.renter.display_name
        else:
            renter_name = f"{reservation.guest_first_name} {reservation.guest_last_name}".strip()

        review = _insert(
            RenterReview,
            renter_id=reservation.renter_id,
            renter_name=renter_name,
            reviewer_id=actor.user_id,
            reservation=reservation,
            rating=rating,
            comment=comment,
        )
        if reservation.renter_id is not None:
            recompute_rating(reservation.renter_id, SubjectKind.RENTER)

    logger.info("Renter review %s stored for reservation %s", review.pk, reservation_number)
    return review


def _delete(actor: Actor, model, review_id: int, subject_kind: SubjectKind) -> None:
    if not actor.is_admin:
        raise PermissionDeniedError("Only administrators can delete reviews.")

    with transaction.atomic():
        try:
            review = model.objects.select_for_update().get(pk=review_id)
        except model.DoesNotExist:
            raise NotFoundError(f"Review {review_id} not found.")

        subject_id = review.subject_id
        review.delete()
        if subject_id is not None:
            recompute_rating(subject_id, subject_kind)

    logger.info("Admin %s deleted %s review %s", actor.user_id, SubjectKind(subject_kind).value, review_id)


def delete_review(actor: Actor, review_id: int) -> None:
    _delete(actor, Review, review_id, SubjectKind.PROPERTY)


def delete_renter_review(actor: Actor, review_id: int) -> None:
    _delete(actor, RenterReview, review_id, SubjectKind.RENTER)
