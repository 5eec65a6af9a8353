"""Models for the review domain.

``Review`` is a renter's rating of a property after a stay;
``RenterReview`` is the homeowner's rating of the renter. Both hang off
the reservation they are about, and an author can review a reservation
at most once. Ratings run from 1 to 5.

The subject's ``rating`` / ``review_count`` fields are maintained by
``apps.reviews.services``; never write them from anywhere else.
Foreign keys are PROTECT: a review only goes away through the services.
"""

from __future__ import annotations

import builtins

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

RATING_MIN = 1
RATING_MAX = 5

rating_validators = [MinValueValidator(RATING_MIN), MaxValueValidator(RATING_MAX)]


def rating_constraint(name: str) -> models.CheckConstraint:
    return models.CheckConstraint(
        condition=models.Q(rating__gte=RATING_MIN, rating__lte=RATING_MAX),
        name=name,
    )


class Review(models.Model):
    """Represents a review left by a renter for a property."""

    property = models.ForeignKey(
        'properties.Property', on_delete=models.PROTECT, related_name='reviews'
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='reviews'
    )
    reservation = models.ForeignKey(
        'bookings.Reservation',
        on_delete=models.PROTECT,
        related_name='reviews',
        help_text=_('Stay the review is about'),
    )
    rating = models.PositiveSmallIntegerField(
        validators=rating_validators,
        help_text=_('Rating from 1 to 5'),
    )
    comment = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['author', 'reservation'], name='review_once_per_reservation'),
            rating_constraint('review_rating_range'),
        ]
        indexes = [
            models.Index(fields=['property', '-created_at']),
        ]

    def __str__(self) -> str:
        return f"Review by {self.author_id} for property {self.property_id} (Rating: {self.rating})"

    @builtins.property
    def subject_id(self) -> int:
        return self.property_id


class RenterReview(models.Model):
    """Represents a homeowner's review of the renter of a reservation.

    Guest checkouts have no renter account: ``renter`` stays empty and the
    guest's name is kept in ``renter_name``.
    """

    renter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='renter_reviews',
    )
    renter_name = models.CharField(max_length=255, blank=True)
    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='written_renter_reviews'
    )
    reservation = models.ForeignKey(
        'bookings.Reservation', on_delete=models.PROTECT, related_name='renter_reviews'
    )
    rating = models.PositiveSmallIntegerField(
        validators=rating_validators,
        help_text=_('Rating from 1 to 5'),
    )
    comment = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['reviewer', 'reservation'], name='renter_review_once_per_reservation'),
            rating_constraint('renter_review_rating_range'),
        ]

    def __str__(self) -> str:
        return f"Review of renter {self.renter_id or self.renter_name} (Rating: {self.rating})"

    @builtins.property
    def subject_id(self) -> int | None:
        return self.renter_id
