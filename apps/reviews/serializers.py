"""Serializers for reviews.

Write serializers only take the reservation number, the rating and the
comment; author, subject and property are derived from the reservation
by ``apps.reviews.services``.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import RATING_MAX, RATING_MIN, RenterReview, Review


class ReviewCreateSerializer(serializers.Serializer):
    """Serializer for creating a new review."""

    reservation_number = serializers.CharField(max_length=32)
    property = serializers.IntegerField(min_value=1, required=False)
    rating = serializers.IntegerField(min_value=RATING_MIN, max_value=RATING_MAX)
    comment = serializers.CharField(required=False, allow_blank=True, default='')


class RenterReviewCreateSerializer(serializers.Serializer):
    reservation_number = serializers.CharField(max_length=32)
    rating = serializers.IntegerField(min_value=RATING_MIN, max_value=RATING_MAX)
    comment = serializers.CharField(required=False, allow_blank=True, default='')


class ReviewSerializer(serializers.ModelSerializer):
    """Read serializer for reviews including related ids."""

    author_id = serializers.ReadOnlyField(source='author.id')
    author_name = serializers.ReadOnlyField(source='author.display_name')
    property_id = serializers.ReadOnlyField(source='property.id')
    reservation_number = serializers.ReadOnlyField(source='reservation.reservation_number')

    class Meta:
        model = Review
        fields = [
            'id',
            'author_id',
            'author_name',
            'property_id',
            'reservation_number',
            'rating',
            'comment',
            'created_at',
        ]


class RenterReviewSerializer(serializers.ModelSerializer):
    reviewer_id = serializers.ReadOnlyField(source='reviewer.id')
    reservation_number = serializers.ReadOnlyField(source='reservation.reservation_number')

    class Meta:
        model = RenterReview
        fields = [
            'id',
            'renter',
            'renter_name',
            'reviewer_id',
            'reservation_number',
            'rating',
            'comment',
            'created_at',
        ]
