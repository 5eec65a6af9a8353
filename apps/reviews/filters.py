"""FilterSet definitions for the review lists."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import RenterReview, Review


class ReviewFilterSet(django_filters.FilterSet):
    """Property reviews by property or by the renter who wrote them."""

    property = django_filters.NumberFilter(field_name='property_id', lookup_expr='exact')
    author = django_filters.NumberFilter(field_name='author_id', lookup_expr='exact')

    class Meta:
        model = Review
        fields = ['property', 'author']


class RenterReviewFilterSet(django_filters.FilterSet):
    """Renter reviews by the renter reviewed or by the homeowner who wrote them."""

    renter = django_filters.NumberFilter(field_name='renter_id', lookup_expr='exact')
    reviewer = django_filters.NumberFilter(field_name='reviewer_id', lookup_expr='exact')

    class Meta:
        model = RenterReview
        fields = ['renter', 'reviewer']
