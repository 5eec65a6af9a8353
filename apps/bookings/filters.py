"""FilterSet definitions for the reservation list."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Reservation


class ReservationFilterSet(django_filters.FilterSet):
    """Filters for the reservation list: status, property and stay dates."""

    status = django_filters.ChoiceFilter(choices=Reservation.Status.choices)
    property = django_filters.NumberFilter(field_name="property_id", lookup_expr="exact")
    # reservations still running on or after this date
    active_on_or_after = django_filters.DateFilter(field_name="end_date", lookup_expr="gt")
    starts_before = django_filters.DateFilter(field_name="start_date", lookup_expr="lt")

    class Meta:
        model = Reservation
        fields = ["status", "property"]
