"""Admin registration for reservations."""

from __future__ import annotations

from django.contrib import admin

from .models import Reservation


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = (
        "reservation_number",
        "property",
        "renter",
        "guest_email",
        "status",
        "start_date",
        "end_date",
        "total_price",
        "created_at",
    )
    list_filter = ("status", "start_date", "end_date")
    search_fields = ("reservation_number", "property__title", "renter__email", "guest_email")
    exclude = ("guest_payment_token",)
    # status changes go through the API so the engine records fees and events
    readonly_fields = (
        "reservation_number",
        "property",
        "renter",
        "start_date",
        "end_date",
        "nights",
        "nightly_rate",
        "subtotal",
        "tax",
        "total_price",
        "status",
        "cancellation_fee",
        "refund_amount",
        "cancelled_at",
        "cancelled_by_role",
        "created_at",
        "updated_at",
    )

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False
