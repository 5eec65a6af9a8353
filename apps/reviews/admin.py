"""Admin registration for reviews.

Deleting through the admin bypasses the aggregate recomputation, so
deletion is disabled here; use the API instead.
"""

from __future__ import annotations

from django.contrib import admin

from .models import RenterReview, Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("id", "property", "author", "rating", "created_at")
    list_filter = ("rating",)
    search_fields = ("property__title", "author__email", "reservation__reservation_number")
    readonly_fields = ("property", "author", "reservation", "rating", "created_at")

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False


@admin.register(RenterReview)
class RenterReviewAdmin(admin.ModelAdmin):
    list_display = ("id", "renter_name", "reviewer", "rating", "created_at")
    list_filter = ("rating",)
    search_fields = ("renter_name", "reviewer__email", "reservation__reservation_number")
    readonly_fields = ("renter", "renter_name", "reviewer", "reservation", "rating", "created_at")

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False
