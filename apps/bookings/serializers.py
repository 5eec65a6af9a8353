"""Serializers for the booking API.

Request serializers only validate shapes; the engine decides everything
else (prices, reservation numbers, availability). Response serializers
render the domain aggregate, never a model row.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from shared.infrastructure.encryption import mask_secret

from .domain.entities import GuestContact, ReservationStatus
from .domain.references import is_valid_reference


class GuestContactSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    middle_initial = serializers.CharField(max_length=1, required=False, allow_blank=True, default="")
    email = serializers.EmailField()
    payment_token = serializers.CharField(max_length=255, write_only=True)

    def to_guest_contact(self, data) -> GuestContact:
        return GuestContact(
            first_name=data["first_name"],
            last_name=data["last_name"],
            middle_initial=data.get("middle_initial", ""),
            email=data["email"],
            payment_token=data["payment_token"],
        )


class ReservationCreateSerializer(serializers.Serializer):
    """Booking request: property, dates and, for guest checkout, contact details."""

    property = serializers.IntegerField(min_value=1)
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    guest = GuestContactSerializer(required=False)

    def guest_contact(self):
        guest_data = self.validated_data.get("guest")
        if not guest_data:
            return None
        return GuestContactSerializer().to_guest_contact(guest_data)


class CancelByReferenceSerializer(serializers.Serializer):
    reservation_number = serializers.CharField(max_length=32)
    email = serializers.EmailField(required=False, allow_blank=True, default="")

    def validate_reservation_number(self, value: str) -> str:  # type: ignore
        value = value.strip()
        if not is_valid_reference(value):
            raise serializers.ValidationError("Not a reservation number.")
        return value


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[s.value for s in ReservationStatus])


class MoneyField(serializers.Field):
    """Renders Money as a 2-place decimal string."""

    def to_representation(self, value):
        if value is None:
            return None
        return f"{value.amount:.2f}"


class ReservationSerializer(serializers.Serializer):
    """Read model of a Reservation aggregate (invoice)."""

    id = serializers.IntegerField(read_only=True)
    reservation_number = serializers.CharField(read_only=True)
    property = serializers.IntegerField(source="property_id", read_only=True)
    renter = serializers.IntegerField(source="renter_id", read_only=True, allow_null=True)
    start_date = serializers.DateField(read_only=True)
    end_date = serializers.DateField(read_only=True)
    nights = serializers.IntegerField(read_only=True)
    nightly_rate = MoneyField(read_only=True)
    subtotal = MoneyField(read_only=True)
    tax = MoneyField(read_only=True)
    total_price = MoneyField(source="total", read_only=True)
    status = serializers.SerializerMethodField()
    guest_checkout = serializers.BooleanField(source="is_guest_checkout", read_only=True)
    guest = serializers.SerializerMethodField()
    cancellation_fee = MoneyField(read_only=True)
    refund_amount = MoneyField(read_only=True)
    cancelled_at = serializers.DateTimeField(read_only=True, allow_null=True)
    created_at = serializers.DateTimeField(read_only=True, allow_null=True)

    def get_status(self, obj) -> str:
        return obj.status.value

    def get_guest(self, obj):
        if obj.guest is None:
            return None
        return {
            "full_name": obj.guest.full_name,
            "first_name": obj.guest.first_name,
            "last_name": obj.guest.last_name,
            "middle_initial": obj.guest.middle_initial,
            "email": obj.guest.email,
            "payment_token": mask_secret(obj.guest.payment_token),
        }


class CancellationSerializer(serializers.Serializer):
    """Cancellation result: the reservation plus the fee breakdown."""

    reservation = ReservationSerializer(read_only=True)
    total_price = MoneyField(source="quote.total", read_only=True)
    cancellation_fee = MoneyField(source="quote.cancellation_fee", read_only=True)
    refund_amount = MoneyField(source="quote.refund", read_only=True)
