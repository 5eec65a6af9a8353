"""Integration tests for review API endpoints."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Reservation
from apps.properties.models import Property
from apps.users.models import CustomUser


class ReviewAPITests(APITestCase):

    def setUp(self) -> None:
        self.owner = CustomUser.objects.create_user(
            email="owner@example.com", password="OwnerPass123", role=CustomUser.RoleChoices.HOMEOWNER,
        )
        self.renter = CustomUser.objects.create_user(email="renter@example.com", password="RenterPass123")
        self.admin = CustomUser.objects.create_superuser(email="admin@example.com", password="AdminPass123")
        self.property = Property.objects.create(
            owner=self.owner, title="Beach house", price_per_night=Decimal("150.00"),
        )
        start = timezone.localdate() + timedelta(days=10)
        self.reservation = Reservation.objects.create(
            property=self.property,
            renter=self.renter,
            reservation_number="RES-1718035200123-7",
            start_date=start,
            end_date=start + timedelta(days=2),
            nights=2,
            nightly_rate=Decimal("150.00"),
            subtotal=Decimal("300.00"),
            tax=Decimal("36.00"),
            total_price=Decimal("336.00"),
            status=Reservation.Status.COMPLETED,
        )

    def test_renter_reviews_property_and_admin_deletes(self) -> None:
        self.client.force_authenticate(self.renter)
        response = self.client.post(
            reverse("review-list"),
            {"reservation_number": self.reservation.reservation_number, "rating": 4, "comment": "Great view"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["property_id"], self.property.id)
        self.property.refresh_from_db()
        self.assertEqual((self.property.rating, self.property.review_count), (4.0, 1))

        duplicate = self.client.post(
            reverse("review-list"),
            {"reservation_number": self.reservation.reservation_number, "rating": 5},
            format="json",
        )
        self.assertEqual(duplicate.status_code, status.HTTP_400_BAD_REQUEST, duplicate.data)

        listing = self.client.get(reverse("review-list"), {"property": self.property.id})
        self.assertEqual(listing.data["count"], 1)

        detail_url = reverse("review-detail", args=[response.data["id"]])
        self.assertEqual(self.client.delete(detail_url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.delete(detail_url).status_code, status.HTTP_204_NO_CONTENT)
        self.property.refresh_from_db()
        self.assertEqual((self.property.rating, self.property.review_count), (0.0, 0))

    def test_rating_out_of_range(self) -> None:
        self.client.force_authenticate(self.renter)
        response = self.client.post(
            reverse("review-list"),
            {"reservation_number": self.reservation.reservation_number, "rating": 6},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_homeowner_reviews_renter(self) -> None:
        self.client.force_authenticate(self.owner)
        response = self.client.post(
            reverse("renter-review-list"),
            {"reservation_number": self.reservation.reservation_number, "rating": 5},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.renter.refresh_from_db()
        self.assertEqual((self.renter.rating, self.renter.review_count), (5.0, 1))

    def test_unknown_reservation(self) -> None:
        self.client.force_authenticate(self.renter)
        response = self.client.post(
            reverse("review-list"), {"reservation_number": "RES-1-1", "rating": 3}, format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "not_found")

    def test_lists_filter_by_author_and_reviewer(self) -> None:
        self.client.force_authenticate(self.renter)
        self.client.post(
            reverse("review-list"),
            {"reservation_number": self.reservation.reservation_number, "rating": 4},
            format="json",
        )
        self.client.force_authenticate(self.owner)
        self.client.post(
            reverse("renter-review-list"),
            {"reservation_number": self.reservation.reservation_number, "rating": 5},
            format="json",
        )
        self.client.force_authenticate(None)

        by_author = self.client.get(reverse("review-list"), {"author": self.renter.id})
        self.assertEqual(by_author.data["count"], 1)
        other_author = self.client.get(reverse("review-list"), {"author": self.owner.id})
        self.assertEqual(other_author.data["count"], 0)

        by_reviewer = self.client.get(reverse("renter-review-list"), {"reviewer": self.owner.id})
        self.assertEqual(by_reviewer.data["count"], 1)
        other_reviewer = self.client.get(reverse("renter-review-list"), {"reviewer": self.renter.id})
        self.assertEqual(other_reviewer.data["count"], 0)
