"""Shared pytest fixtures."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from apps.properties.models import Property
from apps.users.models import CustomUser
from shared.application.message_bus import message_bus
from shared.domain.actors import Actor, ActorRole


@pytest.fixture
def today():
    return timezone.localdate()


@pytest.fixture
def stay(today):
    """Return (start, end) for a stay starting ``offset`` days from today."""

    def _stay(offset: int = 10, nights: int = 3):
        start = today + timedelta(days=offset)
        return start, start + timedelta(days=nights)

    return _stay


@pytest.fixture
def homeowner(db):
    return CustomUser.objects.create_user(
        email="owner@example.com",
        password="OwnerPass123",
        role=CustomUser.RoleChoices.HOMEOWNER,
    )


@pytest.fixture
def renter(db):
    return CustomUser.objects.create_user(
        email="renter@example.com",
        password="RenterPass123",
        role=CustomUser.RoleChoices.RENTER,
    )


@pytest.fixture
def other_renter(db):
    return CustomUser.objects.create_user(
        email="other@example.com",
        password="OtherPass123",
        role=CustomUser.RoleChoices.RENTER,
    )


@pytest.fixture
def admin_user(db):
    return CustomUser.objects.create_superuser(email="admin@example.com", password="AdminPass123")


@pytest.fixture
def listing(homeowner):
    return Property.objects.create(
        owner=homeowner,
        title="Lakeside cabin",
        location="Tahoe",
        price_per_night=Decimal("100.00"),
        max_guests=4,
    )


@pytest.fixture
def renter_actor(renter):
    return Actor(ActorRole.RENTER, renter.pk)


@pytest.fixture
def owner_actor(homeowner):
    return Actor(ActorRole.HOMEOWNER, homeowner.pk)


@pytest.fixture
def admin_actor(admin_user):
    return Actor(ActorRole.ADMIN, admin_user.pk)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def isolated_bus():
    """Empty message bus for the test; the app handlers are restored afterwards."""

    from apps.bookings.application.event_handlers import register_event_handlers

    message_bus.clear()
    yield message_bus
    message_bus.clear()
    register_event_handlers()
