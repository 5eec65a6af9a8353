"""HTTP glue for the booking engine: actor resolution and error mapping."""

from __future__ import annotations

import logging

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler as drf_exception_handler  # type: ignore

from shared.domain.actors import Actor, ActorRole

from .domain.exceptions import (
    AvailabilityError,
    BookingError,
    LeadTimeError,
    NotFoundError,
    PermissionDeniedError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    AvailabilityError: status.HTTP_409_CONFLICT,
}


def actor_from_request(request) -> Actor:
    """Build the engine actor from the authenticated user (guest when anonymous)."""

    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return Actor.guest()
    if user.is_platform_admin():
        return Actor(ActorRole.ADMIN, user.pk)
    if user.is_homeowner():
        return Actor(ActorRole.HOMEOWNER, user.pk)
    return Actor(ActorRole.RENTER, user.pk)


def error_status(exc: BookingError) -> int:
    for error_type, http_status in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return http_status
    return status.HTTP_400_BAD_REQUEST


def exception_handler(exc, context):
    """DRF exception handler that also understands engine errors."""

    if not isinstance(exc, BookingError):
        return drf_exception_handler(exc, context)

    http_status = error_status(exc)
    body = {"detail": exc.message, "code": exc.code}
    if isinstance(exc, LeadTimeError) and exc.days_remaining is not None:
        body["days_remaining"] = exc.days_remaining
    if isinstance(exc, AvailabilityError):
        body["conflicts"] = [r.reservation_number for r in exc.conflicts if r.reservation_number]

    view = context.get("view")
    logger.info(
        "Booking request rejected (%s %s) in %s: %s",
        http_status, exc.code, view.__class__.__name__ if view else "-", exc.message,
    )
    return Response(body, status=http_status)
