"""
Booking event handlers

Subscribers run after the transaction committed. Notification delivery
is not part of this project, so every event ends up as an audit line.
"""

import logging

from shared.application.message_bus import message_bus
from apps.bookings.domain.events import (
    ReservationCancelled,
    ReservationCompleted,
    ReservationCreated,
    ReservationStatusOverridden,
)

logger = logging.getLogger("apps.bookings.audit")


def log_reservation_created(event: ReservationCreated):
    logger.info(
        "reservation.created %s property=%s renter=%s dates=%s total=%s",
        event.reservation_number, event.property_id, event.renter_id or "guest",
        event.dates, event.total_price.amount,
    )


def log_reservation_cancelled(event: ReservationCancelled):
    logger.info(
        "reservation.cancelled %s by=%s from=%s fee=%s refund=%s",
        event.reservation_number, event.cancelled_by_role, event.old_status,
        event.cancellation_fee.amount, event.refund_amount.amount,
    )


def log_reservation_completed(event: ReservationCompleted):
    logger.info("reservation.completed id=%s property=%s", event.reservation_id, event.property_id)


def log_status_overridden(event: ReservationStatusOverridden):
    logger.warning(
        "reservation.status_overridden id=%s %s -> %s by admin %s",
        event.reservation_id, event.old_status, event.new_status, event.actor_id,
    )


def register_event_handlers(bus=message_bus):
    bus.register_event_handler(ReservationCreated, log_reservation_created)
    bus.register_event_handler(ReservationCancelled, log_reservation_cancelled)
    bus.register_event_handler(ReservationCompleted, log_reservation_completed)
    bus.register_event_handler(ReservationStatusOverridden, log_status_overridden)
