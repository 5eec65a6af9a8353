"""
Booking read side

Lookups used by the invoice page and the reservation list. A reservation
that the actor may not see is reported as not found, so reservation
numbers cannot be probed.
"""

from typing import Optional
import logging

from django.db.models import Q

from shared.domain.actors import Actor
from apps.bookings.domain.entities import Reservation
from apps.bookings.domain.exceptions import NotFoundError
from apps.bookings.domain.repositories import AbstractReservationRepository
from apps.bookings.models import Reservation as ReservationModel

logger = logging.getLogger(__name__)


def _default_repo() -> AbstractReservationRepository:
    from apps.bookings.infrastructure.repositories import DjangoReservationRepository

    return DjangoReservationRepository()


def get_reservation_for(
    actor: Actor,
    reservation_id: Optional[int] = None,
    reservation_number: str = '',
    guest_email: str = '',
    reservation_repo: Optional[AbstractReservationRepository] = None,
) -> Reservation:
    """
    Load a reservation the actor is allowed to see

    Admins see everything, renters their own reservations, homeowners the
    reservations on their properties. A guest checkout is visible to
    whoever presents the reservation number together with its email.

    Raises:
        NotFoundError
    """
    repo = reservation_repo or _default_repo()
    if reservation_id is not None:
        reservation = repo.get(reservation_id)
    else:
        reservation = repo.get_by_reference(reservation_number)

    if not reservation.can_be_viewed_by(actor, guest_email):
        logger.info(
            "Reservation %s hidden from %s actor %s",
            reservation.reservation_number, actor.role.value, actor.user_id,
        )
        raise NotFoundError(f"Reservation {reservation_number or reservation_id} not found.")
    return reservation


def visible_reservations(actor: Actor):
    """Queryset of reservation rows listed for the actor"""
    queryset = ReservationModel.objects.select_related("property")
    if actor.is_admin:
        return queryset
    if not actor.is_authenticated:
        return queryset.none()
    return queryset.filter(Q(renter_id=actor.user_id) | Q(property__owner_id=actor.user_id))
