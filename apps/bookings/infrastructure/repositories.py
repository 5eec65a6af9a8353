"""
Django ORM implementation of the reservation repository

Maps between ``apps.bookings.models.Reservation`` rows and the domain
aggregate. Writes after creation go through RESERVATION_MUTABLE_FIELDS
only; every other column is fixed once the row exists.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from django.db import IntegrityError, transaction  # type: ignore

from shared.domain.value_objects import DateRange, Money
from apps.bookings.domain.entities import GuestContact, Reservation, ReservationStatus
from apps.bookings.domain.exceptions import DuplicateReferenceError, NotFoundError
from apps.bookings.domain.repositories import AbstractReservationRepository, PropertySnapshot
from apps.bookings.models import Reservation as ReservationModel
from apps.properties.models import Property

logger = logging.getLogger(__name__)

RESERVATION_MUTABLE_FIELDS = (
    "status",
    "cancellation_fee",
    "refund_amount",
    "cancelled_at",
    "cancelled_by_role",
)


def _money_or_none(value):
    return Money(value) if value is not None else None


def to_entity(row: ReservationModel) -> Reservation:
    guest = None
    if row.renter_id is None:
        guest = GuestContact(
            first_name=row.guest_first_name,
            last_name=row.guest_last_name,
            middle_initial=row.guest_middle_initial,
            email=row.guest_email,
            payment_token=row.guest_payment_token,
        )

    return Reservation(
        id=row.pk,
        property_id=row.property_id,
        property_owner_id=row.property.owner_id,
        dates=DateRange(row.start_date, row.end_date),
        nights=row.nights,
        nightly_rate=Money(row.nightly_rate),
        subtotal=Money(row.subtotal),
        tax=Money(row.tax),
        total=Money(row.total_price),
        renter_id=row.renter_id,
        guest=guest,
        reservation_number=row.reservation_number,
        status=ReservationStatus(row.status),
        cancellation_fee=_money_or_none(row.cancellation_fee),
        refund_amount=_money_or_none(row.refund_amount),
        cancelled_at=row.cancelled_at,
        cancelled_by_role=row.cancelled_by_role,
        created_at=row.created_at,
    )


class DjangoReservationRepository(AbstractReservationRepository):

    def _queryset(self, lock: bool = False):
        queryset = ReservationModel.objects.select_related("property")
        if lock:
            queryset = queryset.select_for_update()
        return queryset

    def lock_property(self, property_id: int) -> PropertySnapshot:
        try:
            prop = Property.objects.select_for_update().get(pk=property_id)
        except Property.DoesNotExist:
            raise NotFoundError(f"Property {property_id} not found.")

        return PropertySnapshot(
            id=prop.pk,
            owner_id=prop.owner_id,
            nightly_rate=Money(prop.price_per_night),
            is_bookable=prop.is_bookable,
        )

    def find_overlapping(
        self,
        property_id: int,
        dates: DateRange,
        statuses: Iterable[ReservationStatus],
    ) -> List[Reservation]:
        rows = self._queryset().filter(
            property_id=property_id,
            status__in=[ReservationStatus(s).value for s in statuses],
            start_date__lt=dates.end_date,
            end_date__gt=dates.start_date,
        )
        return [to_entity(row) for row in rows]

    def add(self, reservation: Reservation) -> Reservation:
        guest = reservation.guest
        row = ReservationModel(
            property_id=reservation.property_id,
            renter_id=reservation.renter_id,
            reservation_number=reservation.reservation_number,
            start_date=reservation.start_date,
            end_date=reservation.end_date,
            nights=reservation.nights,
            nightly_rate=reservation.nightly_rate.amount,
            subtotal=reservation.subtotal.amount,
            tax=reservation.tax.amount,
            total_price=reservation.total.amount,
            status=reservation.status.value,
            guest_first_name=guest.first_name if guest else "",
            guest_last_name=guest.last_name if guest else "",
            guest_middle_initial=guest.middle_initial if guest else "",
            guest_email=guest.email if guest else "",
            guest_payment_token=guest.payment_token if guest else "",
        )

        try:
            # savepoint, so the outer transaction survives a collision
            with transaction.atomic():
                row.save(force_insert=True)
        except IntegrityError:
            if ReservationModel.objects.filter(reservation_number=row.reservation_number).exists():
                raise DuplicateReferenceError(
                    f"Reservation number {row.reservation_number} is already in use."
                )
            raise

        reservation.id = row.pk
        reservation.created_at = row.created_at
        logger.debug("Inserted reservation %s (ID: %s)", row.reservation_number, row.pk)
        return reservation

    def update_status(self, reservation: Reservation) -> Reservation:
        row = ReservationModel(
            pk=reservation.id,
            status=reservation.status.value,
            cancellation_fee=reservation.cancellation_fee.amount if reservation.cancellation_fee else None,
            refund_amount=reservation.refund_amount.amount if reservation.refund_amount else None,
            cancelled_at=reservation.cancelled_at,
            cancelled_by_role=reservation.cancelled_by_role,
        )
        row.save(update_fields=[*RESERVATION_MUTABLE_FIELDS, "updated_at"])
        return reservation

    def get(self, reservation_id: int, lock: bool = False) -> Reservation:
        try:
            row = self._queryset(lock).get(pk=reservation_id)
        except ReservationModel.DoesNotExist:
            raise NotFoundError(f"Reservation {reservation_id} not found.")
        return to_entity(row)

    def get_by_reference(self, reservation_number: str, lock: bool = False) -> Reservation:
        try:
            row = self._queryset(lock).get(reservation_number=reservation_number)
        except ReservationModel.DoesNotExist:
            raise NotFoundError(f"Reservation {reservation_number} not found.")
        return to_entity(row)
