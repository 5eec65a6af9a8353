"""API views for the booking domain."""

from __future__ import annotations

from rest_framework import status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .api import actor_from_request
from .application.command_handlers import (
    CancelReservationCommand,
    CancelReservationHandler,
    CompleteReservationCommand,
    CompleteReservationHandler,
    CreateReservationCommand,
    CreateReservationHandler,
    UpdateReservationStatusCommand,
    UpdateReservationStatusHandler,
)
from .application.queries import get_reservation_for, visible_reservations
from .filters import ReservationFilterSet
from .infrastructure.repositories import to_entity
from .models import Reservation
from .serializers import (
    CancelByReferenceSerializer,
    CancellationSerializer,
    ReservationCreateSerializer,
    ReservationSerializer,
    StatusUpdateSerializer,
)


class ReservationViewSet(viewsets.GenericViewSet):
    """Reservations: booking, invoice lookup, cancellation and status changes.

    Authorization is decided by the engine from the request actor, so the
    view itself admits anonymous callers (guest checkout).
    """

    queryset = Reservation.objects.all()
    filterset_class = ReservationFilterSet
    lookup_value_regex = r"\d+"

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return ReservationCreateSerializer
        if self.action == "cancel_by_reference":
            return CancelByReferenceSerializer
        if self.action == "update_status":
            return StatusUpdateSerializer
        return ReservationSerializer

    def get_queryset(self):  # type: ignore
        return visible_reservations(actor_from_request(self.request))

    def _render(self, reservation, http_status=status.HTTP_200_OK):
        return Response(ReservationSerializer(reservation).data, status=http_status)

    def list(self, request, *args, **kwargs):  # type: ignore
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        rows = page if page is not None else list(queryset)
        data = ReservationSerializer([to_entity(row) for row in rows], many=True).data
        if page is not None:
            return self.get_paginated_response(data)
        return Response(data)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = ReservationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        reservation = CreateReservationHandler().handle(CreateReservationCommand(
            actor=actor_from_request(request),
            property_id=data["property"],
            start_date=data["start_date"],
            end_date=data["end_date"],
            guest=serializer.guest_contact(),
        ))
        return self._render(reservation, status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None, *args, **kwargs):  # type: ignore
        reservation = get_reservation_for(
            actor_from_request(request),
            reservation_id=int(pk),
            guest_email=request.query_params.get("email", ""),
        )
        return self._render(reservation)

    @action(detail=False, methods=["get"], url_path=r"by-reference/(?P<reference>[^/]+)")
    def by_reference(self, request, reference=None):  # type: ignore
        reservation = get_reservation_for(
            actor_from_request(request),
            reservation_number=reference,
            guest_email=request.query_params.get("email", ""),
        )
        return self._render(reservation)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        outcome = CancelReservationHandler().handle(CancelReservationCommand(
            actor=actor_from_request(request),
            reservation_id=int(pk),
            guest_email=request.data.get("email", ""),
        ))
        return Response(CancellationSerializer(outcome).data)

    @action(detail=False, methods=["post"], url_path="cancel-by-reference")
    def cancel_by_reference(self, request):  # type: ignore
        serializer = CancelByReferenceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        outcome = CancelReservationHandler().handle(CancelReservationCommand(
            actor=actor_from_request(request),
            reservation_number=serializer.validated_data["reservation_number"],
            guest_email=serializer.validated_data["email"],
        ))
        return Response(CancellationSerializer(outcome).data)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):  # type: ignore
        reservation = CompleteReservationHandler().handle(CompleteReservationCommand(
            actor=actor_from_request(request),
            reservation_id=int(pk),
        ))
        return self._render(reservation)

    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request, pk=None):  # type: ignore
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        outcome = UpdateReservationStatusHandler().handle(UpdateReservationStatusCommand(
            actor=actor_from_request(request),
            reservation_id=int(pk),
            status=serializer.validated_data["status"],
        ))
        if outcome.quote is not None:
            return Response(CancellationSerializer(outcome).data)
        return Response({"reservation": ReservationSerializer(outcome.reservation).data})
