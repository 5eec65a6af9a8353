"""API views for managing reviews."""

from __future__ import annotations

from rest_framework import mixins, status, viewsets  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.api import actor_from_request

from . import services
from .filters import RenterReviewFilterSet, ReviewFilterSet
from .models import RenterReview, Review
from .serializers import (
    RenterReviewCreateSerializer,
    RenterReviewSerializer,
    ReviewCreateSerializer,
    ReviewSerializer,
)


class ReviewViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Property reviews: public listing, renter submission, admin deletion."""

    queryset = Review.objects.select_related('property', 'author', 'reservation').all()
    lookup_value_regex = r'\d+'
    filterset_class = ReviewFilterSet

    def get_serializer_class(self):  # type: ignore
        if self.action == 'create':
            return ReviewCreateSerializer
        return ReviewSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = ReviewCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        review = services.submit_review(
            actor_from_request(request),
            data['reservation_number'],
            data['rating'],
            data['comment'],
            property_id=data.get('property'),
        )
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None, *args, **kwargs):  # type: ignore
        services.delete_review(actor_from_request(request), int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)


class RenterReviewViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Homeowner reviews of renters."""

    queryset = RenterReview.objects.select_related('reviewer', 'reservation').all()
    lookup_value_regex = r'\d+'
    filterset_class = RenterReviewFilterSet

    def get_serializer_class(self):  # type: ignore
        if self.action == 'create':
            return RenterReviewCreateSerializer
        return RenterReviewSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = RenterReviewCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        review = services.submit_renter_review(
            actor_from_request(request),
            data['reservation_number'],
            data['rating'],
            data['comment'],
        )
        return Response(RenterReviewSerializer(review).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None, *args, **kwargs):  # type: ignore
        services.delete_renter_review(actor_from_request(request), int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)
