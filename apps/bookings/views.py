"""API views for the booking domain."""

from __future__ import annotations

from django.db.models import Q  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .filters import FieldBookingFilterSet
from .models import FieldBooking
from .serializers import BookingCreateSerializer, BookingSerializer
from .services import create_booking, transition_booking


class BookingViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Create bookings and move them through their lifecycle."""

    queryset = FieldBooking.objects.select_related("field", "user").all()
    permission_classes = [permissions.IsAuthenticated]
    filterset_class = FieldBookingFilterSet
    lookup_value_regex = r"\d+"

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        return BookingSerializer

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if not user.is_authenticated:
            return qs.none()
        if hasattr(user, "is_platform_superuser") and user.is_platform_superuser():
            return qs
        if hasattr(user, "is_merchant") and user.is_merchant():
            merchant = user.get_merchant()
            if merchant is not None:
                return qs.filter(Q(user=user) | Q(field__merchant=merchant))
        return qs.filter(user=user)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        booking = create_booking(
            data["field_id"],
            request.user,
            data["booking_date"],
            data["start_time"],
            data["end_time"],
            total_price=data.get("total_price"),
        )
        read_serializer = BookingSerializer(booking, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    def _transition(self, request, pk, new_status):  # type: ignore
        booking = transition_booking(pk, request.user, new_status)
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        return self._transition(request, pk, FieldBooking.Status.CANCELLED)

    @action(detail=True, methods=["post"])
    def confirm(self, request, pk=None):  # type: ignore
        return self._transition(request, pk, FieldBooking.Status.CONFIRMED)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):  # type: ignore
        return self._transition(request, pk, FieldBooking.Status.COMPLETED)
