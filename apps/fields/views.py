"""API views for fields, their schedules and slot grids."""

from __future__ import annotations

from django.db.models import Q  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from . import services
from .filters import FieldFilterSet
from .models import Field
from .serializers import (
    DaySlotsSerializer,
    FieldAvailabilitySerializer,
    FieldClosureSerializer,
    FieldSerializer,
    FieldWriteSerializer,
    WeeklyScheduleWriteSerializer,
)


class FieldViewSet(viewsets.ModelViewSet):
    """Public field catalogue; owners manage their fields, schedules and closures."""

    queryset = Field.objects.select_related("category", "merchant").all()
    serializer_class = FieldSerializer
    filterset_class = FieldFilterSet
    permission_classes = [permissions.IsAuthenticatedOrReadOnly]
    lookup_value_regex = r"\d+"

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        user = self.request.user
        if user.is_authenticated and hasattr(user, "is_platform_superuser") and user.is_platform_superuser():
            return qs
        if user.is_authenticated and hasattr(user, "is_merchant") and user.is_merchant():
            merchant = user.get_merchant()
            if merchant is not None:
                return qs.filter(Q(status=Field.Status.ACTIVE) | Q(merchant=merchant))
        return qs.filter(status=Field.Status.ACTIVE)

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "update", "partial_update"}:
            return FieldWriteSerializer
        return FieldSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        field = services.create_field(request.user, serializer.validated_data)
        return Response(FieldSerializer(field).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):  # type: ignore
        partial = kwargs.pop("partial", False)
        serializer = self.get_serializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        field = services.update_field(request.user, kwargs["pk"], serializer.validated_data)
        return Response(FieldSerializer(field).data)

    def destroy(self, request, *args, **kwargs):  # type: ignore
        services.delete_field(request.user, kwargs["pk"])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"], permission_classes=[permissions.AllowAny])
    def slots(self, request, pk=None):  # type: ignore
        params = request.query_params
        days = services.resolve_slots(
            pk,
            params.get("date"),
            num_days=params.get("days", 1),
            slot_minutes=params.get("slot_minutes"),
        )
        return Response({"field_id": int(pk), "days": DaySlotsSerializer(days, many=True).data})

    @action(detail=True, methods=["get", "put"])
    def availability(self, request, pk=None):  # type: ignore
        if request.method == "GET":
            items = services.get_weekly_schedule(pk)
            return Response({"items": FieldAvailabilitySerializer(items, many=True).data})

        field = services.ensure_merchant_owns_field(request.user, pk)
        serializer = WeeklyScheduleWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        created = services.replace_weekly_schedule(field, serializer.validated_data["availability"])
        return Response({"items": FieldAvailabilitySerializer(created, many=True).data})

    @action(detail=True, methods=["get", "post"], permission_classes=[permissions.IsAuthenticated])
    def closures(self, request, pk=None):  # type: ignore
        field = services.ensure_merchant_owns_field(request.user, pk)
        if request.method == "GET":
            return Response(FieldClosureSerializer(field.closures.all(), many=True).data)

        serializer = FieldClosureSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        closure = services.add_closure(
            field,
            serializer.validated_data["date"],
            serializer.validated_data.get("reason"),
        )
        return Response(FieldClosureSerializer(closure).data, status=status.HTTP_201_CREATED)

    @action(
        detail=True,
        methods=["delete"],
        url_path=r"closures/(?P<closure_id>\d+)",
        permission_classes=[permissions.IsAuthenticated],
    )
    def remove_closure(self, request, pk=None, closure_id=None):  # type: ignore
        field = services.ensure_merchant_owns_field(request.user, pk)
        services.remove_closure(field, closure_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
