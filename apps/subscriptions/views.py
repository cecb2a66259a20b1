"""API views for subscriptions and subscription plans."""

from __future__ import annotations

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.domain.exceptions import NotFound

from . import services
from .serializers import (
    FieldSubscriptionPlanSerializer,
    FieldSubscriptionSerializer,
    PlanWriteSerializer,
    SubscriptionCreateSerializer,
)


class SubscriptionViewSet(viewsets.ViewSet):
    """Subscribe to a field, list and cancel own subscriptions."""

    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"

    def list(self, request):  # type: ignore
        items = services.list_user_subscriptions(
            request.user,
            field_id=request.query_params.get("field_id") or None,
            status=request.query_params.get("status") or None,
        )
        return Response(FieldSubscriptionSerializer(items, many=True).data)

    def create(self, request):  # type: ignore
        serializer = SubscriptionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        subscription = services.create_or_renew_subscription(
            data["field_id"],
            request.user,
            data["type"],
            requested_start_date=data.get("start_date"),
        )
        return Response(FieldSubscriptionSerializer(subscription).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        subscription = services.cancel_subscription(pk, request.user)
        return Response(FieldSubscriptionSerializer(subscription).data)

    @action(detail=False, methods=["get"], url_path=r"fields/(?P<field_id>\d+)")
    def field_subscriptions(self, request, field_id=None):  # type: ignore
        items = services.list_field_subscriptions(
            request.user,
            field_id,
            status=request.query_params.get("status") or None,
        )
        return Response(FieldSubscriptionSerializer(items, many=True).data)


class SubscriptionPlanViewSet(viewsets.ViewSet):
    """Merchant subscription plans; listing is public."""

    permission_classes = [permissions.IsAuthenticatedOrReadOnly]
    lookup_value_regex = r"\d+"

    def list(self, request):  # type: ignore
        params = request.query_params
        plans = services.list_plans(
            request.user,
            field_id=params.get("field_id") or None,
            merchant_id=params.get("merchant_id") or None,
            type=params.get("type") or None,
            include_inactive=params.get("include_inactive") in ("1", "true", "True"),
        )
        return Response(FieldSubscriptionPlanSerializer(plans, many=True).data)

    def retrieve(self, request, pk=None):  # type: ignore
        plan = services.list_plans(request.user).filter(pk=pk).first()
        if plan is None:
            raise NotFound("Plan not found")
        return Response(FieldSubscriptionPlanSerializer(plan).data)

    def create(self, request):  # type: ignore
        serializer = PlanWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        plan, created = services.upsert_plan(
            request.user,
            data.pop("field_id"),
            data.pop("type"),
            data.pop("title"),
            data.pop("price"),
            **data,
        )
        return Response(
            FieldSubscriptionPlanSerializer(plan).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    @action(detail=True, methods=["post"])
    def toggle(self, request, pk=None):  # type: ignore
        plan = services.toggle_plan(request.user, pk)
        return Response(FieldSubscriptionPlanSerializer(plan).data)
