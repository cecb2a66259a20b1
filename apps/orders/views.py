"""API views for the cart and orders."""

from __future__ import annotations

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from . import services
from .serializers import (
    CartItemAddSerializer,
    CartItemUpdateSerializer,
    CartSerializer,
    CheckoutResultSerializer,
    OrderDetailSerializer,
    OrderListWithStatsSerializer,
    OrderSerializer,
    OrderStatusSerializer,
)


class CartViewSet(viewsets.ViewSet):
    """The current user's active cart."""

    permission_classes = [permissions.IsAuthenticated]

    def list(self, request):  # type: ignore
        return Response(CartSerializer(services.get_cart(request.user)).data)

    @action(detail=False, methods=["post"])
    def items(self, request):  # type: ignore
        serializer = CartItemAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        snapshot = services.add_item(
            request.user,
            serializer.validated_data["product_id"],
            serializer.validated_data["quantity"],
        )
        return Response(CartSerializer(snapshot).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["patch", "delete"], url_path=r"items/(?P<item_id>\d+)")
    def item(self, request, item_id=None):  # type: ignore
        if request.method == "DELETE":
            snapshot = services.remove_item(request.user, item_id)
            return Response(CartSerializer(snapshot).data)

        serializer = CartItemUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        snapshot = services.update_item(request.user, item_id, serializer.validated_data["quantity"])
        return Response(CartSerializer(snapshot).data)

    @action(detail=False, methods=["post"])
    def checkout(self, request):  # type: ignore
        result = services.checkout(request.user)
        return Response(CheckoutResultSerializer(result).data, status=status.HTTP_201_CREATED)


class OrderViewSet(viewsets.ViewSet):
    """Orders seen by their buyer, their merchant, or a platform superadmin."""

    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"

    def list(self, request):  # type: ignore
        orders = services.list_user_orders(request.user)
        return Response(OrderSerializer(orders, many=True).data)

    def retrieve(self, request, pk=None):  # type: ignore
        return Response(OrderDetailSerializer(services.get_user_order(request.user, pk)).data)

    @action(detail=False, methods=["get"])
    def merchant(self, request):  # type: ignore
        orders = services.list_merchant_orders(request.user)
        return Response(OrderSerializer(orders, many=True).data)

    @action(detail=False, methods=["get"], url_path="admin")
    def all_orders(self, request):  # type: ignore
        return Response(OrderListWithStatsSerializer(services.list_all_orders(request.user)).data)

    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request, pk=None):  # type: ignore
        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = services.update_order_status(pk, request.user, serializer.validated_data["status"])
        return Response(OrderSerializer(order).data)
