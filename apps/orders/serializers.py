"""Serializers for carts and orders."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Order, OrderItem


class CartItemAddSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(required=False, default=1)


class CartItemUpdateSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()


class CartLineSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    product_id = serializers.IntegerField()
    title = serializers.CharField()
    image = serializers.CharField(allow_null=True)
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2)


class CartSummarySerializer(serializers.Serializer):
    items_count = serializers.IntegerField()
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()


class CartRefSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    status = serializers.CharField()


class CartSerializer(serializers.Serializer):
    """Shape of ``services.cart_snapshot``."""

    cart = CartRefSerializer()
    items = CartLineSerializer(many=True)
    summary = CartSummarySerializer()


class OrderItemSerializer(serializers.ModelSerializer):
    product_id = serializers.ReadOnlyField()

    class Meta:
        model = OrderItem
        fields = ["id", "product_id", "product_title", "product_image", "quantity", "unit_price", "line_total"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read representation of an order with its lines."""

    user_id = serializers.ReadOnlyField()
    merchant_id = serializers.ReadOnlyField()
    store_id = serializers.ReadOnlyField()
    store_name = serializers.ReadOnlyField(source="store.name", default=None)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "user_id",
            "merchant_id",
            "store_id",
            "store_name",
            "status",
            "currency",
            "subtotal",
            "total",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.CharField()


class CheckoutSummarySerializer(serializers.Serializer):
    orders_count = serializers.IntegerField()
    items_count = serializers.IntegerField()
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()


class CheckoutResultSerializer(serializers.Serializer):
    orders = OrderSerializer(many=True)
    summary = CheckoutSummarySerializer()
    cart = CartRefSerializer()


class OrderDetailSerializer(serializers.Serializer):
    order = OrderSerializer()
    summary = CartSummarySerializer()


class OrderStatsSerializer(serializers.Serializer):
    total_orders = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    pending_orders = serializers.IntegerField()
    paid_orders = serializers.IntegerField()
    cancelled_orders = serializers.IntegerField()
    completed_orders = serializers.IntegerField()


class OrderListWithStatsSerializer(serializers.Serializer):
    items = OrderSerializer(many=True)
    stats = OrderStatsSerializer()
