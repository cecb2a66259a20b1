"""Admin registration for carts and orders."""

from __future__ import annotations

from django.contrib import admin

from .models import Cart, CartItem, Order, OrderItem


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    raw_id_fields = ("product",)


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("user__email",)
    inlines = [CartItemInline]


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("product", "product_title", "product_image", "quantity", "unit_price", "line_total")
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "merchant", "store", "status", "total", "currency", "created_at")
    list_filter = ("status", "currency")
    search_fields = ("user__email", "merchant__name")
    readonly_fields = ("subtotal", "total", "created_at", "updated_at")
    inlines = [OrderItemInline]
