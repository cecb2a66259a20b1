"""Admin registration for the catalog."""

from __future__ import annotations

from django.contrib import admin

from .models import Product, Store


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    list_display = ("name", "merchant", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "merchant__name")


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("title", "merchant", "store", "price", "discount_percentage", "quantity", "status")
    list_filter = ("status", "merchant")
    search_fields = ("title", "merchant__name", "store__name")
    readonly_fields = ("created_at", "updated_at")
