"""Admin registration for subscriptions."""

from __future__ import annotations

from django.contrib import admin

from .models import FieldSubscription, FieldSubscriptionPlan


@admin.register(FieldSubscriptionPlan)
class FieldSubscriptionPlanAdmin(admin.ModelAdmin):
    list_display = ("title", "field", "merchant", "type", "price", "currency", "visibility", "is_active")
    list_filter = ("type", "visibility", "is_active")
    search_fields = ("title", "field__title", "merchant__name")
    readonly_fields = ("created_at", "updated_at")


@admin.register(FieldSubscription)
class FieldSubscriptionAdmin(admin.ModelAdmin):
    list_display = ("id", "field", "user", "type", "start_date", "end_date", "status", "price", "currency")
    list_filter = ("status", "type")
    search_fields = ("field__title", "user__email")
    readonly_fields = ("created_at", "updated_at")
