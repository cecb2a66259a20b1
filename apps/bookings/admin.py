"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import FieldBooking


@admin.register(FieldBooking)
class FieldBookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "field",
        "user",
        "booking_date",
        "start_time",
        "end_time",
        "status",
        "total_price",
        "created_at",
    )
    list_filter = ("status", "booking_date")
    search_fields = ("field__title", "user__email")
    readonly_fields = ("created_at", "updated_at")
