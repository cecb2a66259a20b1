"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import FieldBooking


class BookingCreateSerializer(serializers.Serializer):
    """Booking request.

    Times are passed through as strings; the booking service owns their
    validation so that API and service callers see the same errors.
    """

    field_id = serializers.IntegerField(min_value=1)
    booking_date = serializers.CharField()
    start_time = serializers.CharField()
    end_time = serializers.CharField()
    total_price = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=0,
        required=False,
        allow_null=True,
    )


class BookingSerializer(serializers.ModelSerializer):
    """Read representation of a booking."""

    field_id = serializers.ReadOnlyField()
    field_title = serializers.ReadOnlyField(source="field.title")
    user_id = serializers.ReadOnlyField()
    start_time = serializers.TimeField(format="%H:%M", read_only=True)
    end_time = serializers.TimeField(format="%H:%M", read_only=True)

    class Meta:
        model = FieldBooking
        fields = [
            "id",
            "field_id",
            "field_title",
            "user_id",
            "booking_date",
            "start_time",
            "end_time",
            "status",
            "total_price",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
