"""Serializers for the fields domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Field, FieldAvailability, FieldCategory, FieldClosure


class FieldCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = FieldCategory
        fields = ["id", "title", "description"]


class FieldSerializer(serializers.ModelSerializer):
    category = FieldCategorySerializer(read_only=True)
    merchant_id = serializers.ReadOnlyField()
    merchant_name = serializers.ReadOnlyField(source="merchant.name", default=None)

    class Meta:
        model = Field
        fields = [
            "id",
            "title",
            "description",
            "address",
            "city",
            "latitude",
            "longitude",
            "price_per_hour",
            "category",
            "merchant_id",
            "merchant_name",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class FieldWriteSerializer(serializers.ModelSerializer):
    """Create/update payload; ownership and merchant assignment are checked by the service."""

    category_id = serializers.PrimaryKeyRelatedField(
        source="category",
        queryset=FieldCategory.objects.all(),
        allow_null=True,
        required=False,
    )
    merchant_id = serializers.IntegerField(min_value=1, required=False)

    class Meta:
        model = Field
        fields = [
            "title",
            "description",
            "address",
            "city",
            "latitude",
            "longitude",
            "price_per_hour",
            "category_id",
            "merchant_id",
            "status",
        ]


class FieldAvailabilitySerializer(serializers.ModelSerializer):
    start_time = serializers.TimeField(format="%H:%M")
    end_time = serializers.TimeField(format="%H:%M")

    class Meta:
        model = FieldAvailability
        fields = ["id", "day_of_week", "start_time", "end_time", "is_active"]
        read_only_fields = fields


class WeeklyScheduleWriteSerializer(serializers.Serializer):
    """Payload of a full weekly schedule replacement.

    Individual windows are validated by the service so that the error
    messages are the same for every caller.
    """

    availability = serializers.ListField(child=serializers.DictField(), allow_empty=True)


class FieldClosureSerializer(serializers.ModelSerializer):
    class Meta:
        model = FieldClosure
        fields = ["id", "date", "reason", "created_at"]
        read_only_fields = ["id", "created_at"]


class SlotSerializer(serializers.Serializer):
    start_time = serializers.CharField()
    end_time = serializers.CharField()
    booked = serializers.BooleanField()


class DaySlotsSerializer(serializers.Serializer):
    date = serializers.CharField()
    day_of_week = serializers.IntegerField()
    is_closed = serializers.BooleanField()
    reason = serializers.CharField(allow_null=True)
    slot_minutes = serializers.IntegerField()
    slots = SlotSerializer(many=True)
