"""Serializers for subscriptions and subscription plans."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import FieldSubscription, FieldSubscriptionPlan


class SubscriptionCreateSerializer(serializers.Serializer):
    field_id = serializers.IntegerField(min_value=1)
    type = serializers.CharField(default="monthly")
    start_date = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class FieldSubscriptionSerializer(serializers.ModelSerializer):
    field_id = serializers.ReadOnlyField()
    field_title = serializers.ReadOnlyField(source="field.title")
    user_id = serializers.ReadOnlyField()
    plan_id = serializers.ReadOnlyField()

    class Meta:
        model = FieldSubscription
        fields = [
            "id",
            "field_id",
            "field_title",
            "user_id",
            "plan_id",
            "type",
            "price",
            "currency",
            "start_date",
            "end_date",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PlanWriteSerializer(serializers.Serializer):
    """Plan upsert payload; normalization and ownership live in the service."""

    field_id = serializers.IntegerField(min_value=1)
    type = serializers.CharField()
    title = serializers.CharField(allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    price = serializers.CharField()
    currency = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    features = serializers.JSONField(required=False, allow_null=True)
    visibility = serializers.CharField(required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)


class FieldSubscriptionPlanSerializer(serializers.ModelSerializer):
    field_id = serializers.ReadOnlyField()
    field_title = serializers.ReadOnlyField(source="field.title")
    merchant_id = serializers.ReadOnlyField()

    class Meta:
        model = FieldSubscriptionPlan
        fields = [
            "id",
            "field_id",
            "field_title",
            "merchant_id",
            "type",
            "title",
            "description",
            "price",
            "currency",
            "features",
            "visibility",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
