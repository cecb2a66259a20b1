"""Serializers for stores and products."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from shared.domain.money import round_money

from .models import Product, Store


class StoreSerializer(serializers.ModelSerializer):
    merchant_id = serializers.ReadOnlyField()

    class Meta:
        model = Store
        fields = ["id", "merchant_id", "name", "image", "is_active", "created_at", "updated_at"]
        read_only_fields = fields


class StoreWriteSerializer(serializers.ModelSerializer):
    merchant_id = serializers.IntegerField(min_value=1, required=False)

    class Meta:
        model = Store
        fields = ["name", "image", "is_active", "merchant_id"]


class ProductSerializer(serializers.ModelSerializer):
    merchant_id = serializers.ReadOnlyField()
    store_id = serializers.ReadOnlyField()
    effective_price = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "merchant_id",
            "store_id",
            "title",
            "description",
            "price",
            "discount_percentage",
            "effective_price",
            "quantity",
            "images",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_effective_price(self, obj: Product) -> str:
        return str(round_money(obj.effective_price))


class ProductWriteSerializer(serializers.ModelSerializer):
    store_id = serializers.PrimaryKeyRelatedField(
        source="store",
        queryset=Store.objects.all(),
        allow_null=True,
        required=False,
    )
    images = serializers.ListField(child=serializers.CharField(max_length=500), required=False)

    class Meta:
        model = Product
        fields = ["title", "description", "price", "discount_percentage", "quantity", "images", "status", "store_id"]
