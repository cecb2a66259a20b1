"""FilterSet definitions for field listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Field


class FieldFilterSet(django_filters.FilterSet):
    city = django_filters.CharFilter(field_name="city", lookup_expr="icontains")
    category = django_filters.NumberFilter(field_name="category_id", lookup_expr="exact")
    merchant = django_filters.NumberFilter(field_name="merchant_id", lookup_expr="exact")
    price_min = django_filters.NumberFilter(field_name="price_per_hour", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="price_per_hour", lookup_expr="lte")

    class Meta:
        model = Field
        fields = ["city", "category", "merchant", "status"]
