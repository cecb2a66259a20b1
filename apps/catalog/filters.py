"""FilterSet definitions for the catalog listings."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore

from .models import Product, Store


class StoreFilterSet(django_filters.FilterSet):
    merchant = django_filters.NumberFilter(field_name="merchant_id", lookup_expr="exact")

    class Meta:
        model = Store
        fields = ["merchant", "is_active"]


class ProductFilterSet(django_filters.FilterSet):
    search = django_filters.CharFilter(method="filter_search")
    merchant = django_filters.NumberFilter(field_name="merchant_id", lookup_expr="exact")
    store = django_filters.NumberFilter(field_name="store_id", lookup_expr="exact")
    price_min = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="price", lookup_expr="lte")

    class Meta:
        model = Product
        fields = ["search", "merchant", "store", "status"]

    def filter_search(self, queryset, name, value):  # type: ignore
        if not value:
            return queryset
        return queryset.filter(Q(title__icontains=value) | Q(description__icontains=value))
