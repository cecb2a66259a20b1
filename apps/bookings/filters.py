"""FilterSet definitions for booking listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import FieldBooking


class FieldBookingFilterSet(django_filters.FilterSet):
    field = django_filters.NumberFilter(field_name="field_id", lookup_expr="exact")
    status = django_filters.ChoiceFilter(choices=FieldBooking.Status.choices)
    date_from = django_filters.DateFilter(field_name="booking_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="booking_date", lookup_expr="lte")
    active = django_filters.BooleanFilter(method="filter_active")

    class Meta:
        model = FieldBooking
        fields = ["field", "status", "date_from", "date_to"]

    def filter_active(self, queryset, name, value):  # type: ignore
        if value is None:
            return queryset
        if value:
            return queryset.filter(status__in=FieldBooking.ACTIVE_STATUSES)
        return queryset.exclude(status__in=FieldBooking.ACTIVE_STATUSES)
