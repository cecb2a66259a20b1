"""Admin registration for fields."""

from __future__ import annotations

from django.contrib import admin

from .models import Field, FieldAvailability, FieldCategory, FieldClosure


class FieldAvailabilityInline(admin.TabularInline):
    model = FieldAvailability
    extra = 0


class FieldClosureInline(admin.TabularInline):
    model = FieldClosure
    extra = 0


@admin.register(FieldCategory)
class FieldCategoryAdmin(admin.ModelAdmin):
    list_display = ("title", "created_at")
    search_fields = ("title",)


@admin.register(Field)
class FieldAdmin(admin.ModelAdmin):
    list_display = ("title", "city", "category", "merchant", "price_per_hour", "status", "created_at")
    list_filter = ("status", "city", "category")
    search_fields = ("title", "address", "city", "merchant__name")
    readonly_fields = ("created_at", "updated_at")
    inlines = [FieldAvailabilityInline, FieldClosureInline]


@admin.register(FieldClosure)
class FieldClosureAdmin(admin.ModelAdmin):
    list_display = ("field", "date", "reason")
    list_filter = ("date",)
    search_fields = ("field__title", "reason")
