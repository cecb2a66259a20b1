"""Domain models for bookable fields and their opening hours."""

from __future__ import annotations

from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class FieldCategory(models.Model):
    """Kind of venue (football pitch, padel court, ...)."""

    title = models.CharField(max_length=255, unique=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Field category")
        verbose_name_plural = _("Field categories")
        ordering = ["title"]

    def __str__(self) -> str:
        return self.title


class Field(models.Model):
    """A bookable venue owned by a merchant."""

    class Status(models.TextChoices):
        ACTIVE = "active", _("Active")
        DISABLED = "disabled", _("Disabled")

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    price_per_hour = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
    )
    category = models.ForeignKey(
        FieldCategory,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="fields",
    )
    merchant = models.ForeignKey(
        "users.Merchant",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="fields",
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Field")
        verbose_name_plural = _("Fields")
        ordering = ["title"]
        indexes = [
            models.Index(fields=["status", "city"], name="field_status_city_idx"),
            models.Index(fields=["merchant"], name="field_merchant_idx"),
        ]

    def __str__(self) -> str:
        return self.title

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE


class FieldAvailability(models.Model):
    """Recurring weekly opening window of a field."""

    class DayOfWeek(models.IntegerChoices):
        SUNDAY = 0, _("Sunday")
        MONDAY = 1, _("Monday")
        TUESDAY = 2, _("Tuesday")
        WEDNESDAY = 3, _("Wednesday")
        THURSDAY = 4, _("Thursday")
        FRIDAY = 5, _("Friday")
        SATURDAY = 6, _("Saturday")

    field = models.ForeignKey(Field, on_delete=models.CASCADE, related_name="availability")
    day_of_week = models.PositiveSmallIntegerField(
        choices=DayOfWeek.choices,
        validators=[MinValueValidator(0), MaxValueValidator(6)],
    )
    start_time = models.TimeField()
    end_time = models.TimeField()
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Field availability window")
        verbose_name_plural = _("Field availability windows")
        ordering = ["day_of_week", "start_time"]
        indexes = [
            models.Index(fields=["field", "day_of_week"], name="field_avail_field_day_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F("start_time")),
                name="field_availability_end_after_start",
            ),
            models.CheckConstraint(
                condition=models.Q(day_of_week__gte=0) & models.Q(day_of_week__lte=6),
                name="field_availability_day_of_week_range",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.field_id}: {self.get_day_of_week_display()} {self.start_time:%H:%M}-{self.end_time:%H:%M}"


class FieldClosure(models.Model):
    """A whole-day closure that overrides the weekly schedule."""

    field = models.ForeignKey(Field, on_delete=models.CASCADE, related_name="closures")
    date = models.DateField()
    reason = models.CharField(max_length=255, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Field closure")
        verbose_name_plural = _("Field closures")
        ordering = ["date"]
        constraints = [
            models.UniqueConstraint(fields=["field", "date"], name="unique_field_closure_per_date"),
        ]

    def __str__(self) -> str:
        return f"{self.field_id} closed on {self.date}"
