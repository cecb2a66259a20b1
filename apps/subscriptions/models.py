"""Subscription domain models for FieldHub."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class SubscriptionType(models.TextChoices):
    MONTHLY = "monthly", _("Monthly")
    QUARTERLY = "quarterly", _("Quarterly")
    YEARLY = "yearly", _("Yearly")


SUBSCRIPTION_MONTHS = {
    SubscriptionType.MONTHLY: 1,
    SubscriptionType.QUARTERLY: 3,
    SubscriptionType.YEARLY: 12,
}


def default_currency() -> str:
    return settings.MARKETPLACE_CURRENCY


class FieldSubscriptionPlan(models.Model):
    """Merchant pricing template for one subscription type of a field."""

    class Visibility(models.TextChoices):
        PUBLIC = "public", _("Public")
        PRIVATE = "private", _("Private")

    field = models.ForeignKey(
        "fields.Field",
        on_delete=models.CASCADE,
        related_name="subscription_plans",
    )
    merchant = models.ForeignKey(
        "users.Merchant",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="subscription_plans",
    )
    type = models.CharField(max_length=20, choices=SubscriptionType.choices)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    currency = models.CharField(max_length=10, default=default_currency)
    features = models.JSONField(default=list, blank=True)
    visibility = models.CharField(max_length=20, choices=Visibility.choices, default=Visibility.PUBLIC)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Subscription plan")
        verbose_name_plural = _("Subscription plans")
        ordering = ["field_id", "type"]
        constraints = [
            models.UniqueConstraint(fields=["field", "type"], name="unique_plan_per_field_type"),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.get_type_display()})"


class FieldSubscription(models.Model):
    """A user's access period to a field.

    At most one period per (field, user) is current; a renewal is stored
    as a further active row whose start follows the current end date.
    """

    class Status(models.TextChoices):
        ACTIVE = "active", _("Active")
        CANCELLED = "cancelled", _("Cancelled")
        EXPIRED = "expired", _("Expired")

    field = models.ForeignKey(
        "fields.Field",
        on_delete=models.CASCADE,
        related_name="subscriptions",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="field_subscriptions",
    )
    type = models.CharField(max_length=20, choices=SubscriptionType.choices, default=SubscriptionType.MONTHLY)
    plan = models.ForeignKey(
        FieldSubscriptionPlan,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="subscriptions",
    )
    price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=10, default=default_currency)
    start_date = models.DateField()
    end_date = models.DateField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Field subscription")
        verbose_name_plural = _("Field subscriptions")
        ordering = ["-start_date"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="subscription_end_not_before_start",
            ),
        ]
        indexes = [
            models.Index(fields=["field", "user", "status"], name="subscription_lookup_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.get_type_display()} subscription #{self.pk} ({self.start_date} - {self.end_date})"
