"""Catalog models: merchant stores and products."""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.money import effective_price


class Store(models.Model):
    """A merchant's storefront; products may optionally belong to one."""

    merchant = models.ForeignKey(
        "users.Merchant",
        on_delete=models.CASCADE,
        related_name="stores",
    )
    name = models.CharField(max_length=255)
    image = models.CharField(max_length=500, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Store")
        verbose_name_plural = _("Stores")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Product(models.Model):
    """Merchant inventory item."""

    merchant = models.ForeignKey(
        "users.Merchant",
        on_delete=models.CASCADE,
        related_name="products",
    )
    store = models.ForeignKey(
        Store,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )
    title = models.CharField(max_length=150)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    discount_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    quantity = models.PositiveIntegerField(default=0, help_text=_("Units in stock."))
    images = models.JSONField(default=list, blank=True)
    status = models.BooleanField(default=True, help_text=_("Whether the product can be bought."))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Product")
        verbose_name_plural = _("Products")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["merchant", "status"], name="product_merchant_status_idx"),
        ]

    def __str__(self) -> str:
        return self.title

    @property
    def effective_price(self) -> Decimal:
        """Price after discount, not yet rounded."""
        return effective_price(self.price, self.discount_percentage)

    @property
    def primary_image(self) -> str | None:
        if isinstance(self.images, list) and self.images:
            return str(self.images[0]) or None
        return None
