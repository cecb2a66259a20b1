"""Tests for catalog product pricing helpers."""

from __future__ import annotations

from decimal import Decimal

from django.test import TestCase

from apps.catalog.models import Product
from apps.users.models import Merchant, User


class ProductTests(TestCase):
    def setUp(self) -> None:
        owner = User.objects.create_user(
            email="seller@example.com",
            password="SellerPass123",
            role=User.RoleChoices.MERCHANT,
        )
        self.merchant = Merchant.objects.create(user=owner, name="Sports Shop")

    def test_effective_price_applies_discount(self) -> None:
        product = Product.objects.create(
            merchant=self.merchant,
            title="Jersey",
            price=Decimal("80.00"),
            discount_percentage=Decimal("12.5"),
            quantity=1,
        )

        self.assertEqual(product.effective_price, Decimal("70.00"))

    def test_primary_image(self) -> None:
        with_images = Product(merchant=self.merchant, title="Cap", price=1, images=["cap.png", "cap-2.png"])
        without = Product(merchant=self.merchant, title="Cap", price=1)

        self.assertEqual(with_images.primary_image, "cap.png")
        self.assertIsNone(without.primary_image)
