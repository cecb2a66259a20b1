"""Tests for decimal money helpers and the Money value object."""

from __future__ import annotations

from decimal import Decimal

from django.test import SimpleTestCase

from shared.domain.money import (
    effective_price,
    hourly_total,
    line_total,
    round_money,
    sum_money,
    to_decimal,
)
from shared.domain.value_objects import Money


class MoneyHelperTests(SimpleTestCase):
    def test_to_decimal_accepts_common_inputs(self) -> None:
        self.assertEqual(to_decimal(None), Decimal("0"))
        self.assertEqual(to_decimal(""), Decimal("0"))
        self.assertEqual(to_decimal(5), Decimal("5"))
        self.assertEqual(to_decimal("12.50"), Decimal("12.50"))
        with self.assertRaises(ValueError):
            to_decimal("twelve")

    def test_round_money_is_half_up(self) -> None:
        self.assertEqual(round_money("2.345"), Decimal("2.35"))
        self.assertEqual(round_money("2.344"), Decimal("2.34"))
        self.assertEqual(round_money(10), Decimal("10.00"))

    def test_effective_price_applies_clamped_discount(self) -> None:
        self.assertEqual(effective_price(Decimal("100"), 15), Decimal("85"))
        self.assertEqual(effective_price(Decimal("100"), 150), Decimal("0"))
        self.assertEqual(effective_price(Decimal("100"), -5), Decimal("100"))
        self.assertEqual(effective_price(Decimal("100"), None), Decimal("100"))

    def test_effective_price_is_not_rounded(self) -> None:
        self.assertEqual(effective_price(Decimal("9.99"), Decimal("33")), Decimal("6.6933"))

    def test_line_total_rounds_product(self) -> None:
        self.assertEqual(line_total(Decimal("6.6933"), 3), Decimal("20.08"))
        self.assertEqual(line_total("33.335", 3), Decimal("100.01"))

    def test_sum_money_and_hourly_total(self) -> None:
        self.assertEqual(sum_money([Decimal("1.10"), "2.20", 3]), Decimal("6.30"))
        self.assertEqual(sum_money([]), Decimal("0.00"))
        self.assertEqual(hourly_total(Decimal("100"), 90), Decimal("150.00"))
        self.assertEqual(hourly_total(Decimal("80"), 60), Decimal("80.00"))


class MoneyValueObjectTests(SimpleTestCase):
    def test_addition_within_currency(self) -> None:
        total = Money(Decimal("10.50"), "SAR") + Money("4.25", "SAR")
        self.assertEqual(total, Money(Decimal("14.75"), "SAR"))
        self.assertEqual(str(total), "14.75 SAR")

    def test_rejects_mixed_currencies_and_negative_amounts(self) -> None:
        with self.assertRaises(ValueError):
            Money(Decimal("1"), "SAR") + Money(Decimal("1"), "USD")
        with self.assertRaises(ValueError):
            Money(Decimal("-1"), "SAR")
        with self.assertRaises(TypeError):
            Money(Decimal("1"), "SAR") + Decimal("1")

    def test_rounded(self) -> None:
        self.assertEqual(Money(Decimal("1.005")).rounded().amount, Decimal("1.01"))
