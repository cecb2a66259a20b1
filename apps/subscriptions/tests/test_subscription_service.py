"""Tests for the subscription lifecycle."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest import mock

from django.test import TestCase

from apps.fields.models import Field
from apps.subscriptions import services
from apps.subscriptions.domain.events import SubscriptionStarted
from apps.subscriptions.models import FieldSubscription, FieldSubscriptionPlan
from apps.users.models import Merchant, User
from shared.application.message_bus import message_bus
from shared.domain.exceptions import Forbidden, InvalidStateTransition, InvalidType, NotFound


def _today(value: date):
    return mock.patch("apps.subscriptions.services.utc_today", return_value=value)


class SubscriptionEndDateTests(TestCase):
    def test_period_ends_the_day_before_the_next_one_starts(self) -> None:
        self.assertEqual(services.subscription_end_date(date(2030, 2, 1), 1), date(2030, 2, 28))
        self.assertEqual(services.subscription_end_date(date(2030, 1, 15), 3), date(2030, 4, 14))
        self.assertEqual(services.subscription_end_date(date(2030, 1, 1), 12), date(2030, 12, 31))

    def test_type_aliases(self) -> None:
        self.assertEqual(services.normalize_subscription_type(" Month "), "monthly")
        self.assertEqual(services.normalize_subscription_type("year"), "yearly")
        with self.assertRaises(InvalidType):
            services.normalize_subscription_type("weekly")

    def test_parse_features(self) -> None:
        self.assertEqual(services.parse_features('["Lights", "Lockers"]'), ["Lights", "Lockers"])
        self.assertEqual(services.parse_features("Lights, Lockers,"), ["Lights", "Lockers"])
        self.assertEqual(services.parse_features(None), [])


class CreateOrRenewTests(TestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(
            email="owner@example.com",
            password="OwnerPass123",
            role=User.RoleChoices.MERCHANT,
        )
        self.merchant = Merchant.objects.create(user=self.owner, name="Arena LLC")
        self.player = User.objects.create_user(email="player@example.com", password="PlayerPass123")
        self.field = Field.objects.create(title="Pitch A", merchant=self.merchant)

    def test_first_subscription_starts_today(self) -> None:
        with _today(date(2030, 1, 10)):
            sub = services.create_or_renew_subscription(self.field.pk, self.player, "monthly")

        self.assertEqual(sub.start_date, date(2030, 1, 10))
        self.assertEqual(sub.end_date, date(2030, 2, 9))
        self.assertEqual(sub.status, FieldSubscription.Status.ACTIVE)
        self.assertIsNone(sub.price)
        self.assertEqual(sub.currency, "SAR")

    def test_requested_start_date_is_honoured_and_bad_one_ignored(self) -> None:
        with _today(date(2030, 1, 10)):
            sub = services.create_or_renew_subscription(
                self.field.pk, self.player, "quarterly", requested_start_date="2030-03-01"
            )
            other = User.objects.create_user(email="other@example.com", password="OtherPass123")
            fallback = services.create_or_renew_subscription(
                self.field.pk, other, "monthly", requested_start_date="not-a-date"
            )

        self.assertEqual((sub.start_date, sub.end_date), (date(2030, 3, 1), date(2030, 5, 31)))
        self.assertEqual(fallback.start_date, date(2030, 1, 10))

    def test_renewal_continues_after_current_period(self) -> None:
        FieldSubscription.objects.create(
            field=self.field,
            user=self.player,
            type="monthly",
            start_date=date(2030, 1, 1),
            end_date=date(2030, 1, 31),
        )

        with _today(date(2030, 1, 20)):
            renewal = services.create_or_renew_subscription(
                self.field.pk, self.player, "monthly", requested_start_date="2030-01-20"
            )

        self.assertEqual(renewal.start_date, date(2030, 2, 1))
        self.assertEqual(renewal.end_date, date(2030, 2, 28))
        self.assertEqual(
            FieldSubscription.objects.filter(status=FieldSubscription.Status.ACTIVE).count(),
            2,
        )

    def test_renewal_chains_after_the_latest_queued_period(self) -> None:
        with _today(date(2030, 1, 1)):
            services.create_or_renew_subscription(self.field.pk, self.player, "monthly")
            services.create_or_renew_subscription(self.field.pk, self.player, "monthly")
            third = services.create_or_renew_subscription(self.field.pk, self.player, "monthly")

        self.assertEqual((third.start_date, third.end_date), (date(2030, 3, 1), date(2030, 3, 31)))

    def test_lapsed_subscription_expires_before_new_start(self) -> None:
        lapsed = FieldSubscription.objects.create(
            field=self.field,
            user=self.player,
            type="monthly",
            start_date=date(2029, 11, 1),
            end_date=date(2029, 11, 30),
        )

        with _today(date(2030, 1, 5)):
            sub = services.create_or_renew_subscription(self.field.pk, self.player, "monthly")

        lapsed.refresh_from_db()
        self.assertEqual(lapsed.status, FieldSubscription.Status.EXPIRED)
        self.assertEqual(sub.start_date, date(2030, 1, 5))

    def test_snapshots_public_plan_price(self) -> None:
        FieldSubscriptionPlan.objects.create(
            field=self.field,
            merchant=self.merchant,
            type="monthly",
            title="Monthly pass",
            price=Decimal("300.00"),
            currency="USD",
        )

        with _today(date(2030, 1, 10)):
            sub = services.create_or_renew_subscription(self.field.pk, self.player, "monthly")

        self.assertEqual(sub.price, Decimal("300.00"))
        self.assertEqual(sub.currency, "USD")
        self.assertIsNotNone(sub.plan_id)

    def test_invalid_type_and_missing_field(self) -> None:
        with self.assertRaises(InvalidType):
            services.create_or_renew_subscription(self.field.pk, self.player, "weekly")
        with self.assertRaises(NotFound):
            services.create_or_renew_subscription(999999, self.player, "monthly")

    def test_started_event_flags_renewal(self) -> None:
        received = []
        message_bus.register_event_handler(SubscriptionStarted, received.append)
        self.addCleanup(message_bus.unregister_event_handler, SubscriptionStarted, received.append)

        with _today(date(2030, 1, 1)), self.captureOnCommitCallbacks(execute=True):
            services.create_or_renew_subscription(self.field.pk, self.player, "monthly")
            services.create_or_renew_subscription(self.field.pk, self.player, "monthly")

        self.assertEqual([event.is_renewal for event in received], [False, True])


class CancelAndListTests(TestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(
            email="owner@example.com",
            password="OwnerPass123",
            role=User.RoleChoices.MERCHANT,
        )
        self.merchant = Merchant.objects.create(user=self.owner, name="Arena LLC")
        self.player = User.objects.create_user(email="player@example.com", password="PlayerPass123")
        self.other = User.objects.create_user(email="other@example.com", password="OtherPass123")
        self.field = Field.objects.create(title="Pitch A", merchant=self.merchant)
        with _today(date(2030, 1, 10)):
            self.subscription = services.create_or_renew_subscription(self.field.pk, self.player, "monthly")

    def test_only_owner_cancels(self) -> None:
        with _today(date(2030, 1, 12)):
            with self.assertRaises(Forbidden):
                services.cancel_subscription(self.subscription.pk, self.other)
            cancelled = services.cancel_subscription(self.subscription.pk, self.player)

        self.assertEqual(cancelled.status, FieldSubscription.Status.CANCELLED)

    def test_cannot_cancel_twice(self) -> None:
        with _today(date(2030, 1, 12)):
            services.cancel_subscription(self.subscription.pk, self.player)
            with self.assertRaises(InvalidStateTransition):
                services.cancel_subscription(self.subscription.pk, self.player)

    def test_cannot_cancel_lapsed_subscription(self) -> None:
        with _today(date(2030, 3, 1)):
            with self.assertRaisesMessage(InvalidStateTransition, "current status: expired"):
                services.cancel_subscription(self.subscription.pk, self.player)

    def test_listing_expires_lazily(self) -> None:
        with _today(date(2030, 3, 1)):
            items = list(services.list_user_subscriptions(self.player))

        self.assertEqual([item.status for item in items], [FieldSubscription.Status.EXPIRED])

    def test_field_listing_is_for_its_merchant(self) -> None:
        with _today(date(2030, 1, 12)):
            items = list(services.list_field_subscriptions(self.owner, self.field.pk))
            with self.assertRaises(Forbidden):
                services.list_field_subscriptions(self.player, self.field.pk)

        self.assertEqual([item.pk for item in items], [self.subscription.pk])


class PlanTests(TestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(
            email="owner@example.com",
            password="OwnerPass123",
            role=User.RoleChoices.MERCHANT,
        )
        self.merchant = Merchant.objects.create(user=self.owner, name="Arena LLC")
        self.rival = User.objects.create_user(
            email="rival@example.com",
            password="RivalPass123",
            role=User.RoleChoices.MERCHANT,
        )
        Merchant.objects.create(user=self.rival, name="Rival LLC")
        self.player = User.objects.create_user(email="player@example.com", password="PlayerPass123")
        self.field = Field.objects.create(title="Pitch A", merchant=self.merchant)

    def test_upsert_creates_then_updates(self) -> None:
        plan, created = services.upsert_plan(self.owner, self.field.pk, "monthly", "Monthly", "250")
        self.assertTrue(created)
        self.assertEqual(plan.price, Decimal("250.00"))
        self.assertEqual(plan.merchant_id, self.merchant.pk)

        same, created = services.upsert_plan(
            self.owner, self.field.pk, "month", "Monthly+", "275.5", features="Lights, Showers"
        )
        self.assertFalse(created)
        self.assertEqual(same.pk, plan.pk)
        self.assertEqual(same.price, Decimal("275.50"))
        self.assertEqual(same.features, ["Lights", "Showers"])

    def test_only_field_merchant_manages_plans(self) -> None:
        with self.assertRaises(Forbidden):
            services.upsert_plan(self.rival, self.field.pk, "monthly", "Monthly", "250")
        with self.assertRaises(Forbidden):
            services.upsert_plan(self.player, self.field.pk, "monthly", "Monthly", "250")

        plan, _ = services.upsert_plan(self.owner, self.field.pk, "monthly", "Monthly", "250")
        with self.assertRaises(Forbidden):
            services.toggle_plan(self.rival, plan.pk)

    def test_toggle_hides_plan_from_players(self) -> None:
        plan, _ = services.upsert_plan(self.owner, self.field.pk, "monthly", "Monthly", "250")
        services.upsert_plan(
            self.owner, self.field.pk, "yearly", "Members", "2000", visibility="private"
        )

        self.assertEqual([p.pk for p in services.list_plans(self.player)], [plan.pk])

        services.toggle_plan(self.owner, plan.pk)

        self.assertEqual(list(services.list_plans(self.player)), [])
        self.assertEqual(len(services.list_plans(self.owner, include_inactive=True)), 2)
