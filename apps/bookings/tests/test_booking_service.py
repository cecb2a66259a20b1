"""Tests for booking creation and status transitions."""

from __future__ import annotations

import threading
import unittest
from datetime import date, time
from decimal import Decimal

import pytest
from django.db import connection
from django.test import TestCase, TransactionTestCase

from apps.bookings.domain.events import BookingCreated, BookingStatusChanged
from apps.bookings.models import FieldBooking
from apps.bookings.services import create_booking, transition_booking
from apps.fields.models import Field, FieldAvailability, FieldClosure
from apps.users.models import Merchant, User
from shared.application.message_bus import message_bus
from shared.domain.exceptions import (
    Forbidden,
    InvalidStateTransition,
    NotAvailable,
    NotFound,
    OutsideHours,
    SlotConflict,
    ValidationFailed,
)

MONDAY = date(2030, 1, 7)
TUESDAY = date(2030, 1, 8)


def _make_field(merchant=None, **extra) -> Field:
    field = Field.objects.create(
        title=extra.pop("title", "Pitch A"),
        price_per_hour=extra.pop("price_per_hour", Decimal("100.00")),
        merchant=merchant,
        **extra,
    )
    FieldAvailability.objects.create(field=field, day_of_week=1, start_time=time(9, 0), end_time=time(12, 0))
    FieldAvailability.objects.create(field=field, day_of_week=1, start_time=time(17, 0), end_time=time(23, 0))
    return field


class CreateBookingTests(TestCase):
    def setUp(self) -> None:
        self.player = User.objects.create_user(email="player@example.com", password="PlayerPass123")
        self.field = _make_field()

    def test_books_inside_window_and_prices_by_hour(self) -> None:
        booking = create_booking(self.field.pk, self.player, "2030-01-07", "09:00", "10:30")

        self.assertEqual(booking.status, FieldBooking.Status.CONFIRMED)
        self.assertEqual(booking.start_time, time(9, 0))
        self.assertEqual(booking.end_time, time(10, 30))
        self.assertEqual(booking.total_price, Decimal("150.00"))

    def test_explicit_price_wins(self) -> None:
        booking = create_booking(self.field.pk, self.player, MONDAY, "18:00", "19:00", total_price="75.5")

        self.assertEqual(booking.total_price, Decimal("75.50"))

    def test_no_price_without_hourly_rate(self) -> None:
        free_field = _make_field(title="Free pitch", price_per_hour=None)

        booking = create_booking(free_field.pk, self.player, MONDAY, "09:00", "10:00")

        self.assertIsNone(booking.total_price)

    def test_outside_hours_writes_nothing(self) -> None:
        with self.assertRaises(OutsideHours):
            create_booking(self.field.pk, self.player, MONDAY, "11:00", "13:00")

        self.assertFalse(FieldBooking.objects.exists())

    def test_range_spanning_two_windows_is_outside_hours(self) -> None:
        FieldAvailability.objects.create(field=self.field, day_of_week=1, start_time=time(12, 0), end_time=time(14, 0))

        with self.assertRaises(OutsideHours):
            create_booking(self.field.pk, self.player, MONDAY, "11:00", "13:00")

    def test_day_without_windows(self) -> None:
        with self.assertRaisesMessage(NotAvailable, "Field is not available on this day"):
            create_booking(self.field.pk, self.player, TUESDAY, "09:00", "10:00")

    def test_closed_date(self) -> None:
        FieldClosure.objects.create(field=self.field, date=MONDAY, reason="Holiday")

        with self.assertRaisesMessage(NotAvailable, "Field is closed on this date"):
            create_booking(self.field.pk, self.player, MONDAY, "09:00", "10:00")

    def test_closure_wins_over_opening_hours(self) -> None:
        FieldClosure.objects.create(field=self.field, date=MONDAY)

        with self.assertRaisesMessage(NotAvailable, "Field is closed on this date"):
            create_booking(self.field.pk, self.player, MONDAY, "13:00", "14:00")

    def test_disabled_or_missing_field(self) -> None:
        self.field.status = Field.Status.DISABLED
        self.field.save()

        with self.assertRaises(NotAvailable):
            create_booking(self.field.pk, self.player, MONDAY, "09:00", "10:00")
        with self.assertRaises(NotFound):
            create_booking(999999, self.player, MONDAY, "09:00", "10:00")

    def test_overlap_conflicts_but_adjacent_does_not(self) -> None:
        create_booking(self.field.pk, self.player, MONDAY, "10:00", "11:00")

        with self.assertRaises(SlotConflict):
            create_booking(self.field.pk, self.player, MONDAY, "10:30", "11:30")

        create_booking(self.field.pk, self.player, MONDAY, "11:00", "12:00")
        create_booking(self.field.pk, self.player, MONDAY, "09:00", "10:00")
        self.assertEqual(FieldBooking.objects.count(), 3)

    def test_cancelled_booking_frees_the_range(self) -> None:
        first = create_booking(self.field.pk, self.player, MONDAY, "10:00", "11:00")
        transition_booking(first.pk, self.player, FieldBooking.Status.CANCELLED)

        again = create_booking(self.field.pk, self.player, MONDAY, "10:00", "11:00")

        self.assertEqual(again.status, FieldBooking.Status.CONFIRMED)

    def test_malformed_input(self) -> None:
        cases = [
            ("2030-13-01", "09:00", "10:00"),
            (MONDAY, "9am", "10:00"),
            (MONDAY, "10:00", "10:00"),
        ]
        for day, start, end in cases:
            with self.subTest(start=start, end=end):
                with self.assertRaises(ValidationFailed):
                    create_booking(self.field.pk, self.player, day, start, end)
        with self.assertRaises(ValidationFailed):
            create_booking(self.field.pk, self.player, MONDAY, "09:00", "10:00", total_price="-1")

    def test_created_event_published_after_commit(self) -> None:
        received = []
        message_bus.register_event_handler(BookingCreated, received.append)
        self.addCleanup(message_bus.unregister_event_handler, BookingCreated, received.append)

        with self.captureOnCommitCallbacks(execute=True):
            booking = create_booking(self.field.pk, self.player, MONDAY, "09:00", "10:00")

        self.assertEqual(len(received), 1)
        self.assertEqual(received[0].booking_id, booking.pk)
        self.assertEqual(received[0].start_time, "09:00")

    def test_rejected_booking_publishes_nothing(self) -> None:
        received = []
        message_bus.register_event_handler(BookingCreated, received.append)
        self.addCleanup(message_bus.unregister_event_handler, BookingCreated, received.append)

        with self.captureOnCommitCallbacks(execute=True):
            with self.assertRaises(OutsideHours):
                create_booking(self.field.pk, self.player, MONDAY, "06:00", "07:00")

        self.assertEqual(received, [])


class TransitionBookingTests(TestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(
            email="owner@example.com",
            password="OwnerPass123",
            role=User.RoleChoices.MERCHANT,
        )
        self.merchant = Merchant.objects.create(user=self.owner, name="Arena LLC")
        self.player = User.objects.create_user(email="player@example.com", password="PlayerPass123")
        self.other = User.objects.create_user(email="other@example.com", password="OtherPass123")
        self.field = _make_field(merchant=self.merchant)
        self.booking = create_booking(self.field.pk, self.player, MONDAY, "09:00", "10:00")

    def test_owner_of_booking_can_cancel(self) -> None:
        booking = transition_booking(self.booking.pk, self.player, FieldBooking.Status.CANCELLED)

        self.assertEqual(booking.status, FieldBooking.Status.CANCELLED)

    def test_stranger_cannot_cancel(self) -> None:
        with self.assertRaises(Forbidden):
            transition_booking(self.booking.pk, self.other, FieldBooking.Status.CANCELLED)

    def test_player_cannot_complete_own_booking(self) -> None:
        with self.assertRaises(Forbidden):
            transition_booking(self.booking.pk, self.player, FieldBooking.Status.COMPLETED)

    def test_merchant_completes_then_no_way_back(self) -> None:
        transition_booking(self.booking.pk, self.owner, FieldBooking.Status.COMPLETED)

        with self.assertRaises(InvalidStateTransition):
            transition_booking(self.booking.pk, self.owner, FieldBooking.Status.CANCELLED)
        with self.assertRaises(InvalidStateTransition):
            transition_booking(self.booking.pk, self.owner, "archived")

    def test_status_change_event(self) -> None:
        received = []
        message_bus.register_event_handler(BookingStatusChanged, received.append)
        self.addCleanup(message_bus.unregister_event_handler, BookingStatusChanged, received.append)

        with self.captureOnCommitCallbacks(execute=True):
            transition_booking(self.booking.pk, self.owner, FieldBooking.Status.CANCELLED)

        self.assertEqual(len(received), 1)
        self.assertEqual(received[0].old_status, "confirmed")
        self.assertEqual(received[0].new_status, "cancelled")
        self.assertEqual(received[0].actor_id, self.owner.pk)


@pytest.mark.postgres
@unittest.skipUnless(connection.vendor == "postgresql", "row locks need PostgreSQL")
class ConcurrentBookingTests(TransactionTestCase):
    """Two requests for the same range race; exactly one may win."""

    def test_only_one_of_two_overlapping_requests_succeeds(self) -> None:
        player = User.objects.create_user(email="racer@example.com", password="RacerPass123")
        field = _make_field()
        barrier = threading.Barrier(2)
        outcomes: list[str] = []

        def attempt(start: str, end: str) -> None:
            try:
                barrier.wait()
                create_booking(field.pk, player, MONDAY, start, end)
                outcomes.append("created")
            except SlotConflict:
                outcomes.append("conflict")
            finally:
                connection.close()

        threads = [
            threading.Thread(target=attempt, args=("10:00", "11:00")),
            threading.Thread(target=attempt, args=("10:30", "11:30")),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(sorted(outcomes), ["conflict", "created"])
        self.assertEqual(FieldBooking.objects.filter(field=field).count(), 1)
