"""Domain services for booking workflows.

Creation follows lock, re-validate, write: the Field row is locked first
so that concurrent requests for the same field serialize, and every
availability and conflict check runs after the lock is held, inside the
transaction that inserts the row.
"""

from __future__ import annotations

import logging

from django.db.models import Q  # type: ignore

from apps.fields.models import Field, FieldAvailability, FieldClosure
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import (
    Forbidden,
    InvalidStateTransition,
    NotAvailable,
    NotFound,
    OutsideHours,
    SlotConflict,
    ValidationFailed,
)
from shared.domain.money import hourly_total, round_money
from shared.domain.timeutils import day_of_week, minutes_to_time, parse_date, parse_time_to_minutes
from shared.domain.value_objects import TimeRange
from shared.infrastructure.locking import lock_for_update

from .domain.events import BookingCreated, BookingStatusChanged
from .models import FieldBooking

logger = logging.getLogger(__name__)


def _parse_request(booking_date, start_time, end_time):
    day = parse_date(booking_date)
    if day is None:
        raise ValidationFailed("booking_date must be YYYY-MM-DD")
    if parse_time_to_minutes(start_time) is None or parse_time_to_minutes(end_time) is None:
        raise ValidationFailed("start_time/end_time must be in HH:mm format")
    requested = TimeRange.parse(start_time, end_time)
    if requested is None:
        raise ValidationFailed("end_time must be after start_time")
    return day, requested


def _overlap_filter(requested: TimeRange) -> Q:
    return Q(start_time__lt=requested.end_clock) & Q(end_time__gt=requested.start_clock)


def create_booking(field_id, user, booking_date, start_time, end_time, total_price=None) -> FieldBooking:
    """Create a confirmed booking or fail with one named reason.

    Nothing is written unless every check passes.
    """
    day, requested = _parse_request(booking_date, start_time, end_time)
    if total_price is not None and total_price != "":
        try:
            price = round_money(total_price)
        except ValueError:
            raise ValidationFailed("total_price must be a decimal amount")
        if price < 0:
            raise ValidationFailed("total_price cannot be negative")
    else:
        price = None

    with DjangoUnitOfWork() as uow:
        field = lock_for_update(Field.objects.filter(pk=field_id)).first()
        if field is None:
            raise NotFound("Field not found")
        if not field.is_active:
            raise NotAvailable("Field is not accepting bookings")
        if FieldClosure.objects.filter(field=field, date=day).exists():
            raise NotAvailable("Field is closed on this date")

        windows = [
            window
            for window in (
                TimeRange.parse(row.start_time, row.end_time)
                for row in FieldAvailability.objects.filter(
                    field=field,
                    day_of_week=day_of_week(day),
                    is_active=True,
                )
            )
            if window is not None
        ]
        if not windows:
            raise NotAvailable("Field is not available on this day")
        if not any(window.contains(requested) for window in windows):
            raise OutsideHours()

        conflicts = lock_for_update(
            FieldBooking.objects.filter(
                field=field,
                booking_date=day,
                status__in=FieldBooking.ACTIVE_STATUSES,
            ).filter(_overlap_filter(requested))
        )
        if conflicts.exists():
            raise SlotConflict()

        if price is None and field.price_per_hour is not None:
            price = hourly_total(field.price_per_hour, requested.duration_minutes)

        booking = FieldBooking.objects.create(
            field=field,
            user=user,
            booking_date=day,
            start_time=requested.start_clock,
            end_time=requested.end_clock,
            status=FieldBooking.Status.CONFIRMED,
            total_price=price,
        )
        uow.add_event(
            BookingCreated(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                field_id=field.pk,
                user_id=user.pk,
                booking_date=day,
                start_time=minutes_to_time(requested.start),
                end_time=minutes_to_time(requested.end),
                total_price=price,
            )
        )

    logger.info(
        "Booking %s created for field %s on %s %s by user %s",
        booking.pk, field.pk, day.isoformat(), requested, user.pk,
    )
    return booking


def _is_field_merchant(user, booking: FieldBooking) -> bool:
    if not hasattr(user, "get_merchant"):
        return False
    merchant = user.get_merchant()
    return merchant is not None and booking.field.merchant_id == merchant.id


def _is_superadmin(user) -> bool:
    return hasattr(user, "is_platform_superuser") and user.is_platform_superuser()


def transition_booking(booking_id, actor, new_status: str) -> FieldBooking:
    """Move a booking along pending -> confirmed -> completed, or cancel it.

    Cancelling is open to the booking's owner and the field's merchant;
    confirming and completing to the field's merchant or a superadmin.
    """
    if new_status not in FieldBooking.Status.values:
        raise InvalidStateTransition(f"Unknown booking status: {new_status}")

    with DjangoUnitOfWork() as uow:
        booking = lock_for_update(FieldBooking.objects.filter(pk=booking_id)).first()
        if booking is None:
            raise NotFound("Booking not found")

        if new_status == FieldBooking.Status.CANCELLED:
            allowed = booking.user_id == actor.pk or _is_field_merchant(actor, booking) or _is_superadmin(actor)
        else:
            allowed = _is_field_merchant(actor, booking) or _is_superadmin(actor)
        if not allowed:
            raise Forbidden("You are not allowed to change this booking")

        if not booking.can_transition_to(new_status):
            raise InvalidStateTransition(
                f"Cannot change booking status from {booking.status} to {new_status}"
            )

        old_status = booking.status
        booking.status = new_status
        booking.save(update_fields=["status", "updated_at"])
        uow.add_event(
            BookingStatusChanged(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                field_id=booking.field_id,
                old_status=old_status,
                new_status=new_status,
                actor_id=actor.pk,
            )
        )

    logger.info("Booking %s moved from %s to %s by user %s", booking.pk, old_status, new_status, actor.pk)
    return booking

