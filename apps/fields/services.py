"""Availability resolution and schedule management for fields.

``resolve_slots`` is the read side: it merges the weekly template, date
closures and active bookings into a per-day slot grid for display. It
takes no locks and may be slightly stale; the booking transaction in
``apps.bookings.services`` is the authority on conflicts.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Any, Iterable

from django.conf import settings  # type: ignore

from apps.bookings.models import FieldBooking
from apps.users.models import Merchant
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import Forbidden, InvalidStateTransition, NotFound, ValidationFailed
from shared.domain.timeutils import (
    day_of_week,
    daterange,
    minutes_to_time,
    parse_date,
    parse_time_to_minutes,
    utc_today,
)
from shared.domain.value_objects import TimeRange
from shared.infrastructure.locking import lock_for_update

from .models import Field, FieldAvailability, FieldClosure

logger = logging.getLogger(__name__)


def get_field(field_id) -> Field:
    field = Field.objects.filter(pk=field_id).first()
    if field is None:
        raise NotFound("Field not found")
    return field


def ensure_merchant_owns_field(user, field_id) -> Field:
    """Return the field if ``user`` may manage it.

    Superadmins manage every field; merchants only the fields attached to
    their own merchant profile.
    """
    if not user or not user.is_authenticated:
        raise Forbidden("Authentication required to manage fields")

    is_superadmin = _is_superadmin(user)
    if not is_superadmin and not (hasattr(user, "is_merchant") and user.is_merchant()):
        raise Forbidden("Only merchants can manage fields")

    field = get_field(field_id)
    if is_superadmin:
        return field

    merchant = user.get_merchant()
    if merchant is None:
        raise NotFound("Merchant profile not found for current user")
    if field.merchant_id != merchant.id:
        raise Forbidden("You are not allowed to manage this field")
    return field


def _is_superadmin(user) -> bool:
    return hasattr(user, "is_platform_superuser") and user.is_platform_superuser()


def _resolve_merchant(merchant_id) -> Merchant:
    merchant = Merchant.objects.filter(pk=merchant_id).first()
    if merchant is None:
        raise NotFound("Merchant not found")
    return merchant


def _clean_title(value) -> str:
    title = str(value or "").strip()
    if not title:
        raise ValidationFailed("Field title is required")
    return title


def create_field(user, data: dict) -> Field:
    """Create a field for the caller's merchant profile.

    Superadmins may pass ``merchant_id`` to create on behalf of a merchant,
    or leave the field unassigned.
    """
    if not user or not user.is_authenticated:
        raise Forbidden("Authentication required to manage fields")

    values = dict(data)
    merchant_id = values.pop("merchant_id", None)
    if _is_superadmin(user):
        merchant = _resolve_merchant(merchant_id) if merchant_id is not None else None
    elif hasattr(user, "is_merchant") and user.is_merchant():
        merchant = user.get_merchant()
        if merchant is None:
            raise NotFound("Merchant profile not found for current user")
        if merchant_id is not None and merchant_id != merchant.id:
            raise Forbidden("You can only create fields for your own merchant profile")
    else:
        raise Forbidden("Only merchants can create fields")

    values["title"] = _clean_title(values.get("title"))
    with DjangoUnitOfWork():
        field = Field.objects.create(merchant=merchant, **values)

    logger.info("Field %s created for merchant %s by user %s", field.pk, field.merchant_id, user.pk)
    return field


def update_field(user, field_id, data: dict) -> Field:
    """Apply a (partial) set of attribute changes to a field the caller manages."""
    ensure_merchant_owns_field(user, field_id)

    values = dict(data)
    merchant_id = values.pop("merchant_id", None)
    if "title" in values:
        values["title"] = _clean_title(values["title"])

    with DjangoUnitOfWork():
        field = lock_for_update(Field.objects.filter(pk=field_id)).first()
        if field is None:
            raise NotFound("Field not found")
        if merchant_id is not None and merchant_id != field.merchant_id:
            if not _is_superadmin(user):
                raise Forbidden("Only a superadmin can move a field to another merchant")
            field.merchant = _resolve_merchant(merchant_id)
        for name, value in values.items():
            setattr(field, name, value)
        field.save()

    logger.info("Field %s updated by user %s (%s)", field.pk, user.pk, ", ".join(sorted(values)) or "no changes")
    return field


def delete_field(user, field_id) -> None:
    """Delete a field unless it still has bookings from today onwards."""
    field = ensure_merchant_owns_field(user, field_id)

    with DjangoUnitOfWork():
        lock_for_update(Field.objects.filter(pk=field.pk)).first()
        upcoming = FieldBooking.objects.filter(
            field=field,
            status__in=FieldBooking.ACTIVE_STATUSES,
            booking_date__gte=utc_today(),
        )
        if upcoming.exists():
            raise InvalidStateTransition("Field has upcoming bookings; disable it instead")
        field.delete()

    logger.info("Field %s deleted by user %s", field_id, user.pk)


def _coerce_positive_int(value, name: str, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationFailed(f"{name} must be a positive integer")
    if number <= 0:
        raise ValidationFailed(f"{name} must be a positive integer")
    return number


def clamp_num_days(num_days) -> int:
    max_days = settings.FIELD_SLOTS_MAX_DAYS
    try:
        days = int(num_days)
    except (TypeError, ValueError):
        return 1
    return max(1, min(days, max_days))


def _windows_by_day(field: Field) -> dict[int, list[TimeRange]]:
    windows: dict[int, list[TimeRange]] = defaultdict(list)
    rows = FieldAvailability.objects.filter(field=field, is_active=True).order_by("day_of_week", "start_time")
    for row in rows:
        window = TimeRange.parse(row.start_time, row.end_time)
        if window is None:
            logger.warning("Skipping unparseable availability window %s for field %s", row.pk, field.pk)
            continue
        windows[row.day_of_week].append(window)
    return windows


def _busy_by_date(field: Field, start: date, end: date) -> dict[date, list[TimeRange]]:
    busy: dict[date, list[TimeRange]] = defaultdict(list)
    rows = FieldBooking.objects.filter(
        field=field,
        booking_date__range=(start, end),
        status__in=FieldBooking.ACTIVE_STATUSES,
    ).only("booking_date", "start_time", "end_time")
    for booking in rows:
        interval = TimeRange.parse(booking.start_time, booking.end_time)
        if interval is not None:
            busy[booking.booking_date].append(interval)
    return busy


def resolve_slots(field_id, start_date, num_days=1, slot_minutes=None) -> list[dict[str, Any]]:
    start = parse_date(start_date)
    if start is None:
        raise ValidationFailed("date must be YYYY-MM-DD")
    step = _coerce_positive_int(slot_minutes, "slot_minutes", settings.FIELD_SLOTS_DEFAULT_MINUTES)
    days = clamp_num_days(num_days)
    field = get_field(field_id)
    end = start + timedelta(days=days - 1)

    closures = {
        closure.date: closure
        for closure in FieldClosure.objects.filter(field=field, date__range=(start, end))
    }
    windows = _windows_by_day(field)
    busy = _busy_by_date(field, start, end)

    result = []
    for current in daterange(start, days):
        dow = day_of_week(current)
        closure = closures.get(current)
        day_windows = [] if closure else windows.get(dow, [])
        day_busy = busy.get(current, [])

        slots = []
        for window in day_windows:
            for slot in window.split(step):
                slots.append(
                    {
                        "start_time": minutes_to_time(slot.start),
                        "end_time": minutes_to_time(slot.end),
                        "booked": any(slot.overlaps_with(interval) for interval in day_busy),
                    }
                )

        result.append(
            {
                "date": current.isoformat(),
                "day_of_week": dow,
                "is_closed": not day_windows,
                "reason": closure.reason if closure else None,
                "slot_minutes": step,
                "slots": slots,
            }
        )
    return result


def get_weekly_schedule(field_id):
    field = get_field(field_id)
    return FieldAvailability.objects.filter(field=field, is_active=True).order_by("day_of_week", "start_time")


def _parse_window_row(raw: dict) -> tuple[int, TimeRange]:
    try:
        day = int(str(raw.get("day_of_week")))
    except (TypeError, ValueError):
        day = -1
    if day < 0 or day > 6:
        raise ValidationFailed("day_of_week must be between 0 and 6")

    start, end = raw.get("start_time"), raw.get("end_time")
    if parse_time_to_minutes(start) is None or parse_time_to_minutes(end) is None:
        raise ValidationFailed("start_time/end_time must be in HH:mm format")
    window = TimeRange.parse(start, end)
    if window is None:
        raise ValidationFailed("end_time must be after start_time")
    return day, window


def replace_weekly_schedule(field: Field, windows: Iterable[dict]) -> list[FieldAvailability]:
    """Replace the whole weekly template of ``field`` in one transaction.

    Overlapping windows on the same day are accepted as entered.
    """
    if not isinstance(windows, (list, tuple)):
        raise ValidationFailed("availability must be an array")
    parsed = [_parse_window_row(raw if isinstance(raw, dict) else {}) for raw in windows]

    with DjangoUnitOfWork():
        lock_for_update(Field.objects.filter(pk=field.pk)).first()
        FieldAvailability.objects.filter(field=field).delete()
        created = FieldAvailability.objects.bulk_create(
            [
                FieldAvailability(
                    field=field,
                    day_of_week=day,
                    start_time=window.start_clock,
                    end_time=window.end_clock,
                    is_active=True,
                )
                for day, window in parsed
            ]
        )

    logger.info("Replaced weekly schedule of field %s with %d windows", field.pk, len(created))
    return created


def add_closure(field: Field, closure_date, reason: str | None = None) -> FieldClosure:
    day = parse_date(closure_date)
    if day is None:
        raise ValidationFailed("date must be YYYY-MM-DD")

    with DjangoUnitOfWork():
        lock_for_update(Field.objects.filter(pk=field.pk)).first()
        if FieldClosure.objects.filter(field=field, date=day).exists():
            raise ValidationFailed(f"Field is already closed on {day.isoformat()}")
        closure = FieldClosure.objects.create(field=field, date=day, reason=reason or None)

    logger.info("Field %s closed on %s", field.pk, day.isoformat())
    return closure


def remove_closure(field: Field, closure_id) -> None:
    with DjangoUnitOfWork():
        deleted, _ = FieldClosure.objects.filter(field=field, pk=closure_id).delete()
        if not deleted:
            raise NotFound("Closure not found")

    logger.info("Removed closure %s of field %s", closure_id, field.pk)
