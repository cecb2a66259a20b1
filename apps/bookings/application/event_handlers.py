"""
Booking Event Handlers

Subscribers for booking events. Delivery of notifications is outside this
service; the handlers record the committed facts in the structured log.
"""

import structlog

from shared.application.message_bus import message_bus
from apps.bookings.domain.events import BookingCreated, BookingStatusChanged

log = structlog.get_logger(__name__)


def log_booking_created(event: BookingCreated):
    log.info(
        "booking_created",
        booking_id=event.booking_id,
        field_id=event.field_id,
        user_id=event.user_id,
        booking_date=event.booking_date.isoformat(),
        start_time=event.start_time,
        end_time=event.end_time,
        total_price=str(event.total_price) if event.total_price is not None else None,
    )


def log_booking_status_changed(event: BookingStatusChanged):
    log.info(
        "booking_status_changed",
        booking_id=event.booking_id,
        field_id=event.field_id,
        old_status=event.old_status,
        new_status=event.new_status,
        actor_id=event.actor_id,
    )


def register_handlers():
    message_bus.register_event_handler(BookingCreated, log_booking_created)
    message_bus.register_event_handler(BookingStatusChanged, log_booking_status_changed)
