"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from shared.domain.base import DomainEvent


@dataclass
class BookingCreated(DomainEvent):
    """
    Event: A field booking was committed

    Triggers:
    - Notify the field's merchant
    - Send confirmation to the user
    """
    booking_id: int
    field_id: int
    user_id: int
    booking_date: date
    start_time: str
    end_time: str
    total_price: Decimal | None


@dataclass
class BookingStatusChanged(DomainEvent):
    """
    Event: A booking moved through its state machine

    Triggers:
    - Notify the other party of a cancellation
    """
    booking_id: int
    field_id: int
    old_status: str
    new_status: str
    actor_id: int
