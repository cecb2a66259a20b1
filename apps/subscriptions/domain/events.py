"""
Subscription Domain Events
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from shared.domain.base import DomainEvent


@dataclass
class SubscriptionStarted(DomainEvent):
    """
    Event: A subscription period was created

    ``is_renewal`` is set when the period extends one that is still active.
    """
    subscription_id: int
    field_id: int
    user_id: int
    type: str
    start_date: date
    end_date: date
    price: Decimal | None
    currency: str
    is_renewal: bool = False


@dataclass
class SubscriptionCancelled(DomainEvent):
    subscription_id: int
    field_id: int
    user_id: int


@dataclass
class SubscriptionsExpired(DomainEvent):
    """Event: The lazy sweep flipped lapsed periods to expired"""
    field_id: int | None
    user_id: int | None
    count: int
