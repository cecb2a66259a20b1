"""
Subscription Event Handlers
"""

import structlog

from shared.application.message_bus import message_bus
from apps.subscriptions.domain.events import (
    SubscriptionCancelled,
    SubscriptionStarted,
    SubscriptionsExpired,
)

log = structlog.get_logger(__name__)


def log_subscription_started(event: SubscriptionStarted):
    log.info(
        "subscription_renewed" if event.is_renewal else "subscription_started",
        subscription_id=event.subscription_id,
        field_id=event.field_id,
        user_id=event.user_id,
        type=event.type,
        start_date=event.start_date.isoformat(),
        end_date=event.end_date.isoformat(),
        price=str(event.price) if event.price is not None else None,
        currency=event.currency,
    )


def log_subscription_cancelled(event: SubscriptionCancelled):
    log.info(
        "subscription_cancelled",
        subscription_id=event.subscription_id,
        field_id=event.field_id,
        user_id=event.user_id,
    )


def log_subscriptions_expired(event: SubscriptionsExpired):
    log.info(
        "subscriptions_expired",
        field_id=event.field_id,
        user_id=event.user_id,
        count=event.count,
    )


def register_handlers():
    message_bus.register_event_handler(SubscriptionStarted, log_subscription_started)
    message_bus.register_event_handler(SubscriptionCancelled, log_subscription_cancelled)
    message_bus.register_event_handler(SubscriptionsExpired, log_subscriptions_expired)
