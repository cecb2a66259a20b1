"""
Order Event Handlers
"""

import structlog

from shared.application.message_bus import message_bus
from apps.orders.domain.events import CheckoutCompleted, OrderStatusChanged

log = structlog.get_logger(__name__)


def log_checkout_completed(event: CheckoutCompleted):
    log.info(
        "checkout_completed",
        user_id=event.user_id,
        cart_id=event.cart_id,
        order_ids=event.order_ids,
        items_count=event.items_count,
        total=str(event.total),
        currency=event.currency,
    )


def log_order_status_changed(event: OrderStatusChanged):
    log.info(
        "order_status_changed",
        order_id=event.order_id,
        merchant_id=event.merchant_id,
        old_status=event.old_status,
        new_status=event.new_status,
    )


def register_handlers():
    message_bus.register_event_handler(CheckoutCompleted, log_checkout_completed)
    message_bus.register_event_handler(OrderStatusChanged, log_order_status_changed)
