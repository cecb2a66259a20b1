"""
Order Domain Events
"""

from dataclasses import dataclass, field
from decimal import Decimal

from shared.domain.base import DomainEvent


@dataclass
class CheckoutCompleted(DomainEvent):
    """
    Event: A cart was converted into orders

    Triggers:
    - Notify each merchant of its new order
    - Payment capture (external)
    """
    user_id: int
    cart_id: int
    order_ids: list[int] = field(default_factory=list)
    items_count: int = 0
    total: Decimal = Decimal("0.00")
    currency: str = "SAR"


@dataclass
class OrderStatusChanged(DomainEvent):
    order_id: int
    merchant_id: int
    old_status: str
    new_status: str
