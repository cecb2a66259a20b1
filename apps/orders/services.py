"""Cart management and checkout.

Every mutation runs in one ``DjangoUnitOfWork``: the rows it depends on are
locked first and stock is re-read after the lock is held.
"""

from __future__ import annotations

import logging
from collections import OrderedDict

from django.db.models import Prefetch  # type: ignore

from apps.catalog.models import Product
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import (
    EmptyCart,
    Forbidden,
    InsufficientStock,
    InvalidStateTransition,
    NotFound,
    OutOfStock,
    Unavailable,
    ValidationFailed,
)
from shared.domain.money import line_total, round_money, sum_money
from shared.infrastructure.locking import lock_for_update

from .domain.events import CheckoutCompleted, OrderStatusChanged
from .models import Cart, CartItem, Order, OrderItem, default_currency

logger = logging.getLogger(__name__)

ORDER_STATUSES = tuple(Order.Status.values)


def _coerce_quantity(value) -> int:
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        raise ValidationFailed("quantity must be >= 1")
    if quantity < 1:
        raise ValidationFailed("quantity must be >= 1")
    return quantity


def get_or_create_active_cart(user) -> Cart:
    """Return the user's single active cart, creating it on first access."""
    cart, created = Cart.objects.get_or_create(user=user, status=Cart.Status.ACTIVE)
    if created:
        logger.debug("Created active cart %s for user %s", cart.pk, user.pk)
    return cart


def _lock_active_cart(user) -> Cart:
    cart = get_or_create_active_cart(user)
    return lock_for_update(Cart.objects.filter(pk=cart.pk)).get()


def cart_snapshot(cart: Cart) -> dict:
    """Cart lines with their totals plus an aggregate summary."""
    items = []
    for item in cart.items.select_related("product").order_by("id"):
        unit_price = round_money(item.unit_price)
        items.append(
            {
                "id": item.pk,
                "product_id": item.product_id,
                "title": item.product.title,
                "image": item.product.primary_image,
                "quantity": item.quantity,
                "unit_price": unit_price,
                "line_total": line_total(unit_price, item.quantity),
            }
        )
    subtotal = sum_money(line["line_total"] for line in items)
    return {
        "cart": {"id": cart.pk, "status": cart.status},
        "items": items,
        "summary": {
            "items_count": sum(line["quantity"] for line in items),
            "subtotal": subtotal,
            "total": subtotal,
            "currency": default_currency(),
        },
    }


def get_cart(user) -> dict:
    with DjangoUnitOfWork():
        cart = get_or_create_active_cart(user)
        return cart_snapshot(cart)


def add_item(user, product_id, quantity=1) -> dict:
    """Add a product to the active cart, merging with an existing line."""
    quantity = _coerce_quantity(quantity)

    with DjangoUnitOfWork():
        cart = _lock_active_cart(user)
        product = lock_for_update(Product.objects.filter(pk=product_id)).first()
        if product is None:
            raise NotFound("Product not found")
        if not product.status:
            raise Unavailable("Product is not available")

        available = product.quantity
        if available <= 0:
            raise OutOfStock()

        unit_price = product.effective_price
        existing = lock_for_update(CartItem.objects.filter(cart=cart, product=product)).first()
        combined = existing.quantity + quantity if existing else quantity
        if combined > available:
            logger.warning(
                "Rejected add to cart %s: product %s requested %d, available %d",
                cart.pk, product.pk, combined, available,
            )
            raise InsufficientStock(available)

        if existing:
            existing.quantity = combined
            existing.unit_price = round_money(unit_price)
            existing.save(update_fields=["quantity", "unit_price", "updated_at"])
        else:
            CartItem.objects.create(
                cart=cart,
                product=product,
                quantity=quantity,
                unit_price=round_money(unit_price),
            )
        return cart_snapshot(cart)


def _lock_cart_item(cart: Cart, item_id) -> CartItem:
    item = lock_for_update(CartItem.objects.filter(pk=item_id, cart=cart)).first()
    if item is None:
        raise NotFound("Cart item not found")
    return item


def update_item(user, item_id, quantity) -> dict:
    quantity = _coerce_quantity(quantity)

    with DjangoUnitOfWork():
        cart = _lock_active_cart(user)
        item = _lock_cart_item(cart, item_id)
        product = lock_for_update(Product.objects.filter(pk=item.product_id)).first()
        if product is None:
            raise NotFound("Product not found")
        if not product.status:
            raise Unavailable("Product is not available")
        if quantity > product.quantity:
            raise InsufficientStock(product.quantity)

        item.quantity = quantity
        item.unit_price = round_money(product.effective_price)
        item.save(update_fields=["quantity", "unit_price", "updated_at"])
        return cart_snapshot(cart)


def remove_item(user, item_id) -> dict:
    with DjangoUnitOfWork():
        cart = _lock_active_cart(user)
        item = _lock_cart_item(cart, item_id)
        item.delete()
        return cart_snapshot(cart)


def checkout(user) -> dict:
    """Convert the active cart into one order per (merchant, store) group.

    Either every order is created, stock is decremented and the cart is
    rotated, or nothing is written at all.
    """
    with DjangoUnitOfWork() as uow:
        cart = _lock_active_cart(user)
        items = list(lock_for_update(CartItem.objects.filter(cart=cart)).order_by("id"))
        if not items:
            raise EmptyCart()

        product_ids = sorted({item.product_id for item in items})
        products = {
            product.pk: product
            for product in lock_for_update(Product.objects.filter(pk__in=product_ids)).order_by("id")
        }

        for item in items:
            product = products.get(item.product_id)
            if product is None:
                raise NotFound(f"Product not found: {item.product_id}")
            if not product.status:
                raise Unavailable(f"Product not available: {product.title}")
            if item.quantity > product.quantity:
                logger.warning(
                    "Checkout of cart %s rejected: %s requested %d, available %d",
                    cart.pk, product.title, item.quantity, product.quantity,
                )
                raise InsufficientStock(product.quantity, title=product.title)
            item.unit_price = round_money(product.effective_price)

        groups: OrderedDict[tuple, list[CartItem]] = OrderedDict()
        for item in items:
            product = products[item.product_id]
            groups.setdefault((product.merchant_id, product.store_id), []).append(item)

        currency = default_currency()
        orders = []
        for (merchant_id, store_id), group in groups.items():
            totals = [line_total(item.unit_price, item.quantity) for item in group]
            subtotal = sum_money(totals)
            order = Order.objects.create(
                user=user,
                merchant_id=merchant_id,
                store_id=store_id,
                status=Order.Status.PENDING,
                currency=currency,
                subtotal=subtotal,
                total=subtotal,
            )
            OrderItem.objects.bulk_create(
                [
                    OrderItem(
                        order=order,
                        product=products[item.product_id],
                        product_title=products[item.product_id].title,
                        product_image=products[item.product_id].primary_image,
                        quantity=item.quantity,
                        unit_price=item.unit_price,
                        line_total=total,
                    )
                    for item, total in zip(group, totals)
                ]
            )
            for item in group:
                product = products[item.product_id]
                product.quantity -= item.quantity
                product.save(update_fields=["quantity", "updated_at"])
            orders.append(order)

        cart.status = Cart.Status.CHECKED_OUT
        cart.save(update_fields=["status", "updated_at"])
        cart.items.all().delete()
        new_cart = Cart.objects.create(user=user, status=Cart.Status.ACTIVE)

        grand_total = sum_money(order.total for order in orders)
        items_count = sum(item.quantity for item in items)
        uow.add_event(
            CheckoutCompleted(
                aggregate_id=cart.pk,
                user_id=user.pk,
                cart_id=cart.pk,
                order_ids=[order.pk for order in orders],
                items_count=items_count,
                total=grand_total,
                currency=currency,
            )
        )
        logger.info(
            "Checked out cart %s for user %s into %d orders (total %s %s)",
            cart.pk, user.pk, len(orders), grand_total, currency,
        )

    orders = list(
        Order.objects.filter(pk__in=[order.pk for order in orders])
        .select_related("store")
        .prefetch_related("items")
        .order_by("id")
    )
    return {
        "orders": orders,
        "summary": {
            "orders_count": len(orders),
            "items_count": items_count,
            "total": grand_total,
            "currency": currency,
        },
        "cart": {"id": new_cart.pk, "status": new_cart.status},
    }


def _orders_queryset():
    return (
        Order.objects.select_related("store", "merchant", "user")
        .prefetch_related(Prefetch("items", queryset=OrderItem.objects.order_by("id")))
    )


def list_user_orders(user):
    return _orders_queryset().filter(user=user)


def _require_merchant(user):
    merchant = user.get_merchant() if hasattr(user, "get_merchant") else None
    if merchant is None:
        raise NotFound("Merchant profile not found for current user")
    return merchant


def list_merchant_orders(user):
    merchant = _require_merchant(user)
    return _orders_queryset().filter(merchant=merchant)


def get_user_order(user, order_id) -> dict:
    """A buyer's own order with a summary of its lines."""
    order = _orders_queryset().filter(pk=order_id).first()
    if order is None:
        raise NotFound("Order not found")
    if order.user_id != user.pk:
        raise Forbidden("You are not allowed to view this order")

    lines = list(order.items.all())
    return {
        "order": order,
        "summary": {
            "items_count": sum(item.quantity for item in lines),
            "subtotal": sum_money(item.line_total for item in lines),
            "total": round_money(order.total),
            "currency": order.currency,
        },
    }


def list_all_orders(user) -> dict:
    """Every order with status counts; platform superadmins only."""
    if not (hasattr(user, "is_platform_superuser") and user.is_platform_superuser()):
        raise Forbidden()

    orders = list(_orders_queryset())
    stats = {
        "total_orders": len(orders),
        "total_revenue": sum_money(order.total for order in orders),
    }
    for value in ORDER_STATUSES:
        stats[f"{value}_orders"] = sum(1 for order in orders if order.status == value)
    return {"items": orders, "stats": stats}


def update_order_status(order_id, user, status) -> Order:
    """Set an order's status; only the merchant that owns the order may do it."""
    new_status = status.strip() if isinstance(status, str) else ""
    if new_status not in ORDER_STATUSES:
        raise InvalidStateTransition(f"status must be one of: {', '.join(ORDER_STATUSES)}")

    merchant = _require_merchant(user)

    with DjangoUnitOfWork() as uow:
        order = lock_for_update(Order.objects.filter(pk=order_id)).first()
        if order is None:
            raise NotFound("Order not found")
        if order.merchant_id != merchant.pk:
            raise Forbidden("You are not allowed to update this order")

        old_status = order.status
        order.status = new_status
        order.save(update_fields=["status", "updated_at"])
        uow.add_event(
            OrderStatusChanged(
                aggregate_id=order.pk,
                order_id=order.pk,
                merchant_id=merchant.pk,
                old_status=old_status,
                new_status=new_status,
            )
        )
        logger.info("Order %s status %s -> %s", order.pk, old_status, new_status)

    return _orders_queryset().get(pk=order.pk)
