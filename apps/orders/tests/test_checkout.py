"""Tests for cart management and checkout."""

from __future__ import annotations

from decimal import Decimal

from django.test import TestCase

from apps.catalog.models import Product, Store
from apps.orders import services
from apps.orders.domain.events import CheckoutCompleted
from apps.orders.models import Cart, CartItem, Order, OrderItem
from apps.users.models import Merchant, User
from shared.application.message_bus import message_bus
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


class MarketplaceFixtureMixin:
    def setUp(self) -> None:
        self.buyer = User.objects.create_user(email="buyer@example.com", password="BuyerPass123")
        self.seller_user = User.objects.create_user(
            email="seller@example.com",
            password="SellerPass123",
            role=User.RoleChoices.MERCHANT,
        )
        self.seller = Merchant.objects.create(user=self.seller_user, name="Sports Shop")
        self.other_seller_user = User.objects.create_user(
            email="seller2@example.com",
            password="SellerPass123",
            role=User.RoleChoices.MERCHANT,
        )
        self.other_seller = Merchant.objects.create(user=self.other_seller_user, name="Kit Corner")
        self.store = Store.objects.create(merchant=self.seller, name="Main store")
        self.ball = Product.objects.create(
            merchant=self.seller,
            store=self.store,
            title="Ball",
            price=Decimal("100.00"),
            discount_percentage=Decimal("10"),
            quantity=5,
            images=["ball.png", "ball-2.png"],
        )
        self.shoes = Product.objects.create(
            merchant=self.other_seller,
            title="Shoes",
            price=Decimal("250.00"),
            quantity=2,
        )


class CartTests(MarketplaceFixtureMixin, TestCase):
    def test_active_cart_is_idempotent(self) -> None:
        first = services.get_or_create_active_cart(self.buyer)
        second = services.get_or_create_active_cart(self.buyer)

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(Cart.objects.filter(user=self.buyer).count(), 1)

    def test_add_snapshots_effective_price_and_merges_lines(self) -> None:
        services.add_item(self.buyer, self.ball.pk, 2)
        snapshot = services.add_item(self.buyer, self.ball.pk, 1)

        self.assertEqual(len(snapshot["items"]), 1)
        line = snapshot["items"][0]
        self.assertEqual(line["quantity"], 3)
        self.assertEqual(line["unit_price"], Decimal("90.00"))
        self.assertEqual(line["line_total"], Decimal("270.00"))
        self.assertEqual(line["image"], "ball.png")
        self.assertEqual(snapshot["summary"]["items_count"], 3)
        self.assertEqual(snapshot["summary"]["total"], Decimal("270.00"))

    def test_combined_quantity_is_checked_against_stock(self) -> None:
        services.add_item(self.buyer, self.ball.pk, 4)

        with self.assertRaisesMessage(InsufficientStock, "Only 5 items available in stock"):
            services.add_item(self.buyer, self.ball.pk, 2)

        self.assertEqual(CartItem.objects.get().quantity, 4)

    def test_add_rejections(self) -> None:
        self.shoes.quantity = 0
        self.shoes.save()
        hidden = Product.objects.create(merchant=self.seller, title="Hidden", price=Decimal("1"), quantity=3, status=False)

        with self.assertRaises(NotFound):
            services.add_item(self.buyer, 999999)
        with self.assertRaises(Unavailable):
            services.add_item(self.buyer, hidden.pk)
        with self.assertRaises(OutOfStock):
            services.add_item(self.buyer, self.shoes.pk)
        with self.assertRaisesMessage(ValidationFailed, "quantity must be >= 1"):
            services.add_item(self.buyer, self.ball.pk, 0)
        self.assertFalse(CartItem.objects.exists())

    def test_update_and_remove_item(self) -> None:
        snapshot = services.add_item(self.buyer, self.ball.pk, 1)
        item_id = snapshot["items"][0]["id"]

        updated = services.update_item(self.buyer, item_id, 5)
        self.assertEqual(updated["items"][0]["quantity"], 5)

        with self.assertRaises(InsufficientStock):
            services.update_item(self.buyer, item_id, 6)
        with self.assertRaises(ValidationFailed):
            services.update_item(self.buyer, item_id, 0)

        emptied = services.remove_item(self.buyer, item_id)
        self.assertEqual(emptied["items"], [])
        with self.assertRaises(NotFound):
            services.remove_item(self.buyer, item_id)

    def test_cannot_touch_another_users_item(self) -> None:
        snapshot = services.add_item(self.buyer, self.ball.pk, 1)
        intruder = User.objects.create_user(email="intruder@example.com", password="IntruderPass123")

        with self.assertRaises(NotFound):
            services.update_item(intruder, snapshot["items"][0]["id"], 2)
        with self.assertRaises(NotFound):
            services.remove_item(intruder, snapshot["items"][0]["id"])


class CheckoutTests(MarketplaceFixtureMixin, TestCase):
    def test_empty_cart(self) -> None:
        with self.assertRaises(EmptyCart):
            services.checkout(self.buyer)

    def test_splits_orders_by_merchant(self) -> None:
        services.add_item(self.buyer, self.ball.pk, 2)
        cart_view = services.add_item(self.buyer, self.shoes.pk, 1)
        old_cart_id = cart_view["cart"]["id"]

        result = services.checkout(self.buyer)

        self.assertEqual(result["summary"]["orders_count"], 2)
        self.assertEqual(result["summary"]["items_count"], 3)
        self.assertEqual(result["summary"]["total"], cart_view["summary"]["subtotal"])
        self.assertEqual(result["summary"]["total"], Decimal("430.00"))

        by_merchant = {order.merchant_id: order for order in result["orders"]}
        ball_order = by_merchant[self.seller.pk]
        shoes_order = by_merchant[self.other_seller.pk]
        self.assertEqual(ball_order.store_id, self.store.pk)
        self.assertEqual(ball_order.total, Decimal("180.00"))
        self.assertEqual(shoes_order.total, Decimal("250.00"))
        self.assertIsNone(shoes_order.store_id)
        self.assertEqual([item.product_title for item in ball_order.items.all()], ["Ball"])
        self.assertEqual(ball_order.status, Order.Status.PENDING)
        self.assertEqual(ball_order.currency, "SAR")

        self.ball.refresh_from_db()
        self.shoes.refresh_from_db()
        self.assertEqual((self.ball.quantity, self.shoes.quantity), (3, 1))

        old_cart = Cart.objects.get(pk=old_cart_id)
        self.assertEqual(old_cart.status, Cart.Status.CHECKED_OUT)
        self.assertFalse(old_cart.items.exists())
        self.assertNotEqual(result["cart"]["id"], old_cart_id)
        self.assertEqual(result["cart"]["status"], Cart.Status.ACTIVE)
        self.assertEqual(services.get_or_create_active_cart(self.buyer).pk, result["cart"]["id"])

    def test_same_merchant_different_stores_split(self) -> None:
        annex = Store.objects.create(merchant=self.seller, name="Annex")
        socks = Product.objects.create(
            merchant=self.seller, store=annex, title="Socks", price=Decimal("15.00"), quantity=10
        )
        services.add_item(self.buyer, self.ball.pk, 1)
        services.add_item(self.buyer, socks.pk, 2)

        result = services.checkout(self.buyer)

        self.assertEqual(sorted(order.store_id for order in result["orders"]), sorted([self.store.pk, annex.pk]))

    def test_insufficient_stock_rolls_everything_back(self) -> None:
        services.add_item(self.buyer, self.ball.pk, 2)
        services.add_item(self.buyer, self.shoes.pk, 2)
        Product.objects.filter(pk=self.shoes.pk).update(quantity=1)

        with self.assertRaisesMessage(InsufficientStock, "Insufficient stock for Shoes (available: 1)"):
            services.checkout(self.buyer)

        self.assertFalse(Order.objects.exists())
        self.assertFalse(OrderItem.objects.exists())
        self.ball.refresh_from_db()
        self.assertEqual(self.ball.quantity, 5)
        cart = Cart.objects.get(user=self.buyer)
        self.assertEqual(cart.status, Cart.Status.ACTIVE)
        self.assertEqual(cart.items.count(), 2)

    def test_price_is_refreshed_and_snapshotted(self) -> None:
        services.add_item(self.buyer, self.ball.pk, 1)
        Product.objects.filter(pk=self.ball.pk).update(price=Decimal("200.00"), discount_percentage=Decimal("25"))

        result = services.checkout(self.buyer)
        Product.objects.filter(pk=self.ball.pk).update(title="Renamed ball", price=Decimal("1.00"))

        line = result["orders"][0].items.get()
        line.refresh_from_db()
        self.assertEqual(line.unit_price, Decimal("150.00"))
        self.assertEqual(line.line_total, Decimal("150.00"))
        self.assertEqual(line.product_title, "Ball")
        self.assertEqual(line.product_image, "ball.png")

    def test_unavailable_product_blocks_checkout(self) -> None:
        services.add_item(self.buyer, self.ball.pk, 1)
        Product.objects.filter(pk=self.ball.pk).update(status=False)

        with self.assertRaisesMessage(Unavailable, "Product not available: Ball"):
            services.checkout(self.buyer)

    def test_checkout_event_published_after_commit(self) -> None:
        received = []
        message_bus.register_event_handler(CheckoutCompleted, received.append)
        self.addCleanup(message_bus.unregister_event_handler, CheckoutCompleted, received.append)
        services.add_item(self.buyer, self.ball.pk, 1)

        with self.captureOnCommitCallbacks(execute=True):
            result = services.checkout(self.buyer)

        self.assertEqual(len(received), 1)
        self.assertEqual(received[0].order_ids, [order.pk for order in result["orders"]])
        self.assertEqual(received[0].total, Decimal("90.00"))


class OrderStatusTests(MarketplaceFixtureMixin, TestCase):
    def setUp(self) -> None:
        super().setUp()
        services.add_item(self.buyer, self.ball.pk, 1)
        self.order = services.checkout(self.buyer)["orders"][0]

    def test_merchant_updates_status(self) -> None:
        order = services.update_order_status(self.order.pk, self.seller_user, " paid ")

        self.assertEqual(order.status, Order.Status.PAID)

    def test_status_outside_allowed_set(self) -> None:
        with self.assertRaises(InvalidStateTransition):
            services.update_order_status(self.order.pk, self.seller_user, "shipped")

    def test_other_merchant_and_buyer_are_refused(self) -> None:
        with self.assertRaises(Forbidden):
            services.update_order_status(self.order.pk, self.other_seller_user, "paid")
        with self.assertRaises(NotFound):
            services.update_order_status(self.order.pk, self.buyer, "paid")

    def test_order_detail_is_buyer_only(self) -> None:
        detail = services.get_user_order(self.buyer, self.order.pk)
        self.assertEqual(detail["summary"]["items_count"], 1)
        self.assertEqual(detail["summary"]["total"], Decimal("90.00"))

        with self.assertRaisesMessage(Forbidden, "You are not allowed to view this order"):
            services.get_user_order(self.seller_user, self.order.pk)
        with self.assertRaises(NotFound):
            services.get_user_order(self.buyer, 999999)

    def test_listings(self) -> None:
        self.assertEqual([o.pk for o in services.list_user_orders(self.buyer)], [self.order.pk])
        self.assertEqual([o.pk for o in services.list_merchant_orders(self.seller_user)], [self.order.pk])
        self.assertEqual(list(services.list_merchant_orders(self.other_seller_user)), [])
        with self.assertRaises(NotFound):
            services.list_merchant_orders(self.buyer)

    def test_admin_listing_with_stats(self) -> None:
        admin = User.objects.create_superuser(email="admin@example.com", password="AdminPass123")

        overview = services.list_all_orders(admin)

        self.assertEqual(overview["stats"]["total_orders"], 1)
        self.assertEqual(overview["stats"]["pending_orders"], 1)
        self.assertEqual(overview["stats"]["total_revenue"], Decimal("90.00"))
        with self.assertRaises(Forbidden):
            services.list_all_orders(self.buyer)
