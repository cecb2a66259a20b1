"""Merchant management of stores and products.

Product rows are also locked by checkout, so every write here takes the
same row lock before changing price, stock or status.
"""

from __future__ import annotations

import logging

from apps.users.models import Merchant
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import Forbidden, NotFound, ValidationFailed
from shared.infrastructure.locking import lock_for_update

from .models import Product, Store

logger = logging.getLogger(__name__)


def _is_superadmin(user) -> bool:
    return hasattr(user, "is_platform_superuser") and user.is_platform_superuser()


def _require_merchant(user) -> Merchant:
    if not user or not user.is_authenticated:
        raise Forbidden("Authentication required")
    if not (hasattr(user, "is_merchant") and user.is_merchant()):
        raise Forbidden("Only merchants can manage the catalog")
    merchant = user.get_merchant()
    if merchant is None:
        raise NotFound("Merchant profile not found for current user")
    return merchant


def _ensure_owner(user, merchant_id: int, message: str) -> None:
    if _is_superadmin(user):
        return
    if _require_merchant(user).id != merchant_id:
        raise Forbidden(message)


def _clean_name(value, label: str) -> str:
    name = str(value or "").strip()
    if not name:
        raise ValidationFailed(f"{label} is required")
    return name


# --- Stores ----------------------------------------------------------------


def create_store(user, data: dict) -> Store:
    """Merchants create stores for themselves; superadmins name the merchant."""
    values = dict(data)
    merchant_id = values.pop("merchant_id", None)
    values["name"] = _clean_name(values.get("name"), "Store name")

    if user and user.is_authenticated and _is_superadmin(user):
        if merchant_id is None:
            raise ValidationFailed("merchant_id is required")
        merchant = Merchant.objects.filter(pk=merchant_id).first()
        if merchant is None:
            raise NotFound("Merchant not found")
    else:
        merchant = _require_merchant(user)

    store = Store.objects.create(merchant=merchant, **values)
    logger.info("Store %s created for merchant %s", store.pk, merchant.pk)
    return store


def update_store(user, store_id, data: dict) -> Store:
    values = dict(data)
    values.pop("merchant_id", None)
    if "name" in values:
        values["name"] = _clean_name(values["name"], "Store name")

    with DjangoUnitOfWork():
        store = lock_for_update(Store.objects.filter(pk=store_id)).first()
        if store is None:
            raise NotFound("Store not found")
        _ensure_owner(user, store.merchant_id, "You are not allowed to update this store")
        for name, value in values.items():
            setattr(store, name, value)
        store.save()

    logger.info("Store %s updated by user %s", store.pk, user.pk)
    return store


def delete_store(user, store_id) -> None:
    """Delete a store; its products stay listed without a store."""
    store = Store.objects.filter(pk=store_id).first()
    if store is None:
        raise NotFound("Store not found")
    _ensure_owner(user, store.merchant_id, "You are not allowed to delete this store")
    store.delete()
    logger.info("Store %s deleted by user %s", store_id, user.pk)


# --- Products --------------------------------------------------------------


def _check_store(store: Store | None, merchant_id: int) -> None:
    if store is not None and store.merchant_id != merchant_id:
        raise Forbidden("You can only list products in your own stores")


def _check_unique_title(merchant_id: int, title: str, exclude_pk=None) -> None:
    clash = Product.objects.filter(merchant_id=merchant_id, title__iexact=title)
    if exclude_pk is not None:
        clash = clash.exclude(pk=exclude_pk)
    if clash.exists():
        raise ValidationFailed("You already listed a product with this name")


def create_product(user, data: dict) -> Product:
    merchant = _require_merchant(user)
    values = dict(data)
    values["title"] = _clean_name(values.get("title"), "Product title")
    _check_store(values.get("store"), merchant.id)
    _check_unique_title(merchant.id, values["title"])

    product = Product.objects.create(merchant=merchant, **values)
    logger.info("Product %s listed by merchant %s", product.pk, merchant.pk)
    return product


def update_product(user, product_id, data: dict) -> Product:
    values = dict(data)
    if "title" in values:
        values["title"] = _clean_name(values["title"], "Product title")

    with DjangoUnitOfWork():
        product = lock_for_update(Product.objects.filter(pk=product_id)).first()
        if product is None:
            raise NotFound("Product not found")
        _ensure_owner(user, product.merchant_id, "Not authorized to update this product")
        if "store" in values:
            _check_store(values["store"], product.merchant_id)
        if "title" in values:
            _check_unique_title(product.merchant_id, values["title"], exclude_pk=product.pk)
        for name, value in values.items():
            setattr(product, name, value)
        product.save()

    logger.info("Product %s updated by user %s", product.pk, user.pk)
    return product


def delete_product(user, product_id) -> None:
    """Delete a product; past order lines keep their title and price snapshot."""
    with DjangoUnitOfWork():
        product = lock_for_update(Product.objects.filter(pk=product_id)).first()
        if product is None:
            raise NotFound("Product not found")
        _ensure_owner(user, product.merchant_id, "Not authorized to delete this product")
        product.delete()

    logger.info("Product %s deleted by user %s", product_id, user.pk)


def toggle_product_status(user, product_id) -> Product:
    with DjangoUnitOfWork():
        product = lock_for_update(Product.objects.filter(pk=product_id)).first()
        if product is None:
            raise NotFound("Product not found")
        _ensure_owner(user, product.merchant_id, "Not authorized")
        product.status = not product.status
        product.save(update_fields=["status", "updated_at"])

    logger.info("Product %s is now %s", product.pk, "active" if product.status else "inactive")
    return product
