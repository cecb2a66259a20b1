"""Subscription lifecycle and plan management.

There is no background job that expires subscriptions. Every path that
depends on whether a subscription is current first runs
``expire_lapsed_subscriptions`` for the rows it is about to look at.
"""

from __future__ import annotations

import json
import logging
from datetime import date, timedelta

from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore

from apps.fields.models import Field
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import (
    Forbidden,
    InvalidStateTransition,
    InvalidType,
    NotFound,
    Unauthorized,
    ValidationFailed,
)
from shared.domain.money import round_money
from shared.domain.timeutils import add_months, parse_date, utc_today
from shared.infrastructure.locking import lock_for_update

from .domain.events import SubscriptionCancelled, SubscriptionStarted, SubscriptionsExpired
from .models import SUBSCRIPTION_MONTHS, FieldSubscription, FieldSubscriptionPlan, SubscriptionType, default_currency

logger = logging.getLogger(__name__)

_TYPE_ALIASES = {
    "monthly": SubscriptionType.MONTHLY,
    "month": SubscriptionType.MONTHLY,
    "quarterly": SubscriptionType.QUARTERLY,
    "quarter": SubscriptionType.QUARTERLY,
    "yearly": SubscriptionType.YEARLY,
    "year": SubscriptionType.YEARLY,
}

_VISIBILITY_ALIASES = {
    "public": FieldSubscriptionPlan.Visibility.PUBLIC,
    "pub": FieldSubscriptionPlan.Visibility.PUBLIC,
    "private": FieldSubscriptionPlan.Visibility.PRIVATE,
    "priv": FieldSubscriptionPlan.Visibility.PRIVATE,
}


def normalize_subscription_type(value) -> str:
    raw = str(value if value is not None else "").strip().lower()
    try:
        return _TYPE_ALIASES[raw]
    except KeyError:
        raise InvalidType(f"Invalid subscription type: {value}")


def normalize_visibility(value) -> str:
    raw = str(value if value is not None else "public").strip().lower()
    try:
        return _VISIBILITY_ALIASES[raw]
    except KeyError:
        raise ValidationFailed(f"Invalid visibility: {value}")


def parse_features(value) -> list[str]:
    """Plan features from a list, a JSON array string or a comma separated string."""
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item]
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            return [str(item) for item in parsed if item]
        return [part.strip() for part in value.split(",") if part.strip()]
    return []


def _optional_id(value, name: str) -> int | None:
    """Query-string ids: blank means no filter, anything else must be a positive integer."""
    if value is None or value == "":
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationFailed(f"{name} must be a positive integer")
    if number <= 0:
        raise ValidationFailed(f"{name} must be a positive integer")
    return number


def subscription_end_date(start: date, months: int) -> date:
    """Last day (inclusive) of a period of ``months`` starting on ``start``.

    A monthly period starting 2025-02-01 ends 2025-02-28 so that the next
    one starts on 2025-03-01.
    """
    return add_months(start, months) - timedelta(days=1)


def expire_lapsed_subscriptions(field_id=None, user_id=None, uow: DjangoUnitOfWork | None = None) -> int:
    """Flip active rows whose end date is in the past to expired.

    Scoped to one field, one user, or one (field, user) pair.
    """
    if field_id is None and user_id is None:
        raise ValueError("expire_lapsed_subscriptions needs a field or a user scope")

    if uow is None:
        with DjangoUnitOfWork() as own_uow:
            return expire_lapsed_subscriptions(field_id, user_id, uow=own_uow)

    scope = Q(status=FieldSubscription.Status.ACTIVE, end_date__lt=utc_today())
    if field_id is not None:
        scope &= Q(field_id=field_id)
    if user_id is not None:
        scope &= Q(user_id=user_id)

    count = FieldSubscription.objects.filter(scope).update(
        status=FieldSubscription.Status.EXPIRED,
        updated_at=timezone.now(),
    )
    if count:
        logger.info("Expired %d lapsed subscriptions (field=%s, user=%s)", count, field_id, user_id)
        uow.add_event(SubscriptionsExpired(field_id=field_id, user_id=user_id, count=count))
    return count


def create_or_renew_subscription(field_id, user, type, requested_start_date=None) -> FieldSubscription:
    """Start a subscription, or queue the next period after the current one."""
    sub_type = normalize_subscription_type(type)
    months = SUBSCRIPTION_MONTHS[sub_type]
    requested = parse_date(requested_start_date) if requested_start_date else None

    with DjangoUnitOfWork() as uow:
        field = lock_for_update(Field.objects.filter(pk=field_id)).first()
        if field is None:
            raise NotFound("Field not found")

        expire_lapsed_subscriptions(field.pk, user.pk, uow=uow)
        current = list(
            lock_for_update(
                FieldSubscription.objects.filter(
                    field=field,
                    user=user,
                    status=FieldSubscription.Status.ACTIVE,
                )
            )
        )

        is_renewal = bool(current)
        if is_renewal:
            start = max(sub.end_date for sub in current) + timedelta(days=1)
        else:
            start = requested or utc_today()
        end = subscription_end_date(start, months)

        plan = FieldSubscriptionPlan.objects.filter(
            field=field,
            type=sub_type,
            is_active=True,
            visibility=FieldSubscriptionPlan.Visibility.PUBLIC,
        ).first()

        subscription = FieldSubscription.objects.create(
            field=field,
            user=user,
            type=sub_type,
            plan=plan,
            price=plan.price if plan else None,
            currency=plan.currency if plan else default_currency(),
            start_date=start,
            end_date=end,
            status=FieldSubscription.Status.ACTIVE,
        )
        uow.add_event(
            SubscriptionStarted(
                aggregate_id=subscription.pk,
                subscription_id=subscription.pk,
                field_id=field.pk,
                user_id=user.pk,
                type=sub_type,
                start_date=start,
                end_date=end,
                price=subscription.price,
                currency=subscription.currency,
                is_renewal=is_renewal,
            )
        )

    logger.info(
        "%s %s subscription %s for field %s, user %s: %s..%s",
        "Renewed" if is_renewal else "Created",
        sub_type, subscription.pk, field.pk, user.pk, start.isoformat(), end.isoformat(),
    )
    return subscription


def cancel_subscription(subscription_id, user) -> FieldSubscription:
    with DjangoUnitOfWork() as uow:
        subscription = lock_for_update(FieldSubscription.objects.filter(pk=subscription_id)).first()
        if subscription is None:
            raise NotFound("Subscription not found")
        if subscription.user_id != user.pk:
            raise Forbidden("You can only cancel your own subscriptions")

        if expire_lapsed_subscriptions(subscription.field_id, subscription.user_id, uow=uow):
            subscription.refresh_from_db(fields=["status"])
        if subscription.status != FieldSubscription.Status.ACTIVE:
            raise InvalidStateTransition(
                f"Only active subscriptions can be cancelled (current status: {subscription.status})"
            )

        subscription.status = FieldSubscription.Status.CANCELLED
        subscription.save(update_fields=["status", "updated_at"])
        uow.add_event(
            SubscriptionCancelled(
                aggregate_id=subscription.pk,
                subscription_id=subscription.pk,
                field_id=subscription.field_id,
                user_id=subscription.user_id,
            )
        )

    logger.info("Subscription %s cancelled by user %s", subscription.pk, user.pk)
    return subscription


def list_user_subscriptions(user, field_id=None, status=None):
    field_id = _optional_id(field_id, "field_id")
    expire_lapsed_subscriptions(field_id, user.pk)
    qs = FieldSubscription.objects.select_related("field", "plan").filter(user=user)
    if field_id is not None:
        qs = qs.filter(field_id=field_id)
    if status:
        qs = qs.filter(status=status)
    return qs.order_by("-start_date")


def list_field_subscriptions(user, field_id, status=None):
    """Subscriptions of a field, for its merchant or a superadmin."""
    from apps.fields.services import ensure_merchant_owns_field

    field = ensure_merchant_owns_field(user, field_id)
    expire_lapsed_subscriptions(field.pk, None)
    qs = FieldSubscription.objects.select_related("field", "user", "plan").filter(field=field)
    if status:
        qs = qs.filter(status=status)
    return qs.order_by("-start_date")


# --- Plans -----------------------------------------------------------------


def _is_superadmin(user) -> bool:
    return hasattr(user, "is_platform_superuser") and user.is_platform_superuser()


def _ensure_can_manage_plan(user, plan: FieldSubscriptionPlan) -> None:
    if _is_superadmin(user):
        return
    if hasattr(user, "is_merchant") and user.is_merchant():
        merchant = user.get_merchant()
        if merchant is not None and plan.merchant_id == merchant.id:
            return
        raise Forbidden("You can only update your own plans")
    raise Forbidden("Not allowed")


def upsert_plan(
    user,
    field_id,
    type,
    title,
    price,
    *,
    description=None,
    currency=None,
    features=None,
    visibility=None,
    is_active=None,
) -> tuple[FieldSubscriptionPlan, bool]:
    """Create or update the plan of ``field_id`` for ``type``.

    Returns the plan and whether it was created.
    """
    if not user or not user.is_authenticated:
        raise Unauthorized("Not authorized")

    plan_type = normalize_subscription_type(type)
    plan_visibility = normalize_visibility(visibility)
    if not field_id:
        raise ValidationFailed("field_id is required")
    if not title or not str(title).strip():
        raise ValidationFailed("title is required")
    try:
        amount = round_money(price)
    except ValueError:
        raise ValidationFailed("price must be a positive number")
    if amount <= 0:
        raise ValidationFailed("price must be a positive number")

    plan_currency = str(currency).strip().upper() if currency and str(currency).strip() else default_currency()
    plan_features = parse_features(features)

    with DjangoUnitOfWork():
        field = lock_for_update(Field.objects.filter(pk=field_id)).first()
        if field is None:
            raise NotFound("Field not found")

        merchant_id = field.merchant_id
        if not _is_superadmin(user):
            if not (hasattr(user, "is_merchant") and user.is_merchant()):
                raise Forbidden("Only merchants can manage subscription plans")
            merchant = user.get_merchant()
            if merchant is None:
                raise Forbidden("Merchant profile not found")
            if field.merchant_id != merchant.id:
                raise Forbidden("You can only manage plans for your own fields")
            merchant_id = merchant.id
        if not merchant_id:
            raise ValidationFailed("Field is not assigned to a merchant")

        plan = lock_for_update(FieldSubscriptionPlan.objects.filter(field=field, type=plan_type)).first()
        created = plan is None
        if created:
            plan = FieldSubscriptionPlan(field=field, type=plan_type, is_active=True)
        plan.merchant_id = merchant_id
        plan.title = str(title).strip()
        plan.description = description or None
        plan.price = amount
        plan.currency = plan_currency
        plan.features = plan_features
        plan.visibility = plan_visibility
        if is_active is not None:
            plan.is_active = bool(is_active)
        plan.save()

    logger.info("%s plan %s (%s) for field %s", "Created" if created else "Updated", plan.pk, plan_type, field.pk)
    return plan, created


def toggle_plan(user, plan_id) -> FieldSubscriptionPlan:
    if not user or not user.is_authenticated:
        raise Unauthorized("Not authorized")

    with DjangoUnitOfWork():
        plan = lock_for_update(FieldSubscriptionPlan.objects.filter(pk=plan_id)).first()
        if plan is None:
            raise NotFound("Plan not found")
        _ensure_can_manage_plan(user, plan)
        plan.is_active = not plan.is_active
        plan.save(update_fields=["is_active", "updated_at"])

    logger.info("Plan %s is now %s", plan.pk, "active" if plan.is_active else "inactive")
    return plan


def list_plans(user, field_id=None, merchant_id=None, type=None, include_inactive=False):
    """Plans visible to ``user``.

    Regular users and anonymous callers see active public plans; merchants
    see their own plans only; superadmins see everything.
    """
    field_id = _optional_id(field_id, "field_id")
    merchant_id = _optional_id(merchant_id, "merchant_id")
    qs = FieldSubscriptionPlan.objects.select_related("field")
    if field_id:
        qs = qs.filter(field_id=field_id)
    if merchant_id:
        qs = qs.filter(merchant_id=merchant_id)
    if type:
        qs = qs.filter(type=normalize_subscription_type(type))

    authenticated = bool(user and user.is_authenticated)
    is_merchant = authenticated and hasattr(user, "is_merchant") and user.is_merchant()
    if not (authenticated and _is_superadmin(user)):
        if not include_inactive:
            qs = qs.filter(is_active=True)
        if not is_merchant:
            qs = qs.filter(visibility=FieldSubscriptionPlan.Visibility.PUBLIC)

    if is_merchant:
        merchant = user.get_merchant()
        if merchant is None:
            qs = qs.filter(visibility=FieldSubscriptionPlan.Visibility.PUBLIC)
        else:
            qs = qs.filter(merchant=merchant)
    return qs.order_by("field_id", "type")
