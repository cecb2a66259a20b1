"""Row-locking helpers."""

from __future__ import annotations

from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore


def lock_for_update(queryset):
    """Apply select_for_update when inside transaction.atomic().

    Conflict checks must be evaluated on the returned queryset, after the
    lock is held, never on rows read before it.
    """

    if not transaction.get_connection(queryset.db).in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset
