"""
Unit of Work Pattern

Manages database transactions and ensures that domain events
are published only after successful transaction commit.
"""

from typing import List
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Django implementation of Unit of Work

    Every mutating domain operation runs inside one of these: rows are
    locked, invariants re-validated and writes issued within a single
    transaction.atomic() block. Any exception rolls the whole block back
    and discards collected events.

    Usage:
        with DjangoUnitOfWork() as uow:
            field = lock_for_update(Field.objects.filter(pk=field_id)).first()
            ...
            booking = FieldBooking.objects.create(...)
            uow.add_event(BookingCreated(...))
            # Transaction commits here
        # Events are published after commit
    """

    def __init__(self, using=None):
        self._events: List[DomainEvent] = []
        self._transaction = None
        self._using = using

    def __enter__(self):
        """Start database transaction"""
        self._transaction = transaction.atomic(using=self._using)
        self._transaction.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Complete or rollback transaction"""
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback(exc_val)
        finally:
            if self._transaction:
                self._transaction.__exit__(exc_type, exc_val, exc_tb)

    def commit(self):
        """
        Schedule event publishing

        Events are published using Django's transaction.on_commit()
        to ensure they're only sent after database commit succeeds.
        """
        logger.debug(f"Committing transaction with {len(self._events)} events")

        events = self._events.copy()
        self._events.clear()

        if events:
            transaction.on_commit(lambda: self._publish_events(events), using=self._using)

    def rollback(self, exc=None):
        """Discard events; the atomic block rolls the database back"""
        logger.warning(
            f"Rolling back transaction ({exc.__class__.__name__ if exc else 'no error'}), "
            f"discarding {len(self._events)} events"
        )
        self._events.clear()

    def add_event(self, event: DomainEvent):
        self._events.append(event)

    def _publish_events(self, events: List[DomainEvent]):
        """
        Publish collected events to message bus

        Called after successful transaction commit.
        """
        from shared.application.message_bus import message_bus

        logger.info(f"Publishing {len(events)} domain events after commit")

        try:
            message_bus.publish_events(events)
        except Exception as e:
            # Rows are already committed; a failed publish must not undo them
            logger.error(f"Error publishing events: {e}", exc_info=True)
