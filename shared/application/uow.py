"""
Unit of Work Pattern

Wraps a single database transaction with a deadline and publishes the
domain events recorded inside it only after a successful commit.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
import logging
import time

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, OperationalError, connections, transaction

from shared.domain.base import DomainEvent
from shared.domain.errors import TransactionTimeout

logger = logging.getLogger(__name__)


class AbstractUnitOfWork(ABC):
    """Abstract Unit of Work pattern"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @abstractmethod
    def commit(self):
        """Commit the transaction"""

    @abstractmethod
    def rollback(self):
        """Rollback the transaction"""

    @abstractmethod
    def add_event(self, event: DomainEvent):
        """Record an event to publish after commit"""


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    Django implementation of Unit of Work

    Usage:
        with DjangoUnitOfWork() as uow:
            space = space_repo.get(space_id, lock=True)
            booking = booking_repo.add(...)
            uow.add_event(BookingCreated(...))
        # transaction committed, events published

    The deadline bounds the whole transactional block. On PostgreSQL it
    is also pushed down as ``SET LOCAL statement_timeout`` so a blocked
    lock wait is cancelled by the server. Exceeding the deadline rolls
    the transaction back and raises TransactionTimeout.
    """

    def __init__(self, deadline: Optional[float] = None, using: str = DEFAULT_DB_ALIAS):
        if deadline is None:
            deadline = getattr(settings, 'TRANSACTION_DEADLINE_SECONDS', None)
        self.deadline = deadline
        self.using = using
        self._events: List[DomainEvent] = []
        self._transaction = None
        self._started_at = None

    def __enter__(self):
        """Start database transaction"""
        outermost = not connections[self.using].in_atomic_block
        self._transaction = transaction.atomic(using=self.using)
        self._transaction.__enter__()
        self._started_at = time.monotonic()
        if outermost:
            self._apply_statement_timeout()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Complete or rollback transaction"""
        raised = None
        original = exc_val
        if exc_type is None and self._deadline_exceeded():
            raised = TransactionTimeout(
                f"Transaction exceeded its {self.deadline}s deadline",
                details={'deadline_seconds': self.deadline},
            )
        elif exc_type is not None and _is_statement_timeout(exc_val):
            raised = TransactionTimeout(
                "Database statement timed out",
                details={'deadline_seconds': self.deadline},
            )

        if raised is not None:
            exc_type, exc_val, exc_tb = type(raised), raised, None

        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            self._transaction.__exit__(exc_type, exc_val, exc_tb)

        if raised is not None:
            logger.warning(f"Unit of work timed out: {raised.message}")
            if isinstance(original, OperationalError):
                raise raised from original
            raise raised
        return False

    def commit(self):
        """
        Schedule event publishing after the database commit

        transaction.on_commit() drops the callback if the surrounding
        transaction is rolled back.
        """
        events = self._events.copy()
        self._events.clear()
        logger.debug(f"Committing unit of work with {len(events)} events")
        if events:
            transaction.on_commit(lambda: self._publish_events(events), using=self.using)

    def rollback(self):
        """Discard recorded events, the atomic block performs the rollback"""
        logger.warning(f"Rolling back unit of work, discarding {len(self._events)} events")
        self._events.clear()

    def add_event(self, event: DomainEvent):
        self._events.append(event)

    def _deadline_exceeded(self) -> bool:
        if not self.deadline or self._started_at is None:
            return False
        return time.monotonic() - self._started_at > self.deadline

    def _apply_statement_timeout(self):
        connection = connections[self.using]
        if not self.deadline or connection.vendor != 'postgresql':
            return
        milliseconds = int(self.deadline * 1000)
        with connection.cursor() as cursor:
            cursor.execute(f"SET LOCAL statement_timeout = {milliseconds}")

    def _publish_events(self, events: List[DomainEvent]):
        """Called by Django after the transaction commits"""
        from shared.application.message_bus import message_bus

        logger.info(f"Publishing {len(events)} domain events after commit")
        try:
            message_bus.publish_events(events)
        except Exception as e:
            # data is committed already, a publishing failure must not reach the caller
            logger.error(f"Error publishing events: {e}", exc_info=True)


def _is_statement_timeout(exc) -> bool:
    return isinstance(exc, OperationalError) and 'statement timeout' in str(exc).lower()
