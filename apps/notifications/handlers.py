"""Message bus subscribers.

Handlers run after the originating transaction has committed. They only
enqueue Celery tasks, delivery happens in the worker.
"""

from __future__ import annotations

import logging

from apps.bookings.domain.events import BookingCancelled, BookingConfirmed
from apps.finances.domain.events import PaymentCompleted, PaymentFailed, PaymentRefunded
from apps.users.events import UserRegistered
from shared.application.message_bus import MessageBus

from .models import Notification
from .tasks import send_booking_notification, send_payment_notification, send_welcome_notification

logger = logging.getLogger(__name__)


def on_booking_confirmed(event: BookingConfirmed) -> None:
    send_booking_notification.delay(event.booking_id, Notification.Channel.BOOKING_CONFIRMATION.value)


def on_booking_cancelled(event: BookingCancelled) -> None:
    send_booking_notification.delay(
        event.booking_id, Notification.Channel.BOOKING_CANCELLATION.value, event.reason
    )


def on_payment_completed(event: PaymentCompleted) -> None:
    send_payment_notification.delay(event.payment_id, Notification.Channel.PAYMENT_SUCCESS.value)


def on_payment_failed(event: PaymentFailed) -> None:
    send_payment_notification.delay(event.payment_id, Notification.Channel.PAYMENT_FAILED.value)


def on_payment_refunded(event: PaymentRefunded) -> None:
    send_payment_notification.delay(event.payment_id, Notification.Channel.PAYMENT_REFUND.value)


def on_user_registered(event: UserRegistered) -> None:
    send_welcome_notification.delay(event.user_id)


HANDLERS = (
    (BookingConfirmed, on_booking_confirmed),
    (BookingCancelled, on_booking_cancelled),
    (PaymentCompleted, on_payment_completed),
    (PaymentFailed, on_payment_failed),
    (PaymentRefunded, on_payment_refunded),
    (UserRegistered, on_user_registered),
)


def register_handlers(bus: MessageBus) -> None:
    for event_type, handler in HANDLERS:
        bus.register_event_handler(event_type, handler)
    logger.debug(f"Registered {len(HANDLERS)} notification handlers")
