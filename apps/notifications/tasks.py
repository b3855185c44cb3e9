"""Celery tasks for notifications.

Event handlers enqueue ``send_*`` tasks with ids only, the task loads
fresh rows. Every task logs and swallows its own errors so a broken
transport never fails the worker chain.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore
from django.utils import timezone  # type: ignore

from .models import Notification
from .services import NotificationDispatcher, booking_template_data, payment_template_data

logger = logging.getLogger(__name__)


# ============================================================================
# EVENT DRIVEN TASKS
# ============================================================================

@shared_task(name="notifications.send_booking_notification")
def send_booking_notification(booking_id: int, channel: str, reason: str = "") -> int:
    """Notify the owner of a booking. Returns the number of rows created."""
    from apps.bookings.models import Booking

    booking = Booking.objects.select_related("user", "space").filter(pk=booking_id).first()
    if booking is None:
        logger.warning(f"Booking {booking_id} vanished before {channel} notification")
        return 0
    sent = NotificationDispatcher().notify_user(
        channel, booking.user, booking_template_data(booking, reason), booking=booking
    )
    return len(sent)


@shared_task(name="notifications.send_payment_notification")
def send_payment_notification(payment_id: int, channel: str) -> int:
    """Notify the payer about a payment outcome."""
    from apps.finances.models import Payment

    payment = Payment.objects.select_related("booking__user").filter(pk=payment_id).first()
    if payment is None:
        logger.warning(f"Payment {payment_id} vanished before {channel} notification")
        return 0
    sent = NotificationDispatcher().notify_user(
        channel,
        payment.booking.user,
        payment_template_data(payment),
        booking=payment.booking,
        payment=payment,
    )
    return len(sent)


@shared_task(name="notifications.send_welcome_notification")
def send_welcome_notification(user_id: int) -> int:
    user = get_user_model().objects.filter(pk=user_id).first()
    if user is None:
        return 0
    return len(NotificationDispatcher().notify_user(Notification.Channel.USER_REGISTRATION, user, {}))


# ============================================================================
# PERIODIC TASKS (Celery Beat)
# ============================================================================

@shared_task(name="notifications.resend_failed")
def resend_failed() -> dict[str, int]:
    """
    Retry failed notifications that still have attempts left.

    Only the latest row of a retry chain is picked up, a row that already
    has a retry is skipped.
    """
    max_retries = settings.NOTIFICATIONS_MAX_RETRIES
    candidates = (
        Notification.objects.select_related("user", "booking", "payment")
        .filter(status=Notification.Status.FAILED, retry_count__lt=max_retries, retries__isnull=True)
        .order_by("created_at")
    )
    dispatcher = NotificationDispatcher()
    resent = failed = 0
    for notification in candidates:
        new = dispatcher.resend(notification)
        if new is not None and new.status == Notification.Status.SENT:
            resent += 1
        else:
            failed += 1

    logger.info(f"Resent {resent} failed notifications ({failed} still failing)")
    return {"resent": resent, "failed": failed}


@shared_task(name="notifications.send_booking_reminders")
def send_booking_reminders() -> int:
    """Remind owners of confirmed bookings taking place tomorrow."""
    from apps.bookings.models import Booking

    tomorrow = timezone.localdate() + timedelta(days=1)
    bookings = Booking.objects.select_related("user", "space").filter(
        status=Booking.Status.CONFIRMED, date=tomorrow
    )
    dispatcher = NotificationDispatcher()
    count = 0
    for booking in bookings:
        already = Notification.objects.filter(
            booking=booking, channel=Notification.Channel.BOOKING_REMINDER
        ).exists()
        if already:
            continue
        dispatcher.notify_user(
            Notification.Channel.BOOKING_REMINDER, booking.user, booking_template_data(booking), booking=booking
        )
        count += 1

    logger.info(f"Sent reminders for {count} bookings on {tomorrow}")
    return count
