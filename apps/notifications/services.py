"""Notification dispatch.

The dispatcher renders a message, stores a pending row, hands it to the
sender for its type and records the outcome on the row. It never raises
and never retries; retries are issued by ``tasks.resend_failed`` as new
rows.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from django.db import DatabaseError, transaction  # type: ignore

from . import templates
from .models import Notification
from .senders import DEFAULT_SENDERS, BaseSender, DeliveryError

if TYPE_CHECKING:  # pragma: no cover
    from apps.bookings.models import Booking
    from apps.finances.models import Payment
    from apps.users.models import CustomUser

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Render, persist and deliver one notification at a time."""

    def __init__(self, senders: Optional[dict[str, BaseSender]] = None):
        if senders is None:
            senders = {kind: sender_class() for kind, sender_class in DEFAULT_SENDERS.items()}
        self.senders = senders

    def notify(
        self,
        type: str,
        channel: str,
        user: "CustomUser",
        recipient: str,
        subject: str = "",
        template_name: str = "",
        template_data: Optional[dict] = None,
        booking: Optional["Booking"] = None,
        payment: Optional["Payment"] = None,
        metadata: Optional[dict] = None,
        retry_of: Optional[Notification] = None,
    ) -> Optional[Notification]:
        """
        Deliver a notification and return its row.

        Returns None only when the row itself could not be stored.
        """
        template_data = template_data or {}
        template_name = template_name or channel
        try:
            rendered_subject, content = templates.render(
                template_name, template_data, short=type != Notification.Type.EMAIL
            )
        except KeyError as e:
            logger.error(f"Cannot render notification {channel}: {e}")
            rendered_subject, content = subject or channel, ""

        try:
            with transaction.atomic():
                notification = Notification.objects.create(
                    user=user,
                    type=type,
                    channel=channel,
                    recipient=recipient or "",
                    subject=(subject or rendered_subject)[:255],
                    content=content,
                    template_name=template_name,
                    template_data=template_data,
                    booking=booking,
                    payment=payment,
                    metadata=metadata or {},
                    retry_of=retry_of,
                )
        except DatabaseError as e:
            logger.error(f"Failed to store {channel} notification for user {user.pk}: {e}", exc_info=True)
            return None

        sender = self.senders.get(type)
        try:
            if sender is None:
                raise DeliveryError(f"No sender registered for {type}")
            sender.send(notification)
        except DeliveryError as e:
            logger.warning(f"Notification {notification.pk} ({channel} via {type}) failed: {e}")
            notification.mark_failed(str(e))
            return notification
        except Exception as e:
            logger.error(f"Unexpected error sending notification {notification.pk}: {e}", exc_info=True)
            notification.mark_failed(f"Unexpected error: {e}")
            return notification

        notification.mark_sent()
        logger.info(f"Notification {notification.pk} ({channel} via {type}) sent to {notification.recipient}")
        return notification

    def notify_user(self, channel: str, user: "CustomUser", template_data: dict, **kwargs) -> list[Notification]:
        """Email the user, and push as well when a device token is known."""
        template_data = {"name": user.display_name, "email": user.email, **template_data}
        sent = [
            self.notify(Notification.Type.EMAIL, channel, user, user.email, template_data=template_data, **kwargs)
        ]
        if user.fcm_token:
            sent.append(
                self.notify(Notification.Type.PUSH, channel, user, user.fcm_token, template_data=template_data, **kwargs)
            )
        return [n for n in sent if n is not None]

    def resend(self, notification: Notification) -> Optional[Notification]:
        """Issue a new row for a failed notification, the old one stays as it is."""
        new = self.notify(
            notification.type,
            notification.channel,
            notification.user,
            notification.recipient,
            subject=notification.subject,
            template_name=notification.template_name,
            template_data=notification.template_data,
            booking=notification.booking,
            payment=notification.payment,
            metadata=notification.metadata,
            retry_of=notification,
        )
        if new is not None and new.status == Notification.Status.FAILED:
            # carry the attempt counter so the retry budget is bounded
            new.retry_count = notification.retry_count + 1
            new.save(update_fields=["retry_count", "updated_at"])
        return new


def booking_template_data(booking: "Booking", reason: str = "") -> dict:
    return {
        "booking_id": booking.pk,
        "space_name": booking.space.name,
        "date": booking.date.isoformat(),
        "start_time": booking.start_time.strftime("%H:%M"),
        "end_time": booking.end_time.strftime("%H:%M"),
        "total_price": str(booking.total_price),
        "reason": reason,
    }


def payment_template_data(payment: "Payment") -> dict:
    return {
        "booking_id": payment.booking_id,
        "payment_id": payment.pk,
        "amount": str(payment.amount),
        "method": payment.method,
    }

