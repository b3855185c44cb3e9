"""Delivery backends, one per notification type.

A sender either returns normally (delivered to the transport) or
raises DeliveryError. Transport exceptions are wrapped so the
dispatcher can record them on the notification row.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import requests  # type: ignore
from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore

logger = logging.getLogger(__name__)


class DeliveryError(Exception):
    """Delivery through a transport failed."""


class BaseSender(ABC):
    """Base class for senders"""

    @abstractmethod
    def send(self, notification) -> None:
        pass


class EmailSender(BaseSender):
    """Email via Django's configured EMAIL_BACKEND"""

    def send(self, notification) -> None:
        if not notification.recipient:
            raise DeliveryError("No email address")
        try:
            sent = send_mail(
                subject=notification.subject,
                message=notification.content,
                from_email=settings.DEFAULT_FROM_EMAIL,
                recipient_list=[notification.recipient],
                fail_silently=False,
            )
        except Exception as e:
            raise DeliveryError(f"SMTP error: {e}") from e
        if not sent:
            raise DeliveryError("Email backend accepted no messages")


class PushSender(BaseSender):
    """Push through the Firebase Cloud Messaging HTTP endpoint"""

    def send(self, notification) -> None:
        server_key = getattr(settings, "FCM_SERVER_KEY", "")
        if not server_key:
            raise DeliveryError("FCM is not configured")
        if not notification.recipient:
            raise DeliveryError("No push token")
        payload = {
            "to": notification.recipient,
            "notification": {"title": notification.subject, "body": notification.content},
            "data": {
                "channel": notification.channel,
                "booking_id": notification.booking_id,
                "payment_id": notification.payment_id,
            },
        }
        try:
            response = requests.post(
                settings.FCM_ENDPOINT,
                json=payload,
                headers={"Authorization": f"key={server_key}"},
                timeout=settings.NOTIFICATIONS_HTTP_TIMEOUT,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise DeliveryError(f"FCM error: {e}") from e


class SmsSender(BaseSender):
    """SMS through an HTTP gateway"""

    def send(self, notification) -> None:
        url = getattr(settings, "SMS_GATEWAY_URL", "")
        if not url:
            raise DeliveryError("SMS gateway is not configured")
        if not notification.recipient:
            raise DeliveryError("No phone number")
        try:
            response = requests.post(
                url,
                json={"to": notification.recipient, "text": notification.content},
                headers={"Authorization": f"Bearer {settings.SMS_GATEWAY_TOKEN}"},
                timeout=settings.NOTIFICATIONS_HTTP_TIMEOUT,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise DeliveryError(f"SMS gateway error: {e}") from e


DEFAULT_SENDERS = {
    "email": EmailSender,
    "push": PushSender,
    "sms": SmsSender,
}
