"""Message templates per notification channel.

Templates use ``str.format`` placeholders. A missing placeholder leaves
the template text as is instead of failing the delivery.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


TEMPLATES: dict[str, dict[str, str]] = {
    "booking_confirmation": {
        "subject": "Booking #{booking_id} confirmed",
        "body": (
            "Hello {name},\n\n"
            "Your booking of {space_name} on {date} from {start_time} to {end_time} is confirmed.\n"
            "Total: {total_price}\n"
        ),
        "push": "Booking #{booking_id} for {space_name} on {date} is confirmed.",
    },
    "booking_cancellation": {
        "subject": "Booking #{booking_id} cancelled",
        "body": (
            "Hello {name},\n\n"
            "Your booking of {space_name} on {date} from {start_time} to {end_time} was cancelled.\n"
            "{reason}\n"
        ),
        "push": "Booking #{booking_id} for {space_name} on {date} was cancelled.",
    },
    "payment_success": {
        "subject": "Payment received for booking #{booking_id}",
        "body": "Hello {name},\n\nWe received your payment of {amount} for booking #{booking_id}.\n",
        "push": "Payment of {amount} received.",
    },
    "payment_failed": {
        "subject": "Payment failed for booking #{booking_id}",
        "body": (
            "Hello {name},\n\n"
            "Your payment of {amount} for booking #{booking_id} failed and the booking was cancelled.\n"
        ),
        "push": "Payment of {amount} failed.",
    },
    "payment_refund": {
        "subject": "Refund for booking #{booking_id}",
        "body": "Hello {name},\n\nYour payment of {amount} for booking #{booking_id} was refunded.\n",
        "push": "Refund of {amount} issued.",
    },
    "booking_reminder": {
        "subject": "Reminder: {space_name} on {date}",
        "body": (
            "Hello {name},\n\n"
            "This is a reminder of your booking of {space_name} on {date} from {start_time} to {end_time}.\n"
        ),
        "push": "Tomorrow: {space_name} at {start_time}.",
    },
    "user_registration": {
        "subject": "Welcome to SpaceBook",
        "body": "Hello {name},\n\nYour account {email} is ready. You can now book spaces.\n",
        "push": "Welcome to SpaceBook!",
    },
}


def _format(template: str, data: dict) -> str:
    try:
        return template.format(**data)
    except (KeyError, IndexError, ValueError) as e:
        logger.warning(f"Template placeholder missing: {e}")
        return template


def render(channel: str, data: dict, short: bool = False) -> tuple[str, str]:
    """Return ``(subject, content)`` for a channel.

    ``short`` selects the one-line variant used for push and SMS.
    """
    template = TEMPLATES.get(channel)
    if template is None:
        raise KeyError(f"No template for channel {channel}")
    subject = _format(template["subject"], data)
    content = _format(template["push"] if short else template["body"], data)
    return subject, content
