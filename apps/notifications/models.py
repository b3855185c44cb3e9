"""Notification model and its delivery state machine.

pending -> sent -> delivered -> read
pending -> failed

A retry creates a new row, a failed row is never reopened.
"""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Notification(models.Model):
    """One delivery attempt of a message to a user."""

    class Type(models.TextChoices):
        EMAIL = "email", _("Email")
        PUSH = "push", _("Push")
        SMS = "sms", _("SMS")

    class Channel(models.TextChoices):
        BOOKING_CONFIRMATION = "booking_confirmation", _("Booking confirmation")
        BOOKING_CANCELLATION = "booking_cancellation", _("Booking cancellation")
        PAYMENT_SUCCESS = "payment_success", _("Payment success")
        PAYMENT_FAILED = "payment_failed", _("Payment failed")
        PAYMENT_REFUND = "payment_refund", _("Payment refund")
        BOOKING_REMINDER = "booking_reminder", _("Booking reminder")
        USER_REGISTRATION = "user_registration", _("User registration")

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        SENT = "sent", _("Sent")
        DELIVERED = "delivered", _("Delivered")
        READ = "read", _("Read")
        FAILED = "failed", _("Failed")

    user = models.ForeignKey(
        "users.CustomUser",
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    type = models.CharField(max_length=10, choices=Type.choices)
    channel = models.CharField(max_length=40, choices=Channel.choices)
    recipient = models.CharField(max_length=255)
    subject = models.CharField(max_length=255, blank=True)
    content = models.TextField(blank=True)
    template_name = models.CharField(max_length=100, blank=True)
    template_data = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    metadata = models.JSONField(default=dict, blank=True)
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications",
    )
    payment = models.ForeignKey(
        "finances.Payment",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications",
    )
    retry_of = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="retries",
    )
    sent_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    read_at = models.DateTimeField(null=True, blank=True)
    error_message = models.TextField(blank=True)
    retry_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "created_at"]),
            models.Index(fields=["status", "retry_count"]),
        ]

    def __str__(self) -> str:
        return f"{self.channel} via {self.type} to {self.recipient} ({self.status})"

    @property
    def owner_id(self):
        return self.user_id

    @property
    def manager_id(self):
        return None

    def mark_sent(self) -> None:
        self.status = self.Status.SENT
        self.sent_at = timezone.now()
        self.error_message = ""
        self.save(update_fields=["status", "sent_at", "error_message", "updated_at"])

    def mark_failed(self, error: str) -> None:
        self.status = self.Status.FAILED
        self.error_message = error[:2000]
        self.retry_count += 1
        self.save(update_fields=["status", "error_message", "retry_count", "updated_at"])

    def mark_delivered(self) -> bool:
        if self.status != self.Status.SENT:
            return False
        self.status = self.Status.DELIVERED
        self.delivered_at = timezone.now()
        self.save(update_fields=["status", "delivered_at", "updated_at"])
        return True

    def mark_read(self) -> bool:
        if self.status not in (self.Status.SENT, self.Status.DELIVERED):
            return False
        now = timezone.now()
        if self.delivered_at is None:
            self.delivered_at = now
        self.status = self.Status.READ
        self.read_at = now
        self.save(update_fields=["status", "delivered_at", "read_at", "updated_at"])
        return True
