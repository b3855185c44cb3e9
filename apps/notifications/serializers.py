"""Serializers for notifications."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """Read-only representation of a notification row."""

    class Meta:
        model = Notification
        fields = [
            'id', 'type', 'channel', 'recipient', 'subject', 'content', 'status',
            'booking', 'payment', 'retry_of', 'retry_count', 'error_message', 'metadata',
            'sent_at', 'delivered_at', 'read_at', 'created_at',
        ]
        read_only_fields = fields
