"""Admin registration for notifications."""

from __future__ import annotations

from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "type", "channel", "status", "retry_count", "created_at", "sent_at")
    list_filter = ("type", "channel", "status")
    search_fields = ("user__email", "recipient", "subject")
    readonly_fields = ("retry_of", "sent_at", "delivered_at", "read_at", "created_at", "updated_at")
