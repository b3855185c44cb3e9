"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "space",
        "user",
        "date",
        "start_time",
        "end_time",
        "status",
        "total_hours",
        "total_price",
        "created_at",
    )
    list_filter = ("status", "date", "space__location")
    search_fields = ("user__email", "space__name")
    readonly_fields = ("total_hours", "total_price", "created_at", "updated_at")
