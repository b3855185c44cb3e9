"""Admin registration for availability blocks."""

from __future__ import annotations

from django.contrib import admin

from .models import AvailabilityBlock


@admin.register(AvailabilityBlock)
class AvailabilityBlockAdmin(admin.ModelAdmin):
    list_display = ("space", "date", "start_time", "end_time", "is_available")
    list_filter = ("is_available", "date", "space__location")
    search_fields = ("space__name", "notes")
    date_hierarchy = "date"
