"""Admin registration for the space catalog."""

from __future__ import annotations

from django.contrib import admin

from .models import Location, Space


class SpaceInline(admin.TabularInline):
    model = Space
    extra = 0
    fields = ("name", "space_type", "capacity", "price_per_hour", "price_per_day", "is_active")


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ("name", "city", "manager", "is_active")
    list_filter = ("city", "is_active")
    search_fields = ("name", "address", "manager__email")
    inlines = [SpaceInline]


@admin.register(Space)
class SpaceAdmin(admin.ModelAdmin):
    list_display = ("name", "location", "space_type", "capacity", "price_per_hour", "price_per_day", "is_active")
    list_filter = ("space_type", "is_active", "location")
    search_fields = ("name", "location__name")
