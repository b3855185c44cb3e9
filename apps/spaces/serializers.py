"""Serializers for the space catalog."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Location, Space


class LocationSerializer(serializers.ModelSerializer):
    manager_id = serializers.ReadOnlyField()

    class Meta:
        model = Location
        fields = ["id", "name", "address", "city", "manager_id", "is_active"]


class SpaceSerializer(serializers.ModelSerializer):
    location_id = serializers.ReadOnlyField(source="location.id")
    location_name = serializers.ReadOnlyField(source="location.name")

    class Meta:
        model = Space
        fields = [
            "id",
            "location_id",
            "location_name",
            "name",
            "description",
            "space_type",
            "capacity",
            "price_per_hour",
            "price_per_day",
            "is_active",
        ]
