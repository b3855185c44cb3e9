"""FilterSet for the space catalog."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Space


class SpaceFilterSet(django_filters.FilterSet):
    location_id = django_filters.NumberFilter(field_name="location_id")

    class Meta:
        model = Space
        fields = ["location_id"]
