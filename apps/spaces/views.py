"""Read-only catalog API. Catalog editing happens in the Django admin."""

from __future__ import annotations

from rest_framework import permissions, viewsets  # type: ignore

from .filters import SpaceFilterSet
from .models import Location, Space
from .serializers import LocationSerializer, SpaceSerializer


class LocationViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Location.objects.filter(is_active=True).select_related("manager")
    serializer_class = LocationSerializer
    permission_classes = [permissions.AllowAny]


class SpaceViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Space.objects.filter(is_active=True).select_related("location")
    serializer_class = SpaceSerializer
    permission_classes = [permissions.AllowAny]
    filterset_class = SpaceFilterSet
    lookup_value_regex = r"\d+"
