"""URL routing for the space catalog."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import LocationViewSet, SpaceViewSet

router = SimpleRouter()
router.register(r"locations", LocationViewSet, basename="location")
router.register(r"", SpaceViewSet, basename="space")

urlpatterns = [
    path("", include(router.urls)),
]
