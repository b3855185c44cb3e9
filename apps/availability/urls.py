"""URL routing for availability blocks."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import AvailabilityViewSet

router = SimpleRouter()
router.register(r"", AvailabilityViewSet, basename="availability")

urlpatterns = [
    path("", include(router.urls)),
]
