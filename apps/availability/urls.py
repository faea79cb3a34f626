"""URL declarations for the availability app."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import AvailabilityCheckView, BlockedRangeViewSet

router = DefaultRouter()
router.register(r"blocked-ranges", BlockedRangeViewSet, basename="blocked-range")

urlpatterns = [
    path("availability/check/", AvailabilityCheckView.as_view(), name="availability-check"),
    path("", include(router.urls)),
]
