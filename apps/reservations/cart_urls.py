"""URL routing for cart drafts."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import CartViewSet

router = DefaultRouter()
router.register(r"", CartViewSet, basename="cart")

urlpatterns = [
    path("", include(router.urls)),
]
