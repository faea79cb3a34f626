from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import PromoCodeViewSet

router = DefaultRouter()
router.register(r"", PromoCodeViewSet, basename="promo-code")

urlpatterns = [
    path("", include(router.urls)),
]
