"""URL configuration for the resort reservations project.

The `urlpatterns` list routes URLs to views. It includes the Django admin,
the application‑level routers of each app and the OpenAPI schema views.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView  # type: ignore

# API versioning. v1 is our initial version; future versions can be added here.

urlpatterns = [
    path('admin/', admin.site.urls),
    # Application URLs
    path('api/v1/auth/', include(('apps.users.auth_urls', 'auth'), namespace='auth')),
    path('api/v1/services/', include('apps.catalog.urls')),
    path('api/v1/', include('apps.availability.urls')),
    path('api/v1/reservations/', include('apps.reservations.urls')),
    path('api/v1/cart/', include('apps.reservations.cart_urls')),
    path('api/v1/promo-codes/', include('apps.promotions.urls')),
    # API documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]
