"""API views for the service catalog."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsResortStaffOrReadOnly, is_resort_staff
from shared.domain.exceptions import NotFoundError

from .models import PricingOption, Service
from . import pricing
from .serializers import QuoteRequestSerializer, ServiceSerializer, ServiceWriteSerializer


class ServiceViewSet(viewsets.ModelViewSet):
    """Resort amenities. Anyone can browse active services; staff manage them."""

    queryset = Service.objects.prefetch_related("pricing_options")
    permission_classes = [IsResortStaffOrReadOnly]
    lookup_field = "code"
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["category", "pricing_model"]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        if is_resort_staff(self.request.user):
            return qs
        return qs.filter(is_active=True)

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "update", "partial_update"}:
            return ServiceWriteSerializer
        return ServiceSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        response = super().create(request, *args, **kwargs)
        service = Service.objects.get(code=response.data["code"])
        response.data = ServiceSerializer(service).data
        return response

    @action(detail=True, methods=["post"], permission_classes=[permissions.AllowAny])
    def quote(self, request, code=None):  # type: ignore
        """Price and authoritative stay window for an option and check-in."""
        service = self.get_object()
        serializer = QuoteRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            option = service.pricing_options.get(code=data["option"])
        except PricingOption.DoesNotExist:
            raise NotFoundError(f"Pricing option '{data['option']}' not found for {service.name}.")
        stay = pricing.quote(service, option, data["check_in"], data.get("guests"))
        return Response(stay.as_dict())
