"""API views for promo codes."""

from __future__ import annotations

import logging

from rest_framework import mixins, permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsResortStaff

from .models import PromoCode
from .serializers import PromoCodePublicSerializer, PromoCodeSerializer, PromoValidationSerializer
from .services import validate_promo_code

logger = logging.getLogger(__name__)


class PromoCodeViewSet(
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Staff manage promo codes; customers can list active ones and validate a code."""

    queryset = PromoCode.objects.all()
    serializer_class = PromoCodeSerializer
    permission_classes = [IsResortStaff]

    def perform_create(self, serializer):  # type: ignore
        promo = serializer.save()
        logger.info(f"Promo code {promo.code} created by {self.request.user.pk}")

    @action(detail=False, methods=["get"], permission_classes=[permissions.AllowAny])
    def active(self, request):  # type: ignore
        serializer = PromoCodePublicSerializer(PromoCode.objects.active(), many=True)
        return Response(serializer.data)

    @action(detail=False, methods=["post"], permission_classes=[permissions.AllowAny])
    def validate(self, request):  # type: ignore
        serializer = PromoValidationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        quote = validate_promo_code(
            serializer.validated_data["code"],
            serializer.validated_data["subtotal"],
        )
        return Response(
            {
                "code": quote.code,
                "discount_percentage": quote.discount_percentage,
                "discount_amount": quote.discount_amount,
            }
        )
