from __future__ import annotations

from decimal import Decimal

from django.utils import timezone  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import PromoCode


class PromoCodeSerializer(serializers.ModelSerializer):
    class Meta:
        model = PromoCode
        fields = [
            "id",
            "code",
            "description",
            "discount_percentage",
            "expiration_date",
            "min_purchase_amount",
            "usage_limit",
            "times_used",
            "is_active",
            "created_at",
        ]
        read_only_fields = ["id", "times_used", "created_at"]

    def validate_code(self, value: str) -> str:  # type: ignore
        value = value.strip().upper()
        qs = PromoCode.objects.filter(code=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("Promo code already exists.")
        return value

    def validate_expiration_date(self, value):  # type: ignore
        if value < timezone.localdate():
            raise serializers.ValidationError("Expiration date cannot be in the past.")
        return value


class PromoCodePublicSerializer(serializers.ModelSerializer):
    class Meta:
        model = PromoCode
        fields = ["code", "description", "discount_percentage", "expiration_date", "min_purchase_amount"]
        read_only_fields = fields


class PromoValidationSerializer(serializers.Serializer):
    code = serializers.CharField()
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.00"))
