"""Serializers for blocked ranges and availability checks."""

from __future__ import annotations

from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore
from rest_framework import serializers  # type: ignore

from apps.catalog.models import PricingOption, Service

from .models import BlockedRange


class BlockedRangeSerializer(serializers.ModelSerializer):
    services = serializers.SlugRelatedField(many=True, read_only=True, slug_field="code")
    blocked_by = serializers.SerializerMethodField()

    class Meta:
        model = BlockedRange
        fields = [
            "id",
            "start_date",
            "end_date",
            "services",
            "applies_to_all_services",
            "reason",
            "blocked_by",
            "created_at",
        ]
        read_only_fields = fields

    def get_blocked_by(self, obj: BlockedRange) -> str | None:
        return obj.blocked_by.email if obj.blocked_by else None


class BlockedRangeWriteSerializer(serializers.ModelSerializer):
    services = serializers.SlugRelatedField(
        many=True,
        slug_field="code",
        queryset=Service.objects.all(),
        required=False,
    )

    class Meta:
        model = BlockedRange
        fields = ["start_date", "end_date", "services", "reason"]

    def validate_reason(self, value: str) -> str:  # type: ignore
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("A reason is required.")
        return value

    def validate(self, attrs):  # type: ignore
        start_date = attrs["start_date"]
        end_date = attrs["end_date"]
        if start_date < timezone.localdate():
            raise serializers.ValidationError({"start_date": "Start date cannot be in the past."})
        if end_date < start_date:
            raise serializers.ValidationError({"end_date": "End date cannot be before start date."})
        return attrs

    @transaction.atomic
    def create(self, validated_data):  # type: ignore
        services = validated_data.pop("services", [])
        blocked_range = BlockedRange.objects.create(
            applies_to_all_services=not services,
            **validated_data,
        )
        if services:
            blocked_range.services.set(services)
        return blocked_range


class AvailabilityCheckSerializer(serializers.Serializer):
    service = serializers.SlugRelatedField(slug_field="code", queryset=Service.objects.all())
    check_in = serializers.DateTimeField()
    check_out = serializers.DateTimeField(required=False)
    option = serializers.SlugField(required=False)

    def validate(self, attrs):  # type: ignore
        # Local import to prevent circular dependency
        from apps.catalog.pricing import resolve_window

        option_code = attrs.pop("option", None)
        if option_code:
            try:
                option = attrs["service"].pricing_options.get(code=option_code)
            except PricingOption.DoesNotExist:
                raise serializers.ValidationError({"option": "Unknown pricing option for this service."})
            attrs["check_in"], attrs["check_out"] = resolve_window(option, attrs["check_in"])
        elif "check_out" not in attrs:
            raise serializers.ValidationError({"check_out": "Provide check_out or a pricing option."})
        return attrs
