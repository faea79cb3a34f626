"""Serializers for the service catalog."""

from __future__ import annotations

from django.db import transaction  # type: ignore
from django.db.models import ProtectedError  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import PricingOption, Service
from .pricing import option_shape_errors


class PricingOptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = PricingOption
        fields = [
            "id",
            "code",
            "label",
            "price",
            "hours",
            "time_slot",
            "guest_min",
            "guest_max",
            "sort_order",
        ]
        read_only_fields = ["id"]


class ServiceSerializer(serializers.ModelSerializer):
    pricing_options = PricingOptionSerializer(many=True, read_only=True)

    class Meta:
        model = Service
        fields = [
            "id",
            "code",
            "name",
            "category",
            "description",
            "max_guests",
            "pricing_model",
            "inclusions",
            "is_active",
            "pricing_options",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ServiceWriteSerializer(serializers.ModelSerializer):
    """Create/update a service together with its pricing options."""

    pricing_options = PricingOptionSerializer(many=True)

    class Meta:
        model = Service
        fields = [
            "code",
            "name",
            "category",
            "description",
            "max_guests",
            "pricing_model",
            "inclusions",
            "is_active",
            "pricing_options",
        ]

    def validate_inclusions(self, value):  # type: ignore
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise serializers.ValidationError("Inclusions must be a list of strings.")
        return value

    def validate(self, attrs):  # type: ignore
        pricing_model = attrs.get("pricing_model") or getattr(self.instance, "pricing_model", None)
        options = attrs.get("pricing_options")
        if options is None:
            return attrs
        if not options:
            raise serializers.ValidationError({"pricing_options": "At least one pricing option is required."})

        codes = [option["code"] for option in options]
        if len(codes) != len(set(codes)):
            raise serializers.ValidationError({"pricing_options": "Option codes must be unique."})

        errors = []
        for option in options:
            errors.append(
                option_shape_errors(
                    pricing_model,
                    hours=option.get("hours"),
                    time_slot=option.get("time_slot"),
                    guest_min=option.get("guest_min"),
                    guest_max=option.get("guest_max"),
                )
            )
        if any(errors):
            raise serializers.ValidationError({"pricing_options": errors})
        return attrs

    @transaction.atomic
    def create(self, validated_data):  # type: ignore
        options = validated_data.pop("pricing_options")
        service = Service.objects.create(**validated_data)
        PricingOption.objects.bulk_create(
            [PricingOption(service=service, **option) for option in options]
        )
        return service

    @transaction.atomic
    def update(self, instance: Service, validated_data):  # type: ignore
        options = validated_data.pop("pricing_options", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        if options is None:
            return instance

        codes = [option["code"] for option in options]
        try:
            instance.pricing_options.exclude(code__in=codes).delete()
        except ProtectedError:
            raise serializers.ValidationError(
                {"pricing_options": "Options referenced by reservations cannot be removed."}
            )
        for option in options:
            PricingOption.objects.update_or_create(
                service=instance,
                code=option["code"],
                defaults={key: value for key, value in option.items() if key != "code"},
            )
        return instance


class QuoteRequestSerializer(serializers.Serializer):
    option = serializers.SlugField()
    check_in = serializers.DateTimeField()
    guests = serializers.IntegerField(min_value=1, required=False)
