"""Serializers for the reservations domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.catalog.models import PricingOption, Service

from .domain.states import PaymentType
from .models import Reservation
from .services import ReservationRequest, resolve_guest_details


class ReservationSerializer(serializers.ModelSerializer):
    service = serializers.SlugRelatedField(slug_field="code", read_only=True)
    service_name = serializers.CharField(source="service.name", read_only=True)
    pricing_option = serializers.SlugRelatedField(slug_field="code", read_only=True)

    class Meta:
        model = Reservation
        fields = [
            "id",
            "formal_id",
            "reservation_hash",
            "service",
            "service_name",
            "pricing_option",
            "option_label",
            "check_in",
            "check_out",
            "full_name",
            "email",
            "phone",
            "address",
            "notes",
            "guests",
            "base_price",
            "discount_code",
            "discount_amount",
            "final_total",
            "downpayment_amount",
            "remaining_balance",
            "status",
            "payment_status",
            "payment_type",
            "gcash_reference_number",
            "receipt_file_name",
            "receipt_uploaded_at",
            "payment_reviewed_at",
            "payment_rejection_reason",
            "is_multi_amenity",
            "multi_amenity_group_id",
            "multi_amenity_index",
            "multi_amenity_total",
            "multi_amenity_group_primary",
            "group_final_total",
            "reschedule_status",
            "reschedule_proposed_check_in",
            "reschedule_proposed_check_out",
            "reschedule_reason",
            "reschedule_requested_at",
            "reschedule_decided_at",
            "reschedule_rejection_reason",
            "checked_in_at",
            "checked_out_at",
            "cancelled_at",
            "cancellation_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ReservationWindowSerializer(serializers.ModelSerializer):
    """Booked window of a service, without guest details."""

    class Meta:
        model = Reservation
        fields = ["check_in", "check_out", "status"]
        read_only_fields = fields


class ReservationItemSerializer(serializers.Serializer):
    """One amenity selection: service, pricing option, check-in and guests."""

    service = serializers.SlugRelatedField(slug_field="code", queryset=Service.objects.all())
    option = serializers.SlugField()
    check_in = serializers.DateTimeField()
    # Advisory only; the pricing option decides the real check-out
    check_out = serializers.DateTimeField(required=False, write_only=True)
    guests = serializers.IntegerField(min_value=1, default=1)
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):  # type: ignore
        service = attrs["service"]
        try:
            attrs["pricing_option"] = service.pricing_options.get(code=attrs.pop("option"))
        except PricingOption.DoesNotExist:
            raise serializers.ValidationError({"option": "Unknown pricing option for this service."})
        attrs.pop("check_out", None)
        return attrs


class GuestDetailsSerializer(serializers.Serializer):
    full_name = serializers.CharField(required=False, allow_blank=True, max_length=150)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=20)
    address = serializers.CharField(required=False, allow_blank=True, max_length=255)
    promo_code = serializers.CharField(required=False, allow_blank=True)

    def guest_details(self) -> dict[str, str]:
        request = self.context.get("request")
        account = getattr(request, "user", None)
        return resolve_guest_details(self.validated_data, account)

    @staticmethod
    def to_request(item: dict, details: dict[str, str]) -> ReservationRequest:
        return ReservationRequest(
            service=item["service"],
            option=item["pricing_option"],
            check_in=item["check_in"],
            guests=item["guests"],
            notes=item.get("notes", ""),
            **details,
        )


class ReservationCreateSerializer(GuestDetailsSerializer, ReservationItemSerializer):
    def reservation_request(self) -> ReservationRequest:
        return self.to_request(self.validated_data, self.guest_details())


class MultiReservationCreateSerializer(GuestDetailsSerializer):
    items = ReservationItemSerializer(many=True, allow_empty=False)

    def reservation_requests(self) -> list[ReservationRequest]:
        details = self.guest_details()
        return [self.to_request(item, details) for item in self.validated_data["items"]]


class HashListField(serializers.Field):
    """Reservation hashes as a JSON list or a comma separated string."""

    default_error_messages = {"invalid": "Provide a list or a comma separated string of hashes."}

    def to_internal_value(self, data):  # type: ignore
        if isinstance(data, str):
            values = data.split(",")
        elif isinstance(data, (list, tuple)):
            values = data
        else:
            self.fail("invalid")
        hashes = [str(value).strip() for value in values if str(value).strip()]
        if not hashes:
            self.fail("invalid")
        return hashes

    def to_representation(self, value):  # type: ignore
        return list(value)


class ReceiptUploadSerializer(serializers.Serializer):
    hashes = HashListField()
    gcash_reference_number = serializers.CharField(max_length=64)
    receipt_file_name = serializers.CharField(max_length=255)
    payment_type = serializers.ChoiceField(choices=PaymentType.choices)


class ActionReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
    reservation_hash = serializers.CharField(required=False, allow_blank=True)


class RescheduleRequestSerializer(serializers.Serializer):
    proposed_check_in = serializers.DateTimeField()
    proposed_check_out = serializers.DateTimeField(required=False, allow_null=True)
    reason = serializers.CharField(required=False, allow_blank=True, default="")
    reservation_hash = serializers.CharField(required=False, allow_blank=True)


class RescheduleRejectSerializer(serializers.Serializer):
    reason = serializers.CharField()


class CartSubmitSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False)
    promo_code = serializers.CharField(required=False, allow_blank=True)
