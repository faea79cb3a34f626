"""Reservation models for the resort."""

from __future__ import annotations

import secrets
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import StayWindow

from .domain.states import (
    APPROVED_PAYMENT_STATUSES,
    NON_BLOCKING_STATUSES,
    PaymentStatus,
    PaymentType,
    RescheduleStatus,
    ReservationStatus,
)


class ReservationQuerySet(models.QuerySet):
    def visible(self):
        """Everything except cart drafts."""
        return self.exclude(status=ReservationStatus.CART)

    def blocking(self):
        """Reservations that occupy their service."""
        return self.exclude(status__in=NON_BLOCKING_STATUSES)

    def in_group(self, group_id):
        return self.filter(multi_amenity_group_id=group_id).order_by("multi_amenity_index", "pk")


class Reservation(models.Model):
    """A booking of one service for one stay window."""

    Status = ReservationStatus
    PaymentStatus = PaymentStatus
    RescheduleStatus = RescheduleStatus
    PaymentType = PaymentType

    formal_id = models.CharField(max_length=32, unique=True, editable=False)
    reservation_hash = models.CharField(max_length=64, unique=True, editable=False)

    account = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reservations",
    )
    service = models.ForeignKey(
        "catalog.Service",
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    pricing_option = models.ForeignKey(
        "catalog.PricingOption",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="reservations",
    )
    option_label = models.CharField(max_length=100, blank=True)
    check_in = models.DateTimeField()
    check_out = models.DateTimeField()

    full_name = models.CharField(max_length=150)
    email = models.EmailField()
    phone = models.CharField(max_length=20)
    address = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)
    guests = models.PositiveSmallIntegerField(default=1)

    base_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount_code = models.CharField(max_length=32, blank=True)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    final_total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    downpayment_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    remaining_balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(
        max_length=20,
        choices=ReservationStatus.choices,
        default=ReservationStatus.PENDING,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    payment_type = models.CharField(max_length=20, choices=PaymentType.choices, blank=True)
    gcash_reference_number = models.CharField(max_length=64, blank=True)
    receipt_file_name = models.CharField(
        max_length=255,
        blank=True,
        help_text=_("File name returned by the receipt storage."),
    )
    receipt_uploaded_at = models.DateTimeField(null=True, blank=True)
    payment_reviewed_at = models.DateTimeField(null=True, blank=True)
    payment_reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_reservations",
    )
    payment_rejection_reason = models.CharField(max_length=255, blank=True)
    promo_usage_applied = models.BooleanField(default=False)

    is_multi_amenity = models.BooleanField(default=False)
    multi_amenity_group_id = models.UUIDField(null=True, blank=True, db_index=True)
    multi_amenity_index = models.PositiveSmallIntegerField(default=0)
    multi_amenity_total = models.PositiveSmallIntegerField(default=1)
    multi_amenity_group_primary = models.BooleanField(default=False)
    group_final_total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("Total of the whole group, stored on the primary member only."),
    )

    reschedule_status = models.CharField(
        max_length=10,
        choices=RescheduleStatus.choices,
        default=RescheduleStatus.NONE,
    )
    reschedule_proposed_check_in = models.DateTimeField(null=True, blank=True)
    reschedule_proposed_check_out = models.DateTimeField(null=True, blank=True)
    reschedule_reason = models.TextField(blank=True)
    reschedule_requested_at = models.DateTimeField(null=True, blank=True)
    reschedule_decided_at = models.DateTimeField(null=True, blank=True)
    reschedule_rejection_reason = models.TextField(blank=True)

    checked_in_at = models.DateTimeField(null=True, blank=True)
    checked_out_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ReservationQuerySet.as_manager()

    class Meta:
        verbose_name = _("Reservation")
        verbose_name_plural = _("Reservations")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="reservation_valid_window",
            ),
        ]
        indexes = [
            models.Index(fields=["service", "check_in", "check_out"], name="reservation_service_window_idx"),
            models.Index(fields=["status"], name="reservation_status_idx"),
            models.Index(fields=["payment_status"], name="reservation_payment_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.formal_id} ({self.service_id})"

    @staticmethod
    def generate_hash() -> str:
        return secrets.token_hex(16)

    @property
    def window(self) -> StayWindow:
        return StayWindow(self.check_in, self.check_out)

    @property
    def is_payment_approved(self) -> bool:
        return self.payment_status in APPROVED_PAYMENT_STATUSES

    @property
    def has_pending_reschedule(self) -> bool:
        return self.reschedule_status == RescheduleStatus.PENDING

    def clear_reschedule_overlay(self) -> None:
        self.reschedule_proposed_check_in = None
        self.reschedule_proposed_check_out = None
        self.reschedule_reason = ""
