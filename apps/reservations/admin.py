"""Admin registration for reservations."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Reservation


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = (
        "formal_id",
        "service",
        "full_name",
        "status",
        "payment_status",
        "reschedule_status",
        "check_in",
        "check_out",
        "final_total",
        "created_at",
    )
    list_filter = ("status", "payment_status", "reschedule_status", "is_multi_amenity", "service")
    search_fields = ("formal_id", "reservation_hash", "full_name", "email", "phone", "gcash_reference_number")
    readonly_fields = (
        "formal_id",
        "reservation_hash",
        "multi_amenity_group_id",
        "created_at",
        "updated_at",
    )
    date_hierarchy = "check_in"
