"""FilterSet definitions for reservation listings."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Reservation


class ReservationFilterSet(django_filters.FilterSet):
    service = django_filters.CharFilter(field_name="service__code", lookup_expr="exact")
    check_in_after = django_filters.DateFilter(field_name="check_in", lookup_expr="date__gte")
    check_in_before = django_filters.DateFilter(field_name="check_in", lookup_expr="date__lte")
    # Matches every member of a multi-amenity group
    group = django_filters.UUIDFilter(field_name="multi_amenity_group_id")

    class Meta:
        model = Reservation
        fields = [
            "status",
            "payment_status",
            "reschedule_status",
            "service",
        ]
