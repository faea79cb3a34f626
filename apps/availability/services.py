"""Availability checking against blocked ranges and existing reservations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from django.db import DatabaseError  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.exceptions import ConflictError, DomainValidationError
from shared.domain.value_objects import StayWindow

from .models import BlockedRange

logger = logging.getLogger(__name__)

ALREADY_BOOKED_REASON = "already booked"


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    conflict_reason: str | None = None

    def as_dict(self) -> dict:
        return {"available": self.available, "conflict_reason": self.conflict_reason}


def _service_pk(service) -> int:
    service_id = getattr(service, "pk", service)
    if service_id in (None, ""):
        raise DomainValidationError("A service is required.")
    try:
        return int(service_id)
    except (TypeError, ValueError):
        raise DomainValidationError(f"Invalid service id: {service_id}")


def build_window(check_in, check_out) -> StayWindow:
    """Validate a candidate window before any store is queried."""
    if not isinstance(check_in, datetime) or not isinstance(check_out, datetime):
        raise DomainValidationError("Check-in and check-out date/times are required.")
    if timezone.is_naive(check_in):
        check_in = timezone.make_aware(check_in)
    if timezone.is_naive(check_out):
        check_out = timezone.make_aware(check_out)
    try:
        return StayWindow(check_in, check_out)
    except ValueError:
        raise DomainValidationError("Check-out must be after check-in.")


def find_blocking_range(service_id: int, window: StayWindow) -> BlockedRange | None:
    return (
        BlockedRange.objects.for_service(service_id)
        .filter(start_date__lte=window.last_day, end_date__gte=window.first_day)
        .order_by("start_date", "id")
        .first()
    )


def find_overlapping_reservation(
    service_id: int,
    window: StayWindow,
    exclude_ids: Iterable[int] = (),
):
    # Local import to prevent circular dependency
    from apps.reservations.models import Reservation

    qs = (
        Reservation.objects.blocking()
        .filter(service_id=service_id)
        .filter(check_in__lte=window.check_out, check_out__gte=window.check_in)
    )
    exclude_ids = [pk for pk in exclude_ids if pk is not None]
    if exclude_ids:
        qs = qs.exclude(pk__in=exclude_ids)
    return qs.order_by("check_in").first()


def is_available(
    service,
    check_in: datetime,
    check_out: datetime,
    *,
    exclude_ids: Iterable[int] = (),
) -> AvailabilityResult:
    """
    Decide whether ``service`` can be booked for the given window.

    Blocked ranges are compared at day resolution, reservations at full
    timestamp resolution; both comparisons are inclusive. A read failure
    on either store is logged and treated as "no conflicts found".
    """
    service_id = _service_pk(service)
    window = build_window(check_in, check_out)

    try:
        blocked = find_blocking_range(service_id, window)
    except DatabaseError:
        logger.warning(
            f"Blocked range lookup failed for service {service_id}; treating as unblocked",
            exc_info=True,
        )
        blocked = None
    if blocked is not None:
        return AvailabilityResult(False, blocked.reason)

    try:
        clash = find_overlapping_reservation(service_id, window, exclude_ids)
    except DatabaseError:
        logger.warning(
            f"Reservation lookup failed for service {service_id}; treating as unbooked",
            exc_info=True,
        )
        clash = None
    if clash is not None:
        return AvailabilityResult(False, ALREADY_BOOKED_REASON)

    return AvailabilityResult(True)


def ensure_available(
    service,
    check_in: datetime,
    check_out: datetime,
    *,
    exclude_ids: Iterable[int] = (),
) -> None:
    result = is_available(service, check_in, check_out, exclude_ids=exclude_ids)
    if not result.available:
        raise ConflictError(result.conflict_reason)
