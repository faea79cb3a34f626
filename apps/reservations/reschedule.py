"""
Reschedule request workflow.

States: NONE -> PENDING -> APPROVED | REJECTED. A decided request may be
followed by a new one. Only one request can be pending per reservation.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.availability.services import build_window, ensure_available
from apps.catalog.pricing import ensure_aware, resolve_window
from shared.domain.exceptions import DomainValidationError, InvalidTransitionError

from .domain.states import (
    SUBMITTED_PAYMENT_STATUSES,
    RescheduleStatus,
    ReservationStatus,
)
from .models import Reservation

logger = logging.getLogger(__name__)


def lead_time() -> timedelta:
    return timedelta(days=settings.RESORT_RESCHEDULE_LEAD_DAYS)


def is_eligible_for_reschedule(reservation: Reservation) -> bool:
    if reservation.status in (ReservationStatus.CONFIRMED, ReservationStatus.PAID):
        return True
    return (
        reservation.status == ReservationStatus.PENDING
        and reservation.payment_status in SUBMITTED_PAYMENT_STATUSES
    )


def proposed_window(
    reservation: Reservation,
    proposed_check_in: datetime,
    proposed_check_out: datetime | None = None,
) -> tuple[datetime, datetime]:
    """New window; without an explicit check-out the original option decides it."""
    proposed_check_in = ensure_aware(proposed_check_in)
    if proposed_check_out is None:
        if reservation.pricing_option_id:
            return resolve_window(reservation.pricing_option, proposed_check_in)
        return proposed_check_in, proposed_check_in + (reservation.check_out - reservation.check_in)
    window = build_window(proposed_check_in, proposed_check_out)
    return window.check_in, window.check_out


def request_reschedule(
    reservation: Reservation,
    proposed_check_in: datetime,
    proposed_check_out: datetime | None = None,
    reason: str = "",
    *,
    now: datetime | None = None,
) -> Reservation:
    now = now or timezone.now()
    if not is_eligible_for_reschedule(reservation):
        raise InvalidTransitionError(
            f"{reservation.formal_id} cannot be rescheduled while {reservation.status}."
        )
    if reservation.has_pending_reschedule:
        raise InvalidTransitionError(
            f"{reservation.formal_id} already has a pending reschedule request."
        )
    if proposed_check_in is None:
        raise DomainValidationError("A proposed check-in is required.")

    new_check_in, new_check_out = proposed_window(reservation, proposed_check_in, proposed_check_out)
    if new_check_in < now + lead_time():
        raise DomainValidationError(
            f"Reschedule requests must be made at least {settings.RESORT_RESCHEDULE_LEAD_DAYS} days "
            "before the new check-in date."
        )
    ensure_available(
        reservation.service_id,
        new_check_in,
        new_check_out,
        exclude_ids=[reservation.pk],
    )

    reservation.reschedule_status = RescheduleStatus.PENDING
    reservation.reschedule_proposed_check_in = new_check_in
    reservation.reschedule_proposed_check_out = new_check_out
    reservation.reschedule_reason = (reason or "").strip()
    reservation.reschedule_requested_at = now
    reservation.reschedule_decided_at = None
    reservation.reschedule_rejection_reason = ""
    reservation.save(
        update_fields=[
            "reschedule_status",
            "reschedule_proposed_check_in",
            "reschedule_proposed_check_out",
            "reschedule_reason",
            "reschedule_requested_at",
            "reschedule_decided_at",
            "reschedule_rejection_reason",
            "updated_at",
        ]
    )
    logger.info(
        f"Reschedule requested for {reservation.formal_id}: "
        f"{new_check_in.isoformat()} - {new_check_out.isoformat()}"
    )
    return reservation


def _ensure_pending(reservation: Reservation) -> None:
    if not reservation.has_pending_reschedule:
        raise InvalidTransitionError(
            f"{reservation.formal_id} has no pending reschedule request."
        )


def approve_reschedule(reservation: Reservation) -> Reservation:
    _ensure_pending(reservation)
    if not is_eligible_for_reschedule(reservation):
        raise InvalidTransitionError(
            f"{reservation.formal_id} cannot be rescheduled while {reservation.status}."
        )
    new_check_in = reservation.reschedule_proposed_check_in
    new_check_out = reservation.reschedule_proposed_check_out
    ensure_available(
        reservation.service_id,
        new_check_in,
        new_check_out,
        exclude_ids=[reservation.pk],
    )

    with transaction.atomic():
        reservation.check_in = new_check_in
        reservation.check_out = new_check_out
        reservation.clear_reschedule_overlay()
        reservation.reschedule_status = RescheduleStatus.APPROVED
        reservation.reschedule_decided_at = timezone.now()
        reservation.save(
            update_fields=[
                "check_in",
                "check_out",
                "reschedule_proposed_check_in",
                "reschedule_proposed_check_out",
                "reschedule_reason",
                "reschedule_status",
                "reschedule_decided_at",
                "updated_at",
            ]
        )
    logger.info(f"Reschedule approved for {reservation.formal_id}")
    return reservation


def reject_reschedule(reservation: Reservation, reason: str) -> Reservation:
    reason = (reason or "").strip()
    if not reason:
        raise DomainValidationError("A rejection reason is required.")
    _ensure_pending(reservation)

    reservation.clear_reschedule_overlay()
    reservation.reschedule_status = RescheduleStatus.REJECTED
    reservation.reschedule_rejection_reason = reason
    reservation.reschedule_decided_at = timezone.now()
    reservation.save(
        update_fields=[
            "reschedule_proposed_check_in",
            "reschedule_proposed_check_out",
            "reschedule_reason",
            "reschedule_status",
            "reschedule_rejection_reason",
            "reschedule_decided_at",
            "updated_at",
        ]
    )
    logger.info(f"Reschedule rejected for {reservation.formal_id}: {reason}")
    return reservation
