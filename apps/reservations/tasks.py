"""Celery tasks for the reservations domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from .domain.states import APPROVED_PAYMENT_STATUSES, ReservationStatus
from .models import Reservation
from .services import complete_reservation, expand_groups

logger = logging.getLogger(__name__)


def schedule(task, *args) -> None:
    """Queue a fire-and-forget task; a broker outage must not fail the caller."""
    try:
        task.delay(*args)
    except Exception as e:
        logger.warning(f"Could not queue {task.name} for {args}: {e}", exc_info=True)


def notify_group_action(action: str, reservation_id: int) -> None:
    task = GROUP_ACTION_NOTIFICATIONS.get(action)
    if task is not None:
        schedule(task, reservation_id)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="reservations.complete_past_checkouts")
def complete_past_checkouts() -> dict[str, int]:
    """
    Complete reservations whose check-out time has passed.

    Only reservations with an approved payment are completed; each guest
    receives a thank-you email.

    Runs every hour.

    Returns:
        dict: {"completed": completed count, "errors": failed count}
    """
    now = timezone.now()
    completed_count = 0
    error_count = 0

    due = Reservation.objects.filter(
        check_out__lt=now,
        status__in=[
            ReservationStatus.PAID,
            ReservationStatus.CONFIRMED,
            ReservationStatus.CHECKED_IN,
        ],
        payment_status__in=APPROVED_PAYMENT_STATUSES,
    ).select_related("service")

    for reservation in due:
        try:
            complete_reservation(reservation, require_checked_in=False)
            schedule(notify_reservation_completed, reservation.pk)
            completed_count += 1
        except Exception as e:
            error_count += 1
            logger.error(f"Error completing reservation {reservation.pk}: {e}", exc_info=True)

    if completed_count > 0:
        logger.info(f"Completed {completed_count} reservations past check-out")

    return {"completed": completed_count, "errors": error_count}


# ============================================================================
# NOTIFICATION TASKS
# ============================================================================

def _load_group(reservation_id: int) -> list[Reservation] | None:
    try:
        reservation = Reservation.objects.select_related("service").get(pk=reservation_id)
    except Reservation.DoesNotExist:
        return None
    members = expand_groups([reservation])
    return sorted(members, key=lambda member: member.multi_amenity_index)


@shared_task(name="reservations.notify_payment_approved")
def notify_payment_approved(reservation_id: int) -> bool:
    from apps.notifications.services import send_payment_approved_email

    members = _load_group(reservation_id)
    if members is None:
        logger.error(f"Reservation {reservation_id} not found for payment approval notification")
        return False
    return send_payment_approved_email(members)


@shared_task(name="reservations.notify_payment_rejected")
def notify_payment_rejected(reservation_id: int) -> bool:
    from apps.notifications.services import send_payment_rejected_email

    members = _load_group(reservation_id)
    if members is None:
        logger.error(f"Reservation {reservation_id} not found for payment rejection notification")
        return False
    return send_payment_rejected_email(members)


@shared_task(name="reservations.notify_reservation_cancelled")
def notify_reservation_cancelled(reservation_id: int) -> bool:
    from apps.notifications.services import send_cancellation_email

    members = _load_group(reservation_id)
    if members is None:
        logger.error(f"Reservation {reservation_id} not found for cancellation notification")
        return False
    return send_cancellation_email(members)


@shared_task(name="reservations.notify_reschedule_decision")
def notify_reschedule_decision(reservation_id: int) -> bool:
    from apps.notifications.services import send_reschedule_decision_email

    try:
        reservation = Reservation.objects.select_related("service").get(pk=reservation_id)
    except Reservation.DoesNotExist:
        logger.error(f"Reservation {reservation_id} not found for reschedule notification")
        return False
    return send_reschedule_decision_email(reservation)


@shared_task(name="reservations.notify_reservation_completed")
def notify_reservation_completed(reservation_id: int) -> bool:
    from apps.notifications.services import send_reservation_completed_email

    try:
        reservation = Reservation.objects.select_related("service").get(pk=reservation_id)
    except Reservation.DoesNotExist:
        logger.error(f"Reservation {reservation_id} not found for completion notification")
        return False
    return send_reservation_completed_email(reservation)


GROUP_ACTION_NOTIFICATIONS = {
    "approve": notify_payment_approved,
    "settle_balance": notify_payment_approved,
    "reject": notify_payment_rejected,
    "cancel": notify_reservation_cancelled,
}
