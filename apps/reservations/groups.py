"""
Multi-amenity group coordination.

A group is the set of reservations sharing ``multi_amenity_group_id``. Every
payment review or cancellation on any member is applied to all of them.
"""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from enum import Enum
from typing import Sequence

from django.db import DatabaseError, transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.availability.services import ensure_available
from shared.domain.exceptions import (
    ConflictError,
    DomainValidationError,
    InvalidTransitionError,
    NotFoundError,
    PartialGroupFailure,
    StoreError,
)
from shared.domain.value_objects import CENT

from .domain.states import (
    APPROVAL_TARGETS,
    SUBMITTED_PAYMENT_STATUSES,
    PaymentStatus,
    RescheduleStatus,
    ReservationStatus,
    ensure_payment_transition,
    ensure_status_transition,
)
from .models import Reservation
from .services import ReservationRequest, apply_discount, build_reservation, save_with_formal_id

logger = logging.getLogger(__name__)


class GroupAction(Enum):
    APPROVE = "approve"
    REJECT = "reject"
    CANCEL = "cancel"
    SETTLE_BALANCE = "settle_balance"


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------

def ensure_no_internal_overlap(reservations: Sequence[Reservation]) -> None:
    """Items of one checkout may not occupy the same service twice."""
    for index, current in enumerate(reservations):
        for other in reservations[index + 1:]:
            if current.service_id == other.service_id and current.window.overlaps_with(other.window):
                raise ConflictError(
                    f"{current.service.name} is selected twice for overlapping dates."
                )


def distribute_discount(reservations: Sequence[Reservation], code: str, amount: Decimal) -> None:
    """Split a group discount across members in proportion to their base price."""
    subtotal = sum((r.base_price for r in reservations), Decimal("0.00"))
    remaining = amount
    for index, reservation in enumerate(reservations):
        if index == len(reservations) - 1:
            share = remaining
        elif subtotal:
            share = (amount * reservation.base_price / subtotal).quantize(CENT)
        else:
            share = Decimal("0.00")
        remaining -= share
        apply_discount(reservation, code, share)


def assign_group(reservations: Sequence[Reservation]) -> uuid.UUID:
    group_id = uuid.uuid4()
    total = len(reservations)
    for index, reservation in enumerate(reservations):
        reservation.is_multi_amenity = True
        reservation.multi_amenity_group_id = group_id
        reservation.multi_amenity_index = index
        reservation.multi_amenity_total = total
        reservation.multi_amenity_group_primary = index == 0
        reservation.group_final_total = None
    reservations[0].group_final_total = sum(
        (r.final_total for r in reservations), Decimal("0.00")
    )
    return group_id


def apply_group_promo(reservations: Sequence[Reservation], promo_code: str | None) -> None:
    # Local import to prevent circular dependency
    from apps.promotions.services import validate_promo_code

    for reservation in reservations:
        apply_discount(reservation, "", Decimal("0.00"))
    if not promo_code:
        return
    subtotal = sum((r.base_price for r in reservations), Decimal("0.00"))
    promo = validate_promo_code(promo_code, subtotal)
    distribute_discount(reservations, promo.code, promo.discount_amount)


def create_group(
    requests: Sequence[ReservationRequest],
    *,
    account=None,
    promo_code: str | None = None,
) -> list[Reservation]:
    """
    Create every reservation of one checkout, all or nothing.

    A single item produces a plain reservation; two or more share a new
    group id, with index 0 as the primary carrying the group total.
    """
    if not requests:
        raise DomainValidationError("At least one amenity must be selected.")

    reservations = [build_reservation(request, account=account) for request in requests]
    ensure_no_internal_overlap(reservations)
    for reservation in reservations:
        ensure_available(reservation.service_id, reservation.check_in, reservation.check_out)
    apply_group_promo(reservations, promo_code)

    with transaction.atomic():
        if len(reservations) > 1:
            assign_group(reservations)
        for reservation in reservations:
            save_with_formal_id(reservation)

    logger.info(
        f"Created {len(reservations)} reservation(s) in one checkout: "
        f"{[r.formal_id for r in reservations]}"
    )
    return reservations


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

def resolve_group(reservation: Reservation) -> list[Reservation]:
    if reservation.multi_amenity_group_id:
        members = list(Reservation.objects.in_group(reservation.multi_amenity_group_id))
        if members:
            return members
    return [reservation]


def plan_target(reservation: Reservation, action: GroupAction) -> tuple[str, str]:
    """Target (status, payment_status) derived from the referenced reservation."""
    if action is GroupAction.APPROVE:
        try:
            return APPROVAL_TARGETS[reservation.payment_status]
        except KeyError:
            raise InvalidTransitionError(
                f"{reservation.formal_id} has no submitted payment to approve."
            )
    if action is GroupAction.REJECT:
        if reservation.payment_status not in SUBMITTED_PAYMENT_STATUSES:
            raise InvalidTransitionError(
                f"{reservation.formal_id} has no submitted payment to reject."
            )
        return ReservationStatus.REJECTED, PaymentStatus.REJECTED
    if action is GroupAction.CANCEL:
        payment_status = (
            PaymentStatus.REFUNDED if reservation.is_payment_approved else reservation.payment_status
        )
        return ReservationStatus.CANCELLED, payment_status
    if action is GroupAction.SETTLE_BALANCE:
        if reservation.payment_status != PaymentStatus.PARTIALLY_PAID:
            raise InvalidTransitionError(
                f"{reservation.formal_id} has no outstanding balance to settle."
            )
        return ReservationStatus.PAID, PaymentStatus.FULLY_PAID
    raise DomainValidationError(f"Unsupported group action: {action}")


def _apply_to_member(
    member: Reservation,
    action: GroupAction,
    status: str,
    payment_status: str,
    *,
    now,
    reason: str,
    performed_by,
) -> None:
    member.status = status
    member.payment_status = payment_status
    update_fields = ["status", "payment_status", "updated_at"]

    if action in (GroupAction.APPROVE, GroupAction.REJECT, GroupAction.SETTLE_BALANCE):
        member.payment_reviewed_at = now
        member.payment_reviewed_by = performed_by
        update_fields += ["payment_reviewed_at", "payment_reviewed_by"]
    if action is GroupAction.REJECT:
        member.payment_rejection_reason = reason
        update_fields.append("payment_rejection_reason")
    if action is GroupAction.SETTLE_BALANCE:
        member.remaining_balance = Decimal("0.00")
        update_fields.append("remaining_balance")
    if action is GroupAction.CANCEL:
        member.cancelled_at = member.cancelled_at or now
        member.cancellation_reason = reason or member.cancellation_reason
        update_fields += ["cancelled_at", "cancellation_reason"]
    if action in (GroupAction.CANCEL, GroupAction.REJECT) and member.has_pending_reschedule:
        member.clear_reschedule_overlay()
        member.reschedule_status = RescheduleStatus.REJECTED
        member.reschedule_rejection_reason = f"Reservation {status.lower()}."
        member.reschedule_decided_at = now
        update_fields += [
            "reschedule_proposed_check_in",
            "reschedule_proposed_check_out",
            "reschedule_reason",
            "reschedule_status",
            "reschedule_rejection_reason",
            "reschedule_decided_at",
        ]

    member.save(update_fields=update_fields)


def _record_promo_usage(members: Sequence[Reservation]) -> None:
    """Count a promo code once per group, on its first approval."""
    # Local import to prevent circular dependency
    from apps.promotions.services import record_promo_usage

    code = next((m.discount_code for m in members if m.discount_code), "")
    if not code or any(m.promo_usage_applied for m in members):
        return
    record_promo_usage(code)
    Reservation.objects.filter(pk__in=[m.pk for m in members]).update(promo_usage_applied=True)


def verify_group_state(ids: Sequence[int], status: str, payment_status: str) -> None:
    rows = Reservation.objects.filter(pk__in=ids).values_list("pk", "status", "payment_status")
    reached = {pk for pk, current_status, current_payment in rows
               if current_status == status and current_payment == payment_status}
    failed = [pk for pk in ids if pk not in reached]
    if failed:
        raise PartialGroupFailure(
            failed_ids=failed,
            affected_ids=[pk for pk in ids if pk in reached],
        )


def apply_group_action(
    reservation_id: int,
    action,
    *,
    reason: str = "",
    performed_by=None,
) -> list[int]:
    """
    Apply ``action`` to the referenced reservation and every member of its group.

    All transitions are validated before anything is written; writes happen in
    one transaction and are re-read afterwards. Members that did not reach
    the target state are reported through ``PartialGroupFailure``.
    """
    try:
        action = GroupAction(action)
    except ValueError:
        raise DomainValidationError(f"Unsupported group action: {action}")

    try:
        reservation = Reservation.objects.get(pk=reservation_id)
    except Reservation.DoesNotExist:
        raise NotFoundError(f"Reservation {reservation_id} not found.")

    members = resolve_group(reservation)
    status, payment_status = plan_target(reservation, action)
    for member in members:
        ensure_status_transition(member.status, status, label=member.formal_id)
        ensure_payment_transition(member.payment_status, payment_status, label=member.formal_id)

    ids = [member.pk for member in members]
    now = timezone.now()
    try:
        with transaction.atomic():
            for member in members:
                _apply_to_member(
                    member,
                    action,
                    status,
                    payment_status,
                    now=now,
                    reason=reason,
                    performed_by=performed_by,
                )
            if action is GroupAction.APPROVE:
                _record_promo_usage(members)
    except DatabaseError as exc:
        raise StoreError(f"Could not {action.value} reservations {ids}: {exc}") from exc

    verify_group_state(ids, status, payment_status)
    logger.info(
        f"Applied {action.value} to reservations {ids} "
        f"(now {status}/{payment_status})"
    )

    # Local import to prevent circular dependency
    from .tasks import notify_group_action

    transaction.on_commit(lambda: notify_group_action(action.value, members[0].pk))
    return ids
