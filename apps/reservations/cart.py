"""
Server-side cart drafts.

Cart items are reservations in ``CART`` status owned by an account. They are
invisible to availability and to every listing but the owner's cart until
the customer submits them at checkout.
"""

from __future__ import annotations

import logging
from typing import Sequence

from django.db import DatabaseError, transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.availability.services import ensure_available
from shared.domain.exceptions import ConflictError, DomainValidationError, NotFoundError, StoreError

from .domain.states import (
    PaymentStatus,
    ReservationStatus,
    ensure_payment_transition,
    ensure_status_transition,
)
from .groups import apply_group_promo, assign_group, ensure_no_internal_overlap
from .models import Reservation
from .services import ReservationRequest, build_reservation, save_with_formal_id

logger = logging.getLogger(__name__)

DUPLICATE_CHECK_STATUSES = (
    ReservationStatus.CART,
    ReservationStatus.PENDING,
    ReservationStatus.CONFIRMED,
    ReservationStatus.PAID,
)


def cart_items(account):
    return (
        Reservation.objects.filter(account=account, status=ReservationStatus.CART)
        .select_related("service")
        .order_by("created_at", "pk")
    )


def add_to_cart(account, request: ReservationRequest) -> Reservation:
    draft = build_reservation(
        request,
        account=account,
        status=ReservationStatus.CART,
        payment_status=PaymentStatus.CART,
    )
    duplicate = Reservation.objects.filter(
        account=account,
        service=request.service,
        check_in=draft.check_in,
        status__in=DUPLICATE_CHECK_STATUSES,
    ).exists()
    if duplicate:
        raise ConflictError(f"{request.service.name} is already in your cart or booked for that date.")

    save_with_formal_id(draft)
    logger.info(f"Cart item {draft.formal_id} added for account {account.pk}")
    return draft


def remove_from_cart(account, reservation_id: int) -> None:
    deleted, _ = cart_items(account).filter(pk=reservation_id).delete()
    if not deleted:
        raise NotFoundError(f"Cart item {reservation_id} not found.")


def submit_cart(account, reservation_ids: Sequence[int], promo_code: str | None = None) -> list[Reservation]:
    """Turn cart drafts into PENDING reservations; two or more form a group."""
    ids = list(dict.fromkeys(reservation_ids))
    if not ids:
        raise DomainValidationError("Select at least one cart item to check out.")
    drafts_by_id = {draft.pk: draft for draft in cart_items(account).filter(pk__in=ids)}
    missing = [pk for pk in ids if pk not in drafts_by_id]
    if missing:
        raise NotFoundError(f"Cart items not found: {', '.join(map(str, missing))}")
    drafts = [drafts_by_id[pk] for pk in ids]

    now = timezone.now()
    for draft in drafts:
        if draft.check_in <= now:
            raise DomainValidationError(f"{draft.service.name}: check-in date has already passed.")
        ensure_status_transition(draft.status, ReservationStatus.PENDING, label=draft.formal_id)
        ensure_payment_transition(draft.payment_status, PaymentStatus.PENDING, label=draft.formal_id)
    ensure_no_internal_overlap(drafts)
    for draft in drafts:
        ensure_available(draft.service_id, draft.check_in, draft.check_out, exclude_ids=[draft.pk])
    apply_group_promo(drafts, promo_code)

    try:
        with transaction.atomic():
            if len(drafts) > 1:
                assign_group(drafts)
            for draft in drafts:
                draft.status = ReservationStatus.PENDING
                draft.payment_status = PaymentStatus.PENDING
                draft.save()
    except DatabaseError as exc:
        raise StoreError(f"Could not submit cart items {ids}: {exc}") from exc

    logger.info(f"Cart checkout for account {account.pk}: {[d.formal_id for d in drafts]}")
    return drafts
