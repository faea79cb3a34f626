"""
Reservation State Tables

Closed enumerations for the two independent lifecycle axes of a reservation
and the transitions allowed on each of them.

Status transitions:
- CART -> PENDING (draft submitted at checkout)
- CART -> CANCELLED (draft dropped)
- PENDING -> CONFIRMED (downpayment approved)
- PENDING -> PAID (full payment approved)
- PENDING -> REJECTED (receipt rejected)
- CONFIRMED -> PAID (remaining balance settled)
- PAID / CONFIRMED -> CHECKED_IN
- CHECKED_IN -> COMPLETED
- anything but COMPLETED, CANCELLED, REJECTED -> CANCELLED

Payment status transitions:
- cart -> pending
- pending -> partial-payment / full-payment (receipt uploaded)
- partial-payment <-> full-payment (receipt re-uploaded)
- partial-payment -> partially-paid, full-payment -> fully-paid (approved)
- partially-paid -> fully-paid (balance settled)
- partial-payment / full-payment -> rejected
- partially-paid / fully-paid -> refunded (cancelled after approval)
"""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.exceptions import InvalidTransitionError


class ReservationStatus(models.TextChoices):
    CART = "CART", _("Cart")
    PENDING = "PENDING", _("Pending")
    PAID = "PAID", _("Paid")
    CONFIRMED = "CONFIRMED", _("Confirmed")
    CHECKED_IN = "CHECKED_IN", _("Checked in")
    COMPLETED = "COMPLETED", _("Completed")
    CANCELLED = "CANCELLED", _("Cancelled")
    REJECTED = "REJECTED", _("Rejected")


class PaymentStatus(models.TextChoices):
    CART = "cart", _("Cart")
    PENDING = "pending", _("Awaiting payment")
    PARTIAL_PAYMENT = "partial-payment", _("Downpayment submitted")
    PARTIALLY_PAID = "partially-paid", _("Downpayment approved")
    FULL_PAYMENT = "full-payment", _("Full payment submitted")
    FULLY_PAID = "fully-paid", _("Fully paid")
    REJECTED = "rejected", _("Payment rejected")
    REFUNDED = "refunded", _("Refunded")


class RescheduleStatus(models.TextChoices):
    NONE = "NONE", _("No request")
    PENDING = "PENDING", _("Pending review")
    APPROVED = "APPROVED", _("Approved")
    REJECTED = "REJECTED", _("Rejected")


class PaymentType(models.TextChoices):
    DOWNPAYMENT = "downpayment", _("Downpayment")
    FULL = "full", _("Full payment")


S = ReservationStatus
P = PaymentStatus

STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    S.CART: frozenset({S.PENDING, S.CANCELLED}),
    S.PENDING: frozenset({S.PAID, S.CONFIRMED, S.REJECTED, S.CANCELLED}),
    S.CONFIRMED: frozenset({S.PAID, S.CHECKED_IN, S.COMPLETED, S.CANCELLED}),
    S.PAID: frozenset({S.CHECKED_IN, S.COMPLETED, S.CANCELLED}),
    S.CHECKED_IN: frozenset({S.COMPLETED, S.CANCELLED}),
    S.COMPLETED: frozenset(),
    S.CANCELLED: frozenset(),
    S.REJECTED: frozenset(),
}

PAYMENT_TRANSITIONS: dict[str, frozenset[str]] = {
    P.CART: frozenset({P.PENDING}),
    P.PENDING: frozenset({P.PARTIAL_PAYMENT, P.FULL_PAYMENT}),
    P.PARTIAL_PAYMENT: frozenset({P.FULL_PAYMENT, P.PARTIALLY_PAID, P.REJECTED}),
    P.FULL_PAYMENT: frozenset({P.PARTIAL_PAYMENT, P.FULLY_PAID, P.REJECTED}),
    P.PARTIALLY_PAID: frozenset({P.FULLY_PAID, P.REFUNDED}),
    P.FULLY_PAID: frozenset({P.REFUNDED}),
    P.REJECTED: frozenset(),
    P.REFUNDED: frozenset(),
}

# Reservations in these states never occupy a service
NON_BLOCKING_STATUSES = frozenset({S.CANCELLED, S.REJECTED, S.CART})
TERMINAL_STATUSES = frozenset({S.COMPLETED, S.CANCELLED, S.REJECTED})
SUBMITTED_PAYMENT_STATUSES = frozenset({P.PARTIAL_PAYMENT, P.FULL_PAYMENT})
APPROVED_PAYMENT_STATUSES = frozenset({P.PARTIALLY_PAID, P.FULLY_PAID})

# Receipt review outcome keyed by the submitted payment status
APPROVAL_TARGETS: dict[str, tuple[str, str]] = {
    P.PARTIAL_PAYMENT: (S.CONFIRMED, P.PARTIALLY_PAID),
    P.FULL_PAYMENT: (S.PAID, P.FULLY_PAID),
}


def can_change_status(current: str, target: str) -> bool:
    return current == target or target in STATUS_TRANSITIONS.get(current, frozenset())


def can_change_payment_status(current: str, target: str) -> bool:
    return current == target or target in PAYMENT_TRANSITIONS.get(current, frozenset())


def ensure_status_transition(current: str, target: str, *, label: str = "Reservation") -> None:
    if not can_change_status(current, target):
        raise InvalidTransitionError(f"{label} cannot move from {current} to {target}.")


def ensure_payment_transition(current: str, target: str, *, label: str = "Reservation") -> None:
    if not can_change_payment_status(current, target):
        raise InvalidTransitionError(f"{label} payment cannot move from {current} to {target}.")
