import pytest

from apps.reservations.domain.states import (
    PaymentStatus,
    ReservationStatus,
    can_change_payment_status,
    can_change_status,
    ensure_payment_transition,
    ensure_status_transition,
)
from shared.domain.exceptions import InvalidTransitionError


@pytest.mark.parametrize(
    "current,target",
    [
        (ReservationStatus.CART, ReservationStatus.PENDING),
        (ReservationStatus.PENDING, ReservationStatus.CONFIRMED),
        (ReservationStatus.PENDING, ReservationStatus.PAID),
        (ReservationStatus.CONFIRMED, ReservationStatus.PAID),
        (ReservationStatus.PAID, ReservationStatus.CHECKED_IN),
        (ReservationStatus.CHECKED_IN, ReservationStatus.COMPLETED),
        (ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED),
    ],
)
def test_allowed_status_transitions(current, target):
    assert can_change_status(current, target)


@pytest.mark.parametrize(
    "current,target",
    [
        (ReservationStatus.COMPLETED, ReservationStatus.CANCELLED),
        (ReservationStatus.CANCELLED, ReservationStatus.PENDING),
        (ReservationStatus.REJECTED, ReservationStatus.CONFIRMED),
        (ReservationStatus.PENDING, ReservationStatus.CHECKED_IN),
        (ReservationStatus.CART, ReservationStatus.CONFIRMED),
    ],
)
def test_forbidden_status_transitions(current, target):
    assert not can_change_status(current, target)
    with pytest.raises(InvalidTransitionError):
        ensure_status_transition(current, target)


def test_same_status_is_a_no_op():
    assert can_change_status(ReservationStatus.PAID, ReservationStatus.PAID)
    assert can_change_payment_status(PaymentStatus.FULLY_PAID, PaymentStatus.FULLY_PAID)


def test_payment_status_flow():
    assert can_change_payment_status(PaymentStatus.PENDING, PaymentStatus.PARTIAL_PAYMENT)
    assert can_change_payment_status(PaymentStatus.PARTIAL_PAYMENT, PaymentStatus.PARTIALLY_PAID)
    assert can_change_payment_status(PaymentStatus.PARTIALLY_PAID, PaymentStatus.FULLY_PAID)
    assert can_change_payment_status(PaymentStatus.FULLY_PAID, PaymentStatus.REFUNDED)
    assert not can_change_payment_status(PaymentStatus.PENDING, PaymentStatus.FULLY_PAID)
    with pytest.raises(InvalidTransitionError):
        ensure_payment_transition(PaymentStatus.REFUNDED, PaymentStatus.PENDING, label="TRR-20250101-001")
