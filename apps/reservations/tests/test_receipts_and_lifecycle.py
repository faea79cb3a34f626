from datetime import timedelta

import pytest
from django.utils import timezone

from apps.reservations.domain.states import PaymentStatus, PaymentType, ReservationStatus
from apps.reservations.groups import assign_group
from apps.reservations.models import Reservation
from apps.reservations.services import check_in_reservation, complete_reservation, submit_receipt
from apps.reservations.tests.factories import local_datetime, make_reservation, make_service
from shared.domain.exceptions import DomainValidationError, InvalidTransitionError, NotFoundError


@pytest.fixture
def room(db):
    return make_service("deluxe-room")


@pytest.fixture
def cottage(db):
    return make_service("bamboo-cottage", hours=10, price="800.00")


def _submit(hashes, payment_type=PaymentType.DOWNPAYMENT):
    return submit_receipt(
        hashes,
        gcash_reference_number=" 1234567890 ",
        receipt_file_name="receipt.jpg",
        payment_type=payment_type,
    )


@pytest.mark.django_db
def test_downpayment_receipt_marks_partial_payment(room):
    reservation = make_reservation(room, local_datetime(10, 14))
    _submit(reservation.reservation_hash)

    reservation.refresh_from_db()
    assert reservation.payment_status == PaymentStatus.PARTIAL_PAYMENT
    assert reservation.payment_type == PaymentType.DOWNPAYMENT
    assert reservation.gcash_reference_number == "1234567890"
    assert reservation.receipt_uploaded_at is not None
    assert reservation.status == ReservationStatus.PENDING


@pytest.mark.django_db
def test_receipt_for_one_member_covers_the_whole_group(room, cottage):
    members = [make_reservation(room, local_datetime(10, 14)), make_reservation(cottage, local_datetime(10, 8))]
    assign_group(members)
    for member in members:
        member.save()

    affected = _submit(members[1].reservation_hash, PaymentType.FULL)

    assert sorted(m.pk for m in affected) == sorted(m.pk for m in members)
    payment_statuses = set(Reservation.objects.values_list("payment_status", flat=True))
    assert payment_statuses == {PaymentStatus.FULL_PAYMENT}


@pytest.mark.django_db
def test_comma_separated_hashes_are_accepted(room, cottage):
    first = make_reservation(room, local_datetime(10, 14))
    second = make_reservation(cottage, local_datetime(10, 8))
    affected = _submit(f"{first.reservation_hash}, {second.reservation_hash}")
    assert len(affected) == 2


@pytest.mark.django_db
def test_unknown_hash_is_not_found(room):
    with pytest.raises(NotFoundError):
        _submit("deadbeef")


@pytest.mark.django_db
def test_receipt_after_approval_is_rejected(room):
    reservation = make_reservation(
        room, local_datetime(10, 14), status=ReservationStatus.CONFIRMED, payment_status=PaymentStatus.PARTIALLY_PAID
    )
    with pytest.raises(InvalidTransitionError):
        _submit(reservation.reservation_hash)


@pytest.mark.django_db
def test_receipt_requires_reference_number(room):
    reservation = make_reservation(room, local_datetime(10, 14))
    with pytest.raises(DomainValidationError):
        submit_receipt(
            [reservation.reservation_hash],
            gcash_reference_number="",
            receipt_file_name="receipt.jpg",
            payment_type=PaymentType.FULL,
        )


@pytest.mark.django_db
def test_check_in_requires_approved_payment(room):
    reservation = make_reservation(room, local_datetime(1, 14), payment_status=PaymentStatus.FULL_PAYMENT)
    with pytest.raises(InvalidTransitionError):
        check_in_reservation(reservation)


@pytest.mark.django_db
def test_check_in_then_checkout(room):
    reservation = make_reservation(
        room, local_datetime(1, 14), status=ReservationStatus.PAID, payment_status=PaymentStatus.FULLY_PAID
    )
    check_in_reservation(reservation)
    assert reservation.status == ReservationStatus.CHECKED_IN
    assert reservation.checked_in_at is not None

    complete_reservation(reservation)
    reservation.refresh_from_db()
    assert reservation.status == ReservationStatus.COMPLETED
    assert reservation.checked_out_at is not None


@pytest.mark.django_db
def test_checkout_requires_check_in(room):
    reservation = make_reservation(
        room,
        timezone.now() - timedelta(days=2),
        status=ReservationStatus.CONFIRMED,
        payment_status=PaymentStatus.PARTIALLY_PAID,
    )
    with pytest.raises(InvalidTransitionError):
        complete_reservation(reservation)
