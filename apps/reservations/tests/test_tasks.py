from datetime import timedelta
from unittest import mock

import pytest
from django.utils import timezone

from apps.reservations import tasks
from apps.reservations.domain.states import PaymentStatus, ReservationStatus
from apps.reservations.models import Reservation
from apps.reservations.tasks import complete_past_checkouts, schedule
from apps.reservations.tests.factories import make_reservation, make_service


@pytest.fixture
def room(db):
    return make_service("deluxe-room", hours=22)


def _past(room, **extra):
    check_in = timezone.now() - timedelta(days=2)
    return make_reservation(room, check_in, check_in + timedelta(hours=22), **extra)


@pytest.mark.django_db
def test_completes_paid_reservations_past_checkout(room, mailoutbox):
    paid = _past(room, status=ReservationStatus.PAID, payment_status=PaymentStatus.FULLY_PAID)
    checked_in = _past(room, status=ReservationStatus.CHECKED_IN, payment_status=PaymentStatus.PARTIALLY_PAID)

    result = complete_past_checkouts()

    assert result == {"completed": 2, "errors": 0}
    statuses = set(Reservation.objects.filter(pk__in=[paid.pk, checked_in.pk]).values_list("status", flat=True))
    assert statuses == {ReservationStatus.COMPLETED}
    assert len(mailoutbox) == 2


@pytest.mark.django_db
def test_skips_unpaid_and_future_reservations(room):
    unpaid = _past(room, payment_status=PaymentStatus.FULL_PAYMENT)
    upcoming = make_reservation(
        room,
        timezone.now() + timedelta(days=3),
        status=ReservationStatus.PAID,
        payment_status=PaymentStatus.FULLY_PAID,
    )

    assert complete_past_checkouts() == {"completed": 0, "errors": 0}
    assert Reservation.objects.get(pk=unpaid.pk).status == ReservationStatus.PENDING
    assert Reservation.objects.get(pk=upcoming.pk).status == ReservationStatus.PAID


@pytest.mark.django_db
def test_one_failure_does_not_stop_the_batch(room):
    _past(room, status=ReservationStatus.PAID, payment_status=PaymentStatus.FULLY_PAID)
    _past(room, status=ReservationStatus.CONFIRMED, payment_status=PaymentStatus.PARTIALLY_PAID)
    real_complete = tasks.complete_reservation
    calls = []

    def fail_first(reservation, **kwargs):
        calls.append(reservation.pk)
        if len(calls) == 1:
            raise RuntimeError("boom")
        return real_complete(reservation, **kwargs)

    with mock.patch.object(tasks, "complete_reservation", side_effect=fail_first):
        result = complete_past_checkouts()

    assert result == {"completed": 1, "errors": 1}


def test_schedule_swallows_broker_errors():
    task = mock.Mock()
    task.name = "reservations.notify_payment_approved"
    task.delay.side_effect = ConnectionError("broker down")
    schedule(task, 1)
    task.delay.assert_called_once_with(1)
