from datetime import timedelta
from unittest import mock

import pytest
from django.db import DatabaseError

from apps.availability import services
from apps.availability.models import BlockedRange
from apps.availability.services import ALREADY_BOOKED_REASON, ensure_available, is_available
from apps.reservations.domain.states import PaymentStatus, ReservationStatus
from apps.reservations.tests.factories import local_datetime, make_reservation, make_service
from shared.domain.exceptions import ConflictError, DomainValidationError


@pytest.fixture
def room(db):
    return make_service("deluxe-room")


@pytest.fixture
def cottage(db):
    return make_service("bamboo-cottage", hours=10, price="800.00")


@pytest.mark.django_db
def test_free_service_is_available(room):
    result = is_available(room, local_datetime(10), local_datetime(11))
    assert result.available is True
    assert result.conflict_reason is None


@pytest.mark.django_db
def test_blocked_range_reports_its_reason(room):
    BlockedRange.objects.create(
        start_date=local_datetime(10).date(),
        end_date=local_datetime(12).date(),
        reason="Maintenance",
    )
    result = is_available(room, local_datetime(11, 8), local_datetime(11, 18))
    assert result.available is False
    assert result.conflict_reason == "Maintenance"


@pytest.mark.django_db
def test_blocked_range_is_inclusive_at_day_resolution(room):
    BlockedRange.objects.create(
        start_date=local_datetime(10).date(),
        end_date=local_datetime(10).date(),
        reason="Private event",
    )
    # Stay ends early in the morning of the blocked day
    result = is_available(room, local_datetime(9, 14), local_datetime(10, 6))
    assert result.conflict_reason == "Private event"


@pytest.mark.django_db
def test_blocked_range_scoped_to_other_service_does_not_block(room, cottage):
    blocked = BlockedRange.objects.create(
        start_date=local_datetime(10).date(),
        end_date=local_datetime(10).date(),
        applies_to_all_services=False,
        reason="Cottage repairs",
    )
    blocked.services.set([cottage])

    assert is_available(room, local_datetime(10, 8), local_datetime(10, 18)).available is True
    assert is_available(cottage, local_datetime(10, 8), local_datetime(10, 18)).conflict_reason == "Cottage repairs"


@pytest.mark.django_db
def test_overlapping_reservation_reports_already_booked(room):
    make_reservation(room, local_datetime(10, 14), local_datetime(11, 12))
    result = is_available(room, local_datetime(11, 8), local_datetime(11, 20))
    assert result.available is False
    assert result.conflict_reason == ALREADY_BOOKED_REASON


@pytest.mark.django_db
def test_touching_windows_conflict(room):
    make_reservation(room, local_datetime(10, 8), local_datetime(10, 18))
    result = is_available(room, local_datetime(10, 18), local_datetime(10, 22))
    assert result.conflict_reason == ALREADY_BOOKED_REASON


@pytest.mark.django_db
@pytest.mark.parametrize(
    "status,payment_status",
    [
        (ReservationStatus.CART, PaymentStatus.CART),
        (ReservationStatus.CANCELLED, PaymentStatus.PENDING),
        (ReservationStatus.REJECTED, PaymentStatus.REJECTED),
    ],
)
def test_non_blocking_statuses_are_ignored(room, status, payment_status):
    make_reservation(room, local_datetime(10, 8), local_datetime(10, 18), status=status, payment_status=payment_status)
    assert is_available(room, local_datetime(10, 9), local_datetime(10, 12)).available is True


@pytest.mark.django_db
def test_reservation_on_another_service_does_not_conflict(room, cottage):
    make_reservation(cottage, local_datetime(10, 8), local_datetime(10, 18))
    assert is_available(room, local_datetime(10, 9), local_datetime(10, 12)).available is True


@pytest.mark.django_db
def test_excluded_reservation_does_not_conflict_with_itself(room):
    reservation = make_reservation(room, local_datetime(20, 14), local_datetime(21, 12))
    result = is_available(room, local_datetime(20, 16), local_datetime(21, 14), exclude_ids=[reservation.pk])
    assert result.available is True


@pytest.mark.django_db
def test_repeated_checks_give_the_same_answer(room):
    make_reservation(room, local_datetime(10, 8), local_datetime(10, 18))
    first = is_available(room, local_datetime(10, 9), local_datetime(10, 12))
    second = is_available(room, local_datetime(10, 9), local_datetime(10, 12))
    assert first == second


@pytest.mark.django_db
def test_invalid_window_is_rejected_before_querying(room):
    with mock.patch.object(services, "find_blocking_range") as lookup:
        with pytest.raises(DomainValidationError):
            is_available(room, local_datetime(10, 12), local_datetime(10, 12))
    lookup.assert_not_called()


@pytest.mark.django_db
def test_missing_service_is_rejected():
    with pytest.raises(DomainValidationError):
        is_available(None, local_datetime(10), local_datetime(11))


@pytest.mark.django_db
def test_store_failure_fails_open(room):
    make_reservation(room, local_datetime(10, 8), local_datetime(10, 18))
    with mock.patch.object(services, "find_blocking_range", side_effect=DatabaseError("boom")), \
            mock.patch.object(services, "find_overlapping_reservation", side_effect=DatabaseError("boom")):
        result = is_available(room, local_datetime(10, 9), local_datetime(10, 12))
    assert result.available is True


@pytest.mark.django_db
def test_ensure_available_raises_conflict_with_reason(room):
    BlockedRange.objects.create(
        start_date=local_datetime(10).date(),
        end_date=local_datetime(10).date() + timedelta(days=1),
        reason="Maintenance",
    )
    with pytest.raises(ConflictError) as excinfo:
        ensure_available(room.pk, local_datetime(10, 9), local_datetime(10, 12))
    assert excinfo.value.conflict_reason == "Maintenance"
