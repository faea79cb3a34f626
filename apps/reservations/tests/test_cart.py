from datetime import timedelta

import pytest
from django.utils import timezone

from apps.availability.services import is_available
from apps.reservations.cart import add_to_cart, cart_items, remove_from_cart, submit_cart
from apps.reservations.domain.states import PaymentStatus, ReservationStatus
from apps.reservations.models import Reservation
from apps.reservations.services import ReservationRequest
from apps.reservations.tests.factories import local_datetime, make_reservation, make_service, make_user
from shared.domain.exceptions import ConflictError, DomainValidationError, NotFoundError


@pytest.fixture
def customer(db):
    return make_user(first_name="Ana", last_name="Reyes", phone="+639170000001")


@pytest.fixture
def room(db):
    return make_service("deluxe-room")


@pytest.fixture
def cottage(db):
    return make_service("bamboo-cottage", hours=10, price="800.00")


def _request(service, check_in):
    return ReservationRequest(
        service=service,
        option=service.pricing_options.first(),
        check_in=check_in,
        full_name="Ana Reyes",
        email="ana@example.com",
        phone="+639170000001",
    )


@pytest.mark.django_db
def test_cart_drafts_do_not_block_availability(customer, room):
    draft = add_to_cart(customer, _request(room, local_datetime(10, 14)))
    assert draft.status == ReservationStatus.CART
    assert draft.payment_status == PaymentStatus.CART
    assert is_available(room, draft.check_in, draft.check_out).available is True
    assert list(Reservation.objects.visible()) == []


@pytest.mark.django_db
def test_duplicate_cart_item_conflicts(customer, room):
    add_to_cart(customer, _request(room, local_datetime(10, 14)))
    with pytest.raises(ConflictError):
        add_to_cart(customer, _request(room, local_datetime(10, 14)))


@pytest.mark.django_db
def test_remove_only_own_items(customer, room):
    draft = add_to_cart(customer, _request(room, local_datetime(10, 14)))
    other = make_user()
    with pytest.raises(NotFoundError):
        remove_from_cart(other, draft.pk)
    remove_from_cart(customer, draft.pk)
    assert not cart_items(customer).exists()


@pytest.mark.django_db
def test_submitting_two_items_forms_a_group(customer, room, cottage):
    drafts = [
        add_to_cart(customer, _request(room, local_datetime(10, 14))),
        add_to_cart(customer, _request(cottage, local_datetime(10, 8))),
    ]
    submitted = submit_cart(customer, [d.pk for d in drafts])

    assert {r.status for r in submitted} == {ReservationStatus.PENDING}
    assert {r.payment_status for r in submitted} == {PaymentStatus.PENDING}
    assert len({r.multi_amenity_group_id for r in submitted}) == 1
    assert submitted[0].multi_amenity_group_id is not None
    assert not cart_items(customer).exists()


@pytest.mark.django_db
def test_submitting_one_item_keeps_it_single(customer, room):
    draft = add_to_cart(customer, _request(room, local_datetime(10, 14)))
    (submitted,) = submit_cart(customer, [draft.pk])
    assert submitted.multi_amenity_group_id is None
    assert submitted.status == ReservationStatus.PENDING


@pytest.mark.django_db
def test_submit_rechecks_availability(customer, room):
    draft = add_to_cart(customer, _request(room, local_datetime(10, 14)))
    make_reservation(room, local_datetime(10, 20), status=ReservationStatus.CONFIRMED)
    with pytest.raises(ConflictError):
        submit_cart(customer, [draft.pk])
    draft.refresh_from_db()
    assert draft.status == ReservationStatus.CART


@pytest.mark.django_db
def test_expired_draft_cannot_be_submitted(customer, room):
    draft = add_to_cart(customer, _request(room, local_datetime(10, 14)))
    Reservation.objects.filter(pk=draft.pk).update(
        check_in=timezone.now() - timedelta(hours=2),
        check_out=timezone.now() + timedelta(hours=20),
    )
    with pytest.raises(DomainValidationError):
        submit_cart(customer, [draft.pk])


@pytest.mark.django_db
def test_submit_requires_items(customer):
    with pytest.raises(DomainValidationError):
        submit_cart(customer, [])
    with pytest.raises(NotFoundError):
        submit_cart(customer, [999])
