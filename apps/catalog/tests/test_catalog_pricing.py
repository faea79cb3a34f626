from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.catalog.models import PricingOption, Service
from apps.catalog.pricing import option_shape_errors, quote, resolve_window
from shared.domain.exceptions import DomainValidationError


def _local(year, month, day, hour=0, minute=0):
    return timezone.make_aware(datetime(year, month, day, hour, minute))


@pytest.fixture
def room(db):
    service = Service.objects.create(
        code="deluxe-room",
        name="Deluxe Room",
        category=Service.Category.ROOMS,
        max_guests=4,
        pricing_model=Service.PricingModel.DURATION,
    )
    PricingOption.objects.create(service=service, code="22h", label="22 hours", price=Decimal("3500"), hours=22)
    return service


@pytest.fixture
def pool(db):
    service = Service.objects.create(
        code="private-pool",
        name="Private Pool Area",
        category=Service.Category.POOLS,
        max_guests=30,
        pricing_model=Service.PricingModel.TIME_SLOT,
    )
    PricingOption.objects.create(
        service=service,
        code="day-small",
        label="Day tour (up to 15)",
        price=Decimal("9000"),
        time_slot=PricingOption.TimeSlot.DAY,
        guest_min=1,
        guest_max=15,
    )
    PricingOption.objects.create(
        service=service,
        code="night-small",
        label="Night tour (up to 15)",
        price=Decimal("10000"),
        time_slot=PricingOption.TimeSlot.NIGHT,
        guest_min=1,
        guest_max=15,
    )
    return service


@pytest.mark.django_db
def test_duration_window_adds_hours(room):
    option = room.pricing_options.get(code="22h")
    check_in = _local(2030, 3, 1, 14)

    start, end = resolve_window(option, check_in)

    assert start == check_in
    assert end == check_in + timedelta(hours=22)


@pytest.mark.django_db
def test_night_slot_forces_fixed_times(pool):
    option = pool.pricing_options.get(code="night-small")

    start, end = resolve_window(option, _local(2030, 3, 1, 10, 30))

    assert timezone.localtime(start) == _local(2030, 3, 1, 19)
    assert timezone.localtime(end) == _local(2030, 3, 2, 5)


@pytest.mark.django_db
def test_quote_includes_half_downpayment(pool):
    option = pool.pricing_options.get(code="day-small")

    stay = quote(pool, option, _local(2030, 3, 1, 6), guests=10)

    assert stay.base_price == Decimal("9000.00")
    assert stay.downpayment == Decimal("4500.00")
    assert timezone.localtime(stay.check_out) == _local(2030, 3, 1, 17)


@pytest.mark.django_db
def test_quote_rejects_guest_count_outside_slot_range(pool):
    option = pool.pricing_options.get(code="day-small")

    with pytest.raises(DomainValidationError):
        quote(pool, option, _local(2030, 3, 1, 7), guests=20)


@pytest.mark.django_db
def test_quote_rejects_option_of_other_service(room, pool):
    option = pool.pricing_options.get(code="day-small")

    with pytest.raises(DomainValidationError):
        quote(room, option, _local(2030, 3, 1, 7))


def test_option_shape_is_checked_against_declared_model():
    assert option_shape_errors(
        Service.PricingModel.DURATION, hours=None, time_slot="day", guest_min=None, guest_max=None
    ).keys() == {"hours", "time_slot"}
    assert option_shape_errors(
        Service.PricingModel.TIME_SLOT, hours=None, time_slot="day", guest_min=1, guest_max=10
    ) == {}
    assert "guest_max" in option_shape_errors(
        Service.PricingModel.TIME_SLOT, hours=None, time_slot="night", guest_min=None, guest_max=None
    )
