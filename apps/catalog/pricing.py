"""Stay window and price calculation for catalog options."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.exceptions import DomainValidationError
from shared.domain.value_objects import Money

from .models import PricingOption, Service

# start, end, days added to reach the end time
TIME_SLOT_WINDOWS: dict[str, tuple[time, time, int]] = {
    PricingOption.TimeSlot.DAY: (time(7, 0), time(17, 0), 0),
    PricingOption.TimeSlot.NIGHT: (time(19, 0), time(5, 0), 1),
}


@dataclass(frozen=True)
class StayQuote:
    check_in: datetime
    check_out: datetime
    base_price: Decimal
    downpayment: Decimal
    label: str

    def as_dict(self) -> dict:
        return {
            "check_in": self.check_in,
            "check_out": self.check_out,
            "base_price": self.base_price,
            "downpayment": self.downpayment,
            "label": self.label,
            "currency": settings.RESORT_CURRENCY,
        }


def option_shape_errors(
    pricing_model: str,
    *,
    hours: int | None,
    time_slot: str | None,
    guest_min: int | None,
    guest_max: int | None,
) -> dict[str, str]:
    """Check an option against the pricing model declared on its service."""
    errors: dict[str, str] = {}
    if pricing_model == Service.PricingModel.DURATION:
        if not hours:
            errors["hours"] = "Duration options require a positive number of hours."
        if time_slot:
            errors["time_slot"] = "Duration options cannot define a time slot."
    elif pricing_model == Service.PricingModel.TIME_SLOT:
        if time_slot not in TIME_SLOT_WINDOWS:
            errors["time_slot"] = "Time slot options require a day or night slot."
        if hours:
            errors["hours"] = "Time slot options cannot define hours."
        if guest_min is None or guest_max is None:
            errors["guest_max"] = "Time slot options require a guest range."
        elif guest_min > guest_max:
            errors["guest_max"] = "Maximum guests must not be lower than minimum guests."
    else:
        errors["pricing_model"] = f"Unknown pricing model: {pricing_model}"
    return errors


def ensure_aware(value: datetime) -> datetime:
    if timezone.is_naive(value):
        return timezone.make_aware(value)
    return value


def resolve_window(option: PricingOption, check_in: datetime) -> tuple[datetime, datetime]:
    """
    Compute the authoritative occupied window for an option.

    Duration options add their hours to check-in. Time slots keep the
    local calendar day of check-in and force the slot's fixed times.
    """
    check_in = ensure_aware(check_in)
    if option.service.pricing_model == Service.PricingModel.DURATION:
        if not option.hours:
            raise DomainValidationError(f"Option '{option.code}' has no duration.")
        return check_in, check_in + timedelta(hours=option.hours)

    try:
        start_time, end_time, day_offset = TIME_SLOT_WINDOWS[option.time_slot]
    except KeyError:
        raise DomainValidationError(f"Option '{option.code}' has no valid time slot.")
    day = timezone.localtime(check_in).date()
    start = timezone.make_aware(datetime.combine(day, start_time))
    end = timezone.make_aware(datetime.combine(day + timedelta(days=day_offset), end_time))
    return start, end


def check_guest_count(service: Service, option: PricingOption, guests: int) -> None:
    if guests < 1:
        raise DomainValidationError("At least one guest is required.")
    if guests > service.max_guests:
        raise DomainValidationError(
            f"{service.name} accommodates at most {service.max_guests} guests."
        )
    if service.is_time_slot_based and option.guest_min is not None and option.guest_max is not None:
        if not option.guest_min <= guests <= option.guest_max:
            raise DomainValidationError(
                f"{option.label} is for {option.guest_min}-{option.guest_max} guests."
            )


def downpayment_for(total: Decimal) -> Decimal:
    rate = Decimal(str(settings.RESORT_DOWNPAYMENT_RATE))
    return (Money(total, settings.RESORT_CURRENCY) * rate).rounded().amount


def quote(
    service: Service,
    option: PricingOption,
    check_in: datetime,
    guests: int | None = None,
) -> StayQuote:
    if option.service_id != service.pk:
        raise DomainValidationError(f"Option '{option.code}' does not belong to {service.name}.")
    if guests is not None:
        check_guest_count(service, option, guests)
    start, end = resolve_window(option, check_in)
    price = Money(option.price, settings.RESORT_CURRENCY).rounded().amount
    return StayQuote(
        check_in=start,
        check_out=end,
        base_price=price,
        downpayment=downpayment_for(price),
        label=option.label,
    )
