"""Promo code validation and usage accounting."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db.models import F  # type: ignore

from shared.domain.exceptions import DomainValidationError
from shared.domain.value_objects import Money

from .models import PromoCode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromoQuote:
    code: str
    discount_percentage: Decimal
    discount_amount: Decimal


def validate_promo_code(code: str, subtotal: Decimal) -> PromoQuote:
    """Return the discount granted by ``code`` on ``subtotal`` or raise."""
    normalized = (code or "").strip().upper()
    if not normalized:
        raise DomainValidationError("Promo code is required.")
    try:
        promo = PromoCode.objects.get(code=normalized)
    except PromoCode.DoesNotExist:
        raise DomainValidationError("Invalid promo code.")

    if not promo.is_active:
        raise DomainValidationError("This promo code is no longer available.")
    if promo.is_expired:
        raise DomainValidationError("This promo code has expired.")
    if promo.is_exhausted:
        raise DomainValidationError("This promo code has reached its usage limit.")
    if subtotal < promo.min_purchase_amount:
        raise DomainValidationError(
            f"A minimum purchase of {promo.min_purchase_amount:,.2f} is required for this promo code."
        )

    discount = (Money(subtotal) * promo.discount_percentage).rounded().amount
    return PromoQuote(
        code=promo.code,
        discount_percentage=promo.discount_percentage,
        discount_amount=min(discount, subtotal),
    )


def record_promo_usage(code: str) -> None:
    updated = PromoCode.objects.filter(code=code.strip().upper()).update(times_used=F("times_used") + 1)
    if not updated:
        logger.warning(f"Promo code {code} disappeared before its usage was recorded")
        return
    logger.info(f"Recorded usage of promo code {code}")
