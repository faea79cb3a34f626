"""
Common Value Objects

Value objects used across multiple domains:
- Money: Represents monetary amounts with currency
- StayWindow: Represents an occupied time window (check-in to check-out)
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

from django.utils import timezone  # type: ignore

from shared.domain.base import ValueObject

CENT = Decimal("0.01")


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Represents a monetary amount with currency.
    Immutable and supports arithmetic operations.
    """
    amount: Decimal
    currency: str = 'PHP'

    def __post_init__(self):
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if not self.currency:
            raise ValueError("Currency is required")
        if self.currency not in ['PHP', 'USD']:
            raise ValueError(f"Unsupported currency: {self.currency}")

    def __add__(self, other: 'Money') -> 'Money':
        """Add two money objects"""
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot add different currencies: {self.currency} and {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        """Subtract two money objects"""
        if not isinstance(other, Money):
            raise TypeError("Can only subtract Money from Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot subtract different currencies: {self.currency} and {other.currency}")
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, factor) -> 'Money':
        """Multiply money by a factor"""
        if not isinstance(factor, (int, float, Decimal)):
            raise TypeError("Can only multiply Money by number")
        return Money(self.amount * Decimal(str(factor)), self.currency)

    def rounded(self) -> 'Money':
        """Round to centavos, half up"""
        return Money(self.amount.quantize(CENT, rounding=ROUND_HALF_UP), self.currency)

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"


@dataclass(frozen=True)
class StayWindow(ValueObject):
    """
    Occupied time window value object

    Both boundaries are inclusive: a window ending at the exact moment
    another one starts is treated as overlapping.
    """
    check_in: datetime
    check_out: datetime

    def __post_init__(self):
        if self.check_out <= self.check_in:
            raise ValueError(f"Check-out ({self.check_out}) must be after check-in ({self.check_in})")

    def overlaps_with(self, other: 'StayWindow') -> bool:
        """
        Check if this window overlaps with another

        Examples:
            - 08:00-20:00 overlaps with 18:00-02:00 -> True
            - 08:00-12:00 overlaps with 12:00-14:00 -> True (touching)
        """
        if not isinstance(other, StayWindow):
            raise TypeError("Can only check overlap with another StayWindow")
        return self.check_in <= other.check_out and self.check_out >= other.check_in

    @property
    def first_day(self) -> date:
        """Local calendar day of check-in"""
        return timezone.localtime(self.check_in).date()

    @property
    def last_day(self) -> date:
        """Local calendar day of check-out"""
        return timezone.localtime(self.check_out).date()

    def __str__(self):
        return f"{self.check_in.isoformat()} - {self.check_out.isoformat()}"
