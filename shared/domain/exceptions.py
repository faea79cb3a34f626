"""
Domain Exceptions

Error taxonomy shared by the booking domains. The API layer maps each class
to an HTTP status in ``shared.infrastructure.exception_handler``.
"""

from __future__ import annotations

from typing import Iterable


class ReservationSystemError(Exception):
    """Base class for all domain errors."""

    default_message = "Reservation request failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class DomainValidationError(ReservationSystemError):
    """Malformed or missing input; raised before any store is touched."""

    default_message = "Invalid request."


class InvalidTransitionError(DomainValidationError):
    """Status or payment status change not allowed from the current state."""

    default_message = "This action is not allowed in the current state."


class ConflictError(ReservationSystemError):
    """Requested window is not bookable."""

    default_message = "The selected dates are not available."

    def __init__(self, conflict_reason: str | None = None):
        super().__init__(conflict_reason)
        self.conflict_reason = self.message


class NotFoundError(ReservationSystemError):
    default_message = "Not found."


class StoreError(ReservationSystemError):
    """Persistence failure on a write path."""

    default_message = "Storage is temporarily unavailable."


class PartialGroupFailure(ReservationSystemError):
    """Some members of a multi-amenity group did not reach the target state."""

    default_message = "Group update did not complete for every reservation."

    def __init__(
        self,
        failed_ids: Iterable[int],
        affected_ids: Iterable[int] = (),
        message: str | None = None,
    ):
        self.failed_ids = list(failed_ids)
        self.affected_ids = list(affected_ids)
        super().__init__(
            message or f"{self.default_message} Not updated: {', '.join(map(str, self.failed_ids))}"
        )
