"""DRF exception handler translating domain errors into HTTP responses."""

from __future__ import annotations

import logging

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain.exceptions import (
    ConflictError,
    DomainValidationError,
    NotFoundError,
    PartialGroupFailure,
    StoreError,
)

logger = logging.getLogger(__name__)

GENERIC_STORE_MESSAGE = "The service is temporarily unavailable. Please try again later."


def domain_exception_handler(exc, context):
    """Extend DRF's default handler with the booking error taxonomy."""
    view = context.get("view")
    view_name = view.__class__.__name__ if view is not None else "unknown"

    if isinstance(exc, DomainValidationError):
        return Response({"detail": exc.message}, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, ConflictError):
        return Response(
            {"detail": exc.conflict_reason, "conflict_reason": exc.conflict_reason},
            status=status.HTTP_409_CONFLICT,
        )

    if isinstance(exc, NotFoundError):
        return Response({"detail": exc.message}, status=status.HTTP_404_NOT_FOUND)

    if isinstance(exc, PartialGroupFailure):
        logger.error(
            f"Partial group failure in {view_name}: failed={exc.failed_ids} affected={exc.affected_ids}"
        )
        return Response(
            {
                "detail": exc.message,
                "failed_ids": exc.failed_ids,
                "affected_ids": exc.affected_ids,
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, StoreError):
        logger.error(f"Store error in {view_name}: {exc.message}", exc_info=exc)
        return Response({"detail": GENERIC_STORE_MESSAGE}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    return exception_handler(exc, context)
