"""Reservation creation, payment receipts and on-site lifecycle."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

from django.conf import settings  # type: ignore
from django.db import DatabaseError, IntegrityError, transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.availability.services import ensure_available
from apps.catalog.models import PricingOption, Service
from apps.catalog.pricing import downpayment_for, quote
from shared.domain.exceptions import (
    DomainValidationError,
    InvalidTransitionError,
    NotFoundError,
    StoreError,
)

from .domain.states import (
    APPROVED_PAYMENT_STATUSES,
    PaymentStatus,
    PaymentType,
    ReservationStatus,
    ensure_payment_transition,
    ensure_status_transition,
)
from .models import Reservation

logger = logging.getLogger(__name__)

REQUIRED_GUEST_FIELDS = ("full_name", "email", "phone")


@dataclass
class ReservationRequest:
    """Validated input describing one amenity to reserve."""

    service: Service
    option: PricingOption
    check_in: datetime
    guests: int = 1
    full_name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    notes: str = ""


# ---------------------------------------------------------------------------
# Formal ids
# ---------------------------------------------------------------------------

def formal_id_prefix(day: date) -> str:
    return f"{settings.RESERVATION_FORMAL_ID_PREFIX}-{day:%Y%m%d}-"


def next_formal_id(day: date | None = None) -> str:
    """Next ``TRR-YYYYMMDD-NNN`` id for ``day`` based on the highest counter in use."""
    day = day or timezone.localdate()
    prefix = formal_id_prefix(day)
    used = Reservation.objects.filter(formal_id__startswith=prefix).values_list("formal_id", flat=True)
    counters = [int(value[len(prefix):]) for value in used if value[len(prefix):].isdigit()]
    return f"{prefix}{max(counters, default=0) + 1:03d}"


def save_with_formal_id(reservation: Reservation) -> Reservation:
    """
    Insert a new reservation, allocating its formal id.

    Concurrent inserts on the same day can pick the same counter; the unique
    constraint rejects the loser, which re-reads the counter and retries.
    """
    attempts = settings.RESERVATION_FORMAL_ID_ATTEMPTS
    if not reservation.reservation_hash:
        reservation.reservation_hash = Reservation.generate_hash()

    for attempt in range(1, attempts + 1):
        reservation.formal_id = next_formal_id()
        try:
            with transaction.atomic():
                reservation.save(force_insert=True)
            return reservation
        except IntegrityError as exc:
            if not Reservation.objects.filter(formal_id=reservation.formal_id).exists():
                raise StoreError(f"Could not store reservation {reservation.formal_id}: {exc}") from exc
            logger.warning(
                f"Formal id {reservation.formal_id} already taken, retrying ({attempt}/{attempts})"
            )
        except DatabaseError as exc:
            raise StoreError(f"Could not store reservation: {exc}") from exc

    raise StoreError(f"Could not allocate a unique formal id after {attempts} attempts")


# ---------------------------------------------------------------------------
# Building and pricing
# ---------------------------------------------------------------------------

def resolve_guest_details(data: dict, account=None) -> dict[str, str]:
    """Fill guest contact fields from the account and require the essentials."""
    details = {
        "full_name": (data.get("full_name") or "").strip(),
        "email": (data.get("email") or "").strip(),
        "phone": (data.get("phone") or "").strip(),
        "address": (data.get("address") or "").strip(),
    }
    if account is not None and account.is_authenticated:
        details["full_name"] = details["full_name"] or account.get_full_name().strip()
        details["email"] = details["email"] or account.email
        details["phone"] = details["phone"] or (account.phone or "")
        details["address"] = details["address"] or account.address

    missing = [field for field in REQUIRED_GUEST_FIELDS if not details[field]]
    if missing:
        raise DomainValidationError(f"Missing guest details: {', '.join(missing)}.")
    return details


def apply_discount(reservation: Reservation, code: str, amount: Decimal) -> None:
    amount = min(amount, reservation.base_price)
    reservation.discount_code = code
    reservation.discount_amount = amount
    reservation.final_total = reservation.base_price - amount
    reservation.downpayment_amount = downpayment_for(reservation.final_total)
    reservation.remaining_balance = reservation.final_total - reservation.downpayment_amount


def build_reservation(
    request: ReservationRequest,
    *,
    account=None,
    status: str = ReservationStatus.PENDING,
    payment_status: str = PaymentStatus.PENDING,
) -> Reservation:
    """Validate and price a request; the check-out comes from the pricing option."""
    if not request.service.is_active:
        raise DomainValidationError(f"{request.service.name} is not available for booking.")
    stay = quote(request.service, request.option, request.check_in, request.guests)
    if stay.check_in <= timezone.now():
        raise DomainValidationError("Check-in must be in the future.")

    reservation = Reservation(
        account=account if account is not None and account.is_authenticated else None,
        service=request.service,
        pricing_option=request.option,
        option_label=stay.label,
        check_in=stay.check_in,
        check_out=stay.check_out,
        full_name=request.full_name,
        email=request.email,
        phone=request.phone,
        address=request.address,
        notes=request.notes,
        guests=request.guests,
        base_price=stay.base_price,
        status=status,
        payment_status=payment_status,
    )
    apply_discount(reservation, "", Decimal("0.00"))
    return reservation


def create_reservation(
    request: ReservationRequest,
    *,
    account=None,
    promo_code: str | None = None,
) -> Reservation:
    """Create a single PENDING reservation after checking availability."""
    # Local import to prevent circular dependency
    from apps.promotions.services import validate_promo_code

    reservation = build_reservation(request, account=account)
    ensure_available(request.service, reservation.check_in, reservation.check_out)
    if promo_code:
        promo = validate_promo_code(promo_code, reservation.base_price)
        apply_discount(reservation, promo.code, promo.discount_amount)

    save_with_formal_id(reservation)
    logger.info(
        f"Reservation {reservation.formal_id} created for service {reservation.service_id} "
        f"({reservation.check_in.isoformat()} - {reservation.check_out.isoformat()})"
    )
    return reservation


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

def find_reservation(identifier) -> Reservation:
    """Find a reservation by internal id, formal id or hash."""
    value = str(identifier or "").strip()
    if not value:
        raise DomainValidationError("A reservation identifier is required.")
    qs = Reservation.objects.select_related("service")
    try:
        if value.isdigit():
            return qs.get(pk=int(value))
        if value.upper().startswith(f"{settings.RESERVATION_FORMAL_ID_PREFIX}-"):
            return qs.get(formal_id=value.upper())
        return qs.get(reservation_hash=value)
    except Reservation.DoesNotExist:
        raise NotFoundError(f"Reservation {value} not found.")


def expand_groups(reservations: Iterable[Reservation]) -> list[Reservation]:
    """Every reservation plus the other members of its multi-amenity group."""
    members: dict[int, Reservation] = {}
    for reservation in reservations:
        if reservation.multi_amenity_group_id:
            for member in Reservation.objects.in_group(reservation.multi_amenity_group_id):
                members.setdefault(member.pk, member)
        else:
            members.setdefault(reservation.pk, reservation)
    return list(members.values())


# ---------------------------------------------------------------------------
# Payment receipts
# ---------------------------------------------------------------------------

def parse_hashes(hashes) -> list[str]:
    if isinstance(hashes, str):
        hashes = hashes.split(",")
    return [value.strip() for value in hashes or [] if value and value.strip()]


def submit_receipt(
    hashes,
    *,
    gcash_reference_number: str,
    receipt_file_name: str,
    payment_type: str,
) -> list[Reservation]:
    """Record a GCash receipt for the referenced reservations and their groups."""
    hash_list = parse_hashes(hashes)
    if not hash_list:
        raise DomainValidationError("At least one reservation hash is required.")
    if not (gcash_reference_number or "").strip():
        raise DomainValidationError("GCash reference number is required.")
    if not (receipt_file_name or "").strip():
        raise DomainValidationError("Receipt file is required.")
    if payment_type not in PaymentType.values:
        raise DomainValidationError("Payment type must be 'downpayment' or 'full'.")

    found = {r.reservation_hash: r for r in Reservation.objects.filter(reservation_hash__in=hash_list)}
    missing = [value for value in hash_list if value not in found]
    if missing:
        raise NotFoundError(f"Reservation not found for hash: {', '.join(missing)}")

    members = expand_groups(found.values())
    target = (
        PaymentStatus.PARTIAL_PAYMENT
        if payment_type == PaymentType.DOWNPAYMENT
        else PaymentStatus.FULL_PAYMENT
    )
    for member in members:
        if member.status != ReservationStatus.PENDING:
            raise InvalidTransitionError(f"{member.formal_id} is not awaiting payment.")
        ensure_payment_transition(member.payment_status, target, label=member.formal_id)

    now = timezone.now()
    try:
        with transaction.atomic():
            for member in members:
                member.payment_status = target
                member.payment_type = payment_type
                member.gcash_reference_number = gcash_reference_number.strip()
                member.receipt_file_name = receipt_file_name.strip()
                member.receipt_uploaded_at = now
                member.payment_rejection_reason = ""
                member.save(
                    update_fields=[
                        "payment_status",
                        "payment_type",
                        "gcash_reference_number",
                        "receipt_file_name",
                        "receipt_uploaded_at",
                        "payment_rejection_reason",
                        "updated_at",
                    ]
                )
    except DatabaseError as exc:
        raise StoreError(f"Could not record receipt for {[m.pk for m in members]}: {exc}") from exc

    logger.info(
        f"Receipt {receipt_file_name} ({payment_type}) submitted for reservations "
        f"{[m.formal_id for m in members]}"
    )
    return members


# ---------------------------------------------------------------------------
# On-site lifecycle
# ---------------------------------------------------------------------------

def check_in_reservation(reservation: Reservation) -> Reservation:
    if (
        reservation.status not in (ReservationStatus.PAID, ReservationStatus.CONFIRMED)
        or reservation.payment_status not in APPROVED_PAYMENT_STATUSES
    ):
        raise InvalidTransitionError(
            f"{reservation.formal_id} cannot be checked in: payment has not been approved."
        )
    ensure_status_transition(reservation.status, ReservationStatus.CHECKED_IN, label=reservation.formal_id)
    reservation.status = ReservationStatus.CHECKED_IN
    reservation.checked_in_at = timezone.now()
    reservation.save(update_fields=["status", "checked_in_at", "updated_at"])
    logger.info(f"Reservation {reservation.formal_id} checked in")
    return reservation


def complete_reservation(reservation: Reservation, *, require_checked_in: bool = True) -> Reservation:
    if require_checked_in and reservation.status != ReservationStatus.CHECKED_IN:
        raise InvalidTransitionError(f"{reservation.formal_id} is not checked in.")
    ensure_status_transition(reservation.status, ReservationStatus.COMPLETED, label=reservation.formal_id)
    reservation.status = ReservationStatus.COMPLETED
    reservation.checked_out_at = timezone.now()
    reservation.save(update_fields=["status", "checked_out_at", "updated_at"])
    logger.info(f"Reservation {reservation.formal_id} completed")
    return reservation
