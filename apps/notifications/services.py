"""Notification services for reservation emails."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.template.loader import render_to_string  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.html import escape, strip_tags  # type: ignore

if TYPE_CHECKING:  # pragma: no cover
    from apps.reservations.models import Reservation

logger = logging.getLogger(__name__)


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

def send_email_notification(
    recipient_email: str,
    subject: str,
    template_name: str | None,
    context: dict,
    *,
    html_message: str | None = None,
) -> bool:
    """
    Send a single email notification.

    Args:
        recipient_email: Recipient address
        subject: Subject line
        template_name: Django template path (optional)
        context: Template context; ``message`` is used as plain text fallback
        html_message: Pre-rendered HTML body (optional)

    Returns:
        bool: True if the message was handed to the mail backend
    """
    if not recipient_email:
        logger.warning(f"Skipping email without recipient: {subject}")
        return False
    try:
        if html_message:
            text_message = strip_tags(html_message)
        elif template_name:
            html_message = render_to_string(template_name, context)
            text_message = strip_tags(html_message)
        else:
            text_message = context.get("message", "")
            html_message = None

        send_mail(
            subject=subject,
            message=text_message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )

        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


def _format_moment(value) -> str:
    return timezone.localtime(value).strftime("%b %d, %Y %I:%M %p")


def _reservation_items(reservations: Sequence["Reservation"]) -> str:
    rows = []
    for reservation in reservations:
        rows.append(
            f"<li><strong>{escape(reservation.formal_id)}</strong>: "
            f"{escape(reservation.service.name)} ({escape(reservation.option_label)}), "
            f"{_format_moment(reservation.check_in)} to {_format_moment(reservation.check_out)}</li>"
        )
    return "\n".join(rows)


def _wrap(guest_name: str, body: str) -> str:
    return f"""
    <html>
    <body>
        <h2>Hello, {escape(guest_name)}!</h2>
        {body}
        <p>Thank you,<br>{escape(settings.RESORT_NAME)}</p>
    </body>
    </html>
    """


def send_payment_approved_email(reservations: Sequence["Reservation"]) -> bool:
    primary = reservations[0]
    fully_paid = primary.payment_status == primary.PaymentStatus.FULLY_PAID
    subject = f"Payment approved for reservation {primary.formal_id}"
    balance_line = (
        "<p>Your reservation is fully paid.</p>"
        if fully_paid
        else "<p>Your downpayment was approved. The remaining balance is due upon arrival.</p>"
    )
    body = f"""
        <p>We have verified your GCash payment.</p>
        <ul>
            {_reservation_items(reservations)}
        </ul>
        {balance_line}
    """
    return send_email_notification(
        recipient_email=primary.email,
        subject=subject,
        template_name=None,
        context={"reservations": reservations},
        html_message=_wrap(primary.full_name, body),
    )


def send_payment_rejected_email(reservations: Sequence["Reservation"]) -> bool:
    primary = reservations[0]
    reason = primary.payment_rejection_reason or "The submitted receipt could not be verified."
    body = f"""
        <p>Unfortunately we could not accept the payment for:</p>
        <ul>
            {_reservation_items(reservations)}
        </ul>
        <p><strong>Reason:</strong> {escape(reason)}</p>
    """
    return send_email_notification(
        recipient_email=primary.email,
        subject=f"Payment rejected for reservation {primary.formal_id}",
        template_name=None,
        context={"reservations": reservations},
        html_message=_wrap(primary.full_name, body),
    )


def send_cancellation_email(reservations: Sequence["Reservation"]) -> bool:
    primary = reservations[0]
    reason = f"<p><strong>Reason:</strong> {escape(primary.cancellation_reason)}</p>" if primary.cancellation_reason else ""
    body = f"""
        <p>The following reservation has been cancelled:</p>
        <ul>
            {_reservation_items(reservations)}
        </ul>
        {reason}
    """
    return send_email_notification(
        recipient_email=primary.email,
        subject=f"Reservation {primary.formal_id} cancelled",
        template_name=None,
        context={"reservations": reservations},
        html_message=_wrap(primary.full_name, body),
    )


def send_reschedule_decision_email(reservation: "Reservation") -> bool:
    approved = reservation.reschedule_status == reservation.RescheduleStatus.APPROVED
    if approved:
        body = f"""
            <p>Your reschedule request was approved. Your new schedule:</p>
            <ul>
                {_reservation_items([reservation])}
            </ul>
        """
        subject = f"Reschedule approved for {reservation.formal_id}"
    else:
        body = f"""
            <p>Your reschedule request was declined. Your original schedule stays in place:</p>
            <ul>
                {_reservation_items([reservation])}
            </ul>
            <p><strong>Reason:</strong> {escape(reservation.reschedule_rejection_reason)}</p>
        """
        subject = f"Reschedule declined for {reservation.formal_id}"
    return send_email_notification(
        recipient_email=reservation.email,
        subject=subject,
        template_name=None,
        context={"reservation": reservation},
        html_message=_wrap(reservation.full_name, body),
    )


def send_reservation_completed_email(reservation: "Reservation") -> bool:
    body = f"""
        <p>Thank you for staying with us. Your reservation is now complete:</p>
        <ul>
            {_reservation_items([reservation])}
        </ul>
        <p>We hope to see you again soon.</p>
    """
    return send_email_notification(
        recipient_email=reservation.email,
        subject=f"Thank you for your stay ({reservation.formal_id})",
        template_name=None,
        context={"reservation": reservation},
        html_message=_wrap(reservation.full_name, body),
    )
