"""
RentOK Admin Backend — Transactional Email Service
===================================================

What:  Sends the vendor welcome email and the order status update email
       through Resend.
How:   The Resend SDK is synchronous; each send runs in a worker thread so
       the event loop keeps serving requests. Bodies are plain text built
       from the structured parameters.
Who:   Called by OrderService (status changes), the
       /api/orders/send-status-email route and the
       /api/vendors/welcome-email route.

Failure Semantics:
    Sending never raises. Every outcome comes back as an EmailResult:
        success → EmailResult(success=True,  data={"messageId": ...})
        failure → EmailResult(success=False, error="...")
    Callers decide whether a failed send is fatal. There is no retry.
"""

import asyncio
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import resend

from rentok.config import settings
from rentok.schemas.email import EmailResult, OrderStatusEmail, VendorWelcomeEmail

logger = logging.getLogger(__name__)

WELCOME_SUBJECT = "🎉 Welcome to RentOK - Your Vendor Account is Ready!"

STATUS_EMOJI = {
    "pending": "⏳",
    "confirmed": "✓",
    "processing": "⚙️",
    "shipped": "🚚",
    "delivered": "✅",
    "cancelled": "❌",
    "rejected": "❌",
}
DEFAULT_STATUS_EMOJI = "📦"

STATUS_MESSAGES = {
    "pending": "Your order is being reviewed and will be confirmed soon.",
    "confirmed": "Great news! Your order has been confirmed and will be processed shortly.",
    "processing": "Your order is being prepared for shipment.",
    "shipped": "Your order is on its way! It will be delivered soon.",
    "delivered": "Your order has been successfully delivered. Enjoy your rental!",
    "cancelled": "Your order has been cancelled. If you have questions, please contact support.",
    "rejected": (
        "Unfortunately, your order could not be processed. "
        "Please contact support for more information."
    ),
}
DEFAULT_STATUS_MESSAGE = "Your order status has been updated."


# ── Formatting helpers ────────────────────────────────────────────────────


def status_emoji(status: str) -> str:
    return STATUS_EMOJI.get(status.lower(), DEFAULT_STATUS_EMOJI)


def status_subject(order_number: str, order_status: str) -> str:
    return f"{status_emoji(order_status)} Order {order_number} - Status Update: {order_status}"


def format_price(amount: Optional[float]) -> str:
    """Rupees with thousands separators, no decimals for whole amounts."""
    if amount is None:
        return "-"
    if float(amount).is_integer():
        return f"₹{int(amount):,}"
    return f"₹{amount:,.2f}"


def format_date(value: Optional[str]) -> str:
    """ISO date or datetime → "15 January 2025". Unparsable input is echoed."""
    if not value:
        return "-"
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = date.fromisoformat(value)
        except ValueError:
            return value
    return f"{parsed.day} {parsed.strftime('%B %Y')}"


def sender_address() -> str:
    return f"{settings.email_from_name} <{settings.email_from_address}>"


def render_order_status_text(params: OrderStatusEmail) -> str:
    status = params.order_status or ""
    lines: List[str] = [
        f"Hi {params.customer_name},",
        "",
        STATUS_MESSAGES.get(status.lower(), DEFAULT_STATUS_MESSAGE),
        "",
        f"Order number: {params.order_number}",
    ]
    if params.previous_status:
        lines.append(f"Status: {params.previous_status} → {status}")
    else:
        lines.append(f"Status: {status}")
    lines += [
        f"Order date: {format_date(params.order_date)}",
        f"Rental period: {format_date(params.rental_start_date)} to "
        f"{format_date(params.rental_end_date)}"
        + (f" ({params.rental_days} days)" if params.rental_days else ""),
        f"Total amount: {format_price(params.total_amount)}",
    ]
    if params.products:
        lines += ["", "Items:"]
        lines += [f"  - {p.title} × {p.quantity}" for p in params.products]
    if params.notes:
        lines += ["", f"Note from RentOK: {params.notes}"]
    if params.tracking_url:
        lines += ["", f"Track your order: {params.tracking_url}"]
    lines += ["", "Thank you for renting with RentOK."]
    return "\n".join(lines)


def render_vendor_welcome_text(params: VendorWelcomeEmail) -> str:
    lines: List[str] = [
        f"Hi {params.vendor_name},",
        "",
        "Your RentOK vendor account is ready. Sign in with the credentials below",
        "and change your password after the first login.",
        "",
        f"Login URL: {params.login_url}",
        f"Email: {params.email}",
        f"Password: {params.password}",
        "",
        "Account details:",
    ]
    details = (
        ("Business name", params.business_name),
        ("Phone", params.phone),
        ("City", params.city),
        ("State", params.state),
        ("GST number", params.gst_number),
        ("PAN number", params.pan_number),
        ("Bank account holder", params.bank_account_holder_name),
        ("Bank account number", params.bank_account_number),
        ("IFSC code", params.bank_ifsc_code),
    )
    lines += [f"  {label}: {value}" for label, value in details if value]
    lines += [
        f"  Commission rate: {params.commission_rate:g}%",
        "",
        "Welcome aboard,",
        "The RentOK team",
    ]
    return "\n".join(lines)


# ── Service ───────────────────────────────────────────────────────────────


class EmailService:
    """Resend-backed sender. Stateless apart from reading settings per send."""

    async def _send(self, payload: Dict[str, Any]) -> EmailResult:
        api_key = settings.resend_api_key.strip()
        if not api_key:
            logger.error("Email not sent to %s: RESEND_API_KEY is not set", payload.get("to"))
            return EmailResult(success=False, error="Resend API key is not configured.")

        resend.api_key = api_key
        try:
            response = await asyncio.to_thread(resend.Emails.send, payload)
        except Exception as e:
            # The SDK raises its own error types plus transport errors; every
            # one of them is reported through the result instead.
            logger.error("Resend rejected email to %s: %s", payload.get("to"), str(e))
            return EmailResult(success=False, error=str(e))

        message_id = response.get("id") if isinstance(response, dict) else None
        if not message_id:
            logger.error("Resend returned no message id: %r", response)
            return EmailResult(success=False, error=str(response))

        logger.info("Email sent to %s (id=%s)", payload.get("to"), message_id)
        return EmailResult(success=True, data={"messageId": message_id})

    async def send_vendor_welcome_email(self, params: VendorWelcomeEmail) -> EmailResult:
        params = params.model_copy(
            update={
                "commission_rate": params.commission_rate or settings.default_commission_rate,
                "login_url": params.login_url or settings.vendor_login_url,
            }
        )
        return await self._send(
            {
                "from": sender_address(),
                "to": [params.email],
                "subject": WELCOME_SUBJECT,
                "text": render_vendor_welcome_text(params),
            }
        )

    async def send_order_status_update_email(self, params: OrderStatusEmail) -> EmailResult:
        return await self._send(
            {
                "from": sender_address(),
                "to": [params.customer_email],
                "subject": status_subject(params.order_number, params.order_status),
                "text": render_order_status_text(params),
            }
        )


# ── Singleton Instance ────────────────────────────────────────────────────
email_service = EmailService()
