# services/qr_payments.py

"""
UPI QR payment requests.

Lifecycle (tenant_qr_payments.status):

    pending ──screenshot──▶ screenshot_submitted ──verify──▶ approved | rejected
       └───────────────────────verify─────────────────────▶ approved | rejected

Expiry is never written by the server. `is_expired` is derived from
`expires_at` against the wall clock each time a payment is read, and the
client offers regeneration.
"""

import math
from datetime import datetime, timedelta
from typing import List, Optional
from urllib.parse import quote, urlencode

from fastapi import HTTPException

from core.config import settings
from core.errors import handle_supabase_error, supabase_error
from core.logging_config import logger
from core.supabase_helpers import log_activity
from core.utils import parse_timestamp, utcnow
from models.enums import QRPaymentStatus, VERIFIABLE_QR_STATUSES
from models.qr_payment import QRPaymentGenerate, QRPaymentVerify, ScreenshotSubmit


ENTITY = "tenant_qr_payments"


# ============================================================
# Pure helpers
# ============================================================
def validate_request(payload: QRPaymentGenerate):
    if payload.amount is None or not math.isfinite(payload.amount) or payload.amount <= 0:
        raise HTTPException(400, "Valid amount is required")
    if not payload.bill_ids or not any(b and b.strip() for b in payload.bill_ids):
        raise HTTPException(400, "Bill IDs are required")


def format_upi_amount(amount: float) -> str:
    text = f"{amount:.2f}"
    return text[:-3] if text.endswith(".00") else text


def build_upi_string(upi_id: str, business_name: str, amount: float, reference: str) -> str:
    """upi://pay deep link understood by every UPI app."""
    params = urlencode(
        {
            "pa": upi_id,
            "pn": business_name,
            "am": format_upi_amount(amount),
            "cu": "INR",
            "tn": reference,
        },
        safe="@",
        quote_via=quote,
    )
    return f"upi://pay?{params}"


def build_qr_image_url(upi_string: str) -> str:
    query = urlencode({"size": settings.QR_IMAGE_SIZE, "data": upi_string})
    return f"{settings.QR_IMAGE_ENDPOINT}?{query}"


def compute_expiry(now: datetime, ttl_minutes: Optional[int] = None) -> datetime:
    return now + timedelta(minutes=ttl_minutes or settings.QR_PAYMENT_TTL_MINUTES)


def is_expired(payment: dict, now: Optional[datetime] = None) -> bool:
    """
    Only an unsubmitted (pending) request can expire; once a screenshot is in,
    the request waits for an admin regardless of the clock.
    """
    if payment.get("status") != QRPaymentStatus.pending.value:
        return False
    expires_at = parse_timestamp(payment.get("expires_at"))
    if expires_at is None:
        return False
    return (now or utcnow()) >= expires_at


def with_expiry(payment: dict, now: Optional[datetime] = None) -> dict:
    return {**payment, "is_expired": is_expired(payment, now)}


# ============================================================
# Store operations
# ============================================================
def get_tenant_profile(client, user_id: str) -> dict:
    try:
        result = (
            client.table("tenants_profile")
            .select("id, full_name, email")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        supabase_error(e, "Tenant profile lookup")

    if not result.data:
        raise HTTPException(404, "Tenant profile not found")
    return result.data[0]


def generate_payment(client, user_id: str, payload: QRPaymentGenerate, now: Optional[datetime] = None) -> dict:
    validate_request(payload)
    profile = get_tenant_profile(client, user_id)

    try:
        reference = client.rpc("generate_payment_reference", {}).execute().data
    except Exception as e:
        raise handle_supabase_error(e, "Failed to generate payment reference")
    if not reference:
        raise HTTPException(500, "Failed to generate payment reference")

    upi_string = build_upi_string(settings.QR_UPI_ID, settings.QR_BUSINESS_NAME, payload.amount, reference)
    qr_code_url = build_qr_image_url(upi_string)
    expires_at = compute_expiry(now or utcnow())
    bill_ids = [b.strip() for b in payload.bill_ids if b and b.strip()]

    try:
        result = (
            client.table(ENTITY)
            .insert(
                {
                    "tenant_id": profile["id"],
                    "bill_ids": bill_ids,
                    "amount": payload.amount,
                    "qr_code_url": qr_code_url,
                    "upi_id": settings.QR_UPI_ID,
                    "payment_reference": reference,
                    "expires_at": expires_at.isoformat(),
                    "status": QRPaymentStatus.pending.value,
                },
                returning="representation",
            )
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to create QR payment")

    row = result.data[0] if result.data else {}

    log_activity(
        client,
        user_id=user_id,
        action="QR_PAYMENT_GENERATED",
        entity_type=ENTITY,
        entity_id=row.get("id"),
        details={
            "payment_reference": reference,
            "amount": payload.amount,
            "bill_ids": bill_ids,
            "tenant_name": profile.get("full_name"),
        },
    )
    logger.info(f"QR payment {reference} generated for tenant {profile['id']}")

    return {
        "payment_reference": reference,
        "qr_code_url": qr_code_url,
        "upi_id": settings.QR_UPI_ID,
        "upi_string": upi_string,
        "expires_at": row.get("expires_at") or expires_at.isoformat(),
        "amount": payload.amount,
        "business_name": settings.QR_BUSINESS_NAME,
    }


def get_payment(client, reference: str, now: Optional[datetime] = None) -> dict:
    try:
        result = (
            client.table(ENTITY)
            .select("*")
            .eq("payment_reference", reference)
            .limit(1)
            .execute()
        )
    except Exception as e:
        supabase_error(e, "QR payment lookup")

    if not result.data:
        raise HTTPException(404, "Payment not found")
    return with_expiry(result.data[0], now)


def submit_screenshot(client, user_id: str, payload: ScreenshotSubmit, now: Optional[datetime] = None) -> dict:
    """
    Conditional update: only a row whose status is still `pending` moves to
    `screenshot_submitted`. Zero rows updated means the payment is missing or
    already past pending, and nothing is overwritten.
    """
    stamp = (now or utcnow()).isoformat()
    try:
        result = (
            client.table(ENTITY)
            .update(
                {
                    "payment_screenshot_url": payload.screenshot_url,
                    "verification_notes": payload.verification_notes,
                    "status": QRPaymentStatus.screenshot_submitted.value,
                    "updated_at": stamp,
                },
                returning="representation",
            )
            .eq("payment_reference", payload.payment_reference)
            .eq("status", QRPaymentStatus.pending.value)
            .execute()
        )
    except Exception as e:
        supabase_error(e, "Screenshot upload")

    if not result.data:
        raise HTTPException(409, "Payment is not pending or does not exist")

    row = result.data[0]
    log_activity(
        client,
        user_id=user_id,
        action="QR_PAYMENT_SCREENSHOT_UPLOADED",
        entity_type=ENTITY,
        entity_id=row.get("id"),
        details={
            "payment_reference": payload.payment_reference,
            "screenshot_url": payload.screenshot_url,
        },
    )
    return row


def list_pending(client, now: Optional[datetime] = None) -> List[dict]:
    try:
        result = (
            client.table(ENTITY)
            .select("*")
            .in_("status", [s.value for s in VERIFIABLE_QR_STATUSES])
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as e:
        supabase_error(e, "Fetching pending QR payments")

    return [with_expiry(row, now) for row in (result.data or [])]


def verify_payment(
    client,
    admin_id: str,
    organization_id: Optional[str],
    payload: QRPaymentVerify,
    now: Optional[datetime] = None,
) -> dict:
    stamp = (now or utcnow()).isoformat()
    decision = payload.status.value

    try:
        result = (
            client.table(ENTITY)
            .update(
                {
                    "status": decision,
                    "admin_notes": payload.admin_notes,
                    "verified_by": admin_id,
                    "verified_at": stamp,
                    "updated_at": stamp,
                },
                returning="representation",
            )
            .eq("id", payload.payment_id)
            .in_("status", [s.value for s in VERIFIABLE_QR_STATUSES])
            .execute()
        )
    except Exception as e:
        supabase_error(e, "QR payment verification")

    if not result.data:
        try:
            existing = (
                client.table(ENTITY).select("id, status").eq("id", payload.payment_id).limit(1).execute()
            )
        except Exception as e:
            supabase_error(e, "QR payment lookup")
        if not existing.data:
            raise HTTPException(404, "Payment not found")
        raise HTTPException(409, f"Payment already {existing.data[0].get('status')}")

    row = result.data[0]
    log_activity(
        client,
        user_id=admin_id,
        organization_id=organization_id,
        action=f"QR_PAYMENT_{decision.upper()}",
        entity_type=ENTITY,
        entity_id=payload.payment_id,
        details={
            "payment_reference": row.get("payment_reference"),
            "amount": row.get("amount"),
            "admin_notes": payload.admin_notes,
            "verified_at": stamp,
        },
    )
    logger.info(f"QR payment {payload.payment_id} {decision} by {admin_id}")
    return row
