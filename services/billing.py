# services/billing.py

import secrets
from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from fastapi import HTTPException

from core.errors import supabase_error
from core.logging_config import logger
from core.utils import parse_timestamp, utcnow
from models.enums import INVOICE_TRANSITIONS, InvoiceStatus, PaymentStatus


# ============================================================
# Status transitions
# ============================================================
def check_invoice_transition(current: str, target: str):
    try:
        current_status = InvoiceStatus(current)
    except ValueError:
        current_status = InvoiceStatus.pending
    target_status = InvoiceStatus(target)

    if target_status == current_status:
        return
    if target_status not in INVOICE_TRANSITIONS[current_status]:
        raise HTTPException(400, f"Cannot change invoice status from {current_status} to {target_status}")


def next_invoice_number(today: Optional[date] = None) -> str:
    today = today or utcnow().date()
    return f"INV-{today:%Y%m}-{secrets.token_hex(3).upper()}"


# ============================================================
# Stats
# ============================================================
def _as_date(value) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, date):
        return value
    text = str(value)
    if len(text) == 10:
        return date.fromisoformat(text)
    return parse_timestamp(text).date()


def _month_key(d: date) -> tuple:
    return d.year, d.month


def _previous_month(d: date) -> tuple:
    return (d.year - 1, 12) if d.month == 1 else (d.year, d.month - 1)


def _sum(rows: Iterable[dict]) -> float:
    return float(sum(float(r.get("amount") or 0) for r in rows))


def invoice_stats(invoices: list, today: Optional[date] = None) -> dict:
    """
    Amount totals per status, month-over-month change of invoiced amount (by
    created_at, in percent) and the share of invoices already paid.
    """
    today = today or utcnow().date()
    this_month = _month_key(today)
    last_month = _previous_month(today)

    by_status = defaultdict(list)
    current, previous = [], []
    for inv in invoices:
        by_status[inv.get("status") or InvoiceStatus.pending.value].append(inv)
        created = _as_date(inv.get("created_at"))
        if created is None:
            continue
        if _month_key(created) == this_month:
            current.append(inv)
        elif _month_key(created) == last_month:
            previous.append(inv)

    current_total, previous_total = _sum(current), _sum(previous)
    paid_count = len(by_status[InvoiceStatus.paid.value])

    return {
        "total": _sum(invoices),
        "paid": _sum(by_status[InvoiceStatus.paid.value]),
        "pending": _sum(by_status[InvoiceStatus.pending.value]),
        "overdue": _sum(by_status[InvoiceStatus.overdue.value]),
        "cancelled": _sum(by_status[InvoiceStatus.cancelled.value]),
        "count": len(invoices),
        "monthlyChange": (
            (current_total - previous_total) / previous_total * 100 if previous_total > 0 else 0
        ),
        "paidPercentage": paid_count / len(invoices) * 100 if invoices else 0,
    }


def payment_stats(payments: list, invoices: list, today: Optional[date] = None) -> dict:
    today = today or utcnow().date()
    this_month = _month_key(today)

    total_paid = _sum(payments)
    this_month_paid = _sum(
        p for p in payments
        if _as_date(p.get("payment_date")) and _month_key(_as_date(p.get("payment_date"))) == this_month
    )

    methods = defaultdict(float)
    for p in payments:
        methods[p.get("payment_method") or "unknown"] += float(p.get("amount") or 0)

    pending = _sum(i for i in invoices if i.get("status") == InvoiceStatus.pending.value)
    overdue = _sum(i for i in invoices if i.get("status") == InvoiceStatus.overdue.value)

    return {
        "total": total_paid,
        "thisMonth": this_month_paid,
        "count": len(payments),
        "average": total_paid / len(payments) if payments else 0,
        "methods": dict(methods),
        "totalInvoiced": _sum(invoices),
        "pendingAmount": pending,
        "overdueAmount": overdue,
        "paidInvoiceAmount": _sum(i for i in invoices if i.get("status") == InvoiceStatus.paid.value),
        "dueAmount": pending + overdue,
    }


# ============================================================
# Payment → invoice settlement
# ============================================================
def settle_invoice(client, organization_id: str, invoice_id: str, payment_date: Optional[str] = None) -> Optional[dict]:
    """
    Recompute what has been paid against an invoice and mark it paid once the
    completed payments cover its amount. Cancelled invoices are left alone.
    """
    try:
        inv_res = (
            client.table("invoices")
            .select("*")
            .eq("id", invoice_id)
            .eq("organization_id", organization_id)
            .limit(1)
            .execute()
        )
        if not inv_res.data:
            return None
        invoice = inv_res.data[0]

        pay_res = (
            client.table("payments")
            .select("amount, status")
            .eq("invoice_id", invoice_id)
            .execute()
        )
    except Exception as e:
        supabase_error(e, "Failed to settle invoice")

    completed = [p for p in (pay_res.data or []) if p.get("status", PaymentStatus.completed.value) == PaymentStatus.completed.value]
    total_paid = _sum(completed)

    if invoice.get("status") in (InvoiceStatus.paid.value, InvoiceStatus.cancelled.value):
        return invoice
    if total_paid < float(invoice.get("amount") or 0):
        return invoice

    try:
        res = (
            client.table("invoices")
            .update(
                {
                    "status": InvoiceStatus.paid.value,
                    "payment_date": payment_date or utcnow().date().isoformat(),
                },
                returning="representation",
            )
            .eq("id", invoice_id)
            .execute()
        )
    except Exception as e:
        supabase_error(e, "Failed to mark invoice paid")

    logger.info(f"Invoice {invoice_id} settled ({total_paid} paid)")
    return res.data[0] if res.data else invoice
