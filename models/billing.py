# models/billing.py

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from models.enums import InvoiceStatus, PaymentMethod


# -------------------------------------------------
# Invoices
# -------------------------------------------------
class InvoiceCreate(BaseModel):
    """New invoices always start as pending."""

    invoice_number: Optional[str] = None
    tenant_id: Optional[str] = None
    unit_id: Optional[str] = None
    amount: float = Field(..., gt=0)
    due_date: date
    bill_type: str = "Rent"
    description: Optional[str] = None


class InvoiceUpdate(BaseModel):
    amount: Optional[float] = Field(None, gt=0)
    due_date: Optional[date] = None
    status: Optional[InvoiceStatus] = None
    description: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    payment_date: Optional[date] = None


# -------------------------------------------------
# Payments
# -------------------------------------------------
class PaymentCreate(BaseModel):
    amount: float = Field(..., gt=0)
    invoice_id: Optional[str] = None
    tenant_id: Optional[str] = None
    payment_date: Optional[date] = None
    payment_method: PaymentMethod = PaymentMethod.cash
    reference: Optional[str] = None
    notes: Optional[str] = None
