# models/qr_payment.py

from typing import List, Optional

from pydantic import BaseModel, Field

from models.enums import VerificationDecision


class QRPaymentGenerate(BaseModel):
    amount: float
    bill_ids: List[str] = []


class ScreenshotSubmit(BaseModel):
    payment_reference: str = Field(..., min_length=1)
    screenshot_url: str = Field(..., min_length=1)
    verification_notes: Optional[str] = None


class QRPaymentVerify(BaseModel):
    payment_id: str = Field(..., min_length=1)
    status: VerificationDecision
    admin_notes: Optional[str] = None
