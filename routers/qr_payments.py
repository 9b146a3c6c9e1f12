# routers/qr_payments.py

from fastapi import APIRouter, Depends
from supabase import Client

from core.permission_helpers import requires_role
from core.roles import ADMIN_ROLES
from core.supabase_client import get_supabase_client
from dependencies.auth import CurrentUser, get_current_user
from models.qr_payment import QRPaymentGenerate, QRPaymentVerify, ScreenshotSubmit
from services import qr_payments


router = APIRouter(
    prefix="/qr-payments",
    tags=["QR Payments"],
)


# -----------------------------------------------------
# POST /qr-payments/generate
# -----------------------------------------------------
@router.post("/generate", status_code=201, summary="Create a UPI QR payment request")
def generate(
    payload: QRPaymentGenerate,
    current_user: CurrentUser = Depends(get_current_user),
    client: Client = Depends(get_supabase_client),
):
    return {"success": True, "data": qr_payments.generate_payment(client, current_user.id, payload)}


# -----------------------------------------------------
# GET /qr-payments/pending  (admins)
# -----------------------------------------------------
@router.get("/pending", summary="Payments waiting for verification")
def pending(
    current_user: CurrentUser = Depends(requires_role(*ADMIN_ROLES)),
    client: Client = Depends(get_supabase_client),
):
    return {"success": True, "data": qr_payments.list_pending(client)}


# -----------------------------------------------------
# POST /qr-payments/verify  (admins)
# -----------------------------------------------------
@router.post("/verify", summary="Approve or reject a QR payment")
def verify(
    payload: QRPaymentVerify,
    current_user: CurrentUser = Depends(requires_role(*ADMIN_ROLES)),
    client: Client = Depends(get_supabase_client),
):
    row = qr_payments.verify_payment(client, current_user.id, current_user.organization_id, payload)
    return {"success": True, "data": row, "message": f"Payment {payload.status.value} successfully"}


# -----------------------------------------------------
# PUT /qr-payments/screenshot
# -----------------------------------------------------
@router.put("/screenshot", summary="Attach a payment screenshot")
def upload_screenshot(
    payload: ScreenshotSubmit,
    current_user: CurrentUser = Depends(get_current_user),
    client: Client = Depends(get_supabase_client),
):
    row = qr_payments.submit_screenshot(client, current_user.id, payload)
    return {"success": True, "data": row, "message": "Screenshot uploaded successfully"}


# -----------------------------------------------------
# GET /qr-payments/{reference}
# -----------------------------------------------------
@router.get("/{reference}", summary="Payment status by reference")
def status(
    reference: str,
    current_user: CurrentUser = Depends(get_current_user),
    client: Client = Depends(get_supabase_client),
):
    return {"success": True, "data": qr_payments.get_payment(client, reference)}
