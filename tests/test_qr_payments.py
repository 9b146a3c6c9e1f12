# tests/test_qr_payments.py

"""
Tests for UPI QR payment requests.
"""

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from models.enums import VerificationDecision
from models.qr_payment import QRPaymentGenerate, QRPaymentVerify, ScreenshotSubmit
from services import qr_payments
from tests.conftest import ORG_ID, auth_headers

T0 = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def payer(fake_supabase, tenant_user):
    references = count(1)
    fake_supabase.rpc_handlers["generate_payment_reference"] = lambda p: f"PAY{next(references):06d}"
    tenant_user.profile = fake_supabase.seed(
        "tenants_profile", user_id=tenant_user.id, full_name="Test Tenant", email="tenant@example.com"
    )
    return tenant_user


def generate(fake_supabase, payer, amount=1500.0):
    return qr_payments.generate_payment(
        fake_supabase, payer.id, QRPaymentGenerate(amount=amount, bill_ids=["bill-1"]), now=T0
    )


def test_upi_string():
    upi = qr_payments.build_upi_string("biz@upi", "My Property", 1500.0, "PAY000001")
    assert upi == "upi://pay?pa=biz@upi&pn=My%20Property&am=1500&cu=INR&tn=PAY000001"


def test_upi_amount_keeps_paise():
    assert qr_payments.format_upi_amount(99.5) == "99.50"
    assert qr_payments.format_upi_amount(100.0) == "100"


@pytest.mark.parametrize(
    "payload",
    [
        QRPaymentGenerate(amount=0, bill_ids=["b"]),
        QRPaymentGenerate(amount=-5, bill_ids=["b"]),
        QRPaymentGenerate(amount=float("nan"), bill_ids=["b"]),
        QRPaymentGenerate(amount=float("inf"), bill_ids=["b"]),
        QRPaymentGenerate(amount=10, bill_ids=[]),
        QRPaymentGenerate(amount=10, bill_ids=["  "]),
    ],
)
def test_invalid_requests(payload):
    with pytest.raises(HTTPException) as exc:
        qr_payments.validate_request(payload)
    assert exc.value.status_code == 400


def test_generate_stores_pending_request(fake_supabase, payer):
    result = generate(fake_supabase, payer)

    row = fake_supabase.rows("tenant_qr_payments", payment_reference=result["payment_reference"])[0]
    assert row["status"] == "pending"
    assert row["tenant_id"] == payer.profile["id"]
    assert row["bill_ids"] == ["bill-1"]
    assert result["expires_at"] == (T0 + timedelta(minutes=15)).isoformat()
    assert result["qr_code_url"].startswith("https://api.qrserver.com/v1/create-qr-code/?size=200x200&data=upi")

    audit = fake_supabase.rows("activity_log", action="QR_PAYMENT_GENERATED")
    assert audit[0]["entity_id"] == row["id"]


def test_expiry_is_derived_on_read(fake_supabase, payer):
    reference = generate(fake_supabase, payer)["payment_reference"]

    fresh = qr_payments.get_payment(fake_supabase, reference, now=T0 + timedelta(minutes=10))
    stale = qr_payments.get_payment(fake_supabase, reference, now=T0 + timedelta(minutes=16))

    assert fresh["is_expired"] is False
    assert stale["is_expired"] is True
    # The stored status never changes by itself
    assert stale["status"] == "pending"


def test_screenshot_moves_pending_forward_once(fake_supabase, payer):
    reference = generate(fake_supabase, payer)["payment_reference"]
    submit = ScreenshotSubmit(payment_reference=reference, screenshot_url="https://cdn/s.png")

    row = qr_payments.submit_screenshot(fake_supabase, payer.id, submit, now=T0 + timedelta(minutes=5))
    assert row["status"] == "screenshot_submitted"

    with pytest.raises(HTTPException) as exc:
        qr_payments.submit_screenshot(fake_supabase, payer.id, submit)
    assert exc.value.status_code == 409

    # Submitted requests no longer report expiry
    later = qr_payments.get_payment(fake_supabase, reference, now=T0 + timedelta(hours=2))
    assert later["is_expired"] is False


def test_screenshot_for_unknown_reference(fake_supabase, payer):
    submit = ScreenshotSubmit(payment_reference="PAY999999", screenshot_url="https://cdn/s.png")
    with pytest.raises(HTTPException) as exc:
        qr_payments.submit_screenshot(fake_supabase, payer.id, submit)
    assert exc.value.status_code == 409


def test_verify_writes_audit_and_is_final(fake_supabase, payer, admin):
    generate(fake_supabase, payer)
    payment = fake_supabase.rows("tenant_qr_payments")[0]
    decision = QRPaymentVerify(payment_id=payment["id"], status=VerificationDecision.approved, admin_notes="ok")

    row = qr_payments.verify_payment(fake_supabase, admin.id, ORG_ID, decision, now=T0)

    assert row["status"] == "approved"
    assert row["verified_by"] == admin.id
    audit = fake_supabase.rows("activity_log", action="QR_PAYMENT_APPROVED")
    assert audit[0]["entity_id"] == payment["id"]
    assert audit[0]["organization_id"] == ORG_ID

    again = QRPaymentVerify(payment_id=payment["id"], status=VerificationDecision.rejected)
    with pytest.raises(HTTPException) as exc:
        qr_payments.verify_payment(fake_supabase, admin.id, ORG_ID, again)
    assert exc.value.status_code == 409


def test_verify_unknown_payment(fake_supabase, admin):
    decision = QRPaymentVerify(payment_id="missing", status=VerificationDecision.rejected)
    with pytest.raises(HTTPException) as exc:
        qr_payments.verify_payment(fake_supabase, admin.id, ORG_ID, decision)
    assert exc.value.status_code == 404


def test_pending_list_includes_submitted(fake_supabase, payer):
    first = generate(fake_supabase, payer)["payment_reference"]
    generate(fake_supabase, payer)
    qr_payments.submit_screenshot(
        fake_supabase, payer.id, ScreenshotSubmit(payment_reference=first, screenshot_url="https://cdn/a.png")
    )

    statuses = sorted(p["status"] for p in qr_payments.list_pending(fake_supabase))
    assert statuses == ["pending", "screenshot_submitted"]


# -----------------------------------------------------
# HTTP surface
# -----------------------------------------------------
def test_generate_endpoint(client: TestClient, payer):
    response = client.post(
        "/qr-payments/generate",
        json={"amount": 750, "bill_ids": ["bill-1", "bill-2"]},
        headers=auth_headers(payer),
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["payment_reference"] == "PAY000001"
    assert "am=750" in data["upi_string"]


def test_generate_without_tenant_profile(client: TestClient, admin, fake_supabase):
    fake_supabase.rpc_handlers["generate_payment_reference"] = lambda p: "PAY1"
    response = client.post("/qr-payments/generate", json={"amount": 10, "bill_ids": ["b"]}, headers=auth_headers(admin))
    assert response.status_code == 404


def test_pending_requires_admin(client: TestClient, payer, admin):
    assert client.get("/qr-payments/pending", headers=auth_headers(payer)).status_code == 403
    assert client.get("/qr-payments/pending", headers=auth_headers(admin)).status_code == 200


def test_verify_endpoint_rejects_bad_decision(client: TestClient, admin):
    response = client.post(
        "/qr-payments/verify",
        json={"payment_id": "p1", "status": "pending"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 400


def test_status_by_reference(client: TestClient, payer):
    created = client.post(
        "/qr-payments/generate", json={"amount": 10, "bill_ids": ["b"]}, headers=auth_headers(payer)
    ).json()["data"]

    response = client.get(f"/qr-payments/{created['payment_reference']}", headers=auth_headers(payer))

    assert response.status_code == 200
    assert response.json()["data"]["is_expired"] is False
