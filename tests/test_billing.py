# tests/test_billing.py

"""
Tests for invoices, payments and their statistics.
"""

from datetime import date

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from services.billing import check_invoice_transition, invoice_stats, next_invoice_number, payment_stats
from tests.conftest import ORG_ID, OTHER_ORG_ID, auth_headers


@pytest.mark.parametrize(
    "current, target",
    [("pending", "paid"), ("pending", "overdue"), ("overdue", "paid"), ("overdue", "cancelled"), ("paid", "paid")],
)
def test_allowed_transitions(current, target):
    check_invoice_transition(current, target)


@pytest.mark.parametrize("current, target", [("paid", "pending"), ("cancelled", "paid"), ("overdue", "pending")])
def test_rejected_transitions(current, target):
    with pytest.raises(HTTPException) as exc:
        check_invoice_transition(current, target)
    assert exc.value.status_code == 400


def test_invoice_number_format():
    number = next_invoice_number(date(2024, 3, 9))
    assert number.startswith("INV-202403-")
    assert len(number) == len("INV-202403-") + 6


def test_invoice_stats():
    invoices = [
        {"amount": 100, "status": "paid", "created_at": "2024-03-02T10:00:00+00:00"},
        {"amount": 300, "status": "pending", "created_at": "2024-03-05T10:00:00+00:00"},
        {"amount": 200, "status": "overdue", "created_at": "2024-02-10T10:00:00Z"},
    ]

    stats = invoice_stats(invoices, today=date(2024, 3, 15))

    assert stats["total"] == 600
    assert stats["paid"] == 100
    assert stats["pending"] == 300
    assert stats["overdue"] == 200
    assert stats["monthlyChange"] == 100
    assert stats["paidPercentage"] == pytest.approx(100 / 3)


def test_invoice_stats_empty():
    stats = invoice_stats([], today=date(2024, 1, 1))
    assert stats["monthlyChange"] == 0
    assert stats["paidPercentage"] == 0


def test_payment_stats():
    payments = [
        {"amount": 100, "payment_date": "2024-03-01", "payment_method": "upi"},
        {"amount": 50, "payment_date": "2024-02-01", "payment_method": "cash"},
        {"amount": 30, "payment_date": "2024-03-04", "payment_method": "upi"},
    ]
    invoices = [{"amount": 70, "status": "pending"}, {"amount": 20, "status": "overdue"}]

    stats = payment_stats(payments, invoices, today=date(2024, 3, 20))

    assert stats["total"] == 180
    assert stats["thisMonth"] == 130
    assert stats["average"] == 60
    assert stats["methods"] == {"upi": 130, "cash": 50}
    assert stats["dueAmount"] == 90


# -----------------------------------------------------
# HTTP surface
# -----------------------------------------------------
def test_create_invoice_starts_pending(client: TestClient, fake_supabase, admin):
    response = client.post(
        "/invoices",
        json={"amount": 1200, "due_date": "2024-04-01", "status": "paid"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "pending"
    assert data["organization_id"] == ORG_ID
    assert data["invoice_number"].startswith("INV-")


def test_paid_invoice_cannot_reopen(client: TestClient, fake_supabase, admin):
    invoice = fake_supabase.seed("invoices", organization_id=ORG_ID, amount=100, status="paid")

    response = client.patch(f"/invoices/{invoice['id']}", json={"status": "pending"}, headers=auth_headers(admin))
    assert response.status_code == 400


def test_payment_settles_invoice(client: TestClient, fake_supabase, admin):
    invoice = fake_supabase.seed("invoices", organization_id=ORG_ID, amount=1000, status="pending")
    headers = auth_headers(admin)

    partial = client.post(
        "/payments", json={"amount": 400, "invoice_id": invoice["id"], "payment_date": "2024-03-01"}, headers=headers
    )
    assert partial.status_code == 201
    assert partial.json()["invoice"]["status"] == "pending"

    rest = client.post(
        "/payments", json={"amount": 600, "invoice_id": invoice["id"], "payment_date": "2024-03-02"}, headers=headers
    )
    assert rest.json()["invoice"]["status"] == "paid"
    assert rest.json()["invoice"]["payment_date"] == "2024-03-02"


def test_payment_against_cancelled_invoice(client: TestClient, fake_supabase, admin):
    invoice = fake_supabase.seed("invoices", organization_id=ORG_ID, amount=100, status="cancelled")
    response = client.post("/payments", json={"amount": 100, "invoice_id": invoice["id"]}, headers=auth_headers(admin))
    assert response.status_code == 400


def test_invoice_of_other_org_is_hidden(client: TestClient, fake_supabase, admin):
    foreign = fake_supabase.seed("invoices", organization_id=OTHER_ORG_ID, amount=100, status="pending")
    assert client.get(f"/invoices/{foreign['id']}", headers=auth_headers(admin)).status_code == 404


def test_invoice_stats_endpoint(client: TestClient, fake_supabase, admin):
    fake_supabase.seed("invoices", organization_id=ORG_ID, amount=100, status="paid")
    fake_supabase.seed("invoices", organization_id=OTHER_ORG_ID, amount=900, status="paid")

    response = client.get("/invoices/stats", headers=auth_headers(admin))

    assert response.status_code == 200
    assert response.json()["data"]["total"] == 100
