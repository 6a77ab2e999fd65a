# tests/test_payments.py

"""
Maintenance payments, dues and the collection summary.
"""

from fastapi.testclient import TestClient
from unittest.mock import patch

from core.config import settings


def pay(client: TestClient, user, **body):
    return client.post("/payments", json=body, headers=user.headers)


def test_record_payment_defaults(client: TestClient, fake_db, resident):
    with patch("routers.payments.current_month", return_value="2025-06"):
        response = pay(client, resident)

    assert response.status_code == 201
    payment = response.json()
    assert payment["month"] == "2025-06"
    assert payment["amount"] == settings.DEFAULT_MAINTENANCE_AMOUNT
    assert payment["status"] == "paid"
    assert payment["payment_method"] == "online"
    assert payment["transaction_id"].startswith("TXN-")
    assert payment["paid_at"] is not None

    notes = [n for n in fake_db.rows("notifications") if n["user_id"] == resident.id]
    assert [n["type"] for n in notes] == ["payment"]


def test_second_payment_for_same_month_is_rejected(client: TestClient, fake_db, resident):
    assert pay(client, resident, month="2025-06", amount=2500).status_code == 201

    response = pay(client, resident, month="2025-06", amount=2500)
    assert response.status_code == 409
    assert "2025-06" in response.json()["detail"]
    assert len(fake_db.rows("maintenance_payments")) == 1


def test_other_months_and_residents_are_independent(client: TestClient, resident, other_resident):
    assert pay(client, resident, month="2025-06").status_code == 201
    assert pay(client, resident, month="2025-07").status_code == 201
    assert pay(client, other_resident, month="2025-06").status_code == 201


def test_backend_unique_violation_maps_to_conflict(client: TestClient, fake_db, resident):
    # the pre-check misses a row written concurrently; the constraint catches it
    fake_db.seed("maintenance_payments", user_id=resident.id, month="2025-06", amount=2000, status="paid")
    with patch("routers.payments._rows_for_month", return_value=[]):
        response = pay(client, resident, month="2025-06")
    assert response.status_code == 409


def test_invalid_month_and_amount(client: TestClient, resident):
    assert pay(client, resident, month="2025-13").status_code == 422
    assert pay(client, resident, month="June").status_code == 422
    assert pay(client, resident, amount=0).status_code == 422


def test_only_residents_record(client: TestClient, admin, staff):
    assert pay(client, admin).status_code == 403
    assert pay(client, staff).status_code == 403


def test_pending_due_is_settled_in_place(client: TestClient, fake_db, admin, resident):
    response = client.post(
        "/payments/dues",
        json={"user_id": resident.id, "month": "2025-05", "amount": 1800},
        headers=admin.headers,
    )
    assert response.status_code == 201
    due = response.json()
    assert due["status"] == "pending"

    paid = pay(client, resident, month="2025-05", payment_method="upi").json()
    assert paid["id"] == due["id"]
    assert paid["status"] == "paid"
    assert paid["amount"] == 1800
    assert len(fake_db.rows("maintenance_payments")) == 1

    assert pay(client, resident, month="2025-05").status_code == 409


def test_dues_only_for_residents_and_once_per_month(client: TestClient, admin, staff, resident):
    assert client.post(
        "/payments/dues", json={"user_id": staff.id, "month": "2025-05"}, headers=admin.headers
    ).status_code == 400

    body = {"user_id": resident.id, "month": "2025-05"}
    assert client.post("/payments/dues", json=body, headers=admin.headers).status_code == 201
    assert client.post("/payments/dues", json=body, headers=admin.headers).status_code == 409


def test_history_is_scoped(client: TestClient, admin, resident, other_resident):
    pay(client, resident, month="2025-06")
    pay(client, other_resident, month="2025-06")

    mine = client.get("/payments", headers=resident.headers).json()
    assert {p["user_id"] for p in mine} == {resident.id}

    everyone = client.get("/payments", headers=admin.headers).json()
    assert {p["user_id"] for p in everyone} == {resident.id, other_resident.id}

    payment_id = mine[0]["id"]
    assert client.get(f"/payments/{payment_id}", headers=other_resident.headers).status_code == 404
    assert client.get(f"/payments/{payment_id}", headers=resident.headers).status_code == 200


def test_summary(client: TestClient, admin, resident, other_resident):
    pay(client, resident, month="2025-06", amount=2000)
    pay(client, other_resident, month="2025-05", amount=1500)
    client.post("/payments/dues", json={"user_id": other_resident.id, "month": "2025-06"}, headers=admin.headers)

    with patch("routers.payments.current_month", return_value="2025-06"):
        summary = client.get("/payments/summary", headers=admin.headers).json()

    assert summary == {
        "month": "2025-06",
        "total_collected": 3500.0,
        "collected_this_month": 2000.0,
        "paid_this_month": 1,
        "pending_dues": 1,
    }

    assert client.get("/payments/summary", headers=resident.headers).status_code == 403
