# routers/payments.py

import time
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends
from supabase import Client

from core.authorization import scope_owned
from core.config import settings
from core.errors import ConflictError, NotFound, ValidationFailed, handle_supabase_error
from core.logging_config import logger
from core.notifications import notify_quietly
from core.permission_helpers import requires_permission
from core.realtime import change_feed
from core.roles import parse_role
from core.utils import current_month
from dependencies.auth import CurrentUser, get_db
from models.enums import NotificationType, PaymentStatus, Role
from models.payment import DueCreate, PaymentCreate, PaymentRead, PaymentSummary
from services.reporting import payment_summary

router = APIRouter(
    prefix="/payments",
    tags=["Payments"],
)


def _transaction_id() -> str:
    return f"TXN-{int(time.time() * 1000)}"


def _rows_for_month(client: Client, user_id: str, month: str) -> List[dict]:
    result = (
        client.table("maintenance_payments")
        .select("*")
        .eq("user_id", user_id)
        .eq("month", month)
        .execute()
    )
    return result.data or []


def _find(rows: List[dict], status: PaymentStatus) -> Optional[dict]:
    return next((r for r in rows if r.get("status") == status.value), None)


# -----------------------------------------------------
# Resident records a payment (no gateway)
# -----------------------------------------------------
@router.post("", response_model=PaymentRead, status_code=201)
def record_payment(
    payload: PaymentCreate,
    current_user: CurrentUser = Depends(requires_permission("payments:record")),
    client: Client = Depends(get_db),
):
    """
    One paid row per (resident, month). Paying a month that already has a
    pending due settles that due instead of adding a second row.
    """
    month = payload.month or current_month()

    try:
        existing = _rows_for_month(client, current_user.id, month)
    except Exception as e:
        raise handle_supabase_error(e, "Failed to check existing payments")

    if _find(existing, PaymentStatus.paid):
        raise ConflictError(f"Maintenance for {month} is already paid")

    pending = _find(existing, PaymentStatus.pending)
    amount = payload.amount or (pending or {}).get("amount") or settings.DEFAULT_MAINTENANCE_AMOUNT

    paid_fields = {
        "amount": float(amount),
        "status": PaymentStatus.paid.value,
        "payment_method": payload.payment_method.value,
        "transaction_id": _transaction_id(),
        "paid_at": datetime.now(timezone.utc).isoformat(),
    }

    try:
        if pending:
            result = (
                client.table("maintenance_payments")
                .update(paid_fields)
                .eq("id", pending["id"])
                .eq("status", PaymentStatus.pending.value)
                .execute()
            )
            # Settled by a concurrent request in the meantime
            if not result.data:
                raise ConflictError(f"Maintenance for {month} is already paid")
            event = "UPDATE"
        else:
            result = (
                client.table("maintenance_payments")
                .insert({**paid_fields, "user_id": current_user.id, "month": month}, returning="representation")
                .execute()
            )
            event = "INSERT"
    except Exception as e:
        raise handle_supabase_error(e, "Failed to record payment")

    payment = result.data[0]
    change_feed.publish("maintenance_payments", event, payment)

    notify_quietly(
        client,
        [current_user.id],
        "Payment received",
        f"Your maintenance payment of {payment['amount']} for {month} was recorded "
        f"(ref {payment.get('transaction_id')}).",
        NotificationType.payment,
    )

    logger.info(f"User {current_user.id} paid maintenance for {month}")
    return payment


# -----------------------------------------------------
# Admin raises a pending due
# -----------------------------------------------------
@router.post("/dues", response_model=PaymentRead, status_code=201)
def create_due(
    payload: DueCreate,
    current_user: CurrentUser = Depends(requires_permission("payments:dues")),
    client: Client = Depends(get_db),
):
    try:
        role_rows = (
            client.table("user_roles")
            .select("role")
            .eq("user_id", payload.user_id)
            .limit(1)
            .execute()
        ).data or []
        existing = _rows_for_month(client, payload.user_id, payload.month)
    except Exception as e:
        raise handle_supabase_error(e, "Failed to check existing payments")

    if not role_rows or parse_role(role_rows[0].get("role")) is not Role.resident:
        raise ValidationFailed("Dues can only be raised for residents")

    if existing:
        raise ConflictError(f"A payment record for {payload.month} already exists")

    record = {
        "user_id": payload.user_id,
        "month": payload.month,
        "amount": float(payload.amount or settings.DEFAULT_MAINTENANCE_AMOUNT),
        "status": PaymentStatus.pending.value,
    }

    try:
        result = (
            client.table("maintenance_payments")
            .insert(record, returning="representation")
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to create due")

    due = result.data[0]
    change_feed.publish("maintenance_payments", "INSERT", due)

    notify_quietly(
        client,
        [payload.user_id],
        "Maintenance due",
        f"Maintenance of {due['amount']} for {payload.month} is due.",
        NotificationType.payment,
    )

    logger.info(f"Admin {current_user.id} raised a due for {payload.user_id} ({payload.month})")
    return due


# -----------------------------------------------------
# History + summary
# -----------------------------------------------------
@router.get("", response_model=List[PaymentRead])
def list_payments(
    current_user: CurrentUser = Depends(requires_permission("payments:read")),
    client: Client = Depends(get_db),
):
    """Residents see their own; admins see everyone's."""
    try:
        query = client.table("maintenance_payments").select("*")
        query = scope_owned(query, current_user, see_all="payments:read_all")
        result = query.order("created_at", desc=True).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load payments")

    return result.data or []


@router.get("/summary", response_model=PaymentSummary)
def summary(
    current_user: CurrentUser = Depends(requires_permission("payments:read_all")),
    client: Client = Depends(get_db),
):
    try:
        result = client.table("maintenance_payments").select("*").execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load payments")

    return payment_summary(result.data or [], current_month())


@router.get("/{payment_id}", response_model=PaymentRead)
def get_payment(
    payment_id: str,
    current_user: CurrentUser = Depends(requires_permission("payments:read")),
    client: Client = Depends(get_db),
):
    try:
        query = client.table("maintenance_payments").select("*").eq("id", payment_id)
        result = scope_owned(query, current_user, see_all="payments:read_all").limit(1).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load payment")

    if not result.data:
        raise NotFound("Payment not found")
    return result.data[0]
