# routers/funds.py

from fastapi import APIRouter, Depends
from supabase import Client

from core.errors import NotFound, ValidationFailed, handle_supabase_error
from core.logging_config import logger
from core.permission_helpers import requires_permission
from core.utils import sanitize
from dependencies.auth import CurrentUser, get_db
from models.fund import FUND_CATEGORIES, FundEntryCreate, FundEntryRead, FundLedger
from services.reporting import fund_totals

router = APIRouter(
    prefix="/funds",
    tags=["Society Funds"],
)


@router.get("", response_model=FundLedger)
def read_ledger(
    current_user: CurrentUser = Depends(requires_permission("funds:read")),
    client: Client = Depends(get_db),
):
    """All fund entries, newest first, with income / expense / balance derived on read."""
    try:
        result = (
            client.table("society_funds")
            .select("*")
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load fund ledger")

    entries = result.data or []
    return FundLedger(entries=entries, **fund_totals(entries))


@router.get("/categories")
def list_categories(current_user: CurrentUser = Depends(requires_permission("funds:read"))):
    return FUND_CATEGORIES


@router.post("", response_model=FundEntryRead, status_code=201)
def add_entry(
    payload: FundEntryCreate,
    current_user: CurrentUser = Depends(requires_permission("funds:write")),
    client: Client = Depends(get_db),
):
    if payload.category not in FUND_CATEGORIES:
        raise ValidationFailed(f"Unknown fund category '{payload.category}'")

    record = sanitize(payload.model_dump())
    record["type"] = payload.type.value
    record["created_by"] = current_user.id

    try:
        result = (
            client.table("society_funds")
            .insert(record, returning="representation")
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to record fund entry")

    entry = result.data[0]
    logger.info(f"Admin {current_user.id} recorded {entry['type']} of {entry['amount']}")
    return entry


@router.delete("/{entry_id}")
def delete_entry(
    entry_id: str,
    current_user: CurrentUser = Depends(requires_permission("funds:write")),
    client: Client = Depends(get_db),
):
    try:
        result = (
            client.table("society_funds")
            .delete()
            .eq("id", entry_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to delete fund entry")

    if not result.data:
        raise NotFound("Fund entry not found")
    return {"status": "deleted", "entry_id": entry_id}
