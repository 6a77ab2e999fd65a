# routers/dashboard.py

from typing import Callable, Dict

from fastapi import APIRouter, Depends
from supabase import Client

from core.authorization import scope_complaints
from core.config import settings
from core.errors import handle_supabase_error
from core.logging_config import logger
from core.permission_helpers import requires_permission
from core.roles import total_mapping
from dependencies.auth import CurrentUser, get_current_user, get_db
from models.enums import PaymentStatus, Role
from services import reporting

router = APIRouter(
    tags=["Dashboard"],
)


def _complaints_for(client: Client, user: CurrentUser):
    query = scope_complaints(client.table("complaints").select("*"), user)
    return query.order("created_at", desc=True).execute().data or []


# -----------------------------------------------------
# Resident: own complaints, dues, announcements, activity
# -----------------------------------------------------
def resident_dashboard(client: Client, user: CurrentUser) -> dict:
    complaints = _complaints_for(client, user)

    payments = (
        client.table("maintenance_payments")
        .select("*")
        .eq("user_id", user.id)
        .execute()
    ).data or []

    announcements = (
        client.table("announcements")
        .select("*")
        .order("created_at", desc=True)
        .limit(settings.RECENT_ANNOUNCEMENTS_LIMIT)
        .execute()
    ).data or []

    return {
        "role": Role.resident.value,
        "stats": reporting.resident_complaint_stats(complaints),
        "by_status": reporting.count_by(complaints, "status"),
        "pending_dues": sum(1 for p in payments if p.get("status") == PaymentStatus.pending.value),
        "announcements": announcements,
        "recent_activity": reporting.build_activity_feed(
            complaints, payments, settings.RECENT_ACTIVITY_LIMIT
        ),
    }


# -----------------------------------------------------
# Admin: society-wide overview
# -----------------------------------------------------
def admin_dashboard(client: Client, user: CurrentUser) -> dict:
    complaints = _complaints_for(client, user)
    roles = (client.table("user_roles").select("user_id, role").execute()).data or []
    breakdowns = reporting.complaint_breakdowns(complaints)

    return {
        "role": Role.admin.value,
        "stats": reporting.admin_complaint_stats(complaints),
        "by_category": breakdowns["by_category"],
        "by_status": breakdowns["by_status"],
        "residents": sum(1 for r in roles if r.get("role") == Role.resident.value),
        "staff": sum(1 for r in roles if r.get("role") == Role.maintenance_staff.value),
        "recent_complaints": complaints[: settings.RECENT_COMPLAINTS_LIMIT],
    }


# -----------------------------------------------------
# Maintenance staff: assigned tasks
# -----------------------------------------------------
def staff_dashboard(client: Client, user: CurrentUser) -> dict:
    tasks = _complaints_for(client, user)
    return {
        "role": Role.maintenance_staff.value,
        "stats": reporting.staff_task_stats(tasks),
        "tasks": tasks,
    }


DASHBOARD_BUILDERS: Dict[Role, Callable[[Client, CurrentUser], dict]] = total_mapping({
    Role.resident: resident_dashboard,
    Role.admin: admin_dashboard,
    Role.maintenance_staff: staff_dashboard,
}, "DASHBOARD_BUILDERS")


@router.get("/dashboard", summary="Role-specific dashboard")
def dashboard(
    current_user: CurrentUser = Depends(get_current_user),
    client: Client = Depends(get_db),
):
    """
    Principals without a role row get the resident view of their own data.
    """
    builder = DASHBOARD_BUILDERS[current_user.effective_role]
    try:
        return builder(client, current_user)
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load dashboard")


@router.get("/analytics", summary="Complaint analytics (admin)")
def analytics(
    current_user: CurrentUser = Depends(requires_permission("analytics:read")),
    client: Client = Depends(get_db),
):
    try:
        complaints = _complaints_for(client, current_user)
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load analytics")

    logger.debug(f"Analytics computed over {len(complaints)} complaints")
    return {
        "total": len(complaints),
        **reporting.complaint_breakdowns(complaints),
        "average_resolution_days": reporting.average_resolution_days(complaints),
    }
