# core/authorization.py

"""
Row- and field-level access rules.

The API talks to Supabase with the service role, which bypasses
row-level security, so every query on a scoped table is narrowed here
before it is executed, and every complaint write is checked against the
fields the caller's role may touch.
"""

from typing import Iterable, List, Optional

from core.errors import NotPermitted
from core.permission_helpers import has_permission
from core.roles import total_mapping
from core.session import CurrentUser
from models.enums import Role


# ============================================================
# COMPLAINTS: visibility
# ============================================================
# Column that must equal the caller's id; None = unrestricted.
COMPLAINT_SCOPE_COLUMN = total_mapping({
    Role.resident: "resident_id",
    Role.maintenance_staff: "assigned_to",
    Role.admin: None,
}, "COMPLAINT_SCOPE_COLUMN")


# ============================================================
# COMPLAINTS: writable fields
# ============================================================
MUTABLE_COMPLAINT_FIELDS = total_mapping({
    Role.resident: frozenset({"status", "rating", "rating_comment", "closed_at"}),
    Role.maintenance_staff: frozenset({"status", "resolved_at"}),
    Role.admin: frozenset({"status", "assigned_to", "assigned_at"}),
}, "MUTABLE_COMPLAINT_FIELDS")


def scope_complaints(query, user: CurrentUser):
    column = COMPLAINT_SCOPE_COLUMN[user.effective_role]
    if column is None:
        return query
    return query.eq(column, user.id)


def can_view_complaint(user: CurrentUser, complaint: dict) -> bool:
    column = COMPLAINT_SCOPE_COLUMN[user.effective_role]
    if column is None:
        return True
    return complaint.get(column) == user.id


def visible_complaints(user: CurrentUser, complaints: Iterable[dict]) -> List[dict]:
    return [c for c in complaints if can_view_complaint(user, c)]


def ensure_complaint_fields(user: CurrentUser, updates: dict):
    if user.role is None:
        raise NotPermitted("Your account has no role assigned")

    forbidden = sorted(set(updates) - MUTABLE_COMPLAINT_FIELDS[user.role])
    if forbidden:
        raise NotPermitted(
            f"Role '{user.role.value}' may not change: {', '.join(forbidden)}"
        )


# ============================================================
# OWNED ROWS: payments, notifications
# ============================================================
def scope_owned(query, user: CurrentUser, owner_column: str = "user_id", see_all: Optional[str] = None):
    """
    Narrow to the caller's own rows unless they hold the `see_all` permission.
    Notifications pass no `see_all`: everyone reads only their own.
    """
    if see_all and has_permission(user, see_all):
        return query
    return query.eq(owner_column, user.id)


def can_view_owned(user: CurrentUser, row: dict, owner_column: str = "user_id", see_all: Optional[str] = None) -> bool:
    if see_all and has_permission(user, see_all):
        return True
    return row.get(owner_column) == user.id
