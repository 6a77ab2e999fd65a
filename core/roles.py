# core/roles.py

from typing import Dict, List, Optional, TypeVar

from models.enums import Role

T = TypeVar("T")


def total_mapping(mapping: Dict[Role, T], name: str) -> Dict[Role, T]:
    """
    Every role-keyed table must cover every Role.
    Checked at import time so a new role cannot ship half-wired.
    """
    missing = [r.value for r in Role if r not in mapping]
    if missing:
        raise RuntimeError(f"{name} has no entry for role(s): {', '.join(missing)}")
    return mapping


def parse_role(raw: Optional[str]) -> Optional[Role]:
    """Unknown or missing role rows resolve to None (no elevated capability)."""
    if raw is None:
        return None
    try:
        return Role(raw)
    except ValueError:
        return None


def effective_role(role: Optional[Role]) -> Role:
    """Role used for read scoping and UI selection; unroled principals read as residents."""
    return role or Role.resident


# ============================================
# DISPLAY LABELS
# ============================================
ROLE_LABELS = total_mapping({
    Role.resident: "Resident",
    Role.admin: "Admin / Committee",
    Role.maintenance_staff: "Maintenance Staff",
}, "ROLE_LABELS")


# ============================================
# NAVIGATION SETS
# ============================================
NAVIGATION_BY_ROLE = total_mapping({
    Role.resident: [
        {"title": "Dashboard", "url": "/dashboard"},
        {"title": "New Complaint", "url": "/dashboard/complaints/new"},
        {"title": "My Complaints", "url": "/dashboard/complaints"},
        {"title": "Payments", "url": "/dashboard/payments"},
        {"title": "Events", "url": "/dashboard/events"},
        {"title": "Directory", "url": "/dashboard/directory"},
        {"title": "Announcements", "url": "/dashboard/announcements"},
        {"title": "Notifications", "url": "/dashboard/notifications"},
    ],
    Role.admin: [
        {"title": "Dashboard", "url": "/dashboard"},
        {"title": "All Complaints", "url": "/dashboard/complaints"},
        {"title": "Manage Staff", "url": "/dashboard/staff"},
        {"title": "Payments", "url": "/dashboard/payments"},
        {"title": "Funds", "url": "/dashboard/funds"},
        {"title": "Events", "url": "/dashboard/events"},
        {"title": "Announcements", "url": "/dashboard/announcements"},
        {"title": "Directory", "url": "/dashboard/directory"},
        {"title": "Analytics", "url": "/dashboard/analytics"},
        {"title": "Notifications", "url": "/dashboard/notifications"},
    ],
    Role.maintenance_staff: [
        {"title": "Dashboard", "url": "/dashboard"},
        {"title": "Assigned Tasks", "url": "/dashboard/complaints"},
        {"title": "Events", "url": "/dashboard/events"},
        {"title": "Notifications", "url": "/dashboard/notifications"},
    ],
}, "NAVIGATION_BY_ROLE")


def navigation_for(role: Optional[Role]) -> List[dict]:
    return NAVIGATION_BY_ROLE[effective_role(role)]
