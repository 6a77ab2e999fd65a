# core/permissions.py

from core.roles import total_mapping
from models.enums import Role


# ============================================
# READ ACCESS SHARED BY EVERY SIGNED-IN PRINCIPAL
# ============================================
# Also the complete grant for a principal with no role row.
BASE_PERMISSIONS = [
    "complaints:read",
    "announcements:read",
    "meetings:read",
    "notifications:read",
    "directory:read",
    "funds:read",
]


# ============================================
# CENTRALIZED ROLE → PERMISSIONS MAP
# ============================================
ROLE_PERMISSIONS = total_mapping({

    # =====================================================
    # RESIDENT
    # =====================================================
    Role.resident: BASE_PERMISSIONS + [
        "complaints:create",
        "complaints:close",
        "meetings:rsvp",
        "payments:read",
        "payments:record",
        "profiles:write_self",
    ],

    # =====================================================
    # ADMIN / COMMITTEE
    # =====================================================
    Role.admin: BASE_PERMISSIONS + [
        "complaints:assign",
        "announcements:write",
        "meetings:write",
        "meetings:rsvp",
        "payments:read",
        "payments:read_all",
        "payments:dues",
        "staff:read",
        "staff_assignments:read",
        "staff_assignments:write",
        "funds:write",
        "notifications:broadcast",
        "profiles:write_self",
        "profiles:write_any",
        "analytics:read",
    ],

    # =====================================================
    # MAINTENANCE STAFF
    # =====================================================
    Role.maintenance_staff: BASE_PERMISSIONS + [
        "complaints:progress",
        "meetings:rsvp",
        "notifications:broadcast",
        "profiles:write_self",
    ],
}, "ROLE_PERMISSIONS")
