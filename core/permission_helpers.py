from fastapi import Depends

from core.errors import NotPermitted
from core.permissions import BASE_PERMISSIONS, ROLE_PERMISSIONS
from dependencies.auth import get_current_user, CurrentUser


# -----------------------------------------------------
# Collect effective permissions
#   • role-based permissions
#   • principals with no role row get read access only
# -----------------------------------------------------
def get_effective_permissions(user: CurrentUser) -> set:
    if user.role is None:
        return set(BASE_PERMISSIONS)
    return set(ROLE_PERMISSIONS[user.role])


def has_permission(user: CurrentUser, permission: str) -> bool:
    return permission in get_effective_permissions(user)


def require_permission(user: CurrentUser, permission: str, detail: str = None):
    if not has_permission(user, permission):
        raise NotPermitted(detail or f"Insufficient permissions: '{permission}' required")


# -----------------------------------------------------
# FastAPI dependency wrapper
# -----------------------------------------------------
def requires_permission(permission: str):
    """
    Usage:
        @router.post("/", dependencies=[Depends(requires_permission("announcements:write"))])
    """

    def dependency(current_user: CurrentUser = Depends(get_current_user)):
        require_permission(current_user, permission)
        return current_user

    return dependency
