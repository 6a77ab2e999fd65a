# routers/__init__.py

from fastapi import APIRouter

from .auth import router as auth_router
from .profiles import router as profiles_router

from .complaints import router as complaints_router
from .announcements import router as announcements_router
from .meetings import router as meetings_router
from .notifications import router as notifications_router
from .payments import router as payments_router
from .staff_assignments import router as staff_assignments_router
from .funds import router as funds_router

from .dashboard import router as dashboard_router
from .realtime import router as realtime_router
from .health import router as health_router


api_router = APIRouter()

# Auth + identity
api_router.include_router(auth_router)
api_router.include_router(profiles_router)

# Society data
api_router.include_router(complaints_router)
api_router.include_router(announcements_router)
api_router.include_router(meetings_router)
api_router.include_router(notifications_router)
api_router.include_router(payments_router)
api_router.include_router(staff_assignments_router)
api_router.include_router(funds_router)

# Read-side
api_router.include_router(dashboard_router)
api_router.include_router(realtime_router)

# Health
api_router.include_router(health_router)

__all__ = ["api_router"]
