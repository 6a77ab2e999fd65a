from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Society Desk API"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # -------------------------------------------------
    # Frontend Domains (CORS)
    # -------------------------------------------------
    FRONTEND_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:8080",
    ]

    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Primary DB & Auth)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = Field(None, env="SUPABASE_URL")
    SUPABASE_ANON_KEY: Optional[str] = Field(None, env="SUPABASE_ANON_KEY")
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = Field(None, env="SUPABASE_SERVICE_ROLE_KEY")

    # -------------------------------------------------
    # Session / identity cache
    # -------------------------------------------------
    SESSION_CACHE_SECONDS: int = Field(900, description="How long a resolved profile + role is reused")

    # -------------------------------------------------
    # Complaints
    # -------------------------------------------------
    COMPLAINT_NUMBER_PREFIX: str = "CMP"
    COMPLAINT_NUMBER_ATTEMPTS: int = 3

    # -------------------------------------------------
    # Payments
    # -------------------------------------------------
    DEFAULT_MAINTENANCE_AMOUNT: float = 2000.0

    # -------------------------------------------------
    # Feeds / dashboards
    # -------------------------------------------------
    NOTIFICATION_FEED_LIMIT: int = 20
    RECENT_ANNOUNCEMENTS_LIMIT: int = 3
    RECENT_ACTIVITY_LIMIT: int = 6
    RECENT_COMPLAINTS_LIMIT: int = 8

    # -------------------------------------------------
    # Notification fan-out + realtime
    # -------------------------------------------------
    FANOUT_BATCH_SIZE: int = 100
    REALTIME_QUEUE_SIZE: int = 100
    EMERGENCY_WEBHOOK_URL: Optional[str] = Field(None, env="EMERGENCY_WEBHOOK_URL")

    # -------------------------------------------------
    # Signup / auth
    # -------------------------------------------------
    # widen to admin / maintenance_staff only for bootstrap deployments
    SIGNUP_ALLOWED_ROLES: List[str] = ["resident"]
    AUTH_RATE_LIMIT: int = 5
    AUTH_RATE_WINDOW_SECONDS: int = 300

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list after loading settings
# -------------------------------------------------
cors_origins = []

for origin in settings.FRONTEND_ORIGINS:
    if not origin.startswith("http"):
        origin = f"https://{origin}"
    cors_origins.append(origin.rstrip("/"))

settings.BACKEND_CORS_ORIGINS = sorted(list(set(cors_origins)))
