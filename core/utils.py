# core/utils.py

from datetime import datetime, timezone
from typing import Optional


def sanitize(data: dict) -> dict:
    """
    Normalize user-supplied text before it is written:
    - Strip surrounding whitespace
    - Empty strings → None
    - Everything else (numbers, booleans, None) unchanged

    Flat numbers and wings stay strings ("101" is not 101).
    """
    clean = {}

    for k, v in data.items():
        if isinstance(v, str):
            stripped = v.strip()
            clean[k] = stripped or None
        else:
            clean[k] = v

    return clean


def current_month(now: Optional[datetime] = None) -> str:
    """Year-month key used by maintenance payments, e.g. '2025-06'."""
    now = now or datetime.now(timezone.utc)
    return f"{now.year}-{now.month:02d}"


def parse_timestamp(value) -> Optional[datetime]:
    """Parse Supabase timestamps ('...Z' or '+00:00'); None stays None."""
    if value is None or isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
