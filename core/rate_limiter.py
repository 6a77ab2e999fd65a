# core/rate_limiter.py

from typing import Dict, Tuple, Optional
from fastapi import HTTPException, Request
from collections import defaultdict
from threading import Lock
import time

from core.config import settings


# Simple in-memory rate limiter for the unauthenticated auth endpoints
_rate_limit_store: Dict[str, list] = defaultdict(list)
_lock = Lock()


def check_rate_limit(
    identifier: str,
    max_requests: int = 10,
    window_seconds: int = 60,
) -> Tuple[bool, int]:
    """
    Sliding-window check.

    Returns:
        Tuple of (allowed: bool, remaining: int)
    """
    now = time.time()
    window_start = now - window_seconds

    with _lock:
        requests = [ts for ts in _rate_limit_store[identifier] if ts > window_start]

        if len(requests) >= max_requests:
            _rate_limit_store[identifier] = requests
            return False, 0

        requests.append(now)
        _rate_limit_store[identifier] = requests
        return True, max_requests - len(requests)


def get_rate_limit_identifier(request: Request, scope: str, key: Optional[str] = None) -> str:
    """
    Prefer an explicit key (e.g. the email being logged into),
    otherwise the client IP (first X-Forwarded-For hop when proxied).
    """
    if key:
        return f"{scope}:{key.lower()}"

    client_ip = request.client.host if request.client else "unknown"

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        client_ip = forwarded_for.split(",")[0].strip()

    return f"{scope}:ip:{client_ip}"


def require_rate_limit(request: Request, scope: str, key: Optional[str] = None):
    """
    Raises HTTPException 429 when the auth rate limit is exceeded.
    """
    max_requests = settings.AUTH_RATE_LIMIT
    window_seconds = settings.AUTH_RATE_WINDOW_SECONDS
    identifier = get_rate_limit_identifier(request, scope, key)

    allowed, remaining = check_rate_limit(identifier, max_requests, window_seconds)

    if not allowed:
        raise HTTPException(
            status_code=429,
            detail=f"Too many attempts. Maximum {max_requests} per {window_seconds} seconds.",
            headers={"Retry-After": str(window_seconds)},
        )

    return remaining


def reset_rate_limits():
    with _lock:
        _rate_limit_store.clear()
