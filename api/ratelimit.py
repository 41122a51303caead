from __future__ import annotations

from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from core.config import get_settings


def limiter_enabled() -> bool:
    settings = get_settings()
    if str(settings.app_env).lower() == "test":
        return False
    return bool(settings.rate_limit_enabled)


def write_limit() -> str:
    """Limit string applied to every mutating endpoint, read per request."""
    return get_settings().write_rate_limit


def rate_limit_key(request: Request) -> str:
    # Per user when a bearer token is present, else per client address.
    auth = request.headers.get("authorization") or ""
    if auth.lower().startswith("bearer ") and len(auth) > 7:
        return f"token:{auth[7:][-24:]}"
    return get_remote_address(request)


limiter = Limiter(
    key_func=rate_limit_key,
    storage_uri=get_settings().rate_limit_storage_uri,
    enabled=limiter_enabled(),
    headers_enabled=False,
)


def rate_limit_exceeded_handler(request: Request, exc: Exception) -> JSONResponse:
    retry_after: Optional[str] = None
    if isinstance(exc, RateLimitExceeded):
        retry_after = getattr(exc, "retry_after", None)
    headers = {}
    if retry_after is not None:
        headers["Retry-After"] = str(retry_after)
    return JSONResponse(
        status_code=429,
        content={"detail": {"code": "RATE_LIMITED", "message": "Too many write requests, slow down"}},
        headers=headers,
    )
