"""Bearer-token verification for tokens issued by the external identity provider.

The service never logs anyone in. It only checks the signature, expiry and
(optional) audience of the presented JWT and reads the subject and role.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from core.config import get_settings


bearer_scheme = HTTPBearer(auto_error=False)

ROLES = ("coach", "athlete")


@dataclass(frozen=True)
class AuthPrincipal:
    user_id: str
    role: str
    email: Optional[str] = None
    exp: Optional[int] = None


def create_access_token(
    *,
    user_id: str,
    role: str,
    email: Optional[str] = None,
    expires_in_seconds: int = 3600,
) -> str:
    """Mint a token the way the identity provider does. Used by local tooling and tests."""
    settings = get_settings()
    claims: dict[str, Any] = {
        "sub": str(user_id),
        "role": str(role),
        "exp": int(time.time()) + int(expires_in_seconds),
    }
    if email:
        claims["email"] = email
    if settings.jwt_audience:
        claims["aud"] = settings.jwt_audience
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> AuthPrincipal:
    settings = get_settings()
    options = {"verify_aud": bool(settings.jwt_audience)}
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options=options,
        )
    except ExpiredSignatureError as exc:
        raise HTTPException(status_code=401, detail={"code": "TOKEN_EXPIRED", "message": "Token has expired"}) from exc
    except JWTError as exc:
        raise HTTPException(status_code=401, detail={"code": "INVALID_TOKEN", "message": "Token could not be verified"}) from exc

    subject = str(payload.get("sub") or "").strip()
    role = str(payload.get("role") or "").strip().lower()
    if not subject or role not in ROLES:
        raise HTTPException(status_code=401, detail={"code": "INVALID_TOKEN", "message": "Token is missing subject or role"})
    return AuthPrincipal(user_id=subject, role=role, email=payload.get("email"), exp=payload.get("exp"))


def get_current_principal(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> AuthPrincipal:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail={"code": "AUTH_REQUIRED", "message": "Bearer token required"})
    return decode_access_token(credentials.credentials)


def require_roles(*allowed_roles: str) -> Callable[[AuthPrincipal], AuthPrincipal]:
    allowed = {r.lower() for r in allowed_roles}

    def _dependency(principal: AuthPrincipal = Depends(get_current_principal)) -> AuthPrincipal:
        if principal.role not in allowed:
            raise HTTPException(
                status_code=403,
                detail={
                    "code": "FORBIDDEN_ROLE",
                    "message": f"Requires role: {', '.join(sorted(allowed))}",
                    "role": principal.role,
                },
            )
        return principal

    return _dependency


require_coach = require_roles("coach")
require_athlete = require_roles("athlete")
