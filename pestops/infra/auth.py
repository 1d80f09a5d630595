from __future__ import annotations

import os
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MIN = int(os.getenv("JWT_EXPIRES_MIN", "60"))
JWT_ISSUER = "pestops"

REQUIRED_CLAIMS = ["sub", "exp", "iat", "iss"]


class TokenError(Exception):
    pass


def create_access_token(
    *,
    user_id: str,
    role: str,
    permissions: list[str],
    expires_minutes: int | None = None,
) -> str:
    issued_at = datetime.now(UTC)
    claims: dict[str, Any] = {
        "sub": user_id,
        "role": role,
        "permissions": sorted(set(permissions)),
        "iss": JWT_ISSUER,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=expires_minutes or JWT_EXPIRES_MIN),
    }
    return jwt.encode(claims, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verifies signature, expiry and issuer; raises ``TokenError`` otherwise."""
    try:
        claims = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            issuer=JWT_ISSUER,
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.PyJWTError as exc:
        raise TokenError(str(exc)) from exc
    if not isinstance(claims.get("permissions"), list):
        raise TokenError("token carries no permissions claim")
    return claims
