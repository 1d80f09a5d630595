from __future__ import annotations

from collections.abc import Callable
from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from pestops.domain.permissions import has_permission
from pestops.infra.auth import TokenError, decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/identity/dev-login")

ClaimsChecker = Callable[[dict[str, Any]], dict[str, Any]]


def get_current_claims(
    request: Request,
    token: Annotated[str, Depends(oauth2_scheme)],
) -> dict[str, Any]:
    try:
        claims = decode_access_token(token)
    except TokenError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    request.state.actor_id = claims["sub"]
    return claims


def actor_of(claims: dict[str, Any]) -> tuple[str, list[str]]:
    """Splits verified claims into the ``(actor_id, permissions)`` pair services take."""
    return claims["sub"], list(claims["permissions"])


def require_any_perm(*permissions: str) -> ClaimsChecker:
    expected = [item for item in permissions if item]

    def _checker(
        claims: Annotated[dict[str, Any], Depends(get_current_claims)],
    ) -> dict[str, Any]:
        if not expected or any(has_permission(claims, permission) for permission in expected):
            return claims
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Missing permission: {' or '.join(expected)}",
        )

    return _checker


def require_perm(permission: str) -> ClaimsChecker:
    return require_any_perm(permission)
