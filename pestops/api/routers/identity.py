from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, status

from pestops.api.deps import get_current_claims, require_perm
from pestops.domain.models import (
    BootstrapAdminRequest,
    DevLoginRequest,
    TokenResponse,
    UserCreate,
    UserRead,
)
from pestops.domain.permissions import PERM_IDENTITY_WRITE
from pestops.infra.auth import create_access_token
from pestops.services.identity_service import AuthError, ConflictError, IdentityService, NotFoundError

router = APIRouter()


def get_identity_service() -> IdentityService:
    return IdentityService()


Claims = Annotated[dict[str, Any], Depends(get_current_claims)]
Service = Annotated[IdentityService, Depends(get_identity_service)]


def _handle_identity_error(exc: Exception) -> None:
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, ConflictError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    if isinstance(exc, AuthError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    raise exc


@router.post("/bootstrap-admin", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def bootstrap_admin(payload: BootstrapAdminRequest, service: Service) -> UserRead:
    try:
        return UserRead.model_validate(service.bootstrap_admin(payload))
    except ConflictError as exc:
        _handle_identity_error(exc)
        raise


@router.post("/dev-login", response_model=TokenResponse)
def dev_login(payload: DevLoginRequest, service: Service) -> TokenResponse:
    try:
        user, permissions = service.dev_login(payload.username, payload.password)
    except AuthError as exc:
        _handle_identity_error(exc)
        raise
    token = create_access_token(user_id=user.id, role=str(user.role), permissions=permissions)
    return TokenResponse(access_token=token, permissions=permissions)


@router.post(
    "/users",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_perm(PERM_IDENTITY_WRITE))],
)
def create_user(payload: UserCreate, service: Service) -> UserRead:
    try:
        return UserRead.model_validate(service.create_user(payload))
    except ConflictError as exc:
        _handle_identity_error(exc)
        raise


@router.get("/me", response_model=UserRead)
def get_me(claims: Claims, service: Service) -> UserRead:
    try:
        return UserRead.model_validate(service.get_user(claims["sub"]))
    except NotFoundError as exc:
        _handle_identity_error(exc)
        raise
