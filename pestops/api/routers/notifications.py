from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, status

from pestops.api.deps import get_current_claims
from pestops.domain.models import NotificationRead
from pestops.services.notification_service import NotFoundError, NotificationService

router = APIRouter()


def get_notification_service() -> NotificationService:
    return NotificationService()


Claims = Annotated[dict[str, Any], Depends(get_current_claims)]
Service = Annotated[NotificationService, Depends(get_notification_service)]


@router.get("", response_model=list[NotificationRead])
def list_notifications(claims: Claims, service: Service, unread_only: bool = False) -> list[NotificationRead]:
    rows = service.list_for_user(claims["sub"], unread_only=unread_only)
    return [NotificationRead.model_validate(item) for item in rows]


@router.post("/{notification_id}/read", response_model=NotificationRead)
def mark_notification_read(notification_id: str, claims: Claims, service: Service) -> NotificationRead:
    try:
        return NotificationRead.model_validate(service.mark_read(claims["sub"], notification_id))
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
