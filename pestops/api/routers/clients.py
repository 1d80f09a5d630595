from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, status

from pestops.api.deps import get_current_claims, require_any_perm, require_perm
from pestops.domain.models import (
    AssignmentCreate,
    AssignmentRead,
    ClientCreate,
    ClientRead,
    EquipmentBaseline,
)
from pestops.domain.permissions import PERM_CLIENT_WRITE, PERM_REPORT_REVIEW, PERM_REPORT_WRITE
from pestops.services import assignment_service, client_service
from pestops.services.assignment_service import AssignmentManager
from pestops.services.client_service import ClientService

router = APIRouter()


def get_client_service() -> ClientService:
    return ClientService()


def get_assignment_manager() -> AssignmentManager:
    return AssignmentManager()


Claims = Annotated[dict[str, Any], Depends(get_current_claims)]
Service = Annotated[ClientService, Depends(get_client_service)]
Assignments = Annotated[AssignmentManager, Depends(get_assignment_manager)]


def _handle_client_error(exc: Exception) -> None:
    if isinstance(exc, (client_service.NotFoundError, assignment_service.NotFoundError)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, assignment_service.ConflictError):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"reason": "client_assigned", "message": str(exc), "current_pco_id": exc.current_pco_id},
        ) from exc
    raise exc


@router.post(
    "",
    response_model=ClientRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_perm(PERM_CLIENT_WRITE))],
)
def create_client(payload: ClientCreate, service: Service) -> ClientRead:
    return ClientRead.model_validate(service.create_client(payload))


@router.get(
    "/{client_id}",
    response_model=ClientRead,
    dependencies=[Depends(require_any_perm(PERM_CLIENT_WRITE, PERM_REPORT_REVIEW, PERM_REPORT_WRITE))],
)
def get_client(client_id: str, service: Service) -> ClientRead:
    try:
        return ClientRead.model_validate(service.get_client(client_id))
    except client_service.NotFoundError as exc:
        _handle_client_error(exc)
        raise


@router.patch(
    "/{client_id}/equipment-baseline",
    response_model=ClientRead,
    dependencies=[Depends(require_perm(PERM_CLIENT_WRITE))],
)
def update_equipment_baseline(client_id: str, payload: EquipmentBaseline, service: Service) -> ClientRead:
    try:
        return ClientRead.model_validate(service.update_baseline(client_id, payload))
    except client_service.NotFoundError as exc:
        _handle_client_error(exc)
        raise


@router.post(
    "/{client_id}/assignments",
    response_model=AssignmentRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_perm(PERM_CLIENT_WRITE))],
)
def assign_technician(
    client_id: str,
    payload: AssignmentCreate,
    claims: Claims,
    assignments: Assignments,
) -> AssignmentRead:
    try:
        return AssignmentRead.model_validate(assignments.assign(client_id, payload.pco_id, claims["sub"]))
    except (assignment_service.NotFoundError, assignment_service.ConflictError) as exc:
        _handle_client_error(exc)
        raise


@router.post(
    "/{client_id}/assignments/unassign",
    response_model=AssignmentRead,
    dependencies=[Depends(require_perm(PERM_CLIENT_WRITE))],
)
def unassign_technician(client_id: str, claims: Claims, assignments: Assignments) -> AssignmentRead:
    try:
        return AssignmentRead.model_validate(assignments.unassign(client_id, claims["sub"]))
    except assignment_service.NotFoundError as exc:
        _handle_client_error(exc)
        raise


@router.get(
    "/{client_id}/assignments",
    response_model=list[AssignmentRead],
    dependencies=[Depends(require_any_perm(PERM_CLIENT_WRITE, PERM_REPORT_REVIEW))],
)
def list_assignments(client_id: str, assignments: Assignments) -> list[AssignmentRead]:
    try:
        rows = assignments.list_for_client(client_id)
    except assignment_service.NotFoundError as exc:
        _handle_client_error(exc)
        raise
    return [AssignmentRead.model_validate(item) for item in rows]
