from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Response, status

from pestops.api.deps import actor_of, get_current_claims, require_any_perm, require_perm
from pestops.domain.models import (
    BaitStationIn,
    BaitStationRead,
    BaitStationUpdate,
    CompleteReportCreate,
    CompleteReportResubmit,
    EquipmentExpectations,
    EquipmentReconcileRead,
    FumigationRead,
    FumigationReplaceRequest,
    InsectMonitorIn,
    InsectMonitorRead,
    InsectMonitorUpdate,
    PreFillRead,
    ReportAdminEdit,
    ReportApproveRequest,
    ReportCreate,
    ReportDeclineRequest,
    ReportDetailRead,
    ReportRead,
    ReportUpdate,
)
from pestops.domain.permissions import PERM_REPORT_REVIEW, PERM_REPORT_WRITE
from pestops.services.report_service import (
    ConflictError,
    IncompleteReportError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ReportError,
    ReportService,
    ValidationFailedError,
)

router = APIRouter()


def get_report_service() -> ReportService:
    return ReportService()


Claims = Annotated[dict[str, Any], Depends(get_current_claims)]
Service = Annotated[ReportService, Depends(get_report_service)]

write_access = [Depends(require_perm(PERM_REPORT_WRITE))]
review_access = [Depends(require_perm(PERM_REPORT_REVIEW))]
any_access = [Depends(require_any_perm(PERM_REPORT_WRITE, PERM_REPORT_REVIEW))]


def _handle_report_error(exc: Exception) -> None:
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, (PermissionDeniedError, InvalidStateError)):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    if isinstance(exc, ConflictError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.detail) from exc
    if isinstance(exc, IncompleteReportError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Report is incomplete", "missing_requirements": exc.missing},
        ) from exc
    if isinstance(exc, ValidationFailedError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    raise exc


@router.post("", response_model=ReportRead, status_code=status.HTTP_201_CREATED, dependencies=write_access)
def create_report(payload: ReportCreate, claims: Claims, service: Service) -> ReportRead:
    try:
        return ReportRead.model_validate(service.create_report(claims["sub"], payload))
    except ReportError as exc:
        _handle_report_error(exc)
        raise


@router.post("/complete", response_model=ReportRead, status_code=status.HTTP_201_CREATED, dependencies=write_access)
def complete_report(payload: CompleteReportCreate, claims: Claims, service: Service) -> ReportRead:
    try:
        return ReportRead.model_validate(service.complete_report(claims["sub"], payload))
    except ReportError as exc:
        _handle_report_error(exc)
        raise


@router.get("/pre-fill/{client_id}", response_model=PreFillRead, dependencies=any_access)
def pre_fill(client_id: str, claims: Claims, service: Service) -> PreFillRead:
    try:
        return service.pre_fill(client_id, *actor_of(claims))
    except ReportError as exc:
        _handle_report_error(exc)
        raise


@router.get("/{report_id}", response_model=ReportDetailRead, dependencies=any_access)
def get_report(report_id: str, claims: Claims, service: Service) -> ReportDetailRead:
    try:
        return service.get_report_detail(report_id, *actor_of(claims))
    except ReportError as exc:
        _handle_report_error(exc)
        raise


@router.put("/{report_id}", response_model=ReportRead, dependencies=write_access)
def update_report(report_id: str, payload: ReportUpdate, claims: Claims, service: Service) -> ReportRead:
    try:
        return ReportRead.model_validate(service.update_report(report_id, *actor_of(claims), payload))
    except ReportError as exc:
        _handle_report_error(exc)
        raise


@router.delete("/{report_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=write_access)
def delete_report(report_id: str, claims: Claims, service: Service) -> Response:
    try:
        service.delete_report(report_id, *actor_of(claims))
    except ReportError as exc:
        _handle_report_error(exc)
        raise
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{report_id}/submit", response_model=ReportRead, dependencies=write_access)
def submit_report(report_id: str, claims: Claims, service: Service) -> ReportRead:
    try:
        return ReportRead.model_validate(service.submit_report(report_id, *actor_of(claims)))
    except ReportError as exc:
        _handle_report_error(exc)
        raise


@router.put("/{report_id}/resubmit", response_model=ReportRead, dependencies=any_access)
def resubmit_report(
    report_id: str,
    payload: CompleteReportResubmit,
    claims: Claims,
    service: Service,
) -> ReportRead:
    try:
        return ReportRead.model_validate(service.resubmit_report(report_id, *actor_of(claims), payload))
    except ReportError as exc:
        _handle_report_error(exc)
        raise


@router.post("/{report_id}/approve", response_model=ReportRead, dependencies=review_access)
def approve_report(
    report_id: str,
    claims: Claims,
    service: Service,
    payload: ReportApproveRequest | None = None,
) -> ReportRead:
    try:
        report = service.approve_report(report_id, *actor_of(claims), payload or ReportApproveRequest())
        return ReportRead.model_validate(report)
    except ReportError as exc:
        _handle_report_error(exc)
        raise


@router.post("/{report_id}/decline", response_model=ReportRead, dependencies=review_access)
def decline_report(report_id: str, payload: ReportDeclineRequest, claims: Claims, service: Service) -> ReportRead:
    try:
        return ReportRead.model_validate(service.decline_report(report_id, *actor_of(claims), payload))
    except ReportError as exc:
        _handle_report_error(exc)
        raise


@router.post("/{report_id}/force-decline", response_model=ReportRead, dependencies=review_access)
def force_decline_report(
    report_id: str,
    payload: ReportDeclineRequest,
    claims: Claims,
    service: Service,
) -> ReportRead:
    try:
        return ReportRead.model_validate(service.force_decline_report(report_id, *actor_of(claims), payload))
    except ReportError as exc:
        _handle_report_error(exc)
        raise


@router.post("/{report_id}/archive", response_model=ReportRead, dependencies=review_access)
def archive_report(report_id: str, claims: Claims, service: Service) -> ReportRead:
    try:
        return ReportRead.model_validate(service.archive_report(report_id, *actor_of(claims)))
    except ReportError as exc:
        _handle_report_error(exc)
        raise


@router.put("/{report_id}/admin", response_model=ReportDetailRead, dependencies=review_access)
def admin_edit_report(report_id: str, payload: ReportAdminEdit, claims: Claims, service: Service) -> ReportDetailRead:
    try:
        return service.admin_edit(report_id, *actor_of(claims), payload)
    except ReportError as exc:
        _handle_report_error(exc)
        raise


@router.post("/{report_id}/mark-new-equipment", response_model=EquipmentReconcileRead, dependencies=any_access)
def mark_new_equipment(
    report_id: str,
    claims: Claims,
    service: Service,
    payload: EquipmentExpectations | None = None,
) -> EquipmentReconcileRead:
    try:
        return service.mark_new_equipment(report_id, *actor_of(claims), payload)
    except ReportError as exc:
        _handle_report_error(exc)
        raise


@router.post(
    "/{report_id}/bait-stations",
    response_model=BaitStationRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=write_access,
)
def add_bait_station(report_id: str, payload: BaitStationIn, claims: Claims, service: Service) -> BaitStationRead:
    try:
        return service.add_bait_station(report_id, *actor_of(claims), payload)
    except ReportError as exc:
        _handle_report_error(exc)
        raise


@router.put("/{report_id}/bait-stations/{station_id}", response_model=BaitStationRead, dependencies=write_access)
def update_bait_station(
    report_id: str,
    station_id: str,
    payload: BaitStationUpdate,
    claims: Claims,
    service: Service,
) -> BaitStationRead:
    try:
        return service.update_bait_station(report_id, station_id, *actor_of(claims), payload)
    except ReportError as exc:
        _handle_report_error(exc)
        raise


@router.delete(
    "/{report_id}/bait-stations/{station_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=write_access,
)
def delete_bait_station(report_id: str, station_id: str, claims: Claims, service: Service) -> Response:
    try:
        service.delete_bait_station(report_id, station_id, *actor_of(claims))
    except ReportError as exc:
        _handle_report_error(exc)
        raise
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{report_id}/fumigation", response_model=FumigationRead, dependencies=write_access)
def replace_fumigation(
    report_id: str,
    payload: FumigationReplaceRequest,
    claims: Claims,
    service: Service,
) -> FumigationRead:
    try:
        return service.replace_fumigation(report_id, *actor_of(claims), payload)
    except ReportError as exc:
        _handle_report_error(exc)
        raise


@router.post(
    "/{report_id}/insect-monitors",
    response_model=InsectMonitorRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=write_access,
)
def add_insect_monitor(
    report_id: str,
    payload: InsectMonitorIn,
    claims: Claims,
    service: Service,
) -> InsectMonitorRead:
    try:
        return InsectMonitorRead.model_validate(service.add_insect_monitor(report_id, *actor_of(claims), payload))
    except ReportError as exc:
        _handle_report_error(exc)
        raise


@router.put("/{report_id}/insect-monitors/{monitor_id}", response_model=InsectMonitorRead, dependencies=write_access)
def update_insect_monitor(
    report_id: str,
    monitor_id: str,
    payload: InsectMonitorUpdate,
    claims: Claims,
    service: Service,
) -> InsectMonitorRead:
    try:
        monitor = service.update_insect_monitor(report_id, monitor_id, *actor_of(claims), payload)
        return InsectMonitorRead.model_validate(monitor)
    except ReportError as exc:
        _handle_report_error(exc)
        raise


@router.delete(
    "/{report_id}/insect-monitors/{monitor_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=write_access,
)
def delete_insect_monitor(report_id: str, monitor_id: str, claims: Claims, service: Service) -> Response:
    try:
        service.delete_insect_monitor(report_id, monitor_id, *actor_of(claims))
    except ReportError as exc:
        _handle_report_error(exc)
        raise
    return Response(status_code=status.HTTP_204_NO_CONTENT)
