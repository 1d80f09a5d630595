from __future__ import annotations

from datetime import date
from typing import Any

import structlog
from sqlmodel import Session, select

from pestops.domain.models import (
    BaitStationIn,
    BaitStationUpdate,
    Client,
    CompleteReportCreate,
    CompleteReportResubmit,
    EquipmentExpectations,
    EquipmentReconcileRead,
    FumigationReplaceRequest,
    InsectMonitorIn,
    InsectMonitorUpdate,
    PreFillRead,
    Report,
    ReportAdminEdit,
    ReportApproveRequest,
    ReportCreate,
    ReportDeclineRequest,
    ReportDetailRead,
    ReportRead,
    ReportType,
    ReportUpdate,
    User,
    now_utc,
)
from pestops.domain.permissions import PERM_REPORT_REVIEW, PERM_WILDCARD
from pestops.domain.state_machine import OPEN_STATUSES, ReportStatus, can_transition, is_editable
from pestops.infra.db import get_engine
from pestops.infra.events import event_bus
from pestops.services import sub_entity_service
from pestops.services.assignment_service import AssignmentManager, ReassignConflict
from pestops.services.equipment_service import (
    BAIT_STATIONS,
    INSECT_MONITORS,
    EquipmentKind,
    EquipmentReconciler,
    ReconcileResult,
)
from pestops.services.sub_entity_service import SubEntityStore

logger = structlog.get_logger(__name__)

REPORT_UPDATE_FIELDS = {
    "report_type",
    "service_date",
    "next_service_date",
    "pco_signature",
    "client_signature",
    "client_signature_name",
    "general_remarks",
}
REPORT_ADMIN_FIELDS = {
    "report_type",
    "service_date",
    "next_service_date",
    "general_remarks",
    "admin_notes",
    "recommendations",
}


class ReportError(Exception):
    pass


class NotFoundError(ReportError):
    pass


class PermissionDeniedError(ReportError):
    pass


class InvalidStateError(ReportError):
    pass


class ConflictError(ReportError):
    def __init__(self, message: str, *, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.detail = detail or {"reason": "conflict", "message": message}


class AssignmentConflictError(ConflictError):
    def __init__(self, conflict: ReassignConflict) -> None:
        super().__init__(
            "client has been reassigned to another technician",
            detail={
                "reason": "assignment_conflict",
                "message": "client has been reassigned to another technician; force-decline to override",
                "client_id": conflict.client_id,
                "current_pco_id": conflict.current_pco_id,
                "original_pco_id": conflict.original_pco_id,
            },
        )
        self.conflict = conflict


class IncompleteReportError(ReportError):
    def __init__(self, missing: list[str]) -> None:
        super().__init__("report is incomplete")
        self.missing = missing


class ValidationFailedError(ReportError):
    pass


def missing_requirements(
    *,
    report_type: ReportType | str,
    pco_signature: str | None,
    client_signature: str | None,
    client_signature_name: str | None,
    bait_station_count: int,
    fumigation_area_count: int,
    fumigation_pest_count: int,
) -> list[str]:
    report_type = ReportType(report_type)
    missing: list[str] = []
    if not pco_signature:
        missing.append("PCO signature is required")
    if not client_signature:
        missing.append("Client signature is required")
    if not client_signature_name:
        missing.append("Client signature name is required")
    if report_type.includes_bait and bait_station_count == 0:
        missing.append("At least one bait station is required for bait inspection reports")
    if report_type.includes_fumigation:
        if fumigation_area_count == 0:
            missing.append("At least one fumigation area is required for fumigation reports")
        if fumigation_pest_count == 0:
            missing.append("At least one target pest is required for fumigation reports")
    return missing


class ReportService:
    """Drives report status transitions and their side effects.

    Every public operation is one unit of work: sub-entity writes, equipment
    classification, assignment changes and the status update commit together
    or not at all. Lifecycle events are emitted only after the commit.
    """

    def __init__(self) -> None:
        self._store = SubEntityStore()
        self._reconciler = EquipmentReconciler()
        self._assignments = AssignmentManager()

    def _session(self) -> Session:
        return Session(get_engine(), expire_on_commit=False)

    def _has_permission(self, permissions: list[str], required: str) -> bool:
        return required in permissions or PERM_WILDCARD in permissions

    # lookups and guards

    def _get_report(self, session: Session, report_id: str) -> Report:
        report = session.get(Report, report_id)
        if report is None:
            raise NotFoundError("report not found")
        return report

    def _get_client(self, session: Session, client_id: str) -> Client:
        client = session.get(Client, client_id)
        if client is None:
            raise NotFoundError("client not found")
        return client

    def _ensure_visible(self, report: Report, actor_id: str, permissions: list[str]) -> None:
        if report.pco_id == actor_id:
            return
        if self._has_permission(permissions, PERM_REPORT_REVIEW) and report.status != ReportStatus.DRAFT:
            return
        raise NotFoundError("report not found")

    def _ensure_owner(self, report: Report, actor_id: str, permissions: list[str]) -> None:
        self._ensure_visible(report, actor_id, permissions)
        if report.pco_id != actor_id:
            raise PermissionDeniedError("only the reporting technician can modify this report")

    def _ensure_reviewer(self, permissions: list[str]) -> None:
        if not self._has_permission(permissions, PERM_REPORT_REVIEW):
            raise PermissionDeniedError(f"Missing permission: {PERM_REPORT_REVIEW}")

    def _ensure_editable(self, report: Report) -> None:
        if not is_editable(ReportStatus(report.status)):
            raise InvalidStateError(f"report cannot be edited in {report.status} status")

    def _ensure_transition(self, report: Report, target: ReportStatus) -> None:
        source = ReportStatus(report.status)
        if not can_transition(source, target):
            raise InvalidStateError(f"illegal transition: {source} -> {target}")

    def _ensure_no_duplicates(
        self,
        session: Session,
        *,
        client_id: str,
        pco_id: str,
        service_date: date,
        exclude_report_id: str | None = None,
    ) -> None:
        open_statement = (
            select(Report)
            .where(Report.client_id == client_id)
            .where(Report.pco_id == pco_id)
            .where(Report.status.in_([str(item) for item in OPEN_STATUSES]))  # type: ignore[attr-defined]
        )
        for existing in session.exec(open_statement).all():
            if existing.id != exclude_report_id:
                raise ConflictError(
                    "an open report already exists for this client",
                    detail={"reason": "duplicate_draft", "existing_report_id": existing.id},
                )
        dated_statement = (
            select(Report)
            .where(Report.client_id == client_id)
            .where(Report.service_date == service_date)
            .where(Report.status != ReportStatus.ARCHIVED)
        )
        for existing in session.exec(dated_statement).all():
            if existing.id != exclude_report_id:
                raise ConflictError(
                    "a report already exists for this client on this service date",
                    detail={"reason": "duplicate_service_date", "existing_report_id": existing.id},
                )

    def _ensure_dates(self, service_date: date, next_service_date: date | None) -> None:
        if next_service_date is not None and next_service_date <= service_date:
            raise ValidationFailedError("next_service_date must be after service_date")

    def _event_payload(self, session: Session, report: Report, **extra: Any) -> dict[str, Any]:
        client = session.get(Client, report.client_id)
        pco = session.get(User, report.pco_id)
        payload: dict[str, Any] = {
            "report_id": report.id,
            "client_id": report.client_id,
            "pco_id": report.pco_id,
            "status": str(report.status),
            "company_name": client.company_name if client is not None else None,
            "pco_name": pco.name if pco is not None else None,
        }
        payload.update(extra)
        return payload

    def _sub_entity_call(self, operation: Any, *args: Any, **kwargs: Any) -> Any:
        try:
            return operation(*args, **kwargs)
        except sub_entity_service.NotFoundError as exc:
            raise NotFoundError(str(exc)) from exc
        except sub_entity_service.InvalidPayloadError as exc:
            raise ValidationFailedError(str(exc)) from exc

    def _invalidate_markings(self, session: Session, report: Report, kind: EquipmentKind) -> None:
        self._reconciler.clear_markings(session, report.id, kind)
        setattr(report, kind.count_attr, 0)

    def _touch(self, session: Session, report: Report) -> None:
        report.updated_at = now_utc()
        session.add(report)

    # reads

    def get_report_detail(self, report_id: str, actor_id: str, permissions: list[str]) -> ReportDetailRead:
        with self._session() as session:
            report = self._get_report(session, report_id)
            self._ensure_visible(report, actor_id, permissions)
            base = ReportRead.model_validate(report).model_dump()
            return ReportDetailRead(**base, **self._store.load_detail(session, report.id))

    def pre_fill(self, client_id: str, actor_id: str, permissions: list[str]) -> PreFillRead:
        with self._session() as session:
            self._get_client(session, client_id)
            if not self._has_permission(permissions, PERM_REPORT_REVIEW) and not (
                self._assignments.is_actively_assigned(session, client_id, actor_id)
            ):
                raise PermissionDeniedError("technician is not assigned to this client")
            source = session.exec(
                select(Report)
                .where(Report.client_id == client_id)
                .where(Report.status == ReportStatus.APPROVED)
                .order_by(Report.service_date.desc(), Report.created_at.desc())  # type: ignore[attr-defined]
            ).first()
            if source is None:
                raise NotFoundError("no approved report found for this client")
            detail = self._store.load_detail(session, source.id)

        fumigation = detail["fumigation"]
        return PreFillRead(
            source_report_id=source.id,
            bait_stations=[
                {"station_number": item.station_number, "location": str(item.location)}
                for item in detail["bait_stations"]
            ],
            fumigation={
                "areas": [item.model_dump(exclude={"id"}) for item in fumigation.areas],
                "target_pests": [item.model_dump(exclude={"id"}) for item in fumigation.target_pests],
                "chemicals": [{"chemical_id": item.chemical_id} for item in fumigation.chemicals],
            },
            insect_monitors=[
                {
                    "monitor_number": item.monitor_number,
                    "monitor_type": str(item.monitor_type),
                    "location": item.location,
                }
                for item in detail["insect_monitors"]
            ],
        )

    # technician lifecycle

    def create_report(self, actor_id: str, payload: ReportCreate) -> Report:
        with self._session() as session:
            self._get_client(session, payload.client_id)
            if not self._assignments.is_actively_assigned(session, payload.client_id, actor_id):
                raise PermissionDeniedError("technician is not assigned to this client")
            self._ensure_no_duplicates(
                session,
                client_id=payload.client_id,
                pco_id=actor_id,
                service_date=payload.service_date,
            )
            report = Report(
                pco_id=actor_id,
                status=ReportStatus.DRAFT,
                **payload.model_dump(),
            )
            session.add(report)
            session.commit()
            session.refresh(report)

        logger.info("report_created", report_id=report.id, client_id=report.client_id, actor_id=actor_id)
        event_bus.emit("report.created", {"report_id": report.id, "client_id": report.client_id}, actor_id)
        return report

    def update_report(
        self,
        report_id: str,
        actor_id: str,
        permissions: list[str],
        payload: ReportUpdate,
    ) -> Report:
        changes = payload.model_dump(exclude_unset=True, include=REPORT_UPDATE_FIELDS)
        if not changes:
            raise ValidationFailedError("No valid fields to update")
        with self._session() as session:
            report = self._get_report(session, report_id)
            self._ensure_owner(report, actor_id, permissions)
            self._ensure_editable(report)
            service_date = changes.get("service_date", report.service_date)
            self._ensure_dates(service_date, changes.get("next_service_date", report.next_service_date))
            if service_date != report.service_date:
                self._ensure_no_duplicates(
                    session,
                    client_id=report.client_id,
                    pco_id=report.pco_id,
                    service_date=service_date,
                    exclude_report_id=report.id,
                )
            for name, value in changes.items():
                setattr(report, name, value)
            self._touch(session, report)
            session.commit()
            session.refresh(report)

        logger.info("report_updated", report_id=report.id, actor_id=actor_id, fields=sorted(changes))
        event_bus.emit("report.updated", {"report_id": report.id, "fields": sorted(changes)}, actor_id)
        return report

    def delete_report(self, report_id: str, actor_id: str, permissions: list[str]) -> None:
        with self._session() as session:
            report = self._get_report(session, report_id)
            self._ensure_owner(report, actor_id, permissions)
            if report.status != ReportStatus.DRAFT:
                raise InvalidStateError("only draft reports can be deleted; archive it instead")
            self._store.clear_all(session, report.id)
            session.delete(report)
            session.commit()

        logger.info("report_deleted", report_id=report_id, actor_id=actor_id)
        event_bus.emit("report.deleted", {"report_id": report_id}, actor_id)

    def submit_report(self, report_id: str, actor_id: str, permissions: list[str]) -> Report:
        with self._session() as session:
            report = self._get_report(session, report_id)
            self._ensure_owner(report, actor_id, permissions)
            self._ensure_transition(report, ReportStatus.PENDING)
            counts = self._store.counts(session, report.id)
            missing = missing_requirements(
                report_type=report.report_type,
                pco_signature=report.pco_signature,
                client_signature=report.client_signature,
                client_signature_name=report.client_signature_name,
                bait_station_count=counts.bait_stations,
                fumigation_area_count=counts.fumigation_areas,
                fumigation_pest_count=counts.fumigation_target_pests,
            )
            if missing:
                raise IncompleteReportError(missing)
            self._ensure_no_duplicates(
                session,
                client_id=report.client_id,
                pco_id=report.pco_id,
                service_date=report.service_date,
                exclude_report_id=report.id,
            )
            client = self._get_client(session, report.client_id)
            report.status = ReportStatus.PENDING
            report.submitted_at = now_utc()
            result = self._reconciler.reconcile(session, report, client)
            self._assignments.release_on_submit(session, report.client_id, report.pco_id, actor_id)
            session.commit()
            session.refresh(report)
            event_payload = self._event_payload(session, report)

        self._log_submitted(report, actor_id, result)
        event_bus.emit("report.submitted", event_payload, actor_id)
        return report

    def complete_report(self, actor_id: str, payload: CompleteReportCreate) -> Report:
        """Creates a report with all of its equipment and submits it in one step."""
        missing = missing_requirements(
            report_type=payload.report_type,
            pco_signature=payload.pco_signature,
            client_signature=payload.client_signature,
            client_signature_name=payload.client_signature_name,
            bait_station_count=len(payload.bait_stations),
            fumigation_area_count=len(payload.fumigation.areas) if payload.fumigation else 0,
            fumigation_pest_count=len(payload.fumigation.target_pests) if payload.fumigation else 0,
        )
        if missing:
            raise IncompleteReportError(missing)
        with self._session() as session:
            client = self._get_client(session, payload.client_id)
            if not self._assignments.is_actively_assigned(session, payload.client_id, actor_id):
                raise PermissionDeniedError("technician is not assigned to this client")
            self._ensure_no_duplicates(
                session,
                client_id=payload.client_id,
                pco_id=actor_id,
                service_date=payload.service_date,
            )
            now = now_utc()
            report = Report(
                client_id=payload.client_id,
                pco_id=actor_id,
                status=ReportStatus.PENDING,
                submitted_at=now,
                **payload.model_dump(include=REPORT_UPDATE_FIELDS),
            )
            session.add(report)
            session.flush()
            self._store.replace_all(
                session,
                report.id,
                bait_stations=payload.bait_stations,
                fumigation=payload.fumigation,
                insect_monitors=payload.insect_monitors,
            )
            result = self._reconciler.reconcile(session, report, client, overrides=payload)
            self._assignments.release_on_submit(session, report.client_id, actor_id, actor_id)
            session.commit()
            session.refresh(report)
            event_payload = self._event_payload(session, report)

        logger.info("report_created", report_id=report.id, client_id=report.client_id, actor_id=actor_id)
        self._log_submitted(report, actor_id, result)
        event_bus.emit("report.submitted", event_payload, actor_id)
        return report

    def resubmit_report(
        self,
        report_id: str,
        actor_id: str,
        permissions: list[str],
        payload: CompleteReportResubmit,
    ) -> Report:
        """Replaces a declined report's content wholesale and puts it back in review."""
        missing = missing_requirements(
            report_type=payload.report_type,
            pco_signature=payload.pco_signature,
            client_signature=payload.client_signature,
            client_signature_name=payload.client_signature_name,
            bait_station_count=len(payload.bait_stations),
            fumigation_area_count=len(payload.fumigation.areas) if payload.fumigation else 0,
            fumigation_pest_count=len(payload.fumigation.target_pests) if payload.fumigation else 0,
        )
        if missing:
            raise IncompleteReportError(missing)
        with self._session() as session:
            report = self._get_report(session, report_id)
            self._ensure_visible(report, actor_id, permissions)
            if report.pco_id != actor_id and not self._has_permission(permissions, PERM_REPORT_REVIEW):
                raise PermissionDeniedError("only the reporting technician or a reviewer can resubmit")
            self._ensure_transition(report, ReportStatus.PENDING)
            self._ensure_no_duplicates(
                session,
                client_id=report.client_id,
                pco_id=report.pco_id,
                service_date=payload.service_date,
                exclude_report_id=report.id,
            )
            client = self._get_client(session, report.client_id)
            for name, value in payload.model_dump(include=REPORT_UPDATE_FIELDS).items():
                setattr(report, name, value)
            report.status = ReportStatus.PENDING
            report.submitted_at = now_utc()
            self._touch(session, report)
            self._store.replace_all(
                session,
                report.id,
                bait_stations=payload.bait_stations,
                fumigation=payload.fumigation,
                insect_monitors=payload.insect_monitors,
            )
            result = self._reconciler.reconcile(session, report, client, overrides=payload)
            self._assignments.release_on_submit(session, report.client_id, report.pco_id, actor_id)
            session.commit()
            session.refresh(report)
            event_payload = self._event_payload(session, report, resubmitted=True)

        self._log_submitted(report, actor_id, result)
        event_bus.emit("report.submitted", event_payload, actor_id)
        return report

    def _log_submitted(self, report: Report, actor_id: str, result: ReconcileResult) -> None:
        logger.info(
            "report_submitted",
            report_id=report.id,
            client_id=report.client_id,
            actor_id=actor_id,
            new_bait_stations=result.new_bait_stations_count,
            new_insect_monitors=result.new_insect_monitors_count,
        )

    # review

    def approve_report(
        self,
        report_id: str,
        actor_id: str,
        permissions: list[str],
        payload: ReportApproveRequest,
    ) -> Report:
        self._ensure_reviewer(permissions)
        with self._session() as session:
            report = self._get_report(session, report_id)
            self._ensure_transition(report, ReportStatus.APPROVED)
            if payload.admin_notes is not None:
                report.admin_notes = payload.admin_notes
            if payload.recommendations is not None:
                report.recommendations = payload.recommendations
            report.status = ReportStatus.APPROVED
            report.reviewed_by = actor_id
            report.reviewed_at = now_utc()
            self._touch(session, report)
            closed = self._assignments.close_on_review(session, report.client_id, report.pco_id)
            session.commit()
            session.refresh(report)
            event_payload = self._event_payload(session, report)

        logger.info("report_approved", report_id=report.id, actor_id=actor_id, assignments_closed=closed)
        event_bus.emit("report.approved", event_payload, actor_id)
        return report

    def decline_report(
        self,
        report_id: str,
        actor_id: str,
        permissions: list[str],
        payload: ReportDeclineRequest,
        *,
        force: bool = False,
    ) -> Report:
        self._ensure_reviewer(permissions)
        with self._session() as session:
            report = self._get_report(session, report_id)
            self._ensure_transition(report, ReportStatus.DECLINED)
            report.status = ReportStatus.DECLINED
            report.admin_notes = payload.admin_notes
            report.reviewed_by = actor_id
            report.reviewed_at = now_utc()
            self._touch(session, report)
            if force:
                self._assignments.force_reassign(session, report.client_id, report.pco_id, actor_id)
            else:
                outcome = self._assignments.reactivate_on_decline(session, report.client_id, report.pco_id, actor_id)
                if isinstance(outcome, ReassignConflict):
                    session.rollback()
                    logger.warning(
                        "report_decline_conflict",
                        report_id=report_id,
                        client_id=outcome.client_id,
                        current_pco_id=outcome.current_pco_id,
                        original_pco_id=outcome.original_pco_id,
                    )
                    raise AssignmentConflictError(outcome)
            session.commit()
            session.refresh(report)
            event_payload = self._event_payload(session, report, admin_notes=report.admin_notes, forced=force)

        logger.info("report_declined", report_id=report.id, actor_id=actor_id, forced=force)
        event_bus.emit("report.declined", event_payload, actor_id)
        return report

    def force_decline_report(
        self,
        report_id: str,
        actor_id: str,
        permissions: list[str],
        payload: ReportDeclineRequest,
    ) -> Report:
        return self.decline_report(report_id, actor_id, permissions, payload, force=True)

    def archive_report(self, report_id: str, actor_id: str, permissions: list[str]) -> Report:
        self._ensure_reviewer(permissions)
        with self._session() as session:
            report = self._get_report(session, report_id)
            self._ensure_transition(report, ReportStatus.ARCHIVED)
            report.status = ReportStatus.ARCHIVED
            self._touch(session, report)
            closed = self._assignments.close_on_review(session, report.client_id, report.pco_id)
            session.commit()
            session.refresh(report)
            event_payload = self._event_payload(session, report)

        logger.info("report_archived", report_id=report.id, actor_id=actor_id, assignments_closed=closed)
        event_bus.emit("report.archived", event_payload, actor_id)
        return report

    def admin_edit(
        self,
        report_id: str,
        actor_id: str,
        permissions: list[str],
        payload: ReportAdminEdit,
    ) -> ReportDetailRead:
        self._ensure_reviewer(permissions)
        changes = payload.model_dump(exclude_unset=True, include=REPORT_ADMIN_FIELDS)
        with self._session() as session:
            report = self._get_report(session, report_id)
            if report.status == ReportStatus.ARCHIVED:
                raise InvalidStateError("archived reports cannot be edited")
            service_date = changes.get("service_date", report.service_date)
            self._ensure_dates(service_date, changes.get("next_service_date", report.next_service_date))
            if service_date != report.service_date:
                self._ensure_no_duplicates(
                    session,
                    client_id=report.client_id,
                    pco_id=report.pco_id,
                    service_date=service_date,
                    exclude_report_id=report.id,
                )
            for name, value in changes.items():
                setattr(report, name, value)
            self._touch(session, report)

            equipment_changed = False
            if payload.bait_stations is not None:
                self._sub_entity_call(self._store.diff_stations, session, report.id, payload.bait_stations)
                equipment_changed = True
            if payload.insect_monitors is not None:
                self._sub_entity_call(self._store.diff_monitors, session, report.id, payload.insect_monitors)
                equipment_changed = True
            if any(
                value is not None
                for value in (payload.fumigation_areas, payload.fumigation_target_pests, payload.fumigation_chemicals)
            ):
                self._store.replace_fumigation(
                    session,
                    report.id,
                    areas=payload.fumigation_areas,
                    target_pests=payload.fumigation_target_pests,
                    chemicals=payload.fumigation_chemicals,
                )

            classified = any(
                getattr(report, category.expected_attr) is not None
                for kind in (BAIT_STATIONS, INSECT_MONITORS)
                for category in kind.categories
            )
            if equipment_changed and classified:
                client = self._get_client(session, report.client_id)
                self._reconciler.reconcile(session, report, client, force=True)
            session.commit()
            session.refresh(report)
            detail = ReportDetailRead(
                **ReportRead.model_validate(report).model_dump(),
                **self._store.load_detail(session, report.id),
            )

        logger.info(
            "report_admin_edited",
            report_id=report_id,
            actor_id=actor_id,
            fields=sorted(changes),
            equipment_changed=equipment_changed,
        )
        event_bus.emit("report.admin_edited", {"report_id": report_id, "fields": sorted(changes)}, actor_id)
        return detail

    def mark_new_equipment(
        self,
        report_id: str,
        actor_id: str,
        permissions: list[str],
        overrides: EquipmentExpectations | None = None,
    ) -> EquipmentReconcileRead:
        with self._session() as session:
            report = self._get_report(session, report_id)
            self._ensure_visible(report, actor_id, permissions)
            if report.pco_id != actor_id:
                self._ensure_reviewer(permissions)
            if report.status == ReportStatus.ARCHIVED:
                raise InvalidStateError("archived reports cannot be reclassified")
            client = self._get_client(session, report.client_id)
            # drafts never move the client baseline
            result = self._reconciler.reconcile(
                session,
                report,
                client,
                overrides=overrides,
                ratchet=report.status != ReportStatus.DRAFT,
            )
            session.commit()

        return EquipmentReconcileRead(
            report_id=report_id,
            new_bait_stations_count=result.new_bait_stations_count,
            new_insect_monitors_count=result.new_insect_monitors_count,
            bait_stations_skipped=result.bait_stations_skipped,
            insect_monitors_skipped=result.insect_monitors_skipped,
        )

    # sub-entities

    def _editable_report(self, session: Session, report_id: str, actor_id: str, permissions: list[str]) -> Report:
        report = self._get_report(session, report_id)
        self._ensure_owner(report, actor_id, permissions)
        self._ensure_editable(report)
        return report

    def add_bait_station(self, report_id: str, actor_id: str, permissions: list[str], payload: BaitStationIn) -> Any:
        with self._session() as session:
            report = self._editable_report(session, report_id, actor_id, permissions)
            self._invalidate_markings(session, report, BAIT_STATIONS)
            station = self._store.add_station(session, report.id, payload)
            self._touch(session, report)
            session.commit()
            return self._station_read(session, report.id, station.id)

    def update_bait_station(
        self,
        report_id: str,
        station_id: str,
        actor_id: str,
        permissions: list[str],
        payload: BaitStationUpdate,
    ) -> Any:
        with self._session() as session:
            report = self._editable_report(session, report_id, actor_id, permissions)
            self._sub_entity_call(self._store.update_station, session, report.id, station_id, payload)
            self._invalidate_markings(session, report, BAIT_STATIONS)
            self._touch(session, report)
            session.commit()
            return self._station_read(session, report.id, station_id)

    def delete_bait_station(self, report_id: str, station_id: str, actor_id: str, permissions: list[str]) -> None:
        with self._session() as session:
            report = self._editable_report(session, report_id, actor_id, permissions)
            self._sub_entity_call(self._store.delete_station, session, report.id, station_id)
            self._invalidate_markings(session, report, BAIT_STATIONS)
            self._touch(session, report)
            session.commit()

    def _station_read(self, session: Session, report_id: str, station_id: str) -> Any:
        for station in self._store.load_detail(session, report_id)["bait_stations"]:
            if station.id == station_id:
                return station
        raise NotFoundError("bait station not found")

    def replace_fumigation(
        self,
        report_id: str,
        actor_id: str,
        permissions: list[str],
        payload: FumigationReplaceRequest,
    ) -> Any:
        with self._session() as session:
            report = self._editable_report(session, report_id, actor_id, permissions)
            self._store.replace_fumigation(
                session,
                report.id,
                areas=payload.areas,
                target_pests=payload.target_pests,
                chemicals=payload.chemicals,
            )
            self._touch(session, report)
            session.commit()
            return self._store.load_detail(session, report.id)["fumigation"]

    def add_insect_monitor(
        self,
        report_id: str,
        actor_id: str,
        permissions: list[str],
        payload: InsectMonitorIn,
    ) -> Any:
        with self._session() as session:
            report = self._editable_report(session, report_id, actor_id, permissions)
            self._invalidate_markings(session, report, INSECT_MONITORS)
            monitor = self._store.add_monitor(session, report.id, payload)
            self._touch(session, report)
            session.commit()
            session.refresh(monitor)
            return monitor

    def update_insect_monitor(
        self,
        report_id: str,
        monitor_id: str,
        actor_id: str,
        permissions: list[str],
        payload: InsectMonitorUpdate,
    ) -> Any:
        with self._session() as session:
            report = self._editable_report(session, report_id, actor_id, permissions)
            monitor = self._sub_entity_call(self._store.update_monitor, session, report.id, monitor_id, payload)
            self._invalidate_markings(session, report, INSECT_MONITORS)
            self._touch(session, report)
            session.commit()
            session.refresh(monitor)
            return monitor

    def delete_insect_monitor(self, report_id: str, monitor_id: str, actor_id: str, permissions: list[str]) -> None:
        with self._session() as session:
            report = self._editable_report(session, report_id, actor_id, permissions)
            self._sub_entity_call(self._store.delete_monitor, session, report.id, monitor_id)
            self._invalidate_markings(session, report, INSECT_MONITORS)
            self._touch(session, report)
            session.commit()
