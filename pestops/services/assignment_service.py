from __future__ import annotations

from dataclasses import dataclass

import structlog
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from pestops.domain.models import (
    AssignmentStatus,
    Client,
    ClientPcoAssignment,
    User,
    UserRole,
    now_utc,
)
from pestops.infra.db import get_engine

logger = structlog.get_logger(__name__)


class AssignmentError(Exception):
    pass


class NotFoundError(AssignmentError):
    pass


class ConflictError(AssignmentError):
    def __init__(self, message: str, *, current_pco_id: str | None = None) -> None:
        super().__init__(message)
        self.current_pco_id = current_pco_id


@dataclass
class ReassignOk:
    assignment: ClientPcoAssignment
    created: bool = False


@dataclass
class ReassignConflict:
    client_id: str
    current_pco_id: str
    original_pco_id: str


ReassignResult = ReassignOk | ReassignConflict


class AssignmentManager:
    """Keeps at most one active technician per client.

    The lifecycle methods take the caller's session and never commit; the
    standalone ``assign``/``unassign``/``list_for_client`` operations open
    their own unit of work.
    """

    def _session(self) -> Session:
        return Session(get_engine(), expire_on_commit=False)

    def active_for_client(self, session: Session, client_id: str) -> ClientPcoAssignment | None:
        return session.exec(
            select(ClientPcoAssignment)
            .where(ClientPcoAssignment.client_id == client_id)
            .where(ClientPcoAssignment.status == AssignmentStatus.ACTIVE)
        ).first()

    def is_actively_assigned(self, session: Session, client_id: str, pco_id: str) -> bool:
        active = self.active_for_client(session, client_id)
        return active is not None and active.pco_id == pco_id

    # lifecycle side effects

    def release_on_submit(self, session: Session, client_id: str, pco_id: str, actor_id: str) -> None:
        stale = session.exec(
            select(ClientPcoAssignment)
            .where(ClientPcoAssignment.client_id == client_id)
            .where(ClientPcoAssignment.status == AssignmentStatus.INACTIVE)
        ).all()
        for row in stale:
            session.delete(row)
        session.flush()

        active = self.active_for_client(session, client_id)
        if active is None or active.pco_id != pco_id:
            return
        active.status = AssignmentStatus.INACTIVE
        active.unassigned_at = now_utc()
        active.unassigned_by = actor_id
        session.add(active)
        session.flush()
        logger.info("assignment_released", client_id=client_id, pco_id=pco_id, stale_removed=len(stale))

    def reactivate_on_decline(
        self,
        session: Session,
        client_id: str,
        pco_id: str,
        actor_id: str,
    ) -> ReassignResult:
        active = self.active_for_client(session, client_id)
        if active is not None:
            if active.pco_id == pco_id:
                return ReassignOk(assignment=active)
            return ReassignConflict(client_id=client_id, current_pco_id=active.pco_id, original_pco_id=pco_id)

        latest = session.exec(
            select(ClientPcoAssignment)
            .where(ClientPcoAssignment.client_id == client_id)
            .where(ClientPcoAssignment.pco_id == pco_id)
            .order_by(ClientPcoAssignment.assigned_at.desc())  # type: ignore[attr-defined]
        ).first()
        if latest is not None:
            latest.status = AssignmentStatus.ACTIVE
            latest.assigned_at = now_utc()
            latest.assigned_by = actor_id
            latest.unassigned_at = None
            latest.unassigned_by = None
            self._activate(session, latest)
            return ReassignOk(assignment=latest)

        assignment = ClientPcoAssignment(client_id=client_id, pco_id=pco_id, assigned_by=actor_id)
        self._activate(session, assignment)
        return ReassignOk(assignment=assignment, created=True)

    def force_reassign(self, session: Session, client_id: str, pco_id: str, actor_id: str) -> ClientPcoAssignment:
        rows = session.exec(select(ClientPcoAssignment).where(ClientPcoAssignment.client_id == client_id)).all()
        for row in rows:
            session.delete(row)
        session.flush()
        assignment = ClientPcoAssignment(client_id=client_id, pco_id=pco_id, assigned_by=actor_id)
        self._activate(session, assignment)
        logger.info("assignment_force_reassigned", client_id=client_id, pco_id=pco_id, removed=len(rows))
        return assignment

    def close_on_review(self, session: Session, client_id: str, pco_id: str) -> int:
        rows = session.exec(
            select(ClientPcoAssignment)
            .where(ClientPcoAssignment.client_id == client_id)
            .where(ClientPcoAssignment.pco_id == pco_id)
        ).all()
        for row in rows:
            session.delete(row)
        session.flush()
        return len(rows)

    def _activate(self, session: Session, assignment: ClientPcoAssignment) -> None:
        active = self.active_for_client(session, assignment.client_id)
        if active is not None and active.id != assignment.id:
            raise ConflictError("client already has an active assignment", current_pco_id=active.pco_id)
        session.add(assignment)
        try:
            session.flush()
        except IntegrityError as exc:
            raise ConflictError("client already has an active assignment") from exc

    # standalone operations

    def assign(self, client_id: str, pco_id: str, actor_id: str) -> ClientPcoAssignment:
        with self._session() as session:
            if session.get(Client, client_id) is None:
                raise NotFoundError("client not found")
            pco = session.get(User, pco_id)
            if pco is None or not pco.is_active or pco.role not in {UserRole.PCO, UserRole.BOTH}:
                raise NotFoundError("technician not found")
            active = self.active_for_client(session, client_id)
            if active is not None:
                if active.pco_id == pco_id:
                    return active
                raise ConflictError("client already has an active assignment", current_pco_id=active.pco_id)
            assignment = ClientPcoAssignment(client_id=client_id, pco_id=pco_id, assigned_by=actor_id)
            self._activate(session, assignment)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise ConflictError("client already has an active assignment") from exc
            session.refresh(assignment)
        logger.info("assignment_created", client_id=client_id, pco_id=pco_id, actor_id=actor_id)
        return assignment

    def unassign(self, client_id: str, actor_id: str) -> ClientPcoAssignment:
        with self._session() as session:
            if session.get(Client, client_id) is None:
                raise NotFoundError("client not found")
            active = self.active_for_client(session, client_id)
            if active is None:
                raise NotFoundError("client has no active assignment")
            self.release_on_submit(session, client_id, active.pco_id, actor_id)
            session.commit()
            session.refresh(active)
        logger.info("assignment_terminated", client_id=client_id, pco_id=active.pco_id, actor_id=actor_id)
        return active

    def list_for_client(self, client_id: str) -> list[ClientPcoAssignment]:
        with self._session() as session:
            if session.get(Client, client_id) is None:
                raise NotFoundError("client not found")
            statement = (
                select(ClientPcoAssignment)
                .where(ClientPcoAssignment.client_id == client_id)
                .order_by(ClientPcoAssignment.assigned_at.desc())  # type: ignore[attr-defined]
            )
            return list(session.exec(statement).all())
