from __future__ import annotations

from collections.abc import Iterable

import structlog
from sqlmodel import Session, select

from pestops.domain.models import EventEnvelope, Notification, NotificationType, now_utc
from pestops.infra.db import get_engine
from pestops.infra.events import EventBus
from pestops.services.identity_service import IdentityService

logger = structlog.get_logger(__name__)


class NotificationError(Exception):
    pass


class NotFoundError(NotificationError):
    pass


REVIEW_NOTIFICATIONS: dict[str, tuple[NotificationType, str]] = {
    "report.approved": (NotificationType.REPORT_APPROVED, "Report approved"),
    "report.declined": (NotificationType.REPORT_DECLINED, "Report declined"),
    "report.archived": (NotificationType.REPORT_ARCHIVED, "Report archived"),
}


class NotificationService:
    def __init__(self) -> None:
        self._identity = IdentityService()

    def _session(self) -> Session:
        return Session(get_engine(), expire_on_commit=False)

    def notify(self, user_id: str, type: NotificationType, title: str, body: str) -> Notification:
        with self._session() as session:
            notification = Notification(user_id=user_id, type=type, title=title, message=body)
            session.add(notification)
            session.commit()
            session.refresh(notification)
            return notification

    def notify_many(self, user_ids: Iterable[str], type: NotificationType, title: str, body: str) -> int:
        """Deliver to every recipient; a failed delivery is logged and skipped."""
        delivered = 0
        for user_id in user_ids:
            try:
                self.notify(user_id, type, title, body)
            except Exception:
                logger.exception("notification_dispatch_failed", user_id=user_id, type=str(type))
                continue
            delivered += 1
        return delivered

    def list_for_user(self, user_id: str, unread_only: bool = False) -> list[Notification]:
        with self._session() as session:
            statement = select(Notification).where(Notification.user_id == user_id)
            if unread_only:
                statement = statement.where(Notification.read_at == None)  # noqa: E711
            statement = statement.order_by(Notification.created_at.desc())  # type: ignore[attr-defined]
            return list(session.exec(statement).all())

    def mark_read(self, user_id: str, notification_id: str) -> Notification:
        with self._session() as session:
            notification = session.get(Notification, notification_id)
            if notification is None or notification.user_id != user_id:
                raise NotFoundError("notification not found")
            if notification.read_at is None:
                notification.read_at = now_utc()
                session.add(notification)
                session.commit()
                session.refresh(notification)
            return notification

    # event handlers

    def on_report_submitted(self, event: EventEnvelope) -> None:
        payload = event.payload
        with self._session() as session:
            admin_ids = self._identity.active_admin_ids(session)
        body = f"{payload.get('pco_name') or 'A technician'} submitted a report for {payload.get('company_name')}"
        self.notify_many(admin_ids, NotificationType.REPORT_SUBMITTED, "New report submitted", body)

    def on_report_reviewed(self, event: EventEnvelope) -> None:
        type_, title = REVIEW_NOTIFICATIONS[event.event_type]
        payload = event.payload
        body = f"Your report for {payload.get('company_name')} was {payload.get('status')}"
        if payload.get("admin_notes"):
            body = f"{body}: {payload['admin_notes']}"
        self.notify_many([payload["pco_id"]], type_, title, body)


def register_notification_handlers(bus: EventBus, service: NotificationService | None = None) -> NotificationService:
    service = service or NotificationService()
    bus.subscribe("report.submitted", service.on_report_submitted)
    for event_type in REVIEW_NOTIFICATIONS:
        bus.subscribe(event_type, service.on_report_reviewed)
    return service
