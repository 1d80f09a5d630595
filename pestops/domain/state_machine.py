from __future__ import annotations

from enum import StrEnum


class ReportStatus(StrEnum):
    DRAFT = "draft"
    PENDING = "pending"
    DECLINED = "declined"
    APPROVED = "approved"
    ARCHIVED = "archived"


ALLOWED_TRANSITIONS: dict[ReportStatus, set[ReportStatus]] = {
    ReportStatus.DRAFT: {
        ReportStatus.PENDING,
        ReportStatus.APPROVED,
        ReportStatus.DECLINED,
        ReportStatus.ARCHIVED,
    },
    ReportStatus.PENDING: {
        ReportStatus.APPROVED,
        ReportStatus.DECLINED,
        ReportStatus.ARCHIVED,
    },
    ReportStatus.DECLINED: {
        ReportStatus.DRAFT,
        ReportStatus.PENDING,
        ReportStatus.ARCHIVED,
    },
    ReportStatus.APPROVED: {ReportStatus.ARCHIVED},
    ReportStatus.ARCHIVED: set(),
}

EDITABLE_STATUSES: frozenset[ReportStatus] = frozenset({ReportStatus.DRAFT, ReportStatus.DECLINED})
OPEN_STATUSES: frozenset[ReportStatus] = frozenset({ReportStatus.DRAFT, ReportStatus.PENDING})


def can_transition(source: ReportStatus, target: ReportStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(source, set())


def is_editable(status: ReportStatus) -> bool:
    return status in EDITABLE_STATUSES
