from __future__ import annotations

from dataclasses import dataclass, field

import structlog
from sqlmodel import Session, SQLModel, func, select

from pestops.domain.models import (
    BaitStation,
    Client,
    EquipmentExpectations,
    InsectMonitor,
    MonitorType,
    Report,
    StationLocation,
    now_utc,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class EquipmentCategory:
    key: str
    column: str
    value: str
    baseline_attr: str
    expected_attr: str


@dataclass(frozen=True)
class EquipmentKind:
    key: str
    model: type[SQLModel]
    count_attr: str
    categories: tuple[EquipmentCategory, ...]


BAIT_STATIONS = EquipmentKind(
    key="bait_stations",
    model=BaitStation,
    count_attr="new_bait_stations_count",
    categories=(
        EquipmentCategory(
            key="bait_inside",
            column="location",
            value=StationLocation.INSIDE,
            baseline_attr="total_bait_stations_inside",
            expected_attr="expected_bait_stations_inside",
        ),
        EquipmentCategory(
            key="bait_outside",
            column="location",
            value=StationLocation.OUTSIDE,
            baseline_attr="total_bait_stations_outside",
            expected_attr="expected_bait_stations_outside",
        ),
    ),
)

INSECT_MONITORS = EquipmentKind(
    key="insect_monitors",
    model=InsectMonitor,
    count_attr="new_insect_monitors_count",
    categories=(
        EquipmentCategory(
            key="monitor_light",
            column="monitor_type",
            value=MonitorType.LIGHT,
            baseline_attr="total_insect_monitors_light",
            expected_attr="expected_insect_monitors_light",
        ),
        EquipmentCategory(
            key="monitor_box",
            column="monitor_type",
            value=MonitorType.BOX,
            baseline_attr="total_insect_monitors_box",
            expected_attr="expected_insect_monitors_box",
        ),
    ),
)

EQUIPMENT_KINDS: tuple[EquipmentKind, ...] = (BAIT_STATIONS, INSECT_MONITORS)


@dataclass
class CategoryResult:
    key: str
    expected: int
    actual: int
    new_count: int


@dataclass
class KindResult:
    key: str
    new_count: int = 0
    skipped: bool = False
    categories: list[CategoryResult] = field(default_factory=list)


@dataclass
class ReconcileResult:
    report_id: str
    kinds: dict[str, KindResult] = field(default_factory=dict)

    @property
    def new_bait_stations_count(self) -> int:
        return self.kinds[BAIT_STATIONS.key].new_count

    @property
    def new_insect_monitors_count(self) -> int:
        return self.kinds[INSECT_MONITORS.key].new_count

    @property
    def bait_stations_skipped(self) -> bool:
        return self.kinds[BAIT_STATIONS.key].skipped

    @property
    def insect_monitors_skipped(self) -> bool:
        return self.kinds[INSECT_MONITORS.key].skipped


def count_new_additions(actual: int, expected: int) -> int:
    return max(0, actual - expected)


class EquipmentReconciler:
    """Classifies a report's equipment as pre-existing or newly installed.

    Within one category (inside/outside stations, light/box monitors) rows are
    taken in insertion order; the first ``expected`` rows are pre-existing and
    every row past that position is a new addition. Afterwards the client's
    baseline for each equipment group the report carries is overwritten with
    the report's actual counts.
    """

    def reconcile(
        self,
        session: Session,
        report: Report,
        client: Client,
        overrides: EquipmentExpectations | None = None,
        *,
        force: bool = False,
        ratchet: bool = True,
    ) -> ReconcileResult:
        result = ReconcileResult(report_id=report.id)
        for kind in EQUIPMENT_KINDS:
            result.kinds[kind.key] = self._reconcile_kind(
                session, report, client, kind, overrides, force=force, ratchet=ratchet
            )

        now = now_utc()
        report.updated_at = now
        session.add(report)
        if ratchet:
            client.updated_at = now
            session.add(client)
        session.flush()

        logger.info(
            "equipment_reconciled",
            report_id=report.id,
            client_id=client.id,
            new_bait_stations=result.new_bait_stations_count,
            new_insect_monitors=result.new_insect_monitors_count,
            bait_stations_skipped=result.bait_stations_skipped,
            insect_monitors_skipped=result.insect_monitors_skipped,
        )
        return result

    def has_markings(self, session: Session, report_id: str, kind: EquipmentKind) -> bool:
        model = kind.model
        row = session.exec(
            select(model.id)  # type: ignore[attr-defined]
            .where(model.report_id == report_id)  # type: ignore[attr-defined]
            .where(model.is_new_addition == True)  # type: ignore[attr-defined]  # noqa: E712
            .limit(1)
        ).first()
        return row is not None

    def count_markings(self, session: Session, report_id: str, kind: EquipmentKind) -> int:
        model = kind.model
        total = session.exec(
            select(func.count())
            .select_from(model)
            .where(model.report_id == report_id)  # type: ignore[attr-defined]
            .where(model.is_new_addition == True)  # type: ignore[attr-defined]  # noqa: E712
        ).one()
        return int(total)

    def clear_markings(self, session: Session, report_id: str, kind: EquipmentKind) -> None:
        model = kind.model
        rows = session.exec(
            select(model)
            .where(model.report_id == report_id)  # type: ignore[attr-defined]
            .where(model.is_new_addition == True)  # type: ignore[attr-defined]  # noqa: E712
        ).all()
        for row in rows:
            row.is_new_addition = False  # type: ignore[attr-defined]
            session.add(row)
        session.flush()

    def ordered_rows(
        self,
        session: Session,
        report_id: str,
        kind: EquipmentKind,
        category: EquipmentCategory,
    ) -> list[SQLModel]:
        model = kind.model
        statement = (
            select(model)
            .where(model.report_id == report_id)  # type: ignore[attr-defined]
            .where(getattr(model, category.column) == category.value)
            .order_by(model.sort_order, model.id)  # type: ignore[attr-defined]
        )
        return list(session.exec(statement).all())

    def _expected_for(
        self,
        report: Report,
        client: Client,
        category: EquipmentCategory,
        overrides: EquipmentExpectations | None,
    ) -> int:
        if overrides is not None:
            override = getattr(overrides, category.expected_attr)
            if override is not None:
                return int(override)
        snapshot = getattr(report, category.expected_attr)
        if snapshot is not None:
            return int(snapshot)
        return int(getattr(client, category.baseline_attr) or 0)

    def _reconcile_kind(
        self,
        session: Session,
        report: Report,
        client: Client,
        kind: EquipmentKind,
        overrides: EquipmentExpectations | None,
        *,
        force: bool,
        ratchet: bool,
    ) -> KindResult:
        outcome = KindResult(key=kind.key)
        rows_by_category = {
            category.key: self.ordered_rows(session, report.id, kind, category) for category in kind.categories
        }
        if not any(rows_by_category.values()):
            setattr(report, kind.count_attr, 0)
            return outcome

        outcome.skipped = not force and self.has_markings(session, report.id, kind)
        for category in kind.categories:
            rows = rows_by_category[category.key]
            expected = self._expected_for(report, client, category, overrides)
            new_count = count_new_additions(len(rows), expected)
            if not outcome.skipped:
                for position, row in enumerate(rows):
                    row.is_new_addition = position >= expected  # type: ignore[attr-defined]
                    session.add(row)
            outcome.categories.append(
                CategoryResult(key=category.key, expected=expected, actual=len(rows), new_count=new_count)
            )
            setattr(report, category.expected_attr, expected)
            if ratchet:
                setattr(client, category.baseline_attr, len(rows))

        session.flush()
        if outcome.skipped:
            outcome.new_count = self.count_markings(session, report.id, kind)
        else:
            outcome.new_count = sum(item.new_count for item in outcome.categories)
        setattr(report, kind.count_attr, outcome.new_count)
        return outcome
