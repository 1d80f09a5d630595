from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError
from sqlmodel import Session, SQLModel, func, select

from pestops.domain.models import (
    BaitStation,
    BaitStationIn,
    BaitStationRead,
    BaitStationUpdate,
    FumigationArea,
    FumigationAreaIn,
    FumigationAreaRead,
    FumigationChemical,
    FumigationChemicalIn,
    FumigationChemicalRead,
    FumigationIn,
    FumigationRead,
    FumigationTargetPest,
    FumigationTargetPestIn,
    FumigationTargetPestRead,
    InsectMonitor,
    InsectMonitorIn,
    InsectMonitorRead,
    InsectMonitorUpdate,
    StationChemical,
    StationChemicalIn,
    StationChemicalRead,
    now_utc,
)

RowT = TypeVar("RowT", bound=SQLModel)
ItemT = TypeVar("ItemT", bound=BaseModel)

STATION_ITEM_EXCLUDE = {"id", "chemicals", "is_new_addition"}
MONITOR_ITEM_EXCLUDE = {"id", "is_new_addition"}


class SubEntityError(Exception):
    pass


class NotFoundError(SubEntityError):
    pass


class InvalidPayloadError(SubEntityError):
    pass


@dataclass
class DiffResult:
    inserted: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)


@dataclass
class SubEntityCounts:
    bait_stations: int
    fumigation_areas: int
    fumigation_target_pests: int
    insect_monitors: int


class SubEntityStore:
    """Persists a report's child collections inside the caller's unit of work.

    Nothing here commits: every method only adds, deletes and flushes on the
    session it is given.
    """

    # reads

    def stations(self, session: Session, report_id: str) -> list[BaitStation]:
        statement = (
            select(BaitStation)
            .where(BaitStation.report_id == report_id)
            .order_by(BaitStation.sort_order, BaitStation.id)
        )
        return list(session.exec(statement).all())

    def monitors(self, session: Session, report_id: str) -> list[InsectMonitor]:
        statement = (
            select(InsectMonitor)
            .where(InsectMonitor.report_id == report_id)
            .order_by(InsectMonitor.sort_order, InsectMonitor.id)
        )
        return list(session.exec(statement).all())

    def station_chemicals(self, session: Session, station_ids: Sequence[str]) -> dict[str, list[StationChemical]]:
        grouped: dict[str, list[StationChemical]] = {station_id: [] for station_id in station_ids}
        if not station_ids:
            return grouped
        rows = session.exec(select(StationChemical).where(StationChemical.station_id.in_(station_ids))).all()  # type: ignore[attr-defined]
        for row in rows:
            grouped.setdefault(row.station_id, []).append(row)
        return grouped

    def _report_rows(self, session: Session, model: type[RowT], report_id: str) -> list[RowT]:
        return list(session.exec(select(model).where(model.report_id == report_id)).all())  # type: ignore[attr-defined]

    def counts(self, session: Session, report_id: str) -> SubEntityCounts:
        def _count(model: type[SQLModel]) -> int:
            total = session.exec(
                select(func.count()).select_from(model).where(model.report_id == report_id)  # type: ignore[attr-defined]
            ).one()
            return int(total)

        return SubEntityCounts(
            bait_stations=_count(BaitStation),
            fumigation_areas=_count(FumigationArea),
            fumigation_target_pests=_count(FumigationTargetPest),
            insect_monitors=_count(InsectMonitor),
        )

    def load_detail(self, session: Session, report_id: str) -> dict[str, Any]:
        stations = self.stations(session, report_id)
        chemicals = self.station_chemicals(session, [station.id for station in stations])
        station_reads = []
        for station in stations:
            read = BaitStationRead.model_validate(station)
            read.chemicals = [StationChemicalRead.model_validate(item) for item in chemicals.get(station.id, [])]
            station_reads.append(read)
        fumigation = FumigationRead(
            areas=[
                FumigationAreaRead.model_validate(item)
                for item in self._report_rows(session, FumigationArea, report_id)
            ],
            target_pests=[
                FumigationTargetPestRead.model_validate(item)
                for item in self._report_rows(session, FumigationTargetPest, report_id)
            ],
            chemicals=[
                FumigationChemicalRead.model_validate(item)
                for item in self._report_rows(session, FumigationChemical, report_id)
            ],
        )
        return {
            "bait_stations": station_reads,
            "fumigation": fumigation,
            "insect_monitors": [InsectMonitorRead.model_validate(item) for item in self.monitors(session, report_id)],
        }

    # full replace

    def clear_all(self, session: Session, report_id: str) -> None:
        stations = self.stations(session, report_id)
        for rows in self.station_chemicals(session, [station.id for station in stations]).values():
            for row in rows:
                session.delete(row)
        session.flush()
        for station in stations:
            session.delete(station)
        for model in (InsectMonitor, FumigationArea, FumigationTargetPest, FumigationChemical):
            for row in self._report_rows(session, model, report_id):
                session.delete(row)
        session.flush()

    def replace_all(
        self,
        session: Session,
        report_id: str,
        *,
        bait_stations: Sequence[BaitStationIn],
        fumigation: FumigationIn | None,
        insect_monitors: Sequence[InsectMonitorIn],
    ) -> None:
        self.clear_all(session, report_id)
        for position, item in enumerate(bait_stations, start=1):
            self._insert_station(session, report_id, item, sort_order=position)
        for position, item in enumerate(insect_monitors, start=1):
            self._insert_monitor(session, report_id, item, sort_order=position)
        if fumigation is not None:
            self._insert_fumigation(
                session,
                report_id,
                areas=fumigation.areas,
                target_pests=fumigation.target_pests,
                chemicals=fumigation.chemicals,
            )
        session.flush()

    def replace_fumigation(
        self,
        session: Session,
        report_id: str,
        *,
        areas: Sequence[FumigationAreaIn] | None,
        target_pests: Sequence[FumigationTargetPestIn] | None,
        chemicals: Sequence[FumigationChemicalIn] | None,
    ) -> None:
        replacements: list[tuple[type[SQLModel], Sequence[Any] | None]] = [
            (FumigationArea, areas),
            (FumigationTargetPest, target_pests),
            (FumigationChemical, chemicals),
        ]
        for model, items in replacements:
            if items is None:
                continue
            for row in self._report_rows(session, model, report_id):
                session.delete(row)
        session.flush()
        self._insert_fumigation(
            session,
            report_id,
            areas=areas or [],
            target_pests=target_pests or [],
            chemicals=chemicals or [],
        )
        session.flush()

    # single items

    def add_station(self, session: Session, report_id: str, item: BaitStationIn) -> BaitStation:
        sort_order = self._next_sort_order(session, BaitStation, report_id)
        station = self._insert_station(session, report_id, item, sort_order=sort_order)
        session.flush()
        return station

    def update_station(
        self,
        session: Session,
        report_id: str,
        station_id: str,
        payload: BaitStationUpdate,
    ) -> BaitStation:
        station = self._get_station(session, report_id, station_id)
        changes = payload.model_dump(exclude_unset=True, exclude={"chemicals"})
        if not changes and payload.chemicals is None:
            raise InvalidPayloadError("No valid fields to update")
        if changes:
            current = BaitStationIn.model_fields.keys() - STATION_ITEM_EXCLUDE
            merged = {name: getattr(station, name) for name in current}
            merged.update(changes)
            self._validate_merged(BaitStationIn, merged)
            for name, value in changes.items():
                setattr(station, name, value)
            station.updated_at = now_utc()
            session.add(station)
        if payload.chemicals is not None:
            self._replace_station_chemicals(session, station.id, payload.chemicals)
        session.flush()
        return station

    def delete_station(self, session: Session, report_id: str, station_id: str) -> None:
        station = self._get_station(session, report_id, station_id)
        self._delete_station(session, station)
        session.flush()

    def add_monitor(self, session: Session, report_id: str, item: InsectMonitorIn) -> InsectMonitor:
        sort_order = self._next_sort_order(session, InsectMonitor, report_id)
        monitor = self._insert_monitor(session, report_id, item, sort_order=sort_order)
        session.flush()
        return monitor

    def update_monitor(
        self,
        session: Session,
        report_id: str,
        monitor_id: str,
        payload: InsectMonitorUpdate,
    ) -> InsectMonitor:
        monitor = self._get_monitor(session, report_id, monitor_id)
        changes = payload.model_dump(exclude_unset=True)
        if not changes:
            raise InvalidPayloadError("No valid fields to update")
        current = InsectMonitorIn.model_fields.keys() - MONITOR_ITEM_EXCLUDE
        merged = {name: getattr(monitor, name) for name in current}
        merged.update(changes)
        self._validate_merged(InsectMonitorIn, merged)
        for name, value in changes.items():
            setattr(monitor, name, value)
        session.add(monitor)
        session.flush()
        return monitor

    def delete_monitor(self, session: Session, report_id: str, monitor_id: str) -> None:
        monitor = self._get_monitor(session, report_id, monitor_id)
        session.delete(monitor)
        session.flush()

    # diff mode

    def diff_stations(self, session: Session, report_id: str, incoming: Sequence[BaitStationIn]) -> DiffResult:
        def _update(row: BaitStation, item: BaitStationIn) -> None:
            for name, value in item.model_dump(exclude=STATION_ITEM_EXCLUDE).items():
                setattr(row, name, value)
            row.updated_at = now_utc()
            session.add(row)
            self._replace_station_chemicals(session, row.id, item.chemicals)

        def _insert(item: BaitStationIn) -> BaitStation:
            sort_order = self._next_sort_order(session, BaitStation, report_id)
            return self._insert_station(session, report_id, item, sort_order=sort_order)

        return self._reconcile_collection(
            session,
            existing=self.stations(session, report_id),
            incoming=incoming,
            update=_update,
            insert=_insert,
            delete=lambda row: self._delete_station(session, row),
            label="bait station",
        )

    def diff_monitors(self, session: Session, report_id: str, incoming: Sequence[InsectMonitorIn]) -> DiffResult:
        def _update(row: InsectMonitor, item: InsectMonitorIn) -> None:
            for name, value in item.model_dump(exclude=MONITOR_ITEM_EXCLUDE).items():
                setattr(row, name, value)
            session.add(row)

        def _insert(item: InsectMonitorIn) -> InsectMonitor:
            sort_order = self._next_sort_order(session, InsectMonitor, report_id)
            return self._insert_monitor(session, report_id, item, sort_order=sort_order)

        return self._reconcile_collection(
            session,
            existing=self.monitors(session, report_id),
            incoming=incoming,
            update=_update,
            insert=_insert,
            delete=session.delete,
            label="insect monitor",
        )

    def _reconcile_collection(
        self,
        session: Session,
        *,
        existing: Sequence[RowT],
        incoming: Sequence[ItemT],
        update: Callable[[RowT, ItemT], None],
        insert: Callable[[ItemT], RowT],
        delete: Callable[[RowT], None],
        label: str,
    ) -> DiffResult:
        by_id = {row.id: row for row in existing}  # type: ignore[attr-defined]
        incoming_ids = [item.id for item in incoming if getattr(item, "id", None)]  # type: ignore[attr-defined]
        unknown = [item_id for item_id in incoming_ids if item_id not in by_id]
        if unknown:
            raise NotFoundError(f"{label} not found on report: {', '.join(unknown)}")
        if len(set(incoming_ids)) != len(incoming_ids):
            raise InvalidPayloadError(f"duplicate {label} id in payload")

        result = DiffResult()
        for row_id in sorted(by_id.keys() - set(incoming_ids)):
            delete(by_id[row_id])
            result.deleted.append(row_id)
        session.flush()

        for item in incoming:
            item_id = getattr(item, "id", None)
            if item_id:
                update(by_id[item_id], item)
                result.updated.append(item_id)
            else:
                row = insert(item)
                session.flush()
                result.inserted.append(row.id)  # type: ignore[attr-defined]
        session.flush()
        return result

    # helpers

    def _get_station(self, session: Session, report_id: str, station_id: str) -> BaitStation:
        station = session.exec(
            select(BaitStation).where(BaitStation.report_id == report_id).where(BaitStation.id == station_id)
        ).first()
        if station is None:
            raise NotFoundError("bait station not found")
        return station

    def _get_monitor(self, session: Session, report_id: str, monitor_id: str) -> InsectMonitor:
        monitor = session.exec(
            select(InsectMonitor).where(InsectMonitor.report_id == report_id).where(InsectMonitor.id == monitor_id)
        ).first()
        if monitor is None:
            raise NotFoundError("insect monitor not found")
        return monitor

    def _validate_merged(self, schema: type[BaseModel], values: dict[str, Any]) -> None:
        try:
            schema.model_validate(values)
        except ValidationError as exc:
            messages = [str(error.get("msg", "")) for error in exc.errors()]
            raise InvalidPayloadError("; ".join(messages) or "invalid payload") from exc

    def _next_sort_order(self, session: Session, model: type[SQLModel], report_id: str) -> int:
        current = session.exec(
            select(func.max(model.sort_order)).where(model.report_id == report_id)  # type: ignore[attr-defined]
        ).one()
        return int(current or 0) + 1

    def _insert_station(
        self,
        session: Session,
        report_id: str,
        item: BaitStationIn,
        *,
        sort_order: int,
    ) -> BaitStation:
        station = BaitStation(
            report_id=report_id,
            sort_order=sort_order,
            is_new_addition=bool(item.is_new_addition),
            **item.model_dump(exclude=STATION_ITEM_EXCLUDE),
        )
        session.add(station)
        session.flush()
        for chemical in item.chemicals:
            session.add(StationChemical(station_id=station.id, **chemical.model_dump()))
        return station

    def _insert_monitor(
        self,
        session: Session,
        report_id: str,
        item: InsectMonitorIn,
        *,
        sort_order: int,
    ) -> InsectMonitor:
        monitor = InsectMonitor(
            report_id=report_id,
            sort_order=sort_order,
            is_new_addition=bool(item.is_new_addition),
            **item.model_dump(exclude=MONITOR_ITEM_EXCLUDE),
        )
        session.add(monitor)
        return monitor

    def _insert_fumigation(
        self,
        session: Session,
        report_id: str,
        *,
        areas: Sequence[FumigationAreaIn],
        target_pests: Sequence[FumigationTargetPestIn],
        chemicals: Sequence[FumigationChemicalIn],
    ) -> None:
        for area in areas:
            session.add(FumigationArea(report_id=report_id, **area.model_dump()))
        for pest in target_pests:
            session.add(FumigationTargetPest(report_id=report_id, **pest.model_dump()))
        for chemical in chemicals:
            session.add(FumigationChemical(report_id=report_id, **chemical.model_dump()))

    def _replace_station_chemicals(
        self,
        session: Session,
        station_id: str,
        chemicals: Sequence[StationChemicalIn],
    ) -> None:
        for row in session.exec(select(StationChemical).where(StationChemical.station_id == station_id)).all():
            session.delete(row)
        session.flush()
        for chemical in chemicals:
            session.add(StationChemical(station_id=station_id, **chemical.model_dump()))

    def _delete_station(self, session: Session, station: BaitStation) -> None:
        for row in session.exec(select(StationChemical).where(StationChemical.station_id == station.id)).all():
            session.delete(row)
        session.flush()
        session.delete(station)
