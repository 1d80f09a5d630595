from __future__ import annotations

import pytest
from sqlmodel import Session, SQLModel, create_engine, select

from pestops.domain.models import EventEnvelope, EventRecord
from pestops.infra import events
from pestops.infra.events import EventBus


def test_event_bus_publish_and_subscribe() -> None:
    engine = create_engine("sqlite:///:memory:")
    SQLModel.metadata.create_all(engine)

    bus = EventBus()
    seen: list[str] = []

    def handler(event: EventEnvelope) -> None:
        seen.append(event.event_id)

    event = EventEnvelope(
        event_type="report.submitted",
        actor_id="pco-1",
        payload={"report_id": "report-1"},
    )
    bus.subscribe("report.submitted", handler)

    with Session(engine) as session:
        bus.publish(event, session=session)
        session.commit()

    with Session(engine) as session:
        stored = session.exec(select(EventRecord)).all()

    assert len(stored) == 1
    assert stored[0].event_id == event.event_id
    assert stored[0].payload == {"report_id": "report-1"}
    assert seen == [event.event_id]


def test_failing_handler_does_not_block_other_subscribers() -> None:
    engine = create_engine("sqlite:///:memory:")
    SQLModel.metadata.create_all(engine)

    bus = EventBus()
    seen: list[str] = []

    def broken(_event: EventEnvelope) -> None:
        raise RuntimeError("mail server down")

    bus.subscribe("report.approved", broken)
    bus.subscribe("report.approved", lambda event: seen.append(event.event_type))
    bus.subscribe("*", lambda event: seen.append(f"any:{event.event_type}"))

    with Session(engine) as session:
        bus.publish(EventEnvelope(event_type="report.approved", payload={}), session=session)
        session.commit()

    assert seen == ["report.approved", "any:report.approved"]


def test_emit_swallows_storage_failures(monkeypatch: pytest.MonkeyPatch) -> None:
    engine = create_engine("sqlite:///:memory:")
    monkeypatch.setattr(events, "engine", engine)

    bus = EventBus()
    seen: list[str] = []
    bus.subscribe("report.declined", lambda event: seen.append(event.event_id))

    bus.emit("report.declined", {"report_id": "report-1"})

    assert seen == []


def test_unsubscribe_stops_delivery() -> None:
    engine = create_engine("sqlite:///:memory:")
    SQLModel.metadata.create_all(engine)

    bus = EventBus()
    seen: list[str] = []

    def handler(event: EventEnvelope) -> None:
        seen.append(event.event_id)

    bus.subscribe("report.archived", handler)
    bus.subscribe("report.archived", handler)
    bus.unsubscribe("report.archived", handler)

    with Session(engine) as session:
        bus.publish(EventEnvelope(event_type="report.archived", payload={}), session=session)
        session.commit()

    assert seen == []
