from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from typing import Any

import structlog
from sqlmodel import Session

from pestops.domain.models import EventEnvelope, EventRecord
from pestops.infra.db import engine

EventHandler = Callable[[EventEnvelope], None]

logger = structlog.get_logger(__name__)


class EventBus:
    """In-process fan-out of lifecycle events.

    Events are recorded first, then handed to every subscriber of their type
    (and of ``"*"``). A failing subscriber is logged and skipped so that it can
    never affect the publisher or the other subscribers.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        if handler not in self._subscribers[event_type]:
            self._subscribers[event_type].append(handler)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        if event_type in self._subscribers and handler in self._subscribers[event_type]:
            self._subscribers[event_type].remove(handler)

    def publish(self, event: EventEnvelope, session: Session | None = None) -> None:
        should_commit = session is None
        if session is None:
            session = Session(engine)
        try:
            record = EventRecord(
                event_id=event.event_id,
                event_type=event.event_type,
                ts=event.ts,
                actor_id=event.actor_id,
                payload=event.payload,
            )
            session.add(record)
            if should_commit:
                session.commit()
        finally:
            if should_commit:
                session.close()

        handlers = [*self._subscribers.get(event.event_type, []), *self._subscribers.get("*", [])]
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "event_handler_failed",
                    event_type=event.event_type,
                    event_id=event.event_id,
                    handler=getattr(handler, "__qualname__", repr(handler)),
                )

    def publish_dict(
        self,
        event_type: str,
        payload: dict[str, Any],
        actor_id: str | None = None,
    ) -> EventEnvelope:
        event = EventEnvelope(event_type=event_type, actor_id=actor_id, payload=payload)
        self.publish(event)
        return event

    def emit(self, event_type: str, payload: dict[str, Any], actor_id: str | None = None) -> None:
        """Fire-and-forget publish: nothing raised here reaches the caller."""
        try:
            self.publish_dict(event_type, payload, actor_id=actor_id)
        except Exception:
            logger.exception("event_publish_failed", event_type=event_type)


event_bus = EventBus()
