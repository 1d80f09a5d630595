from __future__ import annotations

import structlog
from sqlmodel import Session

from pestops.domain.models import Client, ClientCreate, EquipmentBaseline, now_utc
from pestops.infra.db import get_engine

logger = structlog.get_logger(__name__)


class ClientError(Exception):
    pass


class NotFoundError(ClientError):
    pass


class ClientService:
    def _session(self) -> Session:
        return Session(get_engine(), expire_on_commit=False)

    def create_client(self, payload: ClientCreate) -> Client:
        with self._session() as session:
            client = Client(**payload.model_dump())
            session.add(client)
            session.commit()
            session.refresh(client)
        logger.info("client_created", client_id=client.id)
        return client

    def get_client(self, client_id: str) -> Client:
        with self._session() as session:
            client = session.get(Client, client_id)
            if client is None:
                raise NotFoundError("client not found")
            return client

    def update_baseline(self, client_id: str, payload: EquipmentBaseline) -> Client:
        with self._session() as session:
            client = session.get(Client, client_id)
            if client is None:
                raise NotFoundError("client not found")
            changes = payload.model_dump(exclude_none=True)
            for name, value in changes.items():
                setattr(client, name, value)
            client.updated_at = now_utc()
            session.add(client)
            session.commit()
            session.refresh(client)
        logger.info("client_baseline_updated", client_id=client_id, **changes)
        return client
