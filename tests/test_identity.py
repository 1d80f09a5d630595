from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlmodel import SQLModel, create_engine

from pestops import main as app_main
from pestops.infra import db, events


@pytest.fixture()
def identity_client(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> Generator[TestClient, None, None]:
    db_path = tmp_path / "identity_test.db"
    test_engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(test_engine, "connect")
    def _enable_foreign_keys(dbapi_connection: object, _connection_record: object) -> None:
        cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    SQLModel.metadata.create_all(test_engine)
    monkeypatch.setattr(db, "engine", test_engine)
    monkeypatch.setattr(events, "engine", test_engine)
    client = TestClient(app_main.app)
    yield client
    client.close()


def _auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _bootstrap_admin(client: TestClient, username: str, password: str) -> None:
    response = client.post(
        "/api/identity/bootstrap-admin",
        json={"username": username, "name": "Office Admin", "password": password},
    )
    assert response.status_code == 201


def _login(client: TestClient, username: str, password: str) -> str:
    response = client.post(
        "/api/identity/dev-login",
        json={"username": username, "password": password},
    )
    assert response.status_code == 200
    return response.json()["access_token"]


def test_bootstrap_admin_only_once(identity_client: TestClient) -> None:
    _bootstrap_admin(identity_client, "admin", "admin-pass")

    again = identity_client.post(
        "/api/identity/bootstrap-admin",
        json={"username": "admin2", "name": "Second", "password": "x"},
    )
    assert again.status_code == 409


def test_dev_login_returns_role_permissions(identity_client: TestClient) -> None:
    _bootstrap_admin(identity_client, "admin", "admin-pass")

    response = identity_client.post(
        "/api/identity/dev-login",
        json={"username": "admin", "password": "admin-pass"},
    )
    assert response.status_code == 200
    assert sorted(response.json()["permissions"]) == ["client.write", "identity.write", "report.review"]

    bad = identity_client.post(
        "/api/identity/dev-login",
        json={"username": "admin", "password": "wrong"},
    )
    assert bad.status_code == 401


def test_create_user_and_read_me(identity_client: TestClient) -> None:
    _bootstrap_admin(identity_client, "admin", "admin-pass")
    admin_token = _login(identity_client, "admin", "admin-pass")

    created = identity_client.post(
        "/api/identity/users",
        json={"username": "tech", "name": "Field Tech", "password": "tech-pass", "role": "pco"},
        headers=_auth_header(admin_token),
    )
    assert created.status_code == 201
    assert created.json()["role"] == "pco"

    duplicate = identity_client.post(
        "/api/identity/users",
        json={"username": "tech", "name": "Other", "password": "x"},
        headers=_auth_header(admin_token),
    )
    assert duplicate.status_code == 409

    tech_token = _login(identity_client, "tech", "tech-pass")
    me = identity_client.get("/api/identity/me", headers=_auth_header(tech_token))
    assert me.status_code == 200
    assert me.json()["id"] == created.json()["id"]


def test_technician_cannot_manage_users_or_review(identity_client: TestClient) -> None:
    _bootstrap_admin(identity_client, "admin", "admin-pass")
    admin_token = _login(identity_client, "admin", "admin-pass")
    identity_client.post(
        "/api/identity/users",
        json={"username": "tech", "name": "Field Tech", "password": "tech-pass"},
        headers=_auth_header(admin_token),
    )
    tech_token = _login(identity_client, "tech", "tech-pass")

    forbidden = identity_client.post(
        "/api/identity/users",
        json={"username": "sneaky", "name": "Sneaky", "password": "x"},
        headers=_auth_header(tech_token),
    )
    assert forbidden.status_code == 403

    review = identity_client.post(
        "/api/reports/any-report/approve",
        headers=_auth_header(tech_token),
    )
    assert review.status_code == 403


def test_missing_or_invalid_token_is_rejected(identity_client: TestClient) -> None:
    assert identity_client.get("/api/identity/me").status_code == 401
    response = identity_client.get("/api/identity/me", headers=_auth_header("not-a-token"))
    assert response.status_code == 401
