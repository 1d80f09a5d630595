from __future__ import annotations

from collections.abc import Generator
from datetime import date
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlmodel import SQLModel, create_engine

from pestops import main as app_main
from pestops.infra import db, events


@pytest.fixture()
def api_client(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[TestClient, None, None]:
    db_path = tmp_path / "report_lifecycle_test.db"
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


def _login(client: TestClient, username: str, password: str) -> str:
    response = client.post("/api/identity/dev-login", json={"username": username, "password": password})
    assert response.status_code == 200
    return response.json()["access_token"]


def _setup_admin(client: TestClient) -> str:
    response = client.post(
        "/api/identity/bootstrap-admin",
        json={"username": "admin", "name": "Office Admin", "password": "admin-pass"},
    )
    assert response.status_code == 201
    return _login(client, "admin", "admin-pass")


def _create_technician(client: TestClient, admin_token: str, username: str) -> tuple[str, str]:
    response = client.post(
        "/api/identity/users",
        json={"username": username, "name": f"Tech {username}", "password": "tech-pass", "role": "pco"},
        headers=_auth_header(admin_token),
    )
    assert response.status_code == 201
    return response.json()["id"], _login(client, username, "tech-pass")


def _create_client(client: TestClient, admin_token: str, inside: int = 0, outside: int = 0) -> str:
    response = client.post(
        "/api/clients",
        json={
            "company_name": "Greenfield Foods",
            "city": "Durban",
            "total_bait_stations_inside": inside,
            "total_bait_stations_outside": outside,
        },
        headers=_auth_header(admin_token),
    )
    assert response.status_code == 201
    return response.json()["id"]


def _assign(client: TestClient, admin_token: str, client_id: str, pco_id: str) -> None:
    response = client.post(
        f"/api/clients/{client_id}/assignments",
        json={"pco_id": pco_id},
        headers=_auth_header(admin_token),
    )
    assert response.status_code == 201


def _station(number: str, location: str) -> dict[str, Any]:
    return {
        "station_number": number,
        "location": location,
        "bait_status": "clean",
        "station_condition": "good",
        "warning_sign_condition": "good",
        "chemicals": [{"chemical_id": "difenacoum", "quantity": 1.5}],
    }


def _complete_payload(client_id: str, stations: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "client_id": client_id,
        "report_type": "bait_inspection",
        "service_date": date.today().isoformat(),
        "pco_signature": "pco-signature",
        "client_signature": "client-signature",
        "client_signature_name": "Jane Manager",
        "bait_stations": stations,
    }


def _assignments(client: TestClient, admin_token: str, client_id: str) -> list[dict[str, Any]]:
    response = client.get(f"/api/clients/{client_id}/assignments", headers=_auth_header(admin_token))
    assert response.status_code == 200
    return response.json()


def _notifications(client: TestClient, token: str) -> list[dict[str, Any]]:
    response = client.get("/api/notifications", headers=_auth_header(token))
    assert response.status_code == 200
    return response.json()


def test_draft_submit_approve_archive_flow(api_client: TestClient) -> None:
    admin_token = _setup_admin(api_client)
    pco_id, pco_token = _create_technician(api_client, admin_token, "tech1")
    client_id = _create_client(api_client, admin_token, inside=2, outside=1)
    _assign(api_client, admin_token, client_id, pco_id)

    create_resp = api_client.post(
        "/api/reports",
        json={
            "client_id": client_id,
            "report_type": "bait_inspection",
            "service_date": date.today().isoformat(),
            "pco_signature": "pco-signature",
        },
        headers=_auth_header(pco_token),
    )
    assert create_resp.status_code == 201
    report = create_resp.json()
    assert report["status"] == "draft"
    report_id = report["id"]

    for number, location in (("I1", "inside"), ("I2", "inside"), ("O1", "outside"), ("I3", "inside"), ("O2", "outside")):
        add_resp = api_client.post(
            f"/api/reports/{report_id}/bait-stations",
            json=_station(number, location),
            headers=_auth_header(pco_token),
        )
        assert add_resp.status_code == 201

    update_resp = api_client.put(
        f"/api/reports/{report_id}",
        json={"client_signature": "client-signature", "client_signature_name": "Jane Manager"},
        headers=_auth_header(pco_token),
    )
    assert update_resp.status_code == 200

    submit_resp = api_client.post(f"/api/reports/{report_id}/submit", headers=_auth_header(pco_token))
    assert submit_resp.status_code == 200
    assert submit_resp.json()["status"] == "pending"
    assert submit_resp.json()["new_bait_stations_count"] == 2

    detail = api_client.get(f"/api/reports/{report_id}", headers=_auth_header(admin_token)).json()
    flags = {item["station_number"]: item["is_new_addition"] for item in detail["bait_stations"]}
    assert flags == {"I1": False, "I2": False, "O1": False, "I3": True, "O2": True}

    client_resp = api_client.get(f"/api/clients/{client_id}", headers=_auth_header(admin_token))
    assert client_resp.json()["total_bait_stations_inside"] == 3
    assert client_resp.json()["total_bait_stations_outside"] == 2

    assignments = _assignments(api_client, admin_token, client_id)
    assert [(item["pco_id"], item["status"]) for item in assignments] == [(pco_id, "inactive")]
    assert [item["type"] for item in _notifications(api_client, admin_token)] == ["report_submitted"]

    approve_resp = api_client.post(
        f"/api/reports/{report_id}/approve",
        json={"recommendations": "Seal the loading bay door"},
        headers=_auth_header(admin_token),
    )
    assert approve_resp.status_code == 200
    assert approve_resp.json()["status"] == "approved"
    assert _assignments(api_client, admin_token, client_id) == []
    assert [item["type"] for item in _notifications(api_client, pco_token)] == ["report_approved"]

    edit_resp = api_client.put(
        f"/api/reports/{report_id}",
        json={"general_remarks": "late change"},
        headers=_auth_header(pco_token),
    )
    assert edit_resp.status_code == 403

    archive_resp = api_client.post(f"/api/reports/{report_id}/archive", headers=_auth_header(admin_token))
    assert archive_resp.status_code == 200
    assert archive_resp.json()["status"] == "archived"

    decline_resp = api_client.post(
        f"/api/reports/{report_id}/decline",
        json={"admin_notes": "Please recount the stations"},
        headers=_auth_header(admin_token),
    )
    assert decline_resp.status_code == 403


def test_submit_lists_missing_requirements(api_client: TestClient) -> None:
    admin_token = _setup_admin(api_client)
    pco_id, pco_token = _create_technician(api_client, admin_token, "tech1")
    client_id = _create_client(api_client, admin_token)
    _assign(api_client, admin_token, client_id, pco_id)

    create_resp = api_client.post(
        "/api/reports",
        json={"client_id": client_id, "report_type": "both", "service_date": date.today().isoformat()},
        headers=_auth_header(pco_token),
    )
    report_id = create_resp.json()["id"]

    submit_resp = api_client.post(f"/api/reports/{report_id}/submit", headers=_auth_header(pco_token))
    assert submit_resp.status_code == 400
    missing = submit_resp.json()["detail"]["missing_requirements"]
    assert "PCO signature is required" in missing
    assert "Client signature name is required" in missing
    assert "At least one bait station is required for bait inspection reports" in missing
    assert "At least one fumigation area is required for fumigation reports" in missing
    assert "At least one target pest is required for fumigation reports" in missing

    detail = api_client.get(f"/api/reports/{report_id}", headers=_auth_header(pco_token)).json()
    assert detail["status"] == "draft"


def test_short_decline_notes_are_rejected_before_any_change(api_client: TestClient) -> None:
    admin_token = _setup_admin(api_client)
    pco_id, pco_token = _create_technician(api_client, admin_token, "tech1")
    client_id = _create_client(api_client, admin_token)
    _assign(api_client, admin_token, client_id, pco_id)
    complete_resp = api_client.post(
        "/api/reports/complete",
        json=_complete_payload(client_id, [_station("1", "inside")]),
        headers=_auth_header(pco_token),
    )
    report_id = complete_resp.json()["id"]

    for notes in ("too short", "          padded   "):
        decline_resp = api_client.post(
            f"/api/reports/{report_id}/decline",
            json={"admin_notes": notes},
            headers=_auth_header(admin_token),
        )
        assert decline_resp.status_code == 400
        assert decline_resp.json()["detail"] == "validation failed"

    detail = api_client.get(f"/api/reports/{report_id}", headers=_auth_header(admin_token)).json()
    assert detail["status"] == "pending"
    assert detail["admin_notes"] is None


def test_decline_conflict_then_force_decline_and_resubmit(api_client: TestClient) -> None:
    admin_token = _setup_admin(api_client)
    first_id, first_token = _create_technician(api_client, admin_token, "tech1")
    second_id, _ = _create_technician(api_client, admin_token, "tech2")
    client_id = _create_client(api_client, admin_token, inside=1)
    _assign(api_client, admin_token, client_id, first_id)

    complete_resp = api_client.post(
        "/api/reports/complete",
        json=_complete_payload(client_id, [_station("1", "inside"), _station("2", "inside")]),
        headers=_auth_header(first_token),
    )
    assert complete_resp.status_code == 201
    assert complete_resp.json()["status"] == "pending"
    assert complete_resp.json()["new_bait_stations_count"] == 1
    report_id = complete_resp.json()["id"]

    _assign(api_client, admin_token, client_id, second_id)

    decline_resp = api_client.post(
        f"/api/reports/{report_id}/decline",
        json={"admin_notes": "Station photos are missing"},
        headers=_auth_header(admin_token),
    )
    assert decline_resp.status_code == 409
    conflict = decline_resp.json()["detail"]
    assert conflict["reason"] == "assignment_conflict"
    assert conflict["current_pco_id"] == second_id
    assert conflict["original_pco_id"] == first_id
    detail = api_client.get(f"/api/reports/{report_id}", headers=_auth_header(admin_token)).json()
    assert detail["status"] == "pending"

    force_resp = api_client.post(
        f"/api/reports/{report_id}/force-decline",
        json={"admin_notes": "Station photos are missing"},
        headers=_auth_header(admin_token),
    )
    assert force_resp.status_code == 200
    assert force_resp.json()["status"] == "declined"
    assignments = _assignments(api_client, admin_token, client_id)
    assert [(item["pco_id"], item["status"]) for item in assignments] == [(first_id, "active")]
    assert [item["type"] for item in _notifications(api_client, first_token)] == ["report_declined"]

    resubmit_payload = _complete_payload(client_id, [_station("1", "inside"), _station("2", "inside"), _station("3", "inside")])
    resubmit_payload.pop("client_id")
    resubmit_resp = api_client.put(
        f"/api/reports/{report_id}/resubmit",
        json=resubmit_payload,
        headers=_auth_header(first_token),
    )
    assert resubmit_resp.status_code == 200
    assert resubmit_resp.json()["status"] == "pending"
    assert resubmit_resp.json()["new_bait_stations_count"] == 2


def test_decline_reactivates_original_assignment(api_client: TestClient) -> None:
    admin_token = _setup_admin(api_client)
    pco_id, pco_token = _create_technician(api_client, admin_token, "tech1")
    client_id = _create_client(api_client, admin_token)
    _assign(api_client, admin_token, client_id, pco_id)
    original_assignment = _assignments(api_client, admin_token, client_id)[0]["id"]

    report_id = api_client.post(
        "/api/reports/complete",
        json=_complete_payload(client_id, [_station("1", "inside")]),
        headers=_auth_header(pco_token),
    ).json()["id"]

    decline_resp = api_client.post(
        f"/api/reports/{report_id}/decline",
        json={"admin_notes": "Client signature is illegible"},
        headers=_auth_header(admin_token),
    )
    assert decline_resp.status_code == 200
    assignments = _assignments(api_client, admin_token, client_id)
    assert [(item["id"], item["status"]) for item in assignments] == [(original_assignment, "active")]


def test_create_guards_assignment_and_duplicates(api_client: TestClient) -> None:
    admin_token = _setup_admin(api_client)
    pco_id, pco_token = _create_technician(api_client, admin_token, "tech1")
    client_id = _create_client(api_client, admin_token)
    payload = {"client_id": client_id, "report_type": "fumigation", "service_date": date.today().isoformat()}

    unassigned_resp = api_client.post("/api/reports", json=payload, headers=_auth_header(pco_token))
    assert unassigned_resp.status_code == 403

    _assign(api_client, admin_token, client_id, pco_id)
    first_resp = api_client.post("/api/reports", json=payload, headers=_auth_header(pco_token))
    assert first_resp.status_code == 201

    duplicate_resp = api_client.post("/api/reports", json=payload, headers=_auth_header(pco_token))
    assert duplicate_resp.status_code == 409
    assert duplicate_resp.json()["detail"] == {
        "reason": "duplicate_draft",
        "existing_report_id": first_resp.json()["id"],
    }


def test_only_draft_reports_can_be_deleted(api_client: TestClient) -> None:
    admin_token = _setup_admin(api_client)
    pco_id, pco_token = _create_technician(api_client, admin_token, "tech1")
    client_id = _create_client(api_client, admin_token)
    _assign(api_client, admin_token, client_id, pco_id)

    draft_id = api_client.post(
        "/api/reports",
        json={"client_id": client_id, "report_type": "bait_inspection", "service_date": date.today().isoformat()},
        headers=_auth_header(pco_token),
    ).json()["id"]
    api_client.post(
        f"/api/reports/{draft_id}/bait-stations",
        json=_station("1", "inside"),
        headers=_auth_header(pco_token),
    )
    delete_resp = api_client.delete(f"/api/reports/{draft_id}", headers=_auth_header(pco_token))
    assert delete_resp.status_code == 204
    assert api_client.get(f"/api/reports/{draft_id}", headers=_auth_header(pco_token)).status_code == 404

    pending_id = api_client.post(
        "/api/reports/complete",
        json=_complete_payload(client_id, [_station("1", "inside")]),
        headers=_auth_header(pco_token),
    ).json()["id"]
    assert api_client.delete(f"/api/reports/{pending_id}", headers=_auth_header(pco_token)).status_code == 403


def test_drafts_are_private_to_their_technician(api_client: TestClient) -> None:
    admin_token = _setup_admin(api_client)
    first_id, first_token = _create_technician(api_client, admin_token, "tech1")
    _, second_token = _create_technician(api_client, admin_token, "tech2")
    client_id = _create_client(api_client, admin_token)
    _assign(api_client, admin_token, client_id, first_id)

    report_id = api_client.post(
        "/api/reports",
        json={"client_id": client_id, "report_type": "bait_inspection", "service_date": date.today().isoformat()},
        headers=_auth_header(first_token),
    ).json()["id"]

    assert api_client.get(f"/api/reports/{report_id}", headers=_auth_header(first_token)).status_code == 200
    assert api_client.get(f"/api/reports/{report_id}", headers=_auth_header(second_token)).status_code == 404
    assert api_client.get(f"/api/reports/{report_id}", headers=_auth_header(admin_token)).status_code == 404


def test_mark_new_equipment_and_pre_fill(api_client: TestClient) -> None:
    admin_token = _setup_admin(api_client)
    pco_id, pco_token = _create_technician(api_client, admin_token, "tech1")
    client_id = _create_client(api_client, admin_token)
    _assign(api_client, admin_token, client_id, pco_id)

    report_id = api_client.post(
        "/api/reports/complete",
        json=_complete_payload(client_id, [_station("1", "inside"), _station("2", "outside")]),
        headers=_auth_header(pco_token),
    ).json()["id"]

    mark_resp = api_client.post(f"/api/reports/{report_id}/mark-new-equipment", headers=_auth_header(admin_token))
    assert mark_resp.status_code == 200
    assert mark_resp.json()["bait_stations_skipped"] is True
    assert mark_resp.json()["new_bait_stations_count"] == 2

    approve_resp = api_client.post(f"/api/reports/{report_id}/approve", headers=_auth_header(admin_token))
    assert approve_resp.status_code == 200

    _assign(api_client, admin_token, client_id, pco_id)
    prefill_resp = api_client.get(f"/api/reports/pre-fill/{client_id}", headers=_auth_header(pco_token))
    assert prefill_resp.status_code == 200
    assert prefill_resp.json()["source_report_id"] == report_id
    assert prefill_resp.json()["bait_stations"] == [
        {"station_number": "1", "location": "inside"},
        {"station_number": "2", "location": "outside"},
    ]


def test_admin_edit_diffs_stations_and_reclassifies(api_client: TestClient) -> None:
    admin_token = _setup_admin(api_client)
    pco_id, pco_token = _create_technician(api_client, admin_token, "tech1")
    client_id = _create_client(api_client, admin_token, inside=1)
    _assign(api_client, admin_token, client_id, pco_id)

    report_id = api_client.post(
        "/api/reports/complete",
        json=_complete_payload(client_id, [_station("1", "inside"), _station("2", "inside")]),
        headers=_auth_header(pco_token),
    ).json()["id"]
    stations = api_client.get(f"/api/reports/{report_id}", headers=_auth_header(admin_token)).json()["bait_stations"]

    kept = {key: value for key, value in stations[0].items() if key not in {"report_id", "chemicals"}}
    edit_resp = api_client.put(
        f"/api/reports/{report_id}/admin",
        json={
            "admin_notes": "Recounted on site",
            "bait_stations": [kept, _station("3", "inside"), _station("4", "inside")],
        },
        headers=_auth_header(admin_token),
    )
    assert edit_resp.status_code == 200
    body = edit_resp.json()
    assert body["admin_notes"] == "Recounted on site"
    assert [item["station_number"] for item in body["bait_stations"]] == ["1", "3", "4"]
    assert body["bait_stations"][0]["id"] == stations[0]["id"]
    assert [item["is_new_addition"] for item in body["bait_stations"]] == [False, True, True]
    assert body["new_bait_stations_count"] == 2


def test_item_routes_build_a_submittable_report(api_client: TestClient) -> None:
    admin_token = _setup_admin(api_client)
    pco_id, pco_token = _create_technician(api_client, admin_token, "tech1")
    client_id = _create_client(api_client, admin_token)
    api_client.patch(
        f"/api/clients/{client_id}/equipment-baseline",
        json={"total_insect_monitors_light": 1},
        headers=_auth_header(admin_token),
    )
    _assign(api_client, admin_token, client_id, pco_id)
    headers = _auth_header(pco_token)

    report_id = api_client.post(
        "/api/reports",
        json={
            "client_id": client_id,
            "report_type": "both",
            "service_date": date.today().isoformat(),
            "pco_signature": "pco-signature",
        },
        headers=headers,
    ).json()["id"]

    station = api_client.post(f"/api/reports/{report_id}/bait-stations", json=_station("1", "inside"), headers=headers)
    station_id = station.json()["id"]
    invalid = api_client.put(
        f"/api/reports/{report_id}/bait-stations/{station_id}",
        json={"station_condition": "damaged"},
        headers=headers,
    )
    assert invalid.status_code == 400
    updated = api_client.put(
        f"/api/reports/{report_id}/bait-stations/{station_id}",
        json={"station_condition": "damaged", "action_taken": "replaced"},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["action_taken"] == "replaced"

    fumigation = api_client.put(
        f"/api/reports/{report_id}/fumigation",
        json={
            "areas": [{"area_name": "Kitchen"}],
            "target_pests": [{"pest_name": "Cockroaches"}],
            "chemicals": [{"chemical_id": "cypermethrin", "quantity": 0.5}],
        },
        headers=headers,
    )
    assert fumigation.status_code == 200
    assert [item["area_name"] for item in fumigation.json()["areas"]] == ["Kitchen"]

    light = api_client.post(
        f"/api/reports/{report_id}/insect-monitors",
        json={"monitor_type": "light", "light_condition": "good", "tubes_replaced": False},
        headers=headers,
    )
    assert light.status_code == 201
    box_ids = [
        api_client.post(
            f"/api/reports/{report_id}/insect-monitors",
            json={"monitor_type": "box", "monitor_number": number},
            headers=headers,
        ).json()["id"]
        for number in ("B1", "B2", "B3")
    ]
    renamed = api_client.put(
        f"/api/reports/{report_id}/insect-monitors/{box_ids[0]}",
        json={"monitor_number": "B1-A"},
        headers=headers,
    )
    assert renamed.json()["monitor_number"] == "B1-A"
    deleted = api_client.delete(f"/api/reports/{report_id}/insect-monitors/{box_ids[2]}", headers=headers)
    assert deleted.status_code == 204

    api_client.put(
        f"/api/reports/{report_id}",
        json={"client_signature": "client-signature", "client_signature_name": "Jane Manager"},
        headers=headers,
    )
    submitted = api_client.post(f"/api/reports/{report_id}/submit", headers=headers)
    assert submitted.status_code == 200
    assert submitted.json()["new_bait_stations_count"] == 1
    assert submitted.json()["new_insect_monitors_count"] == 2

    locked = api_client.post(
        f"/api/reports/{report_id}/insect-monitors",
        json={"monitor_type": "box"},
        headers=headers,
    )
    assert locked.status_code == 403

    unread = api_client.get("/api/notifications", params={"unread_only": True}, headers=_auth_header(admin_token))
    notification_id = unread.json()[0]["id"]
    read = api_client.post(f"/api/notifications/{notification_id}/read", headers=_auth_header(admin_token))
    assert read.status_code == 200
    assert read.json()["read_at"] is not None
    remaining = api_client.get("/api/notifications", params={"unread_only": True}, headers=_auth_header(admin_token))
    assert remaining.json() == []


def test_required_report_fields_cannot_be_cleared(api_client: TestClient) -> None:
    admin_token = _setup_admin(api_client)
    pco_id, pco_token = _create_technician(api_client, admin_token, "tech1")
    client_id = _create_client(api_client, admin_token)
    _assign(api_client, admin_token, client_id, pco_id)
    report_id = api_client.post(
        "/api/reports",
        json={
            "client_id": client_id,
            "report_type": "bait_inspection",
            "service_date": date.today().isoformat(),
            "next_service_date": "2999-01-01",
        },
        headers=_auth_header(pco_token),
    ).json()["id"]

    for body in ({"service_date": None}, {"report_type": None}):
        response = api_client.put(f"/api/reports/{report_id}", json=body, headers=_auth_header(pco_token))
        assert response.status_code == 400
        assert response.json()["detail"] == "validation failed"

    cleared_next = api_client.put(
        f"/api/reports/{report_id}",
        json={"next_service_date": None},
        headers=_auth_header(pco_token),
    )
    assert cleared_next.status_code == 200
    assert cleared_next.json()["next_service_date"] is None

    api_client.delete(f"/api/reports/{report_id}", headers=_auth_header(pco_token))
    completed_id = api_client.post(
        "/api/reports/complete",
        json=_complete_payload(client_id, [_station("1", "inside")]),
        headers=_auth_header(pco_token),
    ).json()["id"]
    admin_resp = api_client.put(
        f"/api/reports/{completed_id}/admin",
        json={"service_date": None},
        headers=_auth_header(admin_token),
    )
    assert admin_resp.status_code == 400
    detail = api_client.get(f"/api/reports/{completed_id}", headers=_auth_header(admin_token)).json()
    assert detail["service_date"] == date.today().isoformat()


def test_marking_a_draft_leaves_client_baseline_alone(api_client: TestClient) -> None:
    admin_token = _setup_admin(api_client)
    pco_id, pco_token = _create_technician(api_client, admin_token, "tech1")
    _, other_token = _create_technician(api_client, admin_token, "tech2")
    client_id = _create_client(api_client, admin_token, inside=1)
    _assign(api_client, admin_token, client_id, pco_id)
    headers = _auth_header(pco_token)

    report_id = api_client.post(
        "/api/reports",
        json={"client_id": client_id, "report_type": "bait_inspection", "service_date": date.today().isoformat()},
        headers=headers,
    ).json()["id"]
    for number in ("1", "2", "3"):
        api_client.post(f"/api/reports/{report_id}/bait-stations", json=_station(number, "inside"), headers=headers)

    hidden = api_client.post(f"/api/reports/{report_id}/mark-new-equipment", headers=_auth_header(other_token))
    assert hidden.status_code == 404

    marked = api_client.post(f"/api/reports/{report_id}/mark-new-equipment", headers=headers)
    assert marked.status_code == 200
    assert marked.json()["new_bait_stations_count"] == 2
    baseline = api_client.get(f"/api/clients/{client_id}", headers=_auth_header(admin_token)).json()
    assert baseline["total_bait_stations_inside"] == 1

    assert api_client.delete(f"/api/reports/{report_id}", headers=headers).status_code == 204
    baseline = api_client.get(f"/api/clients/{client_id}", headers=_auth_header(admin_token)).json()
    assert baseline["total_bait_stations_inside"] == 1
