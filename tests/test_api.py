from __future__ import annotations

from datetime import date, datetime

import pytest

from src.standup_system.standup_system.container import build_container
from src.standup_system.standup_system.main import create_app
from src.standup_system.standup_system.roster.model import Participant

# A past Monday: the real clock is always after it, so activation is due.
PAST_DAY = date(2020, 1, 6)
FUTURE_DAY = "2999-01-07"


@pytest.fixture
def container(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    c = build_container(session_store="memory")
    for i in range(1, 4):
        c.roster.upsert(Participant(participant_id=f"E{i}", name=f"Employee {i}", email=f"e{i}@example.com"))
    return c


@pytest.fixture
def app(container):
    app = create_app(container)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, role: str = "admin"):
    with client.session_transaction() as sess:
        sess["user_id"] = 1
        sess["role"] = role
        sess["name"] = "Admin"


@pytest.fixture
def active_day(container):
    container.session_service.schedule(
        PAST_DAY,
        scheduled_time=datetime(2020, 1, 6, 9, 0),
        scheduled_by="Admin",
        now=datetime(2020, 1, 6, 8, 0),
    )
    container.session_service.activate(PAST_DAY, now=datetime(2020, 1, 6, 9, 0))
    return PAST_DAY.isoformat()


def test_requires_login(client):
    resp = client.get(f"/api/standups/{FUTURE_DAY}")
    assert resp.status_code == 401


def test_requires_operator_role(client):
    login(client, role="employee")
    resp = client.get(f"/api/standups/{FUTURE_DAY}")
    assert resp.status_code == 403


def test_bad_date_is_not_found(client):
    login(client)
    assert client.get("/api/standups/not-a-date").status_code == 404


def test_schedule_and_query(client):
    login(client)

    resp = client.post(f"/api/standups/{FUTURE_DAY}/schedule", json={"time": "09:30"})
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["standup"]["status"] == "scheduled"
    assert body["standup"]["scheduled_by"] == "Admin"
    assert body["standup"]["scheduled_time"] == "2999-01-07T09:30:00"

    resp = client.get(f"/api/standups/{FUTURE_DAY}")
    assert resp.status_code == 200
    assert resp.get_json()["standup"]["elapsed"] is None


def test_schedule_rejects_bad_time(client):
    login(client)
    resp = client.post(f"/api/standups/{FUTURE_DAY}/schedule", json={"time": "25:99"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "ValidationError"


def test_query_missing_session(client):
    login(client)
    resp = client.get(f"/api/standups/{FUTURE_DAY}")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "SessionNotFound"


def test_activate_not_due(client):
    login(client)
    client.post(f"/api/standups/{FUTURE_DAY}/schedule", json={"time": "09:30"})

    resp = client.post(f"/api/standups/{FUTURE_DAY}/activate")
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "InvalidTransition"


def test_mark_stats_and_stop(client, active_day):
    login(client)

    resp = client.put(f"/api/standups/{active_day}/attendance/E1", json={"status": "Present"})
    assert resp.status_code == 200
    assert resp.get_json()["standup"]["temp_attendance"] == {"E1": "Present"}

    resp = client.put(f"/api/standups/{active_day}/attendance/E2/unavailable", json={"reason": "Sick"})
    assert resp.status_code == 200

    stats = client.get(f"/api/standups/{active_day}/stats").get_json()["stats"]
    assert (stats["total"], stats["present"], stats["not_available"], stats["missed"]) == (3, 1, 1, 1)

    resp = client.post(f"/api/standups/{active_day}/stop")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["result"] == "committed"
    assert len(body["records"]) == 3

    again = client.post(f"/api/standups/{active_day}/stop").get_json()
    assert again["result"] == "already_finalized"

    summary = client.get(f"/api/standups/{active_day}/summary").get_json()["summary"]
    assert summary["missed"] == 1
    records = client.get(f"/api/standups/{active_day}/records").get_json()["records"]
    assert [r["participant_id"] for r in records] == ["E1", "E2", "E3"]


def test_empty_reason_is_rejected(client, active_day):
    login(client)
    resp = client.put(f"/api/standups/{active_day}/attendance/E2/unavailable", json={"reason": "  "})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "EmptyReason"


def test_marking_after_stop_conflicts(client, active_day):
    login(client)
    client.post(f"/api/standups/{active_day}/stop")

    resp = client.put(f"/api/standups/{active_day}/attendance/E1", json={"status": "Absent"})
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "SessionNotActive"
