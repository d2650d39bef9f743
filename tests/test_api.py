from __future__ import annotations

from fastapi.testclient import TestClient

from attendance_pulse.api import create_app
from attendance_pulse.models import CheckinEvent
from attendance_pulse.service import AttendancePulseService
from conftest import FakeCheckinSource, FakeRosterSource

HEADERS = {"X-API-Key": "secret"}


def _client(settings, roster, checkins, checkin_error=None) -> TestClient:
    service = AttendancePulseService(
        settings, FakeRosterSource(roster), FakeCheckinSource(checkins, error=checkin_error)
    )
    return TestClient(create_app(settings, service))


def test_healthz_needs_no_key(settings, roster, checkins):
    response = _client(settings, roster, checkins).get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_api_key_is_required(settings, roster, checkins):
    client = _client(settings, roster, checkins)

    assert client.get("/api/filters", headers={"X-API-Key": "wrong"}).status_code == 401
    assert client.get("/api/filters").status_code == 422


def test_filters(settings, roster, checkins):
    response = _client(settings, roster, checkins).get("/api/filters", headers=HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["dates"] == ["D1"]
    assert body["date_to_sessions"] == {"D1": ["S1"]}
    assert body["units"] == ["U1", "U2"]


def test_sessions_for_date(settings, roster):
    rows = [
        CheckinEvent(unit="U1", date="2025-01-01", session="S1", person_id="P1", name="Alice"),
        CheckinEvent(unit="U1", date="2025-01-02", session="S2", person_id="P1", name="Alice"),
    ]
    client = _client(settings, roster, rows)

    response = client.get("/api/filters/sessions", params={"date": "2025-01-02"}, headers=HEADERS)

    assert response.json() == {"date": "2025-01-02", "sessions": ["S2"]}


def test_dashboard(settings, roster, checkins):
    response = _client(settings, roster, checkins).get(
        "/api/dashboard", params={"date": "D1", "unit": "all"}, headers=HEADERS
    )

    assert response.status_code == 200
    body = response.json()
    assert body["selection"] == {"date": "D1", "session": None, "unit": "all"}
    assert body["stats"]["total_roster"] == 3
    assert body["stats"]["peak_attendance"] == 1
    assert body["stats"]["average_attendance_percent"] == 33.3
    assert [p["person_id"] for p in body["present_list"]] == ["P1"]
    assert [p["person_id"] for p in body["absent_list"]] == ["P2", "P3"]


def test_dashboard_defaults_to_earliest_date(settings, roster):
    rows = [
        CheckinEvent(unit="U1", date="02-01-2025", session="S1", person_id="P1", name="Alice"),
        CheckinEvent(unit="U1", date="01-01-2025", session="S1", person_id="P2", name="Bob"),
    ]

    body = _client(settings, roster, rows).get("/api/dashboard", headers=HEADERS).json()

    assert body["selection"]["date"] == "01-01-2025"
    assert [p["person_id"] for p in body["present_list"]] == ["P2"]


def test_empty_selection_is_not_an_error(settings, roster):
    response = _client(settings, roster, []).get(
        "/api/dashboard", params={"date": "D9"}, headers=HEADERS
    )

    assert response.status_code == 200
    assert response.json()["stats"]["peak_attendance"] == 0


def test_source_failure_is_a_bad_gateway(settings, roster, checkins):
    response = _client(settings, roster, checkins, checkin_error="boom").get(
        "/api/dashboard", params={"date": "D1"}, headers=HEADERS
    )

    assert response.status_code == 502
    assert response.json()["detail"] == {"source": "pendaftaran", "message": "boom"}
