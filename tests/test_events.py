"""Tests for events and academic calendars."""

from datetime import date

import pytest

from routers.events import order_upcoming_first
from schemas.events import Event, format_display_date
from services.event_client import EventClient, get_event_client
from services.institution_client import InstitutionClient, get_institution_client


def _event(event_id, title, start, institution="i1", event_type="CULTURAL"):
    return {"eventId": event_id, "title": title, "startDate": start, "endDate": start,
            "institutionId": institution, "institutionName": f"IE {institution}",
            "eventType": event_type, "status": "ACTIVE"}


@pytest.fixture
def events(upstream):
    fake = upstream(get_event_client, EventClient)
    fake.on("GET", "/events", [
        _event(1, "Día del Logro", "2020-11-20"),
        _event(2, "Aniversario", "2099-05-10"),
        _event(3, "Olimpiadas", "2099-03-01", event_type="DEPORTIVO"),
        _event(4, "Feria de Ciencias", "2021-08-15", institution="i2", event_type="ACADEMICO"),
    ])
    fake.on("GET", "/events/inactive", [_event(5, "Kermés", "2019-06-01")])
    return fake


class TestDisplayHelpers:
    def test_format_display_date(self):
        assert format_display_date("2005-12-21") == "21-dic-2005"
        assert format_display_date("2025-03-04T10:00:00") == "04-mar-2025"
        assert format_display_date(None) == "-"
        assert format_display_date("pronto") == "pronto"

    def test_order_upcoming_first(self):
        events = [Event(event_id=i, start_date=d) for i, d in
                  [(1, "2025-01-10"), (2, "2025-06-01"), (3, "2025-03-01"), (4, "2024-12-31")]]
        ordered = order_upcoming_first(events, today=date(2025, 3, 1))
        assert [e.event_id for e in ordered] == [3, 2, 1, 4]


class TestListEvents:
    def test_upcoming_then_recent_past(self, client, events):
        body = client.get("/v1/events").json()
        assert [e["eventId"] for e in body["data"]] == [3, 2, 4, 1]
        assert body["data"][0]["startDateLabel"] == "01-mar-2099"
        assert body["meta"]["size"] == 10

    def test_filters(self, client, events):
        body = client.get("/v1/events", params={"title": "ani", "institution": "IE i1"}).json()
        assert [e["eventId"] for e in body["data"]] == [2]
        body = client.get("/v1/events", params={"eventType": "DEPORTIVO"}).json()
        assert [e["eventId"] for e in body["data"]] == [3]

    def test_inactive_list(self, client, events):
        body = client.get("/v1/events", params={"active": "false"}).json()
        assert [e["eventId"] for e in body["data"]] == [5]

    def test_institution_options(self, client, upstream):
        fake = upstream(get_institution_client, InstitutionClient)
        fake.on("GET", "/institutions", {"success": True, "data": [
            {"institutionId": "i1", "institutionInformation": {"institutionName": "IE Los Olivos"}},
        ]})
        assert client.get("/v1/events/institutions").json()["data"] == [
            {"institutionId": "i1", "name": "IE Los Olivos"}
        ]


class TestWriteEvents:
    def test_end_date_defaults_to_start(self, client, events):
        events.on("POST", "/events", lambda req: {**_event(9, "Nuevo", "2099-01-01")}, status=201)
        payload = {"institutionId": "i1", "title": "Nuevo", "startDate": "2099-01-01", "eventType": "CULTURAL"}
        res = client.post("/v1/events", json=payload)
        assert res.status_code == 201
        assert events.sent_json("POST", "/events")["endDate"] == "2099-01-01"

    def test_end_before_start_rejected(self, client, events):
        payload = {"institutionId": "i1", "title": "Nuevo", "startDate": "2099-01-02", "endDate": "2099-01-01"}
        assert client.post("/v1/events", json=payload).status_code == 422

    def test_delete_and_restore(self, client, events):
        events.on("DELETE", "/events/1", None).on("PATCH", "/events/1/restore", None)
        assert client.delete("/v1/events/1").json()["data"]["status"] == "INACTIVE"
        assert client.patch("/v1/events/1/restore").json()["data"]["status"] == "ACTIVE"


class TestCalendars:
    @pytest.fixture
    def calendars(self, events):
        events.on("GET", "/calendars", [
            {"calendarId": 1, "institutionId": "i1", "academicYear": 2024},
            {"calendarId": 2, "institutionId": "i1", "academicYear": 2025},
        ])
        events.on("GET", "/calendars/2", {"calendarId": 2, "institutionId": "i1", "academicYear": 2025})
        events.on("GET", "/calendars/2/event-calendar", [{"id": 1, "calendarId": 2, "eventId": 2}])
        return events

    def test_newest_year_first(self, client, calendars):
        data = client.get("/v1/calendars").json()["data"]
        assert [c["calendarId"] for c in data] == [2, 1]

    def test_one_calendar_per_institution_year(self, client, calendars):
        payload = {"institutionId": "i1", "academicYear": 2025, "startDate": "2025-03-01", "endDate": "2025-12-20"}
        res = client.post("/v1/calendars", json=payload)
        assert res.status_code == 422
        assert "academicYear" in res.json()["error"]["fields"]
        assert calendars.requests_to("POST", "/calendars") == []

    def test_available_events_exclude_linked_and_foreign(self, client, calendars):
        data = client.get("/v1/calendars/2/available-events").json()["data"]
        assert [e["eventId"] for e in data] == [1, 3]

    def test_linked_events(self, client, calendars):
        data = client.get("/v1/calendars/2/events").json()["data"]
        assert [e["eventId"] for e in data] == [2]

    def test_assign_sends_bare_id_list(self, client, calendars):
        calendars.on("POST", "/calendars/2/events", None)
        res = client.post("/v1/calendars/2/events", json={"eventIds": [3, 1, 3]})
        assert res.status_code == 200
        assert calendars.sent_json("POST", "/calendars/2/events") == [3, 1]

    def test_assign_rejects_unavailable(self, client, calendars):
        res = client.post("/v1/calendars/2/events", json={"eventIds": [4]})
        assert res.status_code == 422
        assert "eventIds.4" in res.json()["error"]["fields"]
