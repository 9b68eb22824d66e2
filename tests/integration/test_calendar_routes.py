from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from organizer_pool.main import app
from organizer_pool.models.api.calendar_request import CreateInviteRequest
from organizer_pool.models.domain.calendar_domain import CalendarEvent
from organizer_pool.models.domain.pool_domain import PoolCategory
from organizer_pool.routes.calendar import get_invite_service, get_organizer_pool
from organizer_pool.services.calendar.google_client import GoogleCalendarError
from organizer_pool.services.calendar.invite_service import CalendarInviteService

INVITE_PAYLOAD = {
    "summary": "Kelas Data",
    "start_time": "2024-03-05T09:00:00+07:00",
    "end_time": "2024-03-05T10:00:00+07:00",
    "attendees": [
        {"email": "student@gmail.com", "type": "STUDENT"},
        {"email": "trainer@sempurna.com", "type": "TRAINER"},
    ],
    "subject": {
        "kind": "program",
        "name": "Kelas Data",
        "product_type": "PRAKERJA",
        "program_type": "STRUCTURED",
    },
}


@pytest.fixture
def calendar():
    mock = AsyncMock()
    mock.create_event.return_value = CalendarEvent(
        {
            "id": "evt-1",
            "summary": "Kelas Data",
            "start": {"dateTime": datetime(2024, 3, 5, 2, tzinfo=UTC).isoformat()},
            "end": {"dateTime": datetime(2024, 3, 5, 3, tzinfo=UTC).isoformat()},
            "attendees": [{"email": "student@gmail.com"}, {"email": "trainer@sempurna.com"}],
        }
    )
    return mock


@pytest.fixture
def client(pool, calendar):
    async def token_provider(organizer: str) -> str:
        return "token"

    service = CalendarInviteService(pool, calendar, token_provider=token_provider)
    app.dependency_overrides[get_organizer_pool] = lambda: pool
    app.dependency_overrides[get_invite_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_pool_status_reports_current_state(client, pool):
    response = client.get("/calendar/organizers/prakerja")

    assert response.status_code == 200
    data = response.json()
    assert data["organizer"] is None
    assert data["unique_external_attendees"] == 0
    assert data["external_attendees_limit"] == 3
    assert data["available_organizers"] == ["a@org.test", "b@org.test", "c@org.test"]


def test_unknown_category_is_rejected(client):
    response = client.get("/calendar/organizers/unknown")

    assert response.status_code == 422


def test_create_invite_assigns_organizer_and_counts_attendees(client):
    response = client.post("/calendar/invites", json=INVITE_PAYLOAD)

    assert response.status_code == 201
    data = response.json()
    assert data["organizer"] == "a@org.test"
    assert data["category"] == "prakerja"
    assert data["event_id"] == "evt-1"

    status_response = client.get("/calendar/organizers/prakerja")
    assert status_response.json()["organizer"] == "a@org.test"
    assert status_response.json()["unique_external_attendees"] == 1


def test_non_prakerja_subject_uses_its_own_pool(client):
    payload = {
        **INVITE_PAYLOAD,
        "subject": {
            "kind": "training",
            "title": "Webinar",
            "product_type": "NON_PRAKERJA",
            "delivery_type": "WEBINAR",
        },
    }

    response = client.post("/calendar/invites", json=payload)

    assert response.status_code == 201
    assert response.json()["organizer"] == "x@org.test"
    assert response.json()["category"] == "non-prakerja"


def test_suspension_then_selection_falls_back(client):
    response = client.post("/calendar/organizer-suspensions", json={"organizer": "a@org.test"})
    assert response.status_code == 204

    status_response = client.get("/calendar/organizer-status", params={"organizer": "a@org.test"})
    assert status_response.json() == {"organizer": "a@org.test", "available": False}

    select_response = client.get("/calendar/organizers/prakerja/select")
    assert select_response.json()["organizer"] == "b@org.test"


def test_pool_status_suspends_exhausted_organizer(client, fake_cache):
    payload = {
        **INVITE_PAYLOAD,
        "attendees": [{"email": f"s{i}@gmail.com"} for i in range(3)],
    }
    assert client.post("/calendar/invites", json=payload).status_code == 201

    data = client.get("/calendar/organizers/prakerja").json()

    assert data["organizer"] == "a@org.test"
    assert data["unique_external_attendees"] == 3
    assert data["available_organizers"] == ["b@org.test", "c@org.test"]
    assert "google-calendar-blocked-organizer:a@org.test" in fake_cache.store
    assert "google-calendar-prakerja" not in fake_cache.store


def test_no_capacity_returns_503(client):
    for organizer in ("a@org.test", "b@org.test", "c@org.test"):
        client.post("/calendar/organizer-suspensions", json={"organizer": organizer})

    response = client.post("/calendar/invites", json=INVITE_PAYLOAD)

    assert response.status_code == 503


def test_usage_limit_returns_400(client, calendar):
    calendar.create_event.side_effect = GoogleCalendarError(
        "Calendar usage limit", status_code=403, provider_message="Calendar usage limits exceeded."
    )

    response = client.post("/calendar/invites", json=INVITE_PAYLOAD)

    assert response.status_code == 400
    assert response.json()["detail"] == "Calendar usage limit"


def test_invite_times_are_validated(client):
    payload = {**INVITE_PAYLOAD, "end_time": INVITE_PAYLOAD["start_time"]}

    response = client.post("/calendar/invites", json=payload)

    assert response.status_code == 422


def test_add_attendees_endpoint(client, calendar, pool):
    calendar.get_event.return_value = CalendarEvent({"id": "evt-1", "attendees": []})

    response = client.post(
        "/calendar/invites/evt-1/attendees",
        json={
            "organizer": "x@org.test",
            "attendees": [{"email": "late@gmail.com"}],
            "subject": INVITE_PAYLOAD["subject"],
        },
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "error": None, "added": ["late@gmail.com"]}


def test_delete_invite_not_found(client, calendar):
    calendar.delete_event.side_effect = GoogleCalendarError("Not Found", status_code=404)

    response = client.delete("/calendar/invites/evt-1", params={"organizer": "a@org.test"})

    assert response.status_code == 404


def test_update_invite_endpoint(client, calendar):
    calendar.time_zone = "Asia/Jakarta"
    calendar.get_event.return_value = CalendarEvent({"id": "evt-1", "summary": "Kelas Data"})

    response = client.patch(
        "/calendar/invites/evt-1",
        json={"organizer": "a@org.test", "location": "Ruang 2"},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "error": None}
    body = calendar.update_event.await_args.args[2]
    assert body == {"id": "evt-1", "summary": "Kelas Data", "location": "Ruang 2"}


def test_update_invite_not_found(client, calendar):
    calendar.get_event.side_effect = GoogleCalendarError("Not Found", status_code=404)

    response = client.patch(
        "/calendar/invites/evt-404", json={"organizer": "a@org.test", "summary": "Kelas Data"}
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Not Found"


def test_update_invite_times_are_validated(client, calendar):
    response = client.patch(
        "/calendar/invites/evt-1",
        json={
            "organizer": "a@org.test",
            "start_time": INVITE_PAYLOAD["end_time"],
            "end_time": INVITE_PAYLOAD["start_time"],
        },
    )

    assert response.status_code == 422
    calendar.get_event.assert_not_awaited()


def test_list_invites_endpoint(client, calendar):
    calendar.list_events.return_value = [
        CalendarEvent({"id": "evt-1", "attendees": [{"email": "student@gmail.com"}]}),
        CalendarEvent({"id": "evt-2"}),
    ]

    response = client.get("/calendar/invites", params={"organizer": "a@org.test"})

    assert response.status_code == 200
    data = response.json()
    assert data["organizer"] == "a@org.test"
    assert data["total_count"] == 2
    assert [event["id"] for event in data["events"]] == ["evt-1", "evt-2"]
    assert data["events"][0]["attendees"] == ["student@gmail.com"]


def test_get_invite_endpoint(client, calendar):
    calendar.get_event.return_value = CalendarEvent(
        {"id": "evt-1", "summary": "Kelas Data", "htmlLink": "https://calendar.test/evt-1"}
    )

    response = client.get("/calendar/invites/evt-1", params={"organizer": "a@org.test"})

    assert response.status_code == 200
    assert response.json()["summary"] == "Kelas Data"
    assert response.json()["html_link"] == "https://calendar.test/evt-1"


def test_get_invite_not_found(client, calendar):
    calendar.get_event.side_effect = GoogleCalendarError("Not Found", status_code=404)

    response = client.get("/calendar/invites/evt-404", params={"organizer": "a@org.test"})

    assert response.status_code == 404


def test_program_subject_category_mapping():
    request = CreateInviteRequest.model_validate(INVITE_PAYLOAD)

    assert request.category == PoolCategory.PRAKERJA
    assert request.subject.title == "Kelas Data"
    assert request.subject.delivery_type == "Bimbingan"
