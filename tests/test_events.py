"""
Tests for Event Endpoints
=========================

Tests for:
- GET /sports
- POST /create-events
- GET /get-events
- GET /api/events/{id}
- DELETE /api/events/{id}
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from athletix.models import (
    Event, EventCategory, EventCategoryMapping, EventParticipant, EventSponsorMapping,
)
from conftest import create_event_row, scalar


def event_payload(organizer_id, **overrides):
    start = datetime.now(timezone.utc) + timedelta(days=14)
    payload = {
        "organizer_id": str(organizer_id),
        "title": "Summer Hoops",
        "type": "tournament",
        "sport": "Basketball",
        "start_datetime": start.isoformat(),
        "end_datetime": (start + timedelta(hours=6)).isoformat(),
        "location": "Cebu Coliseum",
        "description": "3x3 tournament",
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_list_sports(client: AsyncClient, seeded_db):
    response = await client.get("/sports")
    assert response.status_code == 200
    assert [s["sport_name"] for s in response.json()] == ["Basketball", "Running"]


# =============================================================================
# CREATE
# =============================================================================

@pytest.mark.asyncio
async def test_create_event(client: AsyncClient, seeded_db):
    response = await client.post(
        "/create-events",
        json=event_payload(
            seeded_db.users["organizer"],
            new_categories=["3x3", "  "],
            new_sponsors=["Hydration Co."],
        ),
    )
    assert response.status_code == 201

    data = response.json()
    assert data["message"] == "Event created successfully."
    event = data["event"]
    assert event["title"] == "Summer Hoops"
    assert event["sport_name"] == "Basketball"
    assert event["categories"] == ["3x3"]
    assert event["sponsors"] == ["Hydration Co."]


@pytest.mark.asyncio
async def test_create_event_requires_organizer_role(client: AsyncClient, seeded_db, session_factory):
    response = await client.post("/create-events", json=event_payload(seeded_db.users["athlete"]))
    assert response.status_code == 403

    count = await scalar(session_factory, select(func.count()).select_from(Event))
    assert count == 1


@pytest.mark.asyncio
async def test_create_event_unknown_organizer(client: AsyncClient, seeded_db):
    response = await client.post("/create-events", json=event_payload(uuid4()))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_create_event_end_before_start(client: AsyncClient, seeded_db):
    payload = event_payload(seeded_db.users["organizer"])
    payload["end_datetime"] = payload["start_datetime"]

    response = await client.post("/create-events", json=payload)
    assert response.status_code == 400
    assert "End date/time must be after start date/time" in response.json()["message"]


@pytest.mark.asyncio
async def test_create_event_missing_title(client: AsyncClient, seeded_db):
    payload = event_payload(seeded_db.users["organizer"])
    del payload["title"]

    response = await client.post("/create-events", json=payload)
    assert response.status_code == 400
    assert "title" in response.json()["message"]


@pytest.mark.asyncio
async def test_create_event_unknown_category_rolls_back(client: AsyncClient, seeded_db, session_factory):
    response = await client.post(
        "/create-events",
        json=event_payload(seeded_db.users["organizer"], category_ids=[4242]),
    )
    assert response.status_code == 500
    assert response.json()["message"] == "Database error"

    count = await scalar(session_factory, select(func.count()).select_from(Event))
    assert count == 1


# =============================================================================
# LIST / DETAIL
# =============================================================================

@pytest.mark.asyncio
async def test_get_events_with_counts_and_status(client: AsyncClient, seeded_db, session_factory):
    organizer = seeded_db.users["organizer"]
    past_id = await create_event_row(session_factory, organizer, title="Last Season", starts_in=timedelta(days=-30))
    async with session_factory() as session:
        session.add(EventParticipant(event_id=seeded_db.events["league"], user_id=seeded_db.users["athlete"]))
        await session.commit()

    response = await client.get("/get-events")
    assert response.status_code == 200

    events = {e["event_id"]: e for e in response.json()["events"]}
    assert list(events) == [past_id, seeded_db.events["league"]]
    assert events[past_id]["status"] == "completed"
    assert events[past_id]["participant_count"] == 0
    assert events[seeded_db.events["league"]]["status"] == "upcoming"
    assert events[seeded_db.events["league"]]["participant_count"] == 1


@pytest.mark.asyncio
async def test_get_event_detail(client: AsyncClient, seeded_db):
    event_id = seeded_db.events["league"]

    response = await client.get(f"/api/events/{event_id}")
    assert response.status_code == 200

    data = response.json()
    assert data["title"] == "City League"
    assert data["organizer"] == "Coach Ramon"
    assert data["categories"] == []
    assert data["sponsors"] == []
    assert data["participantCount"] == 0
    assert data["status"] == "upcoming"
    assert data["date"] == data["start_datetime"]
    assert data["endDate"] == data["end_datetime"]


@pytest.mark.asyncio
async def test_get_event_detail_not_found(client: AsyncClient):
    response = await client.get("/api/events/999")
    assert response.status_code == 404


# =============================================================================
# DELETE
# =============================================================================

@pytest.mark.asyncio
async def test_delete_event_requires_owner(client: AsyncClient, seeded_db):
    event_id = seeded_db.events["league"]

    response = await client.delete(f"/api/events/{event_id}", params={"organizer_id": str(uuid4())})
    assert response.status_code == 403

    response = await client.get(f"/api/events/{event_id}")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_delete_event_requires_organizer_param(client: AsyncClient, seeded_db):
    response = await client.delete(f"/api/events/{seeded_db.events['league']}")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_delete_event_cascades(client: AsyncClient, seeded_db, session_factory):
    """Deleting an event removes its participants and both mapping sets."""
    organizer = seeded_db.users["organizer"]
    created = await client.post(
        "/create-events",
        json=event_payload(organizer, new_categories=["Open"], new_sponsors=["Acme"]),
    )
    event_id = created.json()["event"]["event_id"]
    join = await client.post(
        f"/api/event-participants/{event_id}/join", json={"userId": str(seeded_db.users["athlete"])}
    )
    assert join.status_code == 200

    response = await client.delete(f"/api/events/{event_id}", params={"organizer_id": str(organizer)})
    assert response.status_code == 200

    for model in (EventParticipant, EventCategoryMapping, EventSponsorMapping):
        remaining = await scalar(
            session_factory, select(func.count()).select_from(model).where(model.event_id == event_id)
        )
        assert remaining == 0

    # Category rows themselves survive; only the mapping goes
    categories = await scalar(session_factory, select(func.count()).select_from(EventCategory))
    assert categories == 1

    response = await client.get(f"/api/events/{event_id}")
    assert response.status_code == 404
