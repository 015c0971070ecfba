"""
End-to-end flow
===============

Register an athlete and an organizer, create an event with a new category,
join it, check the event page, then leave.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_register_create_join_leave(client: AsyncClient, seeded_db, auth_client):
    basketball = seeded_db.sports["Basketball"].sport_id

    for name, email, role in (
        ("Ana Cruz", "ana@example.com", "athlete"),
        ("Ben Tan", "ben@example.com", "organizer"),
    ):
        response = await client.post(
            "/register",
            json={
                "name": name,
                "email": email,
                "password": "secret1",
                "role": role,
                "sport": basketball,
                "gender": "Female",
                "region": "Cebu City",
            },
        )
        assert response.status_code == 201, response.text

    athlete_id = str(auth_client.accounts["ana@example.com"]["id"])
    organizer_id = str(auth_client.accounts["ben@example.com"]["id"])

    created = await client.post(
        "/create-events",
        json={
            "organizer_id": organizer_id,
            "title": "Summer 3x3",
            "type": "tournament",
            "sport": "Basketball",
            "start_datetime": "2030-05-01T07:00:00",
            "end_datetime": "2030-05-01T11:00:00",
            "location": "Cebu Coliseum",
            "new_categories": ["5K Run"],
        },
    )
    assert created.status_code == 201, created.text
    event_id = created.json()["event"]["event_id"]

    joined = await client.post(f"/api/event-participants/{event_id}/join", json={"userId": athlete_id})
    assert joined.status_code == 200

    detail = await client.get(f"/api/events/{event_id}")
    assert detail.status_code == 200
    assert detail.json()["categories"] == ["5K Run"]
    assert detail.json()["participantCount"] == 1
    assert detail.json()["organizer"] == "Ben Tan"

    left = await client.request(
        "DELETE", f"/api/event-participants/{event_id}/leave", json={"userId": athlete_id}
    )
    assert left.status_code == 200

    count = await client.get(f"/api/event-participants/{event_id}/count")
    assert count.json() == {"count": 0}
