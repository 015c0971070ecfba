"""
Tests for Admin Endpoints
=========================

Tests for:
- GET /api/get-users/users
- PUT /api/user-action/verify/{id}
- DELETE /api/user-action/delete/{id}
- POST /api/user-action/reset-password/{id}
- PUT /api/athlete-stats/{id}
"""

from uuid import uuid4

import pytest
from httpx import AsyncClient

from athletix.models import AthleteStats, User
from conftest import get_row


# =============================================================================
# API KEY
# =============================================================================

@pytest.mark.asyncio
async def test_admin_requires_api_key(client: AsyncClient, seeded_db):
    response = await client.get("/api/get-users/users")
    assert response.status_code == 401
    assert "X-API-Key" in response.json()["message"]


@pytest.mark.asyncio
async def test_admin_rejects_wrong_key(client: AsyncClient, seeded_db):
    response = await client.get("/api/get-users/users", headers={"X-API-Key": "nope"})
    assert response.status_code == 403


# =============================================================================
# USERS
# =============================================================================

@pytest.mark.asyncio
async def test_list_users(client: AsyncClient, seeded_db, admin_headers):
    response = await client.get("/api/get-users/users", headers=admin_headers)
    assert response.status_code == 200

    users = response.json()
    assert len(users) == 4
    assert {u["role"] for u in users} == {"athlete", "organizer", "scout"}
    assert all("verificationStatus" in u and "registrationDate" in u for u in users)


@pytest.mark.asyncio
async def test_verify_user_defaults_to_verified(client: AsyncClient, seeded_db, admin_headers, session_factory):
    user_id = seeded_db.users["athlete"]

    response = await client.put(f"/api/user-action/verify/{user_id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"][0]["verification_status"] == "verified"

    user = await get_row(session_factory, User, user_id)
    assert user.verification_status == "verified"


@pytest.mark.asyncio
async def test_verify_user_with_status(client: AsyncClient, seeded_db, admin_headers):
    user_id = seeded_db.users["athlete"]

    response = await client.put(
        f"/api/user-action/verify/{user_id}", json={"status": "rejected"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["data"][0]["verification_status"] == "rejected"


@pytest.mark.asyncio
async def test_verify_user_invalid_status(client: AsyncClient, seeded_db, admin_headers):
    response = await client.put(
        f"/api/user-action/verify/{seeded_db.users['athlete']}",
        json={"status": "maybe"},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert "verified" in response.json()["details"]["allowed"]


@pytest.mark.asyncio
async def test_verify_unknown_user(client: AsyncClient, admin_headers):
    response = await client.put(f"/api/user-action/verify/{uuid4()}", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_user(client: AsyncClient, seeded_db, admin_headers, auth_client, session_factory):
    user_id = seeded_db.users["runner"]

    response = await client.delete(f"/api/user-action/delete/{user_id}", headers=admin_headers)
    assert response.status_code == 200
    assert auth_client.deleted == [user_id]
    assert await get_row(session_factory, User, user_id) is None


@pytest.mark.asyncio
async def test_reset_password_for_user(client: AsyncClient, seeded_db, admin_headers, auth_client):
    signup = await auth_client.sign_up("maria@example.com", "secret123")

    response = await client.post(f"/api/user-action/reset-password/{signup.id}", headers=admin_headers)
    assert response.status_code == 200
    assert auth_client.reset_emails == ["maria@example.com"]


@pytest.mark.asyncio
async def test_reset_password_unknown_account(client: AsyncClient, admin_headers):
    response = await client.post(f"/api/user-action/reset-password/{uuid4()}", headers=admin_headers)
    assert response.status_code == 404


# =============================================================================
# ATHLETE STATS
# =============================================================================

@pytest.mark.asyncio
async def test_upsert_stats_missing_values_are_zero(client: AsyncClient, seeded_db, admin_headers, session_factory):
    user_id = seeded_db.users["athlete"]

    response = await client.put(f"/api/athlete-stats/{user_id}", json={"ppg": 18.5}, headers=admin_headers)
    assert response.status_code == 200

    stats = response.json()["stats"]
    assert stats["ppg"] == 18.5
    assert stats["rpg"] == 0
    assert stats["apg"] == 0

    # Second call updates the same row
    response = await client.put(
        f"/api/athlete-stats/{user_id}", json={"ppg": 20, "rpg": 5, "apg": 7}, headers=admin_headers
    )
    assert response.status_code == 200

    row = await get_row(session_factory, AthleteStats, user_id)
    assert (row.ppg, row.rpg, row.apg) == (20, 5, 7)


@pytest.mark.asyncio
async def test_upsert_stats_unknown_athlete(client: AsyncClient, admin_headers):
    response = await client.put(f"/api/athlete-stats/{uuid4()}", json={"ppg": 1}, headers=admin_headers)
    assert response.status_code == 404
