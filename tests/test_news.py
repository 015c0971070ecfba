"""
Tests for News Endpoints
========================

Tests for:
- GET/POST/DELETE /api/news-drafts/drafts...
- POST /api/news/publish
- GET/PUT/DELETE /api/news...
"""

from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from athletix.models import NewsDraft
from conftest import get_row, scalar


# =============================================================================
# DRAFTS
# =============================================================================

@pytest.mark.asyncio
async def test_save_new_draft(client: AsyncClient, seeded_db):
    user_id = str(seeded_db.users["organizer"])

    response = await client.post(
        "/api/news-drafts/drafts/save", json={"user_id": user_id, "title": "Tryouts open"}
    )
    assert response.status_code == 201
    assert response.json()["message"] == "Draft created successfully"

    drafts = await client.get(f"/api/news-drafts/drafts/{user_id}")
    assert drafts.status_code == 200
    assert [d["title"] for d in drafts.json()["drafts"]] == ["Tryouts open"]


@pytest.mark.asyncio
async def test_update_own_draft(client: AsyncClient, seeded_db, session_factory):
    user_id = str(seeded_db.users["organizer"])
    created = await client.post("/api/news-drafts/drafts/save", json={"user_id": user_id, "title": "v1"})
    draft_id = created.json()["draft_id"]

    response = await client.post(
        "/api/news-drafts/drafts/save",
        json={"draft_id": draft_id, "user_id": user_id, "title": "v2", "content": "Body"},
    )
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Draft updated successfully", "draft_id": draft_id}

    draft = await get_row(session_factory, NewsDraft, draft_id)
    assert (draft.title, draft.content) == ("v2", "Body")


@pytest.mark.asyncio
async def test_update_someone_elses_draft(client: AsyncClient, seeded_db, session_factory):
    created = await client.post(
        "/api/news-drafts/drafts/save", json={"user_id": str(seeded_db.users["organizer"]), "title": "Mine"}
    )
    draft_id = created.json()["draft_id"]

    response = await client.post(
        "/api/news-drafts/drafts/save",
        json={"draft_id": draft_id, "user_id": str(seeded_db.users["scout"]), "title": "Hijacked"},
    )
    assert response.status_code == 404

    draft = await get_row(session_factory, NewsDraft, draft_id)
    assert draft.title == "Mine"


@pytest.mark.asyncio
async def test_delete_draft(client: AsyncClient, seeded_db):
    user_id = str(seeded_db.users["organizer"])
    created = await client.post("/api/news-drafts/drafts/save", json={"user_id": user_id, "title": "Temp"})

    response = await client.delete(f"/api/news-drafts/drafts/{created.json()['draft_id']}")
    assert response.status_code == 200

    drafts = await client.get(f"/api/news-drafts/drafts/{user_id}")
    assert drafts.json()["drafts"] == []


# =============================================================================
# PUBLISH
# =============================================================================

@pytest.mark.asyncio
async def test_publish_removes_draft(client: AsyncClient, seeded_db, session_factory):
    user_id = str(seeded_db.users["organizer"])
    created = await client.post("/api/news/drafts/save", json={"user_id": user_id, "title": "Finals recap"})
    draft_id = created.json()["draft_id"]

    response = await client.post(
        "/api/news/publish",
        json={
            "user_id": user_id,
            "title": "Finals recap",
            "content": "The home team won.",
            "category": "Results",
            "event_date": "2025-03-01",
            "draft_id": draft_id,
        },
    )
    assert response.status_code == 201
    news_id = response.json()["news_id"]

    remaining = await scalar(session_factory, select(func.count()).select_from(NewsDraft))
    assert remaining == 0

    article = await client.get(f"/api/news/{news_id}")
    assert article.status_code == 200
    data = article.json()["article"]
    assert data["author_name"] == "Coach Ramon"
    assert data["read_time"] == "1 min read"
    assert data["event_date"] == "2025-03-01"


@pytest.mark.asyncio
async def test_publish_unknown_user(client: AsyncClient):
    response = await client.post(
        "/api/news/publish", json={"user_id": str(uuid4()), "title": "T", "content": "C"}
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_publish_requires_title_and_content(client: AsyncClient, seeded_db):
    response = await client.post("/api/news/publish", json={"user_id": str(seeded_db.users["organizer"])})
    assert response.status_code == 400
    assert "title" in response.json()["message"]
    assert "content" in response.json()["message"]


# =============================================================================
# ARTICLES
# =============================================================================

async def publish(client, user_id, title, content="word " * 450):
    response = await client.post(
        "/api/news/publish", json={"user_id": str(user_id), "title": title, "content": content}
    )
    return response.json()["news_id"]


@pytest.mark.asyncio
async def test_list_articles_newest_first(client: AsyncClient, seeded_db):
    organizer = seeded_db.users["organizer"]
    first = await publish(client, organizer, "First")
    second = await publish(client, organizer, "Second")

    response = await client.get("/api/news")
    assert response.status_code == 200

    articles = response.json()["articles"]
    assert [a["news_id"] for a in articles] == [second, first]
    assert articles[0]["read_time"] == "3 min read"


@pytest.mark.asyncio
async def test_update_article(client: AsyncClient, seeded_db):
    news_id = await publish(client, seeded_db.users["organizer"], "Draft title")

    response = await client.put(f"/api/news/{news_id}", json={"title": "Final title", "location": "Cebu"})
    assert response.status_code == 200

    article = response.json()["article"]
    assert article["title"] == "Final title"
    assert article["location"] == "Cebu"


@pytest.mark.asyncio
async def test_update_missing_article(client: AsyncClient):
    response = await client.put("/api/news/999", json={"title": "X"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_article(client: AsyncClient, seeded_db):
    news_id = await publish(client, seeded_db.users["organizer"], "Gone soon")

    response = await client.delete(f"/api/news/{news_id}")
    assert response.status_code == 200

    response = await client.get(f"/api/news/{news_id}")
    assert response.status_code == 404

    response = await client.delete(f"/api/news/{news_id}")
    assert response.status_code == 404
