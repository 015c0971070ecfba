"""
Search Router
=============

Global search across users and events.
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from athletix.config import Settings
from athletix.dependencies import get_db, get_settings
from athletix.models import Event, User
from athletix.schemas import SearchResult

router = APIRouter(tags=["Search"])


@router.get("/search", response_model=List[SearchResult])
async def search(
    q: str = Query("", description="Search query"),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> List[SearchResult]:
    """
    Search users by name or sport and events by title or sport.

    Matching is a case-insensitive substring match, capped per entity type.
    A blank query returns an empty list.

    **Example:**
    ```
    GET /api/search?q=basket
    ```
    """
    term = q.strip()
    if not term:
        return []

    users = await db.execute(
        select(User)
        .where(or_(
            User.fullname.icontains(term, autoescape=True),
            User.sport_name.icontains(term, autoescape=True),
        ))
        .order_by(User.fullname)
        .limit(settings.search_limit)
    )
    events = await db.execute(
        select(Event)
        .where(or_(
            Event.title.icontains(term, autoescape=True),
            Event.sport_name.icontains(term, autoescape=True),
        ))
        .order_by(Event.start_datetime)
        .limit(settings.search_limit)
    )

    results = [
        SearchResult(type="user", id=u.user_id, name=u.fullname, sport=u.sport_name, role=u.role)
        for u in users.scalars().all()
    ]
    results.extend(
        SearchResult(type="event", id=e.event_id, name=e.title, sport=e.sport_name, date=e.start_datetime)
        for e in events.scalars().all()
    )
    return results
