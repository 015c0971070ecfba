"""
Profiles Router
===============

Public organizer profile: account, avatar, organized events, achievements.
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from athletix.dependencies import get_db
from athletix.errors import NotFound
from athletix.models import Achievement, Event, User, UserDetails
from athletix.schemas import AchievementRead, EventRead, OrganizerProfile, UserRead

router = APIRouter(prefix="/organizers", tags=["Profiles"])


@router.get("/{user_id}", response_model=OrganizerProfile)
async def get_organizer(user_id: UUID, db: AsyncSession = Depends(get_db)) -> OrganizerProfile:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFound("Account does not exist")

    details = await db.get(UserDetails, user_id)
    events = await db.execute(
        select(Event).where(Event.organizer_id == user_id).order_by(Event.start_datetime.desc())
    )
    achievements = await db.execute(
        select(Achievement)
        .where(Achievement.user_id == user_id)
        .order_by(Achievement.created_at.asc(), Achievement.achievement_id.asc())
    )

    return OrganizerProfile(
        **UserRead.model_validate(user).model_dump(),
        avatar_url=details.avatar_url if details else None,
        events=[EventRead.model_validate(e) for e in events.scalars().all()],
        achievements=[AchievementRead.model_validate(a) for a in achievements.scalars().all()],
    )
