"""
Athletes Router
===============

Athlete browse list, athlete profile page and per-athlete stats, plus the
platform-wide totals shown on the admin dashboard.
"""

import logging
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from athletix.dependencies import get_db
from athletix.errors import NotFound
from athletix.models import (
    Achievement, AthleteStats, Education, Event, EventParticipant, NewsPublished, User,
    UserDetails, UserRole, VerificationStatus,
)
from athletix.schemas import (
    AchievementRead, AthleteCard, AthleteProfile, AthleteStatsRead, AthleteStatsResponse,
    AthleteStatsRow, EducationItem, PlatformStats, StatsUpload, StatValue,
)
from athletix.services import calculate_age, optional_read, upsert_athlete_stats_row

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Athletes"])

# Bar chart ceilings on the profile page
STAT_MAXIMUMS = {"PPG": 50, "RPG": 20, "APG": 20}


def _stat_triplet(stats: Optional[AthleteStats]) -> Dict[str, float]:
    return {
        "PPG": stats.ppg if stats else 0,
        "RPG": stats.rpg if stats else 0,
        "APG": stats.apg if stats else 0,
    }


# =============================================================================
# ATHLETES
# =============================================================================

@router.get("/athletes", response_model=List[AthleteCard])
async def list_athletes(db: AsyncSession = Depends(get_db)) -> List[AthleteCard]:
    """Every athlete with details, averages and achievement count."""
    users = (
        await db.execute(
            select(User).where(User.role == UserRole.ATHLETE.value).order_by(User.fullname)
        )
    ).scalars().all()
    if not users:
        return []

    ids = [u.user_id for u in users]
    details = {
        d.user_id: d
        for d in (await db.execute(select(UserDetails).where(UserDetails.user_id.in_(ids)))).scalars()
    }
    stats = {
        s.user_id: s
        for s in (await db.execute(select(AthleteStats).where(AthleteStats.user_id.in_(ids)))).scalars()
    }
    achievement_counts = dict(
        (
            await db.execute(
                select(Achievement.user_id, func.count())
                .where(Achievement.user_id.in_(ids))
                .group_by(Achievement.user_id)
            )
        ).all()
    )

    cards = []
    for user in users:
        detail = details.get(user.user_id)
        values = _stat_triplet(stats.get(user.user_id))
        cards.append(AthleteCard(
            id=user.user_id,
            name=user.fullname,
            sport=user.sport_name or "",
            position=(detail.position if detail else None) or "",
            age=calculate_age(user.birthdate),
            gender=user.gender or "",
            location=user.location or "",
            height=detail.height_cm if detail else None,
            weight=detail.weight_kg if detail else None,
            achievements=achievement_counts.get(user.user_id, 0),
            stats=[StatValue(label=label, value=str(value)) for label, value in values.items()],
            verification_status=user.verification_status,
            imageUrl=detail.avatar_url if detail else None,
        ))
    return cards


@router.get("/athletes/{athlete_id}", response_model=AthleteProfile)
async def get_athlete(athlete_id: UUID, db: AsyncSession = Depends(get_db)) -> AthleteProfile:
    """
    Athlete profile page.

    Only the user lookup is fatal. Details, achievements, education and
    stats each fall back to an empty value when their read fails.
    """
    user = (
        await db.execute(
            select(User).where(User.user_id == athlete_id, User.role == UserRole.ATHLETE.value)
        )
    ).scalar_one_or_none()
    if user is None:
        raise NotFound("Athlete not found")

    async def load_achievements():
        result = await db.execute(
            select(Achievement)
            .where(Achievement.user_id == athlete_id)
            .order_by(Achievement.created_at.asc(), Achievement.achievement_id.asc())
        )
        return [AchievementRead.model_validate(a) for a in result.scalars().all()]

    async def load_education():
        result = await db.execute(
            select(Education)
            .where(Education.user_id == athlete_id)
            .order_by(Education.end_year.desc())
        )
        return [
            EducationItem(
                school=e.school,
                degree=e.degree,
                field=e.field,
                year=str(e.end_year) if e.end_year else None,
            )
            for e in result.scalars().all()
        ]

    detail = await optional_read("athlete details", lambda: db.get(UserDetails, athlete_id), None)
    achievements = await optional_read("athlete achievements", load_achievements, [])
    education = await optional_read("athlete education", load_education, [])
    stats = await optional_read("athlete stats", lambda: db.get(AthleteStats, athlete_id), None)

    values = _stat_triplet(stats)
    return AthleteProfile(
        id=user.user_id,
        name=user.fullname,
        sport=user.sport_name or "N/A",
        position=detail.position if detail else None,
        age=calculate_age(user.birthdate),
        gender=user.gender or "N/A",
        location=user.location or "N/A",
        bio=user.bio or "",
        verification_status=user.verification_status,
        height=detail.height_cm if detail else None,
        weight=detail.weight_kg if detail else None,
        jerseyNumber=detail.jersey_number if detail else None,
        email=detail.email if detail else None,
        imageUrl=detail.avatar_url if detail else None,
        contactNum=detail.contact_num if detail else None,
        videos=[{"url": detail.video_url}] if detail and detail.video_url else [],
        achievements=achievements,
        education=education,
        stats={
            "overall": [
                StatValue(label=label, value=value, max=STAT_MAXIMUMS[label])
                for label, value in values.items()
            ]
        },
    )


# =============================================================================
# STATS
# =============================================================================

@router.get("/athlete-stats/{user_id}", response_model=AthleteStatsRead)
async def get_athlete_stats(user_id: UUID, db: AsyncSession = Depends(get_db)) -> AthleteStatsRead:
    stats = await db.get(AthleteStats, user_id)
    if stats is None:
        raise NotFound("Stats not found")
    return AthleteStatsRead.model_validate(stats)


@router.post("/upload-stats", response_model=AthleteStatsResponse)
async def upload_stats(payload: StatsUpload, db: AsyncSession = Depends(get_db)) -> AthleteStatsResponse:
    """Self-service upload of an athlete's own averages."""
    stats = await upsert_athlete_stats_row(db, payload.user_id, payload)
    return AthleteStatsResponse(
        message="Stats uploaded successfully.",
        stats=AthleteStatsRead.model_validate(stats),
    )


@router.get("/allstats", response_model=List[AthleteStatsRow])
async def list_all_stats(db: AsyncSession = Depends(get_db)) -> List[AthleteStatsRow]:
    result = await db.execute(
        select(AthleteStats, User.fullname, User.sport_name)
        .join(User, User.user_id == AthleteStats.user_id)
        .order_by(User.fullname)
    )
    return [
        AthleteStatsRow(
            **AthleteStatsRead.model_validate(stats).model_dump(),
            name=name,
            sport=sport,
        )
        for stats, name, sport in result.all()
    ]


@router.get("/get-stats", response_model=PlatformStats)
async def platform_stats(db: AsyncSession = Depends(get_db)) -> PlatformStats:
    """Totals for the admin dashboard."""
    by_role = dict(
        (await db.execute(select(User.role, func.count()).group_by(User.role))).all()
    )

    async def count(stmt) -> int:
        return (await db.execute(stmt)).scalar_one()

    return PlatformStats(
        total_users=sum(by_role.values()),
        users_by_role={role.value: by_role.get(role.value, 0) for role in UserRole},
        total_events=await count(select(func.count()).select_from(Event)),
        total_participations=await count(select(func.count()).select_from(EventParticipant)),
        total_news=await count(select(func.count()).select_from(NewsPublished)),
        verified_users=await count(
            select(func.count())
            .select_from(User)
            .where(User.verification_status == VerificationStatus.VERIFIED.value)
        ),
    )
