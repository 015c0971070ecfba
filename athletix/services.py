"""
Athletix Business Logic Services
================================

Contains the logic shared by several routers:
- Derived display values (age, event status, read time)
- Event category/sponsor reconciliation
- Participant counts and association lookups
"""

import logging
import math
from datetime import date, datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, TypeVar
from uuid import UUID

from sqlalchemy import delete, func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from athletix.errors import BadRequest, NotFound
from athletix.models import (
    AthleteStats, Event, EventCategory, EventCategoryMapping, EventParticipant,
    EventSponsorMapping, EventStatus, NewsPublished, Sponsor, User,
)
from athletix.schemas import ArticleRead, AthleteStatsInput, EventWithNames

logger = logging.getLogger(__name__)

T = TypeVar("T")

WORDS_PER_MINUTE = 200


# =============================================================================
# DERIVED VALUES
# =============================================================================

def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive timestamps (SQLite round-trips) as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def calculate_age(birthdate: Optional[date], today: Optional[date] = None) -> Optional[int]:
    """Calculate age in whole years from date of birth."""
    if not birthdate:
        return None
    today = today or date.today()
    age = today.year - birthdate.year
    if (today.month, today.day) < (birthdate.month, birthdate.day):
        age -= 1
    return age


def event_status(
    start: Optional[datetime],
    end: Optional[datetime],
    now: Optional[datetime] = None,
) -> str:
    """upcoming before start, ongoing until end (inclusive), completed after."""
    now = as_utc(now) or datetime.now(timezone.utc)
    start, end = as_utc(start), as_utc(end)
    if start is None or now < start:
        return EventStatus.UPCOMING.value
    if end is None or now <= end:
        return EventStatus.ONGOING.value
    return EventStatus.COMPLETED.value


def read_time(content: Optional[str]) -> str:
    word_count = len((content or "").split())
    minutes = max(1, math.ceil(word_count / WORDS_PER_MINUTE))
    return f"{minutes} min read"


def article_payload(article: NewsPublished) -> ArticleRead:
    return ArticleRead(
        news_id=article.news_id,
        user_id=article.user_id,
        author_name=article.author_name,
        title=article.title,
        content=article.content,
        category=article.category,
        event_date=article.event_date,
        location=article.location,
        publish_date=article.publish_date,
        created_at=article.created_at,
        read_time=read_time(article.content),
    )


# =============================================================================
# TOLERANT READS
# =============================================================================

async def optional_read(
    what: str,
    read: Callable[[], Awaitable[T]],
    default: T,
) -> T:
    """
    Run a secondary read of a composite response.

    A database failure is logged and replaced by ``default``. The primary
    entity must be loaded before any optional read: after a failed statement
    the transaction is unusable, so later optional reads fall back too.
    """
    try:
        return await read()
    except SQLAlchemyError as e:
        logger.warning("Could not load %s, using default: %s", what, e)
        return default


# =============================================================================
# EVENT ASSOCIATIONS
# =============================================================================

async def get_category_names(db: AsyncSession, event_id: int) -> List[str]:
    stmt = (
        select(EventCategory.name)
        .join(EventCategoryMapping, EventCategoryMapping.category_id == EventCategory.category_id)
        .where(EventCategoryMapping.event_id == event_id)
        .order_by(EventCategory.category_id)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_sponsor_names(db: AsyncSession, event_id: int) -> List[str]:
    stmt = (
        select(Sponsor.name)
        .join(EventSponsorMapping, EventSponsorMapping.sponsor_id == Sponsor.sponsor_id)
        .where(EventSponsorMapping.event_id == event_id)
        .order_by(Sponsor.sponsor_id)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_participant_count(db: AsyncSession, event_id: int) -> int:
    result = await db.execute(
        select(func.count()).select_from(EventParticipant).where(EventParticipant.event_id == event_id)
    )
    return result.scalar_one()


async def get_participant_counts(db: AsyncSession, event_ids: Iterable[int]) -> Dict[int, int]:
    ids = list(event_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(EventParticipant.event_id, func.count())
        .where(EventParticipant.event_id.in_(ids))
        .group_by(EventParticipant.event_id)
    )
    return {event_id: count for event_id, count in result.all()}


def _unique(ids: Iterable[int]) -> List[int]:
    seen: Dict[int, None] = {}
    for item in ids:
        seen.setdefault(item, None)
    return list(seen)


async def _replace_categories(
    db: AsyncSession, event_id: int, category_ids: List[int], new_names: List[str]
) -> None:
    final_ids = list(category_ids)
    for name in new_names:
        category = EventCategory(name=name)
        db.add(category)
        await db.flush()
        final_ids.append(category.category_id)

    await db.execute(delete(EventCategoryMapping).where(EventCategoryMapping.event_id == event_id))
    rows = [{"event_id": event_id, "category_id": cid} for cid in _unique(final_ids)]
    if rows:
        await db.execute(insert(EventCategoryMapping), rows)


async def _replace_sponsors(
    db: AsyncSession, event_id: int, sponsor_ids: List[int], new_names: List[str]
) -> None:
    final_ids = list(sponsor_ids)
    for name in new_names:
        sponsor = Sponsor(name=name)
        db.add(sponsor)
        await db.flush()
        final_ids.append(sponsor.sponsor_id)

    await db.execute(delete(EventSponsorMapping).where(EventSponsorMapping.event_id == event_id))
    rows = [{"event_id": event_id, "sponsor_id": sid} for sid in _unique(final_ids)]
    if rows:
        await db.execute(insert(EventSponsorMapping), rows)


def apply_event_fields(event: Event, updates: Dict[str, Any]) -> None:
    for column, value in updates.items():
        setattr(event, column, value)

    start, end = as_utc(event.start_datetime), as_utc(event.end_datetime)
    if start and end and end <= start:
        raise BadRequest("End date/time must be after start date/time.")


async def _apply_associations(
    db: AsyncSession,
    event_id: int,
    category_ids: List[int],
    new_categories: List[str],
    sponsor_ids: List[int],
    new_sponsors: List[str],
) -> None:
    await _replace_categories(db, event_id, category_ids, new_categories)
    await _replace_sponsors(db, event_id, sponsor_ids, new_sponsors)


async def reconcile_event(
    db: AsyncSession,
    event_id: int,
    updates: Dict[str, Any],
    category_ids: List[int],
    new_categories: List[str],
    sponsor_ids: List[int],
    new_sponsors: List[str],
) -> EventWithNames:
    """
    Update an event and replace its category and sponsor memberships.

    New category/sponsor names are inserted as fresh rows (no dedup by name),
    then every existing mapping of the event is deleted and the final id sets
    are inserted. Everything happens in one transaction: a failure at any
    step rolls back the scalar update and both mapping replacements.
    """
    try:
        event = await db.get(Event, event_id)
        if event is None:
            raise NotFound("Event not found.")

        apply_event_fields(event, updates)
        await db.flush()

        await _apply_associations(
            db, event_id, category_ids, new_categories, sponsor_ids, new_sponsors
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Event %s reconciled: %d existing + %d new categories, %d existing + %d new sponsors",
        event_id, len(category_ids), len(new_categories), len(sponsor_ids), len(new_sponsors),
    )
    return await event_with_names(db, event)


async def create_event(
    db: AsyncSession,
    organizer_id: UUID,
    fields: Dict[str, Any],
    category_ids: List[int],
    new_categories: List[str],
    sponsor_ids: List[int],
    new_sponsors: List[str],
) -> EventWithNames:
    """Insert an event and its initial category/sponsor mappings atomically."""
    try:
        event = Event(organizer_id=organizer_id, **fields)
        db.add(event)
        await db.flush()

        await _apply_associations(
            db, event.event_id, category_ids, new_categories, sponsor_ids, new_sponsors
        )
        await db.commit()
        await db.refresh(event)
    except Exception:
        await db.rollback()
        raise

    logger.info("Event %s created by organizer %s", event.event_id, organizer_id)
    return await event_with_names(db, event)


async def event_with_names(db: AsyncSession, event: Event) -> EventWithNames:
    categories = await get_category_names(db, event.event_id)
    sponsors = await get_sponsor_names(db, event.event_id)
    return EventWithNames.model_validate(
        {**event_columns(event), "categories": categories, "sponsors": sponsors}
    )


def event_columns(event: Event) -> Dict[str, Any]:
    """Plain dict of an event row, used to build composite payloads."""
    return {column.key: getattr(event, column.key) for column in Event.__table__.columns}


# =============================================================================
# ATHLETE STATS
# =============================================================================

async def upsert_athlete_stats_row(
    db: AsyncSession, user_id: UUID, payload: AthleteStatsInput
) -> AthleteStats:
    """Insert or replace one athlete's averages; missing values become 0."""
    if await db.get(User, user_id) is None:
        raise NotFound("Athlete not found")

    stats = await db.get(AthleteStats, user_id)
    if stats is None:
        stats = AthleteStats(user_id=user_id)
        db.add(stats)

    stats.ppg = payload.ppg or 0
    stats.rpg = payload.rpg or 0
    stats.apg = payload.apg or 0

    await db.commit()
    await db.refresh(stats)
    return stats
