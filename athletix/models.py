"""
Athletix Database Models
========================

Relational tables behind every route:
- Accounts: users, user_details, achievements, education, athlete_stats
- Events: events, event_categories, sponsors, the two mapping tables, event_participants
- News: news_drafts, news_published
- Social: follows, user_review

Child rows reference their parent with ON DELETE CASCADE, so deleting a user
or an event removes everything hanging off it.
"""

import enum
from datetime import date, datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from athletix.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================

class UserRole(str, enum.Enum):
    """Account roles."""
    ATHLETE = "athlete"
    ORGANIZER = "organizer"
    ADMIN = "admin"
    SCOUT = "scout"


class VerificationStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class EventStatus(str, enum.Enum):
    """Derived from the event's start/end timestamps."""
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"


# =============================================================================
# ACCOUNTS
# =============================================================================

class Sport(Base):
    """Sport reference list shown at registration."""
    __tablename__ = "sports"

    sport_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sport_name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)


class User(Base):
    """Public profile row; user_id is the auth service's user id."""
    __tablename__ = "users"

    user_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    fullname: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=UserRole.ATHLETE.value)
    sport_id: Mapped[Optional[int]] = mapped_column(ForeignKey("sports.sport_id", ondelete="SET NULL"))
    sport_name: Mapped[Optional[str]] = mapped_column(String(100))
    birthdate: Mapped[Optional[date]] = mapped_column(Date)
    gender: Mapped[Optional[str]] = mapped_column(String(20))
    location: Mapped[Optional[str]] = mapped_column(String(255))
    bio: Mapped[Optional[str]] = mapped_column(Text)
    verification_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=VerificationStatus.PENDING.value
    )
    registration_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            "role IN ('athlete', 'organizer', 'admin', 'scout')", name="ck_users_role"
        ),
        Index("ix_users_role", "role"),
        Index("ix_users_fullname", "fullname"),
    )


class UserDetails(Base):
    """Extended profile maintained from the settings page."""
    __tablename__ = "user_details"

    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True
    )
    height_cm: Mapped[Optional[float]] = mapped_column(Float)
    weight_kg: Mapped[Optional[float]] = mapped_column(Float)
    position: Mapped[Optional[str]] = mapped_column(String(100))
    jersey_number: Mapped[Optional[int]] = mapped_column(Integer)
    contact_num: Mapped[Optional[str]] = mapped_column(String(50))
    email: Mapped[Optional[str]] = mapped_column(String(255))
    video_url: Mapped[Optional[str]] = mapped_column(String(500))
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500))


class Achievement(Base):
    __tablename__ = "achievements"

    achievement_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    year: Mapped[Optional[int]] = mapped_column(Integer)
    description: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    __table_args__ = (Index("ix_achievements_user", "user_id"),)


class Education(Base):
    __tablename__ = "education"

    education_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False
    )
    school: Mapped[str] = mapped_column(String(255), nullable=False)
    degree: Mapped[Optional[str]] = mapped_column(String(255))
    field: Mapped[Optional[str]] = mapped_column(String(255))
    end_year: Mapped[Optional[int]] = mapped_column(Integer)

    __table_args__ = (Index("ix_education_user", "user_id"),)


class AthleteStats(Base):
    """Season averages, one row per athlete."""
    __tablename__ = "athlete_stats"

    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True
    )
    ppg: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    rpg: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    apg: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now()
    )


# =============================================================================
# EVENTS
# =============================================================================

class Event(Base):
    """An organizer-run event."""
    __tablename__ = "events"

    event_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organizer_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE")
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[Optional[str]] = mapped_column(String(50))
    sport_name: Mapped[Optional[str]] = mapped_column(String(100))
    start_datetime: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    end_datetime: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    location: Mapped[Optional[str]] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text)
    # Capacity as typed by the organizer, not the live participant count
    participants: Mapped[Optional[int]] = mapped_column(Integer)
    status: Mapped[Optional[str]] = mapped_column(String(20))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    __table_args__ = (
        Index("ix_events_organizer", "organizer_id"),
        Index("ix_events_start", "start_datetime"),
    )


class EventCategory(Base):
    __tablename__ = "event_categories"

    category_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Not unique: organizers can create the same name twice
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class Sponsor(Base):
    __tablename__ = "sponsors"

    sponsor_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class EventCategoryMapping(Base):
    __tablename__ = "event_category_mapping"

    event_id: Mapped[int] = mapped_column(
        ForeignKey("events.event_id", ondelete="CASCADE"), primary_key=True
    )
    category_id: Mapped[int] = mapped_column(
        ForeignKey("event_categories.category_id", ondelete="CASCADE"), primary_key=True
    )


class EventSponsorMapping(Base):
    __tablename__ = "event_sponsor_mapping"

    event_id: Mapped[int] = mapped_column(
        ForeignKey("events.event_id", ondelete="CASCADE"), primary_key=True
    )
    sponsor_id: Mapped[int] = mapped_column(
        ForeignKey("sponsors.sponsor_id", ondelete="CASCADE"), primary_key=True
    )


class EventParticipant(Base):
    __tablename__ = "event_participants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(
        ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_participant"),
        Index("ix_event_participants_event", "event_id"),
    )


# =============================================================================
# NEWS
# =============================================================================

class NewsDraft(Base):
    __tablename__ = "news_drafts"

    draft_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[Optional[str]] = mapped_column(String(255))
    content: Mapped[Optional[str]] = mapped_column(Text)
    category: Mapped[Optional[str]] = mapped_column(String(100))
    event_date: Mapped[Optional[date]] = mapped_column(Date)
    location: Mapped[Optional[str]] = mapped_column(String(255))
    last_modified: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    __table_args__ = (Index("ix_news_drafts_user", "user_id"),)


class NewsPublished(Base):
    __tablename__ = "news_published"

    news_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False
    )
    author_name: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100))
    event_date: Mapped[Optional[date]] = mapped_column(Date)
    location: Mapped[Optional[str]] = mapped_column(String(255))
    publish_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    __table_args__ = (Index("ix_news_published_publish_date", "publish_date"),)


# =============================================================================
# SOCIAL
# =============================================================================

class Follow(Base):
    __tablename__ = "follows"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    follower_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False
    )
    following_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", name="uq_follow_pair"),
        CheckConstraint("follower_id <> following_id", name="ck_follow_not_self"),
        Index("ix_follows_following", "following_id"),
    )


class UserReview(Base):
    __tablename__ = "user_review"

    review_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reviewer_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False
    )
    reviewee_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_review_rating_range"),
        CheckConstraint("reviewer_id <> reviewee_id", name="ck_review_not_self"),
        Index("ix_user_review_reviewee", "reviewee_id"),
    )
