"""
Athletix API Schemas
====================

Pydantic schemas for request/response validation, grouped by resource:
- Accounts (registration, login, settings, admin actions)
- Athletes and stats
- Events, categories/sponsors, participants
- News drafts and published articles
- Follows, reviews, search
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from athletix.models import UserRole


# =============================================================================
# BASE SCHEMAS
# =============================================================================

class BaseSchema(BaseModel):
    """Base schema with common configuration."""
    model_config = ConfigDict(from_attributes=True)


class RequestSchema(BaseModel):
    """Request bodies accept both snake_case names and the frontend's camelCase aliases."""
    model_config = ConfigDict(populate_by_name=True)


def _assume_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class MessageResponse(BaseModel):
    message: str


# =============================================================================
# HEALTH & STATUS
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    timestamp: datetime
    database: str
    auth: str
    environment: str


class ReadyResponse(BaseModel):
    """Readiness probe response."""
    ready: bool
    checks: Dict[str, bool]


# =============================================================================
# ACCOUNTS
# =============================================================================

class RegisterRequest(RequestSchema):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)
    role: UserRole
    gender: Optional[str] = None
    birth_date: Optional[date] = Field(None, alias="birthDate")
    region: Optional[str] = None
    sport: int
    bio: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class SessionInfo(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_type: str = "bearer"


class LoginUser(BaseModel):
    id: UUID
    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None
    sport: Optional[str] = None
    verification_status: Optional[str] = None


class LoginResponse(BaseModel):
    message: str
    session: SessionInfo
    user: LoginUser


class ForgotPasswordRequest(BaseModel):
    email: Optional[str] = None


class UpdatePasswordRequest(BaseModel):
    password: str = Field(..., min_length=6)


class SportRead(BaseSchema):
    sport_id: int
    sport_name: str


class UserSummary(BaseModel):
    """Row of the admin user table."""
    id: UUID
    name: str
    sport: Optional[str] = None
    role: str
    registrationDate: Optional[datetime] = None
    verificationStatus: Optional[str] = None


class VerifyUserRequest(BaseModel):
    status: Optional[str] = None


class UserRead(BaseSchema):
    user_id: UUID
    fullname: str
    role: str
    sport_id: Optional[int] = None
    sport_name: Optional[str] = None
    birthdate: Optional[date] = None
    gender: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    verification_status: str
    registration_date: Optional[datetime] = None


class VerifyUserResponse(BaseModel):
    message: str
    data: List[UserRead]


class UserDetailsRead(BaseSchema):
    height_cm: Optional[float] = None
    weight_kg: Optional[float] = None
    position: Optional[str] = None
    jersey_number: Optional[int] = None
    contact_num: Optional[str] = None
    email: Optional[str] = None
    video_url: Optional[str] = None
    avatar_url: Optional[str] = None


class SettingsRead(UserRead):
    details: UserDetailsRead


class SettingsUpdate(RequestSchema):
    fullname: Optional[str] = Field(None, min_length=1)
    gender: Optional[str] = None
    birthdate: Optional[date] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    sport_id: Optional[int] = None
    height_cm: Optional[float] = Field(None, ge=0)
    weight_kg: Optional[float] = Field(None, ge=0)
    position: Optional[str] = None
    jersey_number: Optional[int] = Field(None, ge=0)
    contact_num: Optional[str] = None
    email: Optional[str] = None
    video_url: Optional[str] = None
    avatar_url: Optional[str] = None


class AchievementRead(BaseSchema):
    achievement_id: int
    title: str
    year: Optional[int] = None
    description: Optional[str] = None


# =============================================================================
# ATHLETES & STATS
# =============================================================================

class StatValue(BaseModel):
    label: str
    value: Any
    max: Optional[int] = None


class AthleteCard(BaseModel):
    """Athlete as listed on the browse page."""
    id: UUID
    name: str
    sport: str
    position: str
    age: Optional[int] = None
    gender: str
    location: str
    height: Optional[float] = None
    weight: Optional[float] = None
    achievements: int
    stats: List[StatValue]
    verification_status: Optional[str] = None
    imageUrl: Optional[str] = None


class EducationItem(BaseModel):
    school: str
    degree: Optional[str] = None
    field: Optional[str] = None
    year: Optional[str] = None


class AthleteProfile(BaseModel):
    id: UUID
    name: str
    sport: str
    position: Optional[str] = None
    age: Optional[int] = None
    gender: str
    location: str
    bio: str
    verification_status: Optional[str] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    jerseyNumber: Optional[int] = None
    email: Optional[str] = None
    imageUrl: Optional[str] = None
    contactNum: Optional[str] = None
    videos: List[Dict[str, str]]
    achievements: List[AchievementRead]
    education: List[EducationItem]
    stats: Dict[str, List[StatValue]]


class AthleteStatsInput(BaseModel):
    ppg: Optional[float] = Field(None, ge=0)
    rpg: Optional[float] = Field(None, ge=0)
    apg: Optional[float] = Field(None, ge=0)


class StatsUpload(AthleteStatsInput):
    user_id: UUID


class AthleteStatsRead(BaseSchema):
    user_id: UUID
    ppg: float
    rpg: float
    apg: float
    updated_at: Optional[datetime] = None


class AthleteStatsResponse(BaseModel):
    message: str
    stats: AthleteStatsRead


class AthleteStatsRow(AthleteStatsRead):
    name: str
    sport: Optional[str] = None


class PlatformStats(BaseModel):
    total_users: int
    users_by_role: Dict[str, int]
    total_events: int
    total_participations: int
    total_news: int
    verified_users: int


# =============================================================================
# EVENTS
# =============================================================================

class CategoryRead(BaseSchema):
    category_id: int
    name: str


class SponsorRead(BaseSchema):
    sponsor_id: int
    name: str


class EventFields(RequestSchema):
    """Scalar event columns accepted by create and edit."""
    title: Optional[str] = Field(None, min_length=1)
    type: Optional[str] = None
    sport_name: Optional[str] = Field(None, alias="sport")
    start_datetime: Optional[datetime] = None
    end_datetime: Optional[datetime] = None
    location: Optional[str] = None
    description: Optional[str] = None

    @field_validator("start_datetime", "end_datetime")
    @classmethod
    def _utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _assume_utc(value)

    @model_validator(mode="after")
    def _end_after_start(self):
        if self.start_datetime and self.end_datetime and self.end_datetime <= self.start_datetime:
            raise ValueError("End date/time must be after start date/time.")
        return self

    def scalar_updates(self) -> Dict[str, Any]:
        """Columns explicitly present in the request."""
        return self.model_dump(include=set(EventFields.model_fields), exclude_unset=True)


class AssociationFields(BaseModel):
    category_ids: List[int] = []
    new_categories: List[str] = []
    sponsor_ids: List[int] = []
    new_sponsors: List[str] = []

    @field_validator("new_categories", "new_sponsors")
    @classmethod
    def _strip_names(cls, value: List[str]) -> List[str]:
        return [name.strip() for name in value if name and name.strip()]


class EventCreate(EventFields, AssociationFields):
    organizer_id: UUID
    title: str = Field(..., min_length=1)
    start_datetime: datetime
    end_datetime: datetime


class EventUpdate(EventFields, AssociationFields):
    """Full edit: scalar fields plus category/sponsor reconciliation."""


class EventSimpleUpdate(EventFields):
    participants: Optional[int] = Field(None, ge=0)
    status: Optional[str] = None

    def scalar_updates(self) -> Dict[str, Any]:
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None
        }


class EventRead(BaseSchema):
    event_id: int
    organizer_id: Optional[UUID] = None
    title: str
    type: Optional[str] = None
    sport_name: Optional[str] = None
    start_datetime: Optional[datetime] = None
    end_datetime: Optional[datetime] = None
    location: Optional[str] = None
    description: Optional[str] = None
    participants: Optional[int] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None


class EventListItem(EventRead):
    participant_count: int


class EventListResponse(BaseModel):
    events: List[EventListItem]


class EventWithNames(EventRead):
    """Event plus the names of its categories and sponsors."""
    categories: List[str]
    sponsors: List[str]


class EventMutationResponse(BaseModel):
    message: str
    event: EventWithNames


class EventSimpleResponse(BaseModel):
    message: str
    event: EventRead


class EventEditDetails(EventRead):
    categories: List[CategoryRead]
    sponsors: List[SponsorRead]


class EventDetail(EventRead):
    """Event page payload."""
    date: Optional[datetime] = None
    endDate: Optional[datetime] = None
    organizer: Optional[str] = None
    categories: List[str]
    sponsors: List[str]
    participantCount: int


# =============================================================================
# PARTICIPANTS
# =============================================================================

class ParticipationRequest(RequestSchema):
    user_id: UUID = Field(..., alias="userId")


class ParticipantRead(BaseModel):
    participantNo: int
    userId: UUID
    name: str
    sport: Optional[str] = None
    location: Optional[str] = None
    age: Optional[int] = None
    joinedAt: datetime


class ParticipantList(BaseModel):
    participants: List[ParticipantRead]


class CountResponse(BaseModel):
    count: int


class JoinedResponse(BaseModel):
    hasJoined: bool


# =============================================================================
# NEWS
# =============================================================================

class DraftSave(BaseModel):
    draft_id: Optional[int] = None
    user_id: UUID
    title: Optional[str] = None
    event_date: Optional[date] = None
    location: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None


class DraftRead(BaseSchema):
    draft_id: int
    user_id: UUID
    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    event_date: Optional[date] = None
    location: Optional[str] = None
    last_modified: datetime


class DraftList(BaseModel):
    success: bool = True
    drafts: List[DraftRead]


class DraftSaved(BaseModel):
    success: bool = True
    message: str
    draft_id: int


class NewsPublish(BaseModel):
    user_id: UUID
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    category: Optional[str] = None
    event_date: Optional[date] = None
    location: Optional[str] = None
    draft_id: Optional[int] = None


class NewsUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    event_date: Optional[date] = None
    location: Optional[str] = None


class ArticleRead(BaseSchema):
    news_id: int
    user_id: UUID
    author_name: str
    title: str
    content: str
    category: Optional[str] = None
    event_date: Optional[date] = None
    location: Optional[str] = None
    publish_date: datetime
    created_at: Optional[datetime] = None
    read_time: str


class ArticleList(BaseModel):
    success: bool = True
    articles: List[ArticleRead]


class ArticleResponse(BaseModel):
    success: bool = True
    article: ArticleRead


class ArticleMutation(ArticleResponse):
    message: str


class PublishResponse(BaseModel):
    success: bool = True
    message: str
    news_id: int


class SuccessMessage(BaseModel):
    success: bool = True
    message: str


# =============================================================================
# FOLLOWS & REVIEWS
# =============================================================================

class FollowRequest(BaseModel):
    follower_id: UUID
    following_id: UUID


class IsFollowingResponse(BaseModel):
    isFollowing: bool


class ReviewCreate(BaseModel):
    reviewer_id: UUID
    reviewee_id: UUID
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None


class ReviewRead(BaseModel):
    review_id: int
    reviewer_id: UUID
    reviewee_id: UUID
    rating: int
    comment: Optional[str] = None
    created_at: datetime
    reviewer_name: str
    reviewer_avatar: Optional[str] = None


# =============================================================================
# PROFILES & SEARCH
# =============================================================================

class OrganizerProfile(UserRead):
    avatar_url: Optional[str] = None
    events: List[EventRead]
    achievements: List[AchievementRead]


class SearchResult(BaseModel):
    """User hits carry the UUID, event hits the integer event id."""
    type: str
    id: Union[UUID, int]
    name: str
    sport: Optional[str] = None
    role: Optional[str] = None
    date: Optional[datetime] = None
