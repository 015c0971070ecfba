"""
Settings Router
===============

Profile settings (``users`` plus ``user_details``) and password change.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from athletix.auth import AuthClient
from athletix.dependencies import get_auth_client, get_bearer_token, get_db
from athletix.errors import BadRequest, NotFound
from athletix.models import Sport, User, UserDetails
from athletix.schemas import (
    MessageResponse, SettingsRead, SettingsUpdate, UpdatePasswordRequest, UserDetailsRead, UserRead,
)

router = APIRouter(tags=["Settings"])

USER_FIELDS = ("fullname", "gender", "birthdate", "location", "bio")
DETAIL_FIELDS = (
    "height_cm", "weight_kg", "position", "jersey_number",
    "contact_num", "email", "video_url", "avatar_url",
)


def _settings_payload(user: User, details: Optional[UserDetails]) -> SettingsRead:
    return SettingsRead(
        **UserRead.model_validate(user).model_dump(),
        details=UserDetailsRead.model_validate(details) if details else UserDetailsRead(),
    )


@router.get("/settings/{user_id}", response_model=SettingsRead)
async def get_settings_profile(user_id: UUID, db: AsyncSession = Depends(get_db)) -> SettingsRead:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")

    details = await db.get(UserDetails, user_id)
    return _settings_payload(user, details)


@router.put("/settings/{user_id}", response_model=SettingsRead)
async def update_settings_profile(
    user_id: UUID,
    payload: SettingsUpdate,
    db: AsyncSession = Depends(get_db),
) -> SettingsRead:
    """Update profile columns and upsert the details row."""
    user = await db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")

    changes = payload.model_dump(exclude_unset=True)

    if "sport_id" in changes and changes["sport_id"] is not None:
        sport = await db.get(Sport, changes["sport_id"])
        if sport is None:
            raise BadRequest(f"Unknown sport id {changes['sport_id']}")
        user.sport_id = sport.sport_id
        user.sport_name = sport.sport_name

    for field in USER_FIELDS:
        if field in changes:
            if field == "fullname" and changes[field] is None:
                continue
            setattr(user, field, changes[field])

    details = await db.get(UserDetails, user_id)
    detail_changes = {k: v for k, v in changes.items() if k in DETAIL_FIELDS}
    if detail_changes:
        if details is None:
            details = UserDetails(user_id=user_id)
            db.add(details)
        for field, value in detail_changes.items():
            setattr(details, field, value)

    await db.commit()
    await db.refresh(user)
    if details is not None:
        await db.refresh(details)
    return _settings_payload(user, details)


@router.put("/update-password", response_model=MessageResponse)
async def update_password(
    payload: UpdatePasswordRequest,
    token: str = Depends(get_bearer_token),
    auth: AuthClient = Depends(get_auth_client),
) -> MessageResponse:
    await auth.update_password(token, payload.password)
    return MessageResponse(message="Password updated successfully")
