"""
Admin Router
============

Admin-only endpoints for account moderation and stat maintenance.
Protected by API key authentication (``X-API-Key`` header).
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from athletix.auth import AuthClient
from athletix.config import Settings
from athletix.dependencies import get_admin_api_key, get_auth_client, get_db, get_settings
from athletix.errors import BadRequest, NotFound
from athletix.models import User, VerificationStatus
from athletix.schemas import (
    AthleteStatsInput, AthleteStatsRead, AthleteStatsResponse, MessageResponse,
    UserRead, UserSummary, VerifyUserRequest, VerifyUserResponse,
)
from athletix.services import upsert_athlete_stats_row

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Admin"], dependencies=[Depends(get_admin_api_key)])


@router.get("/get-users/users", response_model=List[UserSummary])
async def list_users(db: AsyncSession = Depends(get_db)) -> List[UserSummary]:
    """All accounts for the moderation table, newest first."""
    result = await db.execute(
        select(User).order_by(User.registration_date.desc(), User.fullname)
    )
    return [
        UserSummary(
            id=u.user_id,
            name=u.fullname,
            sport=u.sport_name,
            role=u.role,
            registrationDate=u.registration_date,
            verificationStatus=u.verification_status,
        )
        for u in result.scalars().all()
    ]


@router.put("/user-action/verify/{user_id}", response_model=VerifyUserResponse)
async def verify_user(
    user_id: UUID,
    payload: Optional[VerifyUserRequest] = Body(None),
    db: AsyncSession = Depends(get_db),
) -> VerifyUserResponse:
    """
    Set a user's verification status.

    Without a body the status becomes ``verified``; ``rejected`` and
    ``pending`` are the other accepted values.
    """
    new_status = (payload.status if payload else None) or VerificationStatus.VERIFIED.value
    try:
        VerificationStatus(new_status)
    except ValueError:
        raise BadRequest(
            f"Invalid verification status '{new_status}'",
            details={"allowed": [s.value for s in VerificationStatus]},
        )

    user = await db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")

    user.verification_status = new_status
    await db.commit()
    await db.refresh(user)

    logger.info("User %s verification set to %s", user_id, new_status)
    return VerifyUserResponse(
        message="User verification updated",
        data=[UserRead.model_validate(user)],
    )


@router.delete("/user-action/delete/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    auth: AuthClient = Depends(get_auth_client),
) -> MessageResponse:
    """Delete the auth account, then the profile row (children cascade)."""
    await auth.delete_user(user_id)

    await db.execute(delete(User).where(User.user_id == user_id))
    await db.commit()

    logger.info("User %s deleted", user_id)
    return MessageResponse(message="User deleted successfully")


@router.post("/user-action/reset-password/{user_id}", response_model=MessageResponse)
async def send_password_reset(
    user_id: UUID,
    auth: AuthClient = Depends(get_auth_client),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    auth_user = await auth.get_user_by_id(user_id)
    if not auth_user.email:
        raise NotFound("User email not found")

    await auth.reset_password_for_email(auth_user.email, redirect_to=settings.password_reset_url)
    return MessageResponse(message="Password reset link sent to user email")


@router.put("/athlete-stats/{user_id}", response_model=AthleteStatsResponse)
async def upsert_athlete_stats(
    user_id: UUID,
    payload: AthleteStatsInput,
    db: AsyncSession = Depends(get_db),
) -> AthleteStatsResponse:
    """Create or replace an athlete's averages; missing values are stored as 0."""
    stats = await upsert_athlete_stats_row(db, user_id, payload)
    return AthleteStatsResponse(
        message="Stats updated successfully.",
        stats=AthleteStatsRead.model_validate(stats),
    )

