"""
Follows Router
==============

Follow/unfollow users and read follower counts.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from athletix.dependencies import get_db
from athletix.errors import BadRequest, Conflict, NotFound, is_unique_violation
from athletix.models import Follow, User
from athletix.schemas import CountResponse, FollowRequest, IsFollowingResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/follows", tags=["Social"])

ALREADY_FOLLOWING = "Already following this user"


async def _follow_exists(db: AsyncSession, follower_id: UUID, following_id: UUID) -> bool:
    result = await db.execute(
        select(Follow.id).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        )
    )
    return result.scalar_one_or_none() is not None


@router.post("/follow", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def follow_user(payload: FollowRequest, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    if payload.follower_id == payload.following_id:
        raise BadRequest("Cannot follow yourself")

    for user_id in (payload.follower_id, payload.following_id):
        if await db.get(User, user_id) is None:
            raise NotFound("User not found", details={"user_id": str(user_id)})

    if await _follow_exists(db, payload.follower_id, payload.following_id):
        raise Conflict(ALREADY_FOLLOWING)

    db.add(Follow(follower_id=payload.follower_id, following_id=payload.following_id))
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if not is_unique_violation(e):
            raise
        raise Conflict(ALREADY_FOLLOWING)

    logger.info("User %s followed %s", payload.follower_id, payload.following_id)
    return MessageResponse(message="User followed successfully")


@router.delete("/unfollow", response_model=MessageResponse)
async def unfollow_user(payload: FollowRequest, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    result = await db.execute(
        delete(Follow).where(
            Follow.follower_id == payload.follower_id,
            Follow.following_id == payload.following_id,
        )
    )
    if result.rowcount == 0:
        await db.rollback()
        raise NotFound("Follow relationship not found")

    await db.commit()
    return MessageResponse(message="User unfollowed successfully")


@router.get("/is-following", response_model=IsFollowingResponse)
async def is_following(
    follower_id: UUID = Query(...),
    following_id: UUID = Query(...),
    db: AsyncSession = Depends(get_db),
) -> IsFollowingResponse:
    return IsFollowingResponse(isFollowing=await _follow_exists(db, follower_id, following_id))


@router.get("/{user_id}/followers", response_model=CountResponse)
async def follower_count(user_id: UUID, db: AsyncSession = Depends(get_db)) -> CountResponse:
    result = await db.execute(
        select(func.count()).select_from(Follow).where(Follow.following_id == user_id)
    )
    return CountResponse(count=result.scalar_one())


@router.get("/{user_id}/following", response_model=CountResponse)
async def following_count(user_id: UUID, db: AsyncSession = Depends(get_db)) -> CountResponse:
    result = await db.execute(
        select(func.count()).select_from(Follow).where(Follow.follower_id == user_id)
    )
    return CountResponse(count=result.scalar_one())
