"""
Reviews Router
==============

User-to-user reviews. Reviews are write-once: there is no update or
delete path.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from athletix.dependencies import get_db
from athletix.errors import BadRequest, NotFound
from athletix.models import User, UserDetails, UserReview
from athletix.schemas import ReviewCreate, ReviewRead
from athletix.services import optional_read

router = APIRouter(prefix="/reviews", tags=["Social"])

ANONYMOUS = "Anonymous"


@router.post("", response_model=ReviewRead, status_code=status.HTTP_201_CREATED)
async def add_review(payload: ReviewCreate, db: AsyncSession = Depends(get_db)) -> ReviewRead:
    if payload.reviewer_id == payload.reviewee_id:
        raise BadRequest("You cannot review yourself.")

    for user_id in (payload.reviewer_id, payload.reviewee_id):
        if await db.get(User, user_id) is None:
            raise NotFound("User not found", details={"user_id": str(user_id)})

    review = UserReview(
        reviewer_id=payload.reviewer_id,
        reviewee_id=payload.reviewee_id,
        rating=payload.rating,
        comment=payload.comment,
    )
    db.add(review)
    await db.commit()
    await db.refresh(review)

    async def reviewer_name():
        reviewer = await db.get(User, payload.reviewer_id)
        return reviewer.fullname if reviewer else ANONYMOUS

    return ReviewRead(
        review_id=review.review_id,
        reviewer_id=review.reviewer_id,
        reviewee_id=review.reviewee_id,
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at,
        reviewer_name=await optional_read("reviewer name", reviewer_name, ANONYMOUS),
    )


@router.get("/{reviewee_id}", response_model=List[ReviewRead])
async def list_reviews(reviewee_id: UUID, db: AsyncSession = Depends(get_db)) -> List[ReviewRead]:
    """Reviews received by a user, newest first."""
    result = await db.execute(
        select(UserReview, User.fullname, UserDetails.avatar_url)
        .outerjoin(User, User.user_id == UserReview.reviewer_id)
        .outerjoin(UserDetails, UserDetails.user_id == UserReview.reviewer_id)
        .where(UserReview.reviewee_id == reviewee_id)
        .order_by(UserReview.created_at.desc(), UserReview.review_id.desc())
    )
    return [
        ReviewRead(
            review_id=review.review_id,
            reviewer_id=review.reviewer_id,
            reviewee_id=review.reviewee_id,
            rating=review.rating,
            comment=review.comment,
            created_at=review.created_at,
            reviewer_name=name or ANONYMOUS,
            reviewer_avatar=avatar,
        )
        for review, name, avatar in result.all()
    ]
