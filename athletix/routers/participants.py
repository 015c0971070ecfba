"""
Event Participants Router
=========================

Join/leave an event and read its participant list and count.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from athletix.dependencies import get_db
from athletix.errors import BadRequest, Conflict, NotFound, is_unique_violation
from athletix.models import Event, EventParticipant, User
from athletix.schemas import (
    CountResponse, JoinedResponse, MessageResponse, ParticipantList, ParticipantRead,
    ParticipationRequest,
)
from athletix.services import calculate_age, get_participant_count

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/event-participants", tags=["Participants"])

ALREADY_JOINED = "Already joined this event"


async def _find_participation(db: AsyncSession, event_id: int, user_id: UUID):
    result = await db.execute(
        select(EventParticipant.id).where(
            EventParticipant.event_id == event_id,
            EventParticipant.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


@router.post("/{event_id}/join", response_model=MessageResponse)
async def join_event(
    event_id: int,
    payload: ParticipationRequest,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """
    Join an event.

    The user's sport must match the event's sport. Joining twice is a
    conflict and leaves the participant count unchanged.
    """
    user = await db.get(User, payload.user_id)
    if user is None:
        raise NotFound("User not found")

    event = await db.get(Event, event_id)
    if event is None:
        raise NotFound("Event not found")

    if user.sport_name != event.sport_name:
        raise BadRequest("You can only join events that match your sport type.")

    if await _find_participation(db, event_id, payload.user_id) is not None:
        raise Conflict(ALREADY_JOINED)

    db.add(EventParticipant(event_id=event_id, user_id=payload.user_id))
    try:
        await db.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent join
        await db.rollback()
        if not is_unique_violation(e):
            raise
        raise Conflict(ALREADY_JOINED)

    logger.info("User %s joined event %s", payload.user_id, event_id)
    return MessageResponse(message="Successfully joined the event!")


@router.delete("/{event_id}/leave", response_model=MessageResponse)
async def leave_event(
    event_id: int,
    payload: ParticipationRequest,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    result = await db.execute(
        delete(EventParticipant).where(
            EventParticipant.event_id == event_id,
            EventParticipant.user_id == payload.user_id,
        )
    )
    if result.rowcount == 0:
        await db.rollback()
        raise NotFound("Not a participant of this event")

    await db.commit()
    logger.info("User %s left event %s", payload.user_id, event_id)
    return MessageResponse(message="Successfully left the event")


@router.get("/{event_id}/participants", response_model=ParticipantList)
async def list_participants(event_id: int, db: AsyncSession = Depends(get_db)) -> ParticipantList:
    """Participants in join order, numbered from 1."""
    result = await db.execute(
        select(EventParticipant, User)
        .join(User, User.user_id == EventParticipant.user_id)
        .where(EventParticipant.event_id == event_id)
        .order_by(EventParticipant.joined_at.asc(), EventParticipant.id.asc())
    )
    return ParticipantList(
        participants=[
            ParticipantRead(
                participantNo=number,
                userId=participation.user_id,
                name=user.fullname,
                sport=user.sport_name,
                location=user.location,
                age=calculate_age(user.birthdate),
                joinedAt=participation.joined_at,
            )
            for number, (participation, user) in enumerate(result.all(), start=1)
        ]
    )


@router.get("/{event_id}/count", response_model=CountResponse)
async def participant_count(event_id: int, db: AsyncSession = Depends(get_db)) -> CountResponse:
    return CountResponse(count=await get_participant_count(db, event_id))


@router.get("/{event_id}/check/{user_id}", response_model=JoinedResponse)
async def check_participation(
    event_id: int,
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> JoinedResponse:
    return JoinedResponse(hasJoined=await _find_participation(db, event_id, user_id) is not None)
