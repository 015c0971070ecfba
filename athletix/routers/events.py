"""
Events Router
=============

Event creation, listing, the event page payload and deletion, plus the
sport reference list used by the forms.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from athletix.dependencies import get_db
from athletix.errors import Forbidden, NotFound
from athletix.models import Event, Sport, User, UserRole
from athletix.schemas import (
    EventCreate, EventDetail, EventListItem, EventListResponse, EventMutationResponse,
    MessageResponse, SportRead,
)
from athletix.services import (
    create_event, event_columns, event_status, get_category_names, get_participant_count,
    get_participant_counts, get_sponsor_names, optional_read,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Events"])

ORGANIZING_ROLES = {UserRole.ORGANIZER.value, UserRole.ADMIN.value}


@router.get("/sports", response_model=List[SportRead])
async def list_sports(db: AsyncSession = Depends(get_db)) -> List[SportRead]:
    result = await db.execute(select(Sport).order_by(Sport.sport_name))
    return [SportRead.model_validate(s) for s in result.scalars().all()]


@router.post(
    "/create-events",
    response_model=EventMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create(payload: EventCreate, db: AsyncSession = Depends(get_db)) -> EventMutationResponse:
    """
    Create an event on behalf of an organizer.

    Optional ``category_ids``/``new_categories`` and ``sponsor_ids``/``new_sponsors``
    are applied in the same transaction as the insert.

    **Example request:**
    ```json
    {
        "organizer_id": "uuid",
        "title": "City 5K",
        "type": "race",
        "sport": "Running",
        "start_datetime": "2025-05-01T07:00:00",
        "end_datetime": "2025-05-01T11:00:00",
        "location": "Riverside Park",
        "new_categories": ["5K Run"]
    }
    ```
    """
    organizer = await db.get(User, payload.organizer_id)
    if organizer is None:
        raise NotFound("Organizer not found")
    if organizer.role not in ORGANIZING_ROLES:
        raise Forbidden("Only organizers can create events")

    event = await create_event(
        db,
        organizer_id=payload.organizer_id,
        fields=payload.scalar_updates(),
        category_ids=payload.category_ids,
        new_categories=payload.new_categories,
        sponsor_ids=payload.sponsor_ids,
        new_sponsors=payload.new_sponsors,
    )
    return EventMutationResponse(message="Event created successfully.", event=event)


@router.get("/get-events", response_model=EventListResponse)
async def list_events(db: AsyncSession = Depends(get_db)) -> EventListResponse:
    """All events, soonest first, with live participant counts and derived status."""
    result = await db.execute(
        select(Event).order_by(Event.start_datetime.asc(), Event.event_id.asc())
    )
    events = result.scalars().all()
    counts = await get_participant_counts(db, (e.event_id for e in events))

    items = []
    for event in events:
        row = event_columns(event)
        row["status"] = event.status or event_status(event.start_datetime, event.end_datetime)
        items.append(EventListItem(**row, participant_count=counts.get(event.event_id, 0)))

    return EventListResponse(events=items)


@router.get("/api/events/{event_id}", response_model=EventDetail)
async def get_event(event_id: int, db: AsyncSession = Depends(get_db)) -> EventDetail:
    """
    Event page payload.

    The event row is required; organizer name, categories, sponsors and the
    participant count fall back to defaults when their reads fail.
    """
    event = await db.get(Event, event_id)
    if event is None:
        raise NotFound("Event not found")
    row = event_columns(event)

    async def organizer_name():
        if event.organizer_id is None:
            return None
        organizer = await db.get(User, event.organizer_id)
        return organizer.fullname if organizer else None

    organizer = await optional_read("event organizer", organizer_name, None)
    categories = await optional_read(
        "event categories", lambda: get_category_names(db, event_id), []
    )
    sponsors = await optional_read("event sponsors", lambda: get_sponsor_names(db, event_id), [])
    participant_count = await optional_read(
        "participant count", lambda: get_participant_count(db, event_id), 0
    )

    row["status"] = row["status"] or event_status(row["start_datetime"], row["end_datetime"])
    return EventDetail(
        **row,
        date=row["start_datetime"],
        endDate=row["end_datetime"],
        organizer=organizer,
        categories=categories,
        sponsors=sponsors,
        participantCount=participant_count,
    )


@router.delete("/api/events/{event_id}", response_model=MessageResponse)
async def delete_event(
    event_id: int,
    organizer_id: UUID = Query(..., description="Acting organizer; must own the event"),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Delete an event; participants and category/sponsor mappings cascade."""
    event = await db.get(Event, event_id)
    if event is None:
        raise NotFound("Event not found")
    if event.organizer_id != organizer_id:
        raise Forbidden("Only the organizer can delete this event")

    await db.execute(delete(Event).where(Event.event_id == event_id))
    await db.commit()

    logger.info("Event %s deleted by organizer %s", event_id, organizer_id)
    return MessageResponse(message="Event deleted successfully")
