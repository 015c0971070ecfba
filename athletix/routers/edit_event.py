"""
Edit Event Router
=================

Backs the event edit modal: option lists, the current event with its
category/sponsor objects, a scalar-only update and the full update that
reconciles category and sponsor memberships.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from athletix.dependencies import get_db
from athletix.errors import BadRequest, NotFound
from athletix.models import (
    Event, EventCategory, EventCategoryMapping, EventSponsorMapping, Sponsor,
)
from athletix.schemas import (
    CategoryRead, EventEditDetails, EventMutationResponse, EventRead, EventSimpleResponse,
    EventSimpleUpdate, EventUpdate, SponsorRead,
)
from athletix.services import apply_event_fields, event_columns, reconcile_event

router = APIRouter(prefix="/edit-event", tags=["Events"])


@router.get("/categories", response_model=List[CategoryRead])
async def list_categories(db: AsyncSession = Depends(get_db)) -> List[CategoryRead]:
    result = await db.execute(select(EventCategory).order_by(EventCategory.name, EventCategory.category_id))
    return [CategoryRead.model_validate(c) for c in result.scalars().all()]


@router.get("/sponsors", response_model=List[SponsorRead])
async def list_sponsors(db: AsyncSession = Depends(get_db)) -> List[SponsorRead]:
    result = await db.execute(select(Sponsor).order_by(Sponsor.name, Sponsor.sponsor_id))
    return [SponsorRead.model_validate(s) for s in result.scalars().all()]


@router.get("/{event_id}/details", response_model=EventEditDetails)
async def get_edit_details(event_id: int, db: AsyncSession = Depends(get_db)) -> EventEditDetails:
    event = await db.get(Event, event_id)
    if event is None:
        raise NotFound("Event not found.")

    categories = await db.execute(
        select(EventCategory)
        .join(EventCategoryMapping, EventCategoryMapping.category_id == EventCategory.category_id)
        .where(EventCategoryMapping.event_id == event_id)
        .order_by(EventCategory.category_id)
    )
    sponsors = await db.execute(
        select(Sponsor)
        .join(EventSponsorMapping, EventSponsorMapping.sponsor_id == Sponsor.sponsor_id)
        .where(EventSponsorMapping.event_id == event_id)
        .order_by(Sponsor.sponsor_id)
    )

    return EventEditDetails(
        **event_columns(event),
        categories=[CategoryRead.model_validate(c) for c in categories.scalars().all()],
        sponsors=[SponsorRead.model_validate(s) for s in sponsors.scalars().all()],
    )


@router.put("/{event_id}/simple", response_model=EventSimpleResponse)
async def update_event_simple(
    event_id: int,
    payload: EventSimpleUpdate,
    db: AsyncSession = Depends(get_db),
) -> EventSimpleResponse:
    """Update scalar fields only; null or missing fields are left alone."""
    updates = payload.scalar_updates()
    if not updates:
        raise BadRequest(
            "No valid fields to update",
            details={"received": payload.model_dump(mode="json", exclude_unset=True)},
        )

    event = await db.get(Event, event_id)
    if event is None:
        raise NotFound("Event not found.")

    apply_event_fields(event, updates)
    await db.commit()
    await db.refresh(event)

    return EventSimpleResponse(
        message="Event updated successfully.",
        event=EventRead.model_validate(event),
    )


@router.put("/{event_id}", response_model=EventMutationResponse)
async def update_event(
    event_id: int,
    payload: EventUpdate,
    db: AsyncSession = Depends(get_db),
) -> EventMutationResponse:
    """
    Update an event and replace its categories and sponsors.

    **Example request:**
    ```json
    {
        "title": "City 5K (rescheduled)",
        "category_ids": [3],
        "new_categories": ["Esports"],
        "sponsor_ids": [],
        "new_sponsors": ["Acme Drinks"]
    }
    ```

    ``categories``/``sponsors`` in the response are the names mapped to the
    event after the update.
    """
    updates = payload.scalar_updates()
    # title is NOT NULL; an explicit null keeps the current one
    if updates.get("title") is None:
        updates.pop("title", None)

    event = await reconcile_event(
        db,
        event_id,
        updates=updates,
        category_ids=payload.category_ids,
        new_categories=payload.new_categories,
        sponsor_ids=payload.sponsor_ids,
        new_sponsors=payload.new_sponsors,
    )
    return EventMutationResponse(message="Event updated successfully.", event=event)
