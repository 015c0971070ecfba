"""
News Router
===========

Drafts and published articles. The same router is mounted at both
``/api/news`` and ``/api/news-drafts``.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from athletix.dependencies import get_db
from athletix.errors import NotFound
from athletix.models import NewsDraft, NewsPublished, User, utcnow
from athletix.schemas import (
    ArticleList, ArticleMutation, ArticleResponse, DraftList, DraftRead, DraftSave, DraftSaved,
    NewsPublish, NewsUpdate, PublishResponse, SuccessMessage,
)
from athletix.services import article_payload

logger = logging.getLogger(__name__)

router = APIRouter(tags=["News"])

DRAFT_FIELDS = ("title", "event_date", "location", "content", "category")


# =============================================================================
# DRAFTS
# =============================================================================

@router.get("/drafts/{user_id}", response_model=DraftList)
async def list_drafts(user_id: UUID, db: AsyncSession = Depends(get_db)) -> DraftList:
    result = await db.execute(
        select(NewsDraft)
        .where(NewsDraft.user_id == user_id)
        .order_by(NewsDraft.last_modified.desc(), NewsDraft.draft_id.desc())
    )
    return DraftList(drafts=[DraftRead.model_validate(d) for d in result.scalars().all()])


@router.post("/drafts/save", response_model=DraftSaved)
async def save_draft(
    payload: DraftSave,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> DraftSaved:
    """
    Create a draft, or update one when ``draft_id`` is given.

    Updates only touch drafts owned by ``user_id``. Creation answers 201,
    update 200.
    """
    if payload.draft_id is not None:
        draft = (
            await db.execute(
                select(NewsDraft).where(
                    NewsDraft.draft_id == payload.draft_id,
                    NewsDraft.user_id == payload.user_id,
                )
            )
        ).scalar_one_or_none()
        if draft is None:
            raise NotFound("Draft not found")

        for field in DRAFT_FIELDS:
            setattr(draft, field, getattr(payload, field))
        draft.last_modified = utcnow()
        await db.commit()

        return DraftSaved(message="Draft updated successfully", draft_id=draft.draft_id)

    draft = NewsDraft(
        user_id=payload.user_id,
        **{field: getattr(payload, field) for field in DRAFT_FIELDS},
    )
    db.add(draft)
    await db.commit()
    await db.refresh(draft)

    response.status_code = status.HTTP_201_CREATED
    return DraftSaved(message="Draft created successfully", draft_id=draft.draft_id)


@router.delete("/drafts/{draft_id}", response_model=SuccessMessage)
async def delete_draft(draft_id: int, db: AsyncSession = Depends(get_db)) -> SuccessMessage:
    await db.execute(delete(NewsDraft).where(NewsDraft.draft_id == draft_id))
    await db.commit()
    return SuccessMessage(message="Draft deleted successfully")


# =============================================================================
# PUBLISHED ARTICLES
# =============================================================================

@router.post("/publish", response_model=PublishResponse, status_code=status.HTTP_201_CREATED)
async def publish(payload: NewsPublish, db: AsyncSession = Depends(get_db)) -> PublishResponse:
    """
    Publish an article under the author's current name.

    When ``draft_id`` is given, the author's draft is removed in the same
    transaction as the insert.
    """
    author = await db.get(User, payload.user_id)
    if author is None:
        raise NotFound("User not found")

    try:
        article = NewsPublished(
            user_id=payload.user_id,
            author_name=author.fullname,
            title=payload.title,
            content=payload.content,
            category=payload.category,
            event_date=payload.event_date,
            location=payload.location,
        )
        db.add(article)
        if payload.draft_id is not None:
            await db.execute(
                delete(NewsDraft).where(
                    NewsDraft.draft_id == payload.draft_id,
                    NewsDraft.user_id == payload.user_id,
                )
            )
        await db.commit()
        await db.refresh(article)
    except Exception:
        await db.rollback()
        raise

    logger.info("Article %s published by %s", article.news_id, payload.user_id)
    return PublishResponse(message="Article published successfully", news_id=article.news_id)


@router.get("", response_model=ArticleList)
async def list_articles(db: AsyncSession = Depends(get_db)) -> ArticleList:
    """Published articles, most recent first."""
    result = await db.execute(
        select(NewsPublished).order_by(
            NewsPublished.publish_date.desc(), NewsPublished.news_id.desc()
        )
    )
    return ArticleList(articles=[article_payload(a) for a in result.scalars().all()])


@router.get("/{news_id}", response_model=ArticleResponse)
async def get_article(news_id: int, db: AsyncSession = Depends(get_db)) -> ArticleResponse:
    article = await db.get(NewsPublished, news_id)
    if article is None:
        raise NotFound("Article not found")
    return ArticleResponse(article=article_payload(article))


@router.put("/{news_id}", response_model=ArticleMutation)
async def update_article(
    news_id: int,
    payload: NewsUpdate,
    db: AsyncSession = Depends(get_db),
) -> ArticleMutation:
    article = await db.get(NewsPublished, news_id)
    if article is None:
        raise NotFound("Article not found")

    for field, value in payload.model_dump(exclude_unset=True).items():
        # title and content are NOT NULL
        if value is None and field in ("title", "content"):
            continue
        setattr(article, field, value)

    await db.commit()
    await db.refresh(article)
    return ArticleMutation(message="Article updated successfully", article=article_payload(article))


@router.delete("/{news_id}", response_model=SuccessMessage)
async def delete_article(news_id: int, db: AsyncSession = Depends(get_db)) -> SuccessMessage:
    result = await db.execute(delete(NewsPublished).where(NewsPublished.news_id == news_id))
    if result.rowcount == 0:
        await db.rollback()
        raise NotFound("Article not found")

    await db.commit()
    return SuccessMessage(message="News article deleted successfully")
