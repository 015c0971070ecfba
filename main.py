"""
Athletix API
============
Athletes, organizers and scouts in one place.

Main FastAPI application entry point.
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse

from athletix.auth import AuthClient
from athletix.config import Settings, configure_logging, get_settings
from athletix.database import Database
from athletix.middleware import setup_exception_handlers, setup_middleware
from athletix.routers import (
    accounts_router,
    admin_router,
    athletes_router,
    edit_event_router,
    events_router,
    follows_router,
    health_router,
    news_router,
    participants_router,
    profiles_router,
    reviews_router,
    search_router,
    settings_router,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Athletix API starting up...")
    await app.state.database.check_connection()
    logger.info("Database connection verified")
    yield
    # Shutdown
    logger.info("Athletix API shutting down...")
    await app.state.auth_client.close()
    await app.state.database.dispose()


# OpenAPI tags metadata for better documentation
tags_metadata = [
    {"name": "Health", "description": "Health check and status endpoints"},
    {"name": "Accounts", "description": "Registration, login and password recovery"},
    {"name": "Settings", "description": "Profile settings and password change"},
    {"name": "Athletes", "description": "Athlete browse list, profiles and stats"},
    {"name": "Profiles", "description": "Public organizer profiles"},
    {"name": "Events", "description": "Event creation, editing and deletion"},
    {"name": "Participants", "description": "Joining and leaving events"},
    {"name": "News", "description": "News drafts and published articles"},
    {"name": "Social", "description": "Follows and reviews"},
    {"name": "Search", "description": "Search across users and events"},
    {"name": "Admin", "description": "Admin-only endpoints (requires API key)"},
]


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    auth_client: Optional[AuthClient] = None,
) -> FastAPI:
    """
    Build the application.

    The database and auth client default to ones built from ``settings``;
    tests pass their own.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    if database is None:
        database = Database(
            settings.async_database_url,
            echo=settings.debug,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
        )
    if auth_client is None:
        auth_client = AuthClient(
            settings.supabase_url,
            settings.supabase_anon_key,
            service_role_key=settings.supabase_service_role_key,
            timeout=settings.auth_timeout,
        )

    app = FastAPI(
        title="Athletix API",
        description="""
## Athletix

Backend for the Athletix platform connecting athletes, organizers and scouts.

### Features

- Athlete profiles, stats and achievements
- Event creation with categories and sponsors, joining and leaving
- News drafts and publishing
- Follows, reviews and search

### Authentication

Accounts are managed by the hosted auth service; session endpoints take a
`Authorization: Bearer <token>` header. Admin endpoints require `X-API-Key`.
""",
        version=settings.api_version,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        openapi_tags=tags_metadata,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.auth_client = auth_client

    setup_middleware(app, settings)
    setup_exception_handlers(app)

    # Request timing middleware
    @app.middleware("http")
    async def add_timing_header(request: Request, call_next):
        """Add X-Response-Time header to all responses."""
        start_time = time.perf_counter()
        response = await call_next(request)
        process_time = (time.perf_counter() - start_time) * 1000
        response.headers["X-Response-Time"] = f"{process_time:.2f}ms"
        return response

    # Include routers
    # Health, accounts and the event pages live at root level
    app.include_router(health_router)
    app.include_router(accounts_router)
    app.include_router(events_router)

    app.include_router(settings_router, prefix="/api")
    app.include_router(admin_router, prefix="/api")
    app.include_router(athletes_router, prefix="/api")
    app.include_router(profiles_router, prefix="/api")
    app.include_router(edit_event_router, prefix="/api")
    app.include_router(participants_router, prefix="/api")
    app.include_router(news_router, prefix="/api/news")
    app.include_router(news_router, prefix="/api/news-drafts", include_in_schema=False)
    app.include_router(follows_router, prefix="/api")
    app.include_router(reviews_router, prefix="/api")
    app.include_router(search_router, prefix="/api")

    @app.get("/", response_class=ORJSONResponse)
    async def root() -> Dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": "Athletix API",
            "version": settings.api_version,
            "description": "Athletes, organizers and scouts in one place",
            "docs": "/docs",
            "health": "/health",
            "api": {
                "athletes": "/api/athletes",
                "events": "/get-events",
                "news": "/api/news",
                "search": "/api/search?q=",
            },
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
