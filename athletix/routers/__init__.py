"""
Athletix API Routers
====================

All API routers for the Athletix API.
"""

from athletix.routers.health import router as health_router
from athletix.routers.accounts import router as accounts_router
from athletix.routers.settings import router as settings_router
from athletix.routers.admin import router as admin_router
from athletix.routers.athletes import router as athletes_router
from athletix.routers.profiles import router as profiles_router
from athletix.routers.events import router as events_router
from athletix.routers.edit_event import router as edit_event_router
from athletix.routers.participants import router as participants_router
from athletix.routers.news import router as news_router
from athletix.routers.follows import router as follows_router
from athletix.routers.reviews import router as reviews_router
from athletix.routers.search import router as search_router

__all__ = [
    "health_router",
    "accounts_router",
    "settings_router",
    "admin_router",
    "athletes_router",
    "profiles_router",
    "events_router",
    "edit_event_router",
    "participants_router",
    "news_router",
    "follows_router",
    "reviews_router",
    "search_router",
]
