"""
FastAPI Dependencies
====================

Common dependencies for dependency injection. The database and auth client
are created by the application factory and read back from ``app.state``.
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from athletix.auth import AuthClient
from athletix.config import Settings
from athletix.errors import Forbidden, Unauthorized


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session."""
    async with request.app.state.database.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


def get_auth_client(request: Request) -> AuthClient:
    return request.app.state.auth_client


async def get_admin_api_key(
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
    settings: Settings = Depends(get_settings),
) -> str:
    """Verify admin API key for protected endpoints."""
    if not x_api_key:
        raise Unauthorized("Missing API key header (X-API-Key)")

    if x_api_key != settings.admin_api_key:
        raise Forbidden("Invalid API key")

    return x_api_key


async def get_bearer_token(authorization: Optional[str] = Header(None)) -> str:
    """Extract the session token from an ``Authorization: Bearer`` header."""
    if not authorization:
        raise Unauthorized("Missing Authorization header")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized("Authorization header must be a Bearer token")

    return token.strip()
