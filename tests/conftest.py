"""
Pytest Configuration and Fixtures
=================================

Shared fixtures for API tests. Every test gets a fresh in-memory SQLite
database and an in-process fake of the auth service.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Any, AsyncGenerator, Dict, List, Optional
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from athletix.auth import AuthError, AuthSession, AuthUser
from athletix.config import Settings
from athletix.database import Database
from athletix.models import Event, Sport, User, UserDetails
from main import create_app


TEST_ADMIN_KEY = "test-admin-key"


# =============================================================================
# AUTH SERVICE FAKE
# =============================================================================

class FakeAuthClient:
    """In-memory stand-in for ``AuthClient`` with the same coroutine API."""

    def __init__(self):
        self.accounts: Dict[str, Dict[str, Any]] = {}
        self.reset_emails: List[str] = []
        self.signed_out: List[str] = []
        self.password_updates: List[str] = []
        self.deleted: List[UUID] = []
        self.healthy = True

    def _find(self, user_id: UUID) -> Optional[Dict[str, Any]]:
        for account in self.accounts.values():
            if account["id"] == user_id:
                return account
        return None

    async def sign_up(self, email, password, metadata=None, redirect_to=None) -> AuthUser:
        if email in self.accounts:
            raise AuthError("User already registered", status_code=422, code="user_already_exists")
        user_id = uuid4()
        self.accounts[email] = {"id": user_id, "email": email, "password": password}
        return AuthUser(id=user_id, email=email, identities=[{"id": str(user_id)}], user_metadata=metadata or {})

    async def sign_in(self, email, password) -> AuthSession:
        account = self.accounts.get(email)
        if account is None or account["password"] != password:
            raise AuthError("Invalid login credentials", status_code=400, code="invalid_credentials")
        return AuthSession(
            access_token=f"token-{account['id']}",
            refresh_token="refresh",
            expires_in=3600,
            user=AuthUser(id=account["id"], email=email),
        )

    async def sign_out(self, access_token) -> None:
        self.signed_out.append(access_token)

    async def reset_password_for_email(self, email, redirect_to=None) -> None:
        self.reset_emails.append(email)

    async def update_password(self, access_token, password) -> AuthUser:
        if not access_token.startswith("token-"):
            raise AuthError("Invalid JWT", status_code=401)
        self.password_updates.append(access_token)
        return AuthUser(id=UUID(access_token[len("token-"):]))

    async def get_user_by_id(self, user_id) -> AuthUser:
        account = self._find(user_id)
        if account is None:
            raise AuthError("User not found", status_code=404, code="user_not_found")
        return AuthUser(id=user_id, email=account["email"])

    async def delete_user(self, user_id) -> None:
        account = self._find(user_id)
        if account is not None:
            del self.accounts[account["email"]]
        self.deleted.append(user_id)

    async def health(self) -> bool:
        return self.healthy

    async def close(self) -> None:
        pass


# =============================================================================
# APPLICATION FIXTURES
# =============================================================================

@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        admin_api_key=TEST_ADMIN_KEY,
        database_url="sqlite://",
        log_level="WARNING",
    )


@pytest.fixture
def auth_client() -> FakeAuthClient:
    return FakeAuthClient()


@pytest_asyncio.fixture(scope="function")
async def database(settings: Settings) -> AsyncGenerator[Database, None]:
    """Fresh in-memory database with the full schema."""
    db = Database(settings.async_database_url)
    await db.create_schema()
    yield db
    await db.dispose()


@pytest.fixture
def session_factory(database: Database) -> async_sessionmaker:
    """Open short-lived sessions for seeding and for checking rows after requests."""
    return database.session_factory


@pytest.fixture
def app(settings: Settings, database: Database, auth_client: FakeAuthClient):
    return create_app(settings=settings, database=database, auth_client=auth_client)


@pytest_asyncio.fixture(scope="function")
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def admin_headers() -> Dict[str, str]:
    return {"X-API-Key": TEST_ADMIN_KEY}


# =============================================================================
# SEED HELPERS
# =============================================================================

async def create_user(
    session_factory: async_sessionmaker,
    fullname: str,
    role: str = "athlete",
    sport: Optional[Sport] = None,
    birthdate: Optional[date] = None,
    **details: Any,
) -> UUID:
    """Insert a user (and optionally a details row) directly; returns the id."""
    user_id = uuid4()
    async with session_factory() as session:
        session.add(User(
            user_id=user_id,
            fullname=fullname,
            role=role,
            sport_id=sport.sport_id if sport else None,
            sport_name=sport.sport_name if sport else None,
            birthdate=birthdate,
            gender="Female",
            location="Cebu City",
        ))
        if details:
            await session.flush()
            session.add(UserDetails(user_id=user_id, **details))
        await session.commit()
    return user_id


async def create_event_row(
    session_factory: async_sessionmaker,
    organizer_id: UUID,
    title: str = "City League",
    sport_name: str = "Basketball",
    starts_in: timedelta = timedelta(days=7),
) -> int:
    start = datetime.now(timezone.utc) + starts_in
    async with session_factory() as session:
        event = Event(
            organizer_id=organizer_id,
            title=title,
            type="tournament",
            sport_name=sport_name,
            start_datetime=start,
            end_datetime=start + timedelta(hours=4),
            location="Cebu Coliseum",
        )
        session.add(event)
        await session.commit()
        return event.event_id


class SeedData:
    """Ids of the rows created by ``seeded_db``."""

    def __init__(self):
        self.sports: Dict[str, Sport] = {}
        self.users: Dict[str, UUID] = {}
        self.events: Dict[str, int] = {}


@pytest_asyncio.fixture(scope="function")
async def seeded_db(session_factory: async_sessionmaker) -> SeedData:
    """
    Seed the database with test data.

    Creates:
    - 2 sports (Basketball, Running)
    - 2 athletes, 1 organizer, 1 scout
    - 1 upcoming basketball event owned by the organizer
    """
    data = SeedData()

    async with session_factory() as session:
        for name in ("Basketball", "Running"):
            sport = Sport(sport_name=name)
            session.add(sport)
            await session.flush()
            data.sports[name] = sport
        await session.commit()

    basketball = data.sports["Basketball"]
    data.users["athlete"] = await create_user(
        session_factory, "Maria Santos", sport=basketball, birthdate=date(2002, 3, 14),
        position="Point Guard", height_cm=168.0, weight_kg=58.0, avatar_url="https://img/maria.png",
    )
    data.users["runner"] = await create_user(
        session_factory, "Paolo Reyes", sport=data.sports["Running"], birthdate=date(1999, 8, 2),
    )
    data.users["organizer"] = await create_user(
        session_factory, "Coach Ramon", role="organizer", sport=basketball,
    )
    data.users["scout"] = await create_user(session_factory, "Scout Lim", role="scout")

    data.events["league"] = await create_event_row(session_factory, data.users["organizer"])
    return data


async def get_row(session_factory: async_sessionmaker, model, key) -> Any:
    """Read one row in a fresh session so no identity-map state leaks between checks."""
    async with session_factory() as session:
        return await session.get(model, key)


async def scalar(session_factory: async_sessionmaker, stmt) -> Any:
    async with session_factory() as session:
        return (await session.execute(stmt)).scalar_one()
