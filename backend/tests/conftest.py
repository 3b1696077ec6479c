"""Shared test configuration and fixtures.

Uses a transactional rollback strategy per test for full isolation:
- Each test runs inside one transaction that rolls back after the test.
- ``TEST_DATABASE_URL`` selects the database. It defaults to an in-memory
  SQLite database; point it at PostgreSQL to exercise row locks and the
  booking exclusion constraint.
"""

import os
import uuid
from collections.abc import AsyncGenerator
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from gomeraway.config import settings
from gomeraway.database import Base, get_db
from gomeraway.main import app
from gomeraway.models.booking import Booking
from gomeraway.models.listing import Listing
from gomeraway.models.subscription import Subscription
from gomeraway.models.user import User

# ---------------------------------------------------------------------------
# Test database engine
# ---------------------------------------------------------------------------

_test_db_url = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


def _make_engine():
    if _test_db_url.startswith("sqlite"):
        # One shared connection, otherwise every checkout sees an empty database.
        return create_async_engine(
            _test_db_url,
            echo=False,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(_test_db_url, echo=False, pool_pre_ping=True)


# ---------------------------------------------------------------------------
# Session-scoped: create / drop all tables once per test session
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def test_engine():
    """Create a session-scoped engine tied to the session event loop."""
    engine = _make_engine()
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def setup_test_db(test_engine):
    """Create all tables at the start of the session and drop them at the end."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ---------------------------------------------------------------------------
# Per-test: transactional rollback for isolation
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db_session(test_engine, setup_test_db) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(bind=connection, expire_on_commit=False)

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers shared by test modules
# ---------------------------------------------------------------------------


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Sign a token the way the auth provider does, plus a ``type`` claim.

    Args:
        data: Payload data. Must include ``sub`` (user UUID as string).
        expires_delta: Custom expiration duration. Defaults to one hour.
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=1))
    to_encode.update({"exp": expire, "iat": now, "type": "access"})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def headers_for(user: User) -> dict[str, str]:
    """Bearer headers for ``user``."""
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


async def create_user(
    db_session: AsyncSession,
    role: str = "host",
    plan: str | None = "básico",
    status: str = "active",
    is_active: bool = True,
    complete_profile: bool = True,
) -> User:
    """Insert a user, with a subscription row unless ``plan`` is None."""
    unique = uuid.uuid4().hex[:8]
    user = User(
        email=f"{role}-{unique}@test.com",
        full_name=f"Test {role.title()}",
        is_active=is_active,
        role=role,
    )
    if complete_profile:
        user.phone = "+34 922 000 000"
        user.address = "Calle Real 1"
        user.city = "Hermigua"
        user.country = "Spain"
        user.date_of_birth = date(1990, 5, 17)
    db_session.add(user)
    await db_session.flush()

    if plan is not None:
        db_session.add(Subscription(user_id=user.id, plan=plan, status=status))
        await db_session.flush()

    await db_session.refresh(user)
    return user


async def create_listing(
    db_session: AsyncSession,
    host: User,
    price: str = "50.00",
    is_active: bool = True,
    listing_type: str = "accommodation",
    title: str = "Casa rural en Hermigua",
) -> Listing:
    """Insert a listing directly (bypasses the plan limit)."""
    listing = Listing(
        host_id=host.id,
        type=listing_type,
        title=title,
        location="Hermigua, La Gomera",
        price_per_night_or_day=Decimal(price),
        is_active=is_active,
    )
    db_session.add(listing)
    await db_session.flush()
    await db_session.refresh(listing)
    return listing


async def create_booking(
    db_session: AsyncSession,
    listing: Listing,
    guest: User,
    start: date,
    end: date,
    status: str = "confirmed",
) -> Booking:
    """Insert a booking directly with the given status."""
    nights = (end - start).days
    total = listing.price_per_night_or_day * nights
    booking = Booking(
        listing_id=listing.id,
        user_id=guest.id,
        start_date=start,
        end_date=end,
        total_price=total,
        deposit_amount=(total * Decimal("0.10")).quantize(Decimal("0.01")),
        status=status,
    )
    db_session.add(booking)
    await db_session.flush()
    await db_session.refresh(booking)
    return booking


# ---------------------------------------------------------------------------
# Convenience fixtures
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def host_user(db_session: AsyncSession) -> User:
    """A host on the básico plan."""
    return await create_user(db_session, role="host", plan="básico")


@pytest_asyncio.fixture
async def host_headers(host_user: User) -> dict[str, str]:
    return headers_for(host_user)


@pytest_asyncio.fixture
async def guest_user(db_session: AsyncSession) -> User:
    """A guest without a subscription."""
    return await create_user(db_session, role="guest", plan=None)


@pytest_asyncio.fixture
async def guest_headers(guest_user: User) -> dict[str, str]:
    return headers_for(guest_user)


@pytest_asyncio.fixture
async def test_listing(db_session: AsyncSession, host_user: User) -> Listing:
    """An active 50 €/night accommodation owned by ``host_user``."""
    return await create_listing(db_session, host_user)


@pytest.fixture
def future_start() -> date:
    """A start date safely in the future."""
    return date.today() + timedelta(days=30)


# ---------------------------------------------------------------------------
# Factory fixtures for tests that need more than one user or listing
# ---------------------------------------------------------------------------


@pytest.fixture
def make_user(db_session: AsyncSession):
    async def _make(**kwargs) -> User:
        return await create_user(db_session, **kwargs)

    return _make


@pytest.fixture
def make_listing(db_session: AsyncSession):
    async def _make(host: User, **kwargs) -> Listing:
        return await create_listing(db_session, host, **kwargs)

    return _make


@pytest.fixture
def make_booking(db_session: AsyncSession):
    async def _make(listing: Listing, guest: User, start: date, end: date, **kwargs) -> Booking:
        return await create_booking(db_session, listing, guest, start, end, **kwargs)

    return _make


@pytest.fixture
def auth_for():
    return headers_for


@pytest.fixture
def make_token():
    return create_access_token
