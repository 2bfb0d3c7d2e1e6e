"""
Pytest fixtures for test database, client, authentication and fake
external services.

Each test gets fresh tables. The database defaults to in-memory SQLite;
point TEST_DATABASE_URL at PostgreSQL to run against the real backend.
"""

import os
import tempfile
from datetime import datetime, timezone, timedelta
from decimal import Decimal
from typing import AsyncGenerator, Optional

os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="eventbooking-uploads-"))

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from eventbooking.main import app
from eventbooking.api.deps import get_geocoder, get_payment_provider
from eventbooking.db.base import Base
from eventbooking.db.session import get_db
from eventbooking.core.security import create_user_token, hash_password
from eventbooking.infrastructure.geocoding_client import GeocodedPlace, Geocoder, GeocodingError
from eventbooking.infrastructure.paypal_client import (
    CaptureResult,
    OrderRequest,
    PaymentProvider,
    PaymentProviderError,
    ProviderOrder,
)
from eventbooking.models.user import User
from eventbooking.models.event import Event

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


class FakePaymentProvider(PaymentProvider):
    """In-memory stand-in for PayPal that records every call."""

    def __init__(self):
        self.orders: dict[str, OrderRequest] = {}
        self.create_calls: list[OrderRequest] = []
        self.capture_calls: list[str] = []
        self.capture_status = "COMPLETED"
        self.error: Optional[str] = None
        self.with_approval_link = True

    async def create_order(self, order: OrderRequest) -> ProviderOrder:
        self.create_calls.append(order)
        if self.error:
            raise PaymentProviderError(self.error)
        order_id = f"ORDER-{len(self.orders) + 1}"
        self.orders[order_id] = order
        approval_url = f"https://paypal.test/checkoutnow?token={order_id}" if self.with_approval_link else None
        return ProviderOrder(id=order_id, status="CREATED", approval_url=approval_url)

    async def capture_order(self, order_id: str) -> CaptureResult:
        self.capture_calls.append(order_id)
        if self.error:
            raise PaymentProviderError(self.error)
        order = self.orders[order_id]
        return CaptureResult(order_id=order_id, status=self.capture_status, amount=order.total)


class FakeGeocoder(Geocoder):
    def __init__(self):
        self.place: Optional[GeocodedPlace] = GeocodedPlace(
            address="1 Market St, San Francisco, CA 94105, USA",
            city="San Francisco",
        )
        self.calls: list[tuple[float, float]] = []

    async def reverse(self, lat: float, lng: float) -> GeocodedPlace:
        self.calls.append((lat, lng))
        if self.place is None:
            raise GeocodingError("No address found for the given coordinates.")
        return self.place


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop tables for isolation."""
    engine_kwargs = {"echo": False}
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine_kwargs.update(poolclass=StaticPool, connect_args={"check_same_thread": False})
    engine = create_async_engine(TEST_DATABASE_URL, **engine_kwargs)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def payment_provider() -> FakePaymentProvider:
    return FakePaymentProvider()


@pytest.fixture
def geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    payment_provider: FakePaymentProvider,
    geocoder: FakeGeocoder,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with the DB session and external services overridden."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_provider] = lambda: payment_provider
    app.dependency_overrides[get_geocoder] = lambda: geocoder

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def make_user(db_session: AsyncSession, username: str, email: str, password: str = "testpassword123") -> User:
    user = User(
        username=username,
        email=email,
        hashed_password=hash_password(password),
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


def headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {create_user_token(user)}"}


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "testuser", "test@example.com")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "otheruser", "other@example.com")


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict:
    return headers_for(test_user)


@pytest_asyncio.fixture
async def other_headers(other_user: User) -> dict:
    return headers_for(other_user)


async def make_event(
    db_session: AsyncSession,
    organizer: User,
    title: str = "Test Concert",
    category: str = "Music",
    city: str = "Springfield",
    date: Optional[datetime] = None,
    available_seats: int = 10,
    price: str = "25.00",
) -> Event:
    event = Event(
        title=title,
        description="A test event",
        category=category,
        address=f"1 Main St, {city}",
        city=city,
        date=date or datetime.now(timezone.utc) + timedelta(days=30),
        available_seats=available_seats,
        booked_seats=0,
        price=Decimal(price),
        image_url="/images/mockhead.jpg",
        organizer_id=organizer.id,
    )
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession, test_user: User) -> Event:
    """An event with 10 seats at 25.00."""
    return await make_event(db_session, test_user)


@pytest.fixture
def event_factory(db_session: AsyncSession, test_user: User):
    """Async factory for events organized by test_user unless told otherwise."""

    async def _make(**kwargs) -> Event:
        organizer = kwargs.pop("organizer", test_user)
        return await make_event(db_session, organizer, **kwargs)

    return _make
