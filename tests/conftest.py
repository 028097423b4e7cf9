"""
Pytest configuration and fixtures.
"""
import itertools
from datetime import datetime
from decimal import Decimal
from typing import Any, AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import models.event_listener  # noqa: F401
from core.get_db import Base
from core.read_model_cache import ReadModelCache
from core.settings import Settings
from fintechs.razorpay import RazorpayClient
from fire_and_forget.payment_receipt import AsyncioPaymentReceipt
from models.enums import PropertyPurpose, PropertyTypes, UserRole
from models.models import Property, User
from services.payment_service import PaymentService
from services.property_service import PropertyService

FIXED_NOW = datetime(2025, 3, 10, 9, 30)


class InMemoryCache:
    """Stands in for the Upstash REST client: same coroutine surface, dict storage."""

    def __init__(self):
        self.store: dict[str, str] = {}
        self.reads = 0

    async def get(self, key: str):
        self.reads += 1
        return self.store.get(key)

    async def set(self, key: str, value: str, ttl: int = 3600) -> bool:
        self.store[key] = value
        return True

    async def incr(self, key: str) -> int:
        value = int(self.store.get(key) or 0) + 1
        self.store[key] = str(value)
        return value


@pytest.fixture
def test_settings() -> Settings:
    """Settings with the gateway left unconfigured so orders fall back locally."""
    return Settings(
        DATABASE_URL="sqlite+aiosqlite://",
        UPSTASH_REDIS_URL=None,
        UPSTASH_REDIS_TOKEN=None,
        RAZORPAY_KEY_ID=None,
        RAZORPAY_KEY_SECRET=None,
        BOOKING_AMOUNT_CAP=Decimal("25000"),
        MINIMUM_PAYABLE_AMOUNT=Decimal("1.00"),
        PAYMENT_CURRENCY="INR",
        EMAIL_SERVER=None,
        RABBITMQ_URL="",
    )


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, Any]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def cache_backend() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def read_cache(cache_backend) -> ReadModelCache:
    return ReadModelCache(cache_backend, ttl=60, namespace="test")


@pytest.fixture
def publisher() -> AsyncMock:
    return AsyncMock(return_value=True)


@pytest.fixture
def receipts() -> MagicMock:
    return MagicMock(spec=AsyncioPaymentReceipt)


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    async def _make(**overrides) -> User:
        n = next(counter)
        fields = {
            "full_name": f"Test User {n}",
            "email": f"user{n}@example.com",
            "phone_number": f"90000000{n:02d}",
            "role": UserRole.BUYER,
        }
        fields.update(overrides)
        user = User(**fields)
        db.add(user)
        await db.commit()
        return user

    return _make


@pytest.fixture
def make_property(db):
    async def _make(owner: User, **overrides) -> Property:
        fields = {
            "title": "Sea View Apartment",
            "description": "Three bedroom flat close to the promenade",
            "property_type": PropertyTypes.APARTMENT,
            "purpose": PropertyPurpose.BUY,
            "price": Decimal("30000"),
            "city": "mumbai",
            "area": "Bandra West",
            "bedrooms": 3,
            "is_verified": True,
        }
        fields.update(overrides)
        prop = Property(owner_id=owner.id, **fields)
        db.add(prop)
        await db.commit()
        return prop

    return _make


@pytest.fixture
def gateway(test_settings) -> RazorpayClient:
    return RazorpayClient(test_settings)


@pytest.fixture
def payment_service(db, test_settings, gateway, read_cache, receipts, publisher):
    return PaymentService(
        db,
        test_settings,
        gateway,
        read_cache,
        receipts,
        publisher=publisher,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def property_service(db, read_cache, publisher):
    return PropertyService(db, read_cache, publisher)


@pytest_asyncio.fixture
async def client(
    session_factory, test_settings, read_cache, receipts, publisher
) -> AsyncGenerator[AsyncClient, Any]:
    """HTTP client over the ASGI app with persistence and integrations swapped out."""
    from app import app
    from core.dependencies import (
        get_event_publisher,
        get_payment_gateway,
        get_read_model_cache,
        get_receipt_dispatcher,
    )
    from core.get_db import get_db_async
    from core.settings import get_settings

    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_async] = _get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_read_model_cache] = lambda: read_cache
    app.dependency_overrides[get_payment_gateway] = lambda: RazorpayClient(test_settings)
    app.dependency_overrides[get_receipt_dispatcher] = lambda: receipts
    app.dependency_overrides[get_event_publisher] = lambda: publisher

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
