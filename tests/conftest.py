"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  The production ORM models carry no
PostgreSQL-only column types, so the real repositories run unchanged.
A fresh engine per test keeps every test's data and event loop isolated.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ridehail.domain.entities import Review, Vehicle
from ridehail.infrastructure.database import Base
from ridehail.infrastructure.repositories import ReviewRepository, VehicleRepository
from ridehail.infrastructure.vehicle_cache import VehicleCache
from ridehail.services.reviews import ReviewService
from ridehail.services.vehicle_registry import VehicleRegistry


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


def make_vehicle(uuid: str, lat: float = 0.0, lng: float = 0.0, **kwargs) -> Vehicle:
    defaults = dict(
        brand="Toyota",
        first_name="Jan",
        last_name="Jansen",
        price_per_km=2.0,
        start_price=5.0,
        booked=False,
    )
    defaults.update(kwargs)
    return Vehicle(uuid=uuid, latitude=lat, longitude=lng, **defaults)


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create tables on a private in-memory engine, yield its factory."""
    engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def fleet() -> list[Vehicle]:
    return [
        make_vehicle("v1", 0.0, 0.0),
        make_vehicle("v2", 1.0, 1.0, brand="Skoda"),
        make_vehicle("v3", 0.0, 1.0, brand="Tesla", booked=True),
    ]


@pytest_asyncio.fixture
async def seeded_factory(session_factory, fleet):
    """Database pre-loaded with ``fleet``."""
    async with session_factory() as session:
        repo = VehicleRepository(session)
        for vehicle in fleet:
            await repo.add(vehicle)
        await session.commit()
    return session_factory


@pytest.fixture
def registry(seeded_factory) -> VehicleRegistry:
    return VehicleRegistry(VehicleCache(), seeded_factory)


@pytest.fixture
def review_service(seeded_factory) -> ReviewService:
    counter = iter(range(1, 1_000))
    return ReviewService(seeded_factory, id_factory=lambda: f"r{next(counter)}")


async def store_review(factory, review: Review) -> Review:
    async with factory() as session:
        await ReviewRepository(session).insert(review)
        await session.commit()
    return review
