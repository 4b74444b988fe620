"""
FieldMerch Backend: Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── db_engine:        In-memory aiosqlite engine with the full schema
    ├── session_factory:  async_sessionmaker bound to db_engine
    ├── db_session:       One AsyncSession (what get_db_session yields in production)
    ├── directory:        Seeded users, stores and products
    ├── employee / other_employee / admin: CallerIdentity values
    ├── mock_db_session:  AsyncMock session for pure unit tests
    └── test_client:      HTTPX AsyncClient with get_db_session overridden

Seeded directory:
    users:    1 Ana (employee), 2 Marko (employee), 3 Iva (admin)
    stores:   1 Konzum Centar (owner 1), 2 Spar Istok (owner 1),
              3 Tus Zapad (owner 2), 4 Lidl Jug (no owner)
    products: 1 Vegeta 500g (shelf), 2 Lino Lada (shelf),
              3 Podravka Pasta (fridge), 4 Eva Tuna (fridge)
    competitor brands:   1 Knorr, 2 Maggi
    competitor products: 1 Knorr Spaghetti (brand 1), 2 Maggi Noodles (brand 2)
"""

import os

# Override settings for testing BEFORE any fieldmerch imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from fieldmerch.database import Base, get_db_session
from fieldmerch.models.competitor import CompetitorBrand, CompetitorFacing, CompetitorProduct  # noqa: F401
from fieldmerch.models.facing import PodravkaFacing  # noqa: F401
from fieldmerch.models.product import PodravkaProduct
from fieldmerch.models.store import Store
from fieldmerch.models.user import User
from fieldmerch.schemas.identity import CallerIdentity


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """Fresh in-memory database per test, schema created from the ORM metadata."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def directory(session_factory):
    """Seeds the reference tables and returns the seeded ids by role."""
    async with session_factory() as session:
        session.add_all([
            User(user_id=1, username="Ana", role="employee"),
            User(user_id=2, username="Marko", role="employee"),
            User(user_id=3, username="Iva", role="admin"),
        ])
        await session.flush()
        session.add_all([
            Store(store_id=1, store_name="Konzum Centar", user_id=1),
            Store(store_id=2, store_name="Spar Istok", user_id=1),
            Store(store_id=3, store_name="Tus Zapad", user_id=2),
            Store(store_id=4, store_name="Lidl Jug", user_id=None),
        ])
        session.add_all([
            PodravkaProduct(product_id=1, name="Vegeta 500g", category="shelf",
                            podravka_code="P-001", elkos_code="E-001", product_category="spices"),
            PodravkaProduct(product_id=2, name="Lino Lada", category="shelf",
                            podravka_code="P-002", elkos_code=None, product_category="spreads"),
            PodravkaProduct(product_id=3, name="Podravka Pasta", category="fridge",
                            podravka_code="P-003", elkos_code=None, product_category="pasta"),
            PodravkaProduct(product_id=4, name="Eva Tuna", category="fridge",
                            podravka_code="P-004", elkos_code="E-004", product_category="fish"),
        ])
        session.add_all([
            CompetitorBrand(competitor_id=1, brand_name="Knorr"),
            CompetitorBrand(competitor_id=2, brand_name="Maggi"),
        ])
        await session.flush()
        session.add_all([
            CompetitorProduct(competitor_product_id=1, competitor_id=1,
                              name="Knorr Spaghetti", category="shelf", weight="500g"),
            CompetitorProduct(competitor_product_id=2, competitor_id=2,
                              name="Maggi Noodles", category="shelf", weight=None),
        ])
        await session.commit()

    return {
        "owned_stores": [1, 2],
        "foreign_store": 3,
        "unassigned_store": 4,
        "fridge_products": [3, 4],
        "shelf_products": [1, 2],
        "competitors": {"Knorr": 1, "Maggi": 2},
    }


# ══════════════════════════════════════════════════════════════════════════
# Caller Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def employee() -> CallerIdentity:
    return CallerIdentity(user_id=1, role="employee")


@pytest.fixture
def other_employee() -> CallerIdentity:
    return CallerIdentity(user_id=2, role="employee")


@pytest.fixture
def admin() -> CallerIdentity:
    return CallerIdentity(user_id=3, role="admin")


# ══════════════════════════════════════════════════════════════════════════
# Unit-test and HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.side_effect = RuntimeError("connection lost")
        with pytest.raises(DatabaseError): ...
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def test_client(session_factory, directory):
    """
    HTTPX AsyncClient talking to the FastAPI app over ASGITransport.

    get_db_session is overridden to use the per-test in-memory database
    with the same commit-or-rollback behaviour as production.
    """
    from fieldmerch.main import app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
