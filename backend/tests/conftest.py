"""Pytest configuration and fixtures for Kartat tests.

Every test gets a fresh in-memory SQLite database (aiosqlite) with all
tables created, and an httpx client whose ``get_db`` dependency is bound
to the same session.
"""

import os

# Must be set before app.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CARD_COUNTER_BACKEND", "database")
os.environ.setdefault("DEBUG", "false")

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import Card, Invoice, SupplierCounter  # noqa: F401


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine():
    """In-memory SQLite engine with the full schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests."""
    session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with overridden database dependency."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ── Test Data Helpers ────────────────────────────────────────────

def card_payload(**overrides) -> dict:
    """Minimal valid intake form body."""
    payload = {
        "date": "2024-03-01",
        "farmer_name": "احمد علي",
        "supplier_name": "بكر صقر",
        "vehicle_number": "ABC 123",
        "gross_weight": 1000,
    }
    payload.update(overrides)
    return payload


@pytest_asyncio.fixture
async def make_card(client: AsyncClient):
    """Factory fixture: POST a card and return the response JSON."""

    async def _make(**overrides) -> dict:
        response = await client.post("/api/cards/", json=card_payload(**overrides))
        assert response.status_code == 201, response.text
        return response.json()

    return _make


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "api: API endpoint tests")
