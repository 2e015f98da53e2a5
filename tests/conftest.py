"""Shared fixtures for catalog store tests."""

from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from catalog_store.catalog.entities import Product, Variant
from catalog_store.catalog.repository import ProductRepository
from catalog_store.infrastructure.database import create_tables

# In-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

FIXED_NOW = datetime(2026, 3, 14, 9, 26, 53, tzinfo=timezone.utc)


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database with foreign keys enforced."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create a session bound to the test database."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


# ============================================================================
# Test Doubles
# ============================================================================


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock session with async commit/rollback."""
    session = MagicMock(spec=AsyncSession)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def mock_repository() -> MagicMock:
    """Create a mock product repository."""
    repository = MagicMock(spec=ProductRepository)
    repository.list_products = AsyncMock(return_value=[])
    repository.list_variants = AsyncMock(return_value=[])
    repository.get_product = AsyncMock(return_value=None)
    repository.insert_product = AsyncMock()
    repository.insert_variant = AsyncMock()
    repository.count_products = AsyncMock(return_value=0)
    return repository


# ============================================================================
# Sample Data
# ============================================================================


def make_variant(variant_id: int = 0, **overrides) -> Variant:
    """Create a variant with sensible defaults."""
    values = {
        "id": variant_id,
        "title": "M / Blue",
        "sku": "SHIRT-M-BLU",
        "price": Decimal("29.99"),
        "available": True,
        "option1": "M",
        "option2": "Blue",
    }
    values.update(overrides)
    return Variant(**values)


def make_product(product_id: int = 0, variants: list[Variant] | None = None, **overrides) -> Product:
    """Create a product with sensible defaults."""
    values = {
        "id": product_id,
        "title": "Linen Shirt",
        "vendor": "Acme",
        "product_type": "Shirts",
        "variants": variants if variants is not None else [],
    }
    values.update(overrides)
    return Product(**values)


@pytest.fixture
def fixed_now() -> datetime:
    """Timestamp returned by the test clock."""
    return FIXED_NOW


@pytest.fixture
def variant_factory():
    """Factory for sample variants."""
    return make_variant


@pytest.fixture
def product_factory():
    """Factory for sample products."""
    return make_product
