"""Shared fixtures for API tests."""

from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from catalog_store.api.products import get_catalog_service
from catalog_store.catalog.service import CatalogService
from catalog_store.main import app


@pytest.fixture
def catalog_service() -> MagicMock:
    """Create a mock catalog service."""
    service = MagicMock(spec=CatalogService)
    service.list_catalog = AsyncMock(return_value=[])
    service.get_product = AsyncMock(return_value=None)
    service.count_products = AsyncMock(return_value=0)
    service.save_product = AsyncMock(return_value=1)
    return service


@pytest.fixture
def client(catalog_service: MagicMock) -> Generator[TestClient, None, None]:
    """Create test client with the catalog service overridden."""
    app.dependency_overrides[get_catalog_service] = lambda: catalog_service
    yield TestClient(app)
    app.dependency_overrides.clear()
