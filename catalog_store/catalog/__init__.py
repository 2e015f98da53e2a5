"""Product Catalog.

Persistence engine for products and their variants, with identifier
generation and a one-time seed import from an external feed.
"""

from catalog_store.catalog.entities import UNASSIGNED_ID, Product, Variant
from catalog_store.catalog.exceptions import (
    CatalogError,
    CatalogImportError,
    InvalidProductError,
    StorageConflictError,
    StorageError,
)
from catalog_store.catalog.identifiers import IdGenerator, SequenceIdGenerator, TimestampIdGenerator
from catalog_store.catalog.importer import ImportResult, ImportState, SeedImporter
from catalog_store.catalog.models import ProductModel, VariantModel
from catalog_store.catalog.repository import ProductRepository
from catalog_store.catalog.service import CatalogService

__all__ = [
    # Entities
    "UNASSIGNED_ID",
    "Product",
    "Variant",
    # Errors
    "CatalogError",
    "CatalogImportError",
    "InvalidProductError",
    "StorageConflictError",
    "StorageError",
    # Identifiers
    "IdGenerator",
    "SequenceIdGenerator",
    "TimestampIdGenerator",
    # Persistence
    "ProductModel",
    "VariantModel",
    "ProductRepository",
    # Service
    "CatalogService",
    # Seeding
    "ImportResult",
    "ImportState",
    "SeedImporter",
]
