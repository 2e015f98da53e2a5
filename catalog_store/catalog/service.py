"""Catalog service for product operations.

Assembles products with their variants on read, and runs the
product-then-variants insert cascade on write.
"""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_store.catalog.entities import Product, Variant
from catalog_store.catalog.exceptions import StorageConflictError, StorageError
from catalog_store.catalog.identifiers import IdGenerator, TimestampIdGenerator
from catalog_store.catalog.repository import ProductRepository

logger = structlog.get_logger()


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


class CatalogService:
    """Service for catalog operations.

    A save inserts the product and then each of its variants inside the
    session's transaction, and commits once at the end. A failed insert
    rolls the whole cascade back.

    Example usage:
        async with async_session_factory() as session:
            service = CatalogService(session)

            product_id = await service.save_product(
                Product(title="Linen Shirt", vendor="Acme", product_type="Shirts")
            )
            catalog = await service.list_catalog()
    """

    def __init__(
        self,
        session: AsyncSession,
        repository: ProductRepository | None = None,
        id_generator: IdGenerator | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize service with database session.

        Args:
            session: Async SQLAlchemy session.
            repository: Repository to use. Defaults to one bound to the session.
            id_generator: Source of ids for unsaved products and variants.
            clock: Returns the timestamp stamped on saved rows.
        """
        self.session = session
        self.repository = repository or ProductRepository(session)
        self.id_generator = id_generator or TimestampIdGenerator()
        self.clock = clock

    async def list_catalog(self) -> list[Product]:
        """Get all products with their variants attached.

        Returns:
            Products in repository order, each with its variants.

        Raises:
            StorageError: If any read fails.
        """
        products = await self.repository.list_products()

        catalog = []
        for product in products:
            variants = await self.repository.list_variants(product.id)
            catalog.append(replace(product, variants=variants))

        logger.debug("Catalog assembled", product_count=len(catalog))
        return catalog

    async def get_product(self, product_id: int) -> Product | None:
        """Get a single product with its variants.

        Args:
            product_id: Product ID.

        Returns:
            Product if found.
        """
        product = await self.repository.get_product(product_id)
        if product is None:
            return None
        variants = await self.repository.list_variants(product_id)
        return replace(product, variants=variants)

    async def count_products(self) -> int:
        """Count stored products.

        Returns:
            Number of products.
        """
        return await self.repository.count_products()

    async def save_product(self, product: Product) -> int:
        """Save a product and its variants.

        Ids of 0 are replaced with generated ones; other ids are kept.
        Every variant is attached to the resolved product id, and all
        rows share one timestamp. Caller-supplied timestamps and variant
        product ids are ignored.

        Args:
            product: Product to save.

        Returns:
            The resolved product id.

        Raises:
            StorageConflictError: If an id is already taken.
            StorageError: If any insert or the commit fails.
        """
        now = self.clock()
        product_id = self._resolve_id(product)

        try:
            await self.repository.insert_product(
                replace(product, id=product_id, variants=[], created_at=now, updated_at=now)
            )

            for variant in product.variants:
                await self.repository.insert_variant(
                    replace(
                        variant,
                        id=self._resolve_id(variant),
                        product_id=product_id,
                        created_at=now,
                        updated_at=now,
                    )
                )

            await self._commit()
        except StorageError:
            await self.session.rollback()
            logger.error(
                "Product save rolled back",
                product_id=product_id,
                variant_count=len(product.variants),
            )
            raise

        logger.info(
            "Product saved",
            product_id=product_id,
            variant_count=len(product.variants),
        )
        return product_id

    def _resolve_id(self, entity: Product | Variant) -> int:
        if entity.is_new:
            return self.id_generator.new_id()
        return entity.id

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except IntegrityError as e:
            raise StorageConflictError("commit", str(e)) from e
        except SQLAlchemyError as e:
            raise StorageError("commit", str(e)) from e
