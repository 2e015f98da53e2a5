"""One-time catalog seeding from the external product feed.

The importer only acts on an empty store. It never raises: every outcome,
including failures, is reported as an ImportResult for the caller to log.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import structlog

from catalog_store.catalog.entities import Product, Variant
from catalog_store.catalog.service import CatalogService

if TYPE_CHECKING:
    from catalog_store.infrastructure.feed_client import FeedProduct, ProductFeedClient

logger = structlog.get_logger()

DEFAULT_SEED_LIMIT = 10


class ImportState(str, Enum):
    """Seed import states.

    UNCHECKED moves to SKIPPED when the store already has products, and
    to SEEDED, PARTIAL or FAILED once an import has been attempted.
    """

    UNCHECKED = "unchecked"
    SKIPPED = "skipped"
    SEEDED = "seeded"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class ImportResult:
    """Outcome of a seed import run.

    Attributes:
        state: Final importer state.
        products_available: Feed products considered (after the limit).
        products_saved: Products persisted in this run.
        variants_saved: Variants persisted in this run.
        error: Failure description for PARTIAL and FAILED runs.
    """

    state: ImportState
    products_available: int = 0
    products_saved: int = 0
    variants_saved: int = 0
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        """Whether the run left the store seeded or untouched by choice."""
        return self.state in (ImportState.SEEDED, ImportState.SKIPPED)


def to_catalog_product(feed_product: "FeedProduct") -> Product:
    """Convert a feed product to a catalog product, keeping feed ids.

    Args:
        feed_product: Parsed feed entry.

    Returns:
        Product ready for CatalogService.save_product.
    """
    return Product(
        id=feed_product.id,
        title=feed_product.title,
        vendor=feed_product.vendor,
        product_type=feed_product.product_type,
        variants=[
            Variant(
                id=v.id,
                product_id=feed_product.id,
                title=v.title,
                sku=v.sku,
                price=v.price,
                available=v.available,
                option1=v.option1,
                option2=v.option2,
            )
            for v in feed_product.variants
        ],
    )


class SeedImporter:
    """Seeds an empty catalog from the product feed.

    The emptiness check and the saves are not atomic: two importers, or
    an importer and a concurrent save, can both see an empty store.

    Example usage:
        async with async_session_factory() as session:
            importer = SeedImporter(
                CatalogService(session),
                ProductFeedClient(settings.feed_url),
            )
            result = await importer.run()
    """

    def __init__(
        self,
        service: CatalogService,
        feed_client: "ProductFeedClient",
        limit: int = DEFAULT_SEED_LIMIT,
    ) -> None:
        """Initialize importer.

        Args:
            service: Catalog service used for the count and the saves.
            feed_client: Client for the product feed.
            limit: Maximum number of feed products to import.
        """
        self.service = service
        self.feed_client = feed_client
        self.limit = limit
        self.state = ImportState.UNCHECKED

    async def run(self) -> ImportResult:
        """Check the store and seed it if empty.

        Returns:
            Import result. Never raises.
        """
        try:
            product_count = await self.service.count_products()
        except Exception as e:
            logger.exception("Seed import could not count products", error=str(e))
            return self._finish(ImportResult(state=ImportState.FAILED, error=str(e)))

        if product_count > 0:
            logger.info(
                "Products already exist in database, skipping seed import",
                product_count=product_count,
            )
            return self._finish(ImportResult(state=ImportState.SKIPPED))

        logger.info("No products found in database, starting seed import")

        try:
            feed_products = await self.feed_client.fetch_products(limit=self.limit)
        except Exception as e:
            logger.exception("Seed import could not read the feed", error=str(e))
            return self._finish(ImportResult(state=ImportState.FAILED, error=str(e)))

        feed_products = feed_products[: self.limit]
        result = ImportResult(
            state=ImportState.SEEDED,
            products_available=len(feed_products),
        )

        for feed_product in feed_products:
            try:
                await self.service.save_product(to_catalog_product(feed_product))
            except Exception as e:
                logger.exception(
                    "Seed import stopped on failed save",
                    product_id=feed_product.id,
                    products_saved=result.products_saved,
                    error=str(e),
                )
                result.state = (
                    ImportState.PARTIAL if result.products_saved else ImportState.FAILED
                )
                result.error = str(e)
                return self._finish(result)

            result.products_saved += 1
            result.variants_saved += len(feed_product.variants)

        return self._finish(result)

    def _finish(self, result: ImportResult) -> ImportResult:
        self.state = result.state
        logger.info(
            "Seed import finished",
            state=result.state.value,
            products_saved=result.products_saved,
            variants_saved=result.variants_saved,
        )
        return result
