"""Product repository for database operations.

Translates catalog reads and writes into SQLAlchemy statements and maps
rows to entities. Statements are built with SQLAlchemy expressions, so
every value travels as a bound parameter.
"""

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import ParamSpec, TypeVar

import structlog
from sqlalchemy import func, insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_store.catalog.entities import Product, Variant
from catalog_store.catalog.exceptions import StorageConflictError, StorageError
from catalog_store.catalog.models import ProductModel, VariantModel

logger = structlog.get_logger()

P = ParamSpec("P")
R = TypeVar("R")


def _storage_operation(
    func_: Callable[P, Awaitable[R]],
) -> Callable[P, Awaitable[R]]:
    """Re-raise database and connection failures as StorageError.

    Key and constraint violations become StorageConflictError.
    """

    @wraps(func_)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return await func_(*args, **kwargs)
        except (SQLAlchemyError, OSError) as e:
            logger.error(
                "Storage operation failed",
                operation=func_.__name__,
                error=str(e),
            )
            if isinstance(e, IntegrityError):
                raise StorageConflictError(func_.__name__, str(e)) from e
            raise StorageError(func_.__name__, str(e)) from e

    return wrapper


class ProductRepository:
    """Repository for Product and Variant database operations.

    Holds no business logic: callers supply resolved ids and timestamps.

    Example usage:
        async with async_session_factory() as session:
            repo = ProductRepository(session)
            products = await repo.list_products()
            variants = await repo.list_variants(products[0].id)
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    @_storage_operation
    async def list_products(self) -> list[Product]:
        """Get all products without their variants.

        Returns:
            Products in the order the database returns them.
        """
        result = await self.session.execute(select(ProductModel))
        return [self._to_product(row) for row in result.scalars().all()]

    @_storage_operation
    async def list_variants(self, product_id: int) -> list[Variant]:
        """Get variants of a product.

        Args:
            product_id: Owning product id.

        Returns:
            Variants in the order the database returns them, possibly empty.
        """
        query = select(VariantModel).where(VariantModel.product_id == product_id)
        result = await self.session.execute(query)
        return [self._to_variant(row) for row in result.scalars().all()]

    @_storage_operation
    async def get_product(self, product_id: int) -> Product | None:
        """Get product by ID, without variants.

        Args:
            product_id: Product ID.

        Returns:
            Product if found, None otherwise.
        """
        query = select(ProductModel).where(ProductModel.id == product_id)
        result = await self.session.execute(query)
        row = result.scalar_one_or_none()
        return self._to_product(row) if row is not None else None

    @_storage_operation
    async def insert_product(self, product: Product) -> None:
        """Insert a product row.

        Args:
            product: Product with a resolved id and timestamps.
        """
        await self.session.execute(
            insert(ProductModel).values(
                id=product.id,
                title=product.title,
                vendor=product.vendor,
                type=product.product_type,
                created_at=product.created_at,
                updated_at=product.updated_at,
            )
        )

    @_storage_operation
    async def insert_variant(self, variant: Variant) -> None:
        """Insert a variant row.

        Args:
            variant: Variant with resolved id, product id and timestamps.
        """
        await self.session.execute(
            insert(VariantModel).values(
                id=variant.id,
                product_id=variant.product_id,
                title=variant.title,
                sku=variant.sku,
                price=variant.price,
                available=variant.available,
                option1=variant.option1,
                option2=variant.option2,
                created_at=variant.created_at,
                updated_at=variant.updated_at,
            )
        )

    @_storage_operation
    async def count_products(self) -> int:
        """Count stored products.

        Returns:
            Number of rows in the products table.
        """
        result = await self.session.execute(select(func.count(ProductModel.id)))
        return result.scalar_one()

    @staticmethod
    def _to_product(row: ProductModel) -> Product:
        return Product(
            id=row.id,
            title=row.title,
            vendor=row.vendor,
            product_type=row.type,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @staticmethod
    def _to_variant(row: VariantModel) -> Variant:
        return Variant(
            id=row.id,
            product_id=row.product_id,
            title=row.title,
            sku=row.sku,
            price=row.price,
            available=row.available,
            option1=row.option1,
            option2=row.option2,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
