"""Tests for the catalog service."""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_store.catalog.entities import Product, Variant
from catalog_store.catalog.exceptions import StorageConflictError, StorageError
from catalog_store.catalog.identifiers import SequenceIdGenerator
from catalog_store.catalog.service import CatalogService


class TestSaveProduct:
    """Tests for CatalogService.save_product with a mock repository."""

    @pytest.fixture
    def service(self, mock_session: MagicMock, mock_repository: MagicMock, fixed_now) -> CatalogService:
        return CatalogService(
            mock_session,
            repository=mock_repository,
            id_generator=SequenceIdGenerator(start=1000),
            clock=lambda: fixed_now,
        )

    @pytest.mark.asyncio
    async def test_unassigned_id_is_generated(self, service: CatalogService, product_factory) -> None:
        """Product with id 0 gets a generated non-zero id."""
        product_id = await service.save_product(product_factory(0))

        assert product_id == 1000
        saved = service.repository.insert_product.call_args.args[0]
        assert saved.id == 1000

    @pytest.mark.asyncio
    async def test_assigned_id_is_kept(self, service: CatalogService, product_factory) -> None:
        """Product with id 5 keeps id 5."""
        assert await service.save_product(product_factory(5)) == 5

    @pytest.mark.asyncio
    async def test_variant_fan_out(
        self, service: CatalogService, product_factory, variant_factory
    ) -> None:
        """One product insert and one insert per variant, all under the returned id."""
        variants = [
            variant_factory(0, product_id=777),
            variant_factory(42, product_id=888),
            variant_factory(0),
        ]

        product_id = await service.save_product(product_factory(0, variants=variants))

        repo = service.repository
        assert repo.insert_product.await_count == 1
        assert repo.insert_variant.await_count == 3
        saved_variants = [call.args[0] for call in repo.insert_variant.call_args_list]
        assert all(v.product_id == product_id for v in saved_variants)
        assert [v.id for v in saved_variants] == [1001, 42, 1002]

    @pytest.mark.asyncio
    async def test_variants_inserted_in_given_order(
        self, service: CatalogService, product_factory, variant_factory
    ) -> None:
        variants = [variant_factory(0, sku=f"SKU-{i}") for i in range(4)]

        await service.save_product(product_factory(1, variants=variants))

        skus = [call.args[0].sku for call in service.repository.insert_variant.call_args_list]
        assert skus == ["SKU-0", "SKU-1", "SKU-2", "SKU-3"]

    @pytest.mark.asyncio
    async def test_engine_stamps_one_timestamp(
        self, service: CatalogService, product_factory, variant_factory, fixed_now
    ) -> None:
        """Caller timestamps are replaced by the clock value on every row."""
        stale = datetime(2001, 1, 1, tzinfo=timezone.utc)
        product = product_factory(
            0,
            variants=[variant_factory(0, created_at=stale, updated_at=stale)],
            created_at=stale,
            updated_at=stale,
        )

        await service.save_product(product)

        saved_product = service.repository.insert_product.call_args.args[0]
        saved_variant = service.repository.insert_variant.call_args.args[0]
        assert saved_product.created_at == saved_product.updated_at == fixed_now
        assert saved_variant.created_at == saved_variant.updated_at == fixed_now

    @pytest.mark.asyncio
    async def test_product_without_variants(self, service: CatalogService, product_factory) -> None:
        await service.save_product(product_factory(3))

        service.repository.insert_product.assert_awaited_once()
        service.repository.insert_variant.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_input_is_not_mutated(
        self, service: CatalogService, product_factory, variant_factory
    ) -> None:
        product = product_factory(0, variants=[variant_factory(0)])

        await service.save_product(product)

        assert product.id == 0
        assert product.variants[0].id == 0
        assert product.created_at is None

    @pytest.mark.asyncio
    async def test_commits_once_on_success(
        self, service: CatalogService, mock_session: MagicMock, product_factory, variant_factory
    ) -> None:
        await service.save_product(product_factory(0, variants=[variant_factory(0), variant_factory(0)]))

        mock_session.commit.assert_awaited_once()
        mock_session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_variant_failure_surfaces_and_rolls_back(
        self, service: CatalogService, mock_session: MagicMock, product_factory, variant_factory
    ) -> None:
        """A failed variant insert stops the cascade and propagates."""
        service.repository.insert_variant.side_effect = [
            None,
            StorageError("insert_variant", "duplicate key"),
            None,
        ]
        product = product_factory(0, variants=[variant_factory(0) for _ in range(3)])

        with pytest.raises(StorageError):
            await service.save_product(product)

        assert service.repository.insert_variant.await_count == 2
        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_commit_failure_raises_storage_error(
        self, service: CatalogService, mock_session: MagicMock, product_factory
    ) -> None:
        from sqlalchemy.exc import OperationalError

        mock_session.commit.side_effect = OperationalError("COMMIT", {}, Exception("gone"))

        with pytest.raises(StorageError) as exc_info:
            await service.save_product(product_factory(0))

        assert exc_info.value.operation == "commit"
        mock_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_commit_constraint_violation_is_conflict(
        self, service: CatalogService, mock_session: MagicMock, product_factory
    ) -> None:
        from sqlalchemy.exc import IntegrityError

        mock_session.commit.side_effect = IntegrityError("COMMIT", {}, Exception("duplicate key"))

        with pytest.raises(StorageConflictError):
            await service.save_product(product_factory(0))

        mock_session.rollback.assert_awaited_once()


class TestListCatalog:
    """Tests for CatalogService.list_catalog with a mock repository."""

    @pytest.fixture
    def service(self, mock_session: MagicMock, mock_repository: MagicMock) -> CatalogService:
        return CatalogService(mock_session, repository=mock_repository)

    @pytest.mark.asyncio
    async def test_assembles_variants_per_product(
        self, service: CatalogService, product_factory, variant_factory
    ) -> None:
        """P1 gets its 2 variants, P2 gets none."""
        service.repository.list_products.return_value = [product_factory(1), product_factory(2)]
        variants_by_product = {
            1: [variant_factory(10, product_id=1), variant_factory(11, product_id=1)],
            2: [],
        }
        service.repository.list_variants.side_effect = lambda product_id: variants_by_product[product_id]

        catalog = await service.list_catalog()

        assert [p.id for p in catalog] == [1, 2]
        assert len(catalog[0].variants) == 2
        assert len(catalog[1].variants) == 0

    @pytest.mark.asyncio
    async def test_preserves_repository_order(
        self, service: CatalogService, product_factory, variant_factory
    ) -> None:
        """Neither products nor variants are re-sorted."""
        service.repository.list_products.return_value = [product_factory(9), product_factory(3)]
        service.repository.list_variants.side_effect = lambda product_id: [
            variant_factory(30, product_id=product_id),
            variant_factory(20, product_id=product_id),
        ]

        catalog = await service.list_catalog()

        assert [p.id for p in catalog] == [9, 3]
        assert [v.id for v in catalog[0].variants] == [30, 20]

    @pytest.mark.asyncio
    async def test_empty_catalog(self, service: CatalogService) -> None:
        assert await service.list_catalog() == []
        service.repository.list_variants.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_variant_read_failure_aborts(self, service: CatalogService, product_factory) -> None:
        """No partial catalog is returned when a read fails."""
        service.repository.list_products.return_value = [product_factory(1), product_factory(2)]
        service.repository.list_variants.side_effect = [[], StorageError("list_variants", "timeout")]

        with pytest.raises(StorageError):
            await service.list_catalog()

    @pytest.mark.asyncio
    async def test_get_product_attaches_variants(
        self, service: CatalogService, product_factory, variant_factory
    ) -> None:
        service.repository.get_product.return_value = product_factory(1)
        service.repository.list_variants.return_value = [variant_factory(10, product_id=1)]

        product = await service.get_product(1)

        assert product is not None
        assert [v.id for v in product.variants] == [10]

    @pytest.mark.asyncio
    async def test_get_product_missing(self, service: CatalogService) -> None:
        assert await service.get_product(404) is None
        service.repository.list_variants.assert_not_awaited()


class TestCatalogServiceWithDatabase:
    """End-to-end service tests against SQLite."""

    @pytest.fixture
    def service(self, session: AsyncSession, fixed_now) -> CatalogService:
        return CatalogService(
            session,
            id_generator=SequenceIdGenerator(start=500),
            clock=lambda: fixed_now,
        )

    @pytest.mark.asyncio
    async def test_save_then_list(self, service: CatalogService) -> None:
        p1 = Product(
            title="Linen Shirt",
            vendor="Acme",
            product_type="Shirts",
            variants=[
                Variant(title="S", sku="LS-S", price=Decimal("30.00"), available=True, option1="S"),
                Variant(title="M", sku="LS-M", price=Decimal("32.00"), available=False, option1="M"),
            ],
        )
        p2 = Product(title="Gift Card", vendor="Acme", product_type="Gift Cards")

        p1_id = await service.save_product(p1)
        p2_id = await service.save_product(p2)

        catalog = {p.id: p for p in await service.list_catalog()}
        assert set(catalog) == {p1_id, p2_id}
        assert len(catalog[p1_id].variants) == 2
        assert all(v.product_id == p1_id for v in catalog[p1_id].variants)
        assert catalog[p2_id].variants == []
        assert await service.count_products() == 2

    @pytest.mark.asyncio
    async def test_failed_cascade_leaves_nothing_behind(self, service: CatalogService) -> None:
        """A duplicate variant id rolls back the product insert too."""
        product = Product(
            title="Broken",
            variants=[Variant(id=7, title="A"), Variant(id=7, title="B")],
        )

        with pytest.raises(StorageError):
            await service.save_product(product)

        assert await service.count_products() == 0

    @pytest.mark.asyncio
    async def test_resaving_existing_id_fails(self, service: CatalogService) -> None:
        await service.save_product(Product(id=5, title="First"))

        with pytest.raises(StorageConflictError):
            await service.save_product(Product(id=5, title="Second"))

        product = await service.get_product(5)
        assert product is not None
        assert product.title == "First"

    @pytest.mark.asyncio
    async def test_saved_price_reads_back_unchanged(self, service: CatalogService) -> None:
        product_id = await service.save_product(
            Product(
                title="Wool Sweater",
                variants=[
                    Variant(title="S", price=Decimal("19.99")),
                    Variant(title="M", price=Decimal("1249.50")),
                ],
            )
        )

        product = await service.get_product(product_id)

        assert product is not None
        assert sorted(v.price for v in product.variants) == [Decimal("19.99"), Decimal("1249.50")]
