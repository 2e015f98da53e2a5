"""Catalog entities.

Plain dataclasses passed between the repository, the catalog service
and its callers. A Product owns its ordered list of Variants.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from catalog_store.catalog.exceptions import InvalidProductError

# Sentinel id for entities that have not been persisted yet
UNASSIGNED_ID = 0

# Stored as NUMERIC(10, 2)
PRICE_QUANTUM = Decimal("0.01")
MAX_PRICE = Decimal("99999999.99")


@dataclass
class Variant:
    """A purchasable variant of a product.

    Attributes:
        id: Surrogate key, 0 until assigned.
        product_id: Id of the owning product.
        title: Variant title (e.g., "M / Blue").
        sku: Stock Keeping Unit, not required to be unique.
        price: Non-negative price with at most 2 decimal places.
        available: Whether the variant can be bought.
        option1: First free-text option (e.g., size).
        option2: Second free-text option (e.g., color).
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    id: int = UNASSIGNED_ID
    product_id: int = UNASSIGNED_ID
    title: str = ""
    sku: str = ""
    price: Decimal = Decimal("0")
    available: bool = False
    option1: str | None = None
    option2: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        """Normalize and validate price."""
        if not isinstance(self.price, Decimal):
            self.price = Decimal(str(self.price))
        if not self.price.is_finite():
            raise InvalidProductError("price", self.price, "must be a finite number")
        if self.price < 0:
            raise InvalidProductError("price", self.price, "must not be negative")
        if self.price > MAX_PRICE:
            raise InvalidProductError("price", self.price, f"must not exceed {MAX_PRICE}")
        if self.price != self.price.quantize(PRICE_QUANTUM):
            raise InvalidProductError("price", self.price, "must have at most 2 decimal places")

    @property
    def is_new(self) -> bool:
        """Whether the variant still carries the unassigned id."""
        return self.id == UNASSIGNED_ID


@dataclass
class Product:
    """A catalog product with its variants.

    Attributes:
        id: Surrogate key, 0 until assigned.
        title: Product title.
        vendor: Vendor or manufacturer.
        product_type: Product type or category.
        variants: Variants owned by this product, in order.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    id: int = UNASSIGNED_ID
    title: str = ""
    vendor: str = ""
    product_type: str = ""
    variants: list[Variant] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_new(self) -> bool:
        """Whether the product still carries the unassigned id."""
        return self.id == UNASSIGNED_ID

