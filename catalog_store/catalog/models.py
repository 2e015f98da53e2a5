"""SQLAlchemy models for product catalog.

Defines the products and variants tables for persistent storage.
Ids are always supplied by the application, never generated by the database.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from catalog_store.infrastructure.database import Base


class ProductModel(Base):
    """Row in the products table.

    Attributes:
        id: Product surrogate key.
        title: Product title.
        vendor: Vendor name.
        type: Product type (``product_type`` on the entity).
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    vendor: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    type: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        """String representation."""
        return f"<ProductModel(id={self.id}, title={self.title[:30]})>"


class VariantModel(Base):
    """Row in the variants table.

    Attributes:
        id: Variant surrogate key.
        product_id: Owning product id.
        title: Variant title.
        sku: Stock Keeping Unit.
        price: Price with two decimal places.
        available: Availability flag.
        option1: First option value.
        option2: Second option value.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    __tablename__ = "variants"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    product_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("products.id"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    sku: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    option1: Mapped[str | None] = mapped_column(String(255), nullable=True)
    option2: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        """String representation."""
        return f"<VariantModel(id={self.id}, product_id={self.product_id}, sku={self.sku})>"
