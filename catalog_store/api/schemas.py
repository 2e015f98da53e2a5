"""API schemas for the catalog store.

Pydantic models for request/response validation and serialization.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


# ============================================================================
# Product Schemas
# ============================================================================


class VariantCreateRequest(BaseModel):
    """Variant submitted with a new product."""

    id: int = Field(default=0, ge=0, description="Variant id, 0 to have one generated")
    title: str = Field(default="", max_length=255, description="Variant title")
    sku: str = Field(default="", max_length=255, description="Stock Keeping Unit")
    price: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        max_digits=10,
        decimal_places=2,
        description="Variant price",
    )
    available: bool = Field(default=False, description="Whether the variant is available")
    option1: str | None = Field(default=None, max_length=255, description="First option (e.g., size)")
    option2: str | None = Field(default=None, max_length=255, description="Second option (e.g., color)")


class ProductCreateRequest(BaseModel):
    """Request to save a product with its variants."""

    id: int = Field(default=0, ge=0, description="Product id, 0 to have one generated")
    title: str = Field(..., min_length=1, max_length=500, description="Product title")
    vendor: str = Field(default="", max_length=255, description="Vendor name")
    product_type: str = Field(default="", max_length=255, description="Product type")
    variants: list[VariantCreateRequest] = Field(
        default_factory=list, description="Variants in display order"
    )


class VariantResponse(BaseModel):
    """A stored variant."""

    id: int = Field(..., description="Variant id")
    product_id: int = Field(..., description="Owning product id")
    title: str = Field(..., description="Variant title")
    sku: str = Field(..., description="Stock Keeping Unit")
    price: Decimal = Field(..., description="Variant price")
    available: bool = Field(..., description="Whether the variant is available")
    option1: str | None = Field(default=None, description="First option")
    option2: str | None = Field(default=None, description="Second option")
    created_at: datetime | None = Field(default=None, description="When the variant was created")
    updated_at: datetime | None = Field(default=None, description="When the variant was last updated")


class ProductResponse(BaseModel):
    """A stored product with its variants."""

    id: int = Field(..., description="Product id")
    title: str = Field(..., description="Product title")
    vendor: str = Field(..., description="Vendor name")
    product_type: str = Field(..., description="Product type")
    variants: list[VariantResponse] = Field(..., description="Variants of the product")
    created_at: datetime | None = Field(default=None, description="When the product was created")
    updated_at: datetime | None = Field(default=None, description="When the product was last updated")


class CatalogResponse(BaseModel):
    """The full catalog."""

    items: list[ProductResponse] = Field(..., description="Products with variants")
    total: int = Field(..., description="Number of products")


class ProductSavedResponse(BaseModel):
    """Response after saving a product."""

    id: int = Field(..., description="Id of the saved product")


class ProductCountResponse(BaseModel):
    """Number of stored products."""

    count: int = Field(..., description="Number of products")
