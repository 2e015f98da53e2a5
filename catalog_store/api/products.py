"""Product API endpoints.

Exposes the catalog listing and product saves over HTTP.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_store.api.schemas import (
    CatalogResponse,
    ErrorResponse,
    ProductCountResponse,
    ProductCreateRequest,
    ProductResponse,
    ProductSavedResponse,
    VariantResponse,
)
from catalog_store.catalog.entities import Product, Variant
from catalog_store.catalog.service import CatalogService
from catalog_store.infrastructure.database import get_session

router = APIRouter(prefix="/products", tags=["Products"])


# ============================================================================
# Dependencies
# ============================================================================


def get_catalog_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CatalogService:
    """Get catalog service bound to the request session."""
    return CatalogService(session)


# ============================================================================
# Converters
# ============================================================================


def product_to_response(product: Product) -> ProductResponse:
    """Convert Product entity to response schema."""
    return ProductResponse(
        id=product.id,
        title=product.title,
        vendor=product.vendor,
        product_type=product.product_type,
        variants=[
            VariantResponse(
                id=v.id,
                product_id=v.product_id,
                title=v.title,
                sku=v.sku,
                price=v.price,
                available=v.available,
                option1=v.option1,
                option2=v.option2,
                created_at=v.created_at,
                updated_at=v.updated_at,
            )
            for v in product.variants
        ],
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def request_to_product(request: ProductCreateRequest) -> Product:
    """Convert create request to Product entity."""
    return Product(
        id=request.id,
        title=request.title,
        vendor=request.vendor,
        product_type=request.product_type,
        variants=[
            Variant(
                id=v.id,
                title=v.title,
                sku=v.sku,
                price=v.price,
                available=v.available,
                option1=v.option1,
                option2=v.option2,
            )
            for v in request.variants
        ],
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=CatalogResponse,
    responses={503: {"model": ErrorResponse}},
    summary="List catalog",
    description="Get every product with its variants.",
)
async def list_catalog(
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> CatalogResponse:
    """List all products with variants.

    Args:
        service: Catalog service.

    Returns:
        The assembled catalog.
    """
    products = await service.list_catalog()
    return CatalogResponse(
        items=[product_to_response(p) for p in products],
        total=len(products),
    )


@router.get(
    "/count",
    response_model=ProductCountResponse,
    responses={503: {"model": ErrorResponse}},
    summary="Count products",
)
async def count_products(
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> ProductCountResponse:
    """Count stored products."""
    return ProductCountResponse(count=await service.count_products())


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Get product",
    description="Get a single product with its variants.",
)
async def get_product(
    product_id: int,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> ProductResponse:
    """Get a product by ID.

    Args:
        product_id: Product identifier.
        service: Catalog service.

    Returns:
        Product details.

    Raises:
        HTTPException: If product not found.
    """
    product = await service.get_product(product_id)

    if product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error_code": "PRODUCT_NOT_FOUND",
                "message": f"Product not found: {product_id}",
            },
        )

    return product_to_response(product)


@router.post(
    "",
    response_model=ProductSavedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        422: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Save product",
    description="Save a product and its variants. Ids of 0 are generated.",
)
async def save_product(
    request: ProductCreateRequest,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> ProductSavedResponse:
    """Save a new product.

    Args:
        request: Product payload.
        service: Catalog service.

    Returns:
        The id of the saved product.
    """
    product_id = await service.save_product(request_to_product(request))
    return ProductSavedResponse(id=product_id)
