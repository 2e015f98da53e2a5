"""Product feed HTTP client.

Reads the external ``products.json`` feed used to seed an empty catalog.
Feed documents look like::

    {"products": [{"id": 1, "title": "...", "vendor": "...",
                   "product_type": "...", "variants": [{...}]}]}
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx
import structlog

from catalog_store.catalog.entities import MAX_PRICE, PRICE_QUANTUM
from catalog_store.catalog.exceptions import CatalogImportError

logger = structlog.get_logger()


# ============================================================================
# Field Parsing
# ============================================================================


def parse_price(raw: Any) -> Decimal:
    """Parse a feed price into a storable Decimal.

    Feeds send prices as strings ("19.99"); a missing price is 0.

    Raises:
        ValueError: If the price is negative, too large, or finer than a cent.
        InvalidOperation: If the price is not a number.
    """
    if raw is None or raw == "":
        return Decimal("0")
    price = Decimal(str(raw))
    if not price.is_finite() or price < 0 or price > MAX_PRICE:
        raise ValueError(f"price out of range: {raw!r}")
    if price != price.quantize(PRICE_QUANTUM):
        raise ValueError(f"price has more than 2 decimal places: {raw!r}")
    return price


def parse_available(raw: Any) -> bool:
    """Parse a feed availability flag.

    Accepts JSON booleans and their string forms; a missing flag is False.

    Raises:
        ValueError: For any other value.
    """
    if raw is None:
        return False
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.strip().lower() in ("true", "false"):
        return raw.strip().lower() == "true"
    raise ValueError(f"availability is not a boolean: {raw!r}")


# ============================================================================
# Feed Records
# ============================================================================


@dataclass
class FeedVariant:
    """Variant data from the feed."""

    id: int
    title: str
    sku: str
    price: Decimal
    available: bool
    option1: str | None
    option2: str | None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "FeedVariant":
        """Create from feed variant data.

        Args:
            data: One entry of a product's ``variants`` array.

        Returns:
            FeedVariant instance.

        Raises:
            KeyError: If the id is missing.
            ValueError: If the price or availability is malformed.
            InvalidOperation: If the price is not a number.
        """
        return cls(
            id=int(data["id"]),
            title=data.get("title") or "",
            sku=data.get("sku") or "",
            price=parse_price(data.get("price")),
            available=parse_available(data.get("available")),
            option1=data.get("option1"),
            option2=data.get("option2"),
        )


@dataclass
class FeedProduct:
    """Product data from the feed."""

    id: int
    title: str
    vendor: str
    product_type: str
    variants: list[FeedVariant] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "FeedProduct":
        """Create from feed product data.

        Args:
            data: One entry of the ``products`` array.

        Returns:
            FeedProduct instance.

        Raises:
            KeyError: If the id is missing.
        """
        return cls(
            id=int(data["id"]),
            title=data.get("title") or "",
            vendor=data.get("vendor") or "",
            product_type=data.get("product_type") or "",
            variants=[FeedVariant.from_api_response(v) for v in data.get("variants") or []],
        )


# ============================================================================
# Feed HTTP Client
# ============================================================================


class ProductFeedClient:
    """HTTP client for the external product feed.

    Every failure (timeout, connection error, bad status, malformed
    document) is raised as CatalogImportError.
    """

    def __init__(self, feed_url: str, timeout: float = 10.0) -> None:
        """Initialize feed client.

        Args:
            feed_url: Absolute URL of the ``products.json`` document.
            timeout: Request timeout in seconds.
        """
        self.feed_url = feed_url
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"Accept": "application/json"},
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch_products(self, limit: int | None = None) -> list[FeedProduct]:
        """Fetch and parse products from the feed.

        Args:
            limit: Parse at most this many leading entries.

        Returns:
            Products in feed order.

        Raises:
            CatalogImportError: On network, status or parse failure.
        """
        try:
            client = await self._get_client()
            response = await client.get(self.feed_url)
        except httpx.TimeoutException as e:
            raise CatalogImportError(
                f"Feed request timed out after {self.timeout}s",
                feed_url=self.feed_url,
            ) from e
        except httpx.RequestError as e:
            logger.error(
                "Feed request failed",
                feed_url=self.feed_url,
                error=str(e),
            )
            raise CatalogImportError(
                f"Feed request failed: {str(e)}",
                feed_url=self.feed_url,
            ) from e

        if response.status_code != 200:
            raise CatalogImportError(
                f"Feed returned HTTP {response.status_code}",
                feed_url=self.feed_url,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise CatalogImportError(
                "Feed response is not valid JSON",
                feed_url=self.feed_url,
                status_code=response.status_code,
            ) from e

        entries = data.get("products") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise CatalogImportError(
                "Feed document has no 'products' array",
                feed_url=self.feed_url,
                status_code=response.status_code,
            )

        if limit is not None:
            entries = entries[:limit]

        try:
            products = [FeedProduct.from_api_response(p) for p in entries]
        except (AttributeError, KeyError, TypeError, ValueError, InvalidOperation) as e:
            raise CatalogImportError(
                f"Malformed product entry in feed: {e!r}",
                feed_url=self.feed_url,
                status_code=response.status_code,
            ) from e

        logger.info(
            "Feed fetched",
            feed_url=self.feed_url,
            product_count=len(products),
        )
        return products
