"""Catalog exceptions.

Errors raised by the catalog engine. Storage failures propagate to
callers; import failures stay inside the seed importer and are
reported through its result.
"""

from typing import Any


class CatalogError(Exception):
    """Base class for all catalog exceptions."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize catalog error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class StorageError(CatalogError):
    """Raised when the relational store cannot be reached or queried."""

    def __init__(self, operation: str, reason: str) -> None:
        """Initialize storage error.

        Args:
            operation: Repository operation that failed.
            reason: Underlying failure description.
        """
        super().__init__(
            f"Storage operation '{operation}' failed: {reason}",
            details={"operation": operation, "reason": reason},
        )
        self.operation = operation


class StorageConflictError(StorageError):
    """Raised when a write violates a key or constraint, e.g. a reused id.

    The store is reachable; retrying the same write fails the same way.
    """


class CatalogImportError(CatalogError):
    """Raised when the external product feed cannot be fetched or parsed."""

    def __init__(
        self,
        message: str,
        feed_url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        """Initialize import error.

        Args:
            message: Human-readable error message.
            feed_url: Feed that was being read.
            status_code: HTTP status code, when the feed answered.
        """
        super().__init__(
            message,
            details={"feed_url": feed_url, "status_code": status_code},
        )
        self.feed_url = feed_url
        self.status_code = status_code


class InvalidProductError(CatalogError):
    """Raised when product or variant data violates catalog rules."""

    def __init__(self, field: str, value: Any, reason: str) -> None:
        """Initialize invalid product error.

        Args:
            field: Offending field name.
            value: Offending value.
            reason: Why the value is rejected.
        """
        super().__init__(
            f"Invalid {field} {value!r}: {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )
        self.field = field
