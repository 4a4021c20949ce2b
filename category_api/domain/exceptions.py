"""Domain exceptions.

Errors raised by the catalog resolution pipeline. Each error carries an
``ErrorKind`` so the application layer can report it without re-wrapping
and the API layer can map it to a status code.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Kinds of resolution failures."""

    NOT_FOUND = "not_found"
    INVALID = "invalid"
    STORE_FAILURE = "store_failure"


class CatalogError(Exception):
    """Base class for all catalog exceptions.

    All catalog errors should inherit from this class to allow
    catching them at the application layer.
    """

    kind: ErrorKind = ErrorKind.STORE_FAILURE

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize catalog error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class CategoryNotFoundError(CatalogError):
    """Raised when no live category matches the requested slug."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, url: str) -> None:
        """Initialize category not found error.

        Args:
            url: The category slug that was requested.
        """
        super().__init__("Category not found", details={"url": url})


class InvalidSelectorError(CatalogError):
    """Raised when a category URL cannot be decoded at all.

    Malformed facet segments are skipped by the parser, so this only
    covers input with no usable category slug.
    """

    kind = ErrorKind.INVALID

    def __init__(self, url: str, reason: str) -> None:
        """Initialize invalid selector error.

        Args:
            url: The raw URL that failed to decode.
            reason: Explanation of why it is invalid.
        """
        super().__init__(
            f"Invalid category URL '{url}': {reason}",
            details={"url": url, "reason": reason},
        )


class CatalogStoreError(CatalogError):
    """Raised when the data store fails during resolution or maintenance."""

    kind = ErrorKind.STORE_FAILURE

    def __init__(self, operation: str, error: Exception) -> None:
        """Initialize store error.

        Args:
            operation: Name of the operation that failed.
            error: Underlying driver or ORM exception.
        """
        super().__init__(
            f"Data store failure during {operation}",
            details={"operation": operation, "error": str(error)},
        )
        self.__cause__ = error
