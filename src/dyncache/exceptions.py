"""
Custom exception hierarchy for the DynamoDB cache.

All exceptions inherit from DynCacheError, which provides optional context
for structured error handling and logging.
"""

from __future__ import annotations

from typing import Any


class DynCacheError(Exception):
    """Base exception for all cache errors.

    Attributes:
        message: Human-readable error message.
        context: Optional structured context for logging/debugging.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class InvalidArgumentError(DynCacheError, ValueError):
    """Raised when a caller passes an unusable argument.

    Always raised before any store call is made.

    Examples:
        - A key containing a reserved character
        - An expiration that is neither a datetime nor None
        - A TTL that is neither a timedelta, an int nor None
    """

    pass


class ConfigurationError(DynCacheError):
    """Raised when configuration is invalid or incomplete.

    Examples:
        - Duplicate attribute names in the table schema
        - Unknown codec name
        - No registered converter supports a given item
    """

    pass


class StoreUnavailableError(DynCacheError):
    """Raised when a read against the store fails.

    Context should include:
        - table: The DynamoDB table name
        - operation: The store operation (GetItem, BatchGetItem)
        - error_code: The AWS error code if one was returned
    """

    pass
