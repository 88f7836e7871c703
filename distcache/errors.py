"""
distcache — Core Error Types

Defines the exception hierarchy for the cache providers.
All exceptions inherit from DistCacheError for consistent error handling.

Absence of a key is never an error: lookups return None/False/0 instead.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standard error codes attached to cache failures."""

    CACHE_FAILURE = "CACHE_FAILURE"
    CACHE_UNAVAILABLE = "CACHE_UNAVAILABLE"
    SERIALIZATION_FAILURE = "SERIALIZATION_FAILURE"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class DistCacheError(Exception):
    """Base exception for all distcache errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for logs and API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(DistCacheError):
    """Raised when configuration is invalid or missing."""


class CacheError(DistCacheError):
    """Base exception for cache-related errors."""


class CacheConnectionError(CacheError):
    """Raised when the cache backend cannot be reached or times out."""

    def __init__(self, backend: str, details: dict[str, Any] | None = None):
        message = f"Failed to connect to cache backend: {backend}"
        super().__init__(message, details)
        self.backend = backend


class CacheOperationError(CacheError):
    """Raised when the backend rejects a cache operation."""


class CacheSerializationError(CacheError):
    """Raised when a value cannot be encoded for storage."""


def extract_error_code(error: Exception) -> ErrorCode:
    """
    Map an exception to its ErrorCode.

    Args:
        error: Exception to categorize

    Returns:
        Appropriate ErrorCode for the exception
    """
    if isinstance(error, CacheConnectionError):
        return ErrorCode.CACHE_UNAVAILABLE

    if isinstance(error, CacheSerializationError):
        return ErrorCode.SERIALIZATION_FAILURE

    if isinstance(error, CacheError):
        return ErrorCode.CACHE_FAILURE

    if isinstance(error, ConfigurationError):
        return ErrorCode.CONFIGURATION_ERROR

    return ErrorCode.INTERNAL_ERROR


def is_retryable_error(error: Exception) -> bool:
    """
    Check if an error is transient, so the caller may decide to retry.

    No retry happens inside distcache; this only classifies.
    """
    return isinstance(error, CacheConnectionError)
