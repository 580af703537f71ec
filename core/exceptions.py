"""
Custom exceptions for the ingestion pipeline and scoring engine.

Each exception carries structured context for logging and for the
per-run error list stored on the sync run record.

Exception Hierarchy:
    ETLException (base)
    ├── FetchError
    │   ├── SSRFError
    │   │   ├── DisallowedHost
    │   │   └── InvalidUrl
    │   ├── TransientFetchError   (retryable: HTTP 429 / 5xx / network)
    │   ├── FatalFetchError       (other non-2xx)
    │   └── MetadataError
    ├── MappingError              (one record)
    ├── MissingCollection         (required entity type only)
    ├── LoadError
    │   ├── UpsertError
    │   └── SnapshotError
    ├── CheckpointError
    ├── AggregatesNotComputed
    └── RetryableError / NonRetryableError (mixins)
"""

from typing import Optional, Dict, Any, List
from datetime import datetime


class ETLException(Exception):
    """
    Base exception for all pipeline errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (url, entity type, ...)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.utcnow()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Retry Strategy Mixins
# ============================================================================

class RetryableError(ETLException):
    """Marker for transient errors that the fetch client retries with backoff."""
    pass


class NonRetryableError(ETLException):
    """Marker for permanent errors that abort the current attempt immediately."""
    pass


# ============================================================================
# Fetch Errors
# ============================================================================

class FetchError(ETLException):
    """Base exception for outbound request failures."""
    pass


class SSRFError(NonRetryableError, FetchError):
    """A URL was rejected before any request was issued."""
    pass


class DisallowedHost(SSRFError):
    """
    Raised when a hostname is outside the allow-list or resolves to a
    loopback, link-local or private address.

    Context should include:
        - url: The rejected URL
        - hostname: Parsed hostname
    """
    pass


class InvalidUrl(SSRFError):
    """Raised when a URL cannot be parsed or has no usable scheme/host."""
    pass


class TransientFetchError(RetryableError, FetchError):
    """
    HTTP 429, 5xx, timeouts and connection failures.

    Raised to the caller only after retries are exhausted.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
        status_code: Optional[int] = None,
        retry_count: int = 0
    ):
        super().__init__(message, context, original_exception)
        self.status_code = status_code
        self.retry_count = retry_count
        if status_code is not None:
            self.context["status_code"] = status_code
        self.context["retry_count"] = retry_count


class FatalFetchError(NonRetryableError, FetchError):
    """Any other non-2xx response. Never retried."""

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
        status_code: Optional[int] = None
    ):
        super().__init__(message, context, original_exception)
        self.status_code = status_code
        if status_code is not None:
            self.context["status_code"] = status_code


class MetadataError(NonRetryableError, FetchError):
    """The metadata description document could not be parsed."""
    pass


# ============================================================================
# Record / Collection Errors
# ============================================================================

class MappingError(NonRetryableError):
    """
    A raw record could not be translated into a canonical record.

    Fatal only for the record being mapped.
    """
    pass


class MissingCollection(ETLException):
    """
    No collection in the registry matched any candidate name.

    Context should include:
        - entity_type: Logical entity being resolved
        - candidates: Names that were tried
    """

    def __init__(self, entity_type: str, candidates: List[str]):
        super().__init__(
            f"No collection found for {entity_type}",
            context={"entity_type": entity_type, "candidates": ", ".join(candidates)}
        )
        self.entity_type = entity_type
        self.candidates = candidates


# ============================================================================
# Load Errors
# ============================================================================

class LoadError(ETLException):
    """Base exception for store write failures."""
    pass


class UpsertError(LoadError):
    """
    Exception raised when an upsert fails (constraint violation, connectivity).

    Context should include:
        - entity_type: Table / entity being written
        - external_id: Natural key of the record
    """
    pass


class SnapshotError(LoadError):
    """A raw snapshot could not be stored. Logged, never propagated."""
    pass


class CheckpointError(ETLException):
    """
    Exception raised when checkpoint management fails.

    Context should include:
        - collection: Collection being paged
        - operation: Operation that failed (read, write, clear)
    """
    pass


# ============================================================================
# Scoring Errors
# ============================================================================

class AggregatesNotComputed(ETLException):
    """
    The aggregate table holds no rows for the requested topics.

    Distinct from "computed, zero activity": callers should tell the
    user to run the aggregator rather than show an empty ranking.
    """
    pass
