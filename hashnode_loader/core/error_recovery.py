"""Error taxonomy and recovery helpers for hashnode-loader.

Every failure that crosses a module boundary is a ``LoaderError`` carrying a
stable ``code`` string, so callers can branch on the kind of failure without
parsing messages. Transport failures also say whether retrying could help.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"  # single item dropped
    MEDIUM = "medium"  # one search term or page lost
    HIGH = "high"  # collection fetch failed
    CRITICAL = "critical"  # loader could not run at all


class LoaderError(Exception):
    """Base class for every error raised by the loader stack."""

    code = "LOADER_ERROR"
    severity = ErrorSeverity.CRITICAL

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details: Dict[str, Any] = details or {}
        self.retryable = retryable

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "details": self.details,
        }


class TransportError(LoaderError):
    """A GraphQL request could not be completed."""

    code = "NETWORK_ERROR"
    severity = ErrorSeverity.HIGH

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("retryable", True)
        super().__init__(message, **kwargs)


class QueryTimeoutError(TransportError):
    """The request did not complete within the configured timeout."""

    code = "TIMEOUT"

    def __init__(self, timeout_ms: int) -> None:
        super().__init__(
            f"Request timeout after {timeout_ms}ms",
            details={"timeout_ms": timeout_ms},
        )
        self.timeout_ms = timeout_ms


class HttpError(TransportError):
    """The endpoint answered with a non-success HTTP status."""

    code = "HTTP_ERROR"

    def __init__(self, status_code: int, status_text: str = "") -> None:
        super().__init__(
            f"HTTP {status_code}: {status_text}",
            details={"status_code": status_code, "status_text": status_text},
            retryable=status_code >= 500 or status_code == 429,
        )
        self.status_code = status_code
        self.status_text = status_text


class GraphQLError(TransportError):
    """The response carried a top-level ``errors`` array."""

    code = "GRAPHQL_ERROR"

    def __init__(self, messages: List[str]) -> None:
        super().__init__(
            f"GraphQL errors: {', '.join(messages)}",
            details={"messages": list(messages)},
            retryable=False,
        )
        self.messages = list(messages)


class ProtocolError(TransportError):
    """The response was structurally unusable (no ``data``, invalid JSON)."""

    code = "PROTOCOL_ERROR"


class AuthenticationRequiredError(LoaderError):
    """An operation needs an access token and none was configured."""

    code = "AUTH_REQUIRED"

    def __init__(self, message: str = "Authentication token required for accessing drafts") -> None:
        super().__init__(message)


class ValidationError(LoaderError):
    """A transformed item did not satisfy its content schema."""

    code = "VALIDATION_ERROR"
    severity = ErrorSeverity.LOW

    def __init__(self, message: str, issues: Optional[List[Dict[str, str]]] = None) -> None:
        super().__init__(message, details={"issues": list(issues or [])})
        self.issues: List[Dict[str, str]] = list(issues or [])


class ProcessError(LoaderError):
    """Transforming or identifying a single item raised."""

    code = "PROCESS_ERROR"
    severity = ErrorSeverity.LOW


class FetchError(LoaderError):
    """The top-level fetch of a collection failed."""

    code = "FETCH_ERROR"
    severity = ErrorSeverity.HIGH


@dataclass
class SearchTermError:
    """Represents a search term whose pagination failed."""

    term: str
    error_type: str
    message: str
    code: str = "LOADER_ERROR"
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_exception(cls, term: str, exc: BaseException) -> "SearchTermError":
        return cls(
            term=term,
            error_type=type(exc).__name__,
            message=str(exc),
            code=getattr(exc, "code", "LOADER_ERROR"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "term": self.term,
            "error_type": self.error_type,
            "message": self.message,
            "code": self.code,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class PartialSearchResult:
    """Outcome of a multi-term search where some terms may have failed."""

    terms: List[str]
    result_count: int = 0
    errors: List[SearchTermError] = field(default_factory=list)
    terms_completed: List[str] = field(default_factory=list)
    terms_failed: List[str] = field(default_factory=list)
    start_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    end_time: Optional[datetime] = None

    @property
    def is_complete(self) -> bool:
        """Check if every term completed without errors."""
        return len(self.terms_failed) == 0

    @property
    def is_partial(self) -> bool:
        """Check if some terms failed but others produced results."""
        return len(self.terms_failed) > 0 and self.result_count > 0

    @property
    def success_rate(self) -> float:
        total = len(self.terms_completed) + len(self.terms_failed)
        if total == 0:
            return 0.0
        return len(self.terms_completed) / total

    def mark_complete(self) -> None:
        """Mark the aggregation as complete."""
        self.end_time = datetime.now(timezone.utc)

    def add_completed(self, term: str, count: int) -> None:
        self.result_count += count
        if term not in self.terms_completed:
            self.terms_completed.append(term)

    def add_error(self, error: SearchTermError) -> None:
        self.errors.append(error)
        if error.term not in self.terms_failed:
            self.terms_failed.append(error.term)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "terms": self.terms,
            "result_count": self.result_count,
            "terms_completed": self.terms_completed,
            "terms_failed": self.terms_failed,
            "is_complete": self.is_complete,
            "success_rate": self.success_rate,
            "errors": [e.to_dict() for e in self.errors],
        }


def is_retryable_error(error: BaseException) -> bool:
    """Check whether retrying the operation that raised ``error`` could succeed."""
    return isinstance(error, LoaderError) and error.retryable


def calculate_backoff(attempt: int, base_delay: float = 1.0, max_delay: float = 30.0) -> float:
    """Exponential backoff delay for the given zero-based retry attempt."""
    return min(base_delay * (2**attempt), max_delay)


async def retry_async(
    func: Callable[[], Awaitable[T]],
    max_retries: int = 0,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> T:
    """Await ``func()``, retrying retryable loader errors with backoff.

    Args:
        func: Zero-argument coroutine factory
        max_retries: Extra attempts after the first one (0 disables retrying)
        base_delay: Delay before the first retry, in seconds
        max_delay: Upper bound for any single delay, in seconds
        sleep: Awaitable sleep function

    Returns:
        The result of the first successful attempt

    Raises:
        The last error once retries are exhausted, or immediately for
        errors that are not retryable.
    """
    attempt = 0
    while True:
        try:
            return await func()
        except LoaderError as exc:
            if not exc.retryable or attempt >= max_retries:
                raise
            delay = calculate_backoff(attempt, base_delay, max_delay)
            attempt += 1
            logger.warning(
                "Retrying after %s (attempt %d/%d, waiting %.1fs)",
                exc.code,
                attempt,
                max_retries,
                delay,
            )
            await sleep(delay)
