"""Automation and backend exceptions.

This module contains every exception raised while probing backends,
translating coordinates, resolving elements and executing actions against
the simulator. Each class pins the error code that a failed DispatchResult
reports for it, so callers can branch on ``errorCode`` without importing
the exception types.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

# Error codes surfaced in dispatch results
BACKEND_UNAVAILABLE = "BACKEND_UNAVAILABLE"
ACTION_FAILED = "ACTION_FAILED"
ACTION_TIMEOUT = "ACTION_TIMEOUT"
WINDOW_BOUNDS_UNAVAILABLE = "WINDOW_BOUNDS_UNAVAILABLE"
ELEMENT_NOT_FOUND = "ELEMENT_NOT_FOUND"
INVALID_ACTION = "INVALID_ACTION"
NO_ACTIVE_SESSION = "NO_ACTIVE_SESSION"
EMPTY_SESSION = "EMPTY_SESSION"


class SimpilotException(Exception):
    """Root of the simpilot exception hierarchy.

    Attributes:
        message: Human-readable error message, reported as ``error``
        error_code: Code reported as ``errorCode``; fixed per subclass
        context: Structured details for logs
    """

    error_code: str = ACTION_FAILED

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class BackendError(SimpilotException):
    """Base exception for interaction backend errors."""

    pass


class BackendUnavailableError(BackendError):
    """Raised when no usable backend exists for a capability."""

    error_code = BACKEND_UNAVAILABLE

    def __init__(self, capability: str, **kwargs) -> None:
        """Initialize with capability details."""
        super().__init__(
            f"No usable backend for '{capability}'. Install one of: "
            "WebDriverAgent (appium driver install xcuitest), "
            "idb (brew install idb-companion), axe (brew install axe), "
            "cliclick (brew install cliclick)",
            context={"capability": capability, **kwargs},
        )


class BackendActionError(BackendError):
    """Raised when a single backend attempt fails."""

    error_code = ACTION_FAILED

    def __init__(self, backend: str, operation: str, reason: str, **kwargs) -> None:
        """Initialize with attempt details."""
        super().__init__(
            f"{backend} {operation} failed: {reason}",
            context={"backend": backend, "operation": operation, "reason": reason, **kwargs},
        )
        self.backend = backend
        self.operation = operation
        self.reason = reason


class ActionTimeoutError(BackendError):
    """Raised when an external call exceeds its time bound."""

    error_code = ACTION_TIMEOUT

    def __init__(self, operation: str, timeout: float, backend: str | None = None) -> None:
        """Initialize with timeout details."""
        prefix = f"{backend} " if backend else ""
        super().__init__(
            f"{prefix}{operation} timed out after {timeout}s",
            context={"operation": operation, "timeout": timeout, "backend": backend},
        )
        self.timeout = timeout


class WindowBoundsUnavailableError(BackendError):
    """Raised when the simulator window position cannot be determined."""

    error_code = WINDOW_BOUNDS_UNAVAILABLE

    def __init__(self, reason: str = "Simulator window not found") -> None:
        """Initialize with the failure reason."""
        super().__init__(
            f"Could not get Simulator window position: {reason}",
            context={"reason": reason},
        )


class ElementNotFoundError(SimpilotException):
    """Raised when a query resolves to fewer elements than its index requires."""

    error_code = ELEMENT_NOT_FOUND

    def __init__(self, query: dict[str, Any], match_count: int, kind: str = "element") -> None:
        """Initialize with query details."""
        super().__init__(
            f"No matching {kind} found. Query: {query}. Found {match_count} matches.",
            context={"query": query, "match_count": match_count},
        )
        self.match_count = match_count


@contextmanager
def backend_error_context(backend: str, operation: str, **details: Any) -> Iterator[None]:
    """Context manager to add backend context to unexpected exceptions.

    Usage:
        with backend_error_context("idb", "tap", x=10, y=20):
            await run_idb()

    Args:
        backend: Backend performing the operation
        operation: Operation being performed
        **details: Additional details about the operation

    Raises:
        BackendActionError: Wraps non-simpilot exceptions with backend context
    """
    try:
        yield
    except SimpilotException:
        raise
    except Exception as e:
        raise BackendActionError(backend, operation, str(e), **details) from e
