"""Request and result types for the action dispatcher."""

from dataclasses import dataclass, field
from typing import Any

from ..automation_exceptions import INVALID_ACTION, SimpilotException
from ..elements.types import ElementQuery, UIElement
from ..recording.types import ActionKind


@dataclass(frozen=True)
class LogicalAction:
    """A backend-independent request such as "tap the Login button".

    Build instances with the classmethods rather than setting fields
    directly.
    """

    kind: ActionKind
    x: float | None = None
    y: float | None = None
    to_x: float | None = None
    to_y: float | None = None
    text: str | None = None
    duration_ms: int | None = None
    query: ElementQuery | None = None
    output_path: str | None = None
    key: str | None = None
    modifiers: tuple[str, ...] = ()

    @classmethod
    def tap(cls, x: float, y: float) -> "LogicalAction":
        return cls(kind=ActionKind.TAP, x=x, y=y)

    @classmethod
    def tap_element(cls, query: ElementQuery) -> "LogicalAction":
        return cls(kind=ActionKind.TAP, query=query)

    @classmethod
    def type_text(cls, text: str, query: ElementQuery | None = None) -> "LogicalAction":
        return cls(kind=ActionKind.TYPE, text=text, query=query)

    @classmethod
    def swipe(
        cls, from_x: float, from_y: float, to_x: float, to_y: float, duration_ms: int | None = None
    ) -> "LogicalAction":
        return cls(
            kind=ActionKind.SWIPE, x=from_x, y=from_y, to_x=to_x, to_y=to_y, duration_ms=duration_ms
        )

    @classmethod
    def long_press(cls, x: float, y: float, duration_ms: int | None = None) -> "LogicalAction":
        return cls(kind=ActionKind.LONG_PRESS, x=x, y=y, duration_ms=duration_ms)

    @classmethod
    def double_tap(cls, x: float, y: float) -> "LogicalAction":
        return cls(kind=ActionKind.DOUBLE_TAP, x=x, y=y)

    @classmethod
    def press_key(cls, key: str, modifiers: tuple[str, ...] = ()) -> "LogicalAction":
        return cls(kind=ActionKind.KEY, key=key, modifiers=tuple(modifiers))

    @classmethod
    def wait(cls, duration_ms: int) -> "LogicalAction":
        return cls(kind=ActionKind.WAIT, duration_ms=duration_ms)

    @classmethod
    def screenshot(cls, output_path: str | None = None) -> "LogicalAction":
        return cls(kind=ActionKind.SCREENSHOT, output_path=output_path)


@dataclass(frozen=True)
class AttemptRecord:
    """Outcome of trying one backend."""

    backend: str
    success: bool
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def failed(cls, backend: str, error: SimpilotException) -> "AttemptRecord":
        return cls(backend, False, error.message, error.error_code)

    def to_dict(self) -> dict[str, Any]:
        return {
            "backend": self.backend,
            "success": self.success,
            "error": self.error,
            "errorCode": self.error_code,
        }


@dataclass
class DispatchResult:
    """Uniform result of every dispatcher call.

    Attributes:
        success: Whether the action succeeded
        message: Human-readable outcome
        method: Backend that performed the action
        error: Error message when unsuccessful
        error_code: Machine-readable error code when unsuccessful
        element: Element the action resolved to, for query-based actions
        path: Written file, for screenshots
        attempts: Per-backend attempts in the order they were made
    """

    success: bool
    message: str
    method: str | None = None
    error: str | None = None
    error_code: str | None = None
    element: UIElement | None = None
    path: str | None = None
    attempts: list[AttemptRecord] = field(default_factory=list)

    @classmethod
    def failure(
        cls,
        error: SimpilotException,
        attempts: list[AttemptRecord] | None = None,
        element: UIElement | None = None,
    ) -> "DispatchResult":
        """Build a failed result from an exception."""
        return cls(
            success=False,
            message=error.message,
            error=error.message,
            error_code=error.error_code,
            element=element,
            attempts=attempts or [],
        )

    @classmethod
    def invalid(cls, reason: str) -> "DispatchResult":
        """Build a failed result for a malformed request."""
        return cls(
            success=False,
            message=f"Invalid action: {reason}",
            error=reason,
            error_code=INVALID_ACTION,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.method is not None:
            result["method"] = self.method
        if self.element is not None:
            result["element"] = self.element.to_dict()
        if self.path is not None:
            result["path"] = self.path
        if not self.success:
            result["error"] = self.error
            result["errorCode"] = self.error_code
        if self.attempts:
            result["attempts"] = [a.to_dict() for a in self.attempts]
        return result
