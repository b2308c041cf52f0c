"""Action dispatcher with backend fallback.

Every interaction walks the usable backends for its capability in priority
order. Each attempt is bounded by the per-kind timeout; a failed attempt
(non-zero exit, HTTP error, timeout, missing window bounds) advances to the
next backend and is never retried. Only exhaustion of the chain is reported
to the caller, as a DispatchResult carrying the last attempt's error.

Successful actions are appended to the active recording, if any.
"""

import asyncio
import math
from collections.abc import Awaitable, Callable, Sequence

from ..automation_exceptions import (
    ActionTimeoutError,
    BackendActionError,
    BackendUnavailableError,
    SimpilotException,
    backend_error_context,
)
from ..context import AutomationContext
from ..coordinates.types import DevicePoint
from ..elements.types import ElementQuery, UIElement
from ..hal.interfaces.backend import BackendContext, Capability, IAutomationBackend, Point
from ..hal.interfaces.keys import Key, Modifier, describe_key, key_name, parse_key, parse_modifiers
from ..logging import get_logger
from ..recording.types import ActionKind, ElementSummary, RecordedAction, SwipePath
from .types import AttemptRecord, DispatchResult, LogicalAction

logger = get_logger(__name__)

BackendCall = Callable[[IAutomationBackend, list[Point], BackendContext], Awaitable[None]]

SCROLL_DIRECTIONS = ("up", "down", "left", "right")


def summarize(element: UIElement) -> ElementSummary:
    """Reduce an element to what a recording keeps."""
    return ElementSummary(
        type=element.type, label=element.label, accessibility_id=element.accessibility_id
    )


class ActionDispatcher:
    """Resolves logical actions onto the best available backend.

    Example:
        >>> dispatcher = ActionDispatcher(initialize_automation())
        >>> result = await dispatcher.find_and_tap(ElementQuery(label="Login"))
        >>> if not result.success:
        ...     print(result.error)
    """

    def __init__(self, context: AutomationContext) -> None:
        self.context = context
        self._settings = context.settings

    # ------------------------------------------------------------------
    # Fallback chain
    # ------------------------------------------------------------------

    async def _backend_context(self) -> BackendContext:
        session = self.context.recorder.active
        return await self.context.probe.resolve_context(session.bundle_id if session else None)

    async def _run_chain(
        self,
        capability: Capability,
        operation: str,
        points: Sequence[DevicePoint],
        call: BackendCall,
        timeout: float,
        description: str,
    ) -> DispatchResult:
        """Try each usable backend until one succeeds.

        With no usable backend at all the result carries BACKEND_UNAVAILABLE.
        """
        action_logger = self.context.action_logger
        log_context = action_logger.log_action_start(operation, description)

        backend_context = await self._backend_context()
        backends = await self.context.probe.probe(capability, backend_context)

        attempts: list[AttemptRecord] = []
        last_error: SimpilotException = BackendUnavailableError(capability.value)
        for backend in backends:
            try:
                with backend_error_context(backend.name, operation):
                    translated = await self.context.translator.translate_many(
                        points, backend.coordinate_space
                    )
                    try:
                        await asyncio.wait_for(call(backend, translated, backend_context), timeout)
                    except asyncio.TimeoutError as e:
                        raise ActionTimeoutError(operation, timeout, backend=backend.name) from e
            except SimpilotException as e:
                last_error = e
                attempts.append(AttemptRecord.failed(backend.name, e))
                action_logger.log_attempt_failed(log_context, backend.name, e)
                continue

            attempts.append(AttemptRecord(backend.name, True))
            action_logger.log_action_end(log_context, success=True, result=backend.name)
            return DispatchResult(
                success=True,
                message=f"{description} via {backend.name}",
                method=backend.name,
                attempts=attempts,
            )

        action_logger.log_action_end(log_context, success=False, error=last_error)
        return DispatchResult.failure(last_error, attempts=attempts)

    async def _tap(self, x: float, y: float) -> DispatchResult:
        async def call(backend: IAutomationBackend, pts: list[Point], ctx: BackendContext) -> None:
            await backend.tap(pts[0], ctx)

        return await self._run_chain(
            Capability.TAP,
            "tap",
            [DevicePoint(x, y)],
            call,
            self._settings.tap_timeout,
            f"Tapped at ({x:g}, {y:g})",
        )

    async def _type(self, text: str) -> DispatchResult:
        async def call(backend: IAutomationBackend, pts: list[Point], ctx: BackendContext) -> None:
            await backend.type_text(text, ctx)

        return await self._run_chain(
            Capability.TYPE,
            "type",
            [],
            call,
            self._settings.type_timeout,
            f"Typed {len(text)} characters",
        )

    def _record(self, action: RecordedAction) -> None:
        self.context.recorder.record(action)

    # ------------------------------------------------------------------
    # Direct actions
    # ------------------------------------------------------------------

    async def tap_at(self, x: float, y: float) -> DispatchResult:
        """Tap at device coordinates."""
        result = await self._tap(x, y)
        if result.success:
            self._record(RecordedAction(kind=ActionKind.TAP, coordinates=(x, y)))
        return result

    async def type_text(self, text: str) -> DispatchResult:
        """Type text into the focused element."""
        result = await self._type(text)
        if result.success:
            self._record(RecordedAction(kind=ActionKind.TYPE, text=text))
        return result

    async def swipe(
        self,
        from_x: float,
        from_y: float,
        to_x: float,
        to_y: float,
        duration_ms: int | None = None,
    ) -> DispatchResult:
        """Swipe between two device points."""
        duration = self._settings.default_swipe_duration_ms if duration_ms is None else duration_ms

        async def call(backend: IAutomationBackend, pts: list[Point], ctx: BackendContext) -> None:
            await backend.swipe(pts[0], pts[1], duration, ctx)

        result = await self._run_chain(
            Capability.SWIPE,
            "swipe",
            [DevicePoint(from_x, from_y), DevicePoint(to_x, to_y)],
            call,
            self._settings.swipe_timeout,
            f"Swiped from ({from_x:g}, {from_y:g}) to ({to_x:g}, {to_y:g})",
        )
        if result.success:
            self._record(
                RecordedAction(
                    kind=ActionKind.SWIPE,
                    swipe=SwipePath(from_x, from_y, to_x, to_y),
                    duration_ms=duration,
                )
            )
        return result

    async def long_press(
        self, x: float, y: float, duration_ms: int | None = None
    ) -> DispatchResult:
        """Touch and hold at device coordinates."""
        duration = self._settings.default_long_press_ms if duration_ms is None else duration_ms
        if duration < 0:
            return DispatchResult.invalid("long press duration must be non-negative")

        async def call(backend: IAutomationBackend, pts: list[Point], ctx: BackendContext) -> None:
            await backend.long_press(pts[0], duration, ctx)

        result = await self._run_chain(
            Capability.LONG_PRESS,
            "long_press",
            [DevicePoint(x, y)],
            call,
            self._settings.tap_timeout + duration / 1000,
            f"Long pressed at ({x:g}, {y:g}) for {duration}ms",
        )
        if result.success:
            self._record(
                RecordedAction(kind=ActionKind.LONG_PRESS, coordinates=(x, y), duration_ms=duration)
            )
        return result

    async def double_tap(self, x: float, y: float) -> DispatchResult:
        """Double tap at device coordinates."""

        async def call(backend: IAutomationBackend, pts: list[Point], ctx: BackendContext) -> None:
            await backend.double_tap(pts[0], ctx)

        result = await self._run_chain(
            Capability.DOUBLE_TAP,
            "double_tap",
            [DevicePoint(x, y)],
            call,
            self._settings.tap_timeout * 2 + self._settings.double_tap_interval,
            f"Double tapped at ({x:g}, {y:g})",
        )
        if result.success:
            self._record(RecordedAction(kind=ActionKind.DOUBLE_TAP, coordinates=(x, y)))
        return result

    async def press_key(self, key: str, modifiers: Sequence[str] = ()) -> DispatchResult:
        """Press a key, holding any modifiers.

        Args:
            key: Special key name ("return", "escape", "up", ...) or one character
            modifiers: Any of command, shift, option, control (or cmd, alt, ctrl)

        Returns:
            DispatchResult; unknown keys or modifiers fail with INVALID_ACTION
        """
        try:
            parsed = parse_key(key)
            held = parse_modifiers(modifiers)
        except ValueError as e:
            return DispatchResult.invalid(str(e))

        async def call(backend: IAutomationBackend, pts: list[Point], ctx: BackendContext) -> None:
            await backend.press_key(parsed, held, ctx)

        result = await self._run_chain(
            Capability.KEY,
            "key",
            [],
            call,
            self._settings.key_timeout,
            f"Pressed: {describe_key(parsed, held)}",
        )
        if result.success:
            self._record(
                RecordedAction(
                    kind=ActionKind.KEY,
                    key=key_name(parsed),
                    modifiers=tuple(m.value for m in held),
                )
            )
        return result

    async def dismiss_keyboard(self) -> DispatchResult:
        """Hide the software keyboard.

        Presses escape, and if no backend manages that, toggles the
        Simulator's hardware keyboard with command+shift+k.
        """
        result = await self.press_key(Key.ESCAPE.value)
        if not result.success:
            toggle = await self.press_key("k", (Modifier.COMMAND.value, Modifier.SHIFT.value))
            toggle.attempts = result.attempts + toggle.attempts
            result = toggle
        if result.success:
            result.message = f"Keyboard dismissed via {result.method}"
        return result

    async def scroll(self, direction: str, amount: float | None = None) -> DispatchResult:
        """Scroll by pressing an arrow key once per ``scroll_step`` pixels.

        Stops at the first key press that fails.
        """
        if direction not in SCROLL_DIRECTIONS:
            return DispatchResult.invalid(f"unknown scroll direction: {direction}")
        distance = self._settings.default_scroll_amount if amount is None else amount
        if distance <= 0:
            return DispatchResult.invalid("scroll amount must be positive")

        presses = math.ceil(distance / self._settings.scroll_step)
        attempts: list[AttemptRecord] = []
        for press in range(presses):
            if press:
                await asyncio.sleep(self._settings.scroll_key_delay)
            result = await self.press_key(direction)
            attempts.extend(result.attempts)
            if not result.success:
                break

        result.attempts = attempts
        if result.success:
            result.message = f"Scrolled {direction} by {distance:g}px via {result.method}"
        return result

    async def wait(self, duration_ms: int) -> DispatchResult:
        """Pause for duration_ms milliseconds. Always succeeds for valid durations."""
        if duration_ms < 0:
            return DispatchResult.invalid("wait duration must be non-negative")
        await asyncio.sleep(duration_ms / 1000)
        self._record(RecordedAction(kind=ActionKind.WAIT, duration_ms=duration_ms))
        return DispatchResult(success=True, message=f"Waited {duration_ms}ms")

    async def screenshot(self, output_path: str | None = None) -> DispatchResult:
        """Capture the simulator screen."""
        shot = await self.context.screenshot.capture(output_path)
        if not shot.success or not shot.path:
            error = BackendActionError("simctl", "screenshot", shot.error or "unknown error")
            return DispatchResult.failure(error)

        self._record(RecordedAction(kind=ActionKind.SCREENSHOT, path=shot.path))
        self.context.recorder.add_screenshot(shot.path)
        return DispatchResult(
            success=True, message=f"Screenshot saved to {shot.path}", method="simctl", path=shot.path
        )

    # ------------------------------------------------------------------
    # Query-based actions
    # ------------------------------------------------------------------

    async def _resolve(
        self, query: ElementQuery, text_input: bool
    ) -> UIElement | DispatchResult:
        analysis = await self.context.tree_service.analyze_screen(include_screenshot=False)
        if not analysis.success:
            return DispatchResult.failure(
                BackendActionError(analysis.method, "discovery", analysis.error or "unknown error")
            )

        candidates = analysis.text_inputs if text_input else analysis.interactive_elements
        kind = "text field" if text_input else "element"
        try:
            return self.context.matcher.select(candidates, query, kind=kind)
        except SimpilotException as e:
            logger.info("element_not_found", query=query.to_dict(), candidates=len(candidates))
            return DispatchResult.failure(e)

    async def find_and_tap(self, query: ElementQuery) -> DispatchResult:
        """Find an interactive element matching the query and tap its center."""
        resolved = await self._resolve(query, text_input=False)
        if isinstance(resolved, DispatchResult):
            return resolved
        element = resolved

        result = await self._tap(element.center_x, element.center_y)
        result.element = element
        if result.success:
            result.message = f"Tapped {element.describe()} via {result.method}"
            self._record(
                RecordedAction(
                    kind=ActionKind.TAP,
                    element=summarize(element),
                    coordinates=(element.center_x, element.center_y),
                )
            )
        return result

    async def find_and_type(self, query: ElementQuery, text: str) -> DispatchResult:
        """Find a text input, tap it to focus, then type into it.

        A failed focus tap aborts the action before typing.
        """
        resolved = await self._resolve(query, text_input=True)
        if isinstance(resolved, DispatchResult):
            return resolved
        element = resolved

        focus = await self._tap(element.center_x, element.center_y)
        if not focus.success:
            focus.element = element
            return focus

        await asyncio.sleep(self._settings.type_focus_delay)

        result = await self._type(text)
        result.element = element
        result.attempts = focus.attempts + result.attempts
        if result.success:
            result.message = f"Typed into {element.describe()} via {result.method}"
            self._record(
                RecordedAction(kind=ActionKind.TYPE, element=summarize(element), text=text)
            )
        return result

    # ------------------------------------------------------------------
    # Generic entry point
    # ------------------------------------------------------------------

    async def dispatch(self, action: LogicalAction) -> DispatchResult:
        """Perform any logical action.

        Returns:
            DispatchResult; an action missing required fields fails with
            INVALID_ACTION
        """
        if action.kind == ActionKind.TAP:
            if action.query is not None:
                return await self.find_and_tap(action.query)
            if action.x is not None and action.y is not None:
                return await self.tap_at(action.x, action.y)
            return DispatchResult.invalid("tap requires coordinates or an element query")

        if action.kind == ActionKind.TYPE:
            if action.text is None:
                return DispatchResult.invalid("type requires text")
            if action.query is not None:
                return await self.find_and_type(action.query, action.text)
            return await self.type_text(action.text)

        if action.kind == ActionKind.SWIPE:
            coords = (action.x, action.y, action.to_x, action.to_y)
            if any(c is None for c in coords):
                return DispatchResult.invalid("swipe requires start and end coordinates")
            return await self.swipe(
                action.x, action.y, action.to_x, action.to_y, action.duration_ms  # type: ignore[arg-type]
            )

        if action.kind in (ActionKind.LONG_PRESS, ActionKind.DOUBLE_TAP):
            if action.x is None or action.y is None:
                return DispatchResult.invalid(f"{action.kind.value} requires coordinates")
            if action.kind == ActionKind.LONG_PRESS:
                return await self.long_press(action.x, action.y, action.duration_ms)
            return await self.double_tap(action.x, action.y)

        if action.kind == ActionKind.KEY:
            if not action.key:
                return DispatchResult.invalid("key requires a key name")
            return await self.press_key(action.key, action.modifiers)

        if action.kind == ActionKind.WAIT:
            duration = (
                self._settings.default_wait_ms if action.duration_ms is None else action.duration_ms
            )
            return await self.wait(duration)

        if action.kind == ActionKind.SCREENSHOT:
            return await self.screenshot(action.output_path)

        return DispatchResult.invalid(f"unknown action kind: {action.kind}")

