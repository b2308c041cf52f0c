"""High-level automation service.

AutomationService is the orchestration layer behind the CLI and any tool
surface. It owns an AutomationContext, exposes each operation as a plain
dict result, and runs multi-step flows that can be recorded and compiled
into XCUITest source.

Recording problems (nothing recording, nothing recorded) come back as
informational results with an error code, never as exceptions.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..automation_exceptions import EMPTY_SESSION, INVALID_ACTION, NO_ACTIVE_SESSION
from ..codegen import SynthesisOptions, XCUITestSynthesizer
from ..config import SimpilotSettings
from ..context import AutomationContext, initialize_automation
from ..dispatch import ActionDispatcher, DispatchResult
from ..elements import ElementQuery
from ..logging import get_logger
from ..recording import ActionKind, AutomationSession

logger = get_logger(__name__)

SWIPE_DIRECTIONS = ("up", "down", "left", "right")


def _mapping(data: dict[str, Any], name: str) -> dict[str, Any] | None:
    value = data.get(name)
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValueError(f"'{name}' must be an object")
    return value


def _number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"'{name}' must be a number")
    return float(value)


def _optional_number(value: Any, name: str) -> float | None:
    return None if value is None else _number(value, name)


def _optional_string(value: Any, name: str) -> str | None:
    if value is not None and not isinstance(value, str):
        raise ValueError(f"'{name}' must be a string")
    return value


@dataclass(frozen=True)
class FlowStep:
    """One step of an automated flow.

    Attributes:
        action: tap, type, swipe, wait, screenshot, long_press, double_tap
            or key
        target: Element query for tap and type
        text: Text to type
        coordinates: Device point for coordinate taps and presses
        direction: Swipe direction
        distance: Swipe distance
        duration_ms: Wait length, swipe or long press duration
        output_path: Screenshot destination
        key: Key to press
        modifiers: Modifiers held during the key press
    """

    action: ActionKind
    target: ElementQuery | None = None
    text: str | None = None
    coordinates: tuple[float, float] | None = None
    direction: str | None = None
    distance: float | None = None
    duration_ms: int | None = None
    output_path: str | None = None
    key: str | None = None
    modifiers: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> "FlowStep":
        """Parse a step from its JSON form.

        Example:
            >>> FlowStep.from_dict({"action": "tap", "target": {"label": "Login"}})

        Raises:
            ValueError: If the step is not an object, names an unknown action
                or swipe direction, or has a field of the wrong shape
        """
        if not isinstance(data, dict):
            raise ValueError(f"Step must be an object, got {type(data).__name__}")
        try:
            action = ActionKind(data["action"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Unknown action: {data.get('action')!r}") from e

        target = _mapping(data, "target")
        coords = _mapping(data, "coordinates")
        swipe = _mapping(data, "swipe") or {}
        direction = swipe.get("direction", data.get("direction"))
        if direction is not None and direction not in SWIPE_DIRECTIONS:
            raise ValueError(f"Unknown swipe direction: {direction!r}")

        modifiers = data.get("modifiers") or []
        if not isinstance(modifiers, list) or not all(isinstance(m, str) for m in modifiers):
            raise ValueError("'modifiers' must be a list of strings")

        coordinates = None
        if coords is not None:
            coordinates = (
                _number(coords.get("x"), "coordinates.x"),
                _number(coords.get("y"), "coordinates.y"),
            )

        duration = _optional_number(data.get("duration", data.get("duration_ms")), "duration")
        try:
            query = ElementQuery.from_dict(target) if target else None
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid target: {e}") from e

        return cls(
            action=action,
            target=query,
            text=_optional_string(data.get("text"), "text"),
            coordinates=coordinates,
            direction=direction,
            distance=_optional_number(swipe.get("distance", data.get("distance")), "distance"),
            duration_ms=int(duration) if duration is not None else None,
            output_path=_optional_string(
                data.get("output_path", data.get("outputPath")), "output_path"
            ),
            key=_optional_string(data.get("key"), "key"),
            modifiers=tuple(modifiers),
        )


@dataclass
class FlowResult:
    """Outcome of run_flow."""

    success: bool
    results: list[dict[str, Any]] = field(default_factory=list)
    test_code: str | None = None
    error_screenshots: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success, "results": self.results}
        if self.test_code is not None:
            data["testCode"] = self.test_code
        if self.error_screenshots:
            data["errorScreenshots"] = self.error_screenshots
        return data


def directional_swipe(
    direction: str, distance: float, center_x: float, center_y: float
) -> tuple[float, float, float, float]:
    """Start and end points of a swipe of `distance` centered on a point.

    Raises:
        ValueError: If direction is not up, down, left or right
    """
    half = distance / 2
    if direction == "up":
        return center_x, center_y + half, center_x, center_y - half
    if direction == "down":
        return center_x, center_y - half, center_x, center_y + half
    if direction == "left":
        return center_x + half, center_y, center_x - half, center_y
    if direction == "right":
        return center_x - half, center_y, center_x + half, center_y
    raise ValueError(f"Unknown swipe direction: {direction!r}")


class AutomationService:
    """Tool-facing automation API returning JSON-ready dicts."""

    def __init__(self, context: AutomationContext | None = None) -> None:
        self.context = context or initialize_automation()
        self.dispatcher = ActionDispatcher(self.context)
        self.synthesizer = XCUITestSynthesizer()
        self._last_session: AutomationSession | None = None

    @property
    def settings(self) -> SimpilotSettings:
        return self.context.settings

    # ------------------------------------------------------------------
    # Screen analysis and interaction
    # ------------------------------------------------------------------

    async def analyze_screen(self, include_screenshot: bool = True) -> dict[str, Any]:
        analysis = await self.context.tree_service.analyze_screen(
            include_screenshot=include_screenshot
        )
        return analysis.to_dict()

    async def get_element_tree(self) -> dict[str, Any]:
        tree = await self.context.tree_service.get_element_tree()
        if tree is None:
            return {"success": False, "error": "No element tree available (WebDriverAgent not running)"}
        return {"success": True, "tree": tree}

    async def find_and_tap(
        self,
        label: str | None = None,
        element_type: str | None = None,
        contains_text: str | None = None,
        index: int = 0,
    ) -> dict[str, Any]:
        query = ElementQuery(label=label, type=element_type, contains_text=contains_text, index=index)
        return (await self.dispatcher.find_and_tap(query)).to_dict()

    async def find_and_type(
        self,
        text: str,
        label: str | None = None,
        placeholder: str | None = None,
        index: int = 0,
    ) -> dict[str, Any]:
        query = ElementQuery(label=label, contains_text=placeholder, index=index)
        return (await self.dispatcher.find_and_type(query, text)).to_dict()

    async def tap(self, x: float, y: float) -> dict[str, Any]:
        return (await self.dispatcher.tap_at(x, y)).to_dict()

    async def type_text(self, text: str) -> dict[str, Any]:
        return (await self.dispatcher.type_text(text)).to_dict()

    async def swipe(
        self,
        from_x: float,
        from_y: float,
        to_x: float,
        to_y: float,
        duration_ms: int | None = None,
    ) -> dict[str, Any]:
        return (await self.dispatcher.swipe(from_x, from_y, to_x, to_y, duration_ms)).to_dict()

    async def _swipe_direction(
        self, direction: str, distance: float | None = None, duration_ms: int | None = None
    ) -> DispatchResult:
        points = directional_swipe(
            direction,
            distance or self.settings.default_swipe_distance,
            self.settings.swipe_center_x,
            self.settings.swipe_center_y,
        )
        return await self.dispatcher.swipe(*points, duration_ms=duration_ms)

    async def swipe_direction(
        self, direction: str, distance: float | None = None, duration_ms: int | None = None
    ) -> dict[str, Any]:
        """Swipe up, down, left or right around the configured screen center."""
        if direction not in SWIPE_DIRECTIONS:
            return {
                "success": False,
                "error": f"Unknown swipe direction: {direction}",
                "errorCode": INVALID_ACTION,
            }
        return (await self._swipe_direction(direction, distance, duration_ms)).to_dict()

    async def long_press(
        self, x: float, y: float, duration_ms: int | None = None
    ) -> dict[str, Any]:
        return (await self.dispatcher.long_press(x, y, duration_ms)).to_dict()

    async def double_tap(self, x: float, y: float) -> dict[str, Any]:
        return (await self.dispatcher.double_tap(x, y)).to_dict()

    async def press_key(self, key: str, modifiers: list[str] | None = None) -> dict[str, Any]:
        """Press a key such as "return" or "k", optionally with modifiers."""
        return (await self.dispatcher.press_key(key, modifiers or ())).to_dict()

    async def dismiss_keyboard(self) -> dict[str, Any]:
        return (await self.dispatcher.dismiss_keyboard()).to_dict()

    async def scroll(self, direction: str, amount: float | None = None) -> dict[str, Any]:
        return (await self.dispatcher.scroll(direction, amount)).to_dict()

    async def wait(self, duration_ms: int | None = None) -> dict[str, Any]:
        duration = self.settings.default_wait_ms if duration_ms is None else duration_ms
        return (await self.dispatcher.wait(duration)).to_dict()

    async def screenshot(self, output_path: str | None = None) -> dict[str, Any]:
        return (await self.dispatcher.screenshot(output_path)).to_dict()

    # ------------------------------------------------------------------
    # Recording and test generation
    # ------------------------------------------------------------------

    def start_recording(self, bundle_id: str | None = None) -> dict[str, Any]:
        session = self.context.recorder.start(bundle_id)
        return {
            "success": True,
            "message": "Recording started",
            "bundleId": session.bundle_id,
            "startTime": session.start_time,
        }

    def stop_recording(self) -> dict[str, Any]:
        session = self.context.recorder.stop()
        if session is None:
            return {
                "success": False,
                "message": "No active recording session",
                "errorCode": NO_ACTIVE_SESSION,
            }
        self._last_session = session
        return {"success": True, "message": "Recording stopped", "session": session.to_dict()}

    def generate_test(
        self,
        test_name: str | None = None,
        class_name: str | None = None,
        include_comments: bool = True,
        output_path: str | None = None,
        session: AutomationSession | None = None,
    ) -> dict[str, Any]:
        """Compile a recording into XCUITest source.

        Uses, in order: the given session, the active recording, or the
        most recently stopped one.
        """
        session = session or self.context.recorder.active or self._last_session
        if session is None:
            return {
                "success": False,
                "message": "No recording session. Start one with start_recording.",
                "errorCode": NO_ACTIVE_SESSION,
            }
        if not session.recorded_actions:
            return {
                "success": False,
                "message": "Recording session contains no actions",
                "errorCode": EMPTY_SESSION,
            }

        defaults = SynthesisOptions()
        options = SynthesisOptions(
            test_name=test_name or defaults.test_name,
            class_name=class_name or defaults.class_name,
            include_comments=include_comments,
        )
        code = self.synthesizer.synthesize(session, options)
        result: dict[str, Any] = {
            "success": True,
            "code": code,
            "actionCount": len(session.recorded_actions),
        }
        if output_path:
            path = Path(output_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(code, encoding="utf-8")
            result["path"] = str(path)
        return result

    # ------------------------------------------------------------------
    # Flows and status
    # ------------------------------------------------------------------

    async def _run_step(self, step: FlowStep) -> DispatchResult:
        if step.action == ActionKind.TAP:
            if step.target is not None:
                return await self.dispatcher.find_and_tap(step.target)
            if step.coordinates is not None:
                return await self.dispatcher.tap_at(*step.coordinates)
            return DispatchResult.invalid("Tap requires target or coordinates")

        if step.action == ActionKind.TYPE:
            if step.text is None:
                return DispatchResult.invalid("Type requires text")
            if step.target is not None:
                return await self.dispatcher.find_and_type(step.target, step.text)
            return await self.dispatcher.type_text(step.text)

        if step.action == ActionKind.SWIPE:
            if step.direction is None:
                return DispatchResult.invalid("Swipe requires direction")
            return await self._swipe_direction(step.direction, step.distance, step.duration_ms)

        if step.action in (ActionKind.LONG_PRESS, ActionKind.DOUBLE_TAP):
            if step.coordinates is None:
                return DispatchResult.invalid(f"{step.action.value} requires coordinates")
            if step.action == ActionKind.LONG_PRESS:
                return await self.dispatcher.long_press(*step.coordinates, step.duration_ms)
            return await self.dispatcher.double_tap(*step.coordinates)

        if step.action == ActionKind.KEY:
            if not step.key:
                return DispatchResult.invalid("Key requires key")
            return await self.dispatcher.press_key(step.key, step.modifiers)

        if step.action == ActionKind.WAIT:
            duration = self.settings.default_wait_ms if step.duration_ms is None else step.duration_ms
            return await self.dispatcher.wait(duration)

        return await self.dispatcher.screenshot(step.output_path)

    async def _run_flow_step(
        self, raw: FlowStep | dict[str, Any], flow: FlowResult, screenshot_on_error: bool
    ) -> None:
        try:
            step = raw if isinstance(raw, FlowStep) else FlowStep.from_dict(raw)
        except ValueError as e:
            name = raw.get("action") if isinstance(raw, dict) else None
            flow.results.append(
                {"action": name, "success": False, "error": str(e), "errorCode": INVALID_ACTION}
            )
            flow.success = False
            return

        result = await self._run_step(step)
        entry: dict[str, Any] = {"action": step.action.value, "success": result.success}
        if result.method:
            entry["method"] = result.method
        if not result.success:
            entry["error"] = result.error
            entry["errorCode"] = result.error_code
            flow.success = False
            if screenshot_on_error:
                shot = await self.context.screenshot.capture()
                if shot.success and shot.path:
                    flow.error_screenshots.append(shot.path)
        flow.results.append(entry)

    async def run_flow(
        self,
        steps: list[FlowStep | dict[str, Any]],
        record_for_test: bool = False,
        bundle_id: str | None = None,
        screenshot_on_error: bool = True,
    ) -> dict[str, Any]:
        """Run steps in order, continuing past failures.

        A recording started for the flow is stopped even if a step raises.

        Args:
            steps: FlowStep objects or their dict form
            record_for_test: Record the flow and return generated test code
            bundle_id: App under test for the recording
            screenshot_on_error: Capture the screen after each failed step

        Returns:
            Overall success, per-step results and optional test code
        """
        if record_for_test:
            self.context.recorder.start(bundle_id)

        flow = FlowResult(success=True)
        session: AutomationSession | None = None
        try:
            for raw in steps:
                await self._run_flow_step(raw, flow, screenshot_on_error)
        finally:
            if record_for_test:
                session = self.context.recorder.stop()

        if session is not None:
            self._last_session = session
            flow.test_code = self.synthesizer.synthesize(session)

        logger.info(
            "flow_completed",
            success=flow.success,
            steps=len(flow.results),
            failed=sum(1 for r in flow.results if not r["success"]),
        )
        return flow.to_dict()

    async def get_status(self) -> dict[str, Any]:
        status = await self.context.probe.status()
        data = status.to_dict()
        data["recording"] = self.context.recorder.is_recording
        return data
