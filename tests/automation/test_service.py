"""Tests for AutomationService and flows."""

from unittest.mock import AsyncMock, patch

import pytest
from fakes import GESTURE_CAPS, FakeBackend, FakeDiscoveryBackend, FakeScreenshot

from simpilot.automation import AutomationService, FlowStep, directional_swipe
from simpilot.automation_exceptions import (
    EMPTY_SESSION,
    ELEMENT_NOT_FOUND,
    INVALID_ACTION,
    NO_ACTIVE_SESSION,
)
from simpilot.coordinates import DevicePoint
from simpilot.elements import ElementQuery
from simpilot.hal import Capability, Key, Modifier
from simpilot.recording import ActionKind


class TestFlowStep:
    """Test flow step parsing."""

    def test_tap_with_target(self) -> None:
        step = FlowStep.from_dict({"action": "tap", "target": {"label": "Login", "index": 1}})
        assert step.action == ActionKind.TAP
        assert step.target == ElementQuery(label="Login", index=1)

    def test_swipe(self) -> None:
        step = FlowStep.from_dict({"action": "swipe", "swipe": {"direction": "up", "distance": 300}})
        assert step.direction == "up"
        assert step.distance == 300.0

    def test_wait_and_coordinates(self) -> None:
        assert FlowStep.from_dict({"action": "wait", "duration": 250}).duration_ms == 250
        step = FlowStep.from_dict({"action": "tap", "coordinates": {"x": 1, "y": 2}})
        assert step.coordinates == (1.0, 2.0)

    @pytest.mark.parametrize(
        "data",
        [
            {"action": "pinch"},
            {},
            {"action": "swipe", "swipe": {"direction": "diagonal"}},
            "tap",
            None,
            {"action": ["tap"]},
            {"action": "tap", "target": "Login"},
            {"action": "tap", "coordinates": {"x": 1}},
            {"action": "tap", "coordinates": {"x": "1", "y": 2}},
            {"action": "tap", "coordinates": {"x": True, "y": 2}},
            {"action": "tap", "coordinates": [1, 2]},
            {"action": "swipe", "swipe": {"direction": "up", "distance": "far"}},
            {"action": "wait", "duration": "soon"},
            {"action": "type", "text": 42},
            {"action": "key", "key": "k", "modifiers": "cmd"},
        ],
    )
    def test_invalid(self, data) -> None:
        with pytest.raises(ValueError):
            FlowStep.from_dict(data)

    def test_key_with_modifiers(self) -> None:
        step = FlowStep.from_dict({"action": "key", "key": "k", "modifiers": ["cmd", "shift"]})
        assert step.action == ActionKind.KEY
        assert step.key == "k"
        assert step.modifiers == ("cmd", "shift")

    def test_long_press(self) -> None:
        step = FlowStep.from_dict(
            {"action": "long_press", "coordinates": {"x": 5, "y": 6}, "duration": 1500}
        )
        assert step.coordinates == (5.0, 6.0)
        assert step.duration_ms == 1500


class TestDirectionalSwipe:
    """Test swipe geometry around a center point."""

    def test_directions(self) -> None:
        assert directional_swipe("up", 200, 200, 400) == (200, 500, 200, 300)
        assert directional_swipe("down", 200, 200, 400) == (200, 300, 200, 500)
        assert directional_swipe("left", 100, 200, 400) == (250, 400, 150, 400)
        assert directional_swipe("right", 100, 200, 400) == (150, 400, 250, 400)

    def test_unknown_direction(self) -> None:
        with pytest.raises(ValueError):
            directional_swipe("sideways", 100, 0, 0)


class TestActions:
    """Test the dict-returning operations."""

    @pytest.mark.asyncio
    async def test_swipe_direction_uses_defaults(self, make_context) -> None:
        idb = FakeBackend("idb")
        service = AutomationService(make_context([idb]))

        result = await service.swipe_direction("up")

        assert result["success"]
        assert idb.calls == [("swipe", DevicePoint(200, 500), DevicePoint(200, 300), 300)]

    @pytest.mark.asyncio
    async def test_swipe_direction_invalid(self, make_context) -> None:
        service = AutomationService(make_context([FakeBackend("idb")]))
        result = await service.swipe_direction("diagonal")
        assert result["errorCode"] == INVALID_ACTION

    @pytest.mark.asyncio
    async def test_find_and_type_by_placeholder(self, make_context, login_tree) -> None:
        wda = FakeDiscoveryBackend(login_tree)
        service = AutomationService(make_context([wda]))

        result = await service.find_and_type("me@example.com", placeholder="name@")

        assert result["success"]
        assert result["element"]["label"] == "Email"
        assert wda.calls[-1] == ("type", "me@example.com")

    @pytest.mark.asyncio
    async def test_get_element_tree(self, make_context, login_tree) -> None:
        service = AutomationService(make_context([FakeDiscoveryBackend(login_tree)]))
        assert (await service.get_element_tree())["tree"] == login_tree

        empty = AutomationService(make_context([FakeBackend("idb")]))
        assert (await empty.get_element_tree())["success"] is False

    @pytest.mark.asyncio
    async def test_status_reports_recording(self, make_context) -> None:
        service = AutomationService(make_context([FakeBackend("idb")]))
        service.start_recording()

        status = await service.get_status()

        assert status["recording"] is True
        assert status["recommendedMethod"] == "idb"

    @pytest.mark.asyncio
    async def test_long_press_and_double_tap(self, make_context) -> None:
        idb = FakeBackend("idb", capabilities=GESTURE_CAPS)
        service = AutomationService(make_context([idb]))

        pressed = await service.long_press(10, 20, duration_ms=800)
        tapped = await service.double_tap(30, 40)

        assert pressed["success"] and tapped["success"]
        assert idb.calls == [
            ("long_press", DevicePoint(10, 20), 800),
            ("double_tap", DevicePoint(30, 40)),
        ]

    @pytest.mark.asyncio
    async def test_press_key_with_modifiers(self, make_context) -> None:
        applescript = FakeBackend("applescript", capabilities=frozenset({Capability.KEY}))
        service = AutomationService(make_context([applescript]))

        result = await service.press_key("k", ["cmd", "shift"])

        assert result["success"]
        assert result["message"] == "Pressed: command+shift+k"
        assert applescript.calls == [("key", "k", (Modifier.COMMAND, Modifier.SHIFT))]

    @pytest.mark.asyncio
    async def test_unknown_modifier_is_invalid(self, make_context) -> None:
        service = AutomationService(make_context([FakeBackend("idb", capabilities=GESTURE_CAPS)]))
        result = await service.press_key("k", ["hyper"])
        assert result["errorCode"] == INVALID_ACTION

    @pytest.mark.asyncio
    async def test_dismiss_keyboard_and_scroll(self, make_context) -> None:
        idb = FakeBackend("idb", capabilities=GESTURE_CAPS)
        service = AutomationService(make_context([idb]))

        dismissed = await service.dismiss_keyboard()
        scrolled = await service.scroll("down", 100)

        assert dismissed["message"] == "Keyboard dismissed via idb"
        assert scrolled["message"] == "Scrolled down by 100px via idb"
        assert idb.calls == [
            ("key", Key.ESCAPE, ()),
            ("key", Key.DOWN, ()),
            ("key", Key.DOWN, ()),
        ]


class TestRecordingOperations:
    """Test recording and test generation."""

    def test_stop_without_session(self, make_context) -> None:
        result = AutomationService(make_context([])).stop_recording()
        assert result["success"] is False
        assert result["errorCode"] == NO_ACTIVE_SESSION

    def test_generate_without_session(self, make_context) -> None:
        result = AutomationService(make_context([])).generate_test()
        assert result["errorCode"] == NO_ACTIVE_SESSION

    def test_generate_from_empty_session(self, make_context) -> None:
        service = AutomationService(make_context([]))
        service.start_recording()
        assert service.generate_test()["errorCode"] == EMPTY_SESSION

    @pytest.mark.asyncio
    async def test_record_and_generate(self, make_context, login_tree, tmp_path) -> None:
        service = AutomationService(make_context([FakeDiscoveryBackend(login_tree)]))
        service.start_recording("com.example.app")
        await service.find_and_tap(label="Login")
        await service.type_text("hello")
        stopped = service.stop_recording()

        output = tmp_path / "UITests" / "LoginTests.swift"
        result = service.generate_test(test_name="testLogin", output_path=str(output))

        assert stopped["session"]["actionCount"] == 2
        assert result["success"]
        assert result["actionCount"] == 2
        assert 'app.buttons["Login"].tap()' in result["code"]
        assert 'app.typeText("hello")' in result["code"]
        assert "func testLogin() throws {" in result["code"]
        assert output.read_text(encoding="utf-8") == result["code"]

    @pytest.mark.asyncio
    async def test_generate_from_active_session(self, make_context) -> None:
        service = AutomationService(make_context([FakeBackend("idb")]))
        service.start_recording()
        await service.tap(5, 6)

        result = service.generate_test(include_comments=False)

        assert "withOffset(CGVector(dx: 5, dy: 6)).tap()" in result["code"]


class TestRunFlow:
    """Test multi-step flows."""

    @pytest.mark.asyncio
    async def test_flow_with_recording(self, make_context, login_tree) -> None:
        service = AutomationService(make_context([FakeDiscoveryBackend(login_tree)]))

        result = await service.run_flow(
            [
                {"action": "tap", "target": {"label": "Email"}},
                {"action": "type", "text": "hello", "target": {"label": "Email"}},
                {"action": "swipe", "swipe": {"direction": "down"}},
                {"action": "wait", "duration": 0},
            ],
            record_for_test=True,
            bundle_id="com.example.app",
        )

        assert result["success"]
        assert [r["action"] for r in result["results"]] == ["tap", "type", "swipe", "wait"]
        code = result["testCode"]
        assert 'XCUIApplication(bundleIdentifier: "com.example.app")' in code
        assert 'app.textFields["Email"].tap()' in code
        assert 'app.textFields["Email"].typeText("hello")' in code
        assert "app.swipeDown()" in code
        assert service.context.recorder.active is None

    @pytest.mark.asyncio
    async def test_flow_continues_after_failure(self, make_context, login_tree) -> None:
        shots = FakeScreenshot()
        service = AutomationService(
            make_context([FakeDiscoveryBackend(login_tree)], screenshot=shots)
        )

        result = await service.run_flow(
            [
                {"action": "tap", "target": {"label": "Nope"}},
                {"action": "bogus"},
                {"action": "tap", "target": {"label": "Login"}},
            ]
        )

        assert result["success"] is False
        first, second, third = result["results"]
        assert first["errorCode"] == ELEMENT_NOT_FOUND
        assert second["errorCode"] == INVALID_ACTION
        assert third["success"] is True
        assert result["errorScreenshots"] == ["/tmp/shot.png"]

    @pytest.mark.asyncio
    async def test_flow_without_error_screenshots(self, make_context) -> None:
        shots = FakeScreenshot()
        service = AutomationService(make_context([], screenshot=shots))

        result = await service.run_flow([{"action": "tap"}], screenshot_on_error=False)

        assert result["results"][0]["errorCode"] == INVALID_ACTION
        assert shots.captures == []
        assert "errorScreenshots" not in result

    @pytest.mark.asyncio
    async def test_error_screenshots_are_not_recorded(self, make_context) -> None:
        service = AutomationService(make_context([]))

        result = await service.run_flow(
            [{"action": "tap", "coordinates": {"x": 1, "y": 1}}], record_for_test=True
        )

        assert result["errorScreenshots"]
        assert "testCode" in result
        assert "XCTAttachment" not in result["testCode"]

    @pytest.mark.asyncio
    async def test_malformed_step_is_reported_and_recording_stops(self, make_context) -> None:
        service = AutomationService(make_context([FakeBackend("idb")]))

        result = await service.run_flow(
            [
                {"action": "tap", "coordinates": {"x": 1}},
                "tap",
                {"action": "tap", "target": "Login"},
                {"action": "tap", "coordinates": {"x": 1, "y": 2}},
            ],
            record_for_test=True,
            screenshot_on_error=False,
        )

        assert [r["success"] for r in result["results"]] == [False, False, False, True]
        assert {r["errorCode"] for r in result["results"][:3]} == {INVALID_ACTION}
        assert result["results"][0]["error"] == "'coordinates.y' must be a number"
        assert result["results"][1]["action"] is None
        assert "withOffset(CGVector(dx: 1, dy: 2)).tap()" in result["testCode"]
        assert service.context.recorder.is_recording is False

    @pytest.mark.asyncio
    async def test_recording_stops_when_a_step_raises(self, make_context) -> None:
        service = AutomationService(make_context([FakeBackend("idb")]))

        with patch.object(service, "_run_step", AsyncMock(side_effect=RuntimeError("boom"))):
            with pytest.raises(RuntimeError, match="boom"):
                await service.run_flow(
                    [{"action": "tap", "coordinates": {"x": 1, "y": 2}}], record_for_test=True
                )

        assert service.context.recorder.is_recording is False
        assert service.stop_recording()["errorCode"] == NO_ACTIVE_SESSION

    @pytest.mark.asyncio
    async def test_flow_with_gestures_and_keys(self, make_context) -> None:
        idb = FakeBackend("idb", capabilities=GESTURE_CAPS)
        service = AutomationService(make_context([idb]))

        result = await service.run_flow(
            [
                {"action": "long_press", "coordinates": {"x": 5, "y": 6}, "duration": 500},
                {"action": "double_tap", "coordinates": {"x": 7, "y": 8}},
                {"action": "key", "key": "enter"},
                {"action": "key"},
            ],
            screenshot_on_error=False,
        )

        first, second, third, fourth = result["results"]
        assert first["success"] and second["success"] and third["success"]
        assert fourth["errorCode"] == INVALID_ACTION
        assert idb.calls == [
            ("long_press", DevicePoint(5, 6), 500),
            ("double_tap", DevicePoint(7, 8)),
            ("key", Key.RETURN, ()),
        ]
