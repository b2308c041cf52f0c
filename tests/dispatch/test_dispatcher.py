"""Tests for ActionDispatcher."""

import asyncio

import pytest
from fakes import ALL_CAPS, GESTURE_CAPS, FakeBackend, FakeDiscoveryBackend, FakeScreenshot

from simpilot.automation_exceptions import (
    ACTION_FAILED,
    ACTION_TIMEOUT,
    BACKEND_UNAVAILABLE,
    ELEMENT_NOT_FOUND,
    INVALID_ACTION,
    WINDOW_BOUNDS_UNAVAILABLE,
)
from simpilot.coordinates import CoordinateSpace, DevicePoint, HostPoint
from simpilot.dispatch import ActionDispatcher, LogicalAction
from simpilot.elements import ElementQuery
from simpilot.hal import Capability, Key, Modifier
from simpilot.recording import ActionKind


def host_backend(name: str = "cliclick", **kwargs) -> FakeBackend:
    return FakeBackend(name, space=CoordinateSpace.HOST_ABSOLUTE, **kwargs)


class SlowBackend(FakeBackend):
    """Backend whose taps never finish in time."""

    async def tap(self, point, context):
        self.calls.append(("tap", point))
        await asyncio.sleep(5)


class TestFallbackChain:
    """Test backend ordering and fallback."""

    @pytest.mark.asyncio
    async def test_first_usable_backend_wins(self, make_context) -> None:
        wda = FakeDiscoveryBackend(None)
        idb = FakeBackend("idb")
        dispatcher = ActionDispatcher(make_context([wda, idb]))

        result = await dispatcher.tap_at(10, 20)

        assert result.success
        assert result.method == "wda"
        assert wda.calls == [("tap", DevicePoint(10, 20))]
        assert idb.calls == []

    @pytest.mark.asyncio
    async def test_unusable_backend_is_skipped_and_host_translated(self, make_context) -> None:
        wda = FakeDiscoveryBackend(None, usable=False)
        cliclick = host_backend()
        dispatcher = ActionDispatcher(make_context([wda, cliclick]))

        result = await dispatcher.tap_at(10, 10)

        assert result.success
        assert result.method == "cliclick"
        assert wda.calls == []
        assert cliclick.calls == [("tap", HostPoint(110, 88))]

    @pytest.mark.asyncio
    async def test_failed_attempt_advances_without_retry(self, make_context) -> None:
        idb = FakeBackend("idb", fail=True)
        axe = FakeBackend("axe")
        dispatcher = ActionDispatcher(make_context([idb, axe]))

        result = await dispatcher.tap_at(1, 2)

        assert result.success
        assert result.method == "axe"
        assert len(idb.calls) == 1
        assert [(a.backend, a.success) for a in result.attempts] == [("idb", False), ("axe", True)]
        assert result.attempts[0].error_code == ACTION_FAILED

    @pytest.mark.asyncio
    async def test_no_usable_backend(self, make_context) -> None:
        dispatcher = ActionDispatcher(make_context([FakeBackend("idb", usable=False)]))

        result = await dispatcher.tap_at(1, 2)

        assert not result.success
        assert result.error_code == BACKEND_UNAVAILABLE
        assert "cliclick" in result.error
        assert result.attempts == []

    @pytest.mark.asyncio
    async def test_capability_filter(self, make_context) -> None:
        applescript = host_backend(
            "applescript", capabilities=frozenset({Capability.TAP, Capability.TYPE})
        )
        dispatcher = ActionDispatcher(make_context([applescript]))

        result = await dispatcher.swipe(0, 0, 0, 100)

        assert result.error_code == BACKEND_UNAVAILABLE
        assert applescript.calls == []

    @pytest.mark.asyncio
    async def test_exhaustion_reports_last_error(self, make_context) -> None:
        idb = FakeBackend("idb", fail=True)
        axe = FakeBackend("axe", fail=True)
        dispatcher = ActionDispatcher(make_context([idb, axe]))

        result = await dispatcher.type_text("hello")

        assert not result.success
        assert result.error_code == ACTION_FAILED
        assert result.error.startswith("axe type failed")
        assert [a.backend for a in result.attempts] == ["idb", "axe"]

    @pytest.mark.asyncio
    async def test_missing_window_bounds_advances(self, make_context) -> None:
        cliclick = host_backend()
        applescript = host_backend("applescript")
        dispatcher = ActionDispatcher(make_context([cliclick, applescript], bounds=None))

        result = await dispatcher.tap_at(5, 5)

        assert not result.success
        assert result.error_code == WINDOW_BOUNDS_UNAVAILABLE
        assert cliclick.calls == [] and applescript.calls == []
        assert len(result.attempts) == 2

    @pytest.mark.asyncio
    async def test_host_typing_needs_focus_not_bounds(self, make_context) -> None:
        applescript = host_backend("applescript")
        context = make_context([applescript], bounds=None)
        dispatcher = ActionDispatcher(context)

        result = await dispatcher.type_text("hello")

        assert result.success
        assert result.method == "applescript"
        assert applescript.calls == [("type", "hello")]
        assert context.translator._window.focus_calls == 1
        assert context.translator._window.bounds_queries == 0

    @pytest.mark.asyncio
    async def test_attempt_timeout(self, settings, make_context) -> None:
        settings.tap_timeout = 0.05
        slow = SlowBackend("idb")
        axe = FakeBackend("axe")
        dispatcher = ActionDispatcher(make_context([slow, axe]))

        result = await dispatcher.tap_at(1, 1)

        assert result.success
        assert result.method == "axe"
        assert result.attempts[0].error_code == ACTION_TIMEOUT

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_wrapped(self, make_context) -> None:
        class Broken(FakeBackend):
            async def tap(self, point, context):
                raise RuntimeError("boom")

        dispatcher = ActionDispatcher(make_context([Broken("idb")]))

        result = await dispatcher.tap_at(1, 1)

        assert result.error_code == ACTION_FAILED
        assert "boom" in result.error


class TestDirectActions:
    """Test coordinate, swipe, wait and screenshot actions."""

    @pytest.mark.asyncio
    async def test_swipe_translates_both_points_once(self, make_context) -> None:
        cliclick = host_backend()
        context = make_context([cliclick])
        dispatcher = ActionDispatcher(context)

        result = await dispatcher.swipe(0, 0, 0, 100, duration_ms=250)

        assert result.success
        assert cliclick.calls == [("swipe", HostPoint(100, 78), HostPoint(100, 178), 250)]
        assert context.translator._window.bounds_queries == 1

    @pytest.mark.asyncio
    async def test_swipe_default_duration(self, settings, make_context) -> None:
        idb = FakeBackend("idb")
        dispatcher = ActionDispatcher(make_context([idb]))

        await dispatcher.swipe(0, 0, 0, 100)

        assert idb.calls[0][3] == settings.default_swipe_duration_ms

    @pytest.mark.asyncio
    async def test_wait(self, make_context) -> None:
        dispatcher = ActionDispatcher(make_context([]))

        assert (await dispatcher.wait(0)).success
        invalid = await dispatcher.wait(-1)
        assert invalid.error_code == INVALID_ACTION

    @pytest.mark.asyncio
    async def test_screenshot(self, make_context) -> None:
        shots = FakeScreenshot()
        context = make_context([], screenshot=shots)
        context.recorder.start()
        dispatcher = ActionDispatcher(context)

        result = await dispatcher.screenshot("/tmp/out.png")

        assert result.success
        assert result.path == "/tmp/out.png"
        assert context.recorder.active.screenshots == ["/tmp/out.png"]
        assert context.recorder.active.recorded_actions[0].kind == ActionKind.SCREENSHOT

    @pytest.mark.asyncio
    async def test_screenshot_failure(self, make_context) -> None:
        dispatcher = ActionDispatcher(make_context([], screenshot=FakeScreenshot(success=False)))

        result = await dispatcher.screenshot()

        assert not result.success
        assert "No booted simulator" in result.error


class TestRecording:
    """Test that only successful actions are recorded."""

    @pytest.mark.asyncio
    async def test_success_is_recorded(self, make_context) -> None:
        context = make_context([FakeBackend("idb")])
        context.recorder.start()
        dispatcher = ActionDispatcher(context)

        await dispatcher.tap_at(3, 4)
        await dispatcher.type_text("hi")
        await dispatcher.swipe(0, 0, 10, 0, duration_ms=100)
        await dispatcher.wait(0)

        actions = context.recorder.active.recorded_actions
        assert [a.kind for a in actions] == [
            ActionKind.TAP,
            ActionKind.TYPE,
            ActionKind.SWIPE,
            ActionKind.WAIT,
        ]
        assert actions[0].coordinates == (3, 4)
        assert actions[1].text == "hi"
        assert actions[2].duration_ms == 100

    @pytest.mark.asyncio
    async def test_failure_is_not_recorded(self, make_context) -> None:
        context = make_context([FakeBackend("idb", fail=True)])
        context.recorder.start()
        dispatcher = ActionDispatcher(context)

        await dispatcher.tap_at(3, 4)
        await dispatcher.type_text("hi")

        assert context.recorder.active.recorded_actions == []

    @pytest.mark.asyncio
    async def test_no_session_is_fine(self, make_context) -> None:
        dispatcher = ActionDispatcher(make_context([FakeBackend("idb")]))
        assert (await dispatcher.tap_at(3, 4)).success


class TestQueryActions:
    """Test find-and-tap and find-and-type."""

    @pytest.mark.asyncio
    async def test_find_and_tap_taps_center(self, make_context, login_tree) -> None:
        wda = FakeDiscoveryBackend(login_tree)
        context = make_context([wda])
        context.recorder.start()
        dispatcher = ActionDispatcher(context)

        result = await dispatcher.find_and_tap(ElementQuery(label="Login"))

        assert result.success
        assert result.element.label == "Login"
        assert wda.calls == [("tap", DevicePoint(195, 345))]
        (recorded,) = context.recorder.active.recorded_actions
        assert recorded.element.label == "Login"
        assert recorded.element.type == "XCUIElementTypeButton"
        assert recorded.coordinates == (195, 345)

    @pytest.mark.asyncio
    async def test_find_and_tap_skips_disabled(self, make_context, login_tree) -> None:
        dispatcher = ActionDispatcher(make_context([FakeDiscoveryBackend(login_tree)]))

        result = await dispatcher.find_and_tap(ElementQuery(label="Submit"))

        assert result.error_code == ELEMENT_NOT_FOUND

    @pytest.mark.asyncio
    async def test_find_and_tap_index_out_of_range(self, make_context, login_tree) -> None:
        wda = FakeDiscoveryBackend(login_tree)
        dispatcher = ActionDispatcher(make_context([wda]))

        result = await dispatcher.find_and_tap(
            ElementQuery(type="XCUIElementTypeButton", index=5)
        )

        assert result.error_code == ELEMENT_NOT_FOUND
        assert wda.calls == []

    @pytest.mark.asyncio
    async def test_find_without_discovery(self, make_context) -> None:
        dispatcher = ActionDispatcher(make_context([FakeBackend("idb")]))

        result = await dispatcher.find_and_tap(ElementQuery(label="Login"))

        assert result.error_code == ELEMENT_NOT_FOUND

    @pytest.mark.asyncio
    async def test_find_and_type_focuses_then_types(self, make_context, login_tree) -> None:
        wda = FakeDiscoveryBackend(login_tree)
        context = make_context([wda])
        context.recorder.start()
        dispatcher = ActionDispatcher(context)

        result = await dispatcher.find_and_type(ElementQuery(label="Password"), "secret")

        assert result.success
        assert wda.calls == [("tap", DevicePoint(195, 280)), ("type", "secret")]
        assert len(result.attempts) == 2
        (recorded,) = context.recorder.active.recorded_actions
        assert recorded.kind == ActionKind.TYPE
        assert recorded.text == "secret"
        assert recorded.element.label == "Password"

    @pytest.mark.asyncio
    async def test_find_and_type_only_considers_text_inputs(self, make_context, login_tree) -> None:
        dispatcher = ActionDispatcher(make_context([FakeDiscoveryBackend(login_tree)]))

        result = await dispatcher.find_and_type(ElementQuery(label="Login"), "x")

        assert result.error_code == ELEMENT_NOT_FOUND
        assert "text field" in result.error

    @pytest.mark.asyncio
    async def test_find_and_type_aborts_when_focus_fails(self, make_context, login_tree) -> None:
        class TapFails(FakeDiscoveryBackend):
            async def tap(self, point, context):
                self.calls.append(("tap", point))
                raise RuntimeError("tap rejected")

        wda = TapFails(login_tree)
        context = make_context([wda])
        context.recorder.start()
        dispatcher = ActionDispatcher(context)

        result = await dispatcher.find_and_type(ElementQuery(label="Email"), "a@b.c")

        assert not result.success
        assert result.element.label == "Email"
        assert [c[0] for c in wda.calls] == ["tap"]
        assert context.recorder.active.recorded_actions == []


class TestDispatch:
    """Test the generic entry point."""

    @pytest.mark.asyncio
    async def test_routes_each_kind(self, make_context, login_tree) -> None:
        wda = FakeDiscoveryBackend(login_tree)
        dispatcher = ActionDispatcher(make_context([wda]))

        assert (await dispatcher.dispatch(LogicalAction.tap(1, 2))).success
        assert (await dispatcher.dispatch(LogicalAction.tap_element(ElementQuery(label="Back")))).success
        assert (await dispatcher.dispatch(LogicalAction.type_text("x"))).success
        assert (await dispatcher.dispatch(LogicalAction.swipe(0, 0, 0, 1))).success
        assert (await dispatcher.dispatch(LogicalAction.wait(0))).success
        assert (await dispatcher.dispatch(LogicalAction.screenshot())).success

    @pytest.mark.asyncio
    async def test_missing_fields_are_invalid(self, make_context) -> None:
        dispatcher = ActionDispatcher(make_context([FakeBackend("idb")]))

        for action in (
            LogicalAction(kind=ActionKind.TAP),
            LogicalAction(kind=ActionKind.TYPE),
            LogicalAction(kind=ActionKind.SWIPE, x=0, y=0),
        ):
            result = await dispatcher.dispatch(action)
            assert result.error_code == INVALID_ACTION

    @pytest.mark.asyncio
    async def test_routes_gestures_and_keys(self, make_context) -> None:
        idb = FakeBackend("idb", capabilities=ALL_CAPS | GESTURE_CAPS)
        dispatcher = ActionDispatcher(make_context([idb]))

        assert (await dispatcher.dispatch(LogicalAction.long_press(1, 2, 500))).success
        assert (await dispatcher.dispatch(LogicalAction.double_tap(1, 2))).success
        assert (await dispatcher.dispatch(LogicalAction.press_key("tab"))).success
        assert [c[0] for c in idb.calls] == ["long_press", "double_tap", "key"]

    @pytest.mark.asyncio
    async def test_gestures_without_fields_are_invalid(self, make_context) -> None:
        dispatcher = ActionDispatcher(make_context([FakeBackend("idb")]))

        for action in (
            LogicalAction(kind=ActionKind.LONG_PRESS),
            LogicalAction(kind=ActionKind.DOUBLE_TAP, x=1),
            LogicalAction(kind=ActionKind.KEY),
        ):
            result = await dispatcher.dispatch(action)
            assert result.error_code == INVALID_ACTION


class EscapeFails(FakeBackend):
    """Key backend that cannot send escape."""

    async def press_key(self, key, modifiers, context):
        self.calls.append(("key", key, modifiers))
        if key == Key.ESCAPE:
            raise RuntimeError("escape not supported")


class TestGestures:
    """Test long press, double tap, keys, keyboard dismissal and scrolling."""

    @pytest.mark.asyncio
    async def test_long_press_default_duration_is_recorded(self, settings, make_context) -> None:
        idb = FakeBackend("idb", capabilities=GESTURE_CAPS)
        context = make_context([idb])
        context.recorder.start()
        dispatcher = ActionDispatcher(context)

        result = await dispatcher.long_press(10, 20)

        assert result.success
        assert idb.calls == [("long_press", DevicePoint(10, 20), settings.default_long_press_ms)]
        (recorded,) = context.recorder.active.recorded_actions
        assert recorded.kind == ActionKind.LONG_PRESS
        assert recorded.coordinates == (10, 20)
        assert recorded.duration_ms == settings.default_long_press_ms

    @pytest.mark.asyncio
    async def test_long_press_negative_duration(self, make_context) -> None:
        dispatcher = ActionDispatcher(make_context([FakeBackend("idb", capabilities=GESTURE_CAPS)]))

        result = await dispatcher.long_press(1, 1, -5)

        assert result.error_code == INVALID_ACTION

    @pytest.mark.asyncio
    async def test_double_tap_translates_for_host_backend(self, make_context) -> None:
        cliclick = host_backend(capabilities=frozenset({Capability.DOUBLE_TAP}))
        dispatcher = ActionDispatcher(make_context([cliclick]))

        result = await dispatcher.double_tap(10, 10)

        assert result.method == "cliclick"
        assert cliclick.calls == [("double_tap", HostPoint(110, 88))]

    @pytest.mark.asyncio
    async def test_press_key_resolves_names_and_records(self, make_context) -> None:
        applescript = host_backend("applescript", capabilities=GESTURE_CAPS)
        context = make_context([applescript])
        context.recorder.start()
        dispatcher = ActionDispatcher(context)

        result = await dispatcher.press_key("K", ["cmd", "shift"])

        assert result.success
        assert result.message == "Pressed: command+shift+K via applescript"
        assert applescript.calls == [("key", "K", (Modifier.COMMAND, Modifier.SHIFT))]
        (recorded,) = context.recorder.active.recorded_actions
        assert (recorded.key, recorded.modifiers) == ("K", ("command", "shift"))

    @pytest.mark.asyncio
    async def test_press_key_special_name(self, make_context) -> None:
        idb = FakeBackend("idb", capabilities=GESTURE_CAPS)
        dispatcher = ActionDispatcher(make_context([idb]))

        await dispatcher.press_key("enter")

        assert idb.calls == [("key", Key.RETURN, ())]

    @pytest.mark.asyncio
    async def test_unknown_key_is_invalid(self, make_context) -> None:
        idb = FakeBackend("idb", capabilities=GESTURE_CAPS)
        dispatcher = ActionDispatcher(make_context([idb]))

        assert (await dispatcher.press_key("pageup")).error_code == INVALID_ACTION
        assert (await dispatcher.press_key("a", ["hyper"])).error_code == INVALID_ACTION
        assert idb.calls == []

    @pytest.mark.asyncio
    async def test_dismiss_keyboard_with_escape(self, make_context) -> None:
        idb = FakeBackend("idb", capabilities=GESTURE_CAPS)
        dispatcher = ActionDispatcher(make_context([idb]))

        result = await dispatcher.dismiss_keyboard()

        assert result.success
        assert result.message == "Keyboard dismissed via idb"
        assert idb.calls == [("key", Key.ESCAPE, ())]

    @pytest.mark.asyncio
    async def test_dismiss_keyboard_falls_back_to_hardware_toggle(self, make_context) -> None:
        applescript = EscapeFails("applescript", capabilities=GESTURE_CAPS)
        context = make_context([applescript])
        context.recorder.start()
        dispatcher = ActionDispatcher(context)

        result = await dispatcher.dismiss_keyboard()

        assert result.success
        assert applescript.calls[-1] == ("key", "k", (Modifier.COMMAND, Modifier.SHIFT))
        assert [a.success for a in result.attempts] == [False, True]
        (recorded,) = context.recorder.active.recorded_actions
        assert recorded.key == "k"

    @pytest.mark.asyncio
    async def test_scroll_presses_arrow_per_step(self, make_context) -> None:
        idb = FakeBackend("idb", capabilities=GESTURE_CAPS)
        dispatcher = ActionDispatcher(make_context([idb]))

        result = await dispatcher.scroll("down", 120)

        assert result.success
        assert result.message == "Scrolled down by 120px via idb"
        assert idb.calls == [("key", Key.DOWN, ())] * 3
        assert len(result.attempts) == 3

    @pytest.mark.asyncio
    async def test_scroll_default_amount(self, make_context) -> None:
        idb = FakeBackend("idb", capabilities=GESTURE_CAPS)
        dispatcher = ActionDispatcher(make_context([idb]))

        await dispatcher.scroll("up")

        assert len(idb.calls) == 2

    @pytest.mark.asyncio
    async def test_scroll_stops_at_first_failure(self, make_context) -> None:
        idb = FakeBackend("idb", capabilities=GESTURE_CAPS, fail=True)
        dispatcher = ActionDispatcher(make_context([idb]))

        result = await dispatcher.scroll("left", 500)

        assert not result.success
        assert len(idb.calls) == 1

    @pytest.mark.asyncio
    async def test_scroll_rejects_bad_input(self, make_context) -> None:
        dispatcher = ActionDispatcher(make_context([FakeBackend("idb", capabilities=GESTURE_CAPS)]))

        assert (await dispatcher.scroll("sideways")).error_code == INVALID_ACTION
        assert (await dispatcher.scroll("up", 0)).error_code == INVALID_ACTION
