"""AppleScript (System Events) backend, the last resort."""

from ...coordinates.types import CoordinateSpace
from ..interfaces.backend import BackendContext, Capability, Point
from ..interfaces.keys import Key, Modifier
from .command_line import CommandLineBackend, fmt

# macOS virtual key codes for ``key code``
KEY_CODES: dict[Key, int] = {
    Key.RETURN: 36,
    Key.TAB: 48,
    Key.SPACE: 49,
    Key.DELETE: 51,
    Key.ESCAPE: 53,
    Key.HOME: 115,
    Key.LEFT: 123,
    Key.RIGHT: 124,
    Key.DOWN: 125,
    Key.UP: 126,
}


def escape_applescript_string(text: str) -> str:
    """Escape backslashes, double quotes and newlines for an AppleScript literal."""
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


class AppleScriptBackend(CommandLineBackend):
    """Clicks, types and presses keys through System Events via ``osascript``.

    The only backend that can hold modifier keys, which makes it the route
    for Simulator shortcuts such as command+shift+k.
    """

    name = "applescript"
    binary = "osascript"
    coordinate_space = CoordinateSpace.HOST_ABSOLUTE
    capabilities = frozenset({Capability.TAP, Capability.TYPE, Capability.KEY})

    def __init__(self, app_name: str = "Simulator", **timeouts: float) -> None:
        super().__init__(**timeouts)
        self.app_name = app_name

    def _in_process(self, command: str) -> str:
        return f'tell application "System Events" to tell process "{self.app_name}" to {command}'

    def click_script(self, point: Point) -> str:
        return f'tell application "System Events" to click at {{{fmt(point.x)}, {fmt(point.y)}}}'

    def keystroke_script(self, text: str) -> str:
        return self._in_process(f'keystroke "{escape_applescript_string(text)}"')

    def key_script(self, key: Key | str, modifiers: tuple[Modifier, ...] = ()) -> str:
        """Script pressing a special key by key code, or a character by keystroke."""
        if isinstance(key, Key):
            command = f"key code {KEY_CODES[key]}"
        else:
            command = f'keystroke "{escape_applescript_string(key)}"'
        if modifiers:
            held = ", ".join(f"{m.value} down" for m in modifiers)
            command = f"{command} using {{{held}}}"
        return self._in_process(command)

    async def tap(self, point: Point, context: BackendContext) -> None:
        await self._execute("tap", ["-e", self.click_script(point)], self.tap_timeout)

    async def type_text(self, text: str, context: BackendContext) -> None:
        await self._execute("type", ["-e", self.keystroke_script(text)], self.type_timeout)

    async def press_key(
        self, key: Key | str, modifiers: tuple[Modifier, ...], context: BackendContext
    ) -> None:
        await self._execute("key", ["-e", self.key_script(key, modifiers)], self.key_timeout)
