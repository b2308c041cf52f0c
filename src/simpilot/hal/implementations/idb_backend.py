"""idb command line bridge backend."""

from ...automation_exceptions import BackendActionError
from ...coordinates.types import CoordinateSpace
from ..interfaces.backend import BackendContext, Capability, Point
from ..interfaces.keys import HID_KEY_CODES, Key, Modifier
from .command_line import CommandLineBackend, fmt


class IdbBackend(CommandLineBackend):
    """Drives the simulator through ``idb ui``.

    Coordinates are device-native and every command targets a device udid.
    Key presses go through HID key codes, so modifier chords are not
    supported.
    """

    name = "idb"
    binary = "idb"
    requires_device = True
    coordinate_space = CoordinateSpace.DEVICE_NATIVE
    capabilities = frozenset(
        {
            Capability.TAP,
            Capability.TYPE,
            Capability.SWIPE,
            Capability.LONG_PRESS,
            Capability.DOUBLE_TAP,
            Capability.KEY,
        }
    )

    async def tap(self, point: Point, context: BackendContext) -> None:
        udid = self._require_udid(context)
        await self._execute(
            "tap",
            ["ui", "tap", "--udid", udid, "--", fmt(point.x), fmt(point.y)],
            self.tap_timeout,
        )

    async def type_text(self, text: str, context: BackendContext) -> None:
        udid = self._require_udid(context)
        await self._execute("type", ["ui", "text", "--udid", udid, text], self.type_timeout)

    async def swipe(
        self, start: Point, end: Point, duration_ms: int, context: BackendContext
    ) -> None:
        udid = self._require_udid(context)
        await self._execute(
            "swipe",
            [
                "ui",
                "swipe",
                "--udid",
                udid,
                "--duration",
                str(duration_ms / 1000),
                "--",
                fmt(start.x),
                fmt(start.y),
                fmt(end.x),
                fmt(end.y),
            ],
            self.swipe_timeout,
        )

    async def long_press(self, point: Point, duration_ms: int, context: BackendContext) -> None:
        udid = self._require_udid(context)
        await self._execute(
            "long_press",
            [
                "ui",
                "tap",
                "--udid",
                udid,
                "--duration",
                str(duration_ms / 1000),
                "--",
                fmt(point.x),
                fmt(point.y),
            ],
            self._long_press_timeout(duration_ms),
        )

    async def double_tap(self, point: Point, context: BackendContext) -> None:
        await self._tap_twice(point, context)

    async def press_key(
        self, key: Key | str, modifiers: tuple[Modifier, ...], context: BackendContext
    ) -> None:
        if modifiers:
            raise BackendActionError(self.name, "key", "modifier keys not supported")
        udid = self._require_udid(context)
        if isinstance(key, Key):
            args = ["ui", "key", "--udid", udid, str(HID_KEY_CODES[key])]
        else:
            args = ["ui", "text", "--udid", udid, key]
        await self._execute("key", args, self.key_timeout)
