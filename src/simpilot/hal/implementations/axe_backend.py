"""AXe accessibility bridge backend."""

from ...automation_exceptions import BackendActionError
from ...coordinates.types import CoordinateSpace
from ..interfaces.backend import BackendContext, Capability, Point
from ..interfaces.keys import HID_KEY_CODES, Key, Modifier
from .command_line import CommandLineBackend, fmt


class AxeBackend(CommandLineBackend):
    """Drives the simulator through the ``axe`` CLI."""

    name = "axe"
    binary = "axe"
    requires_device = True
    coordinate_space = CoordinateSpace.DEVICE_NATIVE
    capabilities = frozenset(
        {
            Capability.TAP,
            Capability.TYPE,
            Capability.SWIPE,
            Capability.DOUBLE_TAP,
            Capability.KEY,
        }
    )

    async def tap(self, point: Point, context: BackendContext) -> None:
        udid = self._require_udid(context)
        await self._execute(
            "tap",
            ["tap", "-x", fmt(point.x), "-y", fmt(point.y), "--udid", udid],
            self.tap_timeout,
        )

    async def type_text(self, text: str, context: BackendContext) -> None:
        udid = self._require_udid(context)
        await self._execute("type", ["type", text, "--udid", udid], self.type_timeout)

    async def swipe(
        self, start: Point, end: Point, duration_ms: int, context: BackendContext
    ) -> None:
        udid = self._require_udid(context)
        await self._execute(
            "swipe",
            [
                "swipe",
                "--from-x",
                fmt(start.x),
                "--from-y",
                fmt(start.y),
                "--to-x",
                fmt(end.x),
                "--to-y",
                fmt(end.y),
                "--duration",
                str(duration_ms / 1000),
                "--udid",
                udid,
            ],
            self.swipe_timeout,
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
            args = ["key", str(HID_KEY_CODES[key]), "--udid", udid]
        else:
            args = ["type", key, "--udid", udid]
        await self._execute("key", args, self.key_timeout)
