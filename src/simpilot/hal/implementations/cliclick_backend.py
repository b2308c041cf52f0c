"""cliclick host mouse backend."""

from ...coordinates.types import CoordinateSpace
from ..interfaces.backend import BackendContext, Capability, Point
from .command_line import CommandLineBackend, fmt


def _at(point: Point) -> str:
    return f"{fmt(point.x)},{fmt(point.y)}"


class CliclickBackend(CommandLineBackend):
    """Clicks and drags on the host display with ``cliclick``.

    Works on host-absolute coordinates, so the dispatcher translates device
    points through the Simulator window bounds first. Has no typing support.
    """

    name = "cliclick"
    binary = "cliclick"
    coordinate_space = CoordinateSpace.HOST_ABSOLUTE
    capabilities = frozenset(
        {Capability.TAP, Capability.SWIPE, Capability.LONG_PRESS, Capability.DOUBLE_TAP}
    )

    async def tap(self, point: Point, context: BackendContext) -> None:
        await self._execute("tap", [f"c:{_at(point)}"], self.tap_timeout)

    async def swipe(
        self, start: Point, end: Point, duration_ms: int, context: BackendContext
    ) -> None:
        # cliclick drags have no duration control
        await self._execute(
            "swipe", [f"dd:{_at(start)}", f"du:{_at(end)}"], self.swipe_timeout
        )

    async def long_press(self, point: Point, duration_ms: int, context: BackendContext) -> None:
        await self._execute(
            "long_press",
            [f"dd:{_at(point)}", f"w:{duration_ms}", f"du:{_at(point)}"],
            self._long_press_timeout(duration_ms),
        )

    async def double_tap(self, point: Point, context: BackendContext) -> None:
        await self._execute("double_tap", [f"dc:{_at(point)}"], self.tap_timeout)
