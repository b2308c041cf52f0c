"""Coordinate translation between device-native and host-absolute space.

This module provides the CoordinateTranslator, the single place where a
logical on-screen point is converted into the addressing scheme a backend
expects:

- DEVICE_NATIVE backends (WebDriverAgent, idb, AXe) receive the point as is.
- HOST_ABSOLUTE backends (cliclick, AppleScript) receive the point offset by
  the Simulator window origin plus the window title bar.

Usage:
    >>> translator = CoordinateTranslator(SimulatorWindowLocator())
    >>> host = await translator.translate(DevicePoint(120, 300), CoordinateSpace.HOST_ABSOLUTE)
    >>> print(f"Click at ({host.x}, {host.y})")

No Retina or point-vs-pixel scaling is applied: callers supply coordinates
already in the backend's native scale.
"""

import asyncio
from collections.abc import Sequence

from ..automation_exceptions import WindowBoundsUnavailableError
from .types import CoordinateSpace, DevicePoint, HostPoint, WindowBounds
from .window import SimulatorWindowLocator

DEFAULT_TITLE_BAR_OFFSET = 28


def device_to_host(
    point: DevicePoint, bounds: WindowBounds, title_bar_offset: int = DEFAULT_TITLE_BAR_OFFSET
) -> HostPoint:
    """Convert a device point to host coordinates for known window bounds.

    Args:
        point: Point in device-native coordinates
        bounds: Current Simulator window bounds
        title_bar_offset: Height of the window title bar

    Returns:
        HostPoint on the host display

    Example:
        >>> device_to_host(DevicePoint(10, 10), WindowBounds(100, 50, 400, 800))
        HostPoint(x=110, y=88)
    """
    return HostPoint(x=bounds.x + point.x, y=bounds.y + title_bar_offset + point.y)


class CoordinateTranslator:
    """Translates device points into whatever a backend can address.

    Window bounds are queried on every host-absolute translation and never
    cached, since the Simulator window may move between actions.
    """

    def __init__(
        self,
        window: SimulatorWindowLocator,
        title_bar_offset: int = DEFAULT_TITLE_BAR_OFFSET,
        focus_delay: float = 0.2,
    ) -> None:
        """Initialize CoordinateTranslator.

        Args:
            window: Locator used to focus the Simulator and read its bounds
            title_bar_offset: Height of the window title bar
            focus_delay: Delay after focusing before reading bounds
        """
        self._window = window
        self.title_bar_offset = title_bar_offset
        self.focus_delay = focus_delay

    async def focus(self) -> None:
        """Bring the Simulator to the foreground and let it settle."""
        await self._window.focus()
        if self.focus_delay:
            await asyncio.sleep(self.focus_delay)

    async def current_bounds(self) -> WindowBounds:
        """Focus the Simulator and read its window bounds.

        Returns:
            Current WindowBounds

        Raises:
            WindowBoundsUnavailableError: If the bounds cannot be obtained
        """
        await self.focus()
        bounds = await self._window.get_bounds()
        if bounds is None:
            raise WindowBoundsUnavailableError(
                f"no readable window for process '{self._window.app_name}'"
            )
        return bounds

    async def translate(
        self, point: DevicePoint, space: CoordinateSpace
    ) -> DevicePoint | HostPoint:
        """Translate a single device point for a backend's coordinate space.

        Args:
            point: Point in device-native coordinates
            space: Coordinate space declared by the backend

        Returns:
            The same point for DEVICE_NATIVE, a HostPoint for HOST_ABSOLUTE

        Raises:
            WindowBoundsUnavailableError: If host translation cannot read bounds
        """
        return (await self.translate_many([point], space))[0]

    async def translate_many(
        self, points: Sequence[DevicePoint], space: CoordinateSpace
    ) -> list[DevicePoint | HostPoint]:
        """Translate several points of one action against the same bounds.

        Args:
            points: Points in device-native coordinates
            space: Coordinate space declared by the backend

        Returns:
            Translated points in input order

        Raises:
            WindowBoundsUnavailableError: If host translation cannot read bounds
        """
        if space == CoordinateSpace.DEVICE_NATIVE:
            return list(points)

        if space == CoordinateSpace.HOST_ABSOLUTE:
            if not points:
                # Keystroke-only actions still need the Simulator focused
                await self.focus()
                return []
            bounds = await self.current_bounds()
            return [device_to_host(p, bounds, self.title_bar_offset) for p in points]

        raise ValueError(f"Unsupported coordinate space: {space}")
