"""Coordinate type definitions for simulator automation.

This module defines immutable coordinate types for the two coordinate
systems used when driving the simulator:

1. DevicePoint - Pixel coordinates in the simulated screen's own space
   (WebDriverAgent, idb and AXe use these)
2. HostPoint - Absolute coordinates on the display hosting the Simulator
   window (cliclick and AppleScript use these)

Each backend declares the CoordinateSpace it needs, so translation is a
total function over that tag.
"""

from dataclasses import dataclass
from enum import Enum

__all__ = [
    "CoordinateSpace",
    "DevicePoint",
    "HostPoint",
    "WindowBounds",
]


class CoordinateSpace(str, Enum):
    """Addressing scheme a backend expects."""

    DEVICE_NATIVE = "device_native"
    HOST_ABSOLUTE = "host_absolute"


@dataclass(frozen=True)
class DevicePoint:
    """A point in device-native coordinates.

    Attributes:
        x: X coordinate on the simulated screen
        y: Y coordinate on the simulated screen
    """

    x: float
    y: float

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return f"DevicePoint(x={self.x}, y={self.y})"


@dataclass(frozen=True)
class HostPoint:
    """A point in absolute host-screen coordinates.

    Attributes:
        x: X coordinate on the host display
        y: Y coordinate on the host display
    """

    x: float
    y: float

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return f"HostPoint(x={self.x}, y={self.y})"


@dataclass(frozen=True)
class WindowBounds:
    """On-screen bounds of the Simulator host window.

    Bounds are transient: they are queried for every window-relative action
    because the window may move between calls.

    Attributes:
        x: Window X position on the host display
        y: Window Y position on the host display
        width: Window width
        height: Window height
    """

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def parse(cls, text: str) -> "WindowBounds | None":
        """Parse ``"x,y,width,height"`` as returned by System Events.

        Args:
            text: Comma separated bounds

        Returns:
            WindowBounds, or None if the text is not four numbers
        """
        parts = [p.strip() for p in text.strip().split(",")]
        if len(parts) != 4:
            return None
        try:
            x, y, width, height = (float(p) for p in parts)
        except ValueError:
            return None
        return cls(x=x, y=y, width=width, height=height)

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return f"WindowBounds(x={self.x}, y={self.y}, width={self.width}, height={self.height})"
