"""Interaction backend interface definition.

Every way of driving the simulator (WebDriverAgent over HTTP, the idb and
AXe command line bridges, cliclick, AppleScript) implements
IAutomationBackend. A backend declares what it can do and which coordinate
space it addresses, so the dispatcher can treat the ordered backend list
uniformly.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ...automation_exceptions import BackendActionError
from ...coordinates.types import CoordinateSpace, DevicePoint, HostPoint
from .keys import Key, Modifier

Point = DevicePoint | HostPoint


class Capability(str, Enum):
    """Operations a backend may support."""

    DISCOVERY = "discovery"
    TAP = "tap"
    TYPE = "type"
    SWIPE = "swipe"
    LONG_PRESS = "long_press"
    DOUBLE_TAP = "double_tap"
    KEY = "key"


@dataclass(frozen=True)
class BackendContext:
    """Target of a single dispatch.

    Attributes:
        udid: Identifier of the target simulator, if one is booted
        bundle_id: Bundle identifier of the app under test
    """

    udid: str | None = None
    bundle_id: str | None = None


class IAutomationBackend(ABC):
    """Interface for a simulator interaction backend.

    Implementations raise a BackendError subclass when an attempt fails.
    The dispatcher treats any such error as a reason to move on to the
    next backend in priority order.

    Example:
        >>> backend = IdbBackend()
        >>> if await backend.probe(BackendContext(udid=udid)):
        ...     await backend.tap(DevicePoint(100, 200), BackendContext(udid=udid))
    """

    name: str = ""
    coordinate_space: CoordinateSpace = CoordinateSpace.DEVICE_NATIVE
    capabilities: frozenset[Capability] = frozenset()

    def supports(self, capability: Capability) -> bool:
        """Check whether this backend declares a capability."""
        return capability in self.capabilities

    @abstractmethod
    async def probe(self, context: BackendContext, start_if_needed: bool = False) -> bool:
        """Check whether the backend can be used right now.

        Args:
            context: Target device and app
            start_if_needed: Start the backend's server if it supports that

        Returns:
            True if the backend is usable
        """
        ...

    async def tap(self, point: Point, context: BackendContext) -> None:
        """Tap at a point in this backend's coordinate space.

        Raises:
            BackendError: If the tap failed
        """
        raise BackendActionError(self.name, "tap", "not supported")

    async def type_text(self, text: str, context: BackendContext) -> None:
        """Type text into the focused element.

        Raises:
            BackendError: If typing failed
        """
        raise BackendActionError(self.name, "type", "not supported")

    async def swipe(
        self, start: Point, end: Point, duration_ms: int, context: BackendContext
    ) -> None:
        """Swipe from start to end over duration_ms milliseconds.

        Raises:
            BackendError: If the swipe failed
        """
        raise BackendActionError(self.name, "swipe", "not supported")

    async def long_press(self, point: Point, duration_ms: int, context: BackendContext) -> None:
        """Touch and hold at a point for duration_ms milliseconds.

        Raises:
            BackendError: If the press failed
        """
        raise BackendActionError(self.name, "long_press", "not supported")

    async def double_tap(self, point: Point, context: BackendContext) -> None:
        raise BackendActionError(self.name, "double_tap", "not supported")

    async def press_key(
        self, key: Key | str, modifiers: tuple[Modifier, ...], context: BackendContext
    ) -> None:
        """Press a special key or character, holding any modifiers.

        Raises:
            BackendError: If the key press failed or the chord is not supported
        """
        raise BackendActionError(self.name, "key", "not supported")

    def __repr__(self) -> str:
        caps = ",".join(sorted(c.value for c in self.capabilities))
        return f"{type(self).__name__}(name={self.name!r}, capabilities={caps})"


class IDiscoveryBackend(IAutomationBackend):
    """A backend that can also describe the on-screen element hierarchy."""

    @abstractmethod
    async def get_source(self, context: BackendContext) -> dict[str, Any] | None:
        """Fetch the element hierarchy of the foreground app.

        Args:
            context: Target device and app

        Returns:
            Root node with recursive ``children``, or None if unavailable
        """
        ...
