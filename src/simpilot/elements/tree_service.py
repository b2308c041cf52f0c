"""Element tree retrieval and flattening.

The element hierarchy comes from the first usable discovery backend
(WebDriverAgent). It is flattened in pre-order into UIElement records and
the tree itself is not retained.
"""

import logging
from itertools import count
from typing import Any

from ..device.screenshot import IScreenshotCapture
from ..hal.interfaces.backend import BackendContext
from ..hal.probe import BackendProbe
from .types import INTERACTIVE_TYPE_MARKERS, ElementRect, ScreenAnalysis, UIElement

logger = logging.getLogger(__name__)


class ElementIdAllocator:
    """Hands out sequential ``element_<n>`` identifiers.

    The counter is never rewound by flattening, so ids stay unique across
    every tree flattened through the same allocator.

    Example:
        >>> ids = ElementIdAllocator()
        >>> ids.next_id(), ids.next_id()
        ('element_0', 'element_1')
    """

    def __init__(self) -> None:
        self._counter = count()

    def next_id(self) -> str:
        return f"element_{next(self._counter)}"

    def reset(self) -> None:
        """Restart numbering at zero."""
        self._counter = count()


def _flag(node: dict[str, Any], *keys: str, default: bool = False) -> bool:
    """Read a boolean attribute under any of its spellings."""
    for key in keys:
        if key in node:
            value = node[key]
            if isinstance(value, str):
                return value.strip().lower() in ("1", "true", "yes")
            return bool(value)
    return default


def _text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def is_interactable(element_type: str, enabled: bool, visible: bool, accessible: bool) -> bool:
    """Enabled and visible, and either an interactive type or accessible."""
    if not (enabled and visible):
        return False
    return accessible or any(marker in element_type for marker in INTERACTIVE_TYPE_MARKERS)


class ElementTreeService:
    """Fetches, flattens and categorizes the on-screen element hierarchy."""

    def __init__(
        self,
        probe: BackendProbe,
        screenshot: IScreenshotCapture | None = None,
        start_if_needed: bool = True,
        ids: ElementIdAllocator | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            probe: Backend probe used to find a discovery backend
            screenshot: Screenshot capability for analyses that want one
            start_if_needed: Default for starting WebDriverAgent lazily
            ids: Identifier allocator shared by every flatten call
        """
        self._probe = probe
        self._screenshot = screenshot
        self.start_if_needed = start_if_needed
        self._ids = ids or ElementIdAllocator()

    async def get_element_tree(
        self,
        start_if_needed: bool | None = None,
        context: BackendContext | None = None,
    ) -> dict[str, Any] | None:
        """Fetch the root node of the element hierarchy.

        Returns:
            Root node with recursive ``children``, or None when no discovery
            backend is usable or the fetch failed
        """
        start = self.start_if_needed if start_if_needed is None else start_if_needed
        if context is None:
            context = await self._probe.resolve_context()
        backend = await self._probe.discovery_backend(context, start_if_needed=start)
        if backend is None:
            logger.info("No discovery backend available")
            return None
        return await backend.get_source(context)

    def flatten(self, tree: dict[str, Any] | None) -> list[UIElement]:
        """Flatten a hierarchy in pre-order (parent before its children)."""
        result: list[UIElement] = []
        if not tree:
            return result

        stack = [tree]
        while stack:
            node = stack.pop()
            result.append(self._to_element(node))
            children = node.get("children") or []
            stack.extend(reversed(children))
        return result

    def _to_element(self, node: dict[str, Any]) -> UIElement:
        element_type = str(node.get("type") or "XCUIElementTypeOther")
        rect = ElementRect.from_dict(node.get("rect") or node.get("frame"))
        center_x, center_y = rect.center
        enabled = _flag(node, "isEnabled", "enabled")
        visible = _flag(node, "isVisible", "visible")
        accessible = _flag(node, "isAccessible", "accessible")
        return UIElement(
            id=self._ids.next_id(),
            type=element_type,
            label=_text(node.get("label")) or _text(node.get("name")),
            value=_text(node.get("value")),
            hint=_text(node.get("hint")),
            accessibility_id=_text(node.get("rawIdentifier")) or _text(node.get("identifier")),
            rect=rect,
            center_x=center_x,
            center_y=center_y,
            enabled=enabled,
            visible=visible,
            interactable=is_interactable(element_type, enabled, visible, accessible),
        )

    async def analyze_screen(
        self,
        include_screenshot: bool = True,
        start_if_needed: bool | None = None,
        context: BackendContext | None = None,
    ) -> ScreenAnalysis:
        """Capture and categorize the current screen.

        Without a discovery backend the analysis is a successful, empty
        ``fallback`` result.

        Args:
            include_screenshot: Capture a screenshot alongside the tree
            start_if_needed: Start WebDriverAgent if it is not running
            context: Dispatch context; resolved if None

        Returns:
            ScreenAnalysis with categorized elements
        """
        screenshot_path = None
        if include_screenshot and self._screenshot is not None:
            shot = await self._screenshot.capture()
            if shot.success:
                screenshot_path = shot.path
            else:
                logger.warning(f"Screenshot for analysis failed: {shot.error}")

        start = self.start_if_needed if start_if_needed is None else start_if_needed
        if context is None:
            context = await self._probe.resolve_context()
        backend = await self._probe.discovery_backend(context, start_if_needed=start)
        if backend is None:
            return ScreenAnalysis(success=True, method="fallback", screenshot_path=screenshot_path)

        tree = await backend.get_source(context)
        if tree is None:
            return ScreenAnalysis(
                success=False,
                method=backend.name,
                screenshot_path=screenshot_path,
                error="Failed to get element tree",
            )

        return ScreenAnalysis(
            success=True,
            method=backend.name,
            elements=self.flatten(tree),
            screenshot_path=screenshot_path,
        )
