"""Element model for the on-screen hierarchy."""

from dataclasses import asdict, dataclass, field
from typing import Any

INTERACTIVE_TYPE_MARKERS = ("Button", "TextField", "Link", "Cell", "Switch", "Slider")

TEXT_FIELD_TYPES = frozenset(
    {"XCUIElementTypeTextField", "XCUIElementTypeSecureTextField", "XCUIElementTypeTextView"}
)
TEXT_INPUT_TYPES = TEXT_FIELD_TYPES | {"XCUIElementTypeSearchField"}
BUTTON_TYPES = frozenset({"XCUIElementTypeButton", "XCUIElementTypeLink"})
LABEL_TYPES = frozenset({"XCUIElementTypeStaticText"})


@dataclass(frozen=True)
class ElementRect:
    """Element rectangle in device pixels."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ElementRect":
        data = data or {}
        return cls(
            x=float(data.get("x") or 0),
            y=float(data.get("y") or 0),
            width=float(data.get("width") or 0),
            height=float(data.get("height") or 0),
        )


@dataclass(frozen=True)
class UIElement:
    """A discovered on-screen control.

    Attributes:
        id: Synthetic identifier (``element_<n>``), unique within the process
        type: Element type tag, e.g. ``XCUIElementTypeButton``
        label: Accessibility label
        value: Current value (text field contents, switch state)
        hint: Accessibility hint
        rect: Bounding rectangle in device pixels
        center_x: Derived center X
        center_y: Derived center Y
        enabled: Element accepts interaction
        visible: Element is on screen
        interactable: enabled and visible and of an interactive type or accessible
    """

    id: str
    type: str
    label: str | None
    value: str | None
    rect: ElementRect
    center_x: float
    center_y: float
    enabled: bool
    visible: bool
    interactable: bool
    hint: str | None = None
    accessibility_id: str | None = None

    def describe(self) -> str:
        """Short human-readable description."""
        name = self.label or self.accessibility_id or "unnamed"
        return f'{self.type.replace("XCUIElementType", "")}: "{name}" at ({self.center_x:g}, {self.center_y:g})'

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "label": self.label,
            "value": self.value,
            "hint": self.hint,
            "accessibilityId": self.accessibility_id,
            "rect": asdict(self.rect),
            "centerX": self.center_x,
            "centerY": self.center_y,
            "enabled": self.enabled,
            "visible": self.visible,
            "interactable": self.interactable,
        }


@dataclass(frozen=True)
class ElementQuery:
    """Conjunctive, case-insensitive element filter.

    Attributes:
        label: Substring of the element label
        type: Substring of the element type
        contains_text: Substring of the label or the value
        index: Which of the matches to select (0-based)
    """

    label: str | None = None
    type: str | None = None
    contains_text: str | None = None
    index: int = 0

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"Element index must be non-negative, got {self.index}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ElementQuery":
        """Build a query from tool-call style keys (camelCase accepted)."""
        return cls(
            label=data.get("label"),
            type=data.get("type"),
            contains_text=data.get("contains_text", data.get("containsText", data.get("placeholder"))),
            index=int(data.get("index") or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        """Non-empty fields, for error messages."""
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class ScreenAnalysis:
    """Result of analyzing the current screen."""

    success: bool
    method: str
    elements: list[UIElement] = field(default_factory=list)
    screenshot_path: str | None = None
    error: str | None = None

    @property
    def interactive_elements(self) -> list[UIElement]:
        return [e for e in self.elements if e.interactable]

    @property
    def text_fields(self) -> list[UIElement]:
        return [e for e in self.elements if e.type in TEXT_FIELD_TYPES]

    @property
    def text_inputs(self) -> list[UIElement]:
        """Elements that accept typed text, search fields included."""
        return [e for e in self.elements if e.type in TEXT_INPUT_TYPES]

    @property
    def buttons(self) -> list[UIElement]:
        return [e for e in self.elements if e.type in BUTTON_TYPES]

    @property
    def labels(self) -> list[UIElement]:
        return [e for e in self.elements if e.type in LABEL_TYPES]

    def summary(self) -> str:
        """Plain-text overview of buttons, text fields and other controls."""
        lines = [f"Found {len(self.elements)} elements ({len(self.interactive_elements)} interactive)"]
        for title, group in (("Buttons", self.buttons), ("Text fields", self.text_fields)):
            if group:
                lines.append(f"{title}:")
                lines.extend(f"  - {e.describe()}" for e in group)
        grouped = {e.id for e in self.buttons + self.text_fields}
        others = [e for e in self.interactive_elements if e.id not in grouped]
        if others:
            lines.append("Other interactive:")
            lines.extend(f"  - {e.describe()}" for e in others)
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "success": self.success,
            "method": self.method,
            "screenshotPath": self.screenshot_path,
            "elementCount": len(self.elements),
            "interactiveElements": [e.to_dict() for e in self.interactive_elements],
            "textFields": [e.to_dict() for e in self.text_fields],
            "buttons": [e.to_dict() for e in self.buttons],
            "labels": [e.to_dict() for e in self.labels],
            "summary": self.summary(),
        }
        if self.error:
            result["error"] = self.error
        return result
