"""Data types for recorded automation sessions."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ActionKind(str, Enum):
    """Kinds of actions the dispatcher performs and records."""

    TAP = "tap"
    TYPE = "type"
    SWIPE = "swipe"
    WAIT = "wait"
    SCREENSHOT = "screenshot"
    LONG_PRESS = "long_press"
    DOUBLE_TAP = "double_tap"
    KEY = "key"


@dataclass(frozen=True)
class ElementSummary:
    """The part of a UIElement worth keeping in a recording."""

    type: str
    label: str | None = None
    accessibility_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "label": self.label, "accessibilityId": self.accessibility_id}


@dataclass(frozen=True)
class SwipePath:
    """Start and end of a recorded swipe, in device coordinates."""

    from_x: float
    from_y: float
    to_x: float
    to_y: float

    def to_dict(self) -> dict[str, float]:
        return {"fromX": self.from_x, "fromY": self.from_y, "toX": self.to_x, "toY": self.to_y}


@dataclass(frozen=True)
class RecordedAction:
    """Immutable entry in a recording.

    Only the payload fields relevant to ``kind`` are set: element and/or
    coordinates for taps, text (and optionally element) for typing, swipe
    for swipes, duration_ms for waits and path for screenshots. Long
    presses carry coordinates and duration_ms, double taps coordinates,
    and key presses the key name plus any held modifiers.
    """

    kind: ActionKind
    timestamp: float = field(default_factory=time.time)
    element: ElementSummary | None = None
    coordinates: tuple[float, float] | None = None
    text: str | None = None
    swipe: SwipePath | None = None
    duration_ms: int | None = None
    path: str | None = None
    key: str | None = None
    modifiers: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.kind.value, "timestamp": self.timestamp}
        if self.element is not None:
            result["element"] = self.element.to_dict()
        if self.coordinates is not None:
            result["coordinates"] = {"x": self.coordinates[0], "y": self.coordinates[1]}
        if self.text is not None:
            result["text"] = self.text
        if self.swipe is not None:
            result["swipe"] = self.swipe.to_dict()
        if self.duration_ms is not None:
            result["duration"] = self.duration_ms
        if self.path is not None:
            result["path"] = self.path
        if self.key is not None:
            result["key"] = self.key
        if self.modifiers:
            result["modifiers"] = list(self.modifiers)
        return result


@dataclass
class AutomationSession:
    """An in-memory recording of successfully dispatched actions.

    Attributes:
        start_time: Epoch seconds when recording started
        bundle_id: App under test, used when generating test code
        recorded_actions: Actions in dispatch-completion order
        screenshots: Paths of screenshots taken while recording
        end_time: Epoch seconds when recording stopped
    """

    start_time: float = field(default_factory=time.time)
    bundle_id: str | None = None
    recorded_actions: list[RecordedAction] = field(default_factory=list)
    screenshots: list[str] = field(default_factory=list)
    end_time: float | None = None

    @property
    def duration(self) -> float:
        """Seconds between start and stop (or now, while recording)."""
        return (self.end_time or time.time()) - self.start_time

    def to_dict(self) -> dict[str, Any]:
        return {
            "startTime": self.start_time,
            "endTime": self.end_time,
            "durationSeconds": self.duration,
            "bundleId": self.bundle_id,
            "actionCount": len(self.recorded_actions),
            "actions": [a.to_dict() for a in self.recorded_actions],
            "screenshots": list(self.screenshots),
        }
