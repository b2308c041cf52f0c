"""Recording sessions of dispatched actions."""

from .recorder import SessionRecorder
from .types import ActionKind, AutomationSession, ElementSummary, RecordedAction, SwipePath

__all__ = [
    "ActionKind",
    "AutomationSession",
    "ElementSummary",
    "RecordedAction",
    "SessionRecorder",
    "SwipePath",
]
