"""Action dispatch with backend fallback."""

from .dispatcher import ActionDispatcher, summarize
from .types import AttemptRecord, DispatchResult, LogicalAction

__all__ = [
    "ActionDispatcher",
    "AttemptRecord",
    "DispatchResult",
    "LogicalAction",
    "summarize",
]
