"""High-level automation service and flows."""

from .service import AutomationService, FlowResult, FlowStep, directional_swipe

__all__ = [
    "AutomationService",
    "FlowResult",
    "FlowStep",
    "directional_swipe",
]
