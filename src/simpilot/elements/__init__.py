"""On-screen element discovery and matching."""

from .matcher import ElementMatcher
from .tree_service import ElementIdAllocator, ElementTreeService, is_interactable
from .types import ElementQuery, ElementRect, ScreenAnalysis, UIElement

__all__ = [
    "ElementIdAllocator",
    "ElementMatcher",
    "ElementQuery",
    "ElementRect",
    "ElementTreeService",
    "ScreenAnalysis",
    "UIElement",
    "is_interactable",
]
