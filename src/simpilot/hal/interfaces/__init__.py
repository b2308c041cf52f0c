"""Backend interfaces."""

from .backend import BackendContext, Capability, IAutomationBackend, IDiscoveryBackend, Point
from .keys import Key, Modifier, describe_key, parse_key, parse_modifiers

__all__ = [
    "BackendContext",
    "Capability",
    "IAutomationBackend",
    "IDiscoveryBackend",
    "Key",
    "Modifier",
    "Point",
    "describe_key",
    "parse_key",
    "parse_modifiers",
]
