"""Backend abstraction layer.

Provides the uniform backend interface, the five concrete backends in
priority order and the probe that decides which of them are usable.

Example:
    >>> from simpilot.hal import BackendProbe, Capability, create_backends
    >>> probe = BackendProbe(create_backends(settings), broker)
    >>> backends = await probe.probe(Capability.TAP)
"""

from .factory import BACKEND_ORDER, create_backends
from .implementations import (
    AppleScriptBackend,
    AxeBackend,
    CliclickBackend,
    IdbBackend,
    WDABackend,
    WDASessionHandle,
)
from .interfaces import (
    BackendContext,
    Capability,
    IAutomationBackend,
    IDiscoveryBackend,
    Key,
    Modifier,
    Point,
    describe_key,
    parse_key,
    parse_modifiers,
)
from .probe import AutomationStatus, BackendProbe, BackendStatus

__all__ = [
    "BACKEND_ORDER",
    "AppleScriptBackend",
    "AutomationStatus",
    "AxeBackend",
    "BackendContext",
    "BackendProbe",
    "BackendStatus",
    "Capability",
    "CliclickBackend",
    "IAutomationBackend",
    "IDiscoveryBackend",
    "IdbBackend",
    "Key",
    "Modifier",
    "Point",
    "WDABackend",
    "WDASessionHandle",
    "create_backends",
    "describe_key",
    "parse_key",
    "parse_modifiers",
]
