"""Backend probe: which backends can serve a capability right now."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from ..device.broker import DeviceBroker
from ..utils.process import which
from .implementations.command_line import CommandLineBackend
from .implementations.wda_backend import WDABackend
from .interfaces.backend import BackendContext, Capability, IAutomationBackend, IDiscoveryBackend

logger = logging.getLogger(__name__)


@dataclass
class BackendStatus:
    """Installation and availability of one backend."""

    name: str
    installed: bool
    usable: bool
    capabilities: list[str] = field(default_factory=list)


@dataclass
class AutomationStatus:
    """Snapshot of every backend's availability.

    Attributes:
        backends: Per-backend status in priority order
        wda_installed: WebDriverAgent project could be located
        wda_running: WebDriverAgent server answered ``/status``
        wda_port: Port WebDriverAgent is expected on
        recommended_method: First usable tap backend, "wda (not running)" when
            WebDriverAgent is installed but down, or "none"
    """

    backends: list[BackendStatus]
    wda_installed: bool = False
    wda_running: bool = False
    wda_port: int | None = None
    recommended_method: str = "none"

    def is_usable(self, name: str) -> bool:
        return any(b.name == name and b.usable for b in self.backends)

    def to_dict(self) -> dict[str, Any]:
        return {
            "wda": {
                "installed": self.wda_installed,
                "running": self.wda_running,
                "port": self.wda_port,
            },
            "fallback": {
                "cliclick": self.is_usable("cliclick"),
                "applescript": self.is_usable("applescript"),
            },
            "backends": [
                {
                    "name": b.name,
                    "installed": b.installed,
                    "usable": b.usable,
                    "capabilities": b.capabilities,
                }
                for b in self.backends
            ],
            "recommendedMethod": self.recommended_method,
        }


class BackendProbe:
    """Answers which backends are usable for a capability, in priority order.

    Probing never raises: a backend whose check throws is logged and treated
    as unusable.
    """

    def __init__(self, backends: Sequence[IAutomationBackend], broker: DeviceBroker) -> None:
        """Initialize the probe.

        Args:
            backends: Backends in canonical priority order
            broker: Resolves the active simulator for backends that need one
        """
        self.backends = list(backends)
        self._broker = broker

    def get(self, name: str) -> IAutomationBackend | None:
        """Look up a backend by name."""
        for backend in self.backends:
            if backend.name == name:
                return backend
        return None

    async def resolve_context(self, bundle_id: str | None = None) -> BackendContext:
        """Build the dispatch context for the currently active simulator."""
        try:
            udid = await self._broker.get_active_udid()
        except Exception as e:
            logger.warning(f"Could not resolve active simulator: {e}")
            udid = None
        return BackendContext(udid=udid, bundle_id=bundle_id)

    async def is_usable(
        self, backend: IAutomationBackend, context: BackendContext, start_if_needed: bool = False
    ) -> bool:
        try:
            return await backend.probe(context, start_if_needed=start_if_needed)
        except Exception as e:
            logger.warning(f"Probe of {backend.name} failed: {e}")
            return False

    async def probe(
        self,
        capability: Capability,
        context: BackendContext | None = None,
        start_if_needed: bool = False,
    ) -> list[IAutomationBackend]:
        """List usable backends supporting a capability.

        Args:
            capability: Required capability
            context: Dispatch context; resolved from the broker if None
            start_if_needed: Allow backends to start their server

        Returns:
            Usable backends in canonical order (possibly empty)
        """
        if context is None:
            context = await self.resolve_context()

        usable = []
        for backend in self.backends:
            if not backend.supports(capability):
                continue
            if await self.is_usable(backend, context, start_if_needed):
                usable.append(backend)

        logger.debug(f"Usable backends for {capability.value}: {[b.name for b in usable]}")
        return usable

    async def discovery_backend(
        self, context: BackendContext | None = None, start_if_needed: bool = False
    ) -> IDiscoveryBackend | None:
        """First usable backend able to describe the element hierarchy."""
        for backend in await self.probe(Capability.DISCOVERY, context, start_if_needed):
            if isinstance(backend, IDiscoveryBackend):
                return backend
        return None

    async def status(self, context: BackendContext | None = None) -> AutomationStatus:
        """Report installation and availability of every backend."""
        if context is None:
            context = await self.resolve_context()

        statuses: list[BackendStatus] = []
        wda_installed = wda_running = False
        wda_port = None
        for backend in self.backends:
            usable = await self.is_usable(backend, context)
            if isinstance(backend, WDABackend):
                wda_running = usable
                wda_port = backend.port
                try:
                    wda_installed = usable or await backend.find_project() is not None
                except Exception as e:
                    logger.warning(f"WebDriverAgent lookup failed: {e}")
                installed = wda_installed
            elif isinstance(backend, CommandLineBackend):
                installed = which(backend.binary) is not None
            else:
                installed = usable
            statuses.append(
                BackendStatus(
                    name=backend.name,
                    installed=installed,
                    usable=usable,
                    capabilities=sorted(c.value for c in backend.capabilities),
                )
            )

        if wda_installed and not wda_running:
            recommended = "wda (not running)"
        else:
            recommended = next(
                (
                    s.name
                    for s, b in zip(statuses, self.backends)
                    if s.usable and b.supports(Capability.TAP)
                ),
                "none",
            )
        return AutomationStatus(
            backends=statuses,
            wda_installed=wda_installed,
            wda_running=wda_running,
            wda_port=wda_port,
            recommended_method=recommended,
        )
