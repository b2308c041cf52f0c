"""Automation context for dependency injection.

The AutomationContext holds every collaborator the dispatcher needs: the
probe over the ordered backend list, the coordinate translator, the element
tree service, the recording session and the device collaborators. It is
created once by the caller and passed explicitly, so nothing lives in
module-level state.
"""

from dataclasses import dataclass, field

from .config import SimpilotSettings, get_settings
from .coordinates import CoordinateTranslator, SimulatorWindowLocator
from .device import (
    DeviceBroker,
    IScreenshotCapture,
    SimctlDeviceBroker,
    SimctlScreenshotCapture,
    StaticDeviceBroker,
)
from .elements import ElementMatcher, ElementTreeService
from .hal import BackendProbe, IAutomationBackend, WDABackend, create_backends
from .logging import ActionLogger
from .recording import SessionRecorder


@dataclass
class AutomationContext:
    """Container for all automation collaborators.

    Attributes:
        settings: Settings the collaborators were created from
        probe: Backend probe over the ordered backend list
        translator: Device to host coordinate translator
        tree_service: Element tree retrieval and flattening
        matcher: Element query matcher
        recorder: Recording session holder
        broker: Active simulator lookup
        screenshot: Screenshot capability
        action_logger: Structured action logger

    Example:
        >>> context = initialize_automation()
        >>> dispatcher = ActionDispatcher(context)
        >>> result = await dispatcher.tap_at(100, 200)
    """

    settings: SimpilotSettings
    probe: BackendProbe
    translator: CoordinateTranslator
    tree_service: ElementTreeService
    recorder: SessionRecorder
    broker: DeviceBroker
    screenshot: IScreenshotCapture
    matcher: ElementMatcher = field(default_factory=ElementMatcher)
    action_logger: ActionLogger = field(default_factory=ActionLogger)

    @property
    def backends(self) -> list[IAutomationBackend]:
        return self.probe.backends

    @property
    def wda(self) -> WDABackend | None:
        backend = self.probe.get("wda")
        return backend if isinstance(backend, WDABackend) else None

    async def shutdown(self) -> None:
        """Stop a WebDriverAgent server this context started."""
        if self.wda is not None:
            await self.wda.stop()


def initialize_automation(
    settings: SimpilotSettings | None = None,
    backends: list[IAutomationBackend] | None = None,
    broker: DeviceBroker | None = None,
    screenshot: IScreenshotCapture | None = None,
    window: SimulatorWindowLocator | None = None,
) -> AutomationContext:
    """Create an AutomationContext from settings.

    Any collaborator may be supplied explicitly; the rest are built from
    settings.

    Args:
        settings: Settings to use (defaults to get_settings())
        backends: Backends in priority order (defaults to all five)
        broker: Device broker (fixed udid from settings, else simctl)
        screenshot: Screenshot capability (defaults to simctl)
        window: Simulator window locator

    Returns:
        Fully wired AutomationContext
    """
    settings = settings or get_settings()

    if broker is None:
        if settings.device_udid:
            broker = StaticDeviceBroker(settings.device_udid)
        else:
            broker = SimctlDeviceBroker(timeout=settings.device_list_timeout)

    if screenshot is None:
        screenshot = SimctlScreenshotCapture(
            broker, screenshot_dir=settings.screenshot_dir, timeout=settings.screenshot_timeout
        )

    window = window or SimulatorWindowLocator(
        app_name=settings.simulator_app_name, timeout=settings.window_timeout
    )
    probe = BackendProbe(backends if backends is not None else create_backends(settings), broker)

    return AutomationContext(
        settings=settings,
        probe=probe,
        translator=CoordinateTranslator(
            window, title_bar_offset=settings.title_bar_offset, focus_delay=settings.focus_delay
        ),
        tree_service=ElementTreeService(
            probe, screenshot=screenshot, start_if_needed=settings.start_wda_if_needed
        ),
        recorder=SessionRecorder(),
        broker=broker,
        screenshot=screenshot,
    )
