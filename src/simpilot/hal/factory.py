"""Construction of the canonical backend list from settings."""

from ..config import SimpilotSettings
from .interfaces.backend import IAutomationBackend
from .implementations import (
    AppleScriptBackend,
    AxeBackend,
    CliclickBackend,
    IdbBackend,
    WDABackend,
)

BACKEND_ORDER = ("wda", "idb", "axe", "cliclick", "applescript")


def create_backends(settings: SimpilotSettings) -> list[IAutomationBackend]:
    """Create every backend in priority order.

    Args:
        settings: Timeouts, WDA location and window settings

    Returns:
        Backends ordered wda, idb, axe, cliclick, applescript
    """
    timeouts = {
        "probe_timeout": settings.probe_timeout,
        "tap_timeout": settings.tap_timeout,
        "type_timeout": settings.type_timeout,
        "swipe_timeout": settings.swipe_timeout,
        "key_timeout": settings.key_timeout,
        "double_tap_interval": settings.double_tap_interval,
    }
    return [
        WDABackend(
            host=settings.wda_host,
            port=settings.wda_port,
            project_paths=settings.resolved_wda_project_paths(),
            status_timeout=settings.wda_status_timeout,
            request_timeout=settings.wda_request_timeout,
            source_timeout=settings.wda_source_timeout,
            startup_attempts=settings.wda_startup_attempts,
            startup_interval=settings.wda_startup_interval,
        ),
        IdbBackend(**timeouts),
        AxeBackend(**timeouts),
        CliclickBackend(**timeouts),
        AppleScriptBackend(app_name=settings.simulator_app_name, **timeouts),
    ]
