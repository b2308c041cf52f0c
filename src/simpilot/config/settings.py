"""Configuration management for simpilot using pydantic-settings.

Supports environment variables, .env files, and type validation.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_WDA_PROJECT_PATHS = [
    "/usr/local/lib/node_modules/appium/node_modules/appium-webdriveragent/WebDriverAgent.xcodeproj",
    "~/.appium/node_modules/appium-xcuitest-driver/node_modules/appium-webdriveragent/WebDriverAgent.xcodeproj",
]


class SimpilotSettings(BaseSettings):
    """Main configuration settings for simpilot.

    Configure via environment variables with SIMPILOT_ prefix.

    Examples:
        SIMPILOT_WDA_PORT=8101
        SIMPILOT_DEVICE_UDID=5A1B...
        SIMPILOT_DEBUG_MODE=true
    """

    model_config = SettingsConfigDict(
        env_prefix="SIMPILOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # WebDriverAgent settings
    wda_host: str = Field("localhost", description="Host of the WebDriverAgent HTTP server")
    wda_port: int = Field(8100, ge=1, le=65535, description="Port of the WebDriverAgent server")
    wda_project_paths: list[str] = Field(
        default_factory=lambda: list(DEFAULT_WDA_PROJECT_PATHS),
        description="Candidate locations of WebDriverAgent.xcodeproj",
    )
    wda_status_timeout: float = Field(2.0, gt=0, description="Timeout for WDA status checks")
    wda_request_timeout: float = Field(10.0, gt=0, description="Timeout for WDA action requests")
    wda_source_timeout: float = Field(30.0, gt=0, description="Timeout for WDA source requests")
    wda_startup_attempts: int = Field(30, ge=1, description="Status polls after starting WDA")
    wda_startup_interval: float = Field(1.0, ge=0, description="Delay between startup polls")

    # Probe and action timeouts (seconds)
    probe_timeout: float = Field(2.0, gt=0, description="Timeout for backend existence checks")
    tap_timeout: float = Field(5.0, gt=0, description="Timeout for a single tap attempt")
    type_timeout: float = Field(10.0, gt=0, description="Timeout for a single type attempt")
    swipe_timeout: float = Field(10.0, gt=0, description="Timeout for a single swipe attempt")
    key_timeout: float = Field(5.0, gt=0, description="Timeout for a single key press attempt")
    window_timeout: float = Field(5.0, gt=0, description="Timeout for window focus/bounds queries")
    screenshot_timeout: float = Field(10.0, gt=0, description="Timeout for screenshot capture")
    device_list_timeout: float = Field(30.0, gt=0, description="Timeout for listing simulators")

    # Window-relative interaction
    simulator_app_name: str = Field("Simulator", description="Host application name")
    title_bar_offset: int = Field(28, description="Height of the Simulator window title bar")
    focus_delay: float = Field(0.2, ge=0, description="Delay after bringing Simulator forward")
    type_focus_delay: float = Field(0.3, ge=0, description="Delay between focus tap and typing")

    # Gestures
    default_swipe_duration_ms: int = Field(300, ge=0, description="Default swipe duration")
    default_swipe_distance: float = Field(200.0, gt=0, description="Default directional swipe")
    swipe_center_x: float = Field(200.0, description="Center X for directional swipes")
    swipe_center_y: float = Field(400.0, description="Center Y for directional swipes")
    default_long_press_ms: int = Field(1000, ge=0, description="Default long press duration")
    double_tap_interval: float = Field(0.1, ge=0, description="Gap between double tap taps")
    scroll_step: float = Field(50.0, gt=0, description="Pixels scrolled per arrow key press")
    scroll_key_delay: float = Field(0.05, ge=0, description="Delay between scroll key presses")
    default_scroll_amount: float = Field(100.0, gt=0, description="Default scroll distance")
    default_wait_ms: int = Field(1000, ge=0, description="Default wait duration in flows")

    # Device
    device_udid: str | None = Field(None, description="Fixed simulator UDID (skips lookup)")
    start_wda_if_needed: bool = Field(True, description="Start WDA lazily before discovery")

    # Storage settings
    screenshot_dir: Path | None = Field(None, description="Directory for screenshots")
    log_path: Path | None = Field(None, description="Directory for log files")

    # Logging
    debug_mode: bool = Field(False, description="Enable debug logging")
    log_level: str = Field("INFO", description="Log level when not in debug mode")
    structured_logs: bool = Field(False, description="Render logs as JSON")

    def resolved_wda_project_paths(self) -> list[Path]:
        """Expand user directories in the configured WDA project paths."""
        return [Path(p).expanduser() for p in self.wda_project_paths]


# Singleton instance
_settings: SimpilotSettings | None = None


def get_settings() -> SimpilotSettings:
    """Get the singleton settings instance.

    Returns:
        SimpilotSettings instance
    """
    global _settings
    if _settings is None:
        _settings = SimpilotSettings()
    return _settings


def set_settings(settings: SimpilotSettings) -> None:
    """Replace the singleton settings instance.

    Args:
        settings: New settings
    """
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset the settings singleton (mainly for testing)."""
    global _settings
    _settings = None
