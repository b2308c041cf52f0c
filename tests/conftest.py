"""Pytest configuration and fixtures."""

import os
from typing import Any

import pytest

os.environ.setdefault("SIMPILOT_DISABLE_CONSOLE_LOGGING", "1")

from fakes import FakeScreenshot, FakeWindow, node  # noqa: E402

from simpilot.config import SimpilotSettings, reset_settings  # noqa: E402
from simpilot.context import AutomationContext, initialize_automation  # noqa: E402
from simpilot.coordinates import WindowBounds  # noqa: E402
from simpilot.device import IScreenshotCapture, StaticDeviceBroker  # noqa: E402
from simpilot.hal import IAutomationBackend  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_settings():
    """Keep the settings singleton from leaking between tests."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings() -> SimpilotSettings:
    """Settings without delays and with a fixed device."""
    return SimpilotSettings(
        _env_file=None,
        device_udid="TEST-UDID",
        focus_delay=0,
        type_focus_delay=0,
        double_tap_interval=0,
        scroll_key_delay=0,
    )


@pytest.fixture
def login_tree() -> dict[str, Any]:
    """A small login screen."""
    return node(
        "Application",
        "Demo",
        rect={"x": 0, "y": 0, "width": 390, "height": 844},
        children=[
            node(
                "NavigationBar",
                "Sign In",
                children=[node("Button", "Back", rect={"x": 0, "y": 44, "width": 60, "height": 44})],
            ),
            node("TextField", "Email", value="name@example.com",
                 rect={"x": 20, "y": 200, "width": 350, "height": 40}),
            node("SecureTextField", "Password", rect={"x": 20, "y": 260, "width": 350, "height": 40}),
            node("Button", "Login", rect={"x": 20, "y": 320, "width": 350, "height": 50}),
            node("StaticText", "Welcome back", rect={"x": 20, "y": 120, "width": 350, "height": 30}),
            node("Button", "Submit", enabled=False),
        ],
    )


@pytest.fixture
def make_context(settings):
    """Factory for contexts wired to fake collaborators."""

    def _make(
        backends: list[IAutomationBackend],
        bounds: WindowBounds | None = WindowBounds(100, 50, 400, 800),
        screenshot: IScreenshotCapture | None = None,
    ) -> AutomationContext:
        return initialize_automation(
            settings,
            backends=backends,
            broker=StaticDeviceBroker("TEST-UDID"),
            screenshot=screenshot or FakeScreenshot(),
            window=FakeWindow(bounds),
        )

    return _make
