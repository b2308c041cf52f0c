"""Configuration package for simpilot.

Settings are read from ``SIMPILOT_*`` environment variables and an optional
``.env`` file.

Usage:
    from simpilot.config import get_settings

    settings = get_settings()
    print(settings.wda_port)
"""

from .settings import SimpilotSettings, get_settings, reset_settings, set_settings

__all__ = [
    "SimpilotSettings",
    "get_settings",
    "set_settings",
    "reset_settings",
]
