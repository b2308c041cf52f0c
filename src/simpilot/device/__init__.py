"""Simulator device collaborators.

The automation core never manages device lifecycle. It only asks the
broker which simulator is active and delegates screenshots to simctl.
"""

from .broker import DeviceBroker, DeviceInfo, SimctlDeviceBroker, StaticDeviceBroker
from .screenshot import IScreenshotCapture, ScreenshotResult, SimctlScreenshotCapture

__all__ = [
    "DeviceBroker",
    "DeviceInfo",
    "SimctlDeviceBroker",
    "StaticDeviceBroker",
    "IScreenshotCapture",
    "ScreenshotResult",
    "SimctlScreenshotCapture",
]
