"""Device session broker backed by ``xcrun simctl``."""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from ..utils.process import run_command

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceInfo:
    """A simulated device known to simctl."""

    udid: str
    name: str
    state: str
    runtime: str = ""
    is_available: bool = True

    @property
    def is_booted(self) -> bool:
        """True if the device is booted."""
        return self.state == "Booted"


class DeviceBroker(ABC):
    """Answers which simulator is currently active."""

    @abstractmethod
    async def get_active_device(self) -> DeviceInfo | None:
        """Get the active (booted) device.

        Returns:
            The active device, or None if no device is booted
        """
        ...

    async def get_active_udid(self) -> str | None:
        """Get the identifier of the active device, if any."""
        device = await self.get_active_device()
        return device.udid if device else None


class StaticDeviceBroker(DeviceBroker):
    """Broker for a fixed, caller-supplied device."""

    def __init__(self, udid: str, name: str = "configured") -> None:
        self._device = DeviceInfo(udid=udid, name=name, state="Booted")

    async def get_active_device(self) -> DeviceInfo | None:
        return self._device


class SimctlDeviceBroker(DeviceBroker):
    """Resolves the booted simulator via ``xcrun simctl list devices --json``."""

    def __init__(self, timeout: float = 30.0) -> None:
        self._timeout = timeout

    async def list_devices(self) -> list[DeviceInfo]:
        """List all simulators.

        Returns:
            Devices across all runtimes (empty if simctl is unavailable)
        """
        result = await run_command(
            "xcrun", ["simctl", "list", "devices", "--json"], timeout=self._timeout
        )
        if not result.ok:
            logger.warning(f"simctl list failed: {result.error_message()}")
            return []

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            logger.warning(f"Invalid simctl output: {e}")
            return []

        return parse_simctl_devices(data)

    async def get_active_device(self) -> DeviceInfo | None:
        for device in await self.list_devices():
            if device.is_booted:
                return device
        return None


def parse_simctl_devices(data: dict[str, Any]) -> list[DeviceInfo]:
    """Convert ``simctl list --json`` output into DeviceInfo records.

    Args:
        data: Parsed JSON with a ``devices`` mapping of runtime -> device list

    Returns:
        Devices in runtime order
    """
    devices: list[DeviceInfo] = []
    for runtime, entries in data.get("devices", {}).items():
        for entry in entries:
            devices.append(
                DeviceInfo(
                    udid=entry["udid"],
                    name=entry.get("name", ""),
                    state=entry.get("state", "Shutdown"),
                    runtime=runtime,
                    is_available=entry.get("isAvailable", True),
                )
            )
    return devices
