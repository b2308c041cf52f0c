"""Screenshot capability for the active simulator."""

import secrets
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from ..utils.process import run_command
from .broker import DeviceBroker


@dataclass(frozen=True)
class ScreenshotResult:
    """Outcome of a screenshot capture."""

    success: bool
    path: str | None = None
    error: str | None = None


class IScreenshotCapture(ABC):
    """Interface for capturing the simulated screen."""

    @abstractmethod
    async def capture(self, output_path: str | None = None) -> ScreenshotResult:
        """Capture the screen.

        Args:
            output_path: Destination file; a temporary path is generated if None

        Returns:
            ScreenshotResult with the written path or an error
        """
        ...


class SimctlScreenshotCapture(IScreenshotCapture):
    """Captures screenshots with ``xcrun simctl io <udid> screenshot``."""

    def __init__(
        self,
        broker: DeviceBroker,
        screenshot_dir: Path | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._broker = broker
        self._screenshot_dir = screenshot_dir
        self._timeout = timeout

    def _default_path(self) -> Path:
        directory = self._screenshot_dir or Path(tempfile.gettempdir())
        return directory / f"ios-screenshot-{secrets.token_hex(4)}.png"

    async def capture(self, output_path: str | None = None) -> ScreenshotResult:
        udid = await self._broker.get_active_udid()
        if not udid:
            return ScreenshotResult(success=False, error="No booted simulator found")

        path = Path(output_path) if output_path else self._default_path()
        path.parent.mkdir(parents=True, exist_ok=True)

        result = await run_command(
            "xcrun", ["simctl", "io", udid, "screenshot", str(path)], timeout=self._timeout
        )
        if not result.ok:
            return ScreenshotResult(
                success=False, error=result.error_message("Failed to take screenshot")
            )

        return ScreenshotResult(success=True, path=str(path))
