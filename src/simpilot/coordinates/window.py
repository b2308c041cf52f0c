"""Simulator host window queries via AppleScript."""

import logging

from ..utils.process import run_command
from .types import WindowBounds

logger = logging.getLogger(__name__)


class SimulatorWindowLocator:
    """Brings the Simulator window forward and reads its on-screen bounds."""

    def __init__(self, app_name: str = "Simulator", timeout: float = 5.0) -> None:
        """Initialize the locator.

        Args:
            app_name: Name of the host application process
            timeout: Timeout for each osascript call
        """
        self.app_name = app_name
        self.timeout = timeout

    def _activate_script(self) -> str:
        return f'tell application "{self.app_name}" to activate'

    def _bounds_script(self) -> str:
        return f"""
tell application "System Events"
  tell process "{self.app_name}"
    if (count of windows) > 0 then
      set frontWindow to window 1
      set winPos to position of frontWindow
      set winSize to size of frontWindow
      return ((item 1 of winPos) as string) & "," & ((item 2 of winPos) as string) & "," & ((item 1 of winSize) as string) & "," & ((item 2 of winSize) as string)
    end if
  end tell
end tell
"""

    async def focus(self) -> bool:
        """Bring the Simulator to the foreground.

        Returns:
            True if the activate call succeeded
        """
        result = await run_command("osascript", ["-e", self._activate_script()], timeout=self.timeout)
        if not result.ok:
            logger.debug(f"Could not activate {self.app_name}: {result.error_message()}")
        return result.ok

    async def get_bounds(self) -> WindowBounds | None:
        """Query the front Simulator window's position and size.

        Returns:
            WindowBounds, or None if no window exists or the output is invalid
        """
        result = await run_command("osascript", ["-e", self._bounds_script()], timeout=self.timeout)
        if not result.ok or not result.stdout:
            return None
        return WindowBounds.parse(result.stdout)
