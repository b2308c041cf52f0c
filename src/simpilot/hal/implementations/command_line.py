"""Shared plumbing for backends that shell out to a command line tool."""

import asyncio
import logging

from ...automation_exceptions import ActionTimeoutError, BackendActionError
from ...utils.process import ProcessResult, run_command
from ..interfaces.backend import BackendContext, IAutomationBackend, Point

logger = logging.getLogger(__name__)


class CommandLineBackend(IAutomationBackend):
    """Backend driven by a single executable found on PATH.

    Subclasses set ``binary`` and build argument lists; this class handles
    the availability check and turns failed or timed out runs into
    BackendError subclasses.
    """

    binary: str = ""
    requires_device: bool = False

    def __init__(
        self,
        probe_timeout: float = 2.0,
        tap_timeout: float = 5.0,
        type_timeout: float = 10.0,
        swipe_timeout: float = 10.0,
        key_timeout: float = 5.0,
        double_tap_interval: float = 0.1,
    ) -> None:
        self.probe_timeout = probe_timeout
        self.tap_timeout = tap_timeout
        self.type_timeout = type_timeout
        self.swipe_timeout = swipe_timeout
        self.key_timeout = key_timeout
        self.double_tap_interval = double_tap_interval

    async def probe(self, context: BackendContext, start_if_needed: bool = False) -> bool:
        if self.requires_device and not context.udid:
            logger.debug(f"{self.name} skipped: no target device")
            return False
        result = await run_command("which", [self.binary], timeout=self.probe_timeout)
        return result.ok

    async def _execute(self, operation: str, args: list[str], timeout: float) -> ProcessResult:
        """Run the backend binary and raise on failure.

        Raises:
            ActionTimeoutError: If the process exceeded its timeout
            BackendActionError: If the process exited non-zero
        """
        result = await run_command(self.binary, args, timeout=timeout)
        if result.timed_out:
            raise ActionTimeoutError(operation, timeout, backend=self.name)
        if not result.ok:
            raise BackendActionError(self.name, operation, result.error_message())
        return result

    async def _tap_twice(self, point: Point, context: BackendContext) -> None:
        """Double tap for tools without a native double tap."""
        await self.tap(point, context)
        await asyncio.sleep(self.double_tap_interval)
        await self.tap(point, context)

    def _long_press_timeout(self, duration_ms: int) -> float:
        return self.tap_timeout + duration_ms / 1000

    @staticmethod
    def _require_udid(context: BackendContext) -> str:
        if not context.udid:
            raise BackendActionError("device", "resolve", "No booted simulator found")
        return context.udid


def fmt(value: float) -> str:
    """Format a coordinate for a command line, dropping a trailing ``.0``."""
    return str(int(value)) if float(value).is_integer() else str(value)
