"""Async process execution utilities for running external commands.

Every external tool (idb, axe, cliclick, osascript, xcrun) is invoked
through run_command so each call carries a fixed timeout and never raises
on a non-zero exit.
"""

import asyncio
import logging
import os
import shutil
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of an external command.

    Attributes:
        stdout: Captured standard output (stripped)
        stderr: Captured standard error (stripped)
        exit_code: Process exit code (1 when the process could not start)
        timed_out: True if the process was killed after its timeout
    """

    stdout: str
    stderr: str
    exit_code: int
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        """True when the command exited with status 0 in time."""
        return self.exit_code == 0 and not self.timed_out

    def error_message(self, default: str = "command failed") -> str:
        """Best human-readable description of a failure."""
        if self.timed_out:
            return "command timed out"
        return self.stderr or self.stdout or f"{default} (exit code {self.exit_code})"


async def run_command(
    command: str,
    args: list[str],
    *,
    timeout: float = 30.0,
    cwd: str | None = None,
    env: dict[str, str] | None = None,
) -> ProcessResult:
    """Execute a command and return its result.

    Args:
        command: Executable name or path
        args: Arguments passed to the executable (no shell)
        timeout: Timeout in seconds; the process is killed when it expires
        cwd: Working directory
        env: Extra environment variables merged over os.environ

    Returns:
        ProcessResult, also for missing executables and timeouts
    """
    full_env = {**os.environ, **(env or {})}
    try:
        proc = await asyncio.create_subprocess_exec(
            command,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
            env=full_env,
        )
    except OSError as e:
        logger.debug(f"Could not start {command}: {e}")
        return ProcessResult(stdout="", stderr=str(e), exit_code=1)

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        logger.debug(f"{command} killed after {timeout}s")
        return ProcessResult(stdout="", stderr="", exit_code=-9, timed_out=True)
    except asyncio.CancelledError:
        proc.kill()
        raise

    return ProcessResult(
        stdout=stdout.decode(errors="replace").strip(),
        stderr=stderr.decode(errors="replace").strip(),
        exit_code=proc.returncode if proc.returncode is not None else 1,
    )


async def spawn_background(
    command: str,
    args: list[str],
    *,
    log_file: str | None = None,
) -> asyncio.subprocess.Process | None:
    """Start a long-running command without waiting for it.

    Args:
        command: Executable name or path
        args: Arguments passed to the executable
        log_file: Optional file receiving stdout and stderr

    Returns:
        The started process, or None if it could not be started
    """
    try:
        if log_file:
            with open(log_file, "ab") as out:
                return await asyncio.create_subprocess_exec(
                    command, *args, stdout=out, stderr=asyncio.subprocess.STDOUT
                )
        return await asyncio.create_subprocess_exec(
            command,
            *args,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError as e:
        logger.error(f"Could not start {command}: {e}")
        return None


def which(binary: str) -> str | None:
    """Locate an executable on PATH.

    Args:
        binary: Executable name

    Returns:
        Absolute path, or None if the executable is not installed
    """
    return shutil.which(binary)
