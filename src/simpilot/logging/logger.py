"""Structured logging configuration for simpilot using structlog.

Logs go to stderr so stdout stays free for JSON results printed by the CLI.
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, cast

import structlog

from ..config import get_settings


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    structured: bool = True,
    console: bool = True,
    add_timestamp: bool = True,
    colorize: bool = True,
) -> None:
    """Configure structured logging for simpilot.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
        structured: Use JSON structured output
        console: Enable console output (overridden by SIMPILOT_DISABLE_CONSOLE_LOGGING)
        add_timestamp: Add timestamps to logs
        colorize: Colorize console output (only for non-structured)
    """
    if os.getenv("SIMPILOT_DISABLE_CONSOLE_LOGGING") == "1":
        console = False

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
    ]

    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    processors.extend(
        [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
        ]
    )

    if structured:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=colorize and console))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = []

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        handlers.append(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        handlers.append(file_handler)

    if not handlers:
        handlers.append(logging.NullHandler())
        level = "CRITICAL"

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        handlers=handlers,
        force=True,
    )


# Global state for lazy initialization
_logging_initialized = False


def _ensure_logging_initialized() -> None:
    """Ensure logging is initialized (called lazily, not at import time)."""
    global _logging_initialized

    if _logging_initialized:
        return

    try:
        settings = get_settings()
        log_file = None
        if settings.log_path is not None:
            log_file = settings.log_path / f"simpilot_{datetime.now().strftime('%Y%m%d')}.log"
        setup_logging(
            level="DEBUG" if settings.debug_mode else settings.log_level,
            log_file=log_file,
            structured=settings.structured_logs,
            colorize=settings.debug_mode,
        )
    except (AttributeError, OSError, ValueError):
        # Invalid settings or log path: fall back to basic console logging
        setup_logging(level="INFO", structured=False)

    _logging_initialized = True


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structured logger instance
    """
    _ensure_logging_initialized()
    return cast(structlog.BoundLogger, structlog.get_logger(name))


class ActionLogger:
    """Specialized logger for dispatched actions and their backend attempts."""

    def __init__(self, base_logger: structlog.BoundLogger | None = None) -> None:
        """Initialize action logger.

        Args:
            base_logger: Base logger to use
        """
        self.logger = base_logger or get_logger(__name__)

    def log_action_start(self, action_type: str, target: Any, **kwargs) -> dict[str, Any]:
        """Log action start.

        Args:
            action_type: Type of action
            target: Action target
            **kwargs: Additional context

        Returns:
            Action context dict
        """
        context = {
            "action_type": action_type,
            "target": str(target),
            "start_time": datetime.now().isoformat(),
            **kwargs,
        }

        self.logger.info("action_started", **context)

        return context

    def log_attempt_failed(self, context: dict[str, Any], backend: str, error: Exception) -> None:
        """Log a failed backend attempt that advances the fallback chain.

        Args:
            context: Action context from log_action_start
            backend: Name of the backend that failed
            error: The attempt's error
        """
        self.logger.warning(
            "backend_attempt_failed",
            action_type=context["action_type"],
            backend=backend,
            error=str(error),
            error_type=type(error).__name__,
        )

    def log_action_end(
        self,
        context: dict[str, Any],
        success: bool,
        result: Any = None,
        error: Exception | str | None = None,
    ) -> None:
        """Log action end.

        Args:
            context: Action context from log_action_start
            success: Whether action succeeded
            result: Action result
            error: Optional error
        """
        end_time = datetime.now()
        start_time = datetime.fromisoformat(context["start_time"])
        duration = (end_time - start_time).total_seconds()

        log_data = {
            **context,
            "end_time": end_time.isoformat(),
            "duration": duration,
            "success": success,
        }

        if result is not None:
            log_data["result"] = str(result)

        if error:
            log_data["error"] = str(error)
            log_data["error_type"] = type(error).__name__

        if success:
            self.logger.info("action_completed", **log_data)
        else:
            self.logger.error("action_failed", **log_data)
