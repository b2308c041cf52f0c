"""Logging module for simpilot."""

from .logger import ActionLogger, get_logger, setup_logging

__all__ = [
    "setup_logging",
    "get_logger",
    "ActionLogger",
]
