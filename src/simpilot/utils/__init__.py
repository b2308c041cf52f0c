"""Utility helpers for simpilot."""

from .process import ProcessResult, run_command, spawn_background, which

__all__ = ["ProcessResult", "run_command", "spawn_background", "which"]
