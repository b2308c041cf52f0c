"""Backend implementations in canonical priority order."""

from .applescript_backend import AppleScriptBackend
from .axe_backend import AxeBackend
from .cliclick_backend import CliclickBackend
from .command_line import CommandLineBackend
from .idb_backend import IdbBackend
from .wda_backend import WDABackend, WDASessionHandle

__all__ = [
    "AppleScriptBackend",
    "AxeBackend",
    "CliclickBackend",
    "CommandLineBackend",
    "IdbBackend",
    "WDABackend",
    "WDASessionHandle",
]
