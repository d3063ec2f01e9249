"""Adapter modules for the external diagnostic tools."""

from .cciss import CcissVolStatusLister
from .smartctl import CommandResult, SmartctlError, SmartctlReader, run_command

__all__ = [
    "CcissVolStatusLister",
    "CommandResult",
    "SmartctlError",
    "SmartctlReader",
    "run_command",
]
