"""Core utilities for codesync (process execution, fatal errors)."""

from .commands import CommandError, ProcessExecutor, SubprocessRunner
from .errors import SyncProblem

__all__ = [
    "CommandError",
    "ProcessExecutor",
    "SubprocessRunner",
    "SyncProblem",
]
