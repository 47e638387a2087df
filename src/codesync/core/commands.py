"""External process execution.

Everything codesync learns from a version-control system or a diff/merge
tool goes through a ``ProcessExecutor``: run a command with arguments in
a working directory, get its standard output back, or get a
``CommandError`` carrying everything needed to diagnose the failure
without rerunning it.

``SubprocessRunner`` is the real implementation.  Tests substitute a
recording fake that satisfies the same protocol.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol, Sequence

logger = logging.getLogger(__name__)

# Shell convention for "command not found".
NOT_FOUND_STATUS = 127


class CommandError(RuntimeError):
    """A command exited non-zero, or could not be launched at all.

    Attributes:
        cmd: The binary that was invoked.
        args: Arguments passed to it.
        stdout: Captured standard output.
        stderr: Captured standard error.
        return_status: Exit status (127 when the binary was not found).
    """

    def __init__(
        self,
        cmd: str,
        args: Sequence[str],
        stdout: str,
        stderr: str,
        return_status: int,
    ) -> None:
        self.message = (
            f"Running {cmd} with args {list(args)} returned {return_status} "
            f"with stdout {stdout!r} and stderr {stderr!r}"
        )
        super().__init__(self.message)
        self.cmd = cmd
        # Shadows BaseException.args; __str__ below keeps the message.
        self.args = tuple(args)
        self.stdout = stdout
        self.stderr = stderr
        self.return_status = return_status

    def __str__(self) -> str:
        return self.message


class ProcessExecutor(Protocol):
    """Protocol for anything that can run an external command."""

    def run(
        self,
        cmd: str,
        args: Sequence[str],
        cwd: str | Path | None = None,
    ) -> str:
        """Run *cmd* with *args* in *cwd* and return its stdout.

        Raises:
            CommandError: If the command exits non-zero or cannot start.
        """
        ...  # pragma: no cover


class SubprocessRunner:
    """``ProcessExecutor`` backed by ``subprocess.run``.

    No timeout is applied; cancellation belongs to the enclosing process.
    """

    def run(
        self,
        cmd: str,
        args: Sequence[str],
        cwd: str | Path | None = None,
    ) -> str:
        argv = [cmd, *args]
        logger.debug("Running %s (cwd=%s)", " ".join(argv), cwd or ".")
        try:
            result = subprocess.run(
                argv,
                cwd=str(cwd) if cwd else None,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as exc:
            raise CommandError(
                cmd, args, "", str(exc), NOT_FOUND_STATUS
            ) from exc

        if result.returncode != 0:
            raise CommandError(
                cmd,
                args,
                result.stdout,
                result.stderr,
                result.returncode,
            )
        return result.stdout
