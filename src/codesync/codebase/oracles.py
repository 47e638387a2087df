"""Diff and merge oracles for the codebase merger.

The merger never decides how two texts differ or how to combine them;
it asks an oracle and acts only on the yes/no answer.

- ``CommandOracle`` runs external tools through a ``ProcessExecutor``:
  ``diff -N a b`` (exit 0 identical, exit 1 different) and RCS-style
  ``merge <output> <orig> <mod>``, which rewrites ``output`` in place and
  exits non-zero when conflicts remain.
- ``Merge3Oracle`` answers in-process using the ``merge3`` library (the
  algorithm used by Bazaar/Breezy), for hosts without a ``merge`` binary.

Conflict markers written by ``Merge3Oracle`` follow Git convention with
custom labels: ``<<<<<<< DEST``, ``=======``, ``>>>>>>> MOD``, written
in the line ending of the destination file.
"""

from __future__ import annotations

import difflib
import logging
from pathlib import Path
from typing import AnyStr, Protocol

from merge3 import Merge3

from codesync.core.commands import (
    NOT_FOUND_STATUS,
    CommandError,
    ProcessExecutor,
)
from codesync.file_handler import read_file_with_encoding

logger = logging.getLogger(__name__)

# diff(1): 0 = no differences, 1 = differences, >1 = trouble.
DIFF_DIFFERENT_STATUS = 1


class MergeOracle(Protocol):
    """Protocol that all diff/merge oracles must satisfy."""

    def differs(self, a: Path, b: Path) -> bool:
        """Return ``True`` if files *a* and *b* have different content."""
        ...  # pragma: no cover

    def merge(self, output: Path, orig: Path, mod: Path, cwd: Path) -> bool:
        """Merge the change *orig* -> *mod* into *output* in place.

        Returns:
            ``True`` if the merge is clean, ``False`` if conflicts remain.
        """
        ...  # pragma: no cover


# ---------------------------------------------------------------------------
# External tools
# ---------------------------------------------------------------------------


class CommandOracle:
    """Oracle backed by external ``diff`` and ``merge`` commands.

    Args:
        executor: Runs the commands.
        diff_command: Binary invoked as ``<diff_command> -N a b``.
        merge_command: Binary invoked as ``<merge_command> out orig mod``.
    """

    def __init__(
        self,
        executor: ProcessExecutor,
        diff_command: str = "diff",
        merge_command: str = "merge",
    ) -> None:
        self.executor = executor
        self.diff_command = diff_command
        self.merge_command = merge_command

    def differs(self, a: Path, b: Path) -> bool:
        try:
            self.executor.run(
                self.diff_command, ["-N", str(a.absolute()), str(b.absolute())]
            )
        except CommandError as exc:
            if exc.return_status != DIFF_DIFFERENT_STATUS:
                raise
            logger.debug("%s and %s differ:\n%s", a, b, exc.stdout)
            return True
        return False

    def merge(self, output: Path, orig: Path, mod: Path, cwd: Path) -> bool:
        args = [str(output.absolute()), str(orig.absolute()), str(mod.absolute())]
        try:
            self.executor.run(self.merge_command, args, cwd=cwd.absolute())
        except CommandError as exc:
            if exc.return_status == NOT_FOUND_STATUS:
                raise
            logger.debug(
                "%s reported conflicts in %s: %s%s",
                self.merge_command,
                output,
                exc.stdout,
                exc.stderr,
            )
            return False
        return True


# ---------------------------------------------------------------------------
# In-process (merge3)
# ---------------------------------------------------------------------------


def attempt_merge(
    base_content: AnyStr,
    dest_content: AnyStr,
    mod_content: AnyStr,
) -> tuple[AnyStr, bool]:
    """Perform a three-way merge of destination and incoming changes.

    Accepts ``str`` or ``bytes``; all three arguments must be the same
    type, and the result has that type too.  Lines are split on their
    own terminators and joined back unchanged, so merging bytes never
    alters content that was not part of a conflict.

    Args:
        base_content: The common ancestor content.
        dest_content: The current destination content.
        mod_content: The incoming content.

    Returns:
        A tuple of ``(merged, has_conflicts)`` where *merged* is the
        result of the merge (possibly containing conflict markers).
    """
    empty = dest_content[:0]
    if not (base_content or dest_content or mod_content):
        return empty, False

    if isinstance(empty, bytes):
        labels = (b"DEST", b"MOD")
    else:
        labels = ("DEST", "MOD")
    m3 = Merge3(
        base_content.splitlines(True),
        dest_content.splitlines(True),
        mod_content.splitlines(True),
    )
    merged = empty.join(m3.merge_lines(name_a=labels[0], name_b=labels[1]))
    has_conflicts = any(
        region[0] == "conflict" for region in m3.merge_regions()
    )
    return merged, has_conflicts


def generate_diff(
    old_content: str,
    new_content: str,
    label_old: str = "old",
    label_new: str = "new",
) -> str:
    """Generate a unified diff between two strings.

    Returns:
        A unified diff string.  Empty string if the contents are identical.
    """
    diff_lines = difflib.unified_diff(
        old_content.splitlines(True),
        new_content.splitlines(True),
        fromfile=label_old,
        tofile=label_new,
    )
    return "".join(diff_lines)


class Merge3Oracle:
    """Oracle that diffs and merges in-process with ``merge3``.

    Files are compared and merged as raw bytes, so text in any encoding,
    or in a different encoding on each side, and binary content all come
    out byte for byte.  Decoding happens only for the debug-level diff.
    """

    def differs(self, a: Path, b: Path) -> bool:
        if a.read_bytes() == b.read_bytes():
            return False
        if logger.isEnabledFor(logging.DEBUG):
            old, _ = read_file_with_encoding(a)
            new, _ = read_file_with_encoding(b)
            logger.debug(
                "%s and %s differ:\n%s",
                a,
                b,
                generate_diff(old, new, str(a), str(b)),
            )
        return True

    def merge(self, output: Path, orig: Path, mod: Path, cwd: Path) -> bool:
        merged, has_conflicts = attempt_merge(
            orig.read_bytes(), output.read_bytes(), mod.read_bytes()
        )
        output.write_bytes(merged)
        if has_conflicts:
            logger.debug("merge3 left conflicts in %s", output)
        return not has_conflicts
