"""Three-way codebase merger.

Given three snapshots:

- ``orig``: the common ancestor content,
- ``mod``:  the incoming content,
- ``dest``: the destination's current content, possibly edited locally,

``CodebaseMerger`` builds a new directory approximating "dest with mod's
changes applied" and classifies each file as cleanly merged or
conflicted.

Every filename in ``dest`` or ``mod`` is visited.  Files present only in
``orig`` were deleted on both sides and need no action.  Per file:

* **add** -- only in ``mod``: copied across, merged, no oracle.
* **mod delete** -- in ``orig`` and ``dest``, not ``mod``: if ``dest``
  still equals ``orig`` the deletion is clean and the file is simply
  left out; otherwise ``dest`` is copied as a placeholder and merged
  against an empty ``mod`` so the user sees the conflict.
* **dest delete** -- in ``orig`` and ``mod``, not ``dest``: clean when
  ``mod`` equals ``orig``; otherwise merged into an empty placeholder.
* **three-way** -- everything else: ``dest`` (or an empty placeholder)
  is copied to the output and the oracle merges ``orig`` -> ``mod``
  into it in place.

A difference in executable bits counts as a difference in content.

Oracle conflicts are data, not errors: they land in
``failed_to_merge_files`` and the conflicted output is kept for manual
resolution.  Anything else the oracle raises aborts the merge.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel

from codesync.codebase.codebase import Codebase
from codesync.codebase.oracles import MergeOracle
from codesync.file_handler import (
    Lifetime,
    TempDirectories,
    copy_file,
    devnull,
    is_executable,
    set_executable,
    write_file,
)

logger = logging.getLogger(__name__)

MERGED_CODEBASE_PREFIX = "merged_codebase_"


class MergeResult(BaseModel):
    """Outcome of one codebase merge.

    Attributes:
        merged_codebase: Root of the merge output.
        merged_files: Absolute output paths merged cleanly.
        failed_to_merge_files: Absolute output paths with conflicts.
    """

    merged_codebase: Path
    merged_files: frozenset[str] = frozenset()
    failed_to_merge_files: frozenset[str] = frozenset()

    model_config = {"frozen": True}

    @property
    def has_conflicts(self) -> bool:
        return bool(self.failed_to_merge_files)

    def summary(self) -> str:
        """Format the counts and the conflicted paths for manual resolution."""
        lines = [
            f"Merged codebase generated at: {self.merged_codebase}",
            f"{len(self.merged_files)} files merged successfully",
            f"{len(self.failed_to_merge_files)} files have merge conflicts. "
            "Edit the following files to resolve conflicts:",
        ]
        lines.extend(f"  {path}" for path in sorted(self.failed_to_merge_files))
        return "\n".join(lines)


class CodebaseMerger:
    """Merge *mod*'s changes relative to *orig* into *dest*.

    Args:
        orig: Common ancestor snapshot.
        mod: Incoming snapshot.
        dest: Destination snapshot.
        oracle: Decides whether files differ and performs file merges.
        output_dir: Where to write the merged codebase.  A new task-scoped
            directory from *temp_dirs* when omitted.
        temp_dirs: Owner of the temporary output directory; whoever
            passes it is responsible for ``cleanup(Lifetime.TASK)``.
            Required when *output_dir* is omitted.

    Raises:
        ValueError: If neither *output_dir* nor *temp_dirs* is given.
    """

    def __init__(
        self,
        orig: Codebase,
        mod: Codebase,
        dest: Codebase,
        oracle: MergeOracle,
        output_dir: Path | None = None,
        temp_dirs: TempDirectories | None = None,
    ) -> None:
        self.orig = orig
        self.mod = mod
        self.dest = dest
        self.oracle = oracle

        if output_dir is None:
            if temp_dirs is None:
                raise ValueError("CodebaseMerger needs output_dir or temp_dirs")
            output_dir = temp_dirs.create(MERGED_CODEBASE_PREFIX, Lifetime.TASK)
        self.merged_codebase = Path(output_dir).absolute()
        self.merged_codebase.mkdir(parents=True, exist_ok=True)

        self._merged_files: set[str] = set()
        self._failed_to_merge_files: set[str] = set()

    @property
    def merged_files(self) -> frozenset[str]:
        return frozenset(self._merged_files)

    @property
    def failed_to_merge_files(self) -> frozenset[str]:
        return frozenset(self._failed_to_merge_files)

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    def merge(self) -> MergeResult:
        """Merge every file in ``dest`` or ``mod`` and return the outcome."""
        filenames = self.dest.relative_filenames() | self.mod.relative_filenames()
        logger.info(
            "Merging %d files from %s into %s",
            len(filenames),
            self.mod.description,
            self.dest.description,
        )
        for filename in sorted(filenames):
            self.generate_merged_file(filename)
        return self.result()

    def result(self) -> MergeResult:
        return MergeResult(
            merged_codebase=self.merged_codebase,
            merged_files=self.merged_files,
            failed_to_merge_files=self.failed_to_merge_files,
        )

    def report(self) -> str:
        """Log and return the human-readable summary of the merge so far."""
        summary = self.result().summary()
        logger.info(summary)
        return summary

    # ------------------------------------------------------------------
    # Per-file merge
    # ------------------------------------------------------------------

    def generate_merged_file(self, filename: str) -> None:
        """Merge one relative *filename* into the output directory."""
        orig_file = self.orig.get_file(filename)
        mod_file = self.mod.get_file(filename)
        dest_file = self.dest.get_file(filename)
        in_orig = orig_file.exists()
        in_mod = mod_file.exists()
        in_dest = dest_file.exists()
        merged_file = self.merged_codebase / filename

        if not in_mod and not in_dest:
            logger.debug("%s: deleted on both sides", filename)
            return

        if in_mod and not in_orig and not in_dest:
            copy_file(mod_file, merged_file)
            self._merged_files.add(str(merged_file))
            logger.debug("%s: added", filename)
            return

        if in_orig and in_dest and not in_mod:
            if not self._differs(orig_file, dest_file):
                logger.debug("%s: deleted cleanly", filename)
                return
            logger.debug("%s: deleted in mod but edited in dest", filename)
            copy_file(dest_file, merged_file)
            self._merge_into(merged_file, orig_file, devnull(), filename)
            return

        if in_orig and in_mod and not in_dest:
            if not self._differs(orig_file, mod_file):
                logger.debug("%s: dest deletion kept", filename)
                return
            logger.debug("%s: deleted in dest but edited in mod", filename)

        if in_dest:
            copy_file(dest_file, merged_file)
        else:
            write_file(merged_file, "")
        self._merge_into(
            merged_file,
            orig_file if in_orig else devnull(),
            mod_file if in_mod else devnull(),
            filename,
        )
        if in_mod and is_executable(mod_file):
            set_executable(merged_file)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _differs(self, a: Path, b: Path) -> bool:
        if is_executable(a) != is_executable(b):
            return True
        return self.oracle.differs(a, b)

    def _merge_into(
        self, merged_file: Path, orig_file: Path, mod_file: Path, filename: str
    ) -> None:
        if self.oracle.merge(merged_file, orig_file, mod_file, self.merged_codebase):
            self._merged_files.add(str(merged_file))
            logger.debug("%s: merged", filename)
        else:
            self._failed_to_merge_files.add(str(merged_file))
            logger.warning("%s: merge conflict", filename)
