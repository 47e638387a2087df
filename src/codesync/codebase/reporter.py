"""Report formatting functions.

Provides human-readable and machine-readable output for the commands:

- ``format_merge_report`` -- full post-merge summary.
- ``format_revisions`` -- revisions found since the last equivalence.
- ``format_equivalence`` -- result of a last-equivalence query.
- ``report_to_json`` -- structured dict for ``--json`` output.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from codesync.codebase.merger import MergeResult
    from codesync.database.models import Equivalence
    from codesync.history.models import Revision


# ------------------------------------------------------------------
# Human-readable reports
# ------------------------------------------------------------------


def format_merge_report(result: MergeResult) -> str:
    """Format a complete merge report as human-readable text.

    Sections are only included when they contain at least one path.
    Paths are shown relative to the merged codebase root.

    Args:
        result: The completed merge.

    Returns:
        Multi-line formatted string.
    """
    root = result.merged_codebase
    merged = len(result.merged_files)
    conflicts = len(result.failed_to_merge_files)

    lines: list[str] = [
        f"Merged codebase generated at: {root}",
        f"Merged {merged + conflicts} files: "
        f"{merged} clean, {conflicts} conflicts",
        "",
    ]

    if result.merged_files:
        lines.append("Merged cleanly:")
        for path in sorted(result.merged_files):
            lines.append(f"  {_relative(path, root)}")
        lines.append("")

    if result.failed_to_merge_files:
        lines.append(
            "Conflicts (edit these files to resolve, then commit):"
        )
        for path in sorted(result.failed_to_merge_files):
            lines.append(f"  {_relative(path, root)}")
        lines.append("")

    return "\n".join(lines).rstrip("\n")


def format_revisions(revisions: Sequence[Revision]) -> str:
    """Format the result of a revisions-since-equivalence query."""
    if not revisions:
        return "No revisions found"
    return "Revisions found: " + ", ".join(str(r) for r in revisions)


def format_equivalence(equivalence: Equivalence | None) -> str:
    """Format the result of a last-equivalence query."""
    if equivalence is None:
        return "No equivalence found"
    return f"Last equivalence: {equivalence}"


# ------------------------------------------------------------------
# JSON
# ------------------------------------------------------------------


def report_to_json(result: MergeResult) -> dict:
    """Convert a ``MergeResult`` to a JSON-serialisable dict.

    Returns:
        Dict with ``merged_codebase``, ``summary`` counts, and sorted
        ``merged``/``conflicts`` path lists.
    """
    return {
        "merged_codebase": str(result.merged_codebase),
        "summary": {
            "merged": len(result.merged_files),
            "conflicts": len(result.failed_to_merge_files),
        },
        "merged": sorted(result.merged_files),
        "conflicts": sorted(result.failed_to_merge_files),
    }


def _relative(path: str, root: Path) -> str:
    try:
        return Path(path).relative_to(root).as_posix()
    except ValueError:
        return path
