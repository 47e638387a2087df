"""Three-way codebase merging.

Modules:

- ``codebase`` -- ``Codebase``: a snapshot directory as relative paths.
- ``oracles``  -- ``CommandOracle`` (external ``diff``/``merge``) and
  ``Merge3Oracle`` (in-process, ``merge3`` library).
- ``merger``   -- ``CodebaseMerger`` and its ``MergeResult``.
- ``reporter`` -- human-readable and JSON report formatting.

Usage example
-------------
::

    from codesync.codebase import Codebase, CodebaseMerger, CommandOracle
    from codesync.core import SubprocessRunner

    merger = CodebaseMerger(
        orig=Codebase("snapshots/public-6"),
        mod=Codebase("snapshots/public-7"),
        dest=Codebase("checkouts/internal"),
        oracle=CommandOracle(SubprocessRunner()),
    )
    result = merger.merge()
    print(result.summary())
"""

from .codebase import Codebase
from .merger import CodebaseMerger, MergeResult
from .oracles import CommandOracle, Merge3Oracle, MergeOracle
from .reporter import (
    format_equivalence,
    format_merge_report,
    format_revisions,
    report_to_json,
)

__all__ = [
    "Codebase",
    "CodebaseMerger",
    "CommandOracle",
    "Merge3Oracle",
    "MergeOracle",
    "MergeResult",
    "format_equivalence",
    "format_merge_report",
    "format_revisions",
    "report_to_json",
]
