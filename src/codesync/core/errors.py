"""Fatal error type for codesync.

``SyncProblem`` marks conditions that abort the current operation
outright: a malformed equivalence store, metadata that cannot be
retrieved or parsed, a revision asked of the wrong repository.  Expected
per-item outcomes (a merge conflict, a missing equivalence) are never
raised; they are returned as data.
"""

from __future__ import annotations


class SyncProblem(RuntimeError):
    """An unrecoverable problem; propagated unchanged to the caller."""

    def __init__(self, explanation: str) -> None:
        super().__init__(explanation)
        self.explanation = explanation
