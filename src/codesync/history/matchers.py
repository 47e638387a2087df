"""Matcher protocol consulted by the revision walker.

A matcher tells the walker where already-migrated history begins.  The
walker never knows how that is decided; ``EquivalenceMatcher`` in
``codesync.database.matchers`` answers from the equivalence store, and
tests answer from plain sets.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from codesync.database.models import Equivalence
    from codesync.history.models import Revision


class RevisionMatcher(Protocol):
    """Protocol that all revision matchers must satisfy."""

    def matches(self, revision: Revision) -> bool:
        """Return ``True`` if *revision* is known-equivalent elsewhere."""
        ...  # pragma: no cover

    def lookup_equivalence(self, revision: Revision) -> Equivalence | None:
        """Return the recorded equivalence for *revision*, if any."""
        ...  # pragma: no cover
