"""Revision graph walker.

``RevisionHistory`` walks a repository's revision DAG along parent
edges.  The graph is never materialised: revisions are value-keyed
nodes and each node's parents are fetched from the metadata source when
the node is visited.

The walk is breadth-first over a FIFO queue with a visited set, so a
revision reachable along several parent paths (a merge diamond) is
processed exactly once and the walk terminates on any finite history.
Parents are enqueued in the order the metadata source reports them,
which makes "first found" results reproducible for a fixed repository
state.

Concrete sources (``GitRevisionHistory``, ``SvnRevisionHistory``, test
fakes) implement only ``find_highest_revision`` and ``get_metadata``.
Any exception they raise aborts the walk; no partial result is
returned.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import TYPE_CHECKING

from codesync.history.models import Revision, RevisionMetadata

if TYPE_CHECKING:
    from codesync.database.models import Equivalence
    from codesync.history.matchers import RevisionMatcher

logger = logging.getLogger(__name__)


class RevisionHistory(ABC):
    """Base class for a repository's revision history.

    Args:
        repository_name: Name of the repository this history belongs to.
    """

    def __init__(self, repository_name: str) -> None:
        self.repository_name = repository_name

    # ------------------------------------------------------------------
    # Metadata source hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def find_highest_revision(self, rev_id: str | None = None) -> Revision:
        """Resolve *rev_id* (or the default branch head when empty)."""

    @abstractmethod
    def get_metadata(self, revision: Revision) -> RevisionMetadata:
        """Return metadata, including parents, for *revision*."""

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_head_revisions(self) -> list[Revision]:
        """Return the tip of every branch this history imports from.

        The base implementation knows only the default branch.
        """
        return [self.find_highest_revision(None)]

    def find_revisions(
        self,
        matcher: RevisionMatcher,
        revision: Revision | None = None,
    ) -> list[Revision]:
        """Return revisions not yet covered by *matcher*, in BFS order.

        A revision the matcher recognises is left out and its ancestry is
        not explored: everything below it is assumed already migrated.

        Args:
            matcher: Decides where known history begins.
            revision: Start here instead of at the branch heads.
        """
        if revision is not None:
            pending = deque([revision])
        else:
            pending = deque(self.find_head_revisions())
        visited: set[Revision] = set()
        result: list[Revision] = []

        while pending:
            rev = pending.popleft()
            if rev in visited:
                continue
            visited.add(rev)

            if matcher.matches(rev):
                logger.debug("Stopping at %s: already equivalent", rev)
                continue
            result.append(rev)
            pending.extend(self.get_metadata(rev).parents)

        logger.info(
            "Found %d revisions in %s since last equivalence",
            len(result),
            self.repository_name,
        )
        return result

    def find_last_equivalence(
        self,
        revision: Revision,
        matcher: RevisionMatcher,
    ) -> Equivalence | None:
        """Return the nearest equivalence at or below *revision*.

        "Nearest" means first in BFS order.  Returns ``None`` when no
        ancestor has a recorded equivalence, which is expected for
        histories that were never synced.
        """
        pending = deque([revision])
        visited: set[Revision] = set()

        while pending:
            rev = pending.popleft()
            if rev in visited:
                continue
            visited.add(rev)

            equivalence = matcher.lookup_equivalence(rev)
            if equivalence is not None:
                logger.debug(
                    "Last equivalence for %s: %s", revision, equivalence
                )
                return equivalence
            pending.extend(self.get_metadata(rev).parents)

        logger.debug("No equivalence found below %s", revision)
        return None

