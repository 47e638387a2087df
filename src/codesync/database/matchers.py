"""Revision matcher backed by the equivalence store."""

from __future__ import annotations

from codesync.database.models import Equivalence
from codesync.database.store import FileDb
from codesync.history.models import Revision


def _rev_id_order(revision: Revision) -> tuple[int, int, str]:
    if revision.rev_id.isdecimal():
        return (0, int(revision.rev_id), "")
    return (1, 0, revision.rev_id)


class EquivalenceMatcher:
    """Match revisions that have a counterpart in *other_repository*.

    Args:
        other_repository: Repository the counterpart must live in.
        db: Store to consult.
    """

    def __init__(self, other_repository: str, db: FileDb) -> None:
        self.other_repository = other_repository
        self.db = db

    def matches(self, revision: Revision) -> bool:
        return bool(
            self.db.find_equivalences(revision, self.other_repository)
        )

    def lookup_equivalence(self, revision: Revision) -> Equivalence | None:
        """Return an equivalence for *revision*, or ``None``.

        When several counterparts are recorded the lowest is used, so
        repeated calls agree.  Numeric ids (svn) compare as numbers and
        sort before non-numeric ones (git hashes), which compare as text.
        """
        found = self.db.find_equivalences(revision, self.other_repository)
        if not found:
            return None
        other = min(found, key=_rev_id_order)
        return Equivalence(rev1=other, rev2=revision)
