"""Pydantic models for the equivalence store.

- ``Equivalence``: two revisions, in different repositories, asserted to
  hold the same content.  The pair is unordered.
- ``SubmittedMigration``: a migration already performed; kept only so a
  repeated attempt can be recognised.
- ``DbStorage``: the persisted aggregate of both lists.

Field names serialise in camelCase (``rev1``/``rev2``, ``fromRevision``,
``revId``...) so store files stay readable by other tools that share
the format.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from codesync.history.models import Revision


class Equivalence(BaseModel):
    """An unordered pair of content-equivalent revisions.

    ``Equivalence(a, b) == Equivalence(b, a)`` and both hash the same.
    """

    rev1: Revision
    rev2: Revision

    model_config = {"frozen": True}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Equivalence):
            return NotImplemented
        return {self.rev1, self.rev2} == {other.rev1, other.rev2}

    def __hash__(self) -> int:
        return hash(frozenset((self.rev1, self.rev2)))

    def __str__(self) -> str:
        return f"{self.rev1} == {self.rev2}"

    def has_repository(self, repository_name: str) -> bool:
        """Return ``True`` if either side lives in *repository_name*."""
        return repository_name in (
            self.rev1.repository_name,
            self.rev2.repository_name,
        )

    def other_revision(self, revision: Revision) -> Revision | None:
        """Return the counterpart of *revision*, or ``None`` if absent."""
        if revision == self.rev1:
            return self.rev2
        if revision == self.rev2:
            return self.rev1
        return None


class SubmittedMigration(BaseModel):
    """A migration from one repository into another that already happened."""

    from_revision: Revision = Field(alias="fromRevision")
    to_revision: Revision = Field(alias="toRevision")

    model_config = {"frozen": True, "populate_by_name": True}

    def __str__(self) -> str:
        return f"{self.from_revision} ==> {self.to_revision}"


class DbStorage(BaseModel):
    """The persisted store: every equivalence and migration, in order."""

    equivalences: list[Equivalence] = []
    migrations: list[SubmittedMigration] = []

    model_config = {"extra": "forbid"}
