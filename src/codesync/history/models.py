"""Pydantic models for revision history.

Defines the value types the walker and the equivalence store share:

- ``Revision``: an identified point in one repository's history.
- ``RevisionMetadata``: descriptive metadata for a revision, including
  its parent links (more than one for a merge commit).
- ``concatenate_metadata``: fold several metadata objects into one, used
  when a migration squashes a run of revisions into a single commit.

All models are frozen (immutable) and hashable by value.
"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from pydantic import BaseModel, Field

DESCRIPTION_SEPARATOR = "\n-------------\n"


class Revision(BaseModel):
    """A point in a repository's history.

    Attributes:
        rev_id: Opaque VCS identifier (a hash, an integer, a branch tip).
        repository_name: Name of the repository, as configured.
    """

    rev_id: str = Field(alias="revId")
    repository_name: str = Field(alias="repositoryName")

    model_config = {"frozen": True, "populate_by_name": True}

    def __str__(self) -> str:
        return f"{self.repository_name}{{{self.rev_id}}}"


class RevisionMetadata(BaseModel):
    """Metadata for one revision.

    Attributes:
        id: Revision identifier as the VCS reports it.
        author: Short author name.
        date: Raw date string as reported by the VCS.
        description: Full commit message.
        parents: Parent revisions, in the order the VCS reports them.
        full_author: ``Name <email>`` form, when the VCS provides it.
        normalized_date: Parsed ``date``, when it could be parsed.
    """

    id: str
    author: str
    date: str
    description: str
    parents: tuple[Revision, ...] = ()
    full_author: str | None = None
    normalized_date: datetime | None = None

    model_config = {"frozen": True}


def concatenate_metadata(
    metadata: Sequence[RevisionMetadata],
) -> RevisionMetadata:
    """Return a single ``RevisionMetadata`` combining *metadata*.

    Ids, authors and dates are joined with ``", "``; descriptions are
    joined with a visible separator line; parent lists are unioned in
    order, each parent kept once at its first position.  Formatted
    authors and parsed dates cannot be joined, so the last non-``None``
    value of each wins.

    Args:
        metadata: Metadata to combine, oldest first.

    Raises:
        ValueError: If *metadata* is empty.
    """
    if not metadata:
        raise ValueError("Cannot concatenate an empty list of metadata")

    full_author: str | None = None
    normalized_date: datetime | None = None
    parents: list[Revision] = []
    for rm in metadata:
        for parent in rm.parents:
            if parent not in parents:
                parents.append(parent)
        if rm.full_author is not None:
            full_author = rm.full_author
        if rm.normalized_date is not None:
            normalized_date = rm.normalized_date

    return RevisionMetadata(
        id=", ".join(rm.id for rm in metadata),
        author=", ".join(rm.author for rm in metadata),
        date=", ".join(rm.date for rm in metadata),
        description=DESCRIPTION_SEPARATOR.join(
            rm.description for rm in metadata
        ),
        parents=tuple(parents),
        full_author=full_author,
        normalized_date=normalized_date,
    )
