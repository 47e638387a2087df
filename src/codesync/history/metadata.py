"""Determine the metadata for a migration.

When a migration folds several source revisions into one destination
commit, their metadata is fetched, scrubbed, and concatenated into a
single ``RevisionMetadata``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Iterable, Sequence

from codesync.history.models import (
    Revision,
    RevisionMetadata,
    concatenate_metadata,
)

if TYPE_CHECKING:
    from codesync.context import ProjectContext

MetadataScrubber = Callable[[RevisionMetadata], RevisionMetadata]

_REVIEWERS_MARKER = "\n\nReviewers:"


def scrub_arcanist_trailer(rm: RevisionMetadata) -> RevisionMetadata:
    """Strip the review trailer Arcanist appends to commit messages.

    Everything from the first blank line followed by ``Reviewers:`` is
    dropped; the description keeps a single trailing newline.
    """
    index = rm.description.find(_REVIEWERS_MARKER)
    if index < 0:
        return rm
    description = rm.description[:index]
    if not description.endswith("\n"):
        description += "\n"
    return rm.model_copy(update={"description": description})


DEFAULT_SCRUBBERS: tuple[MetadataScrubber, ...] = (scrub_arcanist_trailer,)


def determine_metadata(
    context: ProjectContext,
    revisions: Sequence[Revision],
    scrubbers: Iterable[MetadataScrubber] | None = None,
) -> RevisionMetadata:
    """Fetch, scrub and concatenate the metadata of *revisions*.

    Args:
        context: Supplies the revision history of each repository.
        revisions: Revisions to describe, oldest first.
        scrubbers: Applied in order to each revision's metadata.  The
            Arcanist trailer scrubber always runs last.

    Raises:
        ValueError: If *revisions* is empty.
        SyncProblem: If a revision's repository is unknown or its
            metadata cannot be retrieved.
    """
    chain = list(scrubbers or ()) + list(DEFAULT_SCRUBBERS)
    collected: list[RevisionMetadata] = []
    for rev in revisions:
        rm = context.history(rev.repository_name).get_metadata(rev)
        for scrub in chain:
            rm = scrub(rm)
        collected.append(rm)
    return concatenate_metadata(collected)
