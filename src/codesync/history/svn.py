"""Revision history backed by a Subversion URL.

Uses ``svn log --xml``.  Subversion history is linear, so a revision's
only parent is the next older log entry; asking for two entries starting
at the revision yields both the revision and its parent in one call.
"""

from __future__ import annotations

import logging

from lxml import etree

from codesync.core.commands import CommandError, ProcessExecutor
from codesync.core.errors import SyncProblem
from codesync.history.models import Revision, RevisionMetadata
from codesync.history.walker import RevisionHistory

logger = logging.getLogger(__name__)


def _parse_log_entries(log: str) -> list[etree._Element]:
    """Return the ``<logentry>`` elements of an ``svn log --xml`` output."""
    try:
        root = etree.fromstring(log.encode("utf-8"))
    except etree.XMLSyntaxError as exc:
        raise SyncProblem(f"Could not parse xml log: {log!r} ({exc})") from exc
    return root.findall("logentry")


class SvnRevisionHistory(RevisionHistory):
    """Revision history read from a Subversion repository URL.

    Args:
        repository_name: Configured name of the repository.
        url: Repository URL passed to ``svn log``.
        executor: Runs the ``svn`` commands.
    """

    def __init__(
        self,
        repository_name: str,
        url: str,
        executor: ProcessExecutor,
    ) -> None:
        super().__init__(repository_name)
        self.url = url
        self.executor = executor

    def _svn_log(self, rev_id: str, limit: int) -> str:
        args = ["log", "--xml", "-l", str(limit), "-r", f"{rev_id}:1", self.url]
        try:
            return self.executor.run("svn", args)
        except CommandError as exc:
            raise SyncProblem(
                f"Failed svn run: {args} returned {exc.return_status} "
                f"with stdout {exc.stdout!r} and stderr {exc.stderr!r}"
            ) from exc

    def find_highest_revision(self, rev_id: str | None = None) -> Revision:
        entries = _parse_log_entries(self._svn_log(rev_id or "HEAD", 1))
        if not entries:
            raise SyncProblem(
                f"svn log returned no revision for {rev_id or 'HEAD'!r} "
                f"in {self.repository_name}"
            )
        found = entries[0].get("revision")
        if rev_id and found != rev_id:
            logger.info(
                "Resolved %s{%s} to revision %s", self.repository_name, rev_id, found
            )
        return Revision(rev_id=found, repository_name=self.repository_name)

    def get_metadata(self, revision: Revision) -> RevisionMetadata:
        if revision.repository_name != self.repository_name:
            raise SyncProblem(
                f"Could not get metadata: Revision {revision.rev_id} is in "
                f"repository {revision.repository_name} instead of "
                f"{self.repository_name}"
            )
        metadata = self.parse_metadata(self._svn_log(revision.rev_id, 2))
        if not metadata:
            raise SyncProblem(
                f"svn log returned no entry for {revision}"
            )
        return metadata[0]

    def parse_metadata(self, log: str) -> list[RevisionMetadata]:
        """Parse log entries, newest first, linking each to the next as parent."""
        entries = _parse_log_entries(log)
        result: list[RevisionMetadata] = []
        for i, entry in enumerate(entries):
            parents: tuple[Revision, ...] = ()
            if i + 1 < len(entries):
                parents = (
                    Revision(
                        rev_id=entries[i + 1].get("revision"),
                        repository_name=self.repository_name,
                    ),
                )
            result.append(
                RevisionMetadata(
                    id=entry.get("revision"),
                    author=entry.findtext("author", default=""),
                    date=entry.findtext("date", default=""),
                    description=entry.findtext("msg", default=""),
                    parents=parents,
                )
            )
        return result
