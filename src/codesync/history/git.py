"""Revision history backed by a local git clone.

Metadata comes from a single ``git log`` per revision with fields joined
by a delimiter unlikely to appear in a commit message.  Dates are
requested in RFC 2822 form so they can be parsed into
``normalized_date``.
"""

from __future__ import annotations

import logging
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import Sequence

from codesync.core.commands import CommandError, ProcessExecutor
from codesync.core.errors import SyncProblem
from codesync.history.models import Revision, RevisionMetadata
from codesync.history.walker import RevisionHistory

logger = logging.getLogger(__name__)

LOG_DELIMITER = "---@SYNC@---"
DEFAULT_BRANCH = "master"

# hash, author, fullAuthor, date, parents, full commit message
METADATA_FORMAT = LOG_DELIMITER.join(
    ["%H", "%an", "%aN <%aE>", "%ad", "%P", "%B"]
)


class GitRevisionHistory(RevisionHistory):
    """Revision history read from a git working copy.

    Args:
        repository_name: Configured name of the repository.
        repo_path: Path to the local clone.
        executor: Runs the ``git`` commands.
        branches: Branches to import from.  ``None`` means only
            ``DEFAULT_BRANCH``.
    """

    def __init__(
        self,
        repository_name: str,
        repo_path: str | Path,
        executor: ProcessExecutor,
        branches: Sequence[str] | None = None,
    ) -> None:
        super().__init__(repository_name)
        self.repo_path = Path(repo_path)
        self.executor = executor
        self.branches = list(branches) if branches else None

    def _git(self, *args: str) -> str:
        try:
            return self.executor.run("git", list(args), cwd=self.repo_path)
        except CommandError as exc:
            raise SyncProblem(
                f"Failed git run: git {' '.join(args)} returned "
                f"{exc.return_status} with stdout {exc.stdout!r} "
                f"and stderr {exc.stderr!r}"
            ) from exc

    def find_highest_revision(self, rev_id: str | None = None) -> Revision:
        """Resolve *rev_id* (a hash or branch name) to a full commit hash."""
        output = self._git(
            "log", "--max-count=1", "--format=%H", rev_id or DEFAULT_BRANCH
        )
        commit = output.strip()
        if not commit:
            raise SyncProblem(
                f"git log returned no commit for {rev_id or DEFAULT_BRANCH!r} "
                f"in {self.repository_name}"
            )
        return Revision(rev_id=commit, repository_name=self.repository_name)

    def find_head_revisions(self) -> list[Revision]:
        branches = self.branches or [DEFAULT_BRANCH]
        return [self.find_highest_revision(branch) for branch in branches]

    def get_metadata(self, revision: Revision) -> RevisionMetadata:
        if revision.repository_name != self.repository_name:
            raise SyncProblem(
                f"Could not get metadata: Revision {revision.rev_id} is in "
                f"repository {revision.repository_name} instead of "
                f"{self.repository_name}"
            )
        log = self._git(
            "log",
            "--max-count=1",
            f"--format={METADATA_FORMAT}",
            "--date=rfc",
            revision.rev_id,
        )
        return self.parse_metadata(log)

    def parse_metadata(self, log: str) -> RevisionMetadata:
        """Parse the delimited ``git log`` output for one commit.

        The split is limited so a delimiter inside the commit message
        stays in the description.
        """
        fields = log.split(LOG_DELIMITER, 5)
        if len(fields) != 6:
            raise SyncProblem(f"Could not parse git log output: {log!r}")
        commit, author, full_author, date, parent_ids, description = fields

        try:
            normalized_date = parsedate_to_datetime(date)
        except (TypeError, ValueError) as exc:
            raise SyncProblem(
                f"Failed to parse date '{date}' from revision {commit}."
            ) from exc

        parents = tuple(
            Revision(rev_id=p, repository_name=self.repository_name)
            for p in parent_ids.split()
        )
        return RevisionMetadata(
            id=commit,
            author=author,
            date=date,
            description=description,
            parents=parents,
            full_author=full_author,
            normalized_date=normalized_date,
        )
