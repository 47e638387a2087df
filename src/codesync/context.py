"""Per-invocation project context.

A ``ProjectContext`` bundles what one command needs: the validated
config, the equivalence store, the process executor, one
``RevisionHistory`` per configured repository, the merge oracle and
the temporary directories created on its behalf.  It is built once and
passed explicitly; nothing here is global.
"""

from __future__ import annotations

import logging
from pathlib import Path

from codesync.codebase.oracles import CommandOracle, Merge3Oracle, MergeOracle
from codesync.config_schema import RepositoryConfig, UnifiedConfig
from codesync.core.commands import ProcessExecutor, SubprocessRunner
from codesync.core.errors import SyncProblem
from codesync.database.store import FileDb
from codesync.file_handler import Lifetime, TempDirectories
from codesync.history.git import GitRevisionHistory
from codesync.history.svn import SvnRevisionHistory
from codesync.history.walker import RevisionHistory

logger = logging.getLogger(__name__)


class ProjectContext:
    """Everything a command needs, resolved from config.

    Args:
        config: Validated project configuration.
        db: Equivalence store.
        executor: Runs VCS and diff/merge commands.
        histories: Revision history per repository name.
        oracle: Diff/merge oracle for the codebase merger.
        temp_dirs: Temporary directories owned by this context; task-scoped
            ones are removed by ``close()``.
    """

    def __init__(
        self,
        config: UnifiedConfig,
        db: FileDb,
        executor: ProcessExecutor,
        histories: dict[str, RevisionHistory],
        oracle: MergeOracle,
        temp_dirs: TempDirectories | None = None,
    ) -> None:
        self.config = config
        self.db = db
        self.executor = executor
        self.histories = histories
        self.oracle = oracle
        self.temp_dirs = temp_dirs or TempDirectories()

    def history(self, repository_name: str) -> RevisionHistory:
        """Return the history of *repository_name*.

        Raises:
            SyncProblem: If no such repository is configured.
        """
        try:
            return self.histories[repository_name]
        except KeyError:
            known = ", ".join(sorted(self.histories)) or "(none)"
            raise SyncProblem(
                f"No repository named '{repository_name}' "
                f"(configured: {known})"
            ) from None

    def close(self) -> None:
        """Remove the task- and process-scoped directories this context made."""
        for lifetime in (Lifetime.TASK, Lifetime.PROCESS):
            removed = self.temp_dirs.cleanup(lifetime)
            if removed:
                logger.debug("Removed %d %s directories", removed, lifetime.value)

    @classmethod
    def from_config(
        cls,
        config: UnifiedConfig,
        executor: ProcessExecutor | None = None,
        db_path: str | Path | None = None,
    ) -> ProjectContext:
        """Build a context from *config*.

        The store is loaded from *db_path* (or ``config.db.path``); a
        missing file yields an empty store bound to that path.
        """
        executor = executor or SubprocessRunner()
        db = FileDb.load_or_create(db_path or config.db.path)
        histories = {
            name: make_history(name, repo, executor)
            for name, repo in config.repositories.items()
        }
        oracle = make_oracle(config, executor)
        logger.debug(
            "Context for %s: %d repositories, %s oracle",
            config.name,
            len(histories),
            config.merge.tool,
        )
        return cls(config, db, executor, histories, oracle)


def make_history(
    name: str, repo: RepositoryConfig, executor: ProcessExecutor
) -> RevisionHistory:
    """Instantiate the revision history for one configured repository."""
    if repo.type == "git":
        return GitRevisionHistory(name, repo.path, executor, repo.branches)
    return SvnRevisionHistory(name, repo.url, executor)


def make_oracle(config: UnifiedConfig, executor: ProcessExecutor) -> MergeOracle:
    if config.merge.tool == "merge3":
        return Merge3Oracle()
    return CommandOracle(
        executor,
        diff_command=config.merge.diff_command,
        merge_command=config.merge.merge_command,
    )
