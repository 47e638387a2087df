"""Shared pytest fixtures and fakes for codesync tests."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pytest
from dotenv import load_dotenv

from codesync.core.commands import CommandError
from codesync.history.models import Revision, RevisionMetadata
from codesync.history.walker import RevisionHistory

load_dotenv()


def rev(repository: str, rev_id: str) -> Revision:
    """Shorthand for ``Revision(rev_id=..., repository_name=...)``."""
    return Revision(rev_id=rev_id, repository_name=repository)


class FakeHistory(RevisionHistory):
    """In-memory revision history.

    *graph* maps each revision id to its parent ids, in parent order.
    Every ``get_metadata`` call is recorded in ``fetched``.
    """

    def __init__(
        self,
        repository_name: str,
        graph: dict[str, list[str]],
        heads: Sequence[str] = (),
    ) -> None:
        super().__init__(repository_name)
        self.graph = graph
        self.heads = list(heads)
        self.fetched: list[str] = []

    def find_highest_revision(self, rev_id: str | None = None) -> Revision:
        return rev(self.repository_name, rev_id or self.heads[0])

    def find_head_revisions(self) -> list[Revision]:
        if not self.heads:
            return super().find_head_revisions()
        return [rev(self.repository_name, h) for h in self.heads]

    def get_metadata(self, revision: Revision) -> RevisionMetadata:
        self.fetched.append(revision.rev_id)
        return RevisionMetadata(
            id=revision.rev_id,
            author="author",
            date="date",
            description=f"description {revision.rev_id}\n",
            parents=tuple(
                rev(self.repository_name, p)
                for p in self.graph.get(revision.rev_id, [])
            ),
        )


class RecordingExecutor:
    """Fake ``ProcessExecutor`` returning canned results.

    ``responses`` maps a command name to either a string (stdout) or an
    ``int`` exit status, which is raised as ``CommandError``.  Every call
    is recorded as ``(cmd, args, cwd)``.
    """

    def __init__(self, responses: dict[str, str | int] | None = None) -> None:
        self.responses = responses or {}
        self.calls: list[tuple[str, list[str], Path | None]] = []

    def run(self, cmd, args, cwd=None) -> str:
        self.calls.append((cmd, list(args), cwd))
        response = self.responses.get(cmd, "")
        if isinstance(response, int):
            raise CommandError(cmd, args, "out", "err", response)
        return response


def make_tree(root: Path, files: dict[str, str | bytes]) -> Path:
    """Create *files* (relative path -> content) under *root*.

    ``bytes`` content is written as is; ``str`` as UTF-8 text.
    """
    root.mkdir(parents=True, exist_ok=True)
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def executor():
    """A recording executor with no canned responses."""
    return RecordingExecutor()
