"""Tests for ProjectContext construction from config."""

import pytest

from codesync.codebase import CommandOracle, Merge3Oracle
from codesync.config_schema import build_config
from codesync.context import ProjectContext
from codesync.core.errors import SyncProblem
from codesync.database import FileDb
from codesync.file_handler import Lifetime, TempDirectories
from codesync.history import GitRevisionHistory, SvnRevisionHistory
from conftest import RecordingExecutor

RAW = {
    "repositories": {
        "internal": {"type": "git", "path": "/src/internal", "branches": ["main"]},
        "public": {"type": "svn", "url": "https://svn.example.com/public"},
    },
}


class TestProjectContext:
    """Tests for ProjectContext.from_config()."""

    def test_builds_histories(self, tmp_path):
        context = ProjectContext.from_config(
            build_config(RAW), RecordingExecutor(), tmp_path / "db.json"
        )
        internal = context.history("internal")
        assert isinstance(internal, GitRevisionHistory)
        assert internal.branches == ["main"]
        assert isinstance(context.history("public"), SvnRevisionHistory)

    def test_unknown_repository_is_fatal(self, tmp_path):
        context = ProjectContext.from_config(
            build_config(RAW), RecordingExecutor(), tmp_path / "db.json"
        )
        with pytest.raises(SyncProblem, match="internal, public"):
            context.history("typo")

    def test_missing_store_starts_empty(self, tmp_path):
        path = tmp_path / "db.json"
        context = ProjectContext.from_config(
            build_config(RAW), RecordingExecutor(), path
        )
        assert context.db.equivalences == []
        assert context.db.location == path

    def test_db_path_from_config(self, tmp_path):
        raw = dict(RAW, db={"path": str(tmp_path / "configured.json")})
        context = ProjectContext.from_config(build_config(raw), RecordingExecutor())
        assert context.db.location == tmp_path / "configured.json"

    def test_oracle_selection(self, tmp_path):
        executor = RecordingExecutor()
        command = ProjectContext.from_config(
            build_config({"merge": {"merge_command": "rcsmerge"}}),
            executor,
            tmp_path / "db.json",
        ).oracle
        assert isinstance(command, CommandOracle)
        assert command.merge_command == "rcsmerge"
        assert command.executor is executor

        in_process = ProjectContext.from_config(
            build_config({"merge": {"tool": "merge3"}}),
            executor,
            tmp_path / "db.json",
        ).oracle
        assert isinstance(in_process, Merge3Oracle)

    def test_close_removes_task_directories_only(self, tmp_path):
        temp_dirs = TempDirectories(tmp_path / "tmp")
        context = ProjectContext(
            config=build_config({}),
            db=FileDb(),
            executor=RecordingExecutor(),
            histories={},
            oracle=Merge3Oracle(),
            temp_dirs=temp_dirs,
        )
        task = context.temp_dirs.create("t_", Lifetime.TASK)
        kept = context.temp_dirs.create("k_", Lifetime.PERSISTENT)

        context.close()
        assert not task.exists()
        assert kept.exists()
