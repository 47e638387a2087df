"""Tests for SvnRevisionHistory."""

from __future__ import annotations

import pytest

from codesync.core.errors import SyncProblem
from codesync.history.svn import SvnRevisionHistory
from conftest import RecordingExecutor, rev

URL = "https://svn.example.com/repo"

TWO_ENTRIES = """<?xml version="1.0"?>
<log>
<logentry revision="7">
<author>bob</author>
<date>2024-01-02T10:00:00.000000Z</date>
<msg>second change</msg>
</logentry>
<logentry revision="6">
<author>carol</author>
<date>2024-01-01T10:00:00.000000Z</date>
<msg>first change</msg>
</logentry>
</log>
"""

ONE_ENTRY = """<?xml version="1.0"?>
<log>
<logentry revision="1">
<author>bob</author>
<date>2024-01-01T10:00:00.000000Z</date>
<msg>initial import</msg>
</logentry>
</log>
"""


class TestSvnRevisionHistory:
    """Tests for svn head resolution and log parsing."""

    def test_find_highest_revision_defaults_to_head(self):
        executor = RecordingExecutor({"svn": TWO_ENTRIES})
        history = SvnRevisionHistory("public", URL, executor)

        assert history.find_highest_revision() == rev("public", "7")
        cmd, args, _ = executor.calls[0]
        assert cmd == "svn"
        assert args == ["log", "--xml", "-l", "1", "-r", "HEAD:1", URL]

    def test_get_metadata_uses_next_entry_as_parent(self):
        executor = RecordingExecutor({"svn": TWO_ENTRIES})
        history = SvnRevisionHistory("public", URL, executor)

        rm = history.get_metadata(rev("public", "7"))
        assert executor.calls[0][1] == [
            "log", "--xml", "-l", "2", "-r", "7:1", URL,
        ]
        assert rm.id == "7"
        assert rm.author == "bob"
        assert rm.date == "2024-01-02T10:00:00.000000Z"
        assert rm.description == "second change"
        assert rm.parents == (rev("public", "6"),)

    def test_first_revision_has_no_parent(self):
        history = SvnRevisionHistory(
            "public", URL, RecordingExecutor({"svn": ONE_ENTRY})
        )
        assert history.get_metadata(rev("public", "1")).parents == ()

    def test_malformed_xml_is_fatal(self):
        history = SvnRevisionHistory(
            "public", URL, RecordingExecutor({"svn": "<log><logentry"})
        )
        with pytest.raises(SyncProblem, match="Could not parse xml log"):
            history.get_metadata(rev("public", "7"))

    def test_empty_log_is_fatal(self):
        history = SvnRevisionHistory(
            "public", URL, RecordingExecutor({"svn": "<log></log>"})
        )
        with pytest.raises(SyncProblem):
            history.find_highest_revision()

    def test_failed_command_is_fatal(self):
        history = SvnRevisionHistory("public", URL, RecordingExecutor({"svn": 1}))
        with pytest.raises(SyncProblem, match="Failed svn run"):
            history.find_highest_revision("3")

    def test_other_repository_is_fatal(self):
        history = SvnRevisionHistory("public", URL, RecordingExecutor())
        with pytest.raises(SyncProblem):
            history.get_metadata(rev("internal", "7"))
