"""Tests for the unified config schema and build_config()."""

import pytest
from pydantic import ValidationError

from codesync.config_schema import (
    DbConfig,
    LoggingConfig,
    MergeConfig,
    RepositoryConfig,
    UnifiedConfig,
    build_config,
)

# ---------------------------------------------------------------------------
# UnifiedConfig tests
# ---------------------------------------------------------------------------


class TestUnifiedConfig:
    """Tests for the top-level UnifiedConfig model."""

    def test_zero_config_defaults(self):
        config = UnifiedConfig()
        assert config.repositories == {}
        assert config.db.path == ".codesync/db.json"
        assert config.merge.tool == "command"
        assert config.merge.diff_command == "diff"
        assert config.merge.merge_command == "merge"
        assert config.logging.level == "INFO"
        assert config.logging.format == "text"

    def test_unknown_sections_ignored(self):
        config = UnifiedConfig(**{"future_section": {"key": "value"}})
        assert not hasattr(config, "future_section")

    def test_frozen_model_prevents_mutation(self):
        config = UnifiedConfig()
        with pytest.raises(ValidationError):
            config.db = DbConfig(path="other.json")


# ---------------------------------------------------------------------------
# Section tests
# ---------------------------------------------------------------------------


class TestRepositoryConfig:
    """Tests for RepositoryConfig validation."""

    def test_git_requires_path(self):
        with pytest.raises(ValidationError, match="path"):
            RepositoryConfig(type="git")

    def test_svn_requires_url(self):
        with pytest.raises(ValidationError, match="url"):
            RepositoryConfig(type="svn")

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            RepositoryConfig(type="hg", path="/src")

    def test_git_with_branches(self):
        repo = RepositoryConfig(type="git", path="/src", branches=["main"])
        assert repo.branches == ["main"]


class TestMergeAndLoggingConfig:
    """Tests for the merge and logging sections."""

    def test_merge_tool_choices(self):
        assert MergeConfig(tool="merge3").tool == "merge3"
        with pytest.raises(ValidationError):
            MergeConfig(tool="kdiff3")

    def test_logging_format_choices(self):
        assert LoggingConfig(format="json").format == "json"
        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")


# ---------------------------------------------------------------------------
# build_config tests
# ---------------------------------------------------------------------------


class TestBuildConfig:
    """Tests for build_config() factory."""

    def test_empty_dict_returns_defaults(self):
        assert build_config({}) == UnifiedConfig()

    def test_full_raw_dict(self):
        config = build_config(
            {
                "name": "myproject",
                "repositories": {
                    "internal": {"type": "git", "path": "/src/internal"},
                    "public": {"type": "svn", "url": "https://svn/public"},
                },
                "db": {"path": "/var/db.json"},
                "merge": {"tool": "merge3"},
                "logging": {"level": "DEBUG"},
            }
        )
        assert config.name == "myproject"
        assert set(config.repositories) == {"internal", "public"}
        assert config.repositories["public"].url == "https://svn/public"
        assert config.db.path == "/var/db.json"
        assert config.merge.tool == "merge3"
        assert config.logging.level == "DEBUG"

    def test_invalid_repository_raises(self):
        with pytest.raises(ValidationError):
            build_config({"repositories": {"bad": {"type": "svn"}}})
