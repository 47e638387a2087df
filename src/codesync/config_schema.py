"""Unified configuration schema for codesync.

Defines Pydantic models for the project config with dedicated sections
for repositories, the equivalence store, the merge tools, and logging.

Usage:
    from codesync.config_loader import load_hierarchical_config
    from codesync.config_schema import build_config

    raw = load_hierarchical_config()
    config = build_config(raw)
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class RepositoryConfig(BaseModel):
    """One repository whose history codesync can read.

    ``git`` repositories need a local ``path``; ``svn`` repositories need
    a ``url``.
    """

    type: Literal["git", "svn"] = Field(description="Version control system")
    path: str | None = Field(
        default=None, description="Local clone (git)"
    )
    url: str | None = Field(default=None, description="Repository URL (svn)")
    branches: list[str] | None = Field(
        default=None,
        description="Branches to import from (git); default branch when unset",
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_location(self) -> RepositoryConfig:
        if self.type == "git" and not self.path:
            raise ValueError("git repositories require 'path'")
        if self.type == "svn" and not self.url:
            raise ValueError("svn repositories require 'url'")
        return self


class DbConfig(BaseModel):
    """Equivalence store location."""

    path: str = Field(
        default=".codesync/db.json",
        description="Path of the equivalence store file",
    )

    model_config = {"frozen": True}


class MergeConfig(BaseModel):
    """Diff/merge oracle selection.

    Attributes:
        tool: ``command`` runs external diff/merge binaries; ``merge3``
            merges in-process.
        diff_command: Binary used for ``diff -N``.
        merge_command: RCS-style ``merge`` binary.
    """

    tool: Literal["command", "merge3"] = Field(
        default="command", description="Merge oracle"
    )
    diff_command: str = Field(default="diff", description="diff binary")
    merge_command: str = Field(default="merge", description="merge binary")

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
        format: ``text`` or ``json``.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")
    format: Literal["text", "json"] = Field(
        default="text", description="Log line format"
    )

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Every section has sensible defaults, so ``UnifiedConfig()``
    (zero-config) is always valid; it just knows no repositories.
    """

    name: str = Field(default="codesync", description="Project name")
    repositories: dict[str, RepositoryConfig] = Field(default_factory=dict)
    db: DbConfig = Field(default_factory=DbConfig)
    merge: MergeConfig = Field(default_factory=MergeConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Factory function
# ---------------------------------------------------------------------------


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Handles missing sections gracefully; anything absent gets defaults.

    Args:
        raw_data: Merged configuration dictionary.

    Returns:
        Validated ``UnifiedConfig`` instance.

    Raises:
        pydantic.ValidationError: If a section has invalid values.
    """
    if not raw_data:
        return UnifiedConfig()

    config = UnifiedConfig(**raw_data)
    logger.debug(
        "Configured %d repositories: %s",
        len(config.repositories),
        ", ".join(sorted(config.repositories)) or "(none)",
    )
    return config
