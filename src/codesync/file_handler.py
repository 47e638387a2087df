"""File handler module: encoding-aware read/write, copies, temp directories.

Provides the file-system primitives the codebase merger needs.  All
functions are plain synchronous I/O.

Temporary directories are created with an explicit ``Lifetime``: the
caller states how long a directory should live and ``TempDirectories``
decides when it may be removed.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
from enum import Enum
from pathlib import Path

from charset_normalizer import from_bytes

logger = logging.getLogger(__name__)

# =============================================================================
# File Read/Write
# =============================================================================


def read_file_with_encoding(path: Path) -> tuple[str, str]:
    """Read a file with automatic encoding detection.

    Reads raw bytes first, then uses charset-normalizer to detect encoding.
    Defaults to UTF-8 for empty files or when detection fails.

    Args:
        path: Path to the file to read.

    Returns:
        Tuple of (content_string, detected_encoding).
    """
    raw = path.read_bytes()
    if not raw:
        return ("", "utf-8")

    result = from_bytes(raw).best()
    if result is None:
        # Detection failed, fall back to utf-8
        encoding = "utf-8"
        content = raw.decode(encoding, errors="replace")
    else:
        encoding = result.encoding
        # Normalize ascii to utf-8 (ascii is a strict subset of utf-8)
        if encoding == "ascii":
            encoding = "utf-8"
        content = str(result)
    return (content, encoding)


def write_file(
    path: Path, content: str, encoding: str = "utf-8"
) -> int:
    """Write content to a file, creating parent directories as needed.

    Returns:
        Number of bytes written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    encoded = content.encode(encoding)
    path.write_bytes(encoded)
    return len(encoded)


def copy_file(src: Path, dest: Path) -> None:
    """Copy *src* to *dest*, creating parent directories as needed.

    Permission bits are copied along with the content.
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dest)


def find_files(root: Path) -> list[Path]:
    """Return every regular file under *root*, sorted."""
    return sorted(p for p in root.rglob("*") if p.is_file())


# =============================================================================
# Executable bits
# =============================================================================


def is_executable(path: Path) -> bool:
    """Return ``True`` if *path* exists and has any execute bit set."""
    try:
        mode = path.stat().st_mode
    except FileNotFoundError:
        return False
    return bool(mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))


def set_executable(path: Path) -> None:
    """Add execute permission wherever read permission is granted."""
    mode = path.stat().st_mode
    # Mirror each read bit into the matching execute bit.
    path.chmod(mode | ((mode & 0o444) >> 2))


# =============================================================================
# Temporary directories
# =============================================================================


class Lifetime(str, Enum):
    """How long a temporary directory should outlive the work that made it."""

    TASK = "task"
    PROCESS = "process"
    PERSISTENT = "persistent"


class TempDirectories:
    """Create temporary directories and remove them by lifetime.

    Args:
        base_dir: Parent for all created directories.  The system temp
            directory when omitted.
    """

    def __init__(self, base_dir: Path | None = None) -> None:
        self.base_dir = base_dir
        self._created: dict[Lifetime, list[Path]] = {
            lifetime: [] for lifetime in Lifetime
        }

    def create(self, prefix: str, lifetime: Lifetime = Lifetime.TASK) -> Path:
        """Create and return a new directory named ``<prefix><random>``."""
        if self.base_dir is not None:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        path = Path(
            tempfile.mkdtemp(
                prefix=prefix,
                dir=str(self.base_dir) if self.base_dir else None,
            )
        )
        self._created[lifetime].append(path)
        logger.debug("Created %s directory %s", lifetime.value, path)
        return path

    def cleanup(self, lifetime: Lifetime) -> int:
        """Remove every directory created with *lifetime*.

        Persistent directories are never removed.

        Returns:
            Number of directories removed.
        """
        if lifetime is Lifetime.PERSISTENT:
            return 0
        removed = 0
        for path in self._created[lifetime]:
            if path.exists():
                shutil.rmtree(path)
                removed += 1
        self._created[lifetime] = []
        return removed


def relative_files(root: Path) -> set[str]:
    """Return the POSIX-style paths of every file under *root*, relative to it."""
    return {p.relative_to(root).as_posix() for p in find_files(root)}


def devnull() -> Path:
    """Path standing in for an absent file when calling diff/merge tools."""
    return Path(os.devnull)
