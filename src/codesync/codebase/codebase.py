"""A codebase: a materialised file tree for one revision's content."""

from __future__ import annotations

from pathlib import Path

from codesync.file_handler import relative_files


class Codebase:
    """A snapshot directory, viewed as a set of relative file paths.

    Args:
        path: Root directory of the snapshot.
        description: Human-readable origin (e.g. ``internal{1002}``) used
            in logs and reports.
    """

    def __init__(self, path: str | Path, description: str = "") -> None:
        self.path = Path(path)
        self.description = description or str(self.path)

    def __repr__(self) -> str:
        return f"Codebase({self.description!r}, path={str(self.path)!r})"

    def relative_filenames(self) -> set[str]:
        """Return every file under the root as a POSIX relative path.

        A root that does not exist is treated as an empty codebase.
        """
        if not self.path.is_dir():
            return set()
        return relative_files(self.path)

    def get_file(self, relative_filename: str) -> Path:
        """Return where *relative_filename* lives (or would live) in this codebase."""
        return self.path / relative_filename
