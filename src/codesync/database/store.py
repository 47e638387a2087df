"""Equivalence store persistence layer.

``FileDb`` holds every known equivalence and submitted migration for a
project in memory, backed by a single JSON file.

Key design choices:

* **Whole-file rewrite** -- each invocation loads the full file, mutates
  the in-memory aggregate, and writes the full file back.  There is no
  locking; two concurrent invocations against the same path can lose
  each other's updates (last writer wins).
* **Atomic writes** -- ``write_to_location()`` writes to a temp file in
  the target directory then calls ``os.replace()`` so readers never see
  partial data.
* **Strict loading** -- a file that is not JSON or does not match the
  ``DbStorage`` schema raises ``SyncProblem``; it is never repaired or
  ignored.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from codesync.core.errors import SyncProblem
from codesync.database.models import (
    DbStorage,
    Equivalence,
    SubmittedMigration,
)
from codesync.history.models import Revision

logger = logging.getLogger(__name__)


class FileDb:
    """Load, query, mutate and save an equivalence store.

    Args:
        storage: The aggregate to wrap.  A fresh empty one when omitted.
        location: Path the store was loaded from, used by ``save()``.
    """

    def __init__(
        self,
        storage: DbStorage | None = None,
        location: Path | None = None,
    ) -> None:
        self._storage = storage if storage is not None else DbStorage()
        self.location = location

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_text(cls, text: str, location: Path | None = None) -> FileDb:
        """Parse a store from its JSON text.

        Raises:
            SyncProblem: If *text* is not a valid store.
        """
        where = str(location) if location else "<text>"
        try:
            storage = DbStorage.model_validate_json(text)
        except ValidationError as exc:
            raise SyncProblem(
                f"Could not parse equivalence store {where}: {exc}"
            ) from exc
        return cls(storage, location)

    @classmethod
    def load(cls, path: str | Path) -> FileDb:
        """Load a store from *path*.

        Raises:
            SyncProblem: If the file cannot be read or is malformed.
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SyncProblem(
                f"Could not read equivalence store {path}: {exc}"
            ) from exc
        db = cls.from_text(text, path)
        logger.info(
            "Loaded %d equivalences and %d migrations from %s",
            len(db.equivalences),
            len(db.migrations),
            path,
        )
        return db

    @classmethod
    def load_or_create(cls, path: str | Path) -> FileDb:
        """Load *path* if it exists, else return an empty store bound to it."""
        path = Path(path)
        if not path.exists():
            logger.info("No equivalence store at %s, starting empty", path)
            return cls(location=path)
        return cls.load(path)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def equivalences(self) -> list[Equivalence]:
        return list(self._storage.equivalences)

    @property
    def migrations(self) -> list[SubmittedMigration]:
        return list(self._storage.migrations)

    def find_equivalences(
        self, revision: Revision, other_repository: str
    ) -> set[Revision]:
        """Return every revision in *other_repository* equivalent to *revision*.

        The lookup is symmetric: *revision* may sit on either side of a
        stored pair.
        """
        found: set[Revision] = set()
        for eq in self._storage.equivalences:
            other = eq.other_revision(revision)
            if other is not None and other.repository_name == other_repository:
                found.add(other)
        return found

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def note_equivalence(self, equivalence: Equivalence) -> None:
        """Record *equivalence*.

        Not deduplicated: noting a known pair again stores a redundant
        entry.  Lookups are unaffected.
        """
        self._storage.equivalences.append(equivalence)

    def note_migration(self, migration: SubmittedMigration) -> bool:
        """Record *migration* unless an equal record exists.

        Returns:
            ``True`` if the record was inserted, ``False`` if it was
            already present.
        """
        if migration in self._storage.migrations:
            return False
        self._storage.migrations.append(migration)
        return True

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_text(self) -> str:
        """Serialise the whole store as indented JSON."""
        return json.dumps(
            self._storage.model_dump(mode="json", by_alias=True),
            indent=2,
        )

    def write_to_location(self, path: str | Path) -> None:
        """Persist the store to *path* atomically.

        Writes to a temporary file in the same directory then atomically
        replaces the target.  Creates the parent directory if needed.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(
            dir=str(target.parent), prefix=".db-", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(self.to_text())
                fh.write("\n")
            os.replace(tmp_path, target)
        except BaseException:
            # Clean up temp file on any failure.
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
        logger.info(
            "Wrote %d equivalences and %d migrations to %s",
            len(self._storage.equivalences),
            len(self._storage.migrations),
            target,
        )

    def save(self) -> None:
        """Write the store back to the location it was loaded from."""
        if self.location is None:
            raise ValueError("Store has no location; use write_to_location()")
        self.write_to_location(self.location)
