"""Persisted record of cross-repository equivalences and migrations.

Modules:

- ``models`` -- ``Equivalence``, ``SubmittedMigration``, ``DbStorage``.
- ``store``  -- ``FileDb``: symmetric lookup, dedup, atomic JSON writes.
- ``matchers`` -- ``EquivalenceMatcher``: walker matcher backed by a store.
"""

from .matchers import EquivalenceMatcher
from .models import DbStorage, Equivalence, SubmittedMigration
from .store import FileDb

__all__ = [
    "DbStorage",
    "Equivalence",
    "EquivalenceMatcher",
    "FileDb",
    "SubmittedMigration",
]
