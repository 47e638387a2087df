"""Revision history: value types, matchers, and the graph walker.

Modules:

- ``models``   -- ``Revision``, ``RevisionMetadata``, ``concatenate_metadata``.
- ``matchers`` -- ``RevisionMatcher`` protocol consulted by the walker.
- ``walker``   -- ``RevisionHistory``: head lookup, revisions since the
  last equivalence, and the last equivalence itself.
- ``git``      -- ``GitRevisionHistory`` (``git log``).
- ``svn``      -- ``SvnRevisionHistory`` (``svn log --xml``).
- ``metadata`` -- ``determine_metadata`` and metadata scrubbers.
"""

from .git import GitRevisionHistory
from .matchers import RevisionMatcher
from .models import Revision, RevisionMetadata, concatenate_metadata
from .svn import SvnRevisionHistory
from .walker import RevisionHistory

__all__ = [
    "GitRevisionHistory",
    "Revision",
    "RevisionHistory",
    "RevisionMatcher",
    "RevisionMetadata",
    "SvnRevisionHistory",
    "concatenate_metadata",
]
