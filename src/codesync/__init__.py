"""codesync: keep independently-evolving repositories in sync.

Tracks which revisions of two repositories hold equivalent content,
walks revision history to find what still needs migrating, and
three-way merges codebase snapshots when a destination has diverged.
"""

__version__ = "0.3.0"
