"""Journal management module."""

from .journal import Journal, JournalState

__all__ = ["Journal", "JournalState"]
