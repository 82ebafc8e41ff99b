"""Append-only journal of resources created on Imgur."""

from __future__ import annotations

import fcntl
import os
from datetime import datetime
from enum import Enum
from pathlib import Path
from types import TracebackType
from typing import TextIO, final

SEPARATOR = "-" * 40


class JournalState(Enum):
    """Lifecycle of a journal within one run."""

    UNINITIALIZED = "uninitialized"
    OPEN = "open"
    FAILED = "failed"
    CLOSED = "closed"


def session_timestamp() -> str:
    """Local time with UTC offset, e.g. ``2024-05-01T13:37:00+02:00``."""
    return datetime.now().astimezone().isoformat(timespec="seconds")


@final
class Journal:
    """History log that is opened and locked on first write.

    Use as a context manager so the lock is released on every exit path::

        with Journal(config.journal_path) as journal:
            journal.write(image.history_line)

    The journal is best effort. If the file cannot be opened or locked,
    later writes are dropped without raising.
    """

    def __init__(self, journal_path: Path) -> None:
        """Initialize the journal without touching the filesystem.

        Args:
            journal_path: Path to the history log
        """
        self.journal_path: Path = journal_path
        self.state: JournalState = JournalState.UNINITIALIZED
        self.error: OSError | None = None
        self._handle: TextIO | None = None

    def _open(self) -> None:
        """Open, lock and write the session header."""
        handle: TextIO | None = None
        try:
            self.journal_path.parent.mkdir(parents=True, exist_ok=True)
            handle = self.journal_path.open("a", encoding="utf-8", buffering=1)
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
            _ = handle.seek(0, os.SEEK_END)
            _ = handle.write(f"{SEPARATOR}\n{session_timestamp()}\n")
            handle.flush()
        except OSError as e:
            if handle is not None:
                handle.close()
            self.error = e
            self.state = JournalState.FAILED
            return

        self._handle = handle
        self.state = JournalState.OPEN

    def write(self, *lines: str) -> None:
        """Append each line followed by a newline, in order.

        Args:
            *lines: Lines to append; must not contain newlines
        """
        if self.state is JournalState.UNINITIALIZED:
            self._open()
        if self._handle is None:
            return

        try:
            for line in lines:
                _ = self._handle.write(f"{line}\n")
            self._handle.flush()
        except OSError as e:
            self.error = e

    def close(self) -> None:
        """Release the lock and close the file. Safe to call more than once."""
        handle, self._handle = self._handle, None
        if handle is not None:
            try:
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
            finally:
                handle.close()
        if self.state is JournalState.OPEN:
            self.state = JournalState.CLOSED

    @property
    def is_open(self) -> bool:
        return self.state is JournalState.OPEN

    def __enter__(self) -> Journal:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
