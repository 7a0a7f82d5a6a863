"""
File state manager — the session-scoped owner of every cached
:class:`FileState`.

One manager is created per editing session and handed to every component
that touches files.  Callers must hold :meth:`FileStateManager.exclusive`
while they read or mutate a state they obtained from it.
"""

from __future__ import annotations

import logging
import os
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from .errors import NotAFile, NotFound
from .file_state import FileState
from .fileio import read_text

logger = logging.getLogger(__name__)


def canonical_path(path: str) -> str:
    """Resolve *path* to its absolute, symlink-free form."""
    return os.path.realpath(os.path.expanduser(path))


class FileStateManager:
    """Cache of :class:`FileState` objects keyed by canonical path."""

    def __init__(self) -> None:
        self._states: dict[str, FileState] = {}
        self._lock = threading.RLock()

    @contextmanager
    def exclusive(self) -> Iterator["FileStateManager"]:
        """Hold the session lock for the duration of the ``with`` block."""
        with self._lock:
            yield self

    def open(self, path: str) -> FileState:
        """Return the state of *path*, rebuilding it if the disk has changed.

        Raises
        ------
        NotFound
            If *path* does not exist.
        NotAFile
            If *path* is not a regular file.
        IoFailure
            If the file cannot be read as UTF-8 text.
        """
        key = self._check_file(path)
        with self._lock:
            text = read_text(key)
            cached = self._states.get(key)
            if cached is not None and cached.full_content() == text:
                return cached
            if cached is not None:
                logger.info("[LIF] %s changed on disk; reloading with fresh identifiers", key)
            return self._load(key, text)

    def force_reload(self, path: str) -> FileState:
        """Rebuild the state of *path* from disk unconditionally."""
        key = self._check_file(path)
        with self._lock:
            return self._load(key, read_text(key))

    def get(self, path: str) -> Optional[FileState]:
        """Return the cached state of *path* without touching the disk."""
        with self._lock:
            return self._states.get(canonical_path(path))

    def invalidate(self, path: str) -> None:
        with self._lock:
            self._states.pop(canonical_path(path), None)

    def replace(self, state: FileState) -> None:
        """Install *state* as the cached entry for its path."""
        with self._lock:
            self._states[state.path] = state

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str):
            return False
        with self._lock:
            return canonical_path(path) in self._states

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _check_file(path: str) -> str:
        key = canonical_path(path)
        if not os.path.exists(key):
            raise NotFound(path)
        if not os.path.isfile(key):
            raise NotAFile(path)
        return key

    def _load(self, key: str, text: str) -> FileState:
        state = FileState.from_text(key, text)
        self._states[key] = state
        logger.debug("[LIF] Loaded %s (%d lines, hash %s)", key, len(state.lines), state.short_hash)
        return state
