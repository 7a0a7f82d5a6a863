"""
Path accessibility — the single yes/no policy deciding which files the
editing tools may read, create or modify.
"""

from __future__ import annotations

import os


def _resolve(path: str) -> str:
    """Canonical form of *path*, judged by its nearest existing ancestor."""
    target = os.path.abspath(os.path.expanduser(path))
    while not os.path.exists(target):
        parent = os.path.dirname(target)
        if parent == target:
            break
        target = parent
    return os.path.realpath(target)


def is_path_accessible(path: str, accessible_paths: list[str]) -> bool:
    """Return True if *path* lies inside one of *accessible_paths*.

    A path that does not exist yet (a file about to be created, possibly in
    new directories) is judged by its nearest existing ancestor.
    """
    resolved = _resolve(path)

    for root in accessible_paths:
        root_path = os.path.realpath(os.path.expanduser(root))
        if not os.path.isdir(root_path):
            continue
        if resolved == root_path or resolved.startswith(root_path.rstrip(os.sep) + os.sep):
            return True
    return False
