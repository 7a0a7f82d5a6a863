"""
Byte-faithful text I/O for LIF files.

Files are read and written as UTF-8 with newline translation disabled so
that ``\\r\\n`` and a missing final line break survive a load/save cycle.
"""

from __future__ import annotations

import logging
import os
import shutil

from .errors import IoFailure

logger = logging.getLogger(__name__)

_TMP_SUFFIX = ".lifpatch_tmp"


def read_text(path: str) -> str:
    """Read *path* exactly as stored on disk."""
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except UnicodeDecodeError as exc:
        raise IoFailure(path, f"not valid UTF-8 text ({exc.reason})") from exc
    except OSError as exc:
        raise IoFailure(path, exc.strerror or str(exc)) from exc


def write_text_atomic(path: str, content: str) -> None:
    """Write *content* to *path* atomically via temp file + rename."""
    abs_path = os.path.abspath(path)
    tmp_path = abs_path + _TMP_SUFFIX

    try:
        with open(tmp_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        if os.path.exists(abs_path):
            shutil.copymode(abs_path, tmp_path)
        os.replace(tmp_path, abs_path)
    except OSError as exc:
        logger.error("[LIF] Write failed for %s: %s", abs_path, exc)
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise IoFailure(abs_path, exc.strerror or str(exc)) from exc
