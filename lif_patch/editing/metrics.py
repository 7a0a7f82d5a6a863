"""
Edit metrics — tracks batch-edit outcomes in a JSONL log file.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

DEFAULT_METRICS_DIR = ".lifpatch"
_METRICS_FILE = "edit_metrics.jsonl"


def metrics_path(project_root: str | None = None, metrics_dir: str = DEFAULT_METRICS_DIR) -> str:
    """Return the absolute path to the metrics file."""
    base = project_root or os.getcwd()
    return os.path.join(base, metrics_dir, _METRICS_FILE)


def log_edit_metric(
    data: dict,
    project_root: str | None = None,
    metrics_dir: str = DEFAULT_METRICS_DIR,
) -> None:
    """Append a single edit metric entry to the JSONL log.

    Parameters
    ----------
    data:
        Metric fields to log (files, operations, success, lines_added, ...).
    project_root:
        Optional project root directory. Defaults to CWD.
    metrics_dir:
        Directory under *project_root* that holds the log.
    """
    path = metrics_path(project_root, metrics_dir)
    entry = {"timestamp": datetime.now(timezone.utc).isoformat()}
    entry.update(data)

    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as exc:
        logger.warning("[Batch] Failed to write metrics: %s", exc)


def read_edit_stats(
    last_n: int = 50,
    project_root: str | None = None,
    metrics_dir: str = DEFAULT_METRICS_DIR,
) -> dict:
    """Compute rolling statistics from the metrics log.

    Returns
    -------
    dict
        ``total_edits``, ``success_rate`` (percent), ``avg_operations``,
        ``avg_lines_added``, ``avg_lines_removed`` and ``error_kinds``
        (percent of failed batches per error kind).
    """
    path = metrics_path(project_root, metrics_dir)

    entries: list[dict] = []
    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line:
                        try:
                            entries.append(json.loads(line))
                        except json.JSONDecodeError:
                            continue
        except OSError as exc:
            logger.warning("[Batch] Failed to read metrics: %s", exc)

    entries = entries[-last_n:]

    if not entries:
        return {
            "total_edits": 0,
            "success_rate": 0.0,
            "avg_operations": 0.0,
            "avg_lines_added": 0.0,
            "avg_lines_removed": 0.0,
            "error_kinds": {},
        }

    total = len(entries)
    successes = sum(1 for e in entries if e.get("success", False))
    failures = total - successes
    kinds = Counter(
        e.get("error_kind", "unknown") for e in entries if not e.get("success", False)
    )

    def _avg(field: str) -> float:
        return sum(e.get(field, 0) for e in entries) / total

    return {
        "total_edits": total,
        "success_rate": successes / total * 100,
        "avg_operations": _avg("operations"),
        "avg_lines_added": _avg("lines_added"),
        "avg_lines_removed": _avg("lines_removed"),
        "error_kinds": {
            kind: count / failures * 100
            for kind, count in kinds.most_common()
        },
    }
