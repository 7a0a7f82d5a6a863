"""
Logging setup — attaches a timestamped file handler to the package logger.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime

PACKAGE_LOGGER = "lif_patch"


def setup_logger(log_dir: str = ".lifpatch/logs") -> logging.Logger:
    """Creates a file logger. All verbose output goes here."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG)

    log_dir = os.path.abspath(log_dir)
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and \
                os.path.dirname(handler.baseFilename) == log_dir:
            return logger

    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"lifpatch_{timestamp}.log")

    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    return logger
