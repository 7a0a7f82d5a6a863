"""
lif_patch — Line-Indexed File patching for model-driven file edits.

Public API for library usage::

    from lif_patch import EditSession

    with EditSession() as session:
        outcome = session.call("read_files", {"files": [{"file_path": "app.py"}]})
        print(outcome.text)
"""

from .config import Config, load_config
from .session import EditSession

__all__ = ["Config", "EditSession", "load_config"]
