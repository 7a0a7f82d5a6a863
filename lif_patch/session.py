"""
Editing session — wires configuration, the file state manager, the patch
engine, the batch executor and the tool worker together.

One :class:`EditSession` is created per agent conversation and owns all
cached file states for its lifetime.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from .config import Config
from .editing.batch_executor import BatchEditExecutor
from .editing.file_state_manager import FileStateManager
from .editing.patch_engine import PatchEngine
from .log_setup import setup_logger
from .permissions import is_path_accessible
from .tools import ToolContext, ToolOutcome, ToolWorker, build_tools

logger = logging.getLogger(__name__)


class EditSession:
    """Per-conversation editing session.

    Parameters
    ----------
    config:
        Settings; loaded with :meth:`Config.load` when omitted.
    project_root:
        Directory metrics are written under.  Defaults to CWD.
    setup_logging:
        Attach the file log handler from ``config.LOG_DIR``.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        project_root: Optional[str] = None,
        setup_logging: bool = True,
    ) -> None:
        self.config = config or Config.load()
        self.project_root = os.path.abspath(project_root or os.getcwd())
        if setup_logging:
            setup_logger(self.config.LOG_DIR)

        self.manager = FileStateManager()
        self.engine = PatchEngine(context_lines=self.config.DIFF_CONTEXT_LINES)
        self.executor = BatchEditExecutor(
            self.manager,
            self.engine,
            path_allowed=self.is_accessible,
            color_previews=self.config.COLOR_PREVIEWS,
            metrics_enabled=self.config.METRICS_ENABLED,
            metrics_root=self.project_root,
            metrics_dir=self.config.METRICS_DIR,
        )
        self.context = ToolContext(
            manager=self.manager,
            executor=self.executor,
            accessible_paths=list(self.config.ACCESSIBLE_PATHS),
        )
        self.tools = build_tools()
        self.worker = ToolWorker(self.tools, self.context)
        logger.info("[LIF] Session started (root=%s, accessible=%s)",
                    self.project_root, self.config.ACCESSIBLE_PATHS)

    def is_accessible(self, path: str) -> bool:
        return is_path_accessible(path, self.config.ACCESSIBLE_PATHS)

    def tool_schemas(self) -> list[dict]:
        return [tool.schema() for tool in self.tools.values()]

    def call(self, name: str, args: dict) -> ToolOutcome:
        """Execute one tool call on the session worker."""
        return self.worker.run(name, args)

    def preview(self, name: str, args: dict) -> ToolOutcome:
        return self.worker.preview(name, args)

    def close(self) -> None:
        self.worker.shutdown()

    def __enter__(self) -> "EditSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
