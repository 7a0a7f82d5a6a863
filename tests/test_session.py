"""Tests for EditSession wiring and logging setup."""

import logging
import os

import pytest

from lif_patch import EditSession
from lif_patch.config import Config
from lif_patch.editing.metrics import read_edit_stats
from lif_patch.log_setup import PACKAGE_LOGGER, setup_logger


@pytest.fixture
def config(tmp_path):
    cfg = Config()
    cfg.ACCESSIBLE_PATHS = [str(tmp_path)]
    cfg.LOG_DIR = str(tmp_path / "logs")
    return cfg


@pytest.fixture(autouse=True)
def detach_file_handlers():
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            logger.removeHandler(handler)
            handler.close()


class TestEditSession:
    def test_round_trip(self, config, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with EditSession(config, setup_logging=False) as session:
            assert {s["name"] for s in session.tool_schemas()} == {
                "read_files", "create_files", "edit_files",
            }
            created = session.call("create_files", {"files": [{"file_path": "a.py", "content": ["a = 1"]}]})
            assert created.success

            lid = session.manager.get("a.py").lines.at(0)
            edited = session.call("edit_files", {"replaces": [{
                "file_path": "a.py",
                "anchor_range_begin": {"lid": lid, "line_content": "a = 1"},
                "anchor_range_end": {"lid": lid, "line_content": "a = 1"},
                "new_content": ["a = 2"],
            }]})
            assert edited.success
        assert (tmp_path / "a.py").read_text() == "a = 2"

    def test_executor_respects_accessible_paths(self, config, tmp_path):
        inner = tmp_path / "inner"
        inner.mkdir()
        (tmp_path / "outside.txt").write_text("x\n")
        config.ACCESSIBLE_PATHS = [str(inner)]
        with EditSession(config, setup_logging=False) as session:
            outcome = session.call("edit_files", {"inserts": [{
                "file_path": str(tmp_path / "outside.txt"),
                "at_position": "end_of_file",
                "context_anchor": None,
                "new_content": ["y"],
            }]})
        assert outcome.success is False
        assert outcome.error_kind == "batch_validation"
        assert "not allowed" in outcome.error
        assert (tmp_path / "outside.txt").read_text() == "x\n"

    def test_context_lines_from_config(self, config):
        config.DIFF_CONTEXT_LINES = 5
        with EditSession(config, setup_logging=False) as session:
            assert session.engine.context_lines == 5

    def test_metrics_written_under_project_root(self, config, tmp_path):
        config.METRICS_ENABLED = True
        (tmp_path / "a.txt").write_text("a\n")
        with EditSession(config, project_root=str(tmp_path), setup_logging=False) as session:
            session.call("edit_files", {"inserts": [{
                "file_path": str(tmp_path / "a.txt"),
                "at_position": "end_of_file",
                "context_anchor": None,
                "new_content": ["b"],
            }]})
        assert read_edit_stats(project_root=str(tmp_path))["total_edits"] == 1

    def test_logging_setup(self, config, tmp_path):
        with EditSession(config):
            pass
        assert os.listdir(tmp_path / "logs")


class TestSetupLogger:
    def test_single_handler_per_directory(self, tmp_path):
        logger = setup_logger(str(tmp_path / "logs"))
        setup_logger(str(tmp_path / "logs"))
        handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
        assert len(handlers) == 1
        assert handlers[0].baseFilename.startswith(str(tmp_path / "logs"))
