"""Tests for the edit_files tool."""

import pytest
from unittest.mock import patch

from lif_patch.editing.batch_executor import BatchEditExecutor
from lif_patch.editing.errors import (
    BatchCommitError,
    BatchValidationError,
    InvalidRequest,
    IoFailure,
)
from lif_patch.editing.file_state_manager import FileStateManager
from lif_patch.tools import EditFilesTool, ToolContext


@pytest.fixture
def ctx(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    manager = FileStateManager()
    return ToolContext(
        manager=manager,
        executor=BatchEditExecutor(manager),
        accessible_paths=[str(tmp_path)],
    )


@pytest.fixture
def tool():
    return EditFilesTool()


def _anchor(ctx, path, line_number):
    state = ctx.manager.open(path)
    lid = state.lines.at(line_number - 1)
    return {"lid": lid, "line_content": state.lines.get(lid)}


class TestEditFiles:
    def test_insert(self, tool, ctx, tmp_path):
        (tmp_path / "a.txt").write_text("line 1\nline 3")
        args = {
            "inserts": [{
                "file_path": "a.txt",
                "at_position": "after_anchor",
                "context_anchor": _anchor(ctx, "a.txt", 1),
                "new_content": ["line 2"],
            }],
            "replaces": [],
            "moves": [],
        }
        old_hash = ctx.manager.open("a.txt").short_hash

        out = tool.execute(args, ctx)

        new_hash = ctx.manager.open("a.txt").short_hash
        assert out.startswith(
            f"File: a.txt\nPatch from hash {old_hash} applied successfully. New hash: {new_hash}. Changes:\n"
        )
        assert (tmp_path / "a.txt").read_text() == "line 1\nline 2\nline 3"

    def test_validation_failure_is_reported(self, tool, ctx, tmp_path):
        (tmp_path / "a.txt").write_text("a\n")
        anchor = _anchor(ctx, "a.txt", 1)
        anchor["line_content"] = "WRONG"
        with pytest.raises(BatchValidationError) as exc_info:
            tool.execute({"replaces": [{
                "file_path": "a.txt",
                "anchor_range_begin": anchor,
                "anchor_range_end": anchor,
                "new_content": [],
            }]}, ctx)
        out = str(exc_info.value)
        assert out.startswith("Validation failed with 1 error(s):")
        assert "Expected content (from the request):\n  > WRONG" in out
        assert (tmp_path / "a.txt").read_text() == "a\n"

    def test_write_failure_names_the_file(self, tool, ctx, tmp_path):
        (tmp_path / "a.txt").write_text("a\n")
        args = {"inserts": [{
            "file_path": "a.txt", "at_position": "end_of_file",
            "context_anchor": None, "new_content": ["b"],
        }]}

        with patch(
            "lif_patch.editing.patch_engine.write_text_atomic",
            side_effect=IoFailure("a.txt", "disk full"),
        ):
            with pytest.raises(BatchCommitError) as exc_info:
                tool.execute(args, ctx)

        out = str(exc_info.value)
        assert out.startswith("File: a.txt\nError: ")
        assert "disk full" in out
        assert exc_info.value.kind == "io_failure"
        assert (tmp_path / "a.txt").read_text() == "a\n"

    def test_preview(self, tool, ctx, tmp_path):
        (tmp_path / "a.txt").write_text("a\n")
        out = tool.preview({"inserts": [{
            "file_path": "a.txt", "at_position": "end_of_file",
            "context_anchor": None, "new_content": ["b"],
        }]}, ctx)
        assert out.startswith("Edit 1 files:\na.txt (diff):\n```\n")
        assert (tmp_path / "a.txt").read_text() == "a\n"

    def test_preview_of_bad_request(self, tool, ctx, tmp_path):
        (tmp_path / "a.txt").write_text("a\n")
        with pytest.raises(BatchValidationError):
            tool.preview({"inserts": [{
                "file_path": "a.txt", "at_position": "after_anchor",
                "context_anchor": {"lid": "lid-zz", "line_content": "a"}, "new_content": ["b"],
            }]}, ctx)

    def test_malformed_arguments(self, tool, ctx):
        with pytest.raises(InvalidRequest):
            tool.execute({"inserts": [{"file_path": "a.txt"}]}, ctx)

    def test_auto_execute(self, tool, ctx):
        inside = {"moves": [{
            "source_file_path": "a.txt",
            "source_range_start_anchor": {"lid": "lid-V", "line_content": "a"},
            "source_range_end_anchor": {"lid": "lid-V", "line_content": "a"},
            "dest_file_path": "b.txt",
            "dest_at_position": "end_of_file",
            "dest_context_anchor": None,
        }]}
        assert tool.is_safe_for_auto_execute(inside, ctx)
        outside = dict(inside)
        outside["moves"] = [dict(inside["moves"][0], dest_file_path="/etc/elsewhere.txt")]
        assert not tool.is_safe_for_auto_execute(outside, ctx)
        assert not tool.is_safe_for_auto_execute({"inserts": "bad"}, ctx)

    def test_schema_lists_all_operations(self, tool):
        props = tool.schema()["parameters"]["properties"]
        assert set(props) == {"inserts", "replaces", "moves"}
