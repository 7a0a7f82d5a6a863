"""Tests for the create_files tool."""

import pytest

from lif_patch.editing.batch_executor import BatchEditExecutor
from lif_patch.editing.errors import AccessDenied, InvalidRequest
from lif_patch.editing.file_state_manager import FileStateManager
from lif_patch.tools import CreateFilesTool, ToolContext


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
    return CreateFilesTool()


class TestCreateFiles:
    def test_creates_file(self, tool, ctx, tmp_path):
        out = tool.execute({"files": [{"file_path": "new.txt", "content": ["hello", "world"]}]}, ctx)

        assert (tmp_path / "new.txt").read_bytes() == b"hello\nworld"
        state = ctx.manager.get("new.txt")
        assert out.startswith("File: new.txt\nFile: new.txt | Hash: ")
        assert f"1    {state.lines.at(0)}: hello" in out
        assert f"2    {state.lines.at(1)}: world" in out

    def test_creates_parent_directories(self, tool, ctx, tmp_path):
        tool.execute({"files": [{"file_path": "pkg/sub/mod.py", "content": ["x = 1"]}]}, ctx)
        assert (tmp_path / "pkg" / "sub" / "mod.py").read_text() == "x = 1"

    def test_empty_content(self, tool, ctx, tmp_path):
        out = tool.execute({"files": [{"file_path": "empty.txt", "content": []}]}, ctx)
        assert (tmp_path / "empty.txt").read_bytes() == b""
        assert "[File is empty]" in out

    def test_existing_file_fails_whole_batch(self, tool, ctx, tmp_path):
        (tmp_path / "exists.txt").write_text("keep")
        with pytest.raises(InvalidRequest, match="already exists"):
            tool.execute({"files": [
                {"file_path": "first.txt", "content": ["a"]},
                {"file_path": "exists.txt", "content": ["b"]},
            ]}, ctx)
        assert not (tmp_path / "first.txt").exists()
        assert (tmp_path / "exists.txt").read_text() == "keep"

    def test_duplicate_paths(self, tool, ctx, tmp_path):
        with pytest.raises(InvalidRequest):
            tool.execute({"files": [
                {"file_path": "x.txt", "content": []},
                {"file_path": "./x.txt", "content": []},
            ]}, ctx)
        assert not (tmp_path / "x.txt").exists()

    def test_inaccessible_path(self, tool, ctx, tmp_path):
        outside = tmp_path.parent / "outside_create_test.txt"
        with pytest.raises(AccessDenied):
            tool.execute({"files": [{"file_path": str(outside), "content": []}]}, ctx)
        assert not outside.exists()

    def test_multiple_files(self, tool, ctx, tmp_path):
        out = tool.execute({"files": [
            {"file_path": "a.txt", "content": ["a"]},
            {"file_path": "b.txt", "content": ["b"]},
        ]}, ctx)
        assert out.count("\n\n---\n\n") == 1
        assert (tmp_path / "a.txt").exists() and (tmp_path / "b.txt").exists()

    def test_preview_writes_nothing(self, tool, ctx, tmp_path):
        out = tool.preview({"files": [{"file_path": "a.txt", "content": ["x"]}]}, ctx)
        assert out == "Create 1 file(s):\na.txt:\n```\n+ x\n```"
        assert not (tmp_path / "a.txt").exists()

    def test_no_files(self, tool, ctx):
        assert tool.execute({"files": []}, ctx) == "No files were specified for creation."
