"""Tests for the serial ToolWorker."""

import threading

import pytest

from lif_patch.editing.batch_executor import BatchEditExecutor
from lif_patch.editing.file_state_manager import FileStateManager
from lif_patch.tools import Tool, ToolContext, ToolWorker, build_tools


class _RecordingTool(Tool):
    """Records which thread ran each call and whether the lock was held."""

    name = "record"

    def __init__(self):
        self.calls = []

    def schema(self):
        return {"name": self.name}

    def preview(self, args, ctx):
        return "preview"

    def execute(self, args, ctx):
        self.calls.append(threading.current_thread().name)
        return f"ran {args['n']}"

    def is_safe_for_auto_execute(self, args, ctx):
        return True


@pytest.fixture
def ctx(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    manager = FileStateManager()
    return ToolContext(
        manager=manager,
        executor=BatchEditExecutor(manager),
        accessible_paths=[str(tmp_path)],
    )


class TestBuildTools:
    def test_registered_tools(self):
        assert set(build_tools()) == {"read_files", "create_files", "edit_files"}


class TestToolWorker:
    def test_runs_on_dedicated_thread(self, ctx):
        tool = _RecordingTool()
        with ToolWorker({"record": tool}, ctx) as worker:
            futures = [worker.submit("record", {"n": i}) for i in range(5)]
            outcomes = [f.result() for f in futures]

        assert [o.output for o in outcomes] == [f"ran {i}" for i in range(5)]
        assert len(set(tool.calls)) == 1
        assert tool.calls[0].startswith("lif-tools")

    def test_error_becomes_outcome(self, ctx):
        with ToolWorker(build_tools(), ctx) as worker:
            outcome = worker.run("read_files", {"files": [{"file_path": "/etc/passwd"}]})
        assert outcome.success is False
        assert outcome.error_kind == "access_denied"
        assert outcome.text.startswith("Error: Operation on path '/etc/passwd' is not allowed.")

    def test_unknown_tool(self, ctx):
        with ToolWorker(build_tools(), ctx) as worker:
            outcome = worker.run("delete_everything", {})
            assert outcome.success is False
            assert outcome.error_kind == "unknown_tool"
            assert worker.is_safe_for_auto_execute("delete_everything", {}) is False

    def test_create_then_edit(self, ctx, tmp_path):
        with ToolWorker(build_tools(), ctx) as worker:
            created = worker.run("create_files", {"files": [{"file_path": "a.txt", "content": ["x"]}]})
            assert created.success, created.error

            state = ctx.manager.get("a.txt")
            lid = state.lines.at(0)
            edited = worker.run("edit_files", {"inserts": [{
                "file_path": "a.txt",
                "at_position": "after_anchor",
                "context_anchor": {"lid": lid, "line_content": "x"},
                "new_content": ["y"],
            }]})
            assert edited.success
            assert "Patch from hash" in edited.output

            read = worker.run("read_files", {"files": [{"file_path": "a.txt"}]})
            assert read.output.endswith(": y")

        assert (tmp_path / "a.txt").read_text() == "x\ny"

    def test_preview(self, ctx, tmp_path):
        (tmp_path / "a.txt").write_text("a")
        with ToolWorker(build_tools(), ctx) as worker:
            outcome = worker.preview("read_files", {"files": [{"file_path": "a.txt"}]})
        assert outcome.success
        assert outcome.output.startswith("Read 1 file(s):")
