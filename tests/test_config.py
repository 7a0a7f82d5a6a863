"""Tests for configuration loading."""

import pytest

from lif_patch.config import Config, load_config

_ENV_KEYS = [
    "LIF_ACCESSIBLE_PATHS", "LIF_DIFF_CONTEXT_LINES", "LIF_LOG_DIR",
    "LIF_METRICS_ENABLED", "LIF_METRICS_DIR", "LIF_COLOR_PREVIEWS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


class TestConfig:
    def test_defaults(self):
        cfg = Config()
        assert cfg.ACCESSIBLE_PATHS == ["."]
        assert cfg.DIFF_CONTEXT_LINES == 2
        assert cfg.LOG_DIR == ".lifpatch/logs"
        assert cfg.METRICS_ENABLED is False
        assert cfg.METRICS_DIR == ".lifpatch"
        assert cfg.COLOR_PREVIEWS is False

    def test_yaml_values(self):
        cfg = Config({
            "accessible_paths": ["src", "tests"],
            "diff_context_lines": 4,
            "metrics_enabled": True,
        })
        assert cfg.ACCESSIBLE_PATHS == ["src", "tests"]
        assert cfg.DIFF_CONTEXT_LINES == 4
        assert cfg.METRICS_ENABLED is True

    def test_env_overrides_yaml(self, monkeypatch):
        monkeypatch.setenv("LIF_ACCESSIBLE_PATHS", "a, b")
        monkeypatch.setenv("LIF_DIFF_CONTEXT_LINES", "0")
        monkeypatch.setenv("LIF_COLOR_PREVIEWS", "true")
        cfg = Config({"accessible_paths": ["src"], "diff_context_lines": 5})
        assert cfg.ACCESSIBLE_PATHS == ["a", "b"]
        assert cfg.DIFF_CONTEXT_LINES == 0
        assert cfg.COLOR_PREVIEWS is True

    def test_load_from_cwd(self, tmp_path):
        (tmp_path / ".lifpatch.yaml").write_text("diff_context_lines: 7\nlog_dir: logs\n")
        cfg = Config.load()
        assert cfg.DIFF_CONTEXT_LINES == 7
        assert cfg.LOG_DIR == "logs"

    def test_load_explicit_path(self, tmp_path):
        path = tmp_path / "custom.yml"
        path.write_text("metrics_dir: stats\n")
        assert load_config(str(path)).METRICS_DIR == "stats"

    def test_missing_explicit_path_uses_defaults(self, tmp_path):
        assert load_config(str(tmp_path / "nope.yaml")).DIFF_CONTEXT_LINES == 2

    def test_invalid_yaml_is_ignored(self, tmp_path):
        (tmp_path / ".lifpatch.yml").write_text("diff_context_lines: [unclosed\n")
        assert Config.load().DIFF_CONTEXT_LINES == 2
