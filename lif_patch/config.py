"""
Configuration — loads settings from .lifpatch.yaml, environment variables,
and built-in defaults (in that priority order: env > YAML > defaults).
"""

import os

import yaml


_DEFAULTS = {
    "accessible_paths": ["."],
    "diff_context_lines": 2,
    "log_dir": ".lifpatch/logs",
    "metrics_enabled": False,
    "metrics_dir": ".lifpatch",
    "color_previews": False,
}

# Config file search locations
_CONFIG_FILENAMES = [".lifpatch.yaml", ".lifpatch.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


def _split_paths(value) -> list[str]:
    if isinstance(value, str):
        return [p.strip() for p in value.split(",") if p.strip()]
    if isinstance(value, (list, tuple)):
        return [str(p) for p in value]
    return list(_DEFAULTS["accessible_paths"])


class Config:
    """Editing session configuration.

    Settings are resolved in priority order:
    1. Environment variables (``LIF_*``)
    2. .lifpatch.yaml config file
    3. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(env_key: str, yaml_key: str, default, cast=str):
            env_val = os.getenv(env_key)
            if env_val is not None:
                return cast(env_val)
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return cast(yaml_val)
            return default

        def _get_bool(env_key: str, yaml_key: str, default: bool) -> bool:
            env_val = os.getenv(env_key)
            if env_val is not None:
                return env_val.lower() == "true"
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return bool(yaml_val)
            return default

        self.ACCESSIBLE_PATHS: list[str] = _get(
            "LIF_ACCESSIBLE_PATHS", "accessible_paths",
            list(_DEFAULTS["accessible_paths"]), cast=_split_paths)
        self.DIFF_CONTEXT_LINES = _get("LIF_DIFF_CONTEXT_LINES", "diff_context_lines",
                                       _DEFAULTS["diff_context_lines"], cast=int)
        self.LOG_DIR = _get("LIF_LOG_DIR", "log_dir", _DEFAULTS["log_dir"])

        # Edit metrics (JSONL under METRICS_DIR)
        self.METRICS_ENABLED = _get_bool("LIF_METRICS_ENABLED", "metrics_enabled",
                                         _DEFAULTS["metrics_enabled"])
        self.METRICS_DIR = _get("LIF_METRICS_DIR", "metrics_dir",
                                _DEFAULTS["metrics_dir"])

        self.COLOR_PREVIEWS = _get_bool("LIF_COLOR_PREVIEWS", "color_previews",
                                        _DEFAULTS["color_previews"])

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)


def load_config(config_path: str | None = None) -> Config:
    return Config.load(config_path)
