"""
Tests for configuration loading.
"""

import textwrap
from pathlib import Path

from vscode_workflow.config_loader import (
    DEFAULT_CONFIG,
    deep_merge,
    load_config,
    load_config_from_path,
)
from vscode_workflow.errors import ErrorType


def write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(textwrap.dedent(content))
    return path


class TestDeepMerge:
    def test_nested_override(self):
        merged = deep_merge({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}})
        assert merged == {"a": {"x": 1, "y": 3}, "b": 1}


class TestLoadConfigFromPath:
    def test_missing_file(self, tmp_path: Path):
        result = load_config_from_path(tmp_path / "none.toml")
        assert result.error.error_type is ErrorType.NOT_FOUND

    def test_merges_over_defaults(self, tmp_path: Path):
        path = write_config(tmp_path, """\
            [recent]
            cache_seconds = 10
            git_strategy = "shell"

            [installer]
            notify = true
        """)
        config = load_config_from_path(path).value
        assert config["recent"]["cache_seconds"] == 10
        assert config["recent"]["git_strategy"] == "shell"
        assert config["recent"]["git_concurrency"] == 8
        assert config["installer"]["notify"] is True
        assert config["marketplace"] == DEFAULT_CONFIG["marketplace"]

    def test_defaults_are_not_mutated(self, tmp_path: Path):
        path = write_config(tmp_path, "[recent]\ncache_seconds = 99\n")
        load_config_from_path(path)
        assert DEFAULT_CONFIG["recent"]["cache_seconds"] == 5

    def test_invalid_values_are_normalized(self, tmp_path: Path):
        path = write_config(tmp_path, """\
            [recent]
            git_strategy = "threads"
            git_concurrency = 0
        """)
        config = load_config_from_path(path).value
        assert config["recent"]["git_strategy"] == "tasks"
        assert config["recent"]["git_concurrency"] == 1

    def test_invalid_toml(self, tmp_path: Path):
        path = write_config(tmp_path, "[recent\ncache_seconds = 1\n")
        result = load_config_from_path(path)
        assert result.error.error_type is ErrorType.PARSE_ERROR
        assert result.error.context["line_number"] == 1


class TestLoadConfig:
    def test_env_override(self, tmp_path: Path, monkeypatch):
        path = write_config(tmp_path, "[marketplace]\ncache_seconds = 60\n")
        monkeypatch.setenv("VSCODE_WORKFLOW_CONFIG", str(path))
        assert load_config()["marketplace"]["cache_seconds"] == 60

    def test_broken_file_falls_back_to_defaults(self, tmp_path: Path, monkeypatch):
        path = write_config(tmp_path, "not = = toml")
        monkeypatch.setenv("VSCODE_WORKFLOW_CONFIG", str(path))
        assert load_config() == DEFAULT_CONFIG

    def test_missing_file_gives_defaults(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("VSCODE_WORKFLOW_CONFIG", str(tmp_path / "absent.toml"))
        assert load_config() == DEFAULT_CONFIG
