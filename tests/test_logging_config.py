"""
Tests for the JSONL logging setup.
"""

import json

import pytest
from loguru import logger

from vscode_workflow.logging_config import new_trace_id, setup_logger


@pytest.fixture
def restore_logger():
    yield
    logger.remove()
    logger.add(lambda message: None)


class TestSetupLogger:
    def test_jsonl_on_stderr(self, capsys, restore_logger):
        setup_logger({"level": "INFO", "file": False})
        trace_id = new_trace_id()

        logger.info("Recent projects listed", operation="list_recent_projects",
                    status="success", variant="VSCodium", metrics={"items": 3})
        logger.debug("hidden", operation="x")

        captured = capsys.readouterr()
        assert captured.out == ""
        lines = captured.err.strip().splitlines()
        assert len(lines) == 1

        record = json.loads(lines[0])
        assert record["level"] == "info"
        assert record["operation"] == "list_recent_projects"
        assert record["operation_status"] == "success"
        assert record["trace_id"] == trace_id
        assert record["context"] == {"variant": "VSCodium"}
        assert record["metrics"] == {"items": 3}

    def test_file_log_under_user_log_dir(self, tmp_path, monkeypatch, restore_logger):
        monkeypatch.setattr(
            "vscode_workflow.logging_config.platformdirs.user_log_dir",
            lambda appname, ensure_exists: str(tmp_path)
        )
        setup_logger({"level": "ERROR", "file": True, "file_level": "DEBUG"})
        logger.debug("to file", operation="test")
        logger.remove()

        content = (tmp_path / "workflow.jsonl").read_text()
        assert "to file" in content
