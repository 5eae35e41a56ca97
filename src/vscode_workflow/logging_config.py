# =============================================================================
# Structured Logging Setup (JSONL format)
# =============================================================================
# stdout belongs to the launcher (script filter JSON or plain text), so every
# log record goes to stderr or the rotating file log.

import json
import sys
import traceback
from contextvars import ContextVar
from pathlib import Path
from uuid import uuid4

import platformdirs
from loguru import logger

APP_NAME = "vscode-workflow"

# Correlation ID for one launcher invocation
trace_id_var: ContextVar[str] = ContextVar('trace_id', default=None)


def json_sink(message):
    """JSONL sink - writes one record per line to stderr."""
    record = message.record
    log_entry = {
        "timestamp": record["time"].strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
        "level": record["level"].name.lower(),
        "component": record["function"],
        "operation": record["extra"].get("operation", "unknown"),
        "operation_status": record["extra"].get("status", None),
        "trace_id": record["extra"].get("trace_id") or trace_id_var.get(),
        "message": record["message"],
        "context": {k: v for k, v in record["extra"].items()
                   if k not in ("operation", "status", "trace_id", "metrics")},
        "metrics": record["extra"].get("metrics", {}),
        "error": None
    }

    if record["exception"]:
        exc_type, exc_value, exc_tb = record["exception"]
        tb_lines = []
        if exc_tb:
            tb_lines = traceback.format_tb(exc_tb)

        log_entry["error"] = {
            "type": exc_type.__name__ if exc_type else "Unknown",
            "message": str(exc_value) if exc_value else "Unknown error",
            "traceback_lines": tb_lines
        }

    sys.stderr.write(json.dumps(log_entry, default=str) + "\n")


def new_trace_id() -> str:
    """Start a new correlation ID for the current invocation."""
    trace_id = str(uuid4())
    trace_id_var.set(trace_id)
    return trace_id


def setup_logger(logging_config: dict | None = None):
    """
    Configure Loguru for machine-readable JSONL output.

    Args:
        logging_config: The ``[logging]`` table of the merged configuration
            (keys: level, file, file_level). Defaults apply when omitted.
    """
    logging_config = logging_config or {}
    logger.remove()

    # Console output (JSONL to stderr via custom sink)
    logger.add(
        json_sink,
        level=logging_config.get("level", "INFO")
    )

    if not logging_config.get("file", True):
        return logger

    # macOS: ~/Library/Logs/vscode-workflow/
    # Linux: ~/.local/state/vscode-workflow/log/
    try:
        log_dir = Path(platformdirs.user_log_dir(
            appname=APP_NAME,
            ensure_exists=True
        ))
    except OSError as e:
        logger.warning(
            "Log directory unavailable - file logging disabled",
            operation="setup_logger",
            status="fallback",
            error=str(e)
        )
        return logger

    logger.add(
        str(log_dir / "workflow.jsonl"),
        format="{message}",
        serialize=True,
        rotation="10 MB",
        retention="7 days",
        compression="gz",
        level=logging_config.get("file_level", "DEBUG")
    )

    return logger
