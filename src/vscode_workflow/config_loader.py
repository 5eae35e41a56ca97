# =============================================================================
# Configuration Loading
# =============================================================================

import copy
import os
import re
import time
import tomllib
from pathlib import Path

from loguru import logger

from .errors import Error, ErrorType, Result

CONFIG_DIR = Path("~/.config/vscode-workflow").expanduser()
CONFIG_PATH = CONFIG_DIR / "config.toml"
CONFIG_ENV_VAR = "VSCODE_WORKFLOW_CONFIG"

GIT_STRATEGIES = ("tasks", "shell")

# Default configuration - every key the workflow reads has a value here
DEFAULT_CONFIG = {
    "recent": {
        "cache_seconds": 5,
        "git_strategy": "tasks",
        "git_concurrency": 8,
        "store_timeout": 5.0,
    },
    "marketplace": {
        "cache_seconds": 5,
    },
    "installed": {
        "cache_seconds": 30,
    },
    "installer": {
        "notify": False,
        "timeout": 300,
    },
    "logging": {
        "level": "INFO",
        "file": True,
        "file_level": "DEBUG",
    },
}


def get_config_path() -> Path:
    """Config file location, honouring the VSCODE_WORKFLOW_CONFIG override."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return CONFIG_PATH


def extract_toml_error_context(error: tomllib.TOMLDecodeError, file_path: Path) -> dict:
    """
    Extract line context from TOML parse error.

    Args:
        error: The TOMLDecodeError exception
        file_path: Path to the TOML file

    Returns:
        Dict with line_number, line_content, and formatted_message
    """
    error_str = str(error)
    line_number = None
    line_content = None

    # Common formats: "line 15", "at line 15", "(line 15)"
    line_match = re.search(r'line\s+(\d+)', error_str, re.IGNORECASE)
    if line_match:
        line_number = int(line_match.group(1))

    if line_number and file_path.exists():
        try:
            with open(file_path, "r") as f:
                lines = f.readlines()
                if 0 < line_number <= len(lines):
                    line_content = lines[line_number - 1].rstrip()
        except OSError:
            pass

    if line_number:
        formatted = f"Error on line {line_number}"
        if line_content:
            display_line = line_content[:50] + "..." if len(line_content) > 50 else line_content
            formatted += f": {display_line}"
        formatted += f"\n\nDetails: {error_str}"
    else:
        formatted = f"TOML parse error: {error_str}"

    return {
        "line_number": line_number,
        "line_content": line_content,
        "formatted_message": formatted,
        "raw_error": error_str
    }


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dictionary."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _normalize(config: dict) -> dict:
    """Coerce values the workflow depends on back into their valid ranges."""
    recent = config["recent"]
    if recent.get("git_strategy") not in GIT_STRATEGIES:
        logger.warning(
            "Unknown git_strategy - using tasks",
            operation="load_config",
            status="fallback",
            configured=recent.get("git_strategy")
        )
        recent["git_strategy"] = "tasks"

    try:
        recent["git_concurrency"] = max(1, int(recent["git_concurrency"]))
    except (TypeError, ValueError):
        recent["git_concurrency"] = DEFAULT_CONFIG["recent"]["git_concurrency"]

    return config


def load_config_from_path(config_path: Path) -> Result[dict]:
    """
    Load configuration from a TOML file merged over the defaults.

    Args:
        config_path: Path to the config TOML file

    Returns:
        Result[dict]: Ok with merged config, or Err with error details
    """
    start_time = time.perf_counter()

    if not config_path.exists():
        return Result.err(Error(
            error_type=ErrorType.NOT_FOUND,
            message=f"Config file not found: {config_path}",
            context={"config_path": str(config_path)}
        ))

    try:
        with open(config_path, "rb") as f:
            user_config = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        error_context = extract_toml_error_context(e, config_path)
        logger.error(
            "Invalid TOML syntax in configuration file",
            operation="load_config_from_path",
            status="failed",
            file=str(config_path),
            line_number=error_context["line_number"],
            line_content=error_context["line_content"],
            error=error_context["formatted_message"]
        )
        return Result.err(Error(
            error_type=ErrorType.PARSE_ERROR,
            message=error_context["formatted_message"],
            context={"config_path": str(config_path), "line_number": error_context["line_number"]},
            original_exception=e
        ))
    except OSError as e:
        logger.error(
            "Could not read configuration file",
            operation="load_config_from_path",
            status="failed",
            file=str(config_path),
            error=str(e)
        )
        return Result.err(Error(
            error_type=ErrorType.PERMISSION_ERROR,
            message=f"Could not read config file: {e}",
            context={"config_path": str(config_path)},
            original_exception=e
        ))

    merged = _normalize(deep_merge(copy.deepcopy(DEFAULT_CONFIG), user_config))
    duration_ms = int((time.perf_counter() - start_time) * 1000)

    logger.debug(
        "Config loaded successfully",
        operation="load_config_from_path",
        status="success",
        config_path=str(config_path),
        metrics={"duration_ms": duration_ms}
    )

    return Result.ok(merged)


def load_config() -> dict:
    """
    Load the workflow configuration, falling back to defaults.

    A missing file is normal; an unreadable or invalid one is logged by
    load_config_from_path() and otherwise ignored.
    """
    result = load_config_from_path(get_config_path())
    if result.is_ok():
        return result.value
    return copy.deepcopy(DEFAULT_CONFIG)
