# =============================================================================
# Subprocess Helpers
# =============================================================================

import shlex
import subprocess

from loguru import logger

from .errors import Error, ErrorType, Result


def run_command(
    args: list[str],
    timeout: float | None = None,
    merge_stderr: bool = False,
    operation: str = "run_command",
) -> Result[str]:
    """
    Run a command without a shell and capture its output.

    Args:
        args: Argument vector; never joined into a shell string
        timeout: Seconds before the process is killed (None = unbounded)
        merge_stderr: Capture stderr into the same stream as stdout
        operation: Operation name for log records

    Returns:
        Result[str]: Ok with the decoded output, or Err when the process
        could not start, timed out, or exited non-zero
    """
    display_cmd = shlex.join(args)
    try:
        result = subprocess.run(
            args,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
            text=True,
            timeout=timeout,
            check=False
        )
    except subprocess.TimeoutExpired as e:
        logger.error(
            "Command timed out",
            operation=operation,
            status="timeout",
            command=display_cmd,
            timeout=timeout
        )
        return Result.err(Error(
            error_type=ErrorType.TIMEOUT_ERROR,
            message=f"Command timed out after {timeout}s",
            context={"command": display_cmd},
            original_exception=e
        ))
    except OSError as e:
        logger.error(
            "Command could not be started",
            operation=operation,
            status="failed",
            command=display_cmd,
            error=str(e)
        )
        return Result.err(Error(
            error_type=ErrorType.TRANSPORT_ERROR,
            message=str(e),
            context={"command": display_cmd},
            original_exception=e
        ))

    output = result.stdout or ""
    if result.returncode != 0:
        stderr = output if merge_stderr else (result.stderr or "")
        logger.warning(
            "Command exited with non-zero status",
            operation=operation,
            status="failed",
            command=display_cmd,
            returncode=result.returncode,
            stderr=stderr[:500] if stderr else None
        )
        return Result.err(Error(
            error_type=ErrorType.TRANSPORT_ERROR,
            message=stderr.strip() or f"Exit status {result.returncode}",
            context={"command": display_cmd, "returncode": result.returncode}
        ))

    logger.debug(
        "Command completed",
        operation=operation,
        status="success",
        command=display_cmd
    )
    return Result.ok(output)


def run_osascript(script: str, timeout: float = 30, operation: str = "run_osascript") -> Result[str]:
    """Run an AppleScript snippet through osascript."""
    return run_command(["osascript", "-e", script], timeout=timeout, operation=operation)


def applescript_string(value: str) -> str:
    """Quote a Python string as an AppleScript string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
