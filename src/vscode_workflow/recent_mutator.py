# =============================================================================
# Recent Projects Removal
# =============================================================================
# Destructive actions only run with an explicit action signal from a
# modifier key (ctrl = remove one, ctrl+shift = remove all). A bare default
# invocation with only a path never deletes anything.
#
# Both operations re-read the whole document, change the entries list in
# memory and write the whole document back.

from enum import Enum
from pathlib import Path

from loguru import logger

from .environment import home_dir
from .errors import Error, ErrorType, Result
from .recent_entries import entry_local_path
from .recent_store import read_recent_document, write_recent_document
from .variants import resolve_store_variant

REMOVE_ALL_ARG = "REMOVE_ALL"

MSG_NO_ACTION = "No action specified. Use Ctrl or Ctrl+Shift modifier."
MSG_NO_DATABASE = "VS Code database not found"
MSG_NO_PATH = "Error: No valid path provided"
MSG_READ_FAILED = "Could not read recent entries"
MSG_WRITE_FAILED = "Failed to update database"
MSG_NOT_FOUND = "Entry not found in recent list"
MSG_REMOVED_ONE = "Removed from recent projects"


class MutationAction(Enum):
    REMOVE_ONE = "0"
    REMOVE_ALL = "1"


def parse_action(value: str | None) -> MutationAction | None:
    """Map the launcher's action variable to a MutationAction."""
    if value is None:
        return None
    try:
        return MutationAction(value.strip())
    except ValueError:
        return None


def remove_entry(db_path: Path, target_path: str, timeout: float = 5.0) -> Result[int]:
    """
    Remove every entry whose local path equals ``target_path``.

    Returns:
        Result[int]: Ok with the number of entries removed; Err NOT_FOUND
        when nothing matched (the store is left untouched), or the read /
        write error
    """
    read_result = read_recent_document(db_path, timeout=timeout)
    if read_result.is_err():
        return read_result

    document = read_result.value
    entries = document["entries"]
    kept = [entry for entry in entries if entry_local_path(entry) != target_path]
    removed = len(entries) - len(kept)

    if removed == 0:
        logger.info(
            "Recent entry not found",
            operation="remove_entry",
            status="not_found",
            path=target_path
        )
        return Result.err(Error(
            error_type=ErrorType.NOT_FOUND,
            message=MSG_NOT_FOUND,
            context={"path": target_path}
        ))

    document["entries"] = kept
    write_result = write_recent_document(db_path, document, timeout=timeout)
    if write_result.is_err():
        return write_result

    logger.info(
        "Recent entry removed",
        operation="remove_entry",
        status="success",
        path=target_path,
        metrics={"removed": removed, "remaining": len(kept)}
    )
    return Result.ok(removed)


def remove_all_entries(db_path: Path, timeout: float = 5.0) -> Result[int]:
    """
    Clear the recently opened list.

    Returns:
        Result[int]: Ok with the number of entries that were removed
    """
    read_result = read_recent_document(db_path, timeout=timeout)
    if read_result.is_err():
        return read_result

    document = read_result.value
    count = len(document["entries"])
    document["entries"] = []

    write_result = write_recent_document(db_path, document, timeout=timeout)
    if write_result.is_err():
        return write_result

    logger.info(
        "All recent entries removed",
        operation="remove_all_entries",
        status="success",
        metrics={"removed": count}
    )
    return Result.ok(count)


def _failure_message(error: Error) -> str:
    if error.message == MSG_NOT_FOUND:
        return MSG_NOT_FOUND
    if error.context.get("stage") == "write":
        return MSG_WRITE_FAILED
    return MSG_READ_FAILED


def run_mutation(
    action: MutationAction | None,
    path: str | None = None,
    home: Path | None = None,
    timeout: float = 5.0,
) -> str:
    """
    Perform a removal and describe the outcome in one sentence.

    Args:
        action: Which removal to perform; None means no modifier was held
        path: Entry path for REMOVE_ONE
        home: Home directory (defaults to $HOME)
        timeout: SQLite lock timeout in seconds

    Returns:
        Human-readable result for the launcher
    """
    if action is None:
        return MSG_NO_ACTION

    variant = resolve_store_variant(home or home_dir())
    if variant is None:
        return MSG_NO_DATABASE
    db_path = variant.store_path(home or home_dir())

    if action is MutationAction.REMOVE_ONE:
        if not path or path == REMOVE_ALL_ARG:
            return MSG_NO_PATH
        result = remove_entry(db_path, path, timeout=timeout)
        if result.is_ok():
            return MSG_REMOVED_ONE
        return _failure_message(result.error)

    result = remove_all_entries(db_path, timeout=timeout)
    if result.is_ok():
        return f"Removed {result.value} recent projects"
    return _failure_message(result.error)
