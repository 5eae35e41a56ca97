# =============================================================================
# Recent Projects Store (state.vscdb)
# =============================================================================
# VS Code keeps its recently opened list as one JSON document in the
# ItemTable of an SQLite database. Reads and writes are whole-document:
# every field of every entry that is not being removed must survive.

import json
import sqlite3
from pathlib import Path

from loguru import logger

from .errors import Error, ErrorType, Result

RECENT_KEY = "history.recentlyOpenedPathsList"
SELECT_SQL = "SELECT value FROM ItemTable WHERE key = ?"
UPDATE_SQL = "UPDATE ItemTable SET value = ? WHERE key = ?"


def _connect(db_path: Path, timeout: float, read_only: bool) -> sqlite3.Connection:
    if read_only:
        return sqlite3.connect(f"{db_path.as_uri()}?mode=ro", uri=True, timeout=timeout)
    return sqlite3.connect(str(db_path), timeout=timeout)


def read_recent_document(db_path: Path, timeout: float = 5.0) -> Result[dict]:
    """
    Read and parse the recently opened document.

    Args:
        db_path: Path to state.vscdb
        timeout: Seconds to wait on a locked database

    Returns:
        Result[dict]: Ok with the full document (``entries`` guaranteed to be
        a list), Err when the database, row or JSON is unusable
    """
    if not db_path.is_file():
        return Result.err(Error(
            error_type=ErrorType.NOT_FOUND,
            message=f"Database not found: {db_path}",
            context={"db_path": str(db_path), "stage": "read"}
        ))

    try:
        conn = _connect(db_path, timeout, read_only=True)
        try:
            row = conn.execute(SELECT_SQL, (RECENT_KEY,)).fetchone()
        finally:
            conn.close()
    except sqlite3.Error as e:
        logger.error(
            "Could not query state database",
            operation="read_recent_document",
            status="failed",
            db_path=str(db_path),
            error=str(e)
        )
        return Result.err(Error(
            error_type=ErrorType.TRANSPORT_ERROR,
            message=f"Could not query database: {e}",
            context={"db_path": str(db_path), "stage": "read"},
            original_exception=e
        ))

    if row is None or row[0] is None:
        logger.debug(
            "No recent entries key in database",
            operation="read_recent_document",
            status="empty",
            db_path=str(db_path)
        )
        return Result.err(Error(
            error_type=ErrorType.NOT_FOUND,
            message="No recently opened list in database",
            context={"db_path": str(db_path), "stage": "read"}
        ))

    raw = row[0]
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")

    try:
        document = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(
            "Recent entries value is not valid JSON",
            operation="read_recent_document",
            status="parse_error",
            db_path=str(db_path),
            error=str(e)
        )
        return Result.err(Error(
            error_type=ErrorType.PARSE_ERROR,
            message=f"Invalid JSON in recent entries: {e}",
            context={"db_path": str(db_path), "stage": "read"},
            original_exception=e
        ))

    if not isinstance(document, dict):
        return Result.err(Error(
            error_type=ErrorType.PARSE_ERROR,
            message="Recent entries document is not an object",
            context={"db_path": str(db_path), "stage": "read"}
        ))

    if not isinstance(document.get("entries"), list):
        document["entries"] = []

    logger.debug(
        "Recent entries loaded",
        operation="read_recent_document",
        status="success",
        metrics={"entries": len(document["entries"])}
    )
    return Result.ok(document)


def write_recent_document(db_path: Path, document: dict, timeout: float = 5.0) -> Result[None]:
    """
    Replace the recently opened document in one transaction.

    Succeeds only when exactly one row was updated; otherwise the
    transaction is rolled back and nothing changes.

    Args:
        db_path: Path to state.vscdb
        document: Full document to store
        timeout: Seconds to wait on a locked database
    """
    payload = json.dumps(document, ensure_ascii=False, separators=(",", ":"))

    try:
        conn = _connect(db_path, timeout, read_only=False)
        try:
            with conn:
                cursor = conn.execute(UPDATE_SQL, (payload, RECENT_KEY))
                if cursor.rowcount != 1:
                    raise sqlite3.IntegrityError(
                        f"expected 1 updated row, got {cursor.rowcount}"
                    )
        finally:
            conn.close()
    except sqlite3.Error as e:
        logger.error(
            "Failed to write recent entries",
            operation="write_recent_document",
            status="failed",
            db_path=str(db_path),
            error=str(e)
        )
        return Result.err(Error(
            error_type=ErrorType.TRANSPORT_ERROR,
            message=f"Failed to update database: {e}",
            context={"db_path": str(db_path), "stage": "write"},
            original_exception=e
        ))

    logger.info(
        "Recent entries written",
        operation="write_recent_document",
        status="success",
        metrics={"entries": len(document.get("entries", []))}
    )
    return Result.ok(None)
