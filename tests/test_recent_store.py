"""
Tests for reading and writing the recently opened document.
"""

import json
import sqlite3
from pathlib import Path

from conftest import PRIMARY, folder_entry, read_store

from vscode_workflow.errors import ErrorType
from vscode_workflow.recent_store import read_recent_document, write_recent_document


class TestReadRecentDocument:
    def test_reads_entries(self, make_store):
        db = make_store(entries=[folder_entry("/a"), folder_entry("/b")])
        result = read_recent_document(db)
        assert result.is_ok()
        assert len(result.value["entries"]) == 2

    def test_missing_database(self, tmp_path: Path):
        result = read_recent_document(tmp_path / "nope.vscdb")
        assert result.is_err()
        assert result.error.error_type is ErrorType.NOT_FOUND

    def test_missing_key(self, make_store):
        result = read_recent_document(make_store(entries=None))
        assert result.error.error_type is ErrorType.NOT_FOUND

    def test_malformed_json(self, make_store):
        result = read_recent_document(make_store(value="{not json"))
        assert result.error.error_type is ErrorType.PARSE_ERROR
        assert result.error.context["stage"] == "read"

    def test_missing_entries_array_becomes_empty(self, make_store):
        result = read_recent_document(make_store(value=json.dumps({"other": 1})))
        assert result.value == {"other": 1, "entries": []}

    def test_not_a_database(self, home: Path):
        db = PRIMARY.store_path(home)
        db.parent.mkdir(parents=True)
        db.write_text("garbage that is not sqlite")
        result = read_recent_document(db)
        assert result.error.error_type is ErrorType.TRANSPORT_ERROR


class TestWriteRecentDocument:
    def test_round_trip_preserves_unknown_fields(self, make_store):
        entry = folder_entry("/a", label="Alpha", extra={"nested": [1, 2]})
        db = make_store(entries=[entry], version=3)
        document = read_recent_document(db).value

        assert write_recent_document(db, document).is_ok()
        assert read_store(db) == {"entries": [entry], "version": 3}

    def test_value_with_quotes_is_stored_verbatim(self, make_store):
        db = make_store(entries=[])
        document = {"entries": [folder_entry("/Users/o'neil/it's")]}
        assert write_recent_document(db, document).is_ok()
        assert read_store(db) == document

    def test_fails_without_row(self, make_store):
        db = make_store(entries=None)
        result = write_recent_document(db, {"entries": []})
        assert result.is_err()
        assert result.error.context["stage"] == "write"

        conn = sqlite3.connect(str(db))
        try:
            count = conn.execute("SELECT COUNT(*) FROM ItemTable").fetchone()[0]
        finally:
            conn.close()
        assert count == 1
