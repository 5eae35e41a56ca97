"""
Shared test fixtures: a fake HOME, a fake /Applications root, and factories
for state databases and extension directories.
"""

import json
import sqlite3
from pathlib import Path

import pytest

from vscode_workflow.recent_store import RECENT_KEY
from vscode_workflow.variants import VARIANTS, Variant

PRIMARY, INSIDERS, ALTERNATE = VARIANTS


@pytest.fixture
def home(tmp_path: Path, monkeypatch) -> Path:
    """Temporary home directory, also exported as $HOME."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


@pytest.fixture
def applications_dir(tmp_path: Path) -> Path:
    apps = tmp_path / "Applications"
    apps.mkdir()
    return apps


@pytest.fixture
def install_app(applications_dir: Path):
    """Create an application bundle for a variant."""
    def _install(variant: Variant) -> Path:
        bundle = variant.app_path(applications_dir)
        bundle.mkdir(parents=True)
        return bundle
    return _install


def folder_entry(path: Path | str, **extra) -> dict:
    return {"folderUri": Path(path).as_uri(), **extra}


def workspace_entry(path: Path | str, **extra) -> dict:
    return {"workspace": {"id": "ws-1", "configPath": Path(path).as_uri()}, **extra}


def file_entry(path: Path | str, **extra) -> dict:
    return {"fileUri": Path(path).as_uri(), **extra}


def read_store(db_path: Path) -> dict:
    conn = sqlite3.connect(str(db_path))
    try:
        row = conn.execute(
            "SELECT value FROM ItemTable WHERE key = ?", (RECENT_KEY,)
        ).fetchone()
    finally:
        conn.close()
    return json.loads(row[0])


@pytest.fixture
def make_store(home: Path):
    """
    Create a state.vscdb for a variant.

    Pass ``value`` to store a raw string instead of a document, or
    ``entries=None`` to create the table without the recent entries row.
    """
    def _make(variant: Variant = PRIMARY, entries: list | None = (), value: str | None = None,
              **document_extra) -> Path:
        db_path = variant.store_path(home)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(db_path))
        try:
            conn.execute(
                "CREATE TABLE ItemTable (key TEXT UNIQUE ON CONFLICT REPLACE, value BLOB)"
            )
            conn.execute(
                "INSERT INTO ItemTable (key, value) VALUES (?, ?)",
                ("workbench.panel.height", "300")
            )
            if value is not None:
                conn.execute("INSERT INTO ItemTable (key, value) VALUES (?, ?)", (RECENT_KEY, value))
            elif entries is not None:
                document = {"entries": list(entries), **document_extra}
                conn.execute(
                    "INSERT INTO ItemTable (key, value) VALUES (?, ?)",
                    (RECENT_KEY, json.dumps(document))
                )
            conn.commit()
        finally:
            conn.close()
        return db_path
    return _make


@pytest.fixture
def make_extension(home: Path):
    """Create an installed extension directory with an optional manifest."""
    def _make(variant: Variant, dir_name: str, manifest: dict | None = None,
              nls: dict | None = None, files: tuple[str, ...] = ()) -> Path:
        ext_dir = variant.extensions_dir(home) / dir_name
        ext_dir.mkdir(parents=True)
        if manifest is not None:
            (ext_dir / "package.json").write_text(json.dumps(manifest))
        if nls is not None:
            (ext_dir / "package.nls.json").write_text(json.dumps(nls))
        for relative in files:
            target = ext_dir / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(b"")
        return ext_dir
    return _make


@pytest.fixture
def mark_obsolete(home: Path):
    def _mark(variant: Variant, *dir_names: str) -> None:
        extensions_dir = variant.extensions_dir(home)
        extensions_dir.mkdir(parents=True, exist_ok=True)
        (extensions_dir / ".obsolete").write_text(json.dumps({name: True for name in dir_names}))
    return _mark
