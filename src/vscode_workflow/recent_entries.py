# =============================================================================
# Recent Entry Classification
# =============================================================================

import os
from dataclasses import dataclass
from enum import Enum
from urllib.parse import unquote, urlsplit

WORKSPACE_SUFFIX = ".code-workspace"


class EntryKind(Enum):
    FOLDER = "folder"
    WORKSPACE = "workspace"
    FILE = "file"


@dataclass(frozen=True)
class RecentEntry:
    kind: EntryKind
    uri: str
    path: str
    name: str


def parse_uri(uri: str | None) -> str | None:
    """
    Convert a recent-entry URI into a local filesystem path.

    Only ``file:`` URIs are local; anything else (vscode-remote, vscode-vfs,
    ...) returns None.

    >>> parse_uri("file:///Users/me/My%20Project")
    '/Users/me/My Project'
    """
    if not uri or not isinstance(uri, str):
        return None
    parts = urlsplit(uri)
    if parts.scheme != "file":
        return None
    if parts.netloc and parts.netloc != "localhost":
        return None
    path = unquote(parts.path)
    return path or None


def _basename(path: str) -> str:
    return os.path.basename(path.rstrip("/")) or path


def _entry_uri(entry: dict) -> tuple[EntryKind, str] | None:
    if entry.get("folderUri"):
        return EntryKind.FOLDER, entry["folderUri"]
    workspace = entry.get("workspace")
    if isinstance(workspace, dict) and workspace.get("configPath"):
        return EntryKind.WORKSPACE, workspace["configPath"]
    if entry.get("fileUri"):
        return EntryKind.FILE, entry["fileUri"]
    return None


def classify_entry(entry: dict) -> RecentEntry | None:
    """
    Classify a raw store entry as folder, workspace or file.

    Returns:
        RecentEntry, or None for remote and unrecognised entries
    """
    if not isinstance(entry, dict) or entry.get("remoteAuthority"):
        return None

    found = _entry_uri(entry)
    if found is None:
        return None
    kind, uri = found

    path = parse_uri(uri)
    if path is None:
        return None

    name = _basename(path)
    if kind is EntryKind.WORKSPACE and name.endswith(WORKSPACE_SUFFIX):
        name = name[:-len(WORKSPACE_SUFFIX)]

    return RecentEntry(kind=kind, uri=uri, path=path, name=name)


def entry_local_path(entry: dict) -> str | None:
    """Local path of a raw entry, or None if it is remote or unrecognised."""
    classified = classify_entry(entry)
    return classified.path if classified else None
