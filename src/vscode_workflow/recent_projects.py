# =============================================================================
# Recent Projects Script Filter
# =============================================================================

import os
import time
from pathlib import Path
from typing import Callable

from loguru import logger

from .alfred import info_payload, script_filter
from .config_loader import DEFAULT_CONFIG
from .environment import home_dir, pretty_path
from .git_status import fetch_branches
from .recent_entries import EntryKind, RecentEntry, classify_entry
from .recent_mutator import REMOVE_ALL_ARG, MutationAction
from .recent_store import read_recent_document
from .variants import resolve_store_variant

WORKSPACE_ICON = "workspace.png"

BranchFetcher = Callable[[list[str]], dict[str, str]]


def collect_local_entries(raw_entries: list) -> list[RecentEntry]:
    """
    Classify raw entries, keeping only local ones that still exist on disk.

    Remote entries are dropped before any filesystem check.
    """
    entries = []
    for raw in raw_entries:
        entry = classify_entry(raw)
        if entry is None:
            continue
        if not os.path.exists(entry.path):
            logger.debug(
                "Skipping missing recent entry",
                operation="collect_local_entries",
                path=entry.path
            )
            continue
        entries.append(entry)
    return entries


def build_item(entry: RecentEntry, branch: str | None, home: Path) -> dict:
    """Render one recent entry as a selectable result."""
    parent = os.path.dirname(pretty_path(entry.path, home)) or "/"
    subtitle = f"{parent} • {branch}" if branch else parent

    if entry.kind is EntryKind.WORKSPACE:
        icon = {"path": WORKSPACE_ICON}
    else:
        icon = {"type": "fileicon", "path": entry.path}

    return {
        "uid": entry.path,
        "title": entry.name,
        "subtitle": subtitle,
        "arg": entry.path,
        "autocomplete": entry.name,
        "match": f"{entry.name} {entry.path}",
        "type": "file",
        "icon": icon,
        "mods": {
            "ctrl": {
                "subtitle": "⌃ Remove from recent projects",
                "arg": entry.path,
                "variables": {"action": MutationAction.REMOVE_ONE.value},
            },
            "ctrl+shift": {
                "subtitle": "⌃⇧ Remove all recent projects",
                "arg": REMOVE_ALL_ARG,
                "variables": {"action": MutationAction.REMOVE_ALL.value},
            },
        },
    }


def list_recent_projects(
    home: Path | None = None,
    config: dict | None = None,
    branch_fetcher: BranchFetcher | None = None,
) -> dict:
    """
    Build the recent projects script filter payload.

    Flow:
    1. Locate the first variant with a state database
    2. Read the recently opened document
    3. Keep local entries that still exist
    4. Fetch git branches for all folders in one batch
    5. Render one result per entry

    Args:
        home: Home directory (defaults to $HOME)
        config: Merged workflow configuration
        branch_fetcher: Replacement for the configured branch lookup

    Returns:
        Script filter payload dict
    """
    start_time = time.perf_counter()
    home = home or home_dir()
    recent_config = (config or DEFAULT_CONFIG)["recent"]

    variant = resolve_store_variant(home)
    if variant is None:
        logger.info(
            "No state database found",
            operation="list_recent_projects",
            status="not_found"
        )
        return info_payload("VS Code not found", "Could not locate VS Code database")

    result = read_recent_document(
        variant.store_path(home),
        timeout=recent_config.get("store_timeout", 5.0)
    )
    raw_entries = result.value["entries"] if result.is_ok() else []

    if not raw_entries:
        logger.info(
            "No recent entries",
            operation="list_recent_projects",
            status="empty",
            variant=variant.name
        )
        return info_payload("No recent projects", f"Open some projects in {variant.name} first")

    entries = collect_local_entries(raw_entries)
    folders = [e.path for e in entries if e.kind is EntryKind.FOLDER]

    if branch_fetcher is None:
        branches = fetch_branches(
            folders,
            strategy=recent_config.get("git_strategy", "tasks"),
            concurrency=recent_config.get("git_concurrency", 8)
        )
    else:
        branches = branch_fetcher(folders)

    items = [
        build_item(
            entry,
            branches.get(entry.path) if entry.kind is EntryKind.FOLDER else None,
            home
        )
        for entry in entries
    ]

    duration_ms = int((time.perf_counter() - start_time) * 1000)
    logger.info(
        "Recent projects listed",
        operation="list_recent_projects",
        status="success",
        variant=variant.name,
        metrics={
            "raw_entries": len(raw_entries),
            "items": len(items),
            "folders": len(folders),
            "branches": len(branches),
            "duration_ms": duration_ms,
        }
    )

    if not items:
        return info_payload("No recent projects", "None of the recent projects exist on disk")

    return script_filter(items, cache_seconds=recent_config.get("cache_seconds", 5))

