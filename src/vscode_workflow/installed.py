# =============================================================================
# Installed Extensions Script Filter
# =============================================================================

import json
import re
from pathlib import Path

from loguru import logger

from .alfred import DEFAULT_ICON, info_payload, script_filter
from .config_loader import DEFAULT_CONFIG
from .installer import ExtensionAction
from .marketplace import read_obsolete
from .variants import Variant, present_extension_dirs

MANIFEST_FILE = "package.json"
NLS_FILE = "package.nls.json"
ICON_LOCATIONS = ("icon.png", "images/icon.png", "resources/icon.png", "icon.svg")
PLACEHOLDER_PATTERN = re.compile(r"%([^%]+)%")


def read_json(path: Path) -> dict | None:
    try:
        data = json.loads(path.read_text(encoding="utf-8-sig"))
    except (OSError, ValueError):
        return None
    return data if isinstance(data, dict) else None


class Localizer:
    """Resolves %token% placeholders, loading package.nls.json on first use."""

    def __init__(self, extension_dir: Path):
        self.extension_dir = extension_dir
        self._messages: dict | None = None

    @property
    def messages(self) -> dict:
        if self._messages is None:
            self._messages = read_json(self.extension_dir / NLS_FILE) or {}
        return self._messages

    def _lookup(self, match: re.Match) -> str:
        value = self.messages.get(match.group(1))
        # Some bundles store {"message": ..., "comment": [...]}
        if isinstance(value, dict):
            value = value.get("message")
        return value if isinstance(value, str) else match.group(0)

    def resolve(self, value):
        if not isinstance(value, str) or "%" not in value:
            return value
        return PLACEHOLDER_PATTERN.sub(self._lookup, value)


def find_icon(extension_dir: Path, manifest: dict) -> dict:
    """Manifest-declared icon first, then the usual locations."""
    declared = manifest.get("icon")
    if isinstance(declared, str) and declared:
        icon_path = extension_dir / declared
        if icon_path.is_file():
            return {"path": str(icon_path)}

    for location in ICON_LOCATIONS:
        icon_path = extension_dir / location
        if icon_path.is_file():
            return {"path": str(icon_path)}

    return {"path": DEFAULT_ICON}


def build_item(
    extension_id: str,
    display_name: str,
    description: str,
    publisher: str,
    icon: dict,
    variant: Variant,
) -> dict:
    return {
        "uid": extension_id,
        "title": display_name,
        "subtitle": description,
        "arg": extension_id,
        "autocomplete": display_name,
        "variables": {"vscode_url": variant.extension_url(extension_id)},
        "match": f"{display_name} {publisher} {extension_id}",
        "icon": icon,
        "mods": {
            "ctrl": {
                "subtitle": f'⌃ Uninstall "{display_name}"',
                "arg": extension_id,
                "variables": {"action": ExtensionAction.UNINSTALL.value},
            },
        },
    }


def read_local_extensions(variant: Variant, extensions_dir: Path) -> list[dict]:
    """
    One item per installed extension in a variant's extensions directory.

    Obsolete directories and directories without a usable manifest are
    skipped.
    """
    obsolete = read_obsolete(extensions_dir)
    try:
        extension_dirs = sorted(p for p in extensions_dir.iterdir() if p.is_dir())
    except OSError as e:
        logger.warning(
            "Could not list extensions directory",
            operation="read_local_extensions",
            variant=variant.name,
            path=str(extensions_dir),
            error=str(e)
        )
        return []

    items = []
    for extension_dir in extension_dirs:
        if extension_dir.name in obsolete:
            continue

        manifest = read_json(extension_dir / MANIFEST_FILE)
        if not manifest or not manifest.get("name") or not manifest.get("publisher"):
            logger.debug(
                "Skipping directory without manifest",
                operation="read_local_extensions",
                path=str(extension_dir)
            )
            continue

        localizer = Localizer(extension_dir)
        extension_id = f"{manifest['publisher']}.{manifest['name']}"
        display_name = localizer.resolve(manifest.get("displayName")) or manifest["name"]
        description = localizer.resolve(manifest.get("description")) or ""

        items.append(build_item(
            extension_id,
            str(display_name),
            str(description),
            manifest["publisher"],
            find_icon(extension_dir, manifest),
            variant,
        ))

    return items


def list_installed_extensions(home: Path | None = None, config: dict | None = None) -> dict:
    """
    Build the installed extensions script filter payload.

    Aggregates every variant with an extensions directory; the first
    occurrence of an ID wins, and results are sorted case-insensitively by
    display name.
    """
    found = present_extension_dirs(home)
    if not found:
        return info_payload(
            "VS Code installation not found",
            "Could not locate VS Code, Insiders, or VSCodium extensions."
        )

    unique: dict[str, dict] = {}
    for variant, extensions_dir in found:
        for item in read_local_extensions(variant, extensions_dir):
            unique.setdefault(item["uid"].lower(), item)

    if not unique:
        return info_payload("No extensions found", "Could not find any installed extensions.")

    items = sorted(unique.values(), key=lambda item: item["title"].casefold())

    logger.info(
        "Installed extensions listed",
        operation="list_installed_extensions",
        status="success",
        variants=[variant.name for variant, _ in found],
        metrics={"items": len(items)}
    )

    cache_seconds = (config or DEFAULT_CONFIG)["installed"].get("cache_seconds", 30)
    return script_filter(items, cache_seconds=cache_seconds)
