# =============================================================================
# Marketplace Search
# =============================================================================

import http.client
import json
import re
import time
import urllib.error
import urllib.request
from pathlib import Path
from typing import Callable

from loguru import logger

from .alfred import DEFAULT_ICON, info_payload, script_filter
from .config_loader import DEFAULT_CONFIG
from .errors import Error, ErrorType, Result
from .variants import MARKETPLACE_URL, Variant, present_extension_dirs, resolve_variant

API_URL = "https://marketplace.visualstudio.com/_apis/public/gallery/extensionquery?api-version=3.0-preview.1"
TARGET_PRODUCT = "Microsoft.VisualStudio.Code"
PAGE_SIZE = 20
REQUEST_TIMEOUT = 8

# Filter types
FILTER_TARGET = 8
FILTER_SEARCH_TEXT = 10
FILTER_EXCLUDE_WITH_FLAGS = 12
EXCLUDE_UNPUBLISHED = "4096"

# IncludeFiles | IncludeCategoryAndTags | IncludeVersionProperties |
# ExcludeNonValidated | IncludeAssetUri | IncludeStatistics | IncludeLatestVersionOnly
API_FLAGS = 0x2 | 0x4 | 0x10 | 0x20 | 0x80 | 0x100 | 0x200

OBSOLETE_FILE = ".obsolete"
EXTENSION_DIR_PATTERN = re.compile(r"^(.+?)-\d")

Fetcher = Callable[[str], Result[list[dict]]]


def compact_number(num: int | float) -> str:
    """
    Abbreviate large counts with K/M suffixes.

    >>> compact_number(1500), compact_number(2500000), compact_number(999)
    ('1.5K', '2.5M', '999')
    """
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}".removesuffix(".0") + "M"
    if num >= 1_000:
        return f"{num / 1_000:.1f}".removesuffix(".0") + "K"
    return str(int(num)) if float(num).is_integer() else str(num)


def extension_id_from_dir(dir_name: str) -> str | None:
    """
    Extract the case-folded extension ID from an extensions directory name.

    "ms-python.python-2.0.1" -> "ms-python.python"
    """
    match = EXTENSION_DIR_PATTERN.match(dir_name)
    return match.group(1).lower() if match else None


def read_obsolete(extensions_dir: Path) -> set[str]:
    """
    Directory names VS Code has marked for removal.

    The .obsolete file is a JSON object keyed by directory name.
    """
    obsolete_file = extensions_dir / OBSOLETE_FILE
    if not obsolete_file.is_file():
        return set()
    try:
        data = json.loads(obsolete_file.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.debug(
            "Could not read obsolete marker",
            operation="read_obsolete",
            path=str(obsolete_file),
            error=str(e)
        )
        return set()
    return set(data) if isinstance(data, dict) else set()


def installed_extension_ids(home: Path | None = None) -> set[str]:
    """Case-folded IDs installed in any variant, excluding obsolete ones."""
    ids: set[str] = set()
    for _, extensions_dir in present_extension_dirs(home):
        obsolete = read_obsolete(extensions_dir)
        try:
            dir_names = [p.name for p in extensions_dir.iterdir()]
        except OSError as e:
            logger.warning(
                "Could not list extensions directory",
                operation="installed_extension_ids",
                path=str(extensions_dir),
                error=str(e)
            )
            continue
        for dir_name in dir_names:
            if dir_name in obsolete:
                continue
            extension_id = extension_id_from_dir(dir_name)
            if extension_id:
                ids.add(extension_id)
    return ids


def build_query(search_text: str) -> dict:
    """Request body for page 1 of a text search."""
    return {
        "filters": [
            {
                "criteria": [
                    {"filterType": FILTER_TARGET, "value": TARGET_PRODUCT},
                    {"filterType": FILTER_SEARCH_TEXT, "value": search_text},
                    {"filterType": FILTER_EXCLUDE_WITH_FLAGS, "value": EXCLUDE_UNPUBLISHED},
                ],
                "pageNumber": 1,
                "pageSize": PAGE_SIZE,
                "sortBy": 0,
                "sortOrder": 0,
            }
        ],
        "assetTypes": [],
        "flags": API_FLAGS,
    }


def fetch_extensions(search_text: str, timeout: float = REQUEST_TIMEOUT) -> Result[list[dict]]:
    """
    Query the Marketplace gallery API.

    Returns:
        Result[list[dict]]: Ok with the extensions of the first result set,
        Err TRANSPORT_ERROR / TIMEOUT_ERROR / PARSE_ERROR otherwise
    """
    start_time = time.perf_counter()
    body = json.dumps(build_query(search_text)).encode("utf-8")
    req = urllib.request.Request(
        API_URL,
        data=body,
        method="POST",
        headers={
            "Content-Type": "application/json",
            "Accept": "application/json;api-version=3.0-preview.1",
            "User-Agent": "vscode-workflow",
        },
    )

    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            raw = resp.read()
    except TimeoutError as e:
        logger.warning(
            "Marketplace request timed out",
            operation="fetch_extensions",
            status="timeout",
            query=search_text
        )
        return Result.err(Error(
            error_type=ErrorType.TIMEOUT_ERROR,
            message=f"Marketplace request timed out after {timeout}s",
            context={"query": search_text},
            original_exception=e
        ))
    except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
        logger.warning(
            "Marketplace request failed",
            operation="fetch_extensions",
            status="failed",
            query=search_text,
            error=str(e)
        )
        return Result.err(Error(
            error_type=ErrorType.TRANSPORT_ERROR,
            message=f"Marketplace request failed: {e}",
            context={"query": search_text},
            original_exception=e
        ))

    try:
        data = json.loads(raw)
        extensions = data["results"][0].get("extensions") or []
        if not isinstance(extensions, list):
            raise TypeError("extensions is not a list")
    except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
        logger.warning(
            "Malformed Marketplace response",
            operation="fetch_extensions",
            status="parse_error",
            query=search_text,
            error=str(e)
        )
        return Result.err(Error(
            error_type=ErrorType.PARSE_ERROR,
            message=f"Malformed Marketplace response: {e}",
            context={"query": search_text},
            original_exception=e
        ))

    duration_ms = int((time.perf_counter() - start_time) * 1000)
    logger.debug(
        "Marketplace query complete",
        operation="fetch_extensions",
        status="success",
        query=search_text,
        metrics={"results": len(extensions), "duration_ms": duration_ms}
    )
    return Result.ok(extensions)


def _install_count(ext: dict) -> float | None:
    for stat in ext.get("statistics") or []:
        if stat.get("statisticName") == "install":
            return stat.get("value")
    return None


def build_item(ext: dict, installed_ids: set[str], variant: Variant | None) -> dict | None:
    """Render one Marketplace extension; None when publisher or name is missing."""
    publisher = ext.get("publisher") or {}
    publisher_name = publisher.get("publisherName")
    extension_name = ext.get("extensionName")
    if not publisher_name or not extension_name:
        return None

    extension_id = f"{publisher_name}.{extension_name}"
    display_name = ext.get("displayName") or extension_name
    description = ext.get("shortDescription") or ""
    versions = ext.get("versions") or [{}]
    version = versions[0].get("version", "")
    installs = _install_count(ext)
    web_url = MARKETPLACE_URL + extension_id

    subtitle = " • ".join(part for part in (
        "✓ Installed" if extension_id.lower() in installed_ids else None,
        publisher.get("displayName"),
        f"↓ {compact_number(installs)}" if installs is not None else None,
        f"v{version}" if version else None,
    ) if part)

    if variant:
        open_subtitle = f"⌘ Open in {variant.name}"
        open_url = variant.extension_url(extension_id)
    else:
        open_subtitle = "⌘ Open in browser"
        open_url = web_url

    return {
        "uid": ext.get("extensionId") or extension_id,
        "title": display_name,
        "subtitle": subtitle,
        "arg": extension_id,
        "autocomplete": display_name,
        "match": f"{display_name} {extension_id} {description}".rstrip(),
        "text": {"copy": extension_id, "largetype": description or display_name},
        "quicklookurl": web_url,
        "icon": {"path": DEFAULT_ICON},
        "variables": {"extension_name": display_name},
        "mods": {
            "cmd": {
                "subtitle": open_subtitle,
                "arg": open_url,
            },
        },
    }


def search_marketplace(
    query: str | None,
    home: Path | None = None,
    applications_dir: Path | None = None,
    config: dict | None = None,
    fetcher: Fetcher | None = None,
) -> dict:
    """
    Build the Marketplace search script filter payload.

    An empty query returns a prompt without touching the network. Network
    and parse failures render as "no results".
    """
    query = (query or "").strip()
    if not query:
        return info_payload("Search VS Code Extensions", "Type to search the Marketplace")

    result = (fetcher or fetch_extensions)(query)
    extensions = result.value_or([])
    if not extensions:
        return info_payload("No extensions found", f'No results for "{query}"')

    installed_ids = installed_extension_ids(home)
    variant = resolve_variant(applications_dir)
    items = [
        item for item in (build_item(ext, installed_ids, variant) for ext in extensions)
        if item
    ]

    logger.info(
        "Marketplace results rendered",
        operation="search_marketplace",
        status="success",
        query=query,
        metrics={"items": len(items), "installed": len(installed_ids)}
    )

    if not items:
        return info_payload("No extensions found", f'No results for "{query}"')

    cache_seconds = (config or DEFAULT_CONFIG)["marketplace"].get("cache_seconds", 5)
    return script_filter(items, cache_seconds=cache_seconds)
