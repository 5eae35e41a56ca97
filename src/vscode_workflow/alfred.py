# =============================================================================
# Script Filter Output
# =============================================================================
# Alfred's script filter contract: {"items": [...], "cache": {...}}

import json

DEFAULT_ICON = "icon.png"


def info_item(title: str, subtitle: str, icon: str = DEFAULT_ICON) -> dict:
    """A non-selectable informational result."""
    return {
        "title": title,
        "subtitle": subtitle,
        "valid": False,
        "icon": {"path": icon},
    }


def script_filter(items: list[dict], cache_seconds: int | None = None) -> dict:
    """
    Build a script filter payload.

    Args:
        items: Result items
        cache_seconds: Advisory cache lifetime for Alfred; omitted when None
            or zero

    Returns:
        Payload dict ready for render()
    """
    payload: dict = {"items": items}
    if cache_seconds:
        payload["cache"] = {"seconds": int(cache_seconds), "loosereload": True}
    return payload


def info_payload(title: str, subtitle: str) -> dict:
    """Payload holding a single informational item and no cache hint."""
    return script_filter([info_item(title, subtitle)])


def render(payload: dict) -> str:
    return json.dumps(payload, ensure_ascii=False)
