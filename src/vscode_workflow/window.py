# =============================================================================
# New Editor Window
# =============================================================================

from pathlib import Path

from loguru import logger

from .process import applescript_string, run_osascript
from .variants import Variant, resolve_variant

MSG_NOT_FOUND = "VS Code not found"


def is_running(variant: Variant) -> bool:
    result = run_osascript(
        f"application {applescript_string(variant.name)} is running",
        operation="is_running"
    )
    return result.is_ok() and result.value.strip() == "true"


def new_window_script(variant: Variant, running: bool) -> str:
    """
    AppleScript that brings up a fresh window.

    Launching a stopped editor opens a window by itself; a running one gets
    ⌘⇧N through System Events.
    """
    activate = f"tell application {applescript_string(variant.name)} to activate"
    if not running:
        return activate
    return (
        f"{activate}\n"
        'tell application "System Events" to keystroke "n" using {command down, shift down}'
    )


def open_new_window(applications_dir: Path | None = None) -> str:
    """
    Open a new window in the installed editor.

    Returns:
        Empty string on success, otherwise a short failure sentence
    """
    variant = resolve_variant(applications_dir)
    if variant is None:
        return MSG_NOT_FOUND

    running = is_running(variant)
    result = run_osascript(new_window_script(variant, running), operation="open_new_window")
    if result.is_err():
        return f"Could not open a new {variant.name} window"

    logger.info(
        "New window requested",
        operation="open_new_window",
        status="success",
        variant=variant.name,
        was_running=running
    )
    return ""
