# =============================================================================
# macOS Notifications
# =============================================================================

from loguru import logger

from .process import applescript_string, run_osascript

NOTIFICATION_TITLE = "VS Code"


def notify(message: str, title: str = NOTIFICATION_TITLE) -> bool:
    """
    Post a notification through osascript.

    Failure is logged and reported as False; it never interrupts the action
    that triggered it.
    """
    script = (
        f"display notification {applescript_string(message)} "
        f"with title {applescript_string(title)}"
    )
    result = run_osascript(script, timeout=10, operation="notify")
    if result.is_err():
        logger.warning(
            "Notification could not be shown",
            operation="notify",
            status="failed",
            error=result.error.message
        )
        return False
    return True
