# =============================================================================
# Extension Installer
# =============================================================================
# Runs the editor's bundled CLI (Contents/Resources/app/bin/<cli>), since the
# shell command is usually not on the launcher's PATH. This may start the
# editor if it is not running.
#
# Any output from a process that ran to completion counts as success. The
# CLI can print failures to stdout, so the returned text is shown verbatim
# rather than judged.

import shlex
from enum import Enum
from pathlib import Path

from loguru import logger

from .errors import Error, ErrorType, Result
from .notifications import notify
from .process import run_command
from .variants import resolve_variant

DEFAULT_TIMEOUT = 300

MSG_NO_ID = "No extension ID provided."
MSG_NO_APP = "VS Code application not found."


class ExtensionAction(Enum):
    INSTALL = "install"
    UNINSTALL = "uninstall"


def parse_extension_action(value: str | None) -> ExtensionAction:
    """Map the launcher's action variable; anything else means install."""
    if value and value.strip() == ExtensionAction.UNINSTALL.value:
        return ExtensionAction.UNINSTALL
    return ExtensionAction.INSTALL


def validate_extension_id(extension_id: str | None) -> Result[str]:
    """Trim the id and reject values the CLI would read as an option."""
    extension_id = (extension_id or "").strip()
    if not extension_id or extension_id.startswith("-"):
        return Result.err(Error(
            error_type=ErrorType.VALIDATION_ERROR,
            message=MSG_NO_ID,
            context={"extension_id": extension_id}
        ))
    return Result.ok(extension_id)


def build_cli_args(cli_path: Path, action: ExtensionAction, extension_id: str) -> list[str]:
    if action is ExtensionAction.UNINSTALL:
        return [str(cli_path), "--uninstall-extension", extension_id]
    return [str(cli_path), "--install-extension", extension_id, "--force"]


def run_extension_action(
    extension_id: str | None,
    action: ExtensionAction = ExtensionAction.INSTALL,
    applications_dir: Path | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    notify_user: bool = False,
) -> str:
    """
    Install or uninstall an extension with the resolved variant's CLI.

    Args:
        extension_id: Marketplace identifier (publisher.name); untrusted
        action: Install (forced) or uninstall
        applications_dir: Root to probe instead of /Applications
        timeout: Seconds before the CLI is killed
        notify_user: Also post the outcome as a notification

    Returns:
        Message for the launcher: the CLI output on success, otherwise a
        short failure sentence
    """
    checked = validate_extension_id(extension_id)
    if checked.is_err():
        logger.warning(
            "Rejected extension id",
            operation="run_extension_action",
            status="invalid",
            **checked.error.context
        )
        return _finish(checked.error.message, notify_user)
    extension_id = checked.value

    variant = resolve_variant(applications_dir)
    if variant is None:
        logger.warning(
            "Editor application not found",
            operation="run_extension_action",
            status="not_found",
            extension_id=extension_id
        )
        return _finish(MSG_NO_APP, notify_user)

    cli_path = variant.cli_path(applications_dir)
    args = build_cli_args(cli_path, action, extension_id)

    logger.info(
        "Running extension CLI",
        operation="run_extension_action",
        status="started",
        action=action.value,
        variant=variant.name,
        command=shlex.join(args)
    )

    result = run_command(args, timeout=timeout, merge_stderr=True, operation="run_extension_action")
    if result.is_err():
        return _finish(f"Failed to {action.value} extension: {extension_id}", notify_user)

    output = result.value.strip()
    logger.info(
        "Extension CLI finished",
        operation="run_extension_action",
        status="success",
        action=action.value,
        extension_id=extension_id,
        output=output[:500]
    )
    if not output:
        verb = "installed" if action is ExtensionAction.INSTALL else "uninstalled"
        output = f"Extension '{extension_id}' {verb}."
    return _finish(output, notify_user)


def install_extension(extension_id: str | None, **kwargs) -> str:
    return run_extension_action(extension_id, ExtensionAction.INSTALL, **kwargs)


def uninstall_extension(extension_id: str | None, **kwargs) -> str:
    return run_extension_action(extension_id, ExtensionAction.UNINSTALL, **kwargs)


def _finish(message: str, notify_user: bool) -> str:
    if notify_user:
        notify(message)
    return message
