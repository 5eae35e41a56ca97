# =============================================================================
# Entry Point
# =============================================================================
# Each Alfred action runs one subcommand as its own process:
#
#   vscode-workflow install <id>          Run Script (plain text)
#   vscode-workflow uninstall <id>        Run Script (plain text)
#   vscode-workflow search [query]        Script Filter (JSON)
#   vscode-workflow recent                Script Filter (JSON)
#   vscode-workflow remove-recent [path]  Run Script (plain text)
#   vscode-workflow installed             Script Filter (JSON)
#   vscode-workflow new-window            Run Script (plain text)
#
# Alfred's workflow variables (action, extension_name) are read here and
# passed on as typed parameters.

import argparse
import sys

from loguru import logger

from . import __version__
from .alfred import info_payload, render
from .config_loader import load_config
from .environment import augment_path, get_env
from .installer import (
    ExtensionAction,
    install_extension,
    parse_extension_action,
    uninstall_extension,
)
from .installed import list_installed_extensions
from .logging_config import new_trace_id, setup_logger
from .marketplace import search_marketplace
from .recent_mutator import parse_action, run_mutation
from .recent_projects import list_recent_projects
from .window import open_new_window

SCRIPT_FILTERS = {"search", "recent", "installed"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vscode-workflow",
        description="VS Code actions for Alfred."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("install", "Install an extension (uninstall when action=uninstall)"),
        ("uninstall", "Uninstall an extension"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("extension_id", nargs="?", default="")
        cmd.add_argument("--notify", action="store_true", default=None,
                         help="Also post the result as a notification")

    search = sub.add_parser("search", help="Search the Marketplace")
    search.add_argument("query", nargs="*")

    sub.add_parser("recent", help="List recently opened projects")

    remove = sub.add_parser("remove-recent", help="Remove recent projects")
    remove.add_argument("path", nargs="?", default=None)
    remove.add_argument("--action", default=None,
                        help="0 = remove this entry, 1 = remove all (default: $action)")

    sub.add_parser("installed", help="List installed extensions")
    sub.add_parser("new-window", help="Open a new editor window")

    return parser


def dispatch(args: argparse.Namespace, config: dict) -> str:
    """Run the selected action and return what goes to stdout."""
    if args.command in ("install", "uninstall"):
        if args.command == "uninstall":
            action = ExtensionAction.UNINSTALL
        else:
            action = parse_extension_action(get_env("action"))
        installer_config = config["installer"]
        notify_user = args.notify if args.notify is not None else bool(installer_config.get("notify"))
        runner = uninstall_extension if action is ExtensionAction.UNINSTALL else install_extension
        return runner(
            args.extension_id,
            timeout=installer_config.get("timeout", 300),
            notify_user=notify_user
        )

    if args.command == "search":
        words = args.query
        if words and words[0] == "--":
            words = words[1:]
        return render(search_marketplace(" ".join(words), config=config))

    if args.command == "recent":
        return render(list_recent_projects(config=config))

    if args.command == "remove-recent":
        action = parse_action(args.action if args.action is not None else get_env("action"))
        if action is None and (args.action or get_env("action")):
            return f"Unknown action: {args.action or get_env('action')}"
        return run_mutation(
            action,
            args.path,
            timeout=config["recent"].get("store_timeout", 5.0)
        )

    if args.command == "installed":
        return render(list_installed_extensions(config=config))

    if args.command == "new-window":
        return open_new_window()

    raise ValueError(f"Unknown command: {args.command}")


def query_argv(argv: list[str]) -> list[str]:
    """Mark everything after `search` as query text so a leading dash is not an option."""
    if argv[:1] == ["search"] and argv[1:2] != ["--"]:
        return ["search", "--", *argv[1:]]
    return argv


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    args = build_parser().parse_args(query_argv(argv))

    augment_path()
    config = load_config()
    setup_logger(config["logging"])
    trace_id = new_trace_id()

    logger.info(
        "Workflow action starting",
        operation="main",
        status="started",
        trace_id=trace_id,
        command=args.command
    )

    try:
        output = dispatch(args, config)
    except Exception as e:
        logger.opt(exception=e).error(
            "Workflow action failed",
            operation="main",
            status="failed",
            trace_id=trace_id,
            command=args.command
        )
        if args.command in SCRIPT_FILTERS:
            output = render(info_payload("Something went wrong", str(e)))
        else:
            output = f"Error: {e}"

    if output:
        sys.stdout.write(output)
        if not output.endswith("\n"):
            sys.stdout.write("\n")

    logger.info(
        "Workflow action complete",
        operation="main",
        status="complete",
        trace_id=trace_id,
        command=args.command
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
