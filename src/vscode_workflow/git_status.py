# =============================================================================
# Repository Status (git branch lookup)
# =============================================================================
# Branches for every recent folder are fetched in one batch. Spawning git
# serially per folder dominates latency for users with many repositories.
#
# Two strategies:
#   tasks - asyncio task group, one git subprocess per folder, bounded by a
#           semaphore; each lookup fails on its own
#   shell - one zsh round-trip with backgrounded subshells and `wait`,
#           printing "path:branch" lines

import asyncio
import shlex

from loguru import logger

from .process import run_command

DETACHED_HEAD = "HEAD"
SHELL = "/bin/zsh"


def normalize_branch(value: str | None) -> str | None:
    """Empty output and a detached HEAD both mean no branch."""
    if not value:
        return None
    branch = value.strip()
    if not branch or branch == DETACHED_HEAD:
        return None
    return branch


def parse_branch_map(output: str | None) -> dict[str, str]:
    """
    Parse ``path:branch`` lines into a mapping.

    Paths may contain colons; branch names cannot, so each line is split on
    its last colon.

    >>> parse_branch_map("/Users/a:b/repo:main")
    {'/Users/a:b/repo': 'main'}
    """
    branches: dict[str, str] = {}
    if not output:
        return branches

    for line in output.strip().splitlines():
        path, sep, branch = line.rpartition(":")
        if not sep or not path:
            continue
        branch = normalize_branch(branch)
        if branch:
            branches[path] = branch
    return branches


# =============================================================================
# Strategy: asyncio task group
# =============================================================================


async def _lookup_branch(path: str) -> str | None:
    proc = await asyncio.create_subprocess_exec(
        "git", "-C", path, "rev-parse", "--abbrev-ref", "HEAD",
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.DEVNULL,
    )
    stdout, _ = await proc.communicate()
    if proc.returncode != 0:
        return None
    return normalize_branch(stdout.decode("utf-8", errors="replace"))


async def _gather_branches(paths: list[str], concurrency: int) -> dict[str, str]:
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def lookup(path: str) -> tuple[str, str | None]:
        async with semaphore:
            try:
                return path, await _lookup_branch(path)
            except OSError as e:
                logger.debug(
                    "Branch lookup failed",
                    operation="fetch_branches",
                    path=path,
                    error=str(e)
                )
                return path, None

    results = await asyncio.gather(*(lookup(path) for path in paths))
    return {path: branch for path, branch in results if branch}


def fetch_branches_tasks(paths: list[str], concurrency: int = 8) -> dict[str, str]:
    """Look up branches with one bounded asyncio task per folder."""
    if not paths:
        return {}
    return asyncio.run(_gather_branches(paths, concurrency))


# =============================================================================
# Strategy: single shell round-trip
# =============================================================================


def build_branch_script(paths: list[str]) -> str:
    """
    Compose one shell command that queries every folder in parallel.

    Each path is shell-quoted; subshells run in the background and the
    group waits for all of them before exiting.
    """
    jobs = [
        f"(cd {shlex.quote(path)} 2>/dev/null && "
        f"printf '%s:%s\\n' {shlex.quote(path)} "
        f"\"$(git rev-parse --abbrev-ref HEAD 2>/dev/null)\")"
        for path in paths
    ]
    return "{ " + " & ".join(jobs) + " & wait; } 2>/dev/null"


def fetch_branches_shell(paths: list[str]) -> dict[str, str]:
    """Look up branches through one backgrounded shell invocation."""
    if not paths:
        return {}
    result = run_command(
        [SHELL, "-c", build_branch_script(paths)],
        operation="fetch_branches_shell"
    )
    if result.is_err():
        return {}
    return parse_branch_map(result.value)


def fetch_branches(
    paths: list[str],
    strategy: str = "tasks",
    concurrency: int = 8,
) -> dict[str, str]:
    """
    Fetch the current branch of every folder in one batch.

    Args:
        paths: Local folder paths
        strategy: "tasks" or "shell"
        concurrency: Maximum concurrent git processes for "tasks"

    Returns:
        Mapping of path to branch name; folders that are not repositories,
        are detached, or failed are simply absent
    """
    if not paths:
        return {}

    if strategy == "shell":
        branches = fetch_branches_shell(paths)
    else:
        branches = fetch_branches_tasks(paths, concurrency)

    logger.debug(
        "Branch lookup complete",
        operation="fetch_branches",
        status="success",
        strategy=strategy,
        metrics={"folders": len(paths), "branches": len(branches)}
    )
    return branches
