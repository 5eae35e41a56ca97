# =============================================================================
# Launcher Environment
# =============================================================================
# Alfred runs scripts with a minimal macOS PATH (/usr/bin:/bin:/usr/sbin:/sbin)
# and passes context through environment variables.

import os
from pathlib import Path

_ADDITIONAL_PATHS = [
    "/opt/homebrew/bin",      # Homebrew on Apple Silicon
    "/usr/local/bin",         # Homebrew on Intel / user binaries
    os.path.expanduser("~/.local/bin"),
]


def augment_path() -> None:
    """
    Augment PATH with common macOS tool locations.

    Lets subprocess find tools installed outside the system directories
    (Homebrew git, for instance).
    """
    current_path = os.environ.get("PATH", "")
    path_dirs = current_path.split(os.pathsep)

    for additional in reversed(_ADDITIONAL_PATHS):
        if additional not in path_dirs and os.path.isdir(additional):
            path_dirs.insert(0, additional)

    os.environ["PATH"] = os.pathsep.join(path_dirs)


def home_dir() -> Path:
    """HOME as passed by the launcher, falling back to the account's home."""
    home = os.environ.get("HOME")
    return Path(home) if home else Path.home()


def pretty_path(path: str | Path, home: Path | None = None) -> str:
    """Replace a leading home directory with ``~`` for display."""
    home_str = str(home or home_dir())
    path_str = str(path)
    if path_str == home_str or path_str.startswith(home_str + os.sep):
        return "~" + path_str[len(home_str):]
    return path_str


def get_env(name: str) -> str | None:
    """Read a launcher variable, treating empty strings as unset."""
    value = os.environ.get(name)
    return value if value else None
