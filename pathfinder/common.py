"""
Common utilities shared across pathfinder modules.
"""

from __future__ import annotations

import os
import sys


def home_dir() -> str:
    """Home directory of the current user, without trailing separator."""
    return os.path.expanduser("~").rstrip(os.sep) or os.sep


def short_path(path: str, home: str | None = None) -> str:
    """
    Abbreviate the home directory prefix of a path with "~".

    Args:
        path: Path or label to shorten
        home: Home directory (defaults to the current user's)

    Returns:
        Shortened path
    """
    home = home if home is not None else home_dir()
    if home and home != os.sep and path.startswith(home):
        return "~" + path[len(home):]
    return path


def expand_vars(path: str, home: str) -> str:
    """
    Expand the handful of variables commonly used in PATH assignments.

    Only $HOME, $XDG_BIN_HOME, $XDG_DATA_HOME (plain and braced) and a
    leading "~" are expanded; anything else is left untouched.
    """
    replacements = (
        ("${HOME}", home),
        ("$HOME", home),
        ("${XDG_BIN_HOME}", f"{home}/.local/bin"),
        ("$XDG_BIN_HOME", f"{home}/.local/bin"),
        ("${XDG_DATA_HOME}", f"{home}/.local/share"),
        ("$XDG_DATA_HOME", f"{home}/.local/share"),
    )
    result = path
    for var, value in replacements:
        result = result.replace(var, value)
    if result.startswith("~"):
        result = home + result[1:]
    return result


def vlog(msg: str, verbose: bool = False) -> None:
    """
    Log verbose message using structured logging.

    Args:
        msg: Message to log
        verbose: Whether verbose mode is enabled
    """
    if verbose or os.environ.get("PATHFINDER_DEBUG", "0") == "1":
        try:
            from .logging_config import info
            info(msg)
        except Exception:
            # Fallback to stderr if logging fails
            print(f"[pathfinder] {msg}", file=sys.stderr)
