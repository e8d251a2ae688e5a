"""Shared filesystem helpers for detection strategies."""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

GLOB_CHARS = ("*", "?", "[")


def expand_path(path: str) -> str:
    """Expand a leading ~ to the user's home directory.

    Only the leading character is replaced ("~/.fnm" -> "/Users/me/.fnm");
    "~user" forms are not resolved against the password database.
    """
    if path.startswith("~"):
        return str(Path.home()) + path[1:]
    return path


def has_glob_pattern(path: str) -> bool:
    """Check if path contains glob metacharacters."""
    return any(char in path for char in GLOB_CHARS)


def is_executable(path: str) -> bool:
    """Check that path exists and the process may execute it.

    Permission errors, broken symlinks and other OSErrors all count as
    "not executable".
    """
    try:
        if not os.path.exists(path):
            return False
        return os.access(path, os.X_OK)
    except OSError as e:
        logger.debug(f"Cannot check {path}: {e}")
        return False
