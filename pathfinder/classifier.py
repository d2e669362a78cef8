"""
Executable classification.

Decides whether a file found on PATH is a container wrapper, a compiled
binary or a script, in that order of precedence.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .config import ContainerConfig
from .container import detect_container
from .logging_config import debug
from .macho import detect_language, has_known_magic
from .shebang import detect_script_language, read_first_line

SCRIPT = "script"
BINARY = "binary"
CONTAINER = "container"

FILE_TYPES = (SCRIPT, BINARY, CONTAINER)


@dataclass(frozen=True)
class Classification:
    """
    Result of classifying one executable.

    Attributes:
        type: "script", "binary" or "container"
        language: Language or base-image tag, empty string when unknown
    """
    type: str
    language: str = ""

    def __post_init__(self):
        if self.type not in FILE_TYPES:
            raise ValueError(f"Invalid classification type: {self.type}")

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {"type": self.type, "language": self.language}


UNKNOWN_BINARY = Classification(BINARY, "")


def resolve_symlink(path: str) -> str:
    """
    Follow at most one level of symlink indirection.

    Relative targets are resolved against the directory containing the link.
    Non-links and unreadable links resolve to ``path`` itself.
    """
    try:
        if not os.path.islink(path):
            return path
        target = os.readlink(path)
    except OSError:
        return path
    if os.path.isabs(target):
        return target
    return os.path.join(os.path.dirname(path), target)


def classify(original_path: str, config: ContainerConfig | None = None) -> Classification:
    """
    Classify an executable.

    Args:
        original_path: Path as listed in the PATH directory
        config: Container detection settings (defaults if None)

    Returns:
        Classification; unreadable files classify as a binary of unknown language
    """
    tag = detect_container(original_path, config)
    if tag is not None:
        return Classification(CONTAINER, tag)

    resolved = resolve_symlink(original_path)

    language = detect_language(resolved)
    if language is not None:
        return Classification(BINARY, language)

    if has_known_magic(resolved):
        return UNKNOWN_BINARY

    first_line = read_first_line(resolved)
    if first_line is not None:
        return Classification(SCRIPT, detect_script_language(first_line))

    if not os.access(resolved, os.R_OK):
        debug(f"Unreadable executable: {original_path}")
    return UNKNOWN_BINARY
