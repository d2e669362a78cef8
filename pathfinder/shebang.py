"""
Script interpreter detection from the leading line of a file.
"""

from __future__ import annotations

HEAD_BYTES = 256

# Evaluated in order, first match wins
INTERPRETER_MARKERS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("python",), "python"),
    (("bash",), "bash"),
    (("zsh",), "zsh"),
    (("ruby",), "ruby"),
    (("node",), "node"),
    (("perl",), "perl"),
    (("/sh", "env sh"), "shell"),
)


def detect_script_language(first_line: str) -> str:
    """Map a shebang line to an interpreter tag.

    Args:
        first_line: First line of the script (e.g. "#!/usr/bin/env python3")

    Returns:
        Language tag, or empty string if no interpreter marker matched
    """
    for needles, tag in INTERPRETER_MARKERS:
        if any(needle in first_line for needle in needles):
            return tag
    return ""


def read_first_line(path: str) -> str | None:
    """Read the first text line of a file.

    Only the first 256 bytes are read. Returns None when the file cannot be
    read, is empty, contains NUL bytes or is not valid UTF-8, i.e. when it
    does not look like a script at all.
    """
    try:
        with open(path, "rb") as f:
            head = f.read(HEAD_BYTES)
    except OSError:
        return None

    if not head or b"\x00" in head:
        return None

    try:
        text = head.decode("utf-8")
    except UnicodeDecodeError:
        return None

    lines = text.splitlines()
    return lines[0] if lines else ""
