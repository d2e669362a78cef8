"""
Detection of generated container-launcher wrappers.

A wrapper is a small script placed on PATH that runs a tool inside a
container built from ``<sources_root>/<tool>/<descriptor>``. The base image
named on the descriptor's FROM line gives the wrapper its tag.
"""

from __future__ import annotations

import os

from .config import ContainerConfig

HEAD_BYTES = 512

# Evaluated in order, first match wins
BASE_IMAGE_TAGS = ("kali", "debian", "alpine", "ubuntu", "python", "node", "go", "rust")


def is_container_wrapper(head: bytes, config: ContainerConfig) -> bool:
    """
    Check leading bytes of a file for the wrapper pattern.

    Matches on the generated-wrapper marker, or on the container sources
    directory appearing together with a container "run" invocation.
    """
    if config.wrapper_marker.encode() in head:
        return True
    if config.sources_root.encode() not in head:
        return False
    return any(marker.encode() in head for marker in config.run_markers)


def base_image_tag(descriptor_text: str) -> str:
    """
    Extract a known base-image tag from the first FROM line.

    Only the first FROM line is considered, even if it names no known image.

    Returns:
        Tag such as "debian", or empty string
    """
    for line in descriptor_text.splitlines():
        # The directive must start the line and be followed by whitespace
        if not line.startswith("FROM") or not line[4:5].isspace():
            continue
        for tag in BASE_IMAGE_TAGS:
            if tag in line:
                return tag
        return ""
    return ""


def resolve_base_image(name: str, config: ContainerConfig) -> str:
    """
    Read the image descriptor for ``name`` and return its base-image tag.

    A missing or unreadable descriptor yields an empty tag.
    """
    try:
        with open(config.descriptor_path(name), "r", encoding="utf-8", errors="replace") as f:
            return base_image_tag(f.read())
    except OSError:
        return ""


def detect_container(original_path: str, config: ContainerConfig | None = None) -> str | None:
    """
    Detect a container wrapper at ``original_path``.

    The original path is inspected, not a symlink-resolved one, and the
    descriptor is keyed by its base name.

    Args:
        original_path: Path as found in the PATH directory
        config: Container detection settings (defaults if None)

    Returns:
        Base-image tag (possibly empty) if the file is a wrapper, None otherwise
    """
    config = config or ContainerConfig()
    try:
        with open(original_path, "rb") as f:
            head = f.read(HEAD_BYTES)
    except OSError:
        return None

    if not is_container_wrapper(head, config):
        return None

    return resolve_base_image(os.path.basename(original_path), config)
