"""
Configuration file parsing and management.

Supports YAML configuration files, with JSON accepted for files ending in
".json". Merges configurations from multiple sources
(explicit path → user → system → defaults).
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from typing import Any

import yaml

from .common import vlog
from .logging_config import warning


# Configuration file locations (in priority order)
CONFIG_LOCATIONS = [
    os.path.expanduser("~/.config/pathfinder/config.yml"),  # User global
    os.path.expanduser("~/.config/pathfinder/config.yaml"),
    "/etc/pathfinder/config.yml",                          # System global
    "/etc/pathfinder/config.yaml",
]

DEFAULT_SOURCES_ROOT = os.path.expanduser("~/.config/pathfinder/containers")
DEFAULT_DESCRIPTOR = "Dockerfile"
DEFAULT_WRAPPER_MARKER = "# Auto-generated wrapper"
DEFAULT_RUN_MARKERS = ("docker run", "podman run", "container run")
DEFAULT_MAX_WORKERS = 16


@dataclass(frozen=True)
class ContainerConfig:
    """
    Settings for recognizing generated container-launcher wrappers.

    Attributes:
        sources_root: Directory holding one build context per wrapped tool
        descriptor: File name of the image descriptor inside a build context
        wrapper_marker: Text that generated wrappers always contain
        run_markers: Container "run" invocations that, together with
            sources_root, identify a hand-written wrapper
    """
    sources_root: str = DEFAULT_SOURCES_ROOT
    descriptor: str = DEFAULT_DESCRIPTOR
    wrapper_marker: str = DEFAULT_WRAPPER_MARKER
    run_markers: tuple[str, ...] = DEFAULT_RUN_MARKERS

    def __post_init__(self):
        """Validate container settings after initialization."""
        if not self.sources_root:
            raise ValueError("containers.sources_root must not be empty")
        if not self.descriptor or os.sep in self.descriptor:
            raise ValueError(
                f"Invalid containers.descriptor: {self.descriptor!r}. "
                "Must be a plain file name"
            )
        if not self.wrapper_marker:
            raise ValueError("containers.wrapper_marker must not be empty")
        if not isinstance(self.run_markers, tuple) or not all(
            isinstance(marker, str) and marker for marker in self.run_markers
        ):
            raise ValueError(
                f"Invalid containers.run_markers: {self.run_markers!r}. "
                "Must be a list of non-empty strings"
            )

    def descriptor_path(self, name: str) -> str:
        """Path of the image descriptor for the executable ``name``."""
        return os.path.join(self.sources_root, os.path.basename(name), self.descriptor)

    @staticmethod
    def from_dict(data: dict[str, Any]) -> ContainerConfig:
        """Create ContainerConfig from dictionary."""
        run_markers = data.get("run_markers", DEFAULT_RUN_MARKERS)
        if not isinstance(run_markers, (list, tuple)):
            raise ValueError(
                f"Invalid containers.run_markers: {run_markers!r}. "
                "Must be a list of non-empty strings"
            )
        return ContainerConfig(
            sources_root=os.path.expanduser(data.get("sources_root", DEFAULT_SOURCES_ROOT)),
            descriptor=data.get("descriptor", DEFAULT_DESCRIPTOR),
            wrapper_marker=data.get("wrapper_marker", DEFAULT_WRAPPER_MARKER),
            run_markers=tuple(run_markers),
        )


@dataclass(frozen=True)
class ScanPreferences:
    """
    Preferences for directory scanning.

    Attributes:
        max_workers: Maximum number of parallel classification workers
    """
    max_workers: int = DEFAULT_MAX_WORKERS

    def __post_init__(self):
        """Validate preferences after initialization."""
        if self.max_workers < 1 or self.max_workers > 64:
            raise ValueError(
                f"Invalid max_workers: {self.max_workers}. "
                "Must be between 1 and 64"
            )

    @staticmethod
    def from_dict(data: dict[str, Any]) -> ScanPreferences:
        """Create ScanPreferences from dictionary."""
        return ScanPreferences(max_workers=data.get("max_workers", DEFAULT_MAX_WORKERS))


@dataclass(frozen=True)
class Config:
    """
    Complete configuration for pathfinder.

    Attributes:
        version: Config schema version
        scan: Directory scanning preferences
        containers: Container wrapper detection settings
        source: Path to the configuration file that was loaded
    """
    version: int = 1
    scan: ScanPreferences = field(default_factory=ScanPreferences)
    containers: ContainerConfig = field(default_factory=ContainerConfig)
    source: str = ""

    def __post_init__(self):
        """Validate config after initialization."""
        if self.version != 1:
            raise ValueError(f"Unsupported config version: {self.version}. Expected version 1")

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> Config:
        """Create Config from dictionary."""
        scan = data.get("scan") or {}
        containers = data.get("containers") or {}
        for name, section in (("scan", scan), ("containers", containers)):
            if not isinstance(section, dict):
                raise ValueError(f"Config section '{name}' must be a mapping")

        return Config(
            version=data.get("version", 1),
            scan=ScanPreferences.from_dict(scan),
            containers=ContainerConfig.from_dict(containers),
            source=source,
        )

    def merge_with(self, other: Config) -> Config:
        """
        Merge this config with another, preferring values from this config.

        Values equal to the defaults are considered unset.

        Args:
            other: Other config to merge (lower priority)

        Returns:
            New merged Config object
        """
        defaults = ContainerConfig()

        def pick(name: str) -> Any:
            mine = getattr(self.containers, name)
            return mine if mine != getattr(defaults, name) else getattr(other.containers, name)

        merged_containers = ContainerConfig(
            sources_root=pick("sources_root"),
            descriptor=pick("descriptor"),
            wrapper_marker=pick("wrapper_marker"),
            run_markers=pick("run_markers"),
        )

        merged_scan = ScanPreferences(
            max_workers=self.scan.max_workers
            if self.scan.max_workers != DEFAULT_MAX_WORKERS
            else other.scan.max_workers,
        )

        return Config(
            version=self.version,
            scan=merged_scan,
            containers=merged_containers,
            source=self.source or other.source,
        )


def _load_yaml(file_path: str) -> dict[str, Any] | None:
    """
    Load YAML configuration file.

    Returns:
        Parsed configuration dictionary, or None if the file is unreadable or invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return None


def _load_json(file_path: str) -> dict[str, Any] | None:
    """
    Load JSON configuration file.

    Returns:
        Parsed configuration dictionary, or None if the file is unreadable or invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, json.JSONDecodeError):
        return None


def load_config_file(file_path: str, verbose: bool = False) -> Config | None:
    """
    Load configuration from a single file.

    Args:
        file_path: Path to configuration file (.yml, .yaml or .json)
        verbose: Enable verbose logging

    Returns:
        Config object, or None if file cannot be loaded
    """
    if not os.path.exists(file_path):
        return None

    vlog(f"Loading config from: {file_path}", verbose)

    if file_path.endswith(".json"):
        data = _load_json(file_path)
    else:
        data = _load_yaml(file_path)

    if data is None:
        vlog(f"Invalid config file: {file_path}", verbose)
        return None

    try:
        config = Config.from_dict(data, source=file_path)
        vlog(f"Loaded config successfully: {file_path}", verbose)
        return config
    except (ValueError, TypeError) as e:
        vlog(f"Config validation failed for {file_path}: {e}", verbose)
        return None


def apply_env_overrides(config: Config) -> Config:
    """Apply PATHFINDER_* environment overrides on top of a loaded config."""
    workers = os.environ.get("PATHFINDER_MAX_WORKERS")
    if workers:
        try:
            scan = ScanPreferences(max_workers=int(workers))
        except ValueError as e:
            warning(f"Ignoring PATHFINDER_MAX_WORKERS={workers!r}: {e}")
        else:
            config = replace(config, scan=scan)
    return config


def load_config(
    custom_path: str | None = None,
    verbose: bool = False,
) -> Config:
    """
    Load and merge configuration from all sources.

    Configuration precedence (highest to lowest):
    1. Custom path (if provided)
    2. User ~/.config/pathfinder/config.yml
    3. System /etc/pathfinder/config.yml
    4. Default configuration

    Args:
        custom_path: Optional path to custom configuration file
        verbose: Enable verbose logging

    Returns:
        Merged Config object (never None, returns defaults if no config found)

    Raises:
        ValueError: If custom_path is provided but file cannot be loaded
    """
    configs: list[Config] = []

    if custom_path:
        config = load_config_file(custom_path, verbose)
        if config is None:
            raise ValueError(f"Could not load config from specified path: {custom_path}")
        configs.append(config)

    for location in CONFIG_LOCATIONS:
        config = load_config_file(location, verbose)
        if config is not None:
            configs.append(config)

    if not configs:
        vlog("No config files found, using defaults", verbose)
        return apply_env_overrides(Config())

    merged = configs[0]
    for config in configs[1:]:
        merged = merged.merge_with(config)

    vlog(f"Merged {len(configs)} config files", verbose)
    return apply_env_overrides(merged)
