"""
pathfinder - PATH inspection and executable classification.

Core Modules:
- Classification: Mach-O language detection, shebang and container wrapper detection
- Shadowing: First-wins resolution of executable names across PATH directories
- Scanning: Per-directory parallel classification, sequential shadow fold
- Foundation: PATH provenance, config, logging, rendering
"""

__version__ = "2.0.0"

VERSION = __version__

# Classification
from .macho import (
    MachOError,
    TruncatedReadError,
    detect_language,
    detect_first_slice_language,
    has_known_magic,
    infer_language,
    read_section_names,
)
from .shebang import detect_script_language, read_first_line
from .container import detect_container, base_image_tag, resolve_base_image
from .classifier import (
    Classification,
    SCRIPT,
    BINARY,
    CONTAINER,
    classify,
    resolve_symlink,
)

# Shadowing and scanning
from .shadows import ShadowEntry, ShadowResolver, resolve_shadows
from .scanner import Candidate, DirectoryScan, ScanRow, classify_directory, scan_directories

# Foundation
from .sources import (
    DirectoryRecord,
    build_directory_records,
    collect_sources,
    list_executables,
    path_entries,
)
from .config import Config, ContainerConfig, ScanPreferences, load_config, load_config_file
from .logging_config import setup_logging, get_logger

__all__ = [
    # Version
    "__version__",
    "VERSION",
    # Classification
    "MachOError",
    "TruncatedReadError",
    "detect_language",
    "detect_first_slice_language",
    "has_known_magic",
    "infer_language",
    "read_section_names",
    "detect_script_language",
    "read_first_line",
    "detect_container",
    "base_image_tag",
    "resolve_base_image",
    "Classification",
    "SCRIPT",
    "BINARY",
    "CONTAINER",
    "classify",
    "resolve_symlink",
    # Shadowing and scanning
    "ShadowEntry",
    "ShadowResolver",
    "resolve_shadows",
    "Candidate",
    "DirectoryScan",
    "ScanRow",
    "classify_directory",
    "scan_directories",
    # Foundation
    "DirectoryRecord",
    "build_directory_records",
    "collect_sources",
    "list_executables",
    "path_entries",
    "Config",
    "ContainerConfig",
    "ScanPreferences",
    "load_config",
    "load_config_file",
    "setup_logging",
    "get_logger",
]
