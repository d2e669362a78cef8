"""
PATH entries and where they were configured.

Traces each PATH directory back to the file that added it: /etc/paths,
/etc/paths.d, shell startup files, or an ``eval "$(tool init)"`` line in
one of those.
"""

from __future__ import annotations

import os
import pwd
from dataclasses import dataclass

from .common import expand_vars, home_dir, short_path, vlog

UNKNOWN_SOURCE = "unknown"

ETC_PATHS = "/etc/paths"
ETC_PATHS_D = "/etc/paths.d"


def rc_files(home: str) -> list[str]:
    """Shell startup files that may modify PATH, in lookup order."""
    return [
        f"{home}/.zshenv", f"{home}/.zshrc", f"{home}/.zprofile",
        f"{home}/.bashrc", f"{home}/.bash_profile", f"{home}/.profile",
        f"{home}/.config/zsh/.zshenv", f"{home}/.config/zsh/.zshrc",
        f"{home}/.config/zsh/.zprofile",
        "/etc/zshenv", "/etc/zshrc", "/etc/zprofile", "/etc/profile",
    ]


def eval_tools(home: str) -> list[tuple[str, list[str]]]:
    """Known ``eval`` environment mutators and the directories they prepend."""
    return [
        ("brew shellenv", ["/opt/homebrew/bin", "/opt/homebrew/sbin"]),
        ("rbenv init", [f"{home}/.rbenv/shims", f"{home}/.rbenv/bin"]),
        ("pyenv init", [f"{home}/.pyenv/shims", f"{home}/.pyenv/bin"]),
        ("nodenv init", [f"{home}/.nodenv/shims", f"{home}/.nodenv/bin"]),
        ("swiftenv init", [f"{home}/.swiftenv/shims", f"{home}/.swiftenv/bin"]),
    ]


def sort_names(names: list[str]) -> list[str]:
    """Case-insensitive sort; ties broken by the raw name for determinism."""
    return sorted(names, key=lambda n: (n.casefold(), n))


def list_executables(directory: str) -> list[str]:
    """
    List executable files in a directory.

    Hidden entries and directories are skipped; symlinks count if their
    target is an executable file. An unlistable directory yields no names.

    Returns:
        Executable names in case-insensitive order
    """
    names: list[str] = []
    try:
        with os.scandir(directory) as it:
            for entry in it:
                if entry.name.startswith("."):
                    continue
                try:
                    if entry.is_dir():
                        continue
                except OSError:
                    continue
                if os.access(entry.path, os.X_OK):
                    names.append(entry.name)
    except OSError as e:
        vlog(f"Cannot list {directory}: {e}")
        return []
    return sort_names(names)


def _read_lines(path: str) -> list[str]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read().splitlines()
    except (OSError, UnicodeDecodeError):
        return []


def _paths_file_sources(path: str) -> list[tuple[str, str]]:
    return [(line.strip(), path) for line in _read_lines(path) if line.strip()]


def parse_rc_file(rc: str, lines: list[str], home: str) -> list[tuple[str, str]]:
    """
    Extract PATH directories assigned in a shell startup file.

    Args:
        rc: Path of the startup file (used as source label)
        lines: Contents of the file
        home: Home directory for variable expansion

    Returns:
        List of (directory, source label) pairs in file order
    """
    sources: list[tuple[str, str]] = []
    tools = eval_tools(home)

    for line in lines:
        trimmed = line.strip()

        if trimmed.startswith("eval ") or trimmed.startswith("eval\t"):
            for pattern, paths in tools:
                if pattern in trimmed:
                    label = f"{rc} (via {pattern.split()[0]})"
                    sources.extend((p, label) for p in paths)
            continue

        if "PATH=" not in trimmed:
            continue

        value = trimmed.split("PATH=", 1)[1].replace('"', "").replace("'", "")
        for part in value.split(":"):
            if part in ("$PATH", "${PATH}") or not part:
                continue
            sources.append((expand_vars(part, home), rc))

    return sources


def collect_sources(home: str | None = None) -> list[tuple[str, str]]:
    """
    Collect known PATH sources.

    Returns:
        (directory, source file) pairs; earlier pairs take precedence
    """
    home = home or home_dir()
    sources = _paths_file_sources(ETC_PATHS)

    try:
        paths_d = sorted(os.listdir(ETC_PATHS_D))
    except OSError:
        paths_d = []
    for name in paths_d:
        sources.extend(_paths_file_sources(os.path.join(ETC_PATHS_D, name)))

    for rc in rc_files(home):
        if os.path.isfile(rc):
            sources.extend(parse_rc_file(rc, _read_lines(rc), home))

    return sources


def find_source(directory: str, sources: list[tuple[str, str]], home: str | None = None) -> str:
    """Label of the first source that adds ``directory``, home-shortened."""
    for path, source in sources:
        if path == directory:
            return short_path(source, home)
    return UNKNOWN_SOURCE


def path_entries(path_env: str | None = None) -> list[str]:
    """Split a PATH string (defaults to $PATH) into its non-empty entries."""
    if path_env is None:
        path_env = os.environ.get("PATH", "")
    return [p for p in path_env.split(os.pathsep) if p]


def owner_name(path: str) -> str:
    """Account name owning ``path``, or the numeric uid if it has none."""
    try:
        uid = os.stat(path).st_uid
    except OSError:
        return ""
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


@dataclass(frozen=True)
class DirectoryRecord:
    """
    One PATH entry with display attributes.

    Attributes:
        index: 1-based position in PATH
        directory: Directory as written in PATH
        exists: Whether the directory exists
        is_duplicate: Whether an earlier PATH entry is the same string
        writable: Whether the current user can write to the directory
        owner: Owning account name
        source: Where the entry was configured ("unknown" if not traced)
        bin_count: Number of executables in the directory
    """
    index: int
    directory: str
    exists: bool
    is_duplicate: bool = False
    writable: bool = False
    owner: str = ""
    source: str = UNKNOWN_SOURCE
    bin_count: int = 0

    def executables(self) -> list[str]:
        """Executable names in case-insensitive order (empty if missing)."""
        if not self.exists:
            return []
        return list_executables(self.directory)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "index": self.index,
            "directory": self.directory,
            "exists": self.exists,
            "is_duplicate": self.is_duplicate,
            "writable": self.writable,
            "owner": self.owner,
            "source": self.source,
            "bin_count": self.bin_count,
        }


def build_directory_records(
    entries: list[str],
    sources: list[tuple[str, str]] | None = None,
    home: str | None = None,
) -> list[DirectoryRecord]:
    """
    Build display records for PATH entries.

    Args:
        entries: PATH entries in declared order
        sources: Known (directory, source) pairs; collected if None
        home: Home directory used to shorten labels

    Returns:
        One DirectoryRecord per entry, duplicates flagged
    """
    home = home or home_dir()
    if sources is None:
        sources = collect_sources(home)

    seen: set[str] = set()
    records: list[DirectoryRecord] = []
    for i, directory in enumerate(entries, start=1):
        is_duplicate = directory in seen
        seen.add(directory)

        exists = os.path.isdir(directory)
        records.append(DirectoryRecord(
            index=i,
            directory=directory,
            exists=exists,
            is_duplicate=is_duplicate,
            writable=exists and os.access(directory, os.W_OK),
            owner=owner_name(directory) if exists else "",
            source=find_source(directory, sources, home),
            bin_count=len(list_executables(directory)) if exists else 0,
        ))
    return records
