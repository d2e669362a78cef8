"""
PATH scanning: per-directory parallel classification, sequential shadow fold.

Classification of the executables within one directory runs in a thread
pool. Results are re-sorted into canonical name order before being folded
into the shadow map, and directories are folded strictly in PATH order.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Sequence

from .classifier import UNKNOWN_BINARY, Classification, classify, resolve_symlink
from .common import vlog
from .config import DEFAULT_MAX_WORKERS, ContainerConfig
from .shadows import ShadowEntry, ShadowResolver
from .sources import DirectoryRecord, sort_names


@dataclass(frozen=True)
class Candidate:
    """
    An executable found in a PATH directory.

    Attributes:
        name: Executable name
        directory: Containing PATH directory
        original_path: Path inside the directory
        resolved_path: Target after following at most one symlink level
        link_target: Resolved target when the entry is a symlink, else None
    """
    name: str
    directory: str
    original_path: str
    resolved_path: str
    link_target: str | None = None

    @staticmethod
    def from_directory(directory: str, name: str) -> Candidate:
        original = os.path.join(directory, name)
        resolved = resolve_symlink(original)
        return Candidate(
            name=name,
            directory=directory,
            original_path=original,
            resolved_path=resolved,
            link_target=resolved if resolved != original else None,
        )


@dataclass(frozen=True)
class ScanRow:
    """Candidate paired with its shadow-resolved entry."""
    candidate: Candidate
    entry: ShadowEntry

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = self.entry.to_dict()
        data["path"] = self.candidate.original_path
        data["link_target"] = self.candidate.link_target
        return data


@dataclass(frozen=True)
class DirectoryScan:
    """All classified executables of one PATH directory."""
    record: DirectoryRecord
    rows: tuple[ScanRow, ...] = ()

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = self.record.to_dict()
        data["executables"] = [row.to_dict() for row in self.rows]
        return data


def _classify_candidate(
    candidate: Candidate, config: ContainerConfig | None
) -> tuple[Candidate, Classification]:
    return candidate, classify(candidate.original_path, config)


def classify_directory(
    directory: str,
    names: Sequence[str],
    config: ContainerConfig | None = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> list[tuple[Candidate, Classification]]:
    """
    Classify all executables of one directory in parallel.

    Args:
        directory: PATH directory
        names: Executable names in the directory
        config: Container detection settings
        max_workers: Thread pool size

    Returns:
        (candidate, classification) pairs in case-insensitive name order
    """
    if not names:
        return []

    candidates = [Candidate.from_directory(directory, name) for name in names]
    results: dict[str, tuple[Candidate, Classification]] = {}

    with ThreadPoolExecutor(max_workers=min(max_workers, len(candidates))) as executor:
        future_to_candidate = {
            executor.submit(_classify_candidate, candidate, config): candidate
            for candidate in candidates
        }
        for future in as_completed(future_to_candidate):
            candidate = future_to_candidate[future]
            try:
                results[candidate.name] = future.result()
            except Exception as e:
                vlog(f"Classification failed for {candidate.original_path}: {e}")
                results[candidate.name] = (candidate, UNKNOWN_BINARY)

    return [results[name] for name in sort_names(list(results))]


def scan_directories(
    records: Sequence[DirectoryRecord],
    config: ContainerConfig | None = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
    verbose: bool = False,
) -> list[DirectoryScan]:
    """
    Classify every executable on PATH and resolve shadowing.

    Directories are processed one after another in the given order; this
    order decides shadow ownership. Missing directories produce an empty
    scan.

    Args:
        records: PATH directory records in declared order
        config: Container detection settings
        max_workers: Thread pool size for per-directory classification
        verbose: Enable verbose logging

    Returns:
        One DirectoryScan per record, in the same order
    """
    resolver = ShadowResolver()
    scans: list[DirectoryScan] = []

    for record in records:
        names = record.executables()
        vlog(f"Scanning {record.directory}: {len(names)} executables", verbose)

        rows = tuple(
            ScanRow(candidate, resolver.add(candidate.name, record.directory, classification))
            for candidate, classification in classify_directory(
                record.directory, names, config, max_workers
            )
        )
        scans.append(DirectoryScan(record, rows))

    vlog(f"Shadowed executables: {resolver.shadowed_count}", verbose)
    return scans
