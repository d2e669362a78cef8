"""
Terminal rendering of PATH summaries and executable tables.

Column alignment uses display width, ignoring ANSI colour and OSC 8
sequences, so coloured cells and wide glyphs line up.
"""

from __future__ import annotations

import os
import re
import sys
from typing import Sequence

from wcwidth import wcswidth

from .classifier import BINARY, CONTAINER, SCRIPT
from .common import short_path
from .scanner import DirectoryScan, ScanRow
from .sources import DirectoryRecord

USE_COLOR = os.environ.get("PATHFINDER_COLOR", "1") == "1" and sys.stdout.isatty()

# ANSI color codes
BOLD = "\033[1m"
DIM = "\033[2m"
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
MAGENTA = "\033[35m"
CYAN = "\033[36m"
LIGHT_GRAY = "\033[37m"
GRAY = "\033[90m"
ORANGE = "\033[38;5;208m"
RESET = "\033[0m"

ARROW = "→"
RULE = "─"
DOT = "·"

NAME_WIDTH = 24
TYPE_WIDTH = 12
LANG_WIDTH = 10
TABLE_WIDTH = 50

TYPE_COLORS = {SCRIPT: CYAN, CONTAINER: YELLOW, BINARY: RED}

LANG_COLORS = {
    "shell": YELLOW, "bash": YELLOW, "zsh": YELLOW,
    "swift": CYAN, "python": GREEN, "go": BLUE, "rust": YELLOW,
    "ruby": RED, "node": GREEN, "perl": YELLOW,
    "c": GRAY, "objc": GRAY,
    "kali": BLUE, "debian": YELLOW, "alpine": CYAN, "ubuntu": ORANGE,
}

SHADOW_PREFIX = "shadowed by"

# CSI (color etc.) and OSC 8 hyperlink open/close sequences
CSI_RE = re.compile(r'\x1b\[[0-?]*[ -/]*[@-~]')
OSC8_RE = re.compile(r'\x1b\]8;[^\\]*\\')


def set_color(enabled: bool) -> None:
    """Enable or disable ANSI colour output."""
    global USE_COLOR
    USE_COLOR = enabled


def colorize(text: str, *codes: str) -> str:
    """Apply color codes to text, or return it unchanged if colors are disabled."""
    if not USE_COLOR or not text or not codes:
        return text
    return f"{''.join(codes)}{text}{RESET}"


def display_width(text: str) -> int:
    """Terminal column width of text, ignoring control sequences."""
    visible = CSI_RE.sub("", OSC8_RE.sub("", text))
    width = wcswidth(visible)
    return width if width >= 0 else len(visible)


def pad(text: str, width: int) -> str:
    """Left-align text to a display width."""
    return text + " " * max(0, width - display_width(text))


def row_detail(row: ScanRow, home: str | None = None) -> str:
    """Detail column: shadow owner, else symlink target, else empty."""
    if row.entry.shadowed:
        return f"{SHADOW_PREFIX} {short_path(row.entry.shadowed_by or '', home)}"
    if row.candidate.link_target:
        return f"{ARROW} {short_path(row.candidate.link_target, home)}"
    return ""


def print_header(entry_count: int) -> None:
    print()
    print(f"{colorize('PATH', BOLD, CYAN)} {colorize(f'{entry_count} entries', DIM)}")


def _path_color(record: DirectoryRecord) -> str:
    if not record.exists:
        return RED
    if "/homebrew/" in record.directory or "/Homebrew/" in record.directory:
        return CYAN
    if record.owner != "root":
        return MAGENTA
    return GREEN


def print_directory_table(records: Sequence[DirectoryRecord], all_records: Sequence[DirectoryRecord]) -> None:
    """
    Print the default PATH summary table.

    Args:
        records: Records to display (possibly filtered)
        all_records: Every PATH record, used for the totals line
    """
    print_header(len(all_records))
    print()

    path_w = max([len("Directory")] + [display_width(r.directory) for r in records])
    bins_w = max([len("Bins")] + [len(str(r.bin_count)) for r in records])
    owner_w = max([len("Owner")] + [display_width(r.owner) for r in records])
    writable_w = len("Writable")

    header = (
        f"  #  {pad('Directory', path_w)}  {pad('Bins', bins_w)}  "
        f"{pad('Owner', owner_w)}  {pad('Writable', writable_w)}  Source"
    )
    print(colorize(header, LIGHT_GRAY))

    for r in records:
        index = colorize(f"{r.index:2d}", ORANGE if r.is_duplicate else GRAY)
        directory = colorize(pad(r.directory, path_w), _path_color(r))
        bins = colorize(pad(str(r.bin_count), bins_w), YELLOW)
        owner = colorize(pad(r.owner, owner_w), GREEN if r.owner == "root" else MAGENTA)
        writable = colorize(pad("yes" if r.writable else "-", writable_w), YELLOW if r.writable else DIM)
        print(f" {index}  {directory}  {bins}  {owner}  {writable}  {colorize(r.source, GRAY)}")

    total_bins = sum(r.bin_count for r in all_records)
    total_dups = sum(1 for r in all_records if r.is_duplicate)

    print()
    summary = f"{colorize(str(total_bins), YELLOW)} {colorize('executables', DIM)}"
    if total_dups:
        summary += f"{colorize(',', DIM)} {colorize(str(total_dups), ORANGE)} {colorize('duplicates', DIM)}"
    print(summary)
    print(colorize("Run path --help for more options.", DIM))


def print_missing_directory(record: DirectoryRecord, home: str | None = None) -> None:
    print()
    print(
        f"{colorize(short_path(record.directory, home), BOLD, RED)}  "
        f"{colorize('missing', RED)}  {colorize(f'({record.source})', GRAY)}"
    )


def print_bins_table(
    directory: str,
    rows: Sequence[ScanRow],
    home: str | None = None,
    top: int | None = None,
) -> None:
    """
    Print the executables of one directory.

    Args:
        directory: PATH directory
        rows: Rows to display
        home: Home directory for path shortening
        top: Show only the first N rows
    """
    print()
    print(f"{colorize(short_path(directory, home), BOLD, BLUE)}  {colorize(str(len(rows)), DIM)}")
    print(colorize(RULE * TABLE_WIDTH, DIM))
    print(
        f"  {colorize(pad('Name', NAME_WIDTH), LIGHT_GRAY)}"
        f"{colorize(pad('Type', TYPE_WIDTH), LIGHT_GRAY)}{colorize('Lang', LIGHT_GRAY)}"
    )

    shown = rows[:top] if top is not None else rows
    for row in shown:
        kind = row.entry.classification.type
        lang = row.entry.classification.language
        line = (
            f"  {pad(row.entry.name, NAME_WIDTH)}"
            f"{pad(colorize(kind, TYPE_COLORS.get(kind, GRAY)), TYPE_WIDTH)}"
            f"{pad(colorize(lang, LANG_COLORS.get(lang, GRAY)), LANG_WIDTH)}"
        )
        detail = row_detail(row, home)
        if detail:
            line += colorize(detail, ORANGE if row.entry.shadowed else GRAY)
        print(line.rstrip())

    if top is not None and len(rows) > top:
        print(colorize(f"  ... and {len(rows) - top} more", DIM))


def print_listing(
    scans: Sequence[DirectoryScan],
    entry_count: int,
    home: str | None = None,
    shadows_only: bool = False,
    top: int | None = None,
) -> None:
    """
    Print per-directory executable tables followed by a summary footer.

    Args:
        scans: Directory scans to display
        entry_count: Number of PATH entries (for the header)
        home: Home directory for path shortening
        shadows_only: Show only shadowed executables
        top: Show only the first N rows per directory
    """
    print_header(entry_count)

    counts = {SCRIPT: 0, BINARY: 0, CONTAINER: 0}
    total = 0
    shadowed = 0

    for scan in scans:
        if not scan.record.exists:
            print_missing_directory(scan.record, home)
            continue
        if not scan.rows:
            continue

        total += len(scan.rows)
        for row in scan.rows:
            counts[row.entry.classification.type] += 1
        dir_shadowed = [row for row in scan.rows if row.entry.shadowed]
        shadowed += len(dir_shadowed)

        if shadows_only:
            if dir_shadowed:
                print_bins_table(scan.record.directory, dir_shadowed, home, top)
        else:
            print_bins_table(scan.record.directory, list(scan.rows), home, top)

    if shadows_only and shadowed == 0:
        print("\nNo shadowed executables found.")

    print()
    parts = [
        f"{colorize(str(total), YELLOW)} {colorize('executables', DIM)}",
        f"{colorize(str(counts[SCRIPT]), CYAN)} {colorize('scripts', DIM)}",
        f"{colorize(str(counts[BINARY]), RED)} {colorize('binaries', DIM)}",
    ]
    if counts[CONTAINER]:
        parts.append(f"{colorize(str(counts[CONTAINER]), YELLOW)} {colorize('containers', DIM)}")
    if shadowed:
        parts.append(f"{colorize(str(shadowed), ORANGE)} {colorize('shadowed', DIM)}")
    print(colorize(f"  {DOT}  ", DIM).join(parts))
