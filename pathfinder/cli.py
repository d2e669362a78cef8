"""
Command-line entry point: ``path``.

Usage:
    path                       Show PATH summary table
    path --list                List all executables in each directory
    path --list --top 10       Show first 10 executables per directory
    path --dir /usr/local/bin  List executables in a specific directory
    path --shadows             Find shadowed executables across PATH
    path --dupes               Show duplicate PATH entries
"""

from __future__ import annotations

import argparse
import json
import sys

from . import __version__, render
from .common import home_dir
from .config import Config, load_config
from .logging_config import setup_logging
from .scanner import DirectoryScan, scan_directories
from .sources import DirectoryRecord, build_directory_records, path_entries


def non_negative_int(value: str) -> int:
    """argparse type for counts that may be zero but not negative."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or greater, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="path",
        description="Display PATH entries with sources and analysis.",
        epilog=__doc__.split("Usage:", 1)[1],
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-d", "--dupes", action="store_true", help="Show only duplicate entries")
    parser.add_argument("-l", "--list", action="store_true", help="List executables in each directory")
    parser.add_argument(
        "-s", "--shadows", action="store_true",
        help="Show only shadowed executables (implies --list)",
    )
    parser.add_argument("--dir", help="Filter to a specific directory (implies --list)")
    parser.add_argument("--top", type=non_negative_int, help="Show only the first N executables per directory")
    parser.add_argument("--json", action="store_true", help="Emit results as JSON")
    parser.add_argument("--config", help="Path to a configuration file")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def filter_records(
    records: list[DirectoryRecord], dupes: bool = False, directory: str | None = None
) -> list[DirectoryRecord]:
    """Apply --dupes and --dir display filters."""
    if dupes:
        records = [r for r in records if r.is_duplicate]
    if directory:
        records = [r for r in records if r.directory == directory or r.directory.endswith(directory)]
    return records


def _displayed(scans: list[DirectoryScan], shown: list[DirectoryRecord]) -> list[DirectoryScan]:
    indices = {r.index for r in shown}
    return [s for s in scans if s.record.index in indices]


def cmd_summary(records: list[DirectoryRecord], shown: list[DirectoryRecord], args: argparse.Namespace) -> int:
    if args.json:
        print(json.dumps({"entries": [r.to_dict() for r in shown]}, indent=2, ensure_ascii=False))
        return 0
    render.print_directory_table(shown, records)
    print()
    return 0


def cmd_list(
    records: list[DirectoryRecord],
    shown: list[DirectoryRecord],
    config: Config,
    args: argparse.Namespace,
) -> int:
    # Shadowing is resolved over the whole PATH, filters only affect display
    scans = scan_directories(
        records,
        config=config.containers,
        max_workers=config.scan.max_workers,
        verbose=args.verbose,
    )
    displayed = _displayed(scans, shown)

    if args.json:
        directories = [s.to_dict() for s in displayed]
        if args.shadows:
            for d in directories:
                d["executables"] = [e for e in d["executables"] if e["shadowed"]]
        print(json.dumps({"directories": directories}, indent=2, ensure_ascii=False))
        return 0

    render.print_listing(
        displayed,
        entry_count=len(records),
        home=home_dir(),
        shadows_only=args.shadows,
        top=args.top,
    )
    print()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(verbose=args.verbose)
    if args.no_color or args.json:
        render.set_color(False)

    try:
        config = load_config(args.config, verbose=args.verbose)
    except ValueError as e:
        print(f"path: {e}", file=sys.stderr)
        return 2

    if args.shadows or args.dir:
        args.list = True

    records = build_directory_records(path_entries())
    shown = filter_records(records, dupes=args.dupes, directory=args.dir)

    if args.list:
        return cmd_list(records, shown, config, args)
    return cmd_summary(records, shown, args)


def run() -> None:
    """Console script wrapper with clean Ctrl-C handling."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    run()
