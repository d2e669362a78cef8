"""
Mach-O header inspection for language detection.

Walks the load commands of a 64-bit Mach-O image (thin, or the first slice
of a fat/universal binary), collects the section names of every
LC_SEGMENT_64 command and maps toolchain-specific section names to a
source language.

Only the first architecture slice of a fat binary is inspected. Slices of a
universal binary are assumed to be built from the same sources, so there is
no host-architecture matching.
"""

from __future__ import annotations

import struct
from typing import BinaryIO, Callable, Iterable

# =============================================================================
# Constants
# =============================================================================

# Magic values as read little-endian from offset 0
MH_MAGIC_64 = 0xFEEDFACF
MH_CIGAM_64 = 0xCFFAEDFE
FAT_MAGIC = 0xCAFEBABE
FAT_CIGAM = 0xBEBAFECA

KNOWN_MAGICS = frozenset({MH_MAGIC_64, MH_CIGAM_64, FAT_MAGIC, FAT_CIGAM})

LC_SEGMENT_64 = 0x19

MACH_HEADER_64_SIZE = 32
MH_NCMDS_OFFSET = 16

LOAD_COMMAND_SIZE = 8

SEGMENT_COMMAND_64_SIZE = 72
SEG_NSECTS_OFFSET = 64

SECTION_64_SIZE = 80
SECTNAME_SIZE = 16

FAT_NARCH_OFFSET = 4
FAT_ARCH_OFFSET = 8
# cputype, cpusubtype, offset; size and align are not needed
FAT_ARCH_PREFIX_SIZE = 12
FAT_ARCH_FILE_OFFSET = 8

LANG_SWIFT = "swift"
LANG_GO = "go"
LANG_RUST = "rust"
LANG_OBJC = "objc"
LANG_C = "c"

# Evaluated in order, first match wins
LANGUAGE_MARKERS: tuple[tuple[Callable[[str], bool], str], ...] = (
    (lambda name: name.startswith("__swift5"), LANG_SWIFT),
    (lambda name: name == "__go_buildinfo", LANG_GO),
    (lambda name: name.startswith("__rustc"), LANG_RUST),
    (lambda name: name.startswith("__objc"), LANG_OBJC),
)


class MachOError(ValueError):
    """Raised when a file is not a usable 64-bit Mach-O image."""

    pass


class TruncatedReadError(MachOError):
    """Raised when fewer bytes are available than a header field requires."""

    pass


# =============================================================================
# Low-level reads
# =============================================================================


def _read_exact(handle: BinaryIO, offset: int, count: int) -> bytes:
    """Read exactly ``count`` bytes at ``offset`` or raise TruncatedReadError."""
    handle.seek(offset)
    data = handle.read(count)
    if len(data) != count:
        raise TruncatedReadError(
            f"Wanted {count} bytes at offset {offset:#x}, got {len(data)}"
        )
    return data


def _read_u32(handle: BinaryIO, offset: int, order: str = "<") -> int:
    return struct.unpack(order + "I", _read_exact(handle, offset, 4))[0]


def _byte_order(magic: int) -> str:
    """struct byte-order prefix for a thin-header magic."""
    if magic == MH_MAGIC_64:
        return "<"
    if magic == MH_CIGAM_64:
        return ">"
    raise MachOError(f"Not a 64-bit Mach-O header: {magic:#010x}")


def _section_name(raw: bytes) -> str:
    return raw[:SECTNAME_SIZE].split(b"\x00", 1)[0].decode("utf-8", errors="replace")


# =============================================================================
# Header walking
# =============================================================================


def _walk_thin(handle: BinaryIO, offset: int) -> tuple[set[str], bool]:
    """Collect section names from the thin header at ``offset``.

    Returns:
        Tuple of (section names, complete). ``complete`` is False when a load
        command or section record ran past the end of the file.

    Raises:
        MachOError: If the header itself is not a 64-bit Mach-O header
        TruncatedReadError: If the fixed-size header cannot be read
    """
    header = _read_exact(handle, offset, MACH_HEADER_64_SIZE)
    order = _byte_order(struct.unpack_from("<I", header, 0)[0])
    (ncmds,) = struct.unpack_from(order + "I", header, MH_NCMDS_OFFSET)

    sections: set[str] = set()
    cursor = offset + MACH_HEADER_64_SIZE

    try:
        for _ in range(ncmds):
            cmd, cmdsize = struct.unpack(
                order + "II", _read_exact(handle, cursor, LOAD_COMMAND_SIZE)
            )
            if cmdsize < LOAD_COMMAND_SIZE:
                raise TruncatedReadError(f"Load command size {cmdsize} at {cursor:#x}")

            if cmd == LC_SEGMENT_64:
                segment = _read_exact(handle, cursor, SEGMENT_COMMAND_64_SIZE)
                (nsects,) = struct.unpack_from(order + "I", segment, SEG_NSECTS_OFFSET)
                sect_offset = cursor + SEGMENT_COMMAND_64_SIZE
                for _ in range(nsects):
                    sections.add(
                        _section_name(_read_exact(handle, sect_offset, SECTION_64_SIZE))
                    )
                    sect_offset += SECTION_64_SIZE

            cursor += cmdsize
    except TruncatedReadError:
        return sections, False

    return sections, True


def _first_slice_offset(handle: BinaryIO, magic: int) -> int:
    """File offset of the first architecture slice of a fat binary."""
    order = "<" if magic == FAT_MAGIC else ">"
    nfat_arch = _read_u32(handle, FAT_NARCH_OFFSET, order)
    if nfat_arch == 0:
        raise MachOError("Fat header lists no architectures")

    arch = _read_exact(handle, FAT_ARCH_OFFSET, FAT_ARCH_PREFIX_SIZE)
    return struct.unpack_from(order + "I", arch, FAT_ARCH_FILE_OFFSET)[0]


def _collect_sections(handle: BinaryIO) -> tuple[set[str], bool]:
    magic = _read_u32(handle, 0)

    if magic in (MH_MAGIC_64, MH_CIGAM_64):
        return _walk_thin(handle, 0)

    if magic in (FAT_MAGIC, FAT_CIGAM):
        return _walk_thin(handle, _first_slice_offset(handle, magic))

    raise MachOError(f"Unrecognized magic {magic:#010x}")


# =============================================================================
# Public API
# =============================================================================


def infer_language(section_names: Iterable[str], complete: bool = True) -> str | None:
    """Map a set of section names to a language tag.

    Args:
        section_names: Section names collected from the image
        complete: Whether every load command was read. A fully walked header
            without any marker is assumed to be plain C; a partially walked
            one is reported as unrecognized instead.

    Returns:
        Language tag, or None if no decision can be made
    """
    names = list(section_names)
    for predicate, tag in LANGUAGE_MARKERS:
        if any(predicate(name) for name in names):
            return tag
    return LANG_C if complete else None


def read_section_names(path: str) -> set[str]:
    """Section names of the first architecture slice of ``path``.

    Raises:
        MachOError: If the file is not a 64-bit Mach-O image
        OSError: If the file cannot be opened
    """
    with open(path, "rb") as handle:
        sections, _complete = _collect_sections(handle)
    return sections


def detect_first_slice_language(path: str) -> str | None:
    """Detect the language of the first architecture slice of ``path``.

    Returns None for unreadable files, unknown formats and truncated headers.
    """
    try:
        with open(path, "rb") as handle:
            sections, complete = _collect_sections(handle)
    except (OSError, MachOError):
        return None
    return infer_language(sections, complete)


def detect_language(path: str) -> str | None:
    """Detect the implementation language of a Mach-O executable.

    Args:
        path: Path to the (already symlink-resolved) executable

    Returns:
        "swift", "go", "rust", "objc" or "c", or None if the file is not a
        readable 64-bit Mach-O image
    """
    return detect_first_slice_language(path)


def has_known_magic(path: str) -> bool:
    """Check the first four bytes against the Mach-O and fat magic values.

    Used for files whose structure could not be parsed but which still carry
    an executable header.
    """
    try:
        with open(path, "rb") as handle:
            head = handle.read(4)
    except OSError:
        return False
    if len(head) != 4:
        return False
    return struct.unpack("<I", head)[0] in KNOWN_MAGICS
