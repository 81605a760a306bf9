"""Size and sector arithmetic shared by the planner and the image writers."""

from __future__ import annotations

import re
from typing import Optional

from .exceptions import MalformedSize

SECTOR_SIZE = 512
SECTORS_PER_KB = 1024 // SECTOR_SIZE

# Protective MBR + primary header + 32 sectors of partition entries.
# The same amount is kept free at the end for the backup header and table.
GPT_RESERVED_SECTORS = 34

FIXED_PADDING_KB = 1024
MINIMUM_IMAGE_KB = 16384

OPTIONAL_FILE_MARKER = "-"

_SIZE_PATTERN = re.compile(r"^([0-9]+)([GgMmKk]?)$")

_UNIT_MULTIPLIERS = {
    "g": 1024 * 1024,
    "m": 1024,
    "k": 1,
    "": 1,
}


def normalize_size(token: str, field: str = "size", line_number: Optional[int] = None) -> int:
    """Convert a size token such as ``512M`` to kibibytes.

    ``G`` and ``M`` suffixes (either case) scale by 1024 per step; ``K`` or
    no suffix means the value is already in kibibytes.

    Raises:
        MalformedSize: If the token is not a non-negative integer followed
            by at most one recognized suffix.
    """
    if token is None:
        raise MalformedSize("", field=field, line_number=line_number)
    match = _SIZE_PATTERN.match(str(token).strip())
    if not match:
        raise MalformedSize(str(token), field=field, line_number=line_number)
    value, unit = match.groups()
    return int(value) * _UNIT_MULTIPLIERS[unit.lower()]


def kb_to_sectors(size_kb: int) -> int:
    return size_kb * SECTORS_PER_KB


def sectors_to_kb(sectors: int) -> int:
    return sectors // SECTORS_PER_KB


def round_up(value: int, granularity: int) -> int:
    """Round ``value`` up to the next multiple of ``granularity`` (no-op for 0)."""
    if granularity <= 0:
        return value
    return -(-value // granularity) * granularity


def human_size(size_bytes):
    if size_bytes is None:
        return "0B"
    size = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size < 1024.0:
            return f"{size:.1f}{unit}"
        size /= 1024.0
    return f"{size:.1f}PB"
