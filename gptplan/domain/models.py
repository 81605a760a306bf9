"""Domain model for partition layout planning.

Description records come in as ``PartitionSpec`` objects, the planner turns
them into ``ResolvedPartition`` entries, and the whole result is an
immutable ``Plan`` that downstream writers only read.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from gptplan.storage.sizes import (
    OPTIONAL_FILE_MARKER,
    SECTOR_SIZE,
    human_size,
    kb_to_sectors,
)


# ==============================================================================
# Input Domain
# ==============================================================================


@dataclass(frozen=True)
class PartitionSpec:
    """One record of a partition description file.

    ``None`` marks a field that was absent or blank; ``""`` is kept for the
    free-text fields (name, type, format) where empty is meaningful.
    """

    name: str = ""
    size: Optional[str] = None  # raw token, e.g. "512M"; "0" means grow
    align: Optional[str] = None  # raw token in KiB
    type: str = ""  # partition type code, passed through to the table writer
    format: str = ""  # content format tag, e.g. "sparse"
    file: Optional[str] = None  # may carry the optional marker
    line_number: Optional[int] = None

    @property
    def is_reservation(self) -> bool:
        """True when the record only consumes space (no table entry)."""
        return not self.name

    @property
    def file_optional(self) -> bool:
        return bool(self.file) and self.file.startswith(OPTIONAL_FILE_MARKER)

    @property
    def file_name(self) -> Optional[str]:
        """File name with the optional marker stripped."""
        if not self.file:
            return None
        if self.file_optional:
            return self.file[len(OPTIONAL_FILE_MARKER):] or None
        return self.file

    @classmethod
    def from_fields(cls, fields: list[Optional[str]], line_number: Optional[int] = None) -> PartitionSpec:
        """Build a spec from positional description fields.

        Missing trailing fields are treated as absent.
        """
        padded = list(fields) + [None] * (6 - len(fields))
        name, size, align, type_, format_, file_ = padded[:6]

        def _optional(value: Optional[str]) -> Optional[str]:
            if value is None:
                return None
            value = value.strip()
            return value or None

        return cls(
            name=(name or "").strip(),
            size=_optional(size),
            align=_optional(align),
            type=(type_ or "").strip(),
            format=(format_ or "").strip(),
            file=_optional(file_),
            line_number=line_number,
        )


# ==============================================================================
# Plan Domain
# ==============================================================================


@dataclass(frozen=True)
class ResolvedPartition:
    """A partition entry with its final, inclusive sector range."""

    index: int
    start_sector: int
    end_sector: int
    name: str
    size_kb: int
    align_kb: int = 0
    type: str = ""
    format: str = ""
    file_path: str = ""
    grow: bool = False

    @property
    def sector_count(self) -> int:
        return self.end_sector - self.start_sector + 1

    @property
    def byte_offset(self) -> int:
        return self.start_sector * SECTOR_SIZE

    @property
    def byte_length(self) -> int:
        return self.sector_count * SECTOR_SIZE

    def format_label(self) -> str:
        """Format a short human-readable label, e.g. ``"1 boot (1.0MB)"``."""
        return f"{self.index} {self.name} ({human_size(self.byte_length)})"


@dataclass(frozen=True)
class Plan:
    """Ordered partition table plus the total image size in KiB."""

    partitions: tuple[ResolvedPartition, ...]
    total_size_kb: int
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def total_sectors(self) -> int:
        return kb_to_sectors(self.total_size_kb)

    @property
    def total_bytes(self) -> int:
        return self.total_size_kb * 1024

    @property
    def grow_partition(self) -> Optional[ResolvedPartition]:
        for partition in self.partitions:
            if partition.grow:
                return partition
        return None

    def __len__(self) -> int:
        return len(self.partitions)

    def __iter__(self):
        return iter(self.partitions)
