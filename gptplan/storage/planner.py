"""GPT partition layout planning.

The planner walks the description records in order, keeping a running
sector cursor. Each record may round the cursor up to its alignment, then
consumes ``size * 2`` sectors. Named records become partition entries;
unnamed ones only reserve space.

Layout rules:
    - A start below LBA 34 (protective MBR, primary header and table) is
      moved to 34 and the cursor is advanced by 34 on top of the size it
      already consumed.
    - A size of ``0`` marks the grow partition. Planning stops after it, and
      its end sector is set to ``total_sectors - 34`` once the image size is
      known, leaving room for the backup header and table.
    - The image size is ``cursor / 2 + 1024`` KiB, at least 16384 KiB. An
      explicitly requested size may enlarge the image but never shrink it.

Example:
    >>> from gptplan.domain.models import PartitionSpec
    >>> plan = plan_layout([PartitionSpec("boot", "1M", "1", "ef00")])
    >>> plan.partitions[0].start_sector, plan.partitions[0].end_sector
    (34, 2081)
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from gptplan.domain.models import PartitionSpec, Plan, ResolvedPartition
from gptplan.logging import operation_context

from .exceptions import MissingFile, SizeMismatch
from .sizes import (
    FIXED_PADDING_KB,
    GPT_RESERVED_SECTORS,
    MINIMUM_IMAGE_KB,
    kb_to_sectors,
    normalize_size,
    round_up,
    sectors_to_kb,
)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class _CursorState:
    cursor: int = 0
    index: int = 0
    stopped: bool = False


def _place(state: _CursorState, spec: PartitionSpec) -> tuple[_CursorState, Optional[ResolvedPartition]]:
    """Advance the cursor over one record and build its entry, if any."""
    if spec.size is None:
        return state, None

    size_kb = normalize_size(spec.size, field="size", line_number=spec.line_number)
    align_kb = 0
    if spec.align is not None:
        align_kb = normalize_size(spec.align, field="align", line_number=spec.line_number)

    start = round_up(state.cursor, kb_to_sectors(align_kb))
    cursor = start + kb_to_sectors(size_kb)

    if spec.is_reservation:
        return dataclasses.replace(state, cursor=cursor), None

    if start < GPT_RESERVED_SECTORS:
        start = GPT_RESERVED_SECTORS
        cursor += start

    index = state.index + 1
    entry = ResolvedPartition(
        index=index,
        start_sector=start,
        end_sector=cursor - 1,
        name=spec.name,
        size_kb=size_kb,
        align_kb=align_kb,
        type=spec.type,
        format=spec.format,
        grow=size_kb == 0,
    )
    return _CursorState(cursor=cursor, index=index, stopped=entry.grow), entry


def resolve_file(file_name: str, include_paths: Iterable[PathLike]) -> Optional[Path]:
    """Return the first ``<dir>/<file_name>`` that exists, resolved."""
    for directory in include_paths:
        candidate = Path(directory) / file_name
        if candidate.is_file():
            return candidate.resolve()
    return None


def compute_total_size_kb(cursor: int, requested_size_kb: Optional[int] = None) -> int:
    """Image size in KiB for a final cursor position.

    Raises:
        SizeMismatch: If ``requested_size_kb`` is below the computed size.
    """
    total_kb = max(sectors_to_kb(cursor) + FIXED_PADDING_KB, MINIMUM_IMAGE_KB)
    if requested_size_kb is None:
        return total_kb
    if total_kb > requested_size_kb:
        raise SizeMismatch(requested_size_kb, total_kb)
    return max(total_kb, requested_size_kb)


def grow_end_sector(total_size_kb: int) -> int:
    return kb_to_sectors(total_size_kb) - GPT_RESERVED_SECTORS


def plan_layout(
    specs: Iterable[PartitionSpec],
    *,
    include_paths: Sequence[PathLike] = (),
    requested_size_kb: Optional[int] = None,
    partition_only: bool = False,
) -> Plan:
    """Compute the partition table for an ordered list of records.

    Args:
        specs: Description records in file order
        include_paths: Directories searched, in order, for content files
        requested_size_kb: Explicit image size; must not be below the
            computed minimum
        partition_only: Skip content file resolution

    Returns:
        Immutable Plan with final sector ranges and total size

    Raises:
        MalformedSize: Unparseable size or align token
        MissingFile: Required content file not found
        SizeMismatch: requested_size_kb too small
    """
    search_paths = [str(path) for path in include_paths] or [os.curdir]
    state = _CursorState()
    partitions: list[ResolvedPartition] = []
    warnings: list[str] = []

    with operation_context("plan") as log:
        for spec in specs:
            state, entry = _place(state, spec)
            if entry is None:
                if spec.size is not None:
                    log.debug(f"Reserved space up to sector {state.cursor} (line {spec.line_number})")
                continue

            file_name = spec.file_name
            if not partition_only and file_name:
                resolved = resolve_file(file_name, search_paths)
                if resolved is not None:
                    entry = dataclasses.replace(entry, file_path=str(resolved))
                elif spec.file_optional:
                    message = f"Optional file {file_name!r} for partition {spec.name!r} not found"
                    log.warning(message)
                    warnings.append(message)
                else:
                    raise MissingFile(file_name, search_paths, line_number=spec.line_number)

            log.debug(
                f"Partition {entry.index} {entry.name!r}: "
                f"sectors {entry.start_sector}-{entry.end_sector}"
            )
            partitions.append(entry)

            if state.stopped:
                break

        total_size_kb = compute_total_size_kb(state.cursor, requested_size_kb)
        partitions = [
            dataclasses.replace(entry, end_sector=grow_end_sector(total_size_kb))
            if entry.grow
            else entry
            for entry in partitions
        ]
        log.info(f"Planned {len(partitions)} partitions, image size {total_size_kb}K")

    return Plan(
        partitions=tuple(partitions),
        total_size_kb=total_size_kb,
        warnings=tuple(warnings),
    )
