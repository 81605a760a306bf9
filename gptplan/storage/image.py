"""Image materialization: allocation, GPT creation and content transfer.

Operations:
    - allocate_image(): Create a zero-filled image file, or wipe a block device
    - check_partition_contents(): Reject unwritable content before any write
    - write_partition_table(): Create the GPT and one entry per partition
    - write_partition_contents(): Copy a partition's source file into place
    - materialize_plan(): All of the above in order

Implementation Details:
    - Uses sgdisk for GPT creation (headers, CRCs and GUIDs are its job)
    - Uses simg2img to expand Android sparse images before copying
    - Uses blockdev to read the size of a block device
    - Raw copies are done in-process with chunked reads and writes

All functions expect a finished Plan; nothing here changes sector ranges.
"""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path
from typing import Union

from gptplan.config import settings
from gptplan.domain.models import Plan, ResolvedPartition
from gptplan.logging import LoggerFactory, operation_context

from .commands import run_command
from .exceptions import CommandError, ContentTooLarge, SizeMismatch, UnsupportedFormat

PathLike = Union[str, Path]

RAW_FORMATS = {"", "raw"}
SPARSE_FORMAT = "sparse"

log = LoggerFactory.for_image()


def is_block_device(target: PathLike) -> bool:
    try:
        return stat.S_ISBLK(os.stat(target).st_mode)
    except FileNotFoundError:
        return False


def get_device_size_bytes(device: PathLike) -> int:
    command = [settings.get_setting("blockdev_command"), "--getsize64", str(device)]
    result = run_command(command)
    try:
        return int(result.stdout.strip())
    except ValueError as error:
        raise CommandError(command, result.returncode, f"unexpected output {result.stdout!r}") from error


def allocate_image(target: PathLike, total_size_kb: int) -> None:
    """Prepare ``target`` to receive a partition table.

    Regular files are created (or truncated) to exactly ``total_size_kb``
    KiB of zeros. Block devices must be large enough and get their existing
    partition metadata wiped.

    Raises:
        SizeMismatch: If a block device is smaller than the plan
        CommandError: If sgdisk or blockdev fails
    """
    target = Path(target)
    if is_block_device(target):
        device_kb = get_device_size_bytes(target) // 1024
        if device_kb < total_size_kb:
            raise SizeMismatch(device_kb, total_size_kb)
        log.info(f"Wiping partition metadata on {target}")
        run_command([settings.get_setting("sgdisk_command"), "--zap-all", str(target)])
        return

    log.info(f"Allocating {total_size_kb}K image at {target}")
    with target.open("wb") as image:
        image.truncate(total_size_kb * 1024)


def build_partition_command(target: PathLike, partition: ResolvedPartition) -> list[str]:
    index = partition.index
    command = [
        settings.get_setting("sgdisk_command"),
        f"--new={index}:{partition.start_sector}:{partition.end_sector}",
        f"--change-name={index}:{partition.name}",
    ]
    if partition.type:
        command.append(f"--typecode={index}:{partition.type}")
    command.append(str(target))
    return command


def write_partition_table(target: PathLike, plan: Plan) -> None:
    """Create a fresh GPT on ``target`` and add every planned partition."""
    run_command([settings.get_setting("sgdisk_command"), "--clear", str(target)])
    for partition in sorted(plan.partitions, key=lambda entry: entry.index):
        log.debug(
            f"Creating partition {partition.format_label()} "
            f"({partition.start_sector}-{partition.end_sector})"
        )
        run_command(build_partition_command(target, partition))


def copy_into(source: PathLike, target: PathLike, offset: int, capacity: int) -> int:
    """Copy ``source`` into ``target`` at ``offset`` without truncating it.

    Returns:
        Number of bytes copied

    Raises:
        ContentTooLarge: If the source is longer than ``capacity``
    """
    size_bytes = os.path.getsize(source)
    if size_bytes > capacity:
        raise ContentTooLarge(str(source), size_bytes, capacity)

    chunk_size = settings.get_int("copy_chunk_size", settings.DEFAULT_COPY_CHUNK_SIZE)
    copied = 0
    with open(source, "rb") as fsrc, open(target, "r+b") as fdst:
        fdst.seek(offset)
        while True:
            buf = fsrc.read(chunk_size)
            if not buf:
                break
            fdst.write(buf)
            copied += len(buf)
    return copied


def expand_sparse_image(source: PathLike, destination: PathLike) -> None:
    run_command([settings.get_setting("simg2img_command"), str(source), str(destination)])


def write_partition_contents(target: PathLike, partition: ResolvedPartition) -> int:
    """Transfer a partition's source file into its sector range.

    Returns:
        Number of bytes written (0 when the partition has no file)

    Raises:
        UnsupportedFormat: Unknown format tag
        ContentTooLarge: Source longer than the partition
        CommandError: simg2img failed
    """
    if not partition.file_path:
        return 0

    format_name = partition.format.lower()
    if format_name in RAW_FORMATS:
        copied = copy_into(
            partition.file_path, target, partition.byte_offset, partition.byte_length
        )
    elif format_name == SPARSE_FORMAT:
        with tempfile.TemporaryDirectory(prefix="gptplan-") as tmpdir:
            expanded = Path(tmpdir) / f"{partition.name or partition.index}.raw"
            expand_sparse_image(partition.file_path, expanded)
            copied = copy_into(expanded, target, partition.byte_offset, partition.byte_length)
    else:
        raise UnsupportedFormat(partition.format, partition.file_path)

    log.info(f"Wrote {copied} bytes from {partition.file_path} to partition {partition.index}")
    return copied


def check_partition_contents(plan: Plan) -> None:
    """Reject content that cannot be written, before anything touches the target.

    Sparse sources are only size-checked after expansion.

    Raises:
        UnsupportedFormat: Unknown format tag
        ContentTooLarge: Raw source longer than its partition
    """
    for partition in plan.partitions:
        if not partition.file_path:
            continue
        format_name = partition.format.lower()
        if format_name == SPARSE_FORMAT:
            continue
        if format_name not in RAW_FORMATS:
            raise UnsupportedFormat(partition.format, partition.file_path)
        size_bytes = os.path.getsize(partition.file_path)
        if size_bytes > partition.byte_length:
            raise ContentTooLarge(partition.file_path, size_bytes, partition.byte_length)


def materialize_plan(target: PathLike, plan: Plan, *, partition_only: bool = False) -> None:
    """Allocate ``target``, write its GPT and, unless ``partition_only``, contents."""
    target_log = LoggerFactory.for_image(str(target))
    with operation_context("materialize", target=str(target)):
        if not partition_only:
            check_partition_contents(plan)
        allocate_image(target, plan.total_size_kb)
        write_partition_table(target, plan)
        if partition_only:
            target_log.info("Partition-only mode, skipping content writes")
            return
        for partition in plan.partitions:
            write_partition_contents(target, partition)
