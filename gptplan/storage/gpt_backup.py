"""Rebuild a raw GPT region from an ``sgdisk --backup`` blob.

The backup blob holds, one sector each, the protective MBR, the primary
header and the secondary header, followed by the 32 sectors of partition
entries. The output is laid out for writing at the start of a disk, with
the entry table repeated so it can also serve as the backup copy::

    [MBR][primary header][table x32][table x32][secondary header]
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Union

from gptplan.logging import LoggerFactory, setup_logging

from .exceptions import GptPlanError, InvalidBackup
from .sizes import SECTOR_SIZE

TABLE_SECTORS = 32

MBR_OFFSET = 0
PRIMARY_HEADER_OFFSET = 1
SECONDARY_HEADER_OFFSET = 2
TABLE_OFFSET = 3

BACKUP_SECTORS = TABLE_OFFSET + TABLE_SECTORS
OUTPUT_SECTORS = 3 + 2 * TABLE_SECTORS

log = LoggerFactory.for_system()


def _sectors(data: bytes, offset: int, count: int = 1) -> bytes:
    return data[offset * SECTOR_SIZE:(offset + count) * SECTOR_SIZE]


def reassemble_backup(data: bytes) -> bytes:
    """Reorder a backup blob into MBR, primary GPT, duplicated table, backup header.

    Raises:
        InvalidBackup: If ``data`` is shorter than the expected backup layout
    """
    expected = BACKUP_SECTORS * SECTOR_SIZE
    if len(data) < expected:
        raise InvalidBackup(f"expected at least {expected} bytes, got {len(data)}")

    table = _sectors(data, TABLE_OFFSET, TABLE_SECTORS)
    return b"".join(
        (
            _sectors(data, MBR_OFFSET),
            _sectors(data, PRIMARY_HEADER_OFFSET),
            table,
            table,
            _sectors(data, SECONDARY_HEADER_OFFSET),
        )
    )


def reassemble_backup_file(source: Union[str, Path], destination: Union[str, Path]) -> int:
    data = Path(source).read_bytes()
    output = reassemble_backup(data)
    Path(destination).write_bytes(output)
    log.info(f"Wrote {len(output)} bytes of GPT data to {destination}")
    return len(output)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Reassemble an sgdisk GPT backup into a writable GPT region"
    )
    parser.add_argument("backup", help="sgdisk --backup output")
    parser.add_argument("output", help="file to write the reassembled GPT region to")
    parser.add_argument("-d", "--debug", action="store_true", help="Enable verbose debug output")
    args = parser.parse_args(argv)

    setup_logging(debug=args.debug)
    try:
        reassemble_backup_file(args.backup, args.output)
    except (GptPlanError, OSError) as error:
        log.error(str(error))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
