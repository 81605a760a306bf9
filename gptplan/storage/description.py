"""Partition description file parsing.

Each non-blank, non-comment line is one record::

    # name,size,align,type,format,file
    boot,32M,1024,ef00,,-boot.img
    ,1M
    system,0,1024,8300,sparse,system.img

Trailing fields may be left out. Records keep their file order, which the
planner relies on.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from gptplan.domain.models import PartitionSpec
from gptplan.logging import LoggerFactory

from .exceptions import InvalidSpec

FIELD_NAMES = ("name", "size", "align", "type", "format", "file")
COMMENT_PREFIX = "#"

log = LoggerFactory.for_planner()


def parse_description_line(line: str, line_number: Optional[int] = None) -> Optional[PartitionSpec]:
    """Parse one line, returning ``None`` for blank and comment lines."""
    stripped = line.strip()
    if not stripped or stripped.startswith(COMMENT_PREFIX):
        return None
    fields = [field.strip() for field in stripped.split(",")]
    if len(fields) > len(FIELD_NAMES):
        raise InvalidSpec(
            f"expected at most {len(FIELD_NAMES)} fields "
            f"({','.join(FIELD_NAMES)}), got {len(fields)}",
            line_number=line_number,
        )
    return PartitionSpec.from_fields(fields, line_number=line_number)


def parse_description(text: str, source: str = "<string>") -> list[PartitionSpec]:
    specs: list[PartitionSpec] = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        spec = parse_description_line(line, line_number)
        if spec is not None:
            specs.append(spec)
    log.debug(f"Parsed {len(specs)} records from {source}")
    return specs


def load_description(path: Union[str, Path]) -> list[PartitionSpec]:
    """Read and parse a description file.

    Raises:
        InvalidSpec: If the file cannot be read or a record is malformed.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        raise InvalidSpec(f"cannot read description file {path}: {error}") from error
    return parse_description(text, source=str(path))
