"""Custom exceptions for layout planning and image materialization.

This module defines a hierarchy of exceptions so callers can tell a broken
description file apart from a failing external tool.

Exception Hierarchy:
    GptPlanError (base)
        ├── SpecError
        │   ├── MalformedSize
        │   ├── InvalidSpec
        │   └── MissingFile
        ├── SizeMismatch
        ├── ContentError
        │   ├── UnsupportedFormat
        │   └── ContentTooLarge
        ├── CommandError
        └── InvalidBackup

Usage:
    from gptplan.storage.exceptions import SizeMismatch

    if required_kb > requested_kb:
        raise SizeMismatch(requested_kb, required_kb)
"""

from __future__ import annotations

from typing import Optional, Sequence


def _line_prefix(line_number: Optional[int]) -> str:
    if line_number is None:
        return ""
    return f"line {line_number}: "


class GptPlanError(Exception):
    """Base exception for all planning and image operations."""


class SpecError(GptPlanError):
    """Base exception for problems in the partition description."""


class MalformedSize(SpecError):
    """A size or alignment token could not be parsed."""

    def __init__(self, token: str, field: str = "size", line_number: Optional[int] = None):
        self.token = token
        self.field = field
        self.line_number = line_number
        super().__init__(
            f"{_line_prefix(line_number)}malformed {field} {token!r}: "
            f"expected a non-negative integer with optional G, M or K suffix"
        )


class InvalidSpec(SpecError):
    """A description record is structurally broken."""

    def __init__(self, reason: str, line_number: Optional[int] = None):
        self.reason = reason
        self.line_number = line_number
        super().__init__(f"{_line_prefix(line_number)}invalid record: {reason}")


class MissingFile(SpecError):
    """A required content file was not found in any include path."""

    def __init__(
        self,
        file_name: str,
        search_paths: Sequence[str] = (),
        line_number: Optional[int] = None,
    ):
        self.file_name = file_name
        self.search_paths = list(search_paths)
        self.line_number = line_number
        searched = ", ".join(self.search_paths) or "<none>"
        super().__init__(
            f"{_line_prefix(line_number)}file {file_name!r} not found "
            f"(searched: {searched})"
        )


class SizeMismatch(GptPlanError):
    """Requested image size is smaller than the planned layout needs."""

    def __init__(self, requested_kb: int, required_kb: int):
        self.requested_kb = requested_kb
        self.required_kb = required_kb
        super().__init__(
            f"Requested size {requested_kb}K is smaller than the "
            f"required {required_kb}K"
        )


class ContentError(GptPlanError):
    """Base exception for partition content transfer."""


class UnsupportedFormat(ContentError):
    """Content format tag is not one the writer knows how to transfer."""

    def __init__(self, format_name: str, file_path: str = ""):
        self.format_name = format_name
        self.file_path = file_path
        msg = f"Unsupported content format {format_name!r}"
        if file_path:
            msg += f" for {file_path}"
        super().__init__(msg)


class ContentTooLarge(ContentError):
    """Source file does not fit into its partition."""

    def __init__(self, file_path: str, size_bytes: int, capacity_bytes: int):
        self.file_path = file_path
        self.size_bytes = size_bytes
        self.capacity_bytes = capacity_bytes
        super().__init__(
            f"{file_path} ({size_bytes} bytes) does not fit into its "
            f"partition ({capacity_bytes} bytes)"
        )


class CommandError(GptPlanError):
    """An external tool failed or could not be started."""

    def __init__(self, command: Sequence[str], returncode: Optional[int] = None, stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        message = stderr.strip() or "Command failed"
        super().__init__(f"Command failed ({' '.join(self.command)}): {message}")


class InvalidBackup(GptPlanError):
    """A GPT backup blob does not have the expected layout."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid GPT backup: {reason}")
