"""Tests for exception classes."""

import pytest

from gptplan.storage.exceptions import (
    CommandError,
    ContentError,
    ContentTooLarge,
    GptPlanError,
    InvalidBackup,
    InvalidSpec,
    MalformedSize,
    MissingFile,
    SizeMismatch,
    SpecError,
    UnsupportedFormat,
)


class TestExceptionHierarchy:
    @pytest.mark.parametrize("error_class", [MalformedSize, InvalidSpec, MissingFile])
    def test_spec_errors(self, error_class):
        assert issubclass(error_class, SpecError)
        assert issubclass(error_class, GptPlanError)

    @pytest.mark.parametrize("error_class", [UnsupportedFormat, ContentTooLarge])
    def test_content_errors(self, error_class):
        assert issubclass(error_class, ContentError)

    @pytest.mark.parametrize("error_class", [SizeMismatch, CommandError, InvalidBackup])
    def test_direct_subclasses(self, error_class):
        assert issubclass(error_class, GptPlanError)
        assert not issubclass(error_class, SpecError)


class TestExceptionMessages:
    def test_malformed_size_without_line(self):
        error = MalformedSize("12X")
        assert str(error).startswith("malformed size '12X'")

    def test_invalid_spec(self):
        error = InvalidSpec("too many fields", line_number=3)
        assert str(error) == "line 3: invalid record: too many fields"

    def test_missing_file_lists_paths(self):
        error = MissingFile("boot.img", ["/a", "/b"], line_number=2)
        assert str(error) == "line 2: file 'boot.img' not found (searched: /a, /b)"

    def test_missing_file_without_paths(self):
        assert "(searched: <none>)" in str(MissingFile("boot.img"))

    def test_size_mismatch(self):
        error = SizeMismatch(16383, 16384)
        assert error.requested_kb == 16383
        assert error.required_kb == 16384
        assert str(error) == "Requested size 16383K is smaller than the required 16384K"

    def test_unsupported_format(self):
        assert str(UnsupportedFormat("squashfs", "/srv/a.img")) == (
            "Unsupported content format 'squashfs' for /srv/a.img"
        )

    def test_content_too_large(self):
        error = ContentTooLarge("/srv/a.img", 10, 5)
        assert "does not fit" in str(error)

    def test_command_error(self):
        error = CommandError(["sgdisk", "--clear", "x"], 2, " bad \n")
        assert str(error) == "Command failed (sgdisk --clear x): bad"

    def test_command_error_default_message(self):
        assert str(CommandError(["sgdisk"], 1)).endswith("Command failed")

    def test_invalid_backup(self):
        assert str(InvalidBackup("too short")) == "Invalid GPT backup: too short"
