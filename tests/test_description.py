"""Tests for partition description parsing."""

import pytest

from gptplan.domain.models import PartitionSpec
from gptplan.storage.description import (
    load_description,
    parse_description,
    parse_description_line,
)
from gptplan.storage.exceptions import InvalidSpec


class TestParseDescriptionLine:
    def test_full_record(self):
        spec = parse_description_line("boot,32M,1024,ef00,sparse,boot.img", 5)
        assert spec == PartitionSpec(
            name="boot",
            size="32M",
            align="1024",
            type="ef00",
            format="sparse",
            file="boot.img",
            line_number=5,
        )

    def test_trailing_fields_absent(self):
        spec = parse_description_line("data,4M")
        assert spec.size == "4M"
        assert spec.align is None
        assert spec.type == ""
        assert spec.format == ""
        assert spec.file is None

    def test_empty_fields_are_absent(self):
        spec = parse_description_line("misc, ,,, ,")
        assert spec.name == "misc"
        assert spec.size is None
        assert spec.align is None
        assert spec.file is None

    def test_whitespace_stripped(self):
        spec = parse_description_line("  boot , 1M , 1 , ef00 , , -boot.img ")
        assert spec.name == "boot"
        assert spec.size == "1M"
        assert spec.file == "-boot.img"

    def test_reservation_record(self):
        spec = parse_description_line(",1M")
        assert spec.is_reservation
        assert spec.size == "1M"

    @pytest.mark.parametrize("line", ["", "   ", "# comment", "   # indented comment"])
    def test_blank_and_comment_lines(self, line):
        assert parse_description_line(line) is None

    def test_too_many_fields(self):
        with pytest.raises(InvalidSpec) as exc_info:
            parse_description_line("a,1,1,ef00,,f.img,extra", 9)
        assert exc_info.value.line_number == 9
        assert "line 9" in str(exc_info.value)


class TestParseDescription:
    def test_keeps_order_and_line_numbers(self, description_text):
        specs = parse_description(description_text)
        assert [spec.name for spec in specs] == ["bootloader", "", "boot", "system"]
        assert [spec.line_number for spec in specs] == [2, 4, 5, 6]

    def test_load_description(self, description_file):
        specs = load_description(description_file)
        assert len(specs) == 4
        assert specs[0].file == "-bootloader.img"

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(InvalidSpec) as exc_info:
            load_description(tmp_path / "missing.csv")
        assert "cannot read description file" in str(exc_info.value)
