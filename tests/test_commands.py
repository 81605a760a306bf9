"""Tests for external command execution."""

import subprocess
from unittest.mock import patch

import pytest

from gptplan.storage.commands import run_command
from gptplan.storage.exceptions import CommandError


class TestRunCommand:
    @patch("gptplan.storage.commands.subprocess.run")
    def test_success_returns_result(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(["sgdisk", "--clear", "x"], 0, "ok\n", "")

        result = run_command(["sgdisk", "--clear", "x"])

        assert result.stdout == "ok\n"
        mock_run.assert_called_once_with(
            ["sgdisk", "--clear", "x"],
            text=True,
            capture_output=True,
        )

    @patch("gptplan.storage.commands.subprocess.run")
    def test_arguments_are_stringified(self, mock_run, tmp_path):
        mock_run.return_value = subprocess.CompletedProcess([], 0, "", "")
        run_command(["sgdisk", "--clear", tmp_path])
        assert mock_run.call_args.args[0] == ["sgdisk", "--clear", str(tmp_path)]

    @patch("gptplan.storage.commands.subprocess.run")
    def test_failure_raises_command_error(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(["sgdisk"], 2, "", "Problem opening x\n")

        with pytest.raises(CommandError) as exc_info:
            run_command(["sgdisk", "--clear", "x"])

        assert exc_info.value.returncode == 2
        assert exc_info.value.stderr == "Problem opening x"
        assert "sgdisk --clear x" in str(exc_info.value)

    @patch("gptplan.storage.commands.subprocess.run")
    def test_failure_falls_back_to_stdout(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(["sgdisk"], 2, "Invalid partition data!\n", "")

        with pytest.raises(CommandError) as exc_info:
            run_command(["sgdisk", "--clear", "x"])

        assert exc_info.value.stderr == "Invalid partition data!"

    @patch("gptplan.storage.commands.subprocess.run")
    def test_missing_executable(self, mock_run):
        mock_run.side_effect = FileNotFoundError("No such file or directory: 'simg2img'")

        with pytest.raises(CommandError) as exc_info:
            run_command(["simg2img", "a", "b"])

        assert exc_info.value.returncode is None
        assert "simg2img" in str(exc_info.value)

    @patch("gptplan.storage.commands.subprocess.run")
    def test_output_logged_with_output_tag(self, mock_run, log_records):
        mock_run.return_value = subprocess.CompletedProcess(["sgdisk"], 0, "The operation has completed", "")

        run_command(["sgdisk", "--clear", "x"])

        output_records = [r for r in log_records if "output" in r["extra"].get("tags", [])]
        assert output_records
        assert "The operation has completed" in output_records[0]["message"]
