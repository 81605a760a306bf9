"""External tool execution."""

from __future__ import annotations

import subprocess
from typing import Sequence

from gptplan.logging import LoggerFactory

from .exceptions import CommandError

log = LoggerFactory.for_command()


def _log_output(result) -> None:
    output_log = log.bind(tags=["command", "output"])
    if result.stdout:
        output_log.debug(f"stdout: {result.stdout.strip()}")
    if result.stderr:
        output_log.debug(f"stderr: {result.stderr.strip()}")


def run_command(command: Sequence[str]) -> subprocess.CompletedProcess:
    """Run a command, capturing its output.

    Raises:
        CommandError: If the executable is missing or the command exits
            non-zero.
    """
    command = [str(part) for part in command]
    log.debug(f"Running command: {' '.join(command)}")
    try:
        result = subprocess.run(
            command,
            text=True,
            capture_output=True,
        )
    except OSError as error:
        raise CommandError(command, None, str(error)) from error
    _log_output(result)
    if result.returncode != 0:
        log.debug(f"Command exited with code {result.returncode}: {' '.join(command)}")
        message = (result.stderr or "").strip() or (result.stdout or "").strip()
        raise CommandError(command, result.returncode, message)
    return result
