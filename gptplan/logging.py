from __future__ import annotations

import sys
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from loguru import Logger

from loguru import logger

# Note: TRACE level already exists in loguru at level 5 (below DEBUG which is 10)


def _should_log_command_output(record) -> bool:
    """Hide raw tool output unless tracing."""
    tags = record["extra"].get("tags", [])

    if record["level"].no >= logger.level("WARNING").no:
        return True

    if "output" in tags:
        return record["level"].no <= logger.level("TRACE").no

    return True


def setup_logging(
    *,
    debug: bool = False,
    trace: bool = False,
    log_dir: Optional[Path] = None,
) -> Logger:
    """
    Setup console logging and, optionally, file sinks.

    Logging Tiers:
    - ERROR: Planning or tool failures, printed before a non-zero exit
    - WARNING: Optional content files that were not found
    - SUCCESS/INFO: Plan summary, materialization steps
    - DEBUG: Per-partition placement, external commands
    - TRACE: Raw stdout/stderr of external tools

    Log Files (only when log_dir is given):
    - gptplan.log: DEBUG+ events (3 day retention)
    - structured.jsonl: Structured JSON logs for analysis (7 day retention)

    Args:
        debug: Enable DEBUG level logging
        trace: Enable TRACE level logging (very verbose)
        log_dir: Directory for file sinks
    """
    logger.remove()
    logger.configure(extra={"job_id": "-", "tags": [], "source": "gptplan"})

    if trace:
        console_level = "TRACE"
    elif debug:
        console_level = "DEBUG"
    else:
        console_level = "INFO"

    # SINK 1: Console (stderr)
    logger.add(
        sys.stderr,
        level=console_level,
        backtrace=False,
        diagnose=False,
        filter=_should_log_command_output if not trace else None,
        colorize=True,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[source]: <8}</cyan> | "
            "{message}"
        ),
    )

    if log_dir is None:
        return logger

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    # SINK 2: Debug Log
    logger.add(
        log_dir / "gptplan.log",
        level="TRACE" if trace else "DEBUG",
        rotation="10 MB",
        retention="3 days",
        compression="zip",
        backtrace=True,
        diagnose=False,
        format=(
            "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
            "{level: <8} | "
            "{extra[source]: <8} | "
            "{extra[job_id]: <15} | "
            "{message}"
        ),
    )

    # SINK 3: Structured JSON Log
    logger.add(
        log_dir / "structured.jsonl",
        level="INFO",
        rotation="10 MB",
        retention="7 days",
        compression="zip",
        serialize=True,
        format="{message}",
    )

    return logger


def get_logger(
    *,
    job_id: Optional[str] = None,
    tags: Optional[Iterable[str]] = None,
    source: Optional[str] = None,
) -> Logger:
    """
    Get a logger with bound context.

    Args:
        job_id: Job identifier for tracking operations
        tags: Tags for filtering (e.g., ["plan", "output"])
        source: Source component (e.g., "planner", "image")

    Returns:
        Logger with bound context
    """
    extras: dict[str, object] = {}
    if job_id is not None:
        extras["job_id"] = job_id
    if tags is not None:
        extras["tags"] = list(tags)
    if source is not None:
        extras["source"] = source
    return logger.bind(**extras)


@contextmanager
def operation_context(operation: str, **details):
    """
    Context manager for tracking operations with automatic timing.

    Logs operation start, completion, and failure with duration tracking.

    Example:
        with operation_context("plan", description="layout.csv") as log:
            log.debug("Placing partition 1")
    """
    job_id = f"{operation}-{uuid.uuid4().hex[:8]}"

    with logger.contextualize(job_id=job_id, operation=operation, **details):
        start_time = time.time()
        log = get_logger(source=operation, job_id=job_id, tags=[operation])

        log.debug(f"{operation.capitalize()} started", **details)

        try:
            yield log
            duration = time.time() - start_time
            log.success(
                f"{operation.capitalize()} completed", duration_seconds=round(duration, 3)
            )
        except Exception as e:
            duration = time.time() - start_time
            log.error(
                f"{operation.capitalize()} failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_seconds=round(duration, 3),
            )
            raise


class LoggerFactory:
    """
    Factory for creating domain-specific loggers with automatic context.
    """

    @staticmethod
    def for_planner() -> Logger:
        """Logger for description parsing and layout planning."""
        return get_logger(source="planner", tags=["plan"])

    @staticmethod
    def for_image(target: Optional[str] = None) -> Logger:
        """Logger for image allocation, table and content writes."""
        return get_logger(source="image", tags=["image", "storage"]).bind(target=target or "-")

    @staticmethod
    def for_command() -> Logger:
        """Logger for external tool invocations."""
        return get_logger(source="command", tags=["command"])

    @staticmethod
    def for_system() -> Logger:
        """Logger for startup, configuration and exit status."""
        return get_logger(source="system", tags=["system"])
