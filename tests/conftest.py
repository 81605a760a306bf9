"""
Pytest configuration and shared fixtures for gptplan tests.

External tools (sgdisk, simg2img, blockdev) are never executed; tests patch
``run_command`` or ``subprocess.run`` instead.
"""

from pathlib import Path
from typing import Dict, List

import pytest
from loguru import logger

from gptplan.config import settings
from gptplan.domain.models import PartitionSpec


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    """Isolate tests from any settings file on the host."""
    monkeypatch.setattr(settings.settings_store, "values", dict(settings.DEFAULT_SETTINGS))
    yield settings.settings_store.values


@pytest.fixture
def log_records() -> List[Dict]:
    """Collect loguru records emitted during the test."""
    records: List[Dict] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="TRACE")
    yield records
    try:
        logger.remove(handler_id)
    except ValueError:
        pass


# ==============================================================================
# Description Fixtures
# ==============================================================================


@pytest.fixture
def boot_and_grow_specs() -> List[PartitionSpec]:
    """A 1 MiB boot partition followed by a grow partition."""
    return [
        PartitionSpec(name="boot", size="1024", align="1", type="ef00"),
        PartitionSpec(name="system", size="0", align="1"),
    ]


@pytest.fixture
def description_text() -> str:
    return "\n".join(
        [
            "# name,size,align,type,format,file",
            "bootloader,1M,1,ef02,,-bootloader.img",
            "",
            ",1M",
            "boot,2M,1024,ef00,,boot.img",
            "system,0,1024,8300",
        ]
    )


@pytest.fixture
def description_file(tmp_path, description_text) -> Path:
    """Description file with boot.img next to it."""
    path = tmp_path / "layout.csv"
    path.write_text(description_text, encoding="utf-8")
    (tmp_path / "boot.img").write_bytes(b"\x55" * 4096)
    return path
