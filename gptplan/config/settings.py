"""Settings storage for tool configuration."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional


SETTINGS_PATH = Path(
    os.environ.get(
        "GPTPLAN_SETTINGS_PATH",
        Path.home() / ".config" / "gptplan" / "settings.json",
    )
)

# Default values - use these constants instead of hardcoding values elsewhere
DEFAULT_COPY_CHUNK_SIZE = 4 * 1024 * 1024

DEFAULT_SETTINGS: dict[str, Any] = {
    "include_paths": [],
    "sgdisk_command": "sgdisk",
    "simg2img_command": "simg2img",
    "blockdev_command": "blockdev",
    "copy_chunk_size": DEFAULT_COPY_CHUNK_SIZE,
}


@dataclass
class SettingsStore:
    values: dict[str, Any] = field(default_factory=dict)


settings_store = SettingsStore()


def load_settings() -> None:
    settings_store.values = dict(DEFAULT_SETTINGS)
    if not SETTINGS_PATH.exists():
        return
    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return
    if isinstance(data, dict):
        settings_store.values.update(data)


def get_setting(key: str, default: Optional[Any] = None) -> Any:
    return settings_store.values.get(key, default)


def get_int(key: str, default: int = 0) -> int:
    try:
        return int(get_setting(key, default))
    except (TypeError, ValueError):
        return default


def get_list(key: str) -> list[str]:
    value = get_setting(key, [])
    if isinstance(value, str):
        return [value] if value else []
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value]


load_settings()
