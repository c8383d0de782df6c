"""Settings access helpers for JSON-based configuration."""

from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any

from loguru import logger


class JsonSettings:
    """Lightweight JSON settings reader with dotted-key access."""

    def __init__(self, settings_path: str | Path) -> None:
        self._path = Path(settings_path)
        if not self._path.exists():
            raise FileNotFoundError(f"settings.json not found: {self._path}")
        with self._path.open("r", encoding="utf-8") as f:
            self._data = json.load(f)

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return value for dotted `key`, or `default` if not present."""
        parts = key.split(".")
        node: Any = self._data
        for part in parts:
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return default
        return node


@dataclass(frozen=True)
class StoreSettings:
    """Tuning of the photo work store.

    Attributes:
        refetch_interval: Seconds a fetched directory snapshot stays fresh.
        store_delay: Seconds to wait before writing, batching edits.
        max_cache_size: Directories kept in memory before idle ones are evicted.
        work_file_name: Name of the own sidecar file in each directory.
        legacy_file_names: Candidate names of the Picasa sidecar, first found wins.
    """

    refetch_interval: float = 30.0
    store_delay: float = 2.0
    max_cache_size: int = 100
    work_file_name: str = "ansel.json"
    legacy_file_names: tuple[str, ...] = (".picasa.ini", "Picasa.ini")

    @classmethod
    def from_settings(cls, settings: JsonSettings | None) -> StoreSettings:
        """Read the `photo_work.*` keys, falling back to defaults."""
        defaults = cls()
        if settings is None:
            return defaults
        try:
            return cls(
                refetch_interval=float(
                    settings.get("photo_work.refetch_interval", defaults.refetch_interval)
                ),
                store_delay=float(settings.get("photo_work.store_delay", defaults.store_delay)),
                max_cache_size=int(
                    settings.get("photo_work.max_cache_size", defaults.max_cache_size)
                ),
                work_file_name=str(
                    settings.get("photo_work.work_file_name", defaults.work_file_name)
                ),
                legacy_file_names=tuple(
                    settings.get("photo_work.legacy_file_names", defaults.legacy_file_names)
                ),
            )
        except (ValueError, TypeError) as ex:
            logger.warning("Invalid photo_work settings ({}), using defaults", ex)
            return defaults
