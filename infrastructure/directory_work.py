"""In-memory work data of one directory with debounced persistence.

`DirectoryWork` owns the authoritative copy of a directory's edit records.
Reads are served from a snapshot that is refreshed from disk at most every
`refetch_interval` seconds; concurrent refreshes share one read. Writes
mutate the snapshot and schedule a delayed store of `ansel.json`; edits made
while a store is pending are folded into a single followup store.

States: idle, fetching, idle with data, storing, storing with followup.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
import time

from loguru import logger

from core.models import PhotoWork
from core.rules.engine import PicasaRuleEngine, format_import_problems
from core.rules.sections import LegacyData
from infrastructure.settings import StoreSettings
from infrastructure.sidecars import (
    DirectoryWorkData,
    fetch_legacy_file,
    fetch_work_file,
    store_work_file,
)


@dataclass
class DirectoryData:
    """All work data we have about one directory."""

    work_data: DirectoryWorkData
    legacy_data: LegacyData | None = None


class DirectoryWork:
    """Cache of the work data of one directory."""

    def __init__(
        self,
        directory_path: str,
        settings: StoreSettings | None = None,
        rule_engine: PicasaRuleEngine | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.directory_path = directory_path
        self._settings = settings or StoreSettings()
        self._rule_engine = rule_engine or PicasaRuleEngine()
        self._clock = clock
        self._data: DirectoryData | None = None
        self._last_fetch_time = 0.0
        self._running_fetch: asyncio.Task[DirectoryData] | None = None
        self._store_task: asyncio.Task[None] | None = None
        self._is_store_running = False
        self._needs_store_followup = False

    def is_idle(self) -> bool:
        """Return True if no fetch or store is running or pending."""
        return (
            self._running_fetch is None
            and not self._is_store_running
            and not self._needs_store_followup
        )

    def _is_data_fresh(self) -> bool:
        if self._is_store_running or self._needs_store_followup:
            # Re-reading now would race against our own pending write
            return True
        return self._clock() < self._last_fetch_time + self._settings.refetch_interval

    async def fetch_data(self) -> DirectoryData:
        """Return the snapshot, loading it from disk if it is missing or stale."""
        if self._data is not None and self._is_data_fresh():
            return self._data
        if self._running_fetch is None:
            self._running_fetch = asyncio.ensure_future(self._fetch_from_disk())
        return await asyncio.shield(self._running_fetch)

    async def _fetch_from_disk(self) -> DirectoryData:
        try:
            work_data, legacy_data = await asyncio.gather(
                fetch_work_file(self.directory_path, self._settings.work_file_name),
                fetch_legacy_file(self.directory_path, self._settings.legacy_file_names),
            )
            data = DirectoryData(work_data=work_data, legacy_data=legacy_data)
            self._data = data
            self._last_fetch_time = self._clock()
            return data
        finally:
            self._running_fetch = None

    async def fetch_photo_work(
        self, photo_basename: str, master_width: int, master_height: int
    ) -> PhotoWork:
        """Return the edits of a photo, importing Picasa rules if we have none."""
        data = await self.fetch_data()

        photo_work = data.work_data.photos.get(photo_basename)
        if photo_work is not None:
            return photo_work.copy()

        if data.legacy_data:
            legacy_rules = data.legacy_data.get(photo_basename)
            if legacy_rules:
                result = self._rule_engine.execute(legacy_rules, master_width, master_height)
                if result.problems:
                    logger.warning(
                        format_import_problems(self.directory_path, photo_basename, result.problems)
                    )
                return result.photo_work

        return PhotoWork()

    async def store_photo_work(self, photo_basename: str, photo_work: PhotoWork) -> None:
        """Replace the edits of a photo. Empty edits remove the photo's entry."""
        data = await self.fetch_data()
        photos = data.work_data.photos

        if photo_work.is_empty():
            photos.pop(photo_basename, None)
        else:
            photos[photo_basename] = photo_work.copy()

        self._on_data_changed()

    def _on_data_changed(self) -> None:
        if self._is_store_running:
            self._needs_store_followup = True
            return

        self._is_store_running = True
        self._store_task = asyncio.ensure_future(self._run_store())

    async def _run_store(self) -> None:
        try:
            await asyncio.sleep(self._settings.store_delay)
            self._needs_store_followup = False
            work_data = self._data.work_data if self._data else DirectoryWorkData()
            await store_work_file(self.directory_path, self._settings.work_file_name, work_data)
        except Exception as ex:  # pylint: disable=broad-exception-caught
            logger.error("Storing directory work failed: {} ({})", self.directory_path, ex)
            return
        finally:
            self._is_store_running = False

        if self._needs_store_followup:
            self._on_data_changed()

    async def wait_for_store(self) -> None:
        """Wait until the running store and its followups are done."""
        while self._store_task is not None and self._is_store_running:
            task = self._store_task
            await asyncio.shield(task)
            if self._store_task is task:
                break
