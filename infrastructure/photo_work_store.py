"""Process-wide access to photo edits, one `DirectoryWork` per directory.

`PhotoWorkStore` is meant to be created once and passed to whoever reads or
writes edits. It must only be used from the event loop thread.
"""

from __future__ import annotations

import asyncio

from loguru import logger

from core.models import PhotoRecord, PhotoWork
from infrastructure.directory_work import DirectoryWork
from infrastructure.settings import StoreSettings


class PhotoWorkStore:
    """Registry of directory caches with a soft size limit.

    When a new directory is requested while the registry is full, all idle
    directories are evicted. Busy ones are kept even if that exceeds the
    limit, so no pending edit is lost.
    """

    def __init__(self, settings: StoreSettings | None = None) -> None:
        self._settings = settings or StoreSettings()
        self._directory_work_by_path: dict[str, DirectoryWork] = {}

    @property
    def cache_size(self) -> int:
        return len(self._directory_work_by_path)

    def get_directory_work(self, directory_path: str) -> DirectoryWork:
        directory_work = self._directory_work_by_path.get(directory_path)
        if directory_work is None:
            if len(self._directory_work_by_path) >= self._settings.max_cache_size:
                self._evict_idle()

            directory_work = DirectoryWork(directory_path, self._settings)
            self._directory_work_by_path[directory_path] = directory_work
        return directory_work

    def _evict_idle(self) -> None:
        idle_paths = [
            path for path, work in self._directory_work_by_path.items() if work.is_idle()
        ]
        for path in idle_paths:
            del self._directory_work_by_path[path]
        logger.debug(
            "Evicted {} idle directories, {} remain", len(idle_paths), self.cache_size
        )

    async def fetch_photo_work(
        self, photo_dir: str, photo_file_name: str, master_width: int, master_height: int
    ) -> PhotoWork:
        return await self.get_directory_work(photo_dir).fetch_photo_work(
            photo_file_name, master_width, master_height
        )

    async def fetch_photo_work_of_photo(self, photo: PhotoRecord) -> PhotoWork:
        return await self.fetch_photo_work(
            photo.master_dir, photo.master_filename, photo.master_width, photo.master_height
        )

    async def store_photo_work(
        self, photo_dir: str, photo_file_name: str, photo_work: PhotoWork
    ) -> None:
        await self.get_directory_work(photo_dir).store_photo_work(photo_file_name, photo_work)

    async def remove_photo_work(self, photo_dir: str, photo_file_name: str) -> None:
        await self.store_photo_work(photo_dir, photo_file_name, PhotoWork())

    async def flush(self) -> None:
        """Wait until every pending store has been written."""
        await asyncio.gather(
            *(work.wait_for_store() for work in list(self._directory_work_by_path.values()))
        )
