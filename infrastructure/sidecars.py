"""Reading and writing the per-directory sidecar files.

Each directory may hold our own `ansel.json` and a Picasa `.picasa.ini`.
Missing files are not an error; every other I/O or parse failure is raised
to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import os

from loguru import logger

from core.models import PhotoWork
from core.rules.sections import ORIGINALS_DIRECTORY_NAMES, LegacyData, LegacySectionParser
from infrastructure.file_utils import fs_exists, fs_iter_lines, fs_read_file, fs_unlink, fs_write_file
from infrastructure.json_format import stringify


@dataclass
class DirectoryWorkData:
    """The content of one `ansel.json`: photo basename -> edits."""

    photos: dict[str, PhotoWork] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.photos

    def to_json(self) -> str:
        """Serialize with photos in sorted order to keep diffs small."""
        photos = {name: self.photos[name].to_dict() for name in sorted(self.photos)}
        return stringify({"photos": photos})

    @classmethod
    def from_json(cls, raw: bytes | str) -> DirectoryWorkData:
        data = json.loads(raw)
        photos = data.get("photos", {}) if isinstance(data, dict) else None
        if not isinstance(photos, dict):
            raise ValueError("Directory work has no 'photos' object")
        return cls(photos={name: PhotoWork.from_dict(work) for name, work in photos.items()})


def work_file_path(directory_path: str, work_file_name: str) -> str:
    return os.path.join(directory_path, work_file_name)


async def fetch_work_file(directory_path: str, work_file_name: str) -> DirectoryWorkData:
    """Load the own sidecar of a directory; a missing file yields no photos."""
    work_file = work_file_path(directory_path, work_file_name)
    if not await fs_exists(work_file):
        return DirectoryWorkData()

    buffer = await fs_read_file(work_file)
    data = DirectoryWorkData.from_json(buffer)
    logger.info("Fetched {}", work_file)
    return data


async def store_work_file(directory_path: str, work_file_name: str, data: DirectoryWorkData) -> None:
    """Write the own sidecar, or remove it if there are no photos left."""
    work_file = work_file_path(directory_path, work_file_name)
    if data.is_empty():
        if await fs_exists(work_file):
            await fs_unlink(work_file)
            logger.info("Removed empty {}", work_file)
    else:
        await fs_write_file(work_file, data.to_json())
        logger.info("Stored {}", work_file)


async def find_legacy_file(directory_path: str, legacy_file_names: tuple[str, ...]) -> str | None:
    for name in legacy_file_names:
        candidate = os.path.join(directory_path, name)
        if await fs_exists(candidate):
            return candidate
    return None


async def fetch_legacy_file(
    directory_path: str, legacy_file_names: tuple[str, ...]
) -> LegacyData | None:
    """Parse the Picasa sidecar of a directory, None if there is none.

    A Picasa originals directory holds the unedited versions of the photos in
    its parent directory. For those, the parent's rules are appended to the
    rules of each photo.
    """
    legacy_file = await find_legacy_file(directory_path, legacy_file_names)
    if legacy_file is None:
        return None

    edited_data: LegacyData | None = None
    directory_path = os.path.normpath(directory_path)
    if os.path.basename(directory_path) in ORIGINALS_DIRECTORY_NAMES:
        edited_data = await fetch_legacy_file(os.path.dirname(directory_path), legacy_file_names)

    parser = LegacySectionParser(edited_data)
    async for line in fs_iter_lines(legacy_file):
        parser.feed(line)
    data = parser.close()
    logger.info("Fetched {}", legacy_file)
    return data
