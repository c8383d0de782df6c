from __future__ import annotations

import asyncio
from pathlib import Path

from PIL import ExifTags, Image
import pytest

from core.models import ExifOrientation
from infrastructure.image_service import fetch_photo_record, read_photo_record


def _save_jpeg(path: Path, size: tuple[int, int], orientation: int | None = None) -> None:
    im = Image.new("RGB", size, color=(200, 100, 50))
    if orientation is None:
        im.save(path, format="JPEG")
        return
    exif = Image.Exif()
    exif[ExifTags.Base.Orientation] = orientation
    im.save(path, format="JPEG", exif=exif.tobytes())


def test_read_photo_record(tmp_path: Path) -> None:
    path = tmp_path / "plain.jpg"
    _save_jpeg(path, (64, 32))

    photo = read_photo_record(str(path))
    assert photo.master_dir == str(tmp_path)
    assert photo.master_filename == "plain.jpg"
    assert (photo.master_width, photo.master_height) == (64, 32)
    assert photo.orientation == ExifOrientation.UP


def test_sideways_orientation_swaps_size(tmp_path: Path) -> None:
    path = tmp_path / "portrait.jpg"
    _save_jpeg(path, (64, 32), orientation=6)

    photo = asyncio.run(fetch_photo_record(str(path)))
    assert photo.orientation == ExifOrientation.RIGHT
    assert (photo.master_width, photo.master_height) == (32, 64)


def test_upside_down_keeps_size(tmp_path: Path) -> None:
    path = tmp_path / "down.jpg"
    _save_jpeg(path, (64, 32), orientation=3)

    photo = read_photo_record(str(path))
    assert photo.orientation == ExifOrientation.DOWN
    assert (photo.master_width, photo.master_height) == (64, 32)


def test_non_image_raises_os_error(tmp_path: Path) -> None:
    path = tmp_path / "notes.jpg"
    path.write_text("not an image", encoding="utf-8")
    with pytest.raises(OSError):
        read_photo_record(str(path))


def test_missing_file_raises_os_error(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        read_photo_record(str(tmp_path / "missing.jpg"))
