"""Photo metadata access via Pillow.

Provides the master dimensions the photo work store needs to translate
Picasa crops. Dimensions are reported with the EXIF orientation applied,
so a portrait photo stored sideways reports a portrait size.
"""

from __future__ import annotations

import asyncio
import os

from loguru import logger
from PIL import ExifTags, Image, UnidentifiedImageError

from core.models import ExifOrientation, PhotoRecord

try:  # pragma: no cover - optional dependency
    from pillow_heif import register_heif_opener  # type: ignore

    register_heif_opener()
    PIL_HEIF_AVAILABLE = True
except ImportError:  # pragma: no cover - optional dependency
    PIL_HEIF_AVAILABLE = False


def _read_orientation(im: Image.Image) -> ExifOrientation:
    try:
        value = im.getexif().get(ExifTags.Base.Orientation)
        return ExifOrientation(int(value)) if value else ExifOrientation.UP
    except (ValueError, TypeError) as ex:
        logger.debug("Invalid EXIF orientation in {}: {}", im.filename, ex)
        return ExifOrientation.UP


def read_photo_record(path: str) -> PhotoRecord:
    """Read directory, basename, oriented size and EXIF orientation of a photo.

    Raises OSError if the file is missing or not an image.
    """
    try:
        with Image.open(path) as im:
            width, height = im.size
            orientation = _read_orientation(im)
    except UnidentifiedImageError as ex:
        raise OSError(f"Not an image: {path}") from ex

    if orientation in (
        ExifOrientation.LEFT_MIRRORED,
        ExifOrientation.RIGHT,
        ExifOrientation.RIGHT_MIRRORED,
        ExifOrientation.LEFT,
    ):
        width, height = height, width

    abs_path = os.path.abspath(path)
    return PhotoRecord(
        master_dir=os.path.dirname(abs_path),
        master_filename=os.path.basename(abs_path),
        master_width=width,
        master_height=height,
        orientation=orientation,
    )


async def fetch_photo_record(path: str) -> PhotoRecord:
    return await asyncio.to_thread(read_photo_record, path)
