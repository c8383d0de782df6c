"""Projection from master image pixels into the edited (rotated, tilted) frame.

The projected frame is the bounding box of the master image after applying
the EXIF orientation and the quarter turns of the edit record, with its
origin in the top left corner. Tilt rotates around the image center within
that frame, so tilted corners may leave the box.
"""

from __future__ import annotations

import math

import numpy as np

from core.models import ExifOrientation, PhotoWork, Size

# EXIF orientation -> (clockwise quarter turns, mirrored)
_ORIENTATION_TRANSFORM: dict[ExifOrientation, tuple[int, bool]] = {
    ExifOrientation.UP: (0, False),
    ExifOrientation.UP_MIRRORED: (0, True),
    ExifOrientation.DOWN: (2, False),
    ExifOrientation.DOWN_MIRRORED: (2, True),
    ExifOrientation.LEFT_MIRRORED: (3, True),
    ExifOrientation.RIGHT: (1, False),
    ExifOrientation.RIGHT_MIRRORED: (1, True),
    ExifOrientation.LEFT: (3, False),
}


def _translation(dx: float, dy: float) -> np.ndarray:
    matrix = np.identity(4)
    matrix[0, 3] = dx
    matrix[1, 3] = dy
    return matrix


def _quarter_turns(turns: int) -> np.ndarray:
    # Exact entries, so untilted corners map onto exact pixel positions
    cos, sin = ((1, 0), (0, 1), (-1, 0), (0, -1))[turns % 4]
    matrix = np.identity(4)
    matrix[0, 0] = cos
    matrix[0, 1] = -sin
    matrix[1, 0] = sin
    matrix[1, 1] = cos
    return matrix


def _rotation_z(degrees: float) -> np.ndarray:
    if not degrees:
        return np.identity(4)
    rad = math.radians(degrees)
    cos, sin = math.cos(rad), math.sin(rad)
    matrix = np.identity(4)
    matrix[0, 0] = cos
    matrix[0, 1] = -sin
    matrix[1, 0] = sin
    matrix[1, 1] = cos
    return matrix


def total_rotation_turns(exif_orientation: ExifOrientation, photo_work: PhotoWork) -> int:
    """Return the quarter turns of EXIF orientation and edits combined (0..3)."""
    exif_turns, _ = _ORIENTATION_TRANSFORM[exif_orientation]
    return (exif_turns + (photo_work.rotation_turns or 0)) % 4


def projected_size(texture_size: Size, exif_orientation: ExifOrientation, photo_work: PhotoWork) -> Size:
    """Return the size of the projected frame (tilt is not taken into account)."""
    if total_rotation_turns(exif_orientation, photo_work) % 2:
        return Size(texture_size.height, texture_size.width)
    return texture_size


def create_projection_matrix(
    texture_size: Size, exif_orientation: ExifOrientation, photo_work: PhotoWork
) -> np.ndarray:
    """Build the 4x4 matrix mapping master pixels to the projected frame."""
    _, exif_mirrored = _ORIENTATION_TRANSFORM[exif_orientation]
    mirrored = exif_mirrored != bool(photo_work.flip_h)
    turns = total_rotation_turns(exif_orientation, photo_work)
    out_size = projected_size(texture_size, exif_orientation, photo_work)

    matrix = _translation(-texture_size.width / 2, -texture_size.height / 2)
    if mirrored:
        matrix = np.diag([-1.0, 1.0, 1.0, 1.0]) @ matrix
    matrix = _quarter_turns(turns) @ matrix
    matrix = _rotation_z(photo_work.tilt or 0) @ matrix
    return _translation(out_size.width / 2, out_size.height / 2) @ matrix
