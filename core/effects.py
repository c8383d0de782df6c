"""Helpers that apply user actions to a `PhotoWork`."""

from __future__ import annotations

from core.models import PhotoWork


def rotate(photo_work: PhotoWork, turns: int, flip_h: bool = False) -> None:
    """Rotate `photo_work` by `turns` quarter turns clockwise, in place.

    Negative turns rotate counterclockwise. If `flip_h` is set, the horizontal
    mirroring is toggled as well. Neutral values are removed from the record.
    """
    rotation_turns = (int(photo_work.rotation_turns or 0) + int(turns)) % 4
    photo_work.rotation_turns = rotation_turns or None

    if flip_h:
        photo_work.flip_h = None if photo_work.flip_h else True
