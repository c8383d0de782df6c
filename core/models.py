"""Core domain models for photos, edit records and plain geometry values."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class Point:
    """A point in pixel space."""

    x: float
    y: float


@dataclass(frozen=True)
class Size:
    """Width and height of an image or rectangle."""

    width: float
    height: float


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle. Width and height are never negative."""

    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Rect:
        try:
            return cls(
                x=float(data["x"]),
                y=float(data["y"]),
                width=float(data["width"]),
                height=float(data["height"]),
            )
        except (KeyError, TypeError) as ex:
            raise ValueError(f"Invalid rect: {data!r}") from ex


class Corner(str, Enum):
    """Compass corners of a rectangle."""

    NW = "nw"
    NE = "ne"
    SW = "sw"
    SE = "se"


class ExifOrientation(int, Enum):
    """The EXIF orientation tags a master image may carry."""

    UP = 1
    UP_MIRRORED = 2
    DOWN = 3
    DOWN_MIRRORED = 4
    LEFT_MIRRORED = 5
    RIGHT = 6
    RIGHT_MIRRORED = 7
    LEFT = 8


# JSON key -> attribute name, in the order used on disk
_PHOTO_WORK_KEYS = {
    "cropRect": "crop_rect",
    "flagged": "flagged",
    "flipH": "flip_h",
    "rotationTurns": "rotation_turns",
    "tilt": "tilt",
}

_PHOTO_WORK_VALUE_KINDS: dict[str, tuple[type, ...]] = {
    "flagged": (bool,),
    "flip_h": (bool,),
    "rotation_turns": (int,),
    "tilt": (int, float),
}


def _is_value_of_kind(value: Any, kinds: tuple[type, ...]) -> bool:
    # bool is an int subclass, so only accept it where it is asked for
    if isinstance(value, bool):
        return bool in kinds
    return isinstance(value, kinds)


@dataclass
class PhotoWork:
    """Non-destructive edits of one photo.

    Every field is optional; `None` means "no adjustment of that kind". Keys
    this version does not know are kept in `extra` so they survive a
    load/store cycle.
    """

    rotation_turns: int | None = None
    flip_h: bool | None = None
    tilt: float | None = None
    flagged: bool | None = None
    crop_rect: Rect | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def is_empty(self) -> bool:
        """Return True when the record carries no edit at all."""
        return not self.to_dict()

    def copy(self) -> PhotoWork:
        return replace(self, extra=dict(self.extra))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the sidecar representation with sorted keys."""
        data: dict[str, Any] = dict(self.extra)
        for key, attr in _PHOTO_WORK_KEYS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            data[key] = value.to_dict() if isinstance(value, Rect) else value
        return {key: data[key] for key in sorted(data)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PhotoWork:
        """Build a record from its sidecar representation."""
        if not isinstance(data, dict):
            raise ValueError(f"Photo work must be an object, got {type(data).__name__}")
        work = cls()
        for key, value in data.items():
            attr = _PHOTO_WORK_KEYS.get(key)
            if attr is None:
                work.extra[key] = value
            elif value is None:
                continue
            elif attr == "crop_rect":
                work.crop_rect = Rect.from_dict(value)
            else:
                if not _is_value_of_kind(value, _PHOTO_WORK_VALUE_KINDS[attr]):
                    raise ValueError(f"Invalid value for {key!r}: {value!r}")
                setattr(work, attr, value)
        return work


@dataclass
class PhotoRecord:
    """Identity and master dimensions of one photo on disk.

    `master_width` and `master_height` already have the EXIF orientation
    applied.
    """

    master_dir: str
    master_filename: str
    master_width: int
    master_height: int
    orientation: ExifOrientation = ExifOrientation.UP
