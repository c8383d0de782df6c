"""Translation of Picasa rules into a `PhotoWork`.

For the rule format see https://gist.github.com/fbuchinger/1073823

Picasa applies edits in the opposite order to ours: it crops the original
image first, then tilts the crop and shrinks it to fit into the borders of
the cropped area while keeping the aspect ratio. We rotate and tilt the
whole image first and crop afterwards. `PicasaRuleEngine` reconciles both
by projecting the Picasa crop area and fitting the largest rect of the same
aspect ratio into it.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from core.camera import create_projection_matrix
from core.effects import rotate
from core.geometry import (
    center_of_rect,
    corner_vector_of_rect,
    rect_from_points,
    scale_rect_to_fit_borders,
    transform_vector,
)
from core.models import Corner, ExifOrientation, PhotoWork, Point, Rect, Size
from core.rules.sections import LegacyRules

# Picasa tilt (-1..1) -> our tilt in degrees
PICASA_TILT_FACTOR = -11.3848

CROP_HEX_LENGTH = 16

_HEX_DIGITS = frozenset("0123456789abcdef")
_DECIMAL_DIGITS = frozenset("0123456789")
_TILT_DIGITS = frozenset("-0123456789.")
_IGNORED_RULE_PREFIXES = ("backuphash=", "width=", "height=", "moddate=", "textactive=0")


@dataclass
class LegacyImport:
    """Result of translating the rules of one photo.

    `problems` lists everything that could not be imported. They never stop
    the translation, `photo_work` holds the best-effort result.
    """

    photo_work: PhotoWork
    problems: list[str] = field(default_factory=list)


def _is_hex(value: str) -> bool:
    return bool(value) and all(ch in _HEX_DIGITS for ch in value)


def _strip_affixes(value: str, prefix: str, suffix: str = "") -> str | None:
    """Return `value` without `prefix` and `suffix`, or None if they don't match."""
    if not value.startswith(prefix) or not value.endswith(suffix):
        return None
    if len(value) < len(prefix) + len(suffix):
        return None
    return value[len(prefix) : len(value) - len(suffix)]


def parse_rotate_rule(rule: str) -> int | None:
    """Parse `rotate=rotate(N)` into the number of quarter turns."""
    value = _strip_affixes(rule, "rotate=rotate(", ")")
    if value and all(ch in _DECIMAL_DIGITS for ch in value):
        return int(value)
    return None


def parse_crop_rule(rule: str) -> str | None:
    """Parse `crop=rect64(<hex>)` into the packed hex crop rect."""
    value = _strip_affixes(rule, "crop=rect64(", ")")
    return value if value is not None and _is_hex(value) else None


def parse_crop_filter(legacy_filter: str) -> str | None:
    """Parse `crop64=1,<hex>` into the packed hex crop rect."""
    value = _strip_affixes(legacy_filter, "crop64=1,")
    return value if value is not None and _is_hex(value) else None


def parse_tilt_filter(legacy_filter: str) -> float | None:
    """Parse `tilt=1,<angle>,0.0` into the Picasa tilt angle."""
    value = _strip_affixes(legacy_filter, "tilt=1,")
    if value is None:
        return None
    if "," not in value:
        return None
    angle, tail = value.split(",", 1)
    if not angle or not all(ch in _TILT_DIGITS for ch in angle):
        return None
    if len(tail) < 2 or tail[0] != "0" or tail[2:].strip("0"):
        return None
    try:
        return float(angle)
    except ValueError:
        return None


def is_ignored_rule(rule: str) -> bool:
    return not rule.strip(" \t") or rule.startswith(_IGNORED_RULE_PREFIXES)


def decode_crop_rect(packed: str, master_width: float, master_height: float) -> Rect:
    """Decode a 16 digit hex `left top right bottom` crop into master pixels.

    Each value is a fraction of 0xffff. Shorter values are zero-padded.
    """
    packed = packed.rjust(CROP_HEX_LENGTH, "0")
    left, top, right, bottom = (
        int(packed[i : i + 4], 16) / 0xFFFF for i in range(0, CROP_HEX_LENGTH, 4)
    )
    return rect_from_points(
        Point(left * master_width, top * master_height),
        Point(right * master_width, bottom * master_height),
    )


def format_import_problems(directory_path: str, photo_basename: str, problems: list[str]) -> str:
    msg = f"Picasa import is incomplete for {directory_path}/{photo_basename}:"
    for problem in problems:
        msg += "\n  - " + problem
    return msg


class PicasaRuleEngine:
    """Builds a `PhotoWork` from the Picasa rules of one photo."""

    def execute(self, rules: LegacyRules, master_width: int, master_height: int) -> LegacyImport:
        """Translate `rules` of a master image with the given (EXIF rotated) size."""
        result = LegacyImport(photo_work=PhotoWork())
        photo_work = result.photo_work
        crop_hex: str | None = None

        def add_crop(value: str) -> None:
            nonlocal crop_hex
            if crop_hex is None:
                crop_hex = value
            elif crop_hex != value:
                result.problems.append(f"Duplicate crop rects: {crop_hex} and {value}")

        for rule in rules:
            turns = parse_rotate_rule(rule)
            rule_crop = parse_crop_rule(rule)
            if turns is not None:
                rotate(photo_work, turns, False)
            elif rule == "star=yes":
                photo_work.flagged = True
            elif rule.startswith("filters="):
                for legacy_filter in rule[len("filters=") :].split(";"):
                    tilt = parse_tilt_filter(legacy_filter)
                    crop = parse_crop_filter(legacy_filter)
                    if tilt is not None:
                        photo_work.tilt = (photo_work.tilt or 0) + tilt * PICASA_TILT_FACTOR
                    elif crop is not None:
                        add_crop(crop)
                    elif legacy_filter:
                        result.problems.append("Unknown filter: " + legacy_filter)
            elif rule_crop is not None:
                add_crop(rule_crop)
            elif not is_ignored_rule(rule):
                result.problems.append("Unknown rule: " + rule)

        if crop_hex or photo_work.tilt:
            self._apply_crop(result, crop_hex, master_width, master_height)

        return result

    def _apply_crop(
        self, result: LegacyImport, crop_hex: str | None, master_width: int, master_height: int
    ) -> None:
        photo_work = result.photo_work
        canvas_rect: Rect | None = None
        if crop_hex:
            if len(crop_hex) > CROP_HEX_LENGTH:
                result.problems.append(f"Invalid crop rect (length > {CROP_HEX_LENGTH}): {crop_hex}")
            else:
                canvas_rect = decode_crop_rect(crop_hex, master_width, master_height)
        if canvas_rect is None:
            canvas_rect = Rect(0, 0, master_width, master_height)

        # master_width and master_height have the EXIF orientation applied already
        matrix = create_projection_matrix(
            Size(master_width, master_height), ExifOrientation.UP, photo_work
        )
        border_polygon = [
            transform_vector(corner_vector_of_rect(canvas_rect, corner), matrix)
            for corner in (Corner.NW, Corner.NE, Corner.SE, Corner.SW)
        ]
        projected_center = transform_vector(center_of_rect(canvas_rect), matrix)
        if photo_work.rotation_turns in (1, 3):
            projected_size = Size(canvas_rect.height, canvas_rect.width)
        else:
            projected_size = Size(canvas_rect.width, canvas_rect.height)
        photo_work.crop_rect = scale_rect_to_fit_borders(
            projected_center, projected_size, border_polygon
        )
