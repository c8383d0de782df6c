"""Plane geometry helpers over points, vectors and rectangles.

Vectors are numpy arrays of shape ``(2,)``; anything indexable with two
numbers is accepted as input. Matrices are 4x4 numpy arrays acting on
column vectors ``(x, y, 0, 1)``. All functions are pure.

Degenerate cases are signalled by sentinels instead of exceptions:
`intersect_lines` returns ``(nan, nan)`` for parallel lines and the cut
functions return ``None`` when the polygon is never crossed.
"""

from __future__ import annotations

from collections.abc import Sequence
import math

import numpy as np

from core.models import Corner, Point, Rect, Size

VectorLike = Sequence[float] | np.ndarray

EPSILON = 0.0000001

OPPOSITE_CORNER: dict[Corner, Corner] = {
    Corner.NW: Corner.SE,
    Corner.NE: Corner.SW,
    Corner.SW: Corner.NE,
    Corner.SE: Corner.NW,
}

HORIZONTAL_ADJACENT_CORNER: dict[Corner, Corner] = {
    Corner.NW: Corner.NE,
    Corner.NE: Corner.NW,
    Corner.SW: Corner.SE,
    Corner.SE: Corner.SW,
}

VERTICAL_ADJACENT_CORNER: dict[Corner, Corner] = {
    Corner.NW: Corner.SW,
    Corner.NE: Corner.SE,
    Corner.SW: Corner.NW,
    Corner.SE: Corner.NE,
}


def round_to(value: float, fraction_digits: int = 0) -> float:
    """Round half up (towards +inf) to `fraction_digits` decimals."""
    factor = 10**fraction_digits
    return math.floor(value * factor + 0.5) / factor


def vector_from_point(point: Point) -> np.ndarray:
    return np.array([point.x, point.y], dtype=float)


def round_point(point: Point, fraction_digits: int = 0) -> Point:
    return Point(round_to(point.x, fraction_digits), round_to(point.y, fraction_digits))


def round_vector(vector: VectorLike, fraction_digits: int = 0) -> np.ndarray:
    return np.array(
        [round_to(vector[0], fraction_digits), round_to(vector[1], fraction_digits)], dtype=float
    )


def transform_vector(vector: VectorLike, matrix: np.ndarray) -> np.ndarray:
    """Apply a 4x4 matrix to a 2D vector (z = 0, w is not divided out)."""
    result = matrix @ np.array([vector[0], vector[1], 0.0, 1.0], dtype=float)
    return result[:2]


def transform_point(point: Point, matrix: np.ndarray) -> Point:
    x, y = transform_vector((point.x, point.y), matrix)
    return Point(float(x), float(y))


def transform_rect(rect: Rect, matrix: np.ndarray) -> Rect:
    """Transform the `nw` and `se` corners and rebuild an axis-aligned rect."""
    vector1 = transform_vector(corner_vector_of_rect(rect, Corner.NW), matrix)
    vector2 = transform_vector(corner_vector_of_rect(rect, Corner.SE), matrix)
    return rect_from_vectors(vector1, vector2)


def rect_from_points(point1: Point, point2: Point) -> Rect:
    """Build a rect from two arbitrary corners, in any order."""
    return Rect(
        x=min(point1.x, point2.x),
        y=min(point1.y, point2.y),
        width=abs(point1.x - point2.x),
        height=abs(point1.y - point2.y),
    )


def rect_from_vectors(vector1: VectorLike, vector2: VectorLike) -> Rect:
    return Rect(
        x=float(min(vector1[0], vector2[0])),
        y=float(min(vector1[1], vector2[1])),
        width=float(abs(vector1[0] - vector2[0])),
        height=float(abs(vector1[1] - vector2[1])),
    )


def corner_point_of_rect(rect: Rect, corner: Corner) -> Point:
    x = rect.x if corner in (Corner.NW, Corner.SW) else rect.x + rect.width
    y = rect.y if corner in (Corner.NW, Corner.NE) else rect.y + rect.height
    return Point(x, y)


def corner_vector_of_rect(rect: Rect, corner: Corner) -> np.ndarray:
    return vector_from_point(corner_point_of_rect(rect, corner))


def center_of_rect(rect: Rect) -> np.ndarray:
    return np.array([rect.x + rect.width / 2, rect.y + rect.height / 2], dtype=float)


def intersect_lines(
    start1: VectorLike, end1: VectorLike, start2: VectorLike, end2: VectorLike
) -> tuple[float, float]:
    """Intersect two infinite lines given by two points each.

    Returns the factors `(f1, f2)` so that the intersection is
    ``start1 + f1 * (end1 - start1)`` and ``start2 + f2 * (end2 - start2)``.
    Both factors are `nan` if the lines are parallel or coincident.
    """
    vx1, vy1 = end1[0] - start1[0], end1[1] - start1[1]
    vx2, vy2 = end2[0] - start2[0], end2[1] - start2[1]
    f = vx2 * vy1 - vx1 * vy2
    if f == 0:
        return math.nan, math.nan

    vx3, vy3 = start2[0] - start1[0], start2[1] - start1[1]
    return float((vx2 * vy3 - vx3 * vy2) / f), float((vx1 * vy3 - vx3 * vy1) / f)


def is_vector_in_polygon(point: VectorLike, polygon: Sequence[VectorLike]) -> bool:
    """Ray-casting parity test. Points on the border may go either way."""
    x, y = point[0], point[1]
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i][0], polygon[i][1]
        xj, yj = polygon[j][0], polygon[j][1]
        if ((yi > y) != (yj > y)) and (x < (xj - xi) * (y - yi) / (yj - yi) + xi):
            inside = not inside
        j = i
    return inside


def cut_factor_of_line_with_polygon(
    line_start: VectorLike, line_end: VectorLike, polygon: Sequence[VectorLike]
) -> float | None:
    """Return the line factor of the first cut point, see `cut_line_with_polygon`."""
    best_factor: float | None = None
    size = len(polygon)
    j = size - 1
    for i in range(size):
        segment_factor, line_factor = intersect_lines(polygon[i], polygon[j], line_start, line_end)
        j = i
        if not 0 <= segment_factor <= 1:
            continue

        # The line cuts this segment
        if best_factor is None:
            best_factor = line_factor
        elif line_factor >= EPSILON and best_factor >= EPSILON:
            if line_factor < best_factor:
                best_factor = line_factor
        elif line_factor > best_factor:
            best_factor = line_factor

    return best_factor


def cut_line_with_polygon(
    line_start: VectorLike, line_end: VectorLike, polygon: Sequence[VectorLike]
) -> np.ndarray | None:
    """Return the first cut point of a line with a polygon.

    If `line_start` is inside the polygon, this is where the line leaves the
    polygon going from `line_start` towards `line_end` and beyond. If
    `line_start` is outside, this is the nearest cut point behind
    `line_start`. Returns None if the line misses the polygon.
    """
    factor = cut_factor_of_line_with_polygon(line_start, line_end, polygon)
    if factor is None:
        return None

    return np.array(
        [
            line_start[0] + factor * (line_end[0] - line_start[0]),
            line_start[1] + factor * (line_end[1] - line_start[1]),
        ],
        dtype=float,
    )


def scale_rect_to_fit_borders(
    rect_center: VectorLike, rect_size: Size | Rect, border_polygon: Sequence[VectorLike]
) -> Rect:
    """Scale a centered rect so it touches `border_polygon` from inside.

    The rect keeps its aspect ratio and center. Each corner ray is cut with
    the polygon and the smallest factor wins.
    """
    half_width = rect_size.width / 2
    half_height = rect_size.height / 2
    cx, cy = float(rect_center[0]), float(rect_center[1])

    min_factor: float | None = None
    for dx, dy in ((-1, -1), (1, -1), (1, 1), (-1, 1)):
        corner = (cx + dx * half_width, cy + dy * half_height)
        factor = cut_factor_of_line_with_polygon((cx, cy), corner, border_polygon)
        # Rays without a crossing ahead of the center are skipped
        if factor is not None and factor > 0 and (min_factor is None or factor < min_factor):
            min_factor = factor

    if min_factor is None:
        min_factor = 1.0

    width = rect_size.width * min_factor
    height = rect_size.height * min_factor
    return Rect(x=cx - width / 2, y=cy - height / 2, width=width, height=height)
