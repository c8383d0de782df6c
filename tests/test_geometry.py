from __future__ import annotations

import math

import numpy as np
import pytest

from core.geometry import (
    HORIZONTAL_ADJACENT_CORNER,
    OPPOSITE_CORNER,
    VERTICAL_ADJACENT_CORNER,
    center_of_rect,
    corner_point_of_rect,
    cut_factor_of_line_with_polygon,
    cut_line_with_polygon,
    intersect_lines,
    is_vector_in_polygon,
    rect_from_points,
    rect_from_vectors,
    round_point,
    round_to,
    scale_rect_to_fit_borders,
    transform_point,
    transform_rect,
)
from core.models import Corner, Point, Rect, Size

UNIT_SQUARE = [(0, 0), (1, 0), (1, 1), (0, 1)]


def _rotation_matrix(degrees: float) -> np.ndarray:
    rad = math.radians(degrees)
    matrix = np.identity(4)
    matrix[0, 0] = math.cos(rad)
    matrix[0, 1] = -math.sin(rad)
    matrix[1, 0] = math.sin(rad)
    matrix[1, 1] = math.cos(rad)
    return matrix


def test_rect_from_points_is_order_independent() -> None:
    expected = Rect(1, 1, 4, 4)
    assert rect_from_points(Point(5, 5), Point(1, 1)) == expected
    assert rect_from_points(Point(1, 1), Point(5, 5)) == expected
    assert rect_from_points(Point(1, 5), Point(5, 1)) == expected
    assert rect_from_vectors((5, 1), (1, 5)) == expected


def test_round_to_rounds_half_up() -> None:
    assert round_to(2.5) == 3
    assert round_to(-2.5) == -2
    assert round_to(1.2345, 2) == pytest.approx(1.23)
    assert round_point(Point(0.5, 1.49)) == Point(1, 1)


def test_corner_tables_are_consistent() -> None:
    for corner in Corner:
        assert OPPOSITE_CORNER[OPPOSITE_CORNER[corner]] == corner
        assert HORIZONTAL_ADJACENT_CORNER[VERTICAL_ADJACENT_CORNER[corner]] == OPPOSITE_CORNER[corner]

    rect = Rect(10, 20, 30, 40)
    assert corner_point_of_rect(rect, Corner.NW) == Point(10, 20)
    assert corner_point_of_rect(rect, Corner.NE) == Point(40, 20)
    assert corner_point_of_rect(rect, Corner.SW) == Point(10, 60)
    assert corner_point_of_rect(rect, Corner.SE) == Point(40, 60)
    assert list(center_of_rect(rect)) == [25, 40]


def test_transform_rect_stays_axis_aligned_under_rotation() -> None:
    rect = transform_rect(Rect(0, 0, 20, 10), _rotation_matrix(90))
    assert rect.x == pytest.approx(-10)
    assert rect.y == pytest.approx(0)
    assert rect.width == pytest.approx(10)
    assert rect.height == pytest.approx(20)


def test_transform_point_applies_translation() -> None:
    matrix = np.identity(4)
    matrix[0, 3] = 5
    matrix[1, 3] = -2
    assert transform_point(Point(1, 1), matrix) == Point(6, -1)


def test_intersect_lines() -> None:
    f1, f2 = intersect_lines((0, 0), (2, 2), (0, 2), (2, 0))
    assert f1 == pytest.approx(0.5)
    assert f2 == pytest.approx(0.5)


def test_intersect_parallel_lines_yields_nan() -> None:
    f1, f2 = intersect_lines((0, 0), (1, 0), (0, 1), (1, 1))
    assert math.isnan(f1)
    assert math.isnan(f2)


def test_point_in_polygon_handles_non_convex_shapes() -> None:
    # U shape, open at the top
    polygon = [(0, 0), (3, 0), (3, 3), (2, 3), (2, 1), (1, 1), (1, 3), (0, 3)]
    assert is_vector_in_polygon((0.5, 2), polygon)
    assert is_vector_in_polygon((2.5, 2), polygon)
    assert not is_vector_in_polygon((1.5, 2), polygon)
    assert not is_vector_in_polygon((5, 5), polygon)


def test_cut_line_from_inside_hits_border_ahead() -> None:
    point = cut_line_with_polygon((0.5, 0.5), (2, 0.5), UNIT_SQUARE)
    assert point is not None
    assert point[0] == pytest.approx(1)
    assert point[1] == pytest.approx(0.5)


def test_cut_line_from_outside_returns_nearest_point_behind_start() -> None:
    # The line starts right of the square and points away from it
    factor = cut_factor_of_line_with_polygon((2, 0.5), (3, 0.5), UNIT_SQUARE)
    assert factor == pytest.approx(-1)
    point = cut_line_with_polygon((2, 0.5), (3, 0.5), UNIT_SQUARE)
    assert point is not None
    assert point[0] == pytest.approx(1)


def test_cut_line_prefers_crossing_past_epsilon() -> None:
    # Starting exactly on the left border, the border itself has factor 0
    point = cut_line_with_polygon((0, 0.5), (0.5, 0.5), UNIT_SQUARE)
    assert point is not None
    assert point[0] == pytest.approx(1)


def test_cut_line_missing_polygon_returns_none() -> None:
    assert cut_line_with_polygon((5, 5), (6, 5), UNIT_SQUARE) is None
    assert cut_factor_of_line_with_polygon((5, 5), (6, 5), UNIT_SQUARE) is None


def test_scale_rect_to_fit_borders_grows_to_polygon() -> None:
    polygon = [(0, 0), (100, 0), (100, 50), (0, 50)]
    rect = scale_rect_to_fit_borders((50, 25), Size(20, 10), polygon)
    assert rect.x == pytest.approx(0)
    assert rect.y == pytest.approx(0)
    assert rect.width == pytest.approx(100)
    assert rect.height == pytest.approx(50)


def test_scale_rect_to_fit_borders_limited_by_nearest_side() -> None:
    polygon = [(0, 0), (100, 0), (100, 100), (0, 100)]
    rect = scale_rect_to_fit_borders((50, 50), Size(2, 1), polygon)
    assert rect.width == pytest.approx(100)
    assert rect.height == pytest.approx(50)
    assert rect.y == pytest.approx(25)


def test_scale_rect_to_fit_rotated_square() -> None:
    # A square rotated by 45 degrees around (0, 0) with corners at distance 1
    polygon = [(0, -1), (1, 0), (0, 1), (-1, 0)]
    rect = scale_rect_to_fit_borders((0, 0), Size(1, 1), polygon)
    assert rect.width == pytest.approx(1)
    assert rect.height == pytest.approx(1)
    for x, y in ((rect.x, rect.y), (rect.x + rect.width, rect.y + rect.height)):
        assert abs(x) + abs(y) == pytest.approx(1)
