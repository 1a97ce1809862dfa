"""
test_control_polygon.py

Unit tests for ControlPolygon in core.control_polygon.

These tests validate:

- Construction and validation
- Cyclic index arithmetic
- Immutability of edits
- Rotation round trips
"""

from __future__ import annotations

import numpy as np
import pytest

from arena_map.core.control_polygon import ControlPolygon, as_point


def test_default_is_square() -> None:
    polygon = ControlPolygon.default()

    assert len(polygon) == 4
    assert np.array_equal(
        polygon.points,
        np.array([[-100, 100], [100, 100], [100, -100], [-100, -100]], dtype=np.float64),
    )


def test_invalid_shape_raises() -> None:
    with pytest.raises(ValueError):
        ControlPolygon(np.array([1.0, 2.0, 3.0]))


def test_empty_polygon_allowed() -> None:
    polygon = ControlPolygon([])

    assert len(polygon) == 0
    assert polygon.points.shape == (0, 2)


def test_points_are_read_only() -> None:
    polygon = ControlPolygon.default()

    with pytest.raises(ValueError):
        polygon.points[0, 0] = 5.0


def test_wrap_and_next_index() -> None:
    polygon = ControlPolygon.default()

    assert polygon.next_index(3) == 0
    assert polygon.next_index(1) == 2
    assert polygon.wrap_index(-1) == 3
    assert polygon.wrap_index(9) == 1


def test_wrap_index_empty_raises() -> None:
    with pytest.raises(IndexError):
        ControlPolygon([]).wrap_index(0)


def test_closing_segment() -> None:
    polygon = ControlPolygon.default()

    a, b = polygon.segment(3)

    assert np.array_equal(a, [-100.0, -100.0])
    assert np.array_equal(b, [-100.0, 100.0])


def test_segment_endpoints_cover_every_edge() -> None:
    polygon = ControlPolygon.default()

    starts, ends = polygon.segment_endpoints()

    assert starts.shape == ends.shape == (4, 2)
    assert np.array_equal(ends[-1], starts[0])


def test_edits_return_new_polygon() -> None:
    polygon = ControlPolygon.default()

    inserted = polygon.with_inserted(1, (0.0, 150.0))

    assert len(polygon) == 4
    assert len(inserted) == 5
    assert np.array_equal(inserted.points[1], [0.0, 150.0])


def test_check_index_rejects_negative() -> None:
    with pytest.raises(IndexError):
        ControlPolygon.default().with_moved(-1, (0.0, 0.0))


@pytest.mark.parametrize("offset", [-7, -1, 0, 1, 2, 4, 13])
def test_rotation_round_trip(offset: int) -> None:
    polygon = ControlPolygon.default()

    assert polygon.rotated(offset).rotated(-offset) == polygon


def test_rotation_direction() -> None:
    polygon = ControlPolygon.default()

    right = polygon.rotated(1)
    left = polygon.rotated(-1)

    assert np.array_equal(right.points[0], polygon.points[-1])
    assert np.array_equal(left.points[0], polygon.points[1])


def test_scaled_about_origin() -> None:
    polygon = ControlPolygon([[0.0, 0.0], [2.0, 2.0]])

    scaled = polygon.scaled((2.0, 0.5), (1.0, 1.0))

    assert np.allclose(scaled.points, [[-1.0, 0.5], [3.0, 1.5]])


def test_as_point_validates_shape() -> None:
    with pytest.raises(ValueError):
        as_point((1.0, 2.0, 3.0))
