"""
test_map_factory.py

Unit tests for MapFactory and the underlying Registry.
"""

from __future__ import annotations

import numpy as np
import pytest

from arena_map.editor.map import Map
from arena_map.editor.map_factory import MapFactory
from arena_map.utils.registry import Registry


def test_available_presets() -> None:
    assert MapFactory.available() == ["circle", "rectangle", "square"]


def test_square_matches_default() -> None:
    assert np.array_equal(
        MapFactory.create("square").control_points(),
        Map.default().control_points(),
    )


def test_presets_are_independent() -> None:
    a = MapFactory.create("square")
    b = MapFactory.create("square")

    a.move_point(0, (0.0, 0.0))

    assert not np.array_equal(a.control_points(), b.control_points())


def test_circle_kwargs() -> None:
    map_ = MapFactory.create("circle", radius=10.0, num_points=6)

    assert map_.point_count == 6
    assert np.allclose(np.linalg.norm(map_.control_points(), axis=1), 10.0)
    assert np.allclose(map_.control_points()[0], [0.0, 10.0])


def test_rectangle_size() -> None:
    rect = MapFactory.create("rectangle", width=300.0, height=80.0).bounding_rect()

    assert np.allclose(rect.size(), [300.0, 80.0])


def test_unknown_preset() -> None:
    with pytest.raises(KeyError):
        MapFactory.create("hexagon")


def test_registry_rejects_duplicates() -> None:
    registry: Registry[int] = Registry("number")

    @registry.register("one")
    def _one() -> int:
        return 1

    with pytest.raises(ValueError, match="number 'one'"):
        registry.register("one")(lambda: 2)

    assert "one" in registry
    assert registry.create("one") == 1
    assert len(registry) == 1


def test_registry_decorator_returns_builder() -> None:
    registry: Registry[int] = Registry()

    @registry.register("scaled")
    def _scaled(factor: int = 2) -> int:
        return 10 * factor

    assert _scaled() == 20
    assert registry.create("scaled", factor=3) == 30
    assert list(registry) == ["scaled"]


def test_unknown_name_lists_choices() -> None:
    with pytest.raises(KeyError, match="circle, rectangle, square"):
        MapFactory.create("hexagon")
