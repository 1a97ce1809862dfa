"""
map_factory.py

Factory for named preset maps.

Every preset returns a fresh Map, so callers may edit the result freely.
"""

from __future__ import annotations

import numpy as np

from arena_map.core.control_polygon import DEFAULT_CONTROL_POINTS
from arena_map.editor.map import Map
from arena_map.utils.registry import Registry


_map_registry: Registry[Map] = Registry("map preset")


# ================================================================
# Map Generators
# ================================================================


@_map_registry.register("square")
def _square() -> Map:
    return Map(np.array(DEFAULT_CONTROL_POINTS, dtype=np.float64))


@_map_registry.register("rectangle")
def _rectangle(width: float = 400.0, height: float = 200.0) -> Map:
    hw = width / 2.0
    hh = height / 2.0
    points = np.array(
        [[-hw, hh], [hw, hh], [hw, -hh], [-hw, -hh]],
        dtype=np.float64,
    )
    return Map(points)


@_map_registry.register("circle")
def _circle(radius: float = 150.0, num_points: int = 8) -> Map:
    """
    Control points evenly spaced on a circle, clockwise from the top.
    """
    angles = np.pi / 2.0 - np.linspace(0.0, 2.0 * np.pi, num_points, endpoint=False)
    points = np.column_stack((radius * np.cos(angles), radius * np.sin(angles)))
    return Map(points)


# ================================================================
# Public API
# ================================================================


class MapFactory:
    """
    Public map factory interface.
    """

    @staticmethod
    def create(name: str, **kwargs) -> Map:
        return _map_registry.create(name, **kwargs)

    @staticmethod
    def available() -> list[str]:
        return _map_registry.available
