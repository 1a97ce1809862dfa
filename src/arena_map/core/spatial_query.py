"""
spatial_query.py

Nearest-neighbour queries against a snapshot of map geometry.

This module provides:

- Point-to-segment distance with clamped projection
- Closest segment of the cyclic control polygon (closing edge included)
- Closest control point / auxiliary marker
- Handle selection for pointer hit-testing

All searches are vectorized over the point arrays so they stay cheap enough
to run every frame while the pointer moves. Ties resolve to the lowest
index; between a control point and a marker at equal distance the control
point wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray

from arena_map.core.control_polygon import ControlPolygon, as_point, as_points


FloatArray = NDArray[np.float64]


# ================================================================
# Handles
# ================================================================


class HandleKind(Enum):
    NONE = "none"
    CONTROL_POINT = "control_point"
    MARKER = "marker"


@dataclass(frozen=True)
class Handle:
    """
    Tagged reference to a draggable point.

    Parameters
    ----------
    kind : HandleKind
        What the handle refers to.
    index : int | None
        Index into the control points or markers; None for ``NONE``.
    """

    kind: HandleKind = HandleKind.NONE
    index: Optional[int] = None

    def __post_init__(self) -> None:
        if (self.kind is HandleKind.NONE) != (self.index is None):
            raise ValueError("index must be given exactly when kind is not NONE")

    @staticmethod
    def none() -> Handle:
        return Handle()

    @staticmethod
    def control_point(index: int) -> Handle:
        return Handle(HandleKind.CONTROL_POINT, index)

    @staticmethod
    def marker(index: int) -> Handle:
        return Handle(HandleKind.MARKER, index)

    @property
    def is_none(self) -> bool:
        return self.kind is HandleKind.NONE


# ================================================================
# Distance helpers
# ================================================================


def dist_squared_point_to_segment(a: ArrayLike, b: ArrayLike, p: ArrayLike) -> float:
    """
    Squared distance from ``p`` to the closed segment ``a -> b``.

    The projection parameter is clamped to [0, 1], so points beyond either
    end measure to the nearer endpoint rather than to the infinite line.
    A zero-length segment measures to ``a``.
    """
    starts = as_point(a)[None, :]
    ends = as_point(b)[None, :]
    return float(_segment_distances_squared(starts, ends, as_point(p))[0])


def _segment_distances_squared(starts: FloatArray, ends: FloatArray, p: FloatArray) -> FloatArray:
    ab = ends - starts
    ap = p - starts
    length_sq = np.einsum("ij,ij->i", ab, ab)
    dots = np.einsum("ij,ij->i", ap, ab)

    t = np.zeros_like(length_sq)
    nonzero = length_sq > 0.0
    t[nonzero] = np.clip(dots[nonzero] / length_sq[nonzero], 0.0, 1.0)

    proj = starts + t[:, None] * ab
    diff = p - proj
    return np.einsum("ij,ij->i", diff, diff)


def _closest_point(points: FloatArray, p: FloatArray) -> Optional[Tuple[int, float]]:
    if points.shape[0] == 0:
        return None
    distances = np.hypot(points[:, 0] - p[0], points[:, 1] - p[1])
    index = int(np.argmin(distances))
    return index, float(distances[index])


# ================================================================
# Spatial query
# ================================================================


class SpatialQuery:
    """
    Read-only nearest-neighbour queries over a geometry snapshot.

    Parameters
    ----------
    polygon : ControlPolygon
        Control polygon to query.
    markers : array-like of shape (M, 2)
        Auxiliary marker positions.
    """

    def __init__(self, polygon: ControlPolygon, markers: ArrayLike = ()) -> None:
        self._polygon: ControlPolygon = polygon
        self._markers: FloatArray = as_points(markers)

    @property
    def polygon(self) -> ControlPolygon:
        return self._polygon

    @property
    def markers(self) -> FloatArray:
        return self._markers

    # ------------------------------------------------------------

    def closest_segment(self, point: ArrayLike) -> Optional[int]:
        """
        Index of the polygon edge nearest to ``point``.

        Edge ``i`` runs from control point ``i`` to its cyclic successor,
        so the closing edge ``n-1 -> 0`` is included.

        Returns
        -------
        int | None
            None when the polygon is empty.
        """
        if len(self._polygon) == 0:
            return None
        starts, ends = self._polygon.segment_endpoints()
        distances = _segment_distances_squared(starts, ends, as_point(point))
        return int(np.argmin(distances))

    def closest_control_point(self, point: ArrayLike) -> Optional[Tuple[int, float]]:
        """
        Nearest control point as ``(index, distance)``, or None if empty.
        """
        return _closest_point(self._polygon.points, as_point(point))

    def closest_marker(self, point: ArrayLike) -> Optional[Tuple[int, float]]:
        """
        Nearest auxiliary marker as ``(index, distance)``, or None if empty.
        """
        return _closest_point(self._markers, as_point(point))

    def closest_handle(self, point: ArrayLike) -> Tuple[Handle, float]:
        """
        Nearest handle of either kind.

        Returns
        -------
        handle, distance : Handle, float
            ``(Handle.none(), inf)`` when there are no points at all.
        """
        p = as_point(point)
        best: Tuple[Handle, float] = (Handle.none(), float("inf"))

        ctrl = self.closest_control_point(p)
        if ctrl is not None:
            best = (Handle.control_point(ctrl[0]), ctrl[1])

        marker = self.closest_marker(p)
        if marker is not None and marker[1] < best[1]:
            best = (Handle.marker(marker[0]), marker[1])

        return best

    def interactable_handle(self, point: ArrayLike, radius: float) -> Handle:
        """
        Nearest handle within ``radius``, else ``Handle.none()``.

        ``radius`` is supplied by the caller so grab tolerance can follow
        the view zoom.
        """
        handle, distance = self.closest_handle(point)
        if distance > radius:
            return Handle.none()
        return handle
