"""
map.py

Editable map aggregate.

EDITOR Layer
------------
The Map owns:

- One ControlPolygon (the shape)
- One CubicCurve derived from it
- A list of auxiliary markers (annotation points outside the spline)
- Display metadata: backing image path / resolved reference and size

Every structural edit is atomic. The new polygon and its curve are built
first and only then committed together, so a failing edit leaves the map
exactly as it was. Marker edits never rebuild the curve.

The map is owned by a single editing authority at a time (editor session
or running level); it is not safe to mutate from several callers at once.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Final, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray

from arena_map.core.control_polygon import (
    MIN_CONTROL_POINTS,
    ControlPolygon,
    as_point,
    as_points,
)
from arena_map.core.curve import CubicCurve, build_cyclic_curve
from arena_map.core.errors import DegenerateExtent, NoSegment, TooFewPoints
from arena_map.core.spatial_query import Handle, HandleKind, SpatialQuery


logger = logging.getLogger(__name__)

FloatArray = NDArray[np.float64]

DEFAULT_MAP_SIZE: Final[Tuple[float, float]] = (1024.0, 1024.0)


# ================================================================
# BOUNDING RECTANGLE
# ================================================================


@dataclass(frozen=True, eq=False)
class Rect:
    """
    Axis-aligned rectangle.

    Parameters
    ----------
    min : NDArray[np.float64]
        Lower-left corner, shape (2,).
    max : NDArray[np.float64]
        Upper-right corner, shape (2,).
    """

    min: FloatArray
    max: FloatArray

    def size(self) -> FloatArray:
        return self.max - self.min

    def center(self) -> FloatArray:
        return (self.min + self.max) / 2.0

    @property
    def width(self) -> float:
        return float(self.max[0] - self.min[0])

    @property
    def height(self) -> float:
        return float(self.max[1] - self.min[1])


# ================================================================
# MAP
# ================================================================


class Map:
    """
    Map aggregate with atomic edit operations.

    Parameters
    ----------
    control_points : array-like of shape (N, 2) | None
        Initial control points; the default square when None.
    markers : array-like of shape (M, 2)
        Initial auxiliary markers.
    background : str
        Backing image path; empty for none.
    size : array-like of shape (2,)
        Display size of the backing image.

    Raises
    ------
    InsufficientPoints
        If fewer than two control points are supplied.
    """

    def __init__(
        self,
        control_points: Optional[ArrayLike] = None,
        markers: ArrayLike | Sequence[ArrayLike] = (),
        background: str = "",
        size: ArrayLike = DEFAULT_MAP_SIZE,
    ) -> None:
        polygon = (
            ControlPolygon.default()
            if control_points is None
            else ControlPolygon(as_points(control_points))
        )
        self._polygon: ControlPolygon = polygon
        self._curve: CubicCurve = build_cyclic_curve(polygon)
        self._markers: FloatArray = as_points(markers)
        self._background: str = background
        self._background_ref: Optional[object] = None
        self._size: FloatArray = as_point(size)

    @classmethod
    def default(cls) -> Map:
        return cls()

    def __repr__(self) -> str:
        return (
            f"Map(control_points={len(self._polygon)}, markers={len(self._markers)}, "
            f"background={self._background!r}, size={self._size.tolist()!r})"
        )

    # ------------------------------------------------------------
    # PROPERTIES
    # ------------------------------------------------------------

    @property
    def polygon(self) -> ControlPolygon:
        return self._polygon

    @property
    def curve(self) -> CubicCurve:
        return self._curve

    @property
    def background(self) -> str:
        return self._background

    @property
    def background_ref(self) -> Optional[object]:
        """
        Resolved, loadable reference for ``background`` (None if unresolved).
        """
        return self._background_ref

    @property
    def size(self) -> FloatArray:
        return self._size.copy()

    def control_points(self) -> FloatArray:
        return self._polygon.points.copy()

    def markers(self) -> FloatArray:
        return self._markers.copy()

    @property
    def point_count(self) -> int:
        return len(self._polygon)

    @property
    def marker_count(self) -> int:
        return int(self._markers.shape[0])

    # ------------------------------------------------------------
    # METADATA
    # ------------------------------------------------------------

    def set_size(self, size: ArrayLike) -> None:
        self._size = as_point(size)

    def set_background(self, path: str, ref: Optional[object] = None) -> None:
        self._background = path
        self._background_ref = ref

    # ------------------------------------------------------------
    # QUERIES
    # ------------------------------------------------------------

    @property
    def query(self) -> SpatialQuery:
        """
        Spatial query over the current geometry snapshot.
        """
        return SpatialQuery(self._polygon, self._markers)

    def closest_segment(self, point: ArrayLike) -> Optional[int]:
        return self.query.closest_segment(point)

    def closest_control_point(self, point: ArrayLike) -> Optional[Tuple[int, float]]:
        return self.query.closest_control_point(point)

    def closest_marker(self, point: ArrayLike) -> Optional[Tuple[int, float]]:
        return self.query.closest_marker(point)

    def closest_handle(self, point: ArrayLike) -> Tuple[Handle, float]:
        return self.query.closest_handle(point)

    def interactable_handle(self, point: ArrayLike, radius: float) -> Handle:
        return self.query.interactable_handle(point, radius)

    # ------------------------------------------------------------
    # COMMIT
    # ------------------------------------------------------------

    def _commit(self, polygon: ControlPolygon, markers: Optional[FloatArray] = None) -> None:
        curve = build_cyclic_curve(polygon)
        self._polygon = polygon
        self._curve = curve
        if markers is not None:
            self._markers = markers

    def rebuild(self) -> None:
        """
        Recompute the curve from the control polygon.

        Raises
        ------
        InsufficientPoints
            If the polygon has fallen below the minimum size.
        """
        self._curve = build_cyclic_curve(self._polygon)

    # ------------------------------------------------------------
    # CONTROL POINT EDITS
    # ------------------------------------------------------------

    def add_point(self, point: ArrayLike) -> int:
        """
        Insert a control point into the segment nearest to it.

        Returns
        -------
        int
            Index of the new point.

        Raises
        ------
        NoSegment
            If the polygon has no segments.
        """
        p = as_point(point)
        segment = self.closest_segment(p)
        if segment is None:
            raise NoSegment()
        logger.info("Inserting point into segment %d at %s", segment, p.tolist())
        index = segment + 1
        self._commit(self._polygon.with_inserted(index, p))
        return index

    def insert_point(self, index: int, point: ArrayLike) -> None:
        """
        Insert a control point so that it ends up at ``index``.
        """
        self._commit(self._polygon.with_inserted(index, point))

    def move_point(self, index: int, new_position: ArrayLike) -> None:
        self._commit(self._polygon.with_moved(index, new_position))

    def remove_point(self, index: int) -> FloatArray:
        """
        Remove a control point.

        Returns
        -------
        NDArray[np.float64]
            Former position of the removed point.

        Raises
        ------
        TooFewPoints
            If the polygon would drop below two points.
        """
        count = len(self._polygon)
        if count <= MIN_CONTROL_POINTS:
            raise TooFewPoints(count)
        removed = self._polygon.points[self._polygon.check_index(index)].copy()
        self._commit(self._polygon.with_removed(index))
        return removed

    def rotate_points(self, offset: int) -> None:
        """
        Rotate the control-point list; changes which point is index 0.
        """
        logger.debug("Rotating control points by %d", offset)
        self._commit(self._polygon.rotated(offset))

    # ------------------------------------------------------------
    # MARKER EDITS
    # ------------------------------------------------------------

    def add_marker(self, point: ArrayLike) -> int:
        self._markers = np.vstack([self._markers, as_point(point)[None, :]])
        return self.marker_count - 1

    def move_marker(self, index: int, new_position: ArrayLike) -> None:
        self._check_marker_index(index)
        markers = self._markers.copy()
        markers[index] = as_point(new_position)
        self._markers = markers

    def remove_marker(self, index: int) -> FloatArray:
        self._check_marker_index(index)
        removed = self._markers[index].copy()
        self._markers = np.delete(self._markers, index, axis=0)
        return removed

    def _check_marker_index(self, index: int) -> None:
        if not 0 <= index < self.marker_count:
            raise IndexError(f"marker index {index} out of range for {self.marker_count} markers")

    # ------------------------------------------------------------
    # HANDLE EDITS
    # ------------------------------------------------------------

    def move_handle(self, handle: Handle, new_position: ArrayLike) -> None:
        """
        Move whatever ``handle`` refers to. A ``NONE`` handle is ignored.
        """
        if handle.kind is HandleKind.CONTROL_POINT:
            self.move_point(handle.index, new_position)  # type: ignore[arg-type]
        elif handle.kind is HandleKind.MARKER:
            self.move_marker(handle.index, new_position)  # type: ignore[arg-type]

    def remove_handle(self, handle: Handle) -> Optional[FloatArray]:
        """
        Remove whatever ``handle`` refers to.

        Returns
        -------
        NDArray[np.float64] | None
            Former position, or None for a ``NONE`` handle.
        """
        if handle.kind is HandleKind.CONTROL_POINT:
            return self.remove_point(handle.index)  # type: ignore[arg-type]
        if handle.kind is HandleKind.MARKER:
            return self.remove_marker(handle.index)  # type: ignore[arg-type]
        return None

    # ------------------------------------------------------------
    # WHOLE-MAP TRANSFORMS
    # ------------------------------------------------------------

    def _all_points(self) -> FloatArray:
        return np.vstack([self._polygon.points, self._markers])

    def find_center(self) -> FloatArray:
        """
        Mean of all control points and markers.
        """
        return self._all_points().mean(axis=0)

    def bounding_rect(self) -> Rect:
        """
        Componentwise bounds of all control points and markers.
        """
        points = self._all_points()
        return Rect(min=points.min(axis=0), max=points.max(axis=0))

    def translate(self, delta: ArrayLike) -> None:
        d = as_point(delta)
        self._commit(self._polygon.translated(d), self._markers + d)

    def recenter(self) -> None:
        """
        Translate so the bounding-rect center sits on the origin.
        """
        self.translate(-self.bounding_rect().center())

    def scale_to(self, target_size: ArrayLike) -> None:
        """
        Scale so the bounding-rect size becomes ``target_size``.

        The pivot is :meth:`find_center`: points are moved so the center sits
        on the origin, scaled per axis, then moved back.

        Raises
        ------
        ValueError
            If a target dimension is not positive.
        DegenerateExtent
            If the current bounds have zero size along an axis.
        """
        target = as_point(target_size)
        if np.any(target <= 0.0):
            raise ValueError("target size must be positive")

        rect = self.bounding_rect()
        current = rect.size()
        for axis in range(2):
            if current[axis] == 0.0:
                raise DegenerateExtent(axis)

        factors = target / current
        origin = self.find_center()
        markers = (self._markers - origin) * factors + origin
        self._commit(self._polygon.scaled(factors, origin), markers)
