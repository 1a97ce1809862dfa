"""
control_polygon.py

Ordered, cyclic sequence of 2D control points.

The control polygon is the single source of truth for a map's shape.
The sequence is implicitly closed: the segment from the last point back
to the first always exists. All wrap-around index arithmetic lives here
(:meth:`ControlPolygon.wrap_index` / :meth:`ControlPolygon.next_index`)
so callers never re-derive it.

Polygons are immutable. Every edit returns a new polygon, which lets the
owning map build the derived curve before committing anything.

Notes
-----
This module belongs to the CORE layer and must not depend on:
- Persistence
- GUI
- Simulation
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Sequence, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray


FloatArray = NDArray[np.float64]

MIN_CONTROL_POINTS: Final[int] = 2

DEFAULT_CONTROL_POINTS: Final[Tuple[Tuple[float, float], ...]] = (
    (-100.0, 100.0),
    (100.0, 100.0),
    (100.0, -100.0),
    (-100.0, -100.0),
)


def as_point(value: ArrayLike) -> FloatArray:
    """
    Convert an array-like to a float64 point of shape (2,).

    Raises
    ------
    ValueError
        If the value does not hold exactly two coordinates.
    """
    point = np.array(value, dtype=np.float64)
    if point.shape != (2,):
        raise ValueError(f"point must be of shape (2,), got {point.shape}")
    return point


def as_points(values: ArrayLike | Sequence[ArrayLike]) -> FloatArray:
    """
    Convert an array-like to a float64 point array of shape (N, 2).

    An empty sequence yields an array of shape (0, 2).
    """
    points = np.array(values, dtype=np.float64)
    if points.size == 0:
        return np.zeros((0, 2), dtype=np.float64)
    if points.ndim != 2 or points.shape[1] != 2:
        raise ValueError(f"points must be of shape (N, 2), got {points.shape}")
    return points


@dataclass(frozen=True, eq=False)
class ControlPolygon:
    """
    Immutable cyclic control polygon.

    Parameters
    ----------
    points : NDArray[np.float64]
        Array of shape (N, 2) containing ordered (x, y) control points.

    Notes
    -----
    Indices are stable only until the next structural edit.
    """

    points: FloatArray

    def __post_init__(self) -> None:
        points = as_points(self.points).copy()
        points.setflags(write=False)
        object.__setattr__(self, "points", points)

    @classmethod
    def default(cls) -> ControlPolygon:
        """
        Square of side 200 centered on the origin.
        """
        return cls(np.array(DEFAULT_CONTROL_POINTS, dtype=np.float64))

    def __len__(self) -> int:
        return int(self.points.shape[0])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ControlPolygon):
            return NotImplemented
        return bool(np.array_equal(self.points, other.points))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ControlPolygon({self.points.tolist()!r})"

    # ------------------------------------------------------------
    # Cyclic indexing
    # ------------------------------------------------------------

    def wrap_index(self, index: int) -> int:
        """
        Reduce any integer index onto ``[0, len)``.

        Raises
        ------
        IndexError
            If the polygon is empty.
        """
        n = len(self)
        if n == 0:
            raise IndexError("cannot wrap index into an empty polygon")
        return index % n

    def next_index(self, index: int) -> int:
        """
        Index of the point following ``index``, wrapping past the end.
        """
        return self.wrap_index(index + 1)

    def check_index(self, index: int) -> int:
        """
        Validate a direct (non-wrapping) index.

        Raises
        ------
        IndexError
            If ``index`` is negative or not below ``len``.
        """
        if not 0 <= index < len(self):
            raise IndexError(f"control point index {index} out of range for {len(self)} points")
        return index

    # ------------------------------------------------------------
    # Segments
    # ------------------------------------------------------------

    def segment(self, index: int) -> Tuple[FloatArray, FloatArray]:
        """
        Endpoints of segment ``index`` (from point ``index`` to its successor).
        """
        i = self.check_index(index)
        return self.points[i], self.points[self.next_index(i)]

    def segment_endpoints(self) -> Tuple[FloatArray, FloatArray]:
        """
        Start and end points of every segment, including the closing one.

        Returns
        -------
        starts, ends : NDArray[np.float64]
            Arrays of shape (N, 2); segment ``i`` runs ``starts[i] -> ends[i]``.
        """
        return self.points, np.roll(self.points, -1, axis=0)

    # ------------------------------------------------------------
    # Structural edits (return new polygons)
    # ------------------------------------------------------------

    def with_inserted(self, index: int, point: ArrayLike) -> ControlPolygon:
        """
        New polygon with ``point`` inserted so that it lands at ``index``.

        ``index`` may equal ``len`` to append.
        """
        if not 0 <= index <= len(self):
            raise IndexError(f"insertion index {index} out of range for {len(self)} points")
        return ControlPolygon(np.insert(self.points, index, as_point(point), axis=0))

    def with_removed(self, index: int) -> ControlPolygon:
        i = self.check_index(index)
        return ControlPolygon(np.delete(self.points, i, axis=0))

    def with_moved(self, index: int, point: ArrayLike) -> ControlPolygon:
        i = self.check_index(index)
        points = self.points.copy()
        points[i] = as_point(point)
        return ControlPolygon(points)

    def rotated(self, offset: int) -> ControlPolygon:
        """
        Rotate the point list cyclically.

        Positive offsets rotate right (the last point becomes index 0),
        negative offsets rotate left. The geometric shape is unchanged.
        """
        if len(self) == 0:
            return self
        return ControlPolygon(np.roll(self.points, offset, axis=0))

    def translated(self, delta: ArrayLike) -> ControlPolygon:
        return ControlPolygon(self.points + as_point(delta))

    def scaled(self, factors: ArrayLike, origin: ArrayLike) -> ControlPolygon:
        """
        Scale every point per axis about ``origin``.
        """
        center = as_point(origin)
        return ControlPolygon((self.points - center) * as_point(factors) + center)
