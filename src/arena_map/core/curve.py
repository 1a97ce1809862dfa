"""
curve.py

Cyclic uniform cubic B-spline to piecewise cubic curve conversion.

This module provides:

- CubicCurve: immutable piecewise cubic parametric curve over ``[0, domain_end)``
- build_cyclic_curve: pure conversion from a control polygon to a CubicCurve

Parameter convention
--------------------
Each segment spans one unit of parameter, so a polygon of N points yields
N segments and ``domain_end == N``. Segment ``i`` is driven by control
points ``i, i+1, i+2, i+3`` (cyclically) through the uniform cubic
B-spline characteristic matrix, giving a C2-continuous closed loop.

Notes
-----
This module belongs to the CORE layer. The curve is derived data: it is
never edited directly and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

import numpy as np
from numpy.typing import ArrayLike, NDArray

from arena_map.core.control_polygon import MIN_CONTROL_POINTS, ControlPolygon
from arena_map.core.errors import CurveEvaluationError, InsufficientPoints


FloatArray = NDArray[np.float64]

B_SPLINE_MATRIX: Final[FloatArray] = (
    np.array(
        [
            [1.0, 4.0, 1.0, 0.0],
            [-3.0, 0.0, 3.0, 0.0],
            [3.0, -6.0, 3.0, 0.0],
            [-1.0, 3.0, -3.0, 1.0],
        ],
        dtype=np.float64,
    )
    / 6.0
)


@dataclass(frozen=True, eq=False)
class CubicCurve:
    """
    Immutable piecewise cubic curve in power basis.

    Parameters
    ----------
    coefficients : NDArray[np.float64]
        Array of shape (S, 4, 2). Segment ``i`` evaluates to
        ``c0 + c1*u + c2*u**2 + c3*u**3`` for local parameter ``u`` in [0, 1].

    Attributes
    ----------
    domain_start : float
        Always 0.0.
    domain_end : float
        Number of segments.
    """

    coefficients: FloatArray

    def __post_init__(self) -> None:
        coefficients = np.array(self.coefficients, dtype=np.float64)
        if coefficients.size == 0:
            coefficients = np.zeros((0, 4, 2), dtype=np.float64)
        if coefficients.ndim != 3 or coefficients.shape[1:] != (4, 2):
            raise ValueError("coefficients must be of shape (S, 4, 2)")
        coefficients.setflags(write=False)
        object.__setattr__(self, "coefficients", coefficients)

    @property
    def segment_count(self) -> int:
        return int(self.coefficients.shape[0])

    @property
    def domain_start(self) -> float:
        return 0.0

    @property
    def domain_end(self) -> float:
        return float(self.segment_count)

    # ------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------

    def _locate(self, ts: FloatArray) -> tuple[NDArray[np.intp], FloatArray]:
        """
        Map global parameters to (segment index, local parameter) pairs.
        """
        if self.segment_count == 0:
            raise CurveEvaluationError("cannot evaluate a curve with an empty domain")

        wrapped = np.mod(ts, self.domain_end)
        segments = np.clip(np.floor(wrapped).astype(np.intp), 0, self.segment_count - 1)
        return segments, wrapped - segments

    def positions(self, ts: ArrayLike) -> FloatArray:
        """
        Evaluate positions at many parameters.

        Parameters are reduced modulo ``domain_end`` first, so evaluating at
        ``domain_end`` returns the start of the curve.

        Parameters
        ----------
        ts : array-like of shape (M,)

        Returns
        -------
        NDArray[np.float64]
            Array of shape (M, 2).

        Raises
        ------
        CurveEvaluationError
            If the curve has no segments.
        """
        ts_arr = np.atleast_1d(np.asarray(ts, dtype=np.float64))
        segments, u = self._locate(ts_arr)
        basis = np.stack([np.ones_like(u), u, u * u, u * u * u], axis=1)
        return np.einsum("mk,mkd->md", basis, self.coefficients[segments])

    def position(self, t: float) -> FloatArray:
        """
        Evaluate the position at a single parameter.
        """
        return self.positions([t])[0]

    def velocities(self, ts: ArrayLike) -> FloatArray:
        """
        First derivative with respect to the global parameter.
        """
        ts_arr = np.atleast_1d(np.asarray(ts, dtype=np.float64))
        segments, u = self._locate(ts_arr)
        basis = np.stack([np.zeros_like(u), np.ones_like(u), 2.0 * u, 3.0 * u * u], axis=1)
        return np.einsum("mk,mkd->md", basis, self.coefficients[segments])

    def sample_positions(self, subdivisions: int) -> FloatArray:
        """
        Evenly spaced samples forming a closed polyline.

        Parameters
        ----------
        subdivisions : int
            Number of straight pieces; ``subdivisions + 1`` points are
            returned, the last coinciding with the first.
        """
        if subdivisions < 1:
            raise ValueError("subdivisions must be at least 1")
        ts = np.linspace(self.domain_start, self.domain_end, subdivisions + 1)
        return self.positions(ts)


def build_cyclic_curve(polygon: ControlPolygon) -> CubicCurve:
    """
    Convert a control polygon into a closed piecewise cubic curve.

    Parameters
    ----------
    polygon : ControlPolygon

    Returns
    -------
    CubicCurve
        New curve with ``len(polygon)`` segments.

    Raises
    ------
    InsufficientPoints
        If the polygon holds fewer than two points.
    """
    n = len(polygon)
    if n < MIN_CONTROL_POINTS:
        raise InsufficientPoints(n, MIN_CONTROL_POINTS)

    window = (np.arange(n)[:, None] + np.arange(4)[None, :]) % n
    controls = polygon.points[window]
    coefficients = np.einsum("ij,sjd->sid", B_SPLINE_MATRIX, controls)
    return CubicCurve(coefficients)
