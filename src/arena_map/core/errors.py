"""
errors.py

Exception hierarchy for map geometry, editing and loading.

Geometry and edit failures are raised before any state is swapped, so the
map is always left unchanged when one of these propagates.

Load failures derive from :class:`MapLoadError` and are split by cause so
callers can decide whether to retry, fall back to a default map, or abort.
"""

from __future__ import annotations


class MapError(Exception):
    """
    Base class for all map errors.
    """


# ================================================================
# Geometry / editing
# ================================================================


class InsufficientPoints(MapError):
    """
    Curve construction needs more control points.

    Parameters
    ----------
    count : int
        Number of control points supplied.
    minimum : int
        Minimum number of control points required.
    """

    def __init__(self, count: int, minimum: int = 2) -> None:
        super().__init__(
            f"Cannot build a cyclic curve from {count} control point(s); "
            f"at least {minimum} are required."
        )
        self.count: int = count
        self.minimum: int = minimum


class TooFewPoints(MapError):
    """
    Removing a control point would leave too few points.

    Parameters
    ----------
    count : int
        Current number of control points.
    """

    def __init__(self, count: int) -> None:
        super().__init__(f"Cannot remove a control point from a map with {count} point(s).")
        self.count: int = count


class NoSegment(MapError):
    """
    No segment exists to insert a point into.
    """

    def __init__(self) -> None:
        super().__init__("Failed to add point to map: control polygon has no segments.")


class DegenerateExtent(MapError):
    """
    Scaling is impossible because the map has zero extent on an axis.

    Parameters
    ----------
    axis : int
        0 for x, 1 for y.
    """

    def __init__(self, axis: int) -> None:
        name = "xy"[axis]
        super().__init__(f"Cannot scale map: bounding size along {name} is zero.")
        self.axis: int = axis


class CurveEvaluationError(MapError):
    """
    Curve cannot be evaluated (empty parameter domain).
    """


# ================================================================
# Loading
# ================================================================


class MapLoadError(MapError):
    """
    Base class for failures while loading a serialized map.
    """


class MapReadError(MapLoadError):
    """
    The map bytes could not be retrieved.
    """


class MalformedEncoding(MapLoadError):
    """
    The byte stream is not a well-formed document.
    """


class SchemaTypeMismatch(MapLoadError):
    """
    A field is missing or decodes to the wrong shape.

    Parameters
    ----------
    field : str
        Dotted path of the offending field.
    message : str
        Description of the mismatch.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field: str = field


class UnsupportedSchemaVersion(SchemaTypeMismatch):
    """
    The document declares a schema version this codec cannot read.
    """

    def __init__(self, version: object) -> None:
        super().__init__("version", f"unsupported schema version {version!r}")
        self.version: object = version


class GeometricallyInvalidOnLoad(MapLoadError):
    """
    The document decoded but its control points cannot form a curve.

    Parameters
    ----------
    cause : InsufficientPoints
        Underlying construction failure.
    """

    def __init__(self, cause: InsufficientPoints) -> None:
        super().__init__(f"Invalid map: {cause}")
        self.count: int = cause.count


class AssetResolutionError(MapLoadError):
    """
    The backing-image reference could not be resolved.
    """
