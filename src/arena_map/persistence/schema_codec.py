"""
schema_codec.py

Versioned JSON encoding of a Map.

Document layout (version 1)::

    {
        "version": 1,
        "control_points": [[x, y], ...],
        "markers": [[x, y], ...],
        "background": "maps/arena.png",
        "size": [width, height]
    }

Only the control polygon, markers and display metadata are persisted. The
curve is derived data and is always rebuilt on load.

Each field has exactly one decode rule below; there is no type registry.
Decoding reports failures as:

- MalformedEncoding: not valid UTF-8 / standard JSON
- SchemaTypeMismatch: missing field or wrong shape
- GeometricallyInvalidOnLoad: too few control points for a curve
- AssetResolutionError: backing image could not be resolved
"""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, Final, List, Optional

from arena_map.core.errors import (
    GeometricallyInvalidOnLoad,
    InsufficientPoints,
    MalformedEncoding,
    MapReadError,
    SchemaTypeMismatch,
    UnsupportedSchemaVersion,
)
from arena_map.editor.map import DEFAULT_MAP_SIZE, Map
from arena_map.persistence.assets import AssetResolver


logger = logging.getLogger(__name__)

SCHEMA_VERSION: Final[int] = 1


# ================================================================
# CONFIGURATION
# ================================================================


@dataclass(frozen=True)
class CodecConfig:
    """
    Codec configuration.

    Parameters
    ----------
    indent : int
        Indentation width used in pretty mode.
    """

    indent: int = 4


# ================================================================
# FIELD RULES
# ================================================================


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def _decode_number(value: Any, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SchemaTypeMismatch(field, f"expected a number, got {type(value).__name__}")
    try:
        number = float(value)
    except OverflowError as err:
        raise SchemaTypeMismatch(field, "number out of range") from err
    if not math.isfinite(number):
        raise SchemaTypeMismatch(field, "expected a finite number")
    return number


def _decode_vec2(value: Any, field: str) -> List[float]:
    if not isinstance(value, list) or len(value) != 2:
        raise SchemaTypeMismatch(field, "expected a list of two numbers")
    return [_decode_number(value[0], f"{field}[0]"), _decode_number(value[1], f"{field}[1]")]


def _decode_vec2_list(value: Any, field: str) -> List[List[float]]:
    if not isinstance(value, list):
        raise SchemaTypeMismatch(field, f"expected a list, got {type(value).__name__}")
    return [_decode_vec2(item, f"{field}[{i}]") for i, item in enumerate(value)]


def _decode_string(value: Any, field: str) -> str:
    if not isinstance(value, str):
        raise SchemaTypeMismatch(field, f"expected a string, got {type(value).__name__}")
    return value


def _require(document: Dict[str, Any], field: str) -> Any:
    if field not in document:
        raise SchemaTypeMismatch(field, "missing required field")
    return document[field]


# ================================================================
# CODEC
# ================================================================


class SchemaCodec:
    """
    Serialize and deserialize maps.

    Parameters
    ----------
    resolver : AssetResolver | None
        Resolves the backing-image path on load. Without a resolver the
        map's ``background_ref`` stays None.
    config : CodecConfig | None
        Codec configuration. If None, defaults are used.
    """

    def __init__(
        self,
        resolver: Optional[AssetResolver] = None,
        config: Optional[CodecConfig] = None,
    ) -> None:
        self._resolver: Optional[AssetResolver] = resolver
        self._config: CodecConfig = config if config is not None else CodecConfig()

    @property
    def config(self) -> CodecConfig:
        return self._config

    # ------------------------------------------------------------
    # ENCODE
    # ------------------------------------------------------------

    @staticmethod
    def to_dict(map_: Map) -> Dict[str, Any]:
        """
        Persisted fields of ``map_`` as a JSON-safe dictionary.
        """
        return {
            "version": SCHEMA_VERSION,
            "control_points": map_.control_points().tolist(),
            "markers": map_.markers().tolist(),
            "background": map_.background,
            "size": map_.size.tolist(),
        }

    def save(self, map_: Map, pretty: bool = False) -> str:
        """
        Encode ``map_``.

        Parameters
        ----------
        map_ : Map
        pretty : bool
            Indented, human-readable output when True; no whitespace otherwise.
        """
        document = self.to_dict(map_)
        if pretty:
            return json.dumps(document, indent=self._config.indent, allow_nan=False) + "\n"
        return json.dumps(document, separators=(",", ":"), allow_nan=False)

    def save_file(self, map_: Map, path: str | Path, pretty: bool = False) -> None:
        Path(path).write_text(self.save(map_, pretty), encoding="utf-8")
        logger.info("Saved map to %s", path)

    # ------------------------------------------------------------
    # DECODE
    # ------------------------------------------------------------

    @staticmethod
    def parse(data: bytes | str) -> Dict[str, Any]:
        """
        Structural deserialization only.

        Raises
        ------
        MalformedEncoding
            If ``data`` is not UTF-8 encoded standard JSON.
        SchemaTypeMismatch
            If the document root is not an object.
        """
        try:
            text = data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data
            document = json.loads(text, parse_constant=_reject_constant)
        except (UnicodeDecodeError, ValueError, RecursionError) as err:
            raise MalformedEncoding(f"Malformed map document: {err}") from err

        if not isinstance(document, dict):
            raise SchemaTypeMismatch("<root>", "expected an object")
        return document

    def from_dict(self, document: Dict[str, Any]) -> Map:
        """
        Build a Map from a parsed document.

        Raises
        ------
        SchemaTypeMismatch
            If a field is missing or has the wrong shape.
        GeometricallyInvalidOnLoad
            If the control points cannot form a curve.
        AssetResolutionError
            If the resolver rejects the background path.
        """
        version = _require(document, "version")
        if isinstance(version, bool) or version != SCHEMA_VERSION:
            raise UnsupportedSchemaVersion(version)

        control_points = _decode_vec2_list(_require(document, "control_points"), "control_points")
        markers = _decode_vec2_list(document.get("markers", []), "markers")
        background = _decode_string(document.get("background", ""), "background")
        size = _decode_vec2(document.get("size", list(DEFAULT_MAP_SIZE)), "size")

        try:
            map_ = Map(control_points, markers=markers, background=background, size=size)
        except InsufficientPoints as err:
            raise GeometricallyInvalidOnLoad(err) from err

        if background and self._resolver is not None:
            map_.set_background(background, self._resolver.resolve(background))
        return map_

    def load(self, data: bytes | str) -> Map:
        """
        Decode a map document and rebuild its curve.
        """
        return self.from_dict(self.parse(data))

    def load_file(self, path: str | Path) -> Map:
        """
        Raises
        ------
        MapReadError
            If the file cannot be read.
        """
        try:
            data = Path(path).read_bytes()
        except OSError as err:
            raise MapReadError(f"Failed to read map {path}: {err}") from err
        return self.load(data)
