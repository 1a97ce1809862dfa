"""
test_schema_codec.py

Unit tests for SchemaCodec in persistence.schema_codec.

These tests validate:

- Save / load fidelity of persisted fields
- Pretty and compact output
- Failure taxonomy on load
- Background resolution through the asset resolver
"""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest

from arena_map.core.errors import (
    AssetResolutionError,
    GeometricallyInvalidOnLoad,
    MalformedEncoding,
    MapLoadError,
    MapReadError,
    SchemaTypeMismatch,
    UnsupportedSchemaVersion,
)
from arena_map.editor.map import DEFAULT_MAP_SIZE, Map
from arena_map.persistence.assets import AssetRef, LocalAssetResolver
from arena_map.persistence.schema_codec import SCHEMA_VERSION, SchemaCodec


@pytest.fixture
def codec() -> SchemaCodec:
    return SchemaCodec()


@pytest.fixture
def edited_map() -> Map:
    map_ = Map(
        [[0.1, 0.2], [123.456789, -7.0], [1e-7, 3.333333333333333], [-42.0, 17.25]],
        markers=[[5.5, -6.5]],
        background="maps/arena.png",
        size=(640.0, 480.0),
    )
    map_.add_point((60.0, -10.0))
    return map_


def test_round_trip_exact(codec: SchemaCodec, edited_map: Map) -> None:
    for pretty in (False, True):
        loaded = codec.load(codec.save(edited_map, pretty=pretty))

        assert np.array_equal(loaded.control_points(), edited_map.control_points())
        assert np.array_equal(loaded.markers(), edited_map.markers())
        assert loaded.background == "maps/arena.png"
        assert np.array_equal(loaded.size, [640.0, 480.0])
        assert loaded.curve.domain_start == 0.0
        assert np.allclose(loaded.curve.sample_positions(20), edited_map.curve.sample_positions(20))


def test_load_accepts_bytes(codec: SchemaCodec) -> None:
    data = codec.save(Map.default()).encode("utf-8")

    assert codec.load(data).point_count == 4


def test_compact_has_no_whitespace(codec: SchemaCodec, edited_map: Map) -> None:
    text = codec.save(edited_map, pretty=False)

    assert " " not in text.replace("maps/arena.png", "")
    assert "\n" not in text


def test_pretty_is_indented(codec: SchemaCodec, edited_map: Map) -> None:
    text = codec.save(edited_map, pretty=True)

    assert text.endswith("\n")
    assert '\n    "control_points"' in text


def test_curve_is_not_serialized(codec: SchemaCodec) -> None:
    document = json.loads(codec.save(Map.default()))

    assert set(document) == {"version", "control_points", "markers", "background", "size"}
    assert document["version"] == SCHEMA_VERSION


def test_optional_fields_default(codec: SchemaCodec) -> None:
    map_ = codec.load('{"version": 1, "control_points": [[0, 0], [1, 0], [0, 1]]}')

    assert map_.marker_count == 0
    assert map_.background == ""
    assert np.array_equal(map_.size, DEFAULT_MAP_SIZE)


@pytest.mark.parametrize(
    "data",
    [
        b"{not json",
        b"\xff\xfe\x00",
        '{"version": 1, "control_points": [[NaN, 0], [1, 1]]}',
        "",
        "[" * 100_000,
    ],
)
def test_malformed_encoding(codec: SchemaCodec, data: bytes | str) -> None:
    with pytest.raises(MalformedEncoding):
        codec.load(data)


@pytest.mark.parametrize(
    "document",
    [
        [1, 2, 3],
        {"control_points": [[0, 0], [1, 1]]},
        {"version": 1},
        {"version": 1, "control_points": [[0, 0], [1]]},
        {"version": 1, "control_points": [[0, "a"], [1, 1]]},
        {"version": 1, "control_points": [[0, True], [1, 1]]},
        {"version": 1, "control_points": [[10**400, 0], [1, 1]]},
        {"version": 1, "control_points": {"x": 1}},
        {"version": 1, "control_points": [[0, 0], [1, 1]], "markers": [[1, 2, 3]]},
        {"version": 1, "control_points": [[0, 0], [1, 1]], "background": 4},
        {"version": 1, "control_points": [[0, 0], [1, 1]], "size": 10},
    ],
)
def test_type_mismatch(codec: SchemaCodec, document: object) -> None:
    with pytest.raises(SchemaTypeMismatch):
        codec.load(json.dumps(document))


def test_unsupported_version(codec: SchemaCodec) -> None:
    with pytest.raises(UnsupportedSchemaVersion) as info:
        codec.load('{"version": 99, "control_points": [[0, 0], [1, 1]]}')

    assert info.value.version == 99


def test_geometrically_invalid(codec: SchemaCodec) -> None:
    with pytest.raises(GeometricallyInvalidOnLoad) as info:
        codec.load('{"version": 1, "control_points": [[0, 0]]}')

    assert info.value.count == 1


def test_failure_kinds_are_distinct() -> None:
    kinds = [MalformedEncoding, SchemaTypeMismatch, GeometricallyInvalidOnLoad]

    for kind in kinds:
        assert issubclass(kind, MapLoadError)
        assert all(not issubclass(kind, other) for other in kinds if other is not kind)


def test_background_resolved(tmp_path: Path, edited_map: Map) -> None:
    codec = SchemaCodec(resolver=LocalAssetResolver(tmp_path))

    loaded = codec.load(codec.save(edited_map))

    assert loaded.background_ref == AssetRef("maps/arena.png", tmp_path / "maps/arena.png")


def test_background_resolution_failure(tmp_path: Path, edited_map: Map) -> None:
    codec = SchemaCodec(resolver=LocalAssetResolver(tmp_path, require_exists=True))

    with pytest.raises(AssetResolutionError):
        codec.load(codec.save(edited_map))


def test_file_round_trip(tmp_path: Path, codec: SchemaCodec, edited_map: Map) -> None:
    path = tmp_path / "map.json"

    codec.save_file(edited_map, path, pretty=True)

    assert np.array_equal(codec.load_file(path).control_points(), edited_map.control_points())


def test_missing_file(tmp_path: Path, codec: SchemaCodec) -> None:
    with pytest.raises(MapReadError):
        codec.load_file(tmp_path / "missing.json")


def test_out_of_range_literal_is_type_mismatch(codec: SchemaCodec) -> None:
    huge = "1" + "0" * 400

    with pytest.raises(SchemaTypeMismatch) as info:
        codec.load('{"version": 1, "control_points": [[%s, 0], [1, 1]]}' % huge)

    assert info.value.field.startswith("control_points")
