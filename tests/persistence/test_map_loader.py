"""
test_map_loader.py

Unit tests for the load lifecycle in persistence.map_loader.

These tests validate:

- Requested -> Resolved / Failed transitions
- Atomic swap of the current map in MapSlot
- Executor-backed loads polled to completion
- LoadingTasks bookkeeping
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import threading
from typing import Dict

import numpy as np
import pytest

from arena_map.core.errors import (
    GeometricallyInvalidOnLoad,
    MalformedEncoding,
    MapReadError,
    SchemaTypeMismatch,
)
from arena_map.editor.map import Map
from arena_map.persistence.map_loader import (
    LoadingTasks,
    LoadStatus,
    MapLoader,
    MapSlot,
)
from arena_map.persistence.schema_codec import SchemaCodec


TRIANGLE = '{"version": 1, "control_points": [[0, 0], [10, 0], [0, 10]]}'


def make_reader(files: Dict[str, str]):
    def read(path: str) -> bytes:
        if path not in files:
            raise FileNotFoundError(path)
        return files[path].encode("utf-8")

    return read


@pytest.fixture
def loader() -> MapLoader:
    return MapLoader(
        reader=make_reader(
            {
                "triangle.json": TRIANGLE,
                "broken.json": "{",
                "tiny.json": '{"version": 1, "control_points": [[0, 0]]}',
                "huge.json": '{"version": 1, "control_points": [[1%s, 0], [1, 1]]}' % ("0" * 400),
            }
        )
    )


def test_inline_request_resolves(loader: MapLoader) -> None:
    request = loader.request("triangle.json")

    assert request.status is LoadStatus.RESOLVED
    assert request.error is None
    assert request.result().point_count == 3


@pytest.mark.parametrize(
    "path, error",
    [
        ("broken.json", MalformedEncoding),
        ("tiny.json", GeometricallyInvalidOnLoad),
        ("missing.json", MapReadError),
        ("huge.json", SchemaTypeMismatch),
    ],
)
def test_inline_request_fails(loader: MapLoader, path: str, error: type) -> None:
    request = loader.request(path)

    assert request.status is LoadStatus.FAILED
    assert isinstance(request.error, error)
    with pytest.raises(error):
        request.result()


def test_inline_request_stores_reader_crash() -> None:
    def read(path: str) -> bytes:
        raise RuntimeError("archive handle closed")

    loader = MapLoader(reader=read)
    slot = MapSlot(loader)
    old = Map.default()
    slot.replace(old)

    slot.request_load("crash.json")

    assert slot.poll() is LoadStatus.FAILED
    assert slot.map is old
    assert isinstance(slot.last_error, RuntimeError)
    with pytest.raises(RuntimeError):
        loader.request("crash.json").result()


def test_slot_swaps_on_resolve(loader: MapLoader) -> None:
    tasks = LoadingTasks()
    slot = MapSlot(loader, tasks=tasks)
    slot.replace(Map.default())

    slot.request_load("triangle.json")
    assert tasks.is_pending("Map")

    assert slot.poll() is LoadStatus.RESOLVED
    assert slot.map is not None
    assert slot.map.point_count == 3
    assert slot.pending is None
    assert tasks.is_complete()


def test_slot_keeps_old_map_on_failure(loader: MapLoader) -> None:
    slot = MapSlot(loader)
    old = Map.default()
    slot.replace(old)

    slot.request_load("broken.json")

    assert slot.poll() is LoadStatus.FAILED
    assert slot.map is old
    assert isinstance(slot.last_error, MalformedEncoding)


def test_poll_without_request(loader: MapLoader) -> None:
    assert MapSlot(loader).poll() is None


def test_executor_load_is_polled() -> None:
    release = threading.Event()

    def slow_read(path: str) -> bytes:
        release.wait(timeout=5.0)
        return TRIANGLE.encode("utf-8")

    with ThreadPoolExecutor(max_workers=1) as executor:
        slot = MapSlot(MapLoader(SchemaCodec(), reader=slow_read, executor=executor))
        old = Map.default()
        slot.replace(old)

        request = slot.request_load("triangle.json")
        assert slot.poll() is LoadStatus.REQUESTED
        assert slot.map is old

        release.set()
        request.result(timeout=5.0)

        assert slot.poll() is LoadStatus.RESOLVED
        assert np.array_equal(slot.map.control_points(), [[0, 0], [10, 0], [0, 10]])


def test_loading_tasks() -> None:
    tasks = LoadingTasks()

    assert not tasks.is_complete()

    tasks.start("Map")
    tasks.start("Player")
    tasks.finish("Map")
    assert not tasks.is_complete()

    tasks.finish("Player")
    assert tasks.is_complete()
    assert len(tasks) == 2

    tasks.clear()
    assert not tasks.is_complete()


def test_finish_unknown_task() -> None:
    with pytest.raises(KeyError):
        LoadingTasks().finish("Map")
