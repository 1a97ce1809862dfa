"""
map_loader.py

Load lifecycle for maps.

A load is modelled explicitly as::

    Requested -> Resolved(map) | Failed(reason)

:class:`MapLoader` starts loads and hands back a :class:`LoadRequest`
backed by a ``concurrent.futures.Future``. :class:`MapSlot` owns the
current map and swaps a newly loaded one in only once its request is
resolved, so readers never see a half-built map: the previous map stays
valid and queryable until then.

Loads run inline unless an executor is supplied, in which case byte
retrieval and decoding happen on the executor and the owner polls.
"""

from __future__ import annotations

from concurrent.futures import Executor, Future
from enum import Enum
import logging
from pathlib import Path
from typing import Callable, Dict, Optional

from arena_map.core.errors import MapLoadError, MapReadError
from arena_map.editor.map import Map
from arena_map.persistence.schema_codec import SchemaCodec


logger = logging.getLogger(__name__)

ByteReader = Callable[[str], bytes]


def read_local_file(path: str) -> bytes:
    return Path(path).read_bytes()


# ================================================================
# LOAD REQUEST
# ================================================================


class LoadStatus(Enum):
    REQUESTED = "requested"
    RESOLVED = "resolved"
    FAILED = "failed"


class LoadRequest:
    """
    Handle to a single pending or finished map load.

    Parameters
    ----------
    path : str
        Requested map path.
    future : Future[Map]
        Completion of the load.
    """

    def __init__(self, path: str, future: Future) -> None:
        self._path: str = path
        self._future: Future = future

    @property
    def path(self) -> str:
        return self._path

    @property
    def status(self) -> LoadStatus:
        if not self._future.done():
            return LoadStatus.REQUESTED
        if self._future.exception() is not None:
            return LoadStatus.FAILED
        return LoadStatus.RESOLVED

    @property
    def error(self) -> Optional[BaseException]:
        """
        Failure reason once FAILED, otherwise None.
        """
        if not self._future.done():
            return None
        return self._future.exception()

    def result(self, timeout: Optional[float] = None) -> Map:
        """
        Loaded map; blocks until done and re-raises the load failure.
        """
        return self._future.result(timeout)


# ================================================================
# LOADER
# ================================================================


class MapLoader:
    """
    Starts map loads.

    Parameters
    ----------
    codec : SchemaCodec | None
        Decoder used for the fetched bytes.
    reader : Callable[[str], bytes] | None
        Byte retrieval; reads local files when None.
    executor : Executor | None
        Where loads run. Inline when None.
    """

    def __init__(
        self,
        codec: Optional[SchemaCodec] = None,
        reader: Optional[ByteReader] = None,
        executor: Optional[Executor] = None,
    ) -> None:
        self._codec: SchemaCodec = codec if codec is not None else SchemaCodec()
        self._reader: ByteReader = reader if reader is not None else read_local_file
        self._executor: Optional[Executor] = executor

    def _load(self, path: str) -> Map:
        try:
            data = self._reader(path)
        except OSError as err:
            raise MapReadError(f"Failed to read map {path}: {err}") from err
        return self._codec.load(data)

    def request(self, path: str | Path) -> LoadRequest:
        """
        Begin loading ``path``.

        Failures never escape; they are stored on the returned request.
        """
        path = str(path)
        logger.info("Loading map %s", path)

        if self._executor is not None:
            return LoadRequest(path, self._executor.submit(self._load, path))

        future: Future = Future()
        try:
            future.set_result(self._load(path))
        except Exception as err:
            future.set_exception(err)
        return LoadRequest(path, future)


# ================================================================
# LOADING TASKS
# ================================================================


class LoadingTasks:
    """
    Named pending operations with a single completion check.
    """

    def __init__(self) -> None:
        self._tasks: Dict[str, bool] = {}

    def start(self, name: str) -> None:
        logger.info("Loading %s", name)
        self._tasks[name] = False

    def finish(self, name: str) -> None:
        """
        Raises
        ------
        KeyError
            If no task named ``name`` was started.
        """
        if name not in self._tasks:
            raise KeyError(f"No loading task {name!r}")
        self._tasks[name] = True

    def is_pending(self, name: str) -> bool:
        return self._tasks.get(name) is False

    def is_complete(self) -> bool:
        """
        True when at least one task was started and all have finished.
        """
        return bool(self._tasks) and all(self._tasks.values())

    def clear(self) -> None:
        self._tasks.clear()

    def __len__(self) -> int:
        return len(self._tasks)


# ================================================================
# MAP SLOT
# ================================================================


class MapSlot:
    """
    Holder of the current map with atomic replacement.

    Parameters
    ----------
    loader : MapLoader
        Used by :meth:`request_load`.
    tasks : LoadingTasks | None
        If given, a task named ``task_name`` tracks the pending load.
    task_name : str
        Name of the loading task.
    """

    def __init__(
        self,
        loader: MapLoader,
        tasks: Optional[LoadingTasks] = None,
        task_name: str = "Map",
    ) -> None:
        self._loader: MapLoader = loader
        self._tasks: Optional[LoadingTasks] = tasks
        self._task_name: str = task_name
        self._map: Optional[Map] = None
        self._pending: Optional[LoadRequest] = None
        self._last_error: Optional[BaseException] = None

    @property
    def map(self) -> Optional[Map]:
        return self._map

    @property
    def pending(self) -> Optional[LoadRequest]:
        return self._pending

    @property
    def last_error(self) -> Optional[BaseException]:
        return self._last_error

    def replace(self, map_: Optional[Map]) -> None:
        """
        Install ``map_`` directly (None clears the slot).
        """
        self._map = map_

    def request_load(self, path: str | Path) -> LoadRequest:
        """
        Start loading ``path``; supersedes any pending request.
        """
        if self._tasks is not None:
            self._tasks.start(self._task_name)
        self._pending = self._loader.request(path)
        return self._pending

    def poll(self) -> Optional[LoadStatus]:
        """
        Advance the pending load, swapping the map in when resolved.

        Returns
        -------
        LoadStatus | None
            Status of the request that was pending, or None if there was none.
        """
        request = self._pending
        if request is None:
            return None

        status = request.status
        if status is LoadStatus.REQUESTED:
            return status

        self._pending = None
        if status is LoadStatus.RESOLVED:
            self._map = request.result()
            self._last_error = None
            logger.info("Map %s loaded", request.path)
            if self._tasks is not None:
                self._tasks.finish(self._task_name)
        else:
            self._last_error = request.error
            logger.error("Failed to load map %s: %s", request.path, request.error)
        return status
