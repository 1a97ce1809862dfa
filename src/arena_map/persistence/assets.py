"""
assets.py

Asset-resolution boundary for backing images.

The codec only turns a path string into an opaque reference; it never
fetches image bytes itself. Engines plug in their own resolver by
implementing :class:`AssetResolver`.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from arena_map.core.errors import AssetResolutionError


@dataclass(frozen=True)
class AssetRef:
    """
    Resolved, loadable reference to an asset.

    Parameters
    ----------
    path : str
        Path as written in the map document.
    location : Path
        Where a loader should read the asset from.
    """

    path: str
    location: Path


class AssetResolver(Protocol):
    """Turns an asset path into a loadable reference."""

    def resolve(self, path: str) -> object:  # pragma: no cover
        """Return an opaque reference for ``path``."""


class LocalAssetResolver:
    """
    Resolve asset paths against a local asset root.

    Parameters
    ----------
    root : str | Path
        Directory asset paths are relative to.
    require_exists : bool
        If True, resolving a missing file fails.
    """

    def __init__(self, root: str | Path = ".", require_exists: bool = False) -> None:
        self._root: Path = Path(root)
        self._require_exists: bool = require_exists

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, path: str) -> AssetRef:
        """
        Raises
        ------
        AssetResolutionError
            If ``require_exists`` is set and the file is missing.
        """
        location = self._root / path
        if self._require_exists and not location.is_file():
            raise AssetResolutionError(f"Asset not found: {location}")
        return AssetRef(path=path, location=location)
