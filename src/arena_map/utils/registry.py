"""
registry.py

Named builders for preset objects.

Builders are registered with the :meth:`Registry.register` decorator next to
their definition and looked up by name afterwards. Every lookup calls the
builder again, so callers always receive a fresh object they may edit.
"""

from __future__ import annotations

from typing import Callable, Dict, Generic, Iterator, TypeVar


T = TypeVar("T")

Builder = Callable[..., T]


class Registry(Generic[T]):
    """
    Name -> builder table.

    Parameters
    ----------
    kind : str
        What the registry builds; used in error messages.
    """

    def __init__(self, kind: str = "preset") -> None:
        self._kind: str = kind
        self._builders: Dict[str, Builder[T]] = {}

    def register(self, name: str) -> Callable[[Builder[T]], Builder[T]]:
        """
        Decorator registering the wrapped builder under ``name``.

        Raises
        ------
        ValueError
            If ``name`` is already taken.
        """

        def decorate(builder: Builder[T]) -> Builder[T]:
            if name in self._builders:
                raise ValueError(f"{self._kind} '{name}' is already registered")
            self._builders[name] = builder
            return builder

        return decorate

    def create(self, name: str, **kwargs) -> T:
        """
        Build a new object with the builder registered under ``name``.

        Raises
        ------
        KeyError
            If nothing is registered under ``name``.
        """
        try:
            builder = self._builders[name]
        except KeyError:
            raise KeyError(
                f"unknown {self._kind} '{name}'; choose from {', '.join(self.available)}"
            ) from None
        return builder(**kwargs)

    @property
    def available(self) -> list[str]:
        return sorted(self._builders)

    def __contains__(self, name: object) -> bool:
        return name in self._builders

    def __iter__(self) -> Iterator[str]:
        return iter(self.available)

    def __len__(self) -> int:
        return len(self._builders)
