"""
Structural equality for edit-buffer snapshots.

The scheduler never compares snapshots by identity or by their serialized
text. It asks a ``SnapshotEquality`` whether two values represent the same
editable state, so key ordering, tuple-versus-list differences and
non-serializable fields do not produce spurious writes.
"""

import dataclasses
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

S = TypeVar("S")


class SnapshotEquality(ABC, Generic[S]):
    """Decides whether two snapshots represent the same editable state."""

    @abstractmethod
    def equals(self, left: S, right: S) -> bool:
        """Return True when ``left`` and ``right`` are interchangeable for persistence."""
        pass

    def __call__(self, left: S, right: S) -> bool:
        return self.equals(left, right)


def normalize(value: Any) -> Any:
    """
    Reduce a snapshot to plain comparable containers.

    Pydantic models and dataclasses become dicts, tuples become lists, and
    mappings are rebuilt with normalized values. Everything else is left
    for its own ``__eq__``.
    """
    if isinstance(value, BaseModel):
        return normalize(value.model_dump())
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return normalize(dataclasses.asdict(value))
    if isinstance(value, Mapping):
        return {key: normalize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [normalize(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return frozenset(value)
    return value


class StructuralEquality(SnapshotEquality[Any]):
    """Deep structural equality over normalized snapshots."""

    def equals(self, left: Any, right: Any) -> bool:
        if left is right:
            return True
        return normalize(left) == normalize(right)


class KeyedEquality(SnapshotEquality[S]):
    """
    Compare snapshots through a projection.

    Useful when a snapshot carries volatile fields (``updated_at``, cursor
    position) that should not count as an edit::

        KeyedEquality(lambda form: {k: v for k, v in form.items() if k != "updated_at"})
    """

    def __init__(self, key: Callable[[S], Any], inner: SnapshotEquality[Any] | None = None):
        self._key = key
        self._inner = inner or StructuralEquality()

    def equals(self, left: S, right: S) -> bool:
        return self._inner.equals(self._key(left), self._key(right))


def ignoring_fields(*fields: str) -> KeyedEquality[Any]:
    """Equality over mapping or model snapshots that skips the named top-level fields."""
    excluded = frozenset(fields)

    def _project(value: Any) -> Any:
        data = normalize(value)
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if k not in excluded}
        return data

    return KeyedEquality(_project)
