"""
Persistence backends for the auto-save scheduler.

A backend is a write-only capability: ``await backend.persist(snapshot)``.
It may be slow and it may fail. Raising any exception, or returning a
failed ``PersistOutcome``, counts as a persist failure.
"""

import asyncio
import copy
import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from consultancy.utils.logger import get_logger

logger = get_logger(__name__)


class PersistenceBackend(ABC):
    """Write capability supplied by the caller of a scheduler."""

    @abstractmethod
    async def persist(self, snapshot: Any) -> Any:
        """Durably store ``snapshot``. Raise on failure."""
        pass


class CallableBackend(PersistenceBackend):
    """Adapts a plain save function (sync or async) to the backend interface."""

    def __init__(self, fn: Callable[[Any], Any]):
        self._fn = fn

    async def persist(self, snapshot: Any) -> Any:
        result = self._fn(snapshot)
        if inspect.isawaitable(result):
            result = await result
        return result


def as_backend(backend: "PersistenceBackend | Callable[[Any], Any]") -> PersistenceBackend:
    """Accept either a backend instance or a bare save function."""
    if isinstance(backend, PersistenceBackend):
        return backend
    if callable(backend):
        return CallableBackend(backend)
    raise TypeError(f"Expected a PersistenceBackend or callable, got {type(backend).__name__}")


@dataclass
class WriteRecord:
    """One write observed by an in-memory backend."""

    snapshot: Any
    started_at: datetime
    finished_at: Optional[datetime] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.finished_at is not None and self.error is None


@dataclass
class InMemoryBackend(PersistenceBackend):
    """
    Keeps the latest stored snapshot in memory and records every write.

    ``latency_ms`` simulates a slow store; ``fail_when`` lets callers inject
    failures for particular snapshots.
    """

    latency_ms: int = 0
    fail_when: Optional[Callable[[Any], bool]] = None
    stored: Any = None
    writes: list[WriteRecord] = field(default_factory=list)

    async def persist(self, snapshot: Any) -> None:
        record = WriteRecord(snapshot=copy.deepcopy(snapshot), started_at=datetime.now(timezone.utc))
        self.writes.append(record)
        if self.latency_ms:
            await asyncio.sleep(self.latency_ms / 1000.0)
        record.finished_at = datetime.now(timezone.utc)
        if self.fail_when is not None and self.fail_when(snapshot):
            record.error = "Simulated write failure"
            logger.debug(f"In-memory write rejected: {snapshot!r}")
            raise IOError(record.error)
        self.stored = record.snapshot

    @property
    def write_count(self) -> int:
        return len(self.writes)
