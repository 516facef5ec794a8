"""Debounced auto-persistence of edit buffers."""

from .backends import (
    CallableBackend,
    InMemoryBackend,
    PersistenceBackend,
    WriteRecord,
    as_backend,
)
from .debounce import Debouncer
from .equality import (
    KeyedEquality,
    SnapshotEquality,
    StructuralEquality,
    ignoring_fields,
    normalize,
)
from .errors import (
    AutoSaveError,
    PersistFailure,
    SessionError,
    SessionExistsError,
    SessionNotFoundError,
)
from .models import PersistOutcome, SchedulerState
from .scheduler import UNSET, AutoSaveScheduler, OutcomeListener
from .sessions import BackendFactory, EditSessionManager

__all__ = [
    # Backends
    "CallableBackend",
    "InMemoryBackend",
    "PersistenceBackend",
    "WriteRecord",
    "as_backend",
    # Debounce
    "Debouncer",
    # Equality
    "KeyedEquality",
    "SnapshotEquality",
    "StructuralEquality",
    "ignoring_fields",
    "normalize",
    # Errors
    "AutoSaveError",
    "PersistFailure",
    "SessionError",
    "SessionExistsError",
    "SessionNotFoundError",
    # Scheduler
    "AutoSaveScheduler",
    "OutcomeListener",
    "PersistOutcome",
    "SchedulerState",
    "UNSET",
    # Sessions
    "BackendFactory",
    "EditSessionManager",
]
