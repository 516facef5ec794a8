"""IPC command dispatch."""

from .commands import (
    OpenSessionInput,
    SessionInput,
    SessionStatus,
    SnapshotInput,
    register_autosave_commands,
)
from .dispatcher import (
    CommandDispatcher,
    CommandResult,
    CommandSpec,
    UnknownCommandError,
)

__all__ = [
    "CommandDispatcher",
    "CommandResult",
    "CommandSpec",
    "UnknownCommandError",
    "OpenSessionInput",
    "SessionInput",
    "SessionStatus",
    "SnapshotInput",
    "register_autosave_commands",
]
