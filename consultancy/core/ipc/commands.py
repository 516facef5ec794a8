"""
Auto-save commands exposed to the renderer over IPC.

Each command takes a JSON-like payload validated against the models below
and operates on an ``EditSessionManager``.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field

from consultancy.core.autosave import EditSessionManager
from consultancy.core.ipc.dispatcher import CommandDispatcher, CommandResult
from consultancy.utils.constants import (
    COMMAND_CHANGE,
    COMMAND_CLOSE,
    COMMAND_FLUSH,
    COMMAND_OPEN,
    COMMAND_STATUS,
)


class SessionInput(BaseModel):
    """Identifies an edit session (typically ``<entity>:<record id>``)."""

    session_id: str = Field(min_length=1)


class OpenSessionInput(SessionInput):
    initial: Optional[Any] = None
    enabled: Optional[bool] = None


class SnapshotInput(SessionInput):
    snapshot: Any


class SessionStatus(BaseModel):
    """Status of one edit session as shown in the editor footer."""

    session_id: str
    phase: str
    enabled: bool
    in_flight: bool
    has_queued_snapshot: bool
    closed: bool


def register_autosave_commands(dispatcher: CommandDispatcher, manager: EditSessionManager) -> None:
    """Wire the auto-save commands for ``manager`` into ``dispatcher``."""

    def _status(session_id: str) -> SessionStatus:
        scheduler = manager.get(session_id)
        state = scheduler.state
        return SessionStatus(
            session_id=session_id,
            phase=state.phase.value,
            enabled=scheduler.enabled,
            in_flight=state.in_flight,
            has_queued_snapshot=state.has_queued_snapshot,
            closed=state.closed,
        )

    def open_session(args: OpenSessionInput) -> SessionStatus:
        if "initial" in args.model_fields_set:
            manager.open(args.session_id, args.initial, enabled=args.enabled)
        else:
            manager.open(args.session_id, enabled=args.enabled)
        return _status(args.session_id)

    def record_change(args: SnapshotInput) -> SessionStatus:
        manager.change(args.session_id, args.snapshot)
        return _status(args.session_id)

    async def save_now(args: SnapshotInput) -> CommandResult:
        outcome = await manager.flush(args.session_id, args.snapshot)
        return CommandResult(success=outcome.success, data=outcome.model_dump(), error=outcome.error)

    def session_status(args: SessionInput) -> SessionStatus:
        return _status(args.session_id)

    async def close_session(args: SessionInput) -> dict[str, Any]:
        await manager.close(args.session_id)
        return {"session_id": args.session_id, "closed": True}

    dispatcher.register(COMMAND_OPEN, OpenSessionInput, open_session, "Start auto-saving a record")
    dispatcher.register(COMMAND_CHANGE, SnapshotInput, record_change, "Report an edit")
    dispatcher.register(COMMAND_FLUSH, SnapshotInput, save_now, "Save immediately")
    dispatcher.register(COMMAND_STATUS, SessionInput, session_status, "Report session status")
    dispatcher.register(COMMAND_CLOSE, SessionInput, close_session, "Stop auto-saving a record")
