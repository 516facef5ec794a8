"""
Edit session management.

Each record opened for editing gets its own ``AutoSaveScheduler``. The
manager creates it on open, routes changes and manual saves to it, tears it
down on close and, when a broadcast context is supplied, tells connected
clients about every save outcome.
"""

import asyncio
from collections.abc import Callable
from typing import Any, Optional

from consultancy.core.autosave.backends import PersistenceBackend
from consultancy.core.autosave.equality import SnapshotEquality
from consultancy.core.autosave.errors import SessionExistsError, SessionNotFoundError
from consultancy.core.autosave.models import PersistOutcome
from consultancy.core.autosave.scheduler import UNSET, AutoSaveScheduler
from consultancy.core.realtime import BroadcastContext
from consultancy.utils.config import AutoSaveSettings, get_settings
from consultancy.utils.constants import (
    EVENT_RECORD_SAVE_FAILED,
    EVENT_RECORD_SAVED,
    AuditAction,
    AuditType,
    SaveTrigger,
)
from consultancy.utils.logger import LoggerMixin, audit_log

# Builds the backend for a session id (e.g. a draft store bound to one record)
BackendFactory = Callable[[str], PersistenceBackend | Callable[[Any], Any]]


class EditSessionManager(LoggerMixin):
    """Owns one auto-save scheduler per open edit session."""

    def __init__(
        self,
        backend_factory: BackendFactory,
        *,
        config: Optional[AutoSaveSettings] = None,
        equality: Optional[SnapshotEquality] = None,
        broadcaster: Optional[BroadcastContext] = None,
    ) -> None:
        self._backend_factory = backend_factory
        self._config = config or get_settings().autosave
        self._equality = equality
        self._broadcaster = broadcaster
        self._sessions: dict[str, AutoSaveScheduler] = {}
        self._event_tasks: set[asyncio.Task] = set()

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    @property
    def session_ids(self) -> list[str]:
        return list(self._sessions)

    # -------------------------------------------------------------------------
    # Session lifecycle
    # -------------------------------------------------------------------------

    def open(
        self,
        session_id: str,
        initial: Any = UNSET,
        *,
        enabled: Optional[bool] = None,
    ) -> AutoSaveScheduler:
        """Start an edit session. ``initial`` is the record as loaded."""
        if session_id in self._sessions:
            raise SessionExistsError(session_id)

        scheduler = AutoSaveScheduler(
            self._backend_factory(session_id),
            config=self._config,
            equality=self._equality,
            session_id=session_id,
            initial=initial,
        )
        if enabled is not None:
            scheduler.enabled = enabled
        if self._broadcaster is not None:
            scheduler.add_listener(self._make_publisher(session_id))

        self._sessions[session_id] = scheduler
        audit_log(AuditAction.SESSION_OPENED, {"session_id": session_id}, AuditType.SESSION)
        return scheduler

    def get(self, session_id: str) -> AutoSaveScheduler:
        """Return the scheduler of an open session."""
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    async def close(self, session_id: str) -> None:
        """
        End an edit session.

        The pending debounce is dropped; an in-flight save is awaited so the
        caller knows the record is settled when this returns.
        """
        scheduler = self._sessions.pop(session_id, None)
        if scheduler is None:
            raise SessionNotFoundError(session_id)
        await scheduler.aclose()
        audit_log(AuditAction.SESSION_CLOSED, {"session_id": session_id}, AuditType.SESSION)

    async def close_all(self) -> None:
        """Close every open session."""
        for session_id in list(self._sessions):
            await self.close(session_id)
        await self.wait_for_events()

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def change(self, session_id: str, snapshot: Any) -> None:
        """Record a change to the session's edit buffer."""
        self.get(session_id).on_observed_change(snapshot)

    async def flush(self, session_id: str, snapshot: Any) -> PersistOutcome:
        """Save the session's edit buffer now."""
        return await self.get(session_id).flush_now(snapshot)

    def set_enabled(self, session_id: str, enabled: bool) -> None:
        self.get(session_id).enabled = enabled

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def _make_publisher(self, session_id: str):
        def _publish(snapshot: Any, outcome: PersistOutcome, trigger: SaveTrigger) -> None:
            if outcome.success:
                event, payload = EVENT_RECORD_SAVED, {"session_id": session_id, "trigger": trigger.value}
            else:
                event, payload = EVENT_RECORD_SAVE_FAILED, {
                    "session_id": session_id,
                    "trigger": trigger.value,
                    "error": outcome.error,
                }
            task = asyncio.get_running_loop().create_task(self._broadcaster.broadcast(event, payload))
            self._event_tasks.add(task)
            task.add_done_callback(self._event_tasks.discard)

        return _publish

    async def wait_for_events(self) -> None:
        """Wait for outstanding broadcast deliveries."""
        while self._event_tasks:
            await asyncio.wait(set(self._event_tasks))
