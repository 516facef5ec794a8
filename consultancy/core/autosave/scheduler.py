"""
Debounced auto-persistence scheduler.

Watches the edit buffer of one record, waits for editing to go quiet, and
commits the buffer to a persistence backend. A manual ``flush_now`` path
shares the same write slot so the two triggers never race each other.

Write discipline:
- at most one persist in flight per session;
- triggers arriving mid-flight go to a single latest-wins slot, so a value
  superseded while waiting is never written;
- ``last_persisted_snapshot`` only advances when the backend reports success;
- the automatic path never writes a value equal to the last persisted one,
  the manual path always writes.
"""

import asyncio
import copy
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Optional

from consultancy.core.autosave.backends import PersistenceBackend, as_backend
from consultancy.core.autosave.debounce import Debouncer
from consultancy.core.autosave.equality import SnapshotEquality, StructuralEquality
from consultancy.core.autosave.errors import PersistFailure
from consultancy.core.autosave.models import PersistOutcome, SchedulerState
from consultancy.utils.config import AutoSaveSettings, get_settings
from consultancy.utils.constants import (
    SESSION_CLOSED_ERROR,
    AuditAction,
    AuditType,
    SaveTrigger,
    SchedulerPhase,
)
from consultancy.utils.logger import LoggerMixin, audit_log

# Called after every resolved persist with (snapshot, outcome, trigger)
OutcomeListener = Callable[[Any, PersistOutcome, SaveTrigger], None]

UNSET = object()


@dataclass
class _PendingWrite:
    """A snapshot waiting for (or occupying) the write slot."""

    snapshot: Any
    trigger: SaveTrigger
    waiters: list[asyncio.Future] = field(default_factory=list)

    @property
    def forced(self) -> bool:
        # Manual saves skip redundant-write suppression
        return self.trigger is SaveTrigger.MANUAL


class AutoSaveScheduler(LoggerMixin):
    """
    Auto-save scheduler bound to a single edit session.

    Usage:
        scheduler = AutoSaveScheduler(repo.save_draft, initial=form_data)
        scheduler.on_observed_change(edited)       # on every keystroke
        outcome = await scheduler.flush_now(edited)  # "Save" button
        await scheduler.aclose()                   # record closed
    """

    def __init__(
        self,
        backend: PersistenceBackend | Callable[[Any], Any],
        *,
        config: Optional[AutoSaveSettings] = None,
        equality: Optional[SnapshotEquality] = None,
        session_id: str = "session",
        initial: Any = UNSET,
        copy_snapshots: bool = True,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        """
        Initialize the scheduler.

        Args:
            backend: Persistence backend or save function (sync or async)
            config: Debounce window and enabled flag; defaults to app settings
            equality: Snapshot comparison; defaults to deep structural equality
            session_id: Identifier used in logs and outcome events
            initial: Snapshot loaded at mount; establishes the baseline at once
            copy_snapshots: Deep-copy persisted snapshots so later in-place
                edits of the caller's buffer cannot move the baseline
            loop: Event loop for timers and tasks; defaults to the running loop
        """
        self._backend = as_backend(backend)
        self._config = config or get_settings().autosave
        self._equality = equality or StructuralEquality()
        self._session_id = session_id
        self._copy_snapshots = copy_snapshots
        self._loop = loop

        self._enabled = self._config.enabled
        self._debouncer: Debouncer[Any] = Debouncer(
            self._config.debounce_window_ms,
            self.on_debounced_emission,
            loop=loop,
            name=f"autosave[{session_id}]",
        )

        self._last_persisted: Any = None
        self._has_observed_first_value = False
        self._in_flight = False
        self._queued: Optional[_PendingWrite] = None
        self._drain_task: Optional[asyncio.Task] = None
        self._closed = False
        self._listeners: list[OutcomeListener] = []

        if initial is not UNSET:
            self.on_observed_change(initial)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        if value != self._enabled:
            self.logger.debug(f"[{self._session_id}] auto-save {'enabled' if value else 'disabled'}")
        self._enabled = value

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def last_persisted_snapshot(self) -> Any:
        return self._last_persisted

    @property
    def phase(self) -> SchedulerPhase:
        if self._in_flight:
            return SchedulerPhase.PERSISTING
        if self._debouncer.pending:
            return SchedulerPhase.DEBOUNCING
        return SchedulerPhase.IDLE

    @property
    def state(self) -> SchedulerState:
        """Snapshot of the scheduler's bookkeeping."""
        return SchedulerState(
            last_persisted_snapshot=self._last_persisted,
            has_observed_first_value=self._has_observed_first_value,
            in_flight=self._in_flight,
            queued_snapshot=self._queued.snapshot if self._queued else None,
            has_queued_snapshot=self._queued is not None,
            phase=self.phase,
            closed=self._closed,
        )

    def add_listener(self, listener: OutcomeListener) -> None:
        """Register a callback invoked after each resolved persist."""
        self._listeners.append(listener)

    def remove_listener(self, listener: OutcomeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # -------------------------------------------------------------------------
    # Triggers
    # -------------------------------------------------------------------------

    def on_observed_change(self, snapshot: Any) -> None:
        """
        Feed the current edit buffer to the scheduler.

        The first observation of a session is the just-loaded record. It is
        emitted immediately and becomes the baseline; every later observation
        goes through the debounce window.
        """
        if self._closed:
            self.logger.debug(f"[{self._session_id}] change ignored, session closed")
            return

        if not self._has_observed_first_value:
            self.on_debounced_emission(snapshot)
            return

        self._debouncer.observe(snapshot)

    def on_debounced_emission(self, snapshot: Any) -> None:
        """Handle a settled snapshot from the debounce window."""
        if not self._has_observed_first_value:
            self._has_observed_first_value = True
            self._last_persisted = self._copy(snapshot)
            self.logger.debug(f"[{self._session_id}] baseline established")
            return

        if self._closed:
            return

        if not self._enabled:
            self.logger.trace(f"[{self._session_id}] auto-save disabled, emission ignored")
            return

        # Deliberately skipped mid-flight: the baseline is about to move, so a
        # revert to it must still be queued. The queue drain re-checks.
        if not self._in_flight and self._equality.equals(snapshot, self._last_persisted):
            self.logger.trace(f"[{self._session_id}] snapshot unchanged, skipping write")
            return

        self._submit(_PendingWrite(snapshot, SaveTrigger.AUTOMATIC))

    async def flush_now(self, snapshot: Any) -> PersistOutcome:
        """
        Persist ``snapshot`` right away, whether or not it changed.

        Waits behind an in-flight write if there is one. Backend failures are
        returned as an unsuccessful outcome, never raised.

        Returns:
            PersistOutcome of the write that carried this snapshot (or a newer
            one that superseded it while queued)
        """
        if self._closed:
            return PersistOutcome.failed(SESSION_CLOSED_ERROR)

        # An explicit save means the caller has settled state of its own
        self._has_observed_first_value = True

        waiter = self._get_loop().create_future()
        self._submit(_PendingWrite(snapshot, SaveTrigger.MANUAL, [waiter]))
        return await waiter

    # -------------------------------------------------------------------------
    # Teardown
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """
        End the edit session.

        Cancels a pending debounce timer. An in-flight persist is left to
        finish; anything queued behind it is discarded.
        """
        if self._closed:
            return
        self._closed = True
        if self._debouncer.cancel():
            self.logger.info(f"[{self._session_id}] closed with unsaved pending edit discarded")
        else:
            self.logger.debug(f"[{self._session_id}] closed")

    async def aclose(self) -> None:
        """Close the session and wait for an in-flight persist to finish."""
        self.close()
        await self.wait_idle()

    async def wait_idle(self) -> None:
        """Wait until no persist is in flight."""
        while self._drain_task is not None and not self._drain_task.done():
            await asyncio.wait({self._drain_task})

    # -------------------------------------------------------------------------
    # Write slot
    # -------------------------------------------------------------------------

    def _submit(self, pending: _PendingWrite) -> None:
        if not self._in_flight:
            self._in_flight = True
            self._drain_task = self._get_loop().create_task(self._drain(pending))
            return

        previous = self._queued
        if previous is not None:
            self.logger.debug(f"[{self._session_id}] queued snapshot superseded")
            pending.waiters[:0] = previous.waiters
            if previous.forced:
                pending.trigger = SaveTrigger.MANUAL
        self._queued = pending

    async def _drain(self, pending: Optional[_PendingWrite]) -> None:
        try:
            while pending is not None:
                outcome = await self._persist(pending)
                self._resolve(pending, outcome)
                pending = self._take_queued()
        finally:
            if pending is not None:
                # Cancelled mid-write (event loop shutting down)
                self._in_flight = False
                self._settle(pending, PersistOutcome.failed("Persist cancelled"))
                queued, self._queued = self._queued, None
                if queued is not None:
                    self._settle(queued, PersistOutcome.failed("Persist cancelled"))

    async def _persist(self, pending: _PendingWrite) -> PersistOutcome:
        snapshot = pending.snapshot
        try:
            result = await self._backend.persist(snapshot)
            if isinstance(result, PersistOutcome) and not result.success:
                raise PersistFailure(result.error or "Backend reported failure", snapshot=snapshot)
        except Exception as e:
            failure = e if isinstance(e, PersistFailure) else PersistFailure.from_exception(e, snapshot)
            self._report_failure(failure, pending.trigger)
            return PersistOutcome.failed(str(failure))

        self._last_persisted = self._copy(snapshot)
        self.logger.debug(f"[{self._session_id}] {pending.trigger.value} save succeeded")
        if pending.trigger is SaveTrigger.MANUAL:
            audit_log(AuditAction.RECORD_SAVED, {"session_id": self._session_id})
        return PersistOutcome.ok()

    def _take_queued(self) -> Optional[_PendingWrite]:
        """Pick the next write once the slot frees up, or release the slot."""
        queued, self._queued = self._queued, None

        if queued is not None and self._closed:
            self.logger.debug(f"[{self._session_id}] queued snapshot dropped after close")
            self._settle(queued, PersistOutcome.failed(SESSION_CLOSED_ERROR))
            queued = None
        elif (
            queued is not None
            and not queued.forced
            and self._equality.equals(queued.snapshot, self._last_persisted)
        ):
            self.logger.trace(f"[{self._session_id}] queued snapshot already persisted")
            queued = None

        if queued is None:
            self._in_flight = False
        return queued

    def _resolve(self, pending: _PendingWrite, outcome: PersistOutcome) -> None:
        self._settle(pending, outcome)
        for listener in list(self._listeners):
            try:
                listener(pending.snapshot, outcome, pending.trigger)
            except Exception:
                self.logger.exception(f"[{self._session_id}] outcome listener failed")

    @staticmethod
    def _settle(pending: _PendingWrite, outcome: PersistOutcome) -> None:
        for waiter in pending.waiters:
            if not waiter.done():
                waiter.set_result(outcome)

    def _report_failure(self, failure: PersistFailure, trigger: SaveTrigger) -> None:
        if trigger is SaveTrigger.AUTOMATIC:
            # No retry: the next changed emission will try again
            self.logger.warning(f"[{self._session_id}] auto-save failed: {failure}")
        else:
            self.logger.error(f"[{self._session_id}] manual save failed: {failure}")
        audit_log(
            AuditAction.SAVE_FAILED,
            {"session_id": self._session_id, "trigger": trigger.value, "error": str(failure)},
            AuditType.FAILURE,
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _copy(self, snapshot: Any) -> Any:
        return copy.deepcopy(snapshot) if self._copy_snapshots else snapshot

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()
