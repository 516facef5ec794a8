"""
Shared test fixtures for the consultancy auto-save test suite.

Sets environment variables before any package imports so settings load in
testing mode, then provides fake clocks and controllable backends.
"""

import os

# === Set environment BEFORE any consultancy imports ===
os.environ.setdefault("APP_ENVIRONMENT", "testing")
os.environ.setdefault("DB_NAME", "consultancy_test")
os.environ.setdefault("LOG_FILE_OUTPUT", "false")
os.environ.setdefault("LOG_CONSOLE_OUTPUT", "false")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import asyncio
from typing import Any, Optional

import pytest

from consultancy.core.autosave import PersistenceBackend
from consultancy.utils.config import AutoSaveSettings


# ---------------------------------------------------------------------------
# Fake timer loop
# ---------------------------------------------------------------------------


class FakeTimerHandle:
    def __init__(self, when: float, callback, args: tuple):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeTimerLoop:
    """
    Deterministic clock for ``call_later``.

    Tasks and futures are delegated to the running asyncio loop, so a
    scheduler built on this loop still runs its writes for real while its
    debounce timers only fire on ``advance``.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._timers: list[FakeTimerHandle] = []

    def call_later(self, delay: float, callback, *args) -> FakeTimerHandle:
        handle = FakeTimerHandle(self.now + delay, callback, args)
        self._timers.append(handle)
        return handle

    def advance_ms(self, ms: float) -> None:
        target = self.now + ms / 1000.0
        while True:
            due = [h for h in self._timers if not h.cancelled and h.when <= target + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self._timers.remove(handle)
            self.now = handle.when
            handle.callback(*handle.args)
        self.now = target

    @property
    def armed(self) -> int:
        return sum(1 for h in self._timers if not h.cancelled)

    def create_task(self, coro):
        return asyncio.get_running_loop().create_task(coro)

    def create_future(self):
        return asyncio.get_running_loop().create_future()


@pytest.fixture
def fake_loop():
    return FakeTimerLoop()


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------


class GatedBackend(PersistenceBackend):
    """
    Backend whose writes stay in flight until the test releases them.

    ``calls`` lists every snapshot handed to ``persist`` in order.
    """

    def __init__(self) -> None:
        self.calls: list[Any] = []
        self._gates: list[asyncio.Future] = []

    async def persist(self, snapshot: Any) -> None:
        self.calls.append(snapshot)
        gate = asyncio.get_running_loop().create_future()
        self._gates.append(gate)
        await gate

    @property
    def open_gates(self) -> int:
        return sum(1 for gate in self._gates if not gate.done())

    def release(self, error: Optional[BaseException] = None) -> None:
        """Resolve the oldest write still in flight."""
        gate = next(gate for gate in self._gates if not gate.done())
        if error is None:
            gate.set_result(None)
        else:
            gate.set_exception(error)


class RecordingBackend(PersistenceBackend):
    """Backend that completes immediately, optionally failing on chosen snapshots."""

    def __init__(self, fail_on: tuple = ()) -> None:
        self.calls: list[Any] = []
        self.fail_on = list(fail_on)

    async def persist(self, snapshot: Any) -> None:
        self.calls.append(snapshot)
        if snapshot in self.fail_on:
            raise IOError(f"disk full while saving {snapshot!r}")


@pytest.fixture
def gated_backend():
    return GatedBackend()


@pytest.fixture
def recording_backend():
    return RecordingBackend()


@pytest.fixture
def make_recording_backend():
    """Factory for backends that reject the given snapshots."""

    def _factory(*fail_on: Any) -> RecordingBackend:
        return RecordingBackend(fail_on=fail_on)

    return _factory


async def _settle(rounds: int = 10) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def settle():
    """Coroutine that lets pending tasks run until they block again."""
    return _settle


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def autosave_config():
    return AutoSaveSettings(debounce_window_ms=300, enabled=True)


@pytest.fixture
def sample_candidate_form():
    return {
        "name": "Priya Nair",
        "position": "Staff Nurse",
        "passport_no": "K1234567",
        "skills": ["ICU", "Pediatrics"],
        "contact": {"phone": "+91-98765-43210", "email": "priya.nair@example.com"},
    }
