"""Trailing-edge debouncer on the asyncio event loop."""

import asyncio
from collections.abc import Callable
from typing import Generic, Optional, TypeVar

from consultancy.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Coalesce a burst of values into one emission after a quiet period.

    Every ``observe(value)`` cancels the pending timer and starts a new one.
    When a timer elapses without another observation, the latest value is
    handed to the subscriber. Intermediate values are dropped without side
    effects. There is no leading-edge emission.
    """

    def __init__(
        self,
        window_ms: int,
        subscriber: Callable[[T], None],
        *,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        name: str = "debounce",
    ) -> None:
        if window_ms <= 0:
            raise ValueError(f"window_ms must be > 0, got {window_ms}")
        self._window_ms = window_ms
        self._subscriber = subscriber
        self._loop = loop
        self._name = name
        self._handle: Optional[asyncio.TimerHandle] = None
        self._value: Optional[T] = None

    @property
    def window_ms(self) -> int:
        return self._window_ms

    @property
    def pending(self) -> bool:
        """True while a timer is armed."""
        return self._handle is not None

    @property
    def pending_value(self) -> Optional[T]:
        """The value that will be emitted if the current timer elapses."""
        return self._value if self._handle is not None else None

    def observe(self, value: T) -> None:
        """Record ``value`` as the latest candidate and restart the timer."""
        loop = self._loop or asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
            logger.trace(f"{self._name}: timer reset")
        self._value = value
        self._handle = loop.call_later(self._window_ms / 1000.0, self._fire)

    def cancel(self) -> bool:
        """Stop the pending timer without emitting. Returns True if one was armed."""
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        self._value = None
        logger.debug(f"{self._name}: pending emission cancelled")
        return True

    def _fire(self) -> None:
        value = self._value
        self._handle = None
        self._value = None
        logger.trace(f"{self._name}: emitting after {self._window_ms}ms quiet period")
        try:
            self._subscriber(value)
        except Exception:
            logger.exception(f"{self._name}: subscriber failed")
