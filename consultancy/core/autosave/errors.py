"""Exception hierarchy for the auto-save subsystem."""

from typing import Any, Optional


class AutoSaveError(Exception):
    """Base class for auto-save errors."""


class PersistFailure(AutoSaveError):
    """
    The persistence backend rejected or could not complete a write.

    Wraps whatever the backend raised (constraint violation, I/O error,
    lost connection) so the scheduler can treat every failure the same way.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None, snapshot: Any = None):
        super().__init__(message)
        self.cause = cause
        self.snapshot = snapshot

    @classmethod
    def from_exception(cls, exc: BaseException, snapshot: Any = None) -> "PersistFailure":
        """Build a failure from a backend exception."""
        message = str(exc) or exc.__class__.__name__
        return cls(message, cause=exc, snapshot=snapshot)


class SessionError(AutoSaveError):
    """Base class for edit session bookkeeping errors."""

    def __init__(self, session_id: str, message: str):
        super().__init__(message)
        self.session_id = session_id


class SessionNotFoundError(SessionError):
    """No open edit session exists for the given id."""

    def __init__(self, session_id: str):
        super().__init__(session_id, f"No open edit session: {session_id}")


class SessionExistsError(SessionError):
    """An edit session is already open for the given id."""

    def __init__(self, session_id: str):
        super().__init__(session_id, f"Edit session already open: {session_id}")
