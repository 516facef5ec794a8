"""
Application-wide constants for the consultancy auto-save service.

This module contains all constant values used throughout the application.
Modify these values to customize behavior without changing code logic.
"""

from enum import Enum
from typing import Final


# =============================================================================
# Application Constants
# =============================================================================

APP_NAME: Final[str] = "consultancy-autosave"
APP_DISPLAY_NAME: Final[str] = "Consultancy Auto-Save"
VERSION: Final[str] = "0.1.0"


# =============================================================================
# Auto-Save Constants
# =============================================================================

# Default quiet period before an edit is committed (milliseconds)
DEFAULT_DEBOUNCE_WINDOW_MS: Final[int] = 2000

# Error message handed back to callers whose save was dropped by teardown
SESSION_CLOSED_ERROR: Final[str] = "Edit session closed before the save could run"


# =============================================================================
# Real-time Events
# =============================================================================

EVENT_RECORD_SAVED: Final[str] = "record-saved"
EVENT_RECORD_SAVE_FAILED: Final[str] = "record-save-failed"


# =============================================================================
# IPC Commands
# =============================================================================

COMMAND_OPEN: Final[str] = "autosave:open"
COMMAND_CHANGE: Final[str] = "autosave:change"
COMMAND_FLUSH: Final[str] = "autosave:flush"
COMMAND_STATUS: Final[str] = "autosave:status"
COMMAND_CLOSE: Final[str] = "autosave:close"


# =============================================================================
# Enumerations
# =============================================================================


class SchedulerPhase(str, Enum):
    """Observable phase of an auto-save scheduler."""

    IDLE = "idle"
    DEBOUNCING = "debouncing"
    PERSISTING = "persisting"


class SaveTrigger(str, Enum):
    """What caused a persist call to be issued."""

    AUTOMATIC = "automatic"
    MANUAL = "manual"


class AuditAction(str, Enum):
    """Actions recorded in the audit trail."""

    SESSION_OPENED = "session_opened"
    SESSION_CLOSED = "session_closed"
    RECORD_SAVED = "record_saved"
    SAVE_FAILED = "save_failed"


class AuditType(str, Enum):
    """Audit trail categories."""

    SAVE = "SAVE"
    FAILURE = "FAILURE"
    SESSION = "SESSION"
