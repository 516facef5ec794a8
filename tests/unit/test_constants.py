"""
Tests for consultancy.utils.constants — enums, defaults, event and command names.
"""

from consultancy.utils.constants import (
    COMMAND_CHANGE,
    COMMAND_CLOSE,
    COMMAND_FLUSH,
    COMMAND_OPEN,
    COMMAND_STATUS,
    DEFAULT_DEBOUNCE_WINDOW_MS,
    EVENT_RECORD_SAVE_FAILED,
    EVENT_RECORD_SAVED,
    SESSION_CLOSED_ERROR,
    AuditAction,
    AuditType,
    SaveTrigger,
    SchedulerPhase,
)


# ── Defaults ────────────────────────────────────────────────────────────────


class TestDefaults:
    def test_debounce_window_is_positive(self):
        assert DEFAULT_DEBOUNCE_WINDOW_MS > 0

    def test_debounce_window_default(self):
        assert DEFAULT_DEBOUNCE_WINDOW_MS == 2000

    def test_session_closed_error_is_readable(self):
        assert "closed" in SESSION_CLOSED_ERROR


# ── Enum value correctness ──────────────────────────────────────────────────


class TestSchedulerPhase:
    def test_all_values_present(self):
        assert {p.value for p in SchedulerPhase} == {"idle", "debouncing", "persisting"}

    def test_is_str_enum(self):
        assert SchedulerPhase.IDLE == "idle"


class TestSaveTrigger:
    def test_all_values_present(self):
        assert {t.value for t in SaveTrigger} == {"automatic", "manual"}


class TestAuditAction:
    def test_all_values_present(self):
        expected = {"session_opened", "session_closed", "record_saved", "save_failed"}
        assert {a.value for a in AuditAction} == expected


class TestAuditType:
    def test_all_values_present(self):
        assert {t.value for t in AuditType} == {"SAVE", "FAILURE", "SESSION"}


# ── Wire names ──────────────────────────────────────────────────────────────


class TestWireNames:
    def test_event_names(self):
        assert EVENT_RECORD_SAVED == "record-saved"
        assert EVENT_RECORD_SAVE_FAILED == "record-save-failed"

    def test_commands_are_namespaced(self):
        commands = [COMMAND_OPEN, COMMAND_CHANGE, COMMAND_FLUSH, COMMAND_STATUS, COMMAND_CLOSE]
        assert all(c.startswith("autosave:") for c in commands)
        assert len(set(commands)) == len(commands)
