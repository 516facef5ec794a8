"""
Tests for consultancy.utils.logger — sink setup, redaction and audit entries.
"""

from pathlib import Path

import pytest
from loguru import logger

import consultancy
from consultancy.utils.config import AppSettings, LoggingSettings
from consultancy.utils.constants import AuditAction, AuditType
from consultancy.utils.logger import audit_log, redact, setup_logging


@pytest.fixture
def audit_records():
    records = []
    sink_id = logger.add(
        lambda message: records.append(message.record),
        level="INFO",
        filter=lambda record: "audit_type" in record["extra"],
    )
    yield records
    logger.remove(sink_id)


@pytest.fixture
def reset_logging():
    yield
    # Closes file sinks and drains their queues
    logger.remove()


def make_settings(log_dir: Path, file_output: bool) -> AppSettings:
    return AppSettings(
        logging=LoggingSettings(
            file_path=log_dir / "consultancy.log",
            file_output=file_output,
            console_output=False,
        )
    )


class TestLogLocation:
    def test_default_path_is_per_user(self, monkeypatch):
        monkeypatch.delenv("LOG_FILE_PATH", raising=False)
        path = LoggingSettings().file_path

        assert Path.home() in path.parents
        package_root = Path(consultancy.__file__).resolve().parent.parent
        assert package_root not in path.parents


class TestSetupLogging:
    def test_console_only_writes_no_files(self, tmp_path, reset_logging):
        setup_logging(make_settings(tmp_path / "logs", file_output=False))

        assert not (tmp_path / "logs").exists()

    def test_file_sinks_split_audit_entries(self, tmp_path, reset_logging):
        log_dir = tmp_path / "logs"
        setup_logging(make_settings(log_dir, file_output=True))

        logger.info("plain entry")
        audit_log(AuditAction.RECORD_SAVED, {"session_id": "candidate:42", "passport_no": "K1234567"})
        logger.remove()

        assert "plain entry" in (log_dir / "consultancy.log").read_text()
        audit_text = (log_dir / "audit.log").read_text()
        assert "SAVE | record_saved" in audit_text
        assert "plain entry" not in audit_text
        assert "K1234567" not in audit_text

    def test_unusable_log_directory_raises(self, tmp_path, reset_logging):
        blocker = tmp_path / "logs"
        blocker.write_text("not a directory")

        with pytest.raises(OSError):
            setup_logging(make_settings(blocker, file_output=True))


class TestRedact:
    def test_sensitive_keys_masked(self):
        details = {"name": "Anita", "Passport_No": "K1", "db_password": "x"}
        assert redact(details) == {"name": "Anita", "Passport_No": "***REDACTED***", "db_password": "***REDACTED***"}

    def test_nested_structures(self):
        details = {"forms": ({"aadhar": "1234"}, {"city": "Kochi"})}
        assert redact(details) == {"forms": [{"aadhar": "***REDACTED***"}, {"city": "Kochi"}]}

    def test_scalars_untouched(self):
        assert redact("token") == "token"


class TestAuditLog:
    def test_entry_carries_type_and_action(self, audit_records):
        audit_log(
            AuditAction.SAVE_FAILED,
            {"session_id": "candidate:42", "error": "disk full"},
            AuditType.FAILURE,
        )

        (record,) = audit_records
        assert record["extra"]["audit_type"] == "FAILURE"
        assert record["message"].startswith("save_failed | ")
        assert "disk full" in record["message"]

    def test_default_type_is_save(self, audit_records):
        audit_log(AuditAction.SESSION_OPENED, {"session_id": "visa:3"})

        assert audit_records[0]["extra"]["audit_type"] == "SAVE"
