"""
Logging for the consultancy auto-save service.

Nothing is configured at import time. Code embedding the package keeps
loguru's default stderr handler until an entry point (the CLI callback)
calls ``setup_logging``. Audit entries share the same logger, tagged with
an ``audit_type`` so a dedicated sink can split them into ``audit.log``.
"""

import sys
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from consultancy.utils.config import AppSettings, LoggingSettings, get_settings
from consultancy.utils.constants import AuditAction, AuditType

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
AUDIT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {extra[audit_type]} | {message}"
AUDIT_FILE_NAME = "audit.log"

REDACTED = "***REDACTED***"
# Substrings of keys whose values never reach a log file
SENSITIVE_KEYS = frozenset({
    "password", "passwd", "secret", "token", "api_key", "apikey",
    "credential", "private_key", "passport", "aadhar", "ssn",
})


def _is_audit_record(record: dict[str, Any]) -> bool:
    return "audit_type" in record["extra"]


def _add_file_sinks(log_settings: LoggingSettings, diagnose: bool) -> Path:
    """Attach the rotating application log and the audit log; return the log path."""
    log_file = log_settings.file_path.expanduser().resolve()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_file,
        format=log_settings.format,
        level=log_settings.level,
        rotation=log_settings.rotation,
        retention=log_settings.retention,
        compression="zip",
        diagnose=diagnose,
        enqueue=True,
    )
    logger.add(
        log_file.with_name(AUDIT_FILE_NAME),
        format=AUDIT_FORMAT,
        level="INFO",
        filter=_is_audit_record,
        rotation="1 week",
        retention="1 year",
        compression="zip",
        enqueue=True,
    )
    return log_file


def setup_logging(settings: Optional[AppSettings] = None) -> None:
    """
    Replace loguru's handlers with the configured console and file sinks.

    Errors creating the log directory propagate to the caller.
    """
    settings = settings or get_settings()
    log_settings = settings.logging

    # Snapshot contents may hold candidate data; only show locals while developing
    diagnose = settings.debug and settings.environment == "development"

    logger.remove()
    if log_settings.console_output:
        logger.add(
            sys.stderr,
            format=CONSOLE_FORMAT,
            level=log_settings.level,
            colorize=True,
            diagnose=diagnose,
        )

    destination = "console"
    if log_settings.file_output:
        destination = str(_add_file_sinks(log_settings, diagnose))
    logger.debug(f"Logging configured: level={log_settings.level}, output={destination}")


def get_logger(name: str) -> Any:
    """Logger bound to ``name`` (typically ``__name__``)."""
    return logger.bind(name=name)


def redact(data: Any) -> Any:
    """Copy of ``data`` with sensitive mapping values masked, recursively."""
    if isinstance(data, dict):
        return {
            key: REDACTED if any(s in str(key).lower() for s in SENSITIVE_KEYS) else redact(value)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [redact(item) for item in data]
    return data


def audit_log(
    action: AuditAction,
    details: dict[str, Any],
    audit_type: AuditType = AuditType.SAVE,
) -> None:
    """
    Record an audit entry.

    Args:
        action: What happened
        details: Context for the entry; sensitive keys are redacted
        audit_type: Category used to route the entry
    """
    logger.bind(audit_type=audit_type.value).info(f"{action.value} | {redact(details)}")


class LoggerMixin:
    """
    Gives a class a ``logger`` bound to its class name.

    Usage:
        class DraftSync(LoggerMixin):
            def push(self):
                self.logger.info("Pushing draft")
    """

    @property
    def logger(self) -> Any:
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger
