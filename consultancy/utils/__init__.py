"""
Utility modules for the consultancy auto-save service.

This package contains shared utilities used across the application:
- config: Configuration management
- logger: Logging infrastructure
- constants: Application-wide constants
"""

from consultancy.utils.config import (
    AppSettings,
    AutoSaveSettings,
    DatabaseSettings,
    LoggingSettings,
    get_settings,
    reload_settings,
)
from consultancy.utils.constants import (
    APP_NAME,
    APP_DISPLAY_NAME,
    VERSION,
    DEFAULT_DEBOUNCE_WINDOW_MS,
    AuditAction,
    AuditType,
    SaveTrigger,
    SchedulerPhase,
)
from consultancy.utils.logger import (
    setup_logging,
    get_logger,
    audit_log,
    redact,
    LoggerMixin,
)

__all__ = [
    # Config
    "AppSettings",
    "AutoSaveSettings",
    "DatabaseSettings",
    "LoggingSettings",
    "get_settings",
    "reload_settings",
    # Constants
    "APP_NAME",
    "APP_DISPLAY_NAME",
    "VERSION",
    "DEFAULT_DEBOUNCE_WINDOW_MS",
    "AuditAction",
    "AuditType",
    "SaveTrigger",
    "SchedulerPhase",
    # Logger
    "setup_logging",
    "get_logger",
    "audit_log",
    "redact",
    "LoggerMixin",
]
