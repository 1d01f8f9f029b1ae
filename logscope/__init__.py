"""Public API for the structured logging library."""

from __future__ import annotations

from .config import LoggingSettings, configure_settings, get_settings, load_settings
from .context import (
    ExecutionScope,
    bind_scope,
    current_scope,
    get_logger,
    logger_scope,
    pop_scope,
    push_scope,
    run_with_logger,
    update_logger_context,
)
from .logger import StructuredLogger, create_logger
from .redaction import (
    CIRCULAR_MARKER,
    COMMON_REDACTION_KEYS,
    RedactionConfigError,
    RedactionPolicy,
    create_redactor,
    mask_last,
    redact,
)
from .wrapper import with_logger

__all__ = [
    "configure",
    "create_logger",
    "StructuredLogger",
    "LoggingSettings",
    "load_settings",
    "get_settings",
    "ExecutionScope",
    "run_with_logger",
    "get_logger",
    "update_logger_context",
    "logger_scope",
    "push_scope",
    "pop_scope",
    "current_scope",
    "bind_scope",
    "RedactionPolicy",
    "RedactionConfigError",
    "COMMON_REDACTION_KEYS",
    "CIRCULAR_MARKER",
    "create_redactor",
    "mask_last",
    "redact",
    "with_logger",
]


def configure(settings: LoggingSettings | None = None, **overrides) -> LoggingSettings:
    """Install process-wide settings used by loggers created afterwards."""

    return configure_settings(settings, **overrides)
