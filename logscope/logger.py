"""Structured logging facade."""

from __future__ import annotations

import logging
import sys
import traceback
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Protocol

from .config import LoggingSettings, get_settings
from .redaction import RedactionPolicy, create_redactor
from .schema import RESERVED_FIELDS, build_log_record
from .sinks.memory import InMemorySink
from .sinks.stdout import StdoutSink


LOGGER = logging.getLogger("logscope.logger")

_LEVEL_NUMERIC = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "WARN": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}

EmitHook = Callable[[Mapping[str, Any]], Any]


class Sink(Protocol):
    """A sink for log records."""

    def emit(self, record: Mapping[str, object]) -> None:  # pragma: no cover - protocol
        ...


def _level_number(level: str) -> int:
    try:
        return _LEVEL_NUMERIC[level.upper()]
    except KeyError:
        raise ValueError(f"Unknown log level: {level!r}") from None


@dataclass(frozen=True)
class LoggerCore:
    """State shared by a root logger and every child derived from it."""

    service: str
    env: str
    threshold: int
    sinks: tuple[Sink, ...]
    hook: Optional[EmitHook] = None
    strict: bool = False

    def enabled_for(self, level: str) -> bool:
        return _LEVEL_NUMERIC.get(level, 20) >= self.threshold

    def emit(self, record: Mapping[str, Any]) -> None:
        """Run the emit hook and fan the result out to the sinks."""

        if self.hook is not None:
            try:
                record = self.hook(record)
            except Exception:
                if self.strict:
                    raise
                LOGGER.exception(
                    "Redaction hook failed; dropping record %r", record.get("message")
                )
                return

        for sink in self.sinks:
            try:
                sink.emit(record)
            except Exception:
                print("logscope failed to emit record", file=sys.stderr)


class StructuredLogger:
    """Immutable logger handle carrying a set of bound fields."""

    __slots__ = ("_name", "_fields", "_core")

    def __init__(
        self,
        name: str,
        core: LoggerCore,
        fields: Mapping[str, Any] | None = None,
    ) -> None:
        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_core", core)
        object.__setattr__(self, "_fields", MappingProxyType(dict(fields or {})))

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError("StructuredLogger is immutable; use child() to bind fields")

    def __repr__(self) -> str:
        return f"StructuredLogger(name={self._name!r}, fields={dict(self._fields)!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def fields(self) -> Mapping[str, Any]:
        """Fields bound on this logger, attached to every record as ``context``."""

        return self._fields

    @property
    def core(self) -> LoggerCore:
        return self._core

    def child(self, **fields: Any) -> "StructuredLogger":
        """Return a new logger whose bound fields extend this one's."""

        merged = dict(self._fields)
        merged.update(fields)
        return StructuredLogger(self._name, self._core, merged)

    def debug(self, message: str, **fields: Any) -> None:
        """Log a debug message."""

        self._log("DEBUG", message, fields)

    def info(self, message: str, **fields: Any) -> None:
        """Log an info message."""

        self._log("INFO", message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        """Log a warning message."""

        self._log("WARNING", message, fields)

    def error(
        self,
        message: str,
        exc: BaseException | str | None = None,
        **fields: Any,
    ) -> None:
        """Log an error message, attaching ``exc`` as a structured ``error`` field."""

        if isinstance(exc, BaseException):
            fields["error"] = describe_exception(exc)
        elif exc:
            fields["error"] = exc

        self._log("ERROR", message, fields)

    def critical(self, message: str, **fields: Any) -> None:
        """Log a critical message."""

        self._log("CRITICAL", message, fields)

    def _log(self, level: str, message: str, fields: Dict[str, Any]) -> None:
        """Build the record for one call and hand it to the core."""

        core = self._core
        if not core.enabled_for(level):
            return

        runtime_context = dict(self._fields)

        explicit_context = fields.pop("context", None)
        if isinstance(explicit_context, Mapping):
            runtime_context.update(explicit_context)
        elif explicit_context is not None:
            LOGGER.warning(
                "Ignoring non-mapping context %r passed to %s()",
                type(explicit_context).__name__,
                level.lower(),
            )

        extra = {key: value for key, value in fields.items() if key not in RESERVED_FIELDS}

        record = build_log_record(
            level=level,
            message=message,
            service=core.service,
            env=core.env,
            component=self._name,
            context=runtime_context,
            **extra,
        )

        core.emit(record)


def describe_exception(exc: BaseException) -> Dict[str, Any]:
    """Flatten an exception into a JSON-friendly mapping."""

    described: Dict[str, Any] = {
        key: value
        for key, value in getattr(exc, "__dict__", {}).items()
        if not key.startswith("_")
    }
    described.update(
        {
            "name": type(exc).__name__,
            "message": str(exc),
            "stack": "".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            ),
        }
    )

    return described


def build_sinks(names: Iterable[str]) -> tuple[Sink, ...]:
    """Instantiate sinks from their configured names."""

    sinks: list[Sink] = []

    for sink_name in names:
        name = sink_name.strip().lower()

        if name == "stdout":
            sinks.append(StdoutSink())

        elif name == "memory":
            sinks.append(InMemorySink())

        else:
            LOGGER.warning("Ignoring unknown log sink %r", sink_name)

    if not sinks:
        sinks.append(StdoutSink())

    return tuple(sinks)


def create_logger(
    name: str = "app",
    *,
    level: str | None = None,
    default_context: Mapping[str, Any] | None = None,
    redaction: RedactionPolicy | Mapping[str, Any] | None = None,
    sinks: Iterable[Sink] | None = None,
    settings: LoggingSettings | None = None,
) -> StructuredLogger:
    """Create a root logger; the redaction policy is fixed for its lifetime."""

    settings = settings or get_settings()

    if redaction is not None:
        policy = RedactionPolicy.from_mapping(redaction)
    else:
        policy = settings.redaction.build_policy()

    core = LoggerCore(
        service=settings.service,
        env=settings.env,
        threshold=_level_number(level or settings.level or "INFO"),
        sinks=tuple(sinks) if sinks is not None else build_sinks(settings.sinks),
        hook=create_redactor(policy) if policy is not None else None,
        strict=settings.redaction.strict,
    )

    context = dict(settings.default_context)
    context.update(default_context or {})

    return StructuredLogger(name, core, context)
