"""Configuration utilities for the logging library."""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Mapping

from .redaction import COMMON_REDACTION_KEYS, MASK, RedactionPolicy


def _comma_tuple(value: str | None, *, default: tuple[str, ...]) -> tuple[str, ...]:
    """Convert a comma-separated string to a tuple."""

    if not value:
        return default

    return tuple(filter(None, (part.strip() for part in value.split(","))))


def _bool_env(value: str | None, default: bool) -> bool:
    """Convert a string to a boolean."""

    if value is None:
        return default

    return value.lower() in {"1", "true", "yes", "on"}


def _pairs_env(value: str | None) -> Mapping[str, str]:
    """Parse ``key=value`` pairs from a comma-separated string."""

    pairs = {}
    for part in _comma_tuple(value, default=()):
        key, sep, item = part.partition("=")
        if sep and key.strip() and item.strip():
            pairs[key.strip()] = item.strip()

    return MappingProxyType(pairs)


@dataclass(frozen=True)
class RedactionSettings:
    """Configuration for key-based field redaction."""

    enabled: bool
    keys: tuple[str, ...]
    strategies: Mapping[str, str]
    default_strategy: str
    strict: bool

    def build_policy(self) -> RedactionPolicy | None:
        """Return the configured policy, or None when nothing is redacted."""

        if not self.enabled or not self.keys:
            return None

        return RedactionPolicy(
            keys=frozenset(self.keys),
            strategies=dict(self.strategies),
            default_strategy=self.default_strategy,
        )


@dataclass(frozen=True)
class LoggingSettings:
    """Immutable runtime configuration."""

    service: str
    env: str
    level: str
    sinks: tuple[str, ...]
    default_context: Mapping[str, Any]
    exclude_routes: tuple[str, ...]
    request_id_header: str
    redaction: RedactionSettings

    def with_overrides(self, **kwargs: Any) -> "LoggingSettings":
        return replace(self, **kwargs)


_SETTINGS_LOCK = threading.RLock()
_SETTINGS: LoggingSettings | None = None


def load_settings(env: Mapping[str, str] | None = None) -> LoggingSettings:
    source = os.environ if env is None else env

    keys = _comma_tuple(source.get("LOG_REDACTION_KEYS"), default=())
    if _bool_env(source.get("LOG_REDACTION_COMMON_KEYS"), False):
        keys = tuple(dict.fromkeys(keys + COMMON_REDACTION_KEYS))

    redaction_settings = RedactionSettings(
        enabled=_bool_env(source.get("LOG_REDACTION_ENABLED"), True),
        keys=keys,
        strategies=_pairs_env(source.get("LOG_REDACTION_STRATEGIES")),
        default_strategy=source.get("LOG_REDACTION_DEFAULT_STRATEGY", MASK),
        strict=_bool_env(source.get("LOG_REDACTION_STRICT"), False),
    )

    return LoggingSettings(
        service=source.get("LOG_SERVICE_NAME", "unknown-service"),
        env=source.get("LOG_ENV", "local"),
        level=source.get("LOG_LEVEL", "INFO").upper(),
        sinks=_comma_tuple(source.get("LOG_SINKS"), default=("stdout",)),
        default_context=MappingProxyType({}),
        exclude_routes=_comma_tuple(source.get("LOG_EXCLUDE_ROUTES"), default=()),
        request_id_header=source.get("LOG_REQUEST_ID_HEADER", "X-Request-Id"),
        redaction=redaction_settings,
    )


def configure_settings(
    settings: LoggingSettings | None = None, **overrides: Any
) -> LoggingSettings:
    with _SETTINGS_LOCK:
        resolved = settings or load_settings()
        if overrides:
            resolved = resolved.with_overrides(**overrides)
        global _SETTINGS
        _SETTINGS = resolved
        return _SETTINGS


def get_settings() -> LoggingSettings:
    with _SETTINGS_LOCK:
        if _SETTINGS is None:
            return configure_settings()
        return _SETTINGS


def reset_settings() -> None:
    """Forget configured settings so the next lookup reloads the environment."""

    global _SETTINGS
    with _SETTINGS_LOCK:
        _SETTINGS = None
