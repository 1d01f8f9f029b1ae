"""Builtin redaction strategies for the logging library."""

from __future__ import annotations

import hashlib
from typing import Any, Callable, Union


Transform = Callable[[Any], Any]
StrategyDescriptor = Union[str, Transform]

MASK = "mask"
REMOVE = "remove"
HASH = "hash"
MASK_LAST_PREFIX = "mask-last-"

MASK_PLACEHOLDER = "*****"
HASH_FAILED = "[HASH_FAILED_TYPE]"

COMMON_REDACTION_KEYS: tuple[str, ...] = (
    "password",
    "passwd",
    "secret",
    "token",
    "access_token",
    "access-token",
    "auth",
    "auth-token",
    "authorization",
    "apikey",
    "api_key",
    "api-key",
    "card",
    "cvv",
    "ssn",
    "pin",
)


class _Omit:
    """Sentinel telling the caller to drop the key entirely."""

    _instance: "_Omit | None" = None

    def __new__(cls) -> "_Omit":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "OMIT"

    def __bool__(self) -> bool:
        return False


OMIT = _Omit()


def mask_last(count: int) -> str:
    """Return the descriptor revealing only the trailing ``count`` characters."""

    return f"{MASK_LAST_PREFIX}{count}"


def is_known_descriptor(strategy: StrategyDescriptor) -> bool:
    """Return True when ``strategy`` names a builtin or is a custom transform."""

    if callable(strategy):
        return True
    if strategy in (MASK, REMOVE, HASH):
        return True
    return _parse_last_count(strategy) is not None


def apply_strategy(value: Any, strategy: StrategyDescriptor) -> Any:
    """Apply ``strategy`` to a single value and return the replacement."""

    if callable(strategy):
        return strategy(value)

    if isinstance(strategy, str) and strategy.startswith(MASK_LAST_PREFIX):
        return _mask_last(value, _parse_last_count(strategy))

    if strategy == REMOVE:
        return OMIT

    if strategy == HASH:
        return _hash_value(value)

    return MASK_PLACEHOLDER


# --------------------- internal helpers ---------------------
def _parse_last_count(strategy: Any) -> int | None:
    if not isinstance(strategy, str) or not strategy.startswith(MASK_LAST_PREFIX):
        return None

    raw = strategy[len(MASK_LAST_PREFIX):]
    if not raw.isdecimal():
        return None

    try:
        return int(raw)
    except ValueError:
        return None


def _mask_last(value: Any, count: int | None) -> Any:
    if count is None or not isinstance(value, str):
        return MASK_PLACEHOLDER

    if len(value) <= count:
        return value

    visible = value[len(value) - count:]
    return "*" * (len(value) - count) + visible


def _hash_value(value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return HASH_FAILED

    try:
        text = str(value)
    except ValueError:
        # ints past sys.get_int_max_str_digits() refuse decimal conversion
        text = format(value, "x")

    return hashlib.sha256(text.encode("utf-8")).hexdigest()


__all__ = [
    "COMMON_REDACTION_KEYS",
    "HASH",
    "HASH_FAILED",
    "MASK",
    "MASK_PLACEHOLDER",
    "OMIT",
    "REMOVE",
    "StrategyDescriptor",
    "Transform",
    "apply_strategy",
    "is_known_descriptor",
    "mask_last",
]
