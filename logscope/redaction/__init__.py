"""Recursive, policy-driven redaction of structured log records."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, MutableSet

from .strategies import (
    COMMON_REDACTION_KEYS,
    HASH,
    HASH_FAILED,
    MASK,
    MASK_PLACEHOLDER,
    OMIT,
    REMOVE,
    StrategyDescriptor,
    apply_strategy,
    is_known_descriptor,
    mask_last,
)


LOGGER = logging.getLogger("logscope.redaction")

CIRCULAR_MARKER = "[Circular]"

Redactor = Callable[[Mapping[str, Any]], Any]


class RedactionConfigError(ValueError):
    """Raised when a redaction policy cannot be constructed."""


def _normalize_key(key: str) -> str:
    return key.lower()


@dataclass(frozen=True)
class RedactionPolicy:
    """Immutable declaration of sensitive keys and how to transform them."""

    keys: frozenset[str]
    strategies: Mapping[str, StrategyDescriptor] = field(
        default_factory=lambda: MappingProxyType({})
    )
    default_strategy: StrategyDescriptor = MASK
    _folded: Mapping[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        keys = _coerce_keys(self.keys)
        strategies = dict(self.strategies or {})

        for key, strategy in strategies.items():
            if not isinstance(key, str):
                raise RedactionConfigError(f"strategy key must be a string: {key!r}")
            _check_descriptor(key, strategy)
        _check_descriptor("<default>", self.default_strategy)

        object.__setattr__(self, "keys", keys)
        object.__setattr__(self, "strategies", MappingProxyType(strategies))
        object.__setattr__(self, "_folded", MappingProxyType(_fold_strategy_keys(strategies)))

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "RedactionPolicy":
        """Build a policy from ``{"keys", "strategies", "default_strategy"}``."""

        if isinstance(config, RedactionPolicy):
            return config
        if not isinstance(config, Mapping):
            raise RedactionConfigError("redaction config must be a mapping")

        default = config.get("default_strategy", config.get("defaultStrategy")) or MASK

        return cls(
            keys=config.get("keys") or (),
            strategies=config.get("strategies") or {},
            default_strategy=default,
        )

    def matches(self, key: Any) -> bool:
        """Return True when ``key`` is subject to redaction."""

        return isinstance(key, str) and _normalize_key(key) in self.keys

    def resolve_strategy(self, key: str) -> StrategyDescriptor:
        """Resolve the strategy for a matched key: exact, folded, then default."""

        strategies = self.strategies
        if key in strategies:
            return strategies[key]

        folded = self._folded.get(_normalize_key(key))
        if folded is not None:
            return strategies[folded]

        return self.default_strategy


def redact(
    value: Any,
    policy: RedactionPolicy,
    visited: MutableSet[int] | None = None,
) -> Any:
    """Return a redacted copy of ``value``; the input is never mutated."""

    if not _is_composite(value):
        return value

    if visited is None:
        visited = set()

    marker = id(value)
    if marker in visited:
        return CIRCULAR_MARKER
    visited.add(marker)

    if isinstance(value, (list, tuple)):
        items = [redact(item, policy, visited) for item in value]
        return tuple(items) if isinstance(value, tuple) else items

    sanitized: Dict[Any, Any] = {}
    for key, item in value.items():
        if policy.matches(key):
            replacement = apply_strategy(item, policy.resolve_strategy(key))
            if replacement is not OMIT:
                sanitized[key] = replacement
            continue

        sanitized[key] = redact(item, policy, visited)

    return sanitized


def create_redactor(policy: RedactionPolicy | Mapping[str, Any]) -> Redactor:
    """Return an emit hook applying ``policy`` to every record."""

    resolved = RedactionPolicy.from_mapping(policy)

    def _redactor(record: Mapping[str, Any]) -> Any:
        return redact(record, resolved)

    return _redactor


# --------------------- internal helpers ---------------------
def _is_composite(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def _coerce_keys(keys: Iterable[str]) -> frozenset[str]:
    if isinstance(keys, str):
        raise RedactionConfigError("redaction keys must be a collection of strings")

    normalized = set()
    for key in keys:
        if not isinstance(key, str):
            raise RedactionConfigError(f"redaction key must be a string: {key!r}")
        normalized.add(_normalize_key(key))

    return frozenset(normalized)


def _check_descriptor(key: str, strategy: Any) -> None:
    if not (callable(strategy) or isinstance(strategy, str)):
        raise RedactionConfigError(
            f"strategy for {key!r} must be a string or a callable, got {type(strategy).__name__}"
        )

    if not is_known_descriptor(strategy):
        LOGGER.warning("Unknown redaction strategy %r for %r; values will be masked", strategy, key)


def _fold_strategy_keys(strategies: Mapping[str, StrategyDescriptor]) -> Dict[str, str]:
    """Map each lowercase key to the override that case-insensitive lookups use."""

    folded: Dict[str, str] = {}
    collisions: Dict[str, list[str]] = {}

    for key in strategies:
        normalized = _normalize_key(key)
        if normalized in folded:
            collisions.setdefault(normalized, [folded[normalized]]).append(key)
            # The all-lowercase spelling is the canonical entry.
            if key == normalized:
                folded[normalized] = key
            continue
        folded[normalized] = key

    for normalized, spellings in collisions.items():
        LOGGER.warning(
            "Redaction strategies register %s under several casings %s; "
            "case-insensitive matches use %r",
            normalized,
            spellings,
            folded[normalized],
        )

    return folded


__all__ = [
    "CIRCULAR_MARKER",
    "COMMON_REDACTION_KEYS",
    "HASH",
    "HASH_FAILED",
    "MASK",
    "MASK_PLACEHOLDER",
    "OMIT",
    "REMOVE",
    "RedactionConfigError",
    "RedactionPolicy",
    "Redactor",
    "apply_strategy",
    "create_redactor",
    "mask_last",
    "redact",
]
