"""Fixtures for logscope unit tests."""

from __future__ import annotations

import pytest

from logscope import create_logger
from logscope.config import load_settings, reset_settings
from logscope.sinks.memory import InMemorySink


def pytest_collection_modifyitems(config, items):  # pragma: no cover - Pytest hook
    """Tag every test in this directory with the `logging` marker."""

    for item in items:
        item.add_marker(pytest.mark.logging)


@pytest.fixture(autouse=True)
def _reset_logging_state():
    """Forget process-wide settings around each test."""

    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def logging_settings():
    """Provide deterministic logging settings wired to the in-memory sink."""

    return load_settings(
        {
            "LOG_SERVICE_NAME": "logging-unit-tests",
            "LOG_ENV": "test",
            "LOG_LEVEL": "DEBUG",
            "LOG_SINKS": "memory",
        }
    )


@pytest.fixture
def memory_sink():
    """Fresh in-memory sink collecting emitted records."""

    sink = InMemorySink()
    yield sink
    sink.clear()


@pytest.fixture
def memory_logger(logging_settings, memory_sink):
    """Convenience fixture for producing a logger bound to the in-memory sink."""

    return create_logger("memory-test", settings=logging_settings, sinks=[memory_sink])


@pytest.fixture
def redacting_logger(logging_settings, memory_sink):
    """Logger configured with a password/api_key policy."""

    return create_logger(
        "redaction-test",
        settings=logging_settings,
        sinks=[memory_sink],
        redaction={
            "keys": ["password", "api_key", "card"],
            "strategies": {"api_key": "hash", "card": "mask-last-4"},
            "default_strategy": "mask",
        },
    )
