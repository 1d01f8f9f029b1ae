"""Sink implementations for logscope."""

from .memory import InMemorySink
from .stdout import StdoutSink

__all__ = ["InMemorySink", "StdoutSink"]
