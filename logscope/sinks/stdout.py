"""Stdout sink emitting one JSON object per line."""

from __future__ import annotations

import json
import sys
import threading
from typing import Mapping, TextIO


class StdoutSink:
    """Write structured records to stdout as NDJSON."""

    def __init__(self, stream: TextIO | None = None) -> None:
        """Initialize the stdout sink with an optional target stream."""

        self._stream = stream  # None means sys.stdout at emit time
        self._lock = threading.Lock()

    def emit(self, record: Mapping[str, object]) -> None:
        """Emit a record to the stdout sink."""

        payload = dict(record)
        payload.setdefault("severity", payload.get("level", "INFO"))

        line = json.dumps(payload, separators=(",", ":"), default=str)
        stream = self._stream or sys.stdout

        with self._lock:
            stream.write(line + "\n")
            stream.flush()
