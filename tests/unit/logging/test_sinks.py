"""Tests for logging sinks."""

from __future__ import annotations

import io
import json

from logscope.logger import build_sinks
from logscope.sinks.memory import InMemorySink
from logscope.sinks.stdout import StdoutSink


def test_in_memory_sink_records_payload(memory_sink):
    """Ensure the in-memory sink appends copies of records."""

    original = {"message": "hello", "nested": {"key": "value"}}
    memory_sink.emit(original)
    original["message"] = "changed"

    assert len(memory_sink.records) == 1
    stored = memory_sink.records[0]
    assert stored["message"] == "hello"
    assert stored["nested"] == {"key": "value"}
    assert memory_sink.messages() == ["hello"]


def test_stdout_sink_emits_json_lines():
    """Stdout sink should emit one JSON document per record."""

    stream = io.StringIO()
    sink = StdoutSink(stream)

    sink.emit({"message": "first", "level": "WARNING"})
    sink.emit({"message": "second", "when": object})

    lines = stream.getvalue().splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first == {"message": "first", "level": "WARNING", "severity": "WARNING"}
    assert json.loads(lines[1])["when"] == str(object)


def test_stdout_sink_defaults_to_process_stdout(capsys):
    StdoutSink().emit({"message": "to-stdout"})

    assert json.loads(capsys.readouterr().out)["message"] == "to-stdout"


def test_build_sinks_from_names(caplog):
    sinks = build_sinks(("memory", " STDOUT ", "carrier-pigeon"))

    assert [type(sink) for sink in sinks] == [InMemorySink, StdoutSink]
    assert any("carrier-pigeon" in message for message in caplog.messages)


def test_build_sinks_falls_back_to_stdout():
    assert [type(sink) for sink in build_sinks(())] == [StdoutSink]
