import re
import sys

import pytest

from litelog.tracing import (
    TraceEntry,
    TraceLevel,
    TraceSettings,
    Tracer,
    compare_entries,
    dest_to_file,
)

LINE_RE = re.compile(r"^\d{8} \d{6}\.\d{3} (.*)$")


def make_tracer(env=None, settings=None):
    tracer = Tracer(settings=settings, environ=env or {})
    received = []
    tracer.set_callback(lambda level, msg: received.append((level, msg)))
    return tracer, received


def test_level_aliases():
    assert TraceLevel.TRACE_MAX == TraceLevel.TRACE_MAXIMUM
    assert TraceLevel.LOG_PROTOCOL == TraceLevel.TRACE_PROTOCOL
    assert TraceSettings().trace_level == TraceLevel.TRACE_MINIMUM
    assert TraceSettings().max_trace_entries == 400


def test_header_contains_info():
    tracer, received = make_tracer()
    tracer.initialize({"Product": "demo"})
    messages = [msg for _, msg in received]
    assert messages[0] == "=" * 57
    assert messages[-1] == "=" * 57
    assert "Product: demo" in messages


def test_log_before_initialize_records_nothing():
    tracer, received = make_tracer()
    tracer.log(TraceLevel.LOG_ERROR, 0, "lost")
    assert tracer.entries() == []
    assert received == []


def test_log_records_and_outputs():
    tracer, received = make_tracer()
    tracer.initialize()
    received.clear()
    tracer.log(TraceLevel.LOG_ERROR, 1, "value %d of %s", 7, "x")
    entries = tracer.entries()
    assert [e.name for e in entries] == ["value 7 of x"]
    assert entries[0].level == TraceLevel.LOG_ERROR
    level, msg = received[0]
    assert level == TraceLevel.LOG_ERROR
    match = LINE_RE.match(msg)
    assert match is not None and match.group(1) == "value 7 of x"


def test_below_trace_level_is_dropped():
    tracer, _ = make_tracer()
    tracer.initialize()
    tracer.log(TraceLevel.TRACE_MAXIMUM, 0, "verbose")
    assert tracer.entries() == []


def test_buffer_keeps_most_recent():
    tracer, _ = make_tracer(settings=TraceSettings(max_trace_entries=3))
    tracer.initialize()
    for i in range(5):
        tracer.log(TraceLevel.LOG_ERROR, 0, "m%d", i)
    assert [e.name for e in tracer.entries()] == ["m2", "m3", "m4"]


def test_buffer_resizes_with_settings():
    settings = TraceSettings(max_trace_entries=5)
    tracer, _ = make_tracer(settings=settings)
    tracer.initialize()
    for i in range(5):
        tracer.log(TraceLevel.LOG_ERROR, 0, "m%d", i)
    settings.max_trace_entries = 2
    tracer.log(TraceLevel.LOG_ERROR, 0, "last")
    assert [e.name for e in tracer.entries()] == ["m4", "last"]


def test_name_is_truncated():
    tracer, _ = make_tracer()
    tracer.initialize()
    tracer.log(TraceLevel.LOG_ERROR, 0, "a" * 600)
    assert len(tracer.entries()[0].name) == 256


def test_missing_format_raises():
    tracer, _ = make_tracer()
    tracer.initialize()
    with pytest.raises(ValueError):
        tracer.log(TraceLevel.LOG_ERROR, 5, None)


def test_env_trace_level_maximum():
    tracer, _ = make_tracer({"MQTT_C_CLIENT_TRACE_LEVEL": "MAXIMUM"})
    tracer.initialize()
    assert tracer.settings.trace_level == TraceLevel.TRACE_MAXIMUM
    tracer.log(TraceLevel.TRACE_MAXIMUM, 0, "verbose")
    assert [e.name for e in tracer.entries()] == ["verbose"]


def test_env_error_output_level_filters_output_only():
    tracer, received = make_tracer({"MQTT_C_CLIENT_TRACE_LEVEL": "ERROR"})
    tracer.initialize()
    received.clear()
    tracer.log(TraceLevel.TRACE_PROTOCOL, 0, "quiet")
    tracer.log(TraceLevel.LOG_SEVERE, 0, "loud")
    assert [e.name for e in tracer.entries()] == ["quiet", "loud"]
    assert [LINE_RE.match(m).group(1) for _, m in received] == ["loud"]


def test_env_max_lines():
    tracer, _ = make_tracer({"MQTT_C_CLIENT_TRACE_MAX_LINES": "0"})
    tracer.initialize()
    assert tracer.max_lines_per_file == 1000
    tracer, _ = make_tracer({"MQTT_C_CLIENT_TRACE_MAX_LINES": "25"})
    tracer.initialize()
    assert tracer.max_lines_per_file == 25


def test_set_trace_level():
    tracer, _ = make_tracer()
    tracer.set_trace_level(TraceLevel.TRACE_MAXIMUM)
    assert tracer.settings.trace_level == TraceLevel.TRACE_MAXIMUM
    assert tracer.output_level == TraceLevel.TRACE_MAXIMUM
    tracer.set_trace_level(TraceLevel.LOG_ERROR)
    assert tracer.settings.trace_level == TraceLevel.TRACE_MAXIMUM
    assert tracer.output_level == TraceLevel.LOG_ERROR


def test_terminate_clears_buffer():
    tracer, _ = make_tracer()
    tracer.initialize()
    tracer.log(TraceLevel.LOG_ERROR, 0, "one")
    tracer.terminate()
    assert tracer.entries() == []
    tracer.log(TraceLevel.LOG_ERROR, 0, "two")
    assert tracer.entries() == []
    assert tracer.output_level == -1


def test_stdout_destination(capsys):
    tracer = Tracer(environ={"MQTT_C_CLIENT_TRACE": "ON"})
    tracer.initialize()
    tracer.log(TraceLevel.LOG_ERROR, 0, "to stdout")
    out = capsys.readouterr().out.splitlines()
    assert "                   Trace Output" in out
    assert LINE_RE.match(out[-1]).group(1) == "to stdout"


def test_file_destination_writes(tmp_path):
    path = tmp_path / "trace.log"
    tracer = Tracer(environ={"MQTT_C_CLIENT_TRACE": str(path)})
    tracer.initialize()
    tracer.log(TraceLevel.LOG_ERROR, 0, "hello")
    tracer.terminate()
    lines = path.read_text().splitlines()
    assert lines[1] == "                   Trace Output"
    assert LINE_RE.match(lines[-1]).group(1) == "hello"


def test_format_entry_shape():
    tracer = Tracer(environ={})
    text = tracer.format_entry(TraceEntry(name="msg", level=5, timestamp=1000.5, sametime_count=3))
    assert text.startswith("(0003) ")
    assert LINE_RE.match(text[7:]).group(1) == "msg"
    assert text[22:27] == ".500 "


def test_compare_entries():
    tracer = Tracer(environ={})
    early = tracer.format_entry(TraceEntry("a", 5, 1000.0, 1))
    later = tracer.format_entry(TraceEntry("a", 5, 5000.0, 1))
    same_time_next = tracer.format_entry(TraceEntry("b", 5, 1000.0, 2))
    assert compare_entries(early, later) < 0
    assert compare_entries(later, early) > 0
    assert compare_entries(early, same_time_next) < 0
    assert compare_entries(early, early) == 0


def test_dest_to_file(tmp_path):
    assert dest_to_file("stdout") is sys.stdout
    assert dest_to_file("stderr") is sys.stderr
    ffdc = tmp_path / "FFDC.dump"
    ffdc.write_bytes(b"old")
    with dest_to_file(str(ffdc)) as handle:
        handle.write(b"new")
    assert ffdc.read_bytes() == b"oldnew"
    plain = tmp_path / "dump.bin"
    plain.write_bytes(b"old")
    with dest_to_file(str(plain)) as handle:
        handle.write(b"new")
    assert plain.read_bytes() == b"new"