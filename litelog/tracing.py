"""In-memory trace buffer with optional file or callback output."""

from __future__ import annotations

import os
import sys
import threading
import time
from collections import deque
from dataclasses import dataclass
from enum import IntEnum
from typing import IO, Any, Callable, Iterable, Mapping, Optional, Union

MAX_FUNCTION_NAME_LENGTH = 256
MESSAGE_LIMIT = 511
DEFAULT_MAX_LINES = 1000
SEPARATOR = "========================================================="
PROC_VERSION = "/proc/version"

TraceCallback = Callable[[int, str], None]
NameValues = Union[Mapping[str, Any], Iterable[tuple[str, Any]]]


class TraceLevel(IntEnum):
    """Severity of a trace record, from most verbose to most severe."""

    TRACE_MAXIMUM = 1
    TRACE_MEDIUM = 2
    TRACE_MINIMUM = 3
    TRACE_PROTOCOL = 4
    LOG_ERROR = 5
    LOG_SEVERE = 6
    LOG_FATAL = 7

    TRACE_MAX = 1
    TRACE_MED = 2
    TRACE_MIN = 3
    LOG_PROTOCOL = 4


@dataclass
class TraceSettings:
    """Level filter and capacity of the trace buffer."""

    trace_level: int = TraceLevel.TRACE_MINIMUM
    max_trace_entries: int = 400
    trace_output_level: int = -1


@dataclass
class TraceEntry:
    """One record held in the trace buffer."""

    name: str
    level: int
    timestamp: float
    sametime_count: int = 0


def dest_to_file(dest: str) -> IO:
    """Open a trace destination: "stdout", "stderr" or a file path.

    Paths containing "FFDC" are opened for appending, others are truncated.
    """
    if dest == "stdout":
        return sys.stdout
    if dest == "stderr":
        return sys.stderr
    return open(dest, "ab" if "FFDC" in dest else "wb")


def compare_entries(entry1: str, entry2: str) -> int:
    """Order two formatted entries by timestamp, then by sequence number."""

    def cmp(a: str, b: str) -> int:
        return (a > b) - (a < b)

    result = cmp(entry1[7:26], entry2[7:26])
    if result == 0:
        result = cmp(entry1[1:5], entry2[1:5])
    return result


class Tracer:
    """Records messages in a bounded buffer and writes them to a destination."""

    def __init__(
        self,
        settings: Optional[TraceSettings] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.settings = settings if settings is not None else TraceSettings()
        self.environ = environ if environ is not None else os.environ
        self.max_lines_per_file = DEFAULT_MAX_LINES
        self.output_level = -1
        self.destination_name: Optional[str] = None
        self.backup_name: Optional[str] = None
        self._queue: Optional[deque[TraceEntry]] = None
        self._destination: Optional[IO[str]] = None
        self._to_stdout = False
        self._lines_written = 0
        self._callback: Optional[TraceCallback] = None
        self._sametime_count = 0
        self._timestamp = time.time()
        self._lock = threading.Lock()

    def initialize(self, info: Optional[NameValues] = None) -> None:
        """Create the buffer, apply environment settings and write a header."""
        self._queue = deque(maxlen=self.settings.max_trace_entries)
        env = self.environ

        dest = env.get("MQTT_C_CLIENT_TRACE", "")
        if dest:
            if dest == "ON":
                self._use_stdout()
            else:
                try:
                    self._destination = open(dest, "w")
                    self._to_stdout = False
                    self.destination_name = dest
                    self.backup_name = f"{dest}.0"
                except OSError:
                    self._use_stdout()

        max_lines = env.get("MQTT_C_CLIENT_TRACE_MAX_LINES", "")
        if max_lines:
            self.max_lines_per_file = _atoi(max_lines)
            if self.max_lines_per_file <= 0:
                self.max_lines_per_file = DEFAULT_MAX_LINES

        level = env.get("MQTT_C_CLIENT_TRACE_LEVEL", "")
        if level in ("MAXIMUM", "TRACE_MAXIMUM"):
            self.settings.trace_level = TraceLevel.TRACE_MAXIMUM
        elif level in ("MEDIUM", "TRACE_MEDIUM"):
            self.settings.trace_level = TraceLevel.TRACE_MEDIUM
        elif level == "MINIMUM":
            self.settings.trace_level = TraceLevel.TRACE_MINIMUM
        elif level in ("PROTOCOL", "TRACE_PROTOCOL"):
            self.output_level = TraceLevel.TRACE_PROTOCOL
        elif level in ("ERROR", "TRACE_ERROR"):
            self.output_level = TraceLevel.LOG_ERROR

        self._output(TraceLevel.TRACE_MINIMUM, SEPARATOR)
        self._output(TraceLevel.TRACE_MINIMUM, "                   Trace Output")
        if info:
            pairs = info.items() if isinstance(info, Mapping) else info
            for name, value in pairs:
                self._output(TraceLevel.TRACE_MINIMUM, f"{name}: {value}")
        try:
            with open(PROC_VERSION) as vfile:
                version = vfile.readline()
        except OSError:
            version = ""
        if version:
            self._output(TraceLevel.TRACE_MINIMUM, f"{PROC_VERSION}: {version}")
        self._output(TraceLevel.TRACE_MINIMUM, SEPARATOR)

    def set_callback(self, callback: Optional[TraceCallback]) -> None:
        """Call ``callback(level, message)`` for every record that is output."""
        self._callback = callback

    def set_trace_level(self, level: int) -> None:
        """Set the output level; levels below TRACE_MINIMUM also widen recording."""
        if level < TraceLevel.TRACE_MINIMUM:
            self.settings.trace_level = level
        self.output_level = level

    def terminate(self) -> None:
        """Drop the buffer and close the destination."""
        self._queue = None
        if self._destination is not None and not self._to_stdout:
            self._destination.close()
        self._destination = None
        self._to_stdout = False
        self.destination_name = None
        self.backup_name = None
        self.output_level = -1
        self._sametime_count = 0

    def log(self, level: int, msgno: int, fmt: Optional[str], *args) -> None:
        """Record a message at ``level``; ``msgno`` serves only as a label."""
        if level < self.settings.trace_level:
            return
        if fmt is None:
            raise ValueError(f"no message text for message number {msgno}")
        with self._lock:
            text = (fmt % args if args else fmt)[:MESSAGE_LIMIT]
            if self._queue is None:
                return
            self._pretrace()
            entry = TraceEntry(
                name=text[:MAX_FUNCTION_NAME_LENGTH],
                level=level,
                timestamp=self._timestamp,
                sametime_count=self._sametime_count,
            )
            self._queue.append(entry)
            self._posttrace(level, entry)

    def entries(self) -> list[TraceEntry]:
        """Return the buffered records, oldest first."""
        return list(self._queue) if self._queue is not None else []

    def format_entry(self, entry: TraceEntry) -> str:
        """Render an entry as ``(nnnn) YYYYmmdd HHMMSS.mmm message``."""
        stamp = time.strftime("%Y%m%d %H%M%S", time.localtime(entry.timestamp))
        millis = int((entry.timestamp % 1) * 1000)
        return f"({entry.sametime_count:04d}) {stamp}.{millis:03d} {entry.name}"

    def _use_stdout(self) -> None:
        self._destination = None
        self._to_stdout = True

    def _pretrace(self) -> None:
        self._sametime_count += 1
        if self._sametime_count % 20 == 0:
            now = time.time()
            if now != self._timestamp:
                self._sametime_count = 0
                self._timestamp = now
        if self._queue.maxlen != self.settings.max_trace_entries:
            self._queue = deque(self._queue, maxlen=self.settings.max_trace_entries)

    def _posttrace(self, level: int, entry: TraceEntry) -> None:
        threshold = self.settings.trace_level if self.output_level == -1 else self.output_level
        if level >= threshold and (self._has_destination() or self._callback):
            self._output(level, self.format_entry(entry)[7:])

    def _has_destination(self) -> bool:
        return self._to_stdout or self._destination is not None

    def _output(self, level: int, msg: str) -> None:
        if self._to_stdout:
            sys.stdout.write(f"{msg}\n")
            sys.stdout.flush()
        elif self._destination is not None:
            self._destination.write(f"{msg}\n")
            self._lines_written += 1
            if self._lines_written >= self.max_lines_per_file:
                self._rotate()
            else:
                self._destination.flush()
        if self._callback is not None:
            self._callback(level, msg)

    def _rotate(self) -> None:
        self._destination.close()
        try:
            os.unlink(self.backup_name)
        except OSError:
            pass
        try:
            os.rename(self.destination_name, self.backup_name)
        except OSError:
            pass
        try:
            self._destination = open(self.destination_name, "w")
        except OSError:
            self._use_stdout()
        self._lines_written = 0


def _atoi(text: str) -> int:
    digits = ""
    stripped = text.strip()
    sign = ""
    if stripped[:1] in "+-" and stripped[:1]:
        sign, stripped = stripped[0], stripped[1:]
    for char in stripped:
        if not char.isdigit():
            break
        digits += char
    return int(sign + digits) if digits else 0


__all__ = [
    "TraceEntry",
    "TraceLevel",
    "TraceSettings",
    "Tracer",
    "compare_entries",
    "dest_to_file",
]