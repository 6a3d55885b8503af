"""UDP client that sends log records and control commands to a litelog monitor."""

from __future__ import annotations

import errno
import os
import socket
from enum import IntEnum, IntFlag
from typing import Union

PROGRAM_NAME_DISPLAY_WIDTH = 15
MESSAGE_LIMIT = 255
MANUAL_MESSAGE_LIMIT = 511
PORT_WRAP_START = 60000
MAX_PORT = 65535

DEFAULT_LOCAL_IP = "127.0.0.1"
DEFAULT_MONITOR = ("127.0.0.1", 20000)
DEFAULT_CONTROLLER = ("127.0.0.1", 20001)

Address = tuple[str, int]
Content = Union[str, bytes]


class LogLevel(IntFlag):
    """Bit flags for log levels; a record carries exactly one of them."""

    SILENCE = 0
    FATAL = 1 << 0
    ERROR = 1 << 1
    WARNING = 1 << 2
    NOTICE = 1 << 3
    INFO = 1 << 4
    DEBUG = 1 << 5
    TRACE = 1 << 6
    KERNEL = 1 << 7
    ALL = 0xFF
    PRODUCTION = FATAL | ERROR | WARNING | NOTICE | INFO
    DEVELOPMENT = PRODUCTION | DEBUG | TRACE
    FULL = ALL


class Control(IntEnum):
    """Command codes understood by the litelog controller."""

    STOP_PROGRAM = 0
    CHANGE_LEVEL = 1
    SWITCH_PAGE = 2


def bind_with_retry(sock: socket.socket, ip: str, port: int) -> int:
    """Bind ``sock`` to ``ip``, moving to the next port while the port is in use.

    Returns the port that was bound. Any error other than "address in use"
    closes the socket and is raised.
    """
    while True:
        try:
            sock.bind((ip, port))
            return port
        except OSError as exc:
            if exc.errno != errno.EADDRINUSE:
                sock.close()
                raise
        port += 1
        if port > MAX_PORT:
            port = PORT_WRAP_START


def format_program_name(name: str) -> str:
    """Return the bracketed program name, shortened with '...' if too wide."""
    if len(name) > PROGRAM_NAME_DISPLAY_WIDTH:
        name = name[: PROGRAM_NAME_DISPLAY_WIDTH - 3] + "..."
    return f"[{name}]"


def validate_level(level: int) -> LogLevel:
    """Check that ``level`` is a single non-kernel level (or silence)."""
    level = int(level)
    valid_levels = ~LogLevel.KERNEL & 0xFF
    if not 0 <= level <= 0xFF or level & ~valid_levels or level & (level - 1):
        raise ValueError(f"invalid log level: {level:#x}")
    return LogLevel(level)


def _to_bytes(content: Content) -> bytes:
    return content.encode("utf-8") if isinstance(content, str) else bytes(content)


def _truncate(text: str, limit: int) -> str:
    return text.encode("utf-8")[:limit].decode("utf-8", errors="ignore")


def _render(fmt: str, args: tuple) -> str:
    return fmt % args if args else fmt


def encode_log_packet(level: int, program_name: str, content: Content) -> bytes:
    """Build a datagram: one level byte, the program name, then the content."""
    return bytes([int(level)]) + _to_bytes(program_name) + _to_bytes(content)


class LitelogClient:
    """A process-local log client bound to a UDP socket."""

    def __init__(
        self,
        program_name: str,
        local_ip: str = DEFAULT_LOCAL_IP,
        local_port: int = 0,
        monitor: Address = DEFAULT_MONITOR,
        controller: Address = DEFAULT_CONTROLLER,
    ) -> None:
        self.program_name = format_program_name(program_name)
        self.monitor = monitor
        self.controller = controller
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.port = bind_with_retry(self.sock, local_ip, local_port)

    def close(self) -> None:
        """Release the socket; calling it again does nothing."""
        if self.sock.fileno() != -1:
            self.sock.close()

    def __enter__(self) -> "LitelogClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def send(self, data: bytes, target: Address) -> int:
        """Send raw bytes to ``target`` and return the number of bytes sent."""
        return self.sock.sendto(data, target)

    def log(self, level: int, message: Content) -> int:
        """Send one log record at ``level`` to the monitor."""
        level = validate_level(level)
        return self.send(encode_log_packet(level, self.program_name, message), self.monitor)

    def log_manual(self, level: int, file: str, line: int, func: str, fmt: str, *args) -> int:
        """Send a record prefixed with the source file name, line and function."""
        level = validate_level(level)
        body = _truncate(_render(fmt, args), MESSAGE_LIMIT)
        file_name = file.rsplit("/", 1)[-1] if "/" in file else file
        formatted = _truncate(f"{file_name}:{line} {func}: {body}", MANUAL_MESSAGE_LIMIT)
        return self.send(encode_log_packet(level, self.program_name, formatted), self.monitor)

    def shutdown(self) -> int:
        """Ask the controller to stop the litelog process."""
        return self.send(bytes([Control.STOP_PROGRAM]), self.controller)

    def change_level(self, level: int) -> int:
        """Ask the controller to change the active level mask."""
        return self.send(bytes([Control.CHANGE_LEVEL, int(level) & 0xFF]), self.controller)

    def switch_page(self) -> int:
        """Ask the controller to start a new log file."""
        return self.send(bytes([Control.SWITCH_PAGE]), self.controller)

    def _emit(self, level: LogLevel, fmt: str, args: tuple) -> int:
        return self.log(level, _truncate(_render(fmt, args), MESSAGE_LIMIT))

    def fatal(self, fmt: str, *args) -> int:
        """Fatal error: the program cannot continue."""
        return self._emit(LogLevel.FATAL, fmt, args)

    def error(self, fmt: str, *args) -> int:
        """Error the program can recover from."""
        return self._emit(LogLevel.ERROR, fmt, args)

    def warning(self, fmt: str, *args) -> int:
        """Possible problem."""
        return self._emit(LogLevel.WARNING, fmt, args)

    def notice(self, fmt: str, *args) -> int:
        """Important but not erroneous information."""
        return self._emit(LogLevel.NOTICE, fmt, args)

    def info(self, fmt: str, *args) -> int:
        """Normal information."""
        return self._emit(LogLevel.INFO, fmt, args)

    def debug(self, fmt: str, *args) -> int:
        """Debug information."""
        return self._emit(LogLevel.DEBUG, fmt, args)

    def trace(self, fmt: str, *args) -> int:
        """Most detailed tracing information."""
        return self._emit(LogLevel.TRACE, fmt, args)


__all__ = [
    "Control",
    "LitelogClient",
    "LogLevel",
    "bind_with_retry",
    "encode_log_packet",
    "format_program_name",
    "validate_level",
    "os",
][:-1]