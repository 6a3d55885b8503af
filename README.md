# litelog

A small logging client that sends log records as UDP datagrams to a
monitor process and control commands to a controller process, together
with a few supporting utilities: a doubly linked list, client-state
records, a persistence interface with an in-memory store, and a bounded
trace recorder.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Sending logs

```python
from litelog.client import LitelogClient, LogLevel

with LitelogClient("my-service") as log:
    log.info("started on port %d", 8080)
    log.warning("disk usage at %d%%", 91)
    log.log_manual(LogLevel.ERROR, __file__, 42, "handler", "bad request: %s", "missing id")
```

`LitelogClient(program_name, local_ip="127.0.0.1", local_port=0,
monitor=("127.0.0.1", 20000), controller=("127.0.0.1", 20001))` opens a
UDP socket and binds it with `bind_with_retry`: while the port is in use
it tries the next one, wrapping from 65535 back to 60000. The bound port
is kept in `client.port`. `close()` (or leaving the `with` block)
releases the socket.

Each log datagram, built by `encode_log_packet`, is one level byte, then
the program name in square brackets (`format_program_name` shortens names
longer than 15 characters to 12 characters plus `...`), then the message
text. `fatal`, `error`, `warning`, `notice`, `info`, `debug` and `trace`
format their arguments with `%` and cut the text to 255 bytes.
`log_manual` prefixes the text with `file:line func: `, using only the
part of the file path after the last `/`. `log` sends a message as given.
All of them return the number of bytes sent.

`validate_level` accepts `LogLevel.SILENCE` or exactly one of `FATAL`,
`ERROR`, `WARNING`, `NOTICE`, `INFO`, `DEBUG`, `TRACE`; anything else,
including `KERNEL` and combinations, raises `ValueError`.

### Controlling the monitor

```python
log.change_level(LogLevel.PRODUCTION)   # select which levels are recorded
log.switch_page()                       # start a new log file
log.shutdown()                          # stop the log process
```

These send the `Control` command codes (`STOP_PROGRAM`, `CHANGE_LEVEL`,
`SWITCH_PAGE`) to the controller address.

## Utilities

- `litelog.linkedlist.LinkedList` — a doubly linked list supporting
  `append`, `insert`, `find`, `remove`, `pop_head`, `pop_tail`, `clear`,
  `next_element`, `prev_element`, `len()`, iteration and `reversed()`.
  `find` and `remove` compare by identity unless given a match callback
  such as `int_compare` or `string_compare`; the list remembers the last
  element found. `size` totals the sizes given on insertion and is reset
  only by `clear`. Popping from an empty list raises `IndexError`.
- `litelog.clients` — dataclasses `Client`, `NetworkHandles`, `Message`,
  `Publication`, `WillMessage`, `PendingWrite`, `ProtocolState` and
  `ClientStates`, whose `find_by_id` and `find_by_socket` look clients up
  with `client_id_compare` and `client_socket_compare`.
- `litelog.persistence` — the abstract `Persistence` interface,
  `PersistenceType`, and `MemoryPersistence`, a dictionary-backed store.
  Using a store that is not open, or getting or removing a missing key,
  raises `PersistenceError`.
- `litelog.tracing.Tracer` — records messages passed to `log()` in a
  buffer bounded by `TraceSettings.max_trace_entries`. `initialize()`
  reads `MQTT_C_CLIENT_TRACE` (`ON` for stdout, otherwise a file path),
  `MQTT_C_CLIENT_TRACE_MAX_LINES` and `MQTT_C_CLIENT_TRACE_LEVEL` from the
  mapping given as `environ` (default `os.environ`). A trace file is
  rotated to `<name>.0` after the configured number of lines.
  `set_callback` receives every output line, `entries()` returns the
  buffer, and `format_entry` renders `(nnnn) YYYYmmdd HHMMSS.mmm text`.
  `dest_to_file` and `compare_entries` are helpers for dump files.

## What this package does not do

- It contains no monitor or controller: nothing here receives the log
  datagrams or acts on the control commands. Those must be run
  separately.
- It provides no MQTT networking; the client-state records are plain
  data holders.
- There is no file-system persistence store, only `MemoryPersistence`.
- `Tracer` has no catalogue of numbered messages: `log()` with no format
  text raises `ValueError`.