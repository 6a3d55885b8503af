"""UDP log client with control commands, plus a linked list, client-state records, persistence and a trace buffer."""

__version__ = "0.1.0"
__all__ = ["client", "linkedlist", "clients", "persistence", "tracing"]