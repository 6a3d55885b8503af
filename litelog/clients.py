"""Records kept for each MQTT client, its messages and protocol state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from litelog.linkedlist import LinkedList
from litelog.persistence import Persistence

MAX_MSG_ID = 65535
MAX_CLIENTID_LEN = 65535


@dataclass
class Publication:
    """Stored publication data, shared between messages by reference count."""

    topic: str
    payload: bytes = b""
    refcount: int = 0


@dataclass
class Message:
    """One publication in flight for a client."""

    qos: int
    retain: bool = False
    msgid: int = 0
    publish: Optional[Publication] = None
    last_touch: float = 0.0
    next_message_type: int = 0
    len: int = 0


@dataclass
class WillMessage:
    """A client's last-will message."""

    topic: str
    msg: bytes = b""
    retained: bool = False
    qos: int = 0


@dataclass
class NetworkHandles:
    """The client's socket and when it last sent and received."""

    socket: int = -1
    last_sent: float = 0.0
    last_received: float = 0.0


@dataclass
class Client:
    """All data related to one client."""

    client_id: str
    username: Optional[str] = None
    password: Optional[str] = None
    cleansession: bool = False
    connected: bool = False
    good: bool = False
    ping_outstanding: bool = False
    connect_state: int = 0
    net: NetworkHandles = field(default_factory=NetworkHandles)
    msg_id: int = 0
    keep_alive_interval: int = 0
    retry_interval: int = 0
    max_inflight_messages: int = 0
    will: Optional[WillMessage] = None
    inbound_msgs: LinkedList = field(default_factory=LinkedList)
    outbound_msgs: LinkedList = field(default_factory=LinkedList)
    message_queue: LinkedList = field(default_factory=LinkedList)
    qentry_seqno: int = 0
    phandle: Any = None
    persistence: Optional[Persistence] = None
    context: Any = None
    mqtt_version: int = 0


def client_id_compare(client: Client, client_id: str) -> bool:
    """Match callback: does ``client`` have the id ``client_id``?"""
    return client.client_id == client_id


def client_socket_compare(client: Client, socket: int) -> bool:
    """Match callback: is ``client`` connected on ``socket``?"""
    return client.net.socket == socket


@dataclass
class ClientStates:
    """Configuration data related to all clients."""

    version: str = ""
    clients: LinkedList = field(default_factory=LinkedList)

    def find_by_id(self, client_id: str) -> Optional[Client]:
        """Return the client with ``client_id``, or None."""
        element = self.clients.find(client_id, client_id_compare)
        return None if element is None else element.content

    def find_by_socket(self, socket: int) -> Optional[Client]:
        """Return the client connected on ``socket``, or None."""
        element = self.clients.find(socket, client_socket_compare)
        return None if element is None else element.content


@dataclass
class PendingWrite:
    """A QoS 0 write that has not completed."""

    socket: int
    p: Publication


@dataclass
class ProtocolState:
    """Publications and pending writes shared across the protocol layer."""

    publications: LinkedList = field(default_factory=LinkedList)
    msgs_received: int = 0
    msgs_sent: int = 0
    pending_writes: LinkedList = field(default_factory=LinkedList)


__all__ = [
    "MAX_CLIENTID_LEN",
    "MAX_MSG_ID",
    "Client",
    "ClientStates",
    "Message",
    "NetworkHandles",
    "PendingWrite",
    "ProtocolState",
    "Publication",
    "WillMessage",
    "client_id_compare",
    "client_socket_compare",
]