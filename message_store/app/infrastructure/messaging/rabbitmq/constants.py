"""RabbitMQ store connection states and producer failure kinds."""
from enum import Enum


class ConnectionState(str, Enum):
    DISCONNECTED = "DISCONNECTED"
    CONNECTING = "CONNECTING"
    CONNECTED = "CONNECTED"
    CLOSING = "CLOSING"
    CLOSED = "CLOSED"


class FailureKind(str, Enum):
    CONNECTION = "CONNECTION"
    MESSAGE = "MESSAGE"
