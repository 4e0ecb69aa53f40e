"""HTTP server — connection registry, SSE channels, routes and app factory."""

from mcpcalc.server.errors import ConnectionNotFoundError, DuplicateConnectionError, TransportError
from mcpcalc.server.registry import Connection, ConnectionRegistry
from mcpcalc.server.sse import ChannelState, SSEChannel

__all__ = [
    "ChannelState",
    "Connection",
    "ConnectionNotFoundError",
    "ConnectionRegistry",
    "DuplicateConnectionError",
    "SSEChannel",
    "TransportError",
]
