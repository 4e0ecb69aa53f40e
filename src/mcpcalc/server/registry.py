"""ConnectionRegistry — addressable map of open push channels.

The registry is owned by the application (``app.state.registry``) and shared
by the streaming adapter, which registers and unregisters channels, and the
message route, which looks them up to deliver dispatch results.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from mcpcalc.server.errors import ConnectionNotFoundError, DuplicateConnectionError
from mcpcalc.server.framing import encode_message

logger = logging.getLogger(__name__)

CONNECTION_ID_PREFIX = "conn_"


@dataclass(frozen=True)
class Connection:
    """One open push channel as seen by the registry.

    ``send`` writes an already-framed string to the underlying stream;
    ``close`` aborts the stream (optional, used on shutdown).
    """

    id: str
    send: Callable[[str], None]
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    close: Callable[[], object] | None = None


class ConnectionRegistry:
    """Insertion-ordered, lock-guarded ``id -> Connection`` map.

    Identifiers come from a monotonic counter and are never reused for the
    lifetime of the registry.

    Usage::

        registry = ConnectionRegistry()
        conn = Connection(id=registry.next_id(), send=queue.put_nowait)
        registry.register(conn)
        registry.send(conn.id, {"jsonrpc": "2.0", "id": 1, "result": {}})
        registry.unregister(conn.id)
    """

    def __init__(self) -> None:
        self._connections: dict[str, Connection] = {}
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    def __contains__(self, connection_id: object) -> bool:
        with self._lock:
            return connection_id in self._connections

    def ids(self) -> list[str]:
        """Registered identifiers, oldest first."""
        with self._lock:
            return list(self._connections)

    def next_id(self) -> str:
        """Allocate a fresh connection identifier."""
        with self._lock:
            return f"{CONNECTION_ID_PREFIX}{next(self._counter)}"

    def register(self, connection: Connection) -> str:
        """Insert *connection*; its id must not already be registered."""
        with self._lock:
            if connection.id in self._connections:
                raise DuplicateConnectionError(connection.id)
            self._connections[connection.id] = connection
        logger.debug("Registered connection %s", connection.id)
        return connection.id

    def unregister(self, connection_id: str) -> bool:
        """Remove *connection_id* if present. Returns whether anything was removed."""
        with self._lock:
            removed = self._connections.pop(connection_id, None)
        if removed is not None:
            logger.debug("Unregistered connection %s", connection_id)
        return removed is not None

    def get(self, connection_id: str) -> Connection | None:
        with self._lock:
            return self._connections.get(connection_id)

    def most_recent(self) -> Connection | None:
        """The last-registered connection still present, by insertion order only."""
        with self._lock:
            if not self._connections:
                return None
            return next(reversed(self._connections.values()))

    def resolve(self, connection_id: str | None) -> Connection | None:
        """Look up by id, or fall back to :meth:`most_recent` when no id is given.

        The fallback picks an arbitrary client when several streams are open.
        """
        if connection_id is None:
            return self.most_recent()
        return self.get(connection_id)

    def send(self, connection_id: str | None, message: Any) -> Connection:
        """Frame *message* and push it to the resolved connection.

        Raises:
            ConnectionNotFoundError: No registered connection resolves.
        """
        connection = self.resolve(connection_id)
        if connection is None:
            raise ConnectionNotFoundError(connection_id)
        connection.send(encode_message(message))
        return connection

    def close_all(self) -> int:
        """Abort every registered connection; returns how many were closed."""
        with self._lock:
            connections = list(self._connections.values())
        for connection in connections:
            if connection.close is not None:
                connection.close()
            self.unregister(connection.id)
        if connections:
            logger.info("Closed %d open connection(s)", len(connections))
        return len(connections)
