"""Error types for the transport layer."""


class TransportError(Exception):
    """Base error for transport and connection-registry failures."""


class ConnectionNotFoundError(TransportError):
    """No open push channel matches the requested identifier."""

    def __init__(self, connection_id: str | None = None) -> None:
        self.connection_id = connection_id
        target = connection_id if connection_id is not None else "<most recent>"
        super().__init__(f"No active SSE connection found: {target}")


class DuplicateConnectionError(TransportError):
    """A connection with the same identifier is already registered."""

    def __init__(self, connection_id: str) -> None:
        self.connection_id = connection_id
        super().__init__(f"Connection already registered: {connection_id}")
