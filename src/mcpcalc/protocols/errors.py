"""Shared error types for the protocol layer."""


class ProtocolError(Exception):
    """Base error for all protocol-layer failures."""


class ToolNotFoundError(ProtocolError):
    """Requested tool does not exist in the catalog."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class InvalidArgumentsError(ProtocolError):
    """Tool arguments are missing or of the wrong type."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class UnknownOperationError(InvalidArgumentsError):
    """A multi-operation tool was asked for an operation it does not support."""

    def __init__(self, operation: object) -> None:
        self.operation = operation
        super().__init__(f"Unknown operation: {operation}")


class RemoteCallError(ProtocolError):
    """An HTTP call to a remote MCP server failed or returned a JSON-RPC error."""

    def __init__(self, detail: str, code: int | None = None) -> None:
        self.detail = detail
        self.code = code
        super().__init__(detail if code is None else f"[{code}] {detail}")
