"""MCP models — JSON-RPC 2.0 messages, tool descriptors and tool results.

Implements the message format used by the Model Context Protocol for the
handshake (``initialize``), tool discovery (``tools/list``) and execution
(``tools/call``).
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 error codes
# ---------------------------------------------------------------------------

METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request message.

    ``jsonrpc`` is accepted as-is and ``id`` is kept verbatim (string, number
    or ``None``) so it can be echoed in the response. Extra keys such as a
    routing ``connectionId`` are tolerated.
    """

    model_config = ConfigDict(extra="allow")

    jsonrpc: Any = "2.0"
    id: Any = None
    method: str
    params: dict[str, Any] | None = None


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message carrying exactly one of result or error."""

    jsonrpc: str = "2.0"
    id: Any = None
    result: dict[str, Any] | None = None
    error: JsonRpcError | None = None

    @model_validator(mode="after")
    def _exactly_one_outcome(self) -> JsonRpcResponse:
        if (self.result is None) == (self.error is None):
            msg = "JSON-RPC response must carry exactly one of 'result' or 'error'"
            raise ValueError(msg)
        return self

    @classmethod
    def success(cls, request_id: Any, result: dict[str, Any]) -> JsonRpcResponse:
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: Any, code: int, message: str) -> JsonRpcResponse:
        return cls(id=request_id, error=JsonRpcError(code=code, message=message))

    def to_wire(self) -> dict[str, Any]:
        """Serialize for the wire: ``id`` always present, only one outcome key."""
        data: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            data["error"] = self.error.model_dump(exclude_none=True)
        else:
            data["result"] = self.result
        return data


# ---------------------------------------------------------------------------
# MCP-specific payloads
# ---------------------------------------------------------------------------


class ToolDescriptor(BaseModel):
    """A tool definition as returned by ``tools/list``."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(default_factory=dict, alias="inputSchema")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class TextContent(BaseModel):
    """Plain text content block of a tool result."""

    type: Literal["text"] = "text"
    text: str


class ToolCallResult(BaseModel):
    """The result of ``tools/call``: ordered content blocks."""

    content: list[TextContent] = Field(default_factory=list)

    @classmethod
    def from_text(cls, *texts: str) -> ToolCallResult:
        return cls(content=[TextContent(text=t) for t in texts])

    @property
    def text(self) -> str:
        """All text blocks joined by newlines."""
        return "\n".join(block.text for block in self.content)


class ServerInfo(BaseModel):
    """Server identity announced during ``initialize``."""

    name: str = "calculator-server"
    version: str = "1.0.0"


class InitializeResult(BaseModel):
    """Result payload of ``initialize``."""

    model_config = ConfigDict(populate_by_name=True)

    protocol_version: str = Field(default="2024-11-05", alias="protocolVersion")
    capabilities: dict[str, dict[str, Any]] = Field(
        default_factory=lambda: {"tools": {}, "logging": {}}
    )
    server_info: ServerInfo = Field(default_factory=ServerInfo, alias="serverInfo")
