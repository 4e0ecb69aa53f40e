"""MCP protocol — JSON-RPC models and the shared method dispatcher."""

from mcpcalc.protocols.mcp.dispatcher import PROTOCOL_VERSION, RpcDispatcher
from mcpcalc.protocols.mcp.models import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    InitializeResult,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    ServerInfo,
    TextContent,
    ToolCallResult,
    ToolDescriptor,
)

__all__ = [
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "METHOD_NOT_FOUND",
    "PROTOCOL_VERSION",
    "InitializeResult",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "RpcDispatcher",
    "ServerInfo",
    "TextContent",
    "ToolCallResult",
    "ToolDescriptor",
]
