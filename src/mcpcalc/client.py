"""MCPHttpClient — talks to a running server over the synchronous ``/mcp`` route."""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from mcpcalc.protocols.errors import RemoteCallError
from mcpcalc.protocols.mcp.models import JsonRpcResponse, ToolCallResult, ToolDescriptor


class MCPHttpClient:
    """Async context manager issuing JSON-RPC calls over HTTP POST.

    Usage::

        async with MCPHttpClient("http://127.0.0.1:3000") as client:
            tools = await client.list_tools()
            result = await client.call_tool("add", {"a": 1, "b": 2})
    """

    def __init__(
        self,
        base_url: str,
        *,
        path: str = "/mcp",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._path = path
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._next_id = 1

    async def __aenter__(self) -> MCPHttpClient:
        self._client = httpx.AsyncClient(base_url=self._base_url, transport=self._transport)
        return self

    async def __aexit__(self, *_: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "MCPHttpClient must be used as an async context manager"
            raise RuntimeError(msg)
        return self._client

    async def initialize(self) -> dict[str, Any]:
        """Perform the ``initialize`` handshake and return the server's result."""
        return await self.request(
            "initialize",
            {
                "protocolVersion": "2024-11-05",
                "capabilities": {},
                "clientInfo": {"name": "mcpcalc", "version": "0.1.0"},
            },
        )

    async def list_tools(self) -> list[ToolDescriptor]:
        result = await self.request("tools/list")
        return [ToolDescriptor.model_validate(raw) for raw in result.get("tools", [])]

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> ToolCallResult:
        result = await self.request("tools/call", {"name": name, "arguments": arguments})
        return ToolCallResult.model_validate(result)

    async def request(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Send one request; return its ``result`` or raise :class:`RemoteCallError`."""
        request_id = self._next_id
        self._next_id += 1
        body: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id, "method": method}
        if params is not None:
            body["params"] = params

        try:
            http_response = await self._http().post(self._path, json=body)
            http_response.raise_for_status()
            response = JsonRpcResponse.model_validate(http_response.json())
        except httpx.HTTPError as exc:
            raise RemoteCallError(str(exc)) from exc
        except (ValueError, ValidationError) as exc:
            raise RemoteCallError(f"Malformed response: {exc}") from exc

        if response.error is not None:
            raise RemoteCallError(response.error.message, code=response.error.code)
        return response.result or {}
