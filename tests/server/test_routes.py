"""Tests for the HTTP routes, driven through httpx's ASGI transport."""

import json
from collections.abc import AsyncIterator
from typing import Any

import httpx
import pytest
from fastapi import FastAPI

from mcpcalc.config import ServerConfig
from mcpcalc.server.app import create_app
from mcpcalc.server.registry import ConnectionRegistry
from mcpcalc.server.routes import open_stream
from mcpcalc.server.sse import SSEChannel


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


@pytest.fixture
def app(registry: ConnectionRegistry) -> FastAPI:
    return create_app(ServerConfig(), registry=registry)


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def _drain(channel: SSEChannel) -> list[dict[str, Any]]:
    """Close *channel* and decode every queued JSON-RPC message frame."""
    channel.close()
    messages: list[dict[str, Any]] = []
    while not channel._queue.empty():
        frame = channel._queue.get_nowait()
        if frame is not None and frame.startswith("data: "):
            messages.append(json.loads(frame[len("data: "):]))
    return messages


class TestHealth:
    async def test_lists_endpoints(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/")
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "MCP Calculator Server is running"
        assert body["endpoints"] == {"mcp": "/mcp", "sse": "/sse", "sseMessage": "/sse/message"}

    async def test_unknown_route(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/nope")
        assert response.status_code == 404
        assert response.json() == {"error": "Not found"}


class TestSynchronousTransport:
    async def test_multiply_scenario(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/mcp",
            json={
                "method": "tools/call",
                "params": {
                    "name": "calculate",
                    "arguments": {"operation": "multiply", "a": 4, "b": 7},
                },
            },
        )
        assert response.status_code == 200
        assert response.json()["result"]["content"][0]["text"] == "28"

    async def test_id_echoed(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/mcp", json={"jsonrpc": "2.0", "id": "req-9", "method": "tools/list"}
        )
        assert response.json()["id"] == "req-9"

    async def test_unknown_method_is_200_with_error(self, client: httpx.AsyncClient) -> None:
        response = await client.post("/mcp", json={"jsonrpc": "2.0", "id": 1, "method": "x/y"})
        assert response.status_code == 200
        assert response.json()["error"]["code"] == -32601

    async def test_missing_method(self, client: httpx.AsyncClient) -> None:
        response = await client.post("/mcp", json={"id": 4, "params": {}})
        assert response.status_code == 200
        assert response.json() == {
            "jsonrpc": "2.0",
            "id": 4,
            "error": {"code": -32601, "message": "Method not found"},
        }

    async def test_unparseable_body(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/mcp", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 200
        assert response.json()["error"]["code"] == -32601

    async def test_post_on_stream_url(self, client: httpx.AsyncClient) -> None:
        response = await client.post("/sse", json={"id": 1, "method": "initialize"})
        assert response.status_code == 200
        assert response.json()["result"]["serverInfo"]["name"] == "calculator-server"

    async def test_initialize_reflects_config(self) -> None:
        app = create_app(ServerConfig(server_name="calc-test", server_version="2.0.0"))
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.post("/mcp", json={"id": 1, "method": "initialize"})
        assert response.json()["result"]["serverInfo"] == {
            "name": "calc-test",
            "version": "2.0.0",
        }


class TestStreamOpen:
    async def test_headers_and_first_frame(self, app: FastAPI, registry: ConnectionRegistry) -> None:
        response = await open_stream(registry=registry, config=app.state.config)

        assert response.media_type == "text/event-stream"
        assert response.headers["cache-control"] == "no-cache"
        assert response.headers["connection"] == "keep-alive"
        assert response.headers["access-control-allow-origin"] == "*"
        assert len(registry) == 1

        frames = response.body_iterator
        first = await frames.__anext__()  # type: ignore[union-attr]
        assert "conn_1" in first
        await frames.aclose()  # type: ignore[union-attr]

        assert len(registry) == 0


class TestMessageRouting:
    async def test_falls_back_to_most_recent_stream(
        self, client: httpx.AsyncClient, registry: ConnectionRegistry
    ) -> None:
        channel = SSEChannel(registry)
        connection = channel.open()

        response = await client.post(
            "/sse/message", json={"jsonrpc": "2.0", "id": 2, "method": "tools/list"}
        )

        assert response.status_code == 200
        assert response.json() == {"status": "message sent", "connectionId": connection.id}
        assert "tools" not in response.text
        pushed = _drain(channel)
        assert len(pushed) == 1
        assert pushed[0]["id"] == 2
        assert [t["name"] for t in pushed[0]["result"]["tools"]] == ["add", "calculate"]

    async def test_targets_connection_id(
        self, client: httpx.AsyncClient, registry: ConnectionRegistry
    ) -> None:
        first = SSEChannel(registry)
        second = SSEChannel(registry)
        target = first.open()
        second.open()

        response = await client.post(
            "/sse/message",
            json={
                "connectionId": target.id,
                "id": 3,
                "method": "tools/call",
                "params": {"name": "add", "arguments": {"a": 2, "b": 2}},
            },
        )

        assert response.status_code == 200
        assert _drain(second) == []
        pushed = _drain(first)
        assert pushed[0]["result"]["content"][0]["text"] == "4"

    async def test_unknown_connection_id(
        self, client: httpx.AsyncClient, registry: ConnectionRegistry
    ) -> None:
        bystander = SSEChannel(registry)
        bystander.open()

        response = await client.post(
            "/sse/message", json={"connectionId": "conn_404", "id": 1, "method": "tools/list"}
        )

        assert response.status_code == 404
        assert response.json() == {"error": "No active SSE connection found"}
        assert _drain(bystander) == []

    async def test_no_open_streams(self, client: httpx.AsyncClient) -> None:
        response = await client.post("/sse/message", json={"id": 1, "method": "tools/list"})
        assert response.status_code == 404

    async def test_protocol_errors_are_pushed_not_returned(
        self, client: httpx.AsyncClient, registry: ConnectionRegistry
    ) -> None:
        channel = SSEChannel(registry)
        channel.open()

        response = await client.post("/sse/message", json={"id": 8, "method": "bogus"})

        assert response.status_code == 200
        assert response.json()["status"] == "message sent"
        pushed = _drain(channel)
        assert pushed[0]["error"]["code"] == -32601

    async def test_divide_by_zero_pushed_as_result(
        self, client: httpx.AsyncClient, registry: ConnectionRegistry
    ) -> None:
        channel = SSEChannel(registry)
        channel.open()

        await client.post(
            "/sse/message",
            json={
                "id": 9,
                "method": "tools/call",
                "params": {
                    "name": "calculate",
                    "arguments": {"operation": "divide", "a": 1, "b": 0},
                },
            },
        )

        pushed = _drain(channel)
        assert "error" not in pushed[0]
        assert "divide by zero" in pushed[0]["result"]["content"][0]["text"]

    async def test_closed_stream_is_not_found(
        self, client: httpx.AsyncClient, registry: ConnectionRegistry
    ) -> None:
        channel = SSEChannel(registry)
        connection = channel.open()
        channel.close()

        response = await client.post(
            "/sse/message", json={"connectionId": connection.id, "method": "tools/list"}
        )

        assert response.status_code == 404
