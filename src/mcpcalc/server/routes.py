"""HTTP routes — synchronous JSON-RPC, SSE stream and out-of-band message routing.

Both transports hand the request body to the same
:class:`~mcpcalc.protocols.mcp.dispatcher.RpcDispatcher`; they only differ in
where the response goes. The synchronous route returns it, the message route
pushes it down an open stream and acknowledges the trigger separately.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from mcpcalc.config import ServerConfig
from mcpcalc.protocols.mcp.dispatcher import RpcDispatcher
from mcpcalc.server.errors import ConnectionNotFoundError
from mcpcalc.server.registry import ConnectionRegistry
from mcpcalc.server.sse import SSE_HEADERS, SSEChannel
from mcpcalc.utils.telemetry import ATTR_CONNECTION_ID, ATTR_TRANSPORT, get_tracer

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

router = APIRouter()

NO_CONNECTION_ERROR = "No active SSE connection found"


def get_registry(request: Request) -> ConnectionRegistry:
    return request.app.state.registry


def get_dispatcher(request: Request) -> RpcDispatcher:
    return request.app.state.dispatcher


def get_config(request: Request) -> ServerConfig:
    return request.app.state.config


async def _read_json(request: Request) -> Any:
    """Parsed body, or ``None`` when it is empty or not JSON."""
    try:
        return await request.json()
    except ValueError:
        logger.debug("Unparseable request body on %s", request.url.path)
        return None


@router.get("/")
async def health() -> dict[str, Any]:
    return {
        "message": "MCP Calculator Server is running",
        "endpoints": {
            "mcp": "/mcp",
            "sse": "/sse",
            "sseMessage": "/sse/message",
        },
    }


@router.post("/mcp")
@router.post("/sse")
async def handle_rpc(
    request: Request,
    dispatcher: RpcDispatcher = Depends(get_dispatcher),
) -> JSONResponse:
    """Synchronous transport: one JSON-RPC request in, one response out.

    ``POST /sse`` is served the same way for clients that try plain HTTP on
    the stream URL before falling back to SSE.
    """
    payload = await _read_json(request)
    with _tracer.start_as_current_span("mcp.http") as span:
        span.set_attribute(ATTR_TRANSPORT, "http")
        response = dispatcher.dispatch(payload)
    return JSONResponse(response)


@router.get("/sse")
async def open_stream(
    registry: ConnectionRegistry = Depends(get_registry),
    config: ServerConfig = Depends(get_config),
) -> StreamingResponse:
    """Streaming transport: open a push channel and keep it until the peer leaves."""
    channel = SSEChannel(
        registry,
        ping_interval=config.ping_interval,
        max_pending=config.max_pending_frames,
    )
    channel.open()
    return StreamingResponse(
        channel.frames(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
        background=BackgroundTask(channel.close),
    )


@router.post("/sse/message")
async def route_message(
    request: Request,
    registry: ConnectionRegistry = Depends(get_registry),
    dispatcher: RpcDispatcher = Depends(get_dispatcher),
) -> JSONResponse:
    """Dispatch an out-of-band request and push the response to its stream.

    ``connectionId`` selects the stream; without it the most recently opened
    stream is used.
    """
    payload = await _read_json(request)
    message: Any = payload
    connection_id: str | None = None
    if isinstance(payload, dict):
        message = dict(payload)
        raw_id = message.pop("connectionId", None)
        if raw_id:
            connection_id = str(raw_id)

    connection = registry.resolve(connection_id)
    if connection is None:
        logger.warning("No active SSE connection for message (connectionId=%s)", connection_id)
        return JSONResponse({"error": NO_CONNECTION_ERROR}, status_code=404)

    with _tracer.start_as_current_span("mcp.sse.message") as span:
        span.set_attribute(ATTR_TRANSPORT, "sse")
        span.set_attribute(ATTR_CONNECTION_ID, connection.id)
        logger.debug("Routing message to %s", connection.id)
        response = dispatcher.dispatch(message)
        try:
            registry.send(connection.id, response)
        except ConnectionNotFoundError:
            logger.warning("Connection %s closed before delivery", connection.id)
            return JSONResponse({"error": NO_CONNECTION_ERROR}, status_code=404)

    return JSONResponse({"status": "message sent", "connectionId": connection.id})
