"""RpcDispatcher — maps a JSON-RPC request onto a JSON-RPC response.

The dispatcher is shared by the synchronous and the streaming transports, so
both see exactly the same method table, capability set and error shapes.
It is total: whatever the payload, :meth:`RpcDispatcher.dispatch` returns a
response dict and never raises.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from mcpcalc.protocols.errors import InvalidArgumentsError, ToolNotFoundError
from mcpcalc.protocols.mcp.models import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    InitializeResult,
    JsonRpcRequest,
    JsonRpcResponse,
    ServerInfo,
)
from mcpcalc.utils.telemetry import (
    ATTR_RPC_ERROR_CODE,
    ATTR_RPC_ID,
    ATTR_RPC_METHOD,
    ATTR_TOOL_NAME,
    get_tracer,
)

if TYPE_CHECKING:
    from opentelemetry.trace import Span

    from mcpcalc.protocols.provider import ToolCatalog

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

PROTOCOL_VERSION = "2024-11-05"


class _MethodNotFound(Exception):
    pass


class _InvalidParams(Exception):
    pass


class RpcDispatcher:
    """Routes JSON-RPC methods to handlers backed by a :class:`ToolCatalog`.

    Usage::

        dispatcher = RpcDispatcher(CalculatorCatalog())
        response = dispatcher.dispatch({"id": 1, "method": "tools/list"})
    """

    def __init__(
        self,
        catalog: ToolCatalog,
        *,
        server_info: ServerInfo | None = None,
        protocol_version: str = PROTOCOL_VERSION,
    ) -> None:
        self._catalog = catalog
        self._server_info = server_info or ServerInfo()
        self._protocol_version = protocol_version
        self._handlers: dict[str, Callable[[dict[str, Any], Span], dict[str, Any]]] = {
            "initialize": self._initialize,
            "initialized": self._initialized,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
        }

    @property
    def catalog(self) -> ToolCatalog:
        return self._catalog

    @property
    def methods(self) -> list[str]:
        return list(self._handlers)

    def dispatch(self, payload: Any) -> dict[str, Any]:
        """Handle one inbound message and return its wire-format response."""
        request_id = payload.get("id") if isinstance(payload, dict) else None
        with _tracer.start_as_current_span("mcp.dispatch") as span:
            response = self._dispatch(payload, request_id, span)
            if response.error is not None:
                span.set_attribute(ATTR_RPC_ERROR_CODE, response.error.code)
            return response.to_wire()

    def _dispatch(self, payload: Any, request_id: Any, span: Span) -> JsonRpcResponse:
        try:
            request = _parse(payload)
            span.set_attribute(ATTR_RPC_METHOD, request.method)
            if request_id is not None:
                span.set_attribute(ATTR_RPC_ID, str(request_id))
            logger.debug("Dispatching %s (id=%r)", request.method, request_id)

            handler = self._handlers.get(request.method)
            if handler is None:
                raise _MethodNotFound
            result = handler(request.params or {}, span)
            return JsonRpcResponse.success(request_id, result)
        except _MethodNotFound:
            return JsonRpcResponse.failure(request_id, METHOD_NOT_FOUND, "Method not found")
        except _InvalidParams:
            return JsonRpcResponse.failure(request_id, INVALID_PARAMS, "Invalid params")
        except (ToolNotFoundError, InvalidArgumentsError) as exc:
            return JsonRpcResponse.failure(request_id, INVALID_PARAMS, str(exc))
        except Exception:
            logger.exception("Internal error while dispatching request id=%r", request_id)
            return JsonRpcResponse.failure(request_id, INTERNAL_ERROR, "Internal error")

    # ------------------------------------------------------------------
    # Method handlers
    # ------------------------------------------------------------------

    def _initialize(self, params: dict[str, Any], span: Span) -> dict[str, Any]:
        client_info = params.get("clientInfo")
        if isinstance(client_info, dict):
            logger.info(
                "Client %s %s initializing",
                client_info.get("name", "?"),
                client_info.get("version", "?"),
            )
        result = InitializeResult(
            protocol_version=self._protocol_version,
            server_info=self._server_info,
        )
        return result.model_dump(by_alias=True)

    def _initialized(self, params: dict[str, Any], span: Span) -> dict[str, Any]:
        # Acknowledged with an empty result even though it is a notification.
        return {}

    def _tools_list(self, params: dict[str, Any], span: Span) -> dict[str, Any]:
        return {"tools": [tool.to_wire() for tool in self._catalog.list_tools()]}

    def _tools_call(self, params: dict[str, Any], span: Span) -> dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise InvalidArgumentsError("Missing tool name")
        span.set_attribute(ATTR_TOOL_NAME, name)

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise InvalidArgumentsError("Tool arguments must be an object")

        result = self._catalog.call_tool(name, arguments)
        return result.model_dump()


def _parse(payload: Any) -> JsonRpcRequest:
    """Validate *payload*; a missing or non-string method is "method not found"."""
    if not isinstance(payload, dict):
        raise _MethodNotFound
    try:
        return JsonRpcRequest.model_validate(payload)
    except ValidationError as exc:
        if any(err["loc"][:1] == ("method",) for err in exc.errors()):
            raise _MethodNotFound from exc
        raise _InvalidParams from exc
