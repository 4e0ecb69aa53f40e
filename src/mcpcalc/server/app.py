"""Application factory wiring config, dispatcher, registry and routes."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mcpcalc import __version__
from mcpcalc.config import ServerConfig
from mcpcalc.protocols.mcp.dispatcher import RpcDispatcher
from mcpcalc.protocols.mcp.models import ServerInfo
from mcpcalc.protocols.provider import ToolCatalog
from mcpcalc.server.registry import ConnectionRegistry
from mcpcalc.server.routes import router
from mcpcalc.tools.calculator import CalculatorCatalog

logger = logging.getLogger(__name__)


def create_app(
    config: ServerConfig | None = None,
    *,
    catalog: ToolCatalog | None = None,
    registry: ConnectionRegistry | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    The registry and dispatcher live on ``app.state`` and reach the routes
    through dependencies; open streams are closed on shutdown.
    """
    config = config or ServerConfig()
    registry = registry if registry is not None else ConnectionRegistry()
    dispatcher = RpcDispatcher(
        catalog or CalculatorCatalog(),
        server_info=ServerInfo(name=config.server_name, version=config.server_version),
        protocol_version=config.protocol_version,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("%s %s ready", config.server_name, config.server_version)
        yield
        registry.close_all()

    app = FastAPI(
        title="MCP Calculator Server",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.registry = registry
    app.state.dispatcher = dispatcher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(Exception, _internal_error)
    return app


async def _http_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, StarletteHTTPException)
    if exc.status_code == 404:
        return JSONResponse({"error": "Not found"}, status_code=404)
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code)


async def _internal_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=500)
