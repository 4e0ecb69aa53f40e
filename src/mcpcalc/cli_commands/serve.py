"""``mcpcalc serve`` — run the HTTP/SSE server."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import click

from mcpcalc.cli_commands._output import console, print_server_banner

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.command()
@click.option("--config", "config_path", type=click.Path(exists=True), default=None,
              help="YAML config file.")
@click.option("--host", default=None, help="Bind address (overrides config).")
@click.option("--port", type=int, default=None, help="Bind port (overrides config and $PORT).")
@click.option("--ping-interval", type=float, default=None,
              help="Seconds between SSE liveness pings.")
@click.option("--log-level",
              type=click.Choice(["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
                                case_sensitive=False),
              default=None, help="Logging level.")
@click.option("--telemetry", is_flag=True, help="Enable OpenTelemetry tracing.")
def serve(
    config_path: str | None,
    host: str | None,
    port: int | None,
    ping_interval: float | None,
    log_level: str | None,
    telemetry: bool,
) -> None:
    """Serve the MCP calculator over HTTP and Server-Sent Events."""
    import uvicorn

    from mcpcalc.config import ConfigError, ConfigLoader, ServerConfig
    from mcpcalc.server.app import create_app

    try:
        config = ConfigLoader(Path(config_path)).load() if config_path else ServerConfig.from_env()
    except ConfigError as exc:
        console.print(f"[red]Config error:[/red] {exc}")
        sys.exit(1)

    overrides: dict[str, Any] = {}
    if host is not None:
        overrides["host"] = host
    if port is not None:
        overrides["port"] = port
    if ping_interval is not None:
        if ping_interval <= 0:
            console.print("[red]Config error:[/red] --ping-interval must be positive")
            sys.exit(1)
        overrides["ping_interval"] = ping_interval
    if log_level is not None:
        overrides["log_level"] = log_level.upper()
    if overrides:
        config = config.model_copy(update=overrides)
    if telemetry:
        config.telemetry.enabled = True

    logging.basicConfig(level=config.log_level, format=_LOG_FORMAT)

    if config.telemetry.enabled:
        from mcpcalc.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(
                service_name=config.server_name,
                otlp_endpoint=config.telemetry.otlp_endpoint,
            )
        except ImportError as exc:
            console.print(f"[yellow]Telemetry disabled:[/yellow] {exc}")

    print_server_banner(config)
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )
