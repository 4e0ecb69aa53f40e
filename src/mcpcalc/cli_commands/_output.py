"""Shared CLI output formatters."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.table import Table

from mcpcalc.config import ServerConfig  # noqa: TC001
from mcpcalc.protocols.mcp.models import ToolDescriptor  # noqa: TC001

console = Console()


def print_tools_table(tools: list[ToolDescriptor]) -> None:
    """Pretty-print tool descriptors as a table."""
    table = Table(title="Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Arguments")

    for tool in tools:
        required = tool.input_schema.get("required", [])
        table.add_row(tool.name, _truncate(tool.description), ", ".join(required) or "-")

    console.print(table)


def print_rpc_error(error: dict[str, Any]) -> None:
    console.print(f"[red]JSON-RPC error {error.get('code')}:[/red] {error.get('message', '')}")


def print_server_banner(config: ServerConfig) -> None:
    base = f"http://{config.host}:{config.port}"
    console.print(f"[bold]{config.server_name}[/bold] {config.server_version}")
    console.print(f"  Health: {base}/")
    console.print(f"  MCP:    {base}/mcp")
    console.print(f"  SSE:    {base}/sse")


def print_json(data: Any) -> None:
    console.print_json(json.dumps(data, default=str))


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
