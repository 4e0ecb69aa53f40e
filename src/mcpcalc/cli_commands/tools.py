"""``mcpcalc tools`` — list and call tools locally or against a running server."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import click

from mcpcalc.cli_commands._output import console, print_json, print_rpc_error, print_tools_table


@click.group()
def tools() -> None:
    """List and call tools."""


@tools.command("list")
@click.option("--url", default=None, help="Base URL of a running server (default: in-process).")
@click.option("--json", "as_json", is_flag=True, help="Print raw descriptors as JSON.")
def list_tools(url: str | None, as_json: bool) -> None:
    """List the tools the server exposes."""
    from mcpcalc.protocols.mcp.models import ToolDescriptor

    descriptors: list[ToolDescriptor]
    if url is None:
        from mcpcalc.tools.calculator import CalculatorCatalog

        descriptors = CalculatorCatalog().list_tools()
    else:
        from mcpcalc.client import MCPHttpClient

        async def _list() -> list[ToolDescriptor]:
            async with MCPHttpClient(url) as client:
                return await client.list_tools()

        try:
            descriptors = asyncio.run(_list())
        except Exception as exc:
            console.print(f"[red]Discovery error:[/red] {exc}")
            return

    if as_json:
        print_json([d.to_wire() for d in descriptors])
        return
    if not descriptors:
        console.print("[yellow]No tools available.[/yellow]")
        return
    print_tools_table(descriptors)


@tools.command("call")
@click.argument("name")
@click.option("--arg", "-a", "args", multiple=True, metavar="KEY=VALUE",
              help="Tool argument; VALUE is parsed as JSON when possible.")
@click.option("--url", default=None, help="Base URL of a running server (default: in-process).")
def call_tool(name: str, args: tuple[str, ...], url: str | None) -> None:
    """Call tool NAME and print its text result."""
    try:
        arguments = _parse_arguments(args)
    except click.BadParameter as exc:
        console.print(f"[red]Argument error:[/red] {exc.message}")
        return

    if url is None:
        from mcpcalc.protocols.mcp.dispatcher import RpcDispatcher
        from mcpcalc.tools.calculator import CalculatorCatalog

        response = RpcDispatcher(CalculatorCatalog()).dispatch({
            "jsonrpc": "2.0",
            "id": 1,
            "method": "tools/call",
            "params": {"name": name, "arguments": arguments},
        })
        if "error" in response:
            print_rpc_error(response["error"])
            return
        for block in response["result"]["content"]:
            console.print(block["text"])
        return

    from mcpcalc.client import MCPHttpClient
    from mcpcalc.protocols.mcp.models import ToolCallResult

    async def _call() -> ToolCallResult:
        async with MCPHttpClient(url) as client:
            return await client.call_tool(name, arguments)

    try:
        result = asyncio.run(_call())
    except Exception as exc:
        console.print(f"[red]Call error:[/red] {exc}")
        return
    console.print(result.text)


def _parse_arguments(pairs: tuple[str, ...]) -> dict[str, Any]:
    arguments: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}")
        try:
            arguments[key] = json.loads(raw)
        except json.JSONDecodeError:
            arguments[key] = raw
    return arguments
