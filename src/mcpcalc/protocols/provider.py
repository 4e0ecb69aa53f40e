"""ToolCatalog protocol — the collaborator the dispatcher lists and invokes tools through.

Any object with ``list_tools`` and ``call_tool`` satisfies it, so the
:class:`~mcpcalc.protocols.mcp.dispatcher.RpcDispatcher` never depends on a
concrete tool set.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from mcpcalc.protocols.mcp.models import ToolCallResult, ToolDescriptor


@runtime_checkable
class ToolCatalog(Protocol):
    """Lists and executes a fixed set of tools."""

    def list_tools(self) -> list[ToolDescriptor]:
        """Return every tool descriptor in a stable order."""
        ...

    def call_tool(self, name: str, arguments: dict[str, Any]) -> ToolCallResult:
        """Execute a tool by name.

        Raises:
            ToolNotFoundError: No tool is registered under *name*.
            InvalidArgumentsError: The arguments do not fit the tool
                (``UnknownOperationError`` for a bad operation selector).
        """
        ...
