"""Protocol layer — tool catalog contract, JSON-RPC models and dispatcher."""

from mcpcalc.protocols.errors import (
    InvalidArgumentsError,
    ProtocolError,
    RemoteCallError,
    ToolNotFoundError,
    UnknownOperationError,
)
from mcpcalc.protocols.provider import ToolCatalog

__all__ = [
    "InvalidArgumentsError",
    "ProtocolError",
    "RemoteCallError",
    "ToolCatalog",
    "ToolNotFoundError",
    "UnknownOperationError",
]
