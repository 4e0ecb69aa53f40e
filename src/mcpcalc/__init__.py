"""mcpcalc — calculator MCP server with synchronous and streaming transports."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from mcpcalc.server.app import create_app as create_app

_LAZY_EXPORTS = {
    "create_app": "mcpcalc.server.app",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'mcpcalc' has no attribute {name!r}")
