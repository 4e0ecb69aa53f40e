"""mcpcalc CLI entrypoint."""

from __future__ import annotations

import click

from mcpcalc import __version__


@click.group()
@click.version_option(version=__version__, prog_name="mcpcalc")
def main() -> None:
    """mcpcalc — calculator MCP server."""


# Register subcommands
from mcpcalc.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
