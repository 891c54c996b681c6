"""kiro-agent CLI - Command-line interface for installing agent bundles."""

import logging

import click

from . import __version__
from .commands import config
from .commands import create_cmd
from .commands import info_cmd
from .commands import install_cmd
from .commands import list_cmd
from .commands import mcp
from .commands import search_cmd
from .commands import uninstall_cmd
from .console import err_console
from .logging_setup import init_json_logging

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="kiro-agent")
@click.option("--verbose", "-v", is_flag=True, help="Write debug-level logs")
def cli(verbose: bool):
    """kiro-agent - Discover and install agent bundles for Kiro."""
    try:
        init_json_logging(level="DEBUG" if verbose else None)
    except OSError as e:
        # Logging is best effort; commands still run without a log file
        err_console.print(f"[yellow]Warning:[/yellow] could not initialize log file: {e}")
    logger.debug(f"kiro-agent {__version__} starting")


cli.add_command(install_cmd)
cli.add_command(uninstall_cmd)
cli.add_command(list_cmd)
cli.add_command(search_cmd)
cli.add_command(info_cmd)
cli.add_command(create_cmd)
cli.add_command(mcp)
cli.add_command(config)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
