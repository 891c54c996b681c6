"""Inspect and prune the workspace's shared MCP server configuration.

MCP entries are not owned by bundles once merged, so uninstalling a bundle
never removes them; these commands are the explicit way to do it.
"""

import sys

import click
from rich.table import Table

from ..bundles.mcp_merger import MCPConfigMerger
from ..console import console
from ..paths import WORKSPACE_MARKER
from ..paths import find_workspace_root
from ..paths import get_mcp_config_path


def _require_mcp_config_path():
    kiro_dir = find_workspace_root()
    if kiro_dir is None:
        console.print(f"[red]Error:[/red] No {WORKSPACE_MARKER} directory found. Run this in a Kiro workspace.")
        sys.exit(1)
    return get_mcp_config_path(kiro_dir)


@click.group()
def mcp():
    """Manage MCP servers in the current workspace."""


@mcp.command("list")
def mcp_list():
    """List MCP servers configured in the workspace."""
    config_path = _require_mcp_config_path()
    servers = MCPConfigMerger().list_servers(config_path)

    if not servers:
        console.print(f"[yellow]No MCP servers configured in {config_path}[/yellow]")
        return

    table = Table(title=f"MCP servers ({len(servers)})")
    table.add_column("Name", style="cyan")
    table.add_column("Command")
    table.add_column("Args", style="dim")
    for name, entry in sorted(servers.items()):
        entry = entry if isinstance(entry, dict) else {}
        table.add_row(name, str(entry.get("command", "")), " ".join(str(a) for a in entry.get("args", [])))
    console.print(table)


@mcp.command("remove")
@click.argument("names", nargs=-1, required=True)
def mcp_remove(names: tuple[str, ...]):
    """Remove MCP servers by name."""
    config_path = _require_mcp_config_path()
    removed = MCPConfigMerger().remove_servers(config_path, list(names))

    for name in names:
        if name in removed:
            console.print(f"[green]✓ Removed MCP server '{name}'[/green]")
        else:
            console.print(f"[yellow]MCP server '{name}' not found[/yellow]")
