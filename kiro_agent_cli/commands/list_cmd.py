"""List installed bundles."""

import sys

import click

from ..bundles.local_registry import LocalRegistryError
from ..bundles.schema import InstalledBundle
from ..console import console
from ..utils.error_format import escape_markup
from .shared import create_local_registry

MARKETPLACE_URL = "https://kiro-marketplace.vercel.app"


def _display_empty() -> None:
    console.print()
    console.print("[yellow]📭 No agents installed yet[/yellow]")
    console.print()
    console.print("[dim]Discover and install specialized agents from the marketplace:[/dim]")
    console.print(f"  [cyan]{MARKETPLACE_URL}[/cyan]")
    console.print()
    console.print("[dim]To install an agent, run:[/dim]")
    console.print("  kiro-agent install <bundle-id>")
    console.print()


def _display_installed(installed: list[InstalledBundle]) -> None:
    console.print()
    console.print(f"[bold]📦 Installed Agents ({len(installed)})[/bold]")
    console.print()

    for index, bundle in enumerate(installed, start=1):
        console.print(f"[bold cyan]{index}. {bundle.id} v{bundle.version}[/bold cyan]")
        console.print(f"[dim]   Installed: {bundle.installed_at}[/dim]")
        console.print("[dim]   Components:[/dim]")

        components = bundle.components
        for label, names in (
            ("MCP Servers", components.mcp_servers),
            ("Steering Files", components.steering_files),
            ("Hooks", components.hooks),
            ("Spec Templates", components.spec_templates),
        ):
            if names:
                console.print(f"[dim]     • {label}: {', '.join(names)}[/dim]")
        console.print()


@click.command("list")
def list_cmd():
    """List all installed agent bundles."""
    try:
        installed = create_local_registry().get_installed()
    except LocalRegistryError as e:
        console.print("[red]❌ Failed to list installed agents:[/red]")
        console.print(f"[red]{escape_markup(e)}[/red]")
        sys.exit(1)

    if not installed:
        _display_empty()
        return

    _display_installed(installed)
