"""Registry discovery commands: search and info."""

import json
import sys

import click
from rich.panel import Panel

from ..bundles.schema import BundleManifest
from ..console import console
from ..registry.client import BundleNotFound
from ..registry.client import RegistryError
from ..utils.error_format import escape_markup
from .shared import create_registry_client


def _print_registry_error(e: Exception, action: str) -> None:
    console.print(f"[red]Error:[/red] Failed to {action}: {escape_markup(e)}")
    console.print("\n[dim]Possible solutions:[/dim]")
    console.print("  1. Check your internet connection")
    console.print("  2. Check the registry URL: [cyan]kiro-agent config show[/cyan]")
    console.print("  3. Try again in a few moments")


@click.command("search")
@click.argument("query")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def search_cmd(query: str, output_json: bool):
    """Search the registry by name, description, tags, and categories.

    Example:

        kiro-agent search "code review"
    """
    try:
        with create_registry_client() as client:
            results = client.search_bundles(query)
    except RegistryError as e:
        _print_registry_error(e, "search registry")
        sys.exit(1)

    if output_json:
        output = {"query": query, "total": len(results), "results": [b.to_dict() for b in results]}
        click.echo(json.dumps(output, indent=2))
        return

    if not results:
        console.print(f'[yellow]No bundles found matching "{query}"[/yellow]')
        console.print("\n[dim]Try different keywords.[/dim]")
        return

    console.print(f'\n[bold]Found {len(results)} bundles matching "{query}":[/bold]\n')

    for bundle in results:
        content_parts = [bundle.description]
        if bundle.tags:
            content_parts.append(f"\n[dim]Tags: {', '.join(bundle.tags)}[/dim]")
        if bundle.categories:
            content_parts.append(f"\n[dim]Categories: {', '.join(bundle.categories)}[/dim]")

        console.print(
            Panel(
                "".join(content_parts),
                title=f"{bundle.id} ({bundle.version})",
                border_style="cyan",
                padding=(0, 1),
            )
        )

    console.print("\n[dim]To install:[/dim]")
    console.print("  [cyan]kiro-agent install <bundle-id>[/cyan]")


def _render_info(bundle: BundleManifest) -> str:
    content_parts = [f"[bold]{bundle.name}[/bold]", bundle.description]

    if bundle.long_description:
        content_parts.append(f"\n{bundle.long_description}")

    author = bundle.author.name
    if bundle.author.email:
        author = f"{author} <{bundle.author.email}>"
    content_parts.append(f"\n[bold]Author:[/bold] {author}")

    if bundle.tags:
        content_parts.append(f"[bold]Tags:[/bold] [dim]{', '.join(bundle.tags)}[/dim]")
    if bundle.categories:
        content_parts.append(f"[bold]Categories:[/bold] [dim]{', '.join(bundle.categories)}[/dim]")

    components = bundle.components
    content_parts.append("\n[bold]Components:[/bold]")
    for label, names in (
        ("MCP servers", [s.name for s in components.mcp_servers or []]),
        ("Steering files", [s.filename for s in components.steering_files or []]),
        ("Hooks", [h.name for h in components.hooks or []]),
        ("Spec templates", [t.name for t in components.spec_templates or []]),
    ):
        if names:
            content_parts.append(f"  {label}: {', '.join(names)}")

    if bundle.dependencies and bundle.dependencies.external:
        content_parts.append("\n[bold]External dependencies:[/bold]")
        for dep in bundle.dependencies.external:
            content_parts.append(f"  - {dep}")

    content_parts.append("\n[bold]Installation:[/bold]")
    content_parts.append(f"  [cyan]kiro-agent install {bundle.id}[/cyan]")
    return "\n".join(content_parts)


@click.command("info")
@click.argument("bundle_id")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info_cmd(bundle_id: str, output_json: bool):
    """Show details of a bundle from the registry."""
    try:
        with create_registry_client() as client:
            bundle = client.fetch_bundle(bundle_id)
    except BundleNotFound as e:
        console.print(f"[red]{escape_markup(e)}[/red]")
        console.print("\n[dim]Search the registry:[/dim]")
        console.print("  [cyan]kiro-agent search <query>[/cyan]")
        sys.exit(1)
    except RegistryError as e:
        _print_registry_error(e, "fetch bundle info")
        sys.exit(1)

    if output_json:
        click.echo(json.dumps(bundle.to_dict(), indent=2))
        return

    console.print()
    console.print(
        Panel(_render_info(bundle), title=f"{bundle.id} ({bundle.version})", border_style="cyan", padding=(1, 2))
    )
    console.print()
