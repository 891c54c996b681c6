"""Create a new bundle skeleton."""

import sys
from pathlib import Path

import click

from ..bundles.template import TemplateError
from ..bundles.template import create_bundle_template
from ..console import console
from ..utils.error_format import escape_markup


@click.command("create")
@click.argument("bundle_name")
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    help="Output directory for the bundle (default: ./<bundle-id>)",
)
def create_cmd(bundle_name: str, output: Path | None):
    """Create a new agent bundle template.

    Example:

        kiro-agent create "My Cool Agent"
    """
    console.print(f"[blue]📦 Creating bundle: {bundle_name}...[/blue]")

    try:
        bundle_dir, manifest = create_bundle_template(bundle_name, output)
    except TemplateError as e:
        console.print(f"[red]Error:[/red] {escape_markup(e)}")
        sys.exit(1)

    console.print()
    console.print(f"[bold green]✓ Bundle '{manifest.id}' created successfully![/bold green]")
    console.print()
    console.print("[bold]Next steps:[/bold]")
    console.print(f"  1. cd {bundle_dir.name}")
    console.print("  2. Edit manifest.json with your bundle details")
    console.print("  3. Add your MCP servers, steering files, hooks, and spec templates")
    console.print()
    console.print("[bold]Directory structure:[/bold]")
    console.print("  ├── manifest.json       # Bundle metadata")
    console.print("  ├── mcp/                # MCP server configs")
    console.print("  ├── steering/           # Steering files")
    console.print("  ├── hooks/              # Hook definitions")
    console.print("  ├── specs/              # Spec templates")
    console.print("  └── README.md           # Documentation")
    console.print()
