"""Install and uninstall commands."""

import logging
import sys
import tempfile
import zipfile
from pathlib import Path

import click

from ..bundles.installer import BundleNotInstalled
from ..bundles.installer import Installer
from ..bundles.installer import WorkspaceNotFound
from ..bundles.local_registry import LocalRegistry
from ..bundles.local_registry import LocalRegistryError
from ..bundles.schema import BundleManifest
from ..bundles.schema import InstallResult
from ..console import console
from ..registry.client import RegistryClient
from ..registry.client import RegistryError
from ..utils.error_format import escape_markup
from .shared import component_summary
from .shared import create_local_registry
from .shared import create_registry_client

logger = logging.getLogger(__name__)


def _locate_bundle_root(extracted: Path) -> Path:
    """Return the directory holding manifest.json (archive root or its single top-level folder)."""
    if (extracted / "manifest.json").exists():
        return extracted
    children = [p for p in extracted.iterdir() if p.is_dir()]
    if len(children) == 1 and (children[0] / "manifest.json").exists():
        return children[0]
    return extracted


def _prepare_bundle_files(client: RegistryClient, bundle: BundleManifest, work_dir: Path) -> Path:
    """Download and extract the bundle archive into ``work_dir``.

    Bundles without a download URL install from an empty directory, so only
    their MCP servers (which live in the manifest) take effect.
    """
    bundle_dir = work_dir / "bundle"
    bundle_dir.mkdir()

    if not bundle.download_url:
        logger.info(f"Bundle {bundle.id} has no download URL, installing manifest components only")
        return bundle_dir

    try:
        archive = client.download_archive(bundle.download_url, work_dir / f"{bundle.id}.zip")
        with zipfile.ZipFile(archive) as zf:
            zf.extractall(bundle_dir)
    except zipfile.BadZipFile as e:
        raise RegistryError(f"Downloaded archive for '{bundle.id}' is not a valid zip file: {e}") from e
    except (zipfile.LargeZipFile, NotImplementedError, OSError) as e:
        # Unsupported compression raises NotImplementedError; disk errors surface as OSError
        raise RegistryError(f"Failed to unpack bundle archive for '{bundle.id}': {e}") from e

    return _locate_bundle_root(bundle_dir)


def _run_install(installer: Installer, bundle: BundleManifest, source: Path) -> InstallResult:
    console.print("[dim]Installing bundle components...[/dim]")
    return installer.install(bundle, source)


def _display_success(bundle: BundleManifest, result: InstallResult) -> None:
    console.print()
    console.print("[bold green]✓ Installation successful![/bold green]")
    console.print()
    console.print(f"[bold]{bundle.name} v{bundle.version}[/bold]")
    console.print(f"[dim]{bundle.description}[/dim]")
    console.print()

    lines = component_summary(result.installed_components)
    if lines:
        console.print("[bold]Installed components:[/bold]")
        for line in lines:
            console.print(f"  • {line}")
        console.print()

    if bundle.examples:
        console.print("[bold]Example usage:[/bold]")
        for example in bundle.examples:
            console.print(f"  [cyan]• {example.title}[/cyan]")
            if example.prompt:
                console.print(f'    [dim]"{example.prompt}"[/dim]')
        console.print()

    console.print("[dim]The agent is now ready to use in your Kiro environment![/dim]")


@click.command("install")
@click.argument("bundle_id")
@click.option("--force", "-f", is_flag=True, help="Reinstall even if already installed")
@click.option(
    "--source",
    "-s",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Install from a local, extracted bundle directory instead of downloading",
)
def install_cmd(bundle_id: str, force: bool, source: Path | None):
    """Install an agent bundle from the registry.

    Example:

        kiro-agent install aws-cloud-architect
    """
    local_registry: LocalRegistry = create_local_registry()
    console.print(f"[blue]📦 Installing bundle: {bundle_id}...[/blue]")

    try:
        if not force and local_registry.is_installed(bundle_id):
            console.print(f"[yellow]⚠️  Bundle '{bundle_id}' is already installed.[/yellow]")
            console.print("[dim]Use --force to reinstall.[/dim]")
            sys.exit(1)

        with create_registry_client() as client:
            console.print("[dim]Fetching bundle metadata from registry...[/dim]")
            bundle = client.fetch_bundle(bundle_id)
            console.print(f"[green]✓ Found: {bundle.name} v{bundle.version}[/green]")

            installer = Installer(local_registry)
            if source is not None:
                result = _run_install(installer, bundle, source)
            else:
                with tempfile.TemporaryDirectory(prefix=f"kiro-agent-{bundle_id}-") as tmp:
                    bundle_dir = _prepare_bundle_files(client, bundle, Path(tmp))
                    result = _run_install(installer, bundle, bundle_dir)

    except (RegistryError, WorkspaceNotFound, LocalRegistryError) as e:
        console.print("[red]❌ Installation failed:[/red]")
        console.print(f"[red]{escape_markup(e)}[/red]")
        sys.exit(1)

    if not result.success:
        console.print("[red]❌ Installation failed:[/red]")
        for error in result.errors:
            console.print(f"[red]  • {escape_markup(error)}[/red]")
        lines = component_summary(result.installed_components)
        if lines:
            console.print(f"[dim]Partially installed: {', '.join(lines)}[/dim]")
        sys.exit(1)

    _display_success(bundle, result)


@click.command("uninstall")
@click.argument("bundle_id")
def uninstall_cmd(bundle_id: str):
    """Remove an installed bundle from the local registry.

    Workspace files and MCP server entries are left in place; remove
    servers explicitly with 'kiro-agent mcp remove'.
    """
    installer = Installer(create_local_registry())

    try:
        record = installer.uninstall(bundle_id)
    except (BundleNotInstalled, LocalRegistryError) as e:
        console.print(f"[red]Error:[/red] {escape_markup(e)}")
        sys.exit(1)

    console.print(f"[green]✓ Uninstalled {record.id} v{record.version}[/green]")
    console.print("[dim]Installed files were kept in your workspace.[/dim]")
    if record.components.mcp_servers:
        names = " ".join(record.components.mcp_servers)
        console.print(f"[dim]To remove its MCP servers: kiro-agent mcp remove {names}[/dim]")
