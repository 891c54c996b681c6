"""Show and update user settings."""

import click

from ..console import console
from ..paths import get_local_registry_path
from ..settings import REGISTRY_URL_ENV
from ..settings import SettingsManager


@click.group()
def config():
    """Manage kiro-agent settings."""


@config.command("show")
def config_show():
    """Show the effective configuration."""
    settings = SettingsManager()
    console.print(f"[bold]Registry URL:[/bold] {settings.get_registry_url()}")
    console.print(f"[bold]Request timeout:[/bold] {settings.get_request_timeout():g}s")
    console.print(f"[bold]Settings file:[/bold] {settings.settings_file}")
    console.print(f"[bold]Local registry:[/bold] {get_local_registry_path()}")


@config.command("set-registry")
@click.argument("url")
def config_set_registry(url: str):
    """Persist the registry URL in the user settings file."""
    settings = SettingsManager()
    settings.set_registry_url(url)
    console.print(f"[green]✓ Registry URL set to {url}[/green]")
    if settings.get_registry_url() != url:
        console.print(f"[yellow]Note: {REGISTRY_URL_ENV} is set and takes precedence.[/yellow]")
