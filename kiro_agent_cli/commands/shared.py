"""Factories and output helpers shared by CLI commands."""

from ..bundles.local_registry import LocalRegistry
from ..bundles.schema import InstalledComponents
from ..registry.client import RegistryClient
from ..settings import SettingsManager


def create_registry_client() -> RegistryClient:
    """Create a registry client configured from settings."""
    settings = SettingsManager()
    return RegistryClient(registry_url=settings.get_registry_url(), timeout=settings.get_request_timeout())


def create_local_registry() -> LocalRegistry:
    return LocalRegistry()


def component_summary(counts: InstalledComponents) -> list[str]:
    """Human-readable lines for non-zero component counts."""
    lines = []
    if counts.mcp_servers:
        lines.append(f"{counts.mcp_servers} MCP server(s)")
    if counts.steering_files:
        lines.append(f"{counts.steering_files} steering file(s)")
    if counts.hooks:
        lines.append(f"{counts.hooks} hook(s)")
    if counts.spec_templates:
        lines.append(f"{counts.spec_templates} spec template(s)")
    return lines
