"""
Bundles module - installation and bookkeeping of agent bundles.

Public API:
- BundleManifest: Immutable bundle description (pydantic)
- Installer: Fans bundle components out into a .kiro workspace
- LocalRegistry: Tracks installed bundles in ~/.kiro-agent/registry.json
- MCPConfigMerger: Conflict-aware merging into .kiro/settings/mcp.json
- create_bundle_template: Generate a new bundle skeleton
"""

from .installer import BundleNotInstalled
from .installer import InstallError
from .installer import Installer
from .installer import WorkspaceNotFound
from .local_registry import LocalRegistry
from .local_registry import LocalRegistryError
from .mcp_merger import ConflictResolver
from .mcp_merger import MCPConfigMerger
from .mcp_merger import MergeOutcome
from .mcp_merger import default_conflict_resolver
from .mcp_merger import prompt_on_conflict
from .mcp_merger import skip_on_conflict
from .schema import BundleManifest
from .schema import InstalledBundle
from .schema import InstalledComponents
from .schema import InstallResult
from .schema import MCPServerConfig
from .template import TemplateError
from .template import create_bundle_template

__all__ = [
    "BundleManifest",
    "BundleNotInstalled",
    "ConflictResolver",
    "InstallError",
    "InstallResult",
    "InstalledBundle",
    "InstalledComponents",
    "Installer",
    "LocalRegistry",
    "LocalRegistryError",
    "MCPConfigMerger",
    "MCPServerConfig",
    "MergeOutcome",
    "TemplateError",
    "WorkspaceNotFound",
    "create_bundle_template",
    "default_conflict_resolver",
    "prompt_on_conflict",
    "skip_on_conflict",
]
