"""Bundle installation into a Kiro workspace.

Installs each component kind independently: MCP servers are merged into the
shared mcp.json, steering files, hooks and spec templates are copied into the
workspace tree. A failing kind is reported in the result and does not stop the
others; there is no rollback.

Copies never overwrite: a file already present in the workspace is left as is
and simply not counted.
"""

import logging
import shutil
from collections.abc import Sequence
from datetime import UTC
from datetime import datetime
from pathlib import Path

from ..paths import HOOKS_SUBDIR
from ..paths import SPEC_TEMPLATES_SUBDIR
from ..paths import STEERING_SUBDIR
from ..paths import WORKSPACE_MARKER
from ..paths import find_workspace_root
from ..paths import get_mcp_config_path
from .local_registry import LocalRegistry
from .mcp_merger import MCPConfigMerger
from .schema import BundleManifest
from .schema import HookConfig
from .schema import InstalledBundle
from .schema import InstalledComponentNames
from .schema import InstallResult
from .schema import MCPServerConfig
from .schema import SpecTemplateConfig
from .schema import SteeringFileConfig

logger = logging.getLogger(__name__)


class InstallError(Exception):
    """Raised when an install or uninstall cannot proceed."""


class WorkspaceNotFound(InstallError):
    """Raised when no .kiro directory exists in the current directory or any parent."""


class BundleNotInstalled(InstallError):
    """Raised when uninstalling a bundle that has no local record."""


def _path_within(directory: Path, name: str) -> Path:
    """Join a manifest-supplied file name onto ``directory``.

    Raises:
        InstallError: The name would resolve outside ``directory``
    """
    path = directory / name
    if not path.resolve().is_relative_to(directory.resolve()):
        raise InstallError(f"Refusing path outside {directory.name}/: {name!r}")
    return path


def _copy_if_absent(source: Path, destination: Path) -> bool:
    """Copy ``source`` to ``destination`` unless the source is missing or the destination exists."""
    if not source.exists():
        logger.debug(f"Bundle file not found, skipping: {source}")
        return False
    if destination.exists():
        logger.info(f"Keeping existing file: {destination}")
        return False
    shutil.copy2(source, destination)
    logger.debug(f"Copied {source} -> {destination}")
    return True


class Installer:
    """
    Installs agent bundles into the workspace found above the start directory.

    Contract:
    - Inputs: BundleManifest, path to the extracted bundle directory
    - Outputs: InstallResult with per-kind counts and labeled errors
    - Side Effects: Writes under <workspace>/.kiro/, updates the local registry
    - Errors: WorkspaceNotFound before any stage runs; stage errors are collected
    """

    def __init__(
        self,
        local_registry: LocalRegistry,
        mcp_merger: MCPConfigMerger | None = None,
        start_dir: Path | None = None,
    ):
        """Initialize installer.

        Args:
            local_registry: Store that records installed bundles
            mcp_merger: Merger for mcp.json. Defaults to one with the default conflict resolver.
            start_dir: Directory to search upward from for .kiro. Defaults to cwd at install time.
        """
        self.local_registry = local_registry
        self.mcp_merger = mcp_merger or MCPConfigMerger()
        self.start_dir = start_dir

    def find_kiro_directory(self) -> Path:
        kiro_dir = find_workspace_root(self.start_dir)
        if kiro_dir is None:
            raise WorkspaceNotFound(
                f"Kiro configuration directory ({WORKSPACE_MARKER}) not found. "
                "Please run this command in a Kiro workspace."
            )
        return kiro_dir

    def install(self, bundle: BundleManifest, bundle_path: Path) -> InstallResult:
        """Install a bundle into the workspace.

        Args:
            bundle: Manifest of the bundle (already validated)
            bundle_path: Directory holding the bundle's steering/, hooks/ and specs/ files

        Returns:
            InstallResult; success is False if any component kind failed

        Raises:
            WorkspaceNotFound: No .kiro directory above the start directory
        """
        kiro_dir = self.find_kiro_directory()
        logger.info(f"Installing bundle {bundle.id} v{bundle.version} into {kiro_dir}")

        result = InstallResult(success=False)
        counts = result.installed_components
        components = bundle.components

        if components.mcp_servers:
            try:
                counts.mcp_servers = self._install_mcp_servers(components.mcp_servers, kiro_dir)
            except Exception as e:
                logger.warning(f"MCP server installation failed for {bundle.id}: {e}")
                result.errors.append(f"MCP servers: {e}")

        if components.steering_files:
            try:
                counts.steering_files = self._install_steering_files(components.steering_files, bundle_path, kiro_dir)
            except Exception as e:
                logger.warning(f"Steering file installation failed for {bundle.id}: {e}")
                result.errors.append(f"Steering files: {e}")

        if components.hooks:
            try:
                counts.hooks = self._install_hooks(components.hooks, bundle_path, kiro_dir)
            except Exception as e:
                logger.warning(f"Hook installation failed for {bundle.id}: {e}")
                result.errors.append(f"Hooks: {e}")

        if components.spec_templates:
            try:
                counts.spec_templates = self._install_spec_templates(components.spec_templates, bundle_path, kiro_dir)
            except Exception as e:
                logger.warning(f"Spec template installation failed for {bundle.id}: {e}")
                result.errors.append(f"Spec templates: {e}")

        # Recorded even after partial failure
        self.local_registry.add_installed(
            InstalledBundle(
                id=bundle.id,
                version=bundle.version,
                installed_at=datetime.now(UTC).isoformat(),
                components=InstalledComponentNames(
                    mcp_servers=[s.name for s in components.mcp_servers or []],
                    steering_files=[s.filename for s in components.steering_files or []],
                    hooks=[h.name for h in components.hooks or []],
                    spec_templates=[t.name for t in components.spec_templates or []],
                ),
            )
        )

        result.success = not result.errors
        if result.success:
            logger.info(f"Successfully installed bundle: {bundle.id}")
        else:
            logger.warning(f"Bundle {bundle.id} installed with {len(result.errors)} error(s)")
        return result

    def _install_mcp_servers(self, servers: Sequence[MCPServerConfig], kiro_dir: Path) -> int:
        # Counts submitted entries; skipped conflicts are not visible here
        self.mcp_merger.merge_servers(get_mcp_config_path(kiro_dir), servers)
        return len(servers)

    def _install_steering_files(self, files: Sequence[SteeringFileConfig], bundle_path: Path, kiro_dir: Path) -> int:
        steering_dir = kiro_dir / STEERING_SUBDIR
        steering_dir.mkdir(parents=True, exist_ok=True)

        count = 0
        for steering_file in files:
            source = _path_within(bundle_path / "steering", steering_file.filename)
            if _copy_if_absent(source, _path_within(steering_dir, steering_file.filename)):
                count += 1
        return count

    def _install_hooks(self, hooks: Sequence[HookConfig], bundle_path: Path, kiro_dir: Path) -> int:
        hooks_dir = kiro_dir / HOOKS_SUBDIR
        hooks_dir.mkdir(parents=True, exist_ok=True)

        count = 0
        for hook in hooks:
            filename = f"{hook.name}.json"
            if _copy_if_absent(_path_within(bundle_path / "hooks", filename), _path_within(hooks_dir, filename)):
                count += 1
        return count

    def _install_spec_templates(
        self, templates: Sequence[SpecTemplateConfig], bundle_path: Path, kiro_dir: Path
    ) -> int:
        templates_dir = kiro_dir / SPEC_TEMPLATES_SUBDIR
        templates_dir.mkdir(parents=True, exist_ok=True)

        count = 0
        for template in templates:
            source = _path_within(bundle_path / "specs", template.filename)
            if _copy_if_absent(source, _path_within(templates_dir, template.filename)):
                count += 1
        return count

    def uninstall(self, bundle_id: str) -> InstalledBundle:
        """Forget an installed bundle.

        Only the local registry record is removed. Workspace files and mcp.json
        entries stay in place since they may have been edited or shared.

        Returns:
            The removed record

        Raises:
            BundleNotInstalled: No record exists for ``bundle_id``
        """
        record = self.local_registry.get_installed_bundle(bundle_id)
        if record is None:
            raise BundleNotInstalled(f"Bundle '{bundle_id}' is not installed")

        self.local_registry.remove_installed(bundle_id)
        logger.info(f"Uninstalled bundle: {bundle_id} (workspace files kept)")
        return record
