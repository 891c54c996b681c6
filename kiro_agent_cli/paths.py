"""CLI path policy.

Centralizes every path decision: the per-user state directory and the layout
of a workspace's ``.kiro`` configuration tree. Core classes receive paths by
injection; this module supplies the CLI's defaults.
"""

import os
from pathlib import Path

# Per-user directory (override with KIRO_AGENT_HOME)
USER_DIR_ENV = "KIRO_AGENT_HOME"
USER_DIR_NAME = ".kiro-agent"

# Marker directory that anchors a workspace
WORKSPACE_MARKER = ".kiro"

# Workspace subpaths, relative to the marker directory
MCP_CONFIG_SUBPATH = Path("settings") / "mcp.json"
STEERING_SUBDIR = Path("steering")
HOOKS_SUBDIR = Path("hooks")
SPEC_TEMPLATES_SUBDIR = Path("specs") / "templates"


def get_user_dir() -> Path:
    """Get the per-user kiro-agent directory (~/.kiro-agent by default)."""
    override = os.environ.get(USER_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / USER_DIR_NAME


def get_local_registry_path() -> Path:
    """Get the installed-bundles state file."""
    return get_user_dir() / "registry.json"


def get_settings_path() -> Path:
    """Get the user settings file."""
    return get_user_dir() / "settings.yaml"


def get_log_path() -> Path:
    """Get the default JSONL log file."""
    return get_user_dir() / "logs" / "kiro-agent.log.jsonl"


def find_workspace_root(start: Path | None = None) -> Path | None:
    """Find the workspace configuration root by walking up from ``start``.

    Checks ``start`` and each parent, including the filesystem root, for a
    ``.kiro`` directory.

    Args:
        start: Directory to start from. Defaults to the current directory.

    Returns:
        Path to the ``.kiro`` directory, or None if no ancestor has one
    """
    current = (start or Path.cwd()).resolve()

    while True:
        candidate = current / WORKSPACE_MARKER
        if candidate.is_dir():
            return candidate
        if current.parent == current:
            return None
        current = current.parent


def get_mcp_config_path(workspace_root: Path) -> Path:
    """Get the shared MCP config document for a workspace root."""
    return workspace_root / MCP_CONFIG_SUBPATH
