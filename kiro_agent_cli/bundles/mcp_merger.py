"""MCP server configuration merging.

Many bundles write into one shared ``.kiro/settings/mcp.json`` over the tool's
lifetime. Merging never silently drops an existing entry: name collisions are
handed to a ConflictResolver before the map is touched.

A corrupt mcp.json is treated as empty on merge so a later install can heal
it. The document is rewritten in a single write per call; the last writer wins
across processes.
"""

import json
import logging
import sys
from collections.abc import Callable
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Any

from rich.prompt import Confirm

from ..utils.json_files import write_json_atomic
from .schema import MCPServerConfig

logger = logging.getLogger(__name__)

MCP_SERVER_KIND = "MCP server"

# Decides whether an existing entry may be overwritten: (name, kind) -> overwrite?
ConflictResolver = Callable[[str, str], bool]


def skip_on_conflict(name: str, kind: str) -> bool:
    """Never overwrite. Used in non-interactive contexts."""
    logger.info(f"{kind} '{name}' already exists, keeping existing entry")
    return False


def prompt_on_conflict(name: str, kind: str) -> bool:
    """Ask the operator whether to overwrite (default: no)."""
    return Confirm.ask(f"{kind} '{name}' already exists. Overwrite?", default=False)


def default_conflict_resolver() -> ConflictResolver:
    """Prompt when attached to a terminal, otherwise skip conflicts."""
    if sys.stdin.isatty():
        return prompt_on_conflict
    return skip_on_conflict


@dataclass
class MergeOutcome:
    """Names handled by a single merge, by decision."""

    added: list[str] = field(default_factory=list)
    overwritten: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def _server_entry(server: MCPServerConfig) -> dict[str, Any]:
    entry: dict[str, Any] = {"name": server.name, "command": server.command, "args": list(server.args)}
    if server.env:
        entry["env"] = dict(server.env)
    return entry


class MCPConfigMerger:
    """Merges MCP server configurations into a shared mcp.json document."""

    def __init__(self, resolver: ConflictResolver | None = None):
        """Initialize merger.

        Args:
            resolver: Conflict strategy. If None, chosen per call by
                default_conflict_resolver() (prompt on a TTY, skip otherwise).
        """
        self.resolver = resolver

    def _load_for_merge(self, config_path: Path) -> dict[str, Any]:
        if not config_path.exists():
            return {"mcpServers": {}}

        try:
            config = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Existing {config_path} is invalid, creating new configuration: {e}")
            return {"mcpServers": {}}

        if not isinstance(config, dict):
            logger.warning(f"Existing {config_path} is not a JSON object, creating new configuration")
            return {"mcpServers": {}}

        if not isinstance(config.get("mcpServers"), dict):
            config["mcpServers"] = {}
        return config

    def merge_servers(self, config_path: Path, new_servers: Sequence[MCPServerConfig]) -> MergeOutcome:
        """Merge new servers into the document at ``config_path``.

        Args:
            config_path: Path to mcp.json (created if missing)
            new_servers: Servers to add, in order

        Returns:
            MergeOutcome listing added, overwritten and skipped names
        """
        config = self._load_for_merge(config_path)
        servers: dict[str, Any] = config["mcpServers"]
        resolver = self.resolver or default_conflict_resolver()
        outcome = MergeOutcome()

        for server in new_servers:
            if server.name in servers:
                if not resolver(server.name, MCP_SERVER_KIND):
                    logger.info(f"Skipping MCP server '{server.name}'")
                    outcome.skipped.append(server.name)
                    continue
                outcome.overwritten.append(server.name)
            else:
                outcome.added.append(server.name)

            servers[server.name] = _server_entry(server)

        write_json_atomic(config_path, config)
        logger.debug(
            f"Merged MCP servers into {config_path}: added={outcome.added} "
            f"overwritten={outcome.overwritten} skipped={outcome.skipped}"
        )
        return outcome

    def remove_servers(self, config_path: Path, server_names: Sequence[str]) -> list[str]:
        """Remove servers by name.

        Nothing is written when the file is missing, cannot be parsed, has no
        server map, or holds none of the names.

        Returns:
            Names that were present and removed
        """
        if not config_path.exists():
            return []

        try:
            config = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Cannot remove MCP servers, {config_path} is invalid: {e}")
            return []

        if not isinstance(config, dict) or not isinstance(config.get("mcpServers"), dict):
            return []

        servers = config["mcpServers"]
        removed = [name for name in dict.fromkeys(server_names) if name in servers]
        for name in removed:
            del servers[name]
        if not removed:
            return []

        write_json_atomic(config_path, config)
        logger.info(f"Removed MCP servers from {config_path}: {', '.join(removed)}")
        return removed

    def list_servers(self, config_path: Path) -> dict[str, Any]:
        """Read the server map, treating a missing or invalid file as empty."""
        return dict(self._load_for_merge(config_path)["mcpServers"])
