"""Local registry of installed bundles.

Tracks which bundles are installed in ~/.kiro-agent/registry.json.
Every operation is a whole-file read-modify-write; writes are atomic but there
is no cross-process locking, so concurrent CLI invocations are unsupported.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..paths import get_local_registry_path
from ..utils.json_files import write_json_atomic
from .schema import InstalledBundle

logger = logging.getLogger(__name__)

LOCAL_REGISTRY_VERSION = "1.0.0"


class LocalRegistryError(Exception):
    """Raised when the local registry file cannot be read or parsed."""


class LocalRegistry:
    """
    Persistent record of installed bundles.

    Contract:
    - Inputs: InstalledBundle records, bundle ids
    - Outputs: InstalledBundle records
    - Side Effects: Creates and rewrites the registry file
    - Errors: LocalRegistryError for a corrupt or unreadable file (never auto-repaired)
    """

    def __init__(self, registry_path: Path | None = None):
        """Initialize local registry.

        Args:
            registry_path: Path to registry.json. Defaults to ~/.kiro-agent/registry.json
        """
        self.registry_path = registry_path or get_local_registry_path()

    def _ensure_registry(self) -> None:
        if self.registry_path.exists():
            return
        logger.debug(f"Initializing local registry at {self.registry_path}")
        self._write({"version": LOCAL_REGISTRY_VERSION, "installed": []})

    def _read(self) -> dict[str, Any]:
        self._ensure_registry()
        try:
            data = json.loads(self.registry_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise LocalRegistryError(f"Failed to read local registry {self.registry_path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("installed"), list):
            raise LocalRegistryError(f"Local registry {self.registry_path} is malformed: missing 'installed' list")
        if not all(isinstance(entry, dict) for entry in data["installed"]):
            raise LocalRegistryError(f"Local registry {self.registry_path} is malformed: entries must be objects")
        return data

    def _write(self, data: dict[str, Any]) -> None:
        write_json_atomic(self.registry_path, data)

    def _records(self, data: dict[str, Any]) -> list[InstalledBundle]:
        try:
            return [InstalledBundle.model_validate(entry) for entry in data["installed"]]
        except ValidationError as e:
            raise LocalRegistryError(f"Local registry {self.registry_path} has an invalid entry: {e}") from e

    def get_installed(self) -> list[InstalledBundle]:
        """Get all installed bundles, in install order."""
        return self._records(self._read())

    def add_installed(self, bundle: InstalledBundle) -> None:
        """Record an installed bundle, replacing any existing record with the same id.

        Args:
            bundle: Record to store. Supersedes the previous record as a whole.
        """
        data = self._read()
        data["installed"] = [entry for entry in data["installed"] if entry.get("id") != bundle.id]
        data["installed"].append(bundle.to_dict())
        self._write(data)
        logger.info(f"Recorded installed bundle: {bundle.id} v{bundle.version}")

    def remove_installed(self, bundle_id: str) -> None:
        """Remove a bundle record. Unknown ids are ignored."""
        data = self._read()
        data["installed"] = [entry for entry in data["installed"] if entry.get("id") != bundle_id]
        self._write(data)
        logger.info(f"Removed bundle record: {bundle_id}")

    def is_installed(self, bundle_id: str) -> bool:
        return any(entry.get("id") == bundle_id for entry in self._read()["installed"])

    def get_installed_bundle(self, bundle_id: str) -> InstalledBundle | None:
        """Get the record for a bundle, or None if it is not installed."""
        for record in self.get_installed():
            if record.id == bundle_id:
                return record
        return None
