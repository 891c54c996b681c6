"""Settings manager for the user settings.yaml file.

Settings live in ~/.kiro-agent/settings.yaml:

    registry:
      url: https://example.com/agents.json
      timeout: 30

The registry URL resolves as: KIRO_AGENT_REGISTRY_URL env var, then the
settings file, then DEFAULT_REGISTRY_URL.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from .paths import get_settings_path

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = "https://kiro-marketplace.vercel.app/config/agents.json"
DEFAULT_REQUEST_TIMEOUT = 30.0
REGISTRY_URL_ENV = "KIRO_AGENT_REGISTRY_URL"


class SettingsManager:
    """Reads and updates the user settings file."""

    def __init__(self, settings_file: Path | None = None):
        """Initialize settings manager.

        Args:
            settings_file: Settings path (for testing). Defaults to ~/.kiro-agent/settings.yaml
        """
        self.settings_file = settings_file or get_settings_path()

    def _read_settings(self) -> dict[str, Any]:
        if not self.settings_file.exists():
            return {}

        try:
            with open(self.settings_file, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to read settings from {self.settings_file}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring settings file {self.settings_file}: expected a mapping")
            return {}
        return data

    def _write_settings(self, settings: dict[str, Any]) -> None:
        self.settings_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.settings_file, "w", encoding="utf-8") as f:
            yaml.safe_dump(settings, f, default_flow_style=False, sort_keys=False)

    def _registry_section(self) -> dict[str, Any]:
        section = self._read_settings().get("registry")
        return section if isinstance(section, dict) else {}

    def get_registry_url(self) -> str:
        """Get registry URL (env var > settings file > default)."""
        env_url = os.environ.get(REGISTRY_URL_ENV)
        if env_url:
            return env_url
        return self._registry_section().get("url") or DEFAULT_REGISTRY_URL

    def set_registry_url(self, url: str) -> None:
        """Persist the registry URL in the settings file."""
        settings = self._read_settings()
        registry = settings.get("registry")
        if not isinstance(registry, dict):
            registry = {}
        registry["url"] = url
        settings["registry"] = registry
        self._write_settings(settings)
        logger.info(f"Set registry URL to: {url}")

    def get_request_timeout(self) -> float:
        """Get the per-request HTTP timeout in seconds."""
        timeout = self._registry_section().get("timeout")
        try:
            return float(timeout) if timeout is not None else DEFAULT_REQUEST_TIMEOUT
        except (TypeError, ValueError):
            logger.warning(f"Invalid registry timeout {timeout!r}, using {DEFAULT_REQUEST_TIMEOUT}s")
            return DEFAULT_REQUEST_TIMEOUT


def get_registry_url() -> str:
    return SettingsManager().get_registry_url()
