"""Pytest configuration for kiro-agent CLI tests."""

import logging

import pytest
from kiro_agent_cli.logging_setup import JsonlHandler


@pytest.fixture(autouse=True)
def isolated_user_dir(tmp_path, monkeypatch):
    """Point ~/.kiro-agent at a temp directory and clear env overrides."""
    user_dir = tmp_path / "user-home" / ".kiro-agent"
    monkeypatch.setenv("KIRO_AGENT_HOME", str(user_dir))
    monkeypatch.delenv("KIRO_AGENT_REGISTRY_URL", raising=False)
    monkeypatch.delenv("KIRO_AGENT_LOG_PATH", raising=False)
    monkeypatch.delenv("KIRO_AGENT_LOG_LEVEL", raising=False)

    yield user_dir

    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, JsonlHandler):
            root.removeHandler(handler)


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """A project directory containing a .kiro marker, used as cwd."""
    project = tmp_path / "project"
    (project / ".kiro").mkdir(parents=True)
    monkeypatch.chdir(project)
    return project


@pytest.fixture
def manifest_data():
    """Factory for minimal valid manifest documents in wire (camelCase) form."""

    def _make(bundle_id: str = "test-bundle", **overrides) -> dict:
        data = {
            "id": bundle_id,
            "name": "Test Bundle",
            "version": "1.0.0",
            "description": "A test bundle",
            "author": {"name": "Test Author"},
            "tags": ["test"],
            "categories": ["testing"],
            "components": {},
        }
        data.update(overrides)
        return data

    return _make
