"""kiro-agent CLI - discover, install, and track agent bundles for Kiro workspaces."""

__version__ = "1.0.0"
