"""Bundle template generation for ``kiro-agent create``."""

import json
import logging
import re
import shutil
from datetime import UTC
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from .schema import BundleManifest

logger = logging.getLogger(__name__)

BUNDLE_SUBDIRS = ("mcp", "steering", "hooks", "specs")

EXAMPLE_MCP_SERVER = {
    "name": "example-mcp-server",
    "command": "uvx",
    "args": ["example-package@latest"],
    "env": {"EXAMPLE_VAR": "value"},
}

EXAMPLE_HOOK = {
    "name": "example-hook",
    "trigger": "on_file_save",
    "action": "message",
    "content": "Remember to follow the coding standards defined in the steering files.",
}

EXAMPLE_STEERING = """# Example Steering File

This steering file provides context and instructions to guide the agent's behavior.

## Purpose

Describe what this steering file helps the agent understand or do better.

## Guidelines

- Explain a best practice or pattern
- Provide context about your domain
- Set expectations for code style or approach

## References

- [Documentation](https://example.com/docs)
"""

EXAMPLE_SPEC_TEMPLATE = """# Requirements Template

## Introduction

[Describe the feature or system being specified]

## Glossary

- **Term**: Definition

## Requirements

### Requirement 1

**User Story:** As a [role], I want [feature], so that [benefit]

#### Acceptance Criteria

1. WHEN [condition] THEN the system SHALL [response]
2. WHEN [condition] THEN the system SHALL [response]
"""

README_TEMPLATE = """# {name}

An agent bundle for Kiro.

## Description

[Describe what this agent does and what problems it solves]

## Components

### MCP Servers

- **example-mcp-server**: [Describe what this MCP server provides]

### Steering Files

- **example-steering.md**: [Describe what guidance this provides]

### Hooks

- **example-hook**: [Describe what this hook automates]

### Spec Templates

- **requirements-template.md**: [Describe what this template helps with]

## Installation

```bash
kiro-agent install {bundle_id}
```

## Usage

[Provide examples of how to use this agent effectively]

## License

MIT
"""


class TemplateError(Exception):
    """Raised when a bundle template cannot be created."""


def to_kebab_case(name: str) -> str:
    """Convert a display name to a kebab-case bundle id.

    Example:
        >>> to_kebab_case("My Cool Agent!")
        'my-cool-agent'
    """
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def generate_template_manifest(bundle_id: str, bundle_name: str) -> BundleManifest:
    """Build the starter manifest for a new bundle.

    Raises:
        TemplateError: ``bundle_id`` is not a valid bundle id
    """
    now = datetime.now(UTC).isoformat()
    try:
        return BundleManifest.model_validate(
            {
                "id": bundle_id,
                "name": bundle_name,
                "version": "1.0.0",
                "description": "A brief description of your agent bundle",
                "longDescription": (
                    "A detailed description explaining what this agent does, "
                    "what problems it solves, and how to use it effectively."
                ),
                "author": {
                    "name": "Your Name",
                    "email": "your.email@example.com",
                    "url": "https://github.com/yourusername",
                },
                "tags": ["example", "template"],
                "categories": ["general"],
                "previewImage": "/images/preview.png",
                "components": {"mcpServers": [], "steeringFiles": [], "hooks": [], "specTemplates": []},
                "dependencies": {"external": [], "kiroVersion": ">=1.0.0"},
                "examples": [
                    {
                        "title": "Example Use Case",
                        "description": "Describe how to use this agent",
                        "prompt": "Example prompt to try with this agent",
                    }
                ],
                "createdAt": now,
                "updatedAt": now,
            }
        )
    except ValidationError as e:
        raise TemplateError(f"Cannot derive a valid bundle id from '{bundle_name}' (got '{bundle_id}'): {e}") from e


def create_bundle_template(bundle_name: str, output_dir: Path | None = None) -> tuple[Path, BundleManifest]:
    """Create a new bundle skeleton on disk.

    Args:
        bundle_name: Display name; the id is its kebab-case form
        output_dir: Target directory. Defaults to ./<bundle-id>

    Returns:
        Tuple of (bundle directory, generated manifest)

    Raises:
        TemplateError: Invalid name, existing directory, or write failure
    """
    bundle_id = to_kebab_case(bundle_name)
    manifest = generate_template_manifest(bundle_id, bundle_name)

    target = output_dir or Path.cwd() / bundle_id
    if target.exists():
        raise TemplateError(f"Directory '{target}' already exists")

    try:
        for subdir in BUNDLE_SUBDIRS:
            (target / subdir).mkdir(parents=True, exist_ok=True)

        (target / "manifest.json").write_text(json.dumps(manifest.to_dict(), indent=2) + "\n", encoding="utf-8")
        (target / "mcp" / "example-server.json").write_text(json.dumps(EXAMPLE_MCP_SERVER, indent=2) + "\n")
        (target / "steering" / "example-steering.md").write_text(EXAMPLE_STEERING, encoding="utf-8")
        (target / "hooks" / "example-hook.json").write_text(json.dumps(EXAMPLE_HOOK, indent=2) + "\n")
        (target / "specs" / "requirements-template.md").write_text(EXAMPLE_SPEC_TEMPLATE, encoding="utf-8")
        (target / "README.md").write_text(
            README_TEMPLATE.format(name=bundle_name, bundle_id=bundle_id), encoding="utf-8"
        )
    except OSError as e:
        shutil.rmtree(target, ignore_errors=True)
        raise TemplateError(f"Bundle creation failed: {e}") from e

    logger.info(f"Created bundle template {bundle_id} at {target}")
    return target, manifest
