"""Pydantic schemas for agent bundles.

Wire documents (registry catalog, manifest.json, registry.json) use camelCase
keys; models expose snake_case attributes and dump back to camelCase.
"""

from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic.alias_generators import to_camel

BUNDLE_ID_PATTERN = r"^[a-z0-9]+(-[a-z0-9]+)*$"
SEMVER_PATTERN = r"^\d+\.\d+\.\d+$"


class _WireModel(BaseModel):
    """Frozen model with camelCase aliases; unknown keys are ignored."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase wire format, dropping unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class MCPServerConfig(_WireModel):
    """Launch descriptor for an MCP server process."""

    name: str = Field(..., min_length=1, description="Unique server name (key in mcp.json)")
    command: str = Field(..., description="Executable to launch")
    args: list[str] = Field(default_factory=list, description="Command-line arguments")
    env: dict[str, str] | None = Field(None, description="Extra environment variables")


class SteeringFileConfig(_WireModel):
    """Steering document shipped in the bundle's steering/ directory."""

    filename: str
    inclusion: Literal["always", "manual", "fileMatch"] = "always"
    file_match_pattern: str | None = None


class HookConfig(_WireModel):
    """Hook definition shipped as hooks/<name>.json."""

    name: str
    trigger: str
    action: Literal["message", "command"]
    content: str


class SpecTemplateConfig(_WireModel):
    """Spec template shipped in the bundle's specs/ directory."""

    name: str
    type: Literal["requirements", "design", "tasks"]
    filename: str


class BundleComponents(_WireModel):
    mcp_servers: list[MCPServerConfig] | None = None
    steering_files: list[SteeringFileConfig] | None = None
    hooks: list[HookConfig] | None = None
    spec_templates: list[SpecTemplateConfig] | None = None


class BundleAuthor(_WireModel):
    name: str
    email: str | None = None
    url: str | None = None


class BundleDependencies(_WireModel):
    external: list[str] | None = None
    kiro_version: str | None = None


class BundleExample(_WireModel):
    title: str
    description: str
    prompt: str | None = None


class BundleManifest(_WireModel):
    """Complete, immutable description of an agent bundle."""

    id: str = Field(..., min_length=3, max_length=50, pattern=BUNDLE_ID_PATTERN, description="Kebab-case identifier")
    name: str = Field(..., description="Display name")
    version: str = Field(..., pattern=SEMVER_PATTERN, description="Semantic version (MAJOR.MINOR.PATCH)")
    description: str = Field(..., description="Short description")
    long_description: str = Field(default="", description="Detailed description")
    author: BundleAuthor
    tags: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    preview_image: str | None = None
    components: BundleComponents = Field(default_factory=BundleComponents)
    dependencies: BundleDependencies | None = None
    examples: list[BundleExample] | None = None
    download_url: str | None = Field(None, description="Location of the packaged bundle archive")
    created_at: str | None = None
    updated_at: str | None = None


class RegistryCatalog(_WireModel):
    """Remote registry document: ``{version, featured?, bundles}``."""

    version: str
    featured: list[str] | None = None
    bundles: list[BundleManifest] = Field(default_factory=list)


class InstalledComponentNames(_WireModel):
    """Names of the components a bundle placed, one list per kind."""

    mcp_servers: list[str] = Field(default_factory=list)
    steering_files: list[str] = Field(default_factory=list)
    hooks: list[str] = Field(default_factory=list)
    spec_templates: list[str] = Field(default_factory=list)


class InstalledBundle(_WireModel):
    """Record of an installed bundle in the local registry."""

    id: str
    version: str
    installed_at: str = Field(..., description="ISO-8601 UTC install timestamp")
    components: InstalledComponentNames = Field(default_factory=InstalledComponentNames)


@dataclass
class InstalledComponents:
    """Per-kind counts of components actually installed."""

    mcp_servers: int = 0
    steering_files: int = 0
    hooks: int = 0
    spec_templates: int = 0

    @property
    def total(self) -> int:
        return self.mcp_servers + self.steering_files + self.hooks + self.spec_templates


@dataclass
class InstallResult:
    """Outcome of a single ``Installer.install`` call."""

    success: bool
    installed_components: InstalledComponents = field(default_factory=InstalledComponents)
    errors: list[str] = field(default_factory=list)
