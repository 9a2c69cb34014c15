"""Project configuration for contrafactory-core.

This module handles:
- BuildLayout: Where Foundry writes artifacts and build-info records
- ProjectConfig: The discovery section of ``contrafactory.toml``
- load_project_config: Config file discovery in a project directory
- Environment variable override of the artifacts directory
  (CONTRAFACTORY_ARTIFACTS_DIR)

Keys that only the CLI or registry use (server, project, chain) are
accepted and ignored.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from contrafactory_core.errors import ProjectConfigError
from contrafactory_core.schemas.policy import DEFAULT_EXCLUDE_PATTERNS, DiscoveryPolicy

logger = structlog.get_logger(__name__)

# Environment variable overriding the artifacts directory
ARTIFACTS_DIR_ENV_VAR = "CONTRAFACTORY_ARTIFACTS_DIR"

# Foundry defaults
DEFAULT_ARTIFACTS_DIR = "out"
DEFAULT_BUILD_INFO_DIR = "build-info"
DEFAULT_SOURCE_SUFFIX = ".sol"

# Project config files, in search order
PROJECT_CONFIG_FILES = ("contrafactory.toml", "cf.toml")


class BuildLayout(BaseModel):
    """Directory layout of Foundry build output.

    Attributes:
        artifacts_dir: Output directory, relative to the project root.
        build_info_dir: Build-info directory, relative to ``artifacts_dir``.
        source_suffix: Suffix of the per-source-file artifact directories.

    Example:
        >>> layout = BuildLayout()
        >>> layout.out_dir(Path("/project"))
        PosixPath('/project/out')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    artifacts_dir: str = Field(default=DEFAULT_ARTIFACTS_DIR, min_length=1)
    build_info_dir: str = Field(default=DEFAULT_BUILD_INFO_DIR, min_length=1)
    source_suffix: str = Field(default=DEFAULT_SOURCE_SUFFIX, min_length=1)

    @classmethod
    def from_env(cls) -> BuildLayout:
        """Create a layout honouring CONTRAFACTORY_ARTIFACTS_DIR."""
        artifacts_dir = os.environ.get(ARTIFACTS_DIR_ENV_VAR)
        if artifacts_dir:
            return cls(artifacts_dir=artifacts_dir)
        return cls()

    def out_dir(self, project_dir: Path) -> Path:
        """Artifacts directory of a project."""
        return project_dir / self.artifacts_dir

    def build_info_path(self, project_dir: Path) -> Path:
        """Build-info directory of a project."""
        return self.out_dir(project_dir) / self.build_info_dir


class FoundryConfig(BaseModel):
    """``[evm.foundry]`` section."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    artifacts_dir: str | None = Field(default=None, description="Artifacts directory override")


class EVMConfig(BaseModel):
    """``[evm]`` section."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    foundry: FoundryConfig = Field(default_factory=FoundryConfig)


class ProjectConfig(BaseModel):
    """Discovery-related settings of ``contrafactory.toml``.

    Attributes:
        contracts: Explicit allow-list of contract names.
        exclude: Name exclusion patterns. None means "use the defaults".
        exclude_paths: Source path exclusion patterns.
        include_dependencies: Dependency contracts to publish.
        evm: EVM toolchain settings.

    Example:
        >>> config = load_project_config(Path("."))
        >>> policy = config.discovery_policy() if config else DiscoveryPolicy.with_defaults()
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    contracts: list[str] = Field(default_factory=list)
    exclude: list[str] | None = Field(default=None)
    exclude_paths: list[str] = Field(default_factory=list)
    include_dependencies: list[str] = Field(default_factory=list)
    evm: EVMConfig = Field(default_factory=EVMConfig)

    def discovery_policy(self) -> DiscoveryPolicy:
        """Build the DiscoveryPolicy described by this config.

        An absent or empty ``exclude`` list falls back to
        DEFAULT_EXCLUDE_PATTERNS.
        """
        return DiscoveryPolicy(
            contracts=tuple(self.contracts),
            exclude=tuple(self.exclude) if self.exclude else DEFAULT_EXCLUDE_PATTERNS,
            exclude_paths=tuple(self.exclude_paths),
            include_dependencies=tuple(self.include_dependencies),
        )

    def build_layout(self) -> BuildLayout:
        """Build layout, applying ``evm.foundry.artifacts_dir`` over the environment."""
        artifacts_dir = self.evm.foundry.artifacts_dir
        if artifacts_dir:
            return BuildLayout(artifacts_dir=artifacts_dir)
        return BuildLayout.from_env()


def find_project_config(project_dir: Path | str) -> Path | None:
    """Find the project config file in a directory.

    Args:
        project_dir: Project root.

    Returns:
        Path of the first existing file in PROJECT_CONFIG_FILES, or None.
    """
    project_dir = Path(project_dir)
    for name in PROJECT_CONFIG_FILES:
        candidate = project_dir / name
        if candidate.is_file():
            return candidate
    return None


def load_project_config(project_dir: Path | str) -> ProjectConfig | None:
    """Load ``contrafactory.toml`` (or ``cf.toml``) from a project.

    Args:
        project_dir: Project root.

    Returns:
        Parsed ProjectConfig, or None when the project has no config file.

    Raises:
        ProjectConfigError: If the file is not valid TOML or has invalid values.
    """
    config_path = find_project_config(project_dir)
    if config_path is None:
        logger.debug("project_config_not_found", project_dir=str(project_dir))
        return None

    try:
        with config_path.open("rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ProjectConfigError(
            "Invalid TOML syntax",
            file_path=config_path.name,
            internal_details=str(e),
        ) from e

    try:
        config = ProjectConfig.model_validate(raw)
    except PydanticValidationError as e:
        raise ProjectConfigError(
            "Invalid project configuration",
            file_path=config_path.name,
            internal_details=str(e),
        ) from e

    logger.debug("project_config_loaded", path=str(config_path))
    return config
