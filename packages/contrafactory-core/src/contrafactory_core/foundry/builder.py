"""Foundry builder: the operations collaborators call on a Foundry project.

The registry CLI and service talk to a builder rather than to the
individual discovery, parsing and verification-input modules. A builder
carries the build layout, so a project with a custom artifacts directory
is handled the same way everywhere.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import structlog

from contrafactory_core.config import BuildLayout, load_project_config
from contrafactory_core.foundry import discovery, standard_json
from contrafactory_core.foundry.models import DiscoveryReport
from contrafactory_core.foundry.parser import parse_artifact
from contrafactory_core.schemas.artifact import (
    EVM_CHAIN,
    Artifact,
    DependencyInfo,
    VerificationInput,
)
from contrafactory_core.schemas.policy import DiscoveryPolicy

logger = structlog.get_logger(__name__)

FOUNDRY_CONFIG_FILE = "foundry.toml"


class FoundryBuilder:
    """Read Foundry build output.

    Attributes:
        layout: Where ``forge build`` writes artifacts and build-info.

    Example:
        >>> builder = FoundryBuilder.for_project(Path("."))
        >>> paths = builder.discover(Path("."), builder.default_policy)
        >>> artifact = builder.parse(paths[0])
        >>> vi = builder.get_verification_input(
        ...     Path("."), artifact.name, artifact.evm.source_path
        ... )
    """

    name = "foundry"
    display_name = "Foundry"
    chain = EVM_CHAIN
    config_file = FOUNDRY_CONFIG_FILE

    def __init__(
        self,
        layout: BuildLayout | None = None,
        default_policy: DiscoveryPolicy | None = None,
    ) -> None:
        """Initialize the builder.

        Args:
            layout: Build layout. Defaults to BuildLayout.from_env().
            default_policy: Policy used when callers do not pass one.
                Defaults to DiscoveryPolicy.with_defaults().
        """
        self.layout = layout or BuildLayout.from_env()
        self.default_policy = default_policy or DiscoveryPolicy.with_defaults()

    @classmethod
    def for_project(cls, project_dir: Path | str) -> FoundryBuilder:
        """Create a builder configured from the project's contrafactory.toml.

        Falls back to environment and built-in defaults when the project
        has no config file.

        Raises:
            ProjectConfigError: If the config file is invalid.
        """
        config = load_project_config(project_dir)
        if config is None:
            return cls()
        logger.debug("builder_configured", project_dir=str(project_dir))
        return cls(layout=config.build_layout(), default_policy=config.discovery_policy())

    def detect(self, project_dir: Path | str) -> bool:
        """Check whether a directory is a Foundry project.

        Returns:
            True if ``foundry.toml`` exists in the directory.

        Raises:
            OSError: If the check fails for a reason other than absence.
        """
        config_path = Path(project_dir) / self.config_file
        try:
            config_path.stat()
        except FileNotFoundError:
            return False
        return True

    def discover(
        self,
        project_dir: Path | str,
        policy: DiscoveryPolicy | None = None,
    ) -> list[Path]:
        """Artifact files publishable under ``policy`` (default policy if None)."""
        policy = policy or self.default_policy
        return discovery.discover_artifacts(project_dir, policy, self.layout)

    def scan(
        self,
        project_dir: Path | str,
        policy: DiscoveryPolicy | None = None,
    ) -> DiscoveryReport:
        """Outcome of every candidate artifact under ``policy``."""
        policy = policy or self.default_policy
        return discovery.scan_artifacts(project_dir, policy, self.layout)

    def discover_dependencies(self, project_dir: Path | str) -> list[DependencyInfo]:
        """Contracts with code outside the primary source tree."""
        return discovery.discover_dependencies(project_dir, self.default_policy, self.layout)

    def validate_dependencies(
        self,
        project_dir: Path | str,
        requested: Sequence[str],
        found_paths: Sequence[Path],
    ) -> None:
        """Fail with suggestions if a requested dependency was not discovered.

        Raises:
            DependencyValidationError: For the first missing dependency.
        """
        discovery.validate_dependencies(
            project_dir, requested, found_paths, self.default_policy, self.layout
        )

    def parse(self, artifact_path: Path | str) -> Artifact:
        """Parse one artifact file into the canonical record."""
        return parse_artifact(artifact_path)

    def get_verification_input(
        self,
        project_dir: Path | str,
        contract_name: str,
        source_path: str = "",
    ) -> VerificationInput:
        """Standard JSON Input and long compiler version from build-info."""
        return standard_json.get_verification_input(
            project_dir, contract_name, source_path, self.layout
        )

    def generate_verification_input(self, project_dir: Path | str, contract_name: str) -> bytes:
        """Standard JSON Input bytes of the first valid build-info record."""
        return standard_json.generate_verification_input(project_dir, contract_name, self.layout)

    def generate_per_contract_standard_json(
        self,
        project_dir: Path | str,
        artifact_path: Path | str,
    ) -> bytes:
        """Minimal Standard JSON Input rebuilt from the contract's metadata."""
        return standard_json.generate_per_contract_standard_json(project_dir, artifact_path)
