"""contrafactory-core: Foundry build output reading for the contrafactory registry.

This package provides:
- FoundryBuilder: Detect, discover, parse and prepare verification input
- DiscoveryPolicy: Which artifacts are publishable
- Artifact: Canonical chain-agnostic artifact record
- compare_bytecode: Deployed vs. artifact bytecode classification
- load_project_config: contrafactory.toml settings
"""

from __future__ import annotations

__version__ = "0.1.0"

# Configuration
from contrafactory_core.config import BuildLayout, ProjectConfig, load_project_config

# Error types
from contrafactory_core.errors import (
    ArtifactReadError,
    BuildInfoNotFoundError,
    ConfigurationMissingError,
    ContrafactoryError,
    DependencyValidationError,
    MalformedArtifactError,
    NoBytecodeError,
    NotFoundError,
    ProjectConfigError,
    SourceFileMissingError,
    SourceReadError,
)

# Foundry operations
from contrafactory_core.foundry import (
    CandidateResult,
    CandidateStatus,
    DiscoveryReport,
    FoundryBuilder,
    discover_artifacts,
    discover_dependencies,
    generate_per_contract_standard_json,
    get_verification_input,
    parse_artifact,
    scan_artifacts,
    validate_dependencies,
)

# Canonical records and policy
from contrafactory_core.schemas import (
    DEFAULT_EXCLUDE_PATTERNS,
    Artifact,
    DependencyInfo,
    DiscoveryPolicy,
    EVMArtifact,
    EVMCompiler,
    OptimizerConfig,
    VerificationInput,
)

# Bytecode verification
from contrafactory_core.verify import MatchType, VerifyResult, compare_bytecode, strip_metadata

__all__ = [
    "__version__",
    # Builder
    "FoundryBuilder",
    "discover_artifacts",
    "scan_artifacts",
    "discover_dependencies",
    "validate_dependencies",
    "parse_artifact",
    "get_verification_input",
    "generate_per_contract_standard_json",
    "CandidateResult",
    "CandidateStatus",
    "DiscoveryReport",
    # Errors
    "ContrafactoryError",
    "ConfigurationMissingError",
    "NotFoundError",
    "BuildInfoNotFoundError",
    "NoBytecodeError",
    "SourceFileMissingError",
    "SourceReadError",
    "MalformedArtifactError",
    "ArtifactReadError",
    "DependencyValidationError",
    "ProjectConfigError",
    # Records and policy
    "Artifact",
    "EVMArtifact",
    "EVMCompiler",
    "OptimizerConfig",
    "VerificationInput",
    "DependencyInfo",
    "DiscoveryPolicy",
    "DEFAULT_EXCLUDE_PATTERNS",
    # Configuration
    "BuildLayout",
    "ProjectConfig",
    "load_project_config",
    # Verification
    "compare_bytecode",
    "strip_metadata",
    "MatchType",
    "VerifyResult",
]
