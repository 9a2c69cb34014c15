"""Schema definitions for contrafactory-core.

Foundry formats (read-only, produced by ``forge build``):
- FoundryArtifact: Per-contract artifact file
- FoundryMetadata: Compiler metadata embedded in an artifact
- BuildInfo: One compiler invocation (build-info record)

Canonical records:
- Artifact / EVMArtifact / EVMCompiler / OptimizerConfig: Parsed contract
- VerificationInput: Standard JSON Input plus full compiler version
- DependencyInfo: Contract outside the primary source tree

Policy:
- DiscoveryPolicy: Inclusion and exclusion rules for discovery
"""

from __future__ import annotations

from contrafactory_core.schemas.artifact import (
    EVM_CHAIN,
    Artifact,
    DependencyInfo,
    EVMArtifact,
    EVMCompiler,
    OptimizerConfig,
    VerificationInput,
)
from contrafactory_core.schemas.foundry import (
    BuildInfo,
    BytecodeObject,
    CompilerMeta,
    FoundryArtifact,
    FoundryMetadata,
    LinkReference,
    MetadataSettings,
    OptimizerMeta,
    SettingsMeta,
    SourceMeta,
)
from contrafactory_core.schemas.policy import (
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_SOURCE_DIR,
    DiscoveryPolicy,
)

__all__ = [
    # Foundry formats
    "BuildInfo",
    "BytecodeObject",
    "CompilerMeta",
    "FoundryArtifact",
    "FoundryMetadata",
    "LinkReference",
    "MetadataSettings",
    "OptimizerMeta",
    "SettingsMeta",
    "SourceMeta",
    # Canonical records
    "EVM_CHAIN",
    "Artifact",
    "DependencyInfo",
    "EVMArtifact",
    "EVMCompiler",
    "OptimizerConfig",
    "VerificationInput",
    # Policy
    "DEFAULT_EXCLUDE_PATTERNS",
    "DEFAULT_SOURCE_DIR",
    "DiscoveryPolicy",
]
