"""Foundry build output support for contrafactory-core.

This package provides:
- FoundryBuilder: Facade over all Foundry operations
- discover_artifacts / scan_artifacts: Policy-driven artifact discovery
- discover_dependencies / validate_dependencies: Dependency candidates
- parse_artifact: Artifact file -> canonical Artifact record
- get_verification_input: Build-info lookup for verification
- generate_per_contract_standard_json: Minimal per-contract Standard JSON Input
"""

from __future__ import annotations

from contrafactory_core.foundry.builder import FOUNDRY_CONFIG_FILE, FoundryBuilder
from contrafactory_core.foundry.discovery import (
    discover_artifacts,
    discover_dependencies,
    find_suggestions,
    scan_artifacts,
    validate_dependencies,
)
from contrafactory_core.foundry.models import CandidateResult, CandidateStatus, DiscoveryReport
from contrafactory_core.foundry.parser import parse_artifact, read_artifact_source_path
from contrafactory_core.foundry.standard_json import (
    STANDARD_JSON_KEYS,
    generate_per_contract_standard_json,
    generate_verification_input,
    get_verification_input,
    strip_standard_json_keys,
)

__all__ = [
    "FOUNDRY_CONFIG_FILE",
    "FoundryBuilder",
    # Discovery
    "CandidateResult",
    "CandidateStatus",
    "DiscoveryReport",
    "discover_artifacts",
    "discover_dependencies",
    "find_suggestions",
    "scan_artifacts",
    "validate_dependencies",
    # Parsing
    "parse_artifact",
    "read_artifact_source_path",
    # Verification input
    "STANDARD_JSON_KEYS",
    "generate_per_contract_standard_json",
    "generate_verification_input",
    "get_verification_input",
    "strip_standard_json_keys",
]
