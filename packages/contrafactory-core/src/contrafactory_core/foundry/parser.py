"""Foundry artifact parser.

Decodes ``out/{Source}.sol/{Contract}.json`` into the canonical Artifact
record. The artifact envelope and the metadata it embeds as a JSON
string are decoded independently: a broken envelope is fatal, broken
metadata is not (some build pipelines omit it).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson
import structlog
from pydantic import ValidationError as PydanticValidationError

from contrafactory_core.errors import ArtifactReadError, MalformedArtifactError, NoBytecodeError
from contrafactory_core.schemas.artifact import (
    EVM_CHAIN,
    Artifact,
    EVMArtifact,
    EVMCompiler,
    OptimizerConfig,
)
from contrafactory_core.schemas.foundry import FoundryArtifact, FoundryMetadata

logger = structlog.get_logger(__name__)


def contract_name_from_path(artifact_path: Path | str) -> str:
    """Contract name of an artifact file (its filename minus ``.json``)."""
    return Path(artifact_path).stem


def read_json(path: Path) -> Any:
    """Read and decode a JSON file.

    Args:
        path: File to read.

    Returns:
        Decoded JSON value.

    Raises:
        ArtifactReadError: If the file cannot be read.
        MalformedArtifactError: If the content is not valid JSON.
    """
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ArtifactReadError(
            f"reading {path.name} failed",
            path=str(path),
            internal_details=str(e),
        ) from e

    try:
        return orjson.loads(data)
    except orjson.JSONDecodeError as e:
        raise MalformedArtifactError(
            f"parsing {path.name} failed: invalid JSON",
            path=str(path),
            internal_details=str(e),
        ) from e


def load_foundry_artifact(artifact_path: Path | str) -> FoundryArtifact:
    """Read an artifact file into its raw Foundry model.

    Args:
        artifact_path: Path to the artifact JSON file.

    Returns:
        Validated FoundryArtifact.

    Raises:
        ArtifactReadError: If the file cannot be read.
        MalformedArtifactError: If the file is not a Foundry artifact.
    """
    artifact_path = Path(artifact_path)
    raw = read_json(artifact_path)

    try:
        return FoundryArtifact.model_validate(raw)
    except PydanticValidationError as e:
        raise MalformedArtifactError(
            f"parsing {artifact_path.name} failed: not a Foundry artifact",
            path=str(artifact_path),
            internal_details=str(e),
        ) from e


def decode_metadata(raw_metadata: str, *, path: Path | None = None) -> FoundryMetadata:
    """Decode an embedded ``rawMetadata`` string.

    Args:
        raw_metadata: Metadata JSON as embedded in the artifact.
        path: Artifact the metadata came from, for error context.

    Returns:
        Validated FoundryMetadata.

    Raises:
        MalformedArtifactError: If the string is not valid compiler metadata.
    """
    location = path.name if path else "artifact"
    try:
        return FoundryMetadata.model_validate(orjson.loads(raw_metadata))
    except orjson.JSONDecodeError as e:
        raise MalformedArtifactError(
            f"parsing rawMetadata of {location} failed: invalid JSON",
            path=str(path) if path else None,
            internal_details=str(e),
        ) from e
    except PydanticValidationError as e:
        raise MalformedArtifactError(
            f"parsing rawMetadata of {location} failed: unexpected structure",
            path=str(path) if path else None,
            internal_details=str(e),
        ) from e


def require_metadata(raw: FoundryArtifact, artifact_path: Path) -> FoundryMetadata:
    """Decode the metadata of a loaded artifact, failing if it has none.

    Raises:
        MalformedArtifactError: If there is no metadata or it is invalid.
    """
    if not raw.raw_metadata:
        raise MalformedArtifactError(
            f"artifact {artifact_path.name} has no rawMetadata",
            path=str(artifact_path),
        )
    return decode_metadata(raw.raw_metadata, path=artifact_path)


def load_metadata(artifact_path: Path | str) -> FoundryMetadata:
    """Read an artifact and decode its embedded metadata (strict).

    Args:
        artifact_path: Path to the artifact JSON file.

    Returns:
        Decoded metadata.

    Raises:
        ArtifactReadError: If the file cannot be read.
        MalformedArtifactError: If the artifact or its metadata is invalid,
            or the artifact carries no metadata.
    """
    artifact_path = Path(artifact_path)
    return require_metadata(load_foundry_artifact(artifact_path), artifact_path)


def read_artifact_source_path(artifact_path: Path | str) -> str:
    """Source path of an artifact, from its compilation target.

    Args:
        artifact_path: Path to the artifact JSON file.

    Returns:
        Project-relative source path ("" when no target is recorded).

    Raises:
        ArtifactReadError: If the file cannot be read.
        MalformedArtifactError: If the artifact or its metadata is invalid.
    """
    return load_metadata(artifact_path).compilation_target_path


def parse_artifact(artifact_path: Path | str) -> Artifact:
    """Parse a Foundry artifact into the canonical Artifact record.

    Args:
        artifact_path: Path to ``out/{Source}.sol/{Contract}.json``.

    Returns:
        Artifact with EVM payload. Fields that come from metadata are left
        at their defaults when the metadata is missing or invalid.

    Raises:
        ArtifactReadError: If the file cannot be read.
        MalformedArtifactError: If the envelope is not valid JSON or not an
            artifact.
        NoBytecodeError: If the contract has no bytecode (interface or
            abstract contract).

    Example:
        >>> artifact = parse_artifact("out/Token.sol/Token.json")
        >>> artifact.evm.source_path
        'src/Token.sol'
    """
    artifact_path = Path(artifact_path)
    raw = load_foundry_artifact(artifact_path)
    name = contract_name_from_path(artifact_path)

    if not raw.has_bytecode:
        raise NoBytecodeError(name)

    metadata = FoundryMetadata()
    if raw.raw_metadata:
        try:
            metadata = decode_metadata(raw.raw_metadata, path=artifact_path)
        except MalformedArtifactError:
            logger.debug("metadata_unreadable", artifact=str(artifact_path))

    try:
        source_path = metadata.compilation_target_path
    except MalformedArtifactError:
        source_path = ""

    settings = metadata.settings
    return Artifact(
        name=name,
        chain=EVM_CHAIN,
        evm=EVMArtifact(
            source_path=source_path,
            license=metadata.first_license,
            abi=raw.abi,
            bytecode=raw.bytecode.object,
            deployed_bytecode=raw.deployed_bytecode.object,
            storage_layout=raw.storage_layout,
            compiler=EVMCompiler(
                version=metadata.compiler.version,
                evm_version=settings.evm_version,
                via_ir=settings.via_ir,
                optimizer=OptimizerConfig(
                    enabled=settings.optimizer.enabled,
                    runs=settings.optimizer.runs,
                ),
            ),
        ),
    )
