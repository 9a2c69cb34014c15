"""Standard JSON Input reconstruction for contract verification.

Two strategies, serving different verifiers:

- get_verification_input: pick the build-info record of the compiler
  invocation that produced a contract and return its full input. This
  is what the compiler actually saw, including unrelated project files.
- generate_per_contract_standard_json: rebuild a minimal input from the
  sources a contract's own metadata declares. The metadata hash embedded
  in bytecode covers exactly those sources, so only this input
  reproduces it.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import orjson
import structlog
from pydantic import ValidationError as PydanticValidationError

from contrafactory_core.config import BuildLayout
from contrafactory_core.errors import (
    BuildInfoNotFoundError,
    MalformedArtifactError,
    SourceFileMissingError,
    SourceReadError,
)
from contrafactory_core.foundry.discovery import require_build_info_dir
from contrafactory_core.foundry.parser import load_foundry_artifact, read_json, require_metadata
from contrafactory_core.schemas.artifact import VerificationInput
from contrafactory_core.schemas.foundry import BuildInfo, FoundryMetadata

logger = structlog.get_logger(__name__)

# Top-level keys the compiler accepts in Standard JSON Input. Foundry adds
# others (allowPaths, basePath, includePaths, version) that solc rejects.
STANDARD_JSON_KEYS = ("language", "sources", "settings")

DEFAULT_LANGUAGE = "Solidity"

# forge omits the optimizer run count when it equals solc's default
DEFAULT_OPTIMIZER_RUNS = 200

DEFAULT_BYTECODE_HASH = "ipfs"

VERIFICATION_OUTPUT_SELECTION: dict[str, dict[str, list[str]]] = {
    "*": {"*": ["abi", "evm.bytecode", "evm.deployedBytecode", "metadata"]},
}


def strip_standard_json_keys(standard_input: Mapping[str, Any]) -> bytes:
    """Drop build-tool keys the compiler does not accept.

    Args:
        standard_input: Standard JSON Input as stored in a build-info record.

    Returns:
        Compact JSON (keys sorted) containing only language, sources and
        settings.
    """
    stripped = {key: value for key, value in standard_input.items() if key in STANDARD_JSON_KEYS}
    return orjson.dumps(stripped, option=orjson.OPT_SORT_KEYS)


def _iter_build_infos(build_info_dir: Path) -> Iterator[tuple[Path, BuildInfo]]:
    """Yield (path, BuildInfo) for each structurally valid record, by filename."""
    for path in sorted(build_info_dir.iterdir()):
        if not path.name.endswith(".json") or not path.is_file():
            continue
        try:
            build_info = BuildInfo.model_validate(read_json(path))
        except MalformedArtifactError as e:
            logger.debug("build_info_skipped", build_info=path.name, reason=e.user_message)
            continue
        except PydanticValidationError:
            logger.debug("build_info_skipped", build_info=path.name, reason="not a build record")
            continue
        yield path, build_info


def get_verification_input(
    project_dir: Path | str,
    contract_name: str,
    source_path: str = "",
    layout: BuildLayout | None = None,
) -> VerificationInput:
    """Find the compiler input that produced a contract.

    When ``source_path`` is given, only a record whose output contains
    ``contracts[source_path][contract_name]`` is accepted; this tells apart
    same-named contracts compiled from different files. Without it, the
    first valid record (by filename) is returned, which is ambiguous when
    the project was compiled in several invocations.

    Args:
        project_dir: Foundry project root.
        contract_name: Contract to verify.
        source_path: Project-relative source path of the contract.
        layout: Build layout. Defaults to BuildLayout.from_env().

    Returns:
        VerificationInput with the stripped Standard JSON Input and the
        record's long compiler version.

    Raises:
        ConfigurationMissingError: If the build-info directory is missing.
        BuildInfoNotFoundError: If no record matches.

    Example:
        >>> vi = get_verification_input(".", "MetaCoin", "src/examples/inheritance/MetaCoin.sol")
        >>> vi.solc_long_version
        '0.8.28+commit.7893614a'
    """
    project_dir = Path(project_dir)
    layout = layout or BuildLayout.from_env()
    build_info_dir = require_build_info_dir(project_dir, layout)

    for path, build_info in _iter_build_infos(build_info_dir):
        if source_path and not build_info.produced(source_path, contract_name):
            continue

        logger.debug(
            "verification_input_selected",
            build_info=path.name,
            contract=contract_name,
            source_path=source_path or None,
        )
        return VerificationInput(
            standard_json=strip_standard_json_keys(build_info.input),
            solc_long_version=build_info.solc_long_version,
        )

    raise BuildInfoNotFoundError(contract_name, source_path)


def generate_verification_input(
    project_dir: Path | str,
    contract_name: str,
    layout: BuildLayout | None = None,
) -> bytes:
    """Standard JSON Input of the first valid build-info record.

    Kept for callers that only need the input bytes; prefer
    get_verification_input() with a source path.
    """
    return get_verification_input(project_dir, contract_name, "", layout).standard_json


def _read_sources(project_dir: Path, metadata: FoundryMetadata) -> dict[str, dict[str, str]]:
    """Read every declared source from disk, keyed by declared path (sorted)."""
    sources: dict[str, dict[str, str]] = {}
    for source_path in sorted(metadata.sources):
        full_path = project_dir / source_path.lstrip("/")
        try:
            content = full_path.read_bytes()
        except FileNotFoundError as e:
            raise SourceFileMissingError(source_path, internal_details=str(e)) from e
        except IsADirectoryError as e:
            raise SourceReadError(source_path, "is a directory", internal_details=str(e)) from e
        except PermissionError as e:
            raise SourceReadError(source_path, "permission denied", internal_details=str(e)) from e
        except OSError as e:
            raise SourceReadError(source_path, "read failed", internal_details=str(e)) from e
        # Bytes, not text mode: newline translation would change the source hash
        sources[source_path] = {"content": content.decode("utf-8", errors="replace")}
    return sources


def _optimizer_settings(metadata: FoundryMetadata) -> dict[str, Any]:
    optimizer = metadata.settings.optimizer
    runs = optimizer.runs
    if optimizer.enabled and runs == 0:
        runs = DEFAULT_OPTIMIZER_RUNS
    return {"enabled": optimizer.enabled, "runs": runs}


def _metadata_settings(metadata: FoundryMetadata) -> dict[str, Any]:
    recorded = metadata.settings.metadata
    if recorded is None:
        return {"bytecodeHash": DEFAULT_BYTECODE_HASH}

    settings: dict[str, Any] = {"bytecodeHash": recorded.bytecode_hash or DEFAULT_BYTECODE_HASH}
    if recorded.use_literal_content:
        settings["useLiteralContent"] = True
    if recorded.append_cbor is not None:
        settings["appendCBOR"] = recorded.append_cbor
    return settings


def build_per_contract_input(project_dir: Path, metadata: FoundryMetadata) -> dict[str, Any]:
    """Assemble a minimal Standard JSON Input from contract metadata.

    Args:
        project_dir: Foundry project root; declared sources are relative to it.
        metadata: Decoded metadata of the target contract.

    Returns:
        Standard JSON Input as an ordered dictionary.

    Raises:
        MalformedArtifactError: If the metadata declares no sources.
        SourceFileMissingError: If a declared source is not on disk.
        SourceReadError: If a declared source exists but cannot be read.
    """
    if not metadata.sources:
        raise MalformedArtifactError("metadata has no sources")

    sources = _read_sources(project_dir, metadata)
    recorded = metadata.settings

    settings: dict[str, Any] = {"optimizer": _optimizer_settings(metadata)}
    # Left out when unset so solc applies its version-appropriate default
    if recorded.evm_version:
        settings["evmVersion"] = recorded.evm_version
    if recorded.via_ir:
        settings["viaIR"] = True
    if recorded.libraries:
        settings["libraries"] = {
            source: dict(sorted(libraries.items()))
            for source, libraries in sorted(recorded.libraries.items())
        }
    if recorded.remappings:
        settings["remappings"] = list(recorded.remappings)
    settings["metadata"] = _metadata_settings(metadata)
    settings["outputSelection"] = VERIFICATION_OUTPUT_SELECTION

    return {
        "language": metadata.language or DEFAULT_LANGUAGE,
        "sources": sources,
        "settings": settings,
    }


def generate_per_contract_standard_json(
    project_dir: Path | str,
    artifact_path: Path | str,
) -> bytes:
    """Build a minimal Standard JSON Input for one contract.

    Only the sources the contract's metadata declares are included, read
    fresh from disk relative to ``project_dir``. Nothing is returned unless
    every step succeeds.

    Args:
        project_dir: Foundry project root.
        artifact_path: Artifact of the contract to verify.

    Returns:
        Standard JSON Input, indented by two spaces.

    Raises:
        ArtifactReadError: If the artifact cannot be read.
        MalformedArtifactError: If the artifact has no metadata, the metadata
            cannot be parsed, or it declares no sources.
        SourceFileMissingError: If a declared source is missing from disk.
        SourceReadError: If a declared source exists but cannot be read.
    """
    project_dir = Path(project_dir)
    artifact_path = Path(artifact_path)

    metadata = require_metadata(load_foundry_artifact(artifact_path), artifact_path)
    standard_input = build_per_contract_input(project_dir, metadata)

    logger.debug(
        "per_contract_input_built",
        artifact=artifact_path.name,
        sources=len(standard_input["sources"]),
    )
    return orjson.dumps(standard_input, option=orjson.OPT_INDENT_2)
