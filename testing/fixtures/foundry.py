"""Factories for fake Foundry projects.

Tests build the on-disk layout ``forge build --build-info`` produces:

    project/
      foundry.toml
      src/Token.sol
      out/Token.sol/Token.json
      out/build-info/<id>.json

Only the fields this package reads are generated; everything else a real
artifact carries (method identifiers, AST, gas estimates) is omitted.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson

# Runtime code with a trailing CBOR metadata block
DEFAULT_RUNTIME_CODE = "6080604052348015600f57600080fd5b50"
DEFAULT_METADATA_TAIL = "a26469706673582212" + "11" * 34 + "64736f6c63430008140033"
DEFAULT_SOLC_LONG_VERSION = "0.8.28+commit.7893614a"

DEFAULT_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "totalSupply",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256", "internalType": "uint256"}],
        "stateMutability": "view",
    }
]


def make_raw_metadata(
    source_path: str,
    contract_name: str,
    *,
    sources: list[str] | None = None,
    license: str = "MIT",
    compiler_version: str = DEFAULT_SOLC_LONG_VERSION,
    optimizer: dict[str, Any] | None = None,
    evm_version: str | None = "paris",
    via_ir: bool | None = None,
    libraries: dict[str, Any] | None = None,
    remappings: list[str] | None = None,
    metadata_settings: dict[str, Any] | None = None,
    with_metadata_settings: bool = True,
    compilation_target: dict[str, str] | None = None,
) -> dict[str, Any]:
    """Create compiler metadata as solc embeds it in an artifact.

    Args:
        source_path: Source of the compilation target.
        contract_name: Name of the compilation target.
        sources: Declared sources. Defaults to ``[source_path]``.
        license: SPDX license recorded for every declared source.
        compiler_version: Long compiler version.
        optimizer: Optimizer settings. Defaults to enabled with 200 runs.
        evm_version: EVM version, None to omit.
        via_ir: IR pipeline flag, None to omit.
        libraries: Linked libraries (flat or nested form), None to omit.
        remappings: Import remappings, None to omit.
        metadata_settings: ``settings.metadata``. Defaults to ipfs hashing.
        with_metadata_settings: Set to False to omit ``settings.metadata``.
        compilation_target: Overrides the single ``source_path: contract_name``
            target.

    Returns:
        Metadata dictionary (serialize it for ``rawMetadata``).
    """
    declared = sources if sources is not None else [source_path]
    settings: dict[str, Any] = {
        "compilationTarget": (
            compilation_target
            if compilation_target is not None
            else {source_path: contract_name}
        ),
        "optimizer": optimizer if optimizer is not None else {"enabled": True, "runs": 200},
        "remappings": remappings or [],
        "libraries": libraries or {},
    }
    if with_metadata_settings:
        settings["metadata"] = (
            metadata_settings if metadata_settings is not None else {"bytecodeHash": "ipfs"}
        )
    if evm_version is not None:
        settings["evmVersion"] = evm_version
    if via_ir is not None:
        settings["viaIR"] = via_ir

    return {
        "compiler": {"version": compiler_version},
        "language": "Solidity",
        "output": {"abi": DEFAULT_ABI, "devdoc": {}, "userdoc": {}},
        "settings": settings,
        "sources": {
            path: {
                "keccak256": "0x" + "ab" * 32,
                "license": license,
                "urls": [f"dweb:/ipfs/{path}"],
            }
            for path in declared
        },
        "version": 1,
    }


def make_artifact(
    source_path: str,
    contract_name: str,
    *,
    bytecode: str | None = None,
    deployed_bytecode: str | None = None,
    raw_metadata: dict[str, Any] | str | None = None,
    include_metadata: bool = True,
    **metadata_kwargs: Any,
) -> dict[str, Any]:
    """Create a Foundry artifact dictionary.

    Args:
        source_path: Source of the contract.
        contract_name: Contract name.
        bytecode: Creation bytecode. Defaults to runtime code plus metadata.
            Pass ``"0x"`` for an interface.
        deployed_bytecode: Runtime bytecode. Defaults to ``bytecode``.
        raw_metadata: Metadata to embed (dict is serialized, str is embedded
            as-is). Defaults to make_raw_metadata(source_path, contract_name).
        include_metadata: Set to False to omit ``rawMetadata`` entirely.
        **metadata_kwargs: Forwarded to make_raw_metadata().

    Returns:
        Artifact dictionary as written under ``out/``.
    """
    code = bytecode if bytecode is not None else "0x" + DEFAULT_RUNTIME_CODE + DEFAULT_METADATA_TAIL
    runtime = deployed_bytecode if deployed_bytecode is not None else code

    artifact: dict[str, Any] = {
        "abi": DEFAULT_ABI,
        "bytecode": {"object": code, "sourceMap": "", "linkReferences": {}},
        "deployedBytecode": {"object": runtime, "sourceMap": "", "linkReferences": {}},
        "storageLayout": {"storage": [], "types": {}},
    }
    if include_metadata:
        if raw_metadata is None:
            raw_metadata = make_raw_metadata(source_path, contract_name, **metadata_kwargs)
        if isinstance(raw_metadata, dict):
            raw_metadata = orjson.dumps(raw_metadata).decode("utf-8")
        artifact["rawMetadata"] = raw_metadata
    return artifact


def make_build_info(
    build_id: str,
    contracts: dict[str, list[str]],
    *,
    solc_long_version: str = DEFAULT_SOLC_LONG_VERSION,
    extra_input: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Create a build-info record for one compiler invocation.

    Args:
        build_id: Record identifier.
        contracts: source path -> contract names compiled from it.
        solc_long_version: Long compiler version.
        extra_input: Additional top-level input keys (Foundry adds e.g.
            ``allowPaths``).

    Returns:
        Build-info dictionary as written under ``out/build-info/``.
    """
    standard_input: dict[str, Any] = {
        "language": "Solidity",
        "sources": {path: {"content": f"// {path}\n"} for path in contracts},
        "settings": {
            "optimizer": {"enabled": True, "runs": 200},
            "outputSelection": {"*": {"*": ["abi"]}},
        },
    }
    standard_input.update(extra_input or {})

    return {
        "id": build_id,
        "_format": "ethers-rs-sol-build-info-1",
        "solcVersion": solc_long_version.split("+", 1)[0],
        "solcLongVersion": solc_long_version,
        "input": standard_input,
        "output": {
            "contracts": {
                path: {name: {"abi": []} for name in names} for path, names in contracts.items()
            },
            "sources": {},
        },
    }


def write_json(path: Path, data: Any) -> Path:
    """Write a JSON file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(orjson.dumps(data))
    return path


def write_artifact(
    project_dir: Path,
    source_path: str,
    contract_name: str,
    *,
    artifacts_dir: str = "out",
    artifact: dict[str, Any] | None = None,
    **kwargs: Any,
) -> Path:
    """Write an artifact to ``out/{Source}.sol/{Contract}.json``.

    Args:
        project_dir: Project root.
        source_path: Source of the contract; its file name picks the
            artifact directory.
        contract_name: Contract name.
        artifacts_dir: Output directory name.
        artifact: Prebuilt artifact. Defaults to make_artifact(**kwargs).
        **kwargs: Forwarded to make_artifact().

    Returns:
        Path of the written artifact.
    """
    if artifact is None:
        artifact = make_artifact(source_path, contract_name, **kwargs)
    path = project_dir / artifacts_dir / Path(source_path).name / f"{contract_name}.json"
    return write_json(path, artifact)


def write_build_info(
    project_dir: Path,
    build_id: str,
    contracts: dict[str, list[str]],
    *,
    artifacts_dir: str = "out",
    **kwargs: Any,
) -> Path:
    """Write a build-info record to ``out/build-info/{build_id}.json``."""
    path = project_dir / artifacts_dir / "build-info" / f"{build_id}.json"
    return write_json(path, make_build_info(build_id, contracts, **kwargs))


def write_source(project_dir: Path, source_path: str, content: str | None = None) -> Path:
    """Write a Solidity source file."""
    path = project_dir / source_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        content
        if content is not None
        else f"// SPDX-License-Identifier: MIT\npragma solidity ^0.8.0;\n// {source_path}\n"
    )
    return path


def make_foundry_project(
    project_dir: Path,
    contracts: dict[str, list[str]] | None = None,
    *,
    with_build_info: bool = True,
    with_sources: bool = True,
) -> Path:
    """Create a built Foundry project.

    Args:
        project_dir: Directory to populate (created if missing).
        contracts: source path -> contract names. Defaults to a token, a
            vault, a test contract and an OpenZeppelin proxy dependency.
        with_build_info: Whether to write a build-info record.
        with_sources: Whether to write the source files.

    Returns:
        The project directory.
    """
    contracts = contracts or {
        "src/Token.sol": ["Token"],
        "src/Vault.sol": ["Vault"],
        "test/Token.t.sol": ["TokenTest"],
        "lib/openzeppelin-contracts/contracts/proxy/ERC1967/ERC1967Proxy.sol": ["ERC1967Proxy"],
    }

    project_dir.mkdir(parents=True, exist_ok=True)
    (project_dir / "foundry.toml").write_text('[profile.default]\nsrc = "src"\nout = "out"\n')

    for source_path, names in contracts.items():
        if with_sources:
            write_source(project_dir, source_path)
        for name in names:
            write_artifact(project_dir, source_path, name)

    (project_dir / "out" / "build-info").mkdir(parents=True, exist_ok=True)
    if with_build_info:
        write_build_info(project_dir, "a1b2c3", contracts)

    return project_dir
