"""Canonical records produced from Foundry build output.

These are the models handed to collaborators (the registry CLI and
service): the chain-agnostic Artifact envelope with its EVM payload,
the VerificationInput used to pin a verifier run, and DependencyInfo
for contracts outside the primary source tree.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Chain tag for every artifact produced by this package
EVM_CHAIN = "evm"


class OptimizerConfig(BaseModel):
    """Optimizer settings of a compiled contract.

    Attributes:
        enabled: Whether the optimizer ran.
        runs: Optimizer run count as recorded.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = Field(default=False, description="Optimizer enabled")
    runs: int = Field(default=0, ge=0, description="Optimizer runs")


class EVMCompiler(BaseModel):
    """Compiler settings needed to reproduce a build.

    Attributes:
        version: Compiler version, e.g. "0.8.20+commit.a1b2c3d4".
        optimizer: Optimizer settings.
        evm_version: EVM version target ("paris", "shanghai"), empty if unset.
        via_ir: Whether the IR pipeline was used.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    version: str = Field(default="", description="Compiler version")
    optimizer: OptimizerConfig = Field(default_factory=OptimizerConfig)
    evm_version: str = Field(default="", alias="evmVersion")
    via_ir: bool = Field(default=False, alias="viaIR")


class EVMArtifact(BaseModel):
    """EVM-specific contract data.

    Attributes:
        source_path: Project-relative source file of the contract.
        license: SPDX license of the first licensed source, if any.
        abi: Contract ABI, kept opaque.
        bytecode: Creation bytecode (hex, ``0x``-prefixed).
        deployed_bytecode: Runtime bytecode (hex, ``0x``-prefixed).
        standard_json_input: Verification input, attached by collaborators.
        storage_layout: Storage layout, kept opaque.
        compiler: Compiler settings.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    source_path: str = Field(default="", alias="sourcePath")
    license: str = Field(default="")
    abi: Any = Field(default=None)
    bytecode: str = Field(..., min_length=1)
    deployed_bytecode: str = Field(default="", alias="deployedBytecode")
    standard_json_input: Any = Field(default=None, alias="standardJsonInput")
    storage_layout: Any = Field(default=None, alias="storageLayout")
    compiler: EVMCompiler = Field(default_factory=EVMCompiler)


class Artifact(BaseModel):
    """A publishable contract, independent of the chain it targets.

    Attributes:
        name: Contract name.
        chain: Chain tag ("evm").
        evm: EVM payload.

    Example:
        >>> artifact = parse_artifact(Path("out/Token.sol/Token.json"))
        >>> artifact.name
        'Token'
        >>> artifact.evm.compiler.optimizer.runs
        200
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Contract name")
    chain: str = Field(default=EVM_CHAIN, description="Chain tag")
    evm: EVMArtifact | None = Field(default=None, description="EVM payload")

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase wire names used by the registry.

        Empty license, standard JSON input and storage layout are omitted.

        Returns:
            JSON-compatible dictionary.
        """
        data = self.model_dump(mode="json", by_alias=True)
        if data["evm"] is None:
            del data["evm"]
            return data

        evm = data["evm"]
        for key in ("license", "standardJsonInput", "storageLayout"):
            if not evm.get(key):
                evm.pop(key, None)
        return data


class VerificationInput(BaseModel):
    """Standard JSON Input plus the exact compiler build to feed it to.

    Attributes:
        standard_json: Serialized Standard JSON Input.
        solc_long_version: Full compiler version, e.g. "0.8.28+commit.7893614a".
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    standard_json: bytes = Field(..., description="Serialized Standard JSON Input")
    solc_long_version: str = Field(default="", description="Full compiler version")


class DependencyInfo(BaseModel):
    """A contract with code that lives outside the primary source tree.

    Attributes:
        name: Contract name.
        source_path: Project-relative source path (e.g. "lib/oz/ERC1967Proxy.sol").
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1)
    source_path: str = Field(default="")
