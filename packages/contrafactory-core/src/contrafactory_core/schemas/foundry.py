"""Models for the JSON files Foundry writes under ``out/``.

These mirror externally produced formats, so they ignore unknown keys
rather than rejecting them:

- FoundryArtifact: ``out/{Source}.sol/{Contract}.json``, one per contract
- FoundryMetadata: the compiler metadata embedded as ``rawMetadata``
- BuildInfo: ``out/build-info/{id}.json``, one per compiler invocation

Field names follow Python conventions; the camelCase wire names are
declared as aliases.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from contrafactory_core.errors import MalformedArtifactError

# Foundry-produced JSON: tolerate additional keys, never mutate
FOREIGN_MODEL_CONFIG = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class LinkReference(BaseModel):
    """Position of one library placeholder inside unlinked bytecode.

    Attributes:
        start: Byte offset of the placeholder.
        length: Placeholder length in bytes (20).
    """

    model_config = FOREIGN_MODEL_CONFIG

    start: int = Field(..., ge=0, description="Byte offset of the placeholder")
    length: int = Field(..., ge=0, description="Placeholder length in bytes")


class BytecodeObject(BaseModel):
    """Bytecode section of a Foundry artifact.

    Attributes:
        object: Hex string, ``0x``-prefixed. Empty or ``"0x"`` for interfaces.
        source_map: Compressed solc source map.
        link_references: source path -> library name -> placeholder positions.
    """

    model_config = FOREIGN_MODEL_CONFIG

    object: str = Field(default="", description="Hex encoded bytecode")
    source_map: str | None = Field(default=None, alias="sourceMap")
    link_references: dict[str, dict[str, list[LinkReference]]] = Field(
        default_factory=dict,
        alias="linkReferences",
        description="Library placeholder positions",
    )

    @field_validator("object", mode="before")
    @classmethod
    def null_object_is_empty(cls, v: Any) -> Any:
        """Treat a JSON null bytecode object as empty."""
        return "" if v is None else v

    @property
    def is_empty(self) -> bool:
        """True for interfaces and abstract contracts (no code)."""
        return self.object in ("", "0x")


class FoundryArtifact(BaseModel):
    """One compiled contract as written by ``forge build``.

    Attributes:
        abi: Contract ABI, kept opaque.
        bytecode: Creation bytecode.
        deployed_bytecode: Runtime bytecode.
        storage_layout: Storage layout, kept opaque.
        raw_metadata: Compiler metadata as an embedded JSON string.
        metadata: Foundry's pre-parsed copy of the metadata (unused here).
    """

    model_config = FOREIGN_MODEL_CONFIG

    abi: Any = Field(default=None, description="Contract ABI")
    bytecode: BytecodeObject = Field(default_factory=BytecodeObject)
    deployed_bytecode: BytecodeObject = Field(
        default_factory=BytecodeObject,
        alias="deployedBytecode",
    )
    storage_layout: Any = Field(default=None, alias="storageLayout")
    raw_metadata: str | None = Field(default=None, alias="rawMetadata")
    metadata: Any = Field(default=None)

    @field_validator("bytecode", "deployed_bytecode", mode="before")
    @classmethod
    def null_bytecode_is_empty(cls, v: Any) -> Any:
        """Treat a JSON null bytecode section as empty."""
        return {} if v is None else v

    @property
    def has_bytecode(self) -> bool:
        """False for interfaces and abstract contracts."""
        return not self.bytecode.is_empty


class CompilerMeta(BaseModel):
    """Compiler identification inside metadata."""

    model_config = FOREIGN_MODEL_CONFIG

    version: str = Field(default="", description="Long compiler version")


class OptimizerMeta(BaseModel):
    """Optimizer settings recorded in metadata.

    Attributes:
        enabled: Whether the optimizer ran.
        runs: Optimizer run count. Foundry omits the default of 200, so 0
            may appear when the optimizer is enabled.
    """

    model_config = FOREIGN_MODEL_CONFIG

    enabled: bool = False
    runs: int = 0


class MetadataSettings(BaseModel):
    """Metadata-encoding settings (``settings.metadata``).

    Attributes:
        bytecode_hash: Hash scheme embedded in bytecode ("ipfs", "bzzr1", "none").
        use_literal_content: Whether sources were embedded literally.
        append_cbor: Whether the CBOR metadata block was appended. None when
            the compiler did not record the flag.
    """

    model_config = FOREIGN_MODEL_CONFIG

    bytecode_hash: str = Field(default="", alias="bytecodeHash")
    use_literal_content: bool = Field(default=False, alias="useLiteralContent")
    append_cbor: bool | None = Field(default=None, alias="appendCBOR")


class SettingsMeta(BaseModel):
    """Compiler settings recorded in metadata.

    Attributes:
        compilation_target: source path -> contract name (one entry).
        evm_version: EVM version target, empty when unset.
        libraries: source path -> library name -> address.
        metadata: Metadata-encoding settings, None when not recorded.
        optimizer: Optimizer settings.
        remappings: Import remappings.
        via_ir: Whether the IR pipeline was used.
    """

    model_config = FOREIGN_MODEL_CONFIG

    compilation_target: dict[str, str] = Field(
        default_factory=dict,
        alias="compilationTarget",
    )
    evm_version: str = Field(default="", alias="evmVersion")
    libraries: dict[str, dict[str, str]] = Field(default_factory=dict)
    metadata: MetadataSettings | None = Field(default=None)
    optimizer: OptimizerMeta = Field(default_factory=OptimizerMeta)
    remappings: list[str] = Field(default_factory=list)
    via_ir: bool = Field(default=False, alias="viaIR")

    @field_validator("libraries", mode="before")
    @classmethod
    def nest_flat_libraries(cls, v: Any) -> Any:
        """Convert solc's flat ``{"path:Lib": addr}`` form into the nested form.

        Compiler metadata records libraries keyed by fully qualified name
        while Standard JSON Input expects ``{path: {name: addr}}``.

        Args:
            v: Raw libraries value.

        Returns:
            Libraries keyed by source path, then library name.
        """
        if not isinstance(v, dict):
            return {} if v is None else v

        nested: dict[str, Any] = {}
        for key, value in v.items():
            if isinstance(value, str):
                source, _, name = key.rpartition(":")
                nested.setdefault(source, {})[name] = value
            elif isinstance(value, dict):
                nested.setdefault(key, {}).update(value)
            else:
                # Leave it for field validation to reject
                nested[key] = value
        return nested


class SourceMeta(BaseModel):
    """One declared source of a compilation unit."""

    model_config = FOREIGN_MODEL_CONFIG

    keccak256: str = ""
    license: str = ""
    urls: list[str] = Field(default_factory=list)


class FoundryMetadata(BaseModel):
    """Parsed ``rawMetadata`` of a Foundry artifact.

    Attributes:
        compiler: Compiler identification.
        language: Source language ("Solidity", "Yul"), empty if absent.
        output: ABI/devdoc/userdoc, kept opaque.
        settings: Compiler settings.
        sources: Declared sources of the compilation unit, in declared order.
        version: Metadata format version.
    """

    model_config = FOREIGN_MODEL_CONFIG

    compiler: CompilerMeta = Field(default_factory=CompilerMeta)
    language: str = ""
    output: dict[str, Any] = Field(default_factory=dict)
    settings: SettingsMeta = Field(default_factory=SettingsMeta)
    sources: dict[str, SourceMeta] = Field(default_factory=dict)
    version: int = 0

    @property
    def compilation_target_path(self) -> str:
        """Source path of the compilation target.

        Returns:
            The single source path, or "" when no target is recorded.

        Raises:
            MalformedArtifactError: If more than one target is recorded.
        """
        targets = self.settings.compilation_target
        if len(targets) > 1:
            raise MalformedArtifactError(
                "metadata declares more than one compilation target",
                internal_details=f"compilationTarget={targets!r}",
            )
        return next(iter(targets), "")

    @property
    def first_license(self) -> str:
        """First non-empty license among declared sources."""
        for source in self.sources.values():
            if source.license:
                return source.license
        return ""


class BuildInfo(BaseModel):
    """One compiler invocation saved by ``forge build --build-info``.

    Attributes:
        id: Build identifier (the file stem).
        solc_version: Short compiler version, e.g. "0.8.28".
        solc_long_version: Full version, e.g. "0.8.28+commit.7893614a".
        input: Standard JSON Input fed to the compiler.
        output: Compiler output; only ``contracts`` is inspected.
    """

    model_config = FOREIGN_MODEL_CONFIG

    id: str = ""
    solc_version: str = Field(default="", alias="solcVersion")
    solc_long_version: str = Field(default="", alias="solcLongVersion")
    input: dict[str, Any] = Field(..., description="Standard JSON Input")
    output: Any = Field(default=None, description="Compiler output")

    def produced(self, source_path: str, contract_name: str) -> bool:
        """Check whether this invocation compiled ``source_path:contract_name``.

        Args:
            source_path: Project-relative source path.
            contract_name: Contract name within that source.

        Returns:
            True if ``output.contracts[source_path][contract_name]`` exists.
        """
        if not isinstance(self.output, dict):
            return False
        contracts = self.output.get("contracts")
        if not isinstance(contracts, dict):
            return False
        source_contracts = contracts.get(source_path)
        if not isinstance(source_contracts, dict):
            return False
        return contract_name in source_contracts
