"""Deployed bytecode comparison.

solc appends a CBOR-encoded metadata block to runtime bytecode. It holds
a hash of the metadata JSON, which covers source paths and comments, so
two builds of identical code can differ only in that tail. Comparison
therefore reports a full match, a partial match (same executable code,
different metadata) or no match.
"""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from contrafactory_core.verify.linking import link_bytecode
from contrafactory_core.verify.models import MatchType, VerifyResult

logger = structlog.get_logger(__name__)

# CBOR map header followed by the "ipfs" key (solc >= 0.6.0)
METADATA_MARKER = bytes.fromhex("a26469706673")

# Big-endian length of the CBOR block, appended after it
METADATA_LENGTH_SIZE = 2

FULL_MATCH_MESSAGE = "Bytecode matches exactly including metadata"
PARTIAL_MATCH_MESSAGE = (
    "Executable code matches, metadata differs "
    "(different source paths, comments, or build environment)"
)
NO_MATCH_MESSAGE = "Bytecode does not match"


def _metadata_start(bytecode: bytes) -> int | None:
    """Offset of the trailing metadata block, or None if the tail is not one."""
    if len(bytecode) < len(METADATA_MARKER) + METADATA_LENGTH_SIZE:
        return None
    length = int.from_bytes(bytecode[-METADATA_LENGTH_SIZE:], "big")
    start = len(bytecode) - METADATA_LENGTH_SIZE - length
    if length < len(METADATA_MARKER) or start < 0:
        return None
    if not bytecode.startswith(METADATA_MARKER, start):
        return None
    return start


def strip_metadata(bytecode: bytes) -> bytes:
    """Remove the trailing metadata block from bytecode.

    The last two bytes give the length of the CBOR block before them. The
    block is removed only when it starts with the metadata marker. Stripping
    repeats while the new tail is again such a block and stops at the first
    tail that is not, so stripping an already stripped buffer is a no-op.
    Metadata of embedded child contracts that is followed by other code is
    left in place.

    Args:
        bytecode: Raw bytecode.

    Returns:
        Bytecode without its metadata tail.

    Example:
        >>> strip_metadata(bytes.fromhex("600f8060" + "a264697066734100" + "0008"))
        b'`\\x0f\\x80`'
    """
    stripped = bytecode
    while True:
        start = _metadata_start(stripped)
        if start is None:
            return stripped
        stripped = stripped[:start]


def _to_bytes(code: bytes | str, libraries: Mapping[str, str] | None = None) -> bytes:
    """Decode ``0x``-prefixed hex (linking it first); anything else is compared as given."""
    if isinstance(code, bytes):
        if not code.startswith(b"0x"):
            return code
        try:
            text = code.decode("ascii")
        except UnicodeDecodeError:
            return code
    else:
        text = code
        if not text.startswith("0x"):
            return text.encode("utf-8")

    body = text[2:]
    if libraries:
        body = link_bytecode(body, libraries)
    try:
        return bytes.fromhex(body)
    except ValueError:
        logger.debug("bytecode_not_hex", length=len(text))
        return code if isinstance(code, bytes) else code.encode("utf-8")


def compare_bytecode(
    deployed: bytes | str,
    artifact: bytes | str,
    libraries: Mapping[str, str] | None = None,
) -> VerifyResult:
    """Compare on-chain bytecode with an artifact's bytecode.

    Args:
        deployed: Bytecode read from the chain, raw or ``0x`` hex.
        artifact: Artifact bytecode, raw or ``0x`` hex (possibly unlinked).
        libraries: Fully qualified library name -> deployed address, used
            to link the artifact before comparing.

    Returns:
        VerifyResult classified as full, partial or none.

    Raises:
        ValueError: If a library address is not 20 bytes of hex.

    Example:
        >>> compare_bytecode(bytes.fromhex("60806040"), "0x60806040").match_type
        <MatchType.FULL: 'full'>
    """
    deployed_code = _to_bytes(deployed)
    artifact_code = _to_bytes(artifact, libraries)

    if deployed_code == artifact_code:
        return VerifyResult(match=True, match_type=MatchType.FULL, message=FULL_MATCH_MESSAGE)

    if strip_metadata(deployed_code) == strip_metadata(artifact_code):
        return VerifyResult(
            match=True,
            match_type=MatchType.PARTIAL,
            message=PARTIAL_MATCH_MESSAGE,
        )

    return VerifyResult(match=False, match_type=MatchType.NONE, message=NO_MATCH_MESSAGE)
