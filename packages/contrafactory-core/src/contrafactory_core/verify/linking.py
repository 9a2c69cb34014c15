"""Library linking for unlinked bytecode.

solc leaves a 40-character placeholder wherever a contract calls an
external library whose address is only known at deploy time:
``__$`` + the first 34 hex characters of keccak256(fully qualified name)
+ ``$__``. Placeholders are not valid hex, so linking works on the hex
text of the bytecode.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

import structlog
from Crypto.Hash import keccak

logger = structlog.get_logger(__name__)

LIBRARY_PLACEHOLDER = re.compile(r"__\$[a-f0-9]{34}\$__")
LIBRARY_PLACEHOLDER_BYTES = re.compile(rb"__\$[a-f0-9]{34}\$__")

ADDRESS_HEX_LENGTH = 40
_ADDRESS_PATTERN = re.compile(r"[0-9a-f]{40}")


def library_placeholder(fully_qualified_name: str) -> str:
    """Placeholder solc emits for a library.

    Args:
        fully_qualified_name: ``<source path>:<library name>``.

    Returns:
        The 40-character placeholder.

    Example:
        >>> len(library_placeholder("src/lib/Math.sol:Math"))
        40
    """
    digest = keccak.new(digest_bits=256, data=fully_qualified_name.encode("utf-8"))
    return f"__${digest.hexdigest()[:34]}$__"


def _normalize_address(name: str, address: str) -> str:
    normalized = address.lower().removeprefix("0x")
    if not _ADDRESS_PATTERN.fullmatch(normalized):
        raise ValueError(f"invalid address for library {name}: {address!r}")
    return normalized


def link_bytecode(hex_text: str, libraries: Mapping[str, str]) -> str:
    """Replace library placeholders with deployed addresses.

    Each library is matched by its own placeholder, so several libraries
    can be linked into the same bytecode.

    Args:
        hex_text: Bytecode as hex text, with or without ``0x``.
        libraries: Fully qualified library name -> address.

    Returns:
        Linked hex text (the ``0x`` prefix is kept if present).

    Raises:
        ValueError: If an address is not 20 bytes of hex.
    """
    linked = hex_text
    for name, address in libraries.items():
        linked = linked.replace(library_placeholder(name), _normalize_address(name, address))

    unresolved = sorted(set(LIBRARY_PLACEHOLDER.findall(linked)))
    if unresolved:
        logger.warning(
            "unresolved_library_placeholders",
            placeholders=unresolved,
            libraries=sorted(libraries),
        )
    return linked


def has_library_placeholders(bytecode: bytes | str) -> bool:
    """Whether bytecode (hex text or raw bytes) still needs linking."""
    if isinstance(bytecode, str):
        return LIBRARY_PLACEHOLDER.search(bytecode) is not None
    return LIBRARY_PLACEHOLDER_BYTES.search(bytecode) is not None
