"""Bytecode verification for contrafactory-core.

This package provides:
- compare_bytecode: Classify deployed bytecode as a full, partial or no match
- strip_metadata: Remove the compiler's trailing metadata block
- link_bytecode: Substitute library addresses for linker placeholders
"""

from __future__ import annotations

from contrafactory_core.verify.bytecode import METADATA_MARKER, compare_bytecode, strip_metadata
from contrafactory_core.verify.linking import (
    LIBRARY_PLACEHOLDER,
    has_library_placeholders,
    library_placeholder,
    link_bytecode,
)
from contrafactory_core.verify.models import MatchType, VerifyResult

__all__ = [
    "LIBRARY_PLACEHOLDER",
    "METADATA_MARKER",
    "MatchType",
    "VerifyResult",
    "compare_bytecode",
    "has_library_placeholders",
    "library_placeholder",
    "link_bytecode",
    "strip_metadata",
]
