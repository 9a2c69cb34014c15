"""Unit tests for deployed bytecode comparison."""

from __future__ import annotations

import pytest

from contrafactory_core.verify.bytecode import (
    FULL_MATCH_MESSAGE,
    METADATA_MARKER,
    NO_MATCH_MESSAGE,
    PARTIAL_MATCH_MESSAGE,
    compare_bytecode,
    strip_metadata,
)
from contrafactory_core.verify.linking import library_placeholder
from contrafactory_core.verify.models import MatchType

CODE = "608060405234801561001057600080fd5b50"
# CBOR block: the marker starts it, its length 0x0033 comes last
METADATA_X = "a2646970667358221220" + "aa" * 32 + "64736f6c634300081c0033"
METADATA_Y = "a2646970667358221220" + "bb" * 32 + "64736f6c634300081c0033"
METADATA_CHILD = "a2646970667358221220" + "cc" * 32 + "64736f6c634300081c0033"

# Creation code of a contract a factory deploys, with its own metadata
CHILD = "6080604052348015600e575f80fd5b50" + METADATA_CHILD


class TestStripMetadata:
    """Tests for strip_metadata."""

    def test_without_marker_is_unchanged(self) -> None:
        """Bytecode without metadata is returned as is."""
        code = bytes.fromhex(CODE)
        assert strip_metadata(code) == code

    def test_removes_trailing_block(self) -> None:
        """The block named by the trailing length is removed with the length."""
        code = bytes.fromhex(CODE + METADATA_X)
        assert strip_metadata(code) == bytes.fromhex(CODE)

    def test_length_must_point_at_marker(self) -> None:
        """A trailing length that does not land on the marker strips nothing."""
        code = bytes.fromhex(CODE + METADATA_X[:-4] + "0034")
        assert strip_metadata(code) == code

    def test_marker_inside_code_is_kept(self) -> None:
        """A marker followed by more code is not metadata of this contract."""
        code = bytes.fromhex(CODE + "a26469706673" + CODE)
        assert strip_metadata(code) == code

    def test_block_filling_buffer(self) -> None:
        """A buffer holding only a metadata block strips to empty."""
        assert strip_metadata(METADATA_MARKER + bytes.fromhex("4100" + "0008")) == b""

    def test_short_input(self) -> None:
        """Inputs too short to hold a block are unchanged."""
        assert strip_metadata(b"") == b""
        assert strip_metadata(METADATA_MARKER) == METADATA_MARKER

    def test_stops_before_embedded_child_code(self) -> None:
        """Child creation code and its metadata stay when other code follows them."""
        executable = CODE + CHILD + "600a600b"
        code = bytes.fromhex(executable + METADATA_X)

        assert strip_metadata(code) == bytes.fromhex(executable)

    def test_consecutive_trailing_blocks(self) -> None:
        """A child block directly before the contract's own block is stripped too."""
        code = bytes.fromhex(CODE + "600a600b" + METADATA_CHILD + METADATA_X)
        assert strip_metadata(code) == bytes.fromhex(CODE + "600a600b")

    @pytest.mark.parametrize(
        "hex_code",
        [
            CODE,
            CODE + METADATA_X,
            CODE + CHILD + "600a600b" + METADATA_CHILD + METADATA_X,
            # Marker bytes inside the executable part as well as in the tail
            CODE + "a26469706673" + CODE + METADATA_Y,
            METADATA_X + METADATA_Y,
            "a26469706673" + CODE,
        ],
    )
    def test_idempotent(self, hex_code: str) -> None:
        """Stripping twice equals stripping once."""
        code = bytes.fromhex(hex_code)
        once = strip_metadata(code)
        assert strip_metadata(once) == once


class TestCompareBytecode:
    """Tests for compare_bytecode."""

    def test_exact_match(self) -> None:
        """Identical raw bytecode is a full match."""
        code = bytes([0x60, 0x80, 0x60, 0x40])

        result = compare_bytecode(code, code)

        assert result.match is True
        assert result.match_type is MatchType.FULL
        assert result.message == FULL_MATCH_MESSAGE

    def test_hex_prefixed_artifact(self) -> None:
        """A 0x-prefixed hex artifact is decoded before comparison."""
        deployed = bytes.fromhex(CODE + METADATA_X)

        result = compare_bytecode(deployed, "0x" + CODE + METADATA_X)

        assert result.match_type is MatchType.FULL

    def test_hex_prefixed_artifact_as_bytes(self) -> None:
        """Hex text passed as bytes is decoded too."""
        deployed = bytes.fromhex(CODE)
        assert compare_bytecode(deployed, b"0x" + CODE.encode()).match_type is MatchType.FULL

    def test_hex_deployed_code(self) -> None:
        """Deployed code may also be given as 0x hex."""
        result = compare_bytecode("0x" + CODE, bytes.fromhex(CODE))
        assert result.match_type is MatchType.FULL

    def test_metadata_differs(self) -> None:
        """Same executable code with different metadata is a partial match."""
        deployed = bytes.fromhex(CODE + METADATA_X)

        result = compare_bytecode(deployed, "0x" + CODE + METADATA_Y)

        assert result.match is True
        assert result.match_type is MatchType.PARTIAL
        assert result.message == PARTIAL_MATCH_MESSAGE

    def test_code_differs(self) -> None:
        """Different executable code is no match."""
        deployed = bytes.fromhex("6001" + METADATA_X)

        result = compare_bytecode(deployed, "0x6002" + METADATA_X)

        assert result.match is False
        assert result.match_type is MatchType.NONE
        assert result.message == NO_MATCH_MESSAGE

    def test_factory_code_differs_after_children(self) -> None:
        """Differing code between embedded children is no match, not partial."""
        deployed = bytes.fromhex(CODE + CHILD + "600a600b" + METADATA_CHILD + METADATA_X)
        artifact = "0x" + CODE + CHILD + "6066ffff" + METADATA_CHILD + METADATA_Y

        result = compare_bytecode(deployed, artifact)

        assert result.match is False
        assert result.match_type is MatchType.NONE

    def test_factory_metadata_differs(self) -> None:
        """Identical factory code with a different own metadata tail is partial."""
        executable = CODE + CHILD + "600a600b"
        deployed = bytes.fromhex(executable + METADATA_X)

        result = compare_bytecode(deployed, "0x" + executable + METADATA_Y)

        assert result.match_type is MatchType.PARTIAL

    def test_invalid_hex_is_compared_as_given(self) -> None:
        """Undecodable hex text is compared as raw bytes."""
        result = compare_bytecode(b"0xzz", b"0xzz")
        assert result.match_type is MatchType.FULL

    def test_links_libraries_before_comparing(self) -> None:
        """Library placeholders are replaced with the supplied addresses."""
        math = "src/lib/Math.sol:Math"
        address = "0x" + "AB" * 20
        artifact = "0x" + CODE + "73" + library_placeholder(math) + "5af4"
        deployed = bytes.fromhex(CODE + "73" + "ab" * 20 + "5af4")

        result = compare_bytecode(deployed, artifact, {math: address})

        assert result.match_type is MatchType.FULL

    def test_each_library_gets_its_own_address(self) -> None:
        """Two libraries in one contract are linked independently."""
        math, strings = "src/lib/Math.sol:Math", "src/lib/Strings.sol:Strings"
        artifact = (
            "0x" + CODE + "73" + library_placeholder(math) + "73" + library_placeholder(strings)
        )
        deployed = bytes.fromhex(CODE + "73" + "11" * 20 + "73" + "22" * 20)

        result = compare_bytecode(
            deployed,
            artifact,
            {math: "0x" + "11" * 20, strings: "0x" + "22" * 20},
        )

        assert result.match_type is MatchType.FULL

    def test_unlinked_artifact_does_not_match(self) -> None:
        """Without a library map, placeholders cannot match deployed code."""
        artifact = "0x" + CODE + "73" + library_placeholder("src/lib/Math.sol:Math")
        deployed = bytes.fromhex(CODE + "73" + "11" * 20)

        assert compare_bytecode(deployed, artifact).match_type is MatchType.NONE
