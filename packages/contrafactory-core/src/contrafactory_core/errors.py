"""Custom exception hierarchy for contrafactory-core.

This module defines the exception classes raised while reading Foundry
build output:
- ContrafactoryError: Base exception for all contrafactory errors
- ConfigurationMissingError: Required build directories are absent
- NotFoundError: A lookup (build-info, bytecode, source file) found nothing
- SourceReadError: A declared source exists but cannot be read
- MalformedArtifactError: An artifact, its metadata or a build record is invalid
- DependencyValidationError: A requested dependency has no matching artifact

User-facing messages are safe to display. Technical details (decoder
errors, absolute paths) are logged via structlog and kept out of the
message itself.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from contrafactory_core.schemas.artifact import DependencyInfo

logger = structlog.get_logger(__name__)

# Maximum number of available dependencies listed when nothing is a close match
MAX_LISTED_DEPENDENCIES = 10


class ContrafactoryError(Exception):
    """Base exception for contrafactory-core.

    Args:
        user_message: Safe message to display to the user.
        internal_details: Optional technical details. Logged, never
            included in the message.

    Example:
        >>> raise ContrafactoryError(
        ...     "Artifact could not be read",
        ...     internal_details="orjson: unexpected character at line 1 column 1",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize ContrafactoryError with user message and optional details.

        Args:
            user_message: Safe message to display to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message
        self.internal_details = internal_details

        if internal_details:
            logger.debug(
                "contrafactory_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class ConfigurationMissingError(ContrafactoryError):
    """Raised when a required build output directory does not exist.

    The message always tells the user which build step to (re)run, so
    "never built" and "built without build-info" read differently.

    Attributes:
        missing_path: Directory that was expected.
        hint: Build command that produces it.

    Example:
        >>> raise ConfigurationMissingError(
        ...     "build-info directory not found",
        ...     missing_path="out/build-info",
        ...     hint="run 'forge build --build-info' first",
        ... )
        # User sees: "build-info directory not found - run 'forge build --build-info' first"
    """

    def __init__(
        self,
        user_message: str,
        *,
        missing_path: str,
        hint: str,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(f"{user_message} - {hint}", internal_details=internal_details)
        self.missing_path = missing_path
        self.hint = hint


class NotFoundError(ContrafactoryError):
    """Raised when a requested build record, bytecode or source is absent."""

    pass


class BuildInfoNotFoundError(NotFoundError):
    """Raised when no build-info record produced the requested contract.

    Attributes:
        contract_name: Contract that was looked up.
        source_path: Source path the record had to contain (may be empty).
    """

    def __init__(self, contract_name: str, source_path: str = "") -> None:
        if source_path:
            message = f"build-info not found for contract {source_path}:{contract_name}"
        else:
            message = f"build-info not found for contract {contract_name}"
        super().__init__(message)
        self.contract_name = contract_name
        self.source_path = source_path


class NoBytecodeError(NotFoundError):
    """Raised when an artifact carries no bytecode.

    Interfaces and abstract contracts compile to an empty (or bare ``0x``)
    bytecode object. Callers treat this as "skip", not as a failure.
    """

    def __init__(self, contract_name: str) -> None:
        super().__init__(f"contract {contract_name} has no bytecode (likely an interface)")
        self.contract_name = contract_name


class SourceFileMissingError(NotFoundError):
    """Raised when a source declared in contract metadata is not on disk.

    Attributes:
        source_path: Project-relative path declared by the metadata.
    """

    def __init__(self, source_path: str, *, internal_details: str | None = None) -> None:
        super().__init__(
            f"reading source {source_path}: file not found",
            internal_details=internal_details,
        )
        self.source_path = source_path


class SourceReadError(ContrafactoryError):
    """Raised when a declared source exists but cannot be read.

    Attributes:
        source_path: Project-relative path declared by the metadata.
    """

    def __init__(
        self,
        source_path: str,
        reason: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(
            f"reading source {source_path}: {reason}",
            internal_details=internal_details,
        )
        self.source_path = source_path


class MalformedArtifactError(ContrafactoryError):
    """Raised when an artifact, its embedded metadata or a build record is invalid.

    Attributes:
        path: File the error relates to (if known).
    """

    def __init__(
        self,
        user_message: str,
        *,
        path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message, internal_details=internal_details)
        self.path = path


class ArtifactReadError(MalformedArtifactError):
    """Raised when an artifact file cannot be read from disk."""

    pass


class DependencyValidationError(ContrafactoryError):
    """Raised when a requested dependency is missing from the build artifacts.

    The message lists close matches (or, failing that, the first few
    available dependency contracts) so the user can correct the name.

    Attributes:
        requested: The dependency name that was not found.
        suggestions: Close matches, possibly empty.
        available: Every dependency candidate found in the build output.

    Example:
        >>> raise DependencyValidationError(
        ...     requested="ERC1967",
        ...     suggestions=[DependencyInfo(name="ERC1967Proxy", source_path="lib/oz/Proxy.sol")],
        ...     available=[],
        ... )
    """

    def __init__(
        self,
        requested: str,
        suggestions: Sequence[DependencyInfo],
        available: Sequence[DependencyInfo],
    ) -> None:
        lines = [f"dependency {requested!r} not found in build artifacts"]
        listed = list(suggestions) or list(available)[:MAX_LISTED_DEPENDENCIES]
        if listed:
            lines.append("")
            lines.append("Did you mean one of these?")
            lines.extend(f"  - {dep.name} ({dep.source_path})" for dep in listed)
            lines.append("")
            lines.append(
                "Run 'contrafactory discover --deps' to see all available dependency contracts."
            )
            lines.append("Make sure the contract has bytecode (interfaces are excluded).")

        super().__init__("\n".join(lines))
        self.requested = requested
        self.suggestions = list(suggestions)
        self.available = list(available)


class ProjectConfigError(ContrafactoryError):
    """Raised when contrafactory.toml cannot be parsed or validated.

    Attributes:
        file_path: Config file that failed.
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(f"{user_message} (in {file_path})", internal_details=internal_details)
        self.file_path = file_path
