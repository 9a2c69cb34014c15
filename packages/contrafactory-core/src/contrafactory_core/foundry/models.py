"""Discovery result models.

Every candidate artifact found while walking the build output gets a
tagged outcome, so callers can explain why a contract was (not) picked
up instead of only receiving the final list.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class CandidateStatus(str, Enum):
    """Outcome of one candidate artifact.

    Attributes:
        INCLUDED: Artifact satisfies the policy
        EXCLUDED_BY_POLICY: Rejected by an allow-list, pattern or source tree rule
        EXCLUDED_UNREADABLE: Artifact or its metadata could not be read
        NO_BYTECODE: Interface or abstract contract
        DUPLICATE: A contract with the same name was already included
    """

    INCLUDED = "included"
    EXCLUDED_BY_POLICY = "excluded_by_policy"
    EXCLUDED_UNREADABLE = "excluded_unreadable"
    NO_BYTECODE = "no_bytecode"
    DUPLICATE = "duplicate"


class CandidateResult(BaseModel):
    """Outcome of one candidate artifact.

    Attributes:
        path: Artifact file.
        name: Contract name (file stem).
        status: Outcome.
        reason: Why the candidate was excluded (empty when included).
        source_path: Source path from metadata, when it was read.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: Path = Field(..., description="Artifact file")
    name: str = Field(..., min_length=1, description="Contract name")
    status: CandidateStatus = Field(..., description="Outcome")
    reason: str = Field(default="", description="Exclusion reason")
    source_path: str = Field(default="", description="Source path from metadata")

    @property
    def included(self) -> bool:
        """Whether the candidate made it into the result."""
        return self.status is CandidateStatus.INCLUDED


class DiscoveryReport(BaseModel):
    """All candidate outcomes of one discovery run, in walk order.

    Example:
        >>> report = scan_artifacts(Path("."), DiscoveryPolicy.with_defaults())
        >>> [c.name for c in report.candidates if not c.included]
        ['TokenTest', 'IToken']
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    candidates: list[CandidateResult] = Field(default_factory=list)

    @property
    def included_paths(self) -> list[Path]:
        """Paths of included artifacts, in walk order."""
        return [c.path for c in self.candidates if c.included]

    def with_status(self, status: CandidateStatus) -> list[CandidateResult]:
        """Candidates with the given outcome."""
        return [c for c in self.candidates if c.status is status]
