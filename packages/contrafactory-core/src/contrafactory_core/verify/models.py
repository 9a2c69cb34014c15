"""Bytecode verification result models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MatchType(str, Enum):
    """How closely deployed bytecode matches an artifact.

    Attributes:
        FULL: Identical, including the embedded metadata
        PARTIAL: Identical executable code, metadata differs
        NONE: Executable code differs
    """

    FULL = "full"
    PARTIAL = "partial"
    NONE = "none"


class VerifyResult(BaseModel):
    """Outcome of comparing deployed bytecode to an artifact.

    Attributes:
        match: Whether the executable code matches.
        match_type: Match classification.
        message: Human-readable explanation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    match: bool = Field(..., description="Executable code matches")
    match_type: MatchType = Field(..., description="Match classification")
    message: str = Field(..., description="Human-readable explanation")
