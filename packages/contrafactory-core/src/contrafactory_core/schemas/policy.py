"""Discovery policy: which contracts of a build are publishable.

The policy is an explicit, immutable value passed into every discovery
call. Name patterns match by suffix, prefix or glob; path patterns match
by substring or by a glob whose wildcards do not cross directories.
"""

from __future__ import annotations

from fnmatch import fnmatchcase

from pydantic import BaseModel, ConfigDict, Field

# Contract name patterns excluded unless a project configures its own
DEFAULT_EXCLUDE_PATTERNS: tuple[str, ...] = (
    "Test",  # *Test contracts
    "Script",  # *Script contracts
    "Mock",  # Mock* contracts
    "Deploy",  # Deploy* scripts
    "Setup",  # *Setup test helpers
)

# Primary source tree of a Foundry project
DEFAULT_SOURCE_DIR = "src/"


def _glob_path(source_path: str, pattern: str) -> bool:
    """Match a path glob segment by segment, so wildcards stop at ``/``."""
    path_parts = source_path.split("/")
    pattern_parts = pattern.split("/")
    if len(path_parts) != len(pattern_parts):
        return False
    return all(fnmatchcase(part, glob) for part, glob in zip(path_parts, pattern_parts))


class DiscoveryPolicy(BaseModel):
    """Inclusion and exclusion rules for artifact discovery.

    Attributes:
        contracts: Explicit allow-list of contract names (empty = all).
        exclude: Name patterns (suffix, prefix or glob) to exclude.
        exclude_paths: Source path patterns (substring or glob) to exclude.
        include_dependencies: Contract names outside ``source_dir`` to opt in,
            compared case-insensitively.
        source_dir: Primary source tree prefix.

    Example:
        >>> policy = DiscoveryPolicy(
        ...     exclude=["Test", "Mock"],
        ...     exclude_paths=["proxy"],
        ...     include_dependencies=["TransparentUpgradeableProxy"],
        ... )
        >>> policy.excludes_name("MockToken")
        True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    contracts: tuple[str, ...] = Field(default=(), description="Contracts to include")
    exclude: tuple[str, ...] = Field(default=(), description="Name patterns to exclude")
    exclude_paths: tuple[str, ...] = Field(default=(), description="Path patterns to exclude")
    include_dependencies: tuple[str, ...] = Field(
        default=(),
        description="Dependency contracts to include",
    )
    source_dir: str = Field(default=DEFAULT_SOURCE_DIR, min_length=1)

    @classmethod
    def with_defaults(cls, **overrides: object) -> DiscoveryPolicy:
        """Create a policy that excludes DEFAULT_EXCLUDE_PATTERNS.

        Args:
            **overrides: Field values to set on top of the defaults.

        Returns:
            New DiscoveryPolicy.
        """
        values: dict[str, object] = {"exclude": DEFAULT_EXCLUDE_PATTERNS}
        values.update(overrides)
        return cls.model_validate(values)

    def allows_name(self, name: str) -> bool:
        """Check the explicit allow-list (an empty list allows everything)."""
        return not self.contracts or name in self.contracts

    def excludes_name(self, name: str) -> bool:
        """Check whether a contract name matches any exclusion pattern.

        Args:
            name: Contract name.

        Returns:
            True on the first suffix, prefix or glob match.
        """
        for pattern in self.exclude:
            if name.endswith(pattern) or name.startswith(pattern):
                return True
            if fnmatchcase(name, pattern):
                return True
        return False

    def excludes_path(self, source_path: str) -> bool:
        """Check whether a source path matches any path exclusion pattern.

        Args:
            source_path: Project-relative source path from metadata.

        Returns:
            True on the first substring or glob match.
        """
        for pattern in self.exclude_paths:
            if pattern in source_path:
                return True
            if _glob_path(source_path, pattern):
                return True
        return False

    def in_source_tree(self, source_path: str) -> bool:
        """Whether a source path lives in the primary source tree."""
        return source_path.startswith(self.source_dir)

    def includes_dependency(self, name: str) -> bool:
        """Whether a contract outside the source tree was opted in."""
        lowered = name.casefold()
        return any(dep.casefold() == lowered for dep in self.include_dependencies)
