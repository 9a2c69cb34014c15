"""Artifact discovery for Foundry projects.

Walks ``out/`` and decides which per-contract artifacts are publishable
under a DiscoveryPolicy, and which contracts outside the primary source
tree are available as dependencies.

Walk errors (an unreadable directory) abort discovery. A candidate that
cannot be read or decoded is only excluded: foreign or half-written JSON
inside the output tree must not hide every other artifact.

Candidates are visited in sorted relative-path order, so "first
occurrence wins" deduplication by contract name is deterministic.
"""

from __future__ import annotations

import os
from collections.abc import Iterator, Sequence
from pathlib import Path

import structlog

from contrafactory_core.config import BuildLayout
from contrafactory_core.errors import (
    ConfigurationMissingError,
    DependencyValidationError,
    MalformedArtifactError,
)
from contrafactory_core.foundry.models import CandidateResult, CandidateStatus, DiscoveryReport
from contrafactory_core.foundry.parser import (
    contract_name_from_path,
    load_foundry_artifact,
    require_metadata,
)
from contrafactory_core.schemas.artifact import DependencyInfo
from contrafactory_core.schemas.policy import DiscoveryPolicy

logger = structlog.get_logger(__name__)

# Fuzzy suggestion thresholds
SUGGESTION_MIN_LENGTH = 3
SUGGESTION_MATCH_RATIO = 0.7


def require_out_dir(project_dir: Path, layout: BuildLayout) -> Path:
    """Return the artifacts directory, failing if the project was never built.

    Raises:
        ConfigurationMissingError: If the directory does not exist.
    """
    out_dir = layout.out_dir(project_dir)
    if not out_dir.is_dir():
        raise ConfigurationMissingError(
            f"{layout.artifacts_dir} directory not found",
            missing_path=str(out_dir),
            hint="run 'forge build' first",
        )
    return out_dir


def require_build_info_dir(project_dir: Path, layout: BuildLayout) -> Path:
    """Return the build-info directory, failing if it was not generated.

    Raises:
        ConfigurationMissingError: If the project was built without build-info.
    """
    build_info_dir = layout.build_info_path(project_dir)
    if not build_info_dir.is_dir():
        raise ConfigurationMissingError(
            f"{layout.build_info_dir} directory not found",
            missing_path=str(build_info_dir),
            hint="run 'forge build --build-info' first",
        )
    return build_info_dir


def _raise_walk_error(error: OSError) -> None:
    raise error


def iter_candidate_paths(out_dir: Path, layout: BuildLayout) -> Iterator[Path]:
    """Yield per-contract artifact files under ``out_dir`` in sorted order.

    A candidate is a ``.json`` file whose parent directory ends in the
    per-source-file suffix (``Token.sol/Token.json``). The build-info
    subtree is never entered.

    Args:
        out_dir: Foundry artifacts directory.
        layout: Build layout.

    Yields:
        Candidate artifact paths, sorted by their path relative to ``out_dir``.

    Raises:
        OSError: If a directory cannot be listed.
    """
    candidates: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(out_dir, onerror=_raise_walk_error):
        current = Path(dirpath)
        if current == out_dir and layout.build_info_dir in dirnames:
            dirnames.remove(layout.build_info_dir)

        if not current.name.endswith(layout.source_suffix):
            continue

        candidates.extend(
            current / filename for filename in filenames if filename.endswith(".json")
        )

    yield from sorted(candidates, key=lambda p: p.relative_to(out_dir).as_posix())


def _classify(
    path: Path,
    policy: DiscoveryPolicy,
    seen: dict[str, Path],
) -> CandidateResult:
    """Apply the discovery policy to one candidate."""
    name = contract_name_from_path(path)

    if name in seen:
        return CandidateResult(
            path=path,
            name=name,
            status=CandidateStatus.DUPLICATE,
            reason=f"already included from {seen[name]}",
        )

    if not policy.allows_name(name):
        return CandidateResult(
            path=path,
            name=name,
            status=CandidateStatus.EXCLUDED_BY_POLICY,
            reason="not in contracts allow-list",
        )

    if policy.excludes_name(name):
        return CandidateResult(
            path=path,
            name=name,
            status=CandidateStatus.EXCLUDED_BY_POLICY,
            reason="name matches an exclude pattern",
        )

    try:
        raw = load_foundry_artifact(path)
        if not raw.has_bytecode:
            return CandidateResult(
                path=path,
                name=name,
                status=CandidateStatus.NO_BYTECODE,
                reason="contract has no bytecode",
            )
        source_path = require_metadata(raw, path).compilation_target_path
    except MalformedArtifactError as e:
        return CandidateResult(
            path=path,
            name=name,
            status=CandidateStatus.EXCLUDED_UNREADABLE,
            reason=e.user_message,
        )

    if policy.excludes_path(source_path):
        return CandidateResult(
            path=path,
            name=name,
            status=CandidateStatus.EXCLUDED_BY_POLICY,
            reason="source path matches an exclude_paths pattern",
            source_path=source_path,
        )

    if not policy.in_source_tree(source_path) and not policy.includes_dependency(name):
        return CandidateResult(
            path=path,
            name=name,
            status=CandidateStatus.EXCLUDED_BY_POLICY,
            reason=f"source is outside {policy.source_dir} and not an included dependency",
            source_path=source_path,
        )

    return CandidateResult(
        path=path,
        name=name,
        status=CandidateStatus.INCLUDED,
        source_path=source_path,
    )


def scan_artifacts(
    project_dir: Path | str,
    policy: DiscoveryPolicy,
    layout: BuildLayout | None = None,
) -> DiscoveryReport:
    """Walk the build output and record the outcome of every candidate.

    Args:
        project_dir: Foundry project root.
        policy: Inclusion and exclusion rules.
        layout: Build layout. Defaults to BuildLayout.from_env().

    Returns:
        DiscoveryReport with one CandidateResult per candidate, in walk order.

    Raises:
        ConfigurationMissingError: If ``out/`` or ``out/build-info/`` is missing.
        OSError: If the walk itself fails.
    """
    project_dir = Path(project_dir)
    layout = layout or BuildLayout.from_env()
    log = logger.bind(component="artifact_discovery", project_dir=str(project_dir))

    out_dir = require_out_dir(project_dir, layout)
    require_build_info_dir(project_dir, layout)

    seen: dict[str, Path] = {}
    results: list[CandidateResult] = []
    for path in iter_candidate_paths(out_dir, layout):
        result = _classify(path, policy, seen)
        if result.included:
            seen[result.name] = path
        elif result.status is CandidateStatus.EXCLUDED_UNREADABLE:
            log.debug("artifact_unreadable", artifact=str(path), reason=result.reason)
        results.append(result)

    report = DiscoveryReport(candidates=results)
    log.info(
        "discovery_completed",
        candidates=len(results),
        included=len(report.included_paths),
        unreadable=len(report.with_status(CandidateStatus.EXCLUDED_UNREADABLE)),
    )
    return report


def discover_artifacts(
    project_dir: Path | str,
    policy: DiscoveryPolicy,
    layout: BuildLayout | None = None,
) -> list[Path]:
    """Find the artifact files that are publishable under a policy.

    Args:
        project_dir: Foundry project root.
        policy: Inclusion and exclusion rules.
        layout: Build layout. Defaults to BuildLayout.from_env().

    Returns:
        Ordered artifact paths, at most one per contract name.

    Raises:
        ConfigurationMissingError: If ``out/`` or ``out/build-info/`` is missing.
        OSError: If the walk itself fails.

    Example:
        >>> paths = discover_artifacts(Path("."), DiscoveryPolicy.with_defaults())
        >>> [p.name for p in paths]
        ['Token.json', 'Vault.json']
    """
    return scan_artifacts(project_dir, policy, layout).included_paths


def discover_dependencies(
    project_dir: Path | str,
    policy: DiscoveryPolicy | None = None,
    layout: BuildLayout | None = None,
) -> list[DependencyInfo]:
    """List contracts with code that live outside the primary source tree.

    Only the policy's ``source_dir`` is consulted; name and path patterns
    do not apply. Interfaces (no bytecode) and unreadable artifacts are
    skipped.

    Args:
        project_dir: Foundry project root.
        policy: Supplies the primary source tree. Defaults to DiscoveryPolicy().
        layout: Build layout. Defaults to BuildLayout.from_env().

    Returns:
        Dependency candidates, at most one per contract name.

    Raises:
        ConfigurationMissingError: If ``out/`` is missing.
        OSError: If the walk itself fails.
    """
    project_dir = Path(project_dir)
    policy = policy or DiscoveryPolicy()
    layout = layout or BuildLayout.from_env()

    out_dir = require_out_dir(project_dir, layout)

    deps: list[DependencyInfo] = []
    seen: set[str] = set()
    for path in iter_candidate_paths(out_dir, layout):
        name = contract_name_from_path(path)
        if name in seen:
            continue

        try:
            raw = load_foundry_artifact(path)
            if not raw.has_bytecode:
                continue
            source_path = require_metadata(raw, path).compilation_target_path
        except MalformedArtifactError:
            continue

        if policy.in_source_tree(source_path):
            continue

        seen.add(name)
        deps.append(DependencyInfo(name=name, source_path=source_path))

    logger.debug("dependencies_discovered", project_dir=str(project_dir), count=len(deps))
    return deps


def find_suggestions(requested: str, available: Sequence[DependencyInfo]) -> list[DependencyInfo]:
    """Find dependency names close to a requested one.

    A dependency matches when either lower-cased name contains the other,
    or when at least 70% of the characters match position by position over
    the shorter name (only for names longer than three characters).

    Args:
        requested: Name the user asked for.
        available: Dependency candidates.

    Returns:
        Matching candidates, in input order.
    """
    requested_lower = requested.lower()
    suggestions: list[DependencyInfo] = []

    for dep in available:
        dep_lower = dep.name.lower()

        if requested_lower in dep_lower or dep_lower in requested_lower:
            suggestions.append(dep)
            continue

        min_len = min(len(dep_lower), len(requested_lower))
        if min_len > SUGGESTION_MIN_LENGTH:
            matches = sum(1 for a, b in zip(dep_lower, requested_lower) if a == b)
            if matches / min_len >= SUGGESTION_MATCH_RATIO:
                suggestions.append(dep)

    return suggestions


def validate_dependencies(
    project_dir: Path | str,
    requested: Sequence[str],
    found_paths: Sequence[Path],
    policy: DiscoveryPolicy | None = None,
    layout: BuildLayout | None = None,
) -> None:
    """Check that every requested dependency was discovered.

    Args:
        project_dir: Foundry project root.
        requested: Dependency names the user opted in.
        found_paths: Artifact paths returned by discover_artifacts().
        policy: Supplies the primary source tree for suggestions.
        layout: Build layout.

    Raises:
        DependencyValidationError: For the first requested name with no
            matching artifact. Carries suggestions when the dependency
            candidates could be listed.
    """
    found = {contract_name_from_path(p).lower() for p in found_paths}
    unmatched = [dep for dep in requested if dep.lower() not in found]
    if not unmatched:
        return

    missing = unmatched[0]
    try:
        available = discover_dependencies(project_dir, policy, layout)
    except (ConfigurationMissingError, OSError) as e:
        logger.warning("dependency_listing_failed", requested=missing, error=str(e))
        raise DependencyValidationError(missing, suggestions=[], available=[]) from e

    raise DependencyValidationError(
        missing,
        suggestions=find_suggestions(missing, available),
        available=available,
    )
