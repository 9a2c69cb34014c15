"""Shared test fixtures for contrafactory packages.

This module provides factory functions for building fake Foundry build
output on disk.

Exports:
    Foundry fixtures:
        make_artifact: Factory for ``out/{Source}.sol/{Contract}.json`` dicts
        make_raw_metadata: Factory for embedded compiler metadata
        make_build_info: Factory for ``out/build-info/{id}.json`` records
        make_foundry_project: Create a complete built project
        write_artifact / write_build_info / write_source: Write single files

Usage:
    ```python
    from testing.fixtures import make_foundry_project, write_artifact

    project = make_foundry_project(tmp_path / "project")
    write_artifact(project, "src/Extra.sol", "Extra")
    ```
"""

from __future__ import annotations

from testing.fixtures.foundry import (
    DEFAULT_METADATA_TAIL,
    DEFAULT_RUNTIME_CODE,
    DEFAULT_SOLC_LONG_VERSION,
    make_artifact,
    make_build_info,
    make_foundry_project,
    make_raw_metadata,
    write_artifact,
    write_build_info,
    write_json,
    write_source,
)

__all__ = [
    "DEFAULT_METADATA_TAIL",
    "DEFAULT_RUNTIME_CODE",
    "DEFAULT_SOLC_LONG_VERSION",
    "make_artifact",
    "make_build_info",
    "make_foundry_project",
    "make_raw_metadata",
    "write_artifact",
    "write_build_info",
    "write_json",
    "write_source",
]
