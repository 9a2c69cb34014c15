"""Shared testing infrastructure for contrafactory packages.

This package provides reusable test fixtures and marker definitions for
testing across packages.

Modules:
    fixtures: Factories for fake Foundry projects and build output
    markers: Custom pytest marker definitions

Usage:
    In your conftest.py or test module:
        from testing.fixtures import make_foundry_project, write_artifact
"""

from __future__ import annotations
