"""Shared pytest fixtures for contrafactory-core tests.

This module provides common fixtures used across unit and integration
tests: structlog capture and fake Foundry projects on disk.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
import structlog

from contrafactory_core.config import ARTIFACTS_DIR_ENV_VAR
from testing.fixtures.foundry import make_foundry_project


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    This fixture ensures structlog outputs to stdout so that capsys
    can capture the output in tests, including debug events.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


@pytest.fixture(autouse=True)
def clear_artifacts_dir_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's CONTRAFACTORY_ARTIFACTS_DIR out of the tests."""
    monkeypatch.delenv(ARTIFACTS_DIR_ENV_VAR, raising=False)


@pytest.fixture
def foundry_project(tmp_path: Path) -> Path:
    """Return a built Foundry project with the default contracts.

    Contains Token and Vault under ``src/``, TokenTest under ``test/`` and
    ERC1967Proxy under ``lib/``, each with sources and one build-info
    record covering all of them.

    Returns:
        Path to the project directory.
    """
    return make_foundry_project(tmp_path / "project")


@pytest.fixture
def empty_project(tmp_path: Path) -> Path:
    """Return a project directory with foundry.toml but no build output."""
    project_dir = tmp_path / "unbuilt"
    project_dir.mkdir()
    (project_dir / "foundry.toml").write_text("[profile.default]\n")
    return project_dir
