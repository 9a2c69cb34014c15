"""Custom pytest marker definitions for contrafactory.

Markers are registered in pyproject.toml ([tool.pytest.ini_options]).

Markers:
    integration: Tests that build a complete fake Foundry project on disk
    requirement(id): Links a test to the behaviour it verifies

Usage:
    @pytest.mark.integration
    def test_publish_flow(tmp_path):
        ...

    @pytest.mark.requirement("discovery-dedup")
    def test_first_occurrence_wins():
        ...

Run specific markers:
    pytest -m "not integration"    # Unit tests only
    pytest -m integration          # Only integration tests
"""

from __future__ import annotations

INTEGRATION = "integration"
REQUIREMENT = "requirement"

REGISTERED_MARKERS = (INTEGRATION, REQUIREMENT)
