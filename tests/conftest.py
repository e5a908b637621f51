"""Shared pytest fixtures for the test suite."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from homer.workflow import ReleaseWorkflow, Settings


def write_package_json(directory: Path, version: str, indent: int = 2, **extra: object) -> Path:
    """Write a minimal package.json into ``directory`` and return its path."""
    path = directory / "package.json"
    data = {"name": "demo", "version": version, **extra}
    path.write_text(json.dumps(data, indent=indent) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def mock_vcs() -> MagicMock:
    """Create a mock GitRepository sitting on the main branch."""
    vcs = MagicMock()
    vcs.current_branch.return_value = "main"
    vcs.is_dirty.return_value = False
    return vcs


@pytest.fixture
def mock_manifest() -> MagicMock:
    """Create a mock PackageManifest whose writes return npm-style tag names."""
    manifest = MagicMock()
    manifest.read_version.return_value = "1.3.0-dev.2"
    manifest.write_version.side_effect = lambda version: f"v{version}"
    return manifest


@pytest.fixture
def mock_prompt() -> MagicMock:
    """Create a mock prompt that always confirms."""
    prompt = MagicMock()
    prompt.confirm.return_value = True
    return prompt


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def workflow(
    mock_vcs: MagicMock,
    mock_manifest: MagicMock,
    mock_prompt: MagicMock,
    settings: Settings,
) -> ReleaseWorkflow:
    """ReleaseWorkflow wired to mock collaborators."""
    return ReleaseWorkflow(mock_vcs, mock_manifest, mock_prompt, settings)


@pytest.fixture
def sample_branches() -> dict[str, list[str]]:
    """Sample branch names for testing."""
    return {
        "release": [
            "release/1.0",
            "release/1.2",
            "release/0.1",
            "release/10.20",
        ],
        "other": [
            "feature/login",
            "bugfix/JIRA-12",
            "develop",
            "releases/1.2",
            "hotfix/1.2/patch",
        ],
    }
