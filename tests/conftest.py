"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from launchdeck.config import LaunchdeckConfig, LaunchdPathsSettings


@pytest.fixture
def launchd_paths(tmp_path: Path) -> LaunchdPathsSettings:
    """Temporary launchd directory layout; system dirs exist but start empty."""
    paths = LaunchdPathsSettings(
        user_agents_dir=str(tmp_path / "LaunchAgents"),
        system_agents_dir=str(tmp_path / "system" / "LaunchAgents"),
        system_daemons_dir=str(tmp_path / "system" / "LaunchDaemons"),
    )
    for directory in (
        paths.resolved_user_agents_dir(),
        paths.resolved_system_agents_dir(),
        paths.resolved_system_daemons_dir(),
    ):
        directory.mkdir(parents=True)
    return paths


@pytest.fixture
def launchdeck_config(launchd_paths: LaunchdPathsSettings) -> LaunchdeckConfig:
    """Global config pointed at the temporary launchd layout."""
    return LaunchdeckConfig(paths=launchd_paths)
