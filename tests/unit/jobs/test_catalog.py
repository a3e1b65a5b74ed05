"""Unit tests for catalog filtering and snapshot replacement."""

from __future__ import annotations

import pytest

from launchdeck.jobs import ALL_SOURCES, JobCatalog, JobSource
from tests.unit.fakes import make_summary


def _catalog() -> JobCatalog:
    catalog = JobCatalog()
    catalog.replace(
        [
            make_summary("com.example.running-agent"),
            make_summary("com.apple.sys", source=JobSource.SYSTEM_DAEMON),
        ]
    )
    return catalog


@pytest.mark.unit
def test_visible_filters_by_label_substring() -> None:
    """Search should match label substrings across all sources."""
    # Arrange - two jobs, search "run", all sources
    catalog = _catalog()
    catalog.search = "run"
    catalog.source_filter = ALL_SOURCES

    # Act - compute visible rows
    visible = catalog.visible()

    # Assert - only the running agent
    assert [item.label for item in visible] == ["com.example.running-agent"]


@pytest.mark.unit
def test_visible_search_is_case_insensitive() -> None:
    """Search should ignore case."""
    catalog = _catalog()
    catalog.search = "APPLE"

    assert [item.label for item in catalog.visible()] == ["com.apple.sys"]


@pytest.mark.unit
def test_visible_filters_by_source() -> None:
    """Source filter should match exactly."""
    catalog = _catalog()
    catalog.source_filter = JobSource.USER_AGENT

    assert [item.label for item in catalog.visible()] == [
        "com.example.running-agent"
    ]


@pytest.mark.unit
def test_empty_filters_show_everything_sorted() -> None:
    """No filters should return the whole snapshot ordered by label."""
    catalog = _catalog()

    assert [item.label for item in catalog.visible()] == [
        "com.apple.sys",
        "com.example.running-agent",
    ]


@pytest.mark.unit
def test_replace_swaps_snapshot_without_touching_old_tuple() -> None:
    """Replacing should leave previously read snapshots intact."""
    # Arrange - hold a reference to the current snapshot
    catalog = _catalog()
    before = catalog.jobs

    # Act - replace with a single job
    catalog.replace([make_summary("com.example.other")])

    # Assert - old tuple unchanged, new tuple visible
    assert len(before) == 2
    assert [item.label for item in catalog.jobs] == ["com.example.other"]
    assert catalog.find("com.apple.sys") is None
    assert catalog.find("com.example.other") is not None
