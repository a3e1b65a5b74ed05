"""Unit tests for atomic job file replacement."""

from __future__ import annotations

import stat
from pathlib import Path

import pytest

from launchdeck.kernel import replace_file
from launchdeck.kernel.atomic_write import DEFAULT_FILE_MODE


def _mode(path: Path) -> int:
    return stat.S_IMODE(path.stat().st_mode)


@pytest.mark.unit
def test_replace_file_swaps_content_without_leftovers(tmp_path: Path) -> None:
    """Replacing should leave only the target with the new bytes."""
    target = tmp_path / "com.example.job.plist"
    target.write_bytes(b"old")

    replace_file(target, b"new")

    assert target.read_bytes() == b"new"
    assert [p.name for p in tmp_path.iterdir()] == ["com.example.job.plist"]


@pytest.mark.unit
def test_replace_file_keeps_existing_permissions(tmp_path: Path) -> None:
    """An existing job file should keep its mode across a rewrite."""
    # Arrange - owner-only file
    target = tmp_path / "private.plist"
    target.write_bytes(b"old")
    target.chmod(0o600)

    # Act - rewrite it
    replace_file(target, b"new")

    # Assert - mode untouched
    assert _mode(target) == 0o600


@pytest.mark.unit
def test_replace_file_new_file_gets_default_mode(tmp_path: Path) -> None:
    """New job files should not be group or world writable."""
    target = tmp_path / "fresh.plist"

    replace_file(target, b"<plist/>")

    assert _mode(target) == DEFAULT_FILE_MODE


@pytest.mark.unit
def test_replace_file_cleans_up_on_failure(tmp_path: Path) -> None:
    """A failed rename should leave neither a sibling file nor a change."""
    target = tmp_path / "as_dir"
    (target / "child").mkdir(parents=True)

    with pytest.raises(OSError):
        replace_file(target, b"data")

    assert sorted(p.name for p in tmp_path.iterdir()) == ["as_dir"]
    assert (target / "child").is_dir()
