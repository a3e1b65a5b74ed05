"""Unit tests for the launchd-backed job boundary."""

from __future__ import annotations

import plistlib
from collections.abc import Sequence
from pathlib import Path

import pytest
from _pytest.monkeypatch import MonkeyPatch

from launchdeck.config import LaunchdeckConfig
from launchdeck.jobs import (
    DaemonAction,
    JobConfig,
    JobError,
    JobErrorCode,
    JobSource,
    JobStatus,
)
from launchdeck.launchd import LaunchdBoundary, LoadedService


class _FakeLaunchctl:
    """Record launchctl calls and serve a fixed loaded list."""

    def __init__(
        self,
        loaded: Sequence[LoadedService] = (),
        *,
        list_error: JobError | None = None,
    ) -> None:
        self.loaded = list(loaded)
        self.list_error = list_error
        self.calls: list[tuple[str, str]] = []

    async def list_loaded(self) -> list[LoadedService]:
        if self.list_error is not None:
            raise self.list_error
        return self.loaded

    async def bootstrap(self, plist_path: str) -> None:
        self.calls.append(("bootstrap", plist_path))

    async def bootout(self, plist_path: str) -> None:
        self.calls.append(("bootout", plist_path))

    async def kickstart(self, label: str) -> None:
        self.calls.append(("kickstart", label))

    async def enable(self, label: str) -> None:
        self.calls.append(("enable", label))

    async def disable(self, label: str) -> None:
        self.calls.append(("disable", label))


def _write(path: Path, payload: dict[str, object]) -> str:
    """Write a property list fixture and return its path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(plistlib.dumps(payload))
    return str(path)


def _boundary(
    config: LaunchdeckConfig, launchctl: _FakeLaunchctl
) -> LaunchdBoundary:
    return LaunchdBoundary(config, launchctl=launchctl)  # type: ignore[arg-type]


def _user_path(config: LaunchdeckConfig, label: str) -> Path:
    return config.paths.resolved_user_agents_dir() / f"{label}.plist"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_joins_files_with_loaded_state(
    launchdeck_config: LaunchdeckConfig,
) -> None:
    """Summaries should combine file source with launchctl state."""
    # Arrange - running, crashed, unloaded and broken files
    _write(_user_path(launchdeck_config, "b.running"), {"Label": "b.running"})
    _write(_user_path(launchdeck_config, "c.crashed"), {"Label": "c.crashed"})
    _write(_user_path(launchdeck_config, "a.idle"), {"Label": "a.idle"})
    _user_path(launchdeck_config, "broken").write_text("junk", encoding="utf-8")
    _write(
        launchdeck_config.paths.resolved_system_daemons_dir() / "d.sys.plist",
        {"Label": "d.sys"},
    )
    launchctl = _FakeLaunchctl(
        [
            LoadedService(label="b.running", pid=321, last_exit_code=0),
            LoadedService(label="c.crashed", pid=None, last_exit_code=78),
        ]
    )

    # Act - list summaries
    summaries = await _boundary(launchdeck_config, launchctl).list_job_summaries()

    # Assert - broken file skipped, states derived, sorted by label
    by_label = {item.label: item for item in summaries}
    assert [item.label for item in summaries] == [
        "a.idle",
        "b.running",
        "c.crashed",
        "d.sys",
    ]
    assert by_label["a.idle"].status == JobStatus.STOPPED
    assert by_label["b.running"].status == JobStatus.RUNNING
    assert by_label["b.running"].pid == 321
    assert by_label["c.crashed"].status == JobStatus.STOPPED
    assert by_label["c.crashed"].last_exit_code == 78
    assert by_label["d.sys"].source == JobSource.SYSTEM_DAEMON


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_propagates_connection_failure(
    launchdeck_config: LaunchdeckConfig,
) -> None:
    """Listing should fail loudly when launchctl cannot be reached."""
    launchctl = _FakeLaunchctl(
        list_error=JobError(JobErrorCode.CONNECTION_FAILED, "launchctl list failed")
    )

    with pytest.raises(JobError) as excinfo:
        await _boundary(launchdeck_config, launchctl).list_job_summaries()

    assert excinfo.value.code == JobErrorCode.CONNECTION_FAILED


@pytest.mark.unit
@pytest.mark.asyncio
async def test_detail_degrades_to_unknown_status(
    launchdeck_config: LaunchdeckConfig,
) -> None:
    """Detail should still load when runtime state is unavailable."""
    path = _write(
        _user_path(launchdeck_config, "com.example.a"),
        {"Label": "com.example.a", "ProgramArguments": ["/bin/true"]},
    )
    launchctl = _FakeLaunchctl(
        list_error=JobError(JobErrorCode.CONNECTION_FAILED, "launchctl list failed")
    )

    detail = await _boundary(launchdeck_config, launchctl).get_job_detail(path)

    assert detail.status == JobStatus.UNKNOWN
    assert detail.config.argument_vector == ("/bin/true",)
    assert detail.source == JobSource.USER_AGENT


@pytest.mark.unit
@pytest.mark.asyncio
async def test_start_boots_out_then_bootstraps(
    launchdeck_config: LaunchdeckConfig,
) -> None:
    """Start should reload the job from its file."""
    launchctl = _FakeLaunchctl()
    path = str(_user_path(launchdeck_config, "com.example.a"))

    await _boundary(launchdeck_config, launchctl).apply_action(
        DaemonAction.START, path, "com.example.a"
    )

    assert launchctl.calls == [("bootout", path), ("bootstrap", path)]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_system_paths_refuse_lifecycle_commands(
    launchdeck_config: LaunchdeckConfig,
) -> None:
    """System files should be refused even if the gate is bypassed."""
    launchctl = _FakeLaunchctl()
    path = str(launchdeck_config.paths.resolved_system_agents_dir() / "x.plist")

    with pytest.raises(JobError) as excinfo:
        await _boundary(launchdeck_config, launchctl).apply_action(
            DaemonAction.STOP, path, "x"
        )

    assert excinfo.value.code == JobErrorCode.PERMISSION_DENIED
    assert launchctl.calls == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_kickstart_bootstraps_only_when_not_loaded(
    launchdeck_config: LaunchdeckConfig,
) -> None:
    """Kickstart should load unloaded jobs first."""
    launchctl = _FakeLaunchctl([LoadedService(label="loaded")])
    boundary = _boundary(launchdeck_config, launchctl)

    await boundary.apply_action(DaemonAction.KICKSTART, "/p/loaded.plist", "loaded")
    await boundary.apply_action(DaemonAction.KICKSTART, "/p/cold.plist", "cold")

    assert launchctl.calls == [
        ("kickstart", "loaded"),
        ("bootstrap", "/p/cold.plist"),
        ("kickstart", "cold"),
    ]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_config_refuses_existing_file(
    launchdeck_config: LaunchdeckConfig,
) -> None:
    """Creating over an existing label should fail without overwriting."""
    boundary = _boundary(launchdeck_config, _FakeLaunchctl())
    config = JobConfig(label="com.example.new", argument_vector=("/bin/true",))

    path = await boundary.create_config("com.example.new", config)
    with pytest.raises(JobError) as excinfo:
        await boundary.create_config("com.example.new", config)

    assert Path(path).exists()
    assert excinfo.value.code == JobErrorCode.INVALID_CONFIG


@pytest.mark.unit
@pytest.mark.asyncio
async def test_delete_unloads_disables_and_removes(
    launchdeck_config: LaunchdeckConfig,
) -> None:
    """Delete should unload, disable and unlink the file."""
    launchctl = _FakeLaunchctl()
    path = _write(_user_path(launchdeck_config, "gone"), {"Label": "gone"})

    await _boundary(launchdeck_config, launchctl).delete_config(path, "gone")

    assert launchctl.calls == [("bootout", path), ("disable", "gone")]
    assert not Path(path).exists()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_reveal_and_editor_spawn_open(
    launchdeck_config: LaunchdeckConfig, monkeypatch: MonkeyPatch
) -> None:
    """Finder reveal and editor open should shell out to `open`."""
    spawned: list[list[str]] = []

    async def _spawn(argv: Sequence[str]) -> None:
        spawned.append(list(argv))

    monkeypatch.setattr("launchdeck.launchd.boundary.spawn_detached", _spawn)
    boundary = _boundary(launchdeck_config, _FakeLaunchctl())

    await boundary.reveal("/p/a.plist")
    await boundary.open_in_editor("/p/a.plist")

    assert spawned == [["open", "-R", "/p/a.plist"], ["open", "-t", "/p/a.plist"]]


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [FileNotFoundError("open"), PermissionError("open"), OSError("exec format")],
)
async def test_spawn_failures_become_io_errors(
    launchdeck_config: LaunchdeckConfig, monkeypatch: MonkeyPatch, error: OSError
) -> None:
    """Any OS failure launching `open` should surface as a job IO error."""

    async def _spawn(argv: Sequence[str]) -> None:
        raise error

    monkeypatch.setattr("launchdeck.launchd.boundary.spawn_detached", _spawn)
    boundary = _boundary(launchdeck_config, _FakeLaunchctl())

    with pytest.raises(JobError) as excinfo:
        await boundary.reveal("/p/a.plist")

    assert excinfo.value.code == JobErrorCode.IO_FAILED
