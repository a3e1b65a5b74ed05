"""Unit tests for launchctl output parsing and command mapping."""

from __future__ import annotations

from collections.abc import Sequence

import pytest
from _pytest.monkeypatch import MonkeyPatch

from launchdeck.jobs import JobError, JobErrorCode
from launchdeck.kernel import CommandOutput
from launchdeck.launchd import Launchctl, LoadedService, parse_list_output

_LIST_OUTPUT = (
    "PID\tStatus\tLabel\n"
    "412\t0\tcom.example.running\n"
    "-\t78\tcom.example.crashed\n"
    "malformed line\n"
    "-\t0\t\n"
    "-\t-\tcom.example.idle\n"
)


class _Recorder:
    """Replace subprocess execution with canned outputs."""

    def __init__(self, *outputs: tuple[int, str, str]) -> None:
        self.outputs = list(outputs)
        self.argvs: list[list[str]] = []

    async def __call__(
        self, argv: Sequence[str], *, timeout: float | None = None
    ) -> CommandOutput:
        del timeout
        self.argvs.append(list(argv))
        returncode, stdout, stderr = self.outputs.pop(0)
        return CommandOutput(
            argv=tuple(argv), returncode=returncode, stdout=stdout, stderr=stderr
        )


def _launchctl(monkeypatch: MonkeyPatch, recorder: _Recorder) -> Launchctl:
    monkeypatch.setattr("launchdeck.launchd.launchctl.run_subprocess", recorder)
    return Launchctl(domain="gui/501")


@pytest.mark.unit
def test_parse_list_output_skips_header_and_malformed_rows() -> None:
    """Parser should map dashes to None and drop malformed rows."""
    services = parse_list_output(_LIST_OUTPUT)

    assert services == [
        LoadedService(label="com.example.running", pid=412, last_exit_code=0),
        LoadedService(label="com.example.crashed", pid=None, last_exit_code=78),
        LoadedService(label="com.example.idle", pid=None, last_exit_code=None),
    ]


@pytest.mark.unit
def test_parse_list_output_empty() -> None:
    """Header-only or empty output should parse to nothing."""
    assert parse_list_output("") == []
    assert parse_list_output("PID\tStatus\tLabel\n") == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_loaded_failure_is_connection_failed(
    monkeypatch: MonkeyPatch,
) -> None:
    """Non-zero `launchctl list` should raise connection_failed."""
    launchctl = _launchctl(monkeypatch, _Recorder((1, "", "boom")))

    with pytest.raises(JobError) as excinfo:
        await launchctl.list_loaded()

    assert excinfo.value.code == JobErrorCode.CONNECTION_FAILED


@pytest.mark.unit
@pytest.mark.asyncio
async def test_bootstrap_tolerates_already_loaded(monkeypatch: MonkeyPatch) -> None:
    """An already loaded service should count as bootstrapped."""
    recorder = _Recorder((37, "", "Bootstrap failed: service already loaded"))
    launchctl = _launchctl(monkeypatch, recorder)

    await launchctl.bootstrap("/p/a.plist")

    assert recorder.argvs == [["launchctl", "bootstrap", "gui/501", "/p/a.plist"]]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_bootstrap_io_error_adds_hint(monkeypatch: MonkeyPatch) -> None:
    """Opaque I/O errors should carry a hint in the daemon failure."""
    launchctl = _launchctl(
        monkeypatch, _Recorder((5, "", "Bootstrap failed: 5: Input/output error"))
    )

    with pytest.raises(JobError) as excinfo:
        await launchctl.bootstrap("/p/a.plist")

    assert excinfo.value.code == JobErrorCode.DAEMON_FAILED
    assert "Input/output error" in str(excinfo.value)
    assert "root" in str(excinfo.value)


@pytest.mark.unit
@pytest.mark.asyncio
@pytest.mark.parametrize(
    "stderr",
    [
        "Boot-out failed: 3: No such process",
        "Could not find specified service",
        "service not loaded",
    ],
)
async def test_bootout_tolerates_not_loaded(
    monkeypatch: MonkeyPatch, stderr: str
) -> None:
    """Unloading something that is not loaded should succeed quietly."""
    launchctl = _launchctl(monkeypatch, _Recorder((3, "", stderr)))

    await launchctl.bootout("/p/a.plist")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_kickstart_enable_disable_target_service(
    monkeypatch: MonkeyPatch,
) -> None:
    """Service-level commands should address `<domain>/<label>`."""
    recorder = _Recorder((0, "", ""), (0, "", ""), (0, "", ""))
    launchctl = _launchctl(monkeypatch, recorder)

    await launchctl.kickstart("com.example.a")
    await launchctl.enable("com.example.a")
    await launchctl.disable("com.example.a")

    assert recorder.argvs == [
        ["launchctl", "kickstart", "-k", "gui/501/com.example.a"],
        ["launchctl", "enable", "gui/501/com.example.a"],
        ["launchctl", "disable", "gui/501/com.example.a"],
    ]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_missing_binary_is_daemon_failure(monkeypatch: MonkeyPatch) -> None:
    """A missing launchctl binary should map to daemon_failed."""

    async def _missing(argv: Sequence[str], *, timeout: float | None = None) -> None:
        del argv, timeout
        raise FileNotFoundError("launchctl")

    monkeypatch.setattr("launchdeck.launchd.launchctl.run_subprocess", _missing)

    with pytest.raises(JobError) as excinfo:
        await Launchctl(domain="gui/501").kickstart("com.example.a")

    assert excinfo.value.code == JobErrorCode.DAEMON_FAILED
