"""Unit tests for the job command handler."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from launchdeck.commands.handlers.jobs import (
    JobChanges,
    JobsCommand,
    parse_calendar_spec,
)
from launchdeck.commands.types import CommandStatus
from launchdeck.jobs import (
    CalendarSchedule,
    CalendarTrigger,
    IntervalSchedule,
    JobAction,
    JobConfig,
    JobController,
    JobError,
    JobErrorCode,
    JobSource,
    JobStatus,
    LogTail,
    NoSchedule,
)
from tests.unit.fakes import FakeBoundary, make_detail

_NOW = datetime(2026, 1, 15, 10, 30, tzinfo=UTC)


def _boundary() -> FakeBoundary:
    return FakeBoundary(
        [
            make_detail(
                "com.example.agent",
                status=JobStatus.RUNNING,
                pid=99,
                config=JobConfig(
                    label="com.example.agent",
                    argument_vector=("/bin/echo", "hi"),
                    calendar_triggers=(CalendarTrigger(hour=9, minute=0),),
                    stdout_path="/tmp/agent.out",
                ),
            ),
            make_detail("com.apple.daemon", source=JobSource.SYSTEM_DAEMON),
        ]
    )


def _command(boundary: FakeBoundary) -> JobsCommand:
    return JobsCommand(JobController(boundary), preview_count=3)


@pytest.mark.unit
def test_parse_calendar_spec_maps_short_keys() -> None:
    """`day` should map to day-of-month and values become ints."""
    trigger = parse_calendar_spec("hour=9, minute=0,day=1,weekday=1,month=6")

    assert trigger == CalendarTrigger(
        hour=9, minute=0, day_of_month=1, weekday=1, month=6
    )
    assert parse_calendar_spec("") == CalendarTrigger()


@pytest.mark.unit
@pytest.mark.parametrize("spec", ["hour", "year=2026", "hour=nine", "hour=24"])
def test_parse_calendar_spec_rejects_bad_input(spec: str) -> None:
    """Unknown keys, non-integers and out-of-range values should fail."""
    with pytest.raises(JobError) as excinfo:
        parse_calendar_spec(spec)

    assert excinfo.value.code == JobErrorCode.INVALID_CONFIG


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_jobs_filters_and_reports_totals() -> None:
    """Listing should honor search and report visible/total counts."""
    command = _command(_boundary())

    listed = await command.list_jobs(search="agent")
    empty = await command.list_jobs(search="nothing")

    assert listed.code == "jobs_listed"
    assert listed.message == "1 of 2 jobs."
    assert listed.data is not None
    assert [row["label"] for row in listed.data["jobs"]] == ["com.example.agent"]
    assert empty.code == "jobs_empty"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_jobs_connection_failure_is_error_result() -> None:
    """Listing failures should become an error result with the job code."""
    boundary = _boundary()
    boundary.list_error = JobError(JobErrorCode.CONNECTION_FAILED, "no launchd")

    result = await _command(boundary).list_jobs()

    assert result.status == CommandStatus.ERROR
    assert result.code == "job_connection_failed"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_show_includes_schedule_and_upcoming_runs() -> None:
    """Show should describe the schedule and project upcoming runs."""
    result = await _command(_boundary()).show("com.example.agent", now=_NOW)

    assert result.code == "job_shown"
    assert result.data is not None
    assert result.data["schedule"] == "Every day at 09:00"
    assert [row["display"] for row in result.data["upcoming"]] == [
        "1/16 (Friday) 09:00",
        "1/17 (Saturday) 09:00",
        "1/18 (Sunday) 09:00",
    ]
    assert "raw_source_text" not in result.data["config"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_show_unknown_label_is_not_found() -> None:
    """Unknown labels should produce a not-found error result."""
    result = await _command(_boundary()).show("com.example.none", now=_NOW)

    assert result.status == CommandStatus.ERROR
    assert result.code == "job_not_found"


@pytest.mark.unit
def test_preview_reports_empty_projection_as_success() -> None:
    """An unsatisfiable schedule is still a successful preview."""
    command = _command(_boundary())

    empty = command.preview(
        CalendarSchedule(triggers=(CalendarTrigger(month=2, day_of_month=30),)),
        now=_NOW,
    )
    interval = command.preview(IntervalSchedule(seconds=300), now=_NOW, count=2)
    none = command.preview(NoSchedule(), now=_NOW)

    assert empty.status == CommandStatus.OK
    assert empty.message == "No upcoming runs found."
    assert interval.data is not None
    assert len(interval.data["upcoming"]) == 2
    assert none.message == "No schedule"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_action_results_distinguish_denied_and_failed() -> None:
    """Denials and daemon failures should map to separate codes."""
    # Arrange - boundary whose daemon actions fail
    boundary = _boundary()
    command = _command(boundary)

    # Act - denied start on daemon, then failed kickstart, then success
    denied = await command.action("com.apple.daemon", JobAction.START)
    boundary.action_error = JobError(JobErrorCode.DAEMON_FAILED, "kickstart failed")
    failed = await command.action("com.example.agent", JobAction.KICKSTART)
    boundary.action_error = None
    ok = await command.action("com.example.agent", JobAction.STOP)

    # Assert - three distinct codes
    assert denied.code == "job_action_denied"
    assert denied.data is not None
    assert denied.data["reason"] == "managed by the system; not user-modifiable."
    assert failed.code == "job_action_failed"
    assert failed.message == "kickstart failed"
    assert ok.code == "job_action_succeeded"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_and_edit_apply_only_given_fields() -> None:
    """Edits should leave untouched fields as they were."""
    # Arrange - handler over fake boundary
    boundary = _boundary()
    command = _command(boundary)

    # Act - create a job, then change only its schedule
    created = await command.create(
        "com.example.new",
        JobChanges(argument_line="/bin/date -u", run_at_load=True),
    )
    edited = await command.edit(
        "com.example.new", JobChanges(schedule=IntervalSchedule(seconds=60))
    )

    # Assert - arguments kept, interval added
    assert created.code == "job_saved"
    assert edited.code == "job_saved"
    saved = boundary.details["/Users/me/Library/LaunchAgents/com.example.new.plist"]
    assert saved.config.argument_vector == ("/bin/date", "-u")
    assert saved.config.run_at_load is True
    assert saved.config.interval_seconds == 60


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_without_arguments_is_invalid() -> None:
    """Missing program arguments should be rejected before saving."""
    boundary = _boundary()

    result = await _command(boundary).create("com.example.bad", JobChanges())

    assert result.code == "job_invalid_config"
    assert boundary.mutations == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_edit_system_job_is_permission_denied() -> None:
    """System jobs should not be editable."""
    result = await _command(_boundary()).edit(
        "com.apple.daemon", JobChanges(run_at_load=True)
    )

    assert result.code == "job_permission_denied"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_logs_read_and_failure_paths() -> None:
    """Logs should read configured paths and report missing ones."""
    boundary = _boundary()
    boundary.logs["/tmp/agent.out"] = LogTail(content="hello\n")
    command = _command(boundary)

    read = await command.logs("com.example.agent", stream="stdout", tail_lines=5)
    unset = await command.logs("com.example.agent", stream="stderr", tail_lines=5)
    boundary.logs.clear()
    failed = await command.logs("com.example.agent", stream="stdout", tail_lines=5)

    assert read.code == "log_read"
    assert read.message == "hello\n"
    assert unset.code == "log_not_configured"
    assert failed.code == "log_read_failed"


@pytest.mark.unit
def test_preview_without_now_uses_injected_clock() -> None:
    """Omitting `now` should project from the handler's clock."""
    command = JobsCommand(
        JobController(_boundary()), preview_count=1, clock=lambda: _NOW
    )

    result = command.preview(
        CalendarSchedule(triggers=(CalendarTrigger(hour=9, minute=0),))
    )

    assert result.data is not None
    assert result.data["upcoming"] == [
        {"at": "2026-01-16T09:00:00+00:00", "display": "1/16 (Friday) 09:00"}
    ]
