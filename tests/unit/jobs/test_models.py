"""Unit tests for job model validation and schedule kind."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from launchdeck.jobs import (
    CalendarTrigger,
    JobConfig,
    JobSource,
    JobStatus,
    JobSummary,
    ScheduleKind,
    is_valid_for_save,
    schedule_kind,
)


@pytest.mark.unit
def test_schedule_kind_calendar_then_interval_wins() -> None:
    """Adding an interval to a calendar config should switch kind to interval."""
    # Arrange - calendar-only config
    config = JobConfig(calendar_triggers=(CalendarTrigger(hour=9, minute=0),))

    # Act - add interval alongside
    both = config.model_copy(update={"interval_seconds": 60})

    # Assert - calendar first, then interval
    assert schedule_kind(config) == ScheduleKind.CALENDAR
    assert schedule_kind(both) == ScheduleKind.INTERVAL


@pytest.mark.unit
def test_schedule_kind_none_for_empty_triggers() -> None:
    """Empty trigger tuple should count as no schedule."""
    assert schedule_kind(JobConfig()) == ScheduleKind.NONE
    assert schedule_kind(JobConfig(calendar_triggers=())) == ScheduleKind.NONE


@pytest.mark.unit
def test_summary_rejects_pid_without_running_status() -> None:
    """A pid should only be accepted for running jobs."""
    with pytest.raises(ValidationError):
        JobSummary(
            label="com.example.a",
            source=JobSource.USER_AGENT,
            status=JobStatus.STOPPED,
            pid=42,
            config_path="/tmp/a.plist",
        )

    running = JobSummary(
        label="com.example.a",
        source=JobSource.USER_AGENT,
        status=JobStatus.RUNNING,
        pid=42,
        config_path="/tmp/a.plist",
    )
    assert running.pid == 42


@pytest.mark.unit
@pytest.mark.parametrize(
    "fields",
    [
        {"minute": 60},
        {"hour": 24},
        {"day_of_month": 0},
        {"weekday": 7},
        {"month": 13},
    ],
)
def test_calendar_trigger_rejects_out_of_range_fields(fields: dict[str, int]) -> None:
    """Trigger fields outside their calendar range should fail validation."""
    with pytest.raises(ValidationError):
        CalendarTrigger(**fields)


@pytest.mark.unit
def test_is_valid_for_save_requires_label_and_arguments() -> None:
    """Blank labels or missing arguments should not be savable."""
    assert not is_valid_for_save(JobConfig(label="  ", argument_vector=("/bin/x",)))
    assert not is_valid_for_save(JobConfig(label="a", argument_vector=()))
    assert is_valid_for_save(JobConfig(label="a", argument_vector=("/bin/x",)))


@pytest.mark.unit
def test_empty_config_turns_flags_off() -> None:
    """New-job template should carry explicit false flags."""
    config = JobConfig.empty()

    assert config.run_at_load is False
    assert config.keep_alive is False
    assert config.disabled is False
    assert config.label == ""
