"""Job summary, configuration and trigger models."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class JobSource(StrEnum):
    """Ownership tier of one job; sets its permission ceiling."""

    USER_AGENT = "user_agent"
    SYSTEM_AGENT = "system_agent"
    SYSTEM_DAEMON = "system_daemon"


class JobStatus(StrEnum):
    """Daemon-reported run state of one job."""

    RUNNING = "running"
    STOPPED = "stopped"
    UNKNOWN = "unknown"


class ScheduleKind(StrEnum):
    """Effective trigger kind derived from one job config."""

    NONE = "none"
    INTERVAL = "interval"
    CALENDAR = "calendar"


class JobSummary(BaseModel):
    """One catalog row as reported by the boundary."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    label: str = Field(min_length=1)
    source: JobSource
    status: JobStatus
    pid: int | None = Field(default=None, gt=0)
    last_exit_code: int | None = None
    config_path: str

    @model_validator(mode="after")
    def _validate_pid(self) -> JobSummary:
        """Require pid to be present only for running jobs.

        Returns:
            Validated summary model.

        Raises:
            ValueError: If pid and status disagree.
        """
        if self.pid is not None and self.status != JobStatus.RUNNING:
            raise ValueError("pid is only allowed when status is running.")
        return self


class CalendarTrigger(BaseModel):
    """Cron-like wildcard trigger; absent fields match any value."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    minute: int | None = Field(default=None, ge=0, le=59)
    hour: int | None = Field(default=None, ge=0, le=23)
    day_of_month: int | None = Field(default=None, ge=1, le=31)
    weekday: int | None = Field(default=None, ge=0, le=6)
    month: int | None = Field(default=None, ge=1, le=12)


class JobConfig(BaseModel):
    """Structured view of one job's backing configuration file.

    ``interval_seconds`` and ``calendar_triggers`` may both be present in
    externally authored files. :func:`schedule_kind` resolves the effective
    trigger; the editor only ever writes one of them.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    label: str = ""
    program: str | None = None
    argument_vector: tuple[str, ...] | None = None
    run_at_load: bool | None = None
    keep_alive: bool | None = None
    interval_seconds: int | None = Field(default=None, gt=0)
    calendar_triggers: tuple[CalendarTrigger, ...] | None = None
    stdout_path: str | None = None
    stderr_path: str | None = None
    working_directory: str | None = None
    environment: dict[str, str] | None = None
    disabled: bool | None = None
    raw_source_text: str = ""

    @classmethod
    def empty(cls) -> JobConfig:
        """Return the blank config used for a new job.

        Returns:
            Config with boolean flags explicitly off.
        """
        return cls(run_at_load=False, keep_alive=False, disabled=False)


class JobDetail(BaseModel):
    """Summary fields plus the full parsed config for one job."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    label: str
    config_path: str
    source: JobSource
    status: JobStatus
    pid: int | None = None
    last_exit_code: int | None = None
    config: JobConfig

    def summary(self) -> JobSummary:
        """Project detail back onto the catalog row shape.

        Returns:
            Summary for gate decisions.
        """
        return JobSummary(
            label=self.label,
            source=self.source,
            status=self.status,
            pid=self.pid,
            last_exit_code=self.last_exit_code,
            config_path=self.config_path,
        )


class LogTail(BaseModel):
    """Tail of one log file."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    content: str = ""
    modified_at: datetime | None = None


def schedule_kind(config: JobConfig) -> ScheduleKind:
    """Resolve which trigger drives a config; interval wins over calendar.

    Args:
        config: Job configuration.

    Returns:
        Effective schedule kind.
    """
    if config.interval_seconds:
        return ScheduleKind.INTERVAL
    if config.calendar_triggers:
        return ScheduleKind.CALENDAR
    return ScheduleKind.NONE


def is_valid_for_save(config: JobConfig) -> bool:
    """Check the minimum a config needs before it can be persisted.

    Args:
        config: Candidate job configuration.

    Returns:
        ``True`` when label is non-blank and an argument vector exists.
    """
    return bool(config.label.strip()) and bool(config.argument_vector)
