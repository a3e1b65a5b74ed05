"""Edit sessions that turn form input into a savable job config."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from launchdeck.jobs.arguments import join_arguments, tokenize
from launchdeck.jobs.boundary import JobBoundary
from launchdeck.jobs.errors import JobError, JobErrorCode
from launchdeck.jobs.models import (
    CalendarTrigger,
    JobConfig,
    JobDetail,
    ScheduleKind,
    is_valid_for_save,
    schedule_kind,
)
from launchdeck.jobs.schedule import project_schedule


class NoSchedule(BaseModel):
    """Job runs only on demand, at load or via keep-alive."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class IntervalSchedule(BaseModel):
    """Job fires every ``seconds`` seconds."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    seconds: int = Field(gt=0)


class CalendarSchedule(BaseModel):
    """Job fires on minutes matching any of its calendar triggers."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    triggers: tuple[CalendarTrigger, ...] = Field(min_length=1)


Schedule = NoSchedule | IntervalSchedule | CalendarSchedule

DEFAULT_CALENDAR_TRIGGER = CalendarTrigger(hour=9, minute=0)


def schedule_from_config(config: JobConfig) -> Schedule:
    """Collapse a possibly over-specified config onto exactly one schedule.

    Args:
        config: Stored job configuration.

    Returns:
        Effective schedule; interval wins when both triggers are present.
    """
    kind = schedule_kind(config)
    if kind == ScheduleKind.INTERVAL and config.interval_seconds:
        return IntervalSchedule(seconds=config.interval_seconds)
    if kind == ScheduleKind.CALENDAR and config.calendar_triggers:
        return CalendarSchedule(triggers=config.calendar_triggers)
    return NoSchedule()


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


class EditSession:
    """Mutable form state for creating or editing one job.

    Nothing here touches the boundary until :meth:`submit`; cancelling a
    session is simply dropping it.
    """

    def __init__(
        self,
        *,
        base: JobConfig,
        config_path: str | None = None,
    ) -> None:
        """Seed form fields from a base config.

        Args:
            base: Config the session starts from.
            config_path: Existing backing file path, ``None`` for a new job.
        """
        self._base = base
        self._config_path = config_path
        self._label = base.label
        self.argument_line = join_arguments(base.argument_vector or ())
        self.run_at_load = bool(base.run_at_load)
        self.keep_alive = bool(base.keep_alive)
        self.schedule: Schedule = schedule_from_config(base)
        self.stdout_path = base.stdout_path
        self.stderr_path = base.stderr_path
        self.working_directory = base.working_directory
        self.environment: dict[str, str] | None = (
            dict(base.environment) if base.environment is not None else None
        )

    @classmethod
    def create(cls) -> EditSession:
        """Open a session for a brand-new job.

        Returns:
            Session seeded with the blank config.
        """
        return cls(base=JobConfig.empty())

    @classmethod
    def edit(cls, detail: JobDetail) -> EditSession:
        """Open a session for an existing job.

        Args:
            detail: Loaded job detail.

        Returns:
            Session seeded with the job's current config.
        """
        return cls(base=detail.config, config_path=detail.config_path)

    @property
    def is_new(self) -> bool:
        """Return whether this session creates a new job."""
        return self._config_path is None

    @property
    def config_path(self) -> str | None:
        """Return the existing backing file path, if any."""
        return self._config_path

    @property
    def label(self) -> str:
        """Return the label being edited."""
        return self._label

    @label.setter
    def label(self, value: str) -> None:
        if not self.is_new and value != self._label:
            raise JobError(
                JobErrorCode.INVALID_CONFIG,
                "Error: label cannot change once a job exists.",
                data={"label": self._label, "requested": value},
            )
        self._label = value

    def build(self) -> JobConfig:
        """Normalize form fields into a config ready to persist.

        Returns:
            Validated job config carrying exactly one schedule field.

        Raises:
            JobError: If the label or program arguments are missing.
        """
        label = self._label.strip()
        if not label:
            raise JobError(
                JobErrorCode.INVALID_CONFIG,
                "Label is required",
                data={"field": "label"},
            )
        argv = tokenize(self.argument_line.strip())
        schedule = self.schedule
        config = self._base.model_copy(
            update={
                "label": label,
                "argument_vector": tuple(argv) if argv else None,
                "program": argv[0] if argv else self._base.program,
                "run_at_load": self.run_at_load,
                "keep_alive": self.keep_alive,
                "interval_seconds": (
                    schedule.seconds if isinstance(schedule, IntervalSchedule) else None
                ),
                "calendar_triggers": (
                    schedule.triggers
                    if isinstance(schedule, CalendarSchedule)
                    else None
                ),
                "stdout_path": _blank_to_none(self.stdout_path),
                "stderr_path": _blank_to_none(self.stderr_path),
                "working_directory": _blank_to_none(self.working_directory),
                "environment": self.environment or None,
            }
        )
        if not is_valid_for_save(config):
            raise JobError(
                JobErrorCode.INVALID_CONFIG,
                "Program arguments are required",
                data={"field": "argument_vector"},
            )
        return config

    def preview(self, count: int, start: datetime) -> list[datetime]:
        """Project upcoming fires for the schedule currently in the form.

        Args:
            count: Maximum number of occurrences.
            start: Reference instant.

        Returns:
            Upcoming occurrences; empty for no schedule or no match.
        """
        schedule = self.schedule
        draft = JobConfig(
            interval_seconds=(
                schedule.seconds if isinstance(schedule, IntervalSchedule) else None
            ),
            calendar_triggers=(
                schedule.triggers if isinstance(schedule, CalendarSchedule) else None
            ),
        )
        return project_schedule(draft, count, start)

    async def submit(self, boundary: JobBoundary) -> str:
        """Validate and persist the session through the boundary.

        Args:
            boundary: Daemon/filesystem boundary.

        Returns:
            Backing configuration file path.
        """
        config = self.build()
        if self._config_path is None:
            path = await boundary.create_config(config.label, config)
            self._config_path = path
            return path
        await boundary.save_config(self._config_path, config)
        return self._config_path
