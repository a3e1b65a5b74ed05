"""Handler turning job operations into command results."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from launchdeck.commands.types import CommandResult
from launchdeck.jobs import (
    ALL_SOURCES,
    CalendarSchedule,
    CalendarTrigger,
    EditSession,
    IntervalSchedule,
    JobAction,
    JobController,
    JobDetail,
    JobError,
    JobErrorCode,
    JobSummary,
    NoSchedule,
    OutcomeKind,
    Schedule,
    SourceFilter,
    project_schedule,
)
from launchdeck.jobs.schedule import (
    describe_calendar_trigger,
    describe_interval,
    format_occurrence,
)

_CALENDAR_FIELDS = {
    "minute": "minute",
    "hour": "hour",
    "day": "day_of_month",
    "weekday": "weekday",
    "month": "month",
}
NO_UPCOMING_RUNS = "No upcoming runs found."


class JobChanges(BaseModel):
    """Requested form edits; ``None`` leaves a field unchanged."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    argument_line: str | None = None
    run_at_load: bool | None = None
    keep_alive: bool | None = None
    schedule: NoSchedule | IntervalSchedule | CalendarSchedule | None = None
    stdout_path: str | None = None
    stderr_path: str | None = None
    working_directory: str | None = None
    environment: dict[str, str] | None = None


def parse_calendar_spec(spec: str) -> CalendarTrigger:
    """Parse ``"hour=9,minute=0"`` style text into a calendar trigger.

    Accepted keys are ``minute``, ``hour``, ``day``, ``weekday`` (0 = Sunday)
    and ``month``; an empty spec fires every minute.

    Args:
        spec: Comma-separated ``key=value`` pairs.

    Returns:
        Calendar trigger.

    Raises:
        JobError: If a key is unknown or a value is not a valid integer.
    """
    fields: dict[str, int] = {}
    for raw_part in spec.split(","):
        part = raw_part.strip()
        if not part:
            continue
        key, sep, value = part.partition("=")
        field_name = _CALENDAR_FIELDS.get(key.strip().lower())
        if not sep or field_name is None:
            raise JobError(
                JobErrorCode.INVALID_CONFIG,
                f"Error: invalid calendar field '{part}'.",
                data={"spec": spec},
            )
        try:
            fields[field_name] = int(value.strip())
        except ValueError as exc:
            raise JobError(
                JobErrorCode.INVALID_CONFIG,
                f"Error: calendar field '{key.strip()}' must be an integer.",
                data={"spec": spec},
            ) from exc
    try:
        return CalendarTrigger(**fields)
    except ValidationError as exc:
        raise JobError(
            JobErrorCode.INVALID_CONFIG,
            f"Error: calendar value out of range in '{spec}'.",
            data={"spec": spec, "validation_errors": exc.errors()},
        ) from exc


def describe_schedule(schedule: Schedule) -> str:
    """Render one schedule as a short description.

    Args:
        schedule: Editor schedule.

    Returns:
        Human-readable description.
    """
    if isinstance(schedule, IntervalSchedule):
        return describe_interval(schedule.seconds)
    if isinstance(schedule, CalendarSchedule):
        return "; ".join(describe_calendar_trigger(t) for t in schedule.triggers)
    return "No schedule"


def _summary_row(summary: JobSummary) -> dict[str, Any]:
    return summary.model_dump(mode="json")


def _occurrence_rows(moments: list[datetime]) -> list[dict[str, str]]:
    return [
        {"at": moment.isoformat(), "display": format_occurrence(moment)}
        for moment in moments
    ]


class JobsCommand:
    """Deterministic job command handler used by the CLI."""

    def __init__(
        self,
        controller: JobController,
        *,
        preview_count: int = 5,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Store execution dependencies.

        Args:
            controller: Job controller.
            preview_count: Default number of upcoming runs to project.
            clock: Source of the projection reference instant; naive results
                are read as system local time.
        """
        self._controller = controller
        self._preview_count = preview_count
        self._clock = clock

    async def list_jobs(
        self, *, search: str = "", source: SourceFilter = ALL_SOURCES
    ) -> CommandResult:
        """Refresh the catalog and list visible jobs.

        Args:
            search: Case-insensitive label substring.
            source: Source filter or ``"all"``.

        Returns:
            Listing result.
        """
        catalog = self._controller.catalog
        catalog.search = search
        catalog.source_filter = source
        try:
            visible = await self._controller.refresh()
        except JobError as exc:
            return CommandResult.from_job_error(exc)
        data = {
            "jobs": [_summary_row(item) for item in visible],
            "total": len(catalog.jobs),
            "search": search,
            "source": str(source),
        }
        if not visible:
            return CommandResult.ok("No jobs found.", code="jobs_empty", data=data)
        return CommandResult.ok(
            f"{len(visible)} of {len(catalog.jobs)} jobs.",
            code="jobs_listed",
            data=data,
        )

    async def show(
        self, label: str, *, now: datetime | None = None, count: int | None = None
    ) -> CommandResult:
        """Show one job's config with its upcoming runs.

        Args:
            label: Job label.
            now: Reference instant for projection; the clock when omitted.
            count: Number of upcoming runs; config default when omitted.

        Returns:
            Detail result.
        """
        try:
            detail = await self._load_detail(label)
        except JobError as exc:
            return CommandResult.from_job_error(exc)
        session = EditSession.edit(detail)
        upcoming = project_schedule(
            detail.config, count or self._preview_count, now or self._clock()
        )
        data = {
            "job": detail.model_dump(mode="json", exclude={"config"}),
            "config": detail.config.model_dump(
                mode="json", exclude={"raw_source_text"}
            ),
            "schedule": describe_schedule(session.schedule),
            "upcoming": _occurrence_rows(upcoming),
        }
        return CommandResult.ok(detail.label, code="job_shown", data=data)

    async def raw(self, label: str) -> CommandResult:
        """Return a job's raw configuration text.

        Args:
            label: Job label.

        Returns:
            Raw source result.
        """
        try:
            detail = await self._load_detail(label)
        except JobError as exc:
            return CommandResult.from_job_error(exc)
        return CommandResult.ok(
            detail.config.raw_source_text,
            code="job_raw_shown",
            data={"label": detail.label, "config_path": detail.config_path},
        )

    def preview(
        self,
        schedule: Schedule,
        *,
        now: datetime | None = None,
        count: int | None = None,
    ) -> CommandResult:
        """Project upcoming runs for an ad-hoc schedule.

        Args:
            schedule: Schedule to project.
            now: Reference instant; the clock when omitted.
            count: Number of upcoming runs; config default when omitted.

        Returns:
            Preview result; an empty projection is still a success.
        """
        session = EditSession.create()
        session.schedule = schedule
        upcoming = session.preview(
            count or self._preview_count, now or self._clock()
        )
        data = {
            "schedule": describe_schedule(schedule),
            "upcoming": _occurrence_rows(upcoming),
        }
        message = (
            NO_UPCOMING_RUNS
            if not upcoming and not isinstance(schedule, NoSchedule)
            else data["schedule"]
        )
        return CommandResult.ok(message, code="schedule_previewed", data=data)

    async def action(self, label: str, action: JobAction) -> CommandResult:
        """Run one lifecycle action through the gate.

        Args:
            label: Job label.
            action: Requested action.

        Returns:
            Success, ``job_action_denied`` or ``job_action_failed`` result.
        """
        try:
            summary = await self._controller.resolve(label)
        except JobError as exc:
            return CommandResult.from_job_error(exc)
        report = await self._controller.run_action(summary, action)
        outcome = report.outcome
        data: dict[str, Any] = {
            "label": outcome.label,
            "action": outcome.action.value,
            "outcome": outcome.kind.value,
        }
        if outcome.kind == OutcomeKind.DENIED:
            data["reason"] = outcome.reason
            return CommandResult.error(
                f"{action.value} not permitted for {label}: {outcome.reason}",
                code="job_action_denied",
                data=data,
            )
        if outcome.kind == OutcomeKind.FAILED:
            data["reason"] = outcome.reason
            return CommandResult.error(
                outcome.reason or f"{action.value} failed for {label}.",
                code="job_action_failed",
                data=data,
            )
        if report.refresh_error is not None:
            data["refresh_error"] = report.refresh_error
        return CommandResult.ok(
            f"{action.value} sent to {label}.",
            code="job_action_succeeded",
            data=data,
        )

    async def create(self, label: str, changes: JobChanges) -> CommandResult:
        """Create a new job from form fields.

        Args:
            label: New job label.
            changes: Form fields.

        Returns:
            Save result.
        """
        session = EditSession.create()
        try:
            session.label = label
            self._apply_changes(session, changes)
            report = await self._controller.save(session)
        except JobError as exc:
            return CommandResult.from_job_error(exc)
        return self._saved_result(
            session.label, report.config_path, report.refresh_error
        )

    async def edit(self, label: str, changes: JobChanges) -> CommandResult:
        """Edit an existing job's form fields.

        Args:
            label: Job label.
            changes: Field edits; unset fields keep their value.

        Returns:
            Save result.
        """
        try:
            detail = await self._load_detail(label)
            session = EditSession.edit(detail)
            self._apply_changes(session, changes)
            report = await self._controller.save(session)
        except JobError as exc:
            return CommandResult.from_job_error(exc)
        return self._saved_result(
            detail.label, report.config_path, report.refresh_error
        )

    async def apply_raw(self, label: str, text: str) -> CommandResult:
        """Replace a job's file with raw text.

        Args:
            label: Job label.
            text: Raw configuration text.

        Returns:
            Save result.
        """
        try:
            summary = await self._controller.resolve(label)
            report = await self._controller.save_raw(summary, text)
        except JobError as exc:
            return CommandResult.from_job_error(exc)
        return self._saved_result(label, report.config_path, report.refresh_error)

    async def open_in_editor(self, label: str) -> CommandResult:
        """Open a job's file in the external text editor."""
        try:
            summary = await self._controller.resolve(label)
            await self._controller.open_in_editor(summary)
        except JobError as exc:
            return CommandResult.from_job_error(exc)
        return CommandResult.ok(
            f"Opened {summary.config_path} in the text editor.",
            code="job_opened",
            data={"label": label, "config_path": summary.config_path},
        )

    async def logs(
        self, label: str, *, stream: str, tail_lines: int | None
    ) -> CommandResult:
        """Read one of a job's log files.

        Args:
            label: Job label.
            stream: ``"stdout"`` or ``"stderr"``.
            tail_lines: Max trailing lines, or ``None`` for all.

        Returns:
            Log result.
        """
        try:
            detail = await self._load_detail(label)
        except JobError as exc:
            return CommandResult.from_job_error(exc)
        config = detail.config
        path = config.stderr_path if stream == "stderr" else config.stdout_path
        if path is None:
            return CommandResult.error(
                f"Error: {label} has no {stream} log configured.",
                code="log_not_configured",
                data={"label": label, "stream": stream},
            )
        report = await self._controller.read_log(path, tail_lines)
        data = report.model_dump(mode="json")
        data["label"] = label
        data["stream"] = stream
        if report.error is not None:
            return CommandResult.error(report.error, code="log_read_failed", data=data)
        if not report.content:
            return CommandResult.ok("Log is empty.", code="log_empty", data=data)
        return CommandResult.ok(report.content, code="log_read", data=data)

    async def _load_detail(self, label: str) -> JobDetail:
        summary = await self._controller.resolve(label)
        return await self._controller.detail(summary.config_path)

    @staticmethod
    def _apply_changes(session: EditSession, changes: JobChanges) -> None:
        """Copy set fields from ``changes`` onto the session.

        Args:
            session: Open edit session.
            changes: Requested edits.
        """
        for field_name in changes.model_fields_set:
            setattr(session, field_name, getattr(changes, field_name))

    @staticmethod
    def _saved_result(
        label: str, config_path: str, refresh_error: str | None
    ) -> CommandResult:
        data: dict[str, Any] = {"label": label, "config_path": config_path}
        if refresh_error is not None:
            data["refresh_error"] = refresh_error
        return CommandResult.ok(f"Saved {label}.", code="job_saved", data=data)
