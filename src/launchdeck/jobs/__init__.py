"""Job model, scheduling projection and action gate public surface."""

from launchdeck.jobs.arguments import join_arguments, tokenize
from launchdeck.jobs.boundary import DaemonAction, JobBoundary
from launchdeck.jobs.catalog import ALL_SOURCES, JobCatalog, SourceFilter
from launchdeck.jobs.controller import (
    ActionReport,
    JobController,
    LogReport,
    SaveReport,
)
from launchdeck.jobs.editor import (
    CalendarSchedule,
    EditSession,
    IntervalSchedule,
    NoSchedule,
    Schedule,
    schedule_from_config,
)
from launchdeck.jobs.errors import JobError, JobErrorCode
from launchdeck.jobs.gate import (
    ActionOutcome,
    GateDecision,
    JobAction,
    JobActionGate,
    OutcomeKind,
)
from launchdeck.jobs.models import (
    CalendarTrigger,
    JobConfig,
    JobDetail,
    JobSource,
    JobStatus,
    JobSummary,
    LogTail,
    ScheduleKind,
    is_valid_for_save,
    schedule_kind,
)
from launchdeck.jobs.schedule import (
    PROJECTION_HORIZON_MINUTES,
    project_calendar,
    project_interval,
    project_schedule,
)

__all__ = [
    "ALL_SOURCES",
    "PROJECTION_HORIZON_MINUTES",
    "ActionOutcome",
    "ActionReport",
    "CalendarSchedule",
    "CalendarTrigger",
    "DaemonAction",
    "EditSession",
    "GateDecision",
    "IntervalSchedule",
    "JobAction",
    "JobActionGate",
    "JobBoundary",
    "JobCatalog",
    "JobConfig",
    "JobController",
    "JobDetail",
    "JobError",
    "JobErrorCode",
    "JobSource",
    "JobStatus",
    "JobSummary",
    "LogReport",
    "LogTail",
    "NoSchedule",
    "OutcomeKind",
    "SaveReport",
    "Schedule",
    "ScheduleKind",
    "SourceFilter",
    "is_valid_for_save",
    "join_arguments",
    "project_calendar",
    "project_interval",
    "project_schedule",
    "schedule_from_config",
    "schedule_kind",
    "tokenize",
]
