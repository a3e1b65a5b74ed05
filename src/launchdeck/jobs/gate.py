"""Permission/state gate for job lifecycle actions."""

from __future__ import annotations

import logging
from enum import StrEnum
from itertools import product

from pydantic import BaseModel, ConfigDict

from launchdeck.jobs.boundary import DaemonAction, JobBoundary
from launchdeck.jobs.errors import JobError
from launchdeck.jobs.models import JobSource, JobStatus, JobSummary

_LOGGER = logging.getLogger(__name__)

SYSTEM_MANAGED_REASON = "managed by the system; not user-modifiable."
NOT_RUNNING_REASON = "not running"


class JobAction(StrEnum):
    """User-requestable actions on one job."""

    START = "start"
    STOP = "stop"
    RESTART = "restart"
    KICKSTART = "kickstart"
    ENABLE = "enable"
    DISABLE = "disable"
    DELETE = "delete"
    EDIT = "edit"
    REVEAL = "reveal"


class OutcomeKind(StrEnum):
    """How one gated action ended."""

    SUCCEEDED = "succeeded"
    DENIED = "denied"
    FAILED = "failed"


class GateDecision(BaseModel):
    """Synchronous permission verdict for one action."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    allowed: bool
    reason: str | None = None


class ActionOutcome(BaseModel):
    """Result of one gated action.

    ``denied`` comes from the gate itself and never reached the daemon;
    ``failed`` carries the daemon's failure text verbatim.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    action: JobAction
    label: str
    kind: OutcomeKind
    reason: str | None = None

    @property
    def succeeded(self) -> bool:
        """Return whether the action completed."""
        return self.kind == OutcomeKind.SUCCEEDED


# Every source lists every action; a new JobAction fails the import check below
# until each source states its verdict.
_SOURCE_PERMISSIONS: dict[JobSource, dict[JobAction, bool]] = {
    JobSource.USER_AGENT: {
        JobAction.START: True,
        JobAction.STOP: True,
        JobAction.RESTART: True,
        JobAction.KICKSTART: True,
        JobAction.ENABLE: True,
        JobAction.DISABLE: True,
        JobAction.DELETE: True,
        JobAction.EDIT: True,
        JobAction.REVEAL: True,
    },
    JobSource.SYSTEM_AGENT: {
        JobAction.START: False,
        JobAction.STOP: False,
        JobAction.RESTART: False,
        JobAction.KICKSTART: True,
        JobAction.ENABLE: False,
        JobAction.DISABLE: False,
        JobAction.DELETE: False,
        JobAction.EDIT: False,
        JobAction.REVEAL: True,
    },
    JobSource.SYSTEM_DAEMON: {
        JobAction.START: False,
        JobAction.STOP: False,
        JobAction.RESTART: False,
        JobAction.KICKSTART: True,
        JobAction.ENABLE: False,
        JobAction.DISABLE: False,
        JobAction.DELETE: False,
        JobAction.EDIT: False,
        JobAction.REVEAL: True,
    },
}

PERMISSIONS: dict[tuple[JobSource, JobAction], bool] = {
    (source, action): allowed
    for source, actions in _SOURCE_PERMISSIONS.items()
    for action, allowed in actions.items()
}

_DAEMON_ACTIONS: dict[JobAction, DaemonAction] = {
    JobAction.START: DaemonAction.START,
    JobAction.STOP: DaemonAction.STOP,
    JobAction.RESTART: DaemonAction.RESTART,
    JobAction.KICKSTART: DaemonAction.KICKSTART,
    JobAction.ENABLE: DaemonAction.ENABLE,
    JobAction.DISABLE: DaemonAction.DISABLE,
}

# Handled by the gate itself rather than a launchctl verb.
_LOCAL_ACTIONS = frozenset({JobAction.DELETE, JobAction.EDIT, JobAction.REVEAL})


def assert_complete_table(
    table: dict[JobSource, dict[JobAction, bool]],
    daemon_actions: dict[JobAction, DaemonAction] = _DAEMON_ACTIONS,
) -> None:
    """Fail when any source/action pair lacks a verdict or a dispatch route.

    Args:
        table: Per-source permission verdicts.
        daemon_actions: Actions forwarded to the boundary as daemon verbs.

    Raises:
        RuntimeError: If a pair is missing, a verdict is not a bool, or an
            action has no dispatch route.
    """
    missing = [
        (source.value, action.value)
        for source, action in product(JobSource, JobAction)
        if not isinstance(table.get(source, {}).get(action), bool)
    ]
    if missing:
        raise RuntimeError(f"permission table missing entries: {missing}")
    unrouted = [
        action.value
        for action in JobAction
        if action not in daemon_actions and action not in _LOCAL_ACTIONS
    ]
    if unrouted:
        raise RuntimeError(f"actions without a dispatch route: {unrouted}")


assert_complete_table(_SOURCE_PERMISSIONS)


class JobActionGate:
    """Decide and dispatch lifecycle actions for one job at a time."""

    def __init__(self, boundary: JobBoundary) -> None:
        """Store boundary used for permitted actions.

        Args:
            boundary: Daemon/filesystem boundary.
        """
        self._boundary = boundary

    @staticmethod
    def check(summary: JobSummary, action: JobAction) -> GateDecision:
        """Decide whether an action is legal for a job.

        Args:
            summary: Target job summary.
            action: Requested action.

        Returns:
            Allow/deny decision with reason on denial.
        """
        if not PERMISSIONS[(summary.source, action)]:
            return GateDecision(allowed=False, reason=SYSTEM_MANAGED_REASON)
        if action == JobAction.STOP and summary.status == JobStatus.STOPPED:
            return GateDecision(allowed=False, reason=NOT_RUNNING_REASON)
        return GateDecision(allowed=True)

    async def perform(self, summary: JobSummary, action: JobAction) -> ActionOutcome:
        """Gate one action and run it through the boundary when allowed.

        Args:
            summary: Target job summary.
            action: Requested action.

        Returns:
            Outcome; boundary failures are reported, never raised.
        """
        decision = self.check(summary, action)
        if not decision.allowed:
            _LOGGER.info(
                "Denied %s for %s: %s", action.value, summary.label, decision.reason
            )
            return ActionOutcome(
                action=action,
                label=summary.label,
                kind=OutcomeKind.DENIED,
                reason=decision.reason,
            )
        try:
            await self._dispatch(summary, action)
        except JobError as exc:
            _LOGGER.warning(
                "Action %s failed for %s: %s", action.value, summary.label, exc
            )
            return ActionOutcome(
                action=action,
                label=summary.label,
                kind=OutcomeKind.FAILED,
                reason=str(exc),
            )
        return ActionOutcome(
            action=action, label=summary.label, kind=OutcomeKind.SUCCEEDED
        )

    async def _dispatch(self, summary: JobSummary, action: JobAction) -> None:
        """Route one permitted action to the boundary.

        Args:
            summary: Target job summary.
            action: Permitted action.
        """
        path = summary.config_path
        if action == JobAction.EDIT:
            return
        if action == JobAction.REVEAL:
            await self._boundary.reveal(path)
            return
        if action == JobAction.DELETE:
            await self._stop_before_delete(summary)
            await self._boundary.delete_config(path, summary.label)
            return
        await self._boundary.apply_action(_DAEMON_ACTIONS[action], path, summary.label)

    async def _stop_before_delete(self, summary: JobSummary) -> None:
        """Best-effort stop ahead of delete; failures are ignored.

        Args:
            summary: Target job summary.
        """
        try:
            await self._boundary.apply_action(
                DaemonAction.STOP, summary.config_path, summary.label
            )
        except JobError as exc:
            _LOGGER.debug(
                "Ignoring stop failure before delete of %s: %s", summary.label, exc
            )
