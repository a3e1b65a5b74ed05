"""Job controller: validate, gate, call the boundary, then refresh."""

from __future__ import annotations

import logging
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from launchdeck.jobs.boundary import JobBoundary
from launchdeck.jobs.catalog import JobCatalog
from launchdeck.jobs.editor import EditSession
from launchdeck.jobs.errors import JobError, JobErrorCode
from launchdeck.jobs.gate import ActionOutcome, JobAction, JobActionGate
from launchdeck.jobs.models import JobDetail, JobSummary

_LOGGER = logging.getLogger(__name__)


class ActionReport(BaseModel):
    """Outcome of one action plus the follow-up refresh result."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    outcome: ActionOutcome
    refresh_error: str | None = None


class SaveReport(BaseModel):
    """Persisted config path plus the follow-up refresh result."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    config_path: str
    refresh_error: str | None = None


class LogReport(BaseModel):
    """Log content, or an empty result plus message on read failure."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: str
    content: str = ""
    modified_at: datetime | None = None
    error: str | None = None


class JobController:
    """Single entry point the interface layer drives."""

    def __init__(
        self,
        boundary: JobBoundary,
        *,
        catalog: JobCatalog | None = None,
        gate: JobActionGate | None = None,
    ) -> None:
        """Store collaborators.

        Args:
            boundary: Daemon/filesystem boundary.
            catalog: Catalog to refresh; a new one when omitted.
            gate: Action gate; built over ``boundary`` when omitted.
        """
        self._boundary = boundary
        self.catalog = catalog or JobCatalog()
        self._gate = gate or JobActionGate(boundary)

    async def refresh(self) -> tuple[JobSummary, ...]:
        """Pull every summary from the boundary and swap the catalog snapshot.

        Returns:
            Currently visible summaries.
        """
        summaries = await self._boundary.list_job_summaries()
        self.catalog.replace(summaries)
        _LOGGER.debug("Catalog refreshed with %d jobs", len(self.catalog.jobs))
        return self.catalog.visible()

    async def detail(self, path: str) -> JobDetail:
        """Load one job's full detail.

        Args:
            path: Backing configuration file path.

        Returns:
            Job detail.
        """
        return await self._boundary.get_job_detail(path)

    async def resolve(self, label: str) -> JobSummary:
        """Find one job by label, refreshing the catalog if it is not held.

        Args:
            label: Job label.

        Returns:
            Matching summary.

        Raises:
            JobError: If no job carries the label.
        """
        summary = self.catalog.find(label)
        if summary is None:
            await self.refresh()
            summary = self.catalog.find(label)
        if summary is None:
            raise JobError(
                JobErrorCode.NOT_FOUND,
                f"Error: job '{label}' not found.",
                data={"label": label},
            )
        return summary

    async def run_action(self, summary: JobSummary, action: JobAction) -> ActionReport:
        """Gate and run one action, refreshing the catalog on success.

        Args:
            summary: Target job summary.
            action: Requested action.

        Returns:
            Action outcome and refresh status.
        """
        outcome = await self._gate.perform(summary, action)
        if not outcome.succeeded:
            return ActionReport(outcome=outcome)
        return ActionReport(outcome=outcome, refresh_error=await self._try_refresh())

    async def save(self, session: EditSession) -> SaveReport:
        """Persist an edit session, refreshing the catalog afterwards.

        The session is validated before anything else; existing jobs must
        then pass the edit gate.

        Args:
            session: Open edit session.

        Returns:
            Saved path and refresh status.

        Raises:
            JobError: On validation, permission or boundary failure.
        """
        session.build()
        if not session.is_new and session.config_path is not None:
            self._require_edit(await self.resolve(session.label))
        path = await session.submit(self._boundary)
        return SaveReport(config_path=path, refresh_error=await self._try_refresh())

    async def save_raw(self, summary: JobSummary, text: str) -> SaveReport:
        """Overwrite one job's file with raw text after the edit gate.

        Args:
            summary: Target job summary.
            text: Raw configuration text.

        Returns:
            Saved path and refresh status.

        Raises:
            JobError: On permission or boundary failure.
        """
        self._require_edit(summary)
        await self._boundary.save_raw_config(summary.config_path, text)
        return SaveReport(
            config_path=summary.config_path, refresh_error=await self._try_refresh()
        )

    async def open_in_editor(self, summary: JobSummary) -> None:
        """Open one job's file in the external text editor after the edit gate.

        Args:
            summary: Target job summary.

        Raises:
            JobError: On permission or boundary failure.
        """
        self._require_edit(summary)
        await self._boundary.open_in_editor(summary.config_path)

    async def read_log(self, path: str, tail_lines: int | None) -> LogReport:
        """Read a log tail; failures become an empty report with a message.

        Args:
            path: Log file path.
            tail_lines: Max trailing lines, or ``None`` for all.

        Returns:
            Log report.
        """
        try:
            tail = await self._boundary.read_log(path, tail_lines)
        except JobError as exc:
            return LogReport(path=path, error=str(exc))
        return LogReport(path=path, content=tail.content, modified_at=tail.modified_at)

    def _require_edit(self, summary: JobSummary) -> None:
        decision = self._gate.check(summary, JobAction.EDIT)
        if not decision.allowed:
            raise JobError(
                JobErrorCode.PERMISSION_DENIED,
                f"Error: cannot edit '{summary.label}': {decision.reason}",
                data={"label": summary.label, "action": JobAction.EDIT.value},
            )

    async def _try_refresh(self) -> str | None:
        """Refresh the catalog without letting failure escape.

        Returns:
            Failure message, or ``None`` on success.
        """
        try:
            await self.refresh()
        except JobError as exc:
            _LOGGER.warning("Catalog refresh failed: %s", exc)
            return str(exc)
        return None
