"""Boundary port between the job core and the daemon/filesystem layer."""

from __future__ import annotations

from enum import StrEnum
from typing import Protocol

from launchdeck.jobs.models import JobConfig, JobDetail, JobSummary, LogTail


class DaemonAction(StrEnum):
    """Lifecycle commands the daemon accepts through the boundary."""

    START = "start"
    STOP = "stop"
    RESTART = "restart"
    KICKSTART = "kickstart"
    ENABLE = "enable"
    DISABLE = "disable"


class JobBoundary(Protocol):
    """Async port implemented by the launchd layer and by test doubles.

    Failures are raised as :class:`launchdeck.jobs.errors.JobError`.
    """

    async def list_job_summaries(self) -> list[JobSummary]:
        """List every known job."""

    async def get_job_detail(self, path: str) -> JobDetail:
        """Load one job's summary fields and config.

        Args:
            path: Backing configuration file path.
        """

    async def apply_action(self, kind: DaemonAction, path: str, label: str) -> None:
        """Send one lifecycle command to the daemon.

        Args:
            kind: Lifecycle command.
            path: Backing configuration file path.
            label: Job label.
        """

    async def save_config(self, path: str, config: JobConfig) -> None:
        """Overwrite an existing job's configuration file.

        Args:
            path: Backing configuration file path.
            config: Config to persist.
        """

    async def create_config(self, label: str, config: JobConfig) -> str:
        """Create a configuration file for a new job.

        Args:
            label: New job label.
            config: Config to persist.
        """

    async def save_raw_config(self, path: str, text: str) -> None:
        """Overwrite a configuration file with raw source text.

        Args:
            path: Backing configuration file path.
            text: Raw file content.
        """

    async def delete_config(self, path: str, label: str) -> None:
        """Unload a job and remove its configuration file.

        Args:
            path: Backing configuration file path.
            label: Job label.
        """

    async def read_log(self, path: str, tail_lines: int | None) -> LogTail:
        """Read the tail of one log file.

        Args:
            path: Log file path.
            tail_lines: Max trailing lines, or ``None`` for the whole file.
        """

    async def reveal(self, path: str) -> None:
        """Reveal a file in the platform file browser.

        Args:
            path: File path.
        """

    async def open_in_editor(self, path: str) -> None:
        """Open a file in the platform text editor.

        Args:
            path: File path.
        """
