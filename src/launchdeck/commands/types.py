"""Result envelope returned by every job command."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

from launchdeck.jobs.errors import JobError


class CommandStatus(StrEnum):
    """Whether a job command completed; drives the CLI exit code."""

    OK = "ok"
    ERROR = "error"


class CommandResult(BaseModel):
    """Outcome of one job command.

    ``code`` is the stable key the CLI renderer dispatches on, for example
    ``jobs_listed``, ``job_action_denied`` or one of the ``JobErrorCode``
    values. ``data`` holds job rows, projected runs or log metadata for the
    richer views; plain panels fall back to ``message``.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    status: CommandStatus
    code: str
    message: str
    data: dict[str, Any] | None = None

    @property
    def exit_code(self) -> int:
        """Return the process exit code for this result."""
        return 0 if self.status == CommandStatus.OK else 1

    @classmethod
    def ok(
        cls, message: str, *, code: str, data: dict[str, Any] | None = None
    ) -> CommandResult:
        """Build a completed result."""
        return cls(status=CommandStatus.OK, code=code, message=message, data=data)

    @classmethod
    def error(
        cls, message: str, *, code: str, data: dict[str, Any] | None = None
    ) -> CommandResult:
        """Build a failed result."""
        return cls(status=CommandStatus.ERROR, code=code, message=message, data=data)

    @classmethod
    def from_job_error(cls, exc: JobError) -> CommandResult:
        """Convert a job failure into a failed result keyed by its error code.

        Args:
            exc: Raised job error.

        Returns:
            Failed result carrying the error's message and payload.
        """
        return cls.error(str(exc), code=exc.code.value, data=exc.data or None)
