"""Deterministic job error contracts."""

from __future__ import annotations

from enum import StrEnum


class JobErrorCode(StrEnum):
    """Stable job model/boundary error codes."""

    NOT_FOUND = "job_not_found"
    INVALID_CONFIG = "job_invalid_config"
    PERMISSION_DENIED = "job_permission_denied"
    DAEMON_FAILED = "job_daemon_failed"
    IO_FAILED = "job_io_failed"
    CONNECTION_FAILED = "job_connection_failed"


class JobError(RuntimeError):
    """Job failure with stable deterministic code."""

    def __init__(
        self,
        code: JobErrorCode,
        message: str,
        *,
        data: dict[str, object] | None = None,
    ) -> None:
        """Create job failure.

        Args:
            code: Stable job error code.
            message: Human-readable error message.
            data: Optional structured payload for diagnostics.
        """
        super().__init__(message)
        self.code = code
        self.data = data or {}
