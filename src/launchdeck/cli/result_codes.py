"""Result code groupings used by CLI rendering policy."""

from __future__ import annotations

HIDE_DATA_CODES = frozenset(
    {
        "jobs_listed",
        "jobs_empty",
        "job_shown",
        "job_raw_shown",
        "schedule_previewed",
        "job_action_succeeded",
        "job_saved",
        "job_opened",
        "log_read",
        "log_empty",
    }
)

DENIED_CODES = frozenset(
    {
        "job_action_denied",
        "job_permission_denied",
    }
)

DAEMON_FAILURE_CODES = frozenset(
    {
        "job_action_failed",
        "job_daemon_failed",
        "job_connection_failed",
    }
)
