"""Job log tailing and terminal-safe sanitizing."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from pathlib import Path

from launchdeck.jobs.errors import JobError, JobErrorCode
from launchdeck.jobs.models import LogTail

_ANSI_CSI_RE = re.compile(r"\x1b\[[0-9;?]*[a-zA-Z]")
_ANSI_OSC_RE = re.compile(r"\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def sanitize_log_text(text: str) -> str:
    """Strip ANSI escape sequences and stray control characters.

    Tabs, newlines and carriage returns are kept.

    Args:
        text: Raw log text.

    Returns:
        Printable text.
    """
    text = _ANSI_CSI_RE.sub("", text)
    text = _ANSI_OSC_RE.sub("", text)
    return _CONTROL_RE.sub("", text)


def read_log_tail(
    path: Path, tail_lines: int | None, *, sanitize: bool = True
) -> LogTail:
    """Read the last ``tail_lines`` lines of a log file.

    Args:
        path: Log file path.
        tail_lines: Max trailing lines, or ``None`` for the whole file.
        sanitize: Whether to strip terminal escape sequences.

    Returns:
        Log tail with the file's modification time.

    Raises:
        JobError: If the file is missing or unreadable.
    """
    if not path.exists():
        raise JobError(
            JobErrorCode.NOT_FOUND,
            f"log file not found: {path}",
            data={"path": str(path)},
        )
    try:
        modified_at = datetime.fromtimestamp(path.stat().st_mtime, tz=UTC)
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise JobError(
            JobErrorCode.IO_FAILED,
            f"io error: {exc}",
            data={"path": str(path)},
        ) from exc
    if tail_lines is not None:
        lines = content.splitlines()
        content = "\n".join(lines[max(len(lines) - tail_lines, 0) :])
    if sanitize:
        content = sanitize_log_text(content)
    return LogTail(content=content, modified_at=modified_at)
