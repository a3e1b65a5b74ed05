"""Crash-safe replacement of job property-list files."""

from __future__ import annotations

import contextlib
import os
import stat
import uuid
from pathlib import Path

# launchd refuses agents whose files are group or world writable.
DEFAULT_FILE_MODE = 0o644


def replace_file(path: Path, data: bytes) -> None:
    """Replace ``path`` with ``data``; readers see the old or the new file.

    The content goes to a hidden sibling first and is renamed over ``path``.
    An existing file keeps its permission bits; a new one gets
    :data:`DEFAULT_FILE_MODE`.

    Args:
        path: Job file to create or replace.
        data: Complete new file content.

    Raises:
        OSError: If any write, sync or rename step fails. The sibling file is
            removed and ``path`` is left as it was.
    """
    mode = _current_mode(path)
    sibling = path.with_name(f".{path.name}.{uuid.uuid4().hex[:8]}.tmp")
    try:
        with os.fdopen(
            os.open(sibling, os.O_WRONLY | os.O_CREAT | os.O_EXCL, mode), "wb"
        ) as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(sibling, mode)
        os.replace(sibling, path)
    finally:
        sibling.unlink(missing_ok=True)
    _sync_directory(path.parent)


def _current_mode(path: Path) -> int:
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        return DEFAULT_FILE_MODE


def _sync_directory(directory: Path) -> None:
    """Flush the rename to disk; skipped where directories cannot be opened."""
    try:
        fd = os.open(directory, os.O_RDONLY)
    except OSError:
        return
    try:
        with contextlib.suppress(OSError):
            os.fsync(fd)
    finally:
        os.close(fd)
