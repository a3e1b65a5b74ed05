"""launchd-backed implementation of the job boundary."""

from __future__ import annotations

import logging
from pathlib import Path

from launchdeck.config import LaunchdeckConfig
from launchdeck.jobs.boundary import DaemonAction
from launchdeck.jobs.errors import JobError, JobErrorCode
from launchdeck.jobs.models import (
    JobConfig,
    JobDetail,
    JobSource,
    JobStatus,
    JobSummary,
    LogTail,
)
from launchdeck.kernel.run_cmd import spawn_detached
from launchdeck.launchd.launchctl import Launchctl, LoadedService
from launchdeck.launchd.logs import read_log_tail
from launchdeck.launchd.plist_store import PlistStore

_LOGGER = logging.getLogger(__name__)

_USER_ONLY_ACTIONS = frozenset(
    {
        DaemonAction.START,
        DaemonAction.STOP,
        DaemonAction.RESTART,
        DaemonAction.ENABLE,
        DaemonAction.DISABLE,
    }
)


def _runtime_state(
    service: LoadedService | None,
) -> tuple[JobStatus, int | None, int | None]:
    """Derive status, pid and exit code from an optional loaded service.

    Args:
        service: ``launchctl list`` row, or ``None`` when not loaded.

    Returns:
        Status, pid and last exit code.
    """
    if service is None:
        return JobStatus.STOPPED, None, None
    status = JobStatus.RUNNING if service.pid is not None else JobStatus.STOPPED
    return status, service.pid, service.last_exit_code


class LaunchdBoundary:
    """Talk to launchd through ``launchctl`` and the plist directories."""

    def __init__(
        self,
        config: LaunchdeckConfig,
        *,
        launchctl: Launchctl | None = None,
        store: PlistStore | None = None,
    ) -> None:
        """Wire collaborators from config unless injected.

        Args:
            config: Global launchdeck config.
            launchctl: Optional prebuilt launchctl wrapper.
            store: Optional prebuilt plist store.
        """
        self._config = config
        self._launchctl = launchctl or Launchctl(
            binary=config.launchctl.binary,
            timeout_seconds=config.launchctl.timeout_seconds,
            domain=config.launchctl.domain,
        )
        self._store = store or PlistStore(config.paths)

    async def list_job_summaries(self) -> list[JobSummary]:
        """List every job file joined with its loaded state.

        Unparsable files are skipped with a warning.

        Returns:
            Job summaries ordered by label.

        Raises:
            JobError: If ``launchctl list`` fails.
        """
        loaded = {
            service.label: service for service in await self._launchctl.list_loaded()
        }
        summaries: list[JobSummary] = []
        for path, source in self._store.scan():
            try:
                config = self._store.parse_config(path)
            except JobError as exc:
                _LOGGER.warning("Skipping unreadable job file %s: %s", path, exc)
                continue
            status, pid, exit_code = _runtime_state(loaded.get(config.label))
            summaries.append(
                JobSummary(
                    label=config.label,
                    source=source,
                    status=status,
                    pid=pid,
                    last_exit_code=exit_code,
                    config_path=str(path),
                )
            )
        return sorted(summaries, key=lambda item: item.label)

    async def get_job_detail(self, path: str) -> JobDetail:
        """Load one job's config and current runtime state.

        Runtime state degrades to unknown when ``launchctl list`` fails.

        Args:
            path: Backing configuration file path.

        Returns:
            Job detail.

        Raises:
            JobError: If the file is missing or malformed.
        """
        file_path = Path(path)
        config = self._store.parse_config(file_path)
        try:
            loaded = await self._launchctl.list_loaded()
        except JobError as exc:
            _LOGGER.warning("Runtime state unavailable for %s: %s", config.label, exc)
            status, pid, exit_code = JobStatus.UNKNOWN, None, None
        else:
            service = next((s for s in loaded if s.label == config.label), None)
            status, pid, exit_code = _runtime_state(service)
        return JobDetail(
            label=config.label,
            config_path=path,
            source=self._store.classify_source(file_path),
            status=status,
            pid=pid,
            last_exit_code=exit_code,
            config=config,
        )

    async def apply_action(self, kind: DaemonAction, path: str, label: str) -> None:
        """Send one lifecycle command through ``launchctl``.

        Args:
            kind: Lifecycle command.
            path: Backing configuration file path.
            label: Job label.

        Raises:
            JobError: If the path is not a user agent or launchd rejects it.
        """
        if kind in _USER_ONLY_ACTIONS:
            self._ensure_user_agent(path)
        if kind in {DaemonAction.START, DaemonAction.RESTART}:
            await self._bootout_quietly(path)
            await self._launchctl.bootstrap(path)
        elif kind == DaemonAction.STOP:
            await self._launchctl.bootout(path)
        elif kind == DaemonAction.KICKSTART:
            await self._kickstart(path, label)
        elif kind == DaemonAction.ENABLE:
            await self._launchctl.enable(label)
        elif kind == DaemonAction.DISABLE:
            await self._launchctl.disable(label)

    async def save_config(self, path: str, config: JobConfig) -> None:
        """Overwrite an existing job file.

        Args:
            path: Backing configuration file path.
            config: Config to persist.
        """
        self._store.write_config(Path(path), config)

    async def create_config(self, label: str, config: JobConfig) -> str:
        """Create a new user agent file named after the label.

        Args:
            label: New job label.
            config: Config to persist.

        Returns:
            New file path.

        Raises:
            JobError: If a job file with this label already exists.
        """
        path = self._store.config_path_for(label)
        if path.exists():
            raise JobError(
                JobErrorCode.INVALID_CONFIG,
                f"Error: a job file already exists at {path}.",
                data={"label": label, "path": str(path)},
            )
        self._store.write_config(path, config)
        return str(path)

    async def save_raw_config(self, path: str, text: str) -> None:
        """Overwrite a job file with validated raw XML.

        Args:
            path: Backing configuration file path.
            text: Raw XML text.
        """
        self._store.write_raw(Path(path), text)

    async def delete_config(self, path: str, label: str) -> None:
        """Unload and disable a job, then remove its file.

        Args:
            path: Backing configuration file path.
            label: Job label.
        """
        await self._bootout_quietly(path)
        try:
            await self._launchctl.disable(label)
        except JobError as exc:
            _LOGGER.debug("Ignoring disable failure for %s: %s", label, exc)
        self._store.remove(Path(path))

    async def read_log(self, path: str, tail_lines: int | None) -> LogTail:
        """Read the tail of one log file.

        Args:
            path: Log file path.
            tail_lines: Max trailing lines, or ``None`` for all.

        Returns:
            Log tail.
        """
        return read_log_tail(
            Path(path).expanduser(), tail_lines, sanitize=self._config.logs.sanitize
        )

    async def reveal(self, path: str) -> None:
        """Reveal a file in Finder.

        Args:
            path: File path.
        """
        await self._open(["-R", path])

    async def open_in_editor(self, path: str) -> None:
        """Open a file in the default text editor.

        Args:
            path: File path.
        """
        await self._open(["-t", path])

    async def _kickstart(self, path: str, label: str) -> None:
        """Load the job if needed, then force one run.

        Args:
            path: Backing configuration file path.
            label: Job label.
        """
        try:
            loaded = await self._launchctl.list_loaded()
        except JobError as exc:
            _LOGGER.debug("Assuming %s is not loaded: %s", label, exc)
            loaded = []
        if not any(service.label == label for service in loaded):
            await self._launchctl.bootstrap(path)
        await self._launchctl.kickstart(label)

    async def _bootout_quietly(self, path: str) -> None:
        try:
            await self._launchctl.bootout(path)
        except JobError as exc:
            _LOGGER.debug("Ignoring bootout failure for %s: %s", path, exc)

    def _ensure_user_agent(self, path: str) -> None:
        """Refuse lifecycle commands on files outside the user agents dir.

        Args:
            path: Backing configuration file path.

        Raises:
            JobError: If the file belongs to a system directory.
        """
        if self._store.classify_source(Path(path)) != JobSource.USER_AGENT:
            raise JobError(
                JobErrorCode.PERMISSION_DENIED,
                (
                    "Cannot start/stop system agents or daemons. Only user agents "
                    f"({self._store.user_agents_dir}) can be managed."
                ),
                data={"path": path},
            )

    async def _open(self, args: list[str]) -> None:
        argv = [self._config.integrations.open_binary, *args]
        try:
            await spawn_detached(argv)
        except OSError as exc:
            raise JobError(
                JobErrorCode.IO_FAILED,
                f"io error: {exc}",
                data={"argv": argv},
            ) from exc
