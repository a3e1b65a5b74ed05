"""Async wrapper around the ``launchctl`` control binary."""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict

from launchdeck.jobs.errors import JobError, JobErrorCode
from launchdeck.kernel.run_cmd import CommandOutput, run_subprocess

_LOGGER = logging.getLogger(__name__)

_ALREADY_LOADED_MARKERS = ("already loaded", "service already loaded")
_NOT_LOADED_MARKERS = (
    "not loaded",
    "No such process",
    "Could not find specified service",
)
_IO_ERROR_HINT = " Try re-running the command as root for richer errors."


class LoadedService(BaseModel):
    """One row of ``launchctl list`` output."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    label: str
    pid: int | None = None
    last_exit_code: int | None = None


def _parse_int(raw: str) -> int | None:
    try:
        return int(raw.strip())
    except ValueError:
        return None


def parse_list_output(output: str) -> list[LoadedService]:
    """Parse tab-separated ``PID Status Label`` rows.

    The header row is skipped, rows with fewer than three columns or an empty
    label are ignored, and ``-`` in a numeric column means absent.

    Args:
        output: Raw ``launchctl list`` stdout.

    Returns:
        Loaded services in output order.
    """
    services: list[LoadedService] = []
    for line in output.splitlines()[1:]:
        parts = line.split("\t")
        if len(parts) < 3:
            continue
        label = parts[2].strip()
        if not label:
            continue
        pid = _parse_int(parts[0])
        services.append(
            LoadedService(
                label=label,
                pid=pid if pid is not None and pid > 0 else None,
                last_exit_code=_parse_int(parts[1]),
            )
        )
    return services


class Launchctl:
    """Issue lifecycle commands against the per-user launchd domain."""

    def __init__(
        self,
        *,
        binary: str = "launchctl",
        timeout_seconds: float = 30.0,
        domain: str | None = None,
    ) -> None:
        """Store invocation settings.

        Args:
            binary: ``launchctl`` executable name or path.
            timeout_seconds: Per-call timeout.
            domain: Domain target override; ``gui/<uid>`` when omitted.
        """
        self._binary = binary
        self._timeout = timeout_seconds
        self._domain = domain or f"gui/{os.getuid()}"

    @property
    def domain(self) -> str:
        """Return the launchd domain target."""
        return self._domain

    def service_target(self, label: str) -> str:
        """Return the service target for one label.

        Args:
            label: Job label.

        Returns:
            ``<domain>/<label>`` target string.
        """
        return f"{self._domain}/{label}"

    async def list_loaded(self) -> list[LoadedService]:
        """List services currently loaded in launchd.

        Returns:
            Loaded services.

        Raises:
            JobError: If ``launchctl list`` cannot be run or fails.
        """
        try:
            output = await self._run(["list"])
        except JobError as exc:
            raise JobError(
                JobErrorCode.CONNECTION_FAILED,
                str(exc),
                data=exc.data,
            ) from exc
        if not output.ok:
            raise JobError(
                JobErrorCode.CONNECTION_FAILED,
                f"launchctl list failed: {output.stderr.strip()}",
                data={"returncode": output.returncode},
            )
        return parse_list_output(output.stdout)

    async def bootstrap(self, plist_path: str) -> None:
        """Load a job into the domain; an already loaded job is fine.

        Args:
            plist_path: Backing configuration file path.

        Raises:
            JobError: If launchd rejects the load.
        """
        output = await self._run(["bootstrap", self._domain, plist_path])
        if output.ok:
            return
        stderr = output.stderr.strip()
        if any(marker in stderr for marker in _ALREADY_LOADED_MARKERS):
            return
        hint = _IO_ERROR_HINT if "Input/output error" in stderr else ""
        raise JobError(
            JobErrorCode.DAEMON_FAILED,
            f"Bootstrap failed for {plist_path}: {stderr}{hint}",
            data={"path": plist_path, "returncode": output.returncode},
        )

    async def bootout(self, plist_path: str) -> None:
        """Unload a job from the domain; a job that is not loaded is fine.

        Args:
            plist_path: Backing configuration file path.

        Raises:
            JobError: If launchd rejects the unload.
        """
        output = await self._run(["bootout", self._domain, plist_path])
        if output.ok:
            return
        stderr = output.stderr.strip()
        if any(marker in stderr for marker in _NOT_LOADED_MARKERS):
            return
        raise JobError(
            JobErrorCode.DAEMON_FAILED,
            f"launchctl bootout failed: {stderr}",
            data={"path": plist_path, "returncode": output.returncode},
        )

    async def kickstart(self, label: str) -> None:
        """Force an immediate run, killing a running instance first.

        Args:
            label: Job label.
        """
        await self._checked(
            "kickstart", ["kickstart", "-k", self.service_target(label)]
        )

    async def enable(self, label: str) -> None:
        """Clear the job's disabled override.

        Args:
            label: Job label.
        """
        await self._checked("enable", ["enable", self.service_target(label)])

    async def disable(self, label: str) -> None:
        """Set the job's disabled override.

        Args:
            label: Job label.
        """
        await self._checked("disable", ["disable", self.service_target(label)])

    async def _checked(self, verb: str, args: Sequence[str]) -> None:
        """Run a subcommand and raise on non-zero exit.

        Args:
            verb: Subcommand name for messages.
            args: Subcommand arguments.

        Raises:
            JobError: If the subcommand fails.
        """
        output = await self._run(args)
        if not output.ok:
            raise JobError(
                JobErrorCode.DAEMON_FAILED,
                f"launchctl {verb} failed: {output.stderr.strip()}",
                data={"returncode": output.returncode},
            )

    async def _run(self, args: Sequence[str]) -> CommandOutput:
        """Invoke the binary with one subcommand.

        Args:
            args: Subcommand arguments.

        Returns:
            Captured output.

        Raises:
            JobError: If the binary is missing or times out.
        """
        argv = [self._binary, *args]
        _LOGGER.debug("Running %s", " ".join(argv))
        try:
            return await run_subprocess(argv, timeout=self._timeout)
        except FileNotFoundError as exc:
            raise JobError(
                JobErrorCode.DAEMON_FAILED,
                f"failed to run launchctl {args[0]}: {exc}",
                data={"argv": argv},
            ) from exc
        except TimeoutError as exc:
            raise JobError(
                JobErrorCode.DAEMON_FAILED,
                f"launchctl {args[0]} timed out after {self._timeout}s",
                data={"argv": argv},
            ) from exc
