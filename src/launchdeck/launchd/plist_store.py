"""Property-list backed storage of job configuration files."""

from __future__ import annotations

import logging
import plistlib
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from xml.parsers.expat import ExpatError

from pydantic import ValidationError

from launchdeck.config import LaunchdPathsSettings
from launchdeck.jobs.errors import JobError, JobErrorCode
from launchdeck.jobs.models import CalendarTrigger, JobConfig, JobSource
from launchdeck.kernel.atomic_write import replace_file

_LOGGER = logging.getLogger(__name__)

_PLIST_ERRORS = (plistlib.InvalidFileException, ValueError, ExpatError)

_CALENDAR_KEYS = {
    "Minute": "minute",
    "Hour": "hour",
    "Day": "day_of_month",
    "Weekday": "weekday",
    "Month": "month",
}


def _string(payload: Mapping[str, Any], key: str) -> str | None:
    value = payload.get(key)
    return value if isinstance(value, str) else None


def _bool(payload: Mapping[str, Any], key: str) -> bool | None:
    value = payload.get(key)
    return value if isinstance(value, bool) else None


def _int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _string_list(payload: Mapping[str, Any], key: str) -> tuple[str, ...] | None:
    value = payload.get(key)
    if not isinstance(value, list):
        return None
    return tuple(item for item in value if isinstance(item, str))


def _environment(payload: Mapping[str, Any]) -> dict[str, str] | None:
    value = payload.get("EnvironmentVariables")
    if not isinstance(value, dict):
        return None
    return {key: item for key, item in value.items() if isinstance(item, str)}


def _calendar_trigger(entry: Mapping[str, Any]) -> CalendarTrigger:
    fields: dict[str, int] = {}
    for plist_key, field_name in _CALENDAR_KEYS.items():
        number = _int(entry.get(plist_key))
        if number is None:
            continue
        if field_name == "weekday" and number == 7:
            number = 0
        fields[field_name] = number
    return CalendarTrigger(**fields)


def _calendar_triggers(
    payload: Mapping[str, Any],
) -> tuple[CalendarTrigger, ...] | None:
    """Read ``StartCalendarInterval`` as one dict or an array of dicts.

    Args:
        payload: Decoded property list.

    Returns:
        Parsed triggers, or ``None`` when absent or empty.
    """
    value = payload.get("StartCalendarInterval")
    if isinstance(value, dict):
        return (_calendar_trigger(value),)
    if isinstance(value, list):
        triggers = tuple(
            _calendar_trigger(item) for item in value if isinstance(item, dict)
        )
        return triggers or None
    return None


def config_from_payload(
    payload: Mapping[str, Any], *, fallback_label: str, raw_source_text: str = ""
) -> JobConfig:
    """Map a decoded property list onto a job config.

    Args:
        payload: Decoded property list dictionary.
        fallback_label: Label used when the file has none.
        raw_source_text: Original XML text kept for round trips.

    Returns:
        Parsed job config.

    Raises:
        JobError: If a field is out of range.
    """
    interval = _int(payload.get("StartInterval"))
    try:
        return JobConfig(
            label=_string(payload, "Label") or fallback_label,
            program=_string(payload, "Program"),
            argument_vector=_string_list(payload, "ProgramArguments"),
            run_at_load=_bool(payload, "RunAtLoad"),
            keep_alive=_bool(payload, "KeepAlive"),
            interval_seconds=(
                interval if interval is not None and interval > 0 else None
            ),
            calendar_triggers=_calendar_triggers(payload),
            stdout_path=_string(payload, "StandardOutPath"),
            stderr_path=_string(payload, "StandardErrorPath"),
            working_directory=_string(payload, "WorkingDirectory"),
            environment=_environment(payload),
            disabled=_bool(payload, "Disabled"),
            raw_source_text=raw_source_text,
        )
    except ValidationError as exc:
        raise JobError(
            JobErrorCode.INVALID_CONFIG,
            f"Error: invalid job config for '{fallback_label}'.",
            data={"validation_errors": exc.errors()},
        ) from exc


def payload_from_config(config: JobConfig) -> dict[str, Any]:
    """Render a job config as a property list dictionary.

    Absent optional fields are omitted; calendar triggers are always written
    as an array.

    Args:
        config: Job config.

    Returns:
        Property list dictionary.
    """
    payload: dict[str, Any] = {"Label": config.label}
    if config.program is not None:
        payload["Program"] = config.program
    if config.argument_vector is not None:
        payload["ProgramArguments"] = list(config.argument_vector)
    if config.run_at_load is not None:
        payload["RunAtLoad"] = config.run_at_load
    if config.keep_alive is not None:
        payload["KeepAlive"] = config.keep_alive
    if config.interval_seconds is not None:
        payload["StartInterval"] = config.interval_seconds
    if config.calendar_triggers is not None:
        payload["StartCalendarInterval"] = [
            {
                plist_key: getattr(trigger, field_name)
                for plist_key, field_name in _CALENDAR_KEYS.items()
                if getattr(trigger, field_name) is not None
            }
            for trigger in config.calendar_triggers
        ]
    if config.stdout_path is not None:
        payload["StandardOutPath"] = config.stdout_path
    if config.stderr_path is not None:
        payload["StandardErrorPath"] = config.stderr_path
    if config.working_directory is not None:
        payload["WorkingDirectory"] = config.working_directory
    if config.environment is not None:
        payload["EnvironmentVariables"] = dict(config.environment)
    if config.disabled is not None:
        payload["Disabled"] = config.disabled
    return payload


class PlistStore:
    """Scan, read and write job property lists in the launchd directories."""

    def __init__(self, paths: LaunchdPathsSettings) -> None:
        """Store directory settings.

        Args:
            paths: launchd directory settings.
        """
        self._user_agents = paths.resolved_user_agents_dir()
        self._system_agents = paths.resolved_system_agents_dir()
        self._system_daemons = paths.resolved_system_daemons_dir()

    @property
    def user_agents_dir(self) -> Path:
        """Return the directory new jobs are created in."""
        return self._user_agents

    def directories(self) -> tuple[tuple[Path, JobSource], ...]:
        """Return scanned directories with their source tier.

        Returns:
            User agents always; system directories only when present.
        """
        dirs: list[tuple[Path, JobSource]] = [
            (self._user_agents, JobSource.USER_AGENT)
        ]
        if self._system_agents.exists():
            dirs.append((self._system_agents, JobSource.SYSTEM_AGENT))
        if self._system_daemons.exists():
            dirs.append((self._system_daemons, JobSource.SYSTEM_DAEMON))
        return tuple(dirs)

    def scan(self) -> tuple[tuple[Path, JobSource], ...]:
        """List every ``*.plist`` file with its source tier.

        Returns:
            Deterministically ordered file list.
        """
        found: list[tuple[Path, JobSource]] = []
        for directory, source in self.directories():
            if not directory.is_dir():
                continue
            found.extend((path, source) for path in sorted(directory.glob("*.plist")))
        return tuple(found)

    def classify_source(self, path: Path) -> JobSource:
        """Infer a file's source tier from its directory.

        Args:
            path: Configuration file path.

        Returns:
            Source tier; user agent when outside the system directories.
        """
        if path.is_relative_to(self._system_daemons):
            return JobSource.SYSTEM_DAEMON
        if path.is_relative_to(self._system_agents):
            return JobSource.SYSTEM_AGENT
        return JobSource.USER_AGENT

    def config_path_for(self, label: str) -> Path:
        """Return the user-agent path a new job with ``label`` is written to.

        Args:
            label: Job label.

        Returns:
            ``<user agents>/<label>.plist``.

        Raises:
            JobError: If the label would escape the agents directory.
        """
        if "/" in label or label in {".", ".."}:
            raise JobError(
                JobErrorCode.INVALID_CONFIG,
                f"Error: label '{label}' is not a valid file name.",
                data={"label": label},
            )
        return self._user_agents / f"{label}.plist"

    def parse_config(self, path: Path) -> JobConfig:
        """Read one property list into a job config.

        Args:
            path: Configuration file path.

        Returns:
            Parsed job config with raw XML attached.

        Raises:
            JobError: If the file is missing, unreadable or malformed.
        """
        data = self._read_bytes(path)
        try:
            payload = plistlib.loads(data)
        except _PLIST_ERRORS as exc:
            raise JobError(
                JobErrorCode.IO_FAILED,
                f"plist error: {path}: {exc}",
                data={"path": str(path)},
            ) from exc
        if not isinstance(payload, dict):
            raise JobError(
                JobErrorCode.IO_FAILED,
                f"plist error: {path}: not a dictionary",
                data={"path": str(path)},
            )
        return config_from_payload(
            payload,
            fallback_label=path.stem,
            raw_source_text=self._render_xml(data, payload),
        )

    def read_raw(self, path: Path) -> str:
        """Read a property list as XML text, converting binary files.

        Args:
            path: Configuration file path.

        Returns:
            XML text.

        Raises:
            JobError: If the file is missing, unreadable or malformed.
        """
        data = self._read_bytes(path)
        try:
            payload = plistlib.loads(data)
        except _PLIST_ERRORS as exc:
            raise JobError(
                JobErrorCode.IO_FAILED,
                f"failed to parse plist: {exc}",
                data={"path": str(path)},
            ) from exc
        return self._render_xml(data, payload)

    def write_config(self, path: Path, config: JobConfig) -> None:
        """Write a job config as an XML property list.

        Args:
            path: Destination file path.
            config: Job config.

        Raises:
            JobError: If the file cannot be written.
        """
        data = plistlib.dumps(payload_from_config(config), fmt=plistlib.FMT_XML)
        self._write_bytes(path, data)

    def write_raw(self, path: Path, text: str) -> None:
        """Write raw XML after checking it parses as a property list.

        Args:
            path: Destination file path.
            text: Raw XML text.

        Raises:
            JobError: If the text is not a valid property list or cannot be
                written.
        """
        data = text.encode("utf-8")
        try:
            plistlib.loads(data)
        except _PLIST_ERRORS as exc:
            raise JobError(
                JobErrorCode.INVALID_CONFIG,
                f"invalid plist XML: {exc}",
                data={"path": str(path)},
            ) from exc
        self._write_bytes(path, data)

    def remove(self, path: Path) -> None:
        """Delete a configuration file if it exists.

        Args:
            path: Configuration file path.

        Raises:
            JobError: If the file exists but cannot be removed.
        """
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise JobError(
                JobErrorCode.IO_FAILED,
                f"io error: {exc}",
                data={"path": str(path)},
            ) from exc

    @staticmethod
    def _read_bytes(path: Path) -> bytes:
        if not path.exists():
            raise JobError(
                JobErrorCode.NOT_FOUND,
                f"file not found: {path}",
                data={"path": str(path)},
            )
        try:
            return path.read_bytes()
        except OSError as exc:
            raise JobError(
                JobErrorCode.IO_FAILED,
                f"io error: {exc}",
                data={"path": str(path)},
            ) from exc

    @staticmethod
    def _write_bytes(path: Path, data: bytes) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            replace_file(path, data)
        except OSError as exc:
            raise JobError(
                JobErrorCode.IO_FAILED,
                f"io error: {exc}",
                data={"path": str(path)},
            ) from exc
        _LOGGER.debug("Wrote %d bytes to %s", len(data), path)

    @staticmethod
    def _render_xml(data: bytes, payload: Any) -> str:
        if data.lstrip().startswith(b"<"):
            return data.decode("utf-8", errors="replace")
        return plistlib.dumps(payload, fmt=plistlib.FMT_XML).decode("utf-8")
