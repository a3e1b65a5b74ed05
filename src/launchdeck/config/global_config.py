"""Global launchdeck config models and loading helpers."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class LaunchdPathsSettings(BaseModel):
    """Directories scanned for job configuration files."""

    model_config = ConfigDict(extra="forbid")

    user_agents_dir: str = "~/Library/LaunchAgents"
    system_agents_dir: str = "/Library/LaunchAgents"
    system_daemons_dir: str = "/Library/LaunchDaemons"

    def resolved_user_agents_dir(self) -> Path:
        """Return the user agents directory with ``~`` expanded.

        Returns:
            Absolute user agents path.
        """
        return Path(self.user_agents_dir).expanduser()

    def resolved_system_agents_dir(self) -> Path:
        """Return the system agents directory with ``~`` expanded.

        Returns:
            System agents path.
        """
        return Path(self.system_agents_dir).expanduser()

    def resolved_system_daemons_dir(self) -> Path:
        """Return the system daemons directory with ``~`` expanded.

        Returns:
            System daemons path.
        """
        return Path(self.system_daemons_dir).expanduser()


class LaunchctlSettings(BaseModel):
    """How the daemon control binary is invoked."""

    model_config = ConfigDict(extra="forbid")

    binary: str = "launchctl"
    timeout_seconds: float = Field(default=30.0, gt=0, le=600)
    domain: str | None = None


class PreviewSettings(BaseModel):
    """Upcoming-run preview defaults."""

    model_config = ConfigDict(extra="forbid")

    count: int = Field(default=5, ge=1, le=100)
    timezone: str | None = None

    @field_validator("timezone")
    @classmethod
    def _validate_timezone(cls, value: str | None) -> str | None:
        if not value:
            return None
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"preview timezone '{value}' is invalid.") from exc
        return value

    def now(self) -> datetime:
        """Return the projection reference instant.

        Returns:
            Current time in the configured IANA zone, or naive system local
            time when no zone is configured.
        """
        if self.timezone is None:
            return datetime.now()
        return datetime.now(ZoneInfo(self.timezone))


class LogSettings(BaseModel):
    """Log viewer defaults."""

    model_config = ConfigDict(extra="forbid")

    tail_lines: int = Field(default=200, ge=1, le=100_000)
    sanitize: bool = True


class IntegrationSettings(BaseModel):
    """Desktop integration commands."""

    model_config = ConfigDict(extra="forbid")

    open_binary: str = "open"


class LaunchdeckConfig(BaseModel):
    """Root global launchdeck configuration model."""

    model_config = ConfigDict(extra="forbid")

    paths: LaunchdPathsSettings = LaunchdPathsSettings()
    launchctl: LaunchctlSettings = LaunchctlSettings()
    preview: PreviewSettings = PreviewSettings()
    logs: LogSettings = LogSettings()
    integrations: IntegrationSettings = IntegrationSettings()


class GlobalConfigError(RuntimeError):
    """Raised when global config cannot be decoded or validated."""


def default_config_file() -> Path:
    """Return default global config path, preferring an existing JSON file.

    Returns:
        Global config file path.
    """
    root = Path.home() / ".launchdeck"
    yaml_path = root / "config.yaml"
    json_path = root / "config.json"
    if not yaml_path.exists() and json_path.exists():
        return json_path
    return yaml_path


def _decode_config_payload(path: Path) -> dict[str, object]:
    """Decode global config payload from JSON or YAML.

    Args:
        path: Config file path.

    Returns:
        Parsed mapping payload.

    Raises:
        GlobalConfigError: If decode fails or payload is not an object.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise GlobalConfigError(f"Unreadable global config: {exc}") from exc
    if path.suffix.lower() == ".json":
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise GlobalConfigError(f"Invalid global config JSON: {exc}") from exc
    else:
        try:
            payload = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise GlobalConfigError(f"Invalid global config YAML: {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise GlobalConfigError("Invalid global config payload: root must be an object")
    return payload


def load_global_config(path: Path) -> LaunchdeckConfig:
    """Load global launchdeck config from disk, defaulting when missing.

    Args:
        path: Config file path.

    Returns:
        Parsed config payload, or defaults when file does not exist.

    Raises:
        GlobalConfigError: If payload decode or validation fails.
    """
    if not path.exists():
        return LaunchdeckConfig()
    payload = _decode_config_payload(path)
    try:
        return LaunchdeckConfig.model_validate(payload)
    except ValidationError as exc:
        raise GlobalConfigError(f"Invalid global config payload: {exc}") from exc


def write_default_config(path: Path, *, overwrite: bool = False) -> str:
    """Write the default config template.

    Args:
        path: Destination config path.
        overwrite: Whether to replace an existing file.

    Returns:
        ``"created"``, ``"overwritten"`` or ``"exists"``.
    """
    existed = path.exists()
    if existed and not overwrite:
        return "exists"
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = LaunchdeckConfig().model_dump(mode="json")
    if path.suffix.lower() == ".json":
        text = json.dumps(payload, indent=2) + "\n"
    else:
        text = yaml.safe_dump(payload, sort_keys=False)
    path.write_text(text, encoding="utf-8")
    return "overwritten" if existed else "created"
