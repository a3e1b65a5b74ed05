"""Global launchdeck configuration loading."""

from launchdeck.config.global_config import (
    GlobalConfigError,
    IntegrationSettings,
    LaunchctlSettings,
    LaunchdeckConfig,
    LaunchdPathsSettings,
    LogSettings,
    PreviewSettings,
    default_config_file,
    load_global_config,
    write_default_config,
)

__all__ = [
    "GlobalConfigError",
    "IntegrationSettings",
    "LaunchctlSettings",
    "LaunchdPathsSettings",
    "LaunchdeckConfig",
    "LogSettings",
    "PreviewSettings",
    "default_config_file",
    "load_global_config",
    "write_default_config",
]
