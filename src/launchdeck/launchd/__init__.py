"""launchd boundary: launchctl control, plist storage and log tailing."""

from launchdeck.launchd.boundary import LaunchdBoundary
from launchdeck.launchd.launchctl import Launchctl, LoadedService, parse_list_output
from launchdeck.launchd.logs import read_log_tail, sanitize_log_text
from launchdeck.launchd.plist_store import (
    PlistStore,
    config_from_payload,
    payload_from_config,
)

__all__ = [
    "Launchctl",
    "LaunchdBoundary",
    "LoadedService",
    "PlistStore",
    "config_from_payload",
    "parse_list_output",
    "payload_from_config",
    "read_log_tail",
    "sanitize_log_text",
]
