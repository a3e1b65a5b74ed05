"""Low-level process and file primitives shared by the boundary layer."""

from launchdeck.kernel.atomic_write import replace_file
from launchdeck.kernel.run_cmd import CommandOutput, run_subprocess, spawn_detached

__all__ = [
    "CommandOutput",
    "replace_file",
    "run_subprocess",
    "spawn_detached",
]
