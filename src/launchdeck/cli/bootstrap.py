"""CLI bootstrap/runtime lifecycle helpers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

from launchdeck.commands.handlers.jobs import JobsCommand
from launchdeck.commands.types import CommandResult
from launchdeck.config import (
    GlobalConfigError,
    LaunchdeckConfig,
    default_config_file,
    load_global_config,
    write_default_config,
)
from launchdeck.jobs import JobBoundary, JobController

_LOGGING_CONFIGURED = False


def configure_logging(*, verbose: bool = False) -> None:
    """Configure Rich-backed logging once for CLI commands.

    Args:
        verbose: Emit debug records when ``True``.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if _LOGGING_CONFIGURED:
        return
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(show_path=False, rich_tracebacks=True)],
    )
    _LOGGING_CONFIGURED = True


def bootstrap_config(
    *,
    config_file: Path | None = None,
    overwrite_config: bool = False,
) -> tuple[Path, tuple[tuple[str, str], ...]]:
    """Write the default config template when missing.

    Args:
        config_file: Optional config path override.
        overwrite_config: Whether to overwrite existing config payload.

    Returns:
        Effective config path and action rows.
    """
    effective_config_file = config_file or default_config_file()
    status = write_default_config(effective_config_file, overwrite=overwrite_config)
    return effective_config_file, (("config_file", status),)


def load_config(*, config_file: Path | None, console: Console) -> LaunchdeckConfig:
    """Load global config, falling back to defaults when it is invalid.

    Args:
        config_file: Optional config file path.
        console: Rich console for config warnings.

    Returns:
        Effective global config.
    """
    effective_config_file = config_file or default_config_file()
    try:
        return load_global_config(effective_config_file)
    except GlobalConfigError as exc:
        console.print(
            f"[yellow]Global config at {effective_config_file} is invalid; "
            "falling back to defaults.[/yellow]"
        )
        console.print(f"[yellow]Reason: {exc}[/yellow]")
        return LaunchdeckConfig()


def build_jobs_command(
    *, config: LaunchdeckConfig, boundary: JobBoundary
) -> JobsCommand:
    """Wire the job command handler over a boundary.

    Args:
        config: Effective global config.
        boundary: Daemon/filesystem boundary.

    Returns:
        Job command handler.
    """
    return JobsCommand(
        JobController(boundary),
        preview_count=config.preview.count,
        clock=config.preview.now,
    )


def run_command(call: Coroutine[Any, Any, CommandResult]) -> CommandResult:
    """Drive one handler coroutine on a fresh event loop.

    Args:
        call: Handler coroutine.

    Returns:
        Command result.
    """
    return asyncio.run(call)
