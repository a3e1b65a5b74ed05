"""CLI result rendering policies and Rich views."""

from __future__ import annotations

from collections.abc import Callable

from rich.console import Console
from rich.json import JSON
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from launchdeck.cli.renderers.job_detail import (
    render_job_detail,
    render_schedule_preview,
)
from launchdeck.cli.renderers.jobs_actions import render_job_action, render_job_saved
from launchdeck.cli.renderers.jobs_list import render_jobs_list
from launchdeck.cli.renderers.logs import render_log
from launchdeck.cli.renderers.raw import render_raw_config
from launchdeck.cli.result_codes import (
    DAEMON_FAILURE_CODES,
    DENIED_CODES,
    HIDE_DATA_CODES,
)
from launchdeck.commands.types import CommandResult, CommandStatus


def _code_tag(code: str) -> str:
    """Return ``[code]`` escaped for use inside Rich markup."""
    return escape(f"[{code}]")


class CliRenderer:
    """Render command results with Rich structures and code-based policies."""

    def __init__(self, *, console: Console) -> None:
        """Store console used for rendering.

        Args:
            console: Rich console used for output rendering.
        """
        self._console = console

    def render(self, result: CommandResult) -> None:
        """Render one command result.

        Args:
            result: Structured command result.
        """
        if result.status == CommandStatus.OK:
            if self._render_rich_success(result):
                return
            self._console.print(
                Panel(
                    Markdown(result.message),
                    title=f"launchdeck {_code_tag(result.code)}",
                    border_style="green",
                    expand=True,
                )
            )
            if result.data and result.code not in HIDE_DATA_CODES:
                self._render_data(result)
            return
        if self._render_denied(result):
            return
        self._console.print(
            Panel(
                Text(result.message),
                title=(
                    "DAEMON FAILURE"
                    if result.code in DAEMON_FAILURE_CODES
                    else f"Error {_code_tag(result.code)}"
                ),
                border_style="bold red",
                expand=True,
            )
        )
        if result.data:
            self._render_data(result)

    def _render_denied(self, result: CommandResult) -> bool:
        """Render permission denials distinctly from daemon failures.

        Args:
            result: Command result payload.

        Returns:
            ``True`` when the denial panel was rendered.
        """
        if result.code not in DENIED_CODES:
            return False
        self._console.print(
            Panel(
                (
                    "[bold black on yellow] PERMISSION DENIED "
                    "[/bold black on yellow]\n"
                    f"{escape(result.message)}"
                ),
                title="Action Not Permitted",
                border_style="bold yellow",
                expand=True,
            )
        )
        return True

    def _render_data(self, result: CommandResult) -> None:
        self._console.print(
            Panel(
                JSON.from_data(result.data, default=str),
                title="Data",
                border_style="cyan",
                expand=True,
            )
        )

    def _render_rich_success(self, result: CommandResult) -> bool:
        """Render specialized success view for selected command result codes.

        Args:
            result: Command result payload.

        Returns:
            ``True`` when a specialized render path handled the result.
        """
        renderers: dict[str, Callable[[Console, CommandResult], bool]] = {
            "jobs_listed": render_jobs_list,
            "jobs_empty": render_jobs_list,
            "job_shown": render_job_detail,
            "job_raw_shown": render_raw_config,
            "schedule_previewed": render_schedule_preview,
            "job_action_succeeded": render_job_action,
            "job_saved": render_job_saved,
            "log_read": render_log,
            "log_empty": render_log,
        }
        renderer = renderers.get(result.code)
        if renderer is None:
            return False
        return renderer(self._console, result)
