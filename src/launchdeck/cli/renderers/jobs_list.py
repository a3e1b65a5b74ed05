"""Jobs list Rich renderer helpers."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from launchdeck.commands.types import CommandResult

_STATUS_STYLES = {
    "running": "bold green",
    "stopped": "dim",
    "unknown": "yellow",
}


def render_jobs_list(console: Console, result: CommandResult) -> bool:
    """Render `launchdeck list` output as a table.

    Args:
        console: Rich console.
        result: Command result payload.

    Returns:
        ``True`` when rendered.
    """
    data = result.data if isinstance(result.data, dict) else None
    raw_jobs = data.get("jobs") if data is not None else None
    if not isinstance(raw_jobs, list):
        return False
    if not raw_jobs:
        console.print(
            Panel(
                _empty_message(data),
                title="Jobs",
                border_style="yellow",
                expand=True,
            )
        )
        return True
    table = Table(
        title=f"Jobs ({len(raw_jobs)} of {data.get('total', len(raw_jobs))})",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Label", style="bold")
    table.add_column("Source", style="magenta")
    table.add_column("Status")
    table.add_column("PID", justify="right")
    table.add_column("Last Exit", justify="right")
    for row in raw_jobs:
        if not isinstance(row, dict):
            continue
        status = str(row.get("status", ""))
        table.add_row(
            Text(str(row.get("label", ""))),
            Text(str(row.get("source", ""))),
            Text(status, style=_STATUS_STYLES.get(status, "white")),
            _optional(row.get("pid")),
            _optional(row.get("last_exit_code")),
        )
    console.print(table)
    return True


def _optional(value: object) -> str:
    return "-" if value is None else str(value)


def _empty_message(data: dict[str, object]) -> str:
    search = str(data.get("search") or "")
    source = str(data.get("source") or "all")
    if not search and source == "all":
        return "No jobs found."
    return escape(f"No jobs match search '{search}' in source '{source}'.")
