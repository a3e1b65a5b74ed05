"""Job detail and schedule preview Rich renderer helpers."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from launchdeck.commands.types import CommandResult

_CONFIG_ROWS = (
    ("Program", "program"),
    ("Arguments", "argument_vector"),
    ("Run At Load", "run_at_load"),
    ("Keep Alive", "keep_alive"),
    ("Working Dir", "working_directory"),
    ("Stdout", "stdout_path"),
    ("Stderr", "stderr_path"),
    ("Disabled", "disabled"),
)


def render_job_detail(console: Console, result: CommandResult) -> bool:
    """Render `launchdeck show` output as panel, config table and runs.

    Args:
        console: Rich console.
        result: Command result payload.

    Returns:
        ``True`` when rendered.
    """
    data = result.data if isinstance(result.data, dict) else None
    if data is None:
        return False
    job = data.get("job")
    config = data.get("config")
    if not isinstance(job, dict) or not isinstance(config, dict):
        return False
    pid = job.get("pid")
    exit_code = job.get("last_exit_code")
    console.print(
        Panel(
            (
                f"Source: [bold]{escape(str(job.get('source', '')))}[/bold]\n"
                f"Status: [bold]{escape(str(job.get('status', '')))}[/bold]"
                f"{f' (pid {pid})' if pid is not None else ''}\n"
                f"Last Exit: [bold]{'-' if exit_code is None else exit_code}[/bold]\n"
                f"File: {escape(str(job.get('config_path', '')))}"
            ),
            title=escape(str(job.get("label", ""))),
            border_style="cyan",
            expand=True,
        )
    )
    table = Table(title="Configuration", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for title, key in _CONFIG_ROWS:
        table.add_row(title, Text(_format_value(config.get(key))))
    table.add_row("Schedule", Text(str(data.get("schedule", ""))))
    environment = config.get("environment")
    if isinstance(environment, dict):
        for name, value in sorted(environment.items()):
            table.add_row(Text(f"Env {name}"), Text(str(value)))
    console.print(table)
    _render_upcoming(console, data.get("upcoming"))
    return True


def render_schedule_preview(console: Console, result: CommandResult) -> bool:
    """Render `launchdeck preview` output.

    Args:
        console: Rich console.
        result: Command result payload.

    Returns:
        ``True`` when rendered.
    """
    data = result.data if isinstance(result.data, dict) else None
    if data is None:
        return False
    console.print(
        Panel(
            Text(str(data.get("schedule", ""))),
            title="Schedule",
            border_style="green",
            expand=True,
        )
    )
    _render_upcoming(console, data.get("upcoming"))
    return True


def _render_upcoming(console: Console, raw_upcoming: object) -> None:
    if not isinstance(raw_upcoming, list):
        return
    if not raw_upcoming:
        console.print("[yellow]No upcoming runs found.[/yellow]")
        return
    table = Table(title="Upcoming Runs", show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right")
    table.add_column("When", style="green")
    for index, row in enumerate(raw_upcoming, start=1):
        if isinstance(row, dict):
            table.add_row(str(index), Text(str(row.get("display", ""))))
    console.print(table)


def _format_value(value: object) -> str:
    if value is None:
        return "-"
    if isinstance(value, list):
        return " ".join(str(item) for item in value)
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value)
