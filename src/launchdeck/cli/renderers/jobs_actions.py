"""Job lifecycle and save confirmation Rich renderer helpers."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from launchdeck.commands.types import CommandResult


def render_job_action(console: Console, result: CommandResult) -> bool:
    """Render lifecycle action confirmation panel.

    Args:
        console: Rich console.
        result: Command result payload.

    Returns:
        ``True`` when rendered.
    """
    data = result.data if isinstance(result.data, dict) else None
    if data is None:
        return False
    label = str(data.get("label", "")).strip()
    action = str(data.get("action", "")).strip()
    if not label or not action:
        return False
    console.print(
        Panel(
            (
                f"Job: [bold]{escape(label)}[/bold]\n"
                f"Action: [bold]{escape(action)}[/bold]"
            ),
            title="Job Updated",
            border_style="green",
            expand=True,
        )
    )
    _render_refresh_warning(console, data)
    return True


def render_job_saved(console: Console, result: CommandResult) -> bool:
    """Render save confirmation panel.

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
            (
                f"Job: [bold]{escape(str(data.get('label', '')))}[/bold]\n"
                f"File: {escape(str(data.get('config_path', '')))}"
            ),
            title="Saved",
            border_style="green",
            expand=True,
        )
    )
    _render_refresh_warning(console, data)
    return True


def _render_refresh_warning(console: Console, data: dict[str, object]) -> None:
    refresh_error = data.get("refresh_error")
    if refresh_error:
        console.print(
            f"[yellow]Job list refresh failed: {escape(str(refresh_error))}[/yellow]"
        )
