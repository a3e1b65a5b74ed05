"""Job log Rich renderer helpers."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from launchdeck.commands.types import CommandResult


def render_log(console: Console, result: CommandResult) -> bool:
    """Render a log tail as plain text inside a panel.

    Log text is never interpreted as Rich markup.

    Args:
        console: Rich console.
        result: Command result payload.

    Returns:
        ``True`` when rendered.
    """
    data = result.data if isinstance(result.data, dict) else None
    if data is None:
        return False
    modified_at = data.get("modified_at")
    subtitle = f"modified {modified_at}" if modified_at else None
    content = str(data.get("content") or "")
    console.print(
        Panel(
            Text(content) if content else Text("Log is empty.", style="yellow"),
            title=escape(f"{data.get('label', '')} {data.get('stream', '')}"),
            subtitle=subtitle,
            border_style="cyan",
            expand=True,
        )
    )
    return True
