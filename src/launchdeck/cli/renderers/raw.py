"""Raw job file Rich renderer helpers."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax

from launchdeck.commands.types import CommandResult


def render_raw_config(console: Console, result: CommandResult) -> bool:
    """Render raw property-list XML with syntax highlighting.

    Args:
        console: Rich console.
        result: Command result payload.

    Returns:
        ``True`` when rendered.
    """
    data = result.data if isinstance(result.data, dict) else {}
    console.print(
        Panel(
            Syntax(result.message, "xml", word_wrap=True),
            title=escape(str(data.get("config_path", ""))),
            border_style="cyan",
            expand=True,
        )
    )
    return True
