"""Unit tests for CLI result rendering."""

from __future__ import annotations

import io

import pytest
from rich.console import Console

from launchdeck.cli.rendering import CliRenderer
from launchdeck.commands.types import CommandResult


def _render(result: CommandResult) -> str:
    """Render one result to plain text.

    Args:
        result: Command result to render.

    Returns:
        Captured console output.
    """
    buffer = io.StringIO()
    console = Console(file=buffer, width=120, color_system=None)
    CliRenderer(console=console).render(result)
    return buffer.getvalue()


@pytest.mark.unit
def test_daemon_failure_text_is_printed_verbatim() -> None:
    """Daemon stderr with closing-tag lookalikes should not be parsed."""
    # Arrange - failure text shaped like Rich markup
    message = "launchctl kickstart failed: [/usr/bin] denied [bold]x"

    # Act - render the failed action
    output = _render(CommandResult.error(message, code="job_action_failed"))

    # Assert - panel title and untouched text
    assert "DAEMON FAILURE" in output
    assert message in output


@pytest.mark.unit
def test_error_title_keeps_result_code() -> None:
    """The bracketed code in error titles should survive markup parsing."""
    output = _render(
        CommandResult.error("Error: job 'x' not found.", code="job_not_found")
    )

    assert "Error [job_not_found]" in output


@pytest.mark.unit
def test_success_fallback_title_keeps_result_code() -> None:
    """Plain success panels should also show their code."""
    output = _render(CommandResult.ok("Opened file.", code="job_opened"))

    assert "launchdeck [job_opened]" in output


@pytest.mark.unit
def test_denied_panel_prints_reason_verbatim() -> None:
    """Denial messages should be escaped inside the alert panel."""
    output = _render(
        CommandResult.error(
            "Error: cannot edit '[/x]': managed by the system",
            code="job_permission_denied",
        )
    )

    assert "PERMISSION DENIED" in output
    assert "cannot edit '[/x]'" in output


@pytest.mark.unit
def test_refresh_warning_and_labels_are_not_markup() -> None:
    """Data-driven strings in success views should print literally."""
    # Arrange - action result with bracketed label and refresh error
    result = CommandResult.ok(
        "stop sent.",
        code="job_action_succeeded",
        data={
            "label": "com.example.[red]agent",
            "action": "stop",
            "refresh_error": "launchctl list failed: [/dev/null]",
        },
    )

    # Act - render confirmation
    output = _render(result)

    # Assert - both strings intact
    assert "com.example.[red]agent" in output
    assert "launchctl list failed: [/dev/null]" in output


@pytest.mark.unit
def test_jobs_table_prints_labels_literally() -> None:
    """Job labels should never be read as style tags."""
    result = CommandResult.ok(
        "1 of 1 jobs.",
        code="jobs_listed",
        data={
            "jobs": [
                {
                    "label": "[bold]odd.label",
                    "source": "user_agent",
                    "status": "running",
                    "pid": 7,
                    "last_exit_code": None,
                }
            ],
            "total": 1,
        },
    )

    output = _render(result)

    assert "[bold]odd.label" in output
    assert "running" in output
