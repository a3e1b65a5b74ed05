"""Typer CLI entrypoint for launchdeck."""

from __future__ import annotations

import sys
from collections.abc import Callable, Coroutine
from enum import StrEnum
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from launchdeck.cli.bootstrap import (
    bootstrap_config,
    build_jobs_command,
    configure_logging,
    load_config,
    run_command,
)
from launchdeck.cli.rendering import CliRenderer
from launchdeck.commands.handlers.jobs import (
    JobChanges,
    JobsCommand,
    parse_calendar_spec,
)
from launchdeck.commands.types import CommandResult
from launchdeck.config import LaunchdeckConfig
from launchdeck.jobs import (
    ALL_SOURCES,
    CalendarSchedule,
    IntervalSchedule,
    JobAction,
    JobBoundary,
    JobError,
    JobSource,
    NoSchedule,
    Schedule,
    SourceFilter,
)
from launchdeck.launchd import LaunchdBoundary

app = typer.Typer(help="launchdeck: manage launchd jobs from the terminal.")
_CONSOLE = Console()


class SourceChoice(StrEnum):
    """Source filter accepted by `launchdeck list`."""

    ALL = ALL_SOURCES
    USER_AGENT = JobSource.USER_AGENT.value
    SYSTEM_AGENT = JobSource.SYSTEM_AGENT.value
    SYSTEM_DAEMON = JobSource.SYSTEM_DAEMON.value


class LogStream(StrEnum):
    """Log file selector accepted by `launchdeck logs`."""

    STDOUT = "stdout"
    STDERR = "stderr"


ConfigFileOption = Annotated[
    Path | None,
    typer.Option(
        file_okay=True,
        dir_okay=False,
        help="Path to global launchdeck config YAML/JSON file.",
    ),
]
LabelArgument = Annotated[str, typer.Argument(help="Job label.")]
CountOption = Annotated[
    int | None,
    typer.Option(min=1, help="Number of upcoming runs to project."),
]
IntervalOption = Annotated[
    int | None,
    typer.Option(min=1, help="Run every N seconds."),
]
CalendarOption = Annotated[
    list[str] | None,
    typer.Option(
        help=(
            "Calendar trigger like 'hour=9,minute=0,weekday=1'; keys are "
            "minute, hour, day, weekday (0 = Sunday) and month. Repeatable."
        ),
    ),
]


def _build_boundary(config: LaunchdeckConfig) -> JobBoundary:
    """Build the launchd boundary for the effective config.

    Args:
        config: Effective global config.

    Returns:
        Job boundary.
    """
    return LaunchdBoundary(config)


def _open_handler(config_file: Path | None) -> tuple[LaunchdeckConfig, JobsCommand]:
    """Configure logging, load config and wire the job command handler.

    Args:
        config_file: Optional global config path.

    Returns:
        Effective config and handler.
    """
    configure_logging()
    config = load_config(config_file=config_file, console=_CONSOLE)
    return config, build_jobs_command(config=config, boundary=_build_boundary(config))


def _execute(
    config_file: Path | None,
    call: Callable[[JobsCommand], Coroutine[Any, Any, CommandResult]],
) -> NoReturn:
    """Run one handler call, render its result and exit with its status.

    Args:
        config_file: Optional global config path.
        call: Factory producing the handler coroutine.

    Raises:
        Exit: Always, with the command status code for shell integration.
    """
    _, handler = _open_handler(config_file)
    _finish(run_command(call(handler)))


def _finish(result: CommandResult) -> NoReturn:
    """Render a result and exit with its status.

    Args:
        result: Command result.

    Raises:
        Exit: Always, ``0`` on success and ``1`` on error.
    """
    CliRenderer(console=_CONSOLE).render(result)
    raise typer.Exit(code=result.exit_code)


def _schedule_from_options(
    *,
    interval: int | None,
    calendar: list[str] | None,
    no_schedule: bool,
) -> Schedule | None:
    """Collapse mutually exclusive schedule options into one schedule.

    Args:
        interval: ``--interval`` seconds.
        calendar: ``--calendar`` specs.
        no_schedule: ``--no-schedule`` flag.

    Returns:
        Requested schedule, or ``None`` when no schedule option was given.

    Raises:
        BadParameter: If more than one option is set or a spec is invalid.
    """
    chosen = sum((interval is not None, bool(calendar), no_schedule))
    if chosen > 1:
        raise typer.BadParameter(
            "--interval, --calendar and --no-schedule are mutually exclusive."
        )
    if interval is not None:
        return IntervalSchedule(seconds=interval)
    if calendar:
        try:
            triggers = tuple(parse_calendar_spec(spec) for spec in calendar)
        except JobError as exc:
            raise typer.BadParameter(str(exc), param_hint="--calendar") from exc
        return CalendarSchedule(triggers=triggers)
    if no_schedule:
        return NoSchedule()
    return None


def _parse_env(pairs: list[str] | None) -> dict[str, str] | None:
    """Parse repeated ``KEY=VALUE`` options.

    Args:
        pairs: Raw ``--env`` values.

    Returns:
        Environment mapping, or ``None`` when no option was given.

    Raises:
        BadParameter: If a pair lacks ``=`` or a key.
    """
    if pairs is None:
        return None
    environment: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(
                f"expected KEY=VALUE, got '{pair}'", param_hint="--env"
            )
        environment[key.strip()] = value
    return environment


def _changes(**fields: object) -> JobChanges:
    """Build form changes from options that were actually given."""
    return JobChanges(**{k: v for k, v in fields.items() if v is not None})


def _action_command(
    action: JobAction, label: str, config_file: Path | None
) -> NoReturn:
    _execute(config_file, lambda handler: handler.action(label, action))


@app.command("init")
def init_command(
    config_file: ConfigFileOption = None,
    overwrite_config: Annotated[
        bool,
        typer.Option(
            "--overwrite-config",
            help="Overwrite existing config file with default template.",
        ),
    ] = False,
) -> None:
    """Write the default launchdeck config file.

    Args:
        config_file: Optional global config file path override.
        overwrite_config: Whether to overwrite existing config payload.
    """
    configure_logging()
    effective_config_file, actions = bootstrap_config(
        config_file=config_file,
        overwrite_config=overwrite_config,
    )
    table = Table(title="launchdeck init", show_header=True, header_style="bold cyan")
    table.add_column("Resource", style="bold")
    table.add_column("Status", style="green")
    for resource, status in actions:
        table.add_row(resource, status)
    _CONSOLE.print(table)
    _CONSOLE.print(
        Panel(
            f"Config: {effective_config_file}",
            title="Initialized",
            border_style="green",
            expand=True,
        )
    )


@app.command("list")
def list_command(
    search: Annotated[
        str, typer.Option("--search", "-s", help="Case-insensitive label filter.")
    ] = "",
    source: Annotated[
        SourceChoice, typer.Option(help="Restrict to one job source.")
    ] = SourceChoice.ALL,
    config_file: ConfigFileOption = None,
) -> None:
    """List jobs with their runtime status."""
    source_filter: SourceFilter = (
        ALL_SOURCES if source == SourceChoice.ALL else JobSource(source.value)
    )
    _execute(
        config_file,
        lambda handler: handler.list_jobs(search=search, source=source_filter),
    )


@app.command("show")
def show_command(
    label: LabelArgument,
    count: CountOption = None,
    raw: Annotated[
        bool, typer.Option("--raw", help="Print the raw property-list XML.")
    ] = False,
    config_file: ConfigFileOption = None,
) -> None:
    """Show one job's configuration and upcoming runs."""
    if raw:
        _execute(config_file, lambda handler: handler.raw(label))
    _execute(config_file, lambda handler: handler.show(label, count=count))


@app.command("preview")
def preview_command(
    interval: IntervalOption = None,
    calendar: CalendarOption = None,
    count: CountOption = None,
    config_file: ConfigFileOption = None,
) -> None:
    """Preview upcoming runs for a schedule without saving anything."""
    schedule = _schedule_from_options(
        interval=interval, calendar=calendar, no_schedule=False
    )
    _, handler = _open_handler(config_file)
    _finish(handler.preview(schedule or NoSchedule(), count=count))


@app.command("start")
def start_command(label: LabelArgument, config_file: ConfigFileOption = None) -> None:
    """Load and start a user agent."""
    _action_command(JobAction.START, label, config_file)


@app.command("stop")
def stop_command(label: LabelArgument, config_file: ConfigFileOption = None) -> None:
    """Unload a running user agent."""
    _action_command(JobAction.STOP, label, config_file)


@app.command("restart")
def restart_command(
    label: LabelArgument, config_file: ConfigFileOption = None
) -> None:
    """Unload and reload a user agent."""
    _action_command(JobAction.RESTART, label, config_file)


@app.command("kickstart")
def kickstart_command(
    label: LabelArgument, config_file: ConfigFileOption = None
) -> None:
    """Force one immediate run of a job."""
    _action_command(JobAction.KICKSTART, label, config_file)


@app.command("enable")
def enable_command(label: LabelArgument, config_file: ConfigFileOption = None) -> None:
    """Clear a user agent's disabled override."""
    _action_command(JobAction.ENABLE, label, config_file)


@app.command("disable")
def disable_command(
    label: LabelArgument, config_file: ConfigFileOption = None
) -> None:
    """Mark a user agent disabled so launchd will not load it."""
    _action_command(JobAction.DISABLE, label, config_file)


@app.command("delete")
def delete_command(
    label: LabelArgument,
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt.")
    ] = False,
    config_file: ConfigFileOption = None,
) -> None:
    """Unload a user agent and remove its file."""
    if not yes:
        typer.confirm(f"Delete job '{label}' and its file?", abort=True)
    _action_command(JobAction.DELETE, label, config_file)


@app.command("reveal")
def reveal_command(label: LabelArgument, config_file: ConfigFileOption = None) -> None:
    """Reveal a job's file in Finder."""
    _action_command(JobAction.REVEAL, label, config_file)


@app.command("create")
def create_command(  # noqa: PLR0913
    label: LabelArgument,
    args: Annotated[
        str,
        typer.Option(
            "--args", help="Program and arguments; quote arguments with spaces."
        ),
    ],
    run_at_load: Annotated[
        bool, typer.Option("--run-at-load", help="Start when loaded.")
    ] = False,
    keep_alive: Annotated[
        bool, typer.Option("--keep-alive", help="Restart whenever it exits.")
    ] = False,
    interval: IntervalOption = None,
    calendar: CalendarOption = None,
    stdout_path: Annotated[
        str | None, typer.Option("--stdout", help="Standard output log path.")
    ] = None,
    stderr_path: Annotated[
        str | None, typer.Option("--stderr", help="Standard error log path.")
    ] = None,
    working_directory: Annotated[
        str | None, typer.Option("--workdir", help="Working directory.")
    ] = None,
    env: Annotated[
        list[str] | None, typer.Option(help="Environment KEY=VALUE. Repeatable.")
    ] = None,
    config_file: ConfigFileOption = None,
) -> None:
    """Create a new user agent."""
    changes = _changes(
        argument_line=args,
        run_at_load=run_at_load,
        keep_alive=keep_alive,
        schedule=_schedule_from_options(
            interval=interval, calendar=calendar, no_schedule=False
        ),
        stdout_path=stdout_path,
        stderr_path=stderr_path,
        working_directory=working_directory,
        environment=_parse_env(env),
    )
    _execute(config_file, lambda handler: handler.create(label, changes))


@app.command("edit")
def edit_command(  # noqa: PLR0913
    label: LabelArgument,
    args: Annotated[
        str | None,
        typer.Option(
            "--args", help="Program and arguments; quote arguments with spaces."
        ),
    ] = None,
    run_at_load: Annotated[
        bool | None,
        typer.Option("--run-at-load/--no-run-at-load", help="Start when loaded."),
    ] = None,
    keep_alive: Annotated[
        bool | None,
        typer.Option("--keep-alive/--no-keep-alive", help="Restart on exit."),
    ] = None,
    interval: IntervalOption = None,
    calendar: CalendarOption = None,
    no_schedule: Annotated[
        bool, typer.Option("--no-schedule", help="Remove the schedule.")
    ] = False,
    stdout_path: Annotated[
        str | None, typer.Option("--stdout", help="Standard output log path.")
    ] = None,
    stderr_path: Annotated[
        str | None, typer.Option("--stderr", help="Standard error log path.")
    ] = None,
    working_directory: Annotated[
        str | None, typer.Option("--workdir", help="Working directory.")
    ] = None,
    env: Annotated[
        list[str] | None,
        typer.Option(help="Replace environment with KEY=VALUE. Repeatable."),
    ] = None,
    external: Annotated[
        bool,
        typer.Option("--external", help="Open the file in the text editor instead."),
    ] = False,
    config_file: ConfigFileOption = None,
) -> None:
    """Edit an existing user agent; omitted options keep their value."""
    if external:
        _execute(config_file, lambda handler: handler.open_in_editor(label))
    changes = _changes(
        argument_line=args,
        run_at_load=run_at_load,
        keep_alive=keep_alive,
        schedule=_schedule_from_options(
            interval=interval, calendar=calendar, no_schedule=no_schedule
        ),
        stdout_path=stdout_path,
        stderr_path=stderr_path,
        working_directory=working_directory,
        environment=_parse_env(env),
    )
    _execute(config_file, lambda handler: handler.edit(label, changes))


@app.command("apply-raw")
def apply_raw_command(
    label: LabelArgument,
    source_file: Annotated[
        str, typer.Argument(help="File holding property-list XML, or '-' for stdin.")
    ],
    config_file: ConfigFileOption = None,
) -> None:
    """Replace a user agent's file with raw property-list XML."""
    if source_file == "-":
        text = sys.stdin.read()
    else:
        try:
            text = Path(source_file).read_text(encoding="utf-8")
        except OSError as exc:
            raise typer.BadParameter(
                f"cannot read {source_file}: {exc}", param_hint="SOURCE_FILE"
            ) from exc
    _execute(config_file, lambda handler: handler.apply_raw(label, text))


@app.command("logs")
def logs_command(
    label: LabelArgument,
    stream: Annotated[
        LogStream, typer.Option(help="Which log file to read.")
    ] = LogStream.STDOUT,
    lines: Annotated[
        int | None,
        typer.Option(min=1, help="Trailing lines to show; config default if unset."),
    ] = None,
    show_all: Annotated[
        bool, typer.Option("--all", help="Show the whole file.")
    ] = False,
    config_file: ConfigFileOption = None,
) -> None:
    """Show the tail of a job's stdout or stderr log."""
    config, handler = _open_handler(config_file)
    tail_lines = None if show_all else (lines or config.logs.tail_lines)
    _finish(
        run_command(handler.logs(label, stream=stream.value, tail_lines=tail_lines))
    )
