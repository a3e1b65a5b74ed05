"""Upcoming fire-time projection for interval and calendar triggers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from launchdeck.jobs.models import (
    CalendarTrigger,
    JobConfig,
    ScheduleKind,
    schedule_kind,
)

# Brute-force scan ceiling: 400 days covers every day-of-month (including the
# 31st) and every weekday/month combination at least once.
PROJECTION_HORIZON_MINUTES = 400 * 24 * 60

WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

_ONE_MINUTE = timedelta(minutes=1)


def sunday_based_weekday(moment: datetime) -> int:
    """Return weekday number with 0 = Sunday.

    Args:
        moment: Calendar moment.

    Returns:
        Weekday in ``0..6``.
    """
    return moment.isoweekday() % 7


def trigger_matches(trigger: CalendarTrigger, moment: datetime) -> bool:
    """Check every present trigger field against one local calendar minute.

    Args:
        trigger: Calendar trigger.
        moment: Candidate minute in the caller's local zone.

    Returns:
        ``True`` when all present fields match.
    """
    return (
        (trigger.month is None or moment.month == trigger.month)
        and (trigger.day_of_month is None or moment.day == trigger.day_of_month)
        and (trigger.weekday is None or sunday_based_weekday(moment) == trigger.weekday)
        and (trigger.hour is None or moment.hour == trigger.hour)
        and (trigger.minute is None or moment.minute == trigger.minute)
    )


def project_calendar(
    trigger: CalendarTrigger, count: int, start: datetime
) -> list[datetime]:
    """Find the next ``count`` minutes at which a calendar trigger fires.

    The scan begins one minute after ``start`` truncated to the minute, so the
    current minute is never returned, and examines at most
    :data:`PROJECTION_HORIZON_MINUTES` candidates. Candidates advance in
    absolute time and each one is read on the wall clock of ``start``'s zone,
    so daylight-saving shifts move the absolute instant, not the local hour.
    A naive ``start`` is system local time and every candidate is resolved
    against the system zone's offset at that instant; pass a ``ZoneInfo``
    aware ``start`` for any other zone.

    Args:
        trigger: Calendar trigger.
        count: Maximum number of occurrences to return.
        start: Reference instant.

    Returns:
        Chronological zone-aware occurrences; empty when none fall within the
        horizon.
    """
    if count <= 0:
        return []
    zone = start.tzinfo
    candidate = start.replace(second=0, microsecond=0).astimezone(UTC) + _ONE_MINUTE
    results: list[datetime] = []
    for _ in range(PROJECTION_HORIZON_MINUTES):
        # astimezone(None) looks up the system offset for this very instant
        local = candidate.astimezone(zone)
        if trigger_matches(trigger, local):
            results.append(local)
            if len(results) >= count:
                break
        candidate += _ONE_MINUTE
    return results


def project_interval(
    interval_seconds: int, count: int, start: datetime
) -> list[datetime]:
    """Project the next ``count`` fires of a fixed interval trigger.

    Args:
        interval_seconds: Interval length in seconds.
        count: Number of occurrences to return.
        start: Reference instant.

    Returns:
        ``start + k * interval`` for ``k`` in ``1..count``.
    """
    step = timedelta(seconds=interval_seconds)
    return [start + step * k for k in range(1, count + 1)]


def project_schedule(config: JobConfig, count: int, start: datetime) -> list[datetime]:
    """Project upcoming fires for whatever trigger drives a config.

    Calendar configs with several triggers merge their projections.

    Args:
        config: Job configuration.
        count: Maximum number of occurrences to return.
        start: Reference instant.

    Returns:
        Chronological, de-duplicated occurrences.
    """
    kind = schedule_kind(config)
    if kind == ScheduleKind.INTERVAL and config.interval_seconds:
        return project_interval(config.interval_seconds, count, start)
    if kind == ScheduleKind.CALENDAR and config.calendar_triggers:
        merged = {
            moment
            for trigger in config.calendar_triggers
            for moment in project_calendar(trigger, count, start)
        }
        return sorted(merged)[:count]
    return []


def describe_calendar_trigger(trigger: CalendarTrigger) -> str:
    """Render a short human description of one calendar trigger.

    Args:
        trigger: Calendar trigger.

    Returns:
        Description such as ``"Every Monday at 09:00"``.
    """
    if trigger.weekday is not None:
        when = f"Every {WEEKDAY_NAMES[trigger.weekday]}"
    elif trigger.day_of_month is not None:
        when = f"Day {trigger.day_of_month} of each month"
    elif trigger.month is not None:
        when = f"Month {trigger.month}"
    else:
        when = "Every day"
    hour = trigger.hour if trigger.hour is not None else 0
    minute = trigger.minute if trigger.minute is not None else 0
    return f"{when} at {hour:02d}:{minute:02d}"


def describe_interval(interval_seconds: int) -> str:
    """Render an interval trigger description.

    Args:
        interval_seconds: Interval length in seconds.

    Returns:
        Description such as ``"Every 300 seconds"``.
    """
    if interval_seconds % 3600 == 0:
        hours = interval_seconds // 3600
        return "Every hour" if hours == 1 else f"Every {hours} hours"
    if interval_seconds % 60 == 0:
        minutes = interval_seconds // 60
        return "Every minute" if minutes == 1 else f"Every {minutes} minutes"
    return f"Every {interval_seconds} seconds"


def format_occurrence(moment: datetime) -> str:
    """Format one projected occurrence for compact display.

    Args:
        moment: Projected occurrence.

    Returns:
        ``"M/D (Weekday) HH:MM"`` string.
    """
    weekday = WEEKDAY_NAMES[sunday_based_weekday(moment)]
    return f"{moment.month}/{moment.day} ({weekday}) {moment:%H:%M}"
