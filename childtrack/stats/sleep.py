"""Sleep scoring against age-based recommendations."""

import math
from collections.abc import Sequence
from datetime import datetime, timezone, tzinfo

from childtrack.models.event import Event

from .details import resolve_details

_QUALITY_POINTS = {"poor": 10, "fair": 20, "good": 30, "excellent": 40}

# (upper bound in months, recommended hours per day)
_RECOMMENDED_HOURS = (
    (4, 14.0),
    (12, 13.0),
    (24, 12.0),
    (36, 11.0),
    (60, 10.5),
    (144, 9.5),
)


def format_sleep_duration(minutes: float) -> str:
    """'1 hr 30 min', '45 min' or '2 hr'."""
    minutes = max(0.0, minutes)
    hours = int(minutes // 60)
    rest = round(minutes % 60)
    if rest == 60:
        hours, rest = hours + 1, 0
    if hours == 0:
        return f"{rest} min"
    if rest == 0:
        return f"{hours} hr"
    return f"{hours} hr {rest} min"


def is_nap(start: datetime, duration_minutes: float) -> bool:
    """Shorter than three hours, or starting between 9am and 7pm."""
    if duration_minutes < 180:
        return True
    return 9 <= start.hour < 19


def recommended_sleep_hours(age_months: int) -> float:
    for upper, hours in _RECOMMENDED_HOURS:
        if age_months < upper:
            return hours
    return 8.5


def sleep_score(events: Sequence[Event], age_months: int, tz: tzinfo = timezone.utc) -> int:
    """Score 0-100 from duration (40), quality (40) and day-to-day consistency (20).

    Only sleeping events count; durations are attributed to the day the
    session started.
    """
    sessions = []
    for event in events:
        if event.event_type != "sleeping":
            continue
        details = resolve_details(event)
        start = details.start_time or event.timestamp
        local = start.astimezone(tz) if start.tzinfo else start
        sessions.append((local.date(), details.duration_minutes, details.quality))
    if not sessions:
        return 0

    minutes_by_day: dict = {}
    for day, minutes, _ in sessions:
        minutes_by_day[day] = minutes_by_day.get(day, 0) + minutes
    daily = list(minutes_by_day.values())
    mean_minutes = sum(daily) / len(daily)

    duration_diff = abs(mean_minutes / 60 - recommended_sleep_hours(age_months))
    duration_points = max(0.0, 40 - ((duration_diff - 1) * 10 if duration_diff > 1 else 0))

    quality_points = sum(_QUALITY_POINTS.get(q, _QUALITY_POINTS["good"]) for _, _, q in sessions) / len(sessions)

    std_dev = math.sqrt(sum((m - mean_minutes) ** 2 for m in daily) / len(daily))
    consistency_points = max(0.0, 20 - ((std_dev - 30) / 15 if std_dev > 30 else 0))

    total = math.floor(duration_points + quality_points + consistency_points + 0.5)
    return min(100, max(0, total))


def sleep_score_label(score: int) -> str:
    if score >= 90:
        return "Excellent"
    if score >= 75:
        return "Very Good"
    if score >= 60:
        return "Good"
    if score >= 45:
        return "Fair"
    if score >= 30:
        return "Poor"
    return "Very Poor"
