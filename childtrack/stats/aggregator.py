"""Reduce day-bucketed events into chart-ready aggregate results.

Every function here is pure: it takes already-fetched events and a window,
never reads the clock and never mutates its input. Bad event data is skipped
or defaulted; only caller contract violations raise.
"""

import logging
import math
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Optional

from childtrack.models.aggregate import AggregateResult, GrowthPoint, GrowthSeries, TrendPoint
from childtrack.models.details import (
    DIAPER_TYPES,
    EVENT_TYPES,
    SLEEP_QUALITIES,
    SleepDetails,
    TemperatureDetails,
)
from childtrack.models.event import Event

from .buckets import Window, empty_buckets
from .details import align_awareness, resolve_details

logger = logging.getLogger(__name__)


def percent_change(current: float, previous: float) -> int:
    """Relative change in percent, rounded half up.

    A zero baseline yields 100, whatever the current value. So does a change
    too large to represent.
    """
    if previous == 0:
        return 100
    change = (current - previous) / previous * 100
    if not math.isfinite(change):
        logger.debug("Non-finite change from %s to %s, reported as 100", previous, current)
        return 100
    return math.floor(change + 0.5)


def _require(events) -> Sequence[Event]:
    if events is None:
        raise TypeError("events must be a list of Event, not None")
    return events


def _of_type(events: Iterable[Event], event_type: str) -> list[tuple[Event, object]]:
    return [(e, resolve_details(e)) for e in events if e.event_type == event_type]


def _trend(buckets: dict[str, float], digits: int = 2) -> list[TrendPoint]:
    return [TrendPoint(bucket_key=key, value=round(value, digits)) for key, value in buckets.items()]


# ─── Sleep ────────────────────────────────────────────────────────────────────

def sleep_interval(event: Event, details: SleepDetails) -> tuple[Optional[datetime], Optional[datetime]]:
    """Start and end of a sleep session; (start, None) when the end is unknown."""
    start = align_awareness(details.start_time, event.timestamp) or event.timestamp
    end = align_awareness(details.end_time, start)
    if start is None or end is None or end <= start:
        return start, None
    return start, end


def _sleep_hours_by_day(events: Sequence[Event], window: Window) -> tuple[dict[str, float], int]:
    buckets = empty_buckets(window)
    sessions = 0
    for event, details in _of_type(events, "sleeping"):
        start, end = sleep_interval(event, details)
        if end is None:
            logger.debug("Sleep event %s has no usable end time, skipped", event.id)
            continue
        shares = window.apportion(start, end)
        if shares:
            sessions += 1
        for key, seconds in shares.items():
            buckets[key] += seconds / 3600
    return buckets, sessions


def sleep_aggregate(events: Sequence[Event], window: Window, compare: bool = True) -> AggregateResult:
    """Sleep hours per day, apportioned across midnight and clipped to the window."""
    events = _require(events)
    buckets, sessions = _sleep_hours_by_day(events, window)
    total = sum(buckets.values())
    previous_total = None
    change = None
    if compare:
        previous, _ = _sleep_hours_by_day(events, window.previous())
        previous_total = round(sum(previous.values()), 2)
        change = percent_change(round(total, 2), previous_total)
    return AggregateResult(
        metric="sleep",
        unit="hours",
        window_start=window.start,
        window_end=window.end,
        total=round(total, 2),
        count=sessions,
        average=round(total / window.length, 2),
        trend=_trend(buckets, digits=1),
        previous_total=previous_total,
        percent_change=change,
        breakdown=sleep_quality_distribution(
            [e for e in events if window.contains(e.timestamp)]
        ),
    )


def total_sleep_minutes(events: Sequence[Event], start: datetime, end: datetime) -> int:
    """Whole minutes of sleep inside ``[start, end]``, sessions clipped to it."""
    events = _require(events)
    if end < start:
        raise ValueError("end must not be before start")
    total = 0
    for event, details in _of_type(events, "sleeping"):
        s, e = sleep_interval(event, details)
        if e is None:
            continue
        s = align_awareness(s, start)
        e = align_awareness(e, start)
        clipped_start = max(s, start)
        clipped_end = min(e, end)
        if clipped_end > clipped_start:
            total += math.floor((clipped_end - clipped_start).total_seconds() / 60)
    return total


def sleep_quality_distribution(events: Sequence[Event]) -> dict[str, int]:
    counts = {quality: 0 for quality in SLEEP_QUALITIES}
    for _, details in _of_type(_require(events), "sleeping"):
        if details.quality in counts:
            counts[details.quality] += 1
    return counts


# ─── Feeding ──────────────────────────────────────────────────────────────────

def _feeding_by_day(events: Sequence[Event], window: Window) -> tuple[dict[str, float], dict[str, float], list[float]]:
    amounts = empty_buckets(window)
    counts = empty_buckets(window)
    recorded: list[float] = []
    for event, details in _of_type(events, "feeding"):
        key = window.day_key(event.timestamp)
        if key is None:
            continue
        counts[key] += 1
        if details.amount is not None:
            amounts[key] += details.amount
            recorded.append(details.amount)
    return amounts, counts, recorded


def feeding_aggregate(events: Sequence[Event], window: Window, compare: bool = True) -> AggregateResult:
    """Feeding amount per day; the average is per feeding with a recorded amount."""
    events = _require(events)
    amounts, counts, recorded = _feeding_by_day(events, window)
    total = sum(amounts.values())
    previous_total = None
    change = None
    if compare:
        previous, _, _ = _feeding_by_day(events, window.previous())
        previous_total = sum(previous.values())
        change = percent_change(total, previous_total)
    units = Counter(
        d.unit for e, d in _of_type(events, "feeding") if d.unit and window.contains(e.timestamp)
    )
    return AggregateResult(
        metric="feeding",
        unit=units.most_common(1)[0][0] if units else None,
        window_start=window.start,
        window_end=window.end,
        total=round(total, 2),
        count=int(sum(counts.values())),
        average=round(total / len(recorded), 2) if recorded else None,
        minimum=min(recorded) if recorded else None,
        maximum=max(recorded) if recorded else None,
        trend=_trend(amounts),
        previous_total=previous_total,
        percent_change=change,
        breakdown=_feeding_types(events, window),
    )


def _feeding_types(events: Sequence[Event], window: Window) -> dict[str, int]:
    counts: dict[str, int] = {}
    for event, details in _of_type(events, "feeding"):
        if details.type and window.contains(event.timestamp):
            counts[details.type] = counts.get(details.type, 0) + 1
    return counts


def feeding_count_aggregate(events: Sequence[Event], window: Window, compare: bool = True) -> AggregateResult:
    """Number of feedings per day."""
    events = _require(events)
    _, counts, _ = _feeding_by_day(events, window)
    total = sum(counts.values())
    previous_total = None
    change = None
    if compare:
        _, previous, _ = _feeding_by_day(events, window.previous())
        previous_total = sum(previous.values())
        change = percent_change(total, previous_total)
    return AggregateResult(
        metric="feeding_count",
        unit="feedings",
        window_start=window.start,
        window_end=window.end,
        total=total,
        count=int(total),
        average=round(total / window.length, 2),
        trend=_trend(counts),
        previous_total=previous_total,
        percent_change=change,
    )


# ─── Diapers ──────────────────────────────────────────────────────────────────

def diaper_breakdown(events: Sequence[Event]) -> dict[str, int]:
    """Counts per diaper type; types outside wet/dirty/mixed/dry are left out."""
    counts = {diaper_type: 0 for diaper_type in DIAPER_TYPES}
    for _, details in _of_type(_require(events), "diaper"):
        if details.type in counts:
            counts[details.type] += 1
    return counts


def diaper_aggregate(events: Sequence[Event], window: Window, compare: bool = True) -> AggregateResult:
    events = _require(events)
    in_window = [e for e in events if e.event_type == "diaper" and window.contains(e.timestamp)]
    buckets = empty_buckets(window)
    for event in in_window:
        buckets[window.day_key(event.timestamp)] += 1
    total = len(in_window)
    previous_total = None
    change = None
    if compare:
        previous_window = window.previous()
        previous_total = sum(
            1 for e in events if e.event_type == "diaper" and previous_window.contains(e.timestamp)
        )
        change = percent_change(total, previous_total)
    return AggregateResult(
        metric="diaper",
        unit="changes",
        window_start=window.start,
        window_end=window.end,
        total=total,
        count=total,
        average=round(total / window.length, 2),
        trend=_trend(buckets),
        previous_total=previous_total,
        percent_change=change,
        breakdown=diaper_breakdown(in_window),
    )


# ─── Temperature ──────────────────────────────────────────────────────────────

def _to_celsius(details: TemperatureDetails) -> float:
    if details.unit == "fahrenheit":
        return (details.temperature - 32) * 5 / 9
    return details.temperature


def temperature_aggregate(events: Sequence[Event], window: Window) -> AggregateResult:
    """Daily maximum temperature in °C; days without readings stay at zero."""
    events = _require(events)
    buckets = empty_buckets(window)
    readings: list[float] = []
    for event, details in _of_type(events, "temperature"):
        key = window.day_key(event.timestamp)
        if key is None or details.temperature is None:
            continue
        celsius = _to_celsius(details)
        readings.append(celsius)
        buckets[key] = max(buckets[key], celsius)
    return AggregateResult(
        metric="temperature",
        unit="celsius",
        window_start=window.start,
        window_end=window.end,
        total=round(sum(readings), 2),
        count=len(readings),
        average=round(sum(readings) / len(readings), 1) if readings else None,
        minimum=round(min(readings), 1) if readings else None,
        maximum=round(max(readings), 1) if readings else None,
        trend=_trend(buckets, digits=1),
    )


# ─── Growth ───────────────────────────────────────────────────────────────────

def growth_series(events: Sequence[Event], window: Window) -> GrowthSeries:
    """Chronological growth measurements inside the window."""
    points: list[GrowthPoint] = []
    for event, details in _of_type(_require(events), "growth"):
        key = window.day_key(event.timestamp)
        if key is None:
            continue
        if details.weight is None and details.height is None and details.head_circumference is None:
            continue
        points.append(
            GrowthPoint(
                bucket_key=key,
                timestamp=event.timestamp,
                weight=details.weight,
                weight_unit=details.weight_unit,
                height=details.height,
                height_unit=details.height_unit,
                head_circumference=details.head_circumference,
            )
        )
    points.sort(key=lambda p: (p.bucket_key, window.localize(p.timestamp)))

    weights = [p.weight for p in points if p.weight is not None]
    return GrowthSeries(
        window_start=window.start,
        window_end=window.end,
        points=points,
        latest=points[-1] if points else None,
        weight_gain=round(weights[-1] - weights[0], 3) if weights else None,
    )


# ─── Medication ───────────────────────────────────────────────────────────────

def medication_aggregate(events: Sequence[Event], window: Window) -> AggregateResult:
    """Medication administrations per day, broken down by medication name."""
    events = _require(events)
    buckets = empty_buckets(window)
    names: dict[str, int] = {}
    for event, details in _of_type(events, "medication"):
        key = window.day_key(details.administered_at or event.timestamp)
        if key is None:
            continue
        buckets[key] += 1
        if details.medication:
            names[details.medication] = names.get(details.medication, 0) + 1
    total = sum(buckets.values())
    return AggregateResult(
        metric="medication",
        unit="doses",
        window_start=window.start,
        window_end=window.end,
        total=total,
        count=int(total),
        average=round(total / window.length, 2),
        trend=_trend(buckets),
        breakdown=names,
    )


# ─── Counts ───────────────────────────────────────────────────────────────────

def event_counts(events: Sequence[Event]) -> dict[str, int]:
    """Number of events per known event type (zero for absent types)."""
    counts = {event_type: 0 for event_type in EVENT_TYPES}
    for event in _require(events):
        if event.event_type in counts:
            counts[event.event_type] += 1
    return counts
